import numpy as np

from orbitkernel.errors import KernelError
from orbitkernel.sampler import state_at
from orbitkernel.serializer import steps_to_skip, downsample, body_states_km


class KernelValidator:
    """
    Reads a written SPK back through the engine and compares it with the
    states it was written from, at the retained (knot) epochs.
    """

    def __init__(self, session, kernel_path, pos_tol=1e-6, vel_tol=1e-9):
        self.session = session
        self.kernel_path = str(kernel_path)
        self.pos_tol = pos_tol  # km
        self.vel_tol = vel_tol  # km/s
        self.errors = []
        self.warnings = []
        self.max_pos_err = 0.0
        self.max_vel_err = 0.0

    def expected_states(self, bodies, states, epochs, observer, fraction_to_save):
        """Per-body (n, 6) km tables the serializer should have written, keyed by NAIF ID."""
        stride = steps_to_skip(fraction_to_save)
        ets, kept = downsample(
            np.asarray(epochs, dtype=np.float64),
            np.asarray(states, dtype=np.float64),
            stride,
        )
        bodies = [int(b) for b in bodies]

        cb = None
        if observer in bodies:
            cb = body_states_km(kept, bodies.index(observer))

        expected = {}
        for idx, body in enumerate(bodies):
            if body == observer:
                continue
            table = body_states_km(kept, idx)
            if cb is not None:
                table -= cb
            expected[body] = table
        return ets, expected

    def validate(self, bodies, states, epochs, observer, fraction_to_save):
        ets, expected = self.expected_states(bodies, states, epochs, observer, fraction_to_save)

        self.session.load(self.kernel_path)
        try:
            for body, table in expected.items():
                for et, want in zip(ets, table):
                    try:
                        got = state_at(self.session, body, observer, et)
                    except KernelError as e:
                        self.errors.append(str(e))
                        break

                    pos_err = np.linalg.norm(got[:3] - want[:3])
                    vel_err = np.linalg.norm(got[3:] - want[3:])
                    self.max_pos_err = max(self.max_pos_err, pos_err)
                    self.max_vel_err = max(self.max_vel_err, vel_err)

                    if pos_err > self.pos_tol or vel_err > self.vel_tol:
                        self.errors.append(
                            f"Body {body} at {et}: position error {pos_err:.3e} km, velocity error {vel_err:.3e} km/s"
                        )
        finally:
            self.session.unload(self.kernel_path)

        if not expected:
            self.warnings.append("Kernel holds no segments (only the observer was supplied).")

        return not self.errors

    def report(self):
        print(f"--- Kernel Validation: {self.kernel_path} ---")
        print(f"Max position error: {self.max_pos_err:.3e} km")
        print(f"Max velocity error: {self.max_vel_err:.3e} km/s")
        for w in self.warnings:
            print(f"Warning: {w}")
        for e in self.errors:
            print(f"Error: {e}")
        print("PASS" if not self.errors else "FAIL")
