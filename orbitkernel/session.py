import os
import numpy as np
import spiceypy as spice
from spiceypy.utils.exceptions import SpiceyError

from orbitkernel.config import (
    ERROR_ACTION,
    ERROR_REPORT,
    DIAGNOSTIC_BUFFER,
    POLICY_BUFFER,
)
from orbitkernel.errors import EngineError, bound_diagnostic


def set_error_handling(action=ERROR_ACTION, report=ERROR_REPORT):
    """Set the engine's process-wide error action and report list."""
    spice.errprt("SET", POLICY_BUFFER, report)
    spice.erract("SET", POLICY_BUFFER, action)


class EngineSession:
    """
    Single-owner handle on the SPICE engine.

    The engine's error policy is process-wide, so a session must not be shared
    between threads. Every call into spiceypy goes through this class.

    Args:
        kernels: Optional list of kernel paths to furnish on creation.
        action: Engine error action (default 'RETURN').
        report: Engine error report list (default 'SHORT').
    """

    def __init__(self, kernels=None, action=ERROR_ACTION, report=ERROR_REPORT):
        self.action = action
        self.report = report
        self.loaded = []
        self.set_error_policy()

        for path in kernels or []:
            self.load(path)

    def __copy__(self):
        raise TypeError("EngineSession is single-owner and cannot be copied")

    def __deepcopy__(self, memo):
        raise TypeError("EngineSession is single-owner and cannot be copied")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    # --- Error plumbing ---

    def set_error_policy(self):
        set_error_handling(self.action, self.report)

    def failed(self):
        return bool(spice.failed())

    def short_message(self):
        """Fetch and clear the engine's pending short message (bounded buffer)."""
        msg = spice.getmsg("SHORT", DIAGNOSTIC_BUFFER)
        spice.reset()
        return bound_diagnostic(msg)

    @staticmethod
    def diagnostic(err):
        short = getattr(err, "short", "") or getattr(err, "message", "") or str(err)
        return bound_diagnostic(short)

    def _call(self, func, *args):
        try:
            result = func(*args)
        except SpiceyError as err:
            raise EngineError(self.diagnostic(err)) from err

        if self.failed():
            raise EngineError(self.short_message())
        return result

    # --- Kernel pool ---

    def load(self, path):
        path = str(path)
        if not os.path.exists(path):
            raise FileNotFoundError(f"Kernel not found: {path}")
        self._call(spice.furnsh, path)
        self.loaded.append(path)
        print(f"[SPICE] Loaded {path}")

    def unload(self, path):
        path = str(path)
        self._call(spice.unload, path)
        if path in self.loaded:
            self.loaded.remove(path)

    def close(self):
        """Unload every kernel this session furnished."""
        for path in list(reversed(self.loaded)):
            self.unload(path)

    # --- Lookups ---

    def body_code(self, name):
        return int(self._call(spice.bods2c, str(name)))

    def body_constant(self, body, item, dim):
        n, values = self._call(spice.bodvcd, int(body), item, dim)
        return np.asarray(values, dtype=np.float64)[:n]

    def state(self, target, observer, epoch, frame, abcorr):
        state, _ = self._call(spice.spkez, int(target), float(epoch), frame, abcorr, int(observer))
        return np.asarray(state, dtype=np.float64)

    # --- SPK writing ---

    def open_kernel(self, path, internal_name, comment_chars):
        return self._call(spice.spkopn, str(path), internal_name, comment_chars)

    def write_segment(self, handle, target, observer, frame, t0, tfinal, label, degree, states, epochs):
        """
        Append one Type 9 (Lagrange, unequal steps) segment.

        Args:
            states: (n, 6) contiguous array in km, km/s.
            epochs: (n,) array of ephemeris seconds.
        """
        states = np.ascontiguousarray(states, dtype=np.float64).reshape(-1, 6)
        epochs = np.ascontiguousarray(epochs, dtype=np.float64)
        if len(states) != len(epochs):
            raise ValueError(f"{len(states)} states supplied for {len(epochs)} epochs")

        self._call(
            spice.spkw09,
            handle,
            int(target),
            int(observer),
            frame,
            float(t0),
            float(tfinal),
            label,
            int(degree),
            len(epochs),
            states,
            epochs,
        )

    def close_kernel(self, handle):
        self._call(spice.spkcls, handle)
