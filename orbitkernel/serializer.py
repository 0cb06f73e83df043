import os
import sys
import math
import numpy as np

from orbitkernel.config import (
    REFERENCE_FRAME,
    INTERPOLATION_DEGREE,
    INTERNAL_FILE_NAME,
    COMMENT_AREA_CHARS,
    SEGMENT_LABEL,
    M_PER_KM,
)
from orbitkernel.errors import (
    EngineError,
    InvalidFractionError,
    InvalidInputError,
    KernelOpenError,
    SegmentWriteError,
    KernelCloseError,
)


def steps_to_skip(fraction_to_save):
    """
    Down-sampling stride for a retention fraction in (0, 1].

    The fraction is a 32-bit float and the stride is truncated, not rounded:
    1.0 -> 1, 0.5 -> 2, 0.3 -> 3, 0.1 -> 10. Fractions so small that the
    float32 quotient overflows (e.g. 1e-45) saturate to sys.maxsize.
    """
    fraction = float(fraction_to_save)
    if math.isnan(fraction) or not (0.0 < fraction <= 1.0) or np.float32(fraction) == 0.0:
        raise InvalidFractionError(fraction_to_save)

    with np.errstate(over="ignore"):
        quotient = np.float32(1.0) / np.float32(fraction)
    if not np.isfinite(quotient):
        # Saturate: only the first sample is kept
        return sys.maxsize

    return max(int(quotient), 1)


def downsample(epochs, states, stride):
    """Keep every stride-th epoch/state from index 0. The last epoch is kept only if it falls on the stride."""
    return epochs[::stride], states[::stride]


def body_states_km(states, idx):
    """
    Extract one body's (n, 6) state table from a StateSeries.

    Input states are meter-scale phase-space data; output is km and km/s.
    """
    return np.ascontiguousarray(states[:, idx * 6:idx * 6 + 6]) / M_PER_KM


def segment_label(target, observer):
    return SEGMENT_LABEL.format(target=target, observer=observer)


def _check_inputs(bodies, states, epochs):
    if len(bodies) == 0:
        raise InvalidInputError("No bodies supplied")
    if len(epochs) == 0:
        raise InvalidInputError("No epochs supplied")
    if len(states) != len(epochs):
        raise InvalidInputError(f"{len(states)} states supplied for {len(epochs)} epochs")

    width = 6 * len(bodies)
    for i, s in enumerate(states):
        if not hasattr(s, "__len__"):
            raise InvalidInputError(f"State {i} is not a sequence of components")
        if len(s) != width:
            raise InvalidInputError(
                f"State {i} has {len(s)} components, expected {width} for {len(bodies)} bodies"
            )


class TrajectorySerializer:
    """
    Writes propagated multi-body trajectories to an SPK file, one Type 9
    segment per body other than the observer.
    """

    def __init__(self, session, degree=INTERPOLATION_DEGREE, frame=REFERENCE_FRAME):
        self.session = session
        self.degree = degree
        self.frame = frame

    def write(self, fname, bodies, states, epochs, observer, fraction_to_save, overwrite=False):
        """
        Write data contained in a StateSeries to an SPK file.

        Args:
            fname: Output path. Must not exist unless overwrite is set.
            bodies: NAIF IDs, one per 6-component block of each state.
            states: StateSeries, one flat multi-body state per epoch (meter-scale).
            epochs: Ephemeris seconds past J2000, strictly increasing.
            observer: NAIF ID of the observing body. If it is also in bodies,
                every segment is written relative to its sampled trajectory.
            fraction_to_save: Retention fraction in (0, 1].
            overwrite: Remove an existing file at fname before opening.

        Raises:
            InvalidFractionError, InvalidInputError: before any file I/O.
            KernelOpenError, SegmentWriteError, KernelCloseError.
        """
        stride = steps_to_skip(fraction_to_save)
        _check_inputs(bodies, states, epochs)

        try:
            bodies = [int(b) for b in bodies]
            observer = int(observer)
            ets = np.asarray(epochs, dtype=np.float64)
            kept = np.asarray(states, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise InvalidInputError(f"Bodies, states and epochs must be numeric: {e}") from e

        # Extract states to actually write to the file
        ets, kept = downsample(ets, kept, stride)

        self.session.set_error_policy()

        if overwrite and os.path.exists(fname):
            os.remove(fname)

        try:
            handle = self.session.open_kernel(fname, INTERNAL_FILE_NAME, COMMENT_AREA_CHARS)
        except EngineError as e:
            raise KernelOpenError(e.diagnostic) from e

        try:
            self._write_segments(handle, bodies, kept, ets, observer)
        except EngineError as e:
            self._close_after_failure(handle, fname)
            raise SegmentWriteError(e.diagnostic) from e
        except BaseException:
            self._close_after_failure(handle, fname)
            raise

        try:
            self.session.close_kernel(handle)
        except EngineError as e:
            raise KernelCloseError(e.diagnostic) from e

        print(f"[SPK] Wrote {fname} ({len(ets)} epochs, stride {stride})")

    def _close_after_failure(self, handle, fname):
        # Best effort: the original failure is what gets raised
        try:
            self.session.close_kernel(handle)
        except EngineError as close_err:
            print(f"Warning: SPK file {fname} could not be closed after a failed write: {close_err.diagnostic}")

    def _write_segments(self, handle, bodies, states, ets, observer):
        # If the observer's trajectory was also propagated, its states are
        # subtracted from every other body's
        cb_states_km = None
        if observer in bodies:
            cb_states_km = body_states_km(states, bodies.index(observer))

        for idx, body in enumerate(bodies):
            if body == observer:
                continue

            states_km = body_states_km(states, idx)
            if cb_states_km is not None:
                states_km -= cb_states_km

            self.session.write_segment(
                handle,
                body,
                observer,
                self.frame,
                ets[0],
                ets[-1],
                segment_label(body, observer),
                # Lagrange degree; must stay below the number of retained epochs
                self.degree,
                states_km,
                ets,
            )
