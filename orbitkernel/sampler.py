import numpy as np

from orbitkernel.config import REFERENCE_FRAME, ABERRATION_CORRECTION, M_PER_KM
from orbitkernel.errors import EngineError, StateUnavailableError


def state_at(session, body, observer, epoch):
    """
    Retrieve the state of a body relative to an observer at an epoch.

    J2000 frame, no light-time or stellar aberration correction.

    Returns:
        [x, y, z, vx, vy, vz] in the engine's native km and km/s (NOT meters).
    """
    session.set_error_policy()

    try:
        return session.state(body, observer, epoch, REFERENCE_FRAME, ABERRATION_CORRECTION)
    except EngineError as e:
        raise StateUnavailableError(body, observer, epoch, e.diagnostic) from e


def states_at(session, bodies, observer, epoch):
    """
    Retrieve the states of several bodies at one epoch as one flat buffer.

    Block i (indices 6*i .. 6*i+5) holds bodies[i]. Fails on the first body
    whose state is unavailable.
    """
    state = np.zeros(len(bodies) * 6)

    for idx, body in enumerate(bodies):
        state[idx * 6:idx * 6 + 6] = state_at(session, body, observer, epoch)

    return state


def sample_series(session, bodies, observer, epochs):
    """
    Sample a StateSeries over a timeline.

    Returns:
        Array of shape (len(epochs), 6 * len(bodies)) in km, km/s.
    """
    series = np.zeros((len(epochs), len(bodies) * 6))

    for i, et in enumerate(epochs):
        series[i] = states_at(session, bodies, observer, et)
        if (i + 1) % 100 == 0:
            print(f"[Sampler] Processed {i + 1}/{len(epochs)} epochs...")

    return series


def to_meters(series):
    """km-scale states -> meter-scale states, the units TrajectorySerializer expects."""
    return np.asarray(series, dtype=np.float64) * M_PER_KM
