from orbitkernel.config import GM_ITEM, GM_DIMENSION, KM3_TO_M3
from orbitkernel.errors import EngineError, NotFoundError, ConstantUnavailableError


def resolve_one(session, name):
    """Map a body name or integer ID string (e.g. 'EARTH', '399') to its NAIF ID."""
    try:
        return session.body_code(name)
    except EngineError as e:
        raise NotFoundError(name) from e


def resolve(session, names):
    """
    Parse body names/ID strings to NAIF IDs, preserving order.

    The first unresolvable name aborts the batch; no partial list is returned.
    Use resolve_one() per name when partial resolution is wanted.
    """
    return [resolve_one(session, name) for name in names]


def gravitational_parameter(session, body):
    """
    Retrieve the standard gravitational parameter of a body.

    Args:
        session: EngineSession with a PCK providing BODYnnn_GM loaded.
        body: NAIF ID.

    Returns:
        GM in m^3/s^2.
    """
    session.set_error_policy()

    try:
        values = session.body_constant(body, GM_ITEM, GM_DIMENSION)
    except EngineError as e:
        raise ConstantUnavailableError(body, e.diagnostic) from e

    if len(values) < GM_DIMENSION:
        raise ConstantUnavailableError(body, f"{GM_ITEM} has no value")

    # km^3/s^2 -> m^3/s^2
    return float(values[0]) * KM3_TO_M3
