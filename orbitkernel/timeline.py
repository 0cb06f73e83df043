from datetime import datetime, timezone
import numpy as np
from skyfield.api import load

from orbitkernel.config import J2000_JD, SECONDS_PER_DAY

_ts = None


def timescale():
    """Skyfield timescale from the builtin UTC/leap-second tables (no download)."""
    global _ts
    if _ts is None:
        _ts = load.timescale(builtin=True)
    return _ts


def parse_iso(time_iso):
    # Handle Z for UTC
    if time_iso.endswith('Z'):
        time_iso = time_iso[:-1] + '+00:00'
    dt_obj = datetime.fromisoformat(time_iso)
    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=timezone.utc)
    return dt_obj


def epoch_from_iso(time_iso):
    """UTC ISO string -> TDB seconds past J2000 (SPICE ephemeris time)."""
    t = timescale().from_datetime(parse_iso(time_iso))
    # Two-part date keeps sub-microsecond resolution
    return ((t.whole - J2000_JD) + t.tdb_fraction) * SECONDS_PER_DAY


def iso_from_epoch(epoch, places=0):
    """TDB seconds past J2000 -> UTC ISO string with 'Z' suffix."""
    t = timescale().tdb_jd(J2000_JD, epoch / SECONDS_PER_DAY)
    return t.utc_iso(places=places)


def build_timeline(start_iso, duration, step):
    """
    Evenly spaced epochs from start_iso.

    Args:
        start_iso: UTC start time.
        duration: Span in seconds (>= 0).
        step: Spacing in seconds (> 0).

    Returns:
        Array of ephemeris seconds, including the end when it lands on the grid.
    """
    if step <= 0:
        raise ValueError(f"step must be positive (got {step})")
    if duration < 0:
        raise ValueError(f"duration must be >= 0 (got {duration})")

    et0 = epoch_from_iso(start_iso)
    n_steps = int(np.floor(duration / step + 1e-9))
    return et0 + step * np.arange(n_steps + 1, dtype=np.float64)
