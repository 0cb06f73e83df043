import argparse
import sys

from orbitkernel.bodies import resolve, resolve_one, gravitational_parameter
from orbitkernel.config import SECONDS_PER_DAY, SECONDS_PER_HOUR
from orbitkernel.errors import KernelError, ConstantUnavailableError
from orbitkernel.sampler import sample_series, to_meters
from orbitkernel.serializer import TrajectorySerializer, steps_to_skip
from orbitkernel.session import EngineSession
from orbitkernel.timeline import build_timeline, iso_from_epoch
from orbitkernel.tools.validator import KernelValidator


def export_spk(output_file, kernels, bodies, observer, start_date="2025-01-01T00:00:00Z",
               days=30.0, step_hours=4.0, fraction_to_save=1.0, overwrite=False, validate=False):
    """
    Resamples bodies from loaded kernels and writes them to a new SPK.

    The observer is sampled along with the bodies, so every segment is written
    relative to it.

    Returns:
        Number of segments written.
    """
    # Reject a bad fraction before loading anything
    steps_to_skip(fraction_to_save)
    print(f"Generating SPK for {days} days from {start_date}...")

    with EngineSession(kernels=kernels) as session:
        ids = resolve(session, bodies)
        cb_id = resolve_one(session, observer)
        if cb_id not in ids:
            ids.append(cb_id)

        try:
            gm = gravitational_parameter(session, cb_id)
            print(f"Observer {cb_id} GM: {gm:.6e} m^3/s^2")
        except ConstantUnavailableError as e:
            print(f"Warning: {e}")

        ets = build_timeline(start_date, days * SECONDS_PER_DAY, step_hours * SECONDS_PER_HOUR)
        print(f"Sampling {len(ids)} bodies at {len(ets)} epochs "
              f"({iso_from_epoch(ets[0])} -> {iso_from_epoch(ets[-1])})")

        # Sampled states are km; the serializer expects meter-scale input
        states = to_meters(sample_series(session, ids, cb_id, ets))

        TrajectorySerializer(session).write(
            output_file, ids, states, ets, cb_id, fraction_to_save, overwrite=overwrite
        )

        if validate:
            validator = KernelValidator(session, output_file)
            validator.validate(ids, states, ets, cb_id, fraction_to_save)
            validator.report()

    return len(ids) - 1


def main(argv=None):
    parser = argparse.ArgumentParser(description="Resample bodies from SPICE kernels into a Type 9 SPK.")
    parser.add_argument("output", help="Output SPK path")
    parser.add_argument("--kernel", "-k", action="append", default=[], help="Kernel to furnish (repeatable)")
    parser.add_argument("--bodies", "-b", nargs="+", required=True, help="Body names or NAIF IDs")
    parser.add_argument("--observer", "-o", required=True, help="Observing body name or NAIF ID")
    parser.add_argument("--start", default="2025-01-01T00:00:00Z", help="UTC start (ISO)")
    parser.add_argument("--days", type=float, default=30.0)
    parser.add_argument("--step-hours", type=float, default=4.0)
    parser.add_argument("--fraction", type=float, default=1.0, help="Fraction of samples to keep, in (0, 1]")
    parser.add_argument("--overwrite", action="store_true")
    parser.add_argument("--validate", action="store_true", help="Read the kernel back and compare")
    args = parser.parse_args(argv)

    try:
        n = export_spk(
            args.output,
            args.kernel,
            args.bodies,
            args.observer,
            start_date=args.start,
            days=args.days,
            step_hours=args.step_hours,
            fraction_to_save=args.fraction,
            overwrite=args.overwrite,
            validate=args.validate,
        )
    except (KernelError, FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Saved {n} segments to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
