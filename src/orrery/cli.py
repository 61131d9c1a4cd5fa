"""
Command-line runner.

Loads a system description, builds the system and advances it for a number
of frames without a display. Each frame advances ``--iterations`` steps of
``--step`` seconds, the way an interactive viewer would once per redraw.

usage: orrery [-s STEP] [-j START] [-i ITERATIONS] [-n FRAMES]
              [--csv PATH] [--plot PATH] [-v] (config | --preset NAME)
"""
import argparse
import logging
import sys
import time
from datetime import datetime, timezone
from .builder import build_system
from .config import config
from .constants import julian_from_unix, unix_from_julian
from .defaults import PRESETS, preset
from .errors import ConfigurationError, DegenerateGeometryError, NonConvergentError
from .loader import load_config
from .utils import Timer

logger = logging.getLogger(__name__)


def date_string(jd):
    """Format a Julian date as 'JD: <day>, ET: <Mon DD, YYYY>'."""
    moment = datetime.fromtimestamp(unix_from_julian(jd), tz=timezone.utc)
    return f"JD: {int(jd)}, ET: {moment.strftime('%b %d, %Y')}"


def build_parser():
    parser = argparse.ArgumentParser(
        prog="orrery",
        description="Integrate a star system described by orbital elements.")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("config", nargs="?",
                        help="JSON system description")
    source.add_argument("--preset", choices=sorted(PRESETS),
                        help="use a predefined system instead of a file")
    parser.add_argument("-s", "--step", type=float, default=None,
                        help="time increment between integration steps in seconds "
                             f"(default: {config.DEFAULT_TIMESTEP})")
    parser.add_argument("-j", "--start", type=float, default=None,
                        help="Julian date of the simulation's start (default: now)")
    parser.add_argument("-i", "--iterations", type=int, default=100,
                        help="integration steps per frame (default: 100)")
    parser.add_argument("-n", "--frames", type=int, default=1000,
                        help="number of frames to run (default: 1000)")
    parser.add_argument("--csv", metavar="PATH",
                        help="write the body trails to a CSV file")
    parser.add_argument("--plot", metavar="PATH",
                        help="write a 3D plot of the final state to an HTML file")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="log every frame")
    return parser


def run(args):
    """Build and advance the system described by parsed ``args``."""
    step = config.DEFAULT_TIMESTEP if args.step is None else args.step
    start = julian_from_unix(time.time()) if args.start is None else args.start
    if args.iterations < 0 or args.frames < 0:
        raise ValueError("--iterations and --frames must be non-negative")

    system_config = preset(args.preset) if args.preset else load_config(args.config)
    system = build_system(system_config, start_epoch=start)
    print(f"Loaded {len(system)} bodies, start {date_string(system.julian_date)}")

    with Timer("Simulation"):
        for frame in range(args.frames):
            system.advance(args.iterations, step)
            logger.debug("frame %d: %s, max extent %.6e m", frame,
                         date_string(system.julian_date), system.max_extent())

    print(date_string(system.julian_date))
    print(f"{args.iterations} steps/frame")
    system.summary()

    if args.csv:
        system.trail_dataframe().to_csv(args.csv, index=False)
        logger.info("Wrote trails to %s", args.csv)
    if args.plot:
        system.plot_3d().write_html(args.plot)
        logger.info("Wrote plot to %s", args.plot)
    return system


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        run(args)
    except ConfigurationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    except (NonConvergentError, DegenerateGeometryError, ValueError) as e:
        logger.critical("Simulation failed: %s", e, exc_info=args.verbose)
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
