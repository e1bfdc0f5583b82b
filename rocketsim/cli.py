"""Command-line entry point.

Flies a preset or a mission file with the default controller and prints a
flight summary.

Example:
    $ rocketsim --preset pathfinder --dt 0.005 --max-time 300
    $ rocketsim --mission missions/demo.json --export outputs/demo --verbose
    $ python -m rocketsim --preset single-stage --j2

Exit codes:
    0  landed, or stopped at the time limit
    1  the mission could not be loaded or is invalid
    3  the run was aborted by a non-finite command or state
"""

import argparse
import logging
import sys
from collections.abc import Sequence

from rocketsim.export import export_flight
from rocketsim.simulation import FlightOutcome, SimConfig, format_flight_summary, simulate
from rocketsim.vehicle import MissionConfigError
from rocketsim.vehicle.config import load_mission
from rocketsim.vehicle.presets import PRESETS

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID_MISSION = 1
EXIT_ABORTED = 3

DEFAULT_PRESET = "pathfinder"


def build_parser() -> argparse.ArgumentParser:
    """Argument parser for the `rocketsim` command."""
    parser = argparse.ArgumentParser(
        prog="rocketsim",
        description="Multi-stage rocket 6DOF flight simulator",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--preset",
        choices=sorted(PRESETS),
        help="Built-in mission to fly (default: pathfinder)",
    )
    source.add_argument(
        "--mission",
        metavar="FILE",
        help="JSON mission file to fly instead of a preset",
    )
    parser.add_argument(
        "--dt",
        type=float,
        default=0.005,
        help="Integration step [s] (default: 0.005)",
    )
    parser.add_argument(
        "--max-time",
        type=float,
        default=600.0,
        help="Simulation time bound [s] (default: 600)",
    )
    parser.add_argument(
        "--j2",
        action="store_true",
        help="Include J2 in the gravity model",
    )
    parser.add_argument(
        "--export",
        metavar="DIR",
        help="Write trajectory.csv and summary.json to DIR",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the simulator from the command line.

    Args:
        argv: Arguments (defaults to sys.argv[1:])

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.mission:
            mission = load_mission(args.mission)
        else:
            mission = PRESETS[args.preset or DEFAULT_PRESET]()
        mission.validate()
    except MissionConfigError as err:
        logger.error("%s", err)
        return EXIT_INVALID_MISSION
    except OSError as err:
        logger.error("Cannot read mission file: %s", err)
        return EXIT_INVALID_MISSION

    try:
        config = SimConfig(dt=args.dt, max_time=args.max_time, use_j2=args.j2)
    except ValueError as err:
        logger.error("Invalid simulation settings: %s", err)
        return EXIT_INVALID_MISSION

    logger.info("Flying %s (dt=%g s, max_time=%g s)", mission.name, config.dt, config.max_time)
    result = simulate(mission, config)

    print(format_flight_summary(result))

    if args.export:
        paths = export_flight(result, args.export)
        logger.info("Wrote %s", ", ".join(str(p) for p in paths.values()))

    if result.outcome is FlightOutcome.ABORTED:
        logger.error("Run aborted: %s", result.abort_reason)
        return EXIT_ABORTED
    if result.outcome is FlightOutcome.MAX_TIME:
        logger.warning("Time limit reached before landing")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
