"""
Command line entry point for the ELC client.

Looks up state route locations by route and milepost, finds the routes
nearest to a point, and lists the routes of each LRS year.
"""

import argparse
import asyncio
import json
import logging
import sys
from datetime import date
from typing import List, Optional, Sequence

from elc.api.route_locator import LocatorResult, RouteLocator, RouteLocatorFactory
from elc.exceptions import ELCException, InvalidArgumentError, InvalidFieldError
from elc.managers.elc_config import ConfigurationError, ELCConfig, ELCConfigFactory
from elc.models.route_location import RouteLocation
from version import get_version_string

EXIT_OK = 0
EXIT_SERVICE_ERROR = 1
EXIT_INVALID_INPUT = 2

logger = logging.getLogger("elc.cli")


def setup_logging(level: str = "WARNING") -> None:
    """Setup console logging for the command line client."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )

    # Set specific log levels for different modules
    logging.getLogger("elc.api").setLevel(level.upper())
    logging.getLogger("aiohttp").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="elc", description="Query the WSDOT ELC linear referencing service"
    )
    parser.add_argument("--version", action="version", version=get_version_string())
    parser.add_argument("--url", help="ELC REST SOE URL")
    parser.add_argument("--config", help="Path to a JSON configuration file")
    parser.add_argument(
        "--no-cors", action="store_true", help="Request JSONP responses instead of CORS"
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level")

    subparsers = parser.add_subparsers(dest="command", required=True)

    routes = subparsers.add_parser("routes", help="List LRS years or the routes of a year")
    routes.add_argument("--year", help="LRS year whose routes are listed")

    locate = subparsers.add_parser("locate", help="Find a route location by milepost")
    locate.add_argument("route", help="State route, e.g. 005 or 005COABERDN")
    locate.add_argument("srmp", help="Start SRMP; a trailing B marks back mileage")
    locate.add_argument("end_srmp", nargs="?", help="End SRMP for a line segment")
    locate.add_argument("--decrease", action="store_true", help="Use the decrease LRS")
    locate.add_argument("--reference-date", help="Date the milepost was collected (m/d/yyyy)")
    locate.add_argument("--out-sr", type=int, help="WKID of the output geometry")
    locate.add_argument("--lrs-year", help="LRS year, e.g. Current or 2008")

    nearest = subparsers.add_parser("nearest", help="Find route locations near a point")
    nearest.add_argument("x", type=float, help="X coordinate")
    nearest.add_argument("y", type=float, help="Y coordinate")
    nearest.add_argument("--radius", type=float, help="Search radius in feet")
    nearest.add_argument("--in-sr", type=int, help="WKID of the coordinates")
    nearest.add_argument("--out-sr", type=int, help="WKID of the output geometry")
    nearest.add_argument("--reference-date", help="Date of the point (m/d/yyyy)")
    nearest.add_argument("--lrs-year", help="LRS year, e.g. Current or 2008")
    nearest.add_argument("--route-filter", help="Partial SQL, e.g. \"LIKE '005%%'\"")

    return parser


def load_config(args: argparse.Namespace) -> ELCConfig:
    """Build the configuration from the config file and command line flags."""
    config = (
        ELCConfigFactory.load_from_file(args.config)
        if args.config
        else ELCConfigFactory.create_default_config()
    )
    overrides = {}
    if args.url:
        overrides["url"] = args.url
    if args.no_cors:
        overrides["use_cors"] = False
    if overrides:
        config = ELCConfigFactory.create_from_dict({**config.model_dump(), **overrides})
    return config


def _print_locations(locations: List[RouteLocation]) -> None:
    print(json.dumps([location.to_dict() for location in locations], indent=2))


def _report(result: LocatorResult) -> int:
    if result.failed:
        print(f"Error: {result.error}", file=sys.stderr)
        return EXIT_SERVICE_ERROR
    return EXIT_OK


async def run_routes(locator: RouteLocator, args: argparse.Namespace) -> int:
    result = await locator.get_route_list()
    if result.succeeded:
        route_list = result.value
        if args.year:
            for route in route_list.routes(args.year):
                print(f"{route.name}\t{route.kind.name.lower()}")
        else:
            print("\n".join(route_list.years()))
    return _report(result)


async def run_locate(locator: RouteLocator, args: argparse.Namespace) -> int:
    location = RouteLocation(
        route=args.route,
        srmp=args.srmp,
        end_srmp=args.end_srmp,
        is_decrease=True if args.decrease else None,
    )
    result = await locator.find_by_location(
        [location],
        reference_date=args.reference_date,
        out_sr=args.out_sr,
        lrs_year=args.lrs_year,
    )
    if result.succeeded:
        _print_locations(result.value)
    return _report(result)


async def run_nearest(locator: RouteLocator, config: ELCConfig, args: argparse.Namespace) -> int:
    in_sr = args.in_sr if args.in_sr is not None else config.default_in_sr
    if in_sr is None:
        raise InvalidArgumentError("--in-sr is required when no default_in_sr is configured")
    result = await locator.find_nearest(
        [args.x, args.y],
        reference_date=args.reference_date or date.today(),
        search_radius=args.radius if args.radius is not None else config.default_search_radius,
        in_sr=in_sr,
        out_sr=args.out_sr if args.out_sr is not None else config.default_out_sr,
        lrs_year=args.lrs_year,
        route_filter=args.route_filter,
    )
    if result.succeeded:
        if not result.value:
            print("No routes found within the search radius.", file=sys.stderr)
        _print_locations(result.value)
    return _report(result)


async def run(args: argparse.Namespace, config: ELCConfig) -> int:
    async with RouteLocatorFactory.create_from_config(config) as locator:
        if args.command == "routes":
            return await run_routes(locator, args)
        if args.command == "locate":
            return await run_locate(locator, args)
        return await run_nearest(locator, config, args)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main command line entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        config = load_config(args)
        return asyncio.run(run(args, config))
    except (ConfigurationError, InvalidArgumentError, InvalidFieldError) as e:
        logger.debug(f"Invalid input: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_INVALID_INPUT
    except ELCException as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_SERVICE_ERROR


if __name__ == "__main__":
    sys.exit(main())
