# main.py
# Entry point: load a GeoJSON way network and print directions between two points.
#
#   python -m navigation.site_router.main site.geojson -100.3885,47.1399 -100.3749,47.1333 \
#       --entrance -100.38958,47.14026 --layer Roads --layer mine-road
#
# The Mapbox token is read from MAPBOX_ACCESS_TOKEN (or a .env file).

import argparse
import logging
import sys
from typing import List, Optional

from .errors import RoutingError
from .models import Entrance, Maneuver, Point, STOP
from .nav_config import DEFAULT_MAX_SNAP_M, RoutingOptions
from .network import load_network
from .route_logger import RouteLogger
from .routing_machine import RoutingMachine

logger = logging.getLogger(__name__)


def parse_point(text: str) -> Point:
    parts = text.split(",")
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(f"expected 'lon,lat', got {text!r}")
    try:
        return (float(parts[0]), float(parts[1]))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected 'lon,lat', got {text!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Turn-by-turn directions on a private way network.")
    parser.add_argument("network", help="GeoJSON FeatureCollection of local ways")
    parser.add_argument("start", type=parse_point, help="start point as lon,lat")
    parser.add_argument("end", type=parse_point, help="destination as lon,lat")
    parser.add_argument("--entrance", type=parse_point, help="site entrance as lon,lat")
    parser.add_argument("--max-snap", type=float, default=DEFAULT_MAX_SNAP_M, help="snap threshold in metres")
    parser.add_argument("--layer", action="append", help="only use features in this layer (repeatable)")
    parser.add_argument("--out", help="save the route as GeoJSON to this file")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # ------------------------------------------------------------------
    # Logging setup: configure once here, all modules inherit
    # ------------------------------------------------------------------
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    entrances = []
    if args.entrance:
        entrances.append(Entrance(
            coordinates=args.entrance,
            enter_maneuver=Maneuver(type=STOP, instruction="Check in at the security gate."),
            exit_maneuver=Maneuver(type=STOP, instruction="Check out at the security gate."),
        ))
    options = RoutingOptions(max_snap=args.max_snap, entrances=entrances)

    network = load_network(args.network, layers=args.layer)
    with RoutingMachine(network, options) as machine:
        try:
            result = machine.get_directions(args.start, args.end).result()
        except RoutingError as e:
            logger.error(f"Could not get directions: {e}")
            return 1

    print("-" * 50)
    for i, m in enumerate(result.maneuvers, start=1):
        print(f"{i}. {m.instruction}")
    print("-" * 50)

    if args.out:
        RouteLogger(options).save_route(result, args.out)
    return 0


if __name__ == "__main__":
    sys.exit(main())
