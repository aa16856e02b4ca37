#!/usr/bin/env python3
"""
Route guidance runtime.

Replays a recorded sensor trace through the fusion core against a route
file and logs navigation status and audio cues.

Usage:
    python -m routeguide --routes route.json --trace trace.json [options]
"""

import argparse
import logging
import sys
import time

from ..errors import RouteGuideError
from ..fusion import SensorFusion
from ..navigation import load_routes
from .config import Config
from .logging_setup import configure_logging
from .recorder import TrackRecorder
from .session import NavigationSession
from .sources import TraceReplaySource

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="routeguide",
        description="Pedestrian bus-route guidance from GPS and compass samples",
    )
    parser.add_argument("--config", help="JSON configuration file")
    parser.add_argument("--routes", help="Route data JSON file (overrides config routes_file)")
    parser.add_argument("--trace", required=True, help="Sensor trace JSON file to replay")
    parser.add_argument("--speed", type=float, help="Replay speed multiplier")
    parser.add_argument("--provider", choices=["absolute", "ios", "alpha", "android"],
                        help="Raw heading provider")
    parser.add_argument("--record", metavar="FILE", help="Write a CSV track log")
    parser.add_argument("--log-level", help="Logging level (DEBUG, INFO, ...)")
    return parser


def format_status(fusion: SensorFusion) -> str:
    """One-line navigation status."""
    snap = fusion.snapshot()
    if snap.error is not None:
        return f"Location error: {snap.error}"
    if snap.smoothed_location is None:
        return "Waiting for first fix"

    heading = f"{snap.heading:.0f}°" if snap.heading is not None else "--"
    line = (f"pos {snap.smoothed_location.lat:.6f},{snap.smoothed_location.lon:.6f} "
            f"acc {snap.accuracy:.0f}m heading {heading}")

    nav = snap.navigation
    if nav is not None:
        line += (f" | {nav.direction.value} target {nav.target_index} ({nav.target.id}) "
                 f"{nav.distance_to_target:.0f}m, {nav.progress_percent:.0f}%")
        if nav.next_turn is not None:
            line += f" | turn {nav.next_turn.waypoint.kind.turn_direction} in {nav.next_turn.distance:.0f}m"
        if nav.next_bus_stop is not None:
            stop = nav.next_bus_stop
            line += f" | stop {stop.waypoint.name or stop.waypoint.id} in {stop.distance:.0f}m"
    return line


def main(argv=None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = Config(args.config)
        if args.routes:
            config.set("routes_file", args.routes)
        if args.speed is not None:
            config.set("runtime.replay_speed", args.speed)
        if args.provider:
            config.set("heading.provider", args.provider)
        if args.log_level:
            config.set("logging.level", args.log_level)

        configure_logging(config.log_level, config.log_file)

        routes = load_routes(config.routes_file)
        fusion = SensorFusion.from_config(routes, config)
        source = TraceReplaySource.from_file(args.trace, config.replay_speed)
        recorder = TrackRecorder(args.record) if args.record else None
    except (RouteGuideError, OSError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    session = NavigationSession(
        fusion,
        sources=[source],
        predict_interval_ms=config.predict_interval_ms,
        recorder=recorder,
    )

    output_interval = 1.0 / config.output_rate_hz if config.output_rate_hz > 0 else 1.0

    try:
        with session:
            while not session.sources_finished():
                time.sleep(output_interval)
                logger.info(format_status(fusion))
            session.wait(timeout=5.0)
            logger.info(format_status(fusion))
    except KeyboardInterrupt:
        logger.info("Interrupted")

    stats = session.get_statistics()
    logger.info("Processed %d events, %d cues", stats['processed_events'], stats['cue_events'])

    snap = fusion.snapshot()
    if snap.error is not None:
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
