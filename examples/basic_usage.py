#!/usr/bin/env python3
"""
Basic usage example of the route guidance core.

This example walks a simulated pedestrian along the sample outbound route
and feeds noisy GPS fixes, compass samples and prediction ticks through the
sensor fusion facade without any threads or platform dependencies.
"""

import sys
import os
import numpy as np

# Add the package to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from routeguide import SensorFusion, Coordinate, OrientationSample, load_routes
from routeguide.math.geodesy import distance, bearing, project

ROUTE_FILE = os.path.join(os.path.dirname(__file__), "route.json")


def simulate_walk(route, speed=1.4, fix_interval_s=1.0, tick_ms=50):
    """
    Simulate a pedestrian walking the waypoints of a route.

    Args:
        route: Route to walk
        speed: Walking speed in m/s
        fix_interval_s: GPS fix period in seconds
        tick_ms: Prediction tick period in milliseconds

    Yields:
        (timestamp_ms, fix or None, true_heading) tuples
    """
    gps_noise_m = 3.0
    rng = np.random.default_rng(42)

    t_ms = 1_700_000_000_000.0
    next_fix_ms = t_ms
    step_m = speed * tick_ms / 1000.0

    for a, b in zip(route, list(route)[1:]):
        leg_bearing = bearing(a, b)
        leg_length = distance(a, b)
        travelled = 0.0
        while travelled < leg_length:
            position = project(a, leg_bearing, travelled)

            fix = None
            if t_ms >= next_fix_ms:
                # Offset the fix by a random error in a random direction
                noisy = project(position, rng.uniform(0, 360), abs(rng.normal(0, gps_noise_m)))
                fix = Coordinate(lat=noisy.lat, lon=noisy.lon, accuracy=gps_noise_m * 2,
                                 speed=speed, course=leg_bearing, timestamp=t_ms)
                next_fix_ms += fix_interval_s * 1000.0

            yield t_ms, fix, leg_bearing

            travelled += step_m
            t_ms += tick_ms


def main():
    routes = load_routes(ROUTE_FILE)
    fusion = SensorFusion(routes)

    compass_rng = np.random.default_rng(7)
    last_target = None

    for t_ms, fix, true_heading in simulate_walk(routes.outbound):
        sample = OrientationSample(heading=(true_heading + compass_rng.normal(0, 4)) % 360,
                                   pitch=80.0, timestamp=t_ms)
        fusion.on_orientation(sample)

        if fix is not None:
            cues = fusion.on_gps_fix(fix)
        else:
            cues = fusion.tick(t_ms)

        for cue in cues:
            print(f"[CUE] {cue.waypoint_id}: {' -> '.join(cue.cue_ids)} at {cue.distance:.0f}m")
            fusion.mark_cue_finished()

        nav = fusion.snapshot().navigation
        if nav is not None and nav.target_index != last_target:
            last_target = nav.target_index
            turn = nav.next_turn
            print(f"Target {nav.target_index} ({nav.target.id}, {nav.target.kind.value}) "
                  f"{nav.distance_to_target:.0f}m, progress {nav.progress_percent:.0f}%"
                  + (f", next turn {turn.waypoint.kind.turn_direction} in {turn.distance:.0f}m" if turn else ""))

    snap = fusion.snapshot()
    print("\nFinal state:")
    print(f"  Position: {snap.smoothed_location.lat:.6f}, {snap.smoothed_location.lon:.6f}")
    print(f"  Heading:  {snap.heading:.1f}° (composite {snap.composite_heading:.1f}°)")
    print(f"  Progress: {snap.navigation.progress_percent:.0f}%")
    print(f"  Stats:    {fusion.get_statistics()['filter']}")


if __name__ == "__main__":
    main()
