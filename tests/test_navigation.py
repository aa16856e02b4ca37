#!/usr/bin/env python3
"""
Unit tests for route data and the route navigator.
"""

import unittest
import sys
import os

# Add package to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from routeguide.models import Coordinate, Waypoint, WaypointKind, Route, RouteDirection
from routeguide.math.geodesy import bearing, project
from routeguide.navigation import RouteNavigator, RouteSet, NavigationPhase

# Roughly 11.1 m of latitude
STEP = 0.0001


def at(lat, lon=0.0):
    return Coordinate(lat=lat, lon=lon)


def waypoint(wid, lat, lon=0.0, kind=WaypointKind.PLAIN, audio_cue=None):
    return Waypoint(id=wid, lat=lat, lon=lon, kind=kind, audio_cue=audio_cue)


def make_routes(outbound, inbound=None):
    """Route set; the inbound route defaults to a single far-away waypoint."""
    if inbound is None:
        inbound = [waypoint("far", 1.0, 1.0)]
    return RouteSet(
        outbound=Route.from_waypoints(RouteDirection.OUTBOUND, outbound),
        inbound=Route.from_waypoints(RouteDirection.INBOUND, inbound),
    )


def straight_line(prefix, count, start=0.0, step=0.001):
    return [waypoint(f"{prefix}{i}", start + i * step) for i in range(count)]


class TestNavigatorStart(unittest.TestCase):
    """Test route selection and initial target."""

    def setUp(self):
        outbound = straight_line("o", 4)
        inbound = [waypoint(f"i{i}", 0.003 - i * 0.001) for i in range(4)]
        self.nav = RouteNavigator(make_routes(outbound, inbound))

    def test_idle_until_started(self):
        self.assertEqual(self.nav.phase, NavigationPhase.IDLE)
        self.assertFalse(self.nav.is_tracking)

    def test_start_targets_waypoint_after_nearest(self):
        self.nav.start(at(STEP))

        self.assertTrue(self.nav.is_tracking)
        self.assertTrue(self.nav.is_outbound)
        self.assertEqual(self.nav.target_index, 1)
        self.assertEqual(self.nav.target.id, "o1")

    def test_start_picks_inbound_when_closer(self):
        self.nav.start(at(0.0029))

        self.assertEqual(self.nav.direction, RouteDirection.INBOUND)
        self.assertEqual(self.nav.target_index, 1)
        self.assertEqual(self.nav.target.id, "i1")

    def test_start_tie_prefers_outbound(self):
        routes = make_routes([waypoint("o0", 0.0, 0.001), waypoint("o1", 0.001, 0.001)],
                             [waypoint("i0", 0.0, -0.001), waypoint("i1", 0.001, -0.001)])
        nav = RouteNavigator(routes)
        nav.start(at(0.0))
        self.assertEqual(nav.direction, RouteDirection.OUTBOUND)

    def test_initial_target_capped_at_last(self):
        nav = RouteNavigator(make_routes(straight_line("o", 4)))
        nav.start(at(0.003))
        self.assertEqual(nav.target_index, 3)

    def test_update_starts_navigation(self):
        self.assertEqual(self.nav.update(at(STEP)), [])
        self.assertTrue(self.nav.is_tracking)
        self.assertEqual(self.nav.target_index, 1)


class TestNavigatorAdvancement(unittest.TestCase):
    """Test target advancement."""

    def test_advance_within_arrival_radius(self):
        nav = RouteNavigator(make_routes(straight_line("o", 4)))
        nav.start(at(STEP))

        nav.update(at(0.0005))
        self.assertEqual(nav.target_index, 1)

        nav.update(at(0.00095))
        self.assertEqual(nav.target_index, 2)

    def test_advance_at_most_one_per_update(self):
        waypoints = [waypoint("a", 0.0), waypoint("b", 0.001), waypoint("c", 0.00101), waypoint("d", 0.002)]
        nav = RouteNavigator(make_routes(waypoints))
        nav.start(at(STEP))

        nav.update(at(0.001))
        self.assertEqual(nav.target_index, 2)

        nav.update(at(0.001))
        self.assertEqual(nav.target_index, 3)

    def test_never_beyond_last_waypoint(self):
        nav = RouteNavigator(make_routes(straight_line("o", 3)))
        nav.start(at(STEP))

        for _ in range(10):
            nav.update(at(0.001))
            nav.update(at(0.002))

        self.assertEqual(nav.target_index, 2)
        self.assertTrue(nav.is_complete)
        self.assertEqual(nav.progress_percent, 100.0)

    def test_progress(self):
        nav = RouteNavigator(make_routes(straight_line("o", 4)))
        nav.start(at(STEP))
        self.assertAlmostEqual(nav.progress_percent, 100.0 / 3)
        self.assertFalse(nav.is_complete)

    def test_single_waypoint_route(self):
        nav = RouteNavigator(make_routes([waypoint("only", 0.0)]))
        nav.update(at(STEP))

        self.assertEqual(nav.target_index, 0)
        self.assertEqual(nav.progress_percent, 100.0)
        self.assertTrue(nav.is_complete)


class TestStopAnnouncements(unittest.TestCase):
    """Test stop cue firing."""

    def setUp(self):
        self.waypoints = [
            waypoint("start", 0.0),
            waypoint("s1", 0.001, kind=WaypointKind.BUS_STOP, audio_cue="stop1.mp3"),
            waypoint("end", 0.002, kind=WaypointKind.GOAL),
        ]
        self.nav = RouteNavigator(make_routes(self.waypoints))
        self.nav.start(at(STEP))

    def test_no_cue_outside_band(self):
        self.assertEqual(self.nav.update(at(0.0002)), [])

    def test_cue_in_band(self):
        events = self.nav.update(at(0.0007))

        self.assertEqual(len(events), 1)
        event = events[0]
        self.assertEqual(event.waypoint_id, "s1")
        self.assertEqual(event.cue_ids, ("getOff.mp3", "stop1.mp3"))
        self.assertGreater(event.distance, 10.0)
        self.assertLess(event.distance, 50.0)
        self.assertTrue(self.nav.cue_playing)

    def test_cue_fires_once_while_dwelling(self):
        fired = []
        for _ in range(20):
            fired.extend(self.nav.update(at(0.0007)))
            self.nav.mark_cue_finished()

        self.assertEqual(len(fired), 1)
        self.assertEqual(self.nav.last_fired_cue, "stop1.mp3")

    def test_no_cue_inside_min_distance(self):
        events = self.nav.update(at(0.00095))
        self.assertEqual(events, [])
        self.assertEqual(self.nav.target_index, 2)

    def test_without_approach_cue(self):
        nav = RouteNavigator(make_routes(self.waypoints), approach_cue_id=None)
        nav.start(at(STEP))
        events = nav.update(at(0.0007))
        self.assertEqual(events[0].cue_ids, ("stop1.mp3",))

    def test_playing_cue_blocks_next_stop(self):
        waypoints = [
            waypoint("start", 0.0),
            waypoint("s1", 0.001, kind=WaypointKind.BUS_STOP, audio_cue="a.mp3"),
            waypoint("s2", 0.0013, kind=WaypointKind.BUS_STOP, audio_cue="b.mp3"),
            waypoint("end", 0.003),
        ]
        nav = RouteNavigator(make_routes(waypoints))
        nav.start(at(STEP))

        self.assertEqual(len(nav.update(at(0.0007))), 1)
        nav.update(at(0.00095))
        self.assertEqual(nav.target.id, "s2")

        # s2 is in band but the first cue is still playing
        self.assertEqual(nav.update(at(0.001)), [])

        nav.mark_cue_finished()
        events = nav.update(at(0.001))
        self.assertEqual([e.waypoint_id for e in events], ["s2"])

    def test_stop_without_audio_is_silent(self):
        waypoints = [waypoint("start", 0.0), waypoint("s1", 0.001, kind=WaypointKind.BUS_STOP), waypoint("end", 0.002)]
        nav = RouteNavigator(make_routes(waypoints))
        nav.start(at(STEP))
        self.assertEqual(nav.update(at(0.0007)), [])


class TestNavigationBearing(unittest.TestCase):
    """Test the turn look-ahead bearing."""

    def setUp(self):
        self.waypoints = [
            waypoint("a", 0.0),
            waypoint("t", 0.001, kind=WaypointKind.TURN_RIGHT),
            waypoint("e", 0.001, 0.001),
        ]
        self.nav = RouteNavigator(make_routes(self.waypoints))
        self.nav.start(at(0.0004))

    def test_device_heading_far_from_turn(self):
        self.assertEqual(self.nav.target.id, "t")
        self.assertEqual(self.nav.navigation_bearing(at(0.0004), 5.0), 5.0)
        self.assertIsNone(self.nav.navigation_bearing(at(0.0004), None))

    def test_points_past_turn_when_near(self):
        position = at(0.0007)
        turn = self.waypoints[1]

        result = self.nav.navigation_bearing(position, 5.0)

        lookahead_point = project(turn, bearing(turn, self.waypoints[2]), 15.0)
        self.assertAlmostEqual(result, bearing(position, lookahead_point), places=6)
        # Between straight ahead and the exit direction
        self.assertGreater(result, 20.0)
        self.assertLess(result, 90.0)

    def test_next_turn_after_plain_target(self):
        waypoints = [
            waypoint("a", 0.0),
            waypoint("b", 0.001),
            waypoint("t", 0.0012, kind=WaypointKind.TURN_LEFT),
            waypoint("e", 0.0012, -0.001),
        ]
        nav = RouteNavigator(make_routes(waypoints))
        nav.start(at(STEP))
        self.assertEqual(nav.target.id, "b")

        result = nav.navigation_bearing(at(0.0009), 0.0)
        self.assertGreater(result, 270.0)

    def test_turn_at_end_of_route_points_at_vertex(self):
        waypoints = [waypoint("a", 0.0), waypoint("t", 0.001, kind=WaypointKind.TURN_STRAIGHT)]
        nav = RouteNavigator(make_routes(waypoints))
        nav.start(at(STEP))
        self.assertAlmostEqual(nav.navigation_bearing(at(0.0007), 123.0), 0.0, places=6)

    def test_summary_relative_bearing(self):
        summary = self.nav.summary(at(0.0007), 10.0)

        self.assertEqual(summary.target.id, "t")
        self.assertAlmostEqual(summary.relative_bearing, summary.navigation_bearing - 10.0, places=6)
        self.assertEqual(summary.direction, RouteDirection.OUTBOUND)


class TestRouteQueries(unittest.TestCase):
    """Test next turn, next stop and upcoming waypoints."""

    def setUp(self):
        self.waypoints = [
            waypoint("w0", 0.000),
            waypoint("w1", 0.001, kind=WaypointKind.BUS_STOP, audio_cue="1.mp3"),
            waypoint("w2", 0.002, kind=WaypointKind.BUS_STOP, audio_cue="2.mp3"),
            waypoint("w3", 0.003, kind=WaypointKind.TURN_LEFT),
            waypoint("w4", 0.004, kind=WaypointKind.BUS_STOP, audio_cue="4.mp3"),
            waypoint("w5", 0.005, kind=WaypointKind.GOAL),
        ]
        self.nav = RouteNavigator(make_routes(self.waypoints))
        self.nav.start(at(STEP))
        self.position = at(STEP)

    def test_next_turn(self):
        turn = self.nav.next_turn(self.position)
        self.assertEqual(turn.index, 3)
        self.assertEqual(turn.waypoint.kind.turn_direction, "left")
        self.assertGreater(turn.distance, 300.0)

    def test_next_bus_stop(self):
        stop = self.nav.next_bus_stop(self.position)
        self.assertEqual(stop.index, 1)
        self.assertEqual(stop.stops_until, 0)

    def test_queries_follow_target(self):
        self.nav.target_index = 4
        self.assertIsNone(self.nav.next_turn(self.position))
        self.assertEqual(self.nav.next_bus_stop(self.position).index, 4)

        self.nav.target_index = 5
        self.assertIsNone(self.nav.next_bus_stop(self.position))

    def test_upcoming_waypoints(self):
        upcoming = self.nav.upcoming_waypoints(self.position)
        self.assertEqual([info.index for info in upcoming], [1, 2, 3, 4, 5])

        self.nav.target_index = 4
        self.assertEqual([info.waypoint.id for info in self.nav.upcoming_waypoints(self.position)], ["w4", "w5"])

    def test_upcoming_count(self):
        nav = RouteNavigator(make_routes(self.waypoints), upcoming_count=2)
        nav.start(at(STEP))
        self.assertEqual(len(nav.upcoming_waypoints(at(STEP))), 2)


class TestToggleDirection(unittest.TestCase):
    """Test switching between outbound and inbound."""

    def setUp(self):
        outbound = straight_line("o", 4)
        outbound[2] = waypoint("o2", 0.002, kind=WaypointKind.BUS_STOP, audio_cue="o2.mp3")
        inbound = [waypoint(f"i{i}", 0.003 - i * 0.001) for i in range(4)]
        self.nav = RouteNavigator(make_routes(outbound, inbound))

    def test_toggle_switches_route(self):
        self.nav.start(at(STEP))
        self.nav.toggle_direction(at(STEP))

        self.assertEqual(self.nav.direction, RouteDirection.INBOUND)
        self.assertEqual(self.nav.target_index, 3)

        self.nav.toggle_direction(at(STEP))
        self.assertEqual(self.nav.direction, RouteDirection.OUTBOUND)
        self.assertEqual(self.nav.target_index, 1)

    def test_toggle_from_idle(self):
        self.nav.toggle_direction(at(STEP))
        self.assertTrue(self.nav.is_tracking)
        self.assertEqual(self.nav.direction, RouteDirection.INBOUND)

    def test_toggle_clears_fired_cues(self):
        self.nav.start(at(0.0011))
        self.assertEqual(len(self.nav.update(at(0.0016))), 1)
        self.nav.mark_cue_finished()

        self.nav.toggle_direction(at(0.0016))
        self.assertEqual(self.nav.fired_waypoints, set())
        self.assertIsNone(self.nav.last_fired_cue)

        # Back on the outbound route the same stop is announced again
        self.nav.toggle_direction(at(0.0011))
        self.assertEqual(self.nav.target.id, "o2")
        self.assertEqual(len(self.nav.update(at(0.0016))), 1)


class TestEndToEnd(unittest.TestCase):
    """Walk a three-waypoint route from start to goal."""

    def test_walk_route(self):
        waypoints = [
            waypoint("A", 0.000, kind=WaypointKind.TURN_LEFT),
            waypoint("B", 0.001, kind=WaypointKind.BUS_STOP, audio_cue="stop1.mp3"),
            waypoint("C", 0.002, kind=WaypointKind.GOAL),
        ]
        nav = RouteNavigator(make_routes(waypoints))

        cues = []
        targets = []
        lat = -0.0003
        while lat <= 0.0021:
            for event in nav.update(at(lat)):
                cues.append(event)
                nav.mark_cue_finished()
            targets.append(nav.target_index)
            lat += STEP / 2

        self.assertEqual(targets[0], 1)
        self.assertEqual(targets, sorted(targets))
        self.assertLessEqual(max(targets), 2)
        self.assertEqual(targets[-1], 2)
        self.assertTrue(nav.is_complete)

        self.assertEqual(len(cues), 1)
        self.assertEqual(cues[0].waypoint_id, "B")
        self.assertEqual(cues[0].cue_ids, ("getOff.mp3", "stop1.mp3"))


if __name__ == '__main__':
    unittest.main()
