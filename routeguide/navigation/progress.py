"""
Route progress state machine.

Tracks which waypoint of the active route the user is heading for,
advances through the route as waypoints are reached, decides when a stop
announcement should play and computes the bearing the direction arrow
should point along.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, List, Tuple, Set

from ..math.constants import *
from ..math.geodesy import distance, bearing, project, nearest_waypoint_index
from ..math.utils import relative_bearing
from ..models import Route, RouteDirection, Waypoint
from .route_data import RouteSet

logger = logging.getLogger(__name__)


class NavigationPhase(Enum):
    IDLE = "idle"
    TRACKING = "tracking"


@dataclass(frozen=True)
class CueEvent:
    """Audio cues to play, in order, for one stop approach."""
    waypoint_id: str
    cue_ids: Tuple[str, ...]
    distance: float


@dataclass(frozen=True)
class WaypointInfo:
    """A waypoint annotated with its live distance from the user."""
    index: int
    waypoint: Waypoint
    distance: float
    stops_until: int = 0


@dataclass(frozen=True)
class NavigationSummary:
    direction: RouteDirection
    target_index: int
    target: Waypoint
    distance_to_target: float
    next_turn: Optional[WaypointInfo]
    next_bus_stop: Optional[WaypointInfo]
    upcoming_waypoints: Tuple[WaypointInfo, ...]
    navigation_bearing: Optional[float]
    relative_bearing: Optional[float]
    progress_percent: float
    is_complete: bool


class RouteNavigator:
    """
    Owns the active route and the current target waypoint.

    The target index only moves forward while on one route. Reaching the
    last waypoint stops the advancement; there is no terminal state.
    """

    def __init__(self, routes: RouteSet,
                 arrival_radius: float = ARRIVAL_RADIUS_M,
                 cue_min_distance: float = CUE_MIN_DISTANCE_M,
                 cue_max_distance: float = CUE_MAX_DISTANCE_M,
                 turn_trigger_radius: float = TURN_TRIGGER_RADIUS_M,
                 turn_lookahead: float = TURN_LOOKAHEAD_M,
                 approach_cue_id: Optional[str] = APPROACH_CUE_ID,
                 upcoming_count: int = UPCOMING_WAYPOINT_COUNT):
        """
        Initialize the navigator.

        Args:
            routes: Outbound and inbound routes
            arrival_radius: Distance in meters at which a waypoint counts as reached
            cue_min_distance, cue_max_distance: Open distance band for stop announcements
            turn_trigger_radius: Distance to a turn at which the arrow starts pointing through it
            turn_lookahead: Distance past the turn vertex the arrow points at
            approach_cue_id: Cue played before every stop-specific cue, or None
            upcoming_count: Number of waypoints listed in the summary
        """
        self.routes = routes
        self.arrival_radius = arrival_radius
        self.cue_min_distance = cue_min_distance
        self.cue_max_distance = cue_max_distance
        self.turn_trigger_radius = turn_trigger_radius
        self.turn_lookahead = turn_lookahead
        self.approach_cue_id = approach_cue_id
        self.upcoming_count = upcoming_count

        self.phase = NavigationPhase.IDLE
        self.direction = RouteDirection.OUTBOUND
        self.target_index = 0

        # Cue playback guard
        self.fired_waypoints: Set[str] = set()
        self.last_fired_cue: Optional[str] = None
        self.cue_playing = False

    @property
    def active_route(self) -> Route:
        return self.routes.get(self.direction)

    @property
    def is_outbound(self) -> bool:
        return self.direction is RouteDirection.OUTBOUND

    @property
    def is_tracking(self) -> bool:
        return self.phase is NavigationPhase.TRACKING

    @property
    def target(self) -> Waypoint:
        return self.active_route[self.target_index]

    def _initial_target(self, route: Route, position) -> int:
        # The user is assumed to be approaching the waypoint after the nearest one
        nearest = nearest_waypoint_index(position, route)
        return min(nearest + 1, route.last_index)

    def start(self, position):
        """
        Select the route whose first waypoint is closer and set the target.

        Ties favor the outbound route.
        """
        to_outbound = distance(position, self.routes.outbound[0])
        to_inbound = distance(position, self.routes.inbound[0])
        direction = RouteDirection.INBOUND if to_inbound < to_outbound else RouteDirection.OUTBOUND

        target_index = self._initial_target(self.routes.get(direction), position)

        self.direction = direction
        self.target_index = target_index
        self.phase = NavigationPhase.TRACKING
        logger.info("Navigation started on %s route, target %d (%s)",
                    direction.value, target_index, self.target.id)

    def toggle_direction(self, position):
        """Switch to the other route and re-target from the nearest waypoint."""
        if self.is_tracking:
            direction = self.direction.opposite
        else:
            self.start(position)
            direction = self.direction.opposite

        target_index = self._initial_target(self.routes.get(direction), position)

        self.direction = direction
        self.target_index = target_index
        self.phase = NavigationPhase.TRACKING
        self.fired_waypoints = set()
        self.last_fired_cue = None
        logger.info("Route direction toggled to %s, target %d", direction.value, target_index)

    def update(self, position) -> List[CueEvent]:
        """
        Process a new position.

        Fires at most one stop announcement and advances the target by at
        most one waypoint.

        Returns:
            Cue events to play
        """
        if not self.is_tracking:
            self.start(position)

        route = self.active_route
        target = route[self.target_index]
        dist = distance(position, target)

        events = []
        cue = self._check_cue(target, dist)
        if cue is not None:
            events.append(cue)

        if dist < self.arrival_radius and self.target_index < route.last_index:
            self.target_index += 1
            logger.info("Reached %s, next target %d (%s)",
                        target.id, self.target_index, route[self.target_index].id)

        return events

    def _check_cue(self, target: Waypoint, dist: float) -> Optional[CueEvent]:
        if not (self.cue_min_distance < dist < self.cue_max_distance):
            return None
        if not target.kind.is_stop or not target.audio_cue:
            return None
        if self.cue_playing or target.id in self.fired_waypoints:
            return None

        cue_ids = (target.audio_cue,)
        if self.approach_cue_id:
            cue_ids = (self.approach_cue_id, target.audio_cue)

        self.fired_waypoints.add(target.id)
        self.last_fired_cue = target.audio_cue
        self.cue_playing = True
        logger.info("Announcing stop %s at %.0fm: %s", target.id, dist, ", ".join(cue_ids))
        return CueEvent(waypoint_id=target.id, cue_ids=cue_ids, distance=dist)

    def mark_cue_finished(self):
        """Called by the audio collaborator when playback has ended or failed."""
        self.cue_playing = False

    def next_turn(self, position) -> Optional[WaypointInfo]:
        """First turn waypoint at or after the target."""
        route = self.active_route
        for i in range(self.target_index, len(route)):
            if route[i].kind.is_turn:
                return WaypointInfo(index=i, waypoint=route[i], distance=distance(position, route[i]))
        return None

    def next_bus_stop(self, position) -> Optional[WaypointInfo]:
        """First stop at or after the target, with the number of stops before it."""
        route = self.active_route
        for i in range(self.target_index, len(route)):
            if route[i].kind.is_stop:
                stops_until = sum(1 for j in range(self.target_index, i) if route[j].kind.is_stop)
                return WaypointInfo(index=i, waypoint=route[i],
                                    distance=distance(position, route[i]),
                                    stops_until=stops_until)
        return None

    def upcoming_waypoints(self, position) -> Tuple[WaypointInfo, ...]:
        route = self.active_route
        end = min(len(route), self.target_index + self.upcoming_count)
        return tuple(
            WaypointInfo(index=i, waypoint=route[i], distance=distance(position, route[i]))
            for i in range(self.target_index, end)
        )

    def lookahead_bearing(self, position, turn_index: int) -> float:
        """
        Bearing from the user to a point just past a turn.

        The point lies ``turn_lookahead`` meters beyond the turn vertex in
        the direction of the waypoint after the turn. Pointing at the vertex
        itself makes the arrow swing around at the corner.
        """
        route = self.active_route
        turn = route[turn_index]
        if turn_index + 1 >= len(route):
            return bearing(position, turn)

        exit_waypoint = route[turn_index + 1]
        exit_bearing = bearing(turn, exit_waypoint)
        lookahead_point = project(turn, exit_bearing, self.turn_lookahead)
        return bearing(position, lookahead_point)

    def navigation_bearing(self, position, device_heading: Optional[float]) -> Optional[float]:
        """
        Bearing the direction arrow should point along.

        Near a turn the arrow points through it; otherwise it points straight
        ahead, which is the device heading.
        """
        route = self.active_route
        target = route[self.target_index]

        if target.kind.is_turn:
            if distance(position, target) < self.turn_trigger_radius:
                return self.lookahead_bearing(position, self.target_index)
        else:
            # Only the nearest upcoming turn is considered
            for i in range(self.target_index + 1, len(route)):
                if route[i].kind.is_turn:
                    if distance(position, route[i]) < self.turn_trigger_radius:
                        return self.lookahead_bearing(position, i)
                    break

        return device_heading

    @property
    def progress_percent(self) -> float:
        route = self.active_route
        if len(route) == 1:
            return 100.0
        return min(100.0, self.target_index / route.last_index * 100.0)

    @property
    def is_complete(self) -> bool:
        return self.target_index == self.active_route.last_index

    def summary(self, position, device_heading: Optional[float] = None) -> NavigationSummary:
        """Navigation summary for the UI collaborators."""
        nav_bearing = self.navigation_bearing(position, device_heading)
        rel = None
        if nav_bearing is not None and device_heading is not None:
            rel = relative_bearing(nav_bearing, device_heading)

        return NavigationSummary(
            direction=self.direction,
            target_index=self.target_index,
            target=self.target,
            distance_to_target=distance(position, self.target),
            next_turn=self.next_turn(position),
            next_bus_stop=self.next_bus_stop(position),
            upcoming_waypoints=self.upcoming_waypoints(position),
            navigation_bearing=nav_bearing,
            relative_bearing=rel,
            progress_percent=self.progress_percent,
            is_complete=self.is_complete,
        )

    def get_statistics(self) -> dict:
        return {
            'phase': self.phase.value,
            'direction': self.direction.value,
            'target_index': self.target_index,
            'route_length': len(self.active_route),
            'fired_cues': len(self.fired_waypoints),
            'cue_playing': self.cue_playing,
        }
