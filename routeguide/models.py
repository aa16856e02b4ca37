"""
Data classes for positions, waypoints and routes.
"""

import math
from dataclasses import dataclass, asdict, replace
from enum import Enum
from typing import Optional, Tuple, Iterator, Sequence

from .errors import RouteDataError


@dataclass(frozen=True)
class Coordinate:
    """
    A geographic position, produced by the GPS source or by the filter.

    lat/lon are in degrees. Optional metadata:
    - accuracy: horizontal accuracy in meters
    - speed: ground speed in m/s
    - course: course over ground in degrees (0 = north, clockwise)
    - timestamp: milliseconds since the epoch
    """

    lat: float
    lon: float
    altitude: Optional[float] = None
    accuracy: Optional[float] = None
    speed: Optional[float] = None
    course: Optional[float] = None
    timestamp: Optional[float] = None

    def with_position(self, lat: float, lon: float) -> "Coordinate":
        """Copy of this coordinate moved to a new position."""
        return replace(self, lat=lat, lon=lon)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "Coordinate":
        return cls(
            lat=float(d["lat"]),
            lon=float(d["lon"]),
            altitude=d.get("altitude"),
            accuracy=d.get("accuracy"),
            speed=d.get("speed"),
            course=d.get("course", d.get("headingGPS")),
            timestamp=d.get("timestamp"),
        )


class WaypointKind(str, Enum):
    BUS_STOP = "bus_stop"
    TURN_LEFT = "turn_left"
    TURN_RIGHT = "turn_right"
    TURN_STRAIGHT = "turn_straight"
    GOAL = "goal"
    PLAIN = "plain"

    @property
    def is_turn(self) -> bool:
        return self in (WaypointKind.TURN_LEFT, WaypointKind.TURN_RIGHT,
                        WaypointKind.TURN_STRAIGHT)

    @property
    def is_stop(self) -> bool:
        return self is WaypointKind.BUS_STOP

    @property
    def turn_direction(self) -> Optional[str]:
        """'left', 'right' or 'straight' for turns, None otherwise."""
        if not self.is_turn:
            return None
        return self.value.split("_", 1)[1]


@dataclass(frozen=True)
class Waypoint:
    """A routed point of interest in a fixed traversal order"""
    id: str
    lat: float
    lon: float
    kind: WaypointKind = WaypointKind.PLAIN
    name: Optional[str] = None
    audio_cue: Optional[str] = None

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(lat=self.lat, lon=self.lon)

    @classmethod
    def from_dict(cls, d: dict) -> "Waypoint":
        """Build a waypoint from one entry of the static route data."""
        try:
            waypoint_id = str(d["id"])
            lat = float(d["lat"])
            lon = float(d["lon"])
        except (KeyError, TypeError, ValueError) as e:
            raise RouteDataError(f"Invalid waypoint entry {d!r}: {e}") from e

        if not (math.isfinite(lat) and math.isfinite(lon)
                and -90 <= lat <= 90 and -180 <= lon <= 180):
            raise RouteDataError(f"Waypoint {waypoint_id} has invalid coordinates ({lat}, {lon})")

        kind_name = d.get("kind", d.get("type", WaypointKind.PLAIN.value))
        try:
            kind = WaypointKind(kind_name)
        except ValueError:
            raise RouteDataError(f"Waypoint {waypoint_id} has unknown kind {kind_name!r}") from None

        return cls(
            id=waypoint_id,
            lat=lat,
            lon=lon,
            kind=kind,
            name=d.get("name"),
            audio_cue=d.get("audio_cue", d.get("audioFile")),
        )

    def to_dict(self) -> dict:
        d = asdict(self)
        d["kind"] = self.kind.value
        return d


class RouteDirection(str, Enum):
    OUTBOUND = "outbound"
    INBOUND = "inbound"

    @property
    def opposite(self) -> "RouteDirection":
        if self is RouteDirection.OUTBOUND:
            return RouteDirection.INBOUND
        return RouteDirection.OUTBOUND


@dataclass(frozen=True)
class Route:
    """An ordered, non-empty sequence of waypoints for one direction"""
    direction: RouteDirection
    waypoints: Tuple[Waypoint, ...]

    def __post_init__(self):
        if not self.waypoints:
            raise RouteDataError(f"Route {self.direction.value} has no waypoints")
        seen = set()
        for wp in self.waypoints:
            if wp.id in seen:
                raise RouteDataError(f"Duplicate waypoint id {wp.id!r} in {self.direction.value} route")
            seen.add(wp.id)

    @classmethod
    def from_waypoints(cls, direction: RouteDirection, waypoints: Sequence[Waypoint]) -> "Route":
        return cls(direction=direction, waypoints=tuple(waypoints))

    def __len__(self) -> int:
        return len(self.waypoints)

    def __getitem__(self, index: int) -> Waypoint:
        return self.waypoints[index]

    def __iter__(self) -> Iterator[Waypoint]:
        return iter(self.waypoints)

    @property
    def last_index(self) -> int:
        return len(self.waypoints) - 1
