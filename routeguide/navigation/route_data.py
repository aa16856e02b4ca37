"""
Loading of the static outbound/inbound route data.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from ..errors import RouteDataError
from ..models import Route, RouteDirection, Waypoint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteSet:
    """The two coexisting routes of one bus line."""
    outbound: Route
    inbound: Route

    def get(self, direction: RouteDirection) -> Route:
        if direction is RouteDirection.OUTBOUND:
            return self.outbound
        return self.inbound


def routes_from_dict(data: dict) -> RouteSet:
    """
    Build both routes from route data.

    Format::

        {"outbound": [{"id": ..., "lat": ..., "lon": ..., "type": ...}, ...],
         "inbound": [...]}
    """
    if not isinstance(data, dict):
        raise RouteDataError("Route data must be an object with outbound and inbound lists")

    routes = {}
    for direction in RouteDirection:
        entries = data.get(direction.value)
        if not isinstance(entries, list) or not entries:
            raise RouteDataError(f"Route data needs a non-empty {direction.value!r} list")
        waypoints = [Waypoint.from_dict(entry) for entry in entries]
        routes[direction] = Route.from_waypoints(direction, waypoints)

    return RouteSet(outbound=routes[RouteDirection.OUTBOUND],
                    inbound=routes[RouteDirection.INBOUND])


def load_routes(path: Union[str, Path]) -> RouteSet:
    """Load route data from a JSON file."""
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except OSError as e:
        raise RouteDataError(f"Cannot read route file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise RouteDataError(f"Route file {path} is not valid JSON: {e}") from e

    route_set = routes_from_dict(data)
    logger.info("Loaded routes from %s (%d outbound, %d inbound waypoints)",
                path, len(route_set.outbound), len(route_set.inbound))
    return route_set
