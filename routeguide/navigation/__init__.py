"""
Route data and route progress tracking.
"""

from .route_data import RouteSet, load_routes, routes_from_dict
from .progress import (
    RouteNavigator,
    NavigationPhase,
    NavigationSummary,
    WaypointInfo,
    CueEvent,
)

__all__ = [
    "RouteSet",
    "load_routes",
    "routes_from_dict",
    "RouteNavigator",
    "NavigationPhase",
    "NavigationSummary",
    "WaypointInfo",
    "CueEvent",
]
