"""
Pedestrian bus-route guidance from phone sensors.

This package provides:
- Great-circle geodesy utilities
- A constant-velocity Kalman filter for GPS position smoothing
- Compass heading smoothing and calibration
- A route progress state machine with turn look-ahead and stop announcements
- A sensor fusion facade and an event-queue runtime
"""

__version__ = "1.0.0"

from .errors import (
    RouteGuideError,
    ConfigError,
    RouteDataError,
    LocationError,
    LocationUnavailableError,
    LocationTimeoutError,
    OrientationUnavailableError,
    FilterNotInitializedError,
)
from .models import Coordinate, Waypoint, WaypointKind, Route, RouteDirection
from .kalman import PositionKalmanFilter, KalmanState
from .sensors import HeadingEstimator, OrientationSample, select_heading_provider
from .navigation import RouteNavigator, RouteSet, load_routes, CueEvent, NavigationSummary
from .fusion import SensorFusion, FusionSnapshot

__all__ = [
    "RouteGuideError",
    "ConfigError",
    "RouteDataError",
    "LocationError",
    "LocationUnavailableError",
    "LocationTimeoutError",
    "OrientationUnavailableError",
    "FilterNotInitializedError",
    "Coordinate",
    "Waypoint",
    "WaypointKind",
    "Route",
    "RouteDirection",
    "PositionKalmanFilter",
    "KalmanState",
    "HeadingEstimator",
    "OrientationSample",
    "select_heading_provider",
    "RouteNavigator",
    "RouteSet",
    "load_routes",
    "CueEvent",
    "NavigationSummary",
    "SensorFusion",
    "FusionSnapshot",
]
