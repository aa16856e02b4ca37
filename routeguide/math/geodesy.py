"""
Great-circle geodesy on a spherical Earth.

Inputs and outputs are in degrees; trigonometry is done in radians. Points
are any objects with ``lat`` and ``lon`` attributes (Coordinate, Waypoint).
"""

import math
from typing import Sequence

from .constants import EARTH_RADIUS_M
from .utils import degrees_to_radians, radians_to_degrees, normalize_360
from ..models import Coordinate


def haversine_distance(lat1, lon1, lat2, lon2):
    """
    Calculate the great circle distance between two points on Earth.

    Args:
        lat1, lon1: Latitude and longitude of first point (degrees)
        lat2, lon2: Latitude and longitude of second point (degrees)

    Returns:
        float: Distance in meters
    """
    phi1 = degrees_to_radians(lat1)
    phi2 = degrees_to_radians(lat2)
    delta_phi = degrees_to_radians(lat2 - lat1)
    delta_lambda = degrees_to_radians(lon2 - lon1)

    a = (math.sin(delta_phi / 2) ** 2 +
         math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


def initial_bearing(lat1, lon1, lat2, lon2):
    """
    Calculate the initial bearing between two GPS coordinates.

    Args:
        lat1, lon1: Starting latitude and longitude (degrees)
        lat2, lon2: Ending latitude and longitude (degrees)

    Returns:
        float: Bearing in degrees [0, 360), 0 = north
    """
    phi1 = degrees_to_radians(lat1)
    phi2 = degrees_to_radians(lat2)
    delta_lambda = degrees_to_radians(lon2 - lon1)

    y = math.sin(delta_lambda) * math.cos(phi2)
    x = (math.cos(phi1) * math.sin(phi2) -
         math.sin(phi1) * math.cos(phi2) * math.cos(delta_lambda))

    return normalize_360(radians_to_degrees(math.atan2(y, x)))


def distance(a, b) -> float:
    """Distance in meters between two points."""
    return haversine_distance(a.lat, a.lon, b.lat, b.lon)


def bearing(origin, destination) -> float:
    """Initial bearing in degrees from ``origin`` toward ``destination``."""
    return initial_bearing(origin.lat, origin.lon, destination.lat, destination.lon)


def project(origin, bearing_deg: float, distance_m: float) -> Coordinate:
    """
    Destination point from ``origin`` along a bearing for a distance.

    Used to place look-ahead points beyond turn waypoints.

    Args:
        origin: Start point (degrees)
        bearing_deg: Initial bearing in degrees
        distance_m: Distance to travel in meters

    Returns:
        Coordinate: Destination, longitude normalized to [-180, 180]
    """
    delta = distance_m / EARTH_RADIUS_M  # angular distance
    theta = degrees_to_radians(bearing_deg)
    phi1 = degrees_to_radians(origin.lat)
    lambda1 = degrees_to_radians(origin.lon)

    phi2 = math.asin(
        math.sin(phi1) * math.cos(delta) +
        math.cos(phi1) * math.sin(delta) * math.cos(theta)
    )
    lambda2 = lambda1 + math.atan2(
        math.sin(theta) * math.sin(delta) * math.cos(phi1),
        math.cos(delta) - math.sin(phi1) * math.sin(phi2)
    )

    lon = (radians_to_degrees(lambda2) + 540.0) % 360.0 - 180.0
    return Coordinate(lat=radians_to_degrees(phi2), lon=lon)


def nearest_waypoint_index(point, waypoints: Sequence) -> int:
    """
    Index of the waypoint closest to ``point``.

    Linear scan; among equidistant waypoints the lowest index wins.

    Raises:
        ValueError: If ``waypoints`` is empty
    """
    if len(waypoints) == 0:
        raise ValueError("nearest_waypoint_index() needs at least one waypoint")

    nearest_index = 0
    min_distance = math.inf
    for index, waypoint in enumerate(waypoints):
        d = distance(point, waypoint)
        if d < min_distance:
            min_distance = d
            nearest_index = index

    return nearest_index
