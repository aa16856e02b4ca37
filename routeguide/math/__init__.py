"""
Mathematical utilities for geodesy and heading calculations.
"""

from .utils import (
    normalize_360,
    normalize_180,
    angle_difference,
    circular_lerp,
    circular_blend,
    relative_bearing,
)
from .geodesy import (
    haversine_distance,
    initial_bearing,
    distance,
    bearing,
    project,
    nearest_waypoint_index,
)
from .constants import *

__all__ = [
    "normalize_360",
    "normalize_180",
    "angle_difference",
    "circular_lerp",
    "circular_blend",
    "relative_bearing",
    "haversine_distance",
    "initial_bearing",
    "distance",
    "bearing",
    "project",
    "nearest_waypoint_index",
]
