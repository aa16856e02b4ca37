"""
Angle utility functions for heading and bearing calculations.

All angles are in degrees, 0 = north, increasing clockwise.
"""

import math

from .constants import DEG_TO_RAD, RAD_TO_DEG


def degrees_to_radians(degrees):
    """Convert degrees to radians."""
    return degrees * DEG_TO_RAD


def radians_to_degrees(radians):
    """Convert radians to degrees."""
    return radians * RAD_TO_DEG


def normalize_360(angle):
    """
    Normalize angle to [0, 360) range.

    Args:
        angle (float): Angle in degrees

    Returns:
        float: Normalized angle in [0, 360)
    """
    result = angle % 360.0
    # -1e-15 % 360 rounds up to 360.0
    if result >= 360.0:
        result = 0.0
    return result


def normalize_180(angle):
    """
    Normalize angle to [-180, 180) range.

    Args:
        angle (float): Angle in degrees

    Returns:
        float: Normalized angle in [-180, 180)
    """
    return normalize_360(angle + 180.0) - 180.0


def angle_difference(from_angle, to_angle):
    """Shortest signed angular distance from ``from_angle`` to ``to_angle``."""
    return normalize_180(to_angle - from_angle)


def circular_lerp(current, target, factor):
    """
    Interpolate between two headings on the unit circle.

    Both headings are decomposed into (cos, sin) components, each component
    is moved toward the target by ``factor`` and the result is recomposed
    with atan2. 359° -> 1° therefore moves through 0°, not through 180°.

    Args:
        current (float): Current heading in degrees
        target (float): New heading sample in degrees
        factor (float): Smoothing factor in [0, 1]

    Returns:
        float: Interpolated heading in [0, 360)
    """
    current_rad = degrees_to_radians(current)
    target_rad = degrees_to_radians(target)

    cx, cy = math.cos(current_rad), math.sin(current_rad)
    tx, ty = math.cos(target_rad), math.sin(target_rad)

    nx = cx + (tx - cx) * factor
    ny = cy + (ty - cy) * factor

    # Opposite headings with factor 0.5 cancel out; keep the current heading
    if abs(nx) < 1e-12 and abs(ny) < 1e-12:
        return normalize_360(current)

    return normalize_360(radians_to_degrees(math.atan2(ny, nx)))


def circular_blend(base, target, weight):
    """Move ``base`` toward ``target`` along the shortest arc by ``weight``."""
    return normalize_360(base + weight * angle_difference(base, target))


def relative_bearing(target_bearing, heading):
    """Bearing of a target relative to the current heading, in [-180, 180)."""
    return normalize_180(target_bearing - heading)
