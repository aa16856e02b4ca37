"""
Sensor data processing modules.
"""

from .gps import GPSProcessor, classify_location_error
from .orientation import (
    OrientationSample,
    HeadingProvider,
    AbsoluteHeadingProvider,
    AlphaRotationHeadingProvider,
    select_heading_provider,
)
from .heading import HeadingEstimator

__all__ = [
    "GPSProcessor",
    "classify_location_error",
    "OrientationSample",
    "HeadingProvider",
    "AbsoluteHeadingProvider",
    "AlphaRotationHeadingProvider",
    "select_heading_provider",
    "HeadingEstimator",
]
