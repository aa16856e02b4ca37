"""
Compass heading smoothing and calibration.
"""

import logging
from typing import Optional

from ..errors import OrientationUnavailableError
from ..math.constants import *
from ..math.utils import (
    normalize_360,
    normalize_180,
    angle_difference,
    circular_lerp,
    circular_blend,
)

logger = logging.getLogger(__name__)


class HeadingEstimator:
    """
    Smooths raw compass samples into a stable heading.

    Heading is periodic, so samples are smoothed as unit vectors rather
    than with a linear average. The reported heading only moves when the
    change exceeds a small deadzone, which hides compass micro-jitter.
    A user calibration offset is applied on top of the smoothed value.
    """

    def __init__(self,
                 smoothing_factor: float = HEADING_SMOOTHING_FACTOR,
                 deadzone_deg: float = HEADING_DEADZONE_DEG):
        """
        Initialize heading estimator.

        Args:
            smoothing_factor: Low-pass factor in (0, 1]; higher is more responsive
            deadzone_deg: Minimum change of the reported heading
        """
        if not 0 < smoothing_factor <= 1:
            raise ValueError("smoothing_factor must be in (0, 1]")

        self.smoothing_factor = smoothing_factor
        self.deadzone_deg = deadzone_deg

        # Smoothed heading before calibration
        self.raw_smoothed: Optional[float] = None
        # Last corrected raw sample
        self.last_raw: Optional[float] = None
        # Calibration offset in degrees [-180, 180)
        self.offset = 0.0
        # Heading reported to consumers
        self.reported: Optional[float] = None

        # Statistics
        self.sample_count = 0
        self.suppressed_count = 0

    @property
    def is_available(self) -> bool:
        return self.raw_smoothed is not None

    @property
    def raw_heading(self) -> Optional[float]:
        """Smoothed heading without the calibration offset."""
        return self.raw_smoothed

    @property
    def smoothed_heading(self) -> Optional[float]:
        """Calibrated smoothed heading, before the deadzone."""
        if self.raw_smoothed is None:
            return None
        return normalize_360(self.raw_smoothed + self.offset)

    @property
    def heading(self) -> Optional[float]:
        """Heading reported to consumers."""
        return self.reported

    def process(self, raw_heading: float, screen_rotation: float = 0.0) -> float:
        """
        Feed one compass sample.

        Args:
            raw_heading: Absolute compass heading in degrees
            screen_rotation: Screen rotation correction in degrees

        Returns:
            Reported heading in degrees [0, 360)
        """
        corrected = normalize_360(raw_heading + screen_rotation)
        self.last_raw = corrected

        if self.raw_smoothed is None:
            # First reading: initialize directly
            raw_smoothed = corrected
        else:
            raw_smoothed = circular_lerp(self.raw_smoothed, corrected, self.smoothing_factor)

        calibrated = normalize_360(raw_smoothed + self.offset)

        self.raw_smoothed = raw_smoothed
        if self.reported is None or abs(angle_difference(self.reported, calibrated)) >= self.deadzone_deg:
            self.reported = calibrated
        else:
            self.suppressed_count += 1

        self.sample_count += 1
        return self.reported

    def calibrate(self, road_bearing: float) -> float:
        """
        Align the heading with a known road direction.

        The user faces along the road; the offset between the road bearing
        and the current smoothed heading is applied from now on. Calling it
        again with the same bearing yields the same offset.

        Args:
            road_bearing: Bearing of the road segment in degrees

        Returns:
            The new calibration offset in degrees
        """
        if self.raw_smoothed is None:
            raise OrientationUnavailableError("Cannot calibrate before any compass sample")

        self.offset = normalize_180(road_bearing - self.raw_smoothed)
        self.reported = normalize_360(self.raw_smoothed + self.offset)

        logger.info("Heading calibrated to road bearing %.1f° (offset %+.1f°)", road_bearing, self.offset)
        return self.offset

    def composite_heading(self, speed: Optional[float], course: Optional[float]) -> Optional[float]:
        """
        Blend the compass heading toward GPS course over ground.

        Above walking speed the GPS course is more reliable than the
        compass, so it gets a weight of min(0.8, speed / 3).

        Args:
            speed: Ground speed in m/s
            course: GPS course over ground in degrees

        Returns:
            Composite heading in degrees, or None without any heading source
        """
        moving = speed is not None and course is not None and speed >= COURSE_BLEND_MIN_SPEED

        if self.reported is None:
            return normalize_360(course) if moving else None

        if not moving:
            return self.reported

        weight = min(COURSE_BLEND_MAX_WEIGHT, speed / COURSE_BLEND_FULL_SPEED)
        return circular_blend(self.reported, course, weight)

    def get_statistics(self) -> dict:
        """Get estimator statistics."""
        return {
            'sample_count': self.sample_count,
            'suppressed_count': self.suppressed_count,
            'offset': self.offset,
            'heading': self.reported,
        }
