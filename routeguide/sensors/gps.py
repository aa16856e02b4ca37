"""
GPS fix processing for the phone location service.
"""

import logging
import math
import time
from typing import Optional, List, Dict, Any

from ..errors import LocationError, LocationUnavailableError, LocationTimeoutError
from ..models import Coordinate

logger = logging.getLogger(__name__)

# Geolocation error codes reported by the platform location service
ERROR_NOT_SUPPORTED = 0
ERROR_PERMISSION_DENIED = 1
ERROR_POSITION_UNAVAILABLE = 2
ERROR_TIMEOUT = 3


def classify_location_error(code: int, message: str = "") -> LocationError:
    """
    Map a platform geolocation error code to a LocationError.

    Timeouts are transient; every other code means no fixes will arrive.
    """
    if code == ERROR_TIMEOUT:
        return LocationTimeoutError(message or "Location request timed out")
    if code == ERROR_PERMISSION_DENIED:
        return LocationUnavailableError(message or "Location permission denied")
    if code == ERROR_NOT_SUPPORTED:
        return LocationUnavailableError(message or "Geolocation not supported")
    return LocationUnavailableError(message or "Position unavailable")


class GPSProcessor:
    """
    Turns raw location events into validated Coordinates.

    Events are dicts with ``lat``/``lon`` (or ``latitude``/``longitude``) and
    optional ``accuracy``, ``speed``, ``course`` (or ``heading``),
    ``altitude`` and ``timestamp`` (ms). Speed and course are passed through
    as reported; when the platform omits them they stay None.
    """

    def __init__(self, max_history_length: int = 10):
        # Statistics
        self.fix_count = 0
        self.rejected_count = 0

        # Quality tracking
        self.position_history: List[Coordinate] = []
        self.max_history_length = max_history_length

    @staticmethod
    def _optional_float(value) -> Optional[float]:
        if value is None:
            return None
        try:
            value = float(value)
        except (TypeError, ValueError):
            return None
        return value if math.isfinite(value) else None

    def process_event(self, event: Dict[str, Any]) -> Optional[Coordinate]:
        """
        Process a single location event.

        Args:
            event: Raw location event

        Returns:
            Coordinate if the event holds a valid fix, None otherwise
        """
        lat = self._optional_float(event.get("lat", event.get("latitude")))
        lon = self._optional_float(event.get("lon", event.get("longitude")))

        if lat is None or lon is None or not (-90 <= lat <= 90 and -180 <= lon <= 180):
            self.rejected_count += 1
            logger.debug("Rejected location event %r", event)
            return None

        timestamp = self._optional_float(event.get("timestamp"))
        if timestamp is None:
            timestamp = time.time() * 1000.0

        speed = self._optional_float(event.get("speed"))
        course = self._optional_float(event.get("course", event.get("heading")))

        fix = Coordinate(
            lat=lat,
            lon=lon,
            altitude=self._optional_float(event.get("altitude")),
            accuracy=self._optional_float(event.get("accuracy")),
            speed=speed,
            course=course,
            timestamp=timestamp,
        )

        self.position_history.append(fix)
        if len(self.position_history) > self.max_history_length:
            self.position_history.pop(0)

        self.fix_count += 1
        return fix

    def is_stationary(self, speed_threshold: float = 0.5) -> bool:
        """
        Check if the user appears to be standing still.

        Args:
            speed_threshold: Speed threshold in m/s

        Returns:
            True if recent fixes show no movement
        """
        recent_speeds = [p.speed for p in self.position_history[-3:]
                         if p.speed is not None]

        if not recent_speeds:
            return True

        return sum(recent_speeds) / len(recent_speeds) < speed_threshold

    def get_statistics(self) -> dict:
        """Get processor statistics."""
        return {
            'fix_count': self.fix_count,
            'rejected_count': self.rejected_count,
            'position_history_length': len(self.position_history),
            'is_stationary': self.is_stationary(),
        }
