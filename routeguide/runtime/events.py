"""
Events delivered to the navigation session queue.
"""

from dataclasses import dataclass
from typing import Any, Dict

from ..errors import LocationError
from ..sensors import OrientationSample


@dataclass(frozen=True)
class FixEvent:
    """Raw location event from the location service."""
    location: Dict[str, Any]


@dataclass(frozen=True)
class LocationErrorEvent:
    error: LocationError


@dataclass(frozen=True)
class OrientationEvent:
    sample: OrientationSample


@dataclass(frozen=True)
class TickEvent:
    """Prediction timer tick."""
    timestamp: float


@dataclass(frozen=True)
class CalibrateEvent:
    road_bearing: float


@dataclass(frozen=True)
class ToggleDirectionEvent:
    pass
