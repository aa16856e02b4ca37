"""
Raw absolute heading providers for phone orientation samples.

Platforms report compass heading differently: some expose an absolute
heading field directly, others only a rotation around the vertical axis
(alpha) that runs counter-clockwise. The provider is chosen once at
startup.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ..errors import ConfigError
from ..math.utils import normalize_360


@dataclass
class OrientationSample:
    """One orientation event."""

    # Absolute compass heading in degrees, when the platform provides one
    heading: Optional[float] = None

    # Rotation around the vertical axis in degrees (counter-clockwise)
    alpha: Optional[float] = None

    # Front-back tilt in degrees, 0 = flat, 90 = upright
    pitch: Optional[float] = None

    # Screen rotation in degrees (0, 90, 180, 270)
    screen_rotation: float = 0.0

    timestamp: Optional[float] = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = time.time() * 1000.0

    @classmethod
    def from_dict(cls, d: dict) -> "OrientationSample":
        return cls(
            heading=d.get("heading", d.get("webkitCompassHeading")),
            alpha=d.get("alpha"),
            pitch=d.get("pitch", d.get("beta")),
            screen_rotation=d.get("screen_rotation", d.get("screenRotation", 0.0)) or 0.0,
            timestamp=d.get("timestamp"),
        )


class HeadingProvider(ABC):
    """Extracts a raw absolute compass heading from an orientation sample."""

    name = "base"

    @abstractmethod
    def raw_heading(self, sample: OrientationSample) -> Optional[float]:
        """Heading in degrees [0, 360), or None if the sample has none."""


class AbsoluteHeadingProvider(HeadingProvider):
    """Platform reports an absolute compass heading field."""

    name = "absolute"

    def raw_heading(self, sample: OrientationSample) -> Optional[float]:
        if sample.heading is None:
            return None
        return normalize_360(sample.heading)


class AlphaRotationHeadingProvider(HeadingProvider):
    """Platform reports counter-clockwise alpha rotation; heading = 360 - alpha."""

    name = "alpha"

    def raw_heading(self, sample: OrientationSample) -> Optional[float]:
        if sample.alpha is None:
            return None
        return normalize_360(360.0 - sample.alpha)


_PROVIDERS = {
    "absolute": AbsoluteHeadingProvider,
    "ios": AbsoluteHeadingProvider,
    "alpha": AlphaRotationHeadingProvider,
    "android": AlphaRotationHeadingProvider,
}


def select_heading_provider(name: str) -> HeadingProvider:
    """
    Create the heading provider for a platform.

    Args:
        name: 'absolute' / 'ios' or 'alpha' / 'android'

    Returns:
        HeadingProvider instance
    """
    try:
        return _PROVIDERS[name.lower()]()
    except KeyError:
        raise ConfigError(f"Unknown heading provider: {name!r}") from None
