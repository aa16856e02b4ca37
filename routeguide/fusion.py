"""
Sensor fusion facade.

Composes the position filter, the heading estimator and the route
navigator into one update cycle. GPS fixes, orientation samples and the
prediction tick all go through here; a single lock serializes them so
callbacks delivered on different threads cannot interleave.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional, List, TYPE_CHECKING

from .errors import (
    LocationError,
    LocationUnavailableError,
)
from .kalman import PositionKalmanFilter
from .math.constants import *
from .models import Coordinate
from .navigation import RouteNavigator, RouteSet, NavigationSummary, CueEvent
from .sensors import (
    HeadingEstimator,
    HeadingProvider,
    OrientationSample,
    AbsoluteHeadingProvider,
    select_heading_provider,
)

if TYPE_CHECKING:
    from .runtime.config import Config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FusionSnapshot:
    """Everything the UI and audio collaborators consume, at one instant."""
    smoothed_location: Optional[Coordinate]
    raw_location: Optional[Coordinate]
    heading: Optional[float]
    composite_heading: Optional[float]
    pitch: float
    accuracy: float
    speed: float
    loaded: bool
    error: Optional[LocationError]
    navigation: Optional[NavigationSummary]


class SensorFusion:
    """
    Single owner of filter, heading and navigation state.
    """

    def __init__(self, routes: RouteSet,
                 heading_provider: Optional[HeadingProvider] = None,
                 process_noise: float = DEFAULT_PROCESS_NOISE,
                 smoothing_factor: float = HEADING_SMOOTHING_FACTOR,
                 deadzone_deg: float = HEADING_DEADZONE_DEG,
                 **navigator_options):
        """
        Initialize the fusion core.

        Args:
            routes: Outbound and inbound routes
            heading_provider: Raw heading provider for this platform
            process_noise: Position filter process noise scalar
            smoothing_factor: Heading low-pass factor
            deadzone_deg: Heading deadzone
            **navigator_options: Passed through to RouteNavigator
        """
        self.position_filter = PositionKalmanFilter(process_noise)
        self.heading_estimator = HeadingEstimator(smoothing_factor, deadzone_deg)
        self.navigator = RouteNavigator(routes, **navigator_options)
        self.heading_provider = heading_provider or AbsoluteHeadingProvider()

        self.raw_location: Optional[Coordinate] = None
        self.smoothed_location: Optional[Coordinate] = None
        self.pitch = 0.0
        self.error: Optional[LocationError] = None

        self._lock = threading.RLock()

        # Statistics
        self.fix_count = 0
        self.tick_count = 0
        self.ignored_orientation_count = 0
        self.timeout_count = 0

    @classmethod
    def from_config(cls, routes: RouteSet, config: "Config") -> "SensorFusion":
        """Build the fusion core from a runtime configuration."""
        return cls(
            routes,
            heading_provider=select_heading_provider(config.get("heading.provider", "absolute")),
            process_noise=config.get("kalman.process_noise", DEFAULT_PROCESS_NOISE),
            smoothing_factor=config.get("heading.smoothing_factor", HEADING_SMOOTHING_FACTOR),
            deadzone_deg=config.get("heading.deadzone_deg", HEADING_DEADZONE_DEG),
            arrival_radius=config.get("navigation.arrival_radius_m", ARRIVAL_RADIUS_M),
            cue_min_distance=config.get("navigation.cue_min_distance_m", CUE_MIN_DISTANCE_M),
            cue_max_distance=config.get("navigation.cue_max_distance_m", CUE_MAX_DISTANCE_M),
            turn_trigger_radius=config.get("navigation.turn_trigger_radius_m", TURN_TRIGGER_RADIUS_M),
            turn_lookahead=config.get("navigation.turn_lookahead_m", TURN_LOOKAHEAD_M),
            approach_cue_id=config.get("navigation.approach_cue_id", APPROACH_CUE_ID),
            upcoming_count=config.get("navigation.upcoming_count", UPCOMING_WAYPOINT_COUNT),
        )

    @property
    def loaded(self) -> bool:
        """True once a fix or a fatal location error has been received."""
        return self.raw_location is not None or self.error is not None

    def _refresh_smoothed(self, template: Coordinate) -> Coordinate:
        state = self.position_filter.get_state()
        return template.with_position(state.lat, state.lon)

    def on_gps_fix(self, fix: Coordinate) -> List[CueEvent]:
        """
        Process a GPS fix: predict to the fix time, then correct.

        Returns:
            Cue events triggered by the new position
        """
        with self._lock:
            if isinstance(self.error, LocationUnavailableError):
                logger.debug("Ignoring fix after fatal location error")
                return []

            timestamp = fix.timestamp
            kf = self.position_filter
            if not kf.is_initialized:
                kf.update(fix.lat, fix.lon, fix.accuracy, timestamp)
            else:
                if timestamp is not None:
                    kf.predict(timestamp)
                kf.update(fix.lat, fix.lon, fix.accuracy)

            self.raw_location = fix
            self.smoothed_location = self._refresh_smoothed(fix)
            self.fix_count += 1

            return self.navigator.update(self.smoothed_location)

    def on_gps_error(self, error: LocationError):
        """Record a location-service failure."""
        with self._lock:
            if isinstance(error, LocationUnavailableError):
                logger.error("Location unavailable: %s", error)
                self.error = error
            else:
                # Keep using the last predicted state
                self.timeout_count += 1
                logger.warning("Location timeout: %s", error)

    def on_orientation(self, sample: OrientationSample) -> Optional[float]:
        """
        Process an orientation sample.

        Returns:
            The reported heading, or None if no heading is available yet
        """
        with self._lock:
            if sample.pitch is not None:
                self.pitch = sample.pitch

            raw = self.heading_provider.raw_heading(sample)
            if raw is None:
                self.ignored_orientation_count += 1
                return self.heading_estimator.heading

            return self.heading_estimator.process(raw, sample.screen_rotation or 0.0)

    def tick(self, timestamp: float) -> List[CueEvent]:
        """
        Prediction step between fixes.

        Args:
            timestamp: Current time in milliseconds

        Returns:
            Cue events triggered by the extrapolated position
        """
        with self._lock:
            if not self.position_filter.is_initialized or isinstance(self.error, LocationUnavailableError):
                return []

            if not self.position_filter.predict(timestamp):
                return []

            self.smoothed_location = self._refresh_smoothed(self.smoothed_location)
            self.tick_count += 1
            return self.navigator.update(self.smoothed_location)

    def calibrate_heading(self, road_bearing: float) -> float:
        """User action: 'I am facing along this road now'."""
        with self._lock:
            return self.heading_estimator.calibrate(road_bearing)

    def toggle_route_direction(self) -> bool:
        """
        User action: switch between outbound and inbound.

        Returns:
            False if there is no position to re-target from yet
        """
        with self._lock:
            if self.smoothed_location is None:
                logger.warning("Cannot toggle route direction before the first fix")
                return False
            self.navigator.toggle_direction(self.smoothed_location)
            return True

    def mark_cue_finished(self):
        with self._lock:
            self.navigator.mark_cue_finished()

    def composite_heading(self) -> Optional[float]:
        with self._lock:
            fix = self.raw_location
            if fix is None:
                return self.heading_estimator.heading
            return self.heading_estimator.composite_heading(fix.speed, fix.course)

    def snapshot(self) -> FusionSnapshot:
        """Current outputs for the UI/audio collaborators."""
        with self._lock:
            heading = self.heading_estimator.heading
            navigation = None
            if self.smoothed_location is not None and self.navigator.is_tracking:
                navigation = self.navigator.summary(self.smoothed_location, heading)

            raw = self.raw_location
            return FusionSnapshot(
                smoothed_location=self.smoothed_location,
                raw_location=raw,
                heading=heading,
                composite_heading=self.composite_heading(),
                pitch=self.pitch,
                accuracy=(raw.accuracy or 0.0) if raw else 0.0,
                speed=(raw.speed or 0.0) if raw else 0.0,
                loaded=self.loaded,
                error=self.error,
                navigation=navigation,
            )

    def get_statistics(self) -> dict:
        with self._lock:
            return {
                'fixes': self.fix_count,
                'ticks': self.tick_count,
                'timeouts': self.timeout_count,
                'ignored_orientation_samples': self.ignored_orientation_count,
                'filter': self.position_filter.get_statistics(),
                'heading': self.heading_estimator.get_statistics(),
                'navigation': self.navigator.get_statistics(),
            }
