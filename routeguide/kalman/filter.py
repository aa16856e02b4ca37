"""
Constant-velocity Kalman filter for GPS position smoothing.
"""

import logging
import time
import numpy as np
from typing import Optional, Dict, Any

from .state import KalmanState
from .models import ConstantVelocityModel, PositionMeasurementModel
from ..errors import FilterNotInitializedError
from ..math.constants import *

logger = logging.getLogger(__name__)


class PositionKalmanFilter:
    """
    2D Kalman filter smoothing raw GPS fixes into position and velocity.

    The filter is uninitialized until the first fix. ``predict`` propagates
    the estimate between fixes (typically at 20 Hz) and ``update`` corrects
    it with a fix, weighting the fix by its reported accuracy.
    """

    def __init__(self, process_noise: float = DEFAULT_PROCESS_NOISE):
        """
        Initialize the filter.

        Args:
            process_noise: Process noise scalar q
        """
        self.process_noise = process_noise

        # State vector and covariance
        self.state = np.zeros(4)
        self.P = np.eye(4)
        self.initialized = False
        self.last_timestamp = 0.0

        # Models
        self.motion_model = ConstantVelocityModel()
        self.measurement_model = PositionMeasurementModel()

        # Statistics
        self.prediction_count = 0
        self.skipped_prediction_count = 0
        self.update_count = 0
        self.degenerate_update_count = 0

    @property
    def is_initialized(self) -> bool:
        return self.initialized

    def _initialize_covariance(self) -> np.ndarray:
        """Initial covariance: tight position, loose velocity."""
        return np.diag([
            INITIAL_POSITION_VARIANCE,   # lat variance
            INITIAL_POSITION_VARIANCE,   # lon variance
            INITIAL_VELOCITY_VARIANCE,   # v_lat variance
            INITIAL_VELOCITY_VARIANCE    # v_lon variance
        ])

    def init(self, lat: float, lon: float, timestamp: float):
        """
        Initialize the filter with the first GPS observation.

        Args:
            lat, lon: Position in degrees
            timestamp: Fix time in milliseconds
        """
        self.state = np.array([lat, lon, 0.0, 0.0])
        self.P = self._initialize_covariance()
        self.last_timestamp = timestamp
        self.initialized = True
        logger.debug("Position filter initialized at %.7f, %.7f", lat, lon)

    def predict(self, timestamp: float) -> bool:
        """
        Prediction step - advance the estimate to ``timestamp``.

        Gaps of zero, negative or more than five seconds only move the
        reference timestamp forward.

        Args:
            timestamp: Target time in milliseconds

        Returns:
            True if the state was propagated
        """
        if not self.initialized:
            return False

        dt = (timestamp - self.last_timestamp) / 1000.0
        self.last_timestamp = timestamp

        if dt <= 0 or dt > MAX_PREDICT_INTERVAL_S:
            self.skipped_prediction_count += 1
            if dt > MAX_PREDICT_INTERVAL_S:
                logger.debug("Skipping prediction over %.1fs gap", dt)
            return False

        F = self.motion_model.transition_matrix(dt)
        Q = self.motion_model.process_noise_matrix(self.process_noise, dt)

        # P = F * P * F^T + Q
        new_state = self.motion_model.predict_state(self.state, dt)
        new_P = F @ self.P @ F.T + Q

        self.state = new_state
        self.P = new_P
        self.prediction_count += 1
        return True

    def update(self, lat: float, lon: float, accuracy: Optional[float] = None,
               timestamp: Optional[float] = None):
        """
        Update step with a GPS observation.

        Before initialization the fix initializes the filter instead.

        Args:
            lat, lon: Observed position in degrees
            accuracy: Reported accuracy in meters (default 10 m when unknown)
            timestamp: Fix time in milliseconds, used only for initialization
        """
        if not self.initialized:
            self.init(lat, lon, timestamp if timestamp is not None else time.time() * 1000.0)
            return

        z = np.array([lat, lon])

        # Innovation (measurement residual)
        y = z - self.measurement_model.measurement(self.state)

        H = self.measurement_model.observation_matrix()
        R = self.measurement_model.measurement_noise_matrix(accuracy)

        # Innovation covariance
        S = H @ self.P @ H.T + R

        det = np.linalg.det(S)
        if abs(det) < SINGULAR_DET_THRESHOLD:
            S_inv = np.eye(2) * FALLBACK_INVERSE_SCALE
            self.degenerate_update_count += 1
            logger.warning("Near-singular innovation covariance (det=%.3e), using fallback gain", det)
        else:
            S_inv = np.linalg.inv(S)

        K = self.P @ H.T @ S_inv

        new_state = self.state + K @ y
        new_P = (np.eye(4) - K @ H) @ self.P

        if not (np.all(np.isfinite(new_state)) and np.all(np.isfinite(new_P))):
            self.degenerate_update_count += 1
            logger.warning("Discarding non-finite filter update for fix %.7f, %.7f", lat, lon)
            return

        self.state = new_state
        self.P = new_P
        self.update_count += 1

    def get_state(self) -> KalmanState:
        """Get current estimated state."""
        if not self.initialized:
            raise FilterNotInitializedError("Position filter has no fix yet")

        current_state = KalmanState(timestamp=self.last_timestamp)
        current_state.state_vector = self.state
        return current_state

    def get_covariance(self) -> np.ndarray:
        """Copy of the 4x4 state covariance."""
        return self.P.copy()

    def get_position_variance(self) -> np.ndarray:
        """Position variance [lat, lon] in deg²."""
        return np.diag(self.P)[:2].copy()

    def get_position_uncertainty(self) -> float:
        """Approximate 2D position uncertainty in meters."""
        pos_var = self.P[0, 0] + self.P[1, 1]
        return float(np.sqrt(pos_var) * METERS_PER_DEGREE)

    def reset(self):
        """Return to the uninitialized state."""
        self.state = np.zeros(4)
        self.P = np.eye(4)
        self.initialized = False
        self.last_timestamp = 0.0

        # Reset counters
        self.prediction_count = 0
        self.skipped_prediction_count = 0
        self.update_count = 0
        self.degenerate_update_count = 0

    def get_statistics(self) -> Dict[str, Any]:
        """Get filter statistics."""
        return {
            'initialized': self.initialized,
            'predictions': self.prediction_count,
            'skipped_predictions': self.skipped_prediction_count,
            'updates': self.update_count,
            'degenerate_updates': self.degenerate_update_count,
            'position_uncertainty': self.get_position_uncertainty(),
        }
