"""
Motion and measurement models for the position Kalman filter.
"""

import math
import numpy as np
from typing import Optional

from ..math.constants import METERS_PER_DEGREE, DEFAULT_GPS_ACCURACY_M


class ConstantVelocityModel:
    """
    Constant velocity motion model in geographic degrees.

    State: [lat, lon, v_lat, v_lon]
    """

    @staticmethod
    def predict_state(state: np.ndarray, dt: float) -> np.ndarray:
        """
        Predict next state using motion model.

        Args:
            state: Current state [lat, lon, v_lat, v_lon]
            dt: Time step in seconds

        Returns:
            Predicted state vector
        """
        lat, lon, v_lat, v_lon = state
        return np.array([lat + v_lat * dt, lon + v_lon * dt, v_lat, v_lon])

    @staticmethod
    def transition_matrix(dt: float) -> np.ndarray:
        """
        State transition matrix F for a time step.

        Args:
            dt: Time step in seconds

        Returns:
            4x4 transition matrix
        """
        F = np.eye(4)
        F[0, 2] = dt  # dlat/dv_lat
        F[1, 3] = dt  # dlon/dv_lon
        return F

    @staticmethod
    def process_noise_matrix(q: float, dt: float) -> np.ndarray:
        """
        Discretized white-noise-acceleration process noise.

        Args:
            q: Process noise scalar
            dt: Time step in seconds

        Returns:
            4x4 process noise covariance matrix Q
        """
        dt2 = dt * dt
        dt3 = dt2 * dt / 2
        dt4 = dt2 * dt2 / 4

        return q * np.array([
            [dt4, 0.0, dt3, 0.0],
            [0.0, dt4, 0.0, dt3],
            [dt3, 0.0, dt2, 0.0],
            [0.0, dt3, 0.0, dt2],
        ])


class PositionMeasurementModel:
    """
    GPS measurement model - directly observes position.
    """

    @staticmethod
    def measurement(state: np.ndarray) -> np.ndarray:
        """Expected GPS measurement [lat, lon]."""
        return np.array([state[0], state[1]])

    @staticmethod
    def observation_matrix() -> np.ndarray:
        """2x4 observation matrix H."""
        H = np.zeros((2, 4))
        H[0, 0] = 1.0
        H[1, 1] = 1.0
        return H

    @staticmethod
    def effective_accuracy(accuracy_m: Optional[float]) -> float:
        """GPS accuracy to use, falling back to the default when unknown."""
        if accuracy_m is None or not math.isfinite(accuracy_m) or accuracy_m <= 0:
            return DEFAULT_GPS_ACCURACY_M
        return float(accuracy_m)

    @staticmethod
    def measurement_noise_matrix(accuracy_m: Optional[float]) -> np.ndarray:
        """
        Measurement noise covariance R from GPS accuracy.

        Accuracy in meters is converted to an approximate degree variance
        (1 degree ~ 111 km).

        Args:
            accuracy_m: Reported horizontal accuracy in meters, or None

        Returns:
            2x2 measurement noise covariance matrix
        """
        accuracy = PositionMeasurementModel.effective_accuracy(accuracy_m)
        r = (accuracy / METERS_PER_DEGREE) ** 2
        return np.diag([r, r])
