"""
Kalman filter for GPS position smoothing.
"""

from .filter import PositionKalmanFilter
from .state import KalmanState
from .models import ConstantVelocityModel, PositionMeasurementModel

__all__ = ["PositionKalmanFilter", "KalmanState", "ConstantVelocityModel", "PositionMeasurementModel"]
