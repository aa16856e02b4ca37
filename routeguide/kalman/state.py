"""
Position estimate representation for the Kalman filter.
"""

import numpy as np
from dataclasses import dataclass
from typing import Optional

from ..math.constants import METERS_PER_DEGREE


@dataclass
class KalmanState:
    """
    Smoothed position estimate.

    State vector: [lat, lon, v_lat, v_lon]
    - lat, lon: Position in degrees
    - v_lat, v_lon: Velocity in degrees per second
    """

    lat: float = 0.0
    lon: float = 0.0
    v_lat: float = 0.0
    v_lon: float = 0.0

    # Timestamp of the last prediction/update (ms epoch)
    timestamp: Optional[float] = None

    @property
    def state_vector(self) -> np.ndarray:
        """Get state as numpy vector."""
        return np.array([self.lat, self.lon, self.v_lat, self.v_lon])

    @state_vector.setter
    def state_vector(self, vector: np.ndarray):
        """Set state from numpy vector."""
        if len(vector) != 4:
            raise ValueError("State vector must have 4 elements")

        self.lat = float(vector[0])
        self.lon = float(vector[1])
        self.v_lat = float(vector[2])
        self.v_lon = float(vector[3])

    @property
    def position(self) -> np.ndarray:
        """Get position as [lat, lon] vector."""
        return np.array([self.lat, self.lon])

    @property
    def velocity(self) -> np.ndarray:
        """Get velocity as [v_lat, v_lon] vector."""
        return np.array([self.v_lat, self.v_lon])

    @property
    def approximate_speed(self) -> float:
        """Ground speed in m/s, using a flat-Earth degree conversion."""
        v_north = self.v_lat * METERS_PER_DEGREE
        v_east = self.v_lon * METERS_PER_DEGREE * np.cos(np.radians(self.lat))
        return float(np.hypot(v_north, v_east))

    def copy(self) -> 'KalmanState':
        """Create a copy of the state."""
        return KalmanState(
            lat=self.lat,
            lon=self.lon,
            v_lat=self.v_lat,
            v_lon=self.v_lon,
            timestamp=self.timestamp
        )

    def __str__(self) -> str:
        return (
            f"KalmanState(pos=[{self.lat:.7f}, {self.lon:.7f}], "
            f"vel=[{self.v_lat:.2e}, {self.v_lon:.2e}])"
        )
