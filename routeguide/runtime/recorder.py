"""
CSV track recorder for offline inspection of a navigation session.
"""

import csv
import logging
import time
from typing import Optional

from ..fusion import FusionSnapshot

logger = logging.getLogger(__name__)

FIELDS = [
    "time_ms", "event",
    "raw_lat", "raw_lon", "accuracy",
    "smoothed_lat", "smoothed_lon",
    "heading", "direction", "target_index", "distance_to_target",
]


class TrackRecorder:
    """Writes one CSV row per recorded snapshot."""

    def __init__(self, path: str):
        self.path = path
        self.file = open(path, "w", newline="")
        self.writer = csv.writer(self.file)
        self.writer.writerow(FIELDS)
        self.row_count = 0

    @staticmethod
    def _fmt(value: Optional[float], digits: int = 7) -> str:
        return "" if value is None else f"{value:.{digits}f}"

    def record(self, event: str, snapshot: FusionSnapshot):
        if self.file is None:
            return

        raw = snapshot.raw_location
        smoothed = snapshot.smoothed_location
        nav = snapshot.navigation

        self.writer.writerow([
            f"{time.time() * 1000.0:.0f}",
            event,
            self._fmt(raw.lat if raw else None),
            self._fmt(raw.lon if raw else None),
            self._fmt(raw.accuracy if raw else None, 1),
            self._fmt(smoothed.lat if smoothed else None),
            self._fmt(smoothed.lon if smoothed else None),
            self._fmt(snapshot.heading, 1),
            nav.direction.value if nav else "",
            nav.target_index if nav else "",
            self._fmt(nav.distance_to_target if nav else None, 1),
        ])
        self.file.flush()
        self.row_count += 1

    def close(self):
        if self.file is not None:
            self.file.close()
            self.file = None
            logger.info("Track saved to %s (%d rows)", self.path, self.row_count)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
