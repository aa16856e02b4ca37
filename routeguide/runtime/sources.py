"""
Input sources feeding the navigation session.

A source is an explicitly owned handle: ``start(sink)`` subscribes it and
``stop()`` releases it. Sources post events to the sink from their own
thread; the sink serializes them.
"""

import json
import logging
import threading
import time
from typing import Optional, List

from ..errors import (
    RouteGuideError,
    LocationUnavailableError,
    LocationTimeoutError,
)
from ..sensors import OrientationSample
from .events import FixEvent, LocationErrorEvent, OrientationEvent

logger = logging.getLogger(__name__)


class SensorSource:
    """Base class for event sources with a start/stop lifecycle."""

    def __init__(self):
        self.sink = None
        self.running = False
        self.finished = threading.Event()

    def start(self, sink):
        """
        Start delivering events.

        Args:
            sink: Object with a ``post(event)`` method
        """
        if self.running:
            return
        self.sink = sink
        self.running = True
        self.finished.clear()
        self._start()

    def stop(self):
        """Stop delivering events and release resources."""
        if not self.running:
            return
        self.running = False
        self._stop()
        self.finished.set()

    def is_finished(self) -> bool:
        """Check if the source has no more events to deliver"""
        return self.finished.is_set()

    def _start(self):
        raise NotImplementedError

    def _stop(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()
        return False


class TraceReplaySource(SensorSource):
    """
    Replays a recorded sensor trace.

    Trace format::

        {"trace": [
            {"elapsed": 0.0,
             "location": {"lat": ..., "lon": ..., "accuracy": ...} | null,
             "orientation": {"heading": ..., "pitch": ...},
             "error": "unavailable" | "timeout"},
            ...
        ]}

    A null location is delivered as a location timeout. Fixes are stamped
    with the replay clock so they line up with the prediction timer.
    """

    def __init__(self, trace: List[dict], speed: float = 1.0):
        super().__init__()
        if speed <= 0:
            raise ValueError("Replay speed must be positive")
        self.trace = trace
        self.speed = speed
        self.index = 0
        self.thread: Optional[threading.Thread] = None
        self._wakeup = threading.Event()

    @classmethod
    def from_file(cls, path: str, speed: float = 1.0) -> "TraceReplaySource":
        """Load a trace from a JSON file."""
        try:
            with open(path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise RouteGuideError(f"Cannot load trace {path}: {e}") from e

        trace = data.get("trace") if isinstance(data, dict) else None
        if not isinstance(trace, list):
            raise RouteGuideError(f"Trace file {path} has no 'trace' list")

        logger.info("Loaded trace from %s (%d entries)", path, len(trace))
        return cls(trace, speed)

    def _start(self):
        self._wakeup.clear()
        self.thread = threading.Thread(target=self._replay_loop, name="trace-replay", daemon=True)
        self.thread.start()

    def _stop(self):
        self._wakeup.set()
        if self.thread and self.thread.is_alive() and self.thread is not threading.current_thread():
            self.thread.join(timeout=2.0)

    def _replay_loop(self):
        """Deliver trace entries, sleeping for the recorded gaps."""
        previous_elapsed = None

        while self.running and self.index < len(self.trace):
            entry = self.trace[self.index]
            elapsed = float(entry.get("elapsed", 0.0))

            if previous_elapsed is not None:
                delay = max(0.0, elapsed - previous_elapsed) / self.speed
                # Interruptible sleep
                if self._wakeup.wait(delay):
                    break
            previous_elapsed = elapsed

            self._deliver(entry)
            self.index += 1

        self.running = False
        self.finished.set()

    def _deliver(self, entry: dict):
        now_ms = time.time() * 1000.0

        error = entry.get("error")
        if error == "unavailable":
            self.sink.post(LocationErrorEvent(LocationUnavailableError("Location unavailable (trace)")))
        elif error == "timeout" or ("location" in entry and entry["location"] is None):
            self.sink.post(LocationErrorEvent(LocationTimeoutError("No fix (trace)")))
        elif entry.get("location") is not None:
            location = dict(entry["location"])
            location["timestamp"] = now_ms
            self.sink.post(FixEvent(location))

        orientation = entry.get("orientation")
        if orientation is not None:
            sample = OrientationSample.from_dict(orientation)
            sample.timestamp = now_ms
            self.sink.post(OrientationEvent(sample))
