"""
Event-queue runtime around the sensor fusion core.

GPS fixes, orientation samples, timer ticks and user actions arrive on
different threads. They are posted to one queue and applied in arrival
order by a single consumer thread.
"""

import logging
import queue
import threading
import time
from typing import Callable, Iterable, List, Optional

from ..fusion import SensorFusion, FusionSnapshot
from ..navigation import CueEvent
from ..sensors import GPSProcessor
from ..math.constants import PREDICT_INTERVAL_MS
from .events import (
    FixEvent,
    LocationErrorEvent,
    OrientationEvent,
    TickEvent,
    CalibrateEvent,
    ToggleDirectionEvent,
)
from .sources import SensorSource

logger = logging.getLogger(__name__)

_STOP = object()


def log_cue(event: CueEvent):
    """Default cue sink: playback is external, so just report it."""
    logger.info("Cue for %s: %s", event.waypoint_id, " -> ".join(event.cue_ids))


class NavigationSession:
    """
    Owns the fusion core, its input sources and the prediction timer.
    """

    def __init__(self, fusion: SensorFusion,
                 sources: Iterable[SensorSource] = (),
                 predict_interval_ms: float = PREDICT_INTERVAL_MS,
                 cue_sink: Optional[Callable[[CueEvent], None]] = None,
                 auto_finish_cues: bool = True,
                 recorder=None):
        """
        Initialize the session.

        Args:
            fusion: Sensor fusion core
            sources: Input sources started and stopped with the session
            predict_interval_ms: Prediction tick period
            cue_sink: Called with each cue event on the consumer thread
            auto_finish_cues: Treat a cue as finished when the sink returns;
                otherwise the sink must call ``mark_cue_finished``
            recorder: Optional TrackRecorder
        """
        self.fusion = fusion
        self.sources: List[SensorSource] = list(sources)
        self.predict_interval_ms = predict_interval_ms
        self.cue_sink = cue_sink or log_cue
        self.auto_finish_cues = auto_finish_cues
        self.recorder = recorder
        self.gps_processor = GPSProcessor()

        self.events: "queue.Queue" = queue.Queue()
        self.running = False
        self.consumer_thread: Optional[threading.Thread] = None
        self.timer_thread: Optional[threading.Thread] = None
        self._timer_stop = threading.Event()

        # Statistics
        self.processed_count = 0
        self.failed_count = 0
        self.cue_events: List[CueEvent] = []

    def post(self, event):
        """Queue an event for the consumer thread."""
        self.events.put(event)

    def start(self):
        """Start the consumer, the prediction timer and all sources."""
        if self.running:
            logger.warning("Session already running")
            return

        self.running = True
        self._timer_stop.clear()

        self.consumer_thread = threading.Thread(target=self._consume_loop, name="fusion-consumer", daemon=True)
        self.consumer_thread.start()

        if self.predict_interval_ms > 0:
            self.timer_thread = threading.Thread(target=self._timer_loop, name="predict-timer", daemon=True)
            self.timer_thread.start()

        for source in self.sources:
            source.start(self)

        logger.info("Navigation session started (%d sources, tick %.0f ms)",
                    len(self.sources), self.predict_interval_ms)

    def stop(self):
        """Stop sources and timer, drain the queue and join the consumer."""
        if not self.running:
            return

        for source in self.sources:
            source.stop()

        self._timer_stop.set()
        if self.timer_thread and self.timer_thread.is_alive():
            self.timer_thread.join(timeout=2.0)

        self.events.put(_STOP)
        if self.consumer_thread and self.consumer_thread.is_alive():
            self.consumer_thread.join(timeout=5.0)

        self.running = False
        if self.recorder is not None:
            self.recorder.close()

        logger.info("Navigation session stopped (%d events, %d failed)",
                    self.processed_count, self.failed_count)

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()
        return False

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until every source has finished and queued events are applied.

        Returns:
            False if the timeout expired first
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        for source in self.sources:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            if not source.finished.wait(remaining):
                return False

        # queue.join() has no timeout; poll instead
        while self.events.unfinished_tasks:
            if deadline is not None and time.monotonic() >= deadline:
                return False
            time.sleep(0.01)
        return True

    def sources_finished(self) -> bool:
        return all(source.is_finished() for source in self.sources)

    # User actions
    def calibrate_heading(self, road_bearing: float):
        self.post(CalibrateEvent(road_bearing))

    def toggle_route_direction(self):
        self.post(ToggleDirectionEvent())

    def mark_cue_finished(self):
        self.fusion.mark_cue_finished()

    def snapshot(self) -> FusionSnapshot:
        return self.fusion.snapshot()

    def _timer_loop(self):
        """Post a prediction tick every interval."""
        interval = self.predict_interval_ms / 1000.0
        while not self._timer_stop.wait(interval):
            self.post(TickEvent(time.time() * 1000.0))

    def _consume_loop(self):
        """Apply queued events in arrival order."""
        while True:
            event = self.events.get()
            try:
                if event is _STOP:
                    return
                self._dispatch(event)
                self.processed_count += 1
            except Exception:
                self.failed_count += 1
                logger.exception("Failed to process %s", type(event).__name__)
            finally:
                self.events.task_done()

    def _dispatch(self, event):
        cues: List[CueEvent] = []

        if isinstance(event, FixEvent):
            fix = self.gps_processor.process_event(event.location)
            if fix is None:
                return
            cues = self.fusion.on_gps_fix(fix)
            self._record("fix")

        elif isinstance(event, TickEvent):
            cues = self.fusion.tick(event.timestamp)

        elif isinstance(event, OrientationEvent):
            self.fusion.on_orientation(event.sample)

        elif isinstance(event, LocationErrorEvent):
            self.fusion.on_gps_error(event.error)
            self._record("error")

        elif isinstance(event, CalibrateEvent):
            self.fusion.calibrate_heading(event.road_bearing)

        elif isinstance(event, ToggleDirectionEvent):
            self.fusion.toggle_route_direction()

        else:
            raise TypeError(f"Unknown event type: {type(event).__name__}")

        for cue in cues:
            self.cue_events.append(cue)
            try:
                self.cue_sink(cue)
            finally:
                if self.auto_finish_cues:
                    self.fusion.mark_cue_finished()

    def _record(self, kind: str):
        if self.recorder is not None:
            self.recorder.record(kind, self.fusion.snapshot())

    def get_statistics(self) -> dict:
        return {
            'processed_events': self.processed_count,
            'failed_events': self.failed_count,
            'queued_events': self.events.qsize(),
            'cue_events': len(self.cue_events),
            'gps': self.gps_processor.get_statistics(),
            'fusion': self.fusion.get_statistics(),
        }
