"""
Runtime around the fusion core: configuration, input sources, event loop.
"""

from .config import Config
from .logging_setup import configure_logging
from .sources import SensorSource, TraceReplaySource
from .session import NavigationSession
from .recorder import TrackRecorder

__all__ = [
    "Config",
    "configure_logging",
    "SensorSource",
    "TraceReplaySource",
    "NavigationSession",
    "TrackRecorder",
]
