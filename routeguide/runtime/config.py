"""
Configuration manager for the route guidance runtime.
"""

import copy
import json
import logging
import os
from typing import Dict, Any, Optional

from ..errors import ConfigError
from ..math.constants import *

logger = logging.getLogger(__name__)


class Config:
    """Configuration manager for the route guidance system."""

    DEFAULT_CONFIG = {
        # Static route data
        "routes_file": "route.json",

        # Position filter
        "kalman": {
            "process_noise": DEFAULT_PROCESS_NOISE,
        },

        # Heading estimation
        "heading": {
            "provider": "absolute",
            "smoothing_factor": HEADING_SMOOTHING_FACTOR,
            "deadzone_deg": HEADING_DEADZONE_DEG,
        },

        # Route progress
        "navigation": {
            "arrival_radius_m": ARRIVAL_RADIUS_M,
            "cue_min_distance_m": CUE_MIN_DISTANCE_M,
            "cue_max_distance_m": CUE_MAX_DISTANCE_M,
            "turn_trigger_radius_m": TURN_TRIGGER_RADIUS_M,
            "turn_lookahead_m": TURN_LOOKAHEAD_M,
            "approach_cue_id": APPROACH_CUE_ID,
            "upcoming_count": UPCOMING_WAYPOINT_COUNT,
        },

        # Event loop
        "runtime": {
            "predict_interval_ms": PREDICT_INTERVAL_MS,
            "output_rate_hz": 1.0,
            "replay_speed": 1.0,
        },

        # Logging
        "logging": {
            "level": "INFO",
            "file": None,
        },
    }

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_file: Path to a JSON configuration file; defaults are used
                when it is None or does not exist
        """
        self.config_file = config_file
        self.config = copy.deepcopy(self.DEFAULT_CONFIG)

        if config_file and os.path.exists(config_file):
            self.load_config()
        elif config_file:
            logger.info("Config file %s not found, using defaults", config_file)

    def load_config(self):
        """
        Load configuration from file.

        Raises:
            ConfigError: If the file cannot be read or is not a JSON object
        """
        try:
            with open(self.config_file, 'r') as f:
                file_config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Failed to load config {self.config_file}: {e}") from e

        if not isinstance(file_config, dict):
            raise ConfigError(f"Config file {self.config_file} must contain a JSON object")

        # Merge with defaults (file config overrides defaults)
        self._merge_config(self.config, file_config)
        logger.info("Configuration loaded from %s", self.config_file)

    def save_config(self, path: Optional[str] = None):
        """
        Save current configuration to file.

        Args:
            path: Destination, defaults to the file the config was loaded from
        """
        path = path or self.config_file
        if not path:
            raise ConfigError("No config file path to save to")

        try:
            with open(path, 'w') as f:
                json.dump(self.config, f, indent=2)
        except OSError as e:
            raise ConfigError(f"Failed to save config {path}: {e}") from e

        logger.info("Configuration saved to %s", path)

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]):
        """Recursively merge configuration dictionaries."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_config(base[key], value)
            else:
                base[key] = value

    def get(self, key: str, default=None):
        """Get configuration value with optional default."""
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any):
        """Set configuration value."""
        keys = key.split('.')
        config = self.config

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    # Property accessors for common configuration values
    @property
    def routes_file(self) -> str:
        return self.config["routes_file"]

    @property
    def heading_provider(self) -> str:
        return self.config["heading"]["provider"]

    @property
    def predict_interval_ms(self) -> float:
        return self.config["runtime"]["predict_interval_ms"]

    @property
    def output_rate_hz(self) -> float:
        return self.config["runtime"]["output_rate_hz"]

    @property
    def replay_speed(self) -> float:
        return self.config["runtime"]["replay_speed"]

    @property
    def log_level(self) -> str:
        return self.config["logging"]["level"]

    @property
    def log_file(self) -> Optional[str]:
        return self.config["logging"]["file"]
