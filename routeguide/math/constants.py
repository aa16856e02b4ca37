"""
Mathematical and physical constants for route guidance.
"""

import math

# Earth parameters
EARTH_RADIUS_M = 6371000.0   # Mean Earth radius in meters
METERS_PER_DEGREE = 111000.0 # Approximate meters per degree of latitude

# Conversion factors
DEG_TO_RAD = math.pi / 180.0
RAD_TO_DEG = 180.0 / math.pi

# Position filter parameters
DEFAULT_PROCESS_NOISE = 1e-8         # Process noise scalar
INITIAL_POSITION_VARIANCE = 1e-6     # deg²
INITIAL_VELOCITY_VARIANCE = 1e-4     # (deg/s)²
MAX_PREDICT_INTERVAL_S = 5.0         # Larger gaps are treated as clock jumps
DEFAULT_GPS_ACCURACY_M = 10.0        # Used when a fix carries no accuracy
SINGULAR_DET_THRESHOLD = 1e-20       # |det(S)| below this is degenerate
FALLBACK_INVERSE_SCALE = 1e10        # Identity-scaled inverse for degenerate S

# Heading parameters
HEADING_SMOOTHING_FACTOR = 0.1       # 0.05 (smooth, slow) .. 0.2 (responsive)
HEADING_DEADZONE_DEG = 2.0
COURSE_BLEND_MIN_SPEED = 0.5         # m/s
COURSE_BLEND_FULL_SPEED = 3.0        # m/s at which the weight would reach 1
COURSE_BLEND_MAX_WEIGHT = 0.8

# Navigation parameters
ARRIVAL_RADIUS_M = 20.0
CUE_MIN_DISTANCE_M = 10.0
CUE_MAX_DISTANCE_M = 50.0
TURN_TRIGGER_RADIUS_M = 45.0
TURN_LOOKAHEAD_M = 15.0
APPROACH_CUE_ID = "getOff.mp3"
UPCOMING_WAYPOINT_COUNT = 5

# Runtime parameters
PREDICT_INTERVAL_MS = 50             # 20 Hz prediction tick
