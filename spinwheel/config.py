"""Environment-driven settings for SpinWheel."""

import os

LOG_LEVEL = os.getenv("SPINWHEEL_LOG_LEVEL", "WARNING")

# Frames per second for the real-time frame clock
FRAME_RATE = int(os.getenv("SPINWHEEL_FRAME_RATE", "60"))

# Default number of Monte Carlo draws for a fairness audit
AUDIT_ITERATIONS = int(os.getenv("SPINWHEEL_AUDIT_ITERATIONS", "10000"))

MIN_WEIGHT = 1
MAX_WEIGHT = 10
