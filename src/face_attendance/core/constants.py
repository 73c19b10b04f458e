"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time
from decimal import Decimal

EMBEDDING_DIMENSION = 128

MATCH_THRESHOLD = 0.65
MATCH_TIMEOUT_SECONDS = 2.0
POOR_TIER_CEILING = 0.5
GOOD_TIER_FLOOR = 0.8

QUALITY_PASS_SCORE = 80
QUALITY_MAX_SCORE = 100

# Built-in policy used when an organization has none configured.
DEFAULT_SHIFT_START = time(8, 0)
DEFAULT_SHIFT_END = time(17, 0)
DEFAULT_LATE_THRESHOLD_MINUTES = 15
DEFAULT_EARLY_LEAVE_THRESHOLD_MINUTES = 15
DEFAULT_BREAK_TOTAL_MINUTES = 60
DEFAULT_BREAK_MAX_SPLITS = 3

DEFAULT_HOURLY_RATE = Decimal("125000")
MASS_LATE_RATIO = 0.3

DEFAULT_ORG_ID = 1
APPEND_RETRY_LIMIT = 3
