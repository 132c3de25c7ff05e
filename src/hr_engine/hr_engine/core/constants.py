"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

DEFAULT_SHIFT_START = time(9, 0)
DEFAULT_SHIFT_END = time(18, 0)

# Monday=0 ... Sunday=6
DEFAULT_WEEKEND_DAYS = (5, 6)

DEFAULT_HISTORY_LIMIT = 60
DEFAULT_LIST_LIMIT = 500

MYSQL_DUPLICATE_ENTRY = 1062

HALF_DAY_WEIGHT = 0.5
