import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_engine_test"),
}

DEBUG = False
TESTING = True

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

WEEKEND_DAYS = (5, 6)

DEFAULT_SHIFT_START = "09:00"
DEFAULT_SHIFT_END = "18:00"

PAYROLL_PRESENT_DAYS_MODE = os.getenv("PAYROLL_PRESENT_DAYS_MODE", "rows")
PAYROLL_UNPAID_LEAVE_MODE = os.getenv("PAYROLL_UNPAID_LEAVE_MODE", "requests")

NOTIFICATIONS_ENABLED = False
