import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_engine_db"),
}

DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also insert the default leave types (EL/SL/CL) on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "1")))

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOG_FORMAT = os.getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")

# Monday=0 ... Sunday=6
WEEKEND_DAYS = tuple(int(d) for d in os.getenv("WEEKEND_DAYS", "5,6").split(",") if d.strip())

# Window filled in when a manager marks a day PRESENT without times
DEFAULT_SHIFT_START = os.getenv("DEFAULT_SHIFT_START", "09:00")
DEFAULT_SHIFT_END = os.getenv("DEFAULT_SHIFT_END", "18:00")

# rows: one attendance row = one present day; weighted: HALF_DAY counts 0.5
PAYROLL_PRESENT_DAYS_MODE = os.getenv("PAYROLL_PRESENT_DAYS_MODE", "rows")
PAYROLL_UNPAID_LEAVE_MODE = os.getenv("PAYROLL_UNPAID_LEAVE_MODE", "requests")

NOTIFICATIONS_ENABLED = bool(int(os.getenv("NOTIFICATIONS_ENABLED", "1")))
