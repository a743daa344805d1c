import os

# Loaded from environment variables so deployments can override them without code changes
DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite://./storefront.sqlite3")

# Calendar days and months are bucketed in this timezone; the store itself keeps UTC
REPORT_TIMEZONE: str = os.getenv("REPORT_TIMEZONE", "UTC")

REPORT_MIN_YEAR: int = int(os.getenv("REPORT_MIN_YEAR", "1970"))
REPORT_MAX_YEAR: int = int(os.getenv("REPORT_MAX_YEAR", "2100"))

# A purchase counts as "returning" when it happens more than this many days after signup
RETENTION_WINDOW_DAYS: int = int(os.getenv("RETENTION_WINDOW_DAYS", "30"))

DEFAULT_TOP_LIMIT: int = int(os.getenv("DEFAULT_TOP_LIMIT", "5"))
MAX_TOP_LIMIT: int = int(os.getenv("MAX_TOP_LIMIT", "100"))
RECENT_TRANSACTIONS_LIMIT: int = int(os.getenv("RECENT_TRANSACTIONS_LIMIT", "5"))

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
