import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "staff_attendance"),
}

TENANT_ID = os.getenv("TENANT_ID")

ORG_TIMEZONE = os.getenv("ORG_TIMEZONE", "America/New_York")
MONTHLY_PAGE_SIZE = int(os.getenv("MONTHLY_PAGE_SIZE", "1000"))
AUTOSAVE_DELAY_MS = int(os.getenv("AUTOSAVE_DELAY_MS", "600"))

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
