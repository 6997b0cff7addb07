import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "staff_attendance"),
}

# Tenant used when the session does not carry one.
TENANT_ID = os.getenv("TENANT_ID", "default")

ORG_TIMEZONE = os.getenv("ORG_TIMEZONE", "America/New_York")
MONTHLY_PAGE_SIZE = int(os.getenv("MONTHLY_PAGE_SIZE", "1000"))
AUTOSAVE_DELAY_MS = int(os.getenv("AUTOSAVE_DELAY_MS", "600"))

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed the standard shifts on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "1")))
