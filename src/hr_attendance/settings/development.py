import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_attendance"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Organization timezone; every anchor date and shift boundary is computed in it.
TIMEZONE = os.getenv("TIMEZONE", "Asia/Dhaka")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

AUTO_CHECKOUT_ENABLED = bool(int(os.getenv("AUTO_CHECKOUT_ENABLED", "1")))
AUTO_CHECKOUT_INTERVAL_MINUTES = int(os.getenv("AUTO_CHECKOUT_INTERVAL_MINUTES", "5"))
AUTO_CHECKOUT_PROCESS_ALL = bool(int(os.getenv("AUTO_CHECKOUT_PROCESS_ALL", "1")))
