import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_attendance_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

TIMEZONE = "Asia/Dhaka"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

# Tests drive the job directly with a fixed "now".
AUTO_CHECKOUT_ENABLED = False
AUTO_CHECKOUT_INTERVAL_MINUTES = 5
AUTO_CHECKOUT_PROCESS_ALL = True
