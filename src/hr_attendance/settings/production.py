import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_attendance"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

TIMEZONE = os.getenv("TIMEZONE", "Asia/Dhaka")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

AUTO_CHECKOUT_ENABLED = bool(int(os.getenv("AUTO_CHECKOUT_ENABLED", "1")))
AUTO_CHECKOUT_INTERVAL_MINUTES = int(os.getenv("AUTO_CHECKOUT_INTERVAL_MINUTES", "5"))
AUTO_CHECKOUT_PROCESS_ALL = bool(int(os.getenv("AUTO_CHECKOUT_PROCESS_ALL", "1")))
