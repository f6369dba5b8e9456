import os


def get_settings_module() -> str:
    # APP_ENV selects the settings module; anything unrecognised means development.
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "hr_attendance.settings.production"

    if env in {"test", "testing"}:
        return "hr_attendance.settings.testing"

    return "hr_attendance.settings.development"
