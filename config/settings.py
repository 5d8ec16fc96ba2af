"""
Django settings for the task tracker core.

Uses django-environ for 12-factor app environment variable management.
Secrets come from the environment (or a local ``.env`` file); the
defaults below are only good enough for development and tests.
"""

from datetime import timedelta
from pathlib import Path

import environ
import dj_database_url

# ---------------------------------------------------------------------------
# BASE DIRECTORY
# ---------------------------------------------------------------------------
BASE_DIR = Path(__file__).resolve().parent.parent

# ---------------------------------------------------------------------------
# ENVIRONMENT VARIABLES
# ---------------------------------------------------------------------------
env = environ.Env(
    DJANGO_DEBUG=(bool, False),
    JWT_ACCESS_LIFETIME_MINUTES=(int, 30),
    JWT_REFRESH_LIFETIME_DAYS=(int, 7),
    PASSWORD_RESET_TIMEOUT=(int, 3600),
)

# Read .env file if it exists (development only)
env_file = BASE_DIR / ".env"
if env_file.exists():
    environ.Env.read_env(str(env_file))

# ---------------------------------------------------------------------------
# CORE SETTINGS
# ---------------------------------------------------------------------------
SECRET_KEY = env(
    "DJANGO_SECRET_KEY",
    default="django-insecure-development-only-secret-key-change-me",
)
DEBUG = env("DJANGO_DEBUG")

# ---------------------------------------------------------------------------
# APPLICATION DEFINITION
# ---------------------------------------------------------------------------
INSTALLED_APPS = [
    # Django built-in
    "django.contrib.auth",
    "django.contrib.contenttypes",
    # Third-party
    "rest_framework",
    "django_filters",
    # Local apps
    "apps.accounts",
    "apps.tasks",
]

# ---------------------------------------------------------------------------
# DATABASE: DATABASE_URL (PostgreSQL in production, SQLite by default)
# ---------------------------------------------------------------------------
DATABASES = {
    "default": dj_database_url.config(
        default=env("DATABASE_URL", default=f"sqlite:///{BASE_DIR / 'db.sqlite3'}"),
        conn_max_age=600,
    )
}

# ---------------------------------------------------------------------------
# CUSTOM USER MODEL
# ---------------------------------------------------------------------------
AUTH_USER_MODEL = "accounts.User"

# ---------------------------------------------------------------------------
# PASSWORD VALIDATION: one ordered policy, first failing rule reported
# ---------------------------------------------------------------------------
AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "apps.accounts.validators.PasswordStrengthValidator",
        "OPTIONS": {"min_length": 8},
    },
]

# ---------------------------------------------------------------------------
# INTERNATIONALISATION
# ---------------------------------------------------------------------------
LANGUAGE_CODE = "en-gb"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# ---------------------------------------------------------------------------
# DEFAULT PRIMARY KEY
# ---------------------------------------------------------------------------
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ---------------------------------------------------------------------------
# DJANGO REST FRAMEWORK: service errors are translated in one place
# ---------------------------------------------------------------------------
REST_FRAMEWORK = {
    "EXCEPTION_HANDLER": "apps.common.exceptions.service_exception_handler",
}

# ---------------------------------------------------------------------------
# SIMPLE JWT: access tokens; refresh tokens use their own signing key
# ---------------------------------------------------------------------------
SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(minutes=env("JWT_ACCESS_LIFETIME_MINUTES")),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=env("JWT_REFRESH_LIFETIME_DAYS")),
    "ALGORITHM": "HS256",
    "SIGNING_KEY": env(
        "JWT_SECRET",
        default="development-only-jwt-access-signing-key-0123456789",
    ),
    "AUTH_HEADER_TYPES": ("Bearer",),
}

JWT_REFRESH_SIGNING_KEY = env(
    "JWT_REFRESH_SECRET",
    default="development-only-jwt-refresh-signing-key-9876543210",
)

# ---------------------------------------------------------------------------
# PASSWORD RESET TOKEN EXPIRY (seconds)
# ---------------------------------------------------------------------------
PASSWORD_RESET_TIMEOUT = env("PASSWORD_RESET_TIMEOUT")

# ---------------------------------------------------------------------------
# LOGGING
# ---------------------------------------------------------------------------
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{levelname} {asctime} {module} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "INFO",
    },
}
