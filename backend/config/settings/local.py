"""Local development settings."""
from .base import *  # noqa: F401, F403

DEBUG = True

ALLOWED_HOSTS = ["localhost", "127.0.0.1"]

# CORS - allow frontend in development
CORS_ALLOW_ALL_ORIGINS = True

# CSRF trusted origins for local frontends
CSRF_TRUSTED_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
]

# Additional apps for development
INSTALLED_APPS += [  # noqa: F405
    "django_extensions",
]

LOGGING["loggers"]["apps"]["level"] = "DEBUG"  # noqa: F405
