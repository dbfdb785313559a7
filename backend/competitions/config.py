"""Configuration settings and environment variables.

This module loads values from environment variables (including a .env file)
and provides small helpers to safely parse integers and booleans while
stripping inline comments. This avoids crashes when a .env value contains
an inline comment like:

    MAIL_PORT=587 # STARTTLS

The helpers fall back to defaults and emit warnings when parsing fails.
"""

import os
import logging
from datetime import timedelta
from typing import Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

_logger = logging.getLogger(__name__)

DEFAULT_NOTIFICATIONS_SENDER = 'notifications@worldcubeassociation.org'


def _strip_inline_comment(val: str) -> str:
    """Strip an inline comment from a string and trim whitespace/quotes.

    Example: "587 # STARTTLS" -> "587"
    """
    if val is None:
        return ''
    val = val.split('#', 1)[0]
    val = val.strip()
    if (val.startswith('"') and val.endswith('"')) or (
        val.startswith("'") and val.endswith("'")
    ):
        val = val[1:-1]
    return val


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    raw = os.environ.get(name)
    if raw is None:
        return default
    stripped = _strip_inline_comment(raw)
    return stripped if stripped != '' else default


def _get_int_env(name: str, default: int) -> int:
    raw = _get_env(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except (ValueError, TypeError):
        _logger.warning("Invalid integer for %s: %r, falling back to %s", name, raw, default)
        return default


def _get_bool_env(name: str, default: bool) -> bool:
    raw = _get_env(name)
    if raw is None:
        return default
    return raw.lower() in ['true', '1', 'on', 'yes']


class Config:
    """Base configuration class with default settings."""

    # Flask settings
    SECRET_KEY = _get_env('SECRET_KEY') or 'dev-secret-key-change-in-production'
    # Needed by url_for(..., _external=True) outside of a request
    SERVER_NAME = _get_env('SERVER_NAME')
    PREFERRED_URL_SCHEME = _get_env('PREFERRED_URL_SCHEME', 'https')

    # JWT settings
    JWT_SECRET_KEY = _get_env('JWT_SECRET_KEY') or SECRET_KEY
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=1)

    # MongoDB settings
    MONGO_URI = _get_env('MONGO_URI') or 'mongodb://localhost:27017/'
    MONGO_DB = _get_env('MONGO_DB') or 'competition_registrations'
    MONGO_CHECK_ON_STARTUP = _get_bool_env('MONGO_CHECK_ON_STARTUP', True)

    # Mail settings
    MAIL_SERVER = _get_env('MAIL_SERVER')
    MAIL_PORT = _get_int_env('MAIL_PORT', 587)
    MAIL_USE_TLS = _get_bool_env('MAIL_USE_TLS', True)
    MAIL_USERNAME = _get_env('MAIL_USERNAME')
    MAIL_PASSWORD = _get_env('MAIL_PASSWORD')
    MAIL_DEFAULT_SENDER = _get_env('MAIL_DEFAULT_SENDER') or DEFAULT_NOTIFICATIONS_SENDER

    # Rate limiting
    RATELIMIT_ENABLED = _get_bool_env('RATELIMIT_ENABLED', True)
    RATELIMIT_STORAGE_URI = _get_env('RATELIMIT_STORAGE_URI') or 'memory://'
    REGISTRATION_RATE_LIMIT = _get_env('REGISTRATION_RATE_LIMIT') or '10 per hour'


class DevelopmentConfig(Config):
    """Development configuration with debug mode enabled."""
    DEBUG = True
    TESTING = False
    PREFERRED_URL_SCHEME = 'http'


class ProductionConfig(Config):
    """Production configuration with security settings."""
    DEBUG = False
    TESTING = False


class TestingConfig(Config):
    """Testing configuration: no database ping, mail suppressed."""
    TESTING = True
    SERVER_NAME = 'www.example.com'
    MONGO_DB = 'competition_registrations_test'
    MONGO_CHECK_ON_STARTUP = False
    MAIL_DEFAULT_SENDER = DEFAULT_NOTIFICATIONS_SENDER
    MAIL_SUPPRESS_SEND = True
    RATELIMIT_ENABLED = False
    JWT_SECRET_KEY = 'test-secret-key'


# Configuration mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
