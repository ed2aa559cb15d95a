"""
Configuration Module for the SEO & Open Graph Manager

This module defines configuration classes for different environments:
- DevelopmentConfig: Local development with SQLite
- ProductionConfig: Production deployment with PostgreSQL
- TestingConfig: Automated testing configuration
"""

import os
import sys
from pathlib import Path
from datetime import timedelta


class Config:
    """Base configuration with common settings"""

    # Secret key for session management and CSRF protection.
    # No insecure default: the app factory generates an ephemeral key outside
    # production and refuses to start in production without one.
    SECRET_KEY = os.environ.get('SECRET_KEY')

    # Database configuration
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_recycle": 300,
    }

    # Session configuration
    PERMANENT_SESSION_LIFETIME = timedelta(minutes=720)
    SESSION_COOKIE_SECURE = False
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    REMEMBER_COOKIE_DURATION = timedelta(days=30)
    REMEMBER_COOKIE_HTTPONLY = True

    # Site identity reported to the metadata resolver.
    # Used whenever the matching setting is empty.
    SITE_NAME = os.environ.get('SITE_NAME', 'My Site')
    SITE_DESCRIPTION = os.environ.get('SITE_DESCRIPTION', 'Just another content site.')
    SITE_URL = os.environ.get('SITE_URL', 'http://localhost:5000')
    SITE_LOCALE = os.environ.get('SITE_LOCALE', 'en_US')

    # Uploaded media (featured images stored as relative paths)
    UPLOAD_URL_PREFIX = '/static/uploads'

    # Flask-Limiter storage; memory is fine for a single process.
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')
    LOGIN_RATE_LIMIT = '10 per minute'


class DevelopmentConfig(Config):
    """Development environment configuration"""

    DEBUG = True
    TESTING = False

    # IMPORTANT (Windows): SQLAlchemy sqlite URLs must use forward slashes.
    _project_root = Path(__file__).resolve().parent.parent
    _default_db_path = (_project_root / 'seo_manager.db').resolve()

    _env_db_url = os.environ.get('DATABASE_URL')
    if _env_db_url and _env_db_url.strip().startswith('sqlite:'):
        _env_db_url = _env_db_url.replace('\\', '/')

    SQLALCHEMY_DATABASE_URI = _env_db_url or f"sqlite:///{_default_db_path.as_posix()}"


class ProductionConfig(Config):
    """Production environment configuration"""

    DEBUG = False
    TESTING = False

    @property
    def SQLALCHEMY_DATABASE_URI(self):
        """
        Production database URI, evaluated when the config is instantiated.

        Render/Heroku provide DATABASE_URL with a postgres:// prefix which
        SQLAlchemy 1.4+ rejects, so it is normalized here.
        """
        db_uri = os.environ.get('DATABASE_URL')

        if not db_uri:
            print('FATAL: DATABASE_URL not set in environment', file=sys.stderr)
            return None

        if db_uri.startswith('postgres://'):
            db_uri = 'postgresql://' + db_uri[len('postgres://'):]

        if db_uri.startswith('postgresql://') and 'sslmode=' not in db_uri:
            separator = '&' if '?' in db_uri else '?'
            db_uri = f"{db_uri}{separator}sslmode=require"

        return db_uri

    SESSION_COOKIE_SECURE = True
    REMEMBER_COOKIE_SECURE = True


class TestingConfig(Config):
    """Testing environment configuration"""

    TESTING = True
    DEBUG = True

    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SITE_URL = 'http://localhost'

    WTF_CSRF_ENABLED = False
    RATELIMIT_ENABLED = False


# Configuration dictionary for easy access
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
