"""Configuration module for Flask application."""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Base configuration class."""

    # Flask
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('FLASK_DEBUG', '1') == '1'
    ENV = os.getenv('FLASK_ENV', 'development')
    TESTING = False

    # Session Configuration (Production-safe defaults)
    SESSION_COOKIE_SECURE = os.getenv('SESSION_COOKIE_SECURE', 'false').lower() == 'true'
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = os.getenv('SESSION_COOKIE_SAMESITE', 'Lax')
    PERMANENT_SESSION_LIFETIME = 86400  # 24 hours

    # CSRF (Flask-WTF)
    WTF_CSRF_ENABLED = os.getenv('WTF_CSRF_ENABLED', 'true').lower() == 'true'

    # Admin credentials (single shop operator)
    ADMIN_USERNAME = os.getenv('ADMIN_USERNAME', 'kavinsadmin')
    ADMIN_PASSWORD = os.getenv('ADMIN_PASSWORD', 'adm123')
    SESSION_AUTH_KEY = os.getenv('SESSION_AUTH_KEY', 'is_admin')

    # Database - Support multiple environment variable naming conventions
    # Priority: DATABASE_URL > DB_* > POSTGRES_*
    DATABASE_URL = os.getenv('DATABASE_URL')

    if not DATABASE_URL:
        # Try DB_* variables (Docker style)
        DB_HOST = os.getenv('DB_HOST') or os.getenv('POSTGRES_HOST', 'localhost')
        DB_PORT = os.getenv('DB_PORT') or os.getenv('POSTGRES_PORT', '5432')
        DB_NAME = os.getenv('DB_NAME') or os.getenv('POSTGRES_DB', 'gradestock')
        DB_USER = os.getenv('DB_USER') or os.getenv('POSTGRES_USER', 'gradestock')
        DB_PASSWORD = os.getenv('DB_PASSWORD') or os.getenv('POSTGRES_PASSWORD', 'gradestock')

        DATABASE_URL = (
            f"postgresql://{DB_USER}:{DB_PASSWORD}"
            f"@{DB_HOST}:{DB_PORT}/{DB_NAME}"
        )

    # SQLAlchemy
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_ECHO = os.getenv('SQLALCHEMY_ECHO', '0') == '1'
    AUTO_CREATE_TABLES = os.getenv('AUTO_CREATE_TABLES', 'false').lower() == 'true'

    # Stock Configuration
    LOW_STOCK_THRESHOLD = int(os.getenv('LOW_STOCK_THRESHOLD', '5'))
    DASHBOARD_UNIT_VALUE_ESTIMATE = int(os.getenv('DASHBOARD_UNIT_VALUE_ESTIMATE', '50'))
    TRANSACTIONS_RECENT_LIMIT = int(os.getenv('TRANSACTIONS_RECENT_LIMIT', '100'))

    # Redis Cache Configuration
    # Dashboard/report aggregates are cached and invalidated on every stock write
    REDIS_URL = os.getenv('REDIS_URL', 'redis://redis:6379/0')
    CACHE_ENABLED = os.getenv('CACHE_ENABLED', 'true').lower() == 'true'
    CACHE_DEFAULT_TTL = int(os.getenv('CACHE_DEFAULT_TTL', '60'))  # seconds
    CACHE_DASHBOARD_TTL = int(os.getenv('CACHE_DASHBOARD_TTL', '60'))
    CACHE_KEY_PREFIX = os.getenv('CACHE_KEY_PREFIX', 'gradestock')


class TestConfig(Config):
    """Configuration used by the test suite (in-memory SQLite, no Redis)."""

    TESTING = True
    DEBUG = False
    ENV = 'testing'
    SECRET_KEY = 'test-secret-key'
    WTF_CSRF_ENABLED = False
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ECHO = False
    AUTO_CREATE_TABLES = True
    CACHE_ENABLED = False
    ADMIN_USERNAME = 'admin'
    ADMIN_PASSWORD = 'secret'
