"""
Application Configuration

Centralizes all Flask and application configuration settings.
"""

import logging
import os

# Base directory of the application
BASE_DIR = os.path.dirname(os.path.abspath(__file__))

LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'


class Config:
    """Base configuration class."""

    # Flask settings
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-only-change-in-production')

    # SQLAlchemy settings
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///pizzeria.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Upload settings (workbook and backup imports)
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024  # 16MB max upload

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Recipe advice (optional external text generation)
    ADVICE_API_KEY = os.environ.get('ADVICE_API_KEY', '')
    ADVICE_MODEL = os.environ.get('ADVICE_MODEL', 'gemini-2.0-flash')
    ADVICE_TIMEOUT = float(os.environ.get('ADVICE_TIMEOUT', '20'))

    # Receipt header
    BUSINESS = {
        'name': os.environ.get('BUSINESS_NAME', 'NOCTAMBULA PIZZA CO.'),
        'address': os.environ.get('BUSINESS_ADDRESS', ''),
        'tax_id': os.environ.get('BUSINESS_TAX_ID', ''),
        'phone': os.environ.get('BUSINESS_PHONE', ''),
        'email': os.environ.get('BUSINESS_EMAIL', ''),
    }


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    ADVICE_API_KEY = ''
    LOG_LEVEL = 'WARNING'


# Configuration dictionary for easy access
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config(env=None):
    """Get configuration based on environment."""
    if env is None:
        env = os.environ.get('FLASK_ENV', 'development')
    return config.get(env, config['default'])


def configure_logging(level='INFO'):
    """Send application logs to stderr with a timestamped format."""
    root = logging.getLogger()
    if not any(getattr(h, '_pizzeria', False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._pizzeria = True
        root.addHandler(handler)
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))
