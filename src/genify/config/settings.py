"""
Application Configuration
========================

Configuration settings for different environments.
"""

import os

from genify.constants import (
    DEFAULT_API_BASE,
    DEFAULT_DESIGN_ID,
    DEFAULT_PROJECT_NAME,
    DEFAULT_TEMPERATURE,
)


class Config:
    """Base configuration class."""

    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # Remote chat API
    GENIFY_API_BASE = os.environ.get('GENIFY_API_BASE', DEFAULT_API_BASE).rstrip('/')
    GENIFY_API_KEY = os.environ.get('GENIFY_API_KEY', '')
    GENIFY_TEMPERATURE = float(os.environ.get('GENIFY_TEMPERATURE', str(DEFAULT_TEMPERATURE)))
    GENIFY_REQUEST_TIMEOUT = int(os.environ.get('GENIFY_REQUEST_TIMEOUT', '30'))
    GENIFY_STREAM_TIMEOUT = int(os.environ.get('GENIFY_STREAM_TIMEOUT', '300'))

    # Generation defaults
    GENIFY_DEFAULT_DESIGN = os.environ.get('GENIFY_DEFAULT_DESIGN', DEFAULT_DESIGN_ID)
    GENIFY_PROJECT_NAME = os.environ.get('GENIFY_PROJECT_NAME', DEFAULT_PROJECT_NAME)

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_TO_FILE = os.environ.get('LOG_TO_FILE', 'true').lower() == 'true'

    TEMPLATES_AUTO_RELOAD = True
    JSON_SORT_KEYS = False


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    GENIFY_API_BASE = 'http://genify.test/v1'
    GENIFY_API_KEY = 'test-key'
    LOG_TO_FILE = False


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False


config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}
