"""
Configuration Management Module

Centralized configuration management following the 12-factor app methodology.
All configuration is loaded from environment variables with sensible defaults.
"""

import os
from dotenv import load_dotenv

from .game_settings import DEFAULT_MIN_WORD_LENGTH, DEFAULT_TURN_DURATION_SECONDS

# Load environment variables from config.env
load_dotenv(os.path.join(os.path.dirname(os.path.abspath(__file__)), 'config.env'))


class Config:
    """Base configuration class with all settings."""

    # Flask Settings
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'
    TESTING = False

    # Server Settings
    HOST = os.getenv('HOST', '127.0.0.1')
    PORT = int(os.getenv('PORT', 5000))
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*')

    # Game Settings
    TURN_DURATION_SECONDS = float(os.getenv('TURN_DURATION_SECONDS', DEFAULT_TURN_DURATION_SECONDS))
    MIN_WORD_LENGTH = int(os.getenv('MIN_WORD_LENGTH', DEFAULT_MIN_WORD_LENGTH))
    DICTIONARY_PATH = os.getenv('DICTIONARY_PATH')

    # Session housekeeping
    FINISHED_SESSION_TTL_SECONDS = int(os.getenv('FINISHED_SESSION_TTL_SECONDS', 300))
    CLEANUP_INTERVAL_SECONDS = int(os.getenv('CLEANUP_INTERVAL_SECONDS', 30))

    # Logging Settings
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_DIR = os.getenv('LOG_DIR', 'logs')


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    DEBUG = True
    # Long enough that no timer fires during a test unless a test asks for it
    TURN_DURATION_SECONDS = 30
    DICTIONARY_PATH = None


# Configuration mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
