"""
Configuration Management Module

Centralized configuration following the 12-factor app methodology.
All configuration is loaded from environment variables with sensible defaults.
"""

import os
from dotenv import load_dotenv

# Load environment variables from config.env next to this module
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

    # Database Settings (sync store; in-memory when unset)
    MONGO_URI = os.getenv('MONGO_URI')
    MONGO_DB_NAME = os.getenv('MONGO_DB_NAME', 'wordwise')

    # Local device storage (in-memory when unset)
    LOCAL_DATA_PATH = os.getenv('LOCAL_DATA_PATH')

    # Sync Settings
    # Remote sync store URL; the in-process store is used when unset
    SYNC_SERVER_URL = os.getenv('SYNC_SERVER_URL')
    SYNC_TIMEOUT_SECONDS = float(os.getenv('SYNC_TIMEOUT_SECONDS', 10))
    SYNC_CODE_MAX_ATTEMPTS = int(os.getenv('SYNC_CODE_MAX_ATTEMPTS', 10))

    # AI word selection
    AI_PROXY_URL = os.getenv('AI_PROXY_URL')
    AI_MODEL = os.getenv('AI_MODEL', 'claude-haiku-4-5')
    AI_TIMEOUT_SECONDS = float(os.getenv('AI_TIMEOUT_SECONDS', 15))
    AI_MIN_HISTORY = int(os.getenv('AI_MIN_HISTORY', 5))

    # Definitions for the learn-a-word view
    DICTIONARY_API_URL = os.getenv('DICTIONARY_API_URL', 'https://api.dictionaryapi.dev/api/v2/entries/en')

    # Game Settings
    MAX_ROUNDS = int(os.getenv('MAX_ROUNDS', 6))

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
    MONGO_URI = None
    LOCAL_DATA_PATH = None
    AI_PROXY_URL = None
    SYNC_SERVER_URL = None


# Configuration mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
