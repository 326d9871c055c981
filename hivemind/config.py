"""Configuration settings for the Flask application."""
import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        os.environ.get('SQLALCHEMY_DATABASE_URI') or \
        'sqlite:///hive_mind.db'  # Use SQLite for development
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Storage medium for saves: 'database' (storage_entries table) or 'memory'
    STORAGE_BACKEND = os.environ.get('HIVEMIND_STORAGE', 'database')
    SAVE_STORAGE_CAPACITY = 5 * 1024 * 1024  # bytes, roughly a browser localStorage quota

    # Starting resources
    INITIAL_BIOMASS = 50
    INITIAL_ENERGY = 25
    INITIAL_KNOWLEDGE = 0
    INITIAL_TERRITORY = 0

    # Time system: fundamental unit is the millisecond
    TICK_INTERVAL_MS = 1000
    AUTO_SAVE_INTERVAL_MS = 60 * 1000
    DEFAULT_GAME_SPEED = 1.0

    # Offline catch-up
    OFFLINE_MIN_GAP_MS = 5 * 60 * 1000  # shorter gaps are treated as reloads
    OFFLINE_MAX_GAP_MS = 24 * 60 * 60 * 1000
    OFFLINE_EFFICIENCY = 0.5
    OFFLINE_NOTIFICATION_DURATION_MS = 8000

    # Economy
    UNIT_COST_GROWTH = 1.15  # 15% cost increase per owned unit
    EVOLUTION_RATE_COEFFICIENT = 0.1  # points/s = ln(units + 1) * coefficient
    HIVE_UNITY_AMPLIFIER = 1.1  # hiveUnity adds +10% to every other bonus

    # Notifications
    NOTIFICATION_DEFAULT_DURATION_MS = 5000
    BONUS_NOTIFICATION_DURATION_MS = 6000

    # Save system
    SAVE_FORMAT_VERSION = '1.0.0'
    MAX_SAVE_SLOTS = 5
    SAVE_KEY_PREFIX = 'hive-mind-save-'
    SAVE_SLOTS_KEY = 'hive-mind-save-slots'
    CURRENT_STATE_KEY = 'hive-mind-game-state'

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
    STORAGE_BACKEND = 'memory'

config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
