import os
from dotenv import load_dotenv

load_dotenv(override=True)


def _get_bool(value, default=False):
    if value is None:
        return default
    return value.strip().lower() in {'1', 'true', 'yes', 'on'}


class Config:
    """
    Base configuration for Quillboard.
    Projects override these via environment variables or app.config.
    """
    # Flask settings
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY')

    # Shared secret gating creation of the first admin account
    INIT_ADMIN_SECRET_KEY = os.getenv('INIT_ADMIN_SECRET_KEY')

    # Document store: 'memory' for local runs and tests, 'mongodb' for production
    DOCUMENT_STORE = os.getenv('DOCUMENT_STORE', 'memory').lower()
    MONGODB_URI = os.getenv('MONGODB_URI')
    MONGODB_DATABASE = os.getenv('MONGODB_DATABASE', 'quillboard')

    # Collection names
    USERS_COLLECTION = 'users'
    IMAGES_COLLECTION = 'images'
    POSTS_COLLECTION = 'posts'
    LOGS_COLLECTION = 'app_logs'

    # bcrypt work factor
    BCRYPT_ROUNDS = int(os.getenv('BCRYPT_ROUNDS', '10'))

    # Persist LoggingService entries in the document store
    PERSIST_LOGS = _get_bool(os.getenv('PERSIST_LOGS'), default=True)

    # Port for local server (optional, projects can set this)
    port = int(os.getenv('PORT', '5000'))


def get_config_value(key, default=None):
    """Get configuration value: Flask app config first, then Config, then env var"""
    try:
        from flask import current_app
        val = current_app.config.get(key)
        if val is not None:
            return val
    except RuntimeError:
        pass
    val = getattr(Config, key, None)
    if val is not None:
        return val
    return os.getenv(key, default)
