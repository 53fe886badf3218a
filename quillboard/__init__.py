"""
Quillboard - A Flask Content Dashboard
======================================

A small admin dashboard for a blog backed by a document database:
- Account management (first admin bootstrap, users, avatars)
- Post management
- Session sign-in for dashboard users

Usage:
    from flask import Flask
    from quillboard import Quillboard

    app = Flask(__name__)
    Quillboard(app)
"""

__version__ = '0.1.0'
__author__ = 'Laurence Stephan'

from flask import jsonify
from werkzeug.exceptions import HTTPException

from .core.config import Config
from .core.database import create_document_store
from .core.errors import QuillboardError
from .core.logging_service import LoggingService

# Settings copied into app.config unless the app already set them
DEFAULT_SETTINGS = (
    'SECRET_KEY',
    'INIT_ADMIN_SECRET_KEY',
    'DOCUMENT_STORE',
    'MONGODB_URI',
    'MONGODB_DATABASE',
    'BCRYPT_ROUNDS',
    'PERSIST_LOGS',
)

DEFAULT_FEATURES = {
    'posts': True,
}


class Quillboard:
    """
    Flask extension wiring the document store, logging and dashboard blueprints.

    Args:
        app: Flask application (optional, see init_app)
        config: {'brand_name': str, 'features': {'posts': bool}}
        store: Document store to use instead of the one DOCUMENT_STORE selects
    """

    def __init__(self, app=None, config=None, store=None):
        self._config = dict(config or {})
        self._registered = []
        self.store = store
        if app is not None:
            self.init_app(app)

    @property
    def brand_name(self):
        return self._config.get('brand_name', 'Quillboard')

    def feature_enabled(self, name):
        features = dict(DEFAULT_FEATURES, **self._config.get('features', {}))
        return bool(features.get(name))

    def init_app(self, app):
        for key in DEFAULT_SETTINGS:
            if app.config.get(key) is None:
                app.config[key] = getattr(Config, key)

        if self.store is None:
            self.store = create_document_store(
                app.config['DOCUMENT_STORE'],
                app.config.get('MONGODB_URI'),
                app.config.get('MONGODB_DATABASE'),
            )
        LoggingService.bind(self.store if app.config['PERSIST_LOGS'] else None)

        self._register_blueprints(app)
        self._register_error_handlers(app)
        app.add_url_rule('/health', 'health', self._health)

        @app.context_processor
        def inject_quillboard():
            return {
                'quillboard_config': self._config,
                'brand_name': self.brand_name,
            }

        app.extensions['quillboard'] = self
        LoggingService.info('system', f"Quillboard initialized with modules: {', '.join(self._registered)}")

    def _register_blueprints(self, app):
        from .modules.dashboard import dashboard_bp
        from .modules.users import users_bp

        app.register_blueprint(dashboard_bp)
        app.register_blueprint(users_bp)
        self._registered.extend(['dashboard', 'users'])

        if self.feature_enabled('posts'):
            from .modules.posts import posts_bp
            app.register_blueprint(posts_bp)
            self._registered.append('posts')

    def _register_error_handlers(self, app):
        @app.errorhandler(QuillboardError)
        def handle_quillboard_error(error):
            if error.status_code >= 500:
                LoggingService.log_error_with_traceback('system', error)
            return jsonify({'success': False, 'message': error.message}), error.status_code

        @app.errorhandler(Exception)
        def handle_unexpected_error(error):
            if isinstance(error, HTTPException):
                return error
            LoggingService.log_error_with_traceback('system', error)
            return jsonify({'success': False, 'message': 'Something went wrong'}), 500

    def _health(self):
        checks = {}
        try:
            checks['store'] = {'status': 'ok', 'users': self.store.collection(Config.USERS_COLLECTION).count()}
        except Exception as e:
            LoggingService.log_error_with_traceback('health', e)
            checks['store'] = {'status': 'critical', 'error': str(e)}

        status = 'ok' if all(check['status'] == 'ok' for check in checks.values()) else 'critical'
        return jsonify({'status': status, 'checks': checks}), 200 if status == 'ok' else 503

    def get_registered_modules(self):
        return list(self._registered)


__all__ = ['Quillboard', 'Config']
