"""
Centralized logging service for Quillboard.
Provides structured logging with document-store persistence and easy integration.
"""

import json
import logging
import traceback
from datetime import datetime, timedelta, timezone

from flask import request, has_request_context

from .config import Config

_console = logging.getLogger('quillboard')


class LoggingService:
    """Centralized logging service for application-wide logging"""

    _store = None

    @classmethod
    def bind(cls, store):
        """Persist subsequent log entries in the given document store (None to detach)"""
        cls._store = store

    @staticmethod
    def _get_request_context():
        """Extract request context information"""
        if not has_request_context():
            return None, None, None

        ip_address = request.headers.get('X-Forwarded-For', request.remote_addr)
        if ip_address and ',' in ip_address:
            ip_address = ip_address.split(',')[0].strip()

        user_agent = request.headers.get('User-Agent', '')
        return ip_address, user_agent, request.path

    @staticmethod
    def log(level, source, message, details=None, user_id=None):
        """
        Log a message to the app_logs collection

        Args:
            level (str): Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            source (str): Source component (users, posts, security, etc.)
            message (str): Main log message
            details (str/dict): Additional details (will be JSON-encoded if dict)
            user_id (str): Optional user identifier
        """
        level = level.upper()
        if isinstance(details, dict):
            details = json.dumps(details, indent=2, default=str)

        _console.log(getattr(logging, level, logging.INFO), f"[{source}] {message}")

        store = LoggingService._store
        if store is None:
            return

        ip_address, user_agent, request_path = LoggingService._get_request_context()
        try:
            store.collection(Config.LOGS_COLLECTION).insert({
                'timestamp': datetime.now(timezone.utc),
                'level': level,
                'source': source,
                'message': message,
                'details': details,
                'ip_address': ip_address,
                'user_agent': user_agent,
                'request_path': request_path,
                'user_id': user_id,
            })
        except Exception as e:
            # Fall back to the console logger only
            _console.warning(f"Logging service error: {e}")

    @staticmethod
    def debug(source, message, details=None, user_id=None):
        """Log debug message"""
        LoggingService.log('DEBUG', source, message, details, user_id)

    @staticmethod
    def info(source, message, details=None, user_id=None):
        """Log info message"""
        LoggingService.log('INFO', source, message, details, user_id)

    @staticmethod
    def warning(source, message, details=None, user_id=None):
        """Log warning message"""
        LoggingService.log('WARNING', source, message, details, user_id)

    @staticmethod
    def error(source, message, details=None, user_id=None):
        """Log error message"""
        LoggingService.log('ERROR', source, message, details, user_id)

    @staticmethod
    def log_user_action(source, action, user_id=None, details=None):
        """Log user actions (login, user created, avatar changed, etc.)"""
        LoggingService.info(source, f"User action: {action}", details, user_id)

    @staticmethod
    def log_error_with_traceback(source, error, details=None):
        """Log error with full traceback"""
        error_details = {
            'error_type': type(error).__name__,
            'error_message': str(error),
            'traceback': traceback.format_exc()
        }
        if details:
            error_details['additional_details'] = details

        LoggingService.error(source, f"Exception occurred: {type(error).__name__}", error_details)

    @staticmethod
    def log_security_event(message, details=None, user_id=None):
        """Log security-related events"""
        LoggingService.warning('security', message, details, user_id)

    @staticmethod
    def get_recent_logs(limit=50, level=None):
        """Return the newest persisted log entries, optionally filtered by level"""
        store = LoggingService._store
        if store is None:
            return []
        collection = store.collection(Config.LOGS_COLLECTION)
        snapshots = collection.query('level', '==', level.upper()) if level else collection.list()
        entries = [dict(snap.data(), id=snap.id) for snap in snapshots]
        entries.sort(key=lambda entry: entry['timestamp'], reverse=True)
        return entries[:limit]

    @staticmethod
    def cleanup_old_logs(days_to_keep=30):
        """Delete log entries older than days_to_keep"""
        store = LoggingService._store
        if store is None:
            return 0

        cutoff = datetime.now(timezone.utc) - timedelta(days=days_to_keep)
        collection = store.collection(Config.LOGS_COLLECTION)
        deleted_count = 0
        for snap in collection.list(fields=['timestamp']):
            timestamp = snap.get('timestamp')
            if timestamp is not None and timestamp.tzinfo is None:
                timestamp = timestamp.replace(tzinfo=timezone.utc)
            if timestamp is not None and timestamp < cutoff:
                deleted_count += collection.delete(snap.id)

        LoggingService.info('system', f"Cleaned up {deleted_count} old log entries")
        return deleted_count

