"""
Quillboard Core
===============

Core utilities and shared functionality for Quillboard modules.
"""

from .config import Config
from .database import create_document_store, get_store, MemoryDocumentStore, MongoDocumentStore, Snapshot
from .errors import ConfigurationError, DuplicateEmail, InvalidInput, QuillboardError, Unauthorized
from .logging_service import LoggingService
from .outcome import Failure, Redirect, Refresh, run_action

__all__ = [
    'Config', 'create_document_store', 'get_store', 'MemoryDocumentStore', 'MongoDocumentStore',
    'Snapshot', 'ConfigurationError', 'DuplicateEmail', 'InvalidInput', 'QuillboardError',
    'Unauthorized', 'LoggingService', 'Failure', 'Redirect', 'Refresh', 'run_action',
]
