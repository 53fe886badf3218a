"""
Quillboard Users Module

Provides account management for the dashboard:
- First admin bootstrap gated by a shared secret
- User listing and lookups
- Create, edit and delete accounts
- Avatar upload and removal
"""

from flask import Blueprint

users_bp = Blueprint('users', __name__, url_prefix='/users')

from . import routes
from .permissions import Caller

__all__ = ['users_bp', 'Caller']
