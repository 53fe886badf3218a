"""
Dashboard Module
================

Entry points of the admin dashboard:
- Sign in / sign out
- First admin bootstrap
- Session status and the signed-in user's settings

This is the foundation module that other admin features plug into.
"""

from flask import Blueprint

dashboard_bp = Blueprint('dashboard', __name__)

# Import routes after blueprint is created
from . import routes

__all__ = ['dashboard_bp']
