"""
Posts Module
============

Blog post management for the admin dashboard.
"""

from flask import Blueprint

posts_bp = Blueprint('posts', __name__, url_prefix='/posts')

from . import routes

__all__ = ['posts_bp']
