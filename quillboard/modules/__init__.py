"""
Quillboard Modules
==================

Flask blueprint modules for the dashboard.
"""

__all__ = ['dashboard', 'users', 'posts']
