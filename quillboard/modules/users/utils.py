from functools import wraps

from flask import flash, redirect, request, session, url_for

from .permissions import caller_from_session


def current_caller():
    """Caller for the current request, or None when nobody is signed in"""
    return caller_from_session(session)


def serialize_user(user):
    """JSON-friendly copy of a mapped user"""
    if user is None:
        return None
    data = dict(user)
    if data.get('createdAt') is not None:
        data['createdAt'] = data['createdAt'].isoformat()
    return data


# Helper function to check if user is authenticated
def login_required(f):
    """Decorator to require a signed-in user"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if 'user_id' not in session:
            flash('Please sign in to access this page.', 'error')
            return redirect(url_for('dashboard.login', next=request.path))
        return f(*args, **kwargs)
    return decorated_function
