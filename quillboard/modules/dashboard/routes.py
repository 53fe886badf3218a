"""
Admin Dashboard Routes
======================

Authentication and account settings for dashboard users. Passwords are
verified here; the account actions only ever hash them.
"""

from flask import current_app, get_flashed_messages, jsonify, redirect, request, session, url_for

from quillboard.core.config import get_config_value
from quillboard.core.database import get_store
from quillboard.core.logging_service import LoggingService
from quillboard.core.outcome import run_action
from quillboard.core.responses import to_response
from quillboard.modules.users.actions import get_user_by_email, get_user_by_id, init_admin
from quillboard.modules.users.hashing import check_password
from quillboard.modules.users.utils import login_required, serialize_user
from . import dashboard_bp


def _safe_next(target):
    """Only follow local redirect targets"""
    if target and target.startswith('/') and not target.startswith('//'):
        return target
    return None


def _home_url():
    """Posts listing when the posts module is enabled, otherwise settings"""
    if 'posts' in current_app.blueprints:
        return url_for('posts.list_posts')
    return url_for('dashboard.settings')


@dashboard_bp.route('/login', methods=['GET', 'POST'])
def login():
    """Sign in with email and password"""
    if request.method == 'POST':
        email = request.form.get('email', '').strip().lower()
        password = request.form.get('password', '')

        if not email or not password:
            return jsonify({'success': False, 'message': 'Please enter both email and password'}), 400

        user = get_user_by_email(get_store(), email, keep_secret=True)
        if user and check_password(password, user.get('password')):
            # Role and email are captured at sign-in and not refreshed until the next login
            session['user_id'] = user['id']
            session['user_role'] = user.get('role', 'user')
            session['user_email'] = user['email']
            LoggingService.log_user_action('auth', 'login', user_id=user['id'])
            return redirect(_safe_next(request.args.get('next')) or _home_url())

        LoggingService.log_security_event('Failed login attempt', {'email': email})
        return jsonify({'success': False, 'message': 'Invalid email or password'}), 401

    return jsonify({
        'logged_in': 'user_id' in session,
        'messages': get_flashed_messages(with_categories=True),
    })


@dashboard_bp.route('/logout')
def logout():
    user_id = session.get('user_id')
    session.clear()
    if user_id:
        LoggingService.log_user_action('auth', 'logout', user_id=user_id)
    return redirect(url_for('dashboard.login'))


@dashboard_bp.route('/init', methods=['POST'])
def init():
    """Create the first admin account using INIT_ADMIN_SECRET_KEY"""
    secret_key = get_config_value('INIT_ADMIN_SECRET_KEY')
    return to_response(run_action(init_admin, get_store(), request.form, secret_key))


@dashboard_bp.route('/status')
def status():
    """Check login status (API endpoint)"""
    if 'user_id' in session:
        return jsonify({
            'logged_in': True,
            'user_id': session['user_id'],
            'role': session.get('user_role'),
            'email': session.get('user_email'),
        })
    return jsonify({'logged_in': False}), 401


@dashboard_bp.route('/settings')
@login_required
def settings():
    """The signed-in user's own account"""
    user = get_user_by_id(get_store(), session['user_id'])
    if user is None:
        # Account was deleted while the session was alive
        session.clear()
        return redirect(url_for('dashboard.login'))
    return jsonify({
        'user': serialize_user(user),
        'messages': get_flashed_messages(with_categories=True),
    })
