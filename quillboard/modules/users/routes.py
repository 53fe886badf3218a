"""
User Admin Routes
=================

Thin HTTP layer over the account actions. Reads answer with JSON, writes
answer with the redirect or refresh chosen by the action.
"""

from flask import jsonify, request
from werkzeug.datastructures import CombinedMultiDict

from quillboard.core.database import get_store
from quillboard.core.outcome import Failure, run_action
from quillboard.core.responses import to_response
from . import users_bp
from .actions import delete_user, get_avatar, get_user_by_id, get_users, save_avatar, save_user
from .utils import current_caller, serialize_user


@users_bp.route('/')
def list_users():
    """All users, admin only"""
    result = run_action(get_users, get_store(), current_caller())
    if isinstance(result, Failure):
        return to_response(result)
    return jsonify({'success': True, 'users': [serialize_user(user) for user in result]})


@users_bp.route('/<user_id>')
def user_detail(user_id):
    caller = current_caller()
    if caller is None or (caller.id != user_id and not caller.is_admin):
        return jsonify({'success': False, 'message': 'Unauthorized'}), 401

    user = get_user_by_id(get_store(), user_id)
    if user is None:
        return jsonify({'success': False, 'message': 'User not found'}), 404
    return jsonify({'success': True, 'user': serialize_user(user)})


@users_bp.route('/save', methods=['POST'])
def save():
    """Create or update a user from the users or settings form"""
    return to_response(run_action(save_user, get_store(), current_caller(), request.form))


@users_bp.route('/<user_id>/delete', methods=['POST'])
def delete(user_id):
    return to_response(run_action(delete_user, get_store(), current_caller(), user_id))


@users_bp.route('/avatar/<avatar_id>')
def avatar(avatar_id):
    image = get_avatar(get_store(), avatar_id)
    if image is None:
        return jsonify({'success': False, 'message': 'Avatar not found'}), 404
    return jsonify({'success': True, 'avatar': image})


@users_bp.route('/avatar', methods=['POST'])
def upload_avatar():
    form = CombinedMultiDict([request.files, request.form])
    return to_response(run_action(save_avatar, get_store(), current_caller(), form))
