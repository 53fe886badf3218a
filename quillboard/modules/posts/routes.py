from flask import get_flashed_messages, jsonify, request
from werkzeug.datastructures import CombinedMultiDict

from quillboard.core.database import get_store
from quillboard.core.outcome import Failure, run_action
from quillboard.core.responses import to_response
from quillboard.modules.users.utils import current_caller, login_required
from . import posts_bp
from .actions import delete_post, get_post, get_posts, save_post


def _serialize(post):
    data = dict(post)
    for field in ('createdAt', 'updatedAt'):
        if data.get(field) is not None:
            data[field] = data[field].isoformat()
    return data


@posts_bp.route('/')
@login_required
def list_posts():
    result = run_action(get_posts, get_store(), current_caller())
    if isinstance(result, Failure):
        return to_response(result)
    return jsonify({
        'success': True,
        'posts': [_serialize(post) for post in result],
        'messages': get_flashed_messages(with_categories=True),
    })


@posts_bp.route('/<post_id>')
@login_required
def post_detail(post_id):
    post = get_post(get_store(), post_id)
    if post is None:
        return jsonify({'success': False, 'message': 'Post not found'}), 404
    return jsonify({'success': True, 'post': _serialize(post)})


@posts_bp.route('/save', methods=['POST'])
def save():
    form = CombinedMultiDict([request.files, request.form])
    return to_response(run_action(save_post, get_store(), current_caller(), form))


@posts_bp.route('/<post_id>/delete', methods=['POST'])
def delete(post_id):
    return to_response(run_action(delete_post, get_store(), current_caller(), post_id))
