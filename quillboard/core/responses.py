"""
Outcome to HTTP response translation for Quillboard blueprints.
"""

from flask import flash, jsonify, redirect

from .outcome import Failure, Refresh

FLASH_MESSAGES = {
    'saved': 'Changes saved',
    'deleted': 'Deleted successfully',
    'initialized': 'Admin account created, you can sign in now',
}


def to_response(outcome):
    """Turn an action outcome into a Flask response"""
    if isinstance(outcome, Failure):
        return jsonify({'success': False, 'message': outcome.message}), outcome.status_code

    for flag, message in FLASH_MESSAGES.items():
        if outcome.params.get(flag) == 'true':
            flash(message, 'success')

    if isinstance(outcome, Refresh):
        # The view re-renders itself from the flashed message
        return redirect(outcome.target)
    return redirect(outcome.location)
