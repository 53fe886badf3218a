"""
Account Actions
===============

Request-level operations for user accounts: bootstrapping the first admin,
listing, lookups, create/update, delete and avatar upload.

Each action takes the document store and, where authorization applies, the
Caller explicitly. Failures are raised, never caught here; mutating actions
return a Redirect or Refresh outcome.
"""

import base64
from datetime import datetime, timezone

from quillboard.core.config import Config
from quillboard.core.errors import ConfigurationError, DuplicateEmail, InvalidInput, Unauthorized
from quillboard.core.logging_service import LoggingService
from quillboard.core.outcome import Redirect, Refresh
from .hashing import hash_password
from .mapper import (
    LISTING_FIELDS,
    get_text,
    is_valid_email,
    normalize_email,
    parse_bool,
    to_user,
    user_document_from_form,
)
from .permissions import forbid_self, require_role, require_self_or_role


def _users(store):
    return store.collection(Config.USERS_COLLECTION)


def _images(store):
    return store.collection(Config.IMAGES_COLLECTION)


def _now():
    return datetime.now(timezone.utc)


def _create(store, user):
    """Insert a new user after checking the email is free (best effort, not transactional)"""
    if _users(store).query('email', '==', user['email']):
        raise DuplicateEmail()
    return _users(store).insert(user)


def _update(store, user_id, fields):
    # createdAt is refreshed on every edit; User has no separate updatedAt
    fields = dict(fields, createdAt=_now())
    if not _users(store).update(user_id, fields):
        raise InvalidInput('User not found')


# ===== Bootstrap =====

def init_admin(store, form, secret_key):
    """Create the first admin account, gated by INIT_ADMIN_SECRET_KEY"""
    if not secret_key:
        LoggingService.error('users', 'INIT_ADMIN_SECRET_KEY is not configured')
        raise ConfigurationError()

    if form.get('key') != secret_key:
        LoggingService.log_security_event('Admin initialization with an invalid key')
        raise Unauthorized()

    email = form.get('email')
    password = form.get('password')
    if not email or not password:
        raise InvalidInput('Email and password required')
    if not isinstance(email, str) or not isinstance(password, str):
        raise InvalidInput('Invalid input types')

    email = normalize_email(email)
    password = password.strip()
    if not is_valid_email(email):
        raise InvalidInput('Invalid email address')
    if not password:
        raise InvalidInput('Email and password required')

    user_id = _create(store, {
        'email': email,
        'password': hash_password(password),
        'name': 'Admin',
        'role': 'admin',
        'createdAt': _now(),
        'avatarId': '',
    })

    LoggingService.log_user_action('users', 'admin initialized', user_id=user_id, details={'email': email})
    return Redirect('/login', {'initialized': 'true'})


# ===== Lookups =====

def get_users(store, caller):
    """List all users for admins. Password hashes are never fetched."""
    require_role(caller, 'admin')
    return [to_user(snap) for snap in _users(store).list(fields=LISTING_FIELDS)]


def get_user_by_email(store, email, keep_secret=False):
    if not email:
        return None
    matches = _users(store).query('email', '==', normalize_email(email))
    if not matches:
        return None
    return to_user(matches[0], keep_secret)


def get_user_by_id(store, user_id):
    if not user_id:
        return None
    return to_user(_users(store).get(user_id))


# ===== Create / update / delete =====

def save_user(store, caller, form):
    """
    Create or update a user from a submitted form.

    Allowed for the user editing their own record or for an admin. A form
    with an id updates that user; without one a new user is created.
    """
    user_id = get_text(form, 'id') or None
    require_self_or_role(caller, user_id, 'admin')

    fields = user_document_from_form(form)
    if not caller.is_admin:
        # Only admins assign roles
        fields.pop('role', None)

    if user_id:
        if 'password' in fields:
            fields['password'] = hash_password(fields['password'])
        _update(store, user_id, fields)
        LoggingService.log_user_action('users', 'user updated', user_id=caller.id, details={'target_id': user_id})
    else:
        if 'email' not in fields or 'password' not in fields:
            raise InvalidInput('Email and password required')
        new_id = _create(store, {
            'name': fields.get('name', ''),
            'email': fields['email'],
            'password': hash_password(fields['password']),
            'role': fields.get('role', 'user'),
            'createdAt': _now(),
            'avatarId': '',
        })
        LoggingService.log_user_action('users', 'user created', user_id=caller.id, details={'target_id': new_id})

    if parse_bool(form.get('settings')):
        return Refresh('/settings', {'saved': 'true'})
    return Redirect('/users', {'saved': 'true'})


def delete_user(store, caller, user_id):
    """
    Delete another user's account. The linked avatar image is kept.

    Only admins may delete accounts, and nobody may delete themselves. The
    self check runs first so its message wins for an admin.
    """
    forbid_self(caller, user_id)
    require_role(caller, 'admin')

    if _users(store).delete(user_id):
        LoggingService.log_user_action('users', 'user deleted', user_id=caller.id, details={'target_id': user_id})
    else:
        LoggingService.warning('users', f"Delete requested for missing user {user_id}", user_id=caller.id)
    return Redirect('/users', {'deleted': 'true'})


# ===== Avatars =====

def encode_image(upload):
    """Encode an uploaded file as a data URI; an empty upload gives ''"""
    if upload is None:
        return ''
    content = upload.read()
    if not content:
        return ''
    mimetype = getattr(upload, 'mimetype', None) or 'application/octet-stream'
    return f"data:{mimetype};base64,{base64.b64encode(content).decode('ascii')}"


def get_avatar(store, avatar_id):
    if not avatar_id:
        return None
    snap = _images(store).get(avatar_id)
    if not snap.exists:
        return None
    return {'data': snap.get('data', '')}


def save_avatar(store, caller, form):
    """
    Store or clear a user's avatar.

    An existing image is updated in place, even when cleared, so the user
    keeps the same avatarId. A first non-empty upload creates the image and
    links it to the user.
    """
    user_id = get_text(form, 'id')
    if not user_id:
        raise InvalidInput('User id required')
    require_self_or_role(caller, user_id, 'admin')

    upload = form.get('avatar')
    if isinstance(upload, str):
        raise InvalidInput('Invalid input types')
    data = encode_image(upload)

    user_snap = _users(store).get(user_id, fields=['avatarId'])
    if not user_snap.exists:
        raise InvalidInput('User not found')

    avatar_id = user_snap.get('avatarId') or ''
    linked = bool(avatar_id) and _images(store).update(avatar_id, {'data': data})

    if not linked and data:
        avatar_id = _images(store).insert({'data': data})
        # Not atomic with the insert above; a failure here orphans the image
        _users(store).update(user_id, {'avatarId': avatar_id})

    LoggingService.log_user_action(
        'users', 'avatar saved' if data else 'avatar cleared', user_id=caller.id, details={'target_id': user_id}
    )

    if data:
        return Redirect('/settings', {'saved': 'true'})
    return Refresh('/settings')
