"""
User record mapping.

to_user() turns a stored snapshot into the user-facing shape and
user_document_from_form() turns a submitted form into writable fields.
Both handle every field explicitly so nothing leaks through unnoticed.
"""

import re
from datetime import datetime, timezone

from quillboard.core.errors import InvalidInput
from .permissions import ROLES

# Rejects consecutive dots, leading/trailing dots in local part
_VALID_EMAIL = re.compile(r'^[a-zA-Z0-9_%+-]+(\.[a-zA-Z0-9_%+-]+)*@[a-zA-Z0-9-]+(\.[a-zA-Z0-9-]+)*\.[a-zA-Z]{2,}$')

USER_FIELDS = ('name', 'email', 'role', 'createdAt', 'avatarId')
LISTING_FIELDS = ['name', 'email', 'role', 'createdAt']

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}


def to_datetime(value):
    """Convert a stored timestamp into a timezone-aware datetime"""
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if not isinstance(value, datetime):
        raise TypeError(f"Unsupported timestamp value: {value!r}")
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_user(snapshot, keep_secret=False):
    """Map a user snapshot, hiding the password hash unless keep_secret is set"""
    if snapshot is None or not snapshot.exists:
        return None

    data = snapshot.data()
    user = {'id': snapshot.id}
    for field in USER_FIELDS:
        if field in data:
            user[field] = data[field]

    if 'createdAt' in user:
        user['createdAt'] = to_datetime(user['createdAt'])
    if keep_secret and 'password' in data:
        user['password'] = data['password']
    return user


def normalize_email(email):
    return email.strip().lower()


def is_valid_email(email):
    return bool(_VALID_EMAIL.match(email))


def parse_bool(value):
    """Parse an HTML form flag ('on', 'true', '1', ...)"""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


def get_text(form, key):
    """Read a scalar form field, rejecting uploads where text is expected"""
    value = form.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidInput('Invalid input types')
    return value


def user_document_from_form(form):
    """
    Collect writable user fields from a submitted form.

    Empty fields are treated as not submitted, so an edit form with a blank
    password keeps the stored hash. The password is returned in plain text;
    callers hash it before persisting.
    """
    document = {}

    name = get_text(form, 'name')
    if name and name.strip():
        document['name'] = name.strip()

    email = get_text(form, 'email')
    if email and email.strip():
        email = normalize_email(email)
        if not is_valid_email(email):
            raise InvalidInput('Invalid email address')
        document['email'] = email

    role = get_text(form, 'role')
    if role:
        if role not in ROLES:
            raise InvalidInput(f"Invalid role: {role}")
        document['role'] = role

    password = get_text(form, 'password')
    if password:
        document['password'] = password

    return document
