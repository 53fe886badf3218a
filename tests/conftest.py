"""
Shared fixtures for the Quillboard test suite.

NOTE: pytest is listed under extras_require["dev"] in setup.py.
Install with: pip install -e ".[dev]"
"""

import io
from datetime import datetime, timezone

import pytest
from flask import Flask
from werkzeug.datastructures import FileStorage

from quillboard import Quillboard
from quillboard.core.config import Config
from quillboard.core.database import MemoryDocumentStore
from quillboard.core.logging_service import LoggingService
from quillboard.modules.users.hashing import hash_password
from quillboard.modules.users.permissions import Caller

INIT_SECRET = 'init-secret'
PASSWORD = 'Passw0rd!'


@pytest.fixture(autouse=True)
def fast_hashing(monkeypatch):
    """Minimum bcrypt work factor keeps the suite fast"""
    monkeypatch.setattr(Config, 'BCRYPT_ROUNDS', 4)


@pytest.fixture(autouse=True)
def detached_logging():
    """Each test starts without a persistent log store"""
    LoggingService.bind(None)
    yield
    LoggingService.bind(None)


@pytest.fixture
def store():
    return MemoryDocumentStore()


def make_user(store, email, role='user', name='Someone', password=PASSWORD, avatar_id='', created_at=None):
    """Insert a user document directly and return its id"""
    return store.collection('users').insert({
        'name': name,
        'email': email,
        'password': hash_password(password),
        'role': role,
        'createdAt': created_at or datetime(2024, 1, 1, tzinfo=timezone.utc),
        'avatarId': avatar_id,
    })


def upload(content, filename='avatar.png', content_type='image/png'):
    return FileStorage(stream=io.BytesIO(content), filename=filename, content_type=content_type)


@pytest.fixture
def admin_id(store):
    return make_user(store, 'admin@example.com', role='admin', name='Admin')


@pytest.fixture
def user_id(store):
    return make_user(store, 'user@example.com', role='user', name='Regular User')


@pytest.fixture
def admin(admin_id):
    return Caller(admin_id, 'admin')


@pytest.fixture
def member(user_id):
    return Caller(user_id, 'user')


@pytest.fixture
def app(store):
    """Flask app with Quillboard bound to the in-memory test store"""
    app = Flask(__name__)
    app.config['TESTING'] = True
    app.config['SECRET_KEY'] = 'test-secret'
    app.config['INIT_ADMIN_SECRET_KEY'] = INIT_SECRET
    app.config['PERSIST_LOGS'] = False
    Quillboard(app, {'brand_name': 'Test Board'}, store=store)
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def sign_in(client, user_id, role):
    with client.session_transaction() as sess:
        sess['user_id'] = user_id
        sess['user_role'] = role
