"""
Account action tests: bootstrap, lookups, save, delete and avatars.
"""

import base64
from datetime import datetime, timezone

import pytest
from werkzeug.datastructures import MultiDict

from quillboard.core.errors import ConfigurationError, DuplicateEmail, InvalidInput, Unauthorized
from quillboard.core.outcome import Redirect, Refresh
from quillboard.modules.users.actions import (
    delete_user,
    get_avatar,
    get_user_by_email,
    get_user_by_id,
    get_users,
    init_admin,
    save_avatar,
    save_user,
)
from quillboard.modules.users.hashing import check_password
from quillboard.modules.users.permissions import Caller

from conftest import INIT_SECRET, PASSWORD, make_user, upload


def _users(store):
    return store.collection('users')


def _images(store):
    return store.collection('images')


# ---------------------------------------------------------------------------
# Bootstrap admin
# ---------------------------------------------------------------------------

def test_init_admin_creates_one_admin_with_hashed_password(store):
    form = {'email': '  Owner@Example.COM ', 'password': ' s3cret-pass ', 'key': INIT_SECRET}

    outcome = init_admin(store, form, INIT_SECRET)

    assert outcome == Redirect('/login', {'initialized': 'true'})
    assert outcome.location == '/login?initialized=true'

    docs = _users(store).list()
    assert len(docs) == 1
    data = docs[0].data()
    assert data['email'] == 'owner@example.com'
    assert data['role'] == 'admin'
    assert data['name'] == 'Admin'
    assert data['avatarId'] == ''
    assert data['password'] != 's3cret-pass'
    assert check_password('s3cret-pass', data['password'])


@pytest.mark.parametrize('key', ['wrong-secret', '', None])
def test_init_admin_rejects_bad_key(store, key):
    form = {'email': 'owner@example.com', 'password': 'pw123456'}
    if key is not None:
        form['key'] = key

    with pytest.raises(Unauthorized):
        init_admin(store, form, INIT_SECRET)

    assert _users(store).count() == 0


def test_init_admin_without_server_secret_is_configuration_error(store):
    form = {'email': 'owner@example.com', 'password': 'pw123456', 'key': ''}

    with pytest.raises(ConfigurationError):
        init_admin(store, form, None)

    assert _users(store).count() == 0


@pytest.mark.parametrize('form', [
    {'email': 'owner@example.com'},
    {'password': 'pw123456'},
    {'email': 'not-an-email', 'password': 'pw123456'},
    {'email': 'owner@example.com', 'password': '   '},
])
def test_init_admin_rejects_missing_or_malformed_fields(store, form):
    form = dict(form, key=INIT_SECRET)

    with pytest.raises(InvalidInput):
        init_admin(store, form, INIT_SECRET)

    assert _users(store).count() == 0


def test_init_admin_rejects_uploaded_file_as_email(store):
    form = {'email': upload(b'x'), 'password': 'pw123456', 'key': INIT_SECRET}

    with pytest.raises(InvalidInput):
        init_admin(store, form, INIT_SECRET)


def test_init_admin_twice_with_same_email_is_duplicate(store):
    form = {'email': 'owner@example.com', 'password': 'pw123456', 'key': INIT_SECRET}
    init_admin(store, form, INIT_SECRET)

    with pytest.raises(DuplicateEmail):
        init_admin(store, dict(form, email='OWNER@example.com'), INIT_SECRET)

    assert _users(store).count() == 1


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

def test_get_users_lists_without_passwords_in_insertion_order(store, admin, user_id):
    users = get_users(store, admin)

    assert [user['email'] for user in users] == ['admin@example.com', 'user@example.com']
    for user in users:
        assert set(user) == {'id', 'name', 'email', 'role', 'createdAt'}
        assert user['createdAt'].tzinfo is not None


def test_get_users_requires_admin(store, member):
    with pytest.raises(Unauthorized):
        get_users(store, member)
    with pytest.raises(Unauthorized):
        get_users(store, None)


def test_get_user_by_email_hides_password_unless_requested(store, user_id):
    public = get_user_by_email(store, 'user@example.com')
    secret = get_user_by_email(store, ' USER@example.com ', keep_secret=True)

    assert public['id'] == user_id
    assert 'password' not in public
    assert check_password(PASSWORD, secret['password'])


def test_get_user_lookups_return_none_when_missing(store, user_id):
    assert get_user_by_email(store, 'nobody@example.com') is None
    assert get_user_by_email(store, '') is None
    assert get_user_by_id(store, 'does-not-exist') is None
    assert get_user_by_id(store, '') is None
    assert get_user_by_id(store, user_id)['name'] == 'Regular User'


# ---------------------------------------------------------------------------
# Save user
# ---------------------------------------------------------------------------

def test_admin_creates_user_with_store_assigned_id(store, admin):
    form = MultiDict({'name': 'New Writer', 'email': 'Writer@Example.com', 'password': 'pw123456'})

    outcome = save_user(store, admin, form)

    assert outcome == Redirect('/users', {'saved': 'true'})
    created = get_user_by_email(store, 'writer@example.com', keep_secret=True)
    assert created['id']
    assert created['role'] == 'user'
    assert created['avatarId'] == ''
    assert check_password('pw123456', created['password'])
    assert _users(store).count() == 2


def test_create_with_existing_email_is_duplicate(store, admin, user_id):
    form = {'name': 'Copy', 'email': 'user@example.com', 'password': 'pw123456'}

    with pytest.raises(DuplicateEmail):
        save_user(store, admin, form)

    assert _users(store).count() == 2


def test_create_requires_email_and_password(store, admin):
    with pytest.raises(InvalidInput):
        save_user(store, admin, {'name': 'No Password', 'email': 'np@example.com'})
    assert _users(store).count() == 1


def test_non_admin_cannot_create_users(store, member):
    with pytest.raises(Unauthorized):
        save_user(store, member, {'email': 'x@example.com', 'password': 'pw123456'})


def test_update_changes_only_target_fields_and_refreshes_timestamp(store, admin, user_id):
    before = _users(store).get(user_id).data()

    save_user(store, admin, {'id': user_id, 'name': 'Renamed', 'email': 'user@example.com', 'password': ''})

    after = _users(store).get(user_id)
    assert after.exists
    assert after.id == user_id
    assert after.get('name') == 'Renamed'
    assert after.get('password') == before['password']
    assert after.get('createdAt') > before['createdAt']
    assert _users(store).count() == 2


def test_update_rehashes_new_password(store, admin, user_id):
    save_user(store, admin, {'id': user_id, 'password': 'brand-new-pw'})

    stored = get_user_by_id(store, user_id)
    secret = get_user_by_email(store, stored['email'], keep_secret=True)
    assert check_password('brand-new-pw', secret['password'])
    assert not check_password(PASSWORD, secret['password'])


def test_self_edit_from_settings_refreshes_in_place(store, member, user_id):
    outcome = save_user(store, member, {'id': user_id, 'name': 'Me', 'role': 'admin', 'settings': 'true'})

    assert outcome == Refresh('/settings', {'saved': 'true'})
    updated = get_user_by_id(store, user_id)
    assert updated['name'] == 'Me'
    assert updated['role'] == 'user'


def test_user_cannot_edit_someone_else(store, member, admin_id):
    with pytest.raises(Unauthorized):
        save_user(store, member, {'id': admin_id, 'name': 'Hijacked'})
    assert get_user_by_id(store, admin_id)['name'] == 'Admin'


def test_unknown_form_fields_are_not_written(store, admin, user_id):
    save_user(store, admin, {'id': user_id, 'avatarId': 'forged', 'isSuperuser': 'yes'})

    data = _users(store).get(user_id).data()
    assert data['avatarId'] == ''
    assert 'isSuperuser' not in data


def test_update_of_missing_user_is_invalid(store, admin):
    with pytest.raises(InvalidInput):
        save_user(store, admin, {'id': 'missing', 'name': 'Ghost'})


def test_invalid_role_is_rejected(store, admin):
    with pytest.raises(InvalidInput):
        save_user(store, admin, {'email': 'r@example.com', 'password': 'pw123456', 'role': 'root'})


# ---------------------------------------------------------------------------
# Delete user
# ---------------------------------------------------------------------------

@pytest.mark.parametrize('role', ['admin', 'user'])
def test_self_deletion_is_always_rejected(store, role):
    own_id = make_user(store, f'{role}-self@example.com', role=role)

    with pytest.raises(Unauthorized, match='cannot delete yourself'):
        delete_user(store, Caller(own_id, role), own_id)

    assert _users(store).get(own_id).exists


def test_admin_deletes_exactly_the_target(store, admin, admin_id, user_id):
    other_id = make_user(store, 'other@example.com')

    outcome = delete_user(store, admin, user_id)

    assert outcome == Redirect('/users', {'deleted': 'true'})
    assert not _users(store).get(user_id).exists
    assert _users(store).get(admin_id).exists
    assert _users(store).get(other_id).exists


def test_non_admin_cannot_delete_others(store, member, admin_id):
    with pytest.raises(Unauthorized):
        delete_user(store, member, admin_id)
    assert _users(store).get(admin_id).exists


def test_delete_keeps_linked_avatar_image(store, admin):
    image_id = _images(store).insert({'data': 'data:image/png;base64,AAAA'})
    target = make_user(store, 'pic@example.com', avatar_id=image_id)

    delete_user(store, admin, target)

    assert _images(store).get(image_id).exists


# ---------------------------------------------------------------------------
# Avatars
# ---------------------------------------------------------------------------

def test_get_avatar_returns_none_for_empty_or_missing_id(store):
    assert get_avatar(store, '') is None
    assert get_avatar(store, None) is None
    assert get_avatar(store, 'no-such-image') is None


def test_first_avatar_upload_creates_and_links_image(store, member, user_id):
    outcome = save_avatar(store, member, {'id': user_id, 'avatar': upload(b'first-image')})

    assert outcome == Redirect('/settings', {'saved': 'true'})
    assert _images(store).count() == 1
    avatar_id = _users(store).get(user_id).get('avatarId')
    expected = 'data:image/png;base64,' + base64.b64encode(b'first-image').decode('ascii')
    assert get_avatar(store, avatar_id) == {'data': expected}


def test_second_upload_replaces_payload_in_place(store, member, user_id):
    save_avatar(store, member, {'id': user_id, 'avatar': upload(b'first-image')})
    avatar_id = _users(store).get(user_id).get('avatarId')

    save_avatar(store, member, {'id': user_id, 'avatar': upload(b'second', content_type='image/jpeg')})

    assert _images(store).count() == 1
    assert _users(store).get(user_id).get('avatarId') == avatar_id
    assert get_avatar(store, avatar_id)['data'].startswith('data:image/jpeg;base64,')


def test_empty_upload_clears_payload_but_keeps_image(store, member, user_id):
    save_avatar(store, member, {'id': user_id, 'avatar': upload(b'first-image')})
    avatar_id = _users(store).get(user_id).get('avatarId')

    outcome = save_avatar(store, member, {'id': user_id, 'avatar': upload(b'')})

    assert outcome == Refresh('/settings')
    assert _images(store).get(avatar_id).exists
    assert get_avatar(store, avatar_id) == {'data': ''}
    assert _users(store).get(user_id).get('avatarId') == avatar_id


def test_empty_upload_without_avatar_writes_nothing(store, member, user_id):
    outcome = save_avatar(store, member, {'id': user_id, 'avatar': upload(b'')})

    assert outcome == Refresh('/settings')
    assert _images(store).count() == 0
    assert _users(store).get(user_id).get('avatarId') == ''


def test_admin_can_set_another_users_avatar(store, admin, user_id):
    save_avatar(store, admin, {'id': user_id, 'avatar': upload(b'by-admin')})
    assert _users(store).get(user_id).get('avatarId')


def test_user_cannot_set_someone_elses_avatar(store, member, admin_id):
    with pytest.raises(Unauthorized):
        save_avatar(store, member, {'id': admin_id, 'avatar': upload(b'nope')})
    assert _images(store).count() == 0


def test_avatar_for_missing_user_is_invalid(store, admin):
    with pytest.raises(InvalidInput):
        save_avatar(store, admin, {'id': 'missing', 'avatar': upload(b'img')})
    assert _images(store).count() == 0


def test_timestamps_survive_round_trip_as_aware_datetimes(store, admin):
    naive_id = _users(store).insert({
        'name': 'Legacy', 'email': 'legacy@example.com', 'role': 'user',
        'createdAt': datetime(2023, 5, 1, 12, 0), 'avatarId': '',
    })
    user = get_user_by_id(store, naive_id)
    assert user['createdAt'] == datetime(2023, 5, 1, 12, 0, tzinfo=timezone.utc)
