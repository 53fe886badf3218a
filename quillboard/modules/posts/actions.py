"""
Post Actions
============

Blog post management for the dashboard. Any signed-in user may write
posts; editing or deleting someone else's post requires the admin role.
"""

from datetime import datetime, timezone

from quillboard.core.config import Config
from quillboard.core.errors import InvalidInput
from quillboard.core.logging_service import LoggingService
from quillboard.core.outcome import Redirect
from quillboard.modules.users.actions import encode_image
from quillboard.modules.users.mapper import get_text, to_datetime
from quillboard.modules.users.permissions import require_login, require_self_or_role

POST_FIELDS = ('title', 'cover', 'content', 'tags', 'authorId', 'createdAt', 'updatedAt')

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def _posts(store):
    return store.collection(Config.POSTS_COLLECTION)


def _now():
    return datetime.now(timezone.utc)


def parse_tags(raw):
    """Split a comma-separated tag field, dropping blanks and duplicates"""
    tags = []
    for tag in (raw or '').split(','):
        tag = tag.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


def to_post(snapshot, author_name=None):
    """Map a post snapshot, attaching the author's display name"""
    if snapshot is None or not snapshot.exists:
        return None

    data = snapshot.data()
    post = {'id': snapshot.id}
    for field in POST_FIELDS:
        if field in data:
            post[field] = data[field]

    post['tags'] = list(post.get('tags') or [])
    post['createdAt'] = to_datetime(post.get('createdAt'))
    post['updatedAt'] = to_datetime(post.get('updatedAt'))
    post['authorName'] = author_name or ''
    return post


def _author_name(store, author_id):
    if not author_id:
        return ''
    author = store.collection(Config.USERS_COLLECTION).get(author_id, fields=['name'])
    return author.get('name', '')


def _cover_from_form(form):
    cover = form.get('cover')
    if cover is None:
        return ''
    if isinstance(cover, str):
        return cover.strip()
    return encode_image(cover)


def get_posts(store, caller):
    """All posts, newest first, with author names resolved"""
    require_login(caller)

    names = {}
    posts = []
    for snap in _posts(store).list():
        author_id = snap.get('authorId')
        if author_id not in names:
            names[author_id] = _author_name(store, author_id)
        posts.append(to_post(snap, names[author_id]))

    posts.sort(key=lambda post: post['createdAt'] or _OLDEST, reverse=True)
    return posts


def get_post(store, post_id):
    if not post_id:
        return None
    snap = _posts(store).get(post_id)
    if not snap.exists:
        return None
    return to_post(snap, _author_name(store, snap.get('authorId')))


def save_post(store, caller, form):
    require_login(caller)

    post_id = get_text(form, 'id') or None
    title = (get_text(form, 'title') or '').strip()
    content = (get_text(form, 'content') or '').strip()
    if not title or not content:
        raise InvalidInput('Title and content required')

    fields = {'title': title, 'content': content}
    cover = _cover_from_form(form)
    tags = get_text(form, 'tags')
    now = _now()

    if post_id:
        existing = _posts(store).get(post_id, fields=['authorId'])
        if not existing.exists:
            raise InvalidInput('Post not found')
        require_self_or_role(caller, existing.get('authorId'), 'admin')
        # Omitted cover or tags keep their stored values
        if cover:
            fields['cover'] = cover
        if tags is not None:
            fields['tags'] = parse_tags(tags)
        _posts(store).update(post_id, dict(fields, updatedAt=now))
        LoggingService.log_user_action('posts', 'post updated', user_id=caller.id, details={'post_id': post_id})
    else:
        fields.update(cover=cover, tags=parse_tags(tags))
        post_id = _posts(store).insert(dict(fields, authorId=caller.id, createdAt=now, updatedAt=now))
        LoggingService.log_user_action('posts', 'post created', user_id=caller.id, details={'post_id': post_id})

    return Redirect('/posts', {'saved': 'true'})


def delete_post(store, caller, post_id):
    require_login(caller)

    existing = _posts(store).get(post_id, fields=['authorId'])
    if existing.exists:
        require_self_or_role(caller, existing.get('authorId'), 'admin')
        _posts(store).delete(post_id)
        LoggingService.log_user_action('posts', 'post deleted', user_id=caller.id, details={'post_id': post_id})

    return Redirect('/posts', {'deleted': 'true'})
