"""
Authorization checks for account actions.

Every check works on an explicit Caller snapshot so actions can be
exercised without a request. None stands for an unauthenticated caller.
"""

from quillboard.core.errors import Unauthorized
from quillboard.core.logging_service import LoggingService

ROLES = ('admin', 'user')


class Caller:
    """Identity of the user making a request"""

    def __init__(self, id, role):
        self.id = id
        self.role = role

    @property
    def is_admin(self):
        return self.role == 'admin'

    def __repr__(self):
        return f"Caller(id={self.id!r}, role={self.role!r})"


def caller_from_session(session):
    """Build a Caller from the Flask session, or None when nobody is signed in"""
    user_id = session.get('user_id')
    if not user_id:
        return None
    return Caller(user_id, session.get('user_role', 'user'))


def _deny(message, caller, details=None, public_message=None):
    LoggingService.log_security_event(message, details, user_id=caller.id if caller else None)
    raise Unauthorized(public_message)


def require_login(caller):
    if caller is None:
        _deny('Unauthenticated request rejected', caller)


def require_role(caller, role):
    if caller is None or caller.role != role:
        _deny(f'Role {role} required', caller)


def require_self_or_role(caller, target_id, role):
    if caller is None:
        _deny('Unauthenticated request rejected', caller, {'target_id': target_id})
    if caller.id != target_id and caller.role != role:
        _deny(f'Role {role} required to act on another user', caller, {'target_id': target_id})


def forbid_self(caller, target_id):
    if caller is not None and caller.id == target_id:
        _deny('Self-deletion rejected', caller, public_message='You cannot delete yourself')
