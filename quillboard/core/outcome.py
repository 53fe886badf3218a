"""
Action Outcomes
===============

Every mutating action ends in exactly one outcome: a redirect to a named
destination or an in-place refresh of the current view. run_action() adds
the third variant, Failure, for errors the user should see.
"""

from urllib.parse import urlencode

from .errors import DuplicateEmail, InvalidInput, Unauthorized

# Errors shown to the user; anything else propagates as a server error
USER_FACING_ERRORS = (Unauthorized, InvalidInput, DuplicateEmail)


class Outcome:
    kind = None

    def __init__(self, target, params=None):
        self.target = target
        self.params = dict(params or {})

    @property
    def location(self):
        """Target path with its query flags, e.g. /users?saved=true"""
        if not self.params:
            return self.target
        return f"{self.target}?{urlencode(self.params)}"

    def __eq__(self, other):
        return (
            type(self) is type(other)
            and self.target == other.target
            and self.params == other.params
        )

    def __repr__(self):
        return f"{type(self).__name__}({self.location!r})"


class Redirect(Outcome):
    """Navigate to another view"""

    kind = 'redirect'


class Refresh(Outcome):
    """Re-render the current view in place"""

    kind = 'refresh'


class Failure:
    """A user-facing error produced by an action"""

    kind = 'failure'

    def __init__(self, error):
        self.error = error

    @property
    def message(self):
        return str(self.error)

    @property
    def status_code(self):
        return getattr(self.error, 'status_code', 400)

    def __repr__(self):
        return f"Failure({type(self.error).__name__}: {self.message!r})"


def run_action(action, *args, **kwargs):
    """Call an action handler, turning user-facing errors into a Failure outcome"""
    try:
        return action(*args, **kwargs)
    except USER_FACING_ERRORS as e:
        return Failure(e)
