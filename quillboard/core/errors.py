"""
Quillboard Errors
=================

Failures raised by action handlers. Handlers never catch their own errors;
the presentation layer decides how to show them. "Not found" is not an
error: lookups return None instead.
"""


class QuillboardError(Exception):
    """Base class for all Quillboard domain errors"""

    status_code = 400
    default_message = 'Something went wrong'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(QuillboardError):
    """Caller is not allowed to perform the operation"""

    status_code = 401
    default_message = 'Unauthorized'


class InvalidInput(QuillboardError):
    """A required form field is missing or malformed"""

    default_message = 'Invalid input'


class DuplicateEmail(QuillboardError):
    """A user with the submitted email already exists"""

    status_code = 409
    default_message = 'User with this email already exists'


class ConfigurationError(QuillboardError):
    """A required server-side setting is missing"""

    status_code = 500
    default_message = 'Server configuration error'
