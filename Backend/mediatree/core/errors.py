"""
Error taxonomy shared by the services, the HTTP layer and the Python client.

Messages are always safe to show to a user: they never contain resolved
filesystem locations.
"""


class MediaTreeError(Exception):
    """Base class for every expected failure."""

    status_code = 500
    default_message = "Unexpected error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AccessDenied(MediaTreeError):
    """The requested path escapes the media root."""

    status_code = 403
    default_message = "Access denied"


class NotFound(MediaTreeError):
    """The path is sandboxed but the entity does not exist or is unreadable."""

    status_code = 404
    default_message = "Not found"


class ValidationError(MediaTreeError):
    """Malformed user input (search term, volume, speed, playlist name...)."""

    status_code = 400
    default_message = "Invalid request"


class TransientIOError(MediaTreeError):
    """Backend unreachable or a filesystem error unrelated to the request."""

    status_code = 503
    default_message = "Service temporarily unavailable"


class PlaybackError(MediaTreeError):
    """The playback element reported a decode or network fault."""

    status_code = 422
    default_message = "Playback failed"


ERRORS_BY_STATUS = {
    403: AccessDenied,
    404: NotFound,
    400: ValidationError,
    422: ValidationError,
}
