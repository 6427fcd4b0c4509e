"""
Typed errors raised by the post services.

Every error carries a machine readable ``code`` alongside the human
readable ``message``.  Services raise these; the HTTP layer in
``api.v1.endpoints.posts`` decides how each kind is presented to the
client.
"""


class ForumError(Exception):
    """Base class for all errors surfaced to API consumers."""

    code = "INTERNAL_SERVER_ERROR"
    default_message = "Something went wrong"

    def __init__(self, message: str | None = None, code: str | None = None) -> None:
        self.message = message or self.default_message
        if code is not None:
            self.code = code
        super().__init__(self.message)


class NotFoundError(ForumError):
    """The requested post does not exist (or its id is malformed)."""

    code = "POST_NOT_FOUND"
    default_message = "Post not found please check again"


class InvalidIdentifierError(ForumError):
    """A user identifier is not in the store's identifier format."""

    code = "USER_NOT_FOUND"
    default_message = "User doesn't exist check authentication"


class UnauthenticatedError(ForumError):
    code = "UNAUTHENTICATED"
    default_message = "Not authenticated"


class UnauthorizedError(ForumError):
    """The caller is authenticated but does not own the resource."""

    code = "FORBIDDEN"
    default_message = "Action not allowed"


class ValidationFailedError(ForumError, ValueError):
    code = "BAD_USER_INPUT"
    default_message = "Invalid input"


class StorageFailureError(ForumError):
    """Opaque failure from the underlying store."""

    code = "INTERNAL_SERVER_ERROR"
    default_message = "Storage operation failed"
