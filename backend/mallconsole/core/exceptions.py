"""Custom exception classes for the console.

Resource services and the identity gateway catch these at their boundary and
turn them into a failed ``ServiceResult``; they never reach the views.
"""

from typing import Optional


class MallConsoleException(Exception):
    """Base exception for all console errors."""

    code = "error"

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(self.message)


class ValidationError(MallConsoleException):
    """Raised when a required field is missing or empty, before any remote call."""

    code = "validation_error"


class AuthError(MallConsoleException):
    """Raised when the identity provider rejects a credential or request.

    ``reason`` is the human-readable message shown to the user,
    ``provider_code`` the raw code reported by the provider (if any).
    """

    code = "auth_error"

    def __init__(self, reason: str, provider_code: Optional[str] = None):
        self.reason = reason
        self.provider_code = provider_code
        super().__init__(reason)


class RemoteError(MallConsoleException):
    """Raised for any other document store / provider failure (message verbatim)."""

    code = "remote_error"


class NotFoundError(MallConsoleException):
    """Raised when a lookup by id has no match."""

    code = "not_found"

    def __init__(self, resource: str, identifier: Optional[str] = None):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found")
