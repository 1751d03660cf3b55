"""
Auth error taxonomy.

Every error carries a stable ``kind`` and the HTTP status the API layer
renders it with.
"""

from __future__ import annotations


class AuthError(Exception):
    kind = "auth_error"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(AuthError):
    """A required field is missing."""

    kind = "validation_error"
    status_code = 400


class ConflictError(AuthError):
    """Email already registered."""

    kind = "conflict"
    status_code = 409


class AuthenticationError(AuthError):
    """Bad credentials, bad token, or failed provider verification."""

    kind = "authentication_failed"
    status_code = 401


class DependencyError(AuthError):
    """Storage or identity provider unreachable or misbehaving."""

    kind = "dependency_failure"
    status_code = 500

    def __init__(self, message: str, *, retriable: bool = False) -> None:
        super().__init__(message)
        self.retriable = retriable
