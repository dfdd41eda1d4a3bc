"""Exceptions for SpiceDB authorization operations."""

from __future__ import annotations


class AuthorizationError(Exception):
    """Base exception for failures returned by the authorization engine.

    Attributes:
        status_code: gRPC status code name when the engine returned one
    """

    def __init__(self, message: str, status_code: str | None = None):
        super().__init__(message)
        self.status_code = status_code


class SpiceDBConnectionError(AuthorizationError):
    """Raised when connection to SpiceDB fails."""

    pass


class SpiceDBPermissionError(AuthorizationError):
    """Raised when a check, lookup or write is rejected by SpiceDB."""

    pass
