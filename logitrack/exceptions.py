"""
Name: Domain Exceptions

Responsibilities:
  - Define the error taxonomy raised by services and repositories
  - Carry an error_id for log correlation

Collaborators:
  - api/exception_handlers.py: maps each class to an HTTP status
  - identity/*: raise ValidationError, Unauthenticated, Forbidden, NotFound

Constraints:
  - No FastAPI imports here; HTTP mapping lives in the api layer
  - Messages must never contain secrets (tokens, API keys, passwords)

Notes:
  - AuthError subclasses are internal; every one of them is reported to the
    caller as a plain 401
"""

from typing import Any
from uuid import uuid4


class LogiTrackError(Exception):
    """Base exception for the LogiTrack API."""

    error_code: str = "LOGITRACK_ERROR"

    def __init__(self, message: str, error_id: str | None = None):
        self.message = message
        self.error_id = error_id or str(uuid4())
        super().__init__(message)


class ConfigurationError(LogiTrackError):
    """Required configuration is missing or invalid (fatal at startup)."""

    error_code = "CONFIGURATION_ERROR"


class ValidationError(LogiTrackError):
    """Bad input (blank name, weak password, duplicate email...)."""

    error_code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str,
        errors: list[dict[str, Any]] | None = None,
        error_id: str | None = None,
    ):
        super().__init__(message, error_id)
        self.errors = errors or []


class Unauthenticated(LogiTrackError):
    """Missing, invalid or expired credential or API key."""

    error_code = "UNAUTHORIZED"


class Forbidden(LogiTrackError):
    """Authenticated, but lacking a required role."""

    error_code = "FORBIDDEN"


class NotFound(LogiTrackError):
    """Unknown identifier."""

    error_code = "NOT_FOUND"

    def __init__(self, resource: str, identifier: Any):
        super().__init__(f"{resource} '{identifier}' not found")
        self.resource = resource
        self.identifier = identifier


class Conflict(LogiTrackError):
    """Write rejected by a uniqueness constraint."""

    error_code = "CONFLICT"


class DatabaseError(LogiTrackError):
    """Store failure during a read or write."""

    error_code = "DATABASE_ERROR"


class AuthError(Unauthenticated):
    """R: Internal credential failure; kind is logged, never surfaced."""

    kind: str = "invalid"


class InvalidSignature(AuthError):
    kind = "invalid_signature"


class Expired(AuthError):
    kind = "expired"


class WrongAudience(AuthError):
    kind = "wrong_audience"


class WrongIssuer(AuthError):
    kind = "wrong_issuer"


class Malformed(AuthError):
    kind = "malformed"
