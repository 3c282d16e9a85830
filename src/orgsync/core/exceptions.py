"""
Exceptions - Centralized exception hierarchy for orgsync.

All errors raised by the engine and its adapters derive from OrgSyncError,
so callers can catch one base class and still inspect the specific kind.

Hierarchy:
    OrgSyncError
    ├── TransportError           remote call failed (network, timeout, non-2xx)
    │   ├── AuthenticationError
    │   ├── AccessDeniedError
    │   ├── ResourceNotFoundError
    │   └── RateLimitError
    ├── ConfigurationError       missing search scope, malformed config
    ├── ReconciliationConflict   expected entity not found at apply time
    └── ParseError               malformed raw record or local file
"""

from __future__ import annotations


__all__ = [
    "AccessDeniedError",
    "AuthenticationError",
    "ConfigurationError",
    "OrgSyncError",
    "ParseError",
    "RateLimitError",
    "ReconciliationConflict",
    "ResourceNotFoundError",
    "TransportError",
]


class OrgSyncError(Exception):
    """
    Base exception for all orgsync errors.

    Attributes:
        message: Human readable error message
        cause: Underlying exception, if any
    """

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    @property
    def kind(self) -> str:
        """Taxonomy name used in reports (e.g. 'TransportError')."""
        for klass in type(self).__mro__:
            if klass in _TAXONOMY:
                return klass.__name__
        return type(self).__name__

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message} (caused by {type(self.cause).__name__}: {self.cause})"
        return self.message


# =============================================================================
# Transport Errors
# =============================================================================


class TransportError(OrgSyncError):
    """A call to the remote task service failed."""

    def __init__(
        self,
        message: str,
        task_id: str | None = None,
        status_code: int | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message, cause=cause)
        self.task_id = task_id
        self.status_code = status_code


class AuthenticationError(TransportError):
    """The API token was rejected (401)."""


class AccessDeniedError(TransportError):
    """The token lacks permission for the resource (403)."""


class ResourceNotFoundError(TransportError):
    """The requested task or project does not exist remotely (404)."""


class RateLimitError(TransportError):
    """The service is throttling requests (429)."""

    def __init__(
        self,
        message: str,
        retry_after: float | None = None,
        task_id: str | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message, task_id=task_id, status_code=429, cause=cause)
        self.retry_after = retry_after


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(OrgSyncError):
    """The sync run cannot proceed with the supplied configuration."""

    def __init__(
        self,
        message: str,
        config_path: str | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message, cause=cause)
        self.config_path = config_path


# =============================================================================
# Reconciliation Errors
# =============================================================================


class ReconciliationConflict(OrgSyncError):
    """Local or remote state diverged since the snapshot was read."""

    def __init__(
        self,
        message: str,
        task_id: str | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message, cause=cause)
        self.task_id = task_id


# =============================================================================
# Parse Errors
# =============================================================================


class ParseError(OrgSyncError):
    """A raw record or local file could not be understood."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        line_number: int | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message, cause=cause)
        self.source = source
        self.line_number = line_number

    def __str__(self) -> str:
        location = ""
        if self.source and self.line_number is not None:
            location = f" at {self.source}:{self.line_number}"
        elif self.source:
            location = f" in {self.source}"
        base = f"{self.message}{location}"
        if self.cause is not None:
            return f"{base} (caused by {type(self.cause).__name__}: {self.cause})"
        return base


_TAXONOMY = (TransportError, ConfigurationError, ReconciliationConflict, ParseError)
