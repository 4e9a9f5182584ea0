"""Custom exception hierarchy for check-service.

All exceptions that cross layer boundaries must inherit from
:class:`CheckServiceError`.  Raw third-party exceptions (e.g. from
requests) must NEVER propagate beyond the infrastructure layer — they
must be caught and re-raised as a typed subclass defined here.

Hierarchy
---------
CheckServiceError
├── UsageError
│   └── DuplicateOptionError
├── InvalidURIError
├── ConfigurationError
├── EnvironmentError
└── CheckFailure
"""

from __future__ import annotations

import enum


class CheckServiceError(Exception):
    """Base exception for all check-service errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Command line ----------------------------------------------------------

class UsageError(CheckServiceError):
    """Raised when the command line does not match the expected shape."""


class DuplicateOptionError(UsageError):
    """Raised when an option repeats and the parser is set to reject duplicates."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Option '{name}' was given more than once.")
        self.name: str = name


# --- Target ----------------------------------------------------------------

class InvalidURIError(CheckServiceError):
    """Raised when the URI to check is not an absolute http(s) URI."""


# --- Environment / configuration -------------------------------------------

class ConfigurationError(CheckServiceError):
    """Raised when an environment setting holds an unusable value."""


class EnvironmentError(CheckServiceError):
    """Raised when a required runtime dependency is not available."""


# --- Check -----------------------------------------------------------------

class FailureKind(enum.Enum):
    """How a check failed, as classified by the checker."""

    HTTP_ERROR = "http_error"
    """The server answered, but with a status the transport treats as an error."""

    HOST_UNREACHABLE = "host_unreachable"
    """The destination could not be resolved or connected to."""

    OTHER = "other"
    """Anything else."""


class CheckFailure(CheckServiceError):
    """Raised by a checker when the GET does not complete normally.

    ``status``, ``reason`` and ``body`` are only populated for
    :attr:`FailureKind.HTTP_ERROR`, where the server did send a response.
    """

    def __init__(
        self,
        message: str,
        kind: FailureKind,
        *,
        status: int | None = None,
        reason: str | None = None,
        body: str = "",
    ) -> None:
        super().__init__(message)
        self.kind: FailureKind = kind
        self.status: int | None = status
        self.reason: str | None = reason
        self.body: str = body
