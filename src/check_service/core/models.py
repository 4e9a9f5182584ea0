"""Domain models for check-service.

All models are **frozen** dataclasses — immutable value objects with no
behaviour beyond data access.  They carry zero I/O, zero dependencies on
external packages, and must remain pure across the entire lifecycle.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


# ---------------------------------------------------------------------------
# Parser configuration
# ---------------------------------------------------------------------------

class DuplicatePolicy(enum.Enum):
    """What the parser does when an option name repeats."""

    KEEP_FIRST = "keep_first"
    KEEP_LAST = "keep_last"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class ParseOptions:
    """Configuration of a :class:`CommandLineParser` instance."""

    case_sensitive: bool = False
    """Compare option names exactly instead of lower-cased."""

    duplicate_policy: DuplicatePolicy = DuplicatePolicy.KEEP_FIRST
    """Only one policy is active per parser."""


def normalize_option_name(name: str, *, case_sensitive: bool) -> str:
    """Return the comparison key for *name* under the given case policy."""
    return name if case_sensitive else name.lower()


# ---------------------------------------------------------------------------
# Parsed command line
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ParsedArguments:
    """Result of classifying a command line.

    ``options`` maps the option name as typed (prefix stripped) to its
    value; flags carry an empty string.  Names are unique under the case
    policy the arguments were parsed with.
    """

    positionals: tuple[str, ...] = ()
    options: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    case_sensitive: bool = False

    def _find(self, name: str) -> str | None:
        key = normalize_option_name(name, case_sensitive=self.case_sensitive)
        for existing in self.options:
            if normalize_option_name(existing, case_sensitive=self.case_sensitive) == key:
                return existing
        return None

    def has_option(self, name: str) -> bool:
        return self._find(name) is not None

    def option(self, name: str, default: str | None = None) -> str | None:
        """Return the value of option *name*, honouring the case policy."""
        existing = self._find(name)
        if existing is None:
            return default
        return self.options[existing]


# ---------------------------------------------------------------------------
# Check request / outcome
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class CheckRequest:
    """A validated invocation: what to GET and where to send it."""

    uri: str
    """The logical target; its host is kept as the ``Host`` header."""

    dns_name: str | None = None
    """Optional host the request is actually routed to."""


@dataclass(frozen=True, slots=True)
class CheckOutcome:
    """What a checker observed for a completed GET."""

    status: int | None
    """HTTP status code, or ``None`` when no status was obtained."""

    body: str = ""
    reason: str | None = None
    warning: str | None = None
    """E.g. a TLS certificate problem that was tolerated."""


# ---------------------------------------------------------------------------
# Rendered report
# ---------------------------------------------------------------------------

class Tone(enum.Enum):
    """How a report line should be presented."""

    PLAIN = "plain"
    STATUS = "status"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class ReportLine:
    text: str
    tone: Tone = Tone.PLAIN


@dataclass(frozen=True, slots=True)
class CheckReport:
    """Exit code plus the lines to show the user, in order."""

    exit_code: int
    lines: tuple[ReportLine, ...] = ()
    show_usage: bool = False

    @property
    def text(self) -> str:
        """All line texts joined by newlines (handy for assertions and logs)."""
        return "\n".join(line.text for line in self.lines)
