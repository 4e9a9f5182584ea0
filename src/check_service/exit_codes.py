"""Exit-code constants for check-service.

Centralised here so that every exit path uses a well-known, tested
value rather than magic integers scattered across the codebase.  Any
exit code not listed here is the HTTP status the check observed; the
negative sentinels sit outside the HTTP status space so they can never
collide with one.
"""

from __future__ import annotations

SUCCESS: int = 0
"""The check got HTTP 200."""

BAD_USAGE: int = -1
"""Malformed command line.  Usage text was displayed."""

CHECK_FAILED: int = -2
"""The check could not be completed (unreachable host, exception)."""

KEYBOARD_INTERRUPT: int = 130
"""User pressed Ctrl+C.  Follows POSIX convention (128 + SIGINT=2)."""
