"""CLI application entry point for check-service.

This module is the **sole error boundary** for the entire application.
It catches :class:`~check_service.exceptions.CheckServiceError`,
``KeyboardInterrupt``, and any unexpected ``Exception``, rendering
user-friendly messages via Rich and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here — parsing, validation and outcome
  mapping belong to :class:`~check_service.core.check_service.CheckService`.
* ``print()`` is forbidden outside the CLI layer; the console proxy is
  used exclusively.
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence
from contextlib import closing
from typing import TYPE_CHECKING

from check_service import exit_codes
from check_service.cli.console import console
from check_service.config import Settings, load_settings
from check_service.core.check_service import CheckService
from check_service.core.models import CheckReport, Tone
from check_service.core.protocols import HostChecker
from check_service.exceptions import CheckServiceError
from check_service.logging import configure_logging
from check_service.version import __version__

if TYPE_CHECKING:
    from check_service.infra.requests_checker import RequestsHostChecker

USAGE_LINES: tuple[str, ...] = (
    "Performs an HTTP GET on a given host.",
    "Usage:  check-service http://hostname:port/path -d dnsname",
    "",
    "http://hostname:port/path     The URI to check.",
    "-d dnsname [optional]         The actual host to which the GET should be sent.",
    "",
    "Specifying the dnsname allows a check to be run directly on a host, bypassing",
    "any redirections or pooling performed by local traffic managers and suchlike.",
    "",
    "Exit code is 0 for HTTP 200, otherwise the HTTP status; -1 for bad usage,",
    "-2 when the check could not be completed.",
)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def _show_banner() -> None:
    console.print()
    console.print(f"check-service {__version__}   Checks a REST service.")
    console.print()


def _show_usage() -> None:
    for line in USAGE_LINES:
        console.print(line)


def _render(report: CheckReport) -> None:
    if report.show_usage:
        _show_usage()
    for line in report.lines:
        console.print(line.text, tone=line.tone)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def _build_checker(settings: Settings) -> RequestsHostChecker:
    from check_service.infra.requests_checker import RequestsHostChecker

    return RequestsHostChecker(timeout=settings.timeout, user_agent=settings.user_agent)


def main(
    argv: Sequence[str] | None = None,
    *,
    checker: HostChecker | None = None,
    settings: Settings | None = None,
) -> int:
    """Run the check-service CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.
    checker:
        The :class:`HostChecker` to use.  Defaults to the requests-backed
        implementation, which is closed before returning.  An injected
        checker is left open.
    settings:
        Runtime settings.  Defaults to :func:`load_settings`.

    Returns
    -------
    int
        OS process exit code.
    """
    if settings is None:
        settings = load_settings()
    configure_logging(settings.log_level)

    arguments = list(sys.argv[1:] if argv is None else argv)

    _show_banner()
    if checker is not None:
        report = CheckService(checker).execute(arguments)
    else:
        with closing(_build_checker(settings)) as built:
            report = CheckService(built).execute(arguments)
    _render(report)
    return report.exit_code


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except CheckServiceError as exc:
        console.print(f"Error: {exc}", tone=Tone.ERROR)
        if exc.hint:
            console.print(f"Hint: {exc.hint}", tone=Tone.WARNING)
        sys.exit(exit_codes.CHECK_FAILED)
    except KeyboardInterrupt:
        console.print()
        console.print("Aborted by user.", tone=Tone.WARNING)
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "Unexpected error. Please report this issue.\n"
            f"  {type(exc).__name__}: {exc}",
            tone=Tone.ERROR,
        )
        sys.exit(exit_codes.CHECK_FAILED)
