"""Core check service — validates the command line and maps outcomes.

This service delegates the actual GET to a
:class:`~check_service.core.protocols.HostChecker` injected at
construction time.  It is responsible for:

* Validating the parsed command line into a :class:`CheckRequest`.
* Delegating to the checker.
* Turning the outcome (or failure) into a :class:`CheckReport` carrying
  the process exit code and the lines to display.

Exit codes
----------
HTTP 200 collapses to ``0``; every other status is returned as-is.
``-1`` (bad usage) and ``-2`` (failed check) sit outside the HTTP status
space so they can never collide with a real status.

Guarantees
----------
* Pure orchestration — no ``print()``, no network access of its own.
* Never raises from :meth:`CheckService.run`; every failure becomes a
  report.
"""

from __future__ import annotations

import http
import traceback
from collections.abc import Sequence
from urllib.parse import urlsplit

import structlog

from check_service.core.argument_parser import CommandLineParser
from check_service.core.models import (
    CheckOutcome,
    CheckReport,
    CheckRequest,
    ParseOptions,
    ParsedArguments,
    ReportLine,
    Tone,
)
from check_service.core.protocols import HostChecker
from check_service.exceptions import CheckFailure, FailureKind, UsageError
from check_service.exit_codes import BAD_USAGE, CHECK_FAILED, SUCCESS

logger = structlog.get_logger()


DNS_OPTION: str = "d"
"""Name of the only supported option (``-d`` / ``/d``)."""


def exit_code_for_status(status: int) -> int:
    """Map an HTTP status to a process exit code (200 becomes 0)."""
    return SUCCESS if status == http.HTTPStatus.OK else status


def reason_phrase(status: int, reason: str | None = None) -> str:
    """Return *reason* if given, else the standard phrase for *status*."""
    if reason:
        return reason
    try:
        return http.HTTPStatus(status).phrase
    except ValueError:
        return "Unknown"


def format_status_line(
    status: int,
    reason: str | None,
    request: CheckRequest,
) -> str:
    """Render ``"200 OK from HTTP GET to <uri>[ on <dns>]"``."""
    line = f"{status} {reason_phrase(status, reason)} from HTTP GET to {request.uri}"
    if request.dns_name:
        line += f" on {request.dns_name}"
    return line


class CheckService:
    """Runs one check and reports the result.

    Parameters
    ----------
    checker:
        Any object satisfying the :class:`HostChecker` protocol.
    parse_options:
        Case and duplicate handling for the command line.
    """

    def __init__(
        self,
        checker: HostChecker,
        parse_options: ParseOptions | None = None,
    ) -> None:
        self._checker: HostChecker = checker
        self._parse_options: ParseOptions = parse_options or ParseOptions()

    # ------------------------------------------------------------------
    # Validation (pure)
    # ------------------------------------------------------------------

    @staticmethod
    def validate(parsed: ParsedArguments) -> CheckRequest | None:
        """Return the request described by *parsed*, or ``None`` if malformed.

        Rules
        -----
        * Exactly one positional argument: the URI.
        * No options, or exactly the single option ``d`` (DNS override).
          A bare ``-d`` flag means no override.
        """
        if len(parsed.positionals) != 1:
            return None
        uri = parsed.positionals[0]

        if not parsed.options:
            return CheckRequest(uri=uri)
        if len(parsed.options) > 1 or not parsed.has_option(DNS_OPTION):
            return None

        dns_name = parsed.option(DNS_OPTION) or None
        return CheckRequest(uri=uri, dns_name=dns_name)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def execute(self, arguments: Sequence[str]) -> CheckReport:
        """Parse *arguments*, validate them and run the check."""
        try:
            parsed = CommandLineParser(arguments, self._parse_options).parse()
        except UsageError as exc:
            logger.info("usage_rejected", error=str(exc))
            return CheckReport(exit_code=BAD_USAGE, show_usage=True)

        request = self.validate(parsed)
        if request is None:
            logger.info(
                "usage_rejected",
                positionals=len(parsed.positionals),
                options=sorted(parsed.options),
            )
            return CheckReport(exit_code=BAD_USAGE, show_usage=True)
        return self.run(request)

    def run(self, request: CheckRequest) -> CheckReport:
        """GET ``request.uri`` through the checker and build the report."""
        logger.info("check_started", uri=request.uri, dns_name=request.dns_name)
        try:
            outcome = self._checker.check(request.uri, request.dns_name)
        except CheckFailure as failure:
            report = self._report_failure(request, failure)
        except Exception as exc:  # noqa: BLE001
            report = self._report_exception(request, exc)
        else:
            report = self._report_outcome(request, outcome)

        logger.info("check_finished", uri=request.uri, exit_code=report.exit_code)
        return report

    # ------------------------------------------------------------------
    # Outcome mapping
    # ------------------------------------------------------------------

    @staticmethod
    def _report_outcome(request: CheckRequest, outcome: CheckOutcome) -> CheckReport:
        lines: list[ReportLine] = []
        exit_code = CHECK_FAILED
        if outcome.status is not None:
            exit_code = exit_code_for_status(outcome.status)
            lines.append(
                ReportLine(
                    format_status_line(outcome.status, outcome.reason, request),
                    Tone.STATUS,
                )
            )
        if outcome.warning:
            lines.append(ReportLine(outcome.warning, Tone.WARNING))
        lines.append(ReportLine(""))
        lines.append(ReportLine(outcome.body))
        return CheckReport(exit_code=exit_code, lines=tuple(lines))

    @classmethod
    def _report_failure(cls, request: CheckRequest, failure: CheckFailure) -> CheckReport:
        match failure.kind:
            case FailureKind.HTTP_ERROR if failure.status is not None:
                return CheckReport(
                    exit_code=exit_code_for_status(failure.status),
                    lines=(
                        ReportLine(
                            format_status_line(failure.status, failure.reason, request),
                            Tone.ERROR,
                        ),
                        ReportLine(""),
                        ReportLine(failure.body),
                    ),
                )
            case FailureKind.HOST_UNREACHABLE:
                host = request.dns_name or urlsplit(request.uri).hostname or request.uri
                return CheckReport(
                    exit_code=CHECK_FAILED,
                    lines=(
                        ReportLine(
                            f"Host {host} cannot be contacted or does not exist.",
                            Tone.ERROR,
                        ),
                        ReportLine(""),
                        ReportLine(""),
                    ),
                )
            case _:
                return cls._report_exception(request, failure)

    @staticmethod
    def _report_exception(request: CheckRequest, exc: BaseException) -> CheckReport:
        logger.warning("check_raised", uri=request.uri, error=repr(exc))
        description = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        ).rstrip()
        return CheckReport(
            exit_code=CHECK_FAILED,
            lines=(
                ReportLine(f"Exception thrown during HTTP GET to {request.uri}", Tone.ERROR),
                ReportLine(""),
                ReportLine(description),
            ),
        )
