"""Core / service layer — argument classification and outcome mapping.

Rules
-----
* No ``print()`` calls.
* No filesystem or network I/O.
* No imports from ``cli`` or ``infra``.
"""

from check_service.core.argument_parser import CommandLineParser, parse_arguments
from check_service.core.check_service import CheckService
from check_service.core.models import (
    CheckOutcome,
    CheckReport,
    CheckRequest,
    DuplicatePolicy,
    ParsedArguments,
    ParseOptions,
)
from check_service.core.protocols import HostChecker

__all__: list[str] = [
    "CheckOutcome",
    "CheckReport",
    "CheckRequest",
    "CheckService",
    "CommandLineParser",
    "DuplicatePolicy",
    "HostChecker",
    "ParseOptions",
    "ParsedArguments",
    "parse_arguments",
]
