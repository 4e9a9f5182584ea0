"""Command-line token classifier.

Splits raw argument tokens into positional arguments and named options
using one token of lookahead:

* ``-x value`` / ``/x value`` — option ``x`` with ``value``.
* ``-x`` followed by another marker, or at the end — flag ``x`` (``""``).
* anything else — positional, kept in encounter order.

A token is an option marker when it is at least two characters long and
starts with ``-`` or ``/``.  Classification never fails; whether the
result makes sense for a given tool is decided by the caller.  The one
exception is :attr:`DuplicatePolicy.ERROR`, which a caller has to opt
into explicitly.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from types import MappingProxyType

import structlog

from check_service.core.models import (
    DuplicatePolicy,
    ParseOptions,
    ParsedArguments,
    normalize_option_name,
)
from check_service.exceptions import DuplicateOptionError

logger = structlog.get_logger()

_OPTION_PREFIXES: tuple[str, ...] = ("-", "/")


def is_option_marker(token: str) -> bool:
    """Return ``True`` when *token* introduces an option or flag."""
    return len(token) >= 2 and token.startswith(_OPTION_PREFIXES)


class CommandLineParser:
    """Classifies a sequence of tokens into a :class:`ParsedArguments`.

    Parameters
    ----------
    arguments:
        Raw tokens, typically ``sys.argv[1:]``.
    options:
        Case and duplicate handling.  Defaults to case-insensitive names
        where the first occurrence of a repeated option wins.
    """

    def __init__(
        self,
        arguments: Iterable[str],
        options: ParseOptions | None = None,
    ) -> None:
        self._arguments: tuple[str, ...] = tuple(arguments)
        self._options: ParseOptions = options or ParseOptions()

    @property
    def options(self) -> ParseOptions:
        return self._options

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def parse(self) -> ParsedArguments:
        """Classify every token and return the result.

        Raises
        ------
        DuplicateOptionError
            Only when configured with :attr:`DuplicatePolicy.ERROR` and an
            option name repeats.
        """
        tokens = self._arguments
        positionals: list[str] = []
        # comparison key -> (name as typed, value)
        found: dict[str, tuple[str, str]] = {}

        index = 0
        while index < len(tokens):
            token = tokens[index]
            if not is_option_marker(token):
                positionals.append(token)
                index += 1
                continue

            has_value = index + 1 < len(tokens) and not is_option_marker(tokens[index + 1])
            if has_value:
                self._add_option(found, token[1:], tokens[index + 1])
                index += 2
            else:
                self._add_option(found, token[1:], "")
                index += 1

        parsed = ParsedArguments(
            positionals=tuple(positionals),
            options=MappingProxyType(dict(found.values())),
            case_sensitive=self._options.case_sensitive,
        )
        logger.debug(
            "arguments_parsed",
            positionals=len(parsed.positionals),
            options=sorted(parsed.options),
        )
        return parsed

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _add_option(
        self,
        found: dict[str, tuple[str, str]],
        name: str,
        value: str,
    ) -> None:
        key = normalize_option_name(name, case_sensitive=self._options.case_sensitive)
        if key not in found:
            found[key] = (name, value)
            return

        policy = self._options.duplicate_policy
        if policy is DuplicatePolicy.ERROR:
            raise DuplicateOptionError(name)
        if policy is DuplicatePolicy.KEEP_LAST:
            # Keep the first spelling (and position), take the new value.
            found[key] = (found[key][0], value)
        logger.debug("duplicate_option", name=name, policy=policy.value)


def parse_arguments(
    arguments: Sequence[str],
    options: ParseOptions | None = None,
) -> ParsedArguments:
    """Convenience wrapper: ``CommandLineParser(arguments, options).parse()``."""
    return CommandLineParser(arguments, options).parse()
