"""CLI console helpers with optional Rich support.

This module intentionally avoids module-level imports of Rich so the
tool still works (uncoloured) when Rich is not installed.  Output goes
to **stdout**; the check report is the program's product.
"""

from __future__ import annotations

import sys
from typing import Any

from check_service.core.models import Tone
from check_service.exceptions import EnvironmentError

TONE_STYLES: dict[Tone, str | None] = {
	Tone.PLAIN: None,
	Tone.STATUS: "yellow",
	Tone.WARNING: "dark_orange",
	Tone.ERROR: "red",
}


def _load_rich_console_class() -> type[Any]:
	"""Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
	try:
		from rich.console import Console
	except ModuleNotFoundError as exc:
		raise EnvironmentError(
			"rich is not installed. Install with: pip install rich",
		) from exc
	return Console


def get_rich_console() -> Any:
	"""Create a Rich console instance targeting the current stdout."""
	console_class = _load_rich_console_class()
	return console_class(file=sys.stdout, soft_wrap=True, highlight=False)


class _ConsoleProxy:
	"""Minimal ``print``-compatible proxy with Rich fallback.

	Text is never parsed as Rich markup: response bodies and exception
	text routinely contain square brackets.
	"""

	def print(self, text: str = "", *, tone: Tone = Tone.PLAIN) -> None:
		"""Render with Rich when available, else plain stdout print."""
		try:
			rich_console = get_rich_console()
		except EnvironmentError:
			print(text, file=sys.stdout)
			return
		rich_console.print(text, style=TONE_STYLES[tone], markup=False, emoji=False)


console = _ConsoleProxy()
