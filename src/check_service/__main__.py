"""Allow ``python -m check_service`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m check_service`` behaves identically to the
``check-service`` console script.
"""

from __future__ import annotations

from check_service.cli.app import cli

if __name__ == "__main__":
    cli()
