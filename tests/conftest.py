"""Shared pytest fixtures and configuration for the check-service test suite.

Guidelines
----------
* No network access in any test.
* requests must be mocked at the session boundary; the checker itself
  is replaced through the ``HostChecker`` protocol.
* Core tests must be pure — no side effects.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
import structlog

from check_service.config import Settings
from check_service.logging import configure_logging


@pytest.fixture(autouse=True)
def _quiet_logging() -> Iterator[None]:
    configure_logging("CRITICAL")
    yield
    structlog.reset_defaults()


@pytest.fixture()
def settings() -> Settings:
    """Settings that keep ``main`` from reading the real environment."""
    return Settings(log_level="CRITICAL")
