"""Runtime settings read from the environment.

check-service takes no configuration files; the few tunables it has are
plain environment variables:

* ``CHECK_SERVICE_TIMEOUT`` — seconds before the GET gives up (default 30).
* ``CHECK_SERVICE_LOG_LEVEL`` — structlog level name (default ``WARNING``).
* ``CHECK_SERVICE_USER_AGENT`` — ``User-Agent`` header sent with the GET.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import PositiveFloat, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from check_service.exceptions import ConfigurationError
from check_service.version import __version__

ENV_PREFIX: str = "CHECK_SERVICE_"

DEFAULT_TIMEOUT: float = 30.0
DEFAULT_LOG_LEVEL: str = "WARNING"
DEFAULT_USER_AGENT: str = f"check-service/{__version__}"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """Settings for a single check run."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
    )

    timeout: PositiveFloat = DEFAULT_TIMEOUT
    log_level: LogLevel = DEFAULT_LOG_LEVEL
    user_agent: str = DEFAULT_USER_AGENT

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value


def _from_mapping(environ: Mapping[str, str]) -> dict[str, str]:
    """Pick this tool's variables out of *environ*, skipping empty values."""
    values: dict[str, str] = {}
    for name in Settings.model_fields:
        raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
        if raw:
            values[name] = raw
    return values


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build :class:`Settings` from *environ* (defaults to ``os.environ``).

    Raises
    ------
    ConfigurationError
        When a variable is set to an unusable value.
    """
    try:
        if environ is None:
            return Settings()
        return Settings.model_validate(_from_mapping(environ))
    except ValidationError as exc:
        problems = "; ".join(
            f"{ENV_PREFIX}{'.'.join(str(part) for part in error['loc']).upper()}: {error['msg']}"
            for error in exc.errors()
        )
        raise ConfigurationError(
            f"Invalid environment settings: {problems}",
            hint="Log levels are DEBUG, INFO, WARNING, ERROR or CRITICAL; "
            "timeouts are seconds greater than zero.",
        ) from exc
