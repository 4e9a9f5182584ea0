"""check-service — single HTTP GET health check with optional host override.

Issues one GET against a URI, optionally routed to a different DNS name,
and reports the result through console output and the process exit code.
"""

from check_service.logging import configure_default_logging
from check_service.version import __version__

configure_default_logging()

__all__: list[str] = ["__version__"]
