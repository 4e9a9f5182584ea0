"""Infrastructure layer — external system integration.

This layer wraps all interaction with requests/urllib3.  Every raw
third-party exception must be caught here and re-raised as a
:class:`~check_service.exceptions.CheckServiceError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
"""

from check_service.infra.requests_checker import RequestsHostChecker

__all__: list[str] = ["RequestsHostChecker"]
