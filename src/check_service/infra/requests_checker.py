"""requests backed implementation of :class:`~check_service.core.protocols.HostChecker`.

This module is the **only** place in the codebase that imports
``requests`` and ``urllib3``.  All transport exceptions are caught here
and re-raised as :class:`~check_service.exceptions.CheckFailure` with an
explicit :class:`~check_service.exceptions.FailureKind` — nothing raw
escapes the infrastructure boundary, and nothing downstream has to
inspect error message text.
"""

from __future__ import annotations

import ssl
import warnings
from typing import Any
from urllib.parse import SplitResult, urlsplit, urlunsplit

import requests
import structlog
import urllib3
from requests.adapters import HTTPAdapter

from check_service.config import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from check_service.core.models import CheckOutcome
from check_service.exceptions import CheckFailure, FailureKind, InvalidURIError

logger = structlog.get_logger()

_SUPPORTED_SCHEMES: frozenset[str] = frozenset({"http", "https"})


class HostHeaderSSLAdapter(HTTPAdapter):
    """Validate TLS against the ``Host`` header rather than the connect address.

    With a DNS override the URL names the node but the certificate names
    the service, so SNI and hostname matching must use the logical host.
    """

    def send(self, request: requests.PreparedRequest, **kwargs: Any) -> requests.Response:
        pool_kw = self.poolmanager.connection_pool_kw
        host_header = request.headers.get("Host")
        hostname = urlsplit(f"//{host_header}").hostname if host_header else None
        if hostname:
            pool_kw["server_hostname"] = hostname
            pool_kw["assert_hostname"] = hostname
        else:
            pool_kw.pop("server_hostname", None)
            pool_kw.pop("assert_hostname", None)
        return super().send(request, **kwargs)


class RequestsHostChecker:
    """Concrete :class:`HostChecker` backed by a :class:`requests.Session`.

    Usage::

        checker = RequestsHostChecker(timeout=10)
        outcome = checker.check("https://api.example.com/status", "node3.internal")

    When a DNS name is given the connection goes to that host (same
    scheme, port, path and query) while the ``Host`` header keeps the
    URI's own authority, so a single node behind a load balancer can be
    checked directly.

    TLS certificates are validated against the URI's own host, also
    when a DNS name is given.  A validation failure does not fail
    the check: it is reported as :attr:`CheckOutcome.warning` and the GET
    is sent without validation.  The failed handshake happens before any
    request is written, so the server still sees a single GET.
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        session: requests.Session | None = None,
    ) -> None:
        self._timeout: float = timeout
        self._user_agent: str = user_agent
        self._owns_session: bool = session is None
        self._session: requests.Session = session or requests.Session()
        self._session.mount("https://", HostHeaderSSLAdapter())

    def close(self) -> None:
        """Release pooled connections if this checker created the session."""
        if self._owns_session:
            self._session.close()
            logger.debug("session_closed")

    def __enter__(self) -> RequestsHostChecker:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Protocol method
    # ------------------------------------------------------------------

    def check(self, uri: str, dns_name: str | None = None) -> CheckOutcome:
        """GET *uri*, optionally routed to *dns_name*.

        Returns
        -------
        CheckOutcome
            For any response with a status below 400.

        Raises
        ------
        InvalidURIError
            When *uri* is not an absolute http(s) URI.
        CheckFailure
            ``HTTP_ERROR`` for responses of 400 and above,
            ``HOST_UNREACHABLE`` when no connection could be made,
            ``OTHER`` for any other transport error.
        """
        parts = urlsplit(uri)
        if parts.scheme.lower() not in _SUPPORTED_SCHEMES or not parts.hostname:
            raise InvalidURIError(
                f"Unknown endpoint {uri}",
                hint="Give an absolute URI such as http://hostname:port/path.",
            )

        url, headers = self._route(parts, dns_name)
        logger.debug("request_routed", url=url, host_header=headers.get("Host"))

        warning: str | None = None
        try:
            status, reason, body = self._fetch(url, headers, verify=True)
        except requests.exceptions.SSLError as exc:
            detail = describe_ssl_error(exc)
            logger.warning("ssl_validation_failed", url=url, detail=detail)
            warning = f"SSL certificate issue: {detail}"
            status, reason, body = self._fetch(url, headers, verify=False)

        if status >= 400:
            raise CheckFailure(
                f"{status} {reason} from HTTP GET to {uri}",
                FailureKind.HTTP_ERROR,
                status=status,
                reason=reason,
                body=body,
            )
        return CheckOutcome(status=status, body=body, reason=reason, warning=warning)

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _route(
        self,
        parts: SplitResult,
        dns_name: str | None,
    ) -> tuple[str, dict[str, str]]:
        """Return the URL to connect to and the headers to send."""
        headers = {"User-Agent": self._user_agent}
        if not dns_name:
            return urlunsplit(parts._replace(fragment="")), headers

        userinfo, _, authority = parts.netloc.rpartition("@")
        host = dns_name
        if host.count(":") > 1 and not host.startswith("["):
            host = f"[{host}]"  # IPv6 literal
        if parts.port is not None and ":" not in host.rpartition("]")[2]:
            host = f"{host}:{parts.port}"
        netloc = f"{userinfo}@{host}" if userinfo else host

        headers["Host"] = authority
        return urlunsplit(parts._replace(netloc=netloc, fragment="")), headers

    def _fetch(
        self,
        url: str,
        headers: dict[str, str],
        *,
        verify: bool,
    ) -> tuple[int, str, str]:
        """Send the GET and read the whole body; return (status, reason, body).

        ``SSLError`` propagates untouched while *verify* is on so the
        caller can retry; every other transport error is mapped.
        """
        try:
            with warnings.catch_warnings():
                if not verify:
                    warnings.simplefilter("ignore", urllib3.exceptions.InsecureRequestWarning)
                with self._session.get(
                    url,
                    headers=headers,
                    timeout=self._timeout,
                    verify=verify,
                ) as response:
                    return response.status_code, response.reason or "", response.text
        except requests.exceptions.SSLError as exc:
            if verify:
                raise
            raise CheckFailure(f"TLS failure talking to {url}: {exc}", FailureKind.OTHER) from exc
        except requests.exceptions.ConnectionError as exc:
            logger.info("host_unreachable", url=url, error=str(exc))
            raise CheckFailure(
                f"Could not connect to {url}: {exc}",
                FailureKind.HOST_UNREACHABLE,
            ) from exc
        except requests.exceptions.RequestException as exc:
            raise CheckFailure(f"HTTP GET to {url} failed: {exc}", FailureKind.OTHER) from exc


def describe_ssl_error(exc: BaseException) -> str:
    """Dig the certificate verification message out of a wrapped SSL error.

    requests wraps urllib3 errors which wrap the ``ssl`` module's; walk
    the chain (``__cause__``/``__context__``/``reason``/``args``) looking
    for :class:`ssl.SSLCertVerificationError`.
    """
    pending: list[object] = [exc]
    seen: set[int] = set()
    while pending:
        current = pending.pop(0)
        if not isinstance(current, BaseException) or id(current) in seen:
            continue
        seen.add(id(current))
        if isinstance(current, ssl.SSLCertVerificationError):
            return getattr(current, "verify_message", None) or str(current)
        pending.extend(
            (current.__cause__, current.__context__, getattr(current, "reason", None))
        )
        pending.extend(current.args)
    return str(exc)
