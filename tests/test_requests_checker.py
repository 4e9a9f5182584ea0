"""Tests for the requests-backed checker (infra/requests_checker.py).

``requests.Session`` is replaced by a mock — no network access occurs.

Coverage:
* Plain GET and response handling.
* DNS override: URL rewrite and ``Host`` header.
* Error mapping onto :class:`FailureKind`.
* TLS validation failure → warning plus unvalidated retry.
* TLS hostname checks against the logical host under a DNS override.
* Session ownership and release.
"""

from __future__ import annotations

import ssl
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
import requests
import urllib3

from check_service.config import DEFAULT_USER_AGENT
from check_service.exceptions import CheckFailure, FailureKind, InvalidURIError
from check_service.infra.requests_checker import (
    HostHeaderSSLAdapter,
    RequestsHostChecker,
    describe_ssl_error,
)


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

def _response(status: int = 200, reason: str = "OK", text: str = "<status/>") -> MagicMock:
    response = MagicMock()
    response.status_code = status
    response.reason = reason
    response.text = text
    response.__enter__.return_value = response
    response.__exit__.return_value = False
    return response


def _session(*results: Any) -> MagicMock:
    session = MagicMock(spec=requests.Session)
    session.get.side_effect = list(results)
    return session


def _ssl_error(message: str = "certificate has expired") -> requests.exceptions.SSLError:
    cert_error = ssl.SSLCertVerificationError(1, f"[SSL: CERTIFICATE_VERIFY_FAILED] {message}")
    cert_error.verify_message = message
    wrapped = requests.exceptions.SSLError("Max retries exceeded")
    wrapped.__cause__ = cert_error
    return wrapped


# ---------------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------------

class TestGet:
    def test_returns_outcome(self) -> None:
        response = _response()
        session = _session(response)
        checker = RequestsHostChecker(timeout=5, session=session)

        outcome = checker.check("http://www.example.com/status")

        assert outcome.status == 200
        assert outcome.reason == "OK"
        assert outcome.body == "<status/>"
        assert outcome.warning is None
        session.get.assert_called_once_with(
            "http://www.example.com/status",
            headers={"User-Agent": DEFAULT_USER_AGENT},
            timeout=5,
            verify=True,
        )

    def test_response_is_released(self) -> None:
        response = _response()
        RequestsHostChecker(session=_session(response)).check("http://www.example.com/")
        response.__exit__.assert_called_once()

    def test_redirect_status_is_not_an_error(self) -> None:
        checker = RequestsHostChecker(session=_session(_response(304, "Not Modified", "")))
        assert checker.check("http://www.example.com/").status == 304

    def test_custom_user_agent(self) -> None:
        session = _session(_response())
        RequestsHostChecker(user_agent="monitor/1", session=session).check("https://x.example/")
        assert session.get.call_args.kwargs["headers"] == {"User-Agent": "monitor/1"}

    def test_fragment_is_not_sent(self) -> None:
        session = _session(_response())
        RequestsHostChecker(session=session).check("http://www.example.com/a#frag")
        assert session.get.call_args.args[0] == "http://www.example.com/a"


# ---------------------------------------------------------------------------
# DNS override
# ---------------------------------------------------------------------------

class TestDnsOverride:
    def test_routes_to_override_and_keeps_host_header(self) -> None:
        session = _session(_response())
        RequestsHostChecker(session=session).check(
            "http://www.example.com:8080/status?full=1", "node3.internal",
        )

        call = session.get.call_args
        assert call.args[0] == "http://node3.internal:8080/status?full=1"
        assert call.kwargs["headers"]["Host"] == "www.example.com:8080"

    def test_default_port(self) -> None:
        session = _session(_response())
        RequestsHostChecker(session=session).check("https://www.example.com/", "10.0.0.7")

        call = session.get.call_args
        assert call.args[0] == "https://10.0.0.7/"
        assert call.kwargs["headers"]["Host"] == "www.example.com"

    def test_ipv6_override_is_bracketed(self) -> None:
        session = _session(_response())
        RequestsHostChecker(session=session).check("http://www.example.com:81/", "fe80::1")
        assert session.get.call_args.args[0] == "http://[fe80::1]:81/"

    def test_override_with_explicit_port_kept(self) -> None:
        session = _session(_response())
        RequestsHostChecker(session=session).check("http://www.example.com:81/", "node3:9000")
        assert session.get.call_args.args[0] == "http://node3:9000/"

    def test_userinfo_kept_out_of_host_header(self) -> None:
        session = _session(_response())
        RequestsHostChecker(session=session).check("http://user:pw@www.example.com/", "node3")

        call = session.get.call_args
        assert call.args[0] == "http://user:pw@node3/"
        assert call.kwargs["headers"]["Host"] == "www.example.com"

    def test_empty_override_is_ignored(self) -> None:
        session = _session(_response())
        RequestsHostChecker(session=session).check("http://www.example.com/", "")
        assert "Host" not in session.get.call_args.kwargs["headers"]


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------

class TestErrorMapping:
    @pytest.mark.parametrize("uri", ["nope", "/relative/path", "ftp://files.example.com/", "http://"])
    def test_invalid_uri(self, uri: str) -> None:
        session = _session()
        with pytest.raises(InvalidURIError, match="Unknown endpoint"):
            RequestsHostChecker(session=session).check(uri)
        session.get.assert_not_called()

    def test_error_status_carries_response(self) -> None:
        checker = RequestsHostChecker(session=_session(_response(404, "Not Found", "gone")))
        with pytest.raises(CheckFailure) as exc_info:
            checker.check("http://www.example.com/incorrecturi")

        failure = exc_info.value
        assert failure.kind is FailureKind.HTTP_ERROR
        assert failure.status == 404
        assert failure.reason == "Not Found"
        assert failure.body == "gone"

    @pytest.mark.parametrize(
        "exc",
        [
            requests.exceptions.ConnectionError("Failed to resolve 'nohost.invalid'"),
            requests.exceptions.ProxyError("Cannot connect to proxy"),
            requests.exceptions.ConnectTimeout("connect timed out"),
        ],
    )
    def test_connection_problems_are_unreachable(self, exc: Exception) -> None:
        checker = RequestsHostChecker(session=_session(exc))
        with pytest.raises(CheckFailure) as exc_info:
            checker.check("http://www.example.com/", "nohost.invalid")
        assert exc_info.value.kind is FailureKind.HOST_UNREACHABLE
        assert exc_info.value.__cause__ is exc

    @pytest.mark.parametrize(
        "exc",
        [
            requests.exceptions.ReadTimeout("read timed out"),
            requests.exceptions.TooManyRedirects("Exceeded 30 redirects"),
        ],
    )
    def test_other_transport_errors(self, exc: Exception) -> None:
        checker = RequestsHostChecker(session=_session(exc))
        with pytest.raises(CheckFailure) as exc_info:
            checker.check("http://www.example.com/")
        assert exc_info.value.kind is FailureKind.OTHER


# ---------------------------------------------------------------------------
# TLS
# ---------------------------------------------------------------------------

class TestTls:
    def test_validation_failure_becomes_warning(self) -> None:
        session = _session(_ssl_error(), _response())
        outcome = RequestsHostChecker(session=session).check("https://self-signed.example/")

        assert outcome.status == 200
        assert outcome.warning == "SSL certificate issue: certificate has expired"
        first, second = session.get.call_args_list
        assert first.kwargs["verify"] is True
        assert second.kwargs["verify"] is False

    def test_error_status_after_unvalidated_retry(self) -> None:
        session = _session(_ssl_error(), _response(503, "Service Unavailable", "down"))
        with pytest.raises(CheckFailure) as exc_info:
            RequestsHostChecker(session=session).check("https://self-signed.example/")
        assert exc_info.value.status == 503

    def test_tls_failure_without_validation_is_other(self) -> None:
        session = _session(_ssl_error(), requests.exceptions.SSLError("handshake failure"))
        with pytest.raises(CheckFailure) as exc_info:
            RequestsHostChecker(session=session).check("https://broken.example/")
        assert exc_info.value.kind is FailureKind.OTHER


class TestHostHeaderSSLAdapter:
    @staticmethod
    def _prepared(url: str, headers: dict[str, str] | None = None) -> requests.PreparedRequest:
        return requests.Request("GET", url, headers=headers).prepare()

    def test_checker_mounts_adapter_for_https(self) -> None:
        session = _session()
        RequestsHostChecker(session=session)
        prefix, adapter = session.mount.call_args.args
        assert prefix == "https://"
        assert isinstance(adapter, HostHeaderSSLAdapter)

    def test_own_session_uses_adapter(self) -> None:
        checker = RequestsHostChecker()
        adapter = checker._session.get_adapter("https://10.0.0.7/")
        assert isinstance(adapter, HostHeaderSSLAdapter)
        checker.close()

    def test_host_header_sets_tls_hostname(self) -> None:
        adapter = HostHeaderSSLAdapter()
        request = self._prepared("https://10.0.0.7:8443/status", {"Host": "www.example.com:8443"})
        with patch.object(requests.adapters.HTTPAdapter, "send") as send:
            adapter.send(request, timeout=5)

        send.assert_called_once_with(request, timeout=5)
        pool_kw = adapter.poolmanager.connection_pool_kw
        assert pool_kw["server_hostname"] == "www.example.com"
        assert pool_kw["assert_hostname"] == "www.example.com"

    def test_ipv6_host_header_is_unbracketed(self) -> None:
        adapter = HostHeaderSSLAdapter()
        request = self._prepared("https://node3/", {"Host": "[fe80::1]:443"})
        with patch.object(requests.adapters.HTTPAdapter, "send"):
            adapter.send(request)
        assert adapter.poolmanager.connection_pool_kw["server_hostname"] == "fe80::1"

    def test_without_host_header_defaults_are_restored(self) -> None:
        adapter = HostHeaderSSLAdapter()
        with patch.object(requests.adapters.HTTPAdapter, "send"):
            adapter.send(self._prepared("https://node3/", {"Host": "www.example.com"}))
            adapter.send(self._prepared("https://www.example.com/"))

        pool_kw = adapter.poolmanager.connection_pool_kw
        assert "server_hostname" not in pool_kw
        assert "assert_hostname" not in pool_kw

    def test_matching_certificate_under_override_has_no_warning(self) -> None:
        session = _session(_response())
        outcome = RequestsHostChecker(session=session).check(
            "https://www.example.com/status", "10.0.0.7",
        )

        assert outcome.warning is None
        session.get.assert_called_once()
        assert session.get.call_args.kwargs["verify"] is True
        assert session.get.call_args.kwargs["headers"]["Host"] == "www.example.com"


class TestDescribeSslError:
    def test_finds_verify_message_in_chain(self) -> None:
        assert describe_ssl_error(_ssl_error("hostname mismatch")) == "hostname mismatch"

    def test_finds_wrapped_reason(self) -> None:
        inner = ssl.SSLCertVerificationError(1, "self-signed certificate")
        outer = requests.exceptions.SSLError(
            urllib3.exceptions.MaxRetryError(None, "https://x.example/", reason=inner),
        )
        assert "self-signed certificate" in describe_ssl_error(outer)

    def test_falls_back_to_message(self) -> None:
        assert describe_ssl_error(requests.exceptions.SSLError("plain")) == "plain"


# ---------------------------------------------------------------------------
# Session lifetime
# ---------------------------------------------------------------------------

class TestClose:
    def test_own_session_is_closed(self) -> None:
        with patch("requests.Session") as session_class:
            checker = RequestsHostChecker()
            checker.close()
        session_class.return_value.close.assert_called_once_with()

    def test_injected_session_is_left_open(self) -> None:
        session = _session()
        RequestsHostChecker(session=session).close()
        session.close.assert_not_called()

    def test_context_manager_closes(self) -> None:
        with patch("requests.Session") as session_class:
            with RequestsHostChecker() as checker:
                assert isinstance(checker, RequestsHostChecker)
        session_class.return_value.close.assert_called_once_with()
