"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols — never on concrete
implementations — preserving the dependency inversion principle.
"""

from __future__ import annotations

from typing import Protocol

from check_service.core.models import CheckOutcome


class HostChecker(Protocol):
    """Contract for the component that performs the actual HTTP GET.

    Any object that implements :meth:`check` with the correct signature
    satisfies this protocol structurally (no explicit inheritance
    required), which is how tests substitute a fake for the network.
    """

    def check(self, uri: str, dns_name: str | None = None) -> CheckOutcome:
        """GET *uri*, routing the request to *dns_name* when given.

        The host of *uri* stays the logical target (``Host`` header);
        *dns_name* only changes where the connection is made.

        Raises
        ------
        CheckFailure
            With :attr:`FailureKind.HTTP_ERROR` when the server returned
            an error response, :attr:`FailureKind.HOST_UNREACHABLE` when
            the destination could not be resolved or contacted, or
            :attr:`FailureKind.OTHER` for any other transport problem.
        """
        ...  # pragma: no cover
