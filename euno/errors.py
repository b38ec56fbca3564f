"""
Euno Errors — Structured failure taxonomy.

Every failure surfaced by the transport or a lifecycle operation is one of:
- ConnectivityError: network, TLS or timeout failure
- CancellationError: the caller withdrew before or during the exchange
- NotFoundError: the remote identity does not exist (404)
- RemoteFailureError: any other non-2xx response, or an unusable 2xx body
- InputValidationError: bad caller input, raised before any network call
"""
from __future__ import annotations
from typing import Any, Optional


class EunoError(Exception):
    """Base class for all errors raised by this package."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            **self.details,
        }


class ConnectivityError(EunoError):
    """The HTTP exchange could not be completed (connect, TLS, timeout, read)."""


class CancellationError(EunoError):
    """The caller's cancellation signal fired while queued or in flight."""


class RemoteFailureError(EunoError):
    """Non-2xx response from the remote service. Carries status and raw body verbatim."""

    def __init__(self, message: str, status_code: int, body: str = ""):
        super().__init__(message, {"status_code": status_code, "body": body})
        self.status_code = status_code
        self.body = body


class NotFoundError(RemoteFailureError):
    """The remote service reported 404 for the requested identity."""

    def __init__(self, message: str = "integration not found", body: str = ""):
        super().__init__(message, status_code=404, body=body)


class IntegrationVanishedError(NotFoundError):
    """An update targeted an identity that no longer exists remotely."""


class InputValidationError(EunoError):
    """Caller input is unusable. Raised before any request is issued."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, {"field": field} if field else None)
        self.field = field
