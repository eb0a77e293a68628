"""
exceptions.py
--------------

Error taxonomy of the request layer. Every failure that reaches a
caller of :meth:`RequestOrchestrator.request` is one of these classes:

* :class:`TransportError` – network error, timeout or bad framing.
* :class:`ApplicationError` – the server answered with an envelope whose
  ``code`` is neither 200 nor 401.
* :class:`LoginError` – the platform handshake or the login exchange failed.
* :class:`RefreshError` – the refresh exchange failed; the stored
  credential has been cleared.

Transport and application errors are retried by the orchestrator;
login and refresh errors are not.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class AuthRequestError(Exception):
    """Base exception for the request layer."""

    code = "AUTHREQUEST_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert the exception to a JSON friendly dict."""
        result: Dict[str, Any] = {"detail": self.message, "error": self.code}
        if self.details:
            result["details"] = self.details
        return result


class TransportError(AuthRequestError):
    """Raised when the transport could not deliver a request or decode its reply."""

    code = "TRANSPORT_ERROR"

    def __init__(self, message: str, status_code: Optional[int] = None,
                 details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details)
        self.status_code = status_code


class ApplicationError(AuthRequestError):
    """Raised when the response envelope reports a logical failure."""

    code = "APPLICATION_ERROR"

    def __init__(self, message: str, envelope: Any = None) -> None:
        details = {"envelope_code": envelope.code} if envelope is not None else None
        super().__init__(message, details)
        self.envelope = envelope


class LoginError(AuthRequestError):
    """Raised when no credential could be obtained."""

    code = "LOGIN_ERROR"


class RefreshError(AuthRequestError):
    """Raised when an expired credential could not be exchanged for a new one."""

    code = "REFRESH_ERROR"
