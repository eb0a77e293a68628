"""
clients/http_client.py
----------------------

Default transport adapter built on ``httpx.AsyncClient``. It sends a
single request and returns the decoded JSON body, which the
orchestrator then interprets as a response envelope. This client
should be instantiated once per process and shared via the request
context; :func:`authrequest.main.lifespan` creates and closes it.

The adapter performs no retries of its own. Every failure (network
error, timeout after ``http_timeout`` seconds, non‑2xx status or a
body that is not JSON) is raised as :class:`TransportError` so that
the orchestrator applies one retry policy to all of them.
"""

from __future__ import annotations

import json
import time
from typing import Any, Dict, Optional, Protocol
import httpx

from authrequest.core.auth import build_url
from authrequest.core.config import Settings, get_settings
from authrequest.exceptions import TransportError
from authrequest.logging_config import log_http_request, logger


class Transport(Protocol):
    """Sends one request and returns the decoded body.

    Implementations must raise :class:`TransportError` for every
    failure; the orchestrator wraps anything else into one.
    """

    async def send(self, method: str, url: str, *, headers: Dict[str, str], data: Any = None) -> Any: ...


class HTTPClient:
    """Async HTTP transport with a fixed timeout.

    ``data`` is sent as query parameters for ``GET`` requests and as a
    JSON body otherwise. Tests and embedders may pass their own
    ``httpx`` transport (for example ``httpx.MockTransport``).
    """

    def __init__(self, settings: Optional[Settings] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        settings = settings or get_settings()
        self.base_url = settings.base_url
        self.timeout = settings.http_timeout
        # HTTPX AsyncClient uses connection pooling
        self._client = httpx.AsyncClient(timeout=self.timeout, transport=transport)

    async def close(self) -> None:
        """Close the underlying HTTPX client and release resources."""
        await self._client.aclose()

    async def send(self, method: str, url: str, *, headers: Dict[str, str], data: Any = None) -> Any:
        method = method.upper()
        full_url = build_url(self.base_url, url)
        params = data if method == "GET" and data else None
        body = data if method != "GET" and data is not None else None

        log_http_request(method, full_url, headers=headers, params=params, json_body=body)
        start_time = time.time()
        try:
            response = await self._client.request(method, full_url, headers=headers, params=params, json=body)
        except httpx.TimeoutException as exc:
            logger.warning(json.dumps({"event": "http_error", "method": method, "url": full_url, "detail": "timeout"}))
            raise TransportError(f"Request to {full_url} timed out after {self.timeout}s") from exc
        except httpx.HTTPError as exc:
            logger.warning(json.dumps({"event": "http_error", "method": method, "url": full_url, "detail": str(exc)}))
            raise TransportError(f"Request to {full_url} failed: {exc}") from exc

        duration_ms = (time.time() - start_time) * 1000
        log_http_request(method, full_url, status=response.status_code, duration_ms=duration_ms)
        if response.is_error:
            raise TransportError(
                f"Request to {full_url} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            logger.warning(json.dumps({
                "event": "http_error",
                "method": method,
                "url": full_url,
                "detail": "response body is not JSON",
            }))
            raise TransportError(f"Response from {full_url} is not valid JSON",
                                 status_code=response.status_code) from exc
