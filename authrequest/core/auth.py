"""
core/auth.py
-------------

Helpers for building request URLs and HTTP headers.

These helpers centralise knowledge about the API base URL and the
``Authorization`` header so that bearer tokens are only ever attached
in one place. The orchestrator calls :func:`build_headers` for every
attempt, which means a retried or resubmitted request always carries
the credential that is current at send time.
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional


def build_url(base_url: str, path: str) -> str:
    """Join the configured base URL and a request path.

    Absolute URLs are returned untouched so callers may target another
    host explicitly.

    :param base_url: API base URL, with or without trailing slash
    :param path: request path such as ``/user/info``
    :return: the absolute URL
    """
    if path.startswith(("http://", "https://")):
        return path
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


def build_headers(extra: Optional[Mapping[str, str]] = None, token: Optional[str] = None) -> Dict[str, str]:
    """Create the headers for one attempt.

    Caller supplied headers come first and are overridden by the
    generated ``Content-Type`` and, when a token is given, by
    ``Authorization: Bearer <token>``. Without a token no
    ``Authorization`` header is present at all.

    :param extra: headers supplied in the request config
    :param token: bearer token, or ``None`` for unauthenticated calls
    :return: a dictionary of headers suitable for use with httpx
    """
    headers: Dict[str, str] = dict(extra or {})
    headers["Content-Type"] = "application/json"
    if token is not None:
        headers["Authorization"] = f"Bearer {token}"
    else:
        for key in [k for k in headers if k.lower() == "authorization"]:
            del headers[key]
    return headers
