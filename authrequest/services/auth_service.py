"""
services/auth_service.py
------------------------

Credential acquisition. These functions obtain a bearer token from the
server and keep the credential store up to date:

* :func:`login_user` runs the platform handshake and exchanges the
  one-time code for a token.
* :func:`refresh_token` exchanges the current, possibly stale, token
  for a new one and clears the store when that fails.

Both exchanges are sent through the orchestrator's own ``request``
entry point with ``auth=False`` so they share its retry policy without
ever needing a credential themselves.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from pydantic import ValidationError

from authrequest.core.config import Settings
from authrequest.core.credentials import CredentialStore
from authrequest.core.hooks import PlatformLogin
from authrequest.exceptions import AuthRequestError, LoginError, RefreshError
from authrequest.logging_config import log_call, log_event
from authrequest.schemas.request import RequestConfig, ResponseEnvelope, TokenPayload

RequestFn = Callable[[RequestConfig], Awaitable[ResponseEnvelope[Any]]]


def _extract_token(envelope: ResponseEnvelope[Any]) -> str:
    return TokenPayload.model_validate(envelope.data).token


@log_call
async def login_user(request: RequestFn, credentials: CredentialStore,
                     platform: PlatformLogin, settings: Settings) -> str:
    """Obtain a fresh credential through the platform login handshake.

    :param request: the orchestrator entry point used for the exchange
    :param credentials: store receiving the new token
    :param platform: capability issuing one-time login codes
    :param settings: client settings (login path)
    :raises LoginError: if the handshake, the exchange or the reply fails
    :return: the new token
    """
    log_event("login_start")
    try:
        code = await platform.login()
    except Exception as exc:
        log_event("login_error", logging.ERROR, stage="platform", detail=str(exc))
        raise LoginError(f"Platform login failed: {exc}") from exc
    if not code:
        log_event("login_error", logging.ERROR, stage="platform", detail="empty login code")
        raise LoginError("Platform login returned an empty code")

    try:
        envelope = await request(RequestConfig(
            url=settings.login_path,
            method="POST",
            data={"code": code},
            auth=False,
        ))
        token = _extract_token(envelope)
    except (AuthRequestError, ValidationError) as exc:
        log_event("login_error", logging.ERROR, stage="exchange", detail=str(exc))
        raise LoginError(f"Login exchange failed: {exc}") from exc

    credentials.set_token(token)
    log_event("login_success")
    return token


@log_call
async def refresh_token(request: RequestFn, credentials: CredentialStore, settings: Settings) -> str:
    """Exchange the current credential for a new one.

    On any failure the stored credential is cleared, forcing the next
    authenticated request through :func:`login_user`.

    :raises RefreshError: if the exchange or its reply fails
    :return: the new token
    """
    try:
        envelope = await request(RequestConfig(
            url=settings.refresh_path,
            method="POST",
            data={"oldToken": credentials.get_token()},
            auth=False,
        ))
        token = _extract_token(envelope)
    except (AuthRequestError, ValidationError) as exc:
        credentials.clear_token()
        log_event("refresh_failed", logging.ERROR, detail=str(exc))
        raise RefreshError(f"Token refresh failed: {exc}") from exc

    credentials.set_token(token)
    return token
