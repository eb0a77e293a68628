"""
services/request_service.py
---------------------------

The request orchestrator: the single entry point through which every
API call of the client flows. For each logical request it

1. merges the caller's config with the defaults,
2. shows the loading indicator when asked to and always hides it again,
3. logs in first when the call needs a credential and none is stored,
4. sends through the transport with ``Authorization: Bearer <token>``,
5. interprets the ``{code, data, message}`` envelope, retrying
   transport and application failures up to ``config.retry`` times,
6. coordinates expired credentials (``code == 401``) through a
   single-flight refresh: the first request to see the 401 refreshes,
   every other request that sees one meanwhile waits in a FIFO queue and
   is resubmitted once the new token is stored.

The orchestrator is meant to be constructed once per process (see
:mod:`authrequest.main`) and shared by reference; its refresh state is
owned by the instance rather than being module global. All mutation of
that state happens between suspension points, so no lock is needed on
a single event loop.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from functools import partial
from typing import Any, AsyncIterator, Deque, List, Mapping, Optional, Set, Union

from pydantic import ValidationError

from authrequest.clients.http_client import Transport
from authrequest.core.auth import build_headers
from authrequest.core.config import Settings, get_settings
from authrequest.core.credentials import CredentialStore
from authrequest.core.hooks import LoadingIndicator, LogLoadingIndicator, PlatformLogin
from authrequest.exceptions import ApplicationError, AuthRequestError, RefreshError, TransportError
from authrequest.logging_config import log_event
from authrequest.schemas.request import RequestConfig, ResponseEnvelope, merge_config
from authrequest.services.auth_service import login_user, refresh_token


@dataclass
class QueuedRequest:
    """A request parked until the in-flight refresh settles."""

    config: RequestConfig
    refreshes: int
    waiter: asyncio.Future


@dataclass
class RefreshState:
    is_refreshing: bool = False
    queue: Deque[QueuedRequest] = field(default_factory=deque)

    def take_queue(self) -> List[QueuedRequest]:
        """Return the queued requests in FIFO order and empty the queue."""
        pending = list(self.queue)
        self.queue.clear()
        return pending


class RequestOrchestrator:
    """Authenticated request entry point with retry and single-flight refresh.

    :param transport: capability sending one request and returning the decoded body
    :param credentials: store holding the current bearer token
    :param platform_login: capability issuing one-time login codes
    :param settings: client settings; the cached process settings by default
    :param loading: indicator driven by ``loading=True`` requests
    """

    def __init__(self, transport: Transport, credentials: CredentialStore, platform_login: PlatformLogin,
                 settings: Optional[Settings] = None, loading: Optional[LoadingIndicator] = None) -> None:
        self.transport = transport
        self.credentials = credentials
        self.platform_login = platform_login
        self.settings = settings or get_settings()
        self.loading = loading or LogLoadingIndicator()
        self.state = RefreshState()
        self._login_task: Optional[asyncio.Future] = None
        # resubmitted requests run as tasks; hold references until they finish
        self._tasks: Set[asyncio.Task] = set()

    async def request(self, config: Union[RequestConfig, Mapping[str, Any]]) -> ResponseEnvelope[Any]:
        """Perform one logical request.

        :param config: a :class:`RequestConfig` or a mapping of its fields
        :raises TransportError: when the transport kept failing after all retries
        :raises ApplicationError: when the server kept answering with a failure code
        :raises LoginError: when a required credential could not be obtained
        :raises RefreshError: when an expired credential could not be refreshed
        :return: the envelope of the first successful attempt
        """
        final = merge_config(config, retry=self.settings.max_retry)
        return await self._request(final, refreshes=0)

    async def _request(self, config: RequestConfig, refreshes: int) -> ResponseEnvelope[Any]:
        async with self._loading(config):
            return await self._handle_request(config, refreshes)

    @asynccontextmanager
    async def _loading(self, config: RequestConfig) -> AsyncIterator[None]:
        if not config.loading:
            yield
            return
        self.loading.show(self.settings.loading_title)
        try:
            yield
        finally:
            try:
                self.loading.hide()
            except Exception as exc:
                # must not replace the outcome of the request itself
                log_event("loading_hook_error", logging.WARNING, url=config.url, detail=str(exc))

    async def _handle_request(self, config: RequestConfig, refreshes: int) -> ResponseEnvelope[Any]:
        attempt = 0
        while True:
            try:
                envelope = await self._send(config)
            except TransportError as exc:
                error: AuthRequestError = exc
            else:
                if envelope.ok:
                    return envelope
                if envelope.expired and config.auth:
                    return await self._handle_token_expired(config, refreshes)
                error = ApplicationError(envelope.message or "request failed", envelope)

            if attempt >= config.retry:
                log_event("request_failed", logging.ERROR, method=config.method, url=config.url,
                          attempts=attempt + 1, **error.to_dict())
                raise error
            attempt += 1
            log_event("request_retry", logging.WARNING, method=config.method, url=config.url,
                      attempt=attempt, retry=config.retry, detail=str(error))
            if self.settings.http_backoff_factor:
                await asyncio.sleep(self.settings.http_backoff_factor * (2 ** (attempt - 1)))

    async def _send(self, config: RequestConfig) -> ResponseEnvelope[Any]:
        token = None
        if config.auth:
            if not self.credentials.get_token():
                await self.login()
            token = self.credentials.get_token()
        try:
            raw = await self.transport.send(
                config.method,
                config.url,
                headers=build_headers(config.header, token),
                data=config.data,
            )
        except AuthRequestError:
            raise
        except Exception as exc:
            raise TransportError(f"Request to {config.url} failed: {exc!r}") from exc
        try:
            return ResponseEnvelope[Any].model_validate(raw)
        except ValidationError as exc:
            raise TransportError(f"Malformed response envelope from {config.url}") from exc

    async def login(self) -> str:
        """Run the login flow, sharing one handshake between concurrent callers."""
        task = self._login_task
        if task is None:
            task = asyncio.ensure_future(
                login_user(self.request, self.credentials, self.platform_login, self.settings)
            )
            self._login_task = task
            task.add_done_callback(self._clear_login_task)
        return await asyncio.shield(task)

    def _clear_login_task(self, task: asyncio.Future) -> None:
        if self._login_task is task:
            self._login_task = None
        # every caller may have been cancelled; mark the outcome as retrieved
        if not task.cancelled():
            task.exception()

    async def _handle_token_expired(self, config: RequestConfig, refreshes: int) -> ResponseEnvelope[Any]:
        if refreshes >= self.settings.max_token_refreshes:
            log_event("refresh_failed", logging.ERROR, url=config.url, detail="credential still rejected")
            raise RefreshError(f"Credential still rejected after {refreshes} refreshes")

        state = self.state
        if state.is_refreshing:
            waiter = asyncio.get_running_loop().create_future()
            state.queue.append(QueuedRequest(config, refreshes + 1, waiter))
            log_event("request_queued", logging.DEBUG, url=config.url, position=len(state.queue))
            return await waiter

        state.is_refreshing = True
        log_event("token_expired", url=config.url)
        try:
            await refresh_token(self.request, self.credentials, self.settings)
        except BaseException as exc:
            pending = state.take_queue()
            state.is_refreshing = False
            error = exc if isinstance(exc, RefreshError) else RefreshError(f"Token refresh interrupted: {exc!r}")
            for entry in pending:
                if not entry.waiter.done():
                    entry.waiter.set_exception(error)
            if isinstance(exc, Exception) and error is not exc:
                self.credentials.clear_token()
                raise error from exc
            raise

        pending = state.take_queue()
        state.is_refreshing = False
        log_event("refresh_success", resubmitted=len(pending))
        for entry in pending:
            self._resubmit(entry)
        # let the resubmitted requests start ahead of the originating retry
        await asyncio.sleep(0)
        return await self._request(config, refreshes + 1)

    def _resubmit(self, entry: QueuedRequest) -> None:
        if entry.waiter.done():
            return
        task = asyncio.ensure_future(self._request(entry.config, entry.refreshes))
        self._tasks.add(task)
        task.add_done_callback(partial(self._settle, entry.waiter))

    def _settle(self, waiter: asyncio.Future, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            if not waiter.done():
                waiter.cancel()
            return
        exc = task.exception()
        if waiter.done():
            return
        if exc is not None:
            waiter.set_exception(exc)
        else:
            waiter.set_result(task.result())
