"""
core/hooks.py
--------------

Platform capabilities the request layer calls but does not implement:

* :class:`PlatformLogin` hands out a one-time code that the server
  exchanges for a bearer token.
* :class:`LoadingIndicator` is shown while a ``loading=True`` request is
  in flight and hidden on every exit path.

Default implementations are provided for headless use; applications
with a UI pass their own.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Protocol

import logging

from authrequest.logging_config import log_event


class PlatformLogin(Protocol):
    async def login(self) -> str: ...


class LoadingIndicator(Protocol):
    def show(self, title: str) -> None: ...

    def hide(self) -> None: ...


class CallbackPlatformLogin:
    """Adapt a coroutine function returning a login code to :class:`PlatformLogin`."""

    def __init__(self, callback: Callable[[], Awaitable[str]]) -> None:
        self._callback = callback

    async def login(self) -> str:
        return await self._callback()


class LogLoadingIndicator:
    """Loading indicator that only records show/hide events in the log."""

    def show(self, title: str) -> None:
        log_event("loading_show", logging.DEBUG, title=title)

    def hide(self) -> None:
        log_event("loading_hide", logging.DEBUG)
