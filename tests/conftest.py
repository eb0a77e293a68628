"""Shared fakes for the request layer tests.

The transport, platform login and loading indicator are external
capabilities; these fakes record every interaction so tests can assert
on the exact sequence of calls the orchestrator makes.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import pytest

from authrequest.core.config import Settings
from authrequest.core.credentials import CredentialStore
from authrequest.core.storage import MemoryStorage
from authrequest.services.request_service import RequestOrchestrator


@dataclass
class SentRequest:
    method: str
    url: str
    headers: Dict[str, str]
    data: Any

    @property
    def bearer(self) -> Optional[str]:
        value = self.headers.get("Authorization")
        return value[len("Bearer "):] if value else None


class FakeTransport:
    """Transport answering through ``handler(request)``.

    The handler may return a body, return an exception instance to be
    raised, or be a coroutine function. Every send yields to the event
    loop once before the handler runs, like a real network call.
    """

    def __init__(self, handler: Callable[[SentRequest], Any]) -> None:
        self.handler = handler
        self.calls: List[SentRequest] = []

    async def send(self, method: str, url: str, *, headers: Dict[str, str], data: Any = None) -> Any:
        sent = SentRequest(method, url, dict(headers), data)
        self.calls.append(sent)
        await asyncio.sleep(0)
        result = self.handler(sent)
        if asyncio.iscoroutine(result):
            result = await result
        if isinstance(result, Exception):
            raise result
        return result

    def calls_to(self, url: str) -> List[SentRequest]:
        return [c for c in self.calls if c.url == url]


class FakePlatformLogin:
    def __init__(self, code: str = "C1", error: Optional[Exception] = None) -> None:
        self.code = code
        self.error = error
        self.calls = 0

    async def login(self) -> str:
        self.calls += 1
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return self.code


class RecordingLoading:
    def __init__(self, fail_on_hide: bool = False) -> None:
        self.events: List[str] = []
        self.fail_on_hide = fail_on_hide

    def show(self, title: str) -> None:
        self.events.append(f"show:{title}")

    def hide(self) -> None:
        self.events.append("hide")
        if self.fail_on_hide:
            raise RuntimeError("indicator already gone")


class CountingStorage(MemoryStorage):
    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(initial)
        self.reads = 0
        self.writes = 0

    def get(self, key: str) -> Any:
        self.reads += 1
        return super().get(key)

    def set(self, key: str, value: Any) -> None:
        self.writes += 1
        super().set(key, value)

    def remove(self, key: str) -> None:
        self.writes += 1
        super().remove(key)


def ok(data: Any = None) -> Dict[str, Any]:
    return {"code": 200, "data": data, "message": "ok"}


def expired() -> Dict[str, Any]:
    return {"code": 401, "data": None, "message": "token expired"}


def failure(message: str = "server busy", code: int = 500) -> Dict[str, Any]:
    return {"code": code, "data": None, "message": message}


@pytest.fixture
def settings() -> Settings:
    return Settings(base_url="https://api.test", max_retry=3, http_backoff_factor=0.0)


@pytest.fixture
def make_client(settings):
    """Build an orchestrator around a handler; returns (client, transport, platform, storage)."""

    def _make(handler, *, token: str = "", platform: Optional[FakePlatformLogin] = None,
              loading: Optional[RecordingLoading] = None, **overrides):
        storage = CountingStorage({"token": token} if token else None)
        transport = FakeTransport(handler)
        platform = platform or FakePlatformLogin()
        client_settings = settings.model_copy(update=overrides) if overrides else settings
        client = RequestOrchestrator(
            transport,
            CredentialStore(storage),
            platform,
            settings=client_settings,
            loading=loading,
        )
        return client, transport, platform, storage

    return _make
