"""Tests for the login and refresh flows in isolation."""

from __future__ import annotations

import pytest

from authrequest.core.credentials import CredentialStore
from authrequest.core.hooks import CallbackPlatformLogin
from authrequest.core.storage import MemoryStorage
from authrequest.exceptions import ApplicationError, LoginError, RefreshError, TransportError
from authrequest.schemas.request import ResponseEnvelope
from authrequest.services.auth_service import login_user, refresh_token
from conftest import FakePlatformLogin


class ScriptedRequest:
    """Stands in for the orchestrator entry point."""

    def __init__(self, outcome):
        self.outcome = outcome
        self.configs = []

    async def __call__(self, config):
        self.configs.append(config)
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return ResponseEnvelope.model_validate(self.outcome)


@pytest.mark.asyncio
async def test_login_exchanges_code_for_token(settings):
    request = ScriptedRequest({"code": 200, "data": {"token": "T1"}})
    credentials = CredentialStore(MemoryStorage())

    token = await login_user(request, credentials, FakePlatformLogin("C7"), settings)

    assert token == "T1"
    assert credentials.get_token() == "T1"
    sent = request.configs[0]
    assert (sent.url, sent.method, sent.auth) == ("/auth/login", "POST", False)
    assert sent.data == {"code": "C7"}


@pytest.mark.asyncio
async def test_login_accepts_callback_platform(settings):
    async def issue_code():
        return "from-callback"

    request = ScriptedRequest({"code": 200, "data": {"token": "T1"}})
    await login_user(request, CredentialStore(MemoryStorage()), CallbackPlatformLogin(issue_code), settings)

    assert request.configs[0].data == {"code": "from-callback"}


@pytest.mark.asyncio
async def test_login_fails_on_empty_code(settings):
    request = ScriptedRequest({"code": 200, "data": {"token": "T1"}})

    with pytest.raises(LoginError, match="empty code"):
        await login_user(request, CredentialStore(MemoryStorage()), FakePlatformLogin(""), settings)
    assert request.configs == []


@pytest.mark.asyncio
async def test_login_wraps_exchange_failure(settings):
    request = ScriptedRequest(ApplicationError("bad code"))
    credentials = CredentialStore(MemoryStorage())

    with pytest.raises(LoginError) as excinfo:
        await login_user(request, credentials, FakePlatformLogin(), settings)

    assert isinstance(excinfo.value.__cause__, ApplicationError)
    assert credentials.get_token() == ""


@pytest.mark.asyncio
async def test_login_rejects_reply_without_token(settings):
    request = ScriptedRequest({"code": 200, "data": {"token": ""}})

    with pytest.raises(LoginError):
        await login_user(request, CredentialStore(MemoryStorage()), FakePlatformLogin(), settings)


@pytest.mark.asyncio
async def test_refresh_sends_old_token_and_stores_new_one(settings):
    request = ScriptedRequest({"code": 200, "data": {"token": "T2"}})
    credentials = CredentialStore(MemoryStorage({"token": "T1"}))

    token = await refresh_token(request, credentials, settings)

    assert token == "T2"
    assert credentials.get_token() == "T2"
    sent = request.configs[0]
    assert (sent.url, sent.method, sent.auth) == ("/auth/refresh", "POST", False)
    assert sent.data == {"oldToken": "T1"}


@pytest.mark.asyncio
async def test_refresh_failure_clears_credentials(settings):
    storage = MemoryStorage({"token": "T1"})
    credentials = CredentialStore(storage)

    with pytest.raises(RefreshError):
        await refresh_token(ScriptedRequest(TransportError("offline")), credentials, settings)

    assert credentials.get_token() == ""
    assert storage.get("token") is None


@pytest.mark.asyncio
async def test_custom_endpoint_paths(settings):
    custom = settings.model_copy(update={"refresh_path": "/v2/token/refresh"})
    request = ScriptedRequest({"code": 200, "data": {"token": "T2"}})

    await refresh_token(request, CredentialStore(MemoryStorage({"token": "T1"})), custom)

    assert request.configs[0].url == "/v2/token/refresh"
