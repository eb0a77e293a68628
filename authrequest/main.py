# main.py
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

# Import logging utilities early so that the logger configuration is
# applied before any other modules emit log messages.
from authrequest.logging_config import log_event

from authrequest.clients.http_client import HTTPClient, Transport
from authrequest.core.config import Settings, get_settings
from authrequest.core.credentials import CredentialStore
from authrequest.core.hooks import LoadingIndicator, PlatformLogin
from authrequest.core.storage import JsonFileStorage, KeyValueStorage, MemoryStorage
from authrequest.services.request_service import RequestOrchestrator


def create_storage(settings: Settings) -> KeyValueStorage:
    if settings.token_storage_path:
        return JsonFileStorage(settings.token_storage_path)
    return MemoryStorage()


def create_orchestrator(
    platform_login: PlatformLogin,
    *,
    transport: Transport,
    settings: Optional[Settings] = None,
    storage: Optional[KeyValueStorage] = None,
    loading: Optional[LoadingIndicator] = None,
) -> RequestOrchestrator:
    """Build the request context shared by every call site of the process."""
    settings = settings or get_settings()
    credentials = CredentialStore(storage or create_storage(settings), key=settings.token_storage_key)
    return RequestOrchestrator(transport, credentials, platform_login, settings=settings, loading=loading)


@asynccontextmanager
async def lifespan(
    platform_login: PlatformLogin,
    *,
    settings: Optional[Settings] = None,
    storage: Optional[KeyValueStorage] = None,
    loading: Optional[LoadingIndicator] = None,
) -> AsyncIterator[RequestOrchestrator]:
    # one pooled HTTP client per process
    settings = settings or get_settings()
    http_client = HTTPClient(settings)
    log_event("client_start", base_url=settings.base_url)
    try:
        yield create_orchestrator(
            platform_login,
            transport=http_client,
            settings=settings,
            storage=storage,
            loading=loading,
        )
    finally:
        await http_client.close()
        log_event("client_stop")
