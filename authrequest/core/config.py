"""
core/config.py
----------------

Client configuration module.

Defines strongly‑typed settings loaded from the environment using
``pydantic-settings``. These settings control the API base URL, the
transport timeout, retry counts and the server paths used by the login
and refresh exchanges. The values provided here are sensible defaults
but can be overridden via environment variables at deployment time.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from environment variables.

    The settings structure is flat and uses environment variables
    prefixed with ``APP_``.  For example, to override the default
    request timeout you can set ``APP_HTTP_TIMEOUT=15``.

    See :class:`pydantic_settings.BaseSettings` for details on how
    environment variables are mapped onto fields.
    """

    # Transport settings
    base_url: str = Field("https://your-api-domain.com", description="Prefix prepended to every request path.")
    http_timeout: float = Field(10.0, gt=0, description="Hard timeout for a single HTTP call in seconds.")

    # Orchestration defaults
    max_retry: int = Field(3, ge=0, description="Default number of retries for a failed request.")
    http_backoff_factor: float = Field(0.0, ge=0, description="Backoff factor for exponential retry delays (0 disables).")
    max_token_refreshes: int = Field(3, ge=1, description="Refreshes a single request may go through before giving up.")
    loading_title: str = Field("Loading...", description="Title passed to the loading indicator.")

    # Authentication endpoints
    login_path: str = Field("/auth/login", description="Endpoint exchanging a platform code for a token.")
    refresh_path: str = Field("/auth/refresh", description="Endpoint exchanging a stale token for a new one.")

    # Credential persistence
    token_storage_key: str = Field("token", description="Storage key holding the bearer token.")
    token_storage_path: Optional[str] = Field(None, description="JSON file backing the credential store; in-memory when unset.")

    model_config = SettingsConfigDict(env_prefix="APP_", env_file=None, case_sensitive=False)


@lru_cache()
def get_settings() -> Settings:
    """Return a cached instance of the client settings.

    Using a cache prevents expensive environment parsing on every call.
    The returned object is safe to share across the whole process.
    """
    return Settings()
