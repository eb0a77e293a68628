"""
core/credentials.py
--------------------

Credential store holding the current bearer token. The token is cached
in memory and mirrored to a :class:`~authrequest.core.storage.KeyValueStorage`
under a single key. Only the login and refresh flows write to it; the
orchestrator reads it when building the ``Authorization`` header.
"""

from __future__ import annotations

from authrequest.core.storage import KeyValueStorage


class CredentialStore:
    """Cached bearer token backed by persistent storage.

    An empty string means "no credential". When the cache is empty
    :meth:`get_token` falls back to storage, so a token persisted by a
    previous process is picked up on first use.
    """

    def __init__(self, storage: KeyValueStorage, key: str = "token") -> None:
        self._storage = storage
        self._key = key
        self._token = ""

    def get_token(self) -> str:
        if not self._token:
            self._token = self._storage.get(self._key) or ""
        return self._token

    def set_token(self, token: str) -> None:
        self._token = token
        self._storage.set(self._key, token)

    def clear_token(self) -> None:
        self._token = ""
        self._storage.remove(self._key)
