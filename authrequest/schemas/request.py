"""
schemas/request.py
-------------------

Pydantic models describing one logical call and the server's uniform
reply. ``RequestConfig`` is frozen: once defaults have been merged in,
the orchestrator never mutates it, and retries reuse the same object.
"""

from __future__ import annotations

from typing import Any, Dict, Generic, Mapping, Optional, TypeVar, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator

T = TypeVar("T")

CODE_OK = 200
CODE_EXPIRED = 401


class RequestConfig(BaseModel):
    url: str
    method: str = "GET"
    data: Any = None
    header: Dict[str, str] = Field(default_factory=dict)

    # orchestration flags; ``None`` means "use the default"
    loading: Optional[bool] = None
    auth: Optional[bool] = None
    retry: Optional[int] = Field(None, ge=0)

    model_config = ConfigDict(frozen=True)


class ResponseEnvelope(BaseModel, Generic[T]):
    """Server reply ``{code, data, message}``.

    ``code == 200`` is success, ``code == 401`` means the credential
    is expired or invalid, anything else is an application failure.
    """

    code: int
    data: Optional[T] = None
    message: str = ""

    @field_validator("message", mode="before")
    @classmethod
    def _null_message(cls, value: Any) -> Any:
        # servers send `"message": null` on success
        return "" if value is None else value

    @property
    def ok(self) -> bool:
        return self.code == CODE_OK

    @property
    def expired(self) -> bool:
        return self.code == CODE_EXPIRED


class TokenPayload(BaseModel):
    token: str = Field(min_length=1)


def merge_config(config: Union[RequestConfig, Mapping[str, Any]], *, retry: int) -> RequestConfig:
    """Fill unset orchestration flags with ``loading=False, auth=True, retry=<retry>``.

    :param config: caller supplied config, as a model or a plain mapping
    :param retry: default retry budget (normally ``Settings.max_retry``)
    :return: a frozen config with every flag set
    """
    if not isinstance(config, RequestConfig):
        config = RequestConfig.model_validate(dict(config))
    return config.model_copy(update={
        "loading": False if config.loading is None else config.loading,
        "auth": True if config.auth is None else config.auth,
        "retry": retry if config.retry is None else config.retry,
        "method": config.method.upper(),
    })
