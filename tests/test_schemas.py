"""Tests for request config merging and the response envelope."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from authrequest.schemas.request import RequestConfig, ResponseEnvelope, merge_config


def test_defaults_are_filled_in():
    config = merge_config({"url": "/user/info"}, retry=3)

    assert config.method == "GET"
    assert config.loading is False
    assert config.auth is True
    assert config.retry == 3
    assert config.header == {}


def test_explicit_flags_win_over_defaults():
    config = merge_config(
        RequestConfig(url="/x", method="post", loading=True, auth=False, retry=0),
        retry=3,
    )

    assert (config.method, config.loading, config.auth, config.retry) == ("POST", True, False, 0)


def test_merged_config_is_frozen():
    config = merge_config({"url": "/x"}, retry=1)
    with pytest.raises(ValidationError):
        config.retry = 5


def test_negative_retry_rejected():
    with pytest.raises(ValidationError):
        RequestConfig(url="/x", retry=-1)


def test_envelope_status_helpers():
    assert ResponseEnvelope(code=200, data={"a": 1}).ok
    assert ResponseEnvelope(code=401).expired
    failed = ResponseEnvelope(code=500, message="boom")
    assert not failed.ok and not failed.expired
    assert failed.data is None
