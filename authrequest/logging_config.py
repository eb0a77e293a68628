"""
logging_config.py
------------------

This module defines a shared logging configuration and utilities for
structured logging throughout the request layer.  It uses Python's
built‑in ``logging`` module rather than ``print`` so that log output
can be captured by standard logging handlers or external systems.
Messages are serialised as JSON to make them easier to parse
downstream.

To use this module, import ``logger`` and call its methods instead
of ``logging.info`` directly.  The ``log_call`` decorator can be
applied to functions (plain or ``async``) to record entry and exit
points at the DEBUG level without leaking sensitive information such
as tokens or one-time login codes.
"""

from __future__ import annotations

import inspect
import json
import logging
import sys
from functools import wraps
from typing import Any, Callable, Dict

# -----------------------------------------------------------------------------
# Configure global logging
# -----------------------------------------------------------------------------

# Set up the root logger once.  Log output goes to stdout with a timestamp,
# log level and the raw message.  The message itself should be a JSON string
# so downstream consumers can parse it easily.
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger("authrequest")

_SENSITIVE_KEYS = ("token", "password", "secret", "authorization")
# one-time platform login codes travel under this exact key
_SENSITIVE_EXACT = {"code"}


def _sanitize(obj: Any) -> Any:
    """Recursively sanitise objects for logging.

    Dictionaries have keys containing 'token', 'password', 'secret' or
    'authorization' removed, as well as a bare 'code' key, so bearer
    tokens and one-time login codes never reach the logs.  Lists and
    tuples are processed element‑wise.  Pydantic models are dumped first.

    Parameters
    ----------
    obj : Any
        Arbitrary Python object to sanitise.

    Returns
    -------
    Any
        A sanitised representation of the input suitable for JSON serialisation.
    """
    if isinstance(obj, (bytes, bytearray)):
        return f"<binary {len(obj)} bytes>"
    if isinstance(obj, dict):
        clean: Dict[str, Any] = {}
        for k, v in obj.items():
            key = str(k).lower()
            if key in _SENSITIVE_EXACT or any(keyword in key for keyword in _SENSITIVE_KEYS):
                continue
            clean[k] = _sanitize(v)
        return clean
    if isinstance(obj, (list, tuple)):
        return [_sanitize(i) for i in obj]
    if hasattr(obj, "model_dump"):
        return _sanitize(obj.model_dump())
    try:
        return json.loads(json.dumps(obj))
    except (TypeError, ValueError):
        return str(obj)


def log_event(event: str, level: int = logging.INFO, **fields: Any) -> None:
    """Emit a single JSON event through the shared logger."""
    payload: Dict[str, Any] = {"event": event}
    payload.update(_sanitize(fields))
    logger.log(level, json.dumps(payload))


def log_call(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator to log entry and exit of functions.

    Emits a DEBUG ``call_start`` message before the wrapped callable runs
    and a ``call_end`` message after it returns.  Arguments are passed
    through ``_sanitize``; return values are not logged because most of
    them are, or contain, credentials.  Coroutine functions are wrapped
    with an ``async`` wrapper so the exit event is logged after the
    coroutine completes rather than when it is created.

    Examples
    --------

    >>> @log_call
    ... async def fetch(path):
    ...     return path
    """

    def _start(args: Any, kwargs: Any) -> None:
        logger.debug(json.dumps({
            "event": "call_start",
            "function": func.__name__,
            "args": _sanitize(args),
            "kwargs": _sanitize(kwargs),
        }))

    def _end() -> None:
        logger.debug(json.dumps({"event": "call_end", "function": func.__name__}))

    if inspect.iscoroutinefunction(func):
        @wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            _start(args, kwargs)
            result = await func(*args, **kwargs)
            _end()
            return result

        return async_wrapper

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        _start(args, kwargs)
        result = func(*args, **kwargs)
        _end()
        return result

    return wrapper


def log_http_request(method: str, url: str, *, headers: Dict[str, Any] | None = None,
                     params: Dict[str, Any] | None = None, json_body: Any = None,
                     status: int | None = None, duration_ms: float | None = None) -> None:
    """Log an outbound HTTP request at DEBUG level.

    This helper centralises HTTP request logging so that tokens are
    automatically removed from headers and only high‑level information
    (method, URL, status and duration) is recorded.  It is invoked by
    the HTTP client before and after performing requests.

    Parameters
    ----------
    method : str
        The HTTP method (GET, POST, etc.)
    url : str
        The URL being requested.
    headers : dict, optional
        Request headers.  The ``Authorization`` header is removed.
    params : dict, optional
        Query parameters for GET requests.
    json_body : Any, optional
        JSON payload for non‑GET requests.
    status : int, optional
        Response status code (log end only).
    duration_ms : float, optional
        Time taken in milliseconds (log end only).
    """
    data: Dict[str, Any] = {
        "event": "http_request",
        "method": method,
        "url": url,
    }
    if headers is not None:
        data["headers"] = {k: v for k, v in headers.items() if k.lower() != "authorization"}
    if params:
        data["params"] = _sanitize(params)
    if json_body:
        data["json"] = _sanitize(json_body)
    if status is not None:
        data["status"] = status
    if duration_ms is not None:
        data["duration_ms"] = round(duration_ms, 2)
    logger.debug(json.dumps(data))
