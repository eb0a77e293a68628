"""
services/user_service.py
------------------------

Convenience wrappers for the user resource. They only fix the path,
method and flags of the call; authentication, retries and refresh
are handled by the orchestrator passed in.
"""

from __future__ import annotations

from typing import Any, Dict

from authrequest.schemas.request import RequestConfig, ResponseEnvelope
from authrequest.services.request_service import RequestOrchestrator


async def get_user(client: RequestOrchestrator) -> ResponseEnvelope[Any]:
    """Fetch the profile (``{id, name}``) of the logged in user."""
    return await client.request(RequestConfig(url="/user/info", method="GET", loading=True))


async def update_user(client: RequestOrchestrator, data: Dict[str, Any]) -> ResponseEnvelope[Any]:
    """Update the profile of the logged in user."""
    return await client.request(RequestConfig(url="/user/update", method="POST", data=data, loading=True))
