"""
authrequest package
-------------------

Client-side request layer: authenticated calls with transparent login,
single-flight token refresh and retries. Importing ``authrequest``
exposes the orchestrator, its config models and the error classes.
"""

from .exceptions import (  # noqa: F401
    ApplicationError,
    AuthRequestError,
    LoginError,
    RefreshError,
    TransportError,
)
from .main import create_orchestrator, lifespan  # noqa: F401
from .schemas.request import RequestConfig, ResponseEnvelope  # noqa: F401
from .services.request_service import RequestOrchestrator  # noqa: F401
