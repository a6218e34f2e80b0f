"""
Transport layer - HTTP execution and endpoint resolution.

Provides:
- HttpExecutor: bearer-authenticated requests with bounded retry
- EndpointResolver: request type to base URL mapping
- ApiResult: non-raising outcome of a request
"""

from openai_service.transport.auth import BETA_HEADER, bearer_headers
from openai_service.transport.endpoints import EndpointResolver, RequestType
from openai_service.transport.http import HttpExecutor
from openai_service.transport.result import ApiResult

__all__ = [
    "BETA_HEADER",
    "ApiResult",
    "EndpointResolver",
    "HttpExecutor",
    "RequestType",
    "bearer_headers",
]
