"""
Request origin middleware.

Captures where a request came from so that audit entries written while
serving it can be stamped with the client address, user agent and a
correlation id.
"""

import contextvars
import logging
import uuid
from dataclasses import dataclass
from typing import Callable, Optional

from django.http import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


@dataclass(frozen=True)
class RequestOrigin:
    """Origin metadata of the request being served."""

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    correlation_id: Optional[str] = None


request_origin_context: contextvars.ContextVar[Optional[RequestOrigin]] = (
    contextvars.ContextVar("request_origin", default=None)
)


def get_request_origin() -> RequestOrigin:
    """
    Get the origin of the current request.

    Returns:
        RequestOrigin, empty outside of a request (sweeps, shell)
    """
    return request_origin_context.get() or RequestOrigin()


def _client_ip(request: HttpRequest) -> Optional[str]:
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR")


class RequestOriginMiddleware:
    """
    Middleware to set the request origin context.

    The correlation id is taken from the X-Correlation-ID header when the
    caller sends one and generated otherwise; it is echoed on the response.
    """

    def __init__(self, get_response: Callable):
        """Initialize middleware."""
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        origin = RequestOrigin(
            ip_address=_client_ip(request),
            user_agent=request.META.get("HTTP_USER_AGENT"),
            correlation_id=request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4()),
        )
        token = request_origin_context.set(origin)
        request.correlation_id = origin.correlation_id  # type: ignore
        try:
            response = self.get_response(request)
        finally:
            request_origin_context.reset(token)

        response[CORRELATION_HEADER] = origin.correlation_id
        return response
