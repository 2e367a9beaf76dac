from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
from fastapi import Request
from uuid import uuid4

from core.logging.correlation import CorrelationIdManager


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Attach a request_id and a correlation_id to every HTTP request.

    - Sets request.state.request_id
    - Reuses an inbound X-Correlation-ID, otherwise starts a new one
    - Adds X-Request-ID and X-Correlation-ID headers to the response
    """

    def __init__(self, app: ASGIApp) -> None:
        super().__init__(app)

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid4())
        request.state.request_id = request_id

        CorrelationIdManager.clear_correlation()
        corr_id = CorrelationIdManager.set_correlation_id(
            request.headers.get("X-Correlation-ID") or CorrelationIdManager.generate_correlation_id()
        )
        CorrelationIdManager.set_correlation_context(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Correlation-ID"] = corr_id
        return response
