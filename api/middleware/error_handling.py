from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from api.schemas.responses import GatewayResponse
from core.logging import get_api_logger_safe
from core.utils.exceptions import ErrorDetail, ErrorKind

logger = get_api_logger_safe("api.middleware.error_handling")


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Last-resort handler turning unexpected exceptions into a 500 envelope"""

    async def dispatch(self, request: Request, call_next):
        try:
            response = await call_next(request)
            return response
        except HTTPException as e:
            # Let FastAPI handle HTTP exceptions normally
            raise e
        except Exception as e:
            logger.error(
                "Unhandled API exception",
                path=request.url.path,
                method=request.method,
                error=str(e),
                exc_info=True
            )

            body = GatewayResponse(
                status=False,
                errors=[ErrorDetail.of(ErrorKind.INTERNAL_SERVER_ERROR)],
            )
            return JSONResponse(status_code=500, content=body.model_dump(mode="json", exclude_none=True))
