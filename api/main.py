import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from contextlib import asynccontextmanager
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from app.containers import AppContainer
from api.middleware.request_ids import RequestIdMiddleware
from api.middleware.error_handling import ErrorHandlingMiddleware
from api.routers import orders, positions
from api.schemas.responses import GatewayResponse, HealthResponse
from core.logging import get_api_logger_safe, configure_logging
from core.utils.exceptions import ErrorDetail, ErrorKind, GatewayError, create_error_context

logger = get_api_logger_safe("api.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    container = app.state.container
    settings = container.settings()
    logger.info("Starting order gateway API", vendor_endpoint=settings.vendor.endpoint,
                environment=settings.environment.value)

    yield

    logger.info("Shutting down order gateway API")
    await container.vendor_client().aclose()


def _envelope(status_code: int, body: GatewayResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json", exclude_none=True))


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    """Render a classified gateway failure into the response envelope"""
    logger.info("Request failed", path=request.url.path,
                **create_error_context(exc, request.method))
    return _envelope(exc.status_code, GatewayResponse(status=False, errors=[exc.to_error()]))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed or schema-violating input is a BadRequest, not FastAPI's 422"""
    errors = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        detail = f"{location}: {error.get('msg')}" if location else error.get("msg", "")
        errors.append(ErrorDetail.of(ErrorKind.BAD_REQUEST, detail))
    logger.info("Request rejected during binding", path=request.url.path, error_count=len(errors))
    return _envelope(400, GatewayResponse(status=False, errors=errors))


async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    response = _envelope(exc.status_code, GatewayResponse(status=False, message=str(exc.detail)))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


def create_app() -> FastAPI:
    """Creates and configures the FastAPI application"""
    container = AppContainer()
    settings = container.settings()

    # Configure logging for API context (idempotent)
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        description="""
        # Equity Order Gateway

        Normalized order management in front of the vendor order-routing API.

        ## Features
        - **Orders**: place and modify normal, bracket and cover orders
        - **Order book**: client statuses, Open/Executed sections, filters
        - **Positions**: profit/loss per position and product conversion

        ## Authentication
        The caller identity is read from the header configured in
        `API__IDENTITY_HEADER` (default `X-User-Id`).
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.container = container
    app.state.prom_registry = container.prometheus_registry()

    # Wire dependency injection
    container.wire(modules=[
        "api.dependencies",
        "api.routers.orders",
        "api.routers.positions",
    ])

    # Add middleware (order matters - last added is outermost)
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestIdMiddleware)

    # Security check for production
    if settings.environment.value == "production" and "*" in settings.api.cors_origins:
        raise ValueError(
            "CORS wildcard (*) not allowed in production. "
            "Specify exact origins in API__CORS_ORIGINS environment variable."
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=settings.api.cors_credentials,
        allow_methods=settings.api.cors_methods,
        allow_headers=settings.api.cors_headers,
    )

    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_error_handler)

    app.include_router(orders.router, prefix="/api/v1", tags=["Orders"])
    app.include_router(positions.router, prefix="/api/v1", tags=["Positions"])

    @app.get("/health", tags=["Health"], response_model=HealthResponse)
    def health_check():
        return HealthResponse(
            status="healthy",
            service=settings.app_name,
            version=settings.version,
            environment=settings.environment.value,
        )

    # Prometheus metrics endpoint
    @app.get("/metrics", tags=["Monitoring"])
    def metrics():
        data = generate_latest(app.state.prom_registry)
        return Response(content=data, media_type=CONTENT_TYPE_LATEST)

    return app


def run():
    """Main function to run the API server"""
    app = create_app()
    settings = app.state.container.settings()

    uvicorn.run(
        app,
        host=settings.api.host,
        port=settings.api.port,
        log_level=settings.logging.level.lower(),
        access_log=True,
        reload=False
    )


if __name__ == "__main__":
    run()
