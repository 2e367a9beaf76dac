from fastapi import Depends, HTTPException, Request, status
from dependency_injector.wiring import inject, Provide

from app.containers import AppContainer
from core.config.settings import Settings
from core.logging.correlation import create_correlation_context
from services.order_gateway.service import OrderGatewayService


@inject
async def get_caller_identity(
    request: Request,
    settings: Settings = Depends(Provide[AppContainer.settings])
) -> str:
    """Identity of the caller, set by the upstream authentication layer"""
    header = settings.api.identity_header
    user_id = (request.headers.get(header) or "").strip()
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Authentication required: missing {header} header",
        )
    create_correlation_context("api", f"{request.method} {request.url.path}", user_id=user_id)
    return user_id


@inject
def get_order_gateway(
    gateway: OrderGatewayService = Depends(Provide[AppContainer.order_gateway])
) -> OrderGatewayService:
    """Get the order gateway instance"""
    return gateway
