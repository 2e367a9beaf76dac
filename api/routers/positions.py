from fastapi import APIRouter, Depends

from api.dependencies import get_caller_identity, get_order_gateway
from api.schemas.responses import ConversionResponse, PositionBookResponse
from core.trading.models import ConversionRequest
from services.order_gateway.service import OrderGatewayService

router = APIRouter(prefix="/positions", tags=["Positions"])


@router.get("", response_model=PositionBookResponse, response_model_exclude_none=True)
async def get_position_book(
    user_id: str = Depends(get_caller_identity),
    gateway: OrderGatewayService = Depends(get_order_gateway)
):
    """Open positions of the caller with unrealized and total profit/loss"""
    book = await gateway.position_book(user_id)
    return PositionBookResponse(status=True, data=book)


@router.post("/convert", response_model=ConversionResponse, response_model_exclude_none=True)
async def convert_position(
    request: ConversionRequest,
    user_id: str = Depends(get_caller_identity),
    gateway: OrderGatewayService = Depends(get_order_gateway)
):
    """
    Convert the product type of an open position.

    A rejection by the venue order management system is reported with
    status false and HTTP 200.
    """
    outcome = await gateway.convert_position(request, user_id)
    return ConversionResponse(status=outcome.converted, data=outcome.message)
