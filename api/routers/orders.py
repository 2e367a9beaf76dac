from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_caller_identity, get_order_gateway
from api.schemas.responses import OrderBookResponse, OrderResponse
from core.trading.models import (
    BracketOrderRequest,
    CoverOrderRequest,
    ModifyOrderRequest,
    NormalOrderRequest,
    OrderBookQuery,
    OrderFamily,
)
from services.order_gateway.service import OrderGatewayService

router = APIRouter(prefix="/orders", tags=["Orders"])

MODIFIED_MESSAGE = "Order modified successfully"


@router.post("", response_model=OrderResponse, response_model_exclude_none=True)
async def place_order(
    request: NormalOrderRequest,
    user_id: str = Depends(get_caller_identity),
    gateway: OrderGatewayService = Depends(get_order_gateway)
):
    """Place a normal (regular/AMO) order"""
    orders = await gateway.place_order(request, user_id)
    return OrderResponse(status=True, data=orders)


@router.put("", response_model=OrderResponse, response_model_exclude_none=True)
async def modify_order(
    request: ModifyOrderRequest,
    user_id: str = Depends(get_caller_identity),
    gateway: OrderGatewayService = Depends(get_order_gateway)
):
    orders = await gateway.modify_order(OrderFamily.NORMAL, request, user_id)
    return OrderResponse(status=True, data=orders, message=MODIFIED_MESSAGE)


@router.post("/bracket", response_model=OrderResponse, response_model_exclude_none=True)
async def place_bracket_order(
    request: BracketOrderRequest,
    user_id: str = Depends(get_caller_identity),
    gateway: OrderGatewayService = Depends(get_order_gateway)
):
    """Place a bracket order (entry with profit and stop-loss legs)"""
    orders = await gateway.place_bracket_order(request, user_id)
    return OrderResponse(status=True, data=orders)


@router.put("/bracket", response_model=OrderResponse, response_model_exclude_none=True)
async def modify_bracket_order(
    request: ModifyOrderRequest,
    user_id: str = Depends(get_caller_identity),
    gateway: OrderGatewayService = Depends(get_order_gateway)
):
    orders = await gateway.modify_order(OrderFamily.BRACKET, request, user_id)
    return OrderResponse(status=True, data=orders, message=MODIFIED_MESSAGE)


@router.post("/cover", response_model=OrderResponse, response_model_exclude_none=True)
async def place_cover_order(
    request: CoverOrderRequest,
    user_id: str = Depends(get_caller_identity),
    gateway: OrderGatewayService = Depends(get_order_gateway)
):
    """Place a cover order (entry with a mandatory stop-loss trigger)"""
    orders = await gateway.place_cover_order(request, user_id)
    return OrderResponse(status=True, data=orders)


@router.put("/cover", response_model=OrderResponse, response_model_exclude_none=True)
async def modify_cover_order(
    request: ModifyOrderRequest,
    user_id: str = Depends(get_caller_identity),
    gateway: OrderGatewayService = Depends(get_order_gateway)
):
    orders = await gateway.modify_order(OrderFamily.COVER, request, user_id)
    return OrderResponse(status=True, data=orders, message=MODIFIED_MESSAGE)


@router.get("/book", response_model=OrderBookResponse, response_model_exclude_none=True)
async def get_order_book(
    search_text: Optional[str] = Query(None, alias="searchTxt"),
    segment: Optional[str] = Query(None),
    options_type: Optional[str] = Query(None, alias="optionsType"),
    section: Optional[str] = Query(None, alias="status", description="open | executed"),
    user_id: str = Depends(get_caller_identity),
    gateway: OrderGatewayService = Depends(get_order_gateway)
):
    """
    Orders of the caller with client status and Open/Executed section.
    Filters are optional and case-insensitive.
    """
    query = OrderBookQuery(
        search_text=search_text,
        segment=segment,
        options_type=options_type,
        status=section,
    )
    orders = await gateway.order_book(query, user_id)
    return OrderBookResponse(status=True, data=orders)
