from pydantic import BaseModel, Field
from typing import Generic, TypeVar, List, Optional
from datetime import datetime, timezone

from core.trading.models import OrderBookRow, PositionBook
from core.utils.exceptions import ErrorDetail
from services.order_gateway.components.translator import OrderReference

T = TypeVar('T')


class GatewayResponse(BaseModel, Generic[T]):
    """Envelope returned by every gateway endpoint"""
    status: bool = Field(description="True when the operation succeeded")
    data: Optional[T] = Field(None, description="Operation payload")
    errors: List[ErrorDetail] = Field(default_factory=list, description="Ordered error list")
    message: Optional[str] = Field(None, description="Human readable outcome")


class OrderResponse(GatewayResponse[List[OrderReference]]):
    pass


class OrderBookResponse(GatewayResponse[List[OrderBookRow]]):
    pass


class PositionBookResponse(GatewayResponse[PositionBook]):
    pass


class ConversionResponse(GatewayResponse[str]):
    pass


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    environment: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
