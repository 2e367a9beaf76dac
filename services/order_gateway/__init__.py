"""Order gateway service in front of the vendor order-routing API."""

from .service import ConversionOutcome, OrderGatewayService

__all__ = [
    "ConversionOutcome",
    "OrderGatewayService",
]
