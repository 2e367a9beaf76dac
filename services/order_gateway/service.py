"""
Order gateway: validates client requests, forwards them to the vendor and
normalizes the vendor's answers.

Each operation performs exactly one vendor call, except position conversion
which reads the position book first and then submits the conversion.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Type

from core.config.settings import Settings
from core.logging import bind_request_context, get_trading_logger_safe
from core.monitoring.metrics import GatewayMetrics
from core.trading.errors import merge_error_codes, transport_failure, vendor_failure
from core.trading.models import (
    BracketOrderRequest,
    ConversionRequest,
    CoverOrderRequest,
    ModifyOrderRequest,
    NormalOrderRequest,
    OrderBookQuery,
    OrderBookRow,
    OrderFamily,
    OrderRequest,
    PositionBook,
)
from core.trading.order_book import normalize_order_book
from core.trading.positions import build_position_book, match_conversion
from core.trading.validation import OrderValidationEngine
from core.utils.exceptions import (
    GatewayError,
    NoMatchingPositionError,
    VendorOMSRejection,
    create_error_context,
)
from services.order_gateway.components import translator
from services.order_gateway.components.translator import (
    OrderReference,
    VendorConversionResponse,
    VendorEnvelope,
    VendorOrderBookResponse,
    VendorOrderResponse,
    VendorPositionBookResponse,
)
from services.order_gateway.components.vendor_client import VendorClient

# family -> (entry endpoint attribute, modify endpoint attribute)
FAMILY_ENDPOINTS: Dict[OrderFamily, tuple] = {
    OrderFamily.NORMAL: ("order_entry", "order_modify"),
    OrderFamily.BRACKET: ("bracket_order_entry", "bracket_order_modify"),
    OrderFamily.COVER: ("cover_order_entry", "cover_order_modify"),
}

ENTRY_BUILDERS: Dict[OrderFamily, Callable[..., Dict[str, Any]]] = {
    OrderFamily.NORMAL: translator.normal_order_body,
    OrderFamily.BRACKET: translator.bracket_order_body,
    OrderFamily.COVER: translator.cover_order_body,
}


@dataclass
class ConversionOutcome:
    """Result of a conversion; ``converted`` is False for OMS soft failures"""
    converted: bool
    message: str


class OrderGatewayService:
    """Order management operations against a single vendor"""

    def __init__(
        self,
        settings: Settings,
        vendor_client: VendorClient,
        validation_engine: Optional[OrderValidationEngine] = None,
        metrics: Optional[GatewayMetrics] = None,
    ) -> None:
        self.settings = settings
        self.vendor = settings.vendor
        self.vendor_client = vendor_client
        self.validation_engine = validation_engine or OrderValidationEngine()
        self.metrics = metrics
        self.error_codes = merge_error_codes(self.vendor.error_codes)
        self.logger = get_trading_logger_safe("order_gateway")

    # --- Placement ----------------------------------------------------------

    async def place_order(self, request: NormalOrderRequest, user_id: str) -> List[OrderReference]:
        return await self._place(request, user_id)

    async def place_bracket_order(self, request: BracketOrderRequest, user_id: str) -> List[OrderReference]:
        return await self._place(request, user_id)

    async def place_cover_order(self, request: CoverOrderRequest, user_id: str) -> List[OrderReference]:
        return await self._place(request, user_id)

    async def _place(self, request: OrderRequest, user_id: str) -> List[OrderReference]:
        family = request.family
        operation = f"place_{family.value}_order"

        try:
            self.validation_engine.validate(request)
        except GatewayError as exc:
            self.logger.info("Order rejected by validation", operation=operation,
                             user_id=user_id, reason=exc.detail)
            self._record_error(operation, exc)
            raise

        body = ENTRY_BUILDERS[family](request, user_id, self.vendor.source)
        path = getattr(self.vendor.endpoints, FAMILY_ENDPOINTS[family][0])
        response = await self._call(operation, path, body, VendorOrderResponse,
                                    self.vendor.short_timeout_ms, user_id)
        return response.data

    # --- Modification -------------------------------------------------------

    async def modify_order(self, family: OrderFamily, request: ModifyOrderRequest,
                           user_id: str) -> List[OrderReference]:
        """Modify a resting order; only structural validation applies"""
        operation = f"modify_{family.value}_order"
        body = translator.modify_order_body(request, user_id, self.vendor.source)
        path = getattr(self.vendor.endpoints, FAMILY_ENDPOINTS[family][1])
        response = await self._call(operation, path, body, VendorOrderResponse,
                                    self.vendor.short_timeout_ms, user_id)
        return response.data

    # --- Books --------------------------------------------------------------

    async def order_book(self, query: OrderBookQuery, user_id: str) -> List[OrderBookRow]:
        body = translator.order_book_body(user_id, self.vendor.source)
        response = await self._call("order_book", self.vendor.endpoints.order_book, body,
                                    VendorOrderBookResponse, self.vendor.short_timeout_ms, user_id)
        try:
            return normalize_order_book(response.data, query)
        except GatewayError as exc:
            self._record_error("order_book", exc)
            raise

    async def position_book(self, user_id: str) -> PositionBook:
        response = await self._fetch_positions("position_book", user_id)
        try:
            return build_position_book(response.data)
        except GatewayError as exc:
            self._record_error("position_book", exc)
            raise

    async def _fetch_positions(self, operation: str, user_id: str) -> VendorPositionBookResponse:
        body = translator.position_book_body(user_id, self.vendor.source, self.vendor.interop_flag)
        return await self._call(operation, self.vendor.endpoints.net_position, body,
                                VendorPositionBookResponse, self.vendor.short_timeout_ms, user_id)

    # --- Conversion ---------------------------------------------------------

    async def convert_position(self, request: ConversionRequest, user_id: str) -> ConversionOutcome:
        """Convert the product of an open position after checking eligibility"""
        operation = "convert_position"
        log = bind_request_context(self.logger, operation, user_id)

        positions = await self._fetch_positions(operation, user_id)
        match = match_conversion(request, positions.data)
        if not match.found:
            log.info("No open positions available to convert",
                     exchange=request.exchange, security_id=request.exchange_token)
            exc = NoMatchingPositionError()
            self._record_error(operation, exc)
            raise exc

        body = translator.conversion_body(
            request,
            match.segment,
            user_id,
            self.vendor.source,
            market_type=self.vendor.market_type,
            user_type=self.vendor.user_type,
        )
        log.info("Submitting position conversion", segment=match.segment,
                 product_from=request.product_from.value, product_to=request.product_to.value)
        try:
            response = await self._call(operation, self.vendor.endpoints.convert_position, body,
                                        VendorConversionResponse, self.vendor.long_timeout_ms,
                                        user_id, oms_error_code=self.vendor.oms_error_code)
        except VendorOMSRejection as exc:
            return ConversionOutcome(converted=False, message=exc.vendor_message)

        return ConversionOutcome(converted=True, message=response.message)

    # --- Vendor round trip --------------------------------------------------

    async def _call(self, operation: str, path: str, body: Dict[str, Any],
                    model: Type[VendorEnvelope], timeout_ms: int, user_id: str,
                    oms_error_code: Optional[str] = None):
        """Invoke the vendor and decode a successful envelope, raising a classified error otherwise"""
        log = bind_request_context(self.logger, operation, user_id)
        result = await self.vendor_client.invoke(
            "POST", self.vendor.url(path), body, timeout_ms=timeout_ms, operation=operation
        )

        try:
            failure = transport_failure(result.error, result.status_code)
            if failure is not None:
                raise failure

            response = translator.parse_vendor_response(result.body, model)
            if not response.is_success(self.vendor.success_status):
                log.error("Vendor request failed",
                          error_code=response.error_code, vendor_message=response.message)
                raise vendor_failure(response.error_code, response.message,
                                     self.error_codes, oms_error_code)
        except GatewayError as exc:
            log.warning("Vendor call classified as error", **create_error_context(exc, operation))
            self._record_error(operation, exc)
            raise

        return response

    def _record_error(self, operation: str, exc: GatewayError) -> None:
        if self.metrics:
            self.metrics.record_error(operation, exc.kind.value)
