"""
Translation between the internal order model and the vendor wire format.

Every vendor request is ``{"entity_id", "source", "data": {...}}`` with all
numbers rendered as strings. Optional vendor fields are modelled as ``None``
and dropped when the body is dumped.
"""

from decimal import Decimal
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from core.trading.models import (
    BracketOrderRequest,
    ConversionRequest,
    CoverOrderRequest,
    NormalOrderRequest,
    ModifyOrderRequest,
    ProductType,
    VendorOrderBookRow,
    VendorPositionRow,
)
from core.utils.exceptions import VendorPayloadError

T = TypeVar("T")
EnvelopeT = TypeVar("EnvelopeT", bound="VendorEnvelope")


def format_price(value: float) -> str:
    """Fixed-notation rendering of the shortest repr, always with a fractional part.

    10.5 -> "10.5", 1e-07 -> "0.0000001", 1e16 -> "10000000000000000.0"
    """
    number = Decimal(repr(float(value)))
    if not number.is_finite():
        raise ValueError(f"Price must be finite, got {value!r}")
    text = format(number, "f")
    return text if "." in text else f"{text}.0"


def format_flag(value: bool) -> str:
    return "true" if value else "false"


# --- Request bodies ---------------------------------------------------------

class VendorData(BaseModel):
    client_id: str


class VendorRequest(BaseModel, Generic[T]):
    entity_id: str
    source: str
    data: T

    def to_body(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class OrderEntryData(VendorData):
    user_id: Optional[str] = None
    txn_type: str
    exchange: str
    segment: str
    product: str
    exchange_token: str
    quantity: str
    price: str
    validity: str
    order_type: str
    disclosed_quantity: Optional[str] = None
    trigger_price: Optional[str] = None
    off_mkt_flag: str
    encash_flag: Optional[str] = None


class BracketEntryData(OrderEntryData):
    profit_value: str
    stoploss_value: str


class OrderModifyData(OrderEntryData):
    order_no: str
    group_id: str
    serial_no: str
    leg_no: Optional[str] = None
    algo_order_no: Optional[str] = None


class OrderBookData(VendorData):
    user_id: str


class PositionBookData(OrderBookData):
    interop_flag: str


class ConvertPositionData(VendorData):
    user_id: str
    exchange: str
    security_id: str
    segment: str
    quantity: str
    mkt_type: str
    user_type: str
    txn_type: str
    product_from: str
    product_to: str


def _entry_fields(request, user_id: Optional[str]) -> Dict[str, Any]:
    # Fields common to every placement family
    return dict(
        client_id=user_id,
        txn_type=request.txn_type.value,
        exchange=request.exchange,
        segment=request.segment.value,
        product=request.product.value,
        exchange_token=str(request.exchange_token),
        quantity=str(request.quantity),
        price=format_price(request.price),
        validity=request.validity.value,
        order_type=request.order_type.value,
        off_mkt_flag=format_flag(request.off_mkt_flag),
    )


def normal_order_body(request: NormalOrderRequest, user_id: str, source: str) -> Dict[str, Any]:
    data = OrderEntryData(user_id=user_id, **_entry_fields(request, user_id))
    if request.disclosed_quantity > 0:
        # The vendor expects the full quantity whenever disclosure is requested
        data.disclosed_quantity = str(request.quantity)
    if request.trigger_price > 0:
        data.trigger_price = format_price(request.trigger_price)
    if request.off_mkt_flag and request.off_mkt_order_time_flag > 0:
        data.encash_flag = str(request.off_mkt_order_time_flag)
    return VendorRequest[OrderEntryData](entity_id=user_id, source=source, data=data).to_body()


def bracket_order_body(request: BracketOrderRequest, user_id: str, source: str) -> Dict[str, Any]:
    data = BracketEntryData(
        profit_value=format_price(request.profit_value),
        stoploss_value=format_price(request.stoploss_value),
        **_entry_fields(request, user_id),
    )
    return VendorRequest[BracketEntryData](entity_id=user_id, source=source, data=data).to_body()


def cover_order_body(request: CoverOrderRequest, user_id: str, source: str) -> Dict[str, Any]:
    data = OrderEntryData(trigger_price=format_price(request.trigger_price), **_entry_fields(request, user_id))
    return VendorRequest[OrderEntryData](entity_id=user_id, source=source, data=data).to_body()


def modify_order_body(request: ModifyOrderRequest, user_id: str, source: str) -> Dict[str, Any]:
    """Modification body shared by all order families"""
    data = OrderModifyData(
        user_id=user_id,
        disclosed_quantity=str(request.quantity),
        trigger_price=format_price(request.trigger_price),
        order_no=request.order_no,
        group_id=str(request.group_id),
        serial_no=str(request.serial_no),
        **_entry_fields(request, user_id),
    )
    if request.product in (ProductType.COVER, ProductType.BRACKET):
        data.leg_no = str(request.leg_no)
    if request.product == ProductType.BRACKET:
        data.algo_order_no = request.algo_order_no
    return VendorRequest[OrderModifyData](entity_id=user_id, source=source, data=data).to_body()


def order_book_body(user_id: str, source: str) -> Dict[str, Any]:
    data = OrderBookData(client_id=user_id, user_id=user_id)
    return VendorRequest[OrderBookData](entity_id=user_id, source=source, data=data).to_body()


def position_book_body(user_id: str, source: str, interop_flag: str = "IP") -> Dict[str, Any]:
    data = PositionBookData(client_id=user_id, user_id=user_id, interop_flag=interop_flag)
    return VendorRequest[PositionBookData](entity_id=user_id, source=source, data=data).to_body()


def conversion_body(request: ConversionRequest, segment: str, user_id: str, source: str,
                    market_type: str = "NL", user_type: str = "C") -> Dict[str, Any]:
    data = ConvertPositionData(
        client_id=user_id,
        user_id=user_id,
        exchange=request.exchange,
        security_id=request.exchange_token,
        segment=segment,
        quantity=str(request.quantity),
        mkt_type=market_type,
        user_type=user_type,
        txn_type=request.txn_type.value,
        product_from=request.product_from.value,
        product_to=request.product_to.value,
    )
    return VendorRequest[ConvertPositionData](entity_id=user_id, source=source, data=data).to_body()


# --- Response envelopes -----------------------------------------------------

class VendorEnvelope(BaseModel):
    """Common vendor response envelope; ``status`` alone decides success"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    status: str
    error_code: str = Field("", alias="errorCode")
    message: str = ""

    @field_validator("error_code", "message", mode="before")
    @classmethod
    def null_as_blank(cls, v):
        return "" if v is None else v

    def is_success(self, success_status: str) -> bool:
        return self.status == success_status


class OrderReference(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    order_no: str = ""


class VendorOrderResponse(VendorEnvelope):
    data: List[OrderReference] = Field(default_factory=list)

    @field_validator("data", mode="before")
    @classmethod
    def single_reference_as_list(cls, v):
        if v is None:
            return []
        if isinstance(v, dict):
            return [v]
        return v


class VendorOrderBookResponse(VendorEnvelope):
    data: List[VendorOrderBookRow] = Field(default_factory=list)

    @field_validator("data", mode="before")
    @classmethod
    def null_as_empty(cls, v):
        return v or []


class VendorPositionBookResponse(VendorEnvelope):
    data: List[VendorPositionRow] = Field(default_factory=list)

    @field_validator("data", mode="before")
    @classmethod
    def null_as_empty(cls, v):
        return v or []


class VendorConversionResponse(VendorEnvelope):
    data: Optional[Union[Dict[str, Any], List[Any], str]] = None


def parse_vendor_response(body: Union[bytes, str], model: Type[EnvelopeT]) -> EnvelopeT:
    """Decode a raw vendor payload into ``model``; any mismatch is a payload error"""
    try:
        return model.model_validate_json(body)
    except ValidationError as exc:
        raise VendorPayloadError(f"{model.__name__}: {exc.error_count()} invalid field(s)") from exc
