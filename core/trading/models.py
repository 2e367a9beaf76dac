"""
Internal order-management models shared by the gateway and its API.

Requests are pydantic models so that structural constraints (enums, positive
quantities, required identifiers) are enforced while binding the inbound JSON;
business rules live in core.trading.validation.
"""

from enum import Enum
from typing import ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator


class TransactionType(str, Enum):
    BUY = "B"
    SELL = "S"


class Segment(str, Enum):
    EQUITY = "E"
    DERIVATIVE = "D"
    CURRENCY = "C"
    COMMODITY = "M"


class ProductType(str, Enum):
    CASH = "C"          # delivery
    INTRADAY = "I"
    MARGIN = "M"
    COVER = "V"         # CO - cover order
    BRACKET = "B"       # BO - bracket order


class OrderType(str, Enum):
    MARKET = "MKT"
    LIMIT = "LMT"
    STOP_LOSS = "SL"
    STOP_LOSS_MARKET = "SLM"


class Validity(str, Enum):
    DAY = "DAY"
    IOC = "IOC"


class OrderFamily(str, Enum):
    NORMAL = "normal"
    BRACKET = "bracket"
    COVER = "cover"


class VendorOrderStatus(str, Enum):
    TRANSIT = "Transit"
    PENDING = "Pending"
    MODIFIED = "Modified"
    PART_TRADED = "Part-traded"
    TRADED = "Traded"
    REJECTED = "Rejected"
    CANCELLED = "Cancelled"


class ClientOrderStatus(str, Enum):
    PENDING = "Pending"
    PARTIALLY_EXECUTED = "Partially Executed"
    EXECUTED = "Executed"
    REJECTED = "Rejected"
    CANCELLED = "Cancelled"


class OrderSection(str, Enum):
    OPEN = "Open"
    EXECUTED = "Executed"


def stream_symbol(security_id: str, exchange: str) -> str:
    """Key used by market-data subscribers for a row"""
    return f"{security_id}_{exchange}"


# --- Order requests ---------------------------------------------------------

class OrderRequest(BaseModel):
    """Fields shared by every order family"""
    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    family: ClassVar[OrderFamily]

    txn_type: TransactionType
    exchange: str = Field(..., min_length=1)
    segment: Segment
    product: ProductType
    exchange_token: int = Field(..., gt=0)
    quantity: int = Field(..., gt=0)
    disclosed_quantity: int = Field(0, ge=0)
    price: float = Field(0.0, ge=0)
    trigger_price: float = Field(0.0, ge=0)
    order_type: OrderType
    validity: Validity
    off_mkt_flag: bool = False
    off_mkt_order_time_flag: int = Field(0, ge=0, le=3)

    @model_validator(mode="after")
    def disclosed_within_quantity(self):
        if self.disclosed_quantity > self.quantity:
            raise ValueError("disclosed_quantity cannot exceed quantity")
        return self


class NormalOrderRequest(OrderRequest):
    family: ClassVar[OrderFamily] = OrderFamily.NORMAL


class BracketOrderRequest(OrderRequest):
    family: ClassVar[OrderFamily] = OrderFamily.BRACKET

    profit_value: float = Field(0.0, ge=0)
    stoploss_value: float = Field(0.0, ge=0)


class CoverOrderRequest(OrderRequest):
    family: ClassVar[OrderFamily] = OrderFamily.COVER


class ModifyOrderRequest(OrderRequest):
    """Modification of a resting order of any family"""

    order_no: str = Field(..., min_length=1)
    group_id: int = Field(0, ge=0)
    serial_no: int = Field(0, ge=0)
    # Multi-leg (cover/bracket) identifiers
    leg_no: int = Field(0, ge=0)
    algo_order_no: Optional[str] = None


class ConversionRequest(BaseModel):
    """Product conversion of an open position; segment is resolved by the matcher"""
    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    txn_type: TransactionType
    exchange: str = Field(..., min_length=1)
    exchange_token: str = Field(..., min_length=1)
    product_from: ProductType
    product_to: ProductType
    quantity: int = Field(..., gt=0)

    @field_validator("exchange_token", mode="before")
    @classmethod
    def token_as_text(cls, v):
        # Position rows carry the security id as text
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


# --- Order book -------------------------------------------------------------

class OrderBookQuery(BaseModel):
    """Optional order book filters; blank values are ignored"""
    search_text: Optional[str] = None
    segment: Optional[str] = None
    options_type: Optional[str] = None
    status: Optional[str] = None


class VendorOrderBookRow(BaseModel):
    """One order row as reported by the vendor"""
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    symbol: str = ""
    display_name: str = ""
    security_id: str = ""
    exchange: str = ""
    segment: str = ""
    opt_type: str = ""
    instrument: str = ""
    status: str = ""
    order_no: str = ""
    exch_order_no: str = ""
    serial_no: int = 0
    txn_type: str = ""
    product: str = ""
    product_name: str = ""
    order_type: str = ""
    validity: str = ""
    quantity: int = 0
    disc_quantity: int = 0
    dq_qty_rem: int = 0
    remaining_quantity: int = 0
    traded_qty: int = 0
    rem_qty_tot_qty: str = ""
    lot_size: int = 0
    price: float = 0.0
    trigger_price: float = 0.0
    traded_price: float = 0.0
    avg_traded_price: float = 0.0
    expiry_date: str = ""
    expiry_flag: str = ""
    good_till_days_date: str = ""
    participant_type: str = ""
    error_code: str = ""
    reason_description: str = ""
    order_date_time: str = ""
    exch_order_time: str = ""
    last_updated_time: str = ""


class OrderBookRow(VendorOrderBookRow):
    """Order row returned to clients, with client status and section"""
    section: Optional[OrderSection] = None

    @computed_field
    @property
    def stream_symbol(self) -> str:
        return stream_symbol(self.security_id, self.exchange)


# --- Position book ----------------------------------------------------------

class VendorPositionRow(BaseModel):
    """One net position as reported by the vendor"""
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    symbol: str = ""
    display_name: str = ""
    security_id: str = ""
    exchange: str = ""
    segment: str = ""
    product: str = ""
    expiry_date: str = ""
    lot_size: int = 0
    net_qty: int = 0
    net_avg: float = 0.0
    net_val: float = 0.0
    buy_avg: float = 0.0
    sell_avg: float = 0.0
    last_traded_price: float = 0.0
    realised_profit: float = 0.0
    gross_qty: int = 0
    gross_val: float = 0.0
    tot_buy_qty: int = 0
    tot_buy_val: float = 0.0
    tot_sell_qty: int = 0
    tot_sell_val: float = 0.0
    tot_sell_val_day: float = 0.0


class PositionRow(VendorPositionRow):
    """Position returned to clients, with computed profit/loss"""
    unrealized_pl: float = 0.0
    total_pl: float = 0.0

    @computed_field
    @property
    def stream_symbol(self) -> str:
        return stream_symbol(self.security_id, self.exchange)


class PositionBook(BaseModel):
    order_position: list[PositionRow]
    total_profit_loss: float
