"""
Position book profit/loss and product-conversion eligibility.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional

from core.trading.models import (
    ConversionRequest,
    PositionBook,
    PositionRow,
    Segment,
    TransactionType,
    VendorPositionRow,
)
from core.utils.exceptions import NoDataFoundError


def unrealized_profit(position: VendorPositionRow) -> float:
    """Mark-to-market profit of the open quantity"""
    if position.net_qty > 0:
        # Open buy: qty * (LTP - average buy price)
        return position.net_qty * (position.last_traded_price - position.buy_avg)
    if position.net_qty < 0:
        # Open sell: qty * (average sell price - LTP)
        return abs(position.net_qty) * (position.sell_avg - position.last_traded_price)
    return 0.0


def price_position(position: VendorPositionRow) -> PositionRow:
    """Copy a vendor position and attach unrealized and total profit"""
    unrealized = unrealized_profit(position)
    return PositionRow(
        **position.model_dump(),
        unrealized_pl=unrealized,
        total_pl=unrealized + position.realised_profit,
    )


def build_position_book(rows: Iterable[VendorPositionRow]) -> PositionBook:
    """Price every position and total the book; an empty book is NoDataFound"""
    positions: List[PositionRow] = []
    total_pl = 0.0
    for row in rows:
        position = price_position(row)
        total_pl += position.total_pl
        positions.append(position)

    if not positions:
        raise NoDataFoundError("order not found in PositionBook.")

    return PositionBook(order_position=positions, total_profit_loss=total_pl)


@dataclass
class ConversionMatch:
    """Outcome of matching a conversion request against the position book"""
    found: bool
    segment: str
    position: Optional[VendorPositionRow] = None


def match_conversion(request: ConversionRequest, positions: Iterable[VendorPositionRow]) -> ConversionMatch:
    """Find the first open position the request can convert.

    Segment is overwritten with the equity code on every examined miss, so on
    failure it reflects the last non-flat row seen, not any particular match.
    """
    segment = ""
    for position in positions:
        qty = position.net_qty
        # closed positions are never convertible
        if qty == 0:
            continue

        if qty > 0:
            side = TransactionType.BUY
        else:
            side = TransactionType.SELL
            qty = -qty

        if (
            side == request.txn_type
            and position.exchange == request.exchange
            and position.security_id == request.exchange_token
            and position.product == request.product_from.value
            and qty >= request.quantity
        ):
            return ConversionMatch(found=True, segment=position.segment, position=position)

        segment = Segment.EQUITY.value

    return ConversionMatch(found=False, segment=segment)
