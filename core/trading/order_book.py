"""
Order book normalization: query filtering, status/section mapping and
StreamSymbol enrichment of vendor order rows.

    Vendor status  | Client status       | Section
    ---------------+---------------------+---------
    Transit        | Pending             | Open
    Pending        | Pending             | Open
    Modified       | Pending             | Open
    Part-traded    | Partially Executed  | Open
    Traded         | Executed            | Executed
    Rejected       | Rejected            | Executed
    Cancelled      | Cancelled           | Executed
"""

from typing import Iterable, List, Optional

from core.trading.models import (
    ClientOrderStatus,
    OrderBookQuery,
    OrderBookRow,
    OrderSection,
    VendorOrderBookRow,
    VendorOrderStatus as VS,
)
from core.utils.exceptions import NoDataFoundError

OPEN_STATUSES = frozenset({VS.TRANSIT.value, VS.PENDING.value, VS.MODIFIED.value, VS.PART_TRADED.value})
EXECUTED_STATUSES = frozenset({VS.TRADED.value, VS.REJECTED.value, VS.CANCELLED.value})

_OPEN_LOWER = frozenset(s.lower() for s in OPEN_STATUSES)
_EXECUTED_LOWER = frozenset(s.lower() for s in EXECUTED_STATUSES)


def _clean(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def matches_filters(row: VendorOrderBookRow, query: OrderBookQuery) -> bool:
    """True when the vendor row satisfies every supplied filter"""
    search_text = _clean(query.search_text)
    segment = _clean(query.segment)
    options_type = _clean(query.options_type)
    section = _clean(query.status)

    if search_text and not (
        search_text in row.symbol.lower() or search_text in row.display_name.lower()
    ):
        return False

    if segment and row.segment.lower() != segment:
        return False

    if options_type and row.opt_type.lower() != options_type:
        return False

    if section:
        order_status = row.status.lower()
        if section == OrderSection.OPEN.value.lower():
            return order_status in _OPEN_LOWER
        if section == OrderSection.EXECUTED.value.lower():
            return order_status in _EXECUTED_LOWER
        # Unknown section value excludes the row
        return False

    return True


def normalize_row(raw: VendorOrderBookRow) -> OrderBookRow:
    """Copy a vendor row and map its status in two passes.

    The open-section pass reads back the status left by the closed-section
    pass; statuses outside the table pass through with no section.
    """
    row = OrderBookRow.model_validate(raw.model_dump())
    vendor_status = raw.status

    if vendor_status in EXECUTED_STATUSES:
        if vendor_status == VS.TRADED.value:
            row.status = ClientOrderStatus.EXECUTED.value
        row.section = OrderSection.EXECUTED

    if vendor_status in OPEN_STATUSES:
        if row.status == VS.PART_TRADED.value:
            row.status = ClientOrderStatus.PARTIALLY_EXECUTED.value
        else:
            row.status = ClientOrderStatus.PENDING.value
        row.section = OrderSection.OPEN

    return row


def normalize_order_book(rows: Iterable[VendorOrderBookRow], query: OrderBookQuery) -> List[OrderBookRow]:
    """Filter and normalize vendor rows; an empty result is NoDataFound"""
    order_book = [normalize_row(row) for row in rows if matches_filters(row, query)]
    if not order_book:
        raise NoDataFoundError("order not found in OrderBook.")
    return order_book
