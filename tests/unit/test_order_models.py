import pytest
from pydantic import ValidationError

from core.trading.models import (
    BracketOrderRequest,
    ConversionRequest,
    ModifyOrderRequest,
    NormalOrderRequest,
    OrderBookRow,
    stream_symbol,
)


@pytest.mark.parametrize("overrides", [
    {"txn_type": "X"},
    {"segment": "Z"},
    {"product": "Q"},
    {"order_type": "STOP"},
    {"validity": "GTC"},
    {"exchange_token": 0},
    {"quantity": 0},
    {"quantity": 5, "disclosed_quantity": 6},
    {"off_mkt_order_time_flag": 4},
    {"price": float("inf")},
    {"trigger_price": float("nan")},
])
def test_structural_violations_fail_binding(make_order, overrides):
    with pytest.raises(ValidationError):
        NormalOrderRequest(**make_order(**overrides))


def test_missing_required_field_fails_binding(make_order):
    payload = make_order()
    del payload["exchange"]
    with pytest.raises(ValidationError):
        NormalOrderRequest(**payload)


def test_modify_requires_order_number(make_order):
    with pytest.raises(ValidationError):
        ModifyOrderRequest(**make_order())


def test_conversion_token_accepts_integer():
    req = ConversionRequest(txn_type="B", exchange="NSE", exchange_token=3045,
                            product_from="I", product_to="C", quantity=5)
    assert req.exchange_token == "3045"


def test_stream_symbol_is_derived():
    row = OrderBookRow(security_id="3045", exchange="NSE")
    assert row.stream_symbol == "3045_NSE"
    assert row.model_dump()["stream_symbol"] == stream_symbol("3045", "NSE")


@pytest.mark.parametrize("field", ["profit_value", "stoploss_value"])
def test_bracket_targets_must_be_finite(make_order, field):
    with pytest.raises(ValidationError):
        BracketOrderRequest(**make_order(**{"product": "B", "profit_value": 5, "stoploss_value": 5,
                                            field: float("inf")}))
