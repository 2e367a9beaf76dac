import httpx
import pytest

from tests.conftest import vendor_error, vendor_ok

pytestmark = pytest.mark.integration

POSITIONS = [
    {"security_id": "3045", "exchange": "NSE", "segment": "E", "product": "I",
     "net_qty": -50, "sell_avg": 20, "last_traded_price": 18},
]


def test_health(api_client):
    resp = api_client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


def test_place_order(api_client, vendor_stub, make_order):
    vendor_stub.replies["/OrderEntry"] = vendor_ok([{"order_no": "1001"}])

    resp = api_client.post("/api/v1/orders", json=make_order())

    assert resp.status_code == 200
    assert resp.json() == {"status": True, "data": [{"order_no": "1001"}], "errors": []}
    assert "X-Request-ID" in resp.headers
    assert "X-Correlation-ID" in resp.headers


def test_missing_identity_is_unauthorized(api_client, make_order):
    resp = api_client.post("/api/v1/orders", json=make_order(), headers={"X-User-Id": ""})

    assert resp.status_code == 401
    assert resp.json()["status"] is False


@pytest.mark.parametrize("payload", [
    {"txn_type": "X"},
    {"quantity": 0},
    {"exchange_token": "abc"},
])
def test_schema_violation_is_bad_request(api_client, make_order, payload):
    resp = api_client.post("/api/v1/orders", json=make_order(**payload))

    assert resp.status_code == 400
    body = resp.json()
    assert body["status"] is False
    assert body["errors"][0]["kind"] == "BadRequest"


@pytest.mark.parametrize("literal", [b"Infinity", b"NaN"])
def test_non_finite_price_is_bad_request(api_client, vendor_stub, literal):
    vendor_stub.replies["/OrderEntry"] = vendor_ok([{"order_no": "1001"}])
    content = (b'{"txn_type": "B", "exchange": "NSE", "segment": "E", "product": "I", '
               b'"exchange_token": 3045, "quantity": 10, "order_type": "LMT", '
               b'"validity": "DAY", "price": ' + literal + b"}")
    resp = api_client.post("/api/v1/orders", content=content,
                           headers={"Content-Type": "application/json"})

    assert resp.status_code == 400
    assert resp.json()["errors"][0]["kind"] == "BadRequest"
    assert vendor_stub.requests == []


def test_malformed_json_is_bad_request(api_client):
    resp = api_client.post("/api/v1/orders", content=b"{not json",
                           headers={"Content-Type": "application/json"})

    assert resp.status_code == 400
    assert resp.json()["errors"][0]["kind"] == "BadRequest"


def test_business_rule_violation(api_client, vendor_stub, make_order):
    resp = api_client.post("/api/v1/orders/bracket", json=make_order(product="B", profit_value=10))

    assert resp.status_code == 400
    assert resp.json()["errors"] == [
        {"kind": "BadRequest", "detail": "Invalid request: StoplossValue cannot be zero"}
    ]
    assert vendor_stub.requests == []


def test_vendor_non_200_status_passes_through(api_client, vendor_stub, make_order):
    vendor_stub.replies["/CoOrderEntry"] = httpx.Response(503)

    resp = api_client.post("/api/v1/orders/cover", json=make_order(product="V", trigger_price=480))

    assert resp.status_code == 503
    assert resp.json()["errors"][0]["kind"] == "VendorConnectionFailure"


def test_modify_order_message(api_client, vendor_stub, make_order):
    vendor_stub.replies["/BoOrderModify"] = vendor_ok([{"order_no": "1001"}])

    resp = api_client.put("/api/v1/orders/bracket",
                          json=make_order(product="B", order_no="1001", leg_no=1, algo_order_no="77"))

    assert resp.status_code == 200
    assert resp.json()["message"] == "Order modified successfully"
    assert vendor_stub.bodies("/BoOrderModify")[0]["data"]["algo_order_no"] == "77"


def test_vendor_rejection_carries_vendor_message(api_client, vendor_stub, make_order):
    vendor_stub.replies["/OrderModify"] = vendor_error("RS-0023", "SCRIP IS BLOCKED")

    resp = api_client.put("/api/v1/orders", json=make_order(order_no="1001"))

    assert resp.status_code == 400
    assert resp.json()["errors"][0]["detail"] == "Invalid request: SCRIP IS BLOCKED"


def test_order_book_query_params(api_client, vendor_stub):
    vendor_stub.replies["/OrderBook"] = vendor_ok([
        {"symbol": "SBIN-EQ", "security_id": "3045", "exchange": "NSE", "segment": "E", "status": "Traded"},
        {"symbol": "INFY-EQ", "security_id": "1594", "exchange": "NSE", "segment": "E", "status": "Pending"},
    ])

    resp = api_client.get("/api/v1/orders/book", params={"searchTxt": "sbin", "status": "Executed"})

    assert resp.status_code == 200
    rows = resp.json()["data"]
    assert len(rows) == 1
    assert rows[0]["status"] == "Executed"
    assert rows[0]["section"] == "Executed"
    assert rows[0]["stream_symbol"] == "3045_NSE"


def test_order_book_without_matches(api_client, vendor_stub):
    vendor_stub.replies["/OrderBook"] = vendor_ok([])

    resp = api_client.get("/api/v1/orders/book")

    assert resp.status_code == 404
    assert resp.json()["errors"][0]["kind"] == "NoDataFound"


def test_position_book(api_client, vendor_stub):
    vendor_stub.replies["/NetPosition"] = vendor_ok(POSITIONS)

    resp = api_client.get("/api/v1/positions")

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["total_profit_loss"] == pytest.approx(100)
    assert data["order_position"][0]["unrealized_pl"] == pytest.approx(100)


def test_conversion_oms_rejection(api_client, vendor_stub):
    vendor_stub.replies["/NetPosition"] = vendor_ok(POSITIONS)
    vendor_stub.replies["/ConvertPosition"] = vendor_error("RS-0022", "Insufficient margin")

    resp = api_client.post("/api/v1/positions/convert", json={
        "txn_type": "S", "exchange": "NSE", "exchange_token": "3045",
        "product_from": "I", "product_to": "C", "quantity": 50,
    })

    assert resp.status_code == 200
    assert resp.json() == {"status": False, "data": "Insufficient margin", "errors": []}


def test_conversion_without_match(api_client, vendor_stub):
    vendor_stub.replies["/NetPosition"] = vendor_ok(POSITIONS)

    resp = api_client.post("/api/v1/positions/convert", json={
        "txn_type": "B", "exchange": "NSE", "exchange_token": "3045",
        "product_from": "I", "product_to": "C", "quantity": 5,
    })

    assert resp.status_code == 400
    assert resp.json()["errors"][0]["detail"] == (
        "Invalid request: no matching open positions available to convert"
    )


def test_metrics_endpoint(api_client):
    resp = api_client.get("/metrics")
    assert resp.status_code == 200
