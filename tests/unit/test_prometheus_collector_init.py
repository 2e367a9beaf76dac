from prometheus_client import CollectorRegistry, generate_latest

from core.monitoring.metrics import GatewayMetrics


def test_gateway_metrics_use_given_registry():
    reg = CollectorRegistry()
    m = GatewayMetrics(registry=reg)
    m.record_vendor_request("order_book", "ok", 0.12)
    m.record_error("order_book", "NoDataFound")

    out = generate_latest(reg).decode()
    assert "vendor_requests_total" in out
    assert "vendor_request_latency_seconds" in out
    assert reg.get_sample_value("gateway_errors_total", {"operation": "order_book", "kind": "NoDataFound"}) == 1.0
