"""
Pytest configuration and shared fixtures for the order gateway tests.
"""
import json
from typing import Any, Callable, Dict, List, Optional, Union

import httpx
import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient

from core.config.settings import Settings, VendorSettings
from core.monitoring.metrics import GatewayMetrics, get_metrics_for_testing
from services.order_gateway.components.vendor_client import VendorClient
from services.order_gateway.service import OrderGatewayService

VENDOR_BASE = "http://vendor.test/rupeeseed"
USER_ID = "CLIENT42"


@pytest.fixture
def test_settings():
    """Test settings configuration."""
    return Settings(
        environment="testing",
        vendor=VendorSettings(
            endpoint=VENDOR_BASE,
            source="M",
            error_codes={"RS-0101": 500},
        ),
    )


@pytest.fixture
def make_order() -> Callable[..., Dict[str, Any]]:
    """Factory for inbound order payloads; keyword overrides replace defaults."""
    def _make(**overrides) -> Dict[str, Any]:
        payload = {
            "txn_type": "B",
            "exchange": "NSE",
            "segment": "E",
            "product": "I",
            "exchange_token": 3045,
            "quantity": 10,
            "price": 500.5,
            "order_type": "LMT",
            "validity": "DAY",
        }
        payload.update(overrides)
        return payload
    return _make


def vendor_ok(data: Any = None, message: str = "") -> Dict[str, Any]:
    return {"status": "success", "errorCode": "", "message": message, "data": data}


def vendor_error(error_code: str, message: str) -> Dict[str, Any]:
    return {"status": "failure", "errorCode": error_code, "message": message, "data": None}


VendorReply = Union[httpx.Response, Exception, Dict[str, Any]]


class VendorStub:
    """Fake vendor keyed by endpoint path; records every request it receives."""

    def __init__(self, replies: Optional[Dict[str, VendorReply]] = None):
        self.replies: Dict[str, VendorReply] = dict(replies or {})
        self.requests: List[httpx.Request] = []

    def bodies(self, path: str) -> List[Dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests if r.url.path.endswith(path)]

    def read_timeouts(self, path: str) -> List[float]:
        """Read timeout, in seconds, that each request to ``path`` was sent with"""
        return [r.extensions["timeout"]["read"] for r in self.requests if r.url.path.endswith(path)]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = "/" + request.url.path.rsplit("/", 1)[-1]
        reply = self.replies.get(path)
        if reply is None:
            return httpx.Response(404, json={"status": "failure"})
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, httpx.Response):
            return reply
        return httpx.Response(200, json=reply)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def vendor_stub():
    return VendorStub()


@pytest.fixture
def metrics() -> GatewayMetrics:
    return get_metrics_for_testing()


@pytest.fixture
def gateway(test_settings, vendor_stub, metrics):
    """Gateway wired to the stub vendor through a real httpx transport."""
    client = VendorClient(headers=test_settings.vendor.headers, metrics=metrics,
                          transport=vendor_stub.transport())
    return OrderGatewayService(test_settings, client, metrics=metrics)


@pytest.fixture
def api_client(test_settings, vendor_stub, metrics):
    """FastAPI test client whose container talks to the stub vendor."""
    from api.main import create_app

    app = create_app()
    container = app.state.container
    container.settings.override(providers.Object(test_settings))
    container.gateway_metrics.override(providers.Object(metrics))
    container.vendor_client.override(providers.Object(
        VendorClient(headers=test_settings.vendor.headers, metrics=metrics,
                     transport=vendor_stub.transport())
    ))
    container.order_gateway.reset()

    client = TestClient(app)
    client.headers.update({test_settings.api.identity_header: USER_ID})
    yield client
    container.unwire()
