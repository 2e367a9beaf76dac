import json
import logging

import core.logging as gateway_logging
from core.logging import make_redactor
from core.logging.channels import LogChannel, get_channel_for_component
from core.logging.correlation import CorrelationIdManager, create_correlation_context


def test_component_channels():
    assert get_channel_for_component("order_gateway") == LogChannel.TRADING
    assert get_channel_for_component("middleware") == LogChannel.API
    assert get_channel_for_component("unknown") == LogChannel.APPLICATION


def test_redactor_scrubs_nested_keys():
    redact = make_redactor(["authorization", "token"])
    event = redact(None, "info", {
        "event": "vendor call",
        "headers": {"Authorization": "Bearer x", "accept": "json"},
        "items": [{"token": "t"}],
    })
    assert event["headers"] == {"Authorization": "[REDACTED]", "accept": "json"}
    assert event["items"] == [{"token": "[REDACTED]"}]


def test_correlation_context_lifecycle():
    CorrelationIdManager.clear_correlation()
    corr_id = create_correlation_context("order_gateway", "place_order", user_id="U1")

    assert CorrelationIdManager.get_correlation_id() == corr_id
    context = CorrelationIdManager.get_correlation_context()
    assert context["operation"] == "place_order"
    assert context["user_id"] == "U1"

    CorrelationIdManager.clear_correlation()
    assert CorrelationIdManager.get_correlation_id() is None


def test_module_loggers_follow_configuration_applied_after_import(test_settings, caplog, monkeypatch):
    # Module-level logger created at import, before the app configures logging
    from api.middleware import error_handling

    monkeypatch.setattr(gateway_logging, "_logging_configured", False)
    gateway_logging.configure_logging(test_settings)

    with caplog.at_level(logging.INFO):
        error_handling.logger.error("Unhandled exception", token="secret", path="/api/v1/orders")

    record = caplog.records[-1]
    assert record.name == "api.api.middleware.error_handling"
    event = json.loads(record.getMessage())
    assert event["token"] == "[REDACTED]"
    assert event["channel"] == "api"
    assert "secret" not in caplog.text
