# Dependency injection container for the order gateway
from dependency_injector import containers, providers
from prometheus_client import CollectorRegistry

from core.config.settings import Settings
from core.monitoring.metrics import GatewayMetrics
from core.trading.validation import OrderValidationEngine
from services.order_gateway.components.vendor_client import VendorClient
from services.order_gateway.service import OrderGatewayService


class AppContainer(containers.DeclarativeContainer):
    """Application dependency injection container"""

    # Configuration
    settings = providers.Singleton(Settings)

    # Shared registry used by the /metrics endpoint and the gateway collectors
    prometheus_registry = providers.Singleton(CollectorRegistry)
    gateway_metrics = providers.Singleton(
        GatewayMetrics,
        registry=prometheus_registry,
    )

    # One pooled HTTP client for the lifetime of the application
    vendor_client = providers.Singleton(
        VendorClient,
        headers=settings.provided.vendor.headers,
        metrics=gateway_metrics,
    )

    validation_engine = providers.Singleton(OrderValidationEngine)

    order_gateway = providers.Singleton(
        OrderGatewayService,
        settings=settings,
        vendor_client=vendor_client,
        validation_engine=validation_engine,
        metrics=gateway_metrics,
    )
