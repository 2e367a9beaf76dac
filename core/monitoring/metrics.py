"""
Prometheus metrics for vendor calls and gateway outcomes
"""

import time
from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Histogram

VENDOR_LATENCY_BUCKETS = [0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 0.7, 1.0, 2.5, 5.0]


class GatewayMetrics:
    """Gateway metrics on an explicitly owned registry"""

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or CollectorRegistry()

        self.vendor_requests = Counter(
            'vendor_requests_total',
            'Total vendor requests by operation and outcome',
            ['operation', 'outcome'],
            registry=self.registry
        )

        self.vendor_latency = Histogram(
            'vendor_request_latency_seconds',
            'Vendor request round-trip latency',
            ['operation'],
            buckets=VENDOR_LATENCY_BUCKETS,
            registry=self.registry
        )

        self.gateway_errors = Counter(
            'gateway_errors_total',
            'Requests terminated with a gateway error',
            ['operation', 'kind'],
            registry=self.registry
        )

    def record_vendor_request(self, operation: str, outcome: str, duration_seconds: float):
        """Record one vendor round trip"""
        self.vendor_requests.labels(operation=operation, outcome=outcome).inc()
        self.vendor_latency.labels(operation=operation).observe(duration_seconds)

    def record_error(self, operation: str, kind: str):
        self.gateway_errors.labels(operation=operation, kind=kind).inc()


class VendorTimer:
    """Context manager measuring elapsed wall time in seconds"""

    def __init__(self):
        self.start_time = None
        self.elapsed = 0.0

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.elapsed = time.perf_counter() - self.start_time


def get_metrics_for_testing() -> GatewayMetrics:
    """Metrics bound to a throwaway registry"""
    return GatewayMetrics(registry=CollectorRegistry())
