"""
Monitoring components for the order gateway
"""

from .metrics import GatewayMetrics, VendorTimer, get_metrics_for_testing

__all__ = [
    "GatewayMetrics",
    "VendorTimer",
    "get_metrics_for_testing",
]
