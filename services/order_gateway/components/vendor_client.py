"""
HTTP transport to the vendor.

``invoke`` is the only primitive the gateway uses. Transport problems are
returned in the result instead of raised so the error classifier can apply
its precedence in one place.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import httpx

from core.logging import get_logger
from core.monitoring.metrics import GatewayMetrics, VendorTimer


@dataclass
class VendorCallResult:
    """Outcome of one vendor round trip"""
    body: bytes = b""
    status_code: Optional[int] = None
    error: Optional[Exception] = None
    latency_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None and self.status_code == 200


class VendorClient:
    """Thin wrapper around a shared ``httpx.AsyncClient``"""

    def __init__(self, headers: Optional[Mapping[str, str]] = None,
                 metrics: Optional[GatewayMetrics] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.headers = dict(headers or {})
        self.metrics = metrics
        self.logger = get_logger("vendor_client", component="vendor")
        self._client = httpx.AsyncClient(headers=self.headers, transport=transport)

    async def invoke(self, method: str, url: str, body: Optional[Dict[str, Any]] = None,
                     headers: Optional[Mapping[str, str]] = None, timeout_ms: int = 700,
                     operation: str = "vendor") -> VendorCallResult:
        """Send ``body`` as JSON and return the raw response or the transport error"""
        result = VendorCallResult()
        with VendorTimer() as timer:
            try:
                response = await self._client.request(
                    method,
                    url,
                    json=body,
                    headers=dict(headers or {}),
                    timeout=timeout_ms / 1000.0,
                )
                result.status_code = response.status_code
                result.body = response.content
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                # InvalidURL is not an HTTPError subclass
                result.error = exc
        result.latency_seconds = timer.elapsed

        if result.error is not None:
            outcome = "transport_error"
        elif result.status_code == 200:
            outcome = "ok"
        else:
            outcome = f"http_{result.status_code}"

        log = self.logger.warning if outcome != "ok" else self.logger.info
        log("Vendor call completed",
            operation=operation,
            method=method,
            url=url,
            status=result.status_code,
            outcome=outcome,
            latency_ms=round(result.latency_seconds * 1000, 2),
            error=str(result.error) if result.error else None)

        if self.metrics:
            self.metrics.record_vendor_request(operation, outcome, result.latency_seconds)

        return result

    async def aclose(self) -> None:
        await self._client.aclose()
