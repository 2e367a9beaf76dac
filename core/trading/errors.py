"""
Classification of vendor outcomes into the client-facing error taxonomy.

Precedence: transport failure, non-200 status, undecodable payload, then the
vendor error code. Unknown vendor codes are server errors, never client errors.
"""

from typing import Mapping, Optional

from core.utils.exceptions import (
    ErrorKind,
    GatewayError,
    VendorApiFailureError,
    VendorConnectionError,
    VendorInternalError,
    VendorOMSRejection,
    VendorRejectionError,
)

HTTP_OK = 200

# Vendor error code -> HTTP class; extended through VENDOR__ERROR_CODES
DEFAULT_VENDOR_ERROR_CODES: Mapping[str, int] = {
    "RS-0023": 400,
}


def merge_error_codes(overrides: Optional[Mapping[str, int]] = None) -> dict:
    table = dict(DEFAULT_VENDOR_ERROR_CODES)
    if overrides:
        table.update(overrides)
    return table


def classify_vendor_code(error_code: str, error_codes: Mapping[str, int],
                         oms_error_code: Optional[str] = None) -> ErrorKind:
    """Map an opaque vendor error code to an error kind.

    The OMS code is only recognised when the caller passes it.
    """
    if oms_error_code and error_code == oms_error_code:
        return ErrorKind.VENDOR_OMS_ERROR
    if error_codes.get(error_code) == 400:
        return ErrorKind.BAD_REQUEST
    return ErrorKind.INTERNAL_SERVER_ERROR


def transport_failure(transport_error: Optional[BaseException],
                      status_code: Optional[int]) -> Optional[GatewayError]:
    """Error for a call that did not produce a usable HTTP 200, else None"""
    if transport_error is not None:
        return VendorApiFailureError()
    if status_code != HTTP_OK:
        return VendorConnectionError(status_code=status_code)
    return None


def vendor_failure(error_code: str, message: str, error_codes: Mapping[str, int],
                   oms_error_code: Optional[str] = None) -> GatewayError:
    """Error for a decoded vendor response whose status is not success"""
    kind = classify_vendor_code(error_code, error_codes, oms_error_code)

    if kind == ErrorKind.VENDOR_OMS_ERROR:
        return VendorOMSRejection(vendor_message=message, vendor_code=error_code)
    if kind == ErrorKind.BAD_REQUEST:
        return VendorRejectionError(message, vendor_code=error_code)
    if error_codes.get(error_code) == 500:
        return VendorInternalError(message, vendor_code=error_code)
    # Unrecognised code: do not leak the vendor message
    return VendorInternalError(vendor_code=error_code)
