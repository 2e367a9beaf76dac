# Structured exception hierarchy for the order gateway

from enum import Enum
from typing import Dict, Any, Optional
from datetime import datetime, timezone

from pydantic import BaseModel


class ErrorKind(str, Enum):
    """Client-facing error taxonomy"""
    BAD_REQUEST = "BadRequest"
    VENDOR_API_FAILURE = "VendorApiFailure"
    VENDOR_CONNECTION_FAILURE = "VendorConnectionFailure"
    JSON_UNMARSHAL_ERROR = "JsonUnmarshalError"
    INTERNAL_SERVER_ERROR = "InternalServerError"
    VENDOR_OMS_ERROR = "VendorOMSError"
    NO_DATA_FOUND = "NoDataFound"


# Base message per kind; specific details are appended to it
ERROR_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.BAD_REQUEST: "Invalid request",
    ErrorKind.VENDOR_API_FAILURE: "Unable to reach the trading venue",
    ErrorKind.VENDOR_CONNECTION_FAILURE: "Trading venue returned an unexpected response",
    ErrorKind.JSON_UNMARSHAL_ERROR: "Unable to read the trading venue response",
    ErrorKind.INTERNAL_SERVER_ERROR: "Internal server error",
    ErrorKind.VENDOR_OMS_ERROR: "Request declined by the venue order management system",
    ErrorKind.NO_DATA_FOUND: "No data found",
}


class ErrorDetail(BaseModel):
    """One structured error entry of the response envelope"""
    kind: ErrorKind
    detail: str

    @classmethod
    def of(cls, kind: ErrorKind, detail: str = "") -> "ErrorDetail":
        base = ERROR_MESSAGES[kind]
        return cls(kind=kind, detail=f"{base}: {detail}" if detail else base)


class GatewayException(Exception):
    """Base exception for all gateway specific errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 correlation_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.correlation_id = correlation_id
        self.timestamp = datetime.now(timezone.utc)


class GatewayError(GatewayException):
    """Failure that terminates a request and is rendered into the envelope.

    Subclasses fix the error kind and the HTTP status used for the response.
    """

    kind: ErrorKind = ErrorKind.INTERNAL_SERVER_ERROR
    status_code: int = 500

    def __init__(self, detail: str = "", status_code: Optional[int] = None, **kwargs):
        super().__init__(detail or ERROR_MESSAGES[self.kind], **kwargs)
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code

    def to_error(self) -> ErrorDetail:
        return ErrorDetail.of(self.kind, self.detail)


# Client input errors
class BadRequestError(GatewayError):
    """Inbound request rejected before or by the venue"""
    kind = ErrorKind.BAD_REQUEST
    status_code = 400


class OrderValidationError(BadRequestError):
    """Business rule violation detected by the validation engine"""

    def __init__(self, detail: str, order_family: Optional[str] = None, **kwargs):
        super().__init__(detail, **kwargs)
        self.order_family = order_family


class NoMatchingPositionError(BadRequestError):
    """No open position satisfies a conversion request"""

    def __init__(self, detail: str = "no matching open positions available to convert", **kwargs):
        super().__init__(detail, **kwargs)


class NoDataFoundError(GatewayError):
    """Query produced an empty result set"""
    kind = ErrorKind.NO_DATA_FOUND
    status_code = 404


# Vendor integration errors
class VendorError(GatewayError):
    """Base class for vendor integration errors"""

    def __init__(self, detail: str = "", vendor_code: Optional[str] = None, **kwargs):
        super().__init__(detail, **kwargs)
        self.vendor_code = vendor_code


class VendorApiFailureError(VendorError):
    """Vendor could not be reached (transport failure, timeout)"""
    kind = ErrorKind.VENDOR_API_FAILURE
    status_code = 500


class VendorConnectionError(VendorError):
    """Vendor reachable but answered with a non-200 HTTP status"""
    kind = ErrorKind.VENDOR_CONNECTION_FAILURE
    status_code = 502


class VendorPayloadError(VendorError):
    """Vendor payload could not be decoded"""
    kind = ErrorKind.JSON_UNMARSHAL_ERROR
    status_code = 500


class VendorRejectionError(VendorError):
    """Vendor business rejection classified as a client error"""
    kind = ErrorKind.BAD_REQUEST
    status_code = 400


class VendorInternalError(VendorError):
    """Vendor business failure classified as, or defaulted to, a server error"""
    kind = ErrorKind.INTERNAL_SERVER_ERROR
    status_code = 500


class VendorOMSRejection(VendorError):
    """Venue OMS declined the request; surfaced as a soft failure"""
    kind = ErrorKind.VENDOR_OMS_ERROR
    status_code = 200

    def __init__(self, vendor_message: str = "", **kwargs):
        super().__init__(**kwargs)
        self.vendor_message = vendor_message


def create_error_context(error: Exception, operation: str,
                         additional_context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Create structured error context for logging

    Args:
        error: The exception that occurred
        operation: The operation that failed
        additional_context: Additional context information

    Returns:
        Structured error context dictionary
    """
    context = {
        "error_type": type(error).__name__,
        "error_message": str(error),
        "operation": operation,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    if isinstance(error, GatewayException):
        if error.correlation_id:
            context["correlation_id"] = error.correlation_id
        if error.details:
            context["error_details"] = error.details

    if isinstance(error, GatewayError):
        context["error_kind"] = error.kind.value
        context["status_code"] = error.status_code

    if isinstance(error, VendorError) and error.vendor_code:
        context["vendor_code"] = error.vendor_code

    if additional_context:
        context.update(additional_context)

    return context
