import httpx
import pytest

from core.trading.errors import (
    classify_vendor_code,
    merge_error_codes,
    transport_failure,
    vendor_failure,
)
from core.utils.exceptions import (
    ErrorKind,
    VendorApiFailureError,
    VendorConnectionError,
    VendorInternalError,
    VendorOMSRejection,
    VendorRejectionError,
)

TABLE = merge_error_codes({"RS-0101": 500})


def test_transport_error_wins_over_status():
    err = transport_failure(httpx.ConnectTimeout("timed out"), 503)
    assert isinstance(err, VendorApiFailureError)
    assert err.status_code == 500
    assert err.to_error().kind == ErrorKind.VENDOR_API_FAILURE


@pytest.mark.parametrize("status", [201, 404, 503])
def test_non_200_passes_vendor_status_through(status):
    err = transport_failure(None, status)
    assert isinstance(err, VendorConnectionError)
    assert err.status_code == status
    assert err.to_error().kind == ErrorKind.VENDOR_CONNECTION_FAILURE


def test_http_200_is_not_a_transport_failure():
    assert transport_failure(None, 200) is None


def test_known_client_code_is_bad_request_with_vendor_message():
    err = vendor_failure("RS-0023", "SCRIP IS BLOCKED", TABLE)
    assert isinstance(err, VendorRejectionError)
    assert err.status_code == 400
    assert err.to_error().detail == "Invalid request: SCRIP IS BLOCKED"


def test_known_server_code_keeps_vendor_message():
    err = vendor_failure("RS-0101", "OMS down", TABLE)
    assert isinstance(err, VendorInternalError)
    assert err.status_code == 500
    assert err.to_error().detail == "Internal server error: OMS down"


def test_unknown_code_is_never_a_client_error():
    err = vendor_failure("RS-9999", "something odd", TABLE)
    assert err.status_code == 500
    assert err.to_error().kind == ErrorKind.INTERNAL_SERVER_ERROR
    assert "something odd" not in err.to_error().detail


def test_oms_code_only_recognised_when_opted_in():
    assert classify_vendor_code("RS-0022", TABLE) == ErrorKind.INTERNAL_SERVER_ERROR
    assert classify_vendor_code("RS-0022", TABLE, "RS-0022") == ErrorKind.VENDOR_OMS_ERROR

    err = vendor_failure("RS-0022", "Insufficient margin", TABLE, "RS-0022")
    assert isinstance(err, VendorOMSRejection)
    assert err.vendor_message == "Insufficient margin"


def test_overrides_replace_defaults():
    table = merge_error_codes({"RS-0023": 500})
    assert classify_vendor_code("RS-0023", table) == ErrorKind.INTERNAL_SERVER_ERROR
