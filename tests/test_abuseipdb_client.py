"""Tests for the AbuseIPDB lookup client and its error mapping."""

from unittest.mock import MagicMock

import pytest
import requests

from mass_checker.abuseipdb.abuseipdb_client import AbuseIpDbClient
from mass_checker.checker.errors import (
    InvalidFormat,
    LookupErrorKind,
    NetworkError,
    RateLimited,
    Unauthorized,
    UnknownLookupError,
)
from mass_checker.setting.setting_models import AbuseIpDbSettings


def _response(status_code=200, payload=None, reason="OK", json_error=None):
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.ok = status_code < 400
    response.reason = reason
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def settings():
    return AbuseIpDbSettings(api_key="secret-key", base_url="https://abuse.example/api/v2/", max_age_in_days=30)


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


def test_lookup_sends_key_header_and_query(settings, session):
    session.get.return_value = _response(payload={"data": {"ipAddress": "1.2.3.4", "totalReports": 12}})
    client = AbuseIpDbClient(settings, session=session)

    report = client.lookup("1.2.3.4")

    assert report.ip_address == "1.2.3.4"
    assert report.total_reports == 12
    session.get.assert_called_once_with(
        "https://abuse.example/api/v2/check",
        headers={"Key": "secret-key", "Accept": "application/json"},
        params={"ipAddress": "1.2.3.4", "maxAgeInDays": "30"},
        timeout=settings.request_timeout,
    )


def test_settings_changes_apply_to_next_request(settings, session):
    session.get.return_value = _response(payload={"data": {}})
    client = AbuseIpDbClient(settings, session=session)

    settings.api_key = "rotated"
    client.lookup("8.8.8.8")

    assert session.get.call_args.kwargs["headers"]["Key"] == "rotated"


@pytest.mark.parametrize(
    "status, error_type, kind",
    [
        (429, RateLimited, LookupErrorKind.RATE_LIMITED),
        (401, Unauthorized, LookupErrorKind.UNAUTHORIZED),
        (422, InvalidFormat, LookupErrorKind.INVALID_INPUT),
        (500, UnknownLookupError, LookupErrorKind.UNKNOWN),
    ],
)
def test_status_codes_map_to_error_kinds(settings, session, status, error_type, kind):
    session.get.return_value = _response(status_code=status, reason="Nope")
    client = AbuseIpDbClient(settings, session=session)

    with pytest.raises(error_type) as excinfo:
        client.lookup("1.2.3.4")

    assert excinfo.value.kind is kind
    assert excinfo.value.status_code == status
    assert excinfo.value.message


def test_generic_status_message_carries_status_and_reason(settings, session):
    session.get.return_value = _response(status_code=503, reason="Service Unavailable")
    client = AbuseIpDbClient(settings, session=session)

    with pytest.raises(UnknownLookupError, match="503 - Service Unavailable"):
        client.lookup("1.2.3.4")


@pytest.mark.parametrize("exc", [requests.ConnectionError("refused"), requests.Timeout("slow")])
def test_transport_failures_are_network_errors(settings, session, exc):
    session.get.side_effect = exc
    client = AbuseIpDbClient(settings, session=session)

    with pytest.raises(NetworkError):
        client.lookup("1.2.3.4")


def test_undecodable_body_is_unknown_error(settings, session):
    session.get.return_value = _response(json_error=ValueError("not json"))
    client = AbuseIpDbClient(settings, session=session)

    with pytest.raises(UnknownLookupError):
        client.lookup("1.2.3.4")


@pytest.mark.parametrize("payload", [{"errors": []}, {"data": None}, ["unexpected"]])
def test_missing_data_object_is_unknown_error(settings, session, payload):
    session.get.return_value = _response(payload=payload)
    client = AbuseIpDbClient(settings, session=session)

    with pytest.raises(UnknownLookupError):
        client.lookup("1.2.3.4")


def test_invalid_address_never_hits_the_network(settings, session):
    client = AbuseIpDbClient(settings, session=session)

    with pytest.raises(InvalidFormat):
        client.lookup("999.0.0.1")

    session.get.assert_not_called()
