import json
import logging

import httpx
import pytest

from simpleforce.exceptions import (
    ErrorKind,
    SalesforceAuthenticationFailed,
    SalesforceError,
    SalesforceGeneralError,
    SalesforceNotFound,
    SalesforceRemoteError,
    SalesforceRetryableError,
    classify_error,
    is_retryable,
    raise_for_status,
)


@pytest.mark.parametrize("status_code", [400, 404, 500])
def test_classify_json_error(status_code):
    body = json.dumps(
        [
            {"message": "Session expired or invalid", "errorCode": "INVALID_SESSION_ID"},
            {"message": "ignored", "errorCode": "SECOND"},
        ]
    ).encode()

    error = classify_error(status_code, body)

    assert isinstance(error, SalesforceRemoteError)
    assert error.kind is ErrorKind.REMOTE
    assert error.code == "INVALID_SESSION_ID"
    assert error.message == "Session expired or invalid"
    assert error.extra == {"StatusCode": status_code}
    assert error.status_code == status_code


def test_classify_soap_fault(soap_fault_xml):
    error = classify_error(500, soap_fault_xml)

    assert isinstance(error, SalesforceRemoteError)
    assert error.code == "sf:INVALID_LOGIN"
    assert error.message.startswith("INVALID_LOGIN: Invalid username")
    assert error.extra == {"StatusCode": 500}


def test_classify_accepts_text_body():
    error = classify_error(400, '[{"message": "bad field", "errorCode": "INVALID_FIELD"}]')
    assert error.code == "INVALID_FIELD"


@pytest.mark.parametrize(
    "body",
    [
        b"",
        None,
        b"<html><body>Service Unavailable</body></html>",
        b"not json or xml",
        b"[]",
        b'{"error": "invalid_grant"}',
        b'["just a string"]',
        b"<root><Body><Fault/></Body></root>",
    ],
)
def test_classify_unparseable_body_returns_general_failure(body, caplog):
    with caplog.at_level(logging.WARNING, logger="simpleforce.errors"):
        error = classify_error(502, body)

    assert type(error) is SalesforceGeneralError
    assert error.kind is ErrorKind.GENERAL_FAILURE
    assert error.code == "GENERAL_FAILURE"
    assert error.message == "general failure"
    assert error.status_code == 502
    assert "Unable to parse error response" in caplog.text


def test_general_failure_is_a_fresh_instance():
    first = classify_error(500, b"nope")
    second = classify_error(500, b"nope")
    assert first is not second
    first.extra["mutated"] = True
    assert second.extra == {}


@pytest.mark.parametrize("status_code", [403, 500, 503])
def test_retryable_status_codes(status_code):
    assert is_retryable(status_code)


@pytest.mark.parametrize(
    "status_code", [-1, 0, 200, 201, 204, 400, 401, 404, 429, 501, 502, 504]
)
def test_non_retryable_status_codes(status_code):
    assert not is_retryable(status_code)


def test_retryable_is_a_property_of_classified_errors(soap_fault_xml):
    assert classify_error(503, b"[]").retryable
    assert classify_error(403, soap_fault_xml).retryable
    assert not classify_error(400, soap_fault_xml).retryable
    assert not SalesforceAuthenticationFailed().retryable


def test_default_codes_and_messages():
    auth = SalesforceAuthenticationFailed()
    assert (auth.code, auth.message, auth.kind) == (
        "AUTH_ERROR",
        "authentication failure",
        ErrorKind.AUTHENTICATION,
    )
    not_found = SalesforceNotFound()
    assert (not_found.code, not_found.message) == ("NOT_FOUND", "data not found")
    retry = SalesforceRetryableError()
    assert (retry.code, retry.message) == ("RETRY", "retry call")


def test_retryable_error_from_classified_error():
    classified = classify_error(
        503, b'[{"message": "Server busy", "errorCode": "SERVER_UNAVAILABLE"}]'
    )
    retry = SalesforceRetryableError.from_error(classified)

    assert isinstance(retry, SalesforceRemoteError)
    assert retry.kind is ErrorKind.RETRY
    assert retry.code == "SERVER_UNAVAILABLE"
    assert retry.status_code == 503
    assert retry.retryable


def test_exception_string_representation():
    error = classify_error(
        404, b'[{"message": "The requested resource does not exist", "errorCode": "NOT_FOUND"}]'
    )
    assert str(error) == "NOT_FOUND (404): The requested resource does not exist"
    assert type(error).__name__ in repr(error)
    assert str(SalesforceGeneralError()) == "GENERAL_FAILURE: general failure"


def test_all_errors_share_base_class():
    for cls in (
        SalesforceAuthenticationFailed,
        SalesforceGeneralError,
        SalesforceNotFound,
        SalesforceRemoteError,
        SalesforceRetryableError,
    ):
        assert issubclass(cls, SalesforceError)


def test_raise_for_status():
    ok = httpx.Response(200, json={"ok": True})
    raise_for_status(ok)

    failed = httpx.Response(
        400, json=[{"message": "Malformed", "errorCode": "MALFORMED_QUERY"}]
    )
    with pytest.raises(SalesforceRemoteError) as excinfo:
        raise_for_status(failed)
    assert excinfo.value.code == "MALFORMED_QUERY"
