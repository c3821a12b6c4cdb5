"""Error taxonomy and classification of Salesforce error responses."""

from enum import Enum
import json
from typing import Any, ClassVar

import httpx
import lxml.etree as etree

from .logger import getLogger

LOGGER = getLogger("errors")

RETRYABLE_STATUS_CODES = frozenset({500, 503, 403})


class ErrorKind(Enum):
    GENERAL_FAILURE = "GENERAL_FAILURE"
    AUTHENTICATION = "AUTHENTICATION"
    NOT_FOUND = "NOT_FOUND"
    RETRY = "RETRY"
    REMOTE = "REMOTE"
    TRANSPORT = "TRANSPORT"


def is_retryable(status_code: int) -> bool:
    """True when a response with this status code is worth resubmitting.

    Only classifies; callers own any retry or backoff loop.
    """
    return status_code in RETRYABLE_STATUS_CODES


class SalesforceError(Exception):
    """Base class for every error raised by simpleforce.

    Attributes:
        code: error code reported by Salesforce (``errorCode`` / ``faultcode``)
            or a fixed code for locally detected failures
        message: human readable message
        extra: additional structured detail, e.g. ``{"StatusCode": 400}``
        status_code: HTTP status of the failed response, if there was one
    """

    kind: ClassVar[ErrorKind] = ErrorKind.GENERAL_FAILURE
    default_code: ClassVar[str] = "GENERAL_FAILURE"
    default_message: ClassVar[str] = "general failure"

    code: str
    message: str
    extra: dict[str, Any]
    status_code: int | None

    def __init__(
        self,
        message: str | None = None,
        code: str | None = None,
        extra: dict[str, Any] | None = None,
        status_code: int | None = None,
    ):
        self.message = message if message is not None else self.default_message
        self.code = code if code is not None else self.default_code
        self.extra = dict(extra or {})
        if status_code is None:
            status_code = self.extra.get("StatusCode")
        self.status_code = status_code
        super().__init__(self.message)

    @property
    def retryable(self) -> bool:
        return self.status_code is not None and is_retryable(self.status_code)

    def __str__(self):
        if self.status_code is not None:
            return f"{self.code} ({self.status_code}): {self.message}"
        return f"{self.code}: {self.message}"

    def __repr__(self):
        return (
            f"{type(self).__name__}(code={self.code!r}, "
            f"message={self.message!r}, status_code={self.status_code!r})"
        )


class SalesforceGeneralError(SalesforceError):
    """Catch-all for failures that could not be classified any further"""


class SalesforceAuthenticationFailed(SalesforceError):
    """The client is not logged in, or logging in failed"""

    kind = ErrorKind.AUTHENTICATION
    default_code = "AUTH_ERROR"
    default_message = "authentication failure"


class SalesforceConnectionError(SalesforceError):
    """The request never produced an HTTP response (DNS, connect, read...)"""

    kind = ErrorKind.TRANSPORT
    default_code = "TRANSPORT_ERROR"
    default_message = "transport failure"


class SalesforceRemoteError(SalesforceError):
    """An error reported by Salesforce in a JSON or SOAP fault body"""

    kind = ErrorKind.REMOTE
    default_code = "REMOTE_ERROR"
    default_message = "remote failure"

    @classmethod
    def from_error(cls, error: SalesforceError):
        return cls(
            message=error.message,
            code=error.code,
            extra=error.extra,
            status_code=error.status_code,
        )


class SalesforceNotFound(SalesforceRemoteError):
    kind = ErrorKind.NOT_FOUND
    default_code = "NOT_FOUND"
    default_message = "data not found"


class SalesforceRetryableError(SalesforceRemoteError):
    """
    Raised in place of a classified error when the response status is one
    of the retryable codes. Catch this to back off and resubmit the call.
    """

    kind = ErrorKind.RETRY
    default_code = "RETRY"
    default_message = "retry call"


def _json_error(status_code: int, body: bytes) -> SalesforceRemoteError | None:
    try:
        errors = json.loads(body)
    except ValueError:
        return None
    if not isinstance(errors, list) or not errors or not isinstance(errors[0], dict):
        return None
    first = errors[0]
    return SalesforceRemoteError(
        message=str(first.get("message", "")),
        code=str(first.get("errorCode", "")),
        extra={"StatusCode": status_code},
    )


def _soap_fault(status_code: int, body: bytes) -> SalesforceRemoteError | None:
    try:
        root = etree.fromstring(body)
    except (etree.XMLSyntaxError, ValueError):
        return None
    if etree.QName(root).localname != "Envelope":
        return None
    fault = root.find("{*}Body/{*}Fault")
    if fault is None:
        return None
    return SalesforceRemoteError(
        message=fault.findtext("{*}faultstring", default=""),
        code=fault.findtext("{*}faultcode", default=""),
        extra={"StatusCode": status_code},
    )


def classify_error(status_code: int, body: bytes | str | None) -> SalesforceError:
    """
    Turn an error response body into a SalesforceError.

    A JSON array of ``{"message", "errorCode"}`` objects is tried first, then
    a SOAP fault envelope. When neither matches a SalesforceGeneralError is
    returned; this function never raises.
    """
    if body is None:
        body = b""
    elif isinstance(body, str):
        body = body.encode("utf-8")

    error = _json_error(status_code, body) or _soap_fault(status_code, body)
    if error is not None:
        return error

    LOGGER.warning(
        "Unable to parse error response (HTTP %s): %r", status_code, body[:255]
    )
    return SalesforceGeneralError(status_code=status_code)


def raise_for_status(response: httpx.Response):
    if response.is_success:
        return
    raise classify_error(response.status_code, response.read())
