from .client import (
    DEFAULT_API_VERSION,
    DEFAULT_CLIENT_ID,
    DEFAULT_URL,
    FetchOutcome,
    SalesforceClient,
)
from .auth import Token, UserInfo
from .data import QueryResult, SObject
from .exceptions import (
    ErrorKind,
    SalesforceAuthenticationFailed,
    SalesforceConnectionError,
    SalesforceError,
    SalesforceGeneralError,
    SalesforceNotFound,
    SalesforceRemoteError,
    SalesforceRetryableError,
    classify_error,
    is_retryable,
)
from .session import Session

__all__ = [
    "DEFAULT_API_VERSION",
    "DEFAULT_CLIENT_ID",
    "DEFAULT_URL",
    "ErrorKind",
    "FetchOutcome",
    "QueryResult",
    "SObject",
    "SalesforceAuthenticationFailed",
    "SalesforceClient",
    "SalesforceConnectionError",
    "SalesforceError",
    "SalesforceGeneralError",
    "SalesforceNotFound",
    "SalesforceRemoteError",
    "SalesforceRetryableError",
    "Session",
    "Token",
    "UserInfo",
    "classify_error",
    "is_retryable",
]
