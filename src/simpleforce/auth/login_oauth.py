"""OAuth2 token endpoint requests (refresh and revoke)."""

import httpx

from .types import Token
from ..exceptions import SalesforceGeneralError

TOKEN_PATH = "/services/oauth2/token"
REVOKE_PATH = "/services/oauth2/revoke"

_FORM_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/x-www-form-urlencoded",
}


def refresh_token_request(
    host: str, client_id: str, client_secret: str, refresh_token: str
) -> httpx.Request:
    return httpx.Request(
        "POST",
        host.rstrip("/") + TOKEN_PATH,
        data={
            "format": "json",
            "grant_type": "refresh_token",
            "client_id": client_id,
            "client_secret": client_secret,
            "refresh_token": refresh_token,
        },
        headers=_FORM_HEADERS,
    )


def revoke_token_request(host: str, token: str) -> httpx.Request:
    return httpx.Request(
        "POST",
        host.rstrip("/") + REVOKE_PATH,
        data={"token": token},
        headers=_FORM_HEADERS,
    )


def parse_token_response(response: httpx.Response) -> Token:
    try:
        data = response.json()
    except ValueError as e:
        raise SalesforceGeneralError(
            f"Unable to parse token response: {response.text[:255]}",
            status_code=response.status_code,
        ) from e
    if not isinstance(data, dict):
        raise SalesforceGeneralError(
            "Unexpected token response shape", status_code=response.status_code
        )
    return Token.from_json(data)
