from .types import LoginResult, Token, UserInfo
from .login_soap import (
    instance_url_from_server_url,
    login_request,
    parse_login_response,
)
from .login_oauth import (
    parse_token_response,
    refresh_token_request,
    revoke_token_request,
)


__all__ = [
    "LoginResult",
    "Token",
    "UserInfo",
    "instance_url_from_server_url",
    "login_request",
    "parse_login_response",
    "parse_token_response",
    "refresh_token_request",
    "revoke_token_request",
]
