import typing


class UserInfo(typing.NamedTuple):
    id: str = ""
    name: str = ""
    full_name: str = ""
    email: str = ""


class LoginResult(typing.NamedTuple):
    """Fields extracted from a SOAP ``loginResponse``"""

    session_id: str
    server_url: str
    user: UserInfo


class Token(typing.NamedTuple):
    """
    Payload returned by the OAuth2 token endpoint.

    A non-empty ``error`` means the endpoint answered but refused the request;
    check ``is_error`` before using the token.
    """

    access_token: str = ""
    refresh_token: str = ""
    instance_url: str = ""
    id: str = ""
    issued_at: str = ""
    scope: str = ""
    signature: str = ""
    token_type: str = ""
    error: str = ""
    error_description: str = ""

    @property
    def is_error(self) -> bool:
        return bool(self.error)

    @classmethod
    def from_json(cls, data: dict[str, typing.Any]) -> "Token":
        return cls(
            **{
                key: str(value)
                for key, value in data.items()
                if key in cls._fields and value is not None
            }
        )


__all__ = ["UserInfo", "LoginResult", "Token"]
