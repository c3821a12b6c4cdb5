from typing import Any, Protocol


class SalesforceConnection(Protocol):
    """The part of SalesforceClient a bound record relies on."""

    @property
    def is_authenticated(self) -> bool: ...

    @property
    def instance_url(self) -> str: ...

    def make_url(self, path: str) -> str: ...

    def http_request(
        self, method: str, url: str, content: bytes | str | None = None, **kwargs: Any
    ) -> tuple[bytes, int]: ...
