from datetime import datetime, timezone
from functools import partial
import json
from pathlib import Path
from typing import IO, Any, NamedTuple
from urllib.parse import quote
from typing_extensions import override

from httpx import URL, Client, Request, Response, TransportError

from .logger import getLogger
from .auth import (
    Token,
    UserInfo,
    instance_url_from_server_url,
    login_request,
    parse_login_response,
    parse_token_response,
    refresh_token_request,
    revoke_token_request,
)
from .concurrency import DEFAULT_MAX_WORKERS, run_with_concurrency
from .data.query import QueryResult, UpdatedRecords
from .data.sobject import SObject
from .exceptions import (
    SalesforceAuthenticationFailed,
    SalesforceConnectionError,
    SalesforceError,
    SalesforceGeneralError,
    SalesforceRetryableError,
    classify_error,
    raise_for_status,
)
from .session import Session

LOGGER = getLogger("client")

DEFAULT_API_VERSION = "43.0"
DEFAULT_CLIENT_ID = "simpleforce"
DEFAULT_URL = "https://login.salesforce.com"

DATA_PATH_PREFIX = "/services/data"


class FetchOutcome(NamedTuple):
    """Result of fetching one record during ``get_updated_records``"""

    index: int
    record_id: str
    record: SObject | None
    error: BaseException | None

    @property
    def ok(self) -> bool:
        return self.error is None


def _format_datetime(value: datetime | str) -> str:
    if isinstance(value, str):
        return value
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat(timespec="seconds")


class SalesforceClient(Client):
    """
    Salesforce REST/SOAP API client.

    Keyword arguments not consumed here (``timeout``, ``proxy``, ``verify``,
    ``transport``...) configure the underlying ``httpx.Client``.
    """

    session: Session
    base_url_login: str
    use_tooling_api: bool

    def __init__(
        self,
        url: str = DEFAULT_URL,
        client_id: str = DEFAULT_CLIENT_ID,
        api_version: str | float = DEFAULT_API_VERSION,
        use_tooling_api: bool = False,
        session_id: str = "",
        instance_url: str = "",
        headers={"Accept": "application/json"},
        **kwargs,
    ):
        super().__init__(headers=headers, **kwargs)
        self.base_url_login = url.rstrip("/")
        self.use_tooling_api = use_tooling_api
        self.session = Session(api_version, client_id, session_id, instance_url)

    def __str__(self):
        if not self.is_authenticated:
            return f"{type(self).__name__} ({self.base_url_login})"
        return (
            f"{type(self).__name__} -> {URL(self.instance_url).host}"
            f" as {self.session.user.name or '[session]'}"
        )

    # session accessors
    @property
    def is_authenticated(self) -> bool:
        return self.session.is_authenticated

    @property
    def session_id(self) -> str:
        return self.session.session_id

    @property
    def instance_url(self) -> str:
        return self.session.instance_url

    @property
    def api_version(self) -> str:
        return self.session.api_version

    @property
    def user(self) -> UserInfo:
        return self.session.user

    def set_session(self, session_id: str, instance_url: str):
        """Reuse a session obtained earlier, skipping ``login_password``"""
        self.session.update(session_id, instance_url)

    def _require_authentication(self):
        if not self.is_authenticated:
            raise SalesforceAuthenticationFailed("not logged in")

    # transport
    def _auth_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.session_id}",
            "Content-Type": "application/json",
        }

    def make_url(self, path: str) -> str:
        return (
            f"{self.instance_url}{DATA_PATH_PREFIX}/v{self.api_version}/"
            f"{path.lstrip('/')}"
        )

    @override
    def send(self, request: Request, **kwargs) -> Response:
        try:
            return super().send(request, **kwargs)
        except TransportError as e:
            LOGGER.error("%s %s failed: %s", request.method, request.url, e)
            raise SalesforceConnectionError(str(e) or type(e).__name__) from e

    @override
    def request(
        self,
        method: str,
        url: URL | str,
        response_status_raise: bool = True,
        **kwargs,
    ) -> Response:
        headers = {**self._auth_headers(), **(kwargs.pop("headers", None) or {})}
        response = super().request(method, url, headers=headers, **kwargs)

        if response_status_raise and not response.is_success:
            LOGGER.warning("request failed, %s %s -> %d", method, url, response.status_code)
            raise classify_error(response.status_code, response.content)
        return response

    def http_request(
        self,
        method: str,
        url: URL | str,
        content: bytes | str | None = None,
        **kwargs,
    ) -> tuple[bytes, int]:
        """
        Executes an authenticated request and returns the body and status.

        Raises the classified SalesforceError for any status outside 2xx and
        SalesforceConnectionError when no response was received.
        """
        response = self.request(method, url, content=content, **kwargs)
        return response.content, response.status_code

    # authentication
    def login_password(self, username: str, password: str, security_token: str = ""):
        """
        Logs in through the SOAP partner API.

        ``security_token`` may be left empty when the caller's IP range is
        trusted by the org.
        """
        request = login_request(
            self.base_url_login,
            self.api_version,
            self.session.client_id,
            username,
            password,
            security_token,
        )
        response = self.send(request)
        if response.status_code != 200:
            LOGGER.error("login request failed, %d", response.status_code)
            raise classify_error(response.status_code, response.content)

        result = parse_login_response(response.content)
        self.session.update(
            result.session_id,
            instance_url_from_server_url(result.server_url),
            result.user,
        )
        LOGGER.info("User %s authenticated.", result.user.name)

    def _oauth_host(self) -> str:
        return self.instance_url or self.base_url_login

    def refresh_token(
        self, client_id: str, client_secret: str, refresh_token: str
    ) -> Token:
        """
        Exchanges a refresh token for a new access token.

        The returned Token may still carry an ``error``; check ``is_error``.
        The client session is left untouched, see ``apply_token``.
        """
        response = self.send(
            refresh_token_request(
                self._oauth_host(), client_id, client_secret, refresh_token
            )
        )
        if not response.is_success:
            LOGGER.warning("token refresh failed, %d", response.status_code)
            raise classify_error(response.status_code, response.content)
        return parse_token_response(response)

    def apply_token(self, token: Token):
        if token.is_error:
            raise SalesforceAuthenticationFailed(
                token.error_description or token.error, code=token.error
            )
        self.session.update(token.access_token, token.instance_url or self.instance_url)

    def revoke_token(self, token: str):
        response = self.send(revoke_token_request(self._oauth_host(), token))
        if not response.is_success:
            LOGGER.warning("token revoke failed, %d", response.status_code)
            raise classify_error(response.status_code, response.content)

    # records
    def sobject(self, type_name: str = "", **fields) -> SObject:
        return SObject(type_name, self, **fields)

    def query(self, q: str) -> QueryResult:
        """
        Runs a SOQL query, or fetches the next page when ``q`` is a
        ``nextRecordsUrl`` from a previous QueryResult.
        """
        self._require_authentication()

        if q.startswith(DATA_PATH_PREFIX):
            url = f"{self.instance_url}{q}"
        else:
            endpoint = "tooling/query" if self.use_tooling_api else "query"
            url = self.make_url(f"{endpoint}?q={quote(q, safe='')}")

        try:
            content, _ = self.http_request("GET", url)
        except SalesforceError as e:
            LOGGER.error("HTTP GET request failed: %s", url)
            if e.retryable:
                raise SalesforceRetryableError.from_error(e) from e
            raise

        try:
            data = json.loads(content)
        except ValueError as e:
            raise SalesforceGeneralError("Unable to decode query response") from e
        return QueryResult.from_json(data, self)

    def _fetch_record(self, type_name: str, record_id: str) -> SObject:
        return SObject(type_name, self).fetch(record_id)

    def get_updated_records(
        self,
        type_name: str,
        start: datetime | str,
        end: datetime | str,
        *,
        max_workers: int = DEFAULT_MAX_WORKERS,
        raise_on_error: bool = False,
    ) -> list[FetchOutcome]:
        """
        Fetches every ``type_name`` record created or updated in [start, end).

        Returns one FetchOutcome per changed Id, in the order Salesforce
        listed them. A record that fails to load leaves ``record=None`` with
        its ``error`` set and does not fail the call, unless
        ``raise_on_error`` is True, in which case the first failure (by
        position) is raised once all fetches have finished.
        """
        self._require_authentication()
        url = self.make_url(f"sobjects/{type_name}/updated/")
        params = {"start": _format_datetime(start), "end": _format_datetime(end)}
        try:
            content, _ = self.http_request("GET", url, params=params)
        except SalesforceError as e:
            if e.retryable:
                raise SalesforceRetryableError.from_error(e) from e
            raise

        try:
            data = json.loads(content)
        except ValueError as e:
            raise SalesforceGeneralError("Unable to decode updated records") from e
        ids = UpdatedRecords.from_json(data).ids

        outcomes = run_with_concurrency(
            max_workers,
            (
                partial(self._fetch_record, type_name, record_id) for record_id in ids
            ),
        )
        results = [
            FetchOutcome(o.index, ids[o.index], o.result, o.error) for o in outcomes
        ]
        failed = [r for r in results if not r.ok]
        if failed:
            LOGGER.warning(
                "%d of %d %s records could not be fetched",
                len(failed),
                len(results),
                type_name,
            )
            if raise_on_error and failed[0].error is not None:
                raise failed[0].error
        return results

    def describe_global(self) -> dict[str, Any]:
        """Lists the sObjects available in the org with their metadata"""
        self._require_authentication()
        content, _ = self.http_request("GET", self.make_url("sobjects"))
        try:
            return json.loads(content)
        except ValueError as e:
            raise SalesforceGeneralError("Unable to decode describe response") from e

    def download_file(
        self, content_version_id: str, destination: str | Path | IO[bytes]
    ) -> int:
        """
        Streams the body of a ContentVersion to ``destination``, a path or a
        writable binary file object. Returns the number of bytes written.
        """
        self._require_authentication()
        url = self.make_url(
            f"sobjects/ContentVersion/{quote(content_version_id, safe='')}/VersionData"
        )
        with self.stream("GET", url, headers=self._auth_headers()) as response:
            raise_for_status(response)
            if not isinstance(destination, (str, Path)):
                return self._copy_stream(response, destination)
            path = Path(destination)
            try:
                with path.open("wb") as out:
                    return self._copy_stream(response, out)
            except SalesforceConnectionError:
                path.unlink(missing_ok=True)
                raise

    @staticmethod
    def _copy_stream(response: Response, out: IO[bytes]) -> int:
        written = 0
        try:
            for chunk in response.iter_bytes():
                out.write(chunk)
                written += len(chunk)
        except TransportError as e:
            LOGGER.error("download of %s failed after %d bytes: %s", response.url, written, e)
            raise SalesforceConnectionError(str(e) or type(e).__name__) from e
        return written
