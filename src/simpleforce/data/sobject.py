import json
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from ..exceptions import (
    SalesforceAuthenticationFailed,
    SalesforceError,
    SalesforceGeneralError,
    SalesforceNotFound,
)
from ..logger import getLogger

if TYPE_CHECKING:
    from ..interfaces import SalesforceConnection

_logger = getLogger("sobject")

ID_FIELD = "Id"
_NON_WRITABLE = frozenset({ID_FIELD, "attributes"})


def _decode_object(content: bytes, what: str) -> dict[str, Any]:
    try:
        data = json.loads(content)
    except ValueError as e:
        raise SalesforceGeneralError(f"Unable to decode {what} response") from e
    if not isinstance(data, dict):
        raise SalesforceGeneralError(f"Unexpected {what} response shape")
    return data


def _created_id(content: bytes) -> str:
    created_id = _decode_object(content, "create").get("id")
    if not isinstance(created_id, str) or not created_id:
        raise SalesforceGeneralError("Create response has no record id")
    return created_id


class SObject(dict[str, Any]):
    """
    A Salesforce record: field names mapped to values, bound to the client
    that produced it so it can load, save or delete itself.

    Field access is plain ``dict`` access (``account["Name"]``).
    """

    _client: "SalesforceConnection | None"
    _type: str

    def __init__(
        self,
        type_name: str = "",
        client: "SalesforceConnection | None" = None,
        /,
        **fields: Any,
    ):
        super().__init__(**fields)
        attributes = self.get("attributes")
        if not type_name and isinstance(attributes, dict):
            type_name = attributes.get("type", "")
        self._type = type_name
        self._client = client

    @classmethod
    def from_json(
        cls, data: dict[str, Any], client: "SalesforceConnection | None" = None
    ) -> "SObject":
        return cls("", client, **data)

    # collaborator hooks
    def bind(self, client: "SalesforceConnection") -> "SObject":
        self._client = client
        return self

    def set_type(self, type_name: str) -> "SObject":
        self._type = type_name
        return self

    @property
    def client(self) -> "SalesforceConnection | None":
        return self._client

    @property
    def type(self) -> str:
        return self._type

    @property
    def id(self) -> str | None:
        return self.get(ID_FIELD)

    def __repr__(self):
        return f"{type(self).__name__}({self._type!r}, {dict.__repr__(self)})"

    def writable_fields(self) -> dict[str, Any]:
        return {k: v for k, v in self.items() if k not in _NON_WRITABLE}

    def _connection(self) -> "SalesforceConnection":
        if self._client is None:
            raise ValueError(f"{self!r} is not bound to a client")
        if not self._type:
            raise ValueError("SObject type is required for this operation")
        if not self._client.is_authenticated:
            raise SalesforceAuthenticationFailed()
        return self._client

    def _record_url(self, record_id: str | None = None) -> str:
        record_id = record_id or self.id
        if not record_id:
            raise ValueError(f"{self._type} record has no {ID_FIELD}")
        return self._connection().make_url(
            f"sobjects/{self._type}/{quote(record_id, safe='')}"
        )

    def fetch(self, record_id: str | None = None) -> "SObject":
        """Loads a record by Id, returning a new bound SObject"""
        url = self._record_url(record_id)
        try:
            content, _ = self._connection().http_request("GET", url)
        except SalesforceError as e:
            if e.status_code == 404:
                raise SalesforceNotFound.from_error(e) from e
            raise
        return type(self)(self._type, self._client, **_decode_object(content, "record"))

    def create(self) -> "SObject":
        if self.id:
            raise ValueError(
                f"Cannot insert record that already has an {ID_FIELD} set: {self.id}"
            )
        client = self._connection()
        content, _ = client.http_request(
            "POST",
            client.make_url(f"sobjects/{self._type}/"),
            json.dumps(self.writable_fields()),
        )
        self[ID_FIELD] = _created_id(content)
        _logger.debug("Created %s %s", self._type, self.id)
        return self

    def update(self) -> "SObject":
        url = self._record_url()
        self._connection().http_request(
            "PATCH", url, json.dumps(self.writable_fields())
        )
        return self

    def upsert(self, external_id_field: str) -> "SObject":
        """
        Inserts or updates the record matched by ``external_id_field``.
        The Id of a newly created record is stored on the object.
        """
        external_id = self.get(external_id_field)
        if external_id is None or external_id == "":
            raise ValueError(f"{self._type} record has no {external_id_field} value")
        client = self._connection()
        url = client.make_url(
            f"sobjects/{self._type}/{external_id_field}/{quote(str(external_id), safe='')}"
        )
        payload = {
            k: v for k, v in self.writable_fields().items() if k != external_id_field
        }
        content, status_code = client.http_request("PATCH", url, json.dumps(payload))
        if status_code == 201 and content:
            self[ID_FIELD] = _created_id(content)
        return self

    def delete(self) -> None:
        url = self._record_url()
        self._connection().http_request("DELETE", url)
        _logger.debug("Deleted %s %s", self._type, self.id)

    def describe(self) -> dict[str, Any]:
        client = self._connection()
        content, _ = client.http_request(
            "GET", client.make_url(f"sobjects/{self._type}/describe")
        )
        return _decode_object(content, "describe")
