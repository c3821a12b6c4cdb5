from typing import TYPE_CHECKING, Any, NamedTuple, TypedDict

from ..exceptions import SalesforceGeneralError
from .sobject import SObject

if TYPE_CHECKING:
    from ..interfaces import SalesforceConnection


class QueryResultJSON(TypedDict, total=False):
    totalSize: int
    done: bool
    nextRecordsUrl: str
    records: list[dict[str, Any]]


class QueryResult(NamedTuple):
    """
    One page of SOQL results.

    When ``done`` is False, pass ``next_records_url`` back into
    ``SalesforceClient.query`` to fetch the following page.
    """

    total_size: int
    done: bool
    next_records_url: str
    records: tuple[SObject, ...]

    @classmethod
    def from_json(
        cls, data: Any, client: "SalesforceConnection | None" = None
    ) -> "QueryResult":
        if not isinstance(data, dict) or not isinstance(
            records := data.get("records", []), list
        ):
            raise SalesforceGeneralError("Unexpected query response shape")
        return cls(
            total_size=int(data.get("totalSize", 0)),
            done=bool(data.get("done", True)),
            next_records_url=data.get("nextRecordsUrl") or "",
            records=tuple(SObject.from_json(record, client) for record in records),
        )


class UpdatedRecords(NamedTuple):
    """Response of ``sobjects/{type}/updated``"""

    ids: tuple[str, ...]
    latest_date_covered: str = ""

    @classmethod
    def from_json(cls, data: Any) -> "UpdatedRecords":
        if not isinstance(data, dict):
            raise SalesforceGeneralError("Updated records response is not an object")
        ids = data.get("ids")
        if not isinstance(ids, list) or not all(isinstance(i, str) for i in ids):
            raise SalesforceGeneralError(
                "Updated records response has no list of string 'ids'"
            )
        return cls(tuple(ids), str(data.get("latestDateCovered") or ""))
