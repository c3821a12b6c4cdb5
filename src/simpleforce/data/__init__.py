from .sobject import SObject
from .query import QueryResult, UpdatedRecords

__all__ = ["SObject", "QueryResult", "UpdatedRecords"]
