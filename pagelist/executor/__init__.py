"""Page list query execution."""

from .sql import QueryExecutor, QueryResult, ResultRow

__all__ = ["QueryExecutor", "QueryResult", "ResultRow"]
