"""
Page list SQL executor

Takes an SQLPlan, runs it once on a DB-API 2.0 connection, and maps the
rows back to typed ResultRows. There is no retry and no fallback: if the
driver raises, the render fails with the driver's own exception.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from pagelist.backends.sql.compiler import SQLITE, SQLDialect, SQLPlan
from pagelist.registry.namespaces import NS_FILE, PageTitle
from pagelist.schema.tables import DEFAULT_SCHEMA, SchemaDescription

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResultRow:
    """
    One page matched by the query.

    length, touched and counter are only present when the order method
    selected them; category_timestamp only when the query had an include
    category join and either sorted or annotated by it.
    """

    page_id: int
    namespace: int
    title: str
    length: Optional[int] = None
    touched: Optional[Any] = None
    counter: Optional[int] = None
    category_timestamp: Optional[Any] = None

    @classmethod
    def from_mapping(cls, raw: Dict[str, Any]) -> "ResultRow":
        title = raw["page_title"]
        if isinstance(title, bytes):
            title = title.decode("utf-8")
        return cls(
            page_id=int(raw["page_id"]),
            namespace=int(raw["page_namespace"]),
            title=title,
            length=raw.get("page_len"),
            touched=raw.get("page_touched"),
            counter=raw.get("page_counter"),
            category_timestamp=raw.get("category_timestamp"),
        )


@dataclass
class QueryResult:
    """The rows of one page list query plus execution metadata."""

    rows: List[ResultRow] = field(default_factory=list)
    executed_at: Optional[datetime] = None
    execution_time_ms: Optional[float] = None

    # The SQL that was executed (for debugging/auditing)
    executed_sql: Optional[str] = None
    notes: List[str] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        """The zero-rows signal: the formatter renders "no results"."""
        return not self.rows


class QueryExecutor:
    """
    Executes page list queries on a DB-API connection.

    The connection must accept the paramstyle the plan was serialized
    with (named for sqlite3, pyformat for psycopg). The executor only
    reads; it never commits, rolls back or closes the connection it was
    given.
    """

    def __init__(self, connection: Any) -> None:
        self._connection = connection

    def execute(self, sql_plan: SQLPlan) -> QueryResult:
        """
        Execute a compiled plan and return its rows.

        Raises:
            Whatever the database driver raises, unchanged.
        """
        executed_at = datetime.now()
        start = time.perf_counter()

        try:
            raw_rows = self._execute_sql(sql_plan.sql, sql_plan.params)
        except Exception:
            logger.error("Page list query failed:\n%s", sql_plan.sql)
            raise

        elapsed_ms = (time.perf_counter() - start) * 1000
        rows = [ResultRow.from_mapping(raw) for raw in raw_rows]
        logger.debug("Page list query returned %d row(s) in %.1f ms", len(rows), elapsed_ms)

        return QueryResult(
            rows=rows,
            executed_at=executed_at,
            execution_time_ms=elapsed_ms,
            executed_sql=sql_plan.sql,
            notes=list(sql_plan.notes),
        )

    def _execute_sql(self, sql: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        cursor = self._connection.cursor()
        try:
            cursor.execute(sql, params)
            columns = [desc[0] for desc in cursor.description] if cursor.description else []
            return [dict(zip(columns, row)) for row in cursor.fetchall()]
        finally:
            cursor.close()


class FileSizeLookup:
    """
    Reads file sizes from the schema's file table.

    An instance is the file_size callable a gallery takes: it returns the
    size in bytes for a File: title, or None for other namespaces, for
    files without a metadata row, and when the schema has no file table.
    Driver errors propagate like those of QueryExecutor.
    """

    def __init__(
        self,
        connection: Any,
        schema: SchemaDescription = DEFAULT_SCHEMA,
        dialect: SQLDialect = SQLITE,
    ) -> None:
        self._connection = connection
        self._schema = schema
        self._dialect = dialect

    def __call__(self, title: PageTitle) -> Optional[int]:
        s = self._schema
        if s.file_table is None or title.namespace != NS_FILE:
            return None

        sql = (
            f"SELECT {s.file_size} FROM {s.file_table} "
            f"WHERE {s.file_name} = {self._dialect.placeholder('name')}"
        )
        cursor = self._connection.cursor()
        try:
            cursor.execute(sql, {"name": title.dbkey})
            row = cursor.fetchone()
        finally:
            cursor.close()

        if row is None or row[0] is None:
            return None
        return int(row[0])
