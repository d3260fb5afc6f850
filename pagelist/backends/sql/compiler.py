"""
Page list → SQL compiler

Compilation happens in two steps:

1. QueryCompiler.compile() turns a validated QuerySpecification into a
   CompiledQuery: typed field, join, predicate and sort nodes plus
   limit/offset. No SQL text exists at this stage.
2. to_sql() serializes a CompiledQuery for one SQL dialect into an SQLPlan
   (SQL text, bound parameters, notes). Every user-supplied value becomes
   a bound parameter.

Join graph:
- one INNER JOIN per include category, aliased c1..cN in declaration order
- one LEFT OUTER JOIN per exclude category, continuing the numbering, each
  paired with a `cK.cl_to IS NULL` predicate. A page survives only if
  the outer join found no membership row, and since (page, category) is
  unique a surviving page contributes exactly one row.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from pagelist.config import PageListConfig
from pagelist.ir.model import (
    CategoryRef,
    OrderDirection,
    OrderMethod,
    Policy,
    QuerySpecification,
)
from pagelist.schema.tables import DEFAULT_SCHEMA, SchemaDescription

logger = logging.getLogger(__name__)


class CompilationError(Exception):
    """
    Raised when a specification cannot be compiled.

    The builder makes every case unreachable, so this always indicates a
    programming error rather than bad user input.
    """

    def __init__(self, message: str, spec: Optional[QuerySpecification] = None):
        self.spec = spec
        super().__init__(message)


# ---------- Query nodes ----------


class JoinKind(str, Enum):
    INNER = "INNER JOIN"
    LEFT_OUTER = "LEFT OUTER JOIN"


@dataclass(frozen=True)
class ColumnRef:
    """A column reference used as the right-hand side of a predicate."""

    name: str


@dataclass(frozen=True)
class Predicate:
    """
    A single condition.

    op is one of "=", ">=", "NOT LIKE", "IS NULL", "IS NOT NULL". value is
    a ColumnRef for column comparisons, otherwise a literal that will be
    bound as a parameter.
    """

    column: str
    op: str
    value: Any = None


@dataclass(frozen=True)
class AnyOf:
    """Disjunction of predicates."""

    predicates: Tuple[Predicate, ...]


Condition = Union[Predicate, AnyOf]


@dataclass(frozen=True)
class Join:
    kind: JoinKind
    table: str
    alias: Optional[str]
    on: Tuple[Predicate, ...]


@dataclass(frozen=True)
class SelectField:
    expression: str
    name: str


@dataclass(frozen=True)
class SortKey:
    expression: str
    direction: OrderDirection


@dataclass(frozen=True)
class CompiledQuery:
    """
    The relational form of a page list request.

    Built fresh per request and never mutated; to_sql() is the only way
    it becomes SQL text.
    """

    table: str
    fields: Tuple[SelectField, ...]
    joins: Tuple[Join, ...] = ()
    where: Tuple[Condition, ...] = ()
    order_by: Tuple[SortKey, ...] = ()
    limit: Optional[int] = None
    offset: int = 0
    notes: Tuple[str, ...] = ()


@dataclass
class _AliasCounter:
    """Hands out category join aliases c1, c2, ... in call order."""

    next_index: int = 1

    def allocate(self) -> str:
        alias = f"c{self.next_index}"
        self.next_index += 1
        return alias


# ---------- Compiler ----------


class QueryCompiler:
    """
    Compiles a QuerySpecification against a storage schema.

    NOTE: validation must already have passed. The compiler trusts the
    builder's guarantees and raises CompilationError if they do not hold.
    """

    def __init__(
        self,
        schema: SchemaDescription = DEFAULT_SCHEMA,
        config: Optional[PageListConfig] = None,
    ) -> None:
        self._schema = schema
        self._config = config or PageListConfig()

    def compile(self, spec: QuerySpecification) -> CompiledQuery:
        s = self._schema
        notes: List[str] = []
        joins: List[Join] = []
        where: List[Condition] = []
        aliases = _AliasCounter()

        # ---- Category joins ----
        include_aliases = []
        for category in spec.include_categories:
            alias = aliases.allocate()
            include_aliases.append(alias)
            joins.append(self._category_join(JoinKind.INNER, alias, category))
        for category in spec.exclude_categories:
            alias = aliases.allocate()
            joins.append(self._category_join(JoinKind.LEFT_OUTER, alias, category))
            where.append(Predicate(f"{alias}.{s.category_to}", "IS NULL"))
        if spec.include_categories:
            notes.append(f"{len(spec.include_categories)} include category join(s)")
        if spec.exclude_categories:
            notes.append(
                f"{len(spec.exclude_categories)} exclude category join(s), "
                "anti-joined via IS NULL"
            )
        first_alias = include_aliases[0] if include_aliases else None

        # ---- Filters ----
        where = self._compile_filters(spec) + where

        # ---- Review status ----
        review_join, review_where = self._compile_review_status(spec)
        if review_join is not None:
            joins.append(review_join)
            where.extend(review_where)
            notes.append("Review status filter applied")

        # ---- Fields and sort ----
        fields = self._compile_fields(spec, first_alias)
        order_by = tuple(
            SortKey(expression, spec.order)
            for expression in self._sort_expressions(spec, first_alias)
        )
        notes.append(f"Sorted by {spec.order_method.value} {spec.order.value}")

        compiled = CompiledQuery(
            table=s.page_table,
            fields=fields,
            joins=tuple(joins),
            where=tuple(where),
            order_by=order_by,
            limit=spec.count,
            offset=spec.offset,
            notes=tuple(notes),
        )
        logger.debug(
            "Compiled page list query: %d join(s), %d predicate(s), limit=%s offset=%d",
            len(compiled.joins),
            len(compiled.where),
            compiled.limit,
            compiled.offset,
        )
        return compiled

    # ---------------- Internals ----------------

    def _page_column(self, column: str) -> str:
        return f"{self._schema.page_table}.{column}"

    def _category_join(self, kind: JoinKind, alias: str, category: CategoryRef) -> Join:
        s = self._schema
        return Join(
            kind=kind,
            table=s.category_table,
            alias=alias,
            on=(
                Predicate(
                    self._page_column(s.page_id), "=", ColumnRef(f"{alias}.{s.category_from}")
                ),
                Predicate(f"{alias}.{s.category_to}", "=", category.name),
            ),
        )

    def _compile_filters(self, spec: QuerySpecification) -> List[Condition]:
        """Namespace, redirect and subpage predicates."""
        s = self._schema
        where: List[Condition] = []

        if spec.namespace is not None:
            where.append(Predicate(self._page_column(s.page_namespace), "=", spec.namespace))

        if spec.redirects == Policy.ONLY:
            where.append(Predicate(self._page_column(s.page_is_redirect), "=", 1))
        elif spec.redirects == Policy.EXCLUDE:
            where.append(Predicate(self._page_column(s.page_is_redirect), "=", 0))

        if spec.ignore_subpages:
            where.append(Predicate(self._page_column(s.page_title), "NOT LIKE", "%/%"))

        return where

    def _compile_review_status(
        self, spec: QuerySpecification
    ) -> Tuple[Optional[Join], List[Condition]]:
        """
        Join the review-status table when a stability or quality policy
        asks for it and the review extension is installed. Otherwise the
        policies are ignored.
        """
        s = self._schema
        if not (
            spec.filters_review_status
            and self._config.review_extension_installed
            and s.review_table
        ):
            return None, []

        join = Join(
            kind=JoinKind.LEFT_OUTER,
            table=s.review_table,
            alias=None,
            on=(
                Predicate(
                    self._page_column(s.page_id),
                    "=",
                    ColumnRef(f"{s.review_table}.{s.review_page_id}"),
                ),
            ),
        )
        stable = f"{s.review_table}.{s.review_stable}"
        quality = f"{s.review_table}.{s.review_quality}"
        where: List[Condition] = []

        if spec.stable == Policy.ONLY:
            where.append(Predicate(stable, "IS NOT NULL"))
        elif spec.stable == Policy.EXCLUDE:
            where.append(Predicate(stable, "IS NULL"))

        if spec.quality == Policy.ONLY:
            where.append(Predicate(quality, ">=", 1))
        elif spec.quality == Policy.EXCLUDE:
            where.append(AnyOf((Predicate(quality, "=", 0), Predicate(quality, "IS NULL"))))

        return join, where

    def _compile_fields(
        self, spec: QuerySpecification, first_alias: Optional[str]
    ) -> Tuple[SelectField, ...]:
        s = self._schema
        fields = [
            SelectField(self._page_column(s.page_id), "page_id"),
            SelectField(self._page_column(s.page_namespace), "page_namespace"),
            SelectField(self._page_column(s.page_title), "page_title"),
        ]
        if first_alias is not None and (
            spec.first_category_date is not None
            or spec.order_method == OrderMethod.CATEGORY_ADD
        ):
            fields.append(
                SelectField(f"{first_alias}.{s.category_timestamp}", "category_timestamp")
            )
        if spec.order_method == OrderMethod.LENGTH:
            fields.append(SelectField(self._page_column(s.page_len), "page_len"))
        elif spec.order_method == OrderMethod.LAST_EDIT:
            fields.append(SelectField(self._page_column(s.page_touched), "page_touched"))
        elif spec.order_method == OrderMethod.POPULARITY and s.counter_column:
            fields.append(SelectField(self._page_column(s.counter_column), "page_counter"))
        return tuple(fields)

    def _sort_expressions(
        self, spec: QuerySpecification, first_alias: Optional[str]
    ) -> List[str]:
        """Map the order method to the column(s) it sorts by."""
        s = self._schema
        method = spec.order_method

        if not isinstance(method, OrderMethod):
            raise CompilationError(f"Invalid order method {method!r}", spec)
        if method.needs_category_join and first_alias is None:
            raise CompilationError(
                f"Order method {method.value} needs an include category join", spec
            )

        if method == OrderMethod.LAST_EDIT:
            return [self._page_column(s.page_touched)]
        if method == OrderMethod.LENGTH:
            return [self._page_column(s.page_len)]
        if method == OrderMethod.CREATED:
            # Page ids are never reused and only grow.
            return [self._page_column(s.page_id)]
        if method == OrderMethod.CATEGORY_SORTKEY:
            return [f"{first_alias}.{s.category_type}", f"{first_alias}.{s.category_sortkey}"]
        if method == OrderMethod.POPULARITY:
            if not s.counter_column:
                raise CompilationError("Order method popularity needs a counter column", spec)
            return [self._page_column(s.counter_column)]
        if method == OrderMethod.CATEGORY_ADD:
            return [f"{first_alias}.{s.category_timestamp}"]

        raise CompilationError(f"Invalid order method {method!r}", spec)


# ---------- Serialization ----------


@dataclass(frozen=True)
class SQLDialect:
    """
    What differs between the databases we emit for.

    paramstyle: "named" (:p1) or "pyformat" (%(p1)s), as in DB-API 2.0
    unbounded_limit: LIMIT value meaning "no limit", needed when an
        OFFSET is emitted without a LIMIT
    """

    name: str
    paramstyle: str
    unbounded_limit: str

    def placeholder(self, name: str) -> str:
        """Parameter marker for a bound value called name."""
        if self.paramstyle == "named":
            return f":{name}"
        if self.paramstyle == "pyformat":
            return f"%({name})s"
        raise ValueError(f"Unsupported paramstyle: {self.paramstyle}")


SQLITE = SQLDialect(name="sqlite", paramstyle="named", unbounded_limit="-1")
POSTGRES = SQLDialect(name="postgres", paramstyle="pyformat", unbounded_limit="ALL")

DIALECTS: Dict[str, SQLDialect] = {d.name: d for d in (SQLITE, POSTGRES)}


@dataclass
class SQLPlan:
    """
    The serialized query.

    The 'notes' field is a human-readable account of how the join graph
    and filters were derived, shown by the CLI under --explain.
    """

    sql: str
    params: Dict[str, Any]
    notes: List[str] = field(default_factory=list)


class _Serializer:
    def __init__(self, dialect: SQLDialect) -> None:
        self._dialect = dialect
        self.params: Dict[str, Any] = {}

    def bind(self, value: Any) -> str:
        name = f"p{len(self.params) + 1}"
        self.params[name] = value
        return self._dialect.placeholder(name)

    def predicate(self, pred: Predicate) -> str:
        if pred.op in ("IS NULL", "IS NOT NULL"):
            return f"{pred.column} {pred.op}"
        if isinstance(pred.value, ColumnRef):
            return f"{pred.column} {pred.op} {pred.value.name}"
        return f"{pred.column} {pred.op} {self.bind(pred.value)}"

    def condition(self, cond: Condition) -> str:
        if isinstance(cond, AnyOf):
            return "(" + " OR ".join(self.predicate(p) for p in cond.predicates) + ")"
        return self.predicate(cond)

    def join(self, join: Join) -> str:
        target = f"{join.table} AS {join.alias}" if join.alias else join.table
        on = " AND ".join(self.predicate(p) for p in join.on)
        return f"{join.kind.value} {target} ON {on}"


def to_sql(compiled: CompiledQuery, dialect: SQLDialect = SQLITE) -> SQLPlan:
    """Serialize a CompiledQuery into SQL text with bound parameters."""
    out = _Serializer(dialect)

    select = ",\n    ".join(f"{f.expression} AS {f.name}" for f in compiled.fields)
    lines = [f"SELECT\n    {select}", f"FROM {compiled.table}"]
    lines.extend(out.join(j) for j in compiled.joins)

    if compiled.where:
        lines.append("WHERE " + "\n  AND ".join(out.condition(c) for c in compiled.where))

    if compiled.order_by:
        lines.append(
            "ORDER BY "
            + ", ".join(f"{k.expression} {k.direction.sql}" for k in compiled.order_by)
        )

    if compiled.limit is not None:
        lines.append(f"LIMIT {int(compiled.limit)}")
    elif compiled.offset > 0:
        lines.append(f"LIMIT {dialect.unbounded_limit}")
    if compiled.offset > 0:
        lines.append(f"OFFSET {int(compiled.offset)}")

    return SQLPlan(sql="\n".join(lines), params=out.params, notes=list(compiled.notes))
