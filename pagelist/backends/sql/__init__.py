"""SQL backend for page list queries."""

from .compiler import (
    DIALECTS,
    POSTGRES,
    SQLITE,
    CompilationError,
    CompiledQuery,
    QueryCompiler,
    SQLDialect,
    SQLPlan,
    to_sql,
)

__all__ = [
    "DIALECTS",
    "POSTGRES",
    "SQLITE",
    "CompilationError",
    "CompiledQuery",
    "QueryCompiler",
    "SQLDialect",
    "SQLPlan",
    "to_sql",
]
