"""Page list storage schema description and reference DDL."""

from .tables import DEFAULT_SCHEMA, SQLITE_SCHEMA, SchemaDescription, create_sqlite_schema

__all__ = ["DEFAULT_SCHEMA", "SQLITE_SCHEMA", "SchemaDescription", "create_sqlite_schema"]
