"""
Page list storage schema

The compiler never hard-codes table or column names; it reads them from
a SchemaDescription injected by the host. The defaults match the classic
wiki layout:

- page: one row per page (namespace, title, redirect flag, length, ...)
- categorylinks: one row per (page, category) membership, with the time
  the page was added and its sort key in that category
- flaggedpages: optional review-status table, one row per reviewed page
- image: optional file metadata, one row per uploaded file, keyed by the
  file title without namespace prefix

SQLITE_SCHEMA is the reference DDL for that layout. It is used by the CLI
and the tests; production hosts point the compiler at their own tables.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class SchemaDescription:
    """
    Table and column names the compiler emits.

    counter_column is None when the host does not track page views, and
    review_table is None when no review-status table exists. Either makes
    the dependent features unavailable at compile time.
    file_table is None when the host keeps no file metadata; galleries
    then show no file sizes.
    """

    page_table: str = "page"
    page_id: str = "page_id"
    page_namespace: str = "page_namespace"
    page_title: str = "page_title"
    page_is_redirect: str = "page_is_redirect"
    page_touched: str = "page_touched"
    page_len: str = "page_len"
    counter_column: Optional[str] = "page_counter"

    category_table: str = "categorylinks"
    category_from: str = "cl_from"
    category_to: str = "cl_to"
    category_timestamp: str = "cl_timestamp"
    category_sortkey: str = "cl_sortkey"
    category_type: str = "cl_type"

    review_table: Optional[str] = "flaggedpages"
    review_page_id: str = "fp_page_id"
    review_stable: str = "fp_stable"
    review_quality: str = "fp_quality"

    file_table: Optional[str] = "image"
    file_name: str = "img_name"
    file_size: str = "img_size"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SchemaDescription":
        """Build a description from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


DEFAULT_SCHEMA = SchemaDescription()


SQLITE_SCHEMA = """
-- ============================================================================
-- PAGE: one row per page
-- ============================================================================
-- page_id is never reused and only grows, so it doubles as creation order.

CREATE TABLE IF NOT EXISTS page (
    page_id             INTEGER PRIMARY KEY AUTOINCREMENT,
    page_namespace      INTEGER NOT NULL,
    page_title          TEXT NOT NULL,
    page_is_redirect    INTEGER NOT NULL DEFAULT 0,
    page_touched        TEXT NOT NULL,          -- YYYYMMDDHHMMSS
    page_len            INTEGER NOT NULL DEFAULT 0,
    page_counter        INTEGER NOT NULL DEFAULT 0,

    UNIQUE (page_namespace, page_title)
);

-- ============================================================================
-- CATEGORYLINKS: category membership
-- ============================================================================
-- cl_to is the category title without namespace prefix, underscores for
-- spaces. cl_type is one of 'page', 'subcat', 'file'.

CREATE TABLE IF NOT EXISTS categorylinks (
    cl_from             INTEGER NOT NULL REFERENCES page(page_id),
    cl_to               TEXT NOT NULL,
    cl_sortkey          TEXT NOT NULL DEFAULT '',
    cl_timestamp        TEXT NOT NULL,          -- YYYY-MM-DD HH:MM:SS
    cl_type             TEXT NOT NULL DEFAULT 'page',

    PRIMARY KEY (cl_from, cl_to)
);

CREATE INDEX IF NOT EXISTS cl_timestamp_idx ON categorylinks (cl_to, cl_timestamp);
CREATE INDEX IF NOT EXISTS cl_sortkey_idx ON categorylinks (cl_to, cl_type, cl_sortkey, cl_from);

-- ============================================================================
-- FLAGGEDPAGES: optional review status
-- ============================================================================
-- fp_stable holds the reviewed revision id, fp_quality the review tier.

CREATE TABLE IF NOT EXISTS flaggedpages (
    fp_page_id          INTEGER PRIMARY KEY REFERENCES page(page_id),
    fp_stable           INTEGER,
    fp_quality          INTEGER
);

-- ============================================================================
-- IMAGE: optional file metadata
-- ============================================================================
-- img_name is the file dbkey without the File: prefix; img_size is in bytes.

CREATE TABLE IF NOT EXISTS image (
    img_name            TEXT PRIMARY KEY,
    img_size            INTEGER NOT NULL DEFAULT 0
);
"""


def create_sqlite_schema(connection: Any) -> None:
    """Create the reference tables on a sqlite3 connection."""
    connection.executescript(SQLITE_SCHEMA)
    connection.commit()
