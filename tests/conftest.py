"""Shared fixtures: an in-memory SQLite wiki laid out like SQLITE_SCHEMA."""

import sqlite3
from typing import Dict, Optional

import pytest

from pagelist.schema.tables import create_sqlite_schema


class Wiki:
    """Inserts pages, memberships and review flags into a test database."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self.connection = connection

    def add(
        self,
        title: str,
        namespace: int = 0,
        *,
        categories: Optional[Dict[str, str]] = None,
        redirect: bool = False,
        length: int = 100,
        touched: str = "20260101000000",
        counter: int = 0,
        sortkey: Optional[str] = None,
    ) -> int:
        """Insert a page and its category memberships; returns the page id."""
        cur = self.connection.execute(
            "INSERT INTO page (page_namespace, page_title, page_is_redirect, page_touched, "
            "page_len, page_counter) VALUES (?, ?, ?, ?, ?, ?)",
            (namespace, title, int(redirect), touched, length, counter),
        )
        page_id = cur.lastrowid
        for category, timestamp in (categories or {}).items():
            self.connection.execute(
                "INSERT INTO categorylinks (cl_from, cl_to, cl_sortkey, cl_timestamp) "
                "VALUES (?, ?, ?, ?)",
                (page_id, category, (sortkey or title).upper(), timestamp),
            )
        self.connection.commit()
        return page_id

    def upload(self, name: str, size: int) -> None:
        """Record file metadata for File:name."""
        self.connection.execute("INSERT INTO image (img_name, img_size) VALUES (?, ?)", (name, size))
        self.connection.commit()

    def flag(self, page_id: int, stable: Optional[int], quality: Optional[int]) -> None:
        self.connection.execute(
            "INSERT INTO flaggedpages (fp_page_id, fp_stable, fp_quality) VALUES (?, ?, ?)",
            (page_id, stable, quality),
        )
        self.connection.commit()


@pytest.fixture
def connection():
    """Empty database with the reference schema."""
    conn = sqlite3.connect(":memory:")
    create_sqlite_schema(conn)
    yield conn
    conn.close()


@pytest.fixture
def wiki(connection):
    return Wiki(connection)


@pytest.fixture
def trees(wiki):
    """
    Pages A, B, C in Trees (added in that order), C also in Extinct.

    Lengths are 300, 100 and 200.
    """
    wiki.add("A", categories={"Trees": "2026-01-01 10:00:00"}, length=300)
    wiki.add("B", categories={"Trees": "2026-02-01 10:00:00"}, length=100)
    wiki.add(
        "C",
        categories={"Trees": "2026-03-01 10:00:00", "Extinct": "2026-03-02 10:00:00"},
        length=200,
    )
    return wiki.connection
