"""
First-category-date annotation.

Category membership timestamps come back from the driver as datetime
objects, as 14-digit strings (YYYYMMDDHHMMSS) or as ISO-ish strings
depending on the backend; parse_timestamp accepts all three.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any

from pagelist.ir.model import DateAnnotation
from pagelist.messages import MessageCatalog

_COMPACT = re.compile(r"^(\d{4})(\d{2})(\d{2})(\d{2})(\d{2})(\d{2})$")
_ISO = re.compile(r"^(\d{4})-(\d{2})-(\d{2})(?:[T ](\d{2}):(\d{2}):(\d{2}))?")


def parse_timestamp(value: Any) -> datetime:
    """
    Parse a storage timestamp.

    Raises:
        ValueError: If the value is not a recognizable timestamp
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, bytes):
        value = value.decode("ascii")
    text = str(value).strip()
    match = _COMPACT.match(text) or _ISO.match(text)
    if not match:
        raise ValueError(f"Unrecognized timestamp: {value!r}")
    parts = [int(p) if p is not None else 0 for p in match.groups()]
    return datetime(*parts)


def format_category_date(
    value: Any, annotation: DateAnnotation, messages: MessageCatalog
) -> str:
    """
    Render the date a page was added to its first category.

    No pattern: content-language default, "19 October 2026".
    ISO 8601: "2026-10-19". dmy / mdy / ymd: day, month name and year in
    that order. Year-stripped patterns (md, dm) drop the year. Patterns
    that match the directive syntax but name no known order leave the
    date as "2026-10-19" (or "October 19" without year).
    """
    ts = parse_timestamp(value)
    month = messages.month_name(ts.month)

    if annotation.pattern is None:
        return f"{ts.day} {month} {ts.year}"

    if annotation.strip_year:
        formats = {
            "mdy": f"{month} {ts.day}",
            "dmy": f"{ts.day} {month}",
        }
        return formats.get(annotation.pattern, f"{month} {ts.day:02d}")

    formats = {
        "ISO 8601": ts.strftime("%Y-%m-%d"),
        "dmy": f"{ts.day} {month} {ts.year}",
        "mdy": f"{month} {ts.day}, {ts.year}",
        "ymd": f"{ts.year} {month} {ts.day}",
    }
    return formats.get(annotation.pattern, ts.strftime("%Y-%m-%d"))
