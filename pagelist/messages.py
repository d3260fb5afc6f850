"""
Localizable message texts.

The renderer never embeds user-visible strings; it asks a MessageCatalog
by key. Hosts with their own localization layer pass a catalog built from
their translations; missing keys fall back to English.
"""

from __future__ import annotations

import html
from typing import Dict, Iterable, Mapping, Optional

ENGLISH: Dict[str, str] = {
    "intersection_noincludecats": (
        "Error: You need to include at least one category, or specify a namespace!"
    ),
    "intersection_toomanycats": "Error: Too many categories!",
    "intersection_noresults": "Error: No results!",
    "colon-separator": ": ",
    "comma-separator": ", ",
    "january": "January",
    "february": "February",
    "march": "March",
    "april": "April",
    "may_long": "May",
    "june": "June",
    "july": "July",
    "august": "August",
    "september": "September",
    "october": "October",
    "november": "November",
    "december": "December",
}

_MONTH_KEYS = (
    "january", "february", "march", "april", "may_long", "june",
    "july", "august", "september", "october", "november", "december",
)


class MessageCatalog:
    """Message lookup by key, with English fallback."""

    def __init__(self, messages: Optional[Mapping[str, str]] = None) -> None:
        self._messages: Dict[str, str] = dict(ENGLISH)
        if messages:
            self._messages.update(messages)

    def text(self, key: str) -> str:
        """
        Raw message text. Unknown keys render as ⧼key⧽ so a missing
        translation is visible instead of silently empty.
        """
        return self._messages.get(key, f"⧼{key}⧽")

    def escaped(self, key: str) -> str:
        """Message text, HTML-escaped for direct inclusion in markup."""
        return html.escape(self.text(key), quote=True)

    def comma_list(self, items: Iterable[str]) -> str:
        """Join already-rendered items with the localized comma separator."""
        return self.text("comma-separator").join(items)

    def month_name(self, month: int) -> str:
        """Localized month name, 1-based."""
        return self.text(_MONTH_KEYS[month - 1])
