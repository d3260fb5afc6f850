"""
Link rendering collaborator.

The formatter only decides what to link and with which options; turning
a PageTitle into markup is the host's job. HtmlLinkRenderer is the
default for hosts that serve pages under a plain article path.
"""

from __future__ import annotations

import html
from typing import Any, Dict, Mapping, Optional, Protocol
from urllib.parse import quote, urlencode

from pagelist.registry.namespaces import NamespaceRegistry, PageTitle

# Characters left unescaped in article paths, so "File:A/B" stays readable.
_PATH_SAFE = ";@$!*(),/~:"


class LinkRenderer(Protocol):
    """Protocol for link markup generation."""

    def link(
        self,
        title: PageTitle,
        text: str,
        attributes: Mapping[str, str],
        query: Mapping[str, Any],
    ) -> str:
        """Markup for a link to title showing text (not yet escaped)."""
        ...


class HtmlLinkRenderer:
    """Plain <a href> links under an article path such as /wiki/$1."""

    def __init__(
        self,
        namespaces: Optional[NamespaceRegistry] = None,
        article_path: str = "/wiki/$1",
    ) -> None:
        self._namespaces = namespaces or NamespaceRegistry()
        self._article_path = article_path

    def url(self, title: PageTitle, query: Optional[Mapping[str, Any]] = None) -> str:
        path = quote(self._namespaces.prefixed_dbkey(title), safe=_PATH_SAFE)
        url = self._article_path.replace("$1", path)
        if query:
            url += "?" + urlencode(list(query.items()))
        return url

    def link(
        self,
        title: PageTitle,
        text: str,
        attributes: Mapping[str, str],
        query: Mapping[str, Any],
    ) -> str:
        attrs: Dict[str, str] = {
            "href": self.url(title, query),
            "title": self._namespaces.prefixed_text(title),
        }
        for key in sorted(attributes):
            attrs[key] = attributes[key]
        rendered = " ".join(
            f'{key}="{html.escape(value, quote=True)}"' for key, value in attrs.items()
        )
        return f"<a {rendered}>{html.escape(text, quote=False)}</a>"
