"""
Result formatter.

Turns result rows into the page list markup. Rows are rendered in the
order the query returned them; the formatter never re-sorts.

Each output mode has its own render function, chosen once per call:
- list modes (unordered, ordered, none) wrap every item with the mode's
  envelope strings
- inline joins items with the localized comma list
- gallery hands every row to the gallery collaborator and returns its
  markup untouched
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from pagelist.ir.model import OutputMode, QuerySpecification
from pagelist.messages import MessageCatalog
from pagelist.registry.namespaces import NamespaceRegistry, PageTitle
from pagelist.render.dates import format_category_date
from pagelist.render.gallery import GalleryFactory, HtmlGallery
from pagelist.render.links import HtmlLinkRenderer, LinkRenderer
from pagelist.executor.sql import ResultRow

logger = logging.getLogger(__name__)

NO_RESULTS = "intersection_noresults"

# Query parameter carrying the page id when googlehack is on.
PAGE_ID_PARAM = "dpl_id"


@dataclass(frozen=True)
class ListEnvelope:
    """Wrapper strings around the whole list and around each item."""

    start_list: str
    end_list: str
    start_item: str
    end_item: str


ENVELOPES: Dict[OutputMode, ListEnvelope] = {
    OutputMode.UNORDERED: ListEnvelope("<ul>", "</ul>", "<li>", "</li>"),
    OutputMode.ORDERED: ListEnvelope("<ol>", "</ol>", "<li>", "</li>"),
    OutputMode.NONE: ListEnvelope("", "", "", "<br />"),
    OutputMode.INLINE: ListEnvelope("", "", "", ""),
}


class ResultFormatter:
    """
    Renders result rows for one QuerySpecification.

    Collaborators:
        namespaces: display text of titles
        link_renderer: markup for each link
        messages: "no results" text, separators, month names
        gallery_factory: creates the gallery widget in gallery mode

    The default gallery has no file-size lookup, so galleryshowfilesize
    only shows sizes when the host supplies a factory whose gallery has
    one (PageListRenderer and the CLI wire FileSizeLookup in).
    """

    def __init__(
        self,
        namespaces: Optional[NamespaceRegistry] = None,
        link_renderer: Optional[LinkRenderer] = None,
        messages: Optional[MessageCatalog] = None,
        gallery_factory: Optional[GalleryFactory] = None,
    ) -> None:
        self._namespaces = namespaces or NamespaceRegistry()
        self._links = link_renderer or HtmlLinkRenderer(self._namespaces)
        self._messages = messages or MessageCatalog()
        self._gallery_factory = gallery_factory or (
            lambda options: HtmlGallery(options, self._namespaces)
        )
        self._renderers: Dict[
            OutputMode, Callable[[Sequence[ResultRow], QuerySpecification], str]
        ] = {
            OutputMode.UNORDERED: self._render_list,
            OutputMode.ORDERED: self._render_list,
            OutputMode.NONE: self._render_list,
            OutputMode.INLINE: self._render_inline,
            OutputMode.GALLERY: self._render_gallery,
        }

    def format(self, rows: Sequence[ResultRow], spec: QuerySpecification) -> str:
        """
        Render rows, or the "no results" message when there are none.

        Zero rows never reach the gallery: an empty result is reported
        the same way in every mode.
        """
        if not rows:
            if spec.suppress_errors:
                return ""
            return self._messages.escaped(NO_RESULTS)

        return self._renderers[spec.mode](rows, spec)

    # ---------------- Per-row ----------------

    def _display_text(self, title: PageTitle, spec: QuerySpecification) -> str:
        if spec.show_namespace:
            return self._namespaces.prefixed_text(title)
        return title.text

    def _date_prefix(self, row: ResultRow, spec: QuerySpecification) -> Optional[str]:
        if spec.first_category_date is None:
            return None
        if row.category_timestamp is None:
            logger.warning("Row for page %d has no category timestamp", row.page_id)
            return None
        date = format_category_date(
            row.category_timestamp, spec.first_category_date, self._messages
        )
        return html.escape(date, quote=False)

    def _link(self, row: ResultRow, spec: QuerySpecification) -> str:
        title = PageTitle(namespace=row.namespace, dbkey=row.title)
        attributes: Mapping[str, str] = {"rel": "nofollow"} if spec.nofollow else {}
        query: Dict[str, Any] = {}
        if spec.google_hack:
            query[PAGE_ID_PARAM] = int(row.page_id)
        return self._links.link(title, self._display_text(title, spec), attributes, query)

    def _items(self, rows: Sequence[ResultRow], spec: QuerySpecification) -> List[str]:
        items = []
        for row in rows:
            prefix = self._date_prefix(row, spec)
            item = self._link(row, spec)
            if prefix is not None:
                item = prefix + self._messages.escaped("colon-separator") + item
            items.append(item)
        return items

    # ---------------- Envelopes ----------------

    def _render_list(self, rows: Sequence[ResultRow], spec: QuerySpecification) -> str:
        env = ENVELOPES[spec.mode]
        items = self._items(rows, spec)
        body = f"{env.end_item} \n{env.start_item}".join(items)
        return f"{env.start_list}\n{env.start_item}{body}{env.end_item}{env.end_list}\n"

    def _render_inline(self, rows: Sequence[ResultRow], spec: QuerySpecification) -> str:
        env = ENVELOPES[OutputMode.INLINE]
        body = self._messages.comma_list(self._items(rows, spec))
        return f"{env.start_list}\n{env.start_item}{body}{env.end_item}{env.end_list}\n"

    def _render_gallery(self, rows: Sequence[ResultRow], spec: QuerySpecification) -> str:
        gallery = self._gallery_factory(spec.gallery)
        for row in rows:
            prefix = self._date_prefix(row, spec)
            caption = prefix + " " if prefix is not None else ""
            gallery.add(PageTitle(namespace=row.namespace, dbkey=row.title), caption)
        return gallery.to_html()
