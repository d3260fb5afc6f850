"""
Gallery collaborator.

In gallery mode every result row is handed to a Gallery and the page
list output is whatever the gallery renders. The formatter creates one
gallery per render through a factory that receives the gallery options.
"""

from __future__ import annotations

import html
from typing import Callable, List, Optional, Protocol, Tuple
from urllib.parse import quote

from pagelist.ir.model import GalleryOptions
from pagelist.registry.namespaces import NS_FILE, NamespaceRegistry, PageTitle
from pagelist.render.links import HtmlLinkRenderer

DEFAULT_IMAGE_SIZE = 120


class Gallery(Protocol):
    """Protocol for gallery widgets."""

    def add(self, title: PageTitle, caption_html: str) -> None:
        """Append an image; caption_html is already safe markup."""
        ...

    def to_html(self) -> str:
        """Render the whole gallery."""
        ...


GalleryFactory = Callable[[GalleryOptions], Gallery]


class HtmlGallery:
    """
    A traditional image gallery: one box per file, thumbnail above,
    optional file name and size below, optional caption on top.

    file_size is an optional lookup returning a file's size in bytes; it
    is only consulted when the options ask for file sizes. Hosts supply
    it; executor.sql.FileSizeLookup reads the reference file table.
    """

    def __init__(
        self,
        options: GalleryOptions,
        namespaces: Optional[NamespaceRegistry] = None,
        file_path: str = "/wiki/Special:FilePath/$1",
        article_path: str = "/wiki/$1",
        file_size: Optional[Callable[[PageTitle], Optional[int]]] = None,
    ) -> None:
        self._options = options
        self._namespaces = namespaces or NamespaceRegistry()
        self._links = HtmlLinkRenderer(self._namespaces, article_path)
        self._file_path = file_path
        self._file_size = file_size
        self._images: List[Tuple[PageTitle, str]] = []

    @property
    def widths(self) -> int:
        return self._options.image_width if self._options.image_width > 0 else DEFAULT_IMAGE_SIZE

    @property
    def heights(self) -> int:
        return self._options.image_height if self._options.image_height > 0 else DEFAULT_IMAGE_SIZE

    def add(self, title: PageTitle, caption_html: str) -> None:
        self._images.append((title, caption_html))

    def to_html(self) -> str:
        style = ""
        if self._options.images_per_row > 0:
            max_width = self._options.images_per_row * (self.widths + 35 + 8)
            style = f' style="max-width: {max_width}px;"'

        parts = [f'<ul class="gallery mw-gallery-traditional"{style}>']
        if self._options.caption:
            parts.append(
                f'\t<li class="gallerycaption">{html.escape(self._options.caption)}</li>'
            )
        for title, caption_html in self._images:
            parts.append(self._box(title, caption_html))
        parts.append("</ul>")
        return "\n".join(parts)

    def _box(self, title: PageTitle, caption_html: str) -> str:
        if title.namespace == NS_FILE:
            src = html.escape(self._file_path.replace("$1", quote(title.dbkey)), quote=True)
            thumb = (
                f'<img src="{src}" alt="{html.escape(title.text, quote=True)}" '
                f'width="{self.widths}" height="{self.heights}" />'
            )
        else:
            thumb = html.escape(self._namespaces.prefixed_text(title))

        text = []
        if self._options.show_filename:
            text.append(self._links.link(title, title.text, {}, {}))
        if self._options.show_filesize and self._file_size is not None:
            size = self._file_size(title)
            if size is not None:
                text.append(f"{round(size / 1024)} KB")
        if caption_html:
            text.append(caption_html)

        return (
            f'\t<li class="gallerybox" style="width: {self.widths + 35}px">'
            f'<div class="thumb" style="width: {self.widths + 30}px;">{thumb}</div>'
            f'<div class="gallerytext">{"<br />".join(text)}</div></li>'
        )
