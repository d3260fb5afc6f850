"""Rendering of page list results: envelopes, dates, links and galleries."""

from .dates import format_category_date, parse_timestamp
from .formatter import ENVELOPES, NO_RESULTS, ListEnvelope, ResultFormatter
from .gallery import Gallery, GalleryFactory, HtmlGallery
from .links import HtmlLinkRenderer, LinkRenderer

__all__ = [
    "ENVELOPES",
    "NO_RESULTS",
    "Gallery",
    "GalleryFactory",
    "HtmlGallery",
    "HtmlLinkRenderer",
    "LinkRenderer",
    "ListEnvelope",
    "ResultFormatter",
    "format_category_date",
    "parse_timestamp",
]
