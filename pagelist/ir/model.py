"""
Page list Intermediate Representation Model

The QuerySpecification is the contract between the directive builder and
the query compiler. Everything the compiler and formatter need to know is
in it, already normalized:

- Closed: every option is an enum or a plain value, never raw directive text
- Immutable: built once per render, never mutated afterwards
- Serializable: inspectable and diffable (see serialize.py)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


# ---------- Enums (closed-world) ----------


class Policy(str, Enum):
    """
    Three-way filter used for redirects and review status.

    INCLUDE: no filtering
    EXCLUDE: drop matching pages
    ONLY: keep only matching pages
    """

    INCLUDE = "include"
    EXCLUDE = "exclude"
    ONLY = "only"


class OrderMethod(str, Enum):
    """Which column the result list is sorted by."""

    CATEGORY_ADD = "categoryadd"
    LAST_EDIT = "lastedit"
    LENGTH = "length"
    CREATED = "created"
    CATEGORY_SORTKEY = "categorysortkey"
    POPULARITY = "popularity"

    @property
    def needs_category_join(self) -> bool:
        """Whether sorting reads columns of the first include-category join."""
        return self in (OrderMethod.CATEGORY_ADD, OrderMethod.CATEGORY_SORTKEY)


class OrderDirection(str, Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"

    @property
    def sql(self) -> str:
        return "ASC" if self == OrderDirection.ASCENDING else "DESC"


class OutputMode(str, Enum):
    """
    The rendering envelope.

    UNORDERED: <ul><li>..</li></ul>
    ORDERED: <ol><li>..</li></ol>
    INLINE: localized comma list
    NONE: items separated by <br />
    GALLERY: rows handed to the gallery collaborator
    """

    UNORDERED = "unordered"
    ORDERED = "ordered"
    INLINE = "inline"
    NONE = "none"
    GALLERY = "gallery"


# ---------- Core structs ----------


@dataclass(frozen=True)
class Directive:
    """One key=value line of directive text, stripped but not validated."""

    key: str
    value: str


@dataclass(frozen=True)
class CategoryRef:
    """
    A normalized category title.

    `name` is the storage key (underscores instead of spaces, first letter
    upper-cased, no namespace prefix), which is what membership rows store.
    """

    name: str

    @property
    def text(self) -> str:
        """Human-readable form with spaces."""
        return self.name.replace("_", " ")


@dataclass(frozen=True)
class GalleryOptions:
    """Options passed through to the gallery collaborator in gallery mode."""

    image_width: int = 0
    image_height: int = 0
    images_per_row: int = 0
    caption: str = ""
    show_filesize: bool = False
    show_filename: bool = True


@dataclass(frozen=True)
class DateAnnotation:
    """
    Prefix each item with the date it was added to the first category.

    pattern: None for the content language default format, otherwise
        one of the date preference patterns (dmy, mdy, ymd, ISO 8601, ...)
    strip_year: the pattern was given without a year (md, dm)
    """

    pattern: Optional[str] = None
    strip_year: bool = False


# ---------- The query specification ----------


@dataclass(frozen=True)
class QuerySpecification:
    """
    A fully normalized page list request.

    Built by QuerySpecificationBuilder from directives; validated before
    it is handed to the compiler. The compiler may assume:
    - at least one include category or a namespace filter is present
    - order_method does not need a category join unless one exists
    - count has already been clamped against the configured maximum
    """

    include_categories: Tuple[CategoryRef, ...] = ()
    exclude_categories: Tuple[CategoryRef, ...] = ()
    namespace: Optional[int] = None
    redirects: Policy = Policy.EXCLUDE
    stable: Policy = Policy.INCLUDE
    quality: Policy = Policy.INCLUDE
    order_method: OrderMethod = OrderMethod.CATEGORY_ADD
    order: OrderDirection = OrderDirection.DESCENDING
    count: Optional[int] = None
    offset: int = 0
    mode: OutputMode = OutputMode.UNORDERED
    gallery: GalleryOptions = field(default_factory=GalleryOptions)
    first_category_date: Optional[DateAnnotation] = None
    ignore_subpages: bool = False
    show_namespace: bool = True
    suppress_errors: bool = False
    google_hack: bool = False
    nofollow: bool = False

    @property
    def category_count(self) -> int:
        """Total number of category joins the query will need."""
        return len(self.include_categories) + len(self.exclude_categories)

    @property
    def filters_review_status(self) -> bool:
        return self.stable != Policy.INCLUDE or self.quality != Policy.INCLUDE
