"""
Query specification builder

Folds parsed directives into a single QuerySpecification.

Every recognized key maps to exactly one field of the builder state, a
normalizer for its value, and a trait saying whether a repeated key
replaces the previous value or is appended to it. Unrecognized keys and
unrecognized values never raise: keys are skipped and values fall back to
their documented default. Only the cross-field checks in build() can
reject a directive set.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

from pagelist.config import PageListConfig
from pagelist.ir.model import (
    CategoryRef,
    DateAnnotation,
    Directive,
    GalleryOptions,
    OrderDirection,
    OrderMethod,
    OutputMode,
    Policy,
    QuerySpecification,
)
from pagelist.ir.validation import validate_specification
from pagelist.registry.namespaces import NS_CATEGORY, NamespaceRegistry

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^[ \t\n\r\v\f]*([+-]?[0-9]+)")
_DATE_PATTERN = re.compile(r"^(?:[ymd]{2,3}|ISO 8601)$")

# Coerced integers saturate at the signed 64-bit range the database accepts.
INT_MIN = -(2 ** 63)
INT_MAX = 2 ** 63 - 1

# Returned by a normalizer when the value must be dropped entirely.
_DROP = object()


class FieldTrait(Enum):
    """How a repeated directive key combines with earlier occurrences."""

    LAST_WINS = "last_wins"
    ACCUMULATE = "accumulate"


def parse_int(value: str) -> int:
    """
    Leading-integer coercion: '12px' -> 12, 'main' -> 0.

    Only ASCII digits count, and the result is clamped to [INT_MIN, INT_MAX].
    """
    match = _LEADING_INT.match(value)
    if not match:
        return 0
    return max(INT_MIN, min(INT_MAX, int(match.group(1))))


def parse_flag(value: str, false_value: str = "false") -> bool:
    """True unless the value is exactly false_value."""
    return value != false_value


@dataclass
class _BuilderState:
    """Internal state for the builder."""

    include_categories: List[CategoryRef] = field(default_factory=list)
    exclude_categories: List[CategoryRef] = field(default_factory=list)
    namespace: Optional[int] = None
    redirects: Policy = Policy.EXCLUDE
    stable: Policy = Policy.INCLUDE
    quality: Policy = Policy.INCLUDE
    order_method: OrderMethod = OrderMethod.CATEGORY_ADD
    order: OrderDirection = OrderDirection.DESCENDING
    count: Optional[int] = None
    offset: int = 0
    mode: OutputMode = OutputMode.UNORDERED
    image_width: int = 0
    image_height: int = 0
    images_per_row: int = 0
    gallery_caption: str = ""
    gallery_show_filesize: bool = False
    gallery_show_filename: bool = True
    first_category_date: Optional[DateAnnotation] = None
    ignore_subpages: bool = False
    show_namespace: bool = True
    suppress_errors: bool = False
    google_hack: bool = False
    nofollow: bool = False


@dataclass(frozen=True)
class _FieldRule:
    attribute: str
    trait: FieldTrait
    normalize: Callable[["QuerySpecificationBuilder", str], Any]


class QuerySpecificationBuilder:
    """
    Folds directives into a QuerySpecification.

    Usage:
        builder = QuerySpecificationBuilder(config)
        for directive in parse_directives(text):
            builder.apply(directive)
        spec = builder.build()

    build() raises PageListValidationError when the folded directives
    have no include category and no namespace, or too many categories.
    """

    def __init__(
        self,
        config: Optional[PageListConfig] = None,
        namespaces: Optional[NamespaceRegistry] = None,
    ) -> None:
        self._config = config or PageListConfig()
        self._namespaces = namespaces or NamespaceRegistry()
        self._state = _BuilderState()

    # ========== Folding ==========

    def apply(self, directive: Directive) -> "QuerySpecificationBuilder":
        """Fold one directive into the state. Unknown keys are ignored."""
        rule = _FIELD_RULES.get(directive.key)
        if rule is None:
            logger.debug("Ignoring unknown directive %r", directive.key)
            return self

        value = rule.normalize(self, directive.value)
        if value is _DROP:
            return self

        if rule.trait is FieldTrait.ACCUMULATE:
            getattr(self._state, rule.attribute).append(value)
        else:
            setattr(self._state, rule.attribute, value)
        return self

    def apply_all(self, directives: Iterable[Directive]) -> "QuerySpecificationBuilder":
        for directive in directives:
            self.apply(directive)
        return self

    # ========== Normalizers ==========

    def _category(self, value: str) -> Any:
        title = self._namespaces.make_title_safe(NS_CATEGORY, value)
        if title is None:
            logger.debug("Dropping invalid category title %r", value)
            return _DROP
        return CategoryRef(name=title.dbkey)

    def _namespace(self, value: str) -> Optional[int]:
        index = self._namespaces.get_index(value)
        if index is not None:
            return index
        # Anything that is neither a namespace name nor a number coerces
        # to 0, so "namespace=main" selects the main namespace. Pages rely
        # on this. A negative number turns namespace filtering off.
        index = parse_int(value)
        return index if index >= 0 else None

    def _int(self, value: str) -> int:
        return parse_int(value)

    def _offset(self, value: str) -> int:
        return max(0, parse_int(value))

    def _text(self, value: str) -> str:
        return value

    def _gallery_flag(self, value: str) -> bool:
        return value not in ("no", "false")

    def _mode(self, value: str) -> OutputMode:
        try:
            return OutputMode(value)
        except ValueError:
            return OutputMode.UNORDERED

    def _order(self, value: str) -> OrderDirection:
        if value == "ascending":
            return OrderDirection.ASCENDING
        return OrderDirection.DESCENDING

    def _order_method(self, value: str) -> OrderMethod:
        if value == "sortkey":
            return OrderMethod.CATEGORY_SORTKEY
        if value == "popularity" and not self._config.counters_enabled:
            logger.debug("Page view counters are disabled, ordering by categoryadd")
            return OrderMethod.CATEGORY_ADD
        try:
            return OrderMethod(value)
        except ValueError:
            return OrderMethod.CATEGORY_ADD

    def _policy(self, value: str) -> Policy:
        if value in ("include", "only"):
            return Policy(value)
        return Policy.EXCLUDE

    def _true_flag(self, value: str) -> bool:
        return value == "true"

    def _false_flag(self, value: str) -> bool:
        return parse_flag(value)

    def _date_annotation(self, value: str) -> Optional[DateAnnotation]:
        if value == "true":
            return DateAnnotation()
        if _DATE_PATTERN.match(value):
            if len(value) == 2:
                return DateAnnotation(pattern=value + "y", strip_year=True)
            return DateAnnotation(pattern=value)
        return None

    # ========== Build ==========

    def _resolve_count(self) -> Optional[int]:
        count = self._state.count
        max_count = self._config.max_result_count
        unlimited = self._config.allow_unlimited_results

        if count is not None:
            count = max(count, 1)
            if not unlimited:
                count = min(count, max_count)
            return count
        if not unlimited:
            return max_count
        return None

    def build(self, validate: bool = True) -> QuerySpecification:
        """
        Build the QuerySpecification.

        Args:
            validate: Whether to apply the category checks (default True)

        Raises:
            PageListValidationError: no include category and no namespace,
                or more categories than the configuration allows
        """
        state = self._state
        order_method = state.order_method
        first_category_date = state.first_category_date

        # Dates and category sort orders come from the first include join.
        if not state.include_categories:
            first_category_date = None
            if order_method.needs_category_join:
                logger.debug(
                    "No include categories, ordering by created instead of %s",
                    order_method.value,
                )
                order_method = OrderMethod.CREATED

        spec = QuerySpecification(
            include_categories=tuple(state.include_categories),
            exclude_categories=tuple(state.exclude_categories),
            namespace=state.namespace,
            redirects=state.redirects,
            stable=state.stable,
            quality=state.quality,
            order_method=order_method,
            order=state.order,
            count=self._resolve_count(),
            offset=state.offset,
            mode=state.mode,
            gallery=GalleryOptions(
                image_width=state.image_width,
                image_height=state.image_height,
                images_per_row=state.images_per_row,
                caption=state.gallery_caption,
                show_filesize=state.gallery_show_filesize,
                show_filename=state.gallery_show_filename,
            ),
            first_category_date=first_category_date,
            ignore_subpages=state.ignore_subpages,
            show_namespace=state.show_namespace,
            suppress_errors=state.suppress_errors,
            google_hack=state.google_hack,
            nofollow=state.nofollow,
        )

        if validate:
            validate_specification(
                spec,
                max_categories=self._config.max_categories,
                allow_unlimited_categories=self._config.allow_unlimited_categories,
            )

        return spec


_B = QuerySpecificationBuilder

_FIELD_RULES: Dict[str, _FieldRule] = {
    "category": _FieldRule("include_categories", FieldTrait.ACCUMULATE, _B._category),
    "notcategory": _FieldRule("exclude_categories", FieldTrait.ACCUMULATE, _B._category),
    "namespace": _FieldRule("namespace", FieldTrait.LAST_WINS, _B._namespace),
    "count": _FieldRule("count", FieldTrait.LAST_WINS, _B._int),
    "offset": _FieldRule("offset", FieldTrait.LAST_WINS, _B._offset),
    "imagewidth": _FieldRule("image_width", FieldTrait.LAST_WINS, _B._int),
    "imageheight": _FieldRule("image_height", FieldTrait.LAST_WINS, _B._int),
    "imagesperrow": _FieldRule("images_per_row", FieldTrait.LAST_WINS, _B._int),
    "gallerycaption": _FieldRule("gallery_caption", FieldTrait.LAST_WINS, _B._text),
    "galleryshowfilesize": _FieldRule("gallery_show_filesize", FieldTrait.LAST_WINS, _B._gallery_flag),
    "galleryshowfilename": _FieldRule("gallery_show_filename", FieldTrait.LAST_WINS, _B._gallery_flag),
    "mode": _FieldRule("mode", FieldTrait.LAST_WINS, _B._mode),
    "order": _FieldRule("order", FieldTrait.LAST_WINS, _B._order),
    "ordermethod": _FieldRule("order_method", FieldTrait.LAST_WINS, _B._order_method),
    "redirects": _FieldRule("redirects", FieldTrait.LAST_WINS, _B._policy),
    "stablepages": _FieldRule("stable", FieldTrait.LAST_WINS, _B._policy),
    "qualitypages": _FieldRule("quality", FieldTrait.LAST_WINS, _B._policy),
    "suppresserrors": _FieldRule("suppress_errors", FieldTrait.LAST_WINS, _B._true_flag),
    "addfirstcategorydate": _FieldRule("first_category_date", FieldTrait.LAST_WINS, _B._date_annotation),
    "shownamespace": _FieldRule("show_namespace", FieldTrait.LAST_WINS, _B._false_flag),
    "ignoresubpages": _FieldRule("ignore_subpages", FieldTrait.LAST_WINS, _B._true_flag),
    "googlehack": _FieldRule("google_hack", FieldTrait.LAST_WINS, _B._false_flag),
    "nofollow": _FieldRule("nofollow", FieldTrait.LAST_WINS, _B._false_flag),
}


def build_specification(
    directives: Iterable[Directive],
    config: Optional[PageListConfig] = None,
    namespaces: Optional[NamespaceRegistry] = None,
) -> QuerySpecification:
    """Fold directives into a validated QuerySpecification."""
    return QuerySpecificationBuilder(config, namespaces).apply_all(directives).build()
