"""Page list Intermediate Representation - what the compiler is allowed to assume."""

from .model import (
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
from .validation import (
    NO_INCLUDE_CATEGORIES,
    TOO_MANY_CATEGORIES,
    PageListValidationError,
    validate_specification,
)
from .serialize import (
    to_json,
    to_dict,
    from_json,
    from_dict,
    diff_specifications,
)

__all__ = [
    "CategoryRef",
    "DateAnnotation",
    "Directive",
    "GalleryOptions",
    "OrderDirection",
    "OrderMethod",
    "OutputMode",
    "Policy",
    "QuerySpecification",
    # Validation
    "NO_INCLUDE_CATEGORIES",
    "TOO_MANY_CATEGORIES",
    "PageListValidationError",
    "validate_specification",
    # Serialization
    "to_json",
    "to_dict",
    "from_json",
    "from_dict",
    "diff_specifications",
]
