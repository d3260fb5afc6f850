"""
Page list specification serialization

A QuerySpecification should be inspectable and diffable: the CLI prints
it under --explain, and tests compare specifications built from different
directive texts. Roundtrip: spec -> JSON -> spec retains meaning.
"""

from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from enum import Enum
from typing import Any, Dict

from .model import (
    CategoryRef,
    DateAnnotation,
    GalleryOptions,
    OrderDirection,
    OrderMethod,
    OutputMode,
    Policy,
    QuerySpecification,
)


class SpecificationEncoder(json.JSONEncoder):
    """JSON encoder for page list IR types."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, Enum):
            return obj.value
        if is_dataclass(obj) and not isinstance(obj, type):
            return asdict(obj)
        if isinstance(obj, tuple):
            return list(obj)
        return super().default(obj)


def to_json(spec: QuerySpecification, indent: int = 2) -> str:
    """Serialize a specification to JSON."""
    return json.dumps(spec, cls=SpecificationEncoder, indent=indent)


def to_dict(spec: QuerySpecification) -> Dict[str, Any]:
    """Convert a specification to a plain dictionary."""
    return json.loads(to_json(spec, indent=None))


def from_json(json_str: str) -> QuerySpecification:
    """Deserialize a specification from JSON."""
    return from_dict(json.loads(json_str))


def from_dict(data: Dict[str, Any]) -> QuerySpecification:
    """
    Reconstruct a specification from a dictionary.

    Raises:
        ValueError: If a field is missing or holds an unknown enum value
    """
    try:
        gallery_data = data.get("gallery") or {}
        gallery = GalleryOptions(
            image_width=gallery_data.get("image_width", 0),
            image_height=gallery_data.get("image_height", 0),
            images_per_row=gallery_data.get("images_per_row", 0),
            caption=gallery_data.get("caption", ""),
            show_filesize=gallery_data.get("show_filesize", False),
            show_filename=gallery_data.get("show_filename", True),
        )

        date_annotation = None
        if data.get("first_category_date"):
            date_data = data["first_category_date"]
            date_annotation = DateAnnotation(
                pattern=date_data.get("pattern"),
                strip_year=date_data.get("strip_year", False),
            )

        return QuerySpecification(
            include_categories=tuple(
                CategoryRef(name=c["name"]) for c in data.get("include_categories", [])
            ),
            exclude_categories=tuple(
                CategoryRef(name=c["name"]) for c in data.get("exclude_categories", [])
            ),
            namespace=data.get("namespace"),
            redirects=Policy(data.get("redirects", "exclude")),
            stable=Policy(data.get("stable", "include")),
            quality=Policy(data.get("quality", "include")),
            order_method=OrderMethod(data.get("order_method", "categoryadd")),
            order=OrderDirection(data.get("order", "descending")),
            count=data.get("count"),
            offset=data.get("offset", 0),
            mode=OutputMode(data.get("mode", "unordered")),
            gallery=gallery,
            first_category_date=date_annotation,
            ignore_subpages=data.get("ignore_subpages", False),
            show_namespace=data.get("show_namespace", True),
            suppress_errors=data.get("suppress_errors", False),
            google_hack=data.get("google_hack", False),
            nofollow=data.get("nofollow", False),
        )

    except KeyError as e:
        raise ValueError(f"Missing required field: {e}")
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid data format: {e}")


def diff_specifications(
    s1: QuerySpecification, s2: QuerySpecification
) -> Dict[str, Any]:
    """
    Compare two specifications and return their differences.

    Returns:
        {"same": bool, "differences": {dotted.path: {"was": .., "now": ..}}}
    """
    d1 = to_dict(s1)
    d2 = to_dict(s2)

    def _diff_dicts(a: Dict, b: Dict, path: str = "") -> Dict[str, Any]:
        differences = {}

        for key in sorted(set(a.keys()) | set(b.keys())):
            current_path = f"{path}.{key}" if path else key

            if key not in a:
                differences[current_path] = {"added": b[key]}
            elif key not in b:
                differences[current_path] = {"removed": a[key]}
            elif a[key] != b[key]:
                if isinstance(a[key], dict) and isinstance(b[key], dict):
                    differences.update(_diff_dicts(a[key], b[key], current_path))
                else:
                    differences[current_path] = {"was": a[key], "now": b[key]}

        return differences

    diff = _diff_dicts(d1, d2)

    return {
        "same": len(diff) == 0,
        "differences": diff,
    }
