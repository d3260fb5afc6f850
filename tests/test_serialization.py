"""
Tests for page list specification serialization

A specification must be:
- Serializable: inspectable and diffable (the CLI prints it under --explain)
- Roundtrip-safe: spec → JSON → spec retains meaning
"""

import json

import pytest

from pagelist.builder import build_specification
from pagelist.config import PageListConfig
from pagelist.ir import (
    CategoryRef,
    DateAnnotation,
    OutputMode,
    QuerySpecification,
    diff_specifications,
    from_dict,
    from_json,
    to_dict,
    to_json,
)
from pagelist.parser import parse_directives


def spec_for(text: str) -> QuerySpecification:
    return build_specification(parse_directives(text), PageListConfig())


class TestSerialization:
    """Test JSON serialization."""

    def test_to_json(self):
        """Enums serialize as their directive values."""
        data = json.loads(to_json(spec_for("category=Trees\nmode=inline\norder=ascending")))

        assert data["mode"] == "inline"
        assert data["order"] == "ascending"
        assert data["redirects"] == "exclude"
        assert data["include_categories"] == [{"name": "Trees"}]
        assert data["count"] == 200

    def test_to_dict_nests_options(self):
        data = to_dict(spec_for("category=Trees\nimagewidth=80\naddfirstcategorydate=md"))

        assert data["gallery"]["image_width"] == 80
        assert data["first_category_date"] == {"pattern": "mdy", "strip_year": True}


class TestRoundtrip:
    """Test roundtrip serialization."""

    def test_roundtrip_minimal(self):
        spec = spec_for("category=Trees")
        assert from_json(to_json(spec)) == spec

    def test_roundtrip_everything_set(self):
        spec = spec_for(
            "category=Trees\ncategory=Oaks\nnotcategory=Extinct\nnamespace=6\n"
            "redirects=only\nstablepages=only\nqualitypages=exclude\n"
            "ordermethod=lastedit\norder=ascending\ncount=12\noffset=3\nmode=gallery\n"
            "imagewidth=90\nimageheight=60\nimagesperrow=3\ngallerycaption=Leaves\n"
            "galleryshowfilesize=yes\ngalleryshowfilename=no\n"
            "addfirstcategorydate=ISO 8601\nignoresubpages=true\nshownamespace=false\n"
            "suppresserrors=true\ngooglehack=true\nnofollow=true"
        )
        restored = from_dict(to_dict(spec))

        assert restored == spec
        assert restored.include_categories == (CategoryRef("Trees"), CategoryRef("Oaks"))
        assert restored.first_category_date == DateAnnotation(pattern="ISO 8601")

    def test_missing_fields_take_defaults(self):
        spec = from_dict({"include_categories": [{"name": "Trees"}]})
        assert spec == QuerySpecification(include_categories=(CategoryRef("Trees"),))

    def test_unknown_enum_value(self):
        with pytest.raises(ValueError):
            from_dict({"mode": "table"})

    def test_category_without_name(self):
        with pytest.raises(ValueError):
            from_dict({"include_categories": [{}]})


class TestDiff:
    """Test specification diffing."""

    def test_identical(self):
        diff = diff_specifications(spec_for("category=Trees"), spec_for("category=Trees"))
        assert diff["same"] is True
        assert diff["differences"] == {}

    def test_scalar_difference(self):
        diff = diff_specifications(
            spec_for("category=Trees"), spec_for("category=Trees\nmode=inline")
        )
        assert diff["same"] is False
        assert diff["differences"] == {"mode": {"was": "unordered", "now": "inline"}}

    def test_nested_difference(self):
        diff = diff_specifications(
            spec_for("category=Trees"), spec_for("category=Trees\nimagewidth=50")
        )
        assert diff["differences"] == {"gallery.image_width": {"was": 0, "now": 50}}

    def test_category_difference(self):
        diff = diff_specifications(
            spec_for("category=Trees"), spec_for("category=Trees\nnotcategory=Extinct")
        )
        assert diff["differences"]["exclude_categories"] == {
            "was": [],
            "now": [{"name": "Extinct"}],
        }

    def test_mode_enum_is_a_string(self):
        """Enum members compare equal to their values."""
        assert spec_for("category=Trees\nmode=none").mode == OutputMode.NONE
        assert OutputMode.NONE == "none"
