"""
Integration Tests for page lists

These tests run the full flow against an in-memory SQLite wiki:
Parser → Builder → Compiler → Executor → Formatter

The goal is to check that what the directives ask for is what the
database returns and what the reader sees.
"""

import sqlite3

import pytest

from pagelist.backends.sql.compiler import QueryCompiler, to_sql
from pagelist.builder import build_specification
from pagelist.config import PageListConfig
from pagelist.executor.sql import FileSizeLookup, QueryExecutor
from pagelist.parser import parse_directives
from pagelist.pipeline import PageListRenderer, render_page_list
from pagelist.registry.namespaces import NS_FILE, NS_MAIN, PageTitle
from pagelist.schema.tables import SchemaDescription


def link(title: str, text: str = None) -> str:
    return f'<a href="/wiki/{title}" title="{text or title}">{text or title}</a>'


def titles(connection, text: str, **config):
    """Titles of the rows a directive text selects, in query order."""
    cfg = PageListConfig(**config)
    spec = build_specification(parse_directives(text), cfg)
    plan = to_sql(QueryCompiler(config=cfg).compile(spec))
    return [row.title for row in QueryExecutor(connection).execute(plan).rows]


class TestFullPipeline:
    """Directive text in, markup out."""

    def test_intersection_inline(self, trees):
        """Pages in Trees but not Extinct, as an inline list."""
        out = render_page_list(
            "category=Trees\nnotcategory=Extinct\nmode=inline\norder=ascending", trees
        )
        assert out == f"\n{link('A')}, {link('B')}\n"

    def test_default_list(self, trees):
        """Most recently categorized first, bulleted."""
        out = render_page_list("category=Trees", trees)
        assert out == (
            f"<ul>\n<li>{link('C')}</li> \n<li>{link('B')}</li> \n<li>{link('A')}</li></ul>\n"
        )

    def test_repeated_render_is_identical(self, trees):
        renderer = PageListRenderer(trees)
        text = "category=Trees\nnotcategory=Extinct\naddfirstcategorydate=mdy\nmode=ordered"
        assert renderer.render(text) == renderer.render(text)

    def test_date_annotation(self, trees):
        out = render_page_list(
            "category=Trees\nnotcategory=Extinct\naddfirstcategorydate=true\nmode=inline",
            trees,
        )
        assert out == f"\n1 February 2026: {link('B')}, 1 January 2026: {link('A')}\n"


class TestErrors:
    """Validation failures and empty results render messages."""

    def test_no_categories_message(self, trees):
        out = render_page_list("mode=inline", trees)
        assert out == (
            "Error: You need to include at least one category, or specify a namespace!"
        )

    def test_too_many_categories_message(self, trees):
        text = "\n".join(f"category=C{i}" for i in range(7))
        assert render_page_list(text, trees) == "Error: Too many categories!"

    def test_suppressed_validation_error(self, trees):
        assert render_page_list("suppresserrors=true", trees) == ""

    def test_configured_category_limit(self, trees):
        text = "category=Trees\nnotcategory=Extinct"
        out = render_page_list(text, trees, config=PageListConfig(max_categories=1))
        assert out == "Error: Too many categories!"

    def test_file_gallery_without_files(self, trees):
        """Zero results never reach the gallery."""
        created = []

        def factory(options):
            created.append(options)
            raise AssertionError("gallery must not be created")

        out = render_page_list("namespace=File\nmode=gallery", trees, gallery_factory=factory)
        assert out == "Error: No results!"
        assert created == []

    def test_no_results_suppressed(self, trees):
        out = render_page_list("category=Shrubs\nsuppresserrors=true", trees)
        assert out == ""

    def test_storage_errors_propagate(self, trees):
        renderer = PageListRenderer(trees, schema=SchemaDescription(page_table="missing"))
        with pytest.raises(sqlite3.OperationalError):
            renderer.render("category=Trees")


class TestOutOfRangeNumbers:
    """Numbers beyond 64 bits saturate instead of failing in the database."""

    HUGE = "99999999999999999999"

    def test_huge_offset(self, trees):
        out = render_page_list(f"category=Trees\noffset={self.HUGE}", trees)
        assert out == "Error: No results!"

    def test_huge_offset_without_limit(self, trees):
        result = titles(trees, f"category=Trees\noffset={self.HUGE}", allow_unlimited_results=True)
        assert result == []

    def test_huge_namespace(self, trees):
        out = render_page_list(f"category=Trees\nnamespace={self.HUGE}", trees)
        assert out == "Error: No results!"

    def test_huge_count_with_unlimited_results(self, trees):
        result = titles(trees, f"category=Trees\ncount={self.HUGE}", allow_unlimited_results=True)
        assert result == ["C", "B", "A"]


class TestJoins:
    """Include and exclude joins select the right pages exactly once."""

    def test_intersection_of_two_categories(self, wiki):
        wiki.add("Oak", categories={"Trees": "2026-01-01 00:00:00", "Natives": "2026-01-01 00:00:00"})
        wiki.add("Palm", categories={"Trees": "2026-01-02 00:00:00"})
        assert titles(wiki.connection, "category=Trees\ncategory=Natives") == ["Oak"]

    def test_no_duplicates_from_exclusions(self, wiki):
        wiki.add("Oak", categories={"Trees": "2026-01-01 00:00:00"})
        wiki.add(
            "Dodo_tree",
            categories={
                "Trees": "2026-01-02 00:00:00",
                "Extinct": "2026-01-02 00:00:00",
                "Fossils": "2026-01-02 00:00:00",
            },
        )
        wiki.add("Ash", categories={"Trees": "2026-01-03 00:00:00", "Fossils": "2026-01-03 00:00:00"})
        result = titles(wiki.connection, "category=Trees\nnotcategory=Extinct\nnotcategory=Fossils")
        assert result == ["Oak"]

    def test_repeated_include_category(self, trees):
        assert sorted(titles(trees, "category=Trees\ncategory=Trees")) == ["A", "B", "C"]

    def test_category_title_normalization(self, wiki):
        wiki.add("Oak", categories={"Old_growth": "2026-01-01 00:00:00"})
        assert titles(wiki.connection, "category=old growth") == ["Oak"]


class TestFilters:
    """Namespace, redirect, subpage and review filters."""

    def test_namespace(self, wiki):
        wiki.add("Oak", categories={"Trees": "2026-01-01 00:00:00"})
        wiki.add("Oak.jpg", 6, categories={"Trees": "2026-01-02 00:00:00"})
        assert titles(wiki.connection, "category=Trees\nnamespace=File") == ["Oak.jpg"]
        assert titles(wiki.connection, "category=Trees\nnamespace=main") == ["Oak"]
        assert titles(wiki.connection, "category=Trees\nnamespace=-1") == ["Oak.jpg", "Oak"]

    def test_namespace_without_categories(self, wiki):
        wiki.add("Help_one", 12)
        wiki.add("Help_two", 12)
        wiki.add("Article")
        assert titles(wiki.connection, "namespace=Help\norder=ascending") == ["Help_one", "Help_two"]

    def test_redirects(self, wiki):
        wiki.add("Oak", categories={"Trees": "2026-01-01 00:00:00"})
        wiki.add("Quercus", categories={"Trees": "2026-01-02 00:00:00"}, redirect=True)
        assert titles(wiki.connection, "category=Trees") == ["Oak"]
        assert titles(wiki.connection, "category=Trees\nredirects=only") == ["Quercus"]
        assert titles(wiki.connection, "category=Trees\nredirects=include") == ["Quercus", "Oak"]

    def test_ignore_subpages(self, wiki):
        wiki.add("Oak", categories={"Trees": "2026-01-01 00:00:00"})
        wiki.add("Oak/Leaves", categories={"Trees": "2026-01-02 00:00:00"})
        assert titles(wiki.connection, "category=Trees\nignoresubpages=true") == ["Oak"]

    def test_review_status(self, wiki):
        oak = wiki.add("Oak", categories={"Trees": "2026-01-01 00:00:00"})
        ash = wiki.add("Ash", categories={"Trees": "2026-01-02 00:00:00"})
        wiki.add("Elm", categories={"Trees": "2026-01-03 00:00:00"})
        wiki.flag(oak, stable=10, quality=1)
        wiki.flag(ash, stable=20, quality=0)

        installed = {"review_extension_installed": True}
        assert titles(wiki.connection, "category=Trees\nstablepages=only", **installed) == ["Ash", "Oak"]
        assert titles(wiki.connection, "category=Trees\nstablepages=exclude", **installed) == ["Elm"]
        assert titles(wiki.connection, "category=Trees\nqualitypages=only", **installed) == ["Oak"]
        assert titles(wiki.connection, "category=Trees\nqualitypages=exclude", **installed) == ["Elm", "Ash"]
        # Without the extension the policies are ignored.
        assert titles(wiki.connection, "category=Trees\nstablepages=only") == ["Elm", "Ash", "Oak"]


class TestOrdering:
    """Each order method against real rows."""

    def test_length(self, trees):
        assert titles(trees, "category=Trees\nordermethod=length") == ["A", "C", "B"]

    def test_created(self, trees):
        assert titles(trees, "category=Trees\nordermethod=created\norder=ascending") == ["A", "B", "C"]

    def test_lastedit(self, wiki):
        wiki.add("Oak", categories={"Trees": "2026-01-01 00:00:00"}, touched="20260301000000")
        wiki.add("Ash", categories={"Trees": "2026-01-02 00:00:00"}, touched="20260101000000")
        assert titles(wiki.connection, "category=Trees\nordermethod=lastedit") == ["Oak", "Ash"]

    def test_sortkey(self, wiki):
        wiki.add("Oak", categories={"Trees": "2026-01-01 00:00:00"}, sortkey="Quercus")
        wiki.add("Ash", categories={"Trees": "2026-01-02 00:00:00"}, sortkey="Fraxinus")
        result = titles(wiki.connection, "category=Trees\nordermethod=sortkey\norder=ascending")
        assert result == ["Ash", "Oak"]

    def test_popularity(self, wiki):
        wiki.add("Oak", categories={"Trees": "2026-01-01 00:00:00"}, counter=5)
        wiki.add("Ash", categories={"Trees": "2026-01-02 00:00:00"}, counter=50)
        result = titles(wiki.connection, "category=Trees\nordermethod=popularity", counters_enabled=True)
        assert result == ["Ash", "Oak"]

    def test_count_and_offset(self, trees):
        assert titles(trees, "category=Trees\nordermethod=length\ncount=1\noffset=1") == ["C"]

    def test_offset_without_limit(self, trees):
        result = titles(
            trees, "category=Trees\nordermethod=length\noffset=1", allow_unlimited_results=True
        )
        assert result == ["C", "B"]

    def test_count_clamped_by_config(self, trees):
        result = titles(trees, "category=Trees\ncount=99999", max_result_count=2)
        assert result == ["C", "B"]


class TestExecutor:
    """Executor result metadata."""

    def test_result_metadata(self, trees):
        spec = build_specification(parse_directives("category=Trees\nnotcategory=Extinct"))
        plan = to_sql(QueryCompiler().compile(spec))
        result = QueryExecutor(trees).execute(plan)

        assert result.row_count == 2
        assert result.is_empty is False
        assert result.executed_sql == plan.sql
        assert result.notes == plan.notes
        assert result.execution_time_ms >= 0
        assert result.rows[0].category_timestamp == "2026-02-01 10:00:00"

    def test_empty_result(self, trees):
        spec = build_specification(parse_directives("category=Shrubs"))
        result = QueryExecutor(trees).execute(to_sql(QueryCompiler().compile(spec)))
        assert result.is_empty is True


class TestFileSizes:
    """Galleries read file sizes from the image table."""

    GALLERY = "category=Trees\nmode=gallery\ngalleryshowfilename=no\ngalleryshowfilesize=yes"

    def test_gallery_shows_size(self, wiki):
        wiki.add("Oak.jpg", NS_FILE, categories={"Trees": "2026-01-01 00:00:00"})
        wiki.upload("Oak.jpg", 2048)
        out = render_page_list(self.GALLERY, wiki.connection)
        assert '<div class="gallerytext">2 KB</div>' in out

    def test_file_without_metadata(self, wiki):
        wiki.add("Oak.jpg", NS_FILE, categories={"Trees": "2026-01-01 00:00:00"})
        out = render_page_list(self.GALLERY, wiki.connection)
        assert '<div class="gallerytext"></div>' in out

    def test_sizes_only_when_asked(self, wiki):
        wiki.add("Oak.jpg", NS_FILE, categories={"Trees": "2026-01-01 00:00:00"})
        wiki.upload("Oak.jpg", 2048)
        out = render_page_list("category=Trees\nmode=gallery\ngalleryshowfilename=no", wiki.connection)
        assert "KB" not in out

    def test_lookup(self, wiki):
        wiki.upload("Oak.jpg", 4096)
        lookup = FileSizeLookup(wiki.connection)
        assert lookup(PageTitle(NS_FILE, "Oak.jpg")) == 4096
        assert lookup(PageTitle(NS_FILE, "Ash.jpg")) is None
        # Only File: titles have sizes.
        assert lookup(PageTitle(NS_MAIN, "Oak.jpg")) is None

    def test_lookup_without_file_table(self, wiki):
        wiki.upload("Oak.jpg", 4096)
        lookup = FileSizeLookup(wiki.connection, SchemaDescription(file_table=None))
        assert lookup(PageTitle(NS_FILE, "Oak.jpg")) is None
