"""
Page list CLI.

Renders a directive file against a SQLite database laid out like
pagelist.schema.SQLITE_SCHEMA, or explains how it would be queried.

Usage:
    python -m pagelist directives.txt --database wiki.db
    python -m pagelist directives.txt --explain --dialect postgres
    echo "category=Trees" | python -m pagelist - --database wiki.db
"""

import argparse
import json
import logging
import sqlite3
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .backends.sql.compiler import DIALECTS
from .config import PageListConfig
from .executor.sql import FileSizeLookup
from .ir.serialize import to_json
from .ir.validation import PageListValidationError
from .pipeline import PageListRenderer
from .registry.namespaces import NamespaceRegistry
from .render.gallery import HtmlGallery
from .render.links import HtmlLinkRenderer


def main(args: Optional[list] = None) -> int:
    """
    Main entry point for the CLI.

    Returns:
        Exit code: 0 on success, 2 on error
    """
    parser = argparse.ArgumentParser(
        prog="pagelist",
        description="Render a category-intersection page list",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s directives.txt --database wiki.db
    %(prog)s directives.txt --explain
    %(prog)s - --database wiki.db --config pagelist.json

Exit codes:
    0 - Rendered (or explained)
    2 - Error
        """,
    )

    parser.add_argument(
        "directives",
        type=str,
        help="File with key=value directives, or - for stdin",
    )

    parser.add_argument(
        "--database", "-d",
        type=str,
        default=None,
        help="SQLite database to query (required unless --explain)",
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="JSON file with limits and feature switches",
    )

    parser.add_argument(
        "--explain", "-e",
        action="store_true",
        help="Print the specification and SQL instead of rendering",
    )

    parser.add_argument(
        "--dialect",
        type=str,
        choices=sorted(DIALECTS),
        default="sqlite",
        help="SQL dialect for --explain (default: sqlite)",
    )

    parser.add_argument(
        "--article-path",
        type=str,
        default="/wiki/$1",
        help="Link target pattern, $1 is the page title (default: /wiki/$1)",
    )

    parser.add_argument(
        "--verbose", "-V",
        action="store_true",
        help="Log debug output to stderr",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parsed = parser.parse_args(args)

    if parsed.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        if parsed.directives == "-":
            text = sys.stdin.read()
        else:
            text = Path(parsed.directives).read_text(encoding="utf-8")
        config = PageListConfig.from_file(parsed.config) if parsed.config else PageListConfig()
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    dialect = DIALECTS[parsed.dialect]

    if parsed.explain:
        renderer = PageListRenderer(None, config=config, dialect=dialect)
        try:
            spec = renderer.specify(text)
        except PageListValidationError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 2
        plan = renderer.plan(spec)
        print(to_json(spec))
        print()
        print(plan.sql)
        print()
        print(json.dumps(plan.params, indent=2))
        for note in plan.notes:
            print(f"-- {note}")
        return 0

    if parsed.database is None:
        print("Error: --database is required unless --explain is given", file=sys.stderr)
        return 2
    if not Path(parsed.database).is_file():
        print(f"Error: Database does not exist: {parsed.database}", file=sys.stderr)
        return 2

    namespaces = NamespaceRegistry()
    connection = sqlite3.connect(parsed.database)
    try:
        renderer = PageListRenderer(
            connection,
            config=config,
            namespaces=namespaces,
            link_renderer=HtmlLinkRenderer(namespaces, parsed.article_path),
            gallery_factory=lambda options: HtmlGallery(
                options,
                namespaces,
                article_path=parsed.article_path,
                file_size=FileSizeLookup(connection),
            ),
        )
        output = renderer.render(text)
    except sqlite3.Error as e:
        print(f"Error querying database: {e}", file=sys.stderr)
        return 2
    finally:
        connection.close()

    sys.stdout.write(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
