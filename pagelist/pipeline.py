"""
Page list rendering pipeline.

One call, strictly in sequence:

    text → parse_directives → QuerySpecificationBuilder → QueryCompiler
         → to_sql → QueryExecutor → ResultFormatter → markup

Nothing is kept between calls; every render builds its own
specification, compiled query and plan. The renderer object only holds
its collaborators, so one instance may serve concurrent renders as long
as the connection it wraps allows concurrent reads.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from pagelist.backends.sql.compiler import SQLITE, QueryCompiler, SQLDialect, SQLPlan, to_sql
from pagelist.builder import QuerySpecificationBuilder
from pagelist.config import PageListConfig
from pagelist.executor.sql import FileSizeLookup, QueryExecutor
from pagelist.ir.model import QuerySpecification
from pagelist.ir.validation import PageListValidationError
from pagelist.messages import MessageCatalog
from pagelist.parser import parse_directives
from pagelist.registry.namespaces import NamespaceRegistry
from pagelist.render.formatter import ResultFormatter
from pagelist.render.gallery import GalleryFactory, HtmlGallery
from pagelist.render.links import LinkRenderer
from pagelist.schema.tables import DEFAULT_SCHEMA, SchemaDescription

logger = logging.getLogger(__name__)


class PageListRenderer:
    """
    Renders page list directive text against one database connection.

    Usage:
        renderer = PageListRenderer(sqlite3.connect("wiki.db"))
        html = renderer.render("category=Trees\\nnotcategory=Extinct\\nmode=inline")

    Validation failures and empty results become a localized message,
    or an empty string under suppresserrors=true. Compilation errors and
    database errors propagate.

    Without a gallery_factory, galleries read file sizes from the
    schema's file table on the same connection.
    """

    def __init__(
        self,
        connection: Any,
        config: Optional[PageListConfig] = None,
        schema: SchemaDescription = DEFAULT_SCHEMA,
        dialect: SQLDialect = SQLITE,
        namespaces: Optional[NamespaceRegistry] = None,
        messages: Optional[MessageCatalog] = None,
        link_renderer: Optional[LinkRenderer] = None,
        gallery_factory: Optional[GalleryFactory] = None,
    ) -> None:
        self._config = config or PageListConfig()
        self._namespaces = namespaces or NamespaceRegistry()
        self._messages = messages or MessageCatalog()
        self._dialect = dialect
        self._compiler = QueryCompiler(schema, self._config)
        self._executor = QueryExecutor(connection)
        if gallery_factory is None:
            file_size = FileSizeLookup(connection, schema, dialect)

            def gallery_factory(options):
                return HtmlGallery(options, self._namespaces, file_size=file_size)

        self._formatter = ResultFormatter(
            namespaces=self._namespaces,
            link_renderer=link_renderer,
            messages=self._messages,
            gallery_factory=gallery_factory,
        )

    def specify(self, text: str) -> QuerySpecification:
        """
        Parse and build the specification for directive text.

        Raises:
            PageListValidationError: If the directives cannot form a query
        """
        builder = QuerySpecificationBuilder(self._config, self._namespaces)
        return builder.apply_all(parse_directives(text)).build()

    def plan(self, spec: QuerySpecification) -> SQLPlan:
        """Compile and serialize a specification without running it."""
        return to_sql(self._compiler.compile(spec), self._dialect)

    def render(self, text: str) -> str:
        """Render directive text to a markup fragment."""
        try:
            spec = self.specify(text)
        except PageListValidationError as e:
            logger.debug("Page list rejected: %s", e.token)
            if e.suppress_errors:
                return ""
            return self._messages.escaped(e.token)

        result = self._executor.execute(self.plan(spec))
        return self._formatter.format(result.rows, spec)


def render_page_list(text: str, connection: Any, **kwargs: Any) -> str:
    """Render directive text once; kwargs go to PageListRenderer."""
    return PageListRenderer(connection, **kwargs).render(text)
