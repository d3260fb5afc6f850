"""
Namespace Registry

Pages live in numbered namespaces; directives and rendered titles use
their names. The registry provides:
- Name resolution (case-insensitive, '_' and ' ' equivalent, aliases)
- Safe title construction from user text (the category directives)
- Display text for result rows (prefixed or bare)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Protocol, Tuple

logger = logging.getLogger(__name__)

NS_MAIN = 0
NS_FILE = 6
NS_CATEGORY = 14

MAX_TITLE_BYTES = 255

# Characters that may never appear in a page title.
_ILLEGAL_TITLE_CHARS = re.compile(r"[#<>\[\]|{}\x00-\x1f\x7f]")
_WHITESPACE_RUN = re.compile(r"[ _]+")


@dataclass(frozen=True)
class NamespaceDefinition:
    """A numbered namespace, its canonical name and any aliases."""

    index: int
    name: str
    aliases: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PageTitle:
    """
    A page identity as the storage layer keys it.

    dbkey uses underscores; text is the same with spaces.
    """

    namespace: int
    dbkey: str

    @property
    def text(self) -> str:
        return self.dbkey.replace("_", " ")


class NamespaceNotFoundError(Exception):
    """Raised when a namespace index has no definition."""

    def __init__(self, index: int):
        self.index = index
        super().__init__(f"Namespace not found: {index}")


def _normalize_name(name: str) -> str:
    return _WHITESPACE_RUN.sub(" ", name).strip().lower()


DEFAULT_NAMESPACES: Tuple[NamespaceDefinition, ...] = (
    NamespaceDefinition(-2, "Media"),
    NamespaceDefinition(-1, "Special"),
    NamespaceDefinition(0, ""),
    NamespaceDefinition(1, "Talk"),
    NamespaceDefinition(2, "User"),
    NamespaceDefinition(3, "User talk"),
    NamespaceDefinition(4, "Project"),
    NamespaceDefinition(5, "Project talk"),
    NamespaceDefinition(6, "File", aliases=("Image",)),
    NamespaceDefinition(7, "File talk", aliases=("Image talk",)),
    NamespaceDefinition(8, "MediaWiki"),
    NamespaceDefinition(9, "MediaWiki talk"),
    NamespaceDefinition(10, "Template"),
    NamespaceDefinition(11, "Template talk"),
    NamespaceDefinition(12, "Help"),
    NamespaceDefinition(13, "Help talk"),
    NamespaceDefinition(14, "Category"),
    NamespaceDefinition(15, "Category talk"),
)


class NamespaceStore(Protocol):
    """Protocol for namespace storage backends."""

    def get(self, index: int) -> Optional[NamespaceDefinition]:
        """Retrieve a namespace by index."""
        ...

    def find(self, name: str) -> Optional[NamespaceDefinition]:
        """Retrieve a namespace by canonical name or alias."""
        ...

    def put(self, namespace: NamespaceDefinition) -> None:
        """Store a namespace definition."""
        ...


class InMemoryNamespaceStore:
    """In-memory namespace store, seeded with the standard namespaces."""

    def __init__(self, namespaces: Iterable[NamespaceDefinition] = DEFAULT_NAMESPACES) -> None:
        self._by_index: Dict[int, NamespaceDefinition] = {}
        self._by_name: Dict[str, NamespaceDefinition] = {}
        for ns in namespaces:
            self.put(ns)

    def get(self, index: int) -> Optional[NamespaceDefinition]:
        return self._by_index.get(index)

    def find(self, name: str) -> Optional[NamespaceDefinition]:
        return self._by_name.get(_normalize_name(name))

    def put(self, namespace: NamespaceDefinition) -> None:
        self._by_index[namespace.index] = namespace
        for name in (namespace.name,) + tuple(namespace.aliases):
            self._by_name[_normalize_name(name)] = namespace


class NamespaceRegistry:
    """
    Central registry for namespace names and title handling.

    Used by the builder (namespace and category directives) and by the
    formatter (display text of result rows).
    """

    def __init__(self, store: Optional[NamespaceStore] = None) -> None:
        self._store: NamespaceStore = store or InMemoryNamespaceStore()

    def get_index(self, name: str) -> Optional[int]:
        """Index of a namespace name or alias, or None if unknown."""
        ns = self._store.find(name)
        return ns.index if ns is not None else None

    def resolve(self, index: int) -> NamespaceDefinition:
        """
        Resolve an index to its definition.

        Raises:
            NamespaceNotFoundError: If the index is not registered.
        """
        ns = self._store.get(index)
        if ns is None:
            raise NamespaceNotFoundError(index)
        return ns

    def register(self, namespace: NamespaceDefinition) -> None:
        self._store.put(namespace)

    def make_title_safe(self, default_namespace: int, text: str) -> Optional[PageTitle]:
        """
        Build a PageTitle from user-supplied text, or None if it is invalid.

        A known namespace prefix in the text overrides default_namespace.
        Runs of spaces/underscores collapse, the first letter is
        upper-cased, and titles with illegal characters, relative path
        segments, or more than 255 bytes are rejected.
        """
        key = _WHITESPACE_RUN.sub("_", text).strip("_")
        if key.startswith(":"):
            key = key[1:].lstrip("_")

        namespace = default_namespace
        prefix, sep, rest = key.partition(":")
        if sep:
            ns = self._store.find(prefix)
            if ns is not None and ns.index >= 0:
                namespace = ns.index
                key = rest.lstrip("_")

        if not key or _ILLEGAL_TITLE_CHARS.search(key):
            return None
        if key in (".", "..") or key.startswith(("./", "../")):
            return None
        if "/./" in key or "/../" in key or key.endswith(("/.", "/..")):
            return None
        if len(key.encode("utf-8")) > MAX_TITLE_BYTES:
            return None

        return PageTitle(namespace=namespace, dbkey=key[0].upper() + key[1:])

    def prefixed_text(self, title: PageTitle) -> str:
        """
        Display text with the namespace prefix ("File:Oak leaf.jpg").

        Unknown namespaces fall back to the bare text.
        """
        try:
            ns = self.resolve(title.namespace)
        except NamespaceNotFoundError:
            logger.warning("No name registered for namespace %d", title.namespace)
            return title.text
        if not ns.name:
            return title.text
        return f"{ns.name}:{title.text}"

    def prefixed_dbkey(self, title: PageTitle) -> str:
        """Storage-style prefixed key ("File:Oak_leaf.jpg"), used in URLs."""
        return self.prefixed_text(title).replace(" ", "_")

