"""Namespace registry: names, titles and display text."""

from .namespaces import (
    NS_CATEGORY,
    NS_FILE,
    NS_MAIN,
    InMemoryNamespaceStore,
    NamespaceDefinition,
    NamespaceNotFoundError,
    NamespaceRegistry,
    PageTitle,
)

__all__ = [
    "NS_CATEGORY",
    "NS_FILE",
    "NS_MAIN",
    "InMemoryNamespaceStore",
    "NamespaceDefinition",
    "NamespaceNotFoundError",
    "NamespaceRegistry",
    "PageTitle",
]
