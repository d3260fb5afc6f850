"""
Page list configuration

Site-wide limits and feature switches. A PageListConfig is built once by
the host and injected into the builder, compiler and renderer; nothing in
the package reads process-global settings.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Union


@dataclass(frozen=True)
class PageListConfig:
    """
    Limits and optional collaborators.

    max_categories: include + exclude categories allowed in one list
    max_result_count: upper bound for count, and the implicit count when
        none is given and unlimited results are off
    allow_unlimited_results: lift the count cap
    allow_unlimited_categories: lift the category cap
    counters_enabled: the page table tracks view counts, so
        ordermethod=popularity is selectable
    review_extension_installed: the review-status table exists, so
        stablepages/qualitypages take effect
    """

    max_categories: int = 6
    max_result_count: int = 200
    allow_unlimited_results: bool = False
    allow_unlimited_categories: bool = False
    counters_enabled: bool = False
    review_extension_installed: bool = False

    def __post_init__(self):
        if self.max_categories < 0:
            raise ValueError("max_categories must be >= 0")
        if self.max_result_count < 1:
            raise ValueError("max_result_count must be >= 1")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PageListConfig":
        """
        Build a config from a mapping, ignoring unknown keys.

        Raises:
            ValueError: If a limit is out of range
        """
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "PageListConfig":
        """Load a config from a JSON file."""
        with open(Path(path), "r", encoding="utf-8") as fh:
            return cls.from_dict(json.load(fh))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
