"""
Page list specification validation

A specification is rejected, rather than repaired, when it either has no
discriminating filter at all or asks for more category joins than the
wiki allows. Both failures carry a message token so the host can show a
localized message, or nothing when the directives asked for silence.
"""

from __future__ import annotations

from typing import List, Optional

from .model import QuerySpecification

NO_INCLUDE_CATEGORIES = "intersection_noincludecats"
TOO_MANY_CATEGORIES = "intersection_toomanycats"


class PageListValidationError(ValueError):
    """
    Raised when a page list specification cannot be compiled.

    token is the message key of the first failure, which is what gets
    rendered. suppress_errors mirrors the suppresserrors directive so the
    caller can render an empty string instead.
    """

    def __init__(
        self,
        errors: List[str],
        token: str,
        spec: Optional[QuerySpecification] = None,
    ):
        self.errors = errors
        self.token = token
        self.spec = spec
        msg = "Page list specification failed validation:\n- " + "\n- ".join(errors)
        super().__init__(msg)

    @property
    def suppress_errors(self) -> bool:
        return bool(self.spec and self.spec.suppress_errors)


def validate_specification(
    spec: QuerySpecification,
    max_categories: int,
    allow_unlimited_categories: bool = False,
) -> None:
    """
    Reject specifications the compiler must never see.

    Raises:
        PageListValidationError: with the token of the first failure.
    """
    errors: List[str] = []
    tokens: List[str] = []

    if not spec.include_categories and spec.namespace is None:
        errors.append("at least one include category or a namespace is required")
        tokens.append(NO_INCLUDE_CATEGORIES)

    if spec.category_count > max_categories and not allow_unlimited_categories:
        errors.append(
            f"{spec.category_count} categories requested, at most {max_categories} allowed"
        )
        tokens.append(TOO_MANY_CATEGORIES)

    if errors:
        raise PageListValidationError(errors, tokens[0], spec)
