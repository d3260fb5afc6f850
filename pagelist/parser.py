"""
Directive parser.

Turns the body of a page list tag into an ordered sequence of Directives.
Only the line structure is handled here; whether a key is known or a value
makes sense is the builder's business.
"""

from __future__ import annotations

from typing import List

from pagelist.ir.model import Directive


def parse_directive_line(line: str):
    """Split one line on its first '=', or return None if it has none."""
    key, sep, value = line.partition("=")
    if not sep:
        return None
    return Directive(key=key.strip(), value=value.strip())


def parse_directives(text: str) -> List[Directive]:
    """
    Parse newline-delimited key=value text.

    Lines without '=' are skipped. Values may themselves contain '='.
    Document order is preserved, including repeated keys.
    """
    directives: List[Directive] = []
    for line in text.split("\n"):
        directive = parse_directive_line(line)
        if directive is not None:
            directives.append(directive)
    return directives
