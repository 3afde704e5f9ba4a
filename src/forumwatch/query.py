"""Compiled tree queries over parsed HTML documents.

A :class:`Query` is a CSS selector compiled once by soupsieve, optionally
paired with an attribute name. Selecting an attribute makes the query's string
value the attribute of the first match rather than its text.
"""

from typing import Iterator, Optional, Tuple

import soupsieve as sv
from bs4 import Tag

from .errors import QuerySyntaxError


class Query:
    """A compiled selector with string/exists/iterate evaluation."""

    __slots__ = ('expression', 'attribute', '_selector')

    def __init__(self, expression: str, selector: sv.SoupSieve, attribute: Optional[str] = None):
        self.expression = expression
        self.attribute = attribute
        self._selector = selector

    @classmethod
    def compile(cls, expression: str, attribute: Optional[str] = None) -> 'Query':
        """Compile ``expression``; malformed expressions raise immediately."""
        try:
            selector = sv.compile(expression)
        except sv.SelectorSyntaxError as e:
            raise QuerySyntaxError(
                f"Invalid query {expression!r}: {e}",
                {'expression': expression}
            ) from e
        return cls(expression, selector, attribute)

    def first(self, node: Tag) -> Optional[Tag]:
        """Return the first matching descendant of ``node``, if any."""
        return self._selector.select_one(node)

    def string_value(self, node: Tag) -> Tuple[str, bool]:
        """Return the text (or attribute) of the first match and a found flag."""
        match = self.first(node)
        if match is None:
            return "", False
        if self.attribute is None:
            return match.get_text(), True

        value = match.get(self.attribute)
        if value is None:
            return "", False
        if isinstance(value, list):
            # multi-valued attributes such as class
            value = " ".join(value)
        return value, True

    def exists(self, node: Tag) -> bool:
        return self.first(node) is not None

    def iterate(self, node: Tag) -> Iterator[Tag]:
        """Yield every match under ``node`` in document order."""
        return self._selector.iselect(node)

    def __repr__(self) -> str:
        if self.attribute:
            return f"Query({self.expression!r}, attribute={self.attribute!r})"
        return f"Query({self.expression!r})"


def escape(value: str) -> str:
    """Escape a runtime value for use as a CSS identifier."""
    return sv.escape(value)
