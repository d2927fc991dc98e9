"""
DOM module for html2json.

Wraps BeautifulSoup for parsing and soupsieve for CSS selector matching.
The document is parsed once and only read afterwards.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import soupsieve as sv
from bs4 import BeautifulSoup, FeatureNotFound, NavigableString, Tag
from bs4.builder import builder_registry
from bs4.element import PreformattedString

from .exceptions import DocumentError, SpecError

logger = logging.getLogger(__name__)

SELF_SELECTOR = "$"
CHILD_PREFIX = ">"
SIBLING_PREFIX = "+"

VOID_ELEMENTS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
})


def check_parser(parser: str) -> None:
    """
    Make sure a BeautifulSoup tree builder is installed for a parser name.

    Raises:
        DocumentError: If no builder provides the requested feature
    """
    if builder_registry.lookup(parser) is None:
        raise DocumentError(f"Parser backend not available: {parser}")


def _following_text(node: Tag) -> Optional[str]:
    # HTML parsers close <link> immediately, so RSS links end up as the next text node
    sibling = node.next_sibling
    if isinstance(sibling, NavigableString) and not isinstance(sibling, PreformattedString):
        return sibling.strip()
    return None


def node_text(node: Tag) -> str:
    """
    Get the rendered text of a node.

    Empty void elements fall back to the text node that follows them.
    """
    text = node.get_text()
    if not text and node.name in VOID_ELEMENTS:
        following = _following_text(node)
        if following is not None:
            return following
    return text


def node_markup(node: Tag) -> str:
    """Get the raw inner markup of a node."""
    if node.name in VOID_ELEMENTS and not node.contents:
        following = _following_text(node)
        if following:
            return following
    return node.decode_contents()


def node_attr(node: Tag, name: str) -> Optional[str]:
    """
    Get an attribute value of a node.

    Multi-valued attributes such as ``class`` are joined with spaces.
    """
    value = node.get(name)
    if value is None:
        return None
    if isinstance(value, list):
        return " ".join(value)
    return value


def _split_selector_list(text: str) -> List[str]:
    # top-level commas only; commas inside (), [] or strings belong to one selector
    parts: List[str] = []
    current: List[str] = []
    depth = 0
    quote = None
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text):
            current.append(text[i:i + 2])
            i += 2
            continue
        if quote:
            if ch == quote:
                quote = None
        elif ch in "\"'":
            quote = ch
        elif ch in "([":
            depth += 1
        elif ch in ")]" and depth:
            depth -= 1
        elif ch == "," and not depth:
            parts.append("".join(current).strip())
            current = []
            i += 1
            continue
        current.append(ch)
        i += 1
    parts.append("".join(current).strip())
    return parts


def _scope_children(inner: str) -> str:
    return ", ".join(f":scope > {part}" for part in _split_selector_list(inner))


@dataclass(frozen=True)
class Selector:
    """
    A compiled selector alternative.

    Forms:
        ``$``        the scope node itself
        ``> sel``    direct children of the scope matching ``sel``
        ``+ sel``    following siblings of the scope, and their descendants, matching ``sel``
        ``sel``      descendants of the scope matching ``sel``
    """
    text: str
    kind: str  # "self" | "child" | "sibling" | "descendant"
    pattern: Optional[sv.SoupSieve] = None
    scoped: Optional[sv.SoupSieve] = None

    @classmethod
    def compile(cls, text: str) -> "Selector":
        """
        Compile selector text.

        Raises:
            SpecError: If the CSS selector is invalid
        """
        text = text.strip()
        if text == SELF_SELECTOR:
            return cls(text, "self")

        try:
            if text.startswith(CHILD_PREFIX):
                inner = text[len(CHILD_PREFIX):].strip()
                return cls(text, "child", sv.compile(inner), sv.compile(_scope_children(inner)))
            if text.startswith(SIBLING_PREFIX):
                inner = text[len(SIBLING_PREFIX):].strip()
                return cls(text, "sibling", sv.compile(inner))
            return cls(text, "descendant", sv.compile(text))
        except sv.SelectorSyntaxError as e:
            raise SpecError(f"Invalid selector '{text}': {e}") from e

    def select(self, scope: Tag, limit: int = 0) -> List[Tag]:
        """
        Find nodes matching this selector under a scope node, in document order.

        Args:
            scope: Node the selector is relative to
            limit: Maximum number of matches, 0 for all

        Returns:
            Matching nodes
        """
        if self.kind == "self":
            return [scope]
        if self.kind == "child":
            # :scope resolves to <html> on the document object, so match globally there
            if isinstance(scope, BeautifulSoup):
                return self.pattern.select(scope, limit)
            return self.scoped.select(scope, limit)
        if self.kind == "sibling":
            return self._select_siblings(scope, limit)
        return self.pattern.select(scope, limit)

    def _select_siblings(self, scope: Tag, limit: int) -> List[Tag]:
        matches: List[Tag] = []
        for sibling in scope.next_siblings:
            if not isinstance(sibling, Tag):
                continue
            if self.pattern.match(sibling):
                matches.append(sibling)
            matches.extend(self.pattern.select(sibling))
            if limit and len(matches) >= limit:
                return matches[:limit]
        return matches


ANY_ELEMENT = Selector.compile("*")


class Document:
    """A parsed HTML or XML document."""

    def __init__(self, root: BeautifulSoup):
        self.root = root

    @classmethod
    def parse(cls, source: str, parser: str = "lxml") -> "Document":
        """
        Parse markup into a document.

        Args:
            source: HTML or XML text
            parser: BeautifulSoup feature name ("lxml", "xml" or "html.parser")

        Returns:
            Parsed document

        Raises:
            DocumentError: If the parser backend is unavailable
        """
        try:
            root = BeautifulSoup(source, parser)
        except FeatureNotFound as e:
            raise DocumentError(f"Parser backend not available: {parser}") from e
        logger.debug(f"Parsed {len(source)} characters with '{parser}'")
        return cls(root)

    def query_selector(self, selector: str, scope: Optional[Tag] = None) -> Optional[Tag]:
        """Return the first node matching a selector, or None."""
        matches = Selector.compile(selector).select(self.root if scope is None else scope, limit=1)
        return matches[0] if matches else None

    def query_selector_all(self, selector: str, scope: Optional[Tag] = None) -> List[Tag]:
        """Return every node matching a selector in document order."""
        return Selector.compile(selector).select(self.root if scope is None else scope)
