"""
Extraction module for html2json.

Handles structured data extraction using JSON/CSS specs. A spec tree is
evaluated recursively against a parsed document; every call receives the
scope node explicitly and nothing is shared between calls.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from bs4 import Tag

from .config import Config
from .dom import ANY_ELEMENT, Document
from .exceptions import SpecError
from .pipes import apply_pipes
from .spec import (
    SPEC_NODE_TYPES,
    CollectionSpec,
    Field,
    LiteralValue,
    ObjectSpec,
    SelectorExpr,
    SpecNode,
    parse_spec,
)

logger = logging.getLogger(__name__)


def match_expression(expr: SelectorExpr, scope: Tag, limit: int = 0) -> List[Tag]:
    """
    Resolve the alternatives of an expression, left to right.

    Args:
        expr: Selector expression
        scope: Node the selectors are relative to
        limit: Maximum number of matches, 0 for all

    Returns:
        Matches of the first alternative that matched anything, or an empty list
    """
    for alternative in expr.alternatives:
        matches = alternative.select(scope, limit)
        if matches:
            return matches
    return []


def assemble_object(entries: Iterable[Tuple[Field, Any]]) -> Dict[str, Any]:
    """
    Build an output object, dropping optional fields that resolved to null.

    Required fields are always kept, null or not. Nested values are not
    revisited; each object level is pruned when it is assembled.
    """
    result: Dict[str, Any] = {}
    for field, value in entries:
        if value is None and field.optional:
            continue
        result[field.key] = value
    return result


class JSONCSSExtractor:
    """Handles JSON/CSS structured extraction."""

    def __init__(self, config: Optional[Config] = None):
        """
        Initialize JSONCSSExtractor.

        Args:
            config: Extraction configuration, defaults apply when omitted
        """
        self.config = config or Config()

    def extract(self, html: str, spec: Any) -> Any:
        """
        Extract structured data from HTML using a JSON/CSS spec.

        Args:
            html: HTML content to extract from
            spec: Decoded JSON spec, or a spec tree from ``parse_spec``

        Returns:
            Extracted JSON value

        Raises:
            SpecError: If the spec is malformed
            DocumentError: If the document cannot be parsed
        """
        spec_node = spec if isinstance(spec, SPEC_NODE_TYPES) else parse_spec(spec)
        document = Document.parse(html, self.config.parser)
        return self.evaluate(spec_node, document.root)

    def evaluate(self, node: SpecNode, scope: Tag) -> Any:
        """
        Evaluate a spec node against a scope node.

        Args:
            node: Spec node
            scope: Current scope node

        Returns:
            JSON value for this spec node
        """
        if isinstance(node, LiteralValue):
            return node.value
        if isinstance(node, SelectorExpr):
            return self._evaluate_expression(node, scope)
        if isinstance(node, ObjectSpec):
            return self._evaluate_object(node, scope)
        if isinstance(node, CollectionSpec):
            return self._evaluate_collection(node, scope)
        raise SpecError(f"Unsupported spec node: {type(node).__name__}")

    def _evaluate_expression(self, expr: SelectorExpr, scope: Tag) -> Any:
        matches = match_expression(expr, scope, limit=1)
        if not matches:
            logger.debug(f"No match for '{expr.source}'")
            return None
        return apply_pipes(matches[0], expr.pipes)

    def resolve_scope(self, spec: ObjectSpec, scope: Tag) -> Optional[Tag]:
        """
        Resolve the scope node of an object spec.

        Args:
            spec: Object spec, possibly carrying a ``$`` selector
            scope: Parent scope node

        Returns:
            First match of the ``$`` selector, the parent scope when there is
            no ``$``, or None when the selector matched nothing
        """
        if spec.scope is None:
            return scope
        matches = match_expression(spec.scope, scope, limit=1)
        if not matches:
            logger.debug(f"Scope '{spec.scope.source}' not found")
            return None
        return matches[0]

    def _evaluate_object(self, spec: ObjectSpec, scope: Tag) -> Optional[Dict[str, Any]]:
        resolved = self.resolve_scope(spec, scope)
        if resolved is None:
            return None
        return self._evaluate_fields(spec, resolved)

    def _evaluate_fields(self, spec: ObjectSpec, scope: Tag) -> Dict[str, Any]:
        return assemble_object(
            (field, self.evaluate(field.spec, scope)) for field in spec.fields
        )

    def _evaluate_collection(self, spec: CollectionSpec, scope: Tag) -> List[Any]:
        item = spec.item

        if isinstance(item, SelectorExpr):
            # failed elements stay as null to keep positions aligned with the matches
            return [apply_pipes(node, item.pipes) for node in match_expression(item, scope)]

        if item.scope is None:
            nodes = ANY_ELEMENT.select(scope)
        else:
            nodes = match_expression(item.scope, scope)

        logger.debug(f"Collection matched {len(nodes)} nodes")
        return [self._evaluate_fields(item, node) for node in nodes]
