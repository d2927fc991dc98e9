"""
Spec module for html2json.

Parses a JSON extractor spec into a tree of typed nodes once, so that the
extractor never has to inspect raw JSON shapes while evaluating.

Node types:
    SelectorExpr     "alt1 || alt2 | pipe1 | pipe2"
    ObjectSpec       {"$": scope, "field": ..., "optional?": ...}
    CollectionSpec   [ObjectSpec] or [SelectorExpr]
    LiteralValue     "'quoted text'", numbers, booleans, null

Errors report the JSON Pointer path (RFC 6901) of the offending spec node.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple, Union

from .dom import SELF_SELECTOR, Selector
from .exceptions import SpecError
from .pipes import PipeCommand, parse_pipe

logger = logging.getLogger(__name__)

SCOPE_KEY = "$"
OPTIONAL_SUFFIX = "?"
FALLBACK_SEPARATOR = "||"
PIPE_SEPARATOR = "|"
IMPLICIT_SELF_PREFIX = "attr:"

_QUOTES = "\"'"


@dataclass(frozen=True)
class SelectorExpr:
    """Selector alternatives followed by a pipe chain."""
    source: str
    alternatives: Tuple[Selector, ...]
    pipes: Tuple[PipeCommand, ...] = ()


@dataclass(frozen=True)
class LiteralValue:
    """A constant copied to the output as is."""
    value: Any


@dataclass(frozen=True)
class Field:
    """An output field of an object spec."""
    key: str
    optional: bool
    spec: "SpecNode"


@dataclass(frozen=True)
class ObjectSpec:
    """An object spec with an optional scope selector."""
    scope: Optional[SelectorExpr]
    fields: Tuple[Field, ...]


@dataclass(frozen=True)
class CollectionSpec:
    """An array spec, evaluated once per matched node."""
    item: Union[ObjectSpec, SelectorExpr]


SpecNode = Union[SelectorExpr, ObjectSpec, CollectionSpec, LiteralValue]
SPEC_NODE_TYPES = (SelectorExpr, ObjectSpec, CollectionSpec, LiteralValue)


def split_expression(text: str) -> Tuple[List[str], List[str]]:
    """
    Split a selector expression into alternatives and pipe segments.

    ``||`` separates alternatives and the first single ``|`` starts the pipe
    chain. Separators inside ``[...]`` or ``(...)`` do not split. Inside
    ``[...]`` parentheses are plain characters and a quote opens a string
    only as an attribute value (right after ``=``); outside brackets quotes
    are plain characters. A backslash keeps the next character from being
    read as a separator (the backslash itself is kept).

    Args:
        text: Selector expression

    Returns:
        Tuple of (alternatives, pipe segments), whitespace trimmed

    Raises:
        SpecError: If ``||`` appears after the pipe chain has started
    """
    alternatives: List[str] = []
    pipes: List[str] = []
    current: List[str] = []
    in_brackets = False
    depth = 0
    quote = None
    in_pipes = False
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
        elif in_brackets:
            if ch in _QUOTES and "".join(current).rstrip().endswith("="):
                quote = ch
            elif ch == "]":
                in_brackets = False
        elif ch == "[":
            in_brackets = True
        elif ch == "(":
            depth += 1
        elif ch == ")" and depth:
            depth -= 1
        elif ch == PIPE_SEPARATOR and not depth:
            segment = "".join(current).strip()
            current = []
            if text.startswith(FALLBACK_SEPARATOR, i):
                if in_pipes:
                    raise SpecError(f"Fallback '||' after the pipe chain in '{text}'")
                alternatives.append(segment)
                i += len(FALLBACK_SEPARATOR)
                continue
            if in_pipes:
                pipes.append(segment)
            else:
                alternatives.append(segment)
                in_pipes = True
            i += 1
            continue

        current.append(ch)
        i += 1

    tail = "".join(current).strip()
    if in_pipes:
        pipes.append(tail)
    else:
        alternatives.append(tail)
    return alternatives, pipes


def _quoted_literal(text: str) -> Optional[LiteralValue]:
    text = text.strip()
    if len(text) >= 2 and text[0] in _QUOTES and text[-1] == text[0]:
        return LiteralValue(text[1:-1])
    return None


def parse_expression(text: str, path: str = "") -> SelectorExpr:
    """
    Parse a selector expression string.

    Args:
        text: Expression such as ``".sale || .price | regex:(\\d+) | parseAs:int"``
        path: JSON Pointer of the expression inside the spec

    Returns:
        Compiled selector expression

    Raises:
        SpecError: On empty alternatives, unknown pipes or invalid selectors
    """
    try:
        alternatives, segments = split_expression(text)

        # "attr:href" on its own reads the scope node
        if len(alternatives) == 1 and alternatives[0].startswith(IMPLICIT_SELF_PREFIX):
            segments.insert(0, alternatives[0])
            alternatives = [SELF_SELECTOR]

        if any(not alternative for alternative in alternatives):
            raise SpecError(f"Empty selector in '{text}'")

        segments = [segment for segment in segments if segment]
        pipes = tuple(parse_pipe(segment, position) for position, segment in enumerate(segments))
        selectors = tuple(Selector.compile(alternative) for alternative in alternatives)
    except SpecError as e:
        raise SpecError(f"{e} (at '{path or '/'}')") from e

    return SelectorExpr(text.strip(), selectors, pipes)


def _parse_object(obj: dict, path: str) -> ObjectSpec:
    scope = None
    fields: List[Field] = []
    seen = set()

    for key, value in obj.items():
        child_path = f"{path}/{key}"

        if key == SCOPE_KEY:
            if not isinstance(value, str):
                raise SpecError(f"Scope selector must be a string (at '{child_path}')")
            scope = parse_expression(value, child_path)
            if scope.pipes:
                raise SpecError(f"Scope selector cannot have pipes (at '{child_path}')")
            continue

        optional = key.endswith(OPTIONAL_SUFFIX)
        name = key[:-len(OPTIONAL_SUFFIX)] if optional else key
        if not name:
            raise SpecError(f"Empty field name (at '{child_path}')")
        if name == SCOPE_KEY:
            raise SpecError(f"'{SCOPE_KEY}' is reserved for the scope selector (at '{child_path}')")
        if name in seen:
            raise SpecError(f"Duplicate field '{name}' (at '{child_path}')")
        seen.add(name)

        fields.append(Field(name, optional, _parse_node(value, child_path)))

    return ObjectSpec(scope, tuple(fields))


def _parse_collection(arr: list, path: str) -> CollectionSpec:
    if len(arr) != 1:
        raise SpecError(f"Collection spec must hold exactly one element, got {len(arr)} (at '{path or '/'}')")

    item = arr[0]
    item_path = f"{path}/0"
    if isinstance(item, dict):
        return CollectionSpec(_parse_object(item, item_path))
    if isinstance(item, str) and _quoted_literal(item) is None:
        return CollectionSpec(parse_expression(item, item_path))
    raise SpecError(f"Collection spec must wrap an object or a selector expression (at '{item_path}')")


def _parse_node(value: Any, path: str) -> SpecNode:
    # bool is checked before numbers, isinstance(True, int) is True
    if isinstance(value, bool) or value is None:
        return LiteralValue(value)
    if isinstance(value, (int, float)):
        return LiteralValue(value)
    if isinstance(value, str):
        return _quoted_literal(value) or parse_expression(value, path)
    if isinstance(value, dict):
        return _parse_object(value, path)
    if isinstance(value, list):
        return _parse_collection(value, path)
    raise SpecError(f"Unsupported spec value {type(value).__name__} (at '{path or '/'}')")


def parse_spec(value: Any) -> SpecNode:
    """
    Parse a JSON spec value into a spec tree.

    Args:
        value: Decoded JSON (object, array, string or scalar)

    Returns:
        Root spec node

    Raises:
        SpecError: If the spec cannot be interpreted
    """
    node = _parse_node(value, "")
    logger.debug(f"Parsed spec root as {type(node).__name__}")
    return node
