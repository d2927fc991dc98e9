"""
Pipe module for html2json.

Pipes are the named transformations of a selector expression's pipe chain.
Each pipe takes the current value and a prepared argument and returns the
new value, or None when the value cannot be transformed.
"""

import logging
import math
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Sequence, Tuple

from bs4 import Tag

from .dom import node_attr, node_markup, node_text
from .exceptions import SpecError

logger = logging.getLogger(__name__)

_INT_PATTERN = re.compile(r"[+-]?\d+")
_FLOAT_PATTERN = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


@dataclass(frozen=True)
class PipeDefinition:
    """A registered pipe."""
    name: str
    apply: Callable[[Any, Any], Optional[Any]]
    prepare: Optional[Callable[[str], Any]] = None  # None means the pipe takes no argument
    source: bool = False  # reads the matched node, so it has to come first


@dataclass(frozen=True)
class PipeCommand:
    """A pipe invocation with its argument prepared at spec-load time."""
    name: str
    arg: Optional[str]
    param: Any = None

    def __call__(self, value: Any) -> Optional[Any]:
        return PIPES[self.name].apply(value, self.param)


def _as_text(value: Any) -> Optional[str]:
    if isinstance(value, Tag):
        return node_text(value)
    if isinstance(value, str):
        return value
    return None


def _string_pipe(transform: Callable[[str], str]) -> Callable[[Any, Any], Optional[str]]:
    def apply(value: Any, param: Any) -> Optional[str]:
        text = _as_text(value)
        return None if text is None else transform(text)
    return apply


def _apply_attr(value: Any, name: str) -> Optional[str]:
    if not isinstance(value, Tag):
        return None
    return node_attr(value, name)


def _apply_void(value: Any, param: Any) -> Optional[str]:
    if not isinstance(value, Tag):
        return None
    return node_markup(value)


def _prepare_substr(arg: str) -> Tuple[int, Optional[int]]:
    parts = arg.split(":")
    if len(parts) > 2:
        raise SpecError(f"substr takes start[:end], got '{arg}'")
    bounds = []
    for part in parts:
        part = part.strip()
        if not part.isdigit():
            raise SpecError(f"Invalid substr bound '{part}' in '{arg}'")
        bounds.append(int(part))
    start = bounds[0]
    end = bounds[1] if len(bounds) > 1 else None
    return start, end


def _apply_substr(value: Any, bounds: Tuple[int, Optional[int]]) -> Optional[str]:
    text = _as_text(value)
    if text is None:
        return None
    start, end = bounds
    return text[start:end]


def _prepare_regex(arg: str) -> re.Pattern:
    try:
        return re.compile(arg)
    except re.error as e:
        raise SpecError(f"Invalid regex '{arg}': {e}") from e


def _apply_regex(value: Any, pattern: re.Pattern) -> Optional[str]:
    text = _as_text(value)
    if text is None:
        return None
    match = pattern.search(text)
    if match is None:
        return None
    if pattern.groups and match.group(1) is not None:
        return match.group(1)
    return match.group(0)


def _parse_int(text: str) -> Optional[int]:
    text = text.strip()
    if not _INT_PATTERN.fullmatch(text):
        return None
    return int(text)


def _parse_float(text: str) -> Optional[float]:
    text = text.strip()
    if not _FLOAT_PATTERN.fullmatch(text):
        return None
    number = float(text)
    return number if math.isfinite(number) else None


_NUMBER_PARSERS = {
    "int": _parse_int,
    "float": _parse_float,
    "number": _parse_float,
}


def _prepare_parse_as(arg: str) -> Callable[[str], Optional[Any]]:
    parser = _NUMBER_PARSERS.get(arg.strip())
    if parser is None:
        raise SpecError(f"parseAs expects one of {', '.join(_NUMBER_PARSERS)}, got '{arg}'")
    return parser


def _apply_parse_as(value: Any, parser: Callable[[str], Optional[Any]]) -> Optional[Any]:
    text = _as_text(value)
    if text is None:
        return None
    return parser(text)


PIPES: Mapping[str, PipeDefinition] = MappingProxyType({
    "trim": PipeDefinition("trim", _string_pipe(str.strip)),
    "text": PipeDefinition("text", _string_pipe(str.strip)),
    "lower": PipeDefinition("lower", _string_pipe(str.lower)),
    "upper": PipeDefinition("upper", _string_pipe(str.upper)),
    "substr": PipeDefinition("substr", _apply_substr, _prepare_substr),
    "regex": PipeDefinition("regex", _apply_regex, _prepare_regex),
    "parseAs": PipeDefinition("parseAs", _apply_parse_as, _prepare_parse_as),
    "attr": PipeDefinition("attr", _apply_attr, str.strip, source=True),
    "void": PipeDefinition("void", _apply_void, source=True),
})


def parse_pipe(segment: str, position: int) -> PipeCommand:
    """
    Parse one ``name[:arg]`` pipe segment.

    Args:
        segment: Pipe text with surrounding whitespace removed
        position: Index of the pipe in its chain

    Returns:
        Pipe command with a prepared argument

    Raises:
        SpecError: If the pipe is unknown, misplaced or has a bad argument
    """
    name, sep, arg = segment.partition(":")
    name = name.strip()
    definition = PIPES.get(name)
    if definition is None:
        raise SpecError(f"Unknown pipe command: {segment}")

    if definition.source and position > 0:
        raise SpecError(f"Pipe '{name}' reads the matched node and must come first")

    if definition.prepare is None:
        if sep:
            raise SpecError(f"Pipe '{name}' takes no argument, got '{segment}'")
        return PipeCommand(name, None)

    if not arg.strip():
        raise SpecError(f"Pipe '{name}' requires an argument")
    return PipeCommand(name, arg, definition.prepare(arg))


def apply_pipes(node: Tag, pipes: Sequence[PipeCommand]) -> Optional[Any]:
    """
    Run a pipe chain on a matched node.

    The chain starts from the node itself; the first text pipe reads its
    text. A chain without pipes yields the node's text.

    Returns:
        Final value, or None if any pipe failed
    """
    value: Any = node
    for pipe in pipes:
        value = pipe(value)
        if value is None:
            logger.debug(f"Pipe '{pipe.name}' produced no value")
            return None
    if isinstance(value, Tag):
        return node_text(value)
    return value
