"""
API module for html2json.

Programmatic entry points, plus the binding surface used when embedding:
an idempotent ``init`` followed by ``extract_sync`` calls that take and
return JSON text, and ``extract_async`` which initializes on first use.
"""

import json
import logging
from typing import Any, Optional

from .config import Config
from .dom import check_parser
from .exceptions import SpecError
from .extraction import JSONCSSExtractor
from .spec import SpecNode, parse_spec

logger = logging.getLogger(__name__)

_extractor: Optional[JSONCSSExtractor] = None


def extract(document_source: str, spec: Any, config: Optional[Config] = None) -> Any:
    """
    Extract JSON from a document.

    Args:
        document_source: HTML or XML text
        spec: Decoded JSON spec or a parsed spec tree
        config: Optional configuration

    Returns:
        Extracted JSON value

    Raises:
        SpecError: If the spec is malformed
        DocumentError: If the document cannot be parsed
    """
    return JSONCSSExtractor(config).extract(document_source, spec)


def loads_spec(spec_json: str) -> SpecNode:
    """
    Parse spec JSON text into a spec tree.

    Raises:
        SpecError: If the text is not valid JSON or not a valid spec
    """
    try:
        value = json.loads(spec_json)
    except json.JSONDecodeError as e:
        raise SpecError(f"Failed to parse spec JSON: {e}") from e
    return parse_spec(value)


def init(config: Optional[Config] = None) -> JSONCSSExtractor:
    """
    Initialize the shared extractor used by the binding functions.

    Repeated calls return the existing extractor; a config passed after the
    first call is ignored.

    Raises:
        DocumentError: If the configured parser backend is not installed
    """
    global _extractor
    if _extractor is None:
        config = config or Config()
        check_parser(config.parser)
        _extractor = JSONCSSExtractor(config)
        logger.debug(f"Initialized extractor with parser '{config.parser}'")
    return _extractor


def is_initialized() -> bool:
    """Check whether ``init`` has run."""
    return _extractor is not None


def extract_sync(document_source: str, spec_json: str) -> str:
    """
    Extract JSON text from a document using spec JSON text.

    Requires a prior ``init`` call.

    Raises:
        RuntimeError: If ``init`` has not been called
        SpecError: If the spec is malformed
        DocumentError: If the document cannot be parsed
    """
    if _extractor is None:
        raise RuntimeError("html2json is not initialized, call init() first")
    result = _extractor.extract(document_source, loads_spec(spec_json))
    return json.dumps(result, ensure_ascii=False)


async def extract_async(document_source: str, spec_json: str) -> str:
    """Initialize if needed, then delegate to ``extract_sync``."""
    init()
    return extract_sync(document_source, spec_json)
