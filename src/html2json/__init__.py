"""
html2json - Extract JSON from HTML using CSS selectors defined in a JSON spec

This package turns an HTML or XML document into JSON whose shape is declared
by an extractor spec, with support for:
- Nested objects and collections scoped with the "$" key
- Fallback selectors ("a || b")
- Pipe chains (trim, lower, upper, substr, regex, parseAs, attr, void)
- Optional fields ("name?") pruned when missing
- Documents from files, stdin, HTTP, or a headless browser
"""

__version__ = "0.1.0"
__author__ = "deliriusz"

from .config import load_config, Config, FetchConfig
from .exceptions import Html2JsonError, SpecError, DocumentError
from .dom import Document, Selector
from .spec import parse_spec, parse_expression, SelectorExpr, ObjectSpec, CollectionSpec, LiteralValue, Field
from .pipes import PIPES, apply_pipes
from .extraction import JSONCSSExtractor
from .api import extract, extract_sync, extract_async, init, loads_spec
from .check import check_output, json_equal
from .cli import main

__all__ = [
    "load_config",
    "Config",
    "FetchConfig",
    "Html2JsonError",
    "SpecError",
    "DocumentError",
    "Document",
    "Selector",
    "parse_spec",
    "parse_expression",
    "SelectorExpr",
    "ObjectSpec",
    "CollectionSpec",
    "LiteralValue",
    "Field",
    "PIPES",
    "apply_pipes",
    "JSONCSSExtractor",
    "extract",
    "extract_sync",
    "extract_async",
    "init",
    "loads_spec",
    "check_output",
    "json_equal",
    "main",
]
