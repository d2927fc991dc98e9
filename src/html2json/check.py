"""
Check module for html2json.

Compares extraction output with an expected JSON document and renders the
differences as a unified diff.
"""

import difflib
import json
import logging
from typing import Any, List

logger = logging.getLogger(__name__)


def json_equal(actual: Any, expected: Any) -> bool:
    """
    Compare two JSON values structurally.

    Unlike ``==``, booleans never equal numbers and integers never equal
    floats, so ``1``, ``1.0`` and ``true`` are three different values.
    Object key order is ignored.
    """
    if type(actual) is not type(expected):
        return False
    if isinstance(actual, dict):
        if actual.keys() != expected.keys():
            return False
        return all(json_equal(actual[key], expected[key]) for key in actual)
    if isinstance(actual, list):
        if len(actual) != len(expected):
            return False
        return all(json_equal(a, e) for a, e in zip(actual, expected))
    return actual == expected


def _dump(value: Any) -> List[str]:
    return json.dumps(value, indent=2, sort_keys=True, ensure_ascii=False).splitlines()


def render_diff(
    actual: Any,
    expected: Any,
    expected_label: str = "expected",
    actual_label: str = "actual",
) -> List[str]:
    """
    Render a unified diff between expected and actual JSON.

    Returns:
        Diff lines without trailing newlines
    """
    return list(difflib.unified_diff(
        _dump(expected),
        _dump(actual),
        fromfile=expected_label,
        tofile=actual_label,
        lineterm="",
    ))


def check_output(actual: Any, expected: Any, expected_label: str = "expected") -> List[str]:
    """
    Check extraction output against an expected value.

    Returns:
        Empty list on an exact match, diff lines otherwise
    """
    if json_equal(actual, expected):
        logger.info("Output matches expected JSON")
        return []

    logger.warning(f"Output differs from {expected_label}")
    return render_diff(actual, expected, expected_label=expected_label)
