"""
Exception types for html2json.

Only structural failures are raised. A selector that matches nothing or a
pipe that cannot transform its input resolves to null instead.
"""


class Html2JsonError(Exception):
    """Base class for errors that abort a whole extraction."""


class SpecError(Html2JsonError):
    """The extractor spec is malformed or cannot be interpreted."""


class DocumentError(Html2JsonError):
    """The document could not be acquired or parsed."""
