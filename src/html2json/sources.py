"""
Sources module for html2json.

Acquires documents from files, standard input, or the network, and loads
spec and expected-output JSON files.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional, Type, Union
from urllib.parse import urlparse

import requests
from bs4 import UnicodeDammit
from crawl4ai import AsyncWebCrawler, BrowserConfig, CrawlerRunConfig, CacheMode

from .config import Config, FetchConfig
from .exceptions import DocumentError, Html2JsonError, SpecError

logger = logging.getLogger(__name__)

STDIN_MARKER = "-"


def is_url(source: str) -> bool:
    """Check whether a document source is an http(s) URL."""
    return urlparse(source).scheme in ("http", "https")


def _check_size(text: str, limit: int, what: str) -> str:
    if len(text) > limit:
        raise DocumentError(f"{what} exceeds maximum size of {limit} bytes")
    return text


def read_file(path: Union[str, Path], max_size: int) -> str:
    """
    Read a document from disk, detecting its encoding.

    Args:
        path: Path to the document
        max_size: Maximum accepted size in bytes

    Returns:
        Decoded document text
    """
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise DocumentError(f"Failed to read file '{path}': {e}") from e

    if len(data) > max_size:
        raise DocumentError(f"HTML input exceeds maximum size of {max_size} bytes")

    markup = UnicodeDammit(data, is_html=True).unicode_markup
    if markup is None:
        raise DocumentError(f"Could not detect the encoding of '{path}'")
    return markup


def read_stdin(max_size: int) -> str:
    """Read a document from standard input."""
    logger.debug("Reading document from stdin")
    return _check_size(sys.stdin.read(), max_size, "HTML input")


def fetch_url(url: str, config: FetchConfig) -> str:
    """
    Fetch a document over HTTP.

    Args:
        url: http(s) URL
        config: Fetch settings

    Returns:
        Response body as text
    """
    logger.info(f"Fetching document: {url}")
    try:
        response = requests.get(
            url,
            headers={"User-Agent": config.user_agent},
            timeout=config.timeout,
        )
        response.raise_for_status()
    except requests.RequestException as e:
        raise DocumentError(f"Failed to fetch {url}: {e}") from e

    return _check_size(response.text, config.max_document_size, "HTML input")


def _build_browser_config() -> BrowserConfig:
    return BrowserConfig(
        headless=True,
        verbose=False,
        extra_args=[
            "--disable-gpu",
            "--disable-dev-shm-usage",
            "--no-sandbox",
        ]
    )


async def fetch_rendered(url: str, config: FetchConfig) -> str:
    """
    Fetch a document through a headless browser so scripts run first.

    Args:
        url: http(s) URL
        config: Fetch settings

    Returns:
        Rendered HTML
    """
    logger.info(f"Rendering document: {url}")
    try:
        crawler = AsyncWebCrawler(config=_build_browser_config())
        await crawler.start()
        try:
            result = await crawler.arun(
                url=url,
                config=CrawlerRunConfig(cache_mode=CacheMode.BYPASS),
            )
        finally:
            await crawler.close()
    except Exception as e:
        # browser launch and navigation errors come from several libraries under crawl4ai
        raise DocumentError(f"Failed to render {url}: {e}") from e

    if not result.success:
        raise DocumentError(f"Failed to render {url}: {result.error_message}")

    return _check_size(result.html or "", config.max_document_size, "HTML input")


async def load_document(source: Optional[str], config: Config) -> str:
    """
    Load a document from a path, a URL, or stdin.

    Args:
        source: File path, http(s) URL, ``-`` or None for stdin
        config: Configuration

    Returns:
        Document text

    Raises:
        DocumentError: If the document cannot be acquired
    """
    fetch = config.fetch

    if source is None or source == STDIN_MARKER:
        return read_stdin(fetch.max_document_size)

    if is_url(source):
        if fetch.render:
            return await fetch_rendered(source, fetch)
        return fetch_url(source, fetch)

    logger.debug(f"Reading document from file: {source}")
    return read_file(source, fetch.max_document_size)


def load_json_file(
    path: Union[str, Path],
    max_size: int,
    error: Type[Html2JsonError] = SpecError,
) -> Any:
    """
    Load a JSON file with a size limit.

    Args:
        path: Path to the JSON file
        max_size: Maximum accepted size in bytes
        error: Exception type raised on failure

    Returns:
        Decoded JSON value
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise error(f"Failed to read file '{path}': {e}") from e

    if len(content) > max_size:
        raise error(f"File '{path}' exceeds maximum size of {max_size} bytes")

    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise error(f"Failed to parse JSON in '{path}': {e}") from e


def load_spec(path: Union[str, Path], max_size: int = 1_048_576) -> Any:
    """Load a spec JSON file."""
    logger.debug(f"Loading spec from: {path}")
    return load_json_file(path, max_size, SpecError)
