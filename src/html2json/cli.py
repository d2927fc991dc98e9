"""
CLI module for html2json.

Provides command-line interface and orchestration logic.
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from .check import check_output
from .config import Config, load_config
from .exceptions import DocumentError, Html2JsonError
from .extraction import JSONCSSExtractor
from .sources import load_document, load_json_file, load_spec
from .spec import parse_spec

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_MISMATCH = 1
EXIT_ERROR = 2


def setup_logging(verbose: bool = False) -> None:
    """Set up logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def build_config(
    config_path: Optional[str] = None,
    parser: Optional[str] = None,
    render: bool = False,
) -> Config:
    """
    Build configuration from an optional file and command-line overrides.

    Args:
        config_path: Path to JSON configuration file
        parser: Parser backend override
        render: Fetch URLs through a headless browser

    Returns:
        Configuration object
    """
    config = load_config(config_path) if config_path else Config()
    if parser:
        config.parser = parser
    if render:
        config.fetch.render = True
    return config


async def run_extraction(
    document: Optional[str],
    spec_path: str,
    check_path: Optional[str] = None,
    config_path: Optional[str] = None,
    parser: Optional[str] = None,
    render: bool = False,
    compact: bool = False,
    verbose: bool = False
) -> int:
    """
    Main extraction orchestration function.

    Args:
        document: Document path, URL, or None/"-" for stdin
        spec_path: Path to the JSON spec file
        check_path: Path to an expected JSON file to compare against
        config_path: Path to JSON configuration file
        parser: Parser backend override
        render: Fetch URLs through a headless browser
        compact: Print single-line JSON
        verbose: Enable verbose logging

    Returns:
        Process exit code
    """
    setup_logging(verbose)

    try:
        config = build_config(config_path, parser, render)
        spec = parse_spec(load_spec(spec_path, config.max_spec_size))
        html = await load_document(document, config)
        result = JSONCSSExtractor(config).extract(html, spec)

        expected = None
        if check_path:
            expected = load_json_file(check_path, config.fetch.max_document_size, DocumentError)

    except (Html2JsonError, OSError, ValueError) as e:
        logger.error(f"Extraction failed: {e}")
        return EXIT_ERROR

    if check_path:
        diff = check_output(result, expected, expected_label=check_path)
        for line in diff:
            print(line)
        return EXIT_MISMATCH if diff else EXIT_OK

    print(json.dumps(result, ensure_ascii=False, indent=None if compact else 2))
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="html2json",
        description="Extract JSON from HTML using CSS selectors defined in a JSON spec",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  html2json page.html --spec spec.json
  curl -s https://example.com | html2json - -s spec.json
  html2json https://example.com -s spec.json --render
  html2json page.html -s spec.json --check expected.json
        """
    )

    parser.add_argument('document', nargs='?', default=None,
                        help='Path or http(s) URL of the document, "-" or nothing for stdin')
    parser.add_argument('--spec', '-s', required=True,
                        help='Path to JSON extractor spec file')
    parser.add_argument('--check', '-c', metavar='FILE',
                        help='Compare output against an expected JSON file')
    parser.add_argument('--config', metavar='FILE',
                        help='Path to JSON configuration file')
    parser.add_argument('--parser', choices=['lxml', 'xml', 'html.parser'],
                        help='Parser backend (default: lxml)')
    parser.add_argument('--render', action='store_true',
                        help='Fetch URLs through a headless browser')
    parser.add_argument('--compact', action='store_true',
                        help='Print JSON on a single line')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Enable verbose logging')

    args = parser.parse_args(argv)

    sys.exit(asyncio.run(run_extraction(
        document=args.document,
        spec_path=args.spec,
        check_path=args.check,
        config_path=args.config,
        parser=args.parser,
        render=args.render,
        compact=args.compact,
        verbose=args.verbose
    )))


if __name__ == '__main__':
    main()
