"""CLI entrypoint for generating a tag cloud HTML file from a text document."""
from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Optional, Sequence

from tagcloud_core import (
    DEFAULT_MAX_FONT,
    DEFAULT_MAX_ITEMS,
    DEFAULT_MIN_FONT,
    DEFAULT_SEPARATORS,
    DEFAULT_STYLESHEETS,
    TagCloudConfig,
    TagCloudError,
    generate_tag_cloud_from_file,
    write_output,
)

logger = logging.getLogger("tagcloud")


def positive_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {raw!r}")
    if value <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return value


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a tag cloud HTML page from a text file.")
    parser.add_argument("input_path", help="Path to the input text file.")
    parser.add_argument("html_path", help="Destination HTML file path.")
    parser.add_argument(
        "-n",
        "--count",
        type=positive_int,
        default=DEFAULT_MAX_ITEMS,
        help="Number of most frequent words to include in the cloud.",
    )
    parser.add_argument("--min-font", type=int, default=DEFAULT_MIN_FONT, help="Smallest font tier in points.")
    parser.add_argument("--max-font", type=int, default=DEFAULT_MAX_FONT, help="Largest font tier in points.")
    parser.add_argument(
        "--separators",
        type=str,
        default=DEFAULT_SEPARATORS,
        help="Characters treated as word boundaries.",
    )
    parser.add_argument(
        "--stylesheet",
        action="append",
        default=[],
        metavar="HREF",
        help="Stylesheet to link from the page header (can be specified multiple times).",
    )
    parser.add_argument(
        "--no-default-stylesheets",
        action="store_true",
        help="Do not link the default tag cloud stylesheets.",
    )
    parser.add_argument("--encoding", type=str, default="utf-8", help="Encoding of the input and output files.")
    parser.add_argument(
        "--dump-json",
        type=Path,
        default=None,
        help="Optional path to dump the selected words as JSON alongside the HTML output.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log pipeline details.")
    args = parser.parse_args(argv)
    if args.min_font > args.max_font:
        parser.error("--min-font must not exceed --max-font")
    return args


def resolved_stylesheets(extra: Sequence[str], use_defaults: bool) -> tuple[str, ...]:
    sheets = list(DEFAULT_STYLESHEETS) if use_defaults else []
    sheets.extend(href for href in extra if href.strip())
    return tuple(sheets)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = TagCloudConfig(
        separators=args.separators,
        max_items=args.count,
        min_font_size=args.min_font,
        max_font_size=args.max_font,
        stylesheets=resolved_stylesheets(args.stylesheet, not args.no_default_stylesheets),
        encoding=args.encoding,
    )

    try:
        cloud = generate_tag_cloud_from_file(args.input_path, config=config)
        html_path = write_output(args.html_path, cloud.to_html(), encoding=config.encoding)
        if args.dump_json:
            payload = [entry.to_dict() for entry in cloud.entries]
            write_output(args.dump_json, json.dumps(payload, indent=2), encoding=config.encoding)
    except TagCloudError as exc:
        raise SystemExit(str(exc))

    logger.info("Wrote %d of %d distinct words", cloud.selected, cloud.distinct_words)
    print(html_path)


if __name__ == "__main__":
    main()
