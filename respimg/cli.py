"""Command-line entry point for generating responsive image attributes."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Sequence

from .config import MAX_VIEWABLE_QUERY, MEDIA_QUERIES, VARIANT_WIDTHS, PipelineConfig
from .errors import ResponsiveImagesError
from .pipeline import run_pipeline

logger = logging.getLogger("respimg.cli")


def _parse_widths(value: str) -> List[int]:
    try:
        return [int(part) for part in value.split(",") if part.strip()]
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"Expected a comma-separated list of widths, got {value!r}"
        ) from exc


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Generate image variants and add srcset/sizes attributes measured in Chromium."
        ),
    )
    parser.add_argument(
        "--source",
        default="src",
        type=Path,
        help="Folder holding the source document and its images/ folder",
    )
    parser.add_argument(
        "--output",
        default="gen",
        type=Path,
        help="Folder to (re)create with the processed document, images and variants",
    )
    parser.add_argument(
        "--document",
        default="index.html",
        help="Document filename inside the source folder",
    )
    parser.add_argument(
        "--variant-widths",
        type=_parse_widths,
        default=list(VARIANT_WIDTHS),
        help="Ascending candidate widths for generated variants",
    )
    parser.add_argument(
        "--media-queries",
        type=_parse_widths,
        default=list(MEDIA_QUERIES),
        help="Ascending max-width breakpoints to measure at",
    )
    parser.add_argument(
        "--max-viewable",
        type=int,
        default=MAX_VIEWABLE_QUERY,
        help="Window width used for the unbounded final measurement",
    )
    parser.add_argument(
        "--settle",
        type=float,
        default=0.1,
        help="Seconds to wait after each viewport resize before measuring",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=60.0,
        help="Upper bound in seconds for any script run inside the browser",
    )
    parser.add_argument(
        "--collapse-sizes",
        action="store_true",
        help="Merge adjacent breakpoints that measured the same width",
    )
    parser.add_argument(
        "--headed",
        action="store_true",
        help="Show the browser window while measuring",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )

    try:
        config = PipelineConfig(
            source_root=Path(args.source).resolve(),
            output_root=Path(args.output).resolve(),
            document_name=args.document,
            variant_widths=args.variant_widths,
            media_queries=args.media_queries,
            max_viewable_query=args.max_viewable,
            settle_delay=args.settle,
            script_timeout=args.timeout,
            collapse_sizes=args.collapse_sizes,
            headless=not args.headed,
        )
        result = asyncio.run(run_pipeline(config))
    except (ResponsiveImagesError, OSError) as exc:
        logger.error("Error: Something went wrong. %s", exc, exc_info=True)
        return 1

    logger.info(
        "Complete in %.2fs (%d image element(s), %d master image(s))",
        result.total_seconds,
        len(result.context.compiled),
        len(result.context.records),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
