"""
Module: cli

Purpose:
    Command line entry point: build a question paper or answer key PDF
    from a paper JSON file and an optional overlay JSON file.

Usage:
    python -m paper_studio paper.json -o output --overlays overlays.json
    python -m paper_studio paper.json --answer-key --page-size letter -v

Key Functions:
    - main(): Parse arguments, run the build, return an exit code
    - build_parser(): Argument parser (exposed for tests)

Dependencies:
    - argparse, asyncio, logging (std)
    - builder.controller: build_paper

Used By:
    - paper_studio.__main__
    - paper-studio console script
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
from typing import List, Optional

from paper_studio import __version__
from paper_studio.builder import BuildConfig, BuildError, build_paper
from paper_studio.builder.editor import AnchorPolicy
from paper_studio.builder.layout import LayoutConfig, PageSize
from paper_studio.builder.output import ExportCancelled
from paper_studio.builder.output.rasterizer import DEFAULT_OVERSAMPLE
from paper_studio.core.utils import SerializationError, load_paper

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="paper-studio",
        description="Lay out a question paper onto fixed-size pages and export it as a PDF",
    )
    parser.add_argument("paper", type=Path, help="Paper JSON file")
    parser.add_argument("-o", "--output-dir", type=Path, default=Path("output"), help="Output directory")
    parser.add_argument("--overlays", type=Path, help="Overlay JSON file (images and text boxes)")
    parser.add_argument("--assets-dir", type=Path, help="Directory for relative image paths (default: overlay file's directory)")
    parser.add_argument("--answer-key", action="store_true", help="Export the answer key instead of the question paper")
    parser.add_argument(
        "--page-size",
        choices=[size.name.lower() for size in PageSize],
        default="a4",
        help="Physical page size",
    )
    parser.add_argument(
        "--oversample",
        type=int,
        default=DEFAULT_OVERSAMPLE,
        help=f"Capture scale factor (default {DEFAULT_OVERSAMPLE})",
    )
    parser.add_argument(
        "--drop-orphans",
        action="store_true",
        help="Drop overlays on pages that no longer exist instead of moving them to the last page",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the command line build.

    Returns:
        0 on success, 1 on failure
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format=LOG_FORMAT,
    )

    try:
        paper = load_paper(args.paper)
    except SerializationError as e:
        logger.error(f"Could not load paper: {e}")
        return 1

    assets_dir = args.assets_dir
    if assets_dir is None and args.overlays is not None:
        assets_dir = args.overlays.parent

    try:
        config = BuildConfig(
            output_dir=args.output_dir,
            answer_key=args.answer_key,
            layout=LayoutConfig(page_size=PageSize.from_name(args.page_size)),
            oversample=args.oversample,
            anchor_policy=AnchorPolicy.DROP if args.drop_orphans else AnchorPolicy.REANCHOR,
            overlays_path=args.overlays,
            assets_dir=assets_dir,
        )
    except ValueError as e:
        logger.error(f"Invalid options: {e}")
        return 1

    try:
        result = asyncio.run(build_paper(paper, config))
    except (BuildError, ExportCancelled) as e:
        logger.error(f"Build failed: {e}")
        return 1

    for warning in result.warnings:
        logger.warning(warning)
    logger.info(f"Wrote {result.page_count} pages to {result.pdf_path}")
    return 0
