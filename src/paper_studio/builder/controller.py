"""
Module: builder.controller

Purpose:
    Orchestrate the complete paper build pipeline.
    Compose → Measure → Paginate → Anchor overlays → Render → Export

Key Functions:
    - build_paper(): Main entry point for building a paper PDF
    - layout_paper(): Compose, measure and paginate only

Key Classes:
    - BuildResult: Complete build result
    - BuildError: Exception for build failures

Dependencies:
    - builder.content: Block generation
    - builder.layout: Measurement and pagination
    - builder.editor: Overlay document
    - builder.output: Rendering and export

Used By:
    - cli: Command line entry point
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterable, List, Optional, Union

from paper_studio.core.models.overlays import OverlayObject
from paper_studio.core.models.paper import PaperData
from paper_studio.core.utils.serialization import SerializationError, load_overlays

from .config import BuildConfig
from .content import compose_paper
from .editor import OverlayDocument
from .layout import (
    LayoutConfig,
    LayoutResult,
    MeasurementSurface,
    QtMeasurementSurface,
    measure_blocks,
    paginate,
)
from .output import (
    CancellationToken,
    ExportCancelled,
    ExportError,
    ImageLoader,
    export_filename,
    export_pdf,
    render_pages,
)
from .output.exporter import ProgressCallback

logger = logging.getLogger(__name__)


class BuildError(Exception):
    """Error during build pipeline."""
    pass


@dataclass(frozen=True)
class BuildResult:
    """
    Complete build result (immutable).

    Attributes:
        pdf_path: Path to the generated PDF
        page_count: Number of pages generated
        block_count: Number of content blocks laid out
        overlay_count: Number of overlays drawn
        reanchored: Ids of overlays moved or dropped after pagination
        warnings: Any warnings during build
        elapsed: Build time in seconds

    Example:
        >>> result = asyncio.run(build_paper(paper, config))
        >>> print(f"Generated {result.page_count} pages at {result.pdf_path}")
    """

    pdf_path: Path
    page_count: int
    block_count: int
    overlay_count: int
    reanchored: tuple[str, ...]
    warnings: tuple[str, ...]
    elapsed: float


async def layout_paper(
    paper: PaperData,
    layout_config: LayoutConfig,
    *,
    answer_key: bool = False,
    surface: Optional[MeasurementSurface] = None,
) -> LayoutResult:
    """
    Compose, measure and paginate a paper.

    Measurement warnings are carried into the returned LayoutResult.
    """
    blocks = compose_paper(paper, answer_key=answer_key)
    measured = await measure_blocks(
        blocks,
        layout_config.content_width,
        surface or QtMeasurementSurface(layout_config),
        spacing=layout_config.block_spacing,
        fallback_height=layout_config.fallback_block_height,
        settle_delay=layout_config.settle_delay,
    )
    layout = paginate(measured.blocks, layout_config.capacity)
    return replace(layout, warnings=measured.warnings + layout.warnings)


async def build_paper(
    paper: PaperData,
    config: BuildConfig,
    *,
    overlays: Union[OverlayDocument, Iterable[OverlayObject], None] = None,
    surface: Optional[MeasurementSurface] = None,
    loader: Optional[ImageLoader] = None,
    progress: Optional[ProgressCallback] = None,
    cancel: Optional[CancellationToken] = None,
) -> BuildResult:
    """
    Build a paper PDF from start to finish.

    Pipeline:
    1. Compose content blocks from the paper data
    2. Measure blocks at the content width
    3. Paginate onto fixed-capacity pages
    4. Re-anchor overlays to the new page count
    5. Render page surfaces
    6. Capture pages and export the PDF

    Args:
        paper: Paper to build
        config: Build configuration
        overlays: Overlay document or objects; loaded from
            config.overlays_path when None
        surface: Measurement surface (Qt by default)
        loader: Image loader (new one resolving against config.assets_dir)
        progress: Export progress callback (pages_done, total)
        cancel: Cancellation token checked between pages

    Returns:
        BuildResult with path and statistics

    Raises:
        BuildError: If any step fails
        ExportCancelled: If cancel was set during export
    """
    start_time = time.perf_counter()
    layout_config = config.layout
    kind = "answer key" if config.answer_key else "question paper"
    logger.info(f"Starting build of {kind} for {paper.subject!r} ({len(paper.questions)} questions)")

    # 1-3. Compose, measure, paginate
    try:
        layout = await layout_paper(
            paper, layout_config, answer_key=config.answer_key, surface=surface
        )
    except (ValueError, RuntimeError) as e:
        raise BuildError(f"Failed to lay out paper: {e}") from e

    warnings: List[str] = list(layout.warnings)
    if layout.page_count == 0:
        raise BuildError("Paper produced no pages")
    logger.info(f"Laid out {layout.total_blocks} blocks on {layout.page_count} pages")

    # 4. Overlays
    document = _overlay_document(overlays, config)
    reanchored = document.reanchor(layout.page_count, config.anchor_policy)
    if reanchored:
        warnings.append(f"Re-anchored overlays: {', '.join(reanchored)}")

    # 5. Render
    surfaces = render_pages(layout, document.overlays, layout_config)

    # 6. Export
    filename = config.filename or export_filename(paper.subject, config.answer_key)
    output_path = config.output_dir / filename
    try:
        await export_pdf(
            surfaces,
            output_path,
            config=layout_config,
            loader=loader or ImageLoader(config.assets_dir),
            oversample=config.oversample,
            progress=progress,
            cancel=cancel,
        )
    except ExportCancelled:
        raise
    except ExportError as e:
        raise BuildError(f"Failed to export PDF: {e}") from e

    elapsed = time.perf_counter() - start_time
    logger.info(f"Build complete: {output_path} ({layout.page_count} pages, {elapsed:.2f}s)")

    return BuildResult(
        pdf_path=output_path,
        page_count=layout.page_count,
        block_count=layout.total_blocks,
        overlay_count=sum(len(s.overlays) for s in surfaces),
        reanchored=tuple(reanchored),
        warnings=tuple(warnings),
        elapsed=elapsed,
    )


def _overlay_document(
    overlays: Union[OverlayDocument, Iterable[OverlayObject], None],
    config: BuildConfig,
) -> OverlayDocument:
    """Overlay document for the build; objects may reference any page until re-anchored."""
    if isinstance(overlays, OverlayDocument):
        return overlays

    if overlays is None:
        if config.overlays_path is None:
            return OverlayDocument(page_count=0)
        try:
            overlays = load_overlays(config.overlays_path)
        except SerializationError as e:
            raise BuildError(f"Failed to load overlays: {e}") from e
        logger.info(f"Loaded {len(overlays)} overlays from {config.overlays_path}")

    objects = list(overlays)
    page_count = max((o.page_index for o in objects), default=-1) + 1
    try:
        return OverlayDocument(objects, page_count=page_count)
    except ValueError as e:
        raise BuildError(f"Invalid overlays: {e}") from e
