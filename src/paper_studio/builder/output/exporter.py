"""
Module: builder.output.exporter

Purpose:
    Export page surfaces to a multi-page PDF.
    Pages are captured strictly one after another; each bitmap is placed
    full-bleed on its own PDF page and released before the next capture.

Key Functions:
    - export_pdf(): Capture all pages and write the PDF
    - export_filename(): Output filename from the paper subject

Key Classes:
    - CancellationToken: Cooperative cancel flag checked between pages
    - ExportError: Capture failed or nothing to export
    - ExportCancelled: Export cancelled by the caller

Failure Model:
    The PDF is assembled in memory and written (via a temporary file and
    os.replace) only after every page succeeded. A failed or cancelled
    export leaves no file behind.

Dependencies:
    - reportlab: PDF generation
    - PIL: Page bitmaps
    - builder.output.rasterizer: Page capture

Used By:
    - builder.controller: Main build controller
"""

from __future__ import annotations

import io
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Awaitable, Callable, Optional, Sequence

from PIL import Image
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from ..layout.config import LayoutConfig
from .images import ImageLoader
from .rasterizer import DEFAULT_OVERSAMPLE, rasterize_page
from .renderer import PageSurface

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]
CaptureFn = Callable[[PageSurface, ImageLoader, int], Awaitable[Image.Image]]

QUESTION_PAPER_SUFFIX = "_Question_Paper"
ANSWER_KEY_SUFFIX = "_Answer_Key"


class ExportError(Exception):
    """Error during PDF export."""
    pass


class ExportCancelled(ExportError):
    """Export was cancelled before completion."""
    pass


class CancellationToken:
    """
    Cooperative cancellation flag.

    Example:
        >>> token = CancellationToken()
        >>> token.cancel()
        >>> token.cancelled
        True
    """

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


def export_filename(subject: str, answer_key: bool = False) -> str:
    """
    Build the PDF filename for a paper.

    Example:
        >>> export_filename("Physics  Grade 9", answer_key=True)
        'Physics_Grade_9_Answer_Key.pdf'
    """
    stem = re.sub(r"[\\/]", "", subject.strip())
    stem = re.sub(r"\s+", "_", stem) or "Paper"
    suffix = ANSWER_KEY_SUFFIX if answer_key else QUESTION_PAPER_SUFFIX
    return f"{stem}{suffix}.pdf"


async def export_pdf(
    surfaces: Sequence[PageSurface],
    output_path: Path,
    *,
    config: LayoutConfig,
    loader: Optional[ImageLoader] = None,
    oversample: int = DEFAULT_OVERSAMPLE,
    progress: Optional[ProgressCallback] = None,
    cancel: Optional[CancellationToken] = None,
    capture: CaptureFn = rasterize_page,
) -> Path:
    """
    Capture every page in order and write one PDF.

    Args:
        surfaces: Page surfaces in page order
        output_path: Destination PDF path
        config: Layout configuration (page size)
        loader: Image loader shared across pages (new one if None)
        oversample: Capture scale factor
        progress: Called with (pages_done, total) after each page
        cancel: Checked before each page capture
        capture: Page capture coroutine (rasterize_page by default)

    Returns:
        output_path

    Raises:
        ExportError: Nothing to export, a page capture failed, or the PDF
            could not be assembled or written
        ExportCancelled: cancel was set before the export finished
    """
    total = len(surfaces)
    if total == 0:
        raise ExportError("Nothing to export: document has no pages")

    loader = loader or ImageLoader()
    page_width_pt, page_height_pt = config.page_size_pt
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=(page_width_pt, page_height_pt))

    for done, surface in enumerate(surfaces):
        if cancel is not None and cancel.cancelled:
            logger.warning(f"Export cancelled after {done}/{total} pages")
            raise ExportCancelled(f"Export cancelled after {done} of {total} pages")

        try:
            bitmap = await capture(surface, loader, oversample)
        except Exception as e:
            logger.error(f"Failed to capture page {done + 1}/{total}: {e}")
            raise ExportError(f"Failed to capture page {done + 1} of {total}: {e}") from e

        try:
            c.drawImage(
                _pil_to_reader(bitmap),
                0,
                0,
                width=page_width_pt,
                height=page_height_pt,
            )
            c.showPage()
        except Exception as e:
            logger.error(f"Failed to place page {done + 1}/{total}: {e}")
            raise ExportError(f"Failed to place page {done + 1} of {total}: {e}") from e
        finally:
            bitmap.close()

        logger.debug(f"Exported page {done + 1}/{total}")
        if progress is not None:
            progress(done + 1, total)

    try:
        c.save()
    except Exception as e:
        raise ExportError(f"Failed to assemble PDF: {e}") from e
    _write_atomic(output_path, buffer.getvalue())
    logger.info(f"Exported {total} pages to {output_path}")
    return output_path


def _pil_to_reader(img: Image.Image) -> ImageReader:
    """Convert PIL image to ReportLab ImageReader (PNG in memory)."""
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    buf.seek(0)
    return ImageReader(buf)


def _write_atomic(path: Path, data: bytes) -> None:
    """Write data to path through a temporary file in the same directory."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    except OSError as e:
        raise ExportError(f"Cannot create output directory {path.parent}: {e}") from e
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_name, path)
    except OSError as e:
        Path(tmp_name).unlink(missing_ok=True)
        raise ExportError(f"Cannot write {path}: {e}") from e
