"""
Module: builder.output

Purpose:
    Page composition, rasterization and PDF export.

Key Functions:
    - render_pages(): LayoutResult + overlays -> page surfaces
    - rasterize_page(): Page surface -> bitmap
    - export_pdf(): Page surfaces -> PDF file

Used By:
    - builder.controller: Main build controller
"""

from .images import ImageLoader, ImageLoadError, decode_image, pil_to_qimage
from .renderer import PageSurface, contain_rect, render_page, render_pages
from .rasterizer import DEFAULT_OVERSAMPLE, qimage_to_pil, rasterize_page
from .exporter import (
    CancellationToken,
    ExportCancelled,
    ExportError,
    export_filename,
    export_pdf,
)

__all__ = [
    # Images
    "ImageLoader",
    "ImageLoadError",
    "decode_image",
    "pil_to_qimage",
    # Rendering
    "PageSurface",
    "contain_rect",
    "render_page",
    "render_pages",
    # Rasterizing
    "DEFAULT_OVERSAMPLE",
    "qimage_to_pil",
    "rasterize_page",
    # Export
    "CancellationToken",
    "ExportCancelled",
    "ExportError",
    "export_filename",
    "export_pdf",
]
