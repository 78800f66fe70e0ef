"""
Module: builder.output.rasterizer

Purpose:
    Capture a page surface as a bitmap at an oversampling factor.

Key Functions:
    - rasterize_page(): PageSurface -> PIL RGB image
    - qimage_to_pil(): QImage -> PIL conversion

Dependencies:
    - PySide6.QtGui: QImage, QPainter
    - PIL: Bitmap handed to the exporter
    - builder.output.images: ImageLoader

Used By:
    - builder.output.exporter: One capture per page
"""

from __future__ import annotations

import logging

from PIL import Image
from PySide6.QtGui import QColor, QImage, QPainter

from ..qt_app import ensure_gui_application
from .images import ImageLoader
from .renderer import PageSurface

logger = logging.getLogger(__name__)

DEFAULT_OVERSAMPLE = 3


def qimage_to_pil(qimage: QImage) -> Image.Image:
    """Copy a QImage into an RGB PIL image."""
    rgba = qimage.convertToFormat(QImage.Format.Format_RGBA8888)
    width, height = rgba.width(), rgba.height()
    stride = rgba.bytesPerLine()
    data = bytes(rgba.constBits())[: stride * height]
    img = Image.frombuffer("RGBA", (width, height), data, "raw", "RGBA", stride, 1)
    return img.convert("RGB")


async def rasterize_page(
    surface: PageSurface,
    loader: ImageLoader,
    oversample: int = DEFAULT_OVERSAMPLE,
) -> Image.Image:
    """
    Capture one page as a bitmap.

    Every image overlay on the page is loaded before painting starts, so
    the capture never contains a half-loaded image.

    Args:
        surface: Page to capture
        loader: Image loader (shared cache across pages)
        oversample: Integer scale factor over the page pixel size

    Returns:
        RGB image of size (width * oversample, height * oversample)

    Raises:
        ValueError: If oversample < 1
        ImageLoadError: If an overlay image cannot be loaded
    """
    if oversample < 1:
        raise ValueError(f"oversample must be >= 1: {oversample}")

    images = await loader.load_all(surface.image_sources)

    ensure_gui_application()
    width, height = surface.size
    canvas = QImage(width * oversample, height * oversample, QImage.Format.Format_RGBA8888)
    canvas.fill(QColor("#ffffff"))

    painter = QPainter(canvas)
    try:
        painter.scale(oversample, oversample)
        surface.paint(painter, images)
    finally:
        painter.end()

    img = qimage_to_pil(canvas)
    logger.debug(f"Rasterized page {surface.index} at {img.width}x{img.height}")
    return img
