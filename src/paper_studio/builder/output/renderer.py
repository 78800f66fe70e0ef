"""
Module: builder.output.renderer

Purpose:
    Compose one fixed-size page surface per Page: content blocks at the
    positions the paginator gave them, then that page's overlay objects.
    Takes no layout decisions; it only draws.

Key Functions:
    - render_page(): Page + overlays -> PageSurface
    - render_pages(): LayoutResult + overlays -> List[PageSurface]

Key Classes:
    - PageSurface: Paintable page (size, blocks, overlays)

Drawing Order:
    1. White background and optional page border
    2. Blocks top-down from the top margin at the content width
    3. Overlays in array order (later objects on top), each rotated
       around its own center with its opacity applied

Dependencies:
    - PySide6.QtGui: QPainter, QTextDocument
    - builder.layout: Page, LayoutConfig, build_text_document

Used By:
    - builder.output.rasterizer: Paints surfaces into bitmaps
    - builder.controller: Main build controller
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Tuple

from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import QColor, QImage, QPainter, QPen

from paper_studio.core.models.overlays import OverlayObject

from ..layout.config import LayoutConfig
from ..layout.measurer import build_text_document
from ..layout.models import LayoutResult, Page

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageSurface:
    """
    A page ready to be painted (immutable).

    Attributes:
        page: Page with its measured blocks
        overlays: Overlays anchored to this page, in z-order
        config: Layout configuration (page size, margins, typography)

    Example:
        >>> surface = render_page(page, doc.overlays, LayoutConfig())
        >>> surface.size
        (794, 1123)
    """

    page: Page
    overlays: Tuple[OverlayObject, ...]
    config: LayoutConfig

    @property
    def index(self) -> int:
        return self.page.index

    @property
    def size(self) -> Tuple[int, int]:
        """Surface size in pixels (the physical page size)."""
        return (self.config.page_width, self.config.page_height)

    @property
    def image_sources(self) -> List[str]:
        """Distinct image sources used on this page, in first-use order."""
        sources: List[str] = []
        for overlay in self.overlays:
            if overlay.is_image and overlay.src not in sources:
                sources.append(overlay.src)
        return sources

    def paint(self, painter: QPainter, images: Mapping[str, QImage]) -> None:
        """
        Paint the page in page pixel coordinates.

        Args:
            painter: Active painter (any scale already applied)
            images: Decoded images for every source in image_sources

        Raises:
            LookupError: If an image overlay's source is missing from images
        """
        painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        painter.setRenderHint(QPainter.RenderHint.TextAntialiasing, True)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform, True)

        self._paint_background(painter)
        self._paint_blocks(painter)
        for overlay in self.overlays:
            self._paint_overlay(painter, overlay, images)

    # ─────────────────────────────────────────────────────────────────────
    # Drawing Helpers
    # ─────────────────────────────────────────────────────────────────────

    def _paint_background(self, painter: QPainter) -> None:
        width, height = self.size
        painter.fillRect(QRectF(0, 0, width, height), QColor("#ffffff"))

        border = self.config.border_width
        if border > 0:
            painter.save()
            pen = QPen(QColor(self.config.border_color))
            pen.setWidthF(border)
            painter.setPen(pen)
            painter.setBrush(Qt.BrushStyle.NoBrush)
            inset = border / 2
            painter.drawRect(QRectF(inset, inset, width - border, height - border))
            painter.restore()

    def _paint_blocks(self, painter: QPainter) -> None:
        config = self.config
        y = float(config.margin_top)
        for measured in self.page.blocks:
            doc = build_text_document(
                measured.block.markup,
                config.content_width,
                config.font_family,
                config.font_size_px,
            )
            painter.save()
            painter.translate(QPointF(config.margin_left, y))
            doc.drawContents(painter)
            painter.restore()
            y += measured.height

    def _paint_overlay(
        self,
        painter: QPainter,
        overlay: OverlayObject,
        images: Mapping[str, QImage],
    ) -> None:
        g = overlay.geometry
        cx, cy = g.center
        box = QRectF(0, 0, g.width, g.height)

        painter.save()
        painter.setOpacity(overlay.opacity)
        painter.translate(QPointF(cx, cy))
        painter.rotate(g.rotation)
        painter.translate(QPointF(-g.width / 2, -g.height / 2))

        if overlay.is_image:
            image = images.get(overlay.src)
            if image is None:
                painter.restore()
                raise LookupError(f"Image for overlay {overlay.id} was not loaded: {overlay.src}")
            painter.drawImage(contain_rect(box, image.width(), image.height()), image)
        else:
            painter.setClipRect(box)
            doc = build_text_document(
                overlay.html or "",
                g.width,
                self.config.font_family,
                self.config.font_size_px,
            )
            doc.drawContents(painter, box)

        painter.restore()


def contain_rect(box: QRectF, image_width: int, image_height: int) -> QRectF:
    """
    Largest rect with the image's aspect ratio centered inside box.

    Example:
        >>> contain_rect(QRectF(0, 0, 150, 100), 200, 200)
        PySide6.QtCore.QRectF(25.000000, 0.000000, 100.000000, 100.000000)
    """
    if image_width <= 0 or image_height <= 0:
        return QRectF(box)
    scale = min(box.width() / image_width, box.height() / image_height)
    width = image_width * scale
    height = image_height * scale
    return QRectF(
        box.x() + (box.width() - width) / 2,
        box.y() + (box.height() - height) / 2,
        width,
        height,
    )


def render_page(
    page: Page,
    overlays: Iterable[OverlayObject],
    config: LayoutConfig,
) -> PageSurface:
    """
    Build the surface of one page.

    Args:
        page: Page from the paginator
        overlays: Overlay objects (any page); only page.index's are kept
        config: Layout configuration

    Returns:
        PageSurface with the page's overlays in z-order
    """
    own = tuple(o for o in overlays if o.page_index == page.index)
    return PageSurface(page=page, overlays=own, config=config)


def render_pages(
    layout: LayoutResult,
    overlays: Iterable[OverlayObject],
    config: LayoutConfig,
) -> List[PageSurface]:
    """
    Build one surface per page, in page order.

    Overlays anchored past the last page are skipped with a warning;
    re-anchor them on the overlay document first to keep them.
    """
    overlays = tuple(overlays)
    surfaces = [render_page(page, overlays, config) for page in layout.pages]

    orphaned = [o.id for o in overlays if o.page_index >= layout.page_count]
    if orphaned:
        logger.warning(f"Skipping overlays on missing pages: {', '.join(orphaned)}")

    logger.info(
        f"Prepared {len(surfaces)} page surfaces "
        f"({sum(len(s.overlays) for s in surfaces)} overlays)"
    )
    return surfaces
