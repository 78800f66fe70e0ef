"""
Module: builder.layout.measurer

Purpose:
    Measure the rendered height of each content block at a fixed width.
    Measurement goes through an injected MeasurementSurface so the
    paginator never depends on a particular layout engine.

Key Functions:
    - measure_blocks(): Async measurement pass with a settle delay
    - build_text_document(): Shared QTextDocument setup (also used to paint)

Key Classes:
    - MeasurementSurface: Protocol (render / natural_height / dispose)
    - QtMeasurementSurface: QTextDocument-backed surface

Algorithm:
    1. Render every block at the target width
    2. Suspend for the settle delay (or until a layout-ready event)
       so late font/image/math layout can finish
    3. Read each natural height and add the block spacing
    4. Blocks that cannot be measured get the fallback height
    5. Dispose every rendered block

Dependencies:
    - asyncio (std)
    - PySide6.QtGui: QTextDocument, QFont
    - builder.layout.models: Block, MeasuredBlock, MeasureResult
    - builder.layout.config: LayoutConfig

Used By:
    - builder.controller: Main build controller
    - builder.output.renderer: Same document setup for painting
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Any, List, Optional, Protocol, Sequence

from PySide6.QtGui import QFont, QTextDocument

from ..qt_app import ensure_gui_application
from .config import LayoutConfig
from .models import Block, MeasuredBlock, MeasureResult

logger = logging.getLogger(__name__)

# Stylesheet applied to every block and text box document
DEFAULT_STYLESHEET = """
table { border-collapse: collapse; }
td, th { vertical-align: top; }
h1, h2, h3, p { margin-top: 0px; }
"""


class MeasurementSurface(Protocol):
    """
    Capability: lay a block out at a width in isolation, read its height, dispose.

    render() must not read final dimensions; natural_height() is called
    after the settle delay.
    """

    def render(self, block: Block, width: float) -> Any:
        """Lay block out at width and return an opaque handle."""
        ...

    def natural_height(self, handle: Any) -> float:
        """Natural height of a rendered block."""
        ...

    def dispose(self, handle: Any) -> None:
        """Release a rendered block."""
        ...


def build_text_document(
    markup: str,
    width: float,
    font_family: str,
    font_size_px: int,
) -> QTextDocument:
    """
    Create a QTextDocument laid out at width.

    The measurer and the renderer both use this so a block's measured
    height matches the height it is painted at.

    Args:
        markup: HTML fragment
        width: Layout width in pixels
        font_family: Default font family
        font_size_px: Default font size in pixels

    Returns:
        Laid-out document (caller owns it)
    """
    ensure_gui_application()
    doc = QTextDocument()
    doc.setDocumentMargin(0)
    font = QFont(font_family)
    font.setPixelSize(font_size_px)
    doc.setDefaultFont(font)
    doc.setDefaultStyleSheet(DEFAULT_STYLESHEET)
    doc.setTextWidth(width)
    doc.setHtml(markup)
    return doc


class QtMeasurementSurface:
    """
    Measurement surface backed by Qt's rich-text layout.

    Each block gets its own QTextDocument, so blocks never influence
    each other's layout.

    Example:
        >>> surface = QtMeasurementSurface(LayoutConfig())
        >>> doc = surface.render(Block(0, "<p>Hello</p>"), 654)
        >>> surface.natural_height(doc) > 0
        True
    """

    def __init__(self, config: LayoutConfig) -> None:
        self.font_family = config.font_family
        self.font_size_px = config.font_size_px

    def render(self, block: Block, width: float) -> QTextDocument:
        return build_text_document(block.markup, width, self.font_family, self.font_size_px)

    def natural_height(self, handle: QTextDocument) -> float:
        return float(handle.size().height())

    def dispose(self, handle: QTextDocument) -> None:
        handle.clear()


async def measure_blocks(
    blocks: Sequence[Block],
    width: float,
    surface: MeasurementSurface,
    *,
    spacing: float = 0.0,
    fallback_height: float = 24.0,
    settle_delay: float = 0.1,
    layout_ready: Optional[asyncio.Event] = None,
) -> MeasureResult:
    """
    Measure every block at width.

    Args:
        blocks: Blocks in source order
        width: Target content width (must match the rendered page)
        surface: Measurement capability
        spacing: Outer margin added to each measured height
        fallback_height: Height for blocks that cannot be measured
        settle_delay: Seconds to suspend before reading; with layout_ready,
            the maximum wait for the event
        layout_ready: Optional event signalling that layout has settled

    Returns:
        MeasureResult with one MeasuredBlock per input block

    Raises:
        ValueError: If width is not positive
    """
    if width <= 0:
        raise ValueError(f"width must be positive: {width}")

    warnings: List[str] = []
    handles: List[Any] = []

    try:
        for block in blocks:
            try:
                handles.append(surface.render(block, width))
            except Exception as e:
                handles.append(None)
                _record_fallback(warnings, block, f"render failed: {e}")

        await _settle(settle_delay, layout_ready)

        measured: List[MeasuredBlock] = []
        for block, handle in zip(blocks, handles):
            height = None
            if handle is not None:
                try:
                    height = surface.natural_height(handle)
                except Exception as e:
                    _record_fallback(warnings, block, f"read failed: {e}")
                else:
                    if not math.isfinite(height) or height <= 0:
                        _record_fallback(warnings, block, f"unusable height {height!r}")
                        height = None
            if height is None:
                height = fallback_height
            else:
                height += spacing
            measured.append(MeasuredBlock(block=block, height=height))
    finally:
        for handle in handles:
            if handle is not None:
                try:
                    surface.dispose(handle)
                except Exception as e:
                    logger.debug(f"Dispose failed: {e}")

    logger.info(f"Measured {len(measured)} blocks at width {width:.0f}px")
    return MeasureResult(blocks=tuple(measured), width=width, warnings=warnings)


async def _settle(settle_delay: float, layout_ready: Optional[asyncio.Event]) -> None:
    """Yield to the event loop until layout is ready or the delay passes."""
    if layout_ready is None:
        await asyncio.sleep(settle_delay)
        return
    try:
        await asyncio.wait_for(layout_ready.wait(), timeout=settle_delay)
    except asyncio.TimeoutError:
        logger.warning(f"Layout not ready after {settle_delay:.2f}s, reading heights anyway")


def _record_fallback(warnings: List[str], block: Block, reason: str) -> None:
    message = f"Block {block.index} could not be measured ({reason}); using fallback height"
    logger.warning(message)
    warnings.append(message)
