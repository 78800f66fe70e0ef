"""
Module: builder.layout.config

Purpose:
    Configuration for the page layout engine.
    Defines physical page sizes, margins, block spacing and measurement
    settings shared by the measurer, paginator, renderer and exporter.

Key Classes:
    - PageSize: Supported physical page sizes
    - LayoutConfig: Immutable layout configuration

Dependencies:
    - dataclasses (std)

Used By:
    - builder.layout.measurer: Measurement width and fallback height
    - builder.layout.paginator: Page capacity
    - builder.output.renderer: Page surface size and margins
    - builder.output.exporter: PDF page size
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

# Pixel density shared by the renderer and the exporter
CSS_DPI = 96
POINTS_PER_INCH = 72


class PageSize(Enum):
    """
    Physical page sizes as (width_px, height_px) at 96 DPI.

    The exporter derives point sizes from these same pixels so renderer
    and PDF agree exactly on aspect ratio.
    """

    A4 = (794, 1123)
    LETTER = (816, 1056)

    @property
    def width_px(self) -> int:
        return self.value[0]

    @property
    def height_px(self) -> int:
        return self.value[1]

    @classmethod
    def from_name(cls, name: str) -> PageSize:
        """Look up by case-insensitive name ("a4", "letter")."""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            valid = ", ".join(m.name.lower() for m in cls)
            raise ValueError(f"Unknown page size {name!r} (expected one of: {valid})") from None


@dataclass(frozen=True)
class LayoutConfig:
    """
    Configuration for page layout (immutable).

    Attributes:
        page_size: Physical page size
        margin_top: Top margin in pixels
        margin_bottom: Bottom margin in pixels
        margin_left: Left margin in pixels
        margin_right: Right margin in pixels
        block_spacing: Outer margin added below every measured block
        fallback_block_height: Height given to blocks that fail to measure
        settle_delay: Seconds to wait between rendering and reading heights
        font_family: Base font for block and text box layout
        font_size_px: Base font size in pixels
        border_width: Page border width in pixels (0 for none)
        border_color: Page border color

    Example:
        >>> config = LayoutConfig()
        >>> config.capacity
        993  # 1123 - 65 - 65
    """

    page_size: PageSize = PageSize.A4

    # Margins
    margin_top: int = 65
    margin_bottom: int = 65
    margin_left: int = 70
    margin_right: int = 70

    # Measurement
    block_spacing: float = 10.0
    fallback_block_height: float = 24.0
    settle_delay: float = 0.1

    # Typography
    font_family: str = "Times New Roman"
    font_size_px: int = 16

    # Page decoration
    border_width: int = 1
    border_color: str = "#000000"

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        for name in ("margin_top", "margin_bottom", "margin_left", "margin_right"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative: {getattr(self, name)}")
        if self.content_width <= 0:
            raise ValueError("Margins exceed page width")
        if self.capacity <= 0:
            raise ValueError("Margins exceed page height")
        if self.block_spacing < 0:
            raise ValueError(f"block_spacing must be non-negative: {self.block_spacing}")
        if self.fallback_block_height <= 0:
            raise ValueError(
                f"fallback_block_height must be positive: {self.fallback_block_height}"
            )
        if self.settle_delay < 0:
            raise ValueError(f"settle_delay must be non-negative: {self.settle_delay}")
        if self.font_size_px <= 0:
            raise ValueError(f"font_size_px must be positive: {self.font_size_px}")
        if self.border_width < 0:
            raise ValueError(f"border_width must be non-negative: {self.border_width}")

    @property
    def page_width(self) -> int:
        return self.page_size.width_px

    @property
    def page_height(self) -> int:
        return self.page_size.height_px

    @property
    def content_width(self) -> int:
        """Width blocks are measured and rendered at (excluding margins)."""
        return self.page_width - self.margin_left - self.margin_right

    @property
    def capacity(self) -> int:
        """Usable page height: page height minus top/bottom margins."""
        return self.page_height - self.margin_top - self.margin_bottom

    @property
    def page_size_pt(self) -> Tuple[float, float]:
        """Page size in PDF points, derived from the pixel size."""
        return (px_to_pt(self.page_width), px_to_pt(self.page_height))


def px_to_pt(px: float, dpi: int = CSS_DPI) -> float:
    """
    Convert pixels to PDF points.

    PDF points are 1/72 inch.

    Args:
        px: Pixel value
        dpi: Dots per inch

    Returns:
        Value in PDF points
    """
    return px * float(POINTS_PER_INCH) / dpi
