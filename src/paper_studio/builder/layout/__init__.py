"""
Module: builder.layout

Purpose:
    Page layout for question papers.
    Measures content blocks at the page content width and packs them
    onto fixed-capacity pages.

Key Functions:
    - measure_blocks(): Measure blocks through a MeasurementSurface
    - paginate(): Arrange measured blocks onto pages

Key Classes:
    - LayoutConfig: Configuration for page layout
    - PageSize: Supported physical page sizes
    - Block / MeasuredBlock / Page: Layout data

Dependencies:
    - PySide6: Text layout (measurer only)

Used By:
    - builder.controller: Main build controller
"""

from .config import LayoutConfig, PageSize, px_to_pt
from .models import Block, MeasuredBlock, Page, MeasureResult, LayoutResult
from .measurer import MeasurementSurface, QtMeasurementSurface, measure_blocks
from .paginator import paginate

__all__ = [
    # Config
    "LayoutConfig",
    "PageSize",
    "px_to_pt",
    # Models
    "Block",
    "MeasuredBlock",
    "Page",
    "MeasureResult",
    "LayoutResult",
    # Functions
    "MeasurementSurface",
    "QtMeasurementSurface",
    "measure_blocks",
    "paginate",
]
