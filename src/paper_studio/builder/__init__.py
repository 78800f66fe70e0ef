"""
Module: builder

Purpose:
    Paper building pipeline: turns paper data and overlay objects into
    fixed-size pages and exports them as a PDF.

Key Functions:
    - build_paper(): Main entry point for PDF generation
    - layout_paper(): Compose, measure and paginate only

Key Classes:
    - BuildConfig: Configuration for building
    - OverlayDocument: Overlay objects and pointer interaction

Dependencies:
    - PySide6: Text layout and page painting
    - reportlab: PDF assembly
    - PIL: Image decoding and page bitmaps

Used By:
    - paper_studio.cli: Command line entry point
"""

from .config import BuildConfig
from .controller import BuildError, BuildResult, build_paper, layout_paper

__all__ = [
    # Config
    "BuildConfig",
    # Controller
    "build_paper",
    "layout_paper",
    "BuildResult",
    "BuildError",
]
