"""
Module: builder.layout.paginator

Purpose:
    Arrange measured blocks onto pages using greedy space-based placement.

Key Functions:
    - paginate(): Main pagination function

Algorithm:
    1. Walk blocks in order, accumulating height on the current page
    2. If the next block would exceed capacity and the page is not empty,
       close the page and start a new one
    3. Place the block
    4. Close the last page

    Blocks are never reordered or split. A block taller than the capacity
    lands alone on its own page and overflows it.

Dependencies:
    - builder.layout.models: MeasuredBlock, Page, LayoutResult

Used By:
    - builder.controller: Main build controller
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from .models import LayoutResult, MeasuredBlock, Page

logger = logging.getLogger(__name__)


def paginate(blocks: Sequence[MeasuredBlock], capacity: float) -> LayoutResult:
    """
    Greedy-pack blocks onto pages bounded by capacity.

    Args:
        blocks: Measured blocks in source order
        capacity: Usable page height (same units as block heights)

    Returns:
        LayoutResult with contiguous 0-based pages

    Raises:
        ValueError: If capacity is not positive

    Example:
        >>> result = paginate(blocks_with_heights([200, 300, 400, 150]), 700)
        >>> [[b.height for b in p.blocks] for p in result.pages]
        [[200, 300], [400, 150]]
    """
    if capacity <= 0:
        raise ValueError(f"capacity must be positive: {capacity}")
    if not blocks:
        return LayoutResult(pages=(), capacity=capacity, warnings=[])

    pages: List[Page] = []
    warnings: List[str] = []

    current: List[MeasuredBlock] = []
    current_height = 0.0

    for block in blocks:
        if current_height + block.height > capacity and current:
            pages.append(Page(index=len(pages), blocks=tuple(current)))
            logger.debug(f"Page {len(pages) - 1} full: {len(current)} blocks, {current_height:.0f}px")
            current = []
            current_height = 0.0

        if not current and block.height > capacity:
            message = (
                f"Block {block.index} overflows page {len(pages)}: "
                f"{block.height:.0f}px needed, {capacity:.0f}px available"
            )
            logger.warning(message)
            warnings.append(message)

        current.append(block)
        current_height += block.height

    if current:
        pages.append(Page(index=len(pages), blocks=tuple(current)))

    logger.info(f"Paginated {len(blocks)} blocks onto {len(pages)} pages")

    return LayoutResult(pages=tuple(pages), capacity=capacity, warnings=warnings)
