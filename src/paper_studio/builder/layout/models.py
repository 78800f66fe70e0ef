"""
Module: builder.layout.models

Purpose:
    Data models for page layout.
    Immutable dataclasses representing blocks, measured blocks and pages.

Key Classes:
    - Block: Opaque markup fragment with a stable index
    - MeasuredBlock: Block with its measured height
    - Page: Ordered blocks that fit one page
    - MeasureResult: Output of a measurement pass
    - LayoutResult: Output of pagination

Dependencies:
    - dataclasses (std)

Used By:
    - builder.content.html_generator: Creates Blocks
    - builder.layout.measurer: Creates MeasuredBlocks
    - builder.layout.paginator: Creates Pages
    - builder.output.renderer: Draws Pages
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple


@dataclass(frozen=True)
class Block:
    """
    Content fragment (immutable).

    The markup is treated as opaque by the layout engine; only the
    measurement surface and the renderer look inside it.

    Attributes:
        index: Stable position in the source sequence
        markup: Sanitized HTML fragment
        kind: Free-form label ("header", "section", "question", "fragment")
    """

    index: int
    markup: str
    kind: str = "fragment"

    @classmethod
    def from_fragments(cls, fragments: Sequence[str]) -> List[Block]:
        """Wrap raw markup fragments as blocks indexed in order."""
        return [cls(index=i, markup=markup) for i, markup in enumerate(fragments)]


@dataclass(frozen=True)
class MeasuredBlock:
    """
    A block and its measured height (including its outer margin).

    Example:
        >>> mb = MeasuredBlock(Block(0, "<p>Hi</p>"), height=34.0)
        >>> mb.index
        0
    """

    block: Block
    height: float

    @property
    def index(self) -> int:
        return self.block.index


@dataclass(frozen=True)
class Page:
    """
    Layout of a single page.

    Attributes:
        index: Page number (0-indexed, contiguous)
        blocks: Measured blocks in source order
    """

    index: int
    blocks: Tuple[MeasuredBlock, ...]

    @property
    def height_used(self) -> float:
        """Sum of block heights on this page."""
        return sum(b.height for b in self.blocks)

    @property
    def block_count(self) -> int:
        return len(self.blocks)

    def overflows(self, capacity: float) -> bool:
        """True for the oversize-block exception (single block taller than capacity)."""
        return self.height_used > capacity


@dataclass(frozen=True)
class MeasureResult:
    """
    Output of a measurement pass.

    Attributes:
        blocks: Measured blocks, parallel to the input blocks
        width: Width the pass measured at
        warnings: Messages for blocks that fell back to the minimum height
    """

    blocks: Tuple[MeasuredBlock, ...]
    width: float
    warnings: List[str] = field(default_factory=list)

    @property
    def heights(self) -> List[float]:
        return [b.height for b in self.blocks]


@dataclass(frozen=True)
class LayoutResult:
    """
    Final pagination output with diagnostics.

    Example:
        >>> result = LayoutResult(pages=(page1, page2), capacity=993)
        >>> result.page_count
        2
    """

    pages: Tuple[Page, ...]
    capacity: float
    warnings: List[str] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def total_blocks(self) -> int:
        return sum(p.block_count for p in self.pages)

    def flatten(self) -> List[MeasuredBlock]:
        """All blocks in page order (equals the input order)."""
        return [b for page in self.pages for b in page.blocks]
