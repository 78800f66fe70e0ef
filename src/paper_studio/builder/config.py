"""
Module: builder.config

Purpose:
    Configuration dataclass for the paper build pipeline. Immutable
    configuration with validation on construction.

Key Classes:
    - BuildConfig: Main configuration for building a paper PDF

Dependencies:
    - dataclasses (std)
    - pathlib (std)

Used By:
    - builder.controller: Main build controller
    - cli: Built from command line arguments
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .editor.document import AnchorPolicy
from .layout.config import LayoutConfig
from .output.rasterizer import DEFAULT_OVERSAMPLE


@dataclass(frozen=True)
class BuildConfig:
    """
    Configuration for building a paper (immutable).

    Attributes:
        output_dir: Directory the PDF is written to
        answer_key: Render the answer key instead of the question paper
        layout: Page layout configuration
        oversample: Capture scale factor for export
        anchor_policy: Handling of overlays anchored past the last page
        overlays_path: Optional overlay JSON file
        assets_dir: Directory relative image paths resolve against
        filename: Explicit output filename (derived from the subject if None)

    Example:
        >>> config = BuildConfig(output_dir=Path("output"), answer_key=True)
    """

    output_dir: Path = Path("output")
    answer_key: bool = False
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    oversample: int = DEFAULT_OVERSAMPLE
    anchor_policy: AnchorPolicy = AnchorPolicy.REANCHOR
    overlays_path: Optional[Path] = None
    assets_dir: Optional[Path] = None
    filename: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.oversample < 1:
            raise ValueError(f"oversample must be >= 1: {self.oversample}")
        if self.filename is not None and not self.filename.lower().endswith(".pdf"):
            raise ValueError(f"filename must end with .pdf: {self.filename}")
