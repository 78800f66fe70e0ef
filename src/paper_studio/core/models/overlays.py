"""
Module: overlays

Purpose:
    Provides the OverlayObject dataclass - a freely positioned image or
    text box anchored to one page. Geometry lives in a shared Geometry
    record; everything else is identity, appearance and anchoring.

Key Classes:
    - OverlayKind: image | textbox
    - OverlayObject: Immutable overlay record

Key Functions:
    - OverlayObject.with_geometry(): Copy with new geometry
    - OverlayObject.to_dict() / from_dict(): JSON round trip

Dependencies:
    - dataclasses (std)
    - core.models.geometry: Geometry

Used By:
    - builder.editor.document.OverlayDocument
    - builder.output.renderer
    - core.utils.serialization
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Optional

from .geometry import Geometry, clamp_geometry


class OverlayKind(str, Enum):
    """Kind of overlay object."""

    IMAGE = "image"
    TEXTBOX = "textbox"


@dataclass(frozen=True, slots=True)
class OverlayObject:
    """
    An image or text box placed on a page (immutable).

    Attributes:
        id: Unique identifier within the document
        kind: Image or text box
        geometry: Position, size and rotation
        page_index: Index of the page the object is anchored to
        opacity: 0.0 (invisible) to 1.0 (opaque)
        src: Image source (path, data URI or URL); images only
        html: Markup shown inside the box; text boxes only

    Invariants:
        - page_index >= 0
        - 0 <= opacity <= 1
        - image overlays have a src

    Example:
        >>> obj = OverlayObject(
        ...     id="img-1",
        ...     kind=OverlayKind.IMAGE,
        ...     geometry=Geometry(10, 10, 150, 100),
        ...     page_index=0,
        ...     src="logo.png",
        ... )
        >>> obj.is_image
        True
    """

    id: str
    kind: OverlayKind
    geometry: Geometry
    page_index: int
    opacity: float = 1.0
    src: Optional[str] = None
    html: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate overlay on construction."""
        if not self.id:
            raise ValueError("id must be non-empty")
        if self.page_index < 0:
            raise ValueError(f"page_index must be >= 0: {self.page_index}")
        if not math.isfinite(self.opacity) or not 0.0 <= self.opacity <= 1.0:
            raise ValueError(f"opacity must be within [0, 1]: {self.opacity}")
        if self.kind == OverlayKind.IMAGE and not self.src:
            raise ValueError(f"image overlay {self.id!r} requires a src")

    @property
    def is_image(self) -> bool:
        return self.kind == OverlayKind.IMAGE

    @property
    def is_textbox(self) -> bool:
        return self.kind == OverlayKind.TEXTBOX

    def with_geometry(self, geometry: Geometry) -> OverlayObject:
        """Copy with geometry replaced (invalid values clamped)."""
        return replace(self, geometry=clamp_geometry(geometry))

    def with_page(self, page_index: int) -> OverlayObject:
        """Copy anchored to another page."""
        return replace(self, page_index=page_index)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        data: dict[str, Any] = {
            "id": self.id,
            "kind": self.kind.value,
            **self.geometry.to_dict(),
            "page_index": self.page_index,
            "opacity": self.opacity,
        }
        if self.src is not None:
            data["src"] = self.src
        if self.html is not None:
            data["html"] = self.html
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OverlayObject:
        """
        Deserialize from a dict produced by to_dict().

        Raises:
            KeyError: If a required field is missing
            ValueError: If a field is invalid
        """
        return cls(
            id=str(data["id"]),
            kind=OverlayKind(data["kind"]),
            geometry=clamp_geometry(Geometry.from_dict(data)),
            page_index=int(data["page_index"]),
            opacity=float(data.get("opacity", 1.0)),
            src=data.get("src"),
            html=data.get("html"),
        )
