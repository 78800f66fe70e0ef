"""
Module: geometry

Purpose:
    Provides the Geometry record shared by every overlay object and the
    pure math that drags, resizes and rotates it. Nothing here mutates
    state; every function returns a new Geometry.

Key Functions:
    - pointer_angle(): Angle of a pointer around a center, in degrees
    - rotate_delta(): Angular difference between two pointer positions
    - resize_from_handle(): Resize from a corner or edge handle
    - translate(): Move by a pointer delta
    - normalize_rotation(): Fold any angle into [0, 360)
    - clamp_geometry(): Replace NaN/negative/too-small values

Key Classes:
    - Geometry: Position, size and rotation of an overlay object
    - ResizeHandle: Corner and edge handle identifiers

Dependencies:
    - dataclasses (std)
    - math (std)

Used By:
    - core.models.overlays.OverlayObject
    - builder.editor.transform.TransformController
    - builder.output.renderer
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Tuple

# Smallest width/height an overlay may take after any transform step
MIN_SIZE = 30.0

Point = Tuple[float, float]


class ResizeHandle(str, Enum):
    """Resize handle identifiers (corners and edges)."""

    TOP_LEFT = "tl"
    TOP_RIGHT = "tr"
    BOTTOM_LEFT = "bl"
    BOTTOM_RIGHT = "br"
    TOP = "t"
    BOTTOM = "b"
    LEFT = "l"
    RIGHT = "r"

    @property
    def is_corner(self) -> bool:
        return len(self.value) == 2

    @property
    def includes_left(self) -> bool:
        return "l" in self.value

    @property
    def includes_right(self) -> bool:
        return "r" in self.value

    @property
    def includes_top(self) -> bool:
        return "t" in self.value

    @property
    def includes_bottom(self) -> bool:
        return "b" in self.value


@dataclass(frozen=True, slots=True)
class Geometry:
    """
    Position, size and rotation of an overlay object (immutable).

    Coordinates are page pixels measured from the page's top-left corner.
    Rotation is in degrees around the box center; any real value is
    accepted and interpreted mod 360.

    Attributes:
        x: Left edge of the unrotated box
        y: Top edge of the unrotated box
        width: Box width
        height: Box height
        rotation: Clockwise rotation in degrees

    Example:
        >>> g = Geometry(x=10, y=20, width=100, height=50)
        >>> g.center
        (60.0, 45.0)
    """

    x: float
    y: float
    width: float
    height: float
    rotation: float = 0.0

    @property
    def center(self) -> Point:
        """Center of the box (rotation does not move it)."""
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)

    @property
    def aspect_ratio(self) -> float:
        """width / height, or 1.0 when the height is unusable."""
        if not math.isfinite(self.height) or self.height <= 0:
            return 1.0
        ratio = self.width / self.height
        if not math.isfinite(ratio) or ratio <= 0:
            return 1.0
        return ratio

    def to_dict(self) -> dict:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "rotation": self.rotation,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Geometry:
        return cls(
            x=float(data["x"]),
            y=float(data["y"]),
            width=float(data["width"]),
            height=float(data["height"]),
            rotation=float(data.get("rotation", 0.0)),
        )


# ─────────────────────────────────────────────────────────────────────────────
# Rotation
# ─────────────────────────────────────────────────────────────────────────────

def pointer_angle(center: Point, pointer: Point) -> float:
    """
    Angle of pointer around center, in degrees.

    Uses screen coordinates (y grows downwards), so a pointer directly
    below the center is at +90.

    Args:
        center: Pivot point
        pointer: Pointer position

    Returns:
        Angle in (-180, 180]
    """
    return math.degrees(math.atan2(pointer[1] - center[1], pointer[0] - center[0]))


def rotate_delta(center: Point, from_pointer: Point, to_pointer: Point) -> float:
    """
    Angular change between two pointer positions around center.

    The raw difference of two atan2 angles; it jumps by 360 when the
    pointer crosses the ±180° line. Callers fold the result with
    normalize_rotation().

    Example:
        >>> rotate_delta((100, 100), (150, 100), (100, 150))
        90.0
    """
    return pointer_angle(center, to_pointer) - pointer_angle(center, from_pointer)


def normalize_rotation(degrees: float) -> float:
    """Fold an angle into [0, 360). Non-finite input becomes 0."""
    if not math.isfinite(degrees):
        return 0.0
    result = math.fmod(degrees, 360.0)
    if result < 0:
        result += 360.0
    # fmod(-1e-14, 360) + 360 rounds to 360.0
    if result >= 360.0:
        result = 0.0
    return result


# ─────────────────────────────────────────────────────────────────────────────
# Translation / Resize
# ─────────────────────────────────────────────────────────────────────────────

def translate(start: Geometry, dx: float, dy: float) -> Geometry:
    """Move start by (dx, dy). Size and rotation are unchanged."""
    return clamp_geometry(replace(start, x=start.x + dx, y=start.y + dy))


def resize_from_handle(
    start: Geometry,
    handle: ResizeHandle | str,
    dx: float,
    dy: float,
    lock_aspect: bool = True,
) -> Geometry:
    """
    Resize start by dragging handle by (dx, dy).

    Corner handles with lock_aspect drive the width from dx and derive
    the height from the starting aspect ratio. Left/top handles keep the
    opposite edge fixed by moving the origin.

    Args:
        start: Geometry at the start of the interaction
        handle: Handle being dragged
        dx: Horizontal pointer delta since interaction start
        dy: Vertical pointer delta since interaction start
        lock_aspect: Keep width/height constant for corner handles

    Returns:
        New geometry with both dimensions >= MIN_SIZE

    Example:
        >>> g = Geometry(0, 0, 100, 50)
        >>> resize_from_handle(g, "br", 50, 999)
        Geometry(x=0, y=0, width=150.0, height=75.0, rotation=0.0)
    """
    handle = ResizeHandle(handle)
    start = clamp_geometry(start)
    dx = _finite_or(dx, 0.0)
    dy = _finite_or(dy, 0.0)

    x, y = start.x, start.y
    width, height = start.width, start.height

    if handle.is_corner and lock_aspect:
        aspect = start.aspect_ratio
        min_width = max(MIN_SIZE, MIN_SIZE * aspect)
        width_delta = dx * (-1 if handle.includes_left else 1)
        width = max(min_width, start.width + width_delta)
        height = width / aspect
    else:
        if handle.includes_right:
            width = max(MIN_SIZE, start.width + dx)
        elif handle.includes_left:
            width = max(MIN_SIZE, start.width - dx)
        if handle.includes_bottom:
            height = max(MIN_SIZE, start.height + dy)
        elif handle.includes_top:
            height = max(MIN_SIZE, start.height - dy)

    if handle.includes_left:
        x = start.x + (start.width - width)
    if handle.includes_top:
        y = start.y + (start.height - height)

    return clamp_geometry(replace(start, x=x, y=y, width=width, height=height))


# ─────────────────────────────────────────────────────────────────────────────
# Sanitising
# ─────────────────────────────────────────────────────────────────────────────

def clamp_geometry(geometry: Geometry) -> Geometry:
    """
    Replace invalid values with safe ones.

    NaN, infinite, negative or too-small dimensions become MIN_SIZE.
    Non-finite coordinates and rotation become 0.
    """
    width = geometry.width if _is_valid_size(geometry.width) else MIN_SIZE
    height = geometry.height if _is_valid_size(geometry.height) else MIN_SIZE
    x = _finite_or(geometry.x, 0.0)
    y = _finite_or(geometry.y, 0.0)
    rotation = _finite_or(geometry.rotation, 0.0)

    if (
        width == geometry.width
        and height == geometry.height
        and x == geometry.x
        and y == geometry.y
        and rotation == geometry.rotation
    ):
        return geometry
    return Geometry(x=x, y=y, width=width, height=height, rotation=rotation)


def _is_valid_size(value: float) -> bool:
    return math.isfinite(value) and value >= MIN_SIZE


def _finite_or(value: float, fallback: float) -> float:
    return value if math.isfinite(value) else fallback
