"""
Core Models Package

Immutable, validated data models shared by layout, editing and export.

All models in this package are frozen dataclasses. Editing an overlay
produces a new OverlayObject; nothing is mutated in place.
"""

from .geometry import (
    MIN_SIZE,
    Geometry,
    ResizeHandle,
    clamp_geometry,
    normalize_rotation,
    pointer_angle,
    resize_from_handle,
    rotate_delta,
    translate,
)
from .overlays import OverlayKind, OverlayObject
from .paper import MatchingOptions, PaperData, Question, QuestionType, SECTION_ORDER

__all__ = [
    # Geometry
    "MIN_SIZE",
    "Geometry",
    "ResizeHandle",
    "clamp_geometry",
    "normalize_rotation",
    "pointer_angle",
    "resize_from_handle",
    "rotate_delta",
    "translate",
    # Overlays
    "OverlayKind",
    "OverlayObject",
    # Paper
    "MatchingOptions",
    "PaperData",
    "Question",
    "QuestionType",
    "SECTION_ORDER",
]
