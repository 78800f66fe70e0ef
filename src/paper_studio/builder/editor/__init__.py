"""
Module: builder.editor

Purpose:
    Free-form placement of overlay objects (images, text boxes) on pages.
    Pointer events drive one transform state machine per object; the
    overlay document owns the objects and commits their geometry.

Key Classes:
    - OverlayDocument: Overlay store and pointer router
    - TransformController: Drag / resize / rotate state machine

Dependencies:
    - core.models: Geometry, OverlayObject

Used By:
    - builder.controller: Overlays merged into rendered pages
"""

from .transform import (
    InteractionState,
    InteractionTarget,
    PointerDown,
    PointerMove,
    PointerUp,
    TransformController,
    TransformSession,
    TransformStateError,
)
from .document import AnchorPolicy, OverlayDocument, OverlayNotFoundError

__all__ = [
    # Transform
    "InteractionState",
    "InteractionTarget",
    "PointerDown",
    "PointerMove",
    "PointerUp",
    "TransformController",
    "TransformSession",
    "TransformStateError",
    # Document
    "AnchorPolicy",
    "OverlayDocument",
    "OverlayNotFoundError",
]
