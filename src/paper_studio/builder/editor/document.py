"""
Module: builder.editor.document

Purpose:
    Own the overlay objects of a paper: ordered storage (array order is
    z-order), insert/delete/update, page anchoring, and routing pointer
    events to one TransformController per object.

Key Classes:
    - OverlayDocument: Overlay store and interaction router
    - AnchorPolicy: What to do with overlays whose page disappeared
    - OverlayNotFoundError: Unknown overlay id

Rules:
    - Geometry changes only through a committed transform, insert or delete
    - At most one transform session is active; pressing another object
      first commits the active session (select-away)
    - page_index always references an existing page

Dependencies:
    - core.models.overlays: OverlayObject
    - builder.editor.transform: TransformController

Used By:
    - builder.controller: Overlays merged into rendered pages
    - cli: Overlays loaded from JSON
"""

from __future__ import annotations

import itertools
import logging
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from paper_studio.core.models.geometry import Geometry, Point, ResizeHandle, clamp_geometry
from paper_studio.core.models.overlays import OverlayKind, OverlayObject

from .transform import (
    InteractionTarget,
    PointerDown,
    PointerMove,
    PointerUp,
    TransformController,
)

logger = logging.getLogger(__name__)

# Size of an image dropped onto a page (centered on the pointer)
DROP_IMAGE_SIZE = (150.0, 100.0)
DEFAULT_TEXTBOX_SIZE = (200.0, 60.0)


class OverlayNotFoundError(KeyError):
    """No overlay with the requested id."""
    pass


class AnchorPolicy(Enum):
    """Handling of overlays anchored past the last page after repagination."""

    REANCHOR = "reanchor"  # Move onto the last page
    DROP = "drop"          # Delete


class OverlayDocument:
    """
    Ordered overlay objects of one paper.

    Attributes:
        page_count: Number of pages overlays may be anchored to

    Example:
        >>> doc = OverlayDocument(page_count=2)
        >>> img = doc.drop_image("logo.png", page_index=1, pointer=(200, 120))
        >>> (img.geometry.x, img.geometry.y)
        (125.0, 70.0)
    """

    def __init__(
        self,
        overlays: Iterable[OverlayObject] = (),
        *,
        page_count: int = 1,
        on_change: Optional[Callable[[OverlayObject], None]] = None,
    ) -> None:
        if page_count < 0:
            raise ValueError(f"page_count must be non-negative: {page_count}")
        self.page_count = page_count
        self._on_change = on_change
        self._overlays: List[OverlayObject] = []
        self._controllers: Dict[str, TransformController] = {}
        self._active_id: Optional[str] = None
        self._ids = itertools.count(1)
        for overlay in overlays:
            self.insert(overlay)

    # ─────────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────────

    @property
    def overlays(self) -> Tuple[OverlayObject, ...]:
        """All overlays in z-order (last is topmost)."""
        return tuple(self._overlays)

    @property
    def active_object_id(self) -> Optional[str]:
        """Object with an active transform session, if any."""
        return self._active_id

    def __len__(self) -> int:
        return len(self._overlays)

    def __contains__(self, overlay_id: object) -> bool:
        return any(o.id == overlay_id for o in self._overlays)

    def get(self, overlay_id: str) -> OverlayObject:
        return self._overlays[self._position(overlay_id)]

    def objects_on_page(self, page_index: int) -> Tuple[OverlayObject, ...]:
        """Overlays anchored to page_index, in z-order."""
        return tuple(o for o in self._overlays if o.page_index == page_index)

    def display_geometry(self, overlay_id: str) -> Geometry:
        """Live-feedback geometry during a session, otherwise the committed one."""
        obj = self.get(overlay_id)
        controller = self._controllers.get(overlay_id)
        if controller is not None and controller.candidate is not None:
            return controller.candidate
        return obj.geometry

    # ─────────────────────────────────────────────────────────────────────
    # Insert / Delete / Update
    # ─────────────────────────────────────────────────────────────────────

    def insert(self, overlay: OverlayObject) -> OverlayObject:
        """
        Add an overlay on top of the z-order.

        Raises:
            ValueError: If the id is taken or the page does not exist
        """
        if overlay.id in self:
            raise ValueError(f"Duplicate overlay id: {overlay.id!r}")
        self._check_page(overlay.page_index)
        self._overlays.append(overlay)
        logger.debug(f"Inserted {overlay.kind.value} {overlay.id} on page {overlay.page_index}")
        self._notify(overlay)
        return overlay

    def add_image(
        self,
        src: str,
        page_index: int,
        geometry: Optional[Geometry] = None,
        *,
        opacity: float = 1.0,
    ) -> OverlayObject:
        """Insert an image overlay (default 150x100 at the page origin)."""
        if geometry is None:
            geometry = Geometry(0.0, 0.0, *DROP_IMAGE_SIZE)
        overlay = OverlayObject(
            id=self._next_id("img"),
            kind=OverlayKind.IMAGE,
            geometry=clamp_geometry(geometry),
            page_index=page_index,
            opacity=opacity,
            src=src,
        )
        return self.insert(overlay)

    def drop_image(self, src: str, page_index: int, pointer: Point) -> OverlayObject:
        """
        Insert an image dropped at pointer (page coordinates).

        The image is centered on the pointer and kept inside the page's
        top/left edges.
        """
        width, height = DROP_IMAGE_SIZE
        x = max(0.0, pointer[0] - width / 2)
        y = max(0.0, pointer[1] - height / 2)
        return self.add_image(src, page_index, Geometry(x, y, width, height))

    def add_text_box(
        self,
        html: str,
        page_index: int,
        geometry: Optional[Geometry] = None,
        *,
        opacity: float = 1.0,
    ) -> OverlayObject:
        """Insert a text box overlay."""
        if geometry is None:
            geometry = Geometry(0.0, 0.0, *DEFAULT_TEXTBOX_SIZE)
        overlay = OverlayObject(
            id=self._next_id("text"),
            kind=OverlayKind.TEXTBOX,
            geometry=clamp_geometry(geometry),
            page_index=page_index,
            opacity=opacity,
            html=html,
        )
        return self.insert(overlay)

    def delete(self, overlay_id: str) -> OverlayObject:
        """
        Remove an overlay. An active session on it is discarded.

        Raises:
            OverlayNotFoundError: If no overlay has overlay_id
        """
        removed = self._overlays.pop(self._position(overlay_id))
        self._controllers.pop(overlay_id, None)
        if self._active_id == overlay_id:
            self._active_id = None
        logger.debug(f"Deleted {removed.kind.value} {overlay_id}")
        return removed

    def update(self, overlay: OverlayObject) -> OverlayObject:
        """
        Replace the overlay with the same id, keeping its z-order position.

        Raises:
            OverlayNotFoundError: If no overlay has that id
            ValueError: If the new page does not exist
        """
        position = self._position(overlay.id)
        self._check_page(overlay.page_index)
        self._overlays[position] = overlay
        self._notify(overlay)
        return overlay

    # ─────────────────────────────────────────────────────────────────────
    # Anchoring
    # ─────────────────────────────────────────────────────────────────────

    def reanchor(
        self,
        page_count: int,
        policy: AnchorPolicy = AnchorPolicy.REANCHOR,
    ) -> List[str]:
        """
        Adopt a new page count after repagination.

        Overlays on pages that no longer exist are moved onto the last
        page (REANCHOR) or deleted (DROP). With zero pages every such
        overlay is deleted.

        Args:
            page_count: Number of pages after repagination
            policy: Handling of overlays past the last page

        Returns:
            Ids of the overlays that were moved or deleted
        """
        if page_count < 0:
            raise ValueError(f"page_count must be non-negative: {page_count}")
        self.page_count = page_count
        affected: List[str] = []

        for overlay in list(self._overlays):
            if overlay.page_index < page_count:
                continue
            affected.append(overlay.id)
            if policy == AnchorPolicy.REANCHOR and page_count > 0:
                last_page = page_count - 1
                logger.warning(
                    f"Overlay {overlay.id} anchored to missing page {overlay.page_index}; "
                    f"moved to page {last_page}"
                )
                self.update(overlay.with_page(last_page))
            else:
                logger.warning(
                    f"Overlay {overlay.id} anchored to missing page {overlay.page_index}; dropped"
                )
                self.delete(overlay.id)
        return affected

    # ─────────────────────────────────────────────────────────────────────
    # Pointer Routing
    # ─────────────────────────────────────────────────────────────────────

    def controller(self, overlay_id: str) -> TransformController:
        """Transform controller of an overlay (created on first use)."""
        obj = self.get(overlay_id)
        controller = self._controllers.get(overlay_id)
        if controller is None:
            controller = TransformController(
                overlay_id,
                lambda geometry, oid=overlay_id: self._commit(oid, geometry),
                lock_aspect=obj.is_image,
            )
            self._controllers[overlay_id] = controller
        return controller

    def pointer_down(
        self,
        overlay_id: str,
        position: Point,
        target: InteractionTarget = InteractionTarget.BODY,
        handle: Optional[ResizeHandle] = None,
        origin: Point = (0.0, 0.0),
    ) -> Geometry:
        """
        Start a drag/resize/rotate on overlay_id.

        A session active on a different object is committed first.
        """
        obj = self.get(overlay_id)
        if self._active_id is not None and self._active_id != overlay_id:
            previous = self._controllers.get(self._active_id)
            if previous is not None:
                logger.debug(f"Select-away: committing {self._active_id}")
                previous.commit_pending()
            self._active_id = None

        controller = self.controller(overlay_id)
        geometry = controller.dispatch(
            PointerDown(position, obj.geometry, target, handle, origin)
        )
        self._active_id = overlay_id
        return geometry

    def pointer_move(self, position: Point) -> Optional[Geometry]:
        """Candidate geometry of the active session (None if idle)."""
        if self._active_id is None:
            return None
        return self._controllers[self._active_id].dispatch(PointerMove(position))

    def pointer_up(self, position: Point) -> Optional[Geometry]:
        """Commit the active session (None if idle)."""
        if self._active_id is None:
            return None
        controller = self._controllers[self._active_id]
        self._active_id = None
        return controller.dispatch(PointerUp(position))

    # ─────────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────────

    def _commit(self, overlay_id: str, geometry: Geometry) -> None:
        if overlay_id not in self:
            logger.debug(f"Commit for deleted overlay {overlay_id} ignored")
            return
        self.update(self.get(overlay_id).with_geometry(geometry))

    def _position(self, overlay_id: str) -> int:
        for i, overlay in enumerate(self._overlays):
            if overlay.id == overlay_id:
                return i
        raise OverlayNotFoundError(overlay_id)

    def _check_page(self, page_index: int) -> None:
        if not 0 <= page_index < self.page_count:
            raise ValueError(
                f"page_index {page_index} out of range for {self.page_count} pages"
            )

    def _next_id(self, prefix: str) -> str:
        while True:
            candidate = f"{prefix}-{next(self._ids)}"
            if candidate not in self:
                return candidate

    def _notify(self, overlay: OverlayObject) -> None:
        if self._on_change is not None:
            self._on_change(overlay)
