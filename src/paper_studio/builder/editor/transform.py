"""
Module: builder.editor.transform

Purpose:
    Turn pointer events into geometry updates for one overlay object.
    An explicit state machine replaces per-widget mutable interaction
    state, so it can be driven directly in tests.

Key Classes:
    - InteractionState: IDLE / DRAGGING / RESIZING / ROTATING
    - PointerDown / PointerMove / PointerUp: Input events
    - TransformSession: Snapshot captured at pointer-down
    - TransformController: The state machine (one per object)

States:
    IDLE --down(body)--> DRAGGING
    IDLE --down(resize handle)--> RESIZING
    IDLE --down(rotate handle)--> ROTATING
    any active --move--> same state (candidate geometry only)
    any active --up--> IDLE (geometry committed)

Dependencies:
    - core.models.geometry: Pure transform math

Used By:
    - builder.editor.document.OverlayDocument
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Union

from paper_studio.core.models.geometry import (
    Geometry,
    Point,
    ResizeHandle,
    clamp_geometry,
    normalize_rotation,
    pointer_angle,
    resize_from_handle,
    translate,
)

logger = logging.getLogger(__name__)


class TransformStateError(Exception):
    """Event not valid in the controller's current state."""
    pass


class InteractionState(Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    RESIZING = "resizing"
    ROTATING = "rotating"


class InteractionTarget(str, Enum):
    """Part of a selected object a pointer-down landed on."""

    BODY = "body"
    RESIZE_HANDLE = "resize"
    ROTATE_HANDLE = "rotate"


_STATE_FOR_TARGET = {
    InteractionTarget.BODY: InteractionState.DRAGGING,
    InteractionTarget.RESIZE_HANDLE: InteractionState.RESIZING,
    InteractionTarget.ROTATE_HANDLE: InteractionState.ROTATING,
}


# ─────────────────────────────────────────────────────────────────────────────
# Events
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PointerDown:
    """
    Pointer pressed on an object.

    Attributes:
        position: Pointer in screen coordinates
        geometry: Object geometry at press time
        target: Body, resize handle or rotate handle
        handle: Resize handle (required for RESIZE_HANDLE)
        origin: Screen position of the page's top-left corner
    """

    position: Point
    geometry: Geometry
    target: InteractionTarget = InteractionTarget.BODY
    handle: Optional[ResizeHandle] = None
    origin: Point = (0.0, 0.0)


@dataclass(frozen=True)
class PointerMove:
    position: Point


@dataclass(frozen=True)
class PointerUp:
    position: Point


PointerEvent = Union[PointerDown, PointerMove, PointerUp]


@dataclass(frozen=True)
class TransformSession:
    """
    Interaction snapshot, alive from pointer-down to pointer-up.

    Attributes:
        state: Active interaction state
        start_pointer: Pointer position at press time
        start_geometry: Object geometry at press time
        handle: Resize handle (resizing only)
        pivot: Object center in screen space (rotating only)
        start_angle: Pointer angle around pivot at press time (rotating only)
    """

    state: InteractionState
    start_pointer: Point
    start_geometry: Geometry
    handle: Optional[ResizeHandle] = None
    pivot: Point = (0.0, 0.0)
    start_angle: float = 0.0


# ─────────────────────────────────────────────────────────────────────────────
# Controller
# ─────────────────────────────────────────────────────────────────────────────

class TransformController:
    """
    State machine converting pointer events into geometry for one object.

    Moves only produce a candidate geometry for live feedback. The
    owning document learns about a change once, through on_commit, at
    pointer-up.

    Attributes:
        object_id: Overlay the controller belongs to
        lock_aspect: Keep aspect ratio on corner resizes

    Example:
        >>> committed = []
        >>> ctl = TransformController("img-1", committed.append)
        >>> _ = ctl.dispatch(PointerDown((10, 10), Geometry(0, 0, 100, 50)))
        >>> ctl.dispatch(PointerMove((30, 40))).x
        20
        >>> _ = ctl.dispatch(PointerUp((30, 40)))
        >>> committed[0].y
        30
    """

    def __init__(
        self,
        object_id: str,
        on_commit: Callable[[Geometry], None],
        *,
        lock_aspect: bool = True,
    ) -> None:
        self.object_id = object_id
        self.lock_aspect = lock_aspect
        self._on_commit = on_commit
        self._session: Optional[TransformSession] = None
        self._candidate: Optional[Geometry] = None
        self._last_pointer: Optional[Point] = None

    # ─────────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────────

    @property
    def state(self) -> InteractionState:
        if self._session is None:
            return InteractionState.IDLE
        return self._session.state

    @property
    def is_active(self) -> bool:
        return self._session is not None

    @property
    def session(self) -> Optional[TransformSession]:
        return self._session

    @property
    def candidate(self) -> Optional[Geometry]:
        """Live-feedback geometry of the active session, if any."""
        return self._candidate

    @property
    def last_pointer(self) -> Optional[Point]:
        return self._last_pointer

    # ─────────────────────────────────────────────────────────────────────
    # Dispatch
    # ─────────────────────────────────────────────────────────────────────

    def dispatch(self, event: PointerEvent) -> Optional[Geometry]:
        """
        Feed one pointer event to the machine.

        Returns:
            The start geometry (down), the candidate geometry (move), the
            committed geometry (up), or None when the event is ignored.

        Raises:
            TransformStateError: On pointer-down while a session is active,
                or a resize press without a handle
        """
        if isinstance(event, PointerDown):
            return self._begin(event)
        if isinstance(event, PointerMove):
            return self._move(event.position)
        if isinstance(event, PointerUp):
            return self._end(event.position)
        raise TypeError(f"Unsupported event: {event!r}")

    def commit_pending(self) -> Optional[Geometry]:
        """Commit the active session at its last pointer position (select-away)."""
        if self._session is None or self._last_pointer is None:
            return None
        return self._end(self._last_pointer)

    def _begin(self, event: PointerDown) -> Geometry:
        if self._session is not None:
            raise TransformStateError(
                f"{self.object_id}: pointer-down while {self.state.value}"
            )
        if event.target == InteractionTarget.RESIZE_HANDLE and event.handle is None:
            raise TransformStateError(f"{self.object_id}: resize press without a handle")

        start = clamp_geometry(event.geometry)
        state = _STATE_FOR_TARGET[InteractionTarget(event.target)]
        pivot = (0.0, 0.0)
        start_angle = 0.0
        if state == InteractionState.ROTATING:
            cx, cy = start.center
            pivot = (event.origin[0] + cx, event.origin[1] + cy)
            start_angle = pointer_angle(pivot, event.position)

        self._session = TransformSession(
            state=state,
            start_pointer=event.position,
            start_geometry=start,
            handle=ResizeHandle(event.handle) if event.handle is not None else None,
            pivot=pivot,
            start_angle=start_angle,
        )
        self._candidate = start
        self._last_pointer = event.position
        logger.debug(f"{self.object_id}: {state.value} started at {event.position}")
        return start

    def _move(self, position: Point) -> Optional[Geometry]:
        if self._session is None:
            return None
        self._last_pointer = position
        self._candidate = self._compute(self._session, position)
        return self._candidate

    def _end(self, position: Point) -> Optional[Geometry]:
        session = self._session
        if session is None:
            return None
        final = self._compute(session, position)
        self._session = None
        self._candidate = None
        self._last_pointer = None
        logger.debug(f"{self.object_id}: {session.state.value} committed {final}")
        self._on_commit(final)
        return final

    def _compute(self, session: TransformSession, position: Point) -> Geometry:
        """Geometry for the session with the pointer at position."""
        dx = position[0] - session.start_pointer[0]
        dy = position[1] - session.start_pointer[1]
        start = session.start_geometry

        if session.state == InteractionState.DRAGGING:
            return translate(start, dx, dy)
        if session.state == InteractionState.RESIZING:
            return resize_from_handle(start, session.handle, dx, dy, self.lock_aspect)
        # ROTATING
        current_angle = pointer_angle(session.pivot, position)
        rotation = normalize_rotation(start.rotation + (current_angle - session.start_angle))
        return clamp_geometry(
            Geometry(start.x, start.y, start.width, start.height, rotation)
        )
