"""
Tests for the per-object transform state machine.
"""

import pytest

from paper_studio.builder.editor import (
    InteractionState,
    InteractionTarget,
    PointerDown,
    PointerMove,
    PointerUp,
    TransformController,
    TransformStateError,
)
from paper_studio.core.models.geometry import MIN_SIZE, Geometry, ResizeHandle


@pytest.fixture
def committed():
    return []


@pytest.fixture
def controller(committed):
    return TransformController("img-1", committed.append)


class TestDragging:

    def test_when_dragged_then_candidate_follows_pointer_without_commit(self, controller, committed):
        # Arrange
        controller.dispatch(PointerDown((10, 10), Geometry(0, 0, 100, 50)))

        # Act
        candidate = controller.dispatch(PointerMove((30, 40)))

        # Assert
        assert (candidate.x, candidate.y) == (20, 30)
        assert controller.state == InteractionState.DRAGGING
        assert committed == []

    def test_when_released_then_committed_once_and_idle(self, controller, committed):
        controller.dispatch(PointerDown((10, 10), Geometry(0, 0, 100, 50)))
        controller.dispatch(PointerMove((15, 15)))

        final = controller.dispatch(PointerUp((30, 40)))

        assert committed == [final]
        assert (final.x, final.y) == (20, 30)
        assert controller.state == InteractionState.IDLE
        assert controller.candidate is None

    def test_when_released_without_moving_then_still_commits(self, controller, committed):
        start = Geometry(5, 5, 100, 50)
        controller.dispatch(PointerDown((10, 10), start))

        controller.dispatch(PointerUp((10, 10)))

        assert committed == [start]


class TestResizing:

    def test_when_corner_dragged_with_lock_then_aspect_kept(self, controller, committed):
        controller.dispatch(
            PointerDown(
                (100, 50),
                Geometry(0, 0, 100, 50),
                InteractionTarget.RESIZE_HANDLE,
                ResizeHandle.BOTTOM_RIGHT,
            )
        )

        controller.dispatch(PointerUp((150, 1000)))

        assert (committed[0].width, committed[0].height) == (150, 75)

    def test_when_text_box_corner_dragged_then_free_resize(self, committed):
        controller = TransformController("text-1", committed.append, lock_aspect=False)
        controller.dispatch(
            PointerDown((100, 50), Geometry(0, 0, 100, 50), InteractionTarget.RESIZE_HANDLE, "br")
        )

        controller.dispatch(PointerUp((120, 120)))

        assert (committed[0].width, committed[0].height) == (120, 120)

    def test_when_shrunk_mid_drag_then_candidate_already_clamped(self, controller):
        controller.dispatch(
            PointerDown((100, 100), Geometry(0, 0, 100, 100), InteractionTarget.RESIZE_HANDLE, "r")
        )

        candidate = controller.dispatch(PointerMove((-500, 100)))

        assert candidate.width == MIN_SIZE

    def test_when_resize_without_handle_then_raises(self, controller):
        with pytest.raises(TransformStateError):
            controller.dispatch(
                PointerDown((0, 0), Geometry(0, 0, 100, 100), InteractionTarget.RESIZE_HANDLE)
            )


class TestRotating:

    def test_when_pointer_quarter_turn_around_pivot_then_90(self, controller, committed):
        # Geometry centered at (100, 100) on a page whose origin is (0, 0)
        controller.dispatch(
            PointerDown((150, 100), Geometry(50, 75, 100, 50), InteractionTarget.ROTATE_HANDLE)
        )

        controller.dispatch(PointerUp((100, 150)))

        assert committed[0].rotation == pytest.approx(90.0)

    def test_when_page_offset_then_pivot_in_screen_space(self, controller, committed):
        controller.dispatch(
            PointerDown(
                (350, 300),
                Geometry(50, 75, 100, 50),
                InteractionTarget.ROTATE_HANDLE,
                origin=(200, 200),
            )
        )

        assert controller.session.pivot == (300, 300)
        controller.dispatch(PointerUp((300, 350)))
        assert committed[0].rotation == pytest.approx(90.0)

    def test_when_same_path_twice_then_same_rotation(self, committed):
        path = [(150, 100), (130, 130), (100, 150), (60, 120), (50, 99)]
        results = []
        for _ in range(2):
            controller = TransformController("img-1", results.append)
            controller.dispatch(
                PointerDown(path[0], Geometry(50, 75, 100, 50, 30), InteractionTarget.ROTATE_HANDLE)
            )
            for point in path[1:]:
                controller.dispatch(PointerMove(point))
            controller.dispatch(PointerUp(path[-1]))

        assert results[0].rotation == results[1].rotation
        assert 0 <= results[0].rotation < 360


class TestStateRules:

    def test_when_move_or_up_while_idle_then_ignored(self, controller, committed):
        assert controller.dispatch(PointerMove((1, 1))) is None
        assert controller.dispatch(PointerUp((1, 1))) is None
        assert committed == []

    def test_when_down_while_active_then_raises(self, controller):
        controller.dispatch(PointerDown((0, 0), Geometry(0, 0, 100, 100)))

        with pytest.raises(TransformStateError):
            controller.dispatch(PointerDown((0, 0), Geometry(0, 0, 100, 100)))

    def test_when_commit_pending_then_commits_at_last_pointer(self, controller, committed):
        controller.dispatch(PointerDown((0, 0), Geometry(0, 0, 100, 100)))
        controller.dispatch(PointerMove((25, 5)))

        controller.commit_pending()

        assert (committed[0].x, committed[0].y) == (25, 5)
        assert not controller.is_active
