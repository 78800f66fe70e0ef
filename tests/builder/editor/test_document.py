"""
Tests for the overlay document: storage, anchoring and pointer routing.
"""

import pytest

from paper_studio.builder.editor import (
    AnchorPolicy,
    InteractionTarget,
    OverlayDocument,
    OverlayNotFoundError,
)
from paper_studio.core.models import Geometry, OverlayKind, OverlayObject


@pytest.fixture
def doc():
    return OverlayDocument(page_count=3)


class TestInsertAndDelete:

    def test_when_image_dropped_then_centered_on_pointer(self, doc):
        img = doc.drop_image("logo.png", page_index=1, pointer=(200, 120))

        assert (img.geometry.x, img.geometry.y) == (125, 70)
        assert (img.geometry.width, img.geometry.height) == (150, 100)
        assert img.kind == OverlayKind.IMAGE

    def test_when_dropped_near_corner_then_clamped_to_page(self, doc):
        img = doc.drop_image("logo.png", page_index=0, pointer=(10, 10))

        assert (img.geometry.x, img.geometry.y) == (0, 0)

    def test_when_added_then_ids_unique_and_z_ordered(self, doc):
        a = doc.add_image("a.png", 0)
        b = doc.add_text_box("<p>Note</p>", 0)
        c = doc.add_image("c.png", 0)

        assert len({a.id, b.id, c.id}) == 3
        assert [o.id for o in doc.objects_on_page(0)] == [a.id, b.id, c.id]

    def test_when_page_missing_then_insert_rejected(self, doc):
        with pytest.raises(ValueError):
            doc.add_image("a.png", page_index=3)

    def test_when_duplicate_id_then_insert_rejected(self, doc):
        obj = doc.add_image("a.png", 0)

        with pytest.raises(ValueError, match="Duplicate"):
            doc.insert(obj)

    def test_when_deleted_then_gone(self, doc):
        obj = doc.add_image("a.png", 0)

        doc.delete(obj.id)

        assert obj.id not in doc
        with pytest.raises(OverlayNotFoundError):
            doc.get(obj.id)

    def test_when_unknown_id_deleted_then_key_error(self, doc):
        with pytest.raises(KeyError):
            doc.delete("nope")

    def test_when_changed_then_callback_notified(self):
        seen = []
        doc = OverlayDocument(page_count=1, on_change=seen.append)

        obj = doc.add_image("a.png", 0)

        assert seen == [obj]


class TestReanchor:

    def _doc_with_pages(self):
        doc = OverlayDocument(page_count=3)
        keep = doc.add_image("a.png", 0)
        lost = doc.add_text_box("<p>x</p>", 2)
        return doc, keep, lost

    def test_when_pages_shrink_then_moved_to_last_page(self):
        doc, keep, lost = self._doc_with_pages()

        affected = doc.reanchor(2)

        assert affected == [lost.id]
        assert doc.get(lost.id).page_index == 1
        assert doc.get(keep.id).page_index == 0

    def test_when_drop_policy_then_deleted(self):
        doc, keep, lost = self._doc_with_pages()

        doc.reanchor(2, AnchorPolicy.DROP)

        assert lost.id not in doc
        assert keep.id in doc

    def test_when_no_pages_left_then_everything_dropped(self):
        doc, _, _ = self._doc_with_pages()

        doc.reanchor(0)

        assert len(doc) == 0


class TestPointerRouting:

    def test_when_dragged_then_committed_only_on_release(self, doc):
        obj = doc.add_image("a.png", 0, Geometry(0, 0, 150, 100))

        doc.pointer_down(obj.id, (10, 10))
        doc.pointer_move((60, 30))

        assert doc.get(obj.id).geometry.x == 0
        assert doc.display_geometry(obj.id).x == 50

        doc.pointer_up((60, 30))

        assert (doc.get(obj.id).geometry.x, doc.get(obj.id).geometry.y) == (50, 20)
        assert doc.active_object_id is None

    def test_when_other_object_pressed_then_previous_session_committed(self, doc):
        a = doc.add_image("a.png", 0, Geometry(0, 0, 150, 100))
        b = doc.add_image("b.png", 0, Geometry(300, 300, 150, 100))

        doc.pointer_down(a.id, (10, 10))
        doc.pointer_move((20, 10))
        doc.pointer_down(b.id, (310, 310))

        assert doc.get(a.id).geometry.x == 10
        assert doc.active_object_id == b.id

    def test_when_image_corner_resized_then_aspect_locked(self, doc):
        obj = doc.add_image("a.png", 0, Geometry(0, 0, 100, 50))

        doc.pointer_down(obj.id, (100, 50), InteractionTarget.RESIZE_HANDLE, "br")
        doc.pointer_up((150, 0))

        assert (doc.get(obj.id).geometry.width, doc.get(obj.id).geometry.height) == (150, 75)

    def test_when_text_box_corner_resized_then_free(self, doc):
        obj = doc.add_text_box("<p>x</p>", 0, Geometry(0, 0, 100, 50))

        doc.pointer_down(obj.id, (100, 50), InteractionTarget.RESIZE_HANDLE, "br")
        doc.pointer_up((150, 0))

        assert (doc.get(obj.id).geometry.width, doc.get(obj.id).geometry.height) == (150, 30)

    def test_when_deleted_mid_session_then_release_ignored(self, doc):
        obj = doc.add_image("a.png", 0)

        doc.pointer_down(obj.id, (0, 0))
        doc.delete(obj.id)

        assert doc.pointer_up((50, 50)) is None
        assert len(doc) == 0

    def test_when_loaded_from_objects_then_order_kept(self):
        objects = [
            OverlayObject(f"o{i}", OverlayKind.TEXTBOX, Geometry(0, 0, 50, 50), 0, html="x")
            for i in range(3)
        ]

        doc = OverlayDocument(objects, page_count=1)

        assert [o.id for o in doc.overlays] == ["o0", "o1", "o2"]
