"""
Tests for page surfaces and painting.
"""

import pytest
from PySide6.QtCore import QRectF
from PySide6.QtGui import QColor, QImage, QPainter

from paper_studio.builder.content import render_answer
from paper_studio.builder.layout import Block, LayoutConfig, MeasuredBlock, Page, paginate
from paper_studio.builder.output import contain_rect, render_page, render_pages
from paper_studio.core.models import Geometry, OverlayKind, OverlayObject, Question, QuestionType


def _overlay(oid, page_index, **kwargs):
    kind = OverlayKind.IMAGE if "src" in kwargs else OverlayKind.TEXTBOX
    geometry = kwargs.pop("geometry", Geometry(100, 100, 150, 100))
    return OverlayObject(oid, kind, geometry, page_index, **kwargs)


def _paint(surface, images=None):
    width, height = surface.size
    image = QImage(width, height, QImage.Format.Format_RGBA8888)
    image.fill(QColor(0, 0, 0, 0))
    painter = QPainter(image)
    try:
        surface.paint(painter, images or {})
    finally:
        painter.end()
    return image


class TestRenderPages:

    def test_when_rendered_then_overlays_split_by_page_in_z_order(self):
        layout = paginate(
            [MeasuredBlock(Block(i, "<p>x</p>"), 600) for i in range(2)], 993
        )
        overlays = [
            _overlay("t1", 1, html="a"),
            _overlay("t2", 0, html="b"),
            _overlay("t3", 1, html="c"),
        ]

        surfaces = render_pages(layout, overlays, LayoutConfig())

        assert [s.index for s in surfaces] == [0, 1]
        assert [o.id for o in surfaces[0].overlays] == ["t2"]
        assert [o.id for o in surfaces[1].overlays] == ["t1", "t3"]

    def test_when_surface_built_then_page_pixel_size(self):
        surface = render_page(Page(0, ()), [], LayoutConfig())

        assert surface.size == (794, 1123)

    def test_when_same_image_used_twice_then_listed_once(self):
        overlays = [_overlay("a", 0, src="x.png"), _overlay("b", 0, src="x.png"), _overlay("c", 0, src="y.png")]

        surface = render_page(Page(0, ()), overlays, LayoutConfig())

        assert surface.image_sources == ["x.png", "y.png"]


class TestContainRect:

    def test_when_square_image_in_wide_box_then_centered_horizontally(self):
        rect = contain_rect(QRectF(0, 0, 150, 100), 200, 200)

        assert (rect.x(), rect.y(), rect.width(), rect.height()) == (25, 0, 100, 100)

    def test_when_wide_image_in_square_box_then_centered_vertically(self):
        rect = contain_rect(QRectF(0, 0, 100, 100), 400, 100)

        assert (rect.x(), rect.y(), rect.width(), rect.height()) == (0, 37.5, 100, 25)


class TestPaint:

    def test_when_painted_then_background_white_and_border_drawn(self, qapp):
        surface = render_page(Page(0, ()), [], LayoutConfig(border_width=2))

        image = _paint(surface)

        assert image.pixelColor(400, 500) == QColor("#ffffff")
        assert image.pixelColor(0, 500).lightness() < 50

    def test_when_image_overlay_painted_then_pixels_inside_box(self, qapp):
        red = QImage(10, 10, QImage.Format.Format_RGBA8888)
        red.fill(QColor("#ff0000"))
        overlay = _overlay("img", 0, src="red.png", geometry=Geometry(300, 300, 100, 100))
        surface = render_page(Page(0, ()), [overlay], LayoutConfig(border_width=0))

        image = _paint(surface, {"red.png": red})

        assert image.pixelColor(350, 350).red() > 200
        assert image.pixelColor(350, 350).green() < 50
        assert image.pixelColor(250, 250) == QColor("#ffffff")

    def test_when_overlay_half_transparent_then_blended(self, qapp):
        black = QImage(10, 10, QImage.Format.Format_RGBA8888)
        black.fill(QColor("#000000"))
        overlay = _overlay("img", 0, src="k.png", geometry=Geometry(300, 300, 100, 100), opacity=0.5)
        surface = render_page(Page(0, ()), [overlay], LayoutConfig(border_width=0))

        image = _paint(surface, {"k.png": black})

        assert 100 < image.pixelColor(350, 350).red() < 160

    def test_when_image_not_loaded_then_lookup_error(self, qapp):
        overlay = _overlay("img", 0, src="missing.png")
        surface = render_page(Page(0, ()), [overlay], LayoutConfig())

        with pytest.raises(LookupError):
            _paint(surface)

    def test_when_block_painted_then_placed_at_margins(self, qapp):
        config = LayoutConfig(border_width=0)
        markup = (
            '<table width="100%"><tr><td bgcolor="#000000">'
            "&nbsp;<br/>&nbsp;<br/>&nbsp;</td></tr></table>"
        )
        block = MeasuredBlock(Block(0, markup), 60)
        surface = render_page(Page(0, (block,)), [], config)

        image = _paint(surface)

        row = config.margin_top + 10
        inked = [x for x in range(config.page_width) if image.pixelColor(x, row).lightness() < 128]
        assert inked
        assert min(inked) >= config.margin_left - 1
        assert max(inked) <= config.page_width - config.margin_right + 1
        assert image.pixelColor(config.page_width // 2, config.margin_top - 10) == QColor("#ffffff")

    def test_when_answer_box_painted_then_cell_shaded(self, qapp):
        config = LayoutConfig(border_width=0)
        question = Question(QuestionType.TRUE_FALSE, "The sun is a star.", 1, answer="True")
        block = MeasuredBlock(Block(0, render_answer(question)), 80)
        surface = render_page(Page(0, (block,)), [], config)

        image = _paint(surface)

        # Right-hand side of the box, clear of the answer text
        x = config.page_width - config.margin_right - 30
        shaded = [
            y for y in range(config.margin_top, config.margin_top + 60)
            if image.pixelColor(x, y).name() == "#f8fafc"
        ]
        assert shaded
