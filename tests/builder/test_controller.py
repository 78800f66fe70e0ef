"""
End-to-end tests for the build controller.
"""

import asyncio
import json

import pytest
from pypdf import PdfReader

from paper_studio.builder import BuildConfig, BuildError, build_paper, layout_paper
from paper_studio.builder.editor import AnchorPolicy
from paper_studio.builder.layout import LayoutConfig
from paper_studio.builder.output import CancellationToken, ExportCancelled
from paper_studio.core.models import Geometry, OverlayKind, OverlayObject, PaperData, Question, QuestionType
from paper_studio.core.utils import save_overlays


def _long_paper(n=12):
    return PaperData(
        subject="Long Test",
        questions=tuple(Question(QuestionType.LONG_ANSWER, f"Question {i}", 5) for i in range(n)),
    )


class TestLayoutPaper:

    def test_when_blocks_tall_then_split_across_pages(self, fake_surface_factory):
        # Header + section + 12 questions at 200px (+10 spacing) on 993px pages
        surface = fake_surface_factory({}, default=200)

        layout = asyncio.run(layout_paper(_long_paper(), LayoutConfig(settle_delay=0), surface=surface))

        assert layout.total_blocks == 14
        assert layout.page_count == 4
        assert all(p.height_used <= 993 for p in layout.pages)

    def test_when_measurement_fails_then_warning_carried(self, fake_surface_factory):
        surface = fake_surface_factory({}, failing={3})

        layout = asyncio.run(layout_paper(_long_paper(3), LayoutConfig(settle_delay=0), surface=surface))

        assert any("Block 3" in w for w in layout.warnings)


class TestBuildPaper:

    def test_when_built_then_pdf_written_with_page_count(self, qapp, tmp_path, fake_surface_factory):
        # Arrange
        config = BuildConfig(output_dir=tmp_path, layout=LayoutConfig(settle_delay=0), oversample=1)
        surface = fake_surface_factory({}, default=200)

        # Act
        result = asyncio.run(build_paper(_long_paper(), config, surface=surface))

        # Assert
        assert result.pdf_path == tmp_path / "Long_Test_Question_Paper.pdf"
        assert result.page_count == 4
        assert len(PdfReader(str(result.pdf_path)).pages) == 4

    def test_when_real_layout_then_answer_key_exported(self, qapp, tmp_path, sample_paper):
        config = BuildConfig(
            output_dir=tmp_path,
            answer_key=True,
            layout=LayoutConfig(settle_delay=0),
            oversample=1,
        )

        result = asyncio.run(build_paper(sample_paper, config))

        assert result.pdf_path.name == "General_Science_Answer_Key.pdf"
        assert result.page_count >= 1
        assert len(PdfReader(str(result.pdf_path)).pages) == result.page_count

    def test_when_overlay_past_last_page_then_reanchored(self, qapp, tmp_path, fake_surface_factory, sample_image):
        overlays = [
            OverlayObject("img-1", OverlayKind.IMAGE, Geometry(10, 10, 100, 50), 7, src=str(sample_image)),
            OverlayObject("text-1", OverlayKind.TEXTBOX, Geometry(10, 200, 200, 60), 0, html="<b>Name:</b>"),
        ]
        config = BuildConfig(output_dir=tmp_path, layout=LayoutConfig(settle_delay=0), oversample=1)

        result = asyncio.run(
            build_paper(_long_paper(2), config, overlays=overlays, surface=fake_surface_factory({}))
        )

        assert result.page_count == 1
        assert result.reanchored == ("img-1",)
        assert result.overlay_count == 2

    def test_when_drop_policy_then_orphans_not_drawn(self, qapp, tmp_path, fake_surface_factory):
        overlays = [OverlayObject("img-1", OverlayKind.IMAGE, Geometry(0, 0, 50, 50), 4, src="x.png")]
        config = BuildConfig(
            output_dir=tmp_path,
            layout=LayoutConfig(settle_delay=0),
            oversample=1,
            anchor_policy=AnchorPolicy.DROP,
        )

        result = asyncio.run(
            build_paper(_long_paper(2), config, overlays=overlays, surface=fake_surface_factory({}))
        )

        assert result.overlay_count == 0

    def test_when_overlays_path_given_then_loaded(self, qapp, tmp_path, fake_surface_factory):
        path = tmp_path / "overlays.json"
        save_overlays(
            [OverlayObject("t", OverlayKind.TEXTBOX, Geometry(0, 0, 100, 40), 0, html="Hi")], path
        )
        config = BuildConfig(
            output_dir=tmp_path / "out",
            layout=LayoutConfig(settle_delay=0),
            oversample=1,
            overlays_path=path,
        )

        result = asyncio.run(build_paper(_long_paper(1), config, surface=fake_surface_factory({})))

        assert result.overlay_count == 1

    def test_when_overlay_file_invalid_then_build_error(self, qapp, tmp_path, fake_surface_factory):
        path = tmp_path / "overlays.json"
        path.write_text(json.dumps({"version": 42, "overlays": []}))
        config = BuildConfig(output_dir=tmp_path, layout=LayoutConfig(settle_delay=0), overlays_path=path)

        with pytest.raises(BuildError, match="overlays"):
            asyncio.run(build_paper(_long_paper(1), config, surface=fake_surface_factory({})))

    def test_when_image_missing_then_build_error_and_no_pdf(self, qapp, tmp_path, fake_surface_factory):
        overlays = [OverlayObject("img-1", OverlayKind.IMAGE, Geometry(0, 0, 50, 50), 0, src="gone.png")]
        config = BuildConfig(
            output_dir=tmp_path / "out",
            layout=LayoutConfig(settle_delay=0),
            oversample=1,
            assets_dir=tmp_path,
        )

        with pytest.raises(BuildError, match="export"):
            asyncio.run(
                build_paper(_long_paper(1), config, overlays=overlays, surface=fake_surface_factory({}))
            )

        assert not (tmp_path / "out" / "Long_Test_Question_Paper.pdf").exists()

    def test_when_cancelled_then_export_cancelled_propagates(self, qapp, tmp_path, fake_surface_factory):
        token = CancellationToken()
        token.cancel()
        config = BuildConfig(output_dir=tmp_path, layout=LayoutConfig(settle_delay=0), oversample=1)

        with pytest.raises(ExportCancelled):
            asyncio.run(
                build_paper(_long_paper(1), config, surface=fake_surface_factory({}), cancel=token)
            )


class TestBuildConfig:

    def test_when_oversample_zero_then_raises(self):
        with pytest.raises(ValueError):
            BuildConfig(oversample=0)

    def test_when_filename_not_pdf_then_raises(self):
        with pytest.raises(ValueError):
            BuildConfig(filename="paper.txt")
