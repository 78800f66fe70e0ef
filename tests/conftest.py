import base64
import io
import os
import sys
from pathlib import Path

import pytest
from PIL import Image

# Add src to sys.path so we can import paper_studio
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

# Qt-backed tests never open windows
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from paper_studio.core.models.paper import MatchingOptions, PaperData, Question, QuestionType  # noqa: E402


class FakeMeasurementSurface:
    """
    Measurement surface returning preset heights per block index.

    Indexes in `failing` raise on natural_height; every rendered and
    disposed handle is recorded.
    """

    def __init__(self, heights, failing=(), default=50.0):
        self.heights = dict(heights)
        self.failing = set(failing)
        self.default = default
        self.rendered = []
        self.disposed = []

    def render(self, block, width):
        self.rendered.append((block.index, width))
        return block

    def natural_height(self, handle):
        if handle.index in self.failing:
            raise RuntimeError(f"block {handle.index} detached")
        return self.heights.get(handle.index, self.default)

    def dispose(self, handle):
        self.disposed.append(handle.index)


# Common test fixtures
@pytest.fixture
def fake_surface_factory():
    """Factory for FakeMeasurementSurface."""
    return FakeMeasurementSurface


@pytest.fixture
def sample_image(tmp_path: Path):
    """Create a simple 200x100 test image."""
    img = Image.new("RGB", (200, 100), color="red")
    img_path = tmp_path / "sample.png"
    img.save(img_path)
    return img_path


@pytest.fixture
def png_data_uri():
    """A 20x10 blue PNG as a data URI."""
    buf = io.BytesIO()
    Image.new("RGB", (20, 10), color="blue").save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


@pytest.fixture
def sample_paper():
    """Paper with one question of several types."""
    return PaperData(
        subject="General Science",
        school_name="Riverside High",
        class_name="9B",
        total_marks="20",
        time_allowed="1 hour",
        questions=(
            Question(QuestionType.SHORT_ANSWER, "Q1. Define osmosis.", 2, answer="Diffusion of water."),
            Question(
                QuestionType.MULTIPLE_CHOICE,
                "Which gas do plants absorb?",
                1,
                options=("Oxygen", "Carbon dioxide", "Nitrogen", "Helium"),
                answer="Carbon dioxide",
            ),
            Question(
                QuestionType.MATCH_THE_FOLLOWING,
                "Match the organ to its function.",
                3,
                options=MatchingOptions(("Heart", "Lungs"), ("Gas exchange", "Pumps blood")),
                answer={"i": "b", "ii": "a"},
            ),
            Question(QuestionType.TRUE_FALSE, "The sun is a star.", 1, answer="True"),
        ),
    )
