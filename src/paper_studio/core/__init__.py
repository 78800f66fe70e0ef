"""
Paper Studio Core Package

Shared data models and JSON helpers. Nothing in this package depends on
Qt or ReportLab, so it can be used by storage layers that never render.
"""

from .models import Geometry, OverlayKind, OverlayObject, PaperData, Question, QuestionType

__all__ = [
    "Geometry",
    "OverlayKind",
    "OverlayObject",
    "PaperData",
    "Question",
    "QuestionType",
]
