"""
Module: builder.qt_app

Purpose:
    Make sure a Qt GUI application object exists before text layout or
    painting. QTextDocument and QPainter need one for font access; no
    window is ever shown, so headless runs use the offscreen platform.

Key Functions:
    - ensure_gui_application(): Return the running app, creating one if needed

Dependencies:
    - PySide6.QtGui: QGuiApplication

Used By:
    - builder.layout.measurer: QtMeasurementSurface
    - builder.output.renderer / rasterizer
"""

from __future__ import annotations

import logging
import os
import sys

from PySide6.QtCore import QCoreApplication
from PySide6.QtGui import QGuiApplication

logger = logging.getLogger(__name__)

# Holds the application created here for the life of the process
_app: QGuiApplication | None = None


def ensure_gui_application() -> QCoreApplication:
    """
    Return the current Qt application, creating a QGuiApplication if none exists.

    Without a display (no DISPLAY/WAYLAND_DISPLAY on Linux) the offscreen
    platform plugin is selected unless QT_QPA_PLATFORM is already set.

    Raises:
        RuntimeError: If a non-GUI QCoreApplication is already running
    """
    app = QCoreApplication.instance()
    if app is not None:
        if not isinstance(app, QGuiApplication):
            raise RuntimeError("A QCoreApplication is running; text layout needs QGuiApplication")
        return app

    if sys.platform.startswith("linux") and not (
        os.environ.get("DISPLAY") or os.environ.get("WAYLAND_DISPLAY")
    ):
        os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

    global _app
    logger.debug(f"Creating QGuiApplication (platform={os.environ.get('QT_QPA_PLATFORM', 'default')})")
    _app = QGuiApplication(sys.argv[:1])
    return _app
