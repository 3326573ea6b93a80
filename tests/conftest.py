"""Pytest configuration.

Qt runs on the offscreen platform so the widget tests work without a
display, and settings are written to a per-test config directory instead of
the user's real one.

A single ``QApplication`` is created before collection: any test that builds
a ``QPixmap`` needs one, whether or not it asks for ``qtbot``.
"""

import os
from typing import Any

import pytest
from PIL import Image

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

_APP: Any | None = None


def pytest_configure(config) -> None:
    """Ensure a QApplication exists before collecting/running tests."""
    # Import lazily so the Qt-free tests still run without PyQt6
    try:
        from PyQt6.QtWidgets import QApplication
    except ImportError:
        return

    global _APP
    # Keep a strong ref so it isn't GC'd mid-session
    _APP = QApplication.instance() or QApplication([])


def pytest_sessionfinish(session, exitstatus) -> None:
    """Let posted events settle before interpreter exit."""
    try:
        from PyQt6.QtWidgets import QApplication
    except ImportError:
        return

    app = QApplication.instance()
    if app is None:
        return
    app.quit()
    app.processEvents()


@pytest.fixture(autouse=True)
def isolated_config_dir(tmp_path, monkeypatch):
    directory = tmp_path / "config"
    directory.mkdir()
    monkeypatch.setattr("pinch_crop.settings.config_dir", lambda: directory)
    return directory


@pytest.fixture
def gradient_image():
    """8x6 greyscale image whose pixel value encodes its position (y * 8 + x)."""
    img = Image.new("L", (8, 6))
    img.putdata([y * 8 + x for y in range(6) for x in range(8)])
    return img
