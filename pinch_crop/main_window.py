"""
Main application window.

Hosts the crop widget, lets the user pick an image and an aspect preset,
and writes the committed crop to disk.  Cancel discards the session.
"""

import logging
from pathlib import Path

from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QPushButton, QLabel,
    QFileDialog, QMessageBox, QStatusBar, QToolBar, QComboBox, QApplication,
)
from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QKeySequence, QShortcut

from pinch_crop.config import IMAGE_EXTENSIONS
from pinch_crop.settings import load_settings, preset_aspect
from pinch_crop.image_io import save_image
from pinch_crop.crop_widget import ImageCropperWidget, ImageLoaderThread
from pinch_crop.models import CropResult, SourceImage

logger = logging.getLogger(__name__)

_FALLBACK_NOTE = "Crop window did not cover the image; kept the full image."


def crop_status_message(result: CropResult, detail: str) -> str:
    """Status-bar text for a finished crop, noting a full-image fallback."""
    if result.fallback:
        return f"{_FALLBACK_NOTE} {detail}"
    return detail


class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("Pinch Crop")
        self.setMinimumSize(480, 560)

        # Screen-aware startup size, clamped to 80% of screen
        preferred_w, preferred_h = 900, 1000
        screen = QApplication.primaryScreen()
        if screen is not None:
            avail = screen.availableGeometry()
            preferred_w = min(preferred_w, int(avail.width() * 0.8))
            preferred_h = min(preferred_h, int(avail.height() * 0.8))
        self.resize(preferred_w, preferred_h)

        self._settings = load_settings()
        self._image_path: Path | None = None
        self._loader: ImageLoaderThread | None = None

        self._build_ui()
        self._apply_settings()
        self._update_button_states()

    # =========================================================================
    # UI construction
    # =========================================================================

    def _build_ui(self):
        self._build_toolbar()

        central = QWidget()
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(4, 4, 4, 4)

        self._crop_widget = ImageCropperWidget()
        self._crop_widget.cropped.connect(self._on_cropped)
        self._crop_widget.cancelled.connect(self._on_cancelled)
        self._crop_widget.viewport_changed.connect(self._update_zoom_label)
        self._crop_widget.extraction_failed.connect(self._on_extraction_failed)
        layout.addWidget(self._crop_widget, stretch=1)

        buttons = QHBoxLayout()
        buttons.addStretch()
        self._btn_cancel = QPushButton("Cancel")
        self._btn_cancel.setObjectName("cancelButton")
        self._btn_cancel.clicked.connect(self._crop_widget.cancel)
        buttons.addWidget(self._btn_cancel)
        buttons.addSpacing(40)
        self._btn_done = QPushButton("Done")
        self._btn_done.setObjectName("doneButton")
        self._btn_done.clicked.connect(self._commit)
        buttons.addWidget(self._btn_done)
        buttons.addStretch()
        layout.addLayout(buttons)

        self._status = QStatusBar()
        self.setStatusBar(self._status)
        self._zoom_label = QLabel("")
        self._status.addPermanentWidget(self._zoom_label)
        self._status.showMessage("Open an image to begin.")

        # --- Keyboard Shortcuts ---
        QShortcut(QKeySequence(Qt.Key.Key_Return), self, self._commit)
        QShortcut(QKeySequence(Qt.Key.Key_Escape), self, self._crop_widget.cancel)
        QShortcut(QKeySequence(Qt.Key.Key_R), self, self._crop_widget.reset_view)

    def _build_toolbar(self):
        toolbar = QToolBar("Main")
        toolbar.setMovable(False)
        self.addToolBar(toolbar)

        act_open = QAction("📂 Open Image", self)
        act_open.setShortcut(QKeySequence.StandardKey.Open)
        act_open.triggered.connect(self._select_image)
        toolbar.addAction(act_open)

        toolbar.addSeparator()
        toolbar.addWidget(QLabel(" Aspect: "))
        self._preset_combo = QComboBox()
        self._preset_combo.currentIndexChanged.connect(self._on_preset_selected)
        toolbar.addWidget(self._preset_combo)

        act_reset = QAction("⟲ Reset View", self)
        act_reset.triggered.connect(lambda: self._crop_widget.reset_view())
        toolbar.addAction(act_reset)

    def _apply_settings(self):
        s = self._settings
        self._crop_widget.set_scale_limits(s["min_scale"], s["max_scale"])
        self._crop_widget.set_crop_shape(self._crop_widget.crop_config().aspect_ratio, s["padding"])
        self._preset_combo.blockSignals(True)
        self._preset_combo.clear()
        for preset in s["aspect_presets"]:
            self._preset_combo.addItem(preset["name"])
        self._preset_combo.blockSignals(False)
        self._on_preset_selected(0)

    # =========================================================================
    # Image loading
    # =========================================================================

    def _select_image(self):
        patterns = " ".join(f"*{ext}" for ext in sorted(IMAGE_EXTENSIONS))
        path, _ = QFileDialog.getOpenFileName(self, "Open Image", "", f"Images ({patterns})")
        if path:
            self.open_image(Path(path))

    def open_image(self, path: Path):
        """Decode *path* in the background and start a crop session on it."""
        if self._crop_widget.is_busy():
            return
        self._crop_widget.clear()
        self._crop_widget.set_loading(True)
        self._status.showMessage(f"Loading {path.name}…")

        # Drop any previous loader
        if self._loader is not None:
            try:
                self._loader.finished.disconnect()
                self._loader.error.disconnect()
            except (TypeError, RuntimeError):
                pass  # Already disconnected or destroyed
            if self._loader.isRunning():
                self._loader.wait(500)

        self._image_path = path
        self._loader = ImageLoaderThread(path, parent=self)
        self._loader.finished.connect(lambda source, p=path: self._on_image_loaded(p, source))
        self._loader.error.connect(self._on_image_load_error)
        self._loader.start()

    def _on_image_loaded(self, path: Path, source: SourceImage):
        if path != self._image_path:
            return  # Another image was opened before loading finished
        self._crop_widget.set_source(source)
        w, h = source.pixel_size
        self._status.showMessage(f"{path.name} — {w}×{h}. Pinch, scroll or drag to frame the crop.")
        self._update_button_states()

    def _on_image_load_error(self, error: str):
        self._crop_widget.set_loading(False)
        self._status.showMessage(f"Failed to load image: {error}")
        QMessageBox.warning(self, "Open Failed", f"Could not open image:\n{error}")

    # =========================================================================
    # Presets / viewport info
    # =========================================================================

    def _on_preset_selected(self, idx: int):
        presets = self._settings["aspect_presets"]
        if not 0 <= idx < len(presets):
            return
        self._crop_widget.set_crop_shape(preset_aspect(presets[idx]))

    def _update_zoom_label(self):
        st = self._crop_widget.state()
        self._zoom_label.setText(f"Zoom {st.scale:.2f}×  Offset ({st.offset.x:.0f}, {st.offset.y:.0f})")

    # =========================================================================
    # Commit / cancel
    # =========================================================================

    def _commit(self):
        if not self._crop_widget.has_image() or self._crop_widget.is_busy():
            return
        self._status.showMessage("Cropping…")
        self._crop_widget.commit()
        self._update_button_states()

    def _on_cropped(self, result: CropResult):
        self._update_button_states()
        fmt = self._settings["output_format"]
        suffix = ".jpg" if fmt == "JPEG" else ".png"
        stem = self._image_path.stem if self._image_path else "image"
        default = (self._image_path.parent if self._image_path else Path.home()) / f"{stem}-cropped{suffix}"
        path, _ = QFileDialog.getSaveFileName(self, "Save Cropped Image", str(default))
        if not path:
            self._status.showMessage(crop_status_message(result, "Crop discarded."))
            return
        try:
            out = save_image(result.image, Path(path), fmt, self._settings["jpeg_quality"])
        except OSError as exc:
            logger.error("Could not save crop to %s: %s", path, exc)
            QMessageBox.critical(self, "Save Failed", f"Could not save image:\n{exc}")
            return
        w, h = result.image.pixel_size
        self._status.showMessage(crop_status_message(result, f"Saved {w}×{h} crop to {out}"))

    def _on_cancelled(self):
        self._image_path = None
        self._status.showMessage("Crop cancelled.")
        self._update_button_states()

    def _on_extraction_failed(self, error: str):
        self._update_button_states()
        QMessageBox.critical(self, "Crop Failed", f"Could not crop image:\n{error}")

    def _update_button_states(self):
        has_image = self._crop_widget.has_image()
        busy = self._crop_widget.is_busy()
        self._btn_done.setEnabled(has_image and not busy)
        self._btn_cancel.setEnabled(has_image and not busy)

    def closeEvent(self, event):
        """Wait for background work before closing."""
        if self._loader is not None and self._loader.isRunning():
            self._loader.wait()
        self._crop_widget.shutdown()
        super().closeEvent(event)
