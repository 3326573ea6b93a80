"""
Interactive pan/zoom crop widget and Qt image helpers.

This module contains everything that touches both Qt **and** image display:
``pil_to_qpixmap``, the background ``ImageLoaderThread`` and
``CropExtractionThread``, and the ``ImageCropperWidget`` editor.

The widget is a thin adapter: pinch, wheel and drag events are translated
into ``ViewportState`` updates, and all layout math comes from
``pinch_crop.resolver`` so that what is painted is exactly what gets cropped.
"""

import logging
from pathlib import Path

from PIL import Image
from PyQt6.QtWidgets import QWidget, QSizePolicy
from PyQt6.QtCore import Qt, QEvent, QRectF, QPointF, pyqtSignal, QThread
from PyQt6.QtGui import (
    QPainter, QPixmap, QColor, QPen, QImage,
    QMouseEvent, QPaintEvent, QResizeEvent, QWheelEvent,
)

from pinch_crop.config import (
    BACKGROUND_RGB, BORDER_WIDTH, DEFAULT_ASPECT_RATIO, DEFAULT_PADDING,
    MIN_SCALE, MAX_SCALE, OVERLAY_ALPHA, WHEEL_ZOOM_STEP,
)
from pinch_crop.image_io import load_source_image
from pinch_crop.models import CropConfig, Point, Rect, Size, SourceImage
from pinch_crop.resolver import crop_window_rect, display_rect, overlay_rects
from pinch_crop.viewport import ViewportState
from pinch_crop.worker import ExtractionTask

logger = logging.getLogger(__name__)


# =============================================================================
# Qt ↔ PIL helpers
# =============================================================================

def pil_to_qpixmap(pil_img: Image.Image) -> QPixmap:
    """Convert a PIL Image to QPixmap."""
    img_rgba = pil_img.convert("RGBA")
    data = img_rgba.tobytes("raw", "RGBA")
    qimg = QImage(data, img_rgba.width, img_rgba.height, QImage.Format.Format_RGBA8888)
    # QImage does not own *data*; copy before it goes out of scope
    return QPixmap.fromImage(qimg.copy())


def _qrect(rect: Rect) -> QRectF:
    return QRectF(rect.x, rect.y, rect.width, rect.height)


# =============================================================================
# Background workers
# =============================================================================

class ImageLoaderThread(QThread):
    """Background thread for decoding images (especially large PSDs)."""
    finished = pyqtSignal(object)  # SourceImage
    error = pyqtSignal(str)

    def __init__(self, path: Path, density: float = 1.0, parent=None):
        super().__init__(parent)
        self._path = path
        self._density = density

    def run(self):
        try:
            self.finished.emit(load_source_image(self._path, self._density))
        except Exception as e:
            logger.exception("Failed to load %s", self._path)
            self.error.emit(str(e))


class CropExtractionThread(QThread):
    """Runs one ``ExtractionTask`` off the UI thread."""
    finished = pyqtSignal(object)  # CropResult
    error = pyqtSignal(str)

    def __init__(self, task: ExtractionTask, parent=None):
        super().__init__(parent)
        self._task = task

    def run(self):
        try:
            self.finished.emit(self._task.run())
        except Exception as e:
            logger.exception("Crop extraction failed")
            self.error.emit(str(e))


# =============================================================================
# Image Cropper Widget — pan/zoom image under a fixed crop window
# =============================================================================

class ImageCropperWidget(QWidget):
    """Shows an image behind a fixed crop window; the user moves the image."""

    cropped = pyqtSignal(object)  # CropResult
    cancelled = pyqtSignal()
    viewport_changed = pyqtSignal()
    extraction_failed = pyqtSignal(str)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setMinimumSize(320, 320)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self.grabGesture(Qt.GestureType.PinchGesture)

        self._source: SourceImage | None = None
        self._pixmap: QPixmap | None = None
        self._aspect_ratio = DEFAULT_ASPECT_RATIO
        self._padding = DEFAULT_PADDING
        self._min_scale = MIN_SCALE
        self._max_scale = MAX_SCALE
        self._state = ViewportState.initial(self._min_scale, self._max_scale)

        # Interaction state
        self._drag_start: QPointF | None = None
        self._loading = False
        self._extractor: CropExtractionThread | None = None

    # --- Public API ---

    def set_loading(self, loading: bool):
        """Show/hide loading indicator."""
        self._loading = loading
        self.update()

    def set_source(self, source: SourceImage):
        """Start a new crop session on *source*."""
        self._loading = False
        self._source = source
        self._pixmap = pil_to_qpixmap(source.image)
        self._state = ViewportState.initial(self._min_scale, self._max_scale)
        self.viewport_changed.emit()
        self.update()

    def set_crop_shape(self, aspect_ratio: float, padding: float | None = None):
        """Set the crop window's aspect ratio and (optionally) its inset."""
        self._aspect_ratio = aspect_ratio
        if padding is not None:
            self._padding = padding
        self.update()

    def set_scale_limits(self, min_scale: float, max_scale: float):
        """Zoom bounds for the next session."""
        self._min_scale = min_scale
        self._max_scale = max_scale

    def state(self) -> ViewportState:
        return self._state

    def has_image(self) -> bool:
        """Return True if an image is loaded and ready for cropping."""
        return self._source is not None

    def is_busy(self) -> bool:
        return self._extractor is not None

    def crop_config(self) -> CropConfig:
        """Crop window layout for the widget's current size."""
        return CropConfig(
            aspect_ratio=self._aspect_ratio,
            container_size=Size(self.width(), self.height()),
            padding=self._padding,
        )

    def reset_view(self):
        self._state = self._state.reset()
        self.viewport_changed.emit()
        self.update()

    def commit(self):
        """Extract the crop in the background; emits ``cropped`` when done."""
        if self._source is None or self._extractor is not None:
            return
        state = self._state.end_gesture()
        task = ExtractionTask(self._source, state, self.crop_config())
        self._extractor = CropExtractionThread(task, self)
        self._extractor.finished.connect(self._on_extracted)
        self._extractor.error.connect(self._on_extraction_error)
        self._loading = True
        self.update()
        self._extractor.start()

    def cancel(self):
        """Discard the session without producing output."""
        if self._extractor is not None:
            return
        self.clear()
        self.cancelled.emit()

    def shutdown(self):
        """Block until a running extraction thread has finished."""
        if self._extractor is not None:
            self._extractor.wait()

    def clear(self):
        self._source = None
        self._pixmap = None
        self._drag_start = None
        self._state = ViewportState.initial(self._min_scale, self._max_scale)
        self.update()

    def _on_extracted(self, result):
        self._finish_extraction()
        self.clear()
        self.cropped.emit(result)

    def _on_extraction_error(self, message: str):
        self._finish_extraction()
        self.update()
        self.extraction_failed.emit(message)

    def _finish_extraction(self):
        self._extractor.wait()
        self._extractor.deleteLater()
        self._extractor = None
        self._loading = False

    # --- Painting ---

    def paintEvent(self, event: QPaintEvent):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        painter.fillRect(self.rect(), QColor(*BACKGROUND_RGB))

        if not self._pixmap:
            painter.setPen(QColor(128, 128, 128))
            msg = "Loading image…" if self._loading else "No image loaded"
            painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, msg)
            painter.end()
            return

        config = self.crop_config()
        dest = display_rect(self._source.intrinsic_size, self._state, config.container_size)
        painter.drawPixmap(_qrect(dest), self._pixmap, QRectF(self._pixmap.rect()))

        # Dim everything outside the crop window
        dim = QColor(0, 0, 0, OVERLAY_ALPHA)
        for strip in overlay_rects(config):
            painter.fillRect(_qrect(strip), dim)

        painter.setPen(QPen(QColor(255, 255, 255), BORDER_WIDTH))
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawRect(_qrect(crop_window_rect(config)))

        if self._loading:
            painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, "Cropping…")

        painter.end()

    def resizeEvent(self, event: QResizeEvent):
        self.update()
        super().resizeEvent(event)

    # --- Gestures ---

    def event(self, event: QEvent) -> bool:
        if event.type() == QEvent.Type.Gesture:
            return self._pinch_event(event)
        return super().event(event)

    def _pinch_event(self, event) -> bool:
        pinch = event.gesture(Qt.GestureType.PinchGesture)
        if pinch is None or not self._accepts_input():
            return False
        gesture_state = pinch.state()
        if gesture_state == Qt.GestureState.GestureStarted:
            self._state = self._state.begin_gesture()
        if gesture_state == Qt.GestureState.GestureCanceled:
            # Back to the last committed zoom
            self._state = self._state.update_scale(1.0)
        else:
            self._state = self._state.update_scale(pinch.totalScaleFactor())
        if gesture_state in (Qt.GestureState.GestureFinished, Qt.GestureState.GestureCanceled):
            self._state = self._state.end_scale_gesture()
        event.accept(pinch)
        self.viewport_changed.emit()
        self.update()
        return True

    def wheelEvent(self, event: QWheelEvent):
        if not self._accepts_input():
            return
        notches = event.angleDelta().y() / 120
        if notches == 0:
            return
        # Each wheel step is a complete magnification gesture
        self._state = self._state.update_scale(WHEEL_ZOOM_STEP ** notches).end_scale_gesture()
        self.viewport_changed.emit()
        self.update()

    def mousePressEvent(self, event: QMouseEvent):
        if event.button() != Qt.MouseButton.LeftButton or not self._accepts_input():
            return
        self._drag_start = event.position()
        self._state = self._state.begin_gesture()
        self.setCursor(Qt.CursorShape.ClosedHandCursor)

    def mouseMoveEvent(self, event: QMouseEvent):
        if self._drag_start is None:
            return
        delta = event.position() - self._drag_start
        self._state = self._state.update_offset(Point(delta.x(), delta.y()))
        self.viewport_changed.emit()
        self.update()

    def mouseReleaseEvent(self, event: QMouseEvent):
        if event.button() != Qt.MouseButton.LeftButton or self._drag_start is None:
            return
        self._drag_start = None
        self._state = self._state.end_offset_gesture()
        self.unsetCursor()

    def mouseDoubleClickEvent(self, event: QMouseEvent):
        if event.button() == Qt.MouseButton.LeftButton and self._accepts_input():
            self.reset_view()

    def _accepts_input(self) -> bool:
        return self._source is not None and self._extractor is None
