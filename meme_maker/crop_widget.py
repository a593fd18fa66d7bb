"""
Interactive crop-overlay widget and Qt image helpers.

This module contains everything that touches both Qt **and** image display:
``pil_to_qpixmap``, the background ``ImageLoaderThread``, and the
``ImageCropWidget`` editor.  The drag/resize rules themselves live in the
Qt-free ``crop_state`` module; the widget only feeds it pointer positions.
"""

import logging
from pathlib import Path

from PIL import Image
from PyQt6.QtWidgets import QWidget, QSizePolicy
from PyQt6.QtCore import Qt, QEvent, QRectF, QPointF, pyqtSignal, QThread
from PyQt6.QtGui import (
    QPainter, QPainterPath, QPixmap, QColor, QPen, QBrush, QImage,
    QKeyEvent, QMouseEvent, QPaintEvent, QResizeEvent, QFocusEvent, QHideEvent,
)

from meme_maker.config import HANDLE_SIZE, NUDGE_SMALL, NUDGE_LARGE
from meme_maker.crop_state import CropStateMachine
from meme_maker.geometry import fit_within
from meme_maker.image_io import load_image
from meme_maker.models import CropRect, image_bounds

logger = logging.getLogger(__name__)


# =============================================================================
# Qt ↔ PIL helpers
# =============================================================================

def pil_to_qpixmap(pil_img: Image.Image) -> QPixmap:
    """Convert a PIL Image to QPixmap."""
    img_rgba = pil_img.convert("RGBA")
    data = img_rgba.tobytes("raw", "RGBA")
    qimg = QImage(data, img_rgba.width, img_rgba.height, QImage.Format.Format_RGBA8888)
    return QPixmap.fromImage(qimg)


# =============================================================================
# Background image loader
# =============================================================================

class ImageLoaderThread(QThread):
    """Background thread that decodes an upload.

    ``token`` is handed back untouched so the receiver can drop results of
    loads that have since been superseded.  The result arrives on ``loaded``
    so the built-in ``QThread.finished`` stays free for cleanup.
    """
    loaded = pyqtSignal(int, object)
    error = pyqtSignal(int, str)

    def __init__(self, path: Path, token: int, parent=None):
        super().__init__(parent)
        self._path = path
        self._token = token

    def run(self):
        try:
            image = load_image(self._path)
            self.loaded.emit(self._token, image)
        except Exception as e:
            logger.warning("Loading %s failed: %s", self._path, e)
            self.error.emit(self._token, str(e))


# =============================================================================
# Image Crop Widget: interactive square crop overlay on image
# =============================================================================

class ImageCropWidget(QWidget):
    """Displays an image with a draggable, resizable square crop box.

    ``crop_changed`` carries the selection in source pixels (or None when
    no image is laid out).  ``interaction_started`` fires on every accepted
    drag or resize start.
    """

    crop_changed = pyqtSignal(object)
    interaction_started = pyqtSignal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setMinimumSize(240, 240)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)

        self._pixmap: QPixmap | None = None
        self._img_w = 0
        self._img_h = 0
        self._loading = False
        self._message = "Image preview will appear here"

        self._state = CropStateMachine(on_change=self._on_crop_state_changed)

    def set_loading(self, loading: bool):
        """Show/hide loading indicator."""
        self._loading = loading
        self.update()

    def set_message(self, message: str):
        """Text shown while no image is displayed."""
        self._message = message
        self.update()

    def set_image(self, pil_img: Image.Image):
        """Display a decoded image and place the initial crop."""
        self._end_interaction()
        self._loading = False
        self._pixmap = pil_to_qpixmap(pil_img)
        self._img_w = pil_img.width
        self._img_h = pil_img.height
        self._state.reset()
        self._lay_out_image()
        self.update()

    def has_image(self) -> bool:
        """Return True if an image is loaded and ready for crop operations."""
        return self._pixmap is not None and self._state.is_loaded

    def is_interacting(self) -> bool:
        """True while a drag or resize is in progress."""
        return self._state.mode != CropStateMachine.MODE_IDLE

    def source_crop(self) -> CropRect | None:
        return self._state.source_rect()

    def clear(self):
        self._end_interaction()
        self._pixmap = None
        self._img_w = 0
        self._img_h = 0
        self._state.reset()
        self.crop_changed.emit(None)
        self.update()

    # --- Layout ---

    def _rendered_size(self) -> tuple[float, float]:
        return fit_within((self._img_w, self._img_h), (self.width(), self.height()))

    def _lay_out_image(self):
        """Lay out the image, or re-map the crop if it is already laid out."""
        if not self._pixmap:
            return
        container = (self.width(), self.height())
        if self._state.is_loaded:
            self._state.on_container_resize(self._rendered_size(), container)
        else:
            # Zero-size before first show; retried from resizeEvent
            self._state.on_image_load((self._img_w, self._img_h), self._rendered_size(), container)

    def _on_crop_state_changed(self, source_rect: CropRect | None):
        self.crop_changed.emit(source_rect)
        self.update()

    # --- Handle hit testing ---

    def _crop_display_rect(self) -> QRectF:
        r = self._state.display_rect
        return QRectF(r.x, r.y, r.w, r.h)

    def _handle_rect(self) -> QRectF:
        """Screen rectangle of the round resize handle at the bottom-right corner."""
        r = self._crop_display_rect()
        hs = HANDLE_SIZE
        return QRectF(r.right() - hs, r.bottom() - hs, hs * 2, hs * 2)

    def _hit_test(self, pos: QPointF) -> str | None:
        """Return the interaction kind for a screen position, or None."""
        if not self.has_image():
            return None
        if self._handle_rect().contains(pos):
            return CropStateMachine.KIND_RESIZE
        if self._crop_display_rect().contains(pos):
            return CropStateMachine.KIND_DRAG
        return None

    # --- Painting ---

    def paintEvent(self, event: QPaintEvent):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)
        painter.fillRect(self.rect(), QColor(55, 65, 81))

        if not self.has_image():
            painter.setPen(QColor(128, 128, 128))
            msg = "Loading image…" if self._loading else self._message
            painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, msg)
            painter.end()
            return

        # Draw image
        left, top, right, bottom = image_bounds(self._state.geometry)
        dest = QRectF(left, top, right - left, bottom - top)
        painter.drawPixmap(dest.toRect(), self._pixmap)

        # Dim everything outside the crop box
        crop_rect = self._crop_display_rect()
        shade = QPainterPath()
        shade.setFillRule(Qt.FillRule.OddEvenFill)
        shade.addRect(QRectF(self.rect()))
        shade.addRect(crop_rect)
        painter.fillPath(shade, QColor(0, 0, 0, 128))

        # Draw crop border
        pen = QPen(QColor(255, 255, 255), 2, Qt.PenStyle.DashLine)
        painter.setPen(pen)
        painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawRect(crop_rect)

        # Draw resize handle
        painter.setPen(Qt.PenStyle.NoPen)
        painter.setBrush(QBrush(QColor(255, 255, 255)))
        painter.drawEllipse(self._handle_rect())

        painter.end()

    def resizeEvent(self, event: QResizeEvent):
        self._lay_out_image()
        super().resizeEvent(event)

    # --- Mouse interaction ---

    def mousePressEvent(self, event: QMouseEvent):
        if event.button() != Qt.MouseButton.LeftButton:
            return
        pos = event.position()
        kind = self._hit_test(pos)
        if kind is None:
            return
        if self._state.on_interaction_start((pos.x(), pos.y()), kind):
            # Keep receiving moves outside the widget until the interaction ends
            self.grabMouse()
            event.accept()
            self.interaction_started.emit()

    def mouseMoveEvent(self, event: QMouseEvent):
        if not self.has_image():
            return

        pos = event.position()

        if self._state.mode == CropStateMachine.MODE_IDLE:
            kind = self._hit_test(pos)
            if kind == CropStateMachine.KIND_RESIZE:
                self.setCursor(Qt.CursorShape.SizeFDiagCursor)
            elif kind == CropStateMachine.KIND_DRAG:
                self.setCursor(Qt.CursorShape.SizeAllCursor)
            else:
                self.setCursor(Qt.CursorShape.ArrowCursor)
            return

        self._state.on_interaction_move((pos.x(), pos.y()))
        event.accept()

    def mouseReleaseEvent(self, event: QMouseEvent):
        if event.button() == Qt.MouseButton.LeftButton:
            self._end_interaction()

    def focusOutEvent(self, event: QFocusEvent):
        self._end_interaction()
        super().focusOutEvent(event)

    def hideEvent(self, event: QHideEvent):
        self._end_interaction()
        super().hideEvent(event)

    def event(self, event: QEvent) -> bool:
        if event.type() in (QEvent.Type.TouchCancel, QEvent.Type.UngrabMouse):
            self._end_interaction()
        return super().event(event)

    def _end_interaction(self):
        """Leave drag/resize mode and give the pointer back, on every exit path."""
        self._state.on_interaction_end()
        if QWidget.mouseGrabber() is self:
            self.releaseMouse()

    # --- Keyboard nudge ---

    def keyPressEvent(self, event: QKeyEvent):
        if not self.has_image():
            super().keyPressEvent(event)
            return
        amount = NUDGE_LARGE if event.modifiers() & Qt.KeyboardModifier.ShiftModifier else NUDGE_SMALL
        moves = {
            Qt.Key.Key_Left: (-amount, 0),
            Qt.Key.Key_Right: (amount, 0),
            Qt.Key.Key_Up: (0, -amount),
            Qt.Key.Key_Down: (0, amount),
        }
        delta = moves.get(event.key())
        if delta is None or not self._state.nudge(*delta):
            super().keyPressEvent(event)
