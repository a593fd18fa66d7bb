"""
Meme preview widgets.

``MemePreviewWidget`` shows the full-size output raster scaled to fit.
``FloatingPreview`` is a small frameless window that pops up at the top of
the main window while the crop is being changed and hides itself again
after ``FLOATING_PREVIEW_HIDE_MS`` without further triggers.
"""

from PIL import Image
from PyQt6.QtWidgets import QWidget, QSizePolicy
from PyQt6.QtCore import Qt, QRect, QTimer
from PyQt6.QtGui import QPainter, QPixmap, QColor, QPaintEvent

from meme_maker.config import FLOATING_PREVIEW_HIDE_MS, FLOATING_PREVIEW_SIZE
from meme_maker.crop_widget import pil_to_qpixmap


class MemePreviewWidget(QWidget):
    """Square preview of the rendered meme, letterboxed in the widget."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setMinimumSize(240, 240)
        self.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
        self._pixmap: QPixmap | None = None

    def set_raster(self, raster: Image.Image | None):
        self._pixmap = pil_to_qpixmap(raster) if raster is not None else None
        self.update()

    def paintEvent(self, event: QPaintEvent):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        painter.fillRect(self.rect(), QColor(17, 24, 39))
        if self._pixmap is not None:
            side = min(self.width(), self.height())
            dest = QRect((self.width() - side) // 2, (self.height() - side) // 2, side, side)
            painter.drawPixmap(dest, self._pixmap)
        painter.end()


class FloatingPreview(QWidget):
    """Transient miniature preview pinned to the top center of *anchor*."""

    MARGIN_TOP = 16

    def __init__(self, anchor: QWidget):
        super().__init__(anchor, Qt.WindowType.ToolTip | Qt.WindowType.FramelessWindowHint)
        self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents)
        self.setAttribute(Qt.WidgetAttribute.WA_ShowWithoutActivating)
        self.setFixedSize(FLOATING_PREVIEW_SIZE, FLOATING_PREVIEW_SIZE)
        self._anchor = anchor
        self._pixmap: QPixmap | None = None

        self._hide_timer = QTimer(self)
        self._hide_timer.setSingleShot(True)
        self._hide_timer.setInterval(FLOATING_PREVIEW_HIDE_MS)
        self._hide_timer.timeout.connect(self.hide)

    def set_raster(self, raster: Image.Image | None):
        self._pixmap = pil_to_qpixmap(raster) if raster is not None else None
        self.update()

    def trigger(self):
        """Show the preview and (re)start the auto-hide countdown."""
        top_center = self._anchor.mapToGlobal(self._anchor.rect().topLeft())
        x = top_center.x() + (self._anchor.width() - self.width()) // 2
        self.move(x, top_center.y() + self.MARGIN_TOP)
        self.show()
        self.raise_()
        self._hide_timer.start()

    def dismiss(self):
        self._hide_timer.stop()
        self.hide()

    def paintEvent(self, event: QPaintEvent):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.SmoothPixmapTransform)
        if self._pixmap is not None:
            painter.drawPixmap(self.rect(), self._pixmap)
        painter.setPen(QColor(55, 65, 81))
        painter.drawRect(self.rect().adjusted(0, 0, -1, -1))
        painter.end()
