"""
Main application window.

Orchestrates image upload, crop editing, overlay-text controls, the live
preview (plus the floating preview on narrow windows), and PNG export.
All editing state lives in a ``MemeSession``; the window only wires widget
signals into it and re-renders after every change.
"""

import logging
from pathlib import Path

from PyQt6.QtWidgets import (
    QMainWindow, QWidget, QVBoxLayout, QHBoxLayout, QGridLayout,
    QPushButton, QLabel, QFileDialog, QGroupBox, QMessageBox, QStatusBar,
    QComboBox, QSlider, QLineEdit, QApplication,
)
from PyQt6.QtCore import Qt

from meme_maker.config import (
    ERROR_TEXT, EXPORT_FILENAME, FLOATING_BACKGROUND_COLOR, FLOATING_PREVIEW_SIZE,
    FONT_SIZE_OPTIONS, IMAGE_EXTENSIONS, NARROW_VIEWPORT_WIDTH,
    TEXT_OFFSET_MAX, TEXT_OFFSET_MIN,
)
from meme_maker.crop_widget import ImageCropWidget, ImageLoaderThread
from meme_maker.image_io import UnsupportedImageError, export_png, validate_image_path
from meme_maker.models import CropRect
from meme_maker.preview_widget import FloatingPreview, MemePreviewWidget
from meme_maker.session import MemeSession

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("Meme Generator")
        self.setMinimumSize(560, 480)

        # Screen-aware startup size, clamped to 80% of screen
        preferred_w, preferred_h = 1280, 800
        screen = QApplication.primaryScreen()
        if screen is not None:
            avail = screen.availableGeometry()
            preferred_w = min(preferred_w, int(avail.width() * 0.8))
            preferred_h = min(preferred_h, int(avail.height() * 0.8))
        self.resize(preferred_w, preferred_h)

        self._session = MemeSession()
        self._loader: ImageLoaderThread | None = None
        self._last_dir: Path | None = None
        self._export_dir: Path | None = None

        self._build_ui()
        self._refresh_preview()
        self._update_button_states()

    # =========================================================================
    # UI construction
    # =========================================================================

    def _build_ui(self):
        central = QWidget()
        self.setCentralWidget(central)
        main_layout = QHBoxLayout(central)
        main_layout.setContentsMargins(8, 8, 8, 8)

        left = QWidget()
        left_layout = QVBoxLayout(left)
        left_layout.setContentsMargins(0, 0, 0, 0)
        left_layout.addWidget(self._build_upload_group(), stretch=1)
        left_layout.addWidget(self._build_text_group())
        main_layout.addWidget(left, stretch=1)

        main_layout.addWidget(self._build_preview_group(), stretch=1)

        self._floating = FloatingPreview(self)

        self._status = QStatusBar()
        self.setStatusBar(self._status)
        self._status.showMessage("Upload an image to begin.")

    def _build_upload_group(self) -> QGroupBox:
        group = QGroupBox("1. Upload && Crop")
        layout = QVBoxLayout(group)

        self._btn_upload = QPushButton("Upload Image")
        self._btn_upload.clicked.connect(self._select_image)
        layout.addWidget(self._btn_upload)

        self._error_label = QLabel("")
        self._error_label.setStyleSheet("color: #f87171;")
        self._error_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._error_label.hide()
        layout.addWidget(self._error_label)

        self._crop_widget = ImageCropWidget()
        self._crop_widget.crop_changed.connect(self._on_crop_changed)
        self._crop_widget.interaction_started.connect(self._on_crop_interaction)
        layout.addWidget(self._crop_widget, stretch=1)

        return group

    def _build_text_group(self) -> QGroupBox:
        group = QGroupBox("2. Add Text")
        layout = QGridLayout(group)
        style = self._session.style

        self._text_edit = QLineEdit(style.text)
        self._text_edit.setPlaceholderText("Enter your meme text")
        self._text_edit.textChanged.connect(self._on_text_changed)
        layout.addWidget(self._text_edit, 0, 0, 1, 2)

        layout.addWidget(QLabel("Font Size"), 1, 0)
        self._font_size = QComboBox()
        for label, size in FONT_SIZE_OPTIONS:
            self._font_size.addItem(f"{label} ({size}px)", size)
        self._font_size.setCurrentIndex(self._font_size.findData(style.font_size))
        self._font_size.currentIndexChanged.connect(self._on_font_size_changed)
        layout.addWidget(self._font_size, 2, 0)

        self._offset_label = QLabel()
        layout.addWidget(self._offset_label, 1, 1)
        self._offset_slider = QSlider(Qt.Orientation.Horizontal)
        self._offset_slider.setRange(TEXT_OFFSET_MIN, TEXT_OFFSET_MAX)
        self._offset_slider.setValue(style.offset)
        self._offset_slider.valueChanged.connect(self._on_offset_changed)
        layout.addWidget(self._offset_slider, 2, 1)
        self._update_offset_label(style.offset)

        return group

    def _build_preview_group(self) -> QGroupBox:
        group = QGroupBox("3. Preview && Download")
        layout = QVBoxLayout(group)

        self._preview = MemePreviewWidget()
        layout.addWidget(self._preview, stretch=1)

        self._btn_download = QPushButton("Download Meme")
        self._btn_download.clicked.connect(self._download)
        layout.addWidget(self._btn_download)

        return group

    # =========================================================================
    # Upload
    # =========================================================================

    def _select_image(self):
        patterns = " ".join(f"*{ext}" for ext in sorted(IMAGE_EXTENSIONS))
        path, _ = QFileDialog.getOpenFileName(
            self, "Select Image", str(self._last_dir or Path.home()),
            f"Images ({patterns});;All Files (*)",
        )
        if not path:
            return
        self._load_image(Path(path))

    def _load_image(self, path: Path):
        try:
            validate_image_path(path)
        except UnsupportedImageError as exc:
            logger.info("Rejected upload: %s", exc)
            self._show_error("Please upload a valid image file.")
            return

        self._show_error(None)
        self._last_dir = path.parent
        token = self._session.begin_load()
        self._crop_widget.clear()
        self._crop_widget.set_loading(True)
        self._status.showMessage(f"Loading {path.name}…")

        self._detach_loader()
        self._loader = ImageLoaderThread(path, token, parent=self)
        self._loader.loaded.connect(self._on_image_loaded)
        self._loader.error.connect(self._on_image_load_error)
        self._loader.finished.connect(self._loader.deleteLater)
        self._loader.start()

        self._refresh_preview()
        self._update_button_states()

    def _detach_loader(self):
        """Disconnect the previous loader; it finishes and deletes itself."""
        if self._loader is None:
            return
        try:
            self._loader.loaded.disconnect()
            self._loader.error.disconnect()
        except (TypeError, RuntimeError):
            pass  # Already disconnected or destroyed
        self._loader = None

    def _wait_for_loaders(self):
        for loader in self.findChildren(ImageLoaderThread):
            if loader.isRunning():
                loader.wait()

    def _on_image_loaded(self, token: int, image):
        if not self._session.finish_load(token, image):
            return
        self._crop_widget.set_image(image)
        self._session.set_crop(self._crop_widget.source_crop())
        self._btn_upload.setText("Change Image")
        self._status.showMessage(f"{image.width} × {image.height}")
        self._refresh_preview()
        self._update_button_states()

    def _on_image_load_error(self, token: int, error: str):
        if not self._session.finish_load(token, None, error):
            return
        self._crop_widget.set_loading(False)
        self._crop_widget.set_message(ERROR_TEXT)
        self._status.showMessage(error)
        self._refresh_preview()
        self._update_button_states()

    def _show_error(self, message: str | None):
        self._error_label.setText(message or "")
        self._error_label.setVisible(bool(message))

    # =========================================================================
    # Crop & text
    # =========================================================================

    def _on_crop_changed(self, crop: CropRect | None):
        self._session.set_crop(crop)
        self._refresh_preview()
        self._update_button_states()
        if self._crop_widget.is_interacting():
            # Restarts the auto-hide countdown for as long as the crop moves
            self._on_crop_interaction()

    def _on_crop_interaction(self):
        if self.width() < NARROW_VIEWPORT_WIDTH:
            self._floating.set_raster(self._floating_raster())
            self._floating.trigger()

    def _on_text_changed(self, text: str):
        self._session.set_text(text)
        self._refresh_preview()

    def _on_font_size_changed(self, index: int):
        self._session.set_font_size(self._font_size.itemData(index))
        self._refresh_preview()

    def _on_offset_changed(self, value: int):
        self._session.set_offset(value)
        self._update_offset_label(value)
        self._refresh_preview()

    def _update_offset_label(self, value: int):
        self._offset_label.setText(f"Vertical Position ({value}px)")

    # =========================================================================
    # Preview & export
    # =========================================================================

    def _refresh_preview(self):
        self._preview.set_raster(self._session.render())
        if self._floating.isVisible():
            self._floating.set_raster(self._floating_raster())

    def _floating_raster(self):
        if not self._session.can_export:
            return None
        return self._session.render(FLOATING_PREVIEW_SIZE, FLOATING_BACKGROUND_COLOR)

    def _update_button_states(self):
        self._btn_download.setEnabled(self._session.can_export)

    def _download(self):
        raster = self._session.export_raster()
        if raster is None:
            return
        folder = QFileDialog.getExistingDirectory(
            self, f"Save {EXPORT_FILENAME} to…", str(self._export_dir or self._last_dir or Path.home()),
        )
        if not folder:
            return
        self._export_dir = Path(folder)
        try:
            out_path = export_png(raster, self._export_dir)
        except OSError as exc:
            logger.error("Could not save meme to %s: %s", folder, exc)
            QMessageBox.critical(self, "Save Failed", f"Could not save meme:\n{exc}")
            return
        self._status.showMessage(f"Saved {out_path}")

    def closeEvent(self, event):
        self._detach_loader()
        self._wait_for_loaders()
        super().closeEvent(event)
