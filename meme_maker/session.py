"""
Editing session: the single owner of the uploaded image, the selected
source region, and the overlay text style (Qt-free).

Widgets push changes in and ask for rasters out.  Every render starts from
the current state, so input that arrives while an image is still decoding
is simply picked up by the first render after decoding finishes.
"""

import logging
from dataclasses import replace

from PIL import Image

from meme_maker.config import BACKGROUND_COLOR, OUTPUT_SIZE
from meme_maker.models import CropRect, SourceImage, TextStyle
from meme_maker.renderer import render_error, render_meme

logger = logging.getLogger(__name__)


class MemeSession:
    def __init__(self, style: TextStyle | None = None):
        self._source: SourceImage | None = None
        self._crop: CropRect | None = None
        self._style = style or TextStyle()
        self._generation = 0

    # --- Image ---

    @property
    def source(self) -> SourceImage | None:
        return self._source

    @property
    def image(self) -> Image.Image | None:
        if self._source is not None and self._source.is_ready:
            return self._source.image
        return None

    def begin_load(self) -> int:
        """Mark a new upload as decoding; returns a token for ``finish_load``.

        The previous image and crop are dropped immediately.
        """
        self._generation += 1
        self._source = SourceImage.pending()
        self._crop = None
        return self._generation

    def finish_load(self, token: int, image: Image.Image | None, error: str = "") -> bool:
        """Complete the load started with *token*.  Stale completions are ignored."""
        if token != self._generation:
            logger.debug("Discarding stale image load (token %d, current %d)", token, self._generation)
            return False
        if image is None:
            self._source = SourceImage.failed(error)
            logger.warning("Image load failed: %s", error)
        else:
            self._source = SourceImage.ready(image)
        return True

    # --- Crop / text ---

    @property
    def crop(self) -> CropRect | None:
        return self._crop

    def set_crop(self, crop: CropRect | None):
        self._crop = crop

    @property
    def style(self) -> TextStyle:
        return self._style

    def set_text(self, text: str):
        self._style = replace(self._style, text=text)

    def set_font_size(self, font_size: int):
        self._style = replace(self._style, font_size=font_size)

    def set_offset(self, offset: int):
        self._style = replace(self._style, offset=offset)

    # --- Output ---

    @property
    def can_export(self) -> bool:
        return self.image is not None and self._crop is not None and not self._crop.is_empty()

    def render(self, output_size: int = OUTPUT_SIZE, background: str = BACKGROUND_COLOR) -> Image.Image:
        if self._source is not None and self._source.is_failed:
            return render_error(output_size, background)
        return render_meme(self.image, self._crop, self._style, output_size, background)

    def export_raster(self) -> Image.Image | None:
        """Full-size raster for saving, or None when nothing is selected yet."""
        if not self.can_export:
            return None
        return self.render()
