"""
Square crop-box interaction state (Qt-free).

``CropStateMachine`` owns the selection rectangle in display space and
applies pointer input to it.  Movement is incremental: every move computes
its delta from the previous pointer position, so a clamped move never makes
the box jump once the pointer comes back into range.  After every change the
selection is converted to source space and passed to ``on_change``.
"""

import logging
from typing import Callable

from meme_maker.config import MIN_CROP_SIZE
from meme_maker.geometry import display_geometry, display_to_source, scale_factors, source_to_display
from meme_maker.models import (
    CropRect, DisplayGeometry, ScaleFactors,
    clamp_position, clamp_square, image_bounds, initial_crop,
)

logger = logging.getLogger(__name__)


class CropStateMachine:
    """Drag/resize state for a square crop box over a letterboxed image."""

    MODE_IDLE = 0
    MODE_DRAGGING = 1
    MODE_RESIZING = 2

    KIND_DRAG = "drag"
    KIND_RESIZE = "resize"

    def __init__(self, on_change: Callable[[CropRect], None] | None = None):
        self.on_change = on_change

        self._natural_size: tuple[int, int] = (0, 0)
        self._geometry: DisplayGeometry | None = None
        self._scale: ScaleFactors | None = None
        self._crop = CropRect()

        self._mode = self.MODE_IDLE
        self._start_pos: tuple[float, float] = (0.0, 0.0)

    # --- Queries ---

    @property
    def mode(self) -> int:
        return self._mode

    @property
    def is_loaded(self) -> bool:
        return self._geometry is not None

    @property
    def geometry(self) -> DisplayGeometry | None:
        return self._geometry

    @property
    def scale(self) -> ScaleFactors | None:
        return self._scale

    @property
    def display_rect(self) -> CropRect:
        return CropRect(self._crop.x, self._crop.y, self._crop.w, self._crop.h)

    def source_rect(self) -> CropRect | None:
        """Current selection in source pixels, or None before the image is laid out."""
        if self._geometry is None:
            return None
        return display_to_source(self._crop, self._geometry, self._scale)

    # --- Layout ---

    def reset(self):
        """Forget the image (new upload pending)."""
        self._natural_size = (0, 0)
        self._geometry = None
        self._scale = None
        self._crop = CropRect()
        self._mode = self.MODE_IDLE

    def on_image_load(
        self,
        natural_size: tuple[int, int],
        rendered_size: tuple[float, float],
        container_size: tuple[float, float],
    ) -> bool:
        """Lay out a freshly loaded image and place the initial centered square.

        Returns False (and stays unloaded) while the image has no rendered size.
        """
        geometry = display_geometry(rendered_size, container_size)
        if not geometry.is_laid_out():
            logger.debug("Ignoring image load with rendered size %sx%s", *rendered_size)
            return False
        self._natural_size = natural_size
        self._geometry = geometry
        self._scale = scale_factors(natural_size, rendered_size)
        self._crop = initial_crop(geometry)
        self._mode = self.MODE_IDLE
        logger.debug(
            "Image laid out: natural %sx%s, rendered %.1fx%.1f, scale (%.4f, %.4f)",
            natural_size[0], natural_size[1], geometry.rendered_w, geometry.rendered_h,
            self._scale.x, self._scale.y,
        )
        self._emit()
        return True

    def on_container_resize(self, rendered_size: tuple[float, float], container_size: tuple[float, float]):
        """Re-derive the mapping after a layout change, keeping the same source region."""
        if self._geometry is None:
            return
        geometry = display_geometry(rendered_size, container_size)
        if not geometry.is_laid_out():
            return
        source = display_to_source(self._crop, self._geometry, self._scale)
        self._geometry = geometry
        self._scale = scale_factors(self._natural_size, rendered_size)
        self._crop = clamp_square(source_to_display(source, self._geometry, self._scale), self._geometry)
        self._emit()

    # --- Pointer interaction ---

    def on_interaction_start(self, pos: tuple[float, float], kind: str) -> bool:
        """Begin a drag or resize at *pos*.

        Only one interaction can be active; a second start is rejected and
        the running interaction carries on.
        """
        if self._geometry is None or self._mode != self.MODE_IDLE:
            return False
        if kind == self.KIND_DRAG:
            self._mode = self.MODE_DRAGGING
        elif kind == self.KIND_RESIZE:
            self._mode = self.MODE_RESIZING
        else:
            raise ValueError(f"unknown interaction kind {kind!r}")
        self._start_pos = (float(pos[0]), float(pos[1]))
        return True

    def on_interaction_move(self, pos: tuple[float, float]):
        if self._mode == self.MODE_IDLE:
            return

        dx = pos[0] - self._start_pos[0]
        dy = pos[1] - self._start_pos[1]
        crop = self.display_rect

        if self._mode == self.MODE_RESIZING:
            _, _, right, bottom = image_bounds(self._geometry)
            size = crop.w + max(dx, dy)
            size = max(MIN_CROP_SIZE, size)
            size = min(size, right - crop.x, bottom - crop.y)
            crop.w = size
            crop.h = size
        else:
            crop.x += dx
            crop.y += dy

        # Resize can leave a stale position out of bounds too
        self._crop = clamp_position(crop, self._geometry)
        self._start_pos = (float(pos[0]), float(pos[1]))
        self._emit()

    def on_interaction_end(self):
        self._mode = self.MODE_IDLE

    # --- Keyboard nudge ---

    def nudge(self, dx: float, dy: float) -> bool:
        """Move the box by a display-pixel offset.  Ignored during a pointer interaction."""
        if self._geometry is None or self._mode != self.MODE_IDLE:
            return False
        crop = self.display_rect
        crop.x += dx
        crop.y += dy
        self._crop = clamp_position(crop, self._geometry)
        self._emit()
        return True

    def _emit(self):
        if self.on_change is not None:
            self.on_change(self.source_rect())
