"""
Data models and crop-geometry utilities.

CropRect, DisplayGeometry, ScaleFactors and TextStyle are the core data
structures shared by the crop editor, the session, and the renderer.
``SourceImage`` wraps the asynchronously decoded upload.  The helper
functions at the bottom handle square-crop placement and boundary clamping
in display space.
"""

from dataclasses import dataclass

from PIL import Image

from meme_maker.config import (
    DEFAULT_TEXT, FONT_SIZE_DEFAULT, FONT_SIZES,
    INITIAL_CROP_FRACTION, MIN_CROP_SIZE,
    TEXT_OFFSET_DEFAULT, TEXT_OFFSET_MAX, TEXT_OFFSET_MIN,
)


# =============================================================================
# Data classes
# =============================================================================
@dataclass
class CropRect:
    """Crop rectangle.  Display or source space depending on the owner."""
    x: float = 0.0
    y: float = 0.0
    w: float = 0.0
    h: float = 0.0

    def is_empty(self) -> bool:
        return self.w <= 0 or self.h <= 0

    def as_box(self) -> tuple[float, float, float, float]:
        """Return ``(left, top, right, bottom)``."""
        return self.x, self.y, self.x + self.w, self.y + self.h


@dataclass(frozen=True)
class DisplayGeometry:
    """Size of the rendered image and of the container it is centred in."""
    rendered_w: float
    rendered_h: float
    container_w: float
    container_h: float

    @property
    def offset_x(self) -> float:
        return (self.container_w - self.rendered_w) / 2

    @property
    def offset_y(self) -> float:
        return (self.container_h - self.rendered_h) / 2

    def is_laid_out(self) -> bool:
        return self.rendered_w > 0 and self.rendered_h > 0


@dataclass(frozen=True)
class ScaleFactors:
    """Source pixels per display pixel, per axis."""
    x: float
    y: float


@dataclass(frozen=True)
class TextStyle:
    """Overlay text parameters, expressed for the full-size output canvas."""
    text: str = DEFAULT_TEXT
    font_size: int = FONT_SIZE_DEFAULT
    offset: int = TEXT_OFFSET_DEFAULT

    def __post_init__(self):
        if self.font_size not in FONT_SIZES:
            raise ValueError(f"font_size must be one of {FONT_SIZES}, got {self.font_size!r}")
        if not TEXT_OFFSET_MIN <= self.offset <= TEXT_OFFSET_MAX:
            raise ValueError(
                f"offset must be within [{TEXT_OFFSET_MIN}, {TEXT_OFFSET_MAX}], got {self.offset!r}"
            )


class SourceImage:
    """Decoded upload: pending while decoding, then ready or failed."""

    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"

    def __init__(self, status: str, image: Image.Image | None = None, error: str = ""):
        self.status = status
        self.image = image
        self.error = error

    @classmethod
    def pending(cls) -> "SourceImage":
        return cls(cls.PENDING)

    @classmethod
    def ready(cls, image: Image.Image) -> "SourceImage":
        return cls(cls.READY, image=image)

    @classmethod
    def failed(cls, error: str) -> "SourceImage":
        return cls(cls.FAILED, error=error)

    @property
    def is_ready(self) -> bool:
        return self.status == self.READY

    @property
    def is_failed(self) -> bool:
        return self.status == self.FAILED

    def __repr__(self):
        if self.is_ready:
            return f"SourceImage(ready, {self.image.width}x{self.image.height})"
        if self.is_failed:
            return f"SourceImage(failed, {self.error!r})"
        return "SourceImage(pending)"


# =============================================================================
# Crop math utilities (display space)
# =============================================================================
def image_bounds(geometry: DisplayGeometry) -> tuple[float, float, float, float]:
    """Return the rendered image's ``(left, top, right, bottom)`` in the container."""
    left = geometry.offset_x
    top = geometry.offset_y
    return left, top, left + geometry.rendered_w, top + geometry.rendered_h


def initial_crop(geometry: DisplayGeometry) -> CropRect:
    """Centered square covering INITIAL_CROP_FRACTION of the shorter rendered side."""
    size = min(geometry.rendered_w, geometry.rendered_h) * INITIAL_CROP_FRACTION
    x = geometry.offset_x + (geometry.rendered_w - size) / 2
    y = geometry.offset_y + (geometry.rendered_h - size) / 2
    return CropRect(x, y, size, size)


def clamp_position(crop: CropRect, geometry: DisplayGeometry) -> CropRect:
    """Clamp the crop position so it stays inside the rendered image, per axis."""
    left, top, right, bottom = image_bounds(geometry)
    x = max(left, min(crop.x, right - crop.w))
    y = max(top, min(crop.y, bottom - crop.h))
    return CropRect(x, y, crop.w, crop.h)


def clamp_square(crop: CropRect, geometry: DisplayGeometry) -> CropRect:
    """Force the crop square, at least MIN_CROP_SIZE, and inside the image."""
    largest = min(geometry.rendered_w, geometry.rendered_h)
    size = min(max(MIN_CROP_SIZE, min(crop.w, crop.h)), largest)
    return clamp_position(CropRect(crop.x, crop.y, size, size), geometry)
