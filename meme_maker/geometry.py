"""
Display ↔ source coordinate mapping (Qt-free).

The crop editor shows the image letterboxed inside its container.  Display
space is measured from the container's top-left; source space is the
image's native pixel grid.  Everything here is plain float arithmetic with
no rounding, and is re-derived whenever the natural or rendered size
changes.
"""

from meme_maker.models import CropRect, DisplayGeometry, ScaleFactors


def fit_within(natural_size: tuple[int, int], container_size: tuple[float, float]) -> tuple[float, float]:
    """Rendered size of an image shown contained in a box, never upscaled."""
    nat_w, nat_h = natural_size
    box_w, box_h = container_size
    if nat_w <= 0 or nat_h <= 0 or box_w <= 0 or box_h <= 0:
        return 0.0, 0.0
    scale = min(box_w / nat_w, box_h / nat_h, 1.0)
    return nat_w * scale, nat_h * scale


def display_geometry(rendered_size: tuple[float, float], container_size: tuple[float, float]) -> DisplayGeometry:
    rendered_w, rendered_h = rendered_size
    container_w, container_h = container_size
    return DisplayGeometry(rendered_w, rendered_h, container_w, container_h)


def scale_factors(natural_size: tuple[int, int], rendered_size: tuple[float, float]) -> ScaleFactors:
    """Source pixels per display pixel.

    Raises ValueError while the image has not been laid out yet (zero
    rendered size); the mapping is undefined then.
    """
    nat_w, nat_h = natural_size
    rendered_w, rendered_h = rendered_size
    if rendered_w <= 0 or rendered_h <= 0:
        raise ValueError(f"image not laid out (rendered size {rendered_w}x{rendered_h})")
    return ScaleFactors(nat_w / rendered_w, nat_h / rendered_h)


def display_to_source(rect: CropRect, geometry: DisplayGeometry, scale: ScaleFactors) -> CropRect:
    """Subtract the centering offset, then scale each axis."""
    return CropRect(
        (rect.x - geometry.offset_x) * scale.x,
        (rect.y - geometry.offset_y) * scale.y,
        rect.w * scale.x,
        rect.h * scale.y,
    )


def source_to_display(rect: CropRect, geometry: DisplayGeometry, scale: ScaleFactors) -> CropRect:
    """Inverse of ``display_to_source``."""
    return CropRect(
        rect.x / scale.x + geometry.offset_x,
        rect.y / scale.y + geometry.offset_y,
        rect.w / scale.x,
        rect.h / scale.y,
    )
