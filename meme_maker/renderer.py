"""
Meme compositing and text layout (Qt-free).

``render_meme`` paints the output raster from scratch: background, the
selected source region resampled over the whole square, then the overlay
text wrapped character by character and stacked upward from a fixed
distance above the bottom edge.  The result depends only on its arguments.

Font sizes and offsets in ``TextStyle`` refer to the ``OUTPUT_SIZE`` canvas;
renders at other sizes (the floating preview) scale them proportionally.
"""

import logging
from functools import lru_cache
from typing import Callable

from PIL import Image, ImageDraw, ImageFont

from meme_maker.config import (
    BACKGROUND_COLOR, ERROR_COLOR, ERROR_TEXT, FONT_CANDIDATES,
    LINE_HEIGHT_FACTOR, MAX_TEXT_WIDTH_FRACTION, OUTPUT_SIZE,
    PLACEHOLDER_COLOR, PLACEHOLDER_FONT_SIZE, PLACEHOLDER_TEXT,
    STROKE_DIVISOR, TEXT_FILL_COLOR, TEXT_STROKE_COLOR,
)
from meme_maker.models import CropRect, TextStyle

logger = logging.getLogger(__name__)

Font = ImageFont.FreeTypeFont | ImageFont.ImageFont


# =============================================================================
# Fonts
# =============================================================================
# Noncharacter no font maps; Pillow draws the font's .notdef glyph for it.
_UNMAPPED_CHAR = "\U0010FFFF"


@lru_cache(maxsize=64)
def _open_font(name: str, size: int) -> Font | None:
    try:
        return ImageFont.truetype(name, size)
    except OSError:
        return None


def _glyph_signature(font: Font, char: str) -> tuple:
    """Bounding box and ink of *char*, enough to tell glyphs apart."""
    left, top, right, bottom = font.getbbox(char)
    ink = Image.new("L", (max(1, right - left), max(1, bottom - top)))
    ImageDraw.Draw(ink).text((-left, -top), char, font=font, fill=255)
    return (left, top, right, bottom), ink.tobytes()


def font_covers(font: Font, text: str) -> bool:
    """True when no visible character of *text* falls back to .notdef."""
    missing = _glyph_signature(font, _UNMAPPED_CHAR)
    return all(
        char.isspace() or _glyph_signature(font, char) != missing
        for char in set(text)
    )


@lru_cache(maxsize=32)
def load_font(size: int, text: str = "") -> Font:
    """Return the bold display font at *size* pixels for drawing *text*.

    Tries FONT_CANDIDATES in order and takes the first one with a glyph for
    every character of *text*.  Pillow has no per-glyph fallback, so when no
    candidate covers everything the first loadable one is used; with none
    loadable, Pillow's bundled scalable font.
    """
    first = None
    for name in FONT_CANDIDATES:
        font = _open_font(name, size)
        if font is None:
            continue
        if font_covers(font, text):
            return font
        if first is None:
            first = font
    if first is not None:
        logger.warning("No font from FONT_CANDIDATES covers %r, glyphs may be missing", text)
        return first
    logger.warning("No display font from FONT_CANDIDATES found, using Pillow default font")
    return ImageFont.load_default(size=size)


@lru_cache(maxsize=8)
def _placeholder_font(size: int) -> Font:
    return ImageFont.load_default(size=size)


def stroke_width(font_size: float) -> float:
    """Outline width for a given font size."""
    return font_size / STROKE_DIVISOR


# =============================================================================
# Text layout
# =============================================================================
def wrap_text(text: str, measure: Callable[[str], float], max_width: float) -> list[str]:
    """Greedy, character-granular line wrapping.

    A character goes onto the current line unless the line would then be
    wider than *max_width*; a character that is too wide on its own still
    gets a line to itself.  Empty text yields no lines.
    """
    lines: list[str] = []
    line = ""
    for char in text:
        candidate = line + char
        if measure(candidate) > max_width and line:
            lines.append(line)
            line = char
        else:
            line = candidate
    if line:
        lines.append(line)
    return lines


def layout_lines(
    lines: list[str], output_size: float, offset: float, line_height: float,
) -> list[tuple[str, float, float]]:
    """Position wrapped lines as ``(text, center_x, bottom_y)``.

    The last line sits *offset* pixels above the bottom edge; earlier lines
    stack upward one *line_height* at a time.
    """
    x = output_size / 2
    y = output_size - offset
    placed = []
    for line in reversed(lines):
        placed.append((line, x, y))
        y -= line_height
    placed.reverse()
    return placed


# =============================================================================
# Rendering
# =============================================================================
def render_placeholder(
    message: str = PLACEHOLDER_TEXT,
    output_size: int = OUTPUT_SIZE,
    color: str = PLACEHOLDER_COLOR,
    background: str = BACKGROUND_COLOR,
) -> Image.Image:
    """Background with a centered one-line message."""
    canvas = Image.new("RGB", (output_size, output_size), background)
    draw = ImageDraw.Draw(canvas)
    size = max(1, round(PLACEHOLDER_FONT_SIZE * output_size / OUTPUT_SIZE))
    draw.text(
        (output_size / 2, output_size / 2), message,
        font=_placeholder_font(size), fill=color, anchor="ms",
    )
    return canvas


def render_error(output_size: int = OUTPUT_SIZE, background: str = BACKGROUND_COLOR) -> Image.Image:
    return render_placeholder(ERROR_TEXT, output_size, ERROR_COLOR, background)


def render_meme(
    image: Image.Image | None,
    crop: CropRect | None,
    style: TextStyle,
    output_size: int = OUTPUT_SIZE,
    background: str = BACKGROUND_COLOR,
) -> Image.Image:
    """Composite *crop* of *image* and the overlay text into a square raster."""
    if image is None or crop is None or crop.is_empty():
        return render_placeholder(output_size=output_size, background=background)

    canvas = Image.new("RGB", (output_size, output_size), background)

    # Resample straight from the float source box; clip to the image so
    # float error at the edges can't sample outside it.
    left, top, right, bottom = crop.as_box()
    box = (
        max(0.0, left), max(0.0, top),
        min(float(image.width), right), min(float(image.height), bottom),
    )
    src = image if image.mode == "RGBA" else image.convert("RGBA")
    region = src.resize((output_size, output_size), Image.Resampling.LANCZOS, box=box)
    canvas.paste(region, (0, 0), region)

    factor = output_size / OUTPUT_SIZE
    font_size = style.font_size * factor
    _draw_text(canvas, style.text, font_size, style.offset * factor)
    return canvas


def _draw_text(canvas: Image.Image, text: str, font_size: float, offset: float):
    if not text:
        return
    font = load_font(max(1, round(font_size)), text)
    output_size = canvas.width
    lines = wrap_text(text, font.getlength, output_size * MAX_TEXT_WIDTH_FRACTION)
    placed = layout_lines(lines, output_size, offset, font_size * LINE_HEIGHT_FACTOR)

    # Pillow strokes outward from the glyph edge, a canvas line is centred
    # on it, so the visible outline is half the nominal width.
    stroke = max(1, round(stroke_width(font_size) / 2))
    draw = ImageDraw.Draw(canvas)
    for line, x, y in placed:
        # stroke_fill paints the outline first, then the fill on top
        draw.text(
            (x, y), line, font=font, fill=TEXT_FILL_COLOR, anchor="md",
            stroke_width=stroke, stroke_fill=TEXT_STROKE_COLOR,
        )
