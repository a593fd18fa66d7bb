"""
Qt-free image I/O utilities.

Validates uploads, decodes images (including PSD via psd-tools) into
ready-to-render Pillow images, and writes the finished meme as PNG.
Safe to import from the background loader thread.
"""

import logging
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError
from psd_tools import PSDImage

from meme_maker.config import EXPORT_FILENAME, IMAGE_EXTENSIONS, PNG_COMPRESS_LEVEL

logger = logging.getLogger(__name__)


class UnsupportedImageError(ValueError):
    """The chosen file is not an image this tool can open."""


class ImageLoadError(RuntimeError):
    """An image file could not be decoded."""


def validate_image_path(path: Path) -> None:
    """Reject paths that are not existing files with a supported image extension."""
    if path.suffix.lower() not in IMAGE_EXTENSIONS:
        raise UnsupportedImageError(f"{path.name}: unsupported file type")
    if not path.is_file():
        raise UnsupportedImageError(f"{path.name}: not a file")


def open_image(path: Path) -> Image.Image:
    """Open an image file, using psd-tools for PSD and Pillow for the rest."""
    if path.suffix.lower() == ".psd":
        psd = PSDImage.open(str(path))
        return psd.composite()
    return Image.open(path)


def load_image(path: Path) -> Image.Image:
    """Fully decode *path* into an upright RGBA image.

    Raises ImageLoadError if the file cannot be decoded.
    """
    try:
        img = open_image(path)
        img.load()
        # Honor camera orientation so the crop matches what the user sees
        img = ImageOps.exif_transpose(img)
        img = img.convert("RGBA")
    except (OSError, UnidentifiedImageError, ValueError) as exc:
        raise ImageLoadError(f"Failed to decode {path.name}: {exc}") from exc
    logger.info("Loaded %s (%dx%d)", path.name, img.width, img.height)
    return img


def unique_path(out_path: Path) -> Path:
    """Return a unique path by appending -01, -02, etc. if file already exists."""
    if not out_path.exists():
        return out_path
    stem = out_path.stem
    suffix = out_path.suffix
    parent = out_path.parent
    counter = 1
    while True:
        candidate = parent / f"{stem}-{counter:02d}{suffix}"
        if not candidate.exists():
            return candidate
        counter += 1


def export_png(raster: Image.Image | None, directory: Path, filename: str = EXPORT_FILENAME) -> Path | None:
    """Save *raster* as PNG in *directory* without overwriting.

    Returns the written path, or None when there is nothing to export yet.
    Raises OSError if the file cannot be written.
    """
    if raster is None:
        return None
    directory.mkdir(parents=True, exist_ok=True)
    out_path = unique_path(directory / filename)
    raster.save(str(out_path), "PNG", compress_level=PNG_COMPRESS_LEVEL)
    logger.info("Exported meme to %s", out_path)
    return out_path
