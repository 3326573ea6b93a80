"""
Qt-free image I/O utilities.

Opens images (including PSD) into ``SourceImage`` values the crop engine
accepts, writes crop results, and generates unique output paths.
"""

import logging
from pathlib import Path

from PIL import Image, ImageOps
from psd_tools import PSDImage

from pinch_crop.config import PNG_COMPRESS_LEVEL, JPEG_QUALITY_DEFAULT, JPEG_SUBSAMPLING
from pinch_crop.models import SourceImage

logger = logging.getLogger(__name__)

# Allow very large images (Pillow's default limit is ~178MP)
Image.MAX_IMAGE_PIXELS = None


def open_image(path: Path) -> Image.Image:
    """Open an image file, using psd-tools for PSD and Pillow for the rest.

    EXIF orientation is applied so the raster matches what the user sees.
    """
    if path.suffix.lower() == ".psd":
        return PSDImage.open(str(path)).composite()
    with Image.open(path) as img:
        img.load()
        return ImageOps.exif_transpose(img)


def load_source_image(path: Path, density: float = 1.0) -> SourceImage:
    """Load *path* for cropping.

    Raises ValueError for images with a zero dimension; the crop engine
    assumes strictly positive intrinsic sizes.
    """
    img = open_image(path)
    if img.width <= 0 or img.height <= 0:
        raise ValueError(f"{path.name} has no pixels ({img.width}x{img.height})")
    logger.info("Loaded %s (%dx%d, density %.2f)", path, img.width, img.height, density)
    return SourceImage(img, density)


def save_image(source: SourceImage, out_path: Path, fmt: str = "PNG",
               jpeg_quality: int = JPEG_QUALITY_DEFAULT) -> Path:
    """Write a crop result and return the path actually used.

    The suffix is forced to match *fmt*, and ``unique_path`` avoids
    overwriting an existing file.
    """
    img = source.image
    dpi = (72 * source.density, 72 * source.density)
    if fmt == "JPEG":
        out_path = unique_path(out_path.with_suffix(".jpg"))
        img.convert("RGB").save(
            str(out_path), "JPEG",
            quality=jpeg_quality,
            optimize=True,
            subsampling=JPEG_SUBSAMPLING,
            dpi=dpi,
        )
    else:
        out_path = unique_path(out_path.with_suffix(".png"))
        img.save(str(out_path), "PNG", compress_level=PNG_COMPRESS_LEVEL, dpi=dpi)
    logger.info("Saved %dx%d crop to %s", img.width, img.height, out_path)
    return out_path


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
