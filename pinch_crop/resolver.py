"""
Crop resolver: map the fixed crop window back into source-image space.

The displayed image is laid out with a "fit within, keep aspect" rule, then
scaled by the viewport zoom around the container centre and shifted by the
pan offset.  The crop window is a fixed rectangle centred in the container.
Resolving a crop runs that layout backwards for the window, clips the
result to the image bounds, and extracts the pixels.

The resolver is stateless.  Degenerate layouts never raise: when the image
would be drawn with zero width, or when the window does not overlap the
image at all, the unmodified source image is returned instead.

This module is Qt-free.
"""

import logging

from pinch_crop.models import CropConfig, CropResult, Point, Rect, Size, SourceImage
from pinch_crop.raster import extract_pixels
from pinch_crop.viewport import ViewportState

logger = logging.getLogger(__name__)


# =============================================================================
# Layout
# =============================================================================
def fit_size(image_size: Size, container: Size) -> Size:
    """Largest size with the image's aspect ratio that fits inside *container*."""
    if image_size.is_empty or container.is_empty:
        return Size()
    img_aspect = image_size.width / image_size.height
    container_aspect = container.width / container.height
    if img_aspect > container_aspect:
        # Relatively wider than the container: width-bound
        w = container.width
        return Size(w, w / img_aspect)
    h = container.height
    return Size(h * img_aspect, h)


def display_rect(image_size: Size, state: ViewportState, container: Size) -> Rect:
    """Where the zoomed and panned image is drawn, in container coordinates."""
    displayed = fit_size(image_size, container) * state.scale
    origin = Point(
        (container.width - displayed.width) / 2,
        (container.height - displayed.height) / 2,
    ) + state.offset
    return Rect(origin.x, origin.y, displayed.width, displayed.height)


def crop_window_size(config: CropConfig) -> Size:
    c = config.container_size
    max_w = c.width - config.padding * 2
    max_h = c.height - config.padding * 2
    if config.aspect_ratio == 1.0:
        side = max(0.0, min(max_w, max_h))
        return Size(side, side)
    width = max(0.0, min(max_w, max_h * config.aspect_ratio))
    return Size(width, width / config.aspect_ratio)


def crop_window_rect(config: CropConfig) -> Rect:
    """The crop window, centred in the container."""
    c = config.container_size
    size = crop_window_size(config)
    return Rect((c.width - size.width) / 2, (c.height - size.height) / 2, size.width, size.height)


def overlay_rects(config: CropConfig) -> list[Rect]:
    """The four strips around the crop window that get dimmed."""
    c = config.container_size
    win = crop_window_rect(config)
    strips = [
        Rect(0, 0, c.width, win.y),                                   # top
        Rect(0, win.bottom, c.width, max(0.0, c.height - win.bottom)),  # bottom
        Rect(0, win.y, win.x, win.height),                            # left
        Rect(win.right, win.y, max(0.0, c.width - win.right), win.height),  # right
    ]
    return [r for r in strips if not r.is_empty]


# =============================================================================
# Resolution
# =============================================================================
def resolve_crop_rect(image_size: Size, state: ViewportState, config: CropConfig) -> Rect | None:
    """Return the clipped source-space crop rectangle, or None if unrepresentable."""
    shown = display_rect(image_size, state, config.container_size)
    if shown.width == 0:
        logger.debug("Displayed image has zero width; falling back to full image")
        return None

    window = crop_window_rect(config)
    rel = window.origin - shown.origin
    k = image_size.width / shown.width

    rect = Rect(rel.x * k, rel.y * k, window.width * k, window.height * k)
    clipped = rect.intersection(Rect(0, 0, image_size.width, image_size.height))
    if clipped.is_empty:
        logger.debug("Crop rect %s lies outside the image; falling back to full image", rect)
        return None
    return clipped


def resolve_crop(source: SourceImage, state: ViewportState, config: CropConfig) -> CropResult:
    """Crop *source* to what is visible inside the crop window.

    Returns a ``CropResult`` holding the cropped image and the source-space
    rectangle, or the unmodified source with ``rect=None`` when the crop
    cannot be represented.
    """
    rect = resolve_crop_rect(source.intrinsic_size, state, config)
    if rect is None:
        logger.warning("Crop window does not cover the image; returning it unmodified")
        return CropResult(image=source)

    pixels = extract_pixels(source.image, rect, source.density)
    logger.info(
        "Cropped %dx%d -> %dx%d at (%.1f, %.1f)",
        *source.pixel_size, *pixels.size, rect.x, rect.y,
    )
    return CropResult(image=SourceImage(pixels, source.density), rect=rect)
