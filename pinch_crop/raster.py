"""
Pixel extraction for resolved crops (Qt-free).

``extract_pixels`` is the only place the crop geometry touches raster data:
it maps a rectangle in logical source units onto the pixel grid using the
image's density and copies that region into a new image.
"""

from PIL import Image

from pinch_crop.models import Rect


def pixel_box(rect: Rect, density: float, pixel_size: tuple[int, int]) -> tuple[int, int, int, int]:
    """Convert a logical rect to an integer ``(left, top, right, bottom)`` pixel box.

    The box is rounded to the nearest pixel, kept inside the image and is
    always at least one pixel wide and tall.
    """
    img_w, img_h = pixel_size
    left = min(max(0, round(rect.x * density)), img_w - 1)
    top = min(max(0, round(rect.y * density)), img_h - 1)
    width = max(1, round(rect.width * density))
    height = max(1, round(rect.height * density))
    return left, top, min(left + width, img_w), min(top + height, img_h)


def extract_pixels(image: Image.Image, rect: Rect, density: float = 1.0) -> Image.Image:
    """Copy the region *rect* (logical units) out of *image*.

    The copy starts at the rect's top-left corner and keeps the full pixel
    resolution of the source, so a density-2 image yields twice as many
    pixels per logical unit in the output.  Pillow carries ``info`` (DPI
    included) over to the cropped copy.
    """
    return image.crop(pixel_box(rect, density, image.size))
