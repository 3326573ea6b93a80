from PIL import Image

from pinch_crop.models import Rect
from pinch_crop.raster import extract_pixels, pixel_box


def test_extract_copies_region_from_top_left(gradient_image):
    out = extract_pixels(gradient_image, Rect(1, 2, 3, 2))
    assert out.size == (3, 2)
    assert list(out.getdata()) == [17, 18, 19, 25, 26, 27]


def test_extract_scales_by_density(gradient_image):
    # 8x6 pixels at density 2 is a 4x3 logical image
    out = extract_pixels(gradient_image, Rect(1, 1, 2, 1), density=2.0)
    assert out.size == (4, 2)
    assert out.getpixel((0, 0)) == 2 * 8 + 2


def test_pixel_box_is_clamped_and_non_empty():
    assert pixel_box(Rect(7.9, 5.9, 0.01, 0.01), 1.0, (8, 6)) == (7, 5, 8, 6)
    assert pixel_box(Rect(0, 0, 100, 100), 1.0, (8, 6)) == (0, 0, 8, 6)


def test_extract_keeps_dpi_info():
    img = Image.new("RGB", (10, 10))
    img.info["dpi"] = (144, 144)
    out = extract_pixels(img, Rect(0, 0, 5, 5))
    assert out.info["dpi"] == (144, 144)
