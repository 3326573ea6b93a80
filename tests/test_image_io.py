import pytest
from PIL import Image

from pinch_crop.image_io import load_source_image, save_image, unique_path
from pinch_crop.models import SourceImage


def test_load_source_image(tmp_path):
    path = tmp_path / "photo.png"
    Image.new("RGB", (40, 30), "blue").save(path)
    src = load_source_image(path, density=2.0)
    assert src.pixel_size == (40, 30)
    assert src.intrinsic_size.width == 20


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(OSError):
        load_source_image(tmp_path / "nope.png")


def test_save_png_uses_unique_path(tmp_path):
    src = SourceImage(Image.new("RGBA", (10, 8)))
    first = save_image(src, tmp_path / "out.png")
    second = save_image(src, tmp_path / "out.png")
    assert first == tmp_path / "out.png"
    assert second == tmp_path / "out-01.png"
    with Image.open(second) as img:
        assert img.size == (10, 8)


def test_save_jpeg_forces_suffix(tmp_path):
    src = SourceImage(Image.new("RGBA", (10, 8)), density=2.0)
    out = save_image(src, tmp_path / "out.png", fmt="JPEG", jpeg_quality=80)
    assert out.suffix == ".jpg"
    with Image.open(out) as img:
        assert img.mode == "RGB"
        assert round(img.info["dpi"][0]) == 144


def test_unique_path_counts_up(tmp_path):
    (tmp_path / "a.png").touch()
    (tmp_path / "a-01.png").touch()
    assert unique_path(tmp_path / "a.png") == tmp_path / "a-02.png"
