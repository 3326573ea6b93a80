import pytest
pytest.importorskip("PyQt6")

from PIL import Image

from pinch_crop.main_window import crop_status_message
from pinch_crop.models import CropResult, Rect, SourceImage


@pytest.fixture
def source():
    return SourceImage(Image.new("RGB", (10, 10)))


def test_status_for_normal_crop_is_detail_only(source):
    result = CropResult(source, Rect(0, 0, 5, 5))
    assert crop_status_message(result, "Saved 5×5 crop to out.png") == "Saved 5×5 crop to out.png"


@pytest.mark.parametrize("detail", ["Crop discarded.", "Saved 10×10 crop to out.png"])
def test_status_for_fallback_keeps_both_messages(source, detail):
    message = crop_status_message(CropResult(source), detail)
    assert "did not cover the image" in message
    assert message.endswith(detail)
