import json
from copy import deepcopy

import pytest

from pinch_crop.config import DEFAULT_SETTINGS
from pinch_crop.settings import (
    aspect_key,
    load_settings,
    normalize_ratio,
    preset_aspect,
    save_settings,
    validate_settings,
)


def test_normalize_ratio():
    assert normalize_ratio(16, 12) == (4, 3)
    assert aspect_key(2, 2) == "1:1"


def test_preset_aspect():
    assert preset_aspect({"name": "x", "ratio_w": 16, "ratio_h": 9}) == pytest.approx(16 / 9)


def test_defaults_are_valid():
    assert validate_settings(DEFAULT_SETTINGS) == []


def test_missing_file_writes_defaults(isolated_config_dir):
    assert load_settings() == DEFAULT_SETTINGS
    raw = json.loads((isolated_config_dir / "settings.json").read_text(encoding="utf-8"))
    assert raw["version"] == 1
    assert raw["settings"] == DEFAULT_SETTINGS


def test_corrupt_file_restores_defaults(isolated_config_dir):
    (isolated_config_dir / "settings.json").write_text("{not json", encoding="utf-8")
    assert load_settings() == DEFAULT_SETTINGS


def test_save_then_load(isolated_config_dir):
    settings = deepcopy(DEFAULT_SETTINGS)
    settings["padding"] = 12.5
    settings["output_format"] = "JPEG"
    save_settings(settings)
    assert load_settings() == settings


def test_save_rejects_invalid():
    settings = deepcopy(DEFAULT_SETTINGS)
    settings["min_scale"] = 0
    with pytest.raises(ValueError):
        save_settings(settings)


def test_invalid_file_restores_defaults(isolated_config_dir):
    settings = deepcopy(DEFAULT_SETTINGS)
    settings["max_scale"] = 0.1
    envelope = {"version": 1, "settings": settings}
    (isolated_config_dir / "settings.json").write_text(json.dumps(envelope), encoding="utf-8")
    assert load_settings() == DEFAULT_SETTINGS


@pytest.mark.parametrize("mutate, fragment", [
    (lambda s: s.update(padding=-1), "padding"),
    (lambda s: s.update(output_format="GIF"), "output_format"),
    (lambda s: s.update(jpeg_quality=101), "jpeg_quality"),
    (lambda s: s.update(min_scale=1.5), "1.0"),
    (lambda s: s.update(aspect_presets=[]), "aspect_presets"),
    (lambda s: s["aspect_presets"].append({"name": "Dup", "ratio_w": 2, "ratio_h": 2}), "duplicates"),
    (lambda s: s["aspect_presets"].append({"name": "Bad", "ratio_w": 0, "ratio_h": 2}), "ratio_w"),
    (lambda s: s.pop("padding"), "missing keys"),
])
def test_validation_errors(mutate, fragment):
    settings = deepcopy(DEFAULT_SETTINGS)
    mutate(settings)
    errors = validate_settings(settings)
    assert errors
    assert any(fragment in e for e in errors)
