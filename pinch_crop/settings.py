"""
Settings persistence: load, save, and validate user settings.

Runtime settings are stored in a JSON file in the user's config directory
(provided by ``config.config_dir()``).  On first launch (or if the file
is missing/corrupt), the file is created from DEFAULT_SETTINGS.  This
module is Qt-free.

The on-disk format uses a versioned envelope::

    {"version": 1, "settings": {"aspect_presets": [...], "padding": 40.0, ...}}

Each aspect preset has a ``name`` and integer ``ratio_w``/``ratio_h``.
Presets are identified by ``aspect_key()`` so that 2:2 and 1:1 count as the
same crop shape.
"""

import json
import logging
from copy import deepcopy
from math import gcd
from pathlib import Path

from pinch_crop.config import DEFAULT_SETTINGS, OUTPUT_FORMATS, JPEG_QUALITY_MIN, JPEG_QUALITY_MAX, config_dir

logger = logging.getLogger(__name__)

_SETTINGS_FILENAME = "settings.json"
_FORMAT_VERSION = 1

_REQUIRED_KEYS = set(DEFAULT_SETTINGS)
_PRESET_REQUIRED_KEYS = {"name", "ratio_w", "ratio_h"}


# =============================================================================
# Aspect-ratio helpers
# =============================================================================
def normalize_ratio(w: int, h: int) -> tuple[int, int]:
    """Reduce ratio to simplest form via GCD. (16, 12) → (4, 3)"""
    g = gcd(w, h)
    return w // g, h // g


def aspect_key(w: int, h: int) -> str:
    """Normalized string key for a preset. (16, 12) → '4:3'"""
    nw, nh = normalize_ratio(w, h)
    return f"{nw}:{nh}"


def preset_aspect(preset: dict) -> float:
    return preset["ratio_w"] / preset["ratio_h"]


def _settings_path() -> Path:
    return config_dir() / _SETTINGS_FILENAME


def _is_number(val) -> bool:
    return isinstance(val, (int, float)) and not isinstance(val, bool)


# =============================================================================
# Validation
# =============================================================================
def validate_settings(data: object) -> list[str]:
    """
    Validate a settings dict.

    Returns a list of error strings (empty means valid).
    """
    errors: list[str] = []

    if not isinstance(data, dict):
        errors.append("Settings must be a dict")
        return errors

    missing = _REQUIRED_KEYS - data.keys()
    if missing:
        errors.append(f"missing keys: {', '.join(sorted(missing))}")
        return errors

    padding = data["padding"]
    if not _is_number(padding) or padding < 0:
        errors.append(f"padding must be a non-negative number, got {padding!r}")

    min_scale, max_scale = data["min_scale"], data["max_scale"]
    if not _is_number(min_scale) or min_scale <= 0:
        errors.append(f"min_scale must be a positive number, got {min_scale!r}")
    elif not _is_number(max_scale) or max_scale < min_scale:
        errors.append(f"max_scale must be a number >= min_scale, got {max_scale!r}")
    elif not min_scale <= 1.0 <= max_scale:
        errors.append("scale range must include 1.0")

    if data["output_format"] not in OUTPUT_FORMATS:
        errors.append(f"output_format must be one of {', '.join(OUTPUT_FORMATS)}, got {data['output_format']!r}")

    quality = data["jpeg_quality"]
    if not isinstance(quality, int) or not JPEG_QUALITY_MIN <= quality <= JPEG_QUALITY_MAX:
        errors.append(f"jpeg_quality must be an integer {JPEG_QUALITY_MIN}-{JPEG_QUALITY_MAX}, got {quality!r}")

    presets = data["aspect_presets"]
    if not isinstance(presets, list) or len(presets) == 0:
        errors.append("aspect_presets must be a non-empty list")
        return errors

    keys_seen: dict[str, str] = {}  # aspect_key -> preset name
    for i, preset in enumerate(presets):
        prefix = f"Preset #{i + 1}"

        if not isinstance(preset, dict):
            errors.append(f"{prefix}: must be a dict")
            continue

        pmissing = _PRESET_REQUIRED_KEYS - preset.keys()
        if pmissing:
            errors.append(f"{prefix}: missing keys: {', '.join(sorted(pmissing))}")
            continue

        name = preset["name"]
        if not isinstance(name, str) or not name.strip():
            errors.append(f"{prefix}: name must be a non-empty string")

        valid_ratio = True
        for key in ("ratio_w", "ratio_h"):
            val = preset[key]
            if not isinstance(val, int) or isinstance(val, bool) or val <= 0:
                errors.append(f"{prefix}: {key} must be a positive integer, got {val!r}")
                valid_ratio = False

        if valid_ratio:
            akey = aspect_key(preset["ratio_w"], preset["ratio_h"])
            if akey in keys_seen:
                errors.append(f"{prefix} ('{name}'): aspect ratio {akey} duplicates preset '{keys_seen[akey]}'")
            else:
                keys_seen[akey] = name

    return errors


# =============================================================================
# Load / Save
# =============================================================================
def load_settings() -> dict:
    """
    Load settings from settings.json.

    If the file is missing, corrupt, or fails validation, writes the
    defaults and returns them.
    """
    path = _settings_path()

    if not path.exists():
        logger.info("settings.json not found — creating with defaults at %s", path)
        _write_defaults(path)
        return deepcopy(DEFAULT_SETTINGS)

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("Failed to read settings.json (%s) — restoring defaults", exc)
        _write_defaults(path)
        return deepcopy(DEFAULT_SETTINGS)

    if not isinstance(raw, dict) or raw.get("version") != _FORMAT_VERSION or "settings" not in raw:
        logger.warning("settings.json missing version envelope — restoring defaults")
        _write_defaults(path)
        return deepcopy(DEFAULT_SETTINGS)

    data = raw["settings"]
    errors = validate_settings(data)
    if errors:
        logger.warning(
            "settings.json validation failed:\n  %s\nRestoring defaults.",
            "\n  ".join(errors),
        )
        _write_defaults(path)
        return deepcopy(DEFAULT_SETTINGS)

    return data


def save_settings(settings: dict) -> None:
    """
    Validate and write settings to settings.json in versioned envelope.

    Raises ValueError if validation fails.
    Raises OSError if the file cannot be written.
    """
    errors = validate_settings(settings)
    if errors:
        raise ValueError("Invalid settings:\n  " + "\n  ".join(errors))

    envelope = {"version": _FORMAT_VERSION, "settings": settings}
    path = _settings_path()
    path.write_text(json.dumps(envelope, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Saved settings to %s", path)


def _write_defaults(path: Path) -> None:
    try:
        envelope = {"version": _FORMAT_VERSION, "settings": deepcopy(DEFAULT_SETTINGS)}
        path.write_text(json.dumps(envelope, indent=2, ensure_ascii=False), encoding="utf-8")
    except OSError as exc:
        logger.error("Could not write default settings to %s: %s", path, exc)
