"""
Application constants and configuration.

DEFAULT_SETTINGS provides the built-in fallback settings. Runtime settings are
loaded from settings.json via the settings module. All other constants control
viewport behaviour, overlay painting, and export defaults.

The ``config_dir()`` helper returns the platform-appropriate config
directory and is shared by all persistence modules.
"""

import os
import sys
from pathlib import Path

# =============================================================================
# APP IDENTITY & CONFIG DIRECTORY
# =============================================================================
APP_NAME = "pinch-crop"


def config_dir() -> Path:
    """Return the platform-appropriate config directory, creating it if needed."""
    if sys.platform == "win32":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    directory = base / APP_NAME
    directory.mkdir(parents=True, exist_ok=True)
    return directory

# =============================================================================
# VIEWPORT — zoom bounds and crop window layout
# =============================================================================
MIN_SCALE = 0.5
MAX_SCALE = 6.0

# Inset of the crop window from the container edges (logical units)
DEFAULT_PADDING = 40.0

# Square crop window unless a preset says otherwise
DEFAULT_ASPECT_RATIO = 1.0

# Multiplier applied per wheel notch (120 angle-delta units)
WHEEL_ZOOM_STEP = 1.1

# =============================================================================
# DEFAULT SETTINGS — Built-in fallback when settings.json is missing or corrupt
# =============================================================================
DEFAULT_SETTINGS = {
    "aspect_presets": [
        {"name": "Square", "ratio_w": 1, "ratio_h": 1},
        {"name": "4:3", "ratio_w": 4, "ratio_h": 3},
        {"name": "3:4", "ratio_w": 3, "ratio_h": 4},
        {"name": "16:9", "ratio_w": 16, "ratio_h": 9},
    ],
    "padding": DEFAULT_PADDING,
    "min_scale": MIN_SCALE,
    "max_scale": MAX_SCALE,
    "output_format": "PNG",
    "jpeg_quality": 95,
}

# PNG compression level (0-9, 9 = maximum compression)
PNG_COMPRESS_LEVEL = 9

# JPEG export defaults
JPEG_QUALITY_DEFAULT = 95
JPEG_QUALITY_MIN = 1
JPEG_QUALITY_MAX = 100
JPEG_SUBSAMPLING = 0  # 4:4:4

# Output format options
OUTPUT_FORMATS = ["PNG", "JPEG"]
OUTPUT_FORMAT_DEFAULT = "PNG"

# Supported image extensions
IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".bmp", ".tiff", ".tif", ".webp", ".psd"}

# =============================================================================
# OVERLAY PAINTING
# =============================================================================
BACKGROUND_RGB = (0, 0, 0)
OVERLAY_ALPHA = 153  # 60 % black outside the crop window
BORDER_WIDTH = 2
