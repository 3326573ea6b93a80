"""
Data models shared by the viewport state, the crop resolver and the UI.

``Size``, ``Point`` and ``Rect`` are plain float geometry in either container
space (the on-screen viewport, logical units) or source space (the image's
intrinsic units).  ``SourceImage`` pairs a decoded Pillow raster with its
pixel density so that intrinsic (logical) size and pixel size can differ.
"""

from dataclasses import dataclass

from PIL import Image


# =============================================================================
# Geometry
# =============================================================================
@dataclass(frozen=True)
class Size:
    width: float = 0.0
    height: float = 0.0

    def __mul__(self, factor: float) -> "Size":
        return Size(self.width * factor, self.height * factor)

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


@dataclass(frozen=True)
class Point:
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle; width and height are never negative."""
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Rect extents must be non-negative, got {self.width} x {self.height}")

    @property
    def origin(self) -> Point:
        return Point(self.x, self.y)

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def intersection(self, other: "Rect") -> "Rect":
        """Return the overlapping region, or an empty rect at the origin if disjoint."""
        left = max(self.x, other.x)
        top = max(self.y, other.y)
        right = min(self.right, other.right)
        bottom = min(self.bottom, other.bottom)
        if right <= left or bottom <= top:
            return Rect()
        return Rect(left, top, right - left, bottom - top)

    def as_tuple(self) -> tuple[float, float, float, float]:
        return self.x, self.y, self.width, self.height


# =============================================================================
# Images and crop configuration
# =============================================================================
@dataclass(frozen=True)
class SourceImage:
    """A decoded raster plus the density used to map logical units to pixels.

    ``intrinsic_size`` is measured in logical units: a 2000x1500 pixel image
    at density 2.0 has an intrinsic size of 1000x750.
    """
    image: Image.Image
    density: float = 1.0

    def __post_init__(self):
        if self.density < 1:
            raise ValueError(f"density must be >= 1, got {self.density!r}")

    @property
    def pixel_size(self) -> tuple[int, int]:
        return self.image.size

    @property
    def intrinsic_size(self) -> Size:
        w, h = self.image.size
        return Size(w / self.density, h / self.density)


@dataclass(frozen=True)
class CropConfig:
    """Layout of the fixed crop window, recomputed on every layout pass."""
    aspect_ratio: float = 1.0
    container_size: Size = Size()
    padding: float = 0.0

    def __post_init__(self):
        if self.aspect_ratio <= 0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio!r}")
        if self.padding < 0:
            raise ValueError(f"padding must be non-negative, got {self.padding!r}")


@dataclass(frozen=True)
class CropResult:
    """Output of one crop commit.

    ``rect`` is the source-space rectangle that was extracted, or None when
    the resolver fell back to returning the unmodified source image.
    """
    image: SourceImage
    rect: Rect | None = None

    @property
    def fallback(self) -> bool:
        return self.rect is None
