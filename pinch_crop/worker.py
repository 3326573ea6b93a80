"""
One-shot crop extraction task (Qt-free).

Pixel extraction is the only part of a crop that can be slow for large
images, so the UI hands it to a background thread.  ``ExtractionTask``
takes ownership of the source image and the session's final viewport state
when it is created; it can be run exactly once, after which the source
reference is dropped.
"""

import logging
import time

from pinch_crop.models import CropConfig, CropResult, SourceImage
from pinch_crop.resolver import resolve_crop
from pinch_crop.viewport import ViewportState

logger = logging.getLogger(__name__)


class ExtractionTask:
    """Resolve and extract one crop; consuming, not reusable."""

    def __init__(self, source: SourceImage, state: ViewportState, config: CropConfig):
        self._source: SourceImage | None = source
        self._state = state
        self._config = config

    @property
    def consumed(self) -> bool:
        return self._source is None

    def run(self) -> CropResult:
        if self._source is None:
            raise RuntimeError("ExtractionTask has already been run")
        source, self._source = self._source, None
        start = time.perf_counter()
        result = resolve_crop(source, self._state, self._config)
        logger.debug("Extraction finished in %.1f ms", (time.perf_counter() - start) * 1000)
        return result
