"""
Viewport transform state: the live pan/zoom applied to the displayed image.

``ViewportState`` is an immutable value.  Every update returns a new state,
so the UI layer only has to keep a reference to the latest one.  Gesture
updates are relative to the values committed at the end of the previous
gesture, never to the in-gesture values, so that consecutive pinches and
drags accumulate instead of resetting or double-applying.
"""

import logging
from dataclasses import dataclass, replace

from pinch_crop.config import MIN_SCALE, MAX_SCALE
from pinch_crop.models import Point

logger = logging.getLogger(__name__)


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(value, hi))


@dataclass(frozen=True)
class ViewportState:
    """Cumulative zoom factor and pan offset for one crop session."""
    scale: float = 1.0
    last_committed_scale: float = 1.0
    offset: Point = Point()
    last_committed_offset: Point = Point()
    min_scale: float = MIN_SCALE
    max_scale: float = MAX_SCALE

    def __post_init__(self):
        if not 0 < self.min_scale <= self.max_scale:
            raise ValueError(
                f"scale bounds must satisfy 0 < min <= max, got {self.min_scale!r}..{self.max_scale!r}"
            )

    @classmethod
    def initial(cls, min_scale: float = MIN_SCALE, max_scale: float = MAX_SCALE) -> "ViewportState":
        """Fresh state for a newly loaded image."""
        return cls(min_scale=min_scale, max_scale=max_scale).reset()

    # --- Gestures ---

    def begin_gesture(self) -> "ViewportState":
        # The committed values already are the base of the next gesture.
        return self

    def update_scale(self, multiplier: float) -> "ViewportState":
        """Apply a magnification ratio measured since the start of the gesture."""
        scale = clamp(self.last_committed_scale * multiplier, self.min_scale, self.max_scale)
        return replace(self, scale=scale)

    def end_scale_gesture(self) -> "ViewportState":
        return replace(self, last_committed_scale=self.scale)

    def update_offset(self, translation: Point) -> "ViewportState":
        """Apply a translation measured since the start of the gesture.

        The offset is not bounded here; limiting the pannable range depends
        on the viewport and fitted image size and is up to the caller.
        """
        return replace(self, offset=self.last_committed_offset + translation)

    def end_offset_gesture(self) -> "ViewportState":
        return replace(self, last_committed_offset=self.offset)

    def end_gesture(self) -> "ViewportState":
        """Commit both scale and offset, for combined pinch/drag gestures."""
        return self.end_scale_gesture().end_offset_gesture()

    def reset(self) -> "ViewportState":
        """Back to scale 1.0 and zero offset, committed immediately."""
        scale = clamp(1.0, self.min_scale, self.max_scale)
        logger.debug("Viewport reset (scale %.3f)", scale)
        return replace(
            self,
            scale=scale,
            last_committed_scale=scale,
            offset=Point(),
            last_committed_offset=Point(),
        )

    # --- Queries ---

    @property
    def in_gesture(self) -> bool:
        """True while there are uncommitted scale or offset changes."""
        return self.scale != self.last_committed_scale or self.offset != self.last_committed_offset
