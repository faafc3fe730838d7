import logging
import math
from typing import Optional

from geometry import distance_3d
from history import LandmarkWindow
from pose_types import Landmark, LandmarkSet

logger = logging.getLogger(__name__)

# Displacement (normalized frame units) treated as detector noise.
DEFAULT_JITTER_RADIUS = 0.0125
# Sub-threshold motion still advances this fraction toward the new average.
DEFAULT_MIN_BLEND = 0.2


class Stabilizer:
    """
    Moving average over the last `window_size` landmark sets, followed by
    distance-adaptive blending against the previous output.

    Small displacements (below `jitter_radius`) only move the output by
    `min_blend` of the way, large ones are followed almost immediately.
    """

    def __init__(
        self,
        window_size: int = 5,
        jitter_radius: float = DEFAULT_JITTER_RADIUS,
        min_blend: float = DEFAULT_MIN_BLEND,
    ):
        self.jitter_radius = jitter_radius
        self.min_blend = min_blend
        self._window = LandmarkWindow(maxlen=window_size)
        self._last_output: Optional[LandmarkSet] = None

    @property
    def window_size(self) -> int:
        return self._window.maxlen

    @property
    def last_output(self) -> Optional[LandmarkSet]:
        return None if self._last_output is None else list(self._last_output)

    def __len__(self) -> int:
        return len(self._window)

    def configure(self, window_size: int) -> None:
        self._window.set_maxlen(window_size)
        self.reset()
        logger.debug("Stabilizer window set to %d", self.window_size)

    def reset(self) -> None:
        self._window.clear()
        self._last_output = None

    def push(self, raw: Optional[LandmarkSet]) -> Optional[LandmarkSet]:
        if raw is None:
            return None

        known = self._window.landmark_count()
        if known is not None and known != len(raw):
            logger.debug("Landmark count changed from %d to %d, resetting window", known, len(raw))
            self.reset()

        self._window.append(raw)
        averaged = self._window.mean()
        if averaged is None:
            return None

        previous = self._last_output
        stabilized = [
            self._blend(point, previous[idx] if previous is not None else None)
            for idx, point in enumerate(averaged)
        ]
        self._last_output = stabilized
        return list(stabilized)

    def _blend(self, point: Landmark, prev: Optional[Landmark]) -> Landmark:
        if prev is None:
            return point

        dist = distance_3d(point, prev)
        if not math.isfinite(dist):
            return point

        ratio = min(1.0, dist / self.jitter_radius) if self.jitter_radius > 0 else 1.0
        blend = self.min_blend + (1.0 - self.min_blend) * ratio
        return Landmark(
            prev.x + (point.x - prev.x) * blend,
            prev.y + (point.y - prev.y) * blend,
            prev.z + (point.z - prev.z) * blend,
            (prev.visibility + point.visibility) / 2.0,
        )
