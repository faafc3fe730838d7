import math
from collections import deque
from typing import Deque, Optional

import numpy as np

from pose_types import Landmark, LandmarkSet


def _to_array(landmarks: LandmarkSet) -> np.ndarray:
    return np.array([[lm.x, lm.y, lm.z, lm.visibility] for lm in landmarks], dtype=float).reshape(-1, 4)


def _window_length(maxlen) -> int:
    try:
        value = float(maxlen)
    except (TypeError, ValueError):
        return 1
    if not math.isfinite(value):
        return 1
    return max(1, int(value))


class LandmarkWindow:
    """Bounded FIFO of raw landmark sets, stored as (L, 4) arrays of x, y, z, visibility."""

    def __init__(self, maxlen: int = 5):
        self._buffer: Deque[np.ndarray] = deque(maxlen=_window_length(maxlen))

    @property
    def maxlen(self) -> int:
        return self._buffer.maxlen

    def __len__(self) -> int:
        return len(self._buffer)

    def clear(self) -> None:
        self._buffer.clear()

    def set_maxlen(self, maxlen: int) -> None:
        self._buffer = deque(maxlen=_window_length(maxlen))

    def landmark_count(self) -> Optional[int]:
        return self._buffer[-1].shape[0] if self._buffer else None

    def append(self, landmarks: LandmarkSet) -> None:
        # np.array copies, so later changes to the caller's list never reach the window.
        self._buffer.append(_to_array(landmarks))

    def mean(self) -> Optional[LandmarkSet]:
        if not self._buffer:
            return None
        averaged = np.mean(np.stack(self._buffer), axis=0)
        return [Landmark(float(x), float(y), float(z), float(v)) for x, y, z, v in averaged]
