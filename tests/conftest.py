from typing import Dict, Optional, Tuple

import pytest

from pose_types import LANDMARK_INDEX, POSE_LANDMARK_COUNT, Landmark


class FakeClock:
    """Monotonic clock in seconds that only moves when told to."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: float) -> None:
        self.now += ms / 1000.0


def make_pose(
    overrides: Optional[Dict[str, Tuple[float, float]]] = None,
    count: int = POSE_LANDMARK_COUNT,
    visibility: float = 1.0,
):
    # Standing pose, arms hanging straight down, legs straight.
    base = {
        "left_shoulder": (0.40, 0.30),
        "right_shoulder": (0.60, 0.30),
        "left_elbow": (0.40, 0.40),
        "right_elbow": (0.60, 0.40),
        "left_wrist": (0.40, 0.50),
        "right_wrist": (0.60, 0.50),
        "left_hip": (0.45, 0.55),
        "right_hip": (0.55, 0.55),
        "left_knee": (0.45, 0.70),
        "right_knee": (0.55, 0.70),
        "left_ankle": (0.45, 0.85),
        "right_ankle": (0.55, 0.85),
    }
    base.update(overrides or {})
    points = [Landmark(0.5, 0.2, 0.0, visibility) for _ in range(count)]
    for name, (x, y) in base.items():
        idx = LANDMARK_INDEX[name]
        if idx < count:
            points[idx] = Landmark(x, y, 0.0, visibility)
    return points


@pytest.fixture
def clock():
    return FakeClock()
