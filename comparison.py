import logging
import math
import time
from typing import Callable, Dict, List, Optional, Tuple

from pose_types import AngleMapping

logger = logging.getLogger(__name__)

DEFAULT_REPORT_INTERVAL_MS = 750.0


def _is_finite_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def diff_angles(live: Optional[AngleMapping], reference: Optional[AngleMapping]) -> Optional[Dict[str, float]]:
    # Signed live - reference; joints missing on either side are left out, not zeroed.
    if live is None or reference is None:
        return None
    differences: Dict[str, float] = {}
    for key in list(live) + [k for k in reference if k not in live]:
        a = live.get(key)
        b = reference.get(key)
        if _is_finite_number(a) and _is_finite_number(b):
            differences[key] = float(a) - float(b)
    return differences or None


def mean_abs_difference(differences: Optional[Dict[str, float]]) -> Optional[float]:
    if not differences:
        return None
    return sum(abs(v) for v in differences.values()) / len(differences)


def worst_joints(
    differences: Optional[Dict[str, float]], threshold_deg: float = 15.0, limit: Optional[int] = None
) -> List[Tuple[str, float]]:
    if not differences:
        return []
    over = [(k, v) for k, v in differences.items() if abs(v) > threshold_deg]
    over.sort(key=lambda item: abs(item[1]), reverse=True)
    return over if limit is None else over[:limit]


class DivergenceReporter:
    def __init__(self, interval_ms: float = DEFAULT_REPORT_INTERVAL_MS, clock: Callable[[], float] = time.monotonic):
        self.interval_ms = interval_ms
        self._clock = clock
        self._last_report: Optional[float] = None

    def reset(self) -> None:
        self._last_report = None

    def report(self, differences: Optional[Dict[str, float]], index: int, frame_count: int) -> Optional[str]:
        mean_diff = mean_abs_difference(differences)
        if mean_diff is None or not math.isfinite(mean_diff):
            return None

        now = self._clock()
        if self._last_report is not None and (now - self._last_report) * 1000.0 < self.interval_ms:
            return None
        self._last_report = now

        line = f"Avg diff (frame {index + 1}/{frame_count}): {mean_diff:.1f} deg"
        logger.info("%s", line)
        return line
