import json
import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from geometry import compute_angles
from pose_types import AngleMapping, LandmarkSet, landmark_from_dict, landmark_to_dict

logger = logging.getLogger(__name__)

DEFAULT_MAX_DURATION_MS = 4000.0
DEFAULT_FPS = 30


class RecordingFormatError(ValueError):
    pass


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _parse_frame(raw: Any, position: int) -> LandmarkSet:
    if not isinstance(raw, list):
        raise RecordingFormatError(f"frame {position} is not a list of points")
    try:
        return [landmark_from_dict(point) for point in raw]
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise RecordingFormatError(f"frame {position} has a malformed point: {e}") from e


def _parse_angles(raw: Any) -> Optional[AngleMapping]:
    if not isinstance(raw, Mapping):
        return None
    angles: AngleMapping = {}
    for key, value in raw.items():
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            angles[str(key)] = float(value)
    return angles


class RecordingBuffer:
    """
    Frames and angle mappings captured while recording is active.

    Recording stops by itself once `max_duration_ms` has elapsed; the check runs
    from `tick()`, which the host calls once per frame. `frames` and `angles`
    always have the same length once recording has stopped or a payload has
    been loaded.
    """

    def __init__(
        self,
        max_duration_ms: float = DEFAULT_MAX_DURATION_MS,
        fps: int = DEFAULT_FPS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_duration_ms = max_duration_ms
        self.fps = fps
        self.created_at: Optional[str] = None
        self._clock = clock
        self._frames: List[LandmarkSet] = []
        self._angles: List[Optional[AngleMapping]] = []
        self._start_time: Optional[float] = None
        self._recording = False

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def frames(self) -> List[LandmarkSet]:
        return list(self._frames)

    @property
    def angles(self) -> List[Optional[AngleMapping]]:
        return list(self._angles)

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    @property
    def is_empty(self) -> bool:
        return not self._frames

    def __len__(self) -> int:
        return len(self._frames)

    def frame_at(self, index: int) -> Optional[LandmarkSet]:
        if not self._frames:
            return None
        return self._frames[index % len(self._frames)]

    def angles_at(self, index: int) -> Optional[AngleMapping]:
        self.ensure_angles()
        if not self._angles:
            return None
        return self._angles[index % len(self._angles)]

    def start(self) -> None:
        self._frames = []
        self._angles = []
        self._start_time = self._clock()
        self._recording = True
        self.created_at = _now_iso()
        logger.info("Recording started (max %.0fs)", self.max_duration_ms / 1000.0)

    def append(self, landmarks: Optional[LandmarkSet], angles: Optional[AngleMapping] = None) -> bool:
        if not self._recording or landmarks is None:
            return False
        if angles is None:
            angles = compute_angles(landmarks)
        self._frames.append(list(landmarks))
        self._angles.append(dict(angles) if angles is not None else None)
        return True

    def elapsed_ms(self) -> float:
        if self._start_time is None:
            return 0.0
        return (self._clock() - self._start_time) * 1000.0

    def tick(self) -> bool:
        if not self._recording:
            return False
        if self.elapsed_ms() >= self.max_duration_ms:
            self.stop(reason="completed automatically")
            return True
        return False

    def stop(self, reason: str = "stopped manually") -> int:
        if not self._recording:
            return len(self._frames)
        self._recording = False
        self._start_time = None
        self.ensure_angles()
        logger.info("Recording %s (%d frames)", reason, len(self._frames))
        return len(self._frames)

    def ensure_angles(self) -> None:
        if len(self._angles) == len(self._frames):
            return
        logger.debug("Recomputing angles for %d frames", len(self._frames))
        self._angles = [compute_angles(frame) for frame in self._frames]

    def to_payload(self) -> Dict[str, Any]:
        self.ensure_angles()
        return {
            "frames": [[landmark_to_dict(lm) for lm in frame] for frame in self._frames],
            "angles": [dict(a) if a is not None else None for a in self._angles],
            "fps": int(self.fps),
            "createdAt": self.created_at or _now_iso(),
        }

    def load_payload(self, data: Any) -> int:
        if not isinstance(data, Mapping):
            raise RecordingFormatError("payload is not an object")
        raw_frames = data.get("frames")
        if raw_frames is None:
            raise RecordingFormatError("missing 'frames'")
        if not isinstance(raw_frames, list):
            raise RecordingFormatError("'frames' is not a list")

        frames = [_parse_frame(raw, i) for i, raw in enumerate(raw_frames)]
        raw_angles = data.get("angles")
        angles: List[Optional[AngleMapping]] = []
        if isinstance(raw_angles, list):
            angles = [_parse_angles(a) for a in raw_angles]

        fps = data.get("fps", self.fps)
        try:
            fps = int(fps)
        except (TypeError, ValueError):
            fps = self.fps

        # Everything parsed, only now replace the current contents.
        self._recording = False
        self._start_time = None
        self._frames = frames
        self._angles = angles
        self.fps = fps
        created_at = data.get("createdAt")
        self.created_at = str(created_at) if created_at else None
        self.ensure_angles()
        logger.info("Loaded recording: %d frames", len(self._frames))
        return len(self._frames)

    def save_json(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        path.write_text(json.dumps(self.to_payload(), indent=2), encoding="utf-8")
        logger.info("Exported %d frames to %s", len(self._frames), path)
        return path

    def load_json(self, path: Union[str, Path]) -> int:
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise RecordingFormatError(f"{path.name}: {e}") from e
        return self.load_payload(data)
