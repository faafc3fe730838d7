import logging
import math
import time
from typing import Callable, Optional

from pose_types import AngleMapping, LandmarkSet
from recording import RecordingBuffer

logger = logging.getLogger(__name__)

DEFAULT_COMPARE_FPS = 30


def index_at(elapsed_ms: float, frame_count: int, compare_fps: float = DEFAULT_COMPARE_FPS) -> int:
    # Free-running: playback loops at compare_fps whatever rate the recording was captured at.
    if frame_count <= 0 or not math.isfinite(compare_fps) or compare_fps <= 0:
        return 0
    if not math.isfinite(elapsed_ms) or elapsed_ms < 0:
        return 0
    # elapsed / (1000 / fps), multiplied out to avoid rounding just below a frame boundary.
    frames_elapsed = elapsed_ms * compare_fps / 1000.0
    if not math.isfinite(frames_elapsed):
        return 0
    return int(math.floor(frames_elapsed)) % frame_count


class PlaybackSynchronizer:
    def __init__(self, compare_fps: float = DEFAULT_COMPARE_FPS, clock: Callable[[], float] = time.monotonic):
        self.compare_fps = compare_fps
        self._clock = clock
        self._recording: Optional[RecordingBuffer] = None
        self._active = False
        self._start_time = 0.0
        self._index = 0

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def recording(self) -> Optional[RecordingBuffer]:
        return self._recording

    def start(self, recording: RecordingBuffer, stream_active: bool = True) -> bool:
        if not stream_active:
            logger.warning("Start the camera before comparing")
            return False
        if recording is None or recording.is_empty:
            logger.warning("No recording found to compare against")
            return False

        recording.ensure_angles()
        self._recording = recording
        self._start_time = self._clock()
        self._index = 0
        self._active = True
        logger.info("Comparison started against %d recorded frames", recording.frame_count)
        return True

    def stop(self) -> None:
        if self._active:
            logger.info("Comparison stopped")
        self._active = False
        self._index = 0

    def elapsed_ms(self) -> float:
        if not self._active:
            return 0.0
        return (self._clock() - self._start_time) * 1000.0

    def advance(self) -> int:
        if not self._active:
            return self._index
        if self._recording is None or self._recording.is_empty:
            logger.info("Recording is empty, comparison stopped")
            self._active = False
            self._index = 0
            return self._index
        self._index = index_at(self.elapsed_ms(), self._recording.frame_count, self.compare_fps)
        return self._index

    def _display_index(self) -> int:
        return self._index if self._active else 0

    def reference_frame(self, recording: Optional[RecordingBuffer] = None) -> Optional[LandmarkSet]:
        if recording is None:
            recording = self._recording
        if recording is None or recording.is_empty:
            return None
        return recording.frame_at(self._display_index())

    def reference_angles(self, recording: Optional[RecordingBuffer] = None) -> Optional[AngleMapping]:
        if recording is None:
            recording = self._recording
        if recording is None or recording.is_empty:
            return None
        return recording.angles_at(self._display_index())
