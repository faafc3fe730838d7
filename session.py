import logging
import time
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Deque, Dict, List, Optional, Union

from comparison import DivergenceReporter, diff_angles, mean_abs_difference
from config import AppConfig
from geometry import compute_angles
from playback import PlaybackSynchronizer
from pose_types import AngleMapping, LandmarkSet
from recording import RecordingBuffer, RecordingFormatError
from stabilizer import Stabilizer

logger = logging.getLogger(__name__)

ROLE_INSTRUCTOR = "instructor"
ROLE_STUDENT = "student"
ROLES = (ROLE_INSTRUCTOR, ROLE_STUDENT)


@dataclass
class FrameResult:
    landmarks: Optional[LandmarkSet]
    angles: Optional[AngleMapping]
    overlay_frame: Optional[LandmarkSet]
    reference_angles: Optional[AngleMapping]
    differences: Optional[Dict[str, float]]
    mean_difference: Optional[float]
    compare_index: int
    recording: bool
    comparing: bool


class MotionSession:
    """
    Per-process state for one instructor/student session.

    Controls (start/stop recording, comparison, import) only flip state; the
    work happens in `tick()`, called once per captured frame.
    """

    def __init__(self, config: Optional[AppConfig] = None, clock: Callable[[], float] = time.monotonic):
        self.config = config or AppConfig()
        self.role = ROLE_INSTRUCTOR
        self.running = False
        self.stabilizer = Stabilizer(
            window_size=self.config.smooth_window,
            jitter_radius=self.config.jitter_radius,
            min_blend=self.config.min_blend,
        )
        self.recording = RecordingBuffer(
            max_duration_ms=self.config.record_duration_ms,
            fps=self.config.record_fps,
            clock=clock,
        )
        self.synchronizer = PlaybackSynchronizer(compare_fps=self.config.compare_fps, clock=clock)
        self.reporter = DivergenceReporter(interval_ms=self.config.report_interval_ms, clock=clock)
        self.messages: Deque[str] = deque(maxlen=self.config.log_lines)

    def _notify(self, message: str) -> None:
        self.messages.appendleft(message)

    def recent_messages(self) -> List[str]:
        return list(self.messages)

    def set_role(self, role: str) -> None:
        if role not in ROLES:
            raise ValueError(f"Unknown role: {role!r}")
        if role != self.role:
            logger.info("Role changed to %s", role)
        self.role = role

    def set_window_size(self, window_size: int) -> int:
        self.stabilizer.configure(window_size)
        return self.stabilizer.window_size

    def start_stream(self) -> None:
        self.running = True
        self._notify("Camera started")

    def stop_stream(self) -> None:
        if self.recording.is_recording:
            self.stop_recording()
        self.stop_comparison()
        self.stabilizer.reset()
        self.running = False
        self._notify("Camera stopped")

    def start_recording(self) -> bool:
        if not self.running:
            self._notify("Start the camera first")
            logger.warning("Recording requested without an active camera")
            return False
        self.synchronizer.stop()
        self.reporter.reset()
        self.recording.start()
        self._notify(f"Recording started (max {self.recording.max_duration_ms / 1000.0:g}s)")
        return True

    def stop_recording(self, reason: str = "stopped manually") -> int:
        if not self.recording.is_recording:
            return self.recording.frame_count
        count = self.recording.stop(reason=reason)
        self._notify(f"Recording {reason} ({count} frames)")
        return count

    def start_comparison(self) -> bool:
        if not self.running:
            self._notify("Start the camera before comparing")
        elif self.recording.is_recording:
            self._notify("Stop the recording before comparing")
            logger.warning("Comparison requested while recording is in progress")
            return False
        elif self.recording.is_empty:
            self._notify("No recording found to compare against")
        if not self.synchronizer.start(self.recording, stream_active=self.running):
            return False
        self.reporter.reset()
        self._notify("Comparison started using the latest instructor recording")
        return True

    def stop_comparison(self) -> None:
        if self.synchronizer.is_active:
            self._notify("Comparison stopped")
        self.synchronizer.stop()

    def import_payload(self, data: Any) -> bool:
        return self._import(lambda: self.recording.load_payload(data), "payload")

    def import_file(self, path: Union[str, Path]) -> bool:
        path = Path(path)
        return self._import(lambda: self.recording.load_json(path), path.name)

    def _import(self, load: Callable[[], int], source: str) -> bool:
        try:
            count = load()
        except RecordingFormatError as e:
            logger.warning("Rejected recording import from %s: %s", source, e)
            self._notify(f"Invalid JSON: {e}")
            return False
        except OSError as e:
            logger.warning("Could not read %s: %s", source, e)
            self._notify(f"Could not read {source}")
            return False
        self.synchronizer.stop()
        self._notify(f"Loaded instructor JSON: {count} frames")
        return True

    def export_payload(self) -> Dict[str, Any]:
        return self.recording.to_payload()

    def export_file(self, path: Union[str, Path]) -> bool:
        path = Path(path)
        if self.recording.is_empty:
            self._notify("Nothing recorded yet")
            return False
        try:
            self.recording.save_json(path)
        except OSError as e:
            logger.warning("Could not write %s: %s", path, e)
            self._notify(f"Could not write {path.name}")
            return False
        self._notify(f"Exported {path.name}")
        return True

    def tick(self, raw: Optional[LandmarkSet]) -> FrameResult:
        if not self.running:
            return FrameResult(None, None, None, None, None, None, 0, self.recording.is_recording, False)

        stabilized = self.stabilizer.push(raw)
        landmarks = stabilized if stabilized is not None else raw
        angles = compute_angles(landmarks)

        if self.recording.is_recording and self.role == ROLE_INSTRUCTOR:
            self.recording.append(landmarks, angles)
        if self.recording.tick():
            self._notify(f"Recording completed automatically ({self.recording.frame_count} frames)")

        if self.synchronizer.is_active:
            self.synchronizer.advance()
        overlay_frame = self.synchronizer.reference_frame(self.recording)
        reference_angles = self.synchronizer.reference_angles(self.recording)
        index = self.synchronizer.current_index

        differences = None
        mean_difference = None
        if self.synchronizer.is_active and self.role == ROLE_STUDENT and angles is not None:
            differences = diff_angles(angles, reference_angles)
            mean_difference = mean_abs_difference(differences)
            line = self.reporter.report(differences, index, self.recording.frame_count)
            if line is not None:
                self._notify(line)

        return FrameResult(
            landmarks=landmarks,
            angles=angles,
            overlay_frame=overlay_frame,
            reference_angles=reference_angles,
            differences=differences,
            mean_difference=mean_difference,
            compare_index=index,
            recording=self.recording.is_recording,
            comparing=self.synchronizer.is_active,
        )
