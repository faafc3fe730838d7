import time
from dataclasses import dataclass
from typing import Optional, Union

import cv2
import numpy as np


@dataclass
class CameraFrame:
    frame: Optional[np.ndarray]
    timestamp: float
    ok: bool


class CameraStream:
    def __init__(
        self,
        source: Union[int, str] = 0,
        width: int = 1280,
        height: int = 720,
        target_fps: int = 30,
        mirror: bool = True,
    ):
        self.source = source
        self.width = width
        self.height = height
        self.target_fps = target_fps
        self.mirror = mirror
        self._capture: Optional[cv2.VideoCapture] = None
        self._last_time = time.monotonic()

    def open(self) -> bool:
        self._capture = cv2.VideoCapture(self.source)
        if not self._capture.isOpened():
            self._capture = None
            return False
        self._capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        self._capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        self._capture.set(cv2.CAP_PROP_FPS, self.target_fps)
        self._last_time = time.monotonic()
        return True

    def read(self) -> CameraFrame:
        if self._capture is None:
            return CameraFrame(None, time.monotonic(), False)

        ok, frame = self._capture.read()
        now = time.monotonic()
        if not ok:
            return CameraFrame(None, now, False)

        # Pace reads so the frame tick stays near target_fps.
        if self.target_fps > 0:
            min_frame_time = 1.0 / float(self.target_fps)
            elapsed = now - self._last_time
            if elapsed < min_frame_time:
                time.sleep(min_frame_time - elapsed)
                now = time.monotonic()
        self._last_time = now
        if self.mirror:
            frame = cv2.flip(frame, 1)
        return CameraFrame(frame, now, True)

    def release(self) -> None:
        if self._capture is not None:
            self._capture.release()
            self._capture = None
