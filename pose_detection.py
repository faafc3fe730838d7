import cv2
import mediapipe as mp

from pose_types import Landmark, PoseFrame


class PoseDetector:
    """MediaPipe Pose wrapper returning the full landmark set in normalized image coordinates."""

    def __init__(
        self,
        model_complexity: int = 0,
        min_detection_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
        smooth_landmarks: bool = False,
    ):
        self._mp_pose = mp.solutions.pose
        self._pose = self._mp_pose.Pose(
            static_image_mode=False,
            model_complexity=model_complexity,
            smooth_landmarks=smooth_landmarks,
            enable_segmentation=False,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )

    def process(self, frame_bgr, timestamp: float) -> PoseFrame:
        height, width = frame_bgr.shape[:2]
        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        results = self._pose.process(frame_rgb)

        if results.pose_landmarks is None:
            return PoseFrame(timestamp=timestamp, image_size=(width, height), landmarks=None, valid=False)

        # Index order follows mp.solutions.pose.PoseLandmark and never changes between frames.
        landmarks = [
            Landmark(float(lm.x), float(lm.y), float(lm.z), float(lm.visibility))
            for lm in results.pose_landmarks.landmark
        ]
        return PoseFrame(timestamp=timestamp, image_size=(width, height), landmarks=landmarks, valid=True)

    def close(self) -> None:
        self._pose.close()
