from typing import Dict, Iterable, Optional, Tuple

import cv2

from geometry import JOINT_ANGLE_TRIPLES
from pose_types import LANDMARK_INDEX, AngleMapping, Landmark, LandmarkSet

LIVE_COLOR = (113, 204, 46)
REFERENCE_COLOR = (255, 144, 30)
HIGHLIGHT_COLOR = (0, 0, 255)

# Body only, no face or hands.
BODY_POINTS = [
    LANDMARK_INDEX[name]
    for name in (
        "left_shoulder", "right_shoulder", "left_elbow", "right_elbow", "left_wrist", "right_wrist",
        "left_hip", "right_hip", "left_knee", "right_knee", "left_ankle", "right_ankle",
    )
]

BODY_SEGMENTS = [
    (LANDMARK_INDEX[a], LANDMARK_INDEX[b])
    for a, b in (
        ("left_shoulder", "left_elbow"),
        ("left_elbow", "left_wrist"),
        ("right_shoulder", "right_elbow"),
        ("right_elbow", "right_wrist"),
        ("left_hip", "left_knee"),
        ("left_knee", "left_ankle"),
        ("right_hip", "right_knee"),
        ("right_knee", "right_ankle"),
        ("left_shoulder", "right_shoulder"),
        ("left_hip", "right_hip"),
        ("left_shoulder", "left_hip"),
        ("right_shoulder", "right_hip"),
    )
]


def _to_pixel(lm: Landmark, image_size: Tuple[int, int]) -> Tuple[int, int]:
    width, height = image_size
    return int(lm.x * width), int(lm.y * height)


def _point(landmarks: LandmarkSet, idx: int) -> Optional[Landmark]:
    return landmarks[idx] if 0 <= idx < len(landmarks) else None


def joint_vertices(joints: Iterable[str]) -> Dict[int, str]:
    return {JOINT_ANGLE_TRIPLES[j][1]: j for j in joints if j in JOINT_ANGLE_TRIPLES}


def draw_skeleton(
    frame,
    landmarks: Optional[LandmarkSet],
    color: Tuple[int, int, int] = LIVE_COLOR,
    thickness: int = 3,
    highlight: Optional[Iterable[int]] = None,
) -> None:
    if landmarks is None:
        return
    height, width = frame.shape[:2]
    highlight = set(highlight or ())

    for a, b in BODY_SEGMENTS:
        lm_a = _point(landmarks, a)
        lm_b = _point(landmarks, b)
        if lm_a is None or lm_b is None:
            continue
        cv2.line(frame, _to_pixel(lm_a, (width, height)), _to_pixel(lm_b, (width, height)), color, thickness)

    for idx in BODY_POINTS:
        lm = _point(landmarks, idx)
        if lm is None:
            continue
        radius = 8 if idx in highlight else 4
        point_color = HIGHLIGHT_COLOR if idx in highlight else color
        cv2.circle(frame, _to_pixel(lm, (width, height)), radius, point_color, -1)


def draw_joint_angles(frame, landmarks: Optional[LandmarkSet], angles: Optional[AngleMapping]) -> None:
    if landmarks is None or not angles:
        return
    height, width = frame.shape[:2]
    for name, (_, vertex, _) in JOINT_ANGLE_TRIPLES.items():
        lm = _point(landmarks, vertex)
        if lm is None or name not in angles:
            continue
        x, y = _to_pixel(lm, (width, height))
        cv2.putText(frame, f"{int(angles[name])}", (x + 6, y - 6), cv2.FONT_HERSHEY_SIMPLEX, 0.5, (0, 255, 255), 1)
