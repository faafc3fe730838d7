import logging
import math
from typing import Dict, Optional, Tuple

from pose_types import LANDMARK_INDEX, AngleMapping, Landmark, LandmarkSet

logger = logging.getLogger(__name__)

MIN_MAGNITUDE = 1e-6

# (a, vertex, c) landmark triples; the vertex is the named joint.
JOINT_ANGLE_TRIPLES: Dict[str, Tuple[int, int, int]] = {
    "leftElbow": (LANDMARK_INDEX["left_shoulder"], LANDMARK_INDEX["left_elbow"], LANDMARK_INDEX["left_wrist"]),
    "rightElbow": (LANDMARK_INDEX["right_shoulder"], LANDMARK_INDEX["right_elbow"], LANDMARK_INDEX["right_wrist"]),
    "leftKnee": (LANDMARK_INDEX["left_hip"], LANDMARK_INDEX["left_knee"], LANDMARK_INDEX["left_ankle"]),
    "rightKnee": (LANDMARK_INDEX["right_hip"], LANDMARK_INDEX["right_knee"], LANDMARK_INDEX["right_ankle"]),
    "leftShoulder": (LANDMARK_INDEX["left_elbow"], LANDMARK_INDEX["left_shoulder"], LANDMARK_INDEX["left_hip"]),
    "rightShoulder": (LANDMARK_INDEX["right_elbow"], LANDMARK_INDEX["right_shoulder"], LANDMARK_INDEX["right_hip"]),
    "leftHip": (LANDMARK_INDEX["left_shoulder"], LANDMARK_INDEX["left_hip"], LANDMARK_INDEX["left_knee"]),
    "rightHip": (LANDMARK_INDEX["right_shoulder"], LANDMARK_INDEX["right_hip"], LANDMARK_INDEX["right_knee"]),
}

JOINT_NAMES = tuple(JOINT_ANGLE_TRIPLES)

# Smallest landmark set that covers every triple above.
MIN_LANDMARK_COUNT = max(max(triple) for triple in JOINT_ANGLE_TRIPLES.values()) + 1


def _to_xy(lm: Landmark) -> Tuple[float, float]:
    return lm.x, lm.y


def distance_3d(a: Landmark, b: Landmark) -> float:
    return math.sqrt((a.x - b.x) ** 2 + (a.y - b.y) ** 2 + (a.z - b.z) ** 2)


def angle_at(vertex: Landmark, a: Landmark, c: Landmark) -> float:
    # Angle a-vertex-c in the image plane; z is ignored.
    vx, vy = _to_xy(vertex)
    ax, ay = _to_xy(a)
    cx, cy = _to_xy(c)
    bax = ax - vx
    bay = ay - vy
    bcx = cx - vx
    bcy = cy - vy

    dot = bax * bcx + bay * bcy
    mag_ba = max(math.hypot(bax, bay), MIN_MAGNITUDE)
    mag_bc = max(math.hypot(bcx, bcy), MIN_MAGNITUDE)
    cos_theta = max(-1.0, min(1.0, dot / (mag_ba * mag_bc)))
    return math.degrees(math.acos(cos_theta))


def compute_angles(landmarks: Optional[LandmarkSet]) -> Optional[AngleMapping]:
    if landmarks is None:
        return None
    if len(landmarks) < MIN_LANDMARK_COUNT:
        logger.debug("Landmark set too short for joint angles: %d points", len(landmarks))
        return None

    angles: AngleMapping = {}
    for name, (a, b, c) in JOINT_ANGLE_TRIPLES.items():
        angles[name] = angle_at(landmarks[b], landmarks[a], landmarks[c])
    return angles
