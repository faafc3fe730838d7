from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class Landmark:
    x: float
    y: float
    z: float
    visibility: float


LandmarkSet = List[Landmark]
AngleMapping = Dict[str, float]


@dataclass
class PoseFrame:
    timestamp: float
    image_size: Tuple[int, int]
    landmarks: Optional[LandmarkSet]
    valid: bool


# MediaPipe Pose indices for the tracked body points.
LANDMARK_INDEX: Dict[str, int] = {
    "left_shoulder": 11,
    "right_shoulder": 12,
    "left_elbow": 13,
    "right_elbow": 14,
    "left_wrist": 15,
    "right_wrist": 16,
    "left_hip": 23,
    "right_hip": 24,
    "left_knee": 25,
    "right_knee": 26,
    "left_ankle": 27,
    "right_ankle": 28,
}

POSE_LANDMARK_COUNT = 33


def landmark_from_dict(data: Mapping) -> Landmark:
    visibility = data.get("visibility")
    return Landmark(
        float(data["x"]),
        float(data["y"]),
        float(data.get("z", 0.0)),
        float(visibility) if visibility is not None else 0.0,
    )


def landmark_to_dict(lm: Landmark) -> Dict[str, float]:
    return {"x": lm.x, "y": lm.y, "z": lm.z, "visibility": lm.visibility}
