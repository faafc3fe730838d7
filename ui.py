from typing import Dict, List, Optional

import cv2

from pose_types import AngleMapping

ANGLE_LABELS = {
    "leftElbow": "Left elbow",
    "rightElbow": "Right elbow",
    "leftKnee": "Left knee",
    "rightKnee": "Right knee",
    "leftShoulder": "Left shoulder",
    "rightShoulder": "Right shoulder",
    "leftHip": "Left hip",
    "rightHip": "Right hip",
}

KEY_HELP = "R record  S stop  C compare  E export  I import  1/2 role  +/- smooth  [/] lines  Q quit"

MIN_LINE_WIDTH = 1
MAX_LINE_WIDTH = 12


def adjust_line_width(width: int, step: int) -> int:
    return max(MIN_LINE_WIDTH, min(MAX_LINE_WIDTH, int(width) + step))


def format_angle_lines(angles: Optional[AngleMapping], differences: Optional[Dict[str, float]] = None) -> List[str]:
    if not angles:
        return ["(no pose)"]
    lines = []
    for key, value in angles.items():
        line = f"{ANGLE_LABELS.get(key, key)}: {value:.1f}"
        if differences and key in differences:
            line += f" ({differences[key]:+.1f})"
        lines.append(line)
    return lines


def draw_status_panel(frame, lines, origin=(10, 30), color=(255, 255, 255)) -> None:
    x, y = origin
    for line in lines:
        cv2.putText(frame, line, (x, y), cv2.FONT_HERSHEY_SIMPLEX, 0.7, color, 2)
        y += 28


def draw_side_panel(frame, lines: List[str], panel_width: int = 320) -> None:
    height, width = frame.shape[:2]
    x0 = max(0, width - panel_width)
    cv2.rectangle(frame, (x0, 0), (width, height), (30, 30, 30), -1)
    cv2.rectangle(frame, (x0, 0), (width, height), (80, 80, 80), 2)

    y = 30
    cv2.putText(frame, "Angles", (x0 + 12, y), cv2.FONT_HERSHEY_SIMPLEX, 0.7, (255, 255, 255), 2)
    y += 28
    for line in lines:
        cv2.putText(frame, line, (x0 + 12, y), cv2.FONT_HERSHEY_SIMPLEX, 0.55, (220, 220, 220), 1)
        y += 24


def draw_message_log(frame, messages: List[str], line_height: int = 22) -> None:
    height = frame.shape[0]
    y = height - 40 - line_height * (len(messages) - 1)
    for message in reversed(messages):
        cv2.putText(frame, message, (10, y), cv2.FONT_HERSHEY_SIMPLEX, 0.5, (200, 200, 200), 1)
        y += line_height
