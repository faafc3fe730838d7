import logging
from pathlib import Path
from typing import Dict

import cv2
import numpy as np

from camera import CameraStream
from comparison import worst_joints
from config import load_config
from pose_detection import PoseDetector
from session import ROLE_INSTRUCTOR, ROLE_STUDENT, MotionSession
from ui import KEY_HELP, adjust_line_width, draw_message_log, draw_side_panel, draw_status_panel, format_angle_lines
from visualization import REFERENCE_COLOR, LIVE_COLOR, draw_joint_angles, draw_skeleton, joint_vertices

logger = logging.getLogger(__name__)


def _handle_key(key: int, session: MotionSession, export_path: Path, view: Dict[str, int]) -> bool:
    char = key & 0xFF
    if char == ord("q"):
        return False
    if char == ord("r"):
        session.start_recording()
    elif char == ord("s"):
        session.stop_recording()
    elif char == ord("c"):
        if session.synchronizer.is_active:
            session.stop_comparison()
        else:
            session.start_comparison()
    elif char == ord("e"):
        session.export_file(export_path)
    elif char == ord("i"):
        session.import_file(export_path)
    elif char == ord("1"):
        session.set_role(ROLE_INSTRUCTOR)
    elif char == ord("2"):
        session.set_role(ROLE_STUDENT)
    elif char in (ord("+"), ord("=")):
        session.set_window_size(session.stabilizer.window_size + 1)
    elif char == ord("-"):
        session.set_window_size(session.stabilizer.window_size - 1)
    elif char == ord("]"):
        view["line_width"] = adjust_line_width(view["line_width"], 1)
    elif char == ord("["):
        view["line_width"] = adjust_line_width(view["line_width"], -1)
    return True


def main():
    config = load_config()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    window_name = "Motion Mirror"
    camera = CameraStream(
        source=config.camera_source,
        width=config.camera_width,
        height=config.camera_height,
        target_fps=config.target_fps,
        mirror=config.mirror,
    )
    if not camera.open():
        logger.error("Could not open camera %s", config.camera_source)
        return

    detector = PoseDetector()
    session = MotionSession(config)
    session.start_stream()
    export_path = Path(config.export_path)
    view = {"line_width": adjust_line_width(config.line_width, 0)}

    cv2.namedWindow(window_name, cv2.WINDOW_NORMAL)
    try:
        while True:
            if cv2.getWindowProperty(window_name, cv2.WND_PROP_VISIBLE) < 1:
                break
            cam_frame = camera.read()
            if not cam_frame.ok:
                blank = np.zeros((480, 640, 3), dtype=np.uint8)
                draw_status_panel(blank, ["Camera error"], origin=(10, 30))
                cv2.imshow(window_name, blank)
                if cv2.waitKey(1) & 0xFF == ord("q"):
                    break
                continue

            frame = cam_frame.frame
            pose = detector.process(frame, cam_frame.timestamp)
            result = session.tick(pose.landmarks)

            flagged = worst_joints(result.differences, config.highlight_threshold_deg)
            draw_skeleton(
                frame,
                result.landmarks,
                color=LIVE_COLOR,
                thickness=view["line_width"],
                highlight=joint_vertices(name for name, _ in flagged),
            )
            draw_skeleton(frame, result.overlay_frame, color=REFERENCE_COLOR, thickness=view["line_width"])
            draw_joint_angles(frame, result.landmarks, result.angles)

            status = [
                f"Role: {session.role}",
                f"Smoothing window: {session.stabilizer.window_size}",
                f"Line width: {view['line_width']}",
            ]
            if result.recording:
                status.append(f"REC {session.recording.elapsed_ms() / 1000.0:.1f}s ({session.recording.frame_count} frames)")
            if result.comparing:
                status.append(f"Comparing frame {result.compare_index + 1}/{session.recording.frame_count}")
            if result.mean_difference is not None:
                status.append(f"Avg diff: {result.mean_difference:.1f} deg")
            status.append(KEY_HELP)
            draw_status_panel(frame, status, origin=(10, 30))
            draw_side_panel(frame, format_angle_lines(result.angles, result.differences))
            draw_message_log(frame, session.recent_messages())

            cv2.imshow(window_name, frame)
            key = cv2.waitKey(1)
            if key != -1 and not _handle_key(key, session, export_path, view):
                break
    finally:
        session.stop_stream()
        detector.close()
        camera.release()
        cv2.destroyAllWindows()


if __name__ == "__main__":
    main()
