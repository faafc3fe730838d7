import math
import os
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Union

SCRIPT_DIR = Path(__file__).resolve().parent
ENV_PATH = SCRIPT_DIR / ".env"
ENV_PREFIX = "MOTION_"


@dataclass(frozen=True)
class AppConfig:
    camera_source: Union[int, str] = 0
    camera_width: int = 1280
    camera_height: int = 720
    target_fps: int = 30
    mirror: bool = True

    smooth_window: int = 5
    jitter_radius: float = 0.0125
    min_blend: float = 0.2

    record_duration_ms: float = 4000.0
    record_fps: int = 30
    compare_fps: float = 30.0
    report_interval_ms: float = 750.0
    highlight_threshold_deg: float = 15.0

    export_path: str = "instructor_motion.json"
    line_width: int = 3
    log_level: str = "INFO"
    log_lines: int = 8


def _load_env_file(path: Path) -> None:
    if not path.exists():
        return

    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue

        if line.startswith("export "):
            line = line[len("export ") :].strip()

        key, value = line.split("=", 1)
        key = key.strip()

        lexer = shlex.shlex(value.strip(), posix=True)
        lexer.whitespace_split = True
        lexer.commenters = "#"
        parsed = " ".join(list(lexer)).strip().strip('"').strip("'")

        if key and key not in os.environ:
            os.environ[key] = parsed


def _bool_env(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(ENV_PREFIX + name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _int_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(ENV_PREFIX + name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _float_env(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(ENV_PREFIX + name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if math.isfinite(value) else default


def _camera_source(env: Mapping[str, str], default: Union[int, str]) -> Union[int, str]:
    raw = env.get(ENV_PREFIX + "CAMERA_SOURCE")
    if raw is None:
        return default
    raw = raw.strip()
    if raw.isdigit() or (raw.startswith("-") and raw[1:].isdigit()):
        return int(raw)
    return raw


def load_config(env: Optional[Mapping[str, str]] = None, env_path: Path = ENV_PATH) -> AppConfig:
    if env is None:
        _load_env_file(env_path)
        env = os.environ

    d = AppConfig()
    return AppConfig(
        camera_source=_camera_source(env, d.camera_source),
        camera_width=max(_int_env(env, "CAMERA_WIDTH", d.camera_width), 1),
        camera_height=max(_int_env(env, "CAMERA_HEIGHT", d.camera_height), 1),
        target_fps=max(_int_env(env, "TARGET_FPS", d.target_fps), 0),
        mirror=_bool_env(env, "MIRROR", d.mirror),
        smooth_window=max(_int_env(env, "SMOOTH_WINDOW", d.smooth_window), 1),
        jitter_radius=max(_float_env(env, "JITTER_RADIUS", d.jitter_radius), 0.0),
        min_blend=max(0.0, min(1.0, _float_env(env, "MIN_BLEND", d.min_blend))),
        record_duration_ms=max(_float_env(env, "RECORD_DURATION_MS", d.record_duration_ms), 0.0),
        record_fps=max(_int_env(env, "RECORD_FPS", d.record_fps), 1),
        compare_fps=max(_float_env(env, "COMPARE_FPS", d.compare_fps), 1.0),
        report_interval_ms=max(_float_env(env, "REPORT_INTERVAL_MS", d.report_interval_ms), 0.0),
        highlight_threshold_deg=max(_float_env(env, "HIGHLIGHT_THRESHOLD_DEG", d.highlight_threshold_deg), 0.0),
        export_path=env.get(ENV_PREFIX + "EXPORT_PATH", d.export_path),
        line_width=max(_int_env(env, "LINE_WIDTH", d.line_width), 1),
        log_level=env.get(ENV_PREFIX + "LOG_LEVEL", d.log_level).strip().upper(),
        log_lines=max(_int_env(env, "LOG_LINES", d.log_lines), 1),
    )
