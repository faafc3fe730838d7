import pytest

from config import AppConfig, load_config


def test_defaults_without_environment():
    assert load_config(env={}) == AppConfig()


def test_overrides():
    config = load_config(
        env={
            "MOTION_CAMERA_SOURCE": "rtsp://cam/stream",
            "MOTION_SMOOTH_WINDOW": "9",
            "MOTION_RECORD_DURATION_MS": "2500",
            "MOTION_MIRROR": "no",
            "MOTION_LOG_LEVEL": "debug",
        }
    )
    assert config.camera_source == "rtsp://cam/stream"
    assert config.smooth_window == 9
    assert config.record_duration_ms == 2500.0
    assert config.mirror is False
    assert config.log_level == "DEBUG"


def test_numeric_camera_source():
    assert load_config(env={"MOTION_CAMERA_SOURCE": "2"}).camera_source == 2


def test_bad_values_fall_back_and_clamp():
    config = load_config(
        env={
            "MOTION_SMOOTH_WINDOW": "-3",
            "MOTION_COMPARE_FPS": "fast",
            "MOTION_MIN_BLEND": "4",
            "MOTION_JITTER_RADIUS": "inf",
            "MOTION_REPORT_INTERVAL_MS": "nan",
        }
    )
    assert config.smooth_window == 1
    assert config.compare_fps == AppConfig().compare_fps
    assert config.min_blend == 1.0
    assert config.jitter_radius == AppConfig().jitter_radius
    assert config.report_interval_ms == AppConfig().report_interval_ms


@pytest.mark.parametrize("raw", ["inf", "-inf", "nan", "Infinity"])
def test_non_finite_compare_fps_falls_back(raw):
    assert load_config(env={"MOTION_COMPARE_FPS": raw}).compare_fps == AppConfig().compare_fps


def test_env_file(tmp_path, monkeypatch):
    env_path = tmp_path / ".env"
    env_path.write_text("# local overrides\nexport MOTION_SMOOTH_WINDOW=3  # smaller\n", encoding="utf-8")
    # setenv then delenv so teardown removes whatever load_config writes.
    monkeypatch.setenv("MOTION_SMOOTH_WINDOW", "0")
    monkeypatch.delenv("MOTION_SMOOTH_WINDOW")
    config = load_config(env_path=env_path)
    assert config.smooth_window == 3
