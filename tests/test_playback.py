import pytest

from conftest import make_pose
from playback import PlaybackSynchronizer, index_at
from recording import RecordingBuffer

FRAME_MS = 1000.0 / 30


def _recording(clock, count):
    buffer = RecordingBuffer(clock=clock)
    buffer.start()
    for i in range(count):
        buffer.append(make_pose({"left_wrist": (0.40 - 0.01 * i, 0.50)}))
    buffer.stop()
    return buffer


class TestIndexAt:
    def test_two_seconds_into_120_frames(self):
        assert index_at(2000.0, 120) == 60

    def test_wraps_after_full_cycle(self):
        assert index_at(120 * FRAME_MS, 120) == 0
        assert index_at(4000.0, 120) == 0

    def test_just_past_each_frame_boundary(self):
        for k in range(1, 90):
            assert index_at(k * FRAME_MS + 1e-6, 1000) == k

    @pytest.mark.parametrize("elapsed, count", [(500.0, 0), (-5.0, 10), (float("nan"), 10)])
    def test_degenerate_inputs(self, elapsed, count):
        assert index_at(elapsed, count) == 0

    def test_other_rate(self):
        assert index_at(1000.0, 100, compare_fps=10) == 10

    @pytest.mark.parametrize("fps", [float("inf"), float("nan"), 1e308, 0.0, -30.0])
    def test_unusable_rate(self, fps):
        assert index_at(1000.0, 10, compare_fps=fps) == 0


class TestSynchronizer:
    def test_starts_idle(self, clock):
        sync = PlaybackSynchronizer(clock=clock)
        assert not sync.is_active
        assert sync.current_index == 0

    def test_rejects_empty_recording(self, clock):
        sync = PlaybackSynchronizer(clock=clock)
        assert sync.start(RecordingBuffer(clock=clock)) is False
        assert not sync.is_active
        assert sync.recording is None

    def test_rejects_without_live_stream(self, clock):
        sync = PlaybackSynchronizer(clock=clock)
        assert sync.start(_recording(clock, 3), stream_active=False) is False
        assert not sync.is_active

    def test_cycles_and_loops(self, clock):
        count = 4
        recording = _recording(clock, count)
        sync = PlaybackSynchronizer(clock=clock)
        start = clock.now
        assert sync.start(recording)

        seen = []
        for k in range(count * 2 + 1):
            clock.now = start + (k * FRAME_MS + 1.0) / 1000.0
            seen.append(sync.advance())
        assert seen == [0, 1, 2, 3, 0, 1, 2, 3, 0]

    def test_scenario_120_frames(self, clock):
        recording = _recording(clock, 120)
        sync = PlaybackSynchronizer(compare_fps=30, clock=clock)
        sync.start(recording)
        clock.advance_ms(2000)
        assert sync.advance() == 60
        assert sync.current_index == 60

    def test_advance_while_idle_keeps_index(self, clock):
        sync = PlaybackSynchronizer(clock=clock)
        clock.advance_ms(500)
        assert sync.advance() == 0

    def test_stop_returns_to_idle(self, clock):
        sync = PlaybackSynchronizer(clock=clock)
        sync.start(_recording(clock, 10))
        clock.advance_ms(100)
        sync.advance()
        sync.stop()
        assert not sync.is_active
        assert sync.current_index == 0

    def test_emptied_recording_forces_idle(self, clock):
        recording = _recording(clock, 5)
        sync = PlaybackSynchronizer(clock=clock)
        sync.start(recording)
        recording.start()
        clock.advance_ms(100)
        assert sync.advance() == 0
        assert not sync.is_active


class TestReference:
    def test_idle_shows_first_frame(self, clock):
        recording = _recording(clock, 5)
        sync = PlaybackSynchronizer(clock=clock)
        assert sync.reference_frame(recording) == recording.frame_at(0)
        assert sync.reference_angles(recording) == recording.angles[0]

    def test_active_shows_current_frame(self, clock):
        recording = _recording(clock, 5)
        sync = PlaybackSynchronizer(clock=clock)
        sync.start(recording)
        clock.advance_ms(3 * FRAME_MS + 1)
        sync.advance()
        assert sync.reference_frame() == recording.frame_at(3)
        assert sync.reference_angles() == recording.angles[3]

    def test_no_recording(self, clock):
        sync = PlaybackSynchronizer(clock=clock)
        assert sync.reference_frame() is None
        assert sync.reference_angles(RecordingBuffer(clock=clock)) is None

    def test_start_fills_missing_angles(self, clock):
        recording = RecordingBuffer(clock=clock)
        recording.load_payload({"frames": _recording(clock, 3).to_payload()["frames"], "angles": []})
        sync = PlaybackSynchronizer(clock=clock)
        assert sync.start(recording)
        assert len(recording.angles) == 3
