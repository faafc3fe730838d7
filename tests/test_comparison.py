import math

import pytest

from comparison import DivergenceReporter, diff_angles, mean_abs_difference, worst_joints


class TestDiffAngles:
    def test_missing_side_gives_none(self):
        assert diff_angles({"leftElbow": 90.0}, None) is None
        assert diff_angles(None, {"leftElbow": 90.0}) is None

    def test_signed_difference(self):
        result = diff_angles({"leftElbow": 90.0, "rightKnee": 170.0}, {"leftElbow": 120.0, "rightKnee": 160.0})
        assert result == {"leftElbow": pytest.approx(-30.0), "rightKnee": pytest.approx(10.0)}

    def test_keys_missing_on_either_side_are_omitted(self):
        live = {"leftElbow": 90.0, "leftKnee": 100.0}
        reference = {"leftElbow": 80.0, "rightHip": 150.0}
        assert diff_angles(live, reference) == {"leftElbow": pytest.approx(10.0)}

    def test_non_finite_values_are_omitted(self):
        live = {"leftElbow": float("nan"), "leftKnee": 100.0, "leftHip": 90.0, "rightHip": None}
        reference = {"leftElbow": 80.0, "leftKnee": float("inf"), "leftHip": 95.0, "rightHip": 10.0}
        assert diff_angles(live, reference) == {"leftHip": pytest.approx(-5.0)}

    def test_nothing_comparable_gives_none(self):
        assert diff_angles({"leftElbow": 90.0}, {"rightElbow": 90.0}) is None
        assert diff_angles({}, {}) is None


class TestSummaries:
    def test_mean_abs_difference(self):
        assert mean_abs_difference({"a": -10.0, "b": 20.0}) == pytest.approx(15.0)
        assert mean_abs_difference(None) is None
        assert mean_abs_difference({}) is None

    def test_worst_joints(self):
        diffs = {"leftElbow": -40.0, "rightElbow": 5.0, "leftKnee": 20.0, "rightKnee": -16.0}
        assert worst_joints(diffs, threshold_deg=15.0) == [("leftElbow", -40.0), ("leftKnee", 20.0), ("rightKnee", -16.0)]
        assert worst_joints(diffs, threshold_deg=15.0, limit=1) == [("leftElbow", -40.0)]
        assert worst_joints(None) == []


class TestDivergenceReporter:
    def test_format(self, clock):
        reporter = DivergenceReporter(clock=clock)
        line = reporter.report({"leftElbow": -12.0, "rightElbow": 4.0}, index=4, frame_count=120)
        assert line == "Avg diff (frame 5/120): 8.0 deg"

    def test_rate_limited(self, clock):
        reporter = DivergenceReporter(interval_ms=750, clock=clock)
        diffs = {"leftElbow": 10.0}
        assert reporter.report(diffs, 0, 10) is not None
        clock.advance_ms(500)
        assert reporter.report(diffs, 1, 10) is None
        clock.advance_ms(250)
        assert reporter.report(diffs, 2, 10) is not None

    def test_nothing_to_report(self, clock):
        reporter = DivergenceReporter(clock=clock)
        assert reporter.report(None, 0, 10) is None
        assert reporter.report({"leftElbow": math.inf}, 0, 10) is None

    def test_reset_allows_immediate_report(self, clock):
        reporter = DivergenceReporter(clock=clock)
        reporter.report({"leftElbow": 1.0}, 0, 10)
        reporter.reset()
        assert reporter.report({"leftElbow": 1.0}, 0, 10) is not None
