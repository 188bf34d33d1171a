"""
Unit Tests for Keyframe and PropertyTimeline

Run with: pytest tests/test_keyframe.py -v
"""

import logging
import math

import pytest

from keyframe_engine.core import (
    Color,
    Keyframe,
    PropertyTimeline,
    Scalar,
    SerializationError,
    TimelineError,
    ValueKind,
    normalize_frame,
)


class TestKeyframe:

    def test_value_wrapped(self):
        assert Keyframe(0, 5).value == Scalar(5)

    def test_default_easing_linear(self):
        assert Keyframe(0, 5).easing == "linear"

    def test_dict_round_trip(self):
        keyframe = Keyframe(12, Color(1, 2, 3, 4), "easeOutQuad")
        data = keyframe.to_dict()
        assert data == {"frame": 12, "value": {"r": 1, "g": 2, "b": 3, "a": 4}, "easing": "easeOutQuad"}
        assert Keyframe.from_dict(data, ValueKind.COLOR) == keyframe

    def test_from_dict_missing_easing(self):
        assert Keyframe.from_dict({"frame": 1, "value": 2}).easing == "linear"

    @pytest.mark.parametrize("frame", ["abc", -5, 2.7, None, True])
    def test_from_dict_rejects_bad_frame(self, frame):
        with pytest.raises(SerializationError):
            Keyframe.from_dict({"frame": frame, "value": 1})

    def test_from_dict_rejects_non_mapping(self):
        with pytest.raises(SerializationError):
            Keyframe.from_dict([0, 1])

    def test_from_dict_whole_float_frame(self):
        assert Keyframe.from_dict({"frame": 6.0, "value": 1}).frame == 6

    def test_from_dict_non_string_easing_falls_back(self):
        assert Keyframe.from_dict({"frame": 1, "value": 2, "easing": 3}).easing == "linear"

    def test_frame_is_read_only(self):
        keyframe = Keyframe(4, 1)
        with pytest.raises(AttributeError):
            keyframe.frame = 8
        assert keyframe.frame == 4

    def test_value_and_easing_assignable(self):
        keyframe = Keyframe(4, 1)
        keyframe.value = Scalar(2)
        keyframe.easing = "easeInQuad"
        assert (keyframe.value, keyframe.easing) == (Scalar(2), "easeInQuad")


class TestNormalizeFrame:

    @pytest.mark.parametrize("raw,expected", [(0, 0), (12, 12), (3.0, 3)])
    def test_accepts_whole_numbers(self, raw, expected):
        assert normalize_frame(raw) == expected

    @pytest.mark.parametrize("raw", [-1, 1.5, True, None, "7", math.nan, math.inf])
    def test_rejects_everything_else(self, raw):
        assert normalize_frame(raw) is None


class TestUpsert:
    """At most one keyframe per frame, always sorted."""

    @pytest.fixture
    def timeline(self):
        return PropertyTimeline("opacity")

    def test_upsert_idempotent(self, timeline):
        timeline.upsert(10, 1)
        timeline.upsert(10, 2, "easeInQuad")
        assert len(timeline) == 1
        assert timeline.get(10).value == Scalar(2)
        assert timeline.get(10).easing == "easeInQuad"

    def test_exposed_keyframes_cannot_break_order(self, timeline):
        for frame in (0, 10, 20):
            timeline.upsert(frame, frame)
        for keyframe in timeline.keyframes:
            with pytest.raises(AttributeError):
                keyframe.frame = 99
        assert timeline.frames == [0, 10, 20]
        assert timeline.get(10).frame == 10
        assert timeline.evaluate(15) == Scalar(15)

    def test_sorted_after_out_of_order_inserts(self, timeline):
        for frame in (30, 0, 20, 10):
            timeline.upsert(frame, frame)
        assert timeline.frames == [0, 10, 20, 30]
        assert [kf.frame for kf in timeline] == [0, 10, 20, 30]

    def test_overwrite_keeps_identity(self, timeline):
        first = timeline.upsert(5, 1)
        second = timeline.upsert(5, 2)
        assert first is second

    def test_remove(self, timeline):
        timeline.upsert(0, 0)
        timeline.upsert(10, 1)
        assert timeline.remove(0)
        assert not timeline.remove(0)
        assert timeline.frames == [10]

    def test_empty_after_last_remove(self, timeline):
        timeline.upsert(3, 1)
        timeline.remove(3)
        assert not timeline
        assert timeline.first_frame is None

    def test_move(self, timeline):
        timeline.upsert(0, 0)
        timeline.upsert(10, 1, "easeInQuad")
        timeline.upsert(20, 2)
        assert timeline.move(10, 20)
        assert timeline.frames == [0, 20]
        assert timeline.get(20).value == Scalar(1)
        assert timeline.get(20).easing == "easeInQuad"

    def test_move_missing(self, timeline):
        assert not timeline.move(4, 5)


class TestEvaluate:
    """Sampling between, at and around keyframes."""

    @pytest.fixture
    def timeline(self):
        timeline = PropertyTimeline("x")
        timeline.upsert(10, 100)
        timeline.upsert(50, 500)
        return timeline

    def test_empty_raises(self):
        with pytest.raises(TimelineError):
            PropertyTimeline("x").evaluate(0)

    def test_exact_at_keyframes(self, timeline):
        assert timeline.evaluate(10) == Scalar(100)
        assert timeline.evaluate(50) == Scalar(500)

    def test_hold_before_and_after(self, timeline):
        assert timeline.evaluate(0) == timeline.evaluate(10)
        assert timeline.evaluate(100) == timeline.evaluate(50)

    def test_linear_midpoint(self):
        timeline = PropertyTimeline("x")
        timeline.upsert(0, 0)
        timeline.upsert(10, 100)
        assert timeline.evaluate(5).value == pytest.approx(50)

    def test_earlier_easing_governs(self):
        timeline = PropertyTimeline("x")
        timeline.upsert(0, 0, "easeInQuad")
        timeline.upsert(10, 100, "linear")
        timeline.upsert(20, 200, "linear")
        assert timeline.evaluate(5).value == pytest.approx(25)
        assert timeline.evaluate(15).value == pytest.approx(150)

    def test_unknown_easing_is_linear(self):
        timeline = PropertyTimeline("x")
        timeline.upsert(0, 0, "notAnEasing")
        timeline.upsert(10, 10)
        assert timeline.evaluate(3).value == pytest.approx(3)

    def test_overshoot_extrapolates(self):
        timeline = PropertyTimeline("x")
        timeline.upsert(0, 0, "easeOutBack")
        timeline.upsert(10, 100)
        samples = [timeline.evaluate(f).value for f in range(11)]
        assert max(samples) > 100

    def test_fractional_frame(self):
        timeline = PropertyTimeline("x")
        timeline.upsert(0, 0)
        timeline.upsert(1, 10)
        assert timeline.evaluate(0.5).value == pytest.approx(5)

    def test_color_track(self):
        timeline = PropertyTimeline("fill")
        timeline.upsert(0, Color(0, 0, 0))
        timeline.upsert(2, Color(255, 255, 255))
        assert timeline.evaluate(1) == Color(128, 128, 128)


class TestPersistence:

    def test_list_round_trip(self):
        timeline = PropertyTimeline("fill")
        timeline.upsert(0, Color(0, 0, 0), "easeInCubic")
        timeline.upsert(24, Color(255, 0, 0))
        restored = PropertyTimeline.from_list(timeline.to_list(), "fill", ValueKind.COLOR)
        assert restored.keyframes == timeline.keyframes
        for frame in (0, 7, 13, 24):
            assert restored.evaluate(frame) == timeline.evaluate(frame)

    def test_from_list_duplicate_frames_keep_last(self):
        restored = PropertyTimeline.from_list([
            {"frame": 4, "value": 1},
            {"frame": 4, "value": 2},
        ])
        assert len(restored) == 1
        assert restored.get(4).value == Scalar(2)

    def test_from_list_skips_corrupt_entries(self, caplog):
        with caplog.at_level(logging.WARNING):
            restored = PropertyTimeline.from_list([
                {"frame": "abc", "value": 1},
                {"frame": -5, "value": 2},
                {"frame": 2.7, "value": 3},
                {"frame": 4, "value": 4},
            ], "x")
        assert restored.frames == [4]
        assert caplog.text.count("Skipping keyframe of x") == 3
