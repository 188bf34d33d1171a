"""
Unit Tests for the animation composer

Run with: pytest tests/test_composer.py -v
"""

import logging

import pytest

from keyframe_engine import (
    AnimationComposer,
    Camera,
    Circle,
    Color,
    EngineConfig,
    Keyframe,
    Scene,
    TypingEffect,
)


@pytest.fixture
def composer():
    return AnimationComposer(Scene(EngineConfig(random_seed=1234)))


def value_at(obj, name, frame):
    timeline = obj.timeline(name)
    return timeline.evaluate(frame)


class TestCreateShapes:

    def test_defaults_to_canvas_centre(self, composer):
        circle = composer.create_shape("circle")
        assert (circle.get("x"), circle.get("y")) == (400, 300)
        assert circle in composer.scene.objects

    def test_shape_kinds(self, composer):
        assert isinstance(composer.create_shape("circle", size=20), Circle)
        rect = composer.create_shape("rectangle", width=30, corner_radius=4)
        assert rect.get("width") == 30
        assert rect.get("height") == 80
        assert rect.get("corner_radius") == 4
        text = composer.create_shape("text", text="hi", font_size=12)
        assert text.get("text") == "hi"
        path = composer.create_shape("path", points=[{"x": 0, "y": 0}, {"x": 4, "y": 3}], closed=True)
        assert path.get("width") == 4
        assert path.get("closed") is True
        assert isinstance(composer.create_shape("camera", zoom=2), Camera)

    def test_fill_accepts_hex(self, composer):
        circle = composer.create_shape("circle", fill="#00ff00")
        assert circle.get("fill") == Color(0, 255, 0)

    def test_unknown_kind(self, composer, caplog):
        with caplog.at_level(logging.WARNING):
            assert composer.create_shape("hexagon") is None
        assert "hexagon" in caplog.text
        assert len(composer.scene) == 0

    def test_group_line(self, composer):
        group = composer.create_group(3, "circle", arrangement="line", center=(100, 100), radius=50)
        assert [c.get("x") for c in group] == [50, 100, 150]
        assert all(c.get("y") == 100 for c in group)

    def test_group_circle(self, composer):
        group = composer.create_group(4, "circle", center=(0, 0), radius=10)
        assert group[0].get("x") == pytest.approx(10)
        assert group[1].get("y") == pytest.approx(10)

    def test_group_grid(self, composer):
        group = composer.create_group(4, "rectangle", arrangement="grid", center=(0, 0), radius=10)
        assert [(r.get("x"), r.get("y")) for r in group] == [(-5, -5), (5, -5), (-5, 5), (5, 5)]

    def test_group_bad_arrangement(self, composer, caplog):
        with caplog.at_level(logging.WARNING):
            assert composer.create_group(3, "circle", arrangement="spiral") == []
            assert composer.create_group(0, "circle") == []
        assert len(composer.scene) == 0

    def test_group_bad_geometry_adds_nothing(self, composer, caplog):
        with caplog.at_level(logging.WARNING):
            assert composer.create_group(3, "circle", radius="wide") == []
            assert composer.create_group(3, "circle", center=("a", 0)) == []
            assert composer.create_group(3, "circle", size="big") == []
        assert len(composer.scene) == 0

    def test_shape_non_numeric_position(self, composer):
        assert composer.create_shape("circle", x="left") is None
        assert composer.create_shape("camera", zoom=0) is None
        assert composer.create_shape("path", points=[{"x": 0}]) is None
        assert len(composer.scene) == 0


class TestAnimate:

    def test_accepts_keyframe_forms(self, composer):
        circle = composer.create_shape("circle")
        result = composer.animate(circle, "x", [
            {"frame": 0, "value": 0},
            (10, 100, "easeInQuad"),
            Keyframe(20, 200),
        ])
        assert result is circle
        timeline = circle.timeline("x")
        assert timeline.frames == [0, 10, 20]
        assert timeline.get(0).easing == "easeInOutCubic"
        assert timeline.get(10).easing == "easeInQuad"

    def test_explicit_default_easing(self, composer):
        circle = composer.create_shape("circle")
        composer.animate(circle, "x", [(0, 0), (10, 1)], easing="easeOutBounce")
        assert circle.timeline("x").get(0).easing == "easeOutBounce"

    @pytest.mark.parametrize("keyframes", [
        "not a list",
        None,
        [{"frame": 0}],
        [(0,)],
        [{"frame": -3, "value": 1}],
        [(0, 0), (1.5, 2)],
    ])
    def test_malformed_keyframes_are_noop(self, composer, keyframes, caplog):
        circle = composer.create_shape("circle")
        with caplog.at_level(logging.WARNING):
            assert composer.animate(circle, "x", keyframes) is circle
        assert not circle.is_animated("x")
        assert "animate" in caplog.text

    def test_unknown_property(self, composer, caplog):
        circle = composer.create_shape("circle")
        with caplog.at_level(logging.WARNING):
            assert composer.animate(circle, "wobble", [(0, 1)]) is circle
        assert "wobble" in caplog.text

    def test_non_object_returned_unchanged(self, composer):
        assert composer.animate(None, "x", [(0, 1)]) is None
        assert composer.animate(obj="ball", property_name="x", keyframes=[]) == "ball"

    def test_animate_properties(self, composer):
        circle = composer.create_shape("circle")
        composer.animate_properties(circle, {
            "x": [(0, 0), (10, 10)],
            "opacity": [(0, 0), (5, 255)],
        })
        assert circle.is_animated("x") and circle.is_animated("opacity")

    def test_animate_properties_all_or_nothing(self, composer):
        circle = composer.create_shape("circle")
        composer.animate_properties(circle, {"x": [(0, 0)], "wobble": [(0, 1)]})
        assert circle.keyframes == {}


class TestTwoKeyframeHelpers:

    @pytest.fixture
    def circle(self, composer):
        return composer.create_shape("circle", size=100)

    def test_fade_in(self, composer, circle):
        composer.fade_in(circle, 10, 20)
        assert circle.get("opacity") == 0
        assert circle.timeline("opacity").frames == [10, 30]
        assert value_at(circle, "opacity", 30).value == 255

    def test_fade_out(self, composer, circle):
        composer.fade_out(circle, 5)
        assert circle.timeline("opacity").frames == [5, 35]
        assert value_at(circle, "opacity", 35).value == 0

    def test_move_from_to(self, composer, circle):
        composer.move_from_to(circle, 0, 10, 0, 0, 100, 50, easing="linear")
        composer.scene.clock.set_frame(5)
        assert (circle.get("x"), circle.get("y")) == (pytest.approx(50), pytest.approx(25))

    def test_scale_circle(self, composer, circle):
        composer.scale(circle, 0, 10, 100, 200)
        assert value_at(circle, "width", 10).value == 200
        assert value_at(circle, "height", 10).value == 200

    def test_scale_rectangle_keeps_aspect(self, composer):
        rect = composer.create_shape("rectangle", width=100, height=50)
        composer.scale(rect, 0, 10, 100, 200)
        assert value_at(rect, "height", 0).value == pytest.approx(50)
        assert value_at(rect, "height", 10).value == pytest.approx(100)

    def test_scale_camera_zoom(self, composer):
        camera = composer.create_shape("camera")
        composer.scale(camera, 0, 10, 1, 3)
        assert value_at(camera, "zoom", 10).value == 3

    def test_rotate(self, composer, circle):
        composer.rotate(circle, 0, 12, 0, 360)
        assert value_at(circle, "rotation", 12).value == 360

    def test_pulse_ends_on_original_size(self, composer, circle):
        composer.pulse(circle, 0, count=3, duration=60)
        timeline = circle.timeline("width")
        assert timeline.frames == [0, 20, 40, 60]
        assert [kf.value.value for kf in timeline] == [
            pytest.approx(80), pytest.approx(120), pytest.approx(80), pytest.approx(100)
        ]
        assert circle.timeline("height").frames == [0, 20, 40, 60]

    def test_pulse_bad_count(self, composer, circle):
        composer.pulse(circle, 0, count=0)
        assert not circle.is_animated("width")

    def test_non_numeric_scale_is_noop(self, composer, circle, caplog):
        with caplog.at_level(logging.WARNING):
            assert composer.scale(circle, 0, 10, "big", 2.0) is circle
        assert "from_scale" in caplog.text
        assert not circle.is_animated("width")
        assert not circle.is_animated("height")

    def test_pulse_rejects_missing_scale(self, composer, circle, caplog):
        with caplog.at_level(logging.WARNING):
            assert composer.pulse(circle, 0, min_scale=None) is circle
        assert not circle.is_animated("width")

    @pytest.mark.parametrize("args", [
        ("0", 10, 0, 0),
        (0, None, 0, 0),
        (0, 10, float("nan"), 0),
        (0, 10, 0, True),
    ])
    def test_move_rejects_non_numeric_coordinates(self, composer, circle, args):
        assert composer.move_from_to(circle, 0, 10, *args) is circle
        assert not circle.is_animated("x")
        assert not circle.is_animated("y")

    def test_rotate_rejects_string_angle(self, composer, circle):
        composer.rotate(circle, 0, 12, 0, "360")
        assert not circle.is_animated("rotation")


class TestFollowPath:

    def test_endpoint_pinning(self, composer):
        circle = composer.create_shape("circle")
        composer.follow_path(circle, [{"x": 0, "y": 0}, {"x": 10, "y": 0}, {"x": 10, "y": 10}], 0, 100)
        assert circle.timeline("x").frames[0] == 0
        assert circle.timeline("x").frames[-1] == 100
        assert (value_at(circle, "x", 0).value, value_at(circle, "y", 0).value) == (0, 0)
        assert (value_at(circle, "x", 100).value, value_at(circle, "y", 100).value) == (10, 10)

    def test_frames_proportional_to_arc_length(self, composer):
        circle = composer.create_shape("circle")
        composer.follow_path(circle, [(0, 0), (30, 0), (40, 0)], 0, 10)
        assert circle.timeline("x").frames == [0, 8, 10]

    def test_constant_speed(self, composer):
        circle = composer.create_shape("circle")
        composer.follow_path(circle, [(0, 0), (10, 0), (10, 10)], 0, 100)
        composer.scene.clock.set_frame(75)
        assert circle.get("x") == pytest.approx(10)
        assert circle.get("y") == pytest.approx(5)

    def test_orient_to_path(self, composer):
        circle = composer.create_shape("circle")
        composer.follow_path(circle, [(0, 0), (10, 0), (10, 10)], 0, 100, orient_to_path=True, rotation_offset=90)
        rotation = circle.timeline("rotation")
        assert rotation.frames == [0, 50]
        assert [kf.value.value for kf in rotation] == [pytest.approx(90), pytest.approx(180)]

    def test_heading_unwrapped(self, composer):
        circle = composer.create_shape("circle")
        composer.follow_path(circle, [(0, 0), (-10, 1), (-20, -1)], 0, 20, orient_to_path=True)
        first, second = [kf.value.value for kf in circle.timeline("rotation")]
        assert abs(second - first) < 180

    def test_zero_length_path_spreads_evenly(self, composer):
        circle = composer.create_shape("circle")
        composer.follow_path(circle, [(5, 5), (5, 5), (5, 5)], 0, 10)
        assert circle.timeline("x").frames == [0, 5, 10]

    @pytest.mark.parametrize("path", [[(0, 0)], "path", [(0, 0), "x"]])
    def test_bad_path_is_noop(self, composer, path, caplog):
        circle = composer.create_shape("circle")
        with caplog.at_level(logging.WARNING):
            assert composer.follow_path(circle, path, 0, 10) is circle
        assert not circle.is_animated("x")

    def test_bad_rotation_offset_is_noop(self, composer):
        circle = composer.create_shape("circle")
        composer.follow_path(circle, [(0, 0), (10, 0)], 0, 10, orient_to_path=True, rotation_offset="90")
        assert not circle.is_animated("x")
        assert not circle.is_animated("rotation")

    def test_reversed_range_is_noop(self, composer):
        circle = composer.create_shape("circle")
        composer.follow_path(circle, [(0, 0), (1, 1)], 10, 5)
        assert not circle.is_animated("x")


class TestGroups:

    @pytest.fixture
    def group(self, composer):
        return [composer.create_shape("circle") for _ in range(3)]

    def test_stagger_offsets(self, composer, group):
        keyframes = [{"frame": 0, "value": 0}, {"frame": 10, "value": 255}]
        assert composer.animate_group(group, "opacity", keyframes, stagger_frames=5) is group
        a, b, c = group
        assert a.timeline("opacity").frames == [0, 10]
        assert b.timeline("opacity").frames == [5, 15]
        assert c.timeline("opacity").frames == [10, 20]

    def test_reverse_order(self, composer, group):
        composer.animate_group(group, "opacity", [(0, 0), (10, 255)], stagger_frames=5, reverse=True)
        a, _, c = group
        assert c.timeline("opacity").frames == [0, 10]
        assert a.timeline("opacity").frames == [10, 20]

    def test_empty_group(self, composer, caplog):
        with caplog.at_level(logging.WARNING):
            assert composer.animate_group([], "x", [(0, 0)]) == []
        assert "non-empty" in caplog.text

    def test_member_without_property_aborts_whole_call(self, composer, group):
        camera = composer.create_shape("camera")
        composer.animate_group(group + [camera], "fill", [(0, "#000000")])
        assert not any(obj.is_animated("fill") for obj in group)

    def test_group_properties(self, composer, group):
        composer.animate_group_properties(group, {
            "x": [(0, 0), (10, 10)],
            "y": [(0, 0), (10, 10)],
        }, stagger_frames=2)
        assert group[2].timeline("x").frames == [4, 14]
        assert group[2].timeline("y").frames == [4, 14]


class TestWaveEffect:

    @pytest.fixture
    def group(self, composer):
        return [composer.create_shape("circle") for _ in range(4)]

    def test_min_max_min(self, composer, group):
        composer.wave_effect(group, "y", 0, 40, 100, 200)
        second = group[1].timeline("y")
        assert second.frames == [10, 20, 30]
        assert [kf.value.value for kf in second] == [100, 200, 100]
        assert second.get(10).easing == "easeInOutSine"

    def test_cycles(self, composer, group):
        composer.wave_effect(group, "y", 0, 40, 0, 1, cycles=2)
        assert group[0].timeline("y").frames == [0, 10, 20, 30, 40]

    def test_loop_fills_timeline(self, composer, group):
        composer.wave_effect(group, "y", 0, 40, 0, 1, loop=True)
        assert group[0].timeline("y").last_frame >= composer.clock.total_frames

    def test_too_short(self, composer, group):
        composer.wave_effect(group, "y", 0, 2, 0, 1)
        assert not group[0].is_animated("y")


class TestOscillate:

    def test_samples_sine(self, composer):
        circle = composer.create_shape("circle")
        composer.oscillate(circle, "x", 0, 16, center=100, amplitude=10, period=8)
        timeline = circle.timeline("x")
        assert timeline.frames == list(range(17))
        assert timeline.get(2).value.value == pytest.approx(110)
        assert timeline.get(6).value.value == pytest.approx(90)

    def test_unknown_wave(self, composer):
        circle = composer.create_shape("circle")
        composer.oscillate(circle, "x", 0, 16, 0, 1, 8, wave="zigzag")
        assert not circle.is_animated("x")


class TestTypeText:

    def test_reveals_characters(self, composer):
        text = composer.create_shape("text", text="old")
        composer.type_text(text, 0, "abcde", duration=10)
        assert text.get("text") == ""
        clock = composer.clock
        clock.set_frame(5)
        assert text.get("text") == "ab"
        clock.set_frame(10)
        assert text.get("text") == "abcde"

    def test_before_start_is_empty(self, composer):
        text = composer.create_shape("text")
        composer.type_text(text, 20, "hey", duration=6)
        composer.clock.set_frame(3)
        assert text.get("text") == ""

    def test_replaces_previous_effect(self, composer):
        text = composer.create_shape("text")
        composer.type_text(text, 0, "one")
        composer.type_text(text, 0, "two")
        assert len(text.frame_hooks) == 1

    def test_requires_text_object(self, composer, caplog):
        circle = composer.create_shape("circle")
        with caplog.at_level(logging.WARNING):
            assert composer.type_text(circle, 0, "x") is circle
        assert circle.frame_hooks == []

    def test_effect_schedule(self):
        effect = TypingEffect.build(0, "ab", 2)
        assert effect.frames == [0, 1, 2]
        assert effect.text_at(1) == "a"
        assert TypingEffect.build(4, "", 10).text_at(50) == ""


class TestParticles:

    def test_count_and_scene(self, composer):
        particles = composer.create_particle_system(100, 100, count=5, seed=3)
        assert len(particles) == 5
        assert all(p in composer.scene.objects for p in particles)
        assert particles[0].get("name") == "Particle_0"

    def test_seeded_is_deterministic(self):
        tracks = []
        for _ in range(2):
            composer = AnimationComposer()
            particles = composer.create_particle_system(0, 0, count=4, seed=42, spread=50)
            tracks.append([p.timeline("x").to_list() for p in particles])
        assert tracks[0] == tracks[1]

    def test_config_seed_used_by_default(self):
        def run():
            composer = AnimationComposer(Scene(EngineConfig(random_seed=9)))
            return [p.timeline("y").to_list() for p in composer.create_particle_system(0, 0, count=3)]

        assert run() == run()

    def test_travel_within_spread(self, composer):
        particles = composer.create_particle_system(0, 0, count=20, spread=30, seed=1)
        for p in particles:
            end_x = p.timeline("x").keyframes[-1].value.value
            end_y = p.timeline("y").keyframes[-1].value.value
            assert (end_x ** 2 + end_y ** 2) ** 0.5 <= 30 + 1e-9

    def test_emit_rate_spreads_emission(self, composer):
        particles = composer.create_particle_system(0, 0, count=6, emit_rate=2, start_frame=10, duration=20)
        starts = [p.timeline("x").first_frame for p in particles]
        assert starts == [10, 10, 11, 11, 12, 12]
        ends = [p.timeline("x").last_frame for p in particles]
        assert ends == [30, 30, 31, 31, 32, 32]

    def test_lifetime_variance_bounds(self, composer):
        particles = composer.create_particle_system(0, 0, count=30, duration=100, lifetime_variance=0.5, seed=5)
        lifetimes = [p.timeline("x").last_frame - p.timeline("x").first_frame for p in particles]
        assert all(50 <= life <= 150 for life in lifetimes)
        assert len(set(lifetimes)) > 1

    def test_optional_tracks(self, composer):
        particles = composer.create_particle_system(
            0, 0, count=2, end_color="#000000", scale_down=True, spin=90, size=10,
        )
        for p in particles:
            assert p.is_animated("fill")
            assert value_at(p, "fill", 60) == Color(0, 0, 0)
            assert value_at(p, "width", 60).value == pytest.approx(p.get("width") * 0.2)
            assert p.is_animated("rotation")
            assert value_at(p, "opacity", 60).value == 0

    def test_unknown_option(self, composer, caplog):
        with caplog.at_level(logging.WARNING):
            assert composer.create_particle_system(0, 0, count=3, colour="red") == []
        assert len(composer.scene) == 0

    def test_bad_variance(self, composer):
        assert composer.create_particle_system(0, 0, lifetime_variance=1.5) == []

    @pytest.mark.parametrize("options", [
        {"lifetime_variance": "wide"},
        {"size_variance": None},
        {"spread": "far"},
        {"spin": "fast"},
        {"seed": "abc"},
        {"seed": 1.5},
    ])
    def test_non_numeric_options_rejected(self, composer, caplog, options):
        with caplog.at_level(logging.WARNING):
            assert composer.create_particle_system(0, 0, 3, **options) == []
        assert "create_particle_system" in caplog.text
        assert len(composer.scene) == 0

    def test_non_numeric_origin(self, composer):
        assert composer.create_particle_system("left", 0, 3) == []
        assert len(composer.scene) == 0


class TestCamera:

    @pytest.fixture
    def camera(self, composer):
        return composer.create_shape("camera", x=50, y=60)

    def test_shake_returns_to_rest(self, composer, camera):
        composer.camera_shake(camera, 10, 20, intensity=5, frequency=2, seed=7)
        x_track = camera.timeline("x")
        assert x_track.first_frame == 10
        assert x_track.last_frame == 30
        assert value_at(camera, "x", 10).value == 50
        assert value_at(camera, "x", 30).value == 50
        assert value_at(camera, "y", 30).value == 60
        offsets = [abs(kf.value.value - 50) for kf in x_track]
        assert max(offsets) <= 5
        assert max(offsets) > 0

    def test_shake_deterministic_with_seed(self, composer, camera):
        other = composer.create_shape("camera", x=50, y=60)
        composer.camera_shake(camera, 0, 12, seed=3)
        composer.camera_shake(other, 0, 12, seed=3)
        assert camera.timeline("x").to_list() == other.timeline("x").to_list()

    def test_zoom_with_focus(self, composer, camera):
        composer.camera_zoom(camera, 0, 24, 1, 2, focus=(200, 100))
        assert value_at(camera, "zoom", 24).value == 2
        assert value_at(camera, "x", 0).value == 50
        assert value_at(camera, "x", 24).value == 200

    def test_zoom_rejects_non_positive(self, composer, camera):
        composer.camera_zoom(camera, 0, 24, 0, 2)
        assert not camera.is_animated("zoom")

    def test_zoom_needs_camera(self, composer):
        circle = composer.create_shape("circle")
        assert composer.camera_zoom(circle, 0, 10, 1, 2) is circle

    def test_shake_rejects_bad_intensity_and_seed(self, composer, camera):
        assert composer.camera_shake(camera, 0, 12, intensity="x") is camera
        assert composer.camera_shake(camera, 0, 12, seed="7") is camera
        assert not camera.is_animated("x")

    def test_zoom_rejects_bad_focus(self, composer, camera):
        composer.camera_zoom(camera, 0, 24, 1, 2, focus=("a", "b"))
        assert not camera.is_animated("zoom")
        assert not camera.is_animated("x")


class TestSession:

    def test_at_frame(self, composer):
        fired = []
        assert composer.at_frame(3, fired.append) is composer
        composer.clock.set_frame(3)
        assert fired == [3]

    def test_at_frame_non_callable(self, composer, caplog):
        with caplog.at_level(logging.WARNING):
            assert composer.at_frame(3, "not callable") is composer
        assert len(composer.scene.frame_actions) == 0

    def test_chaining(self, composer):
        composer.set_duration(10).set_fps(30).play()
        assert composer.clock.total_frames == 300
        assert composer.clock.is_playing
        composer.pause().reset()
        assert not composer.clock.is_playing
        assert composer.clock.current_frame == 0

    def test_clear_all(self, composer):
        composer.create_group(3, "circle")
        composer.at_frame(1, lambda frame: None)
        composer.clock.set_frame(9)
        composer.clear_all()
        assert len(composer.scene) == 0
        assert composer.clock.current_frame == 0
        assert len(composer.scene.frame_actions) == 0

    def test_default_scene(self):
        composer = AnimationComposer()
        assert composer.default_easing == "easeInOutCubic"
        assert isinstance(composer.scene, Scene)
