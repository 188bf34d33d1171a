"""
AnimationComposer - declarative authoring surface.

Every effect expands into ``set_keyframe`` calls on the target objects.
Calls never raise on bad input: inputs are validated before anything is
written, a ValidationError is reported on the ``keyframe_engine`` logger
and the call returns its primary input unchanged, so a long authoring
script keeps going past one bad call.

Usage:
    composer = AnimationComposer()
    ball = composer.create_shape("circle", x=100, y=300, size=40)
    composer.fade_in(ball, 0, 24)
    composer.follow_path(ball, [(100, 300), (400, 100), (700, 300)], 0, 96,
                         orient_to_path=True)
    dots = composer.create_group(8, "circle", arrangement="line")
    composer.wave_effect(dots, "y", 0, 48, 280, 320, loop=True)
"""

import functools
import inspect
import math
import numbers
from bisect import bisect_right
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .core import (
    Color,
    Keyframe,
    Point,
    ValidationError,
    get_logger,
    noise,
    normalize_frame,
    oscillator,
    unwrap,
)
from .core.oscillators import WAVE_NAMES
from .objects import AnimatableObject, Camera, Circle, Path, Rectangle, Shape, Text
from .scene import Scene

logger = get_logger(__name__)

# (frame, value, easing)
KeyframeSpec = Tuple[int, Any, str]

SHAPE_FACTORIES = {
    "circle": Circle,
    "rectangle": Rectangle,
    "text": Text,
    "path": Path,
    "camera": Camera,
}

ARRANGEMENTS = ("circle", "grid", "line")

PARTICLE_OPTIONS = frozenset({
    "kind", "size", "color", "end_color", "duration", "lifetime_variance",
    "size_variance", "spread", "emit_rate", "start_frame", "scale_down",
    "spin", "easing", "seed",
})


def diagnostic_boundary(primary: Optional[str] = None, fallback: Optional[Callable[[], Any]] = None):
    """
    Turn ValidationError into a logged warning.

    On failure the wrapped call returns the argument named ``primary``
    as it was passed (``"self"`` for chaining calls), or ``fallback()``
    when there is no primary input. Other exceptions propagate.
    """

    def decorator(func):
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except ValidationError as e:
                logger.warning(f"{func.__name__}: {e}")
                if primary is not None:
                    bound = signature.bind_partial(*args, **kwargs)
                    return bound.arguments.get(primary)
                return fallback() if fallback is not None else None

        return wrapper

    return decorator


# ============================================================================
# VALIDATION HELPERS
# ============================================================================

def _frame(value: Any, field: str) -> int:
    frame = normalize_frame(value)
    if frame is None:
        raise ValidationError("Frame must be a non-negative integer", field=field, value=value)
    return frame


def _number(value: Any, field: str) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real) or not math.isfinite(value):
        raise ValidationError("Value must be a finite real number", field=field, value=value)
    return float(value)


def _positive(value: Any, field: str) -> float:
    number = _number(value, field)
    if not number > 0:
        raise ValidationError("Value must be a positive number", field=field, value=value)
    return number


def _seed(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise ValidationError("seed must be an integer", field="seed", value=value)
    return int(value)


def _xy(value: Any, field: str) -> Tuple[float, float]:
    try:
        point = Point.coerce(value)
    except (ValueError, KeyError, TypeError) as e:
        raise ValidationError(f"Invalid point: {e}", field=field) from e
    return _number(point.x, field), _number(point.y, field)


def _frame_range(start: Any, end: Any) -> Tuple[int, int]:
    start_frame = _frame(start, "start_frame")
    end_frame = _frame(end, "end_frame")
    if end_frame <= start_frame:
        raise ValidationError(
            f"end_frame must be after start_frame ({start_frame})", field="end_frame", value=end
        )
    return start_frame, end_frame


def _require_object(obj: Any, field: str = "obj") -> AnimatableObject:
    if not isinstance(obj, AnimatableObject):
        raise ValidationError("Expected an animatable object", field=field, value=obj)
    return obj


def _require_property(obj: AnimatableObject, name: str) -> None:
    if not obj.has_property(name):
        raise ValidationError(f"{obj.TYPE_NAME} has no property {name!r}", field="property")


def _require_group(group: Any) -> List[AnimatableObject]:
    if not isinstance(group, (list, tuple)) or not group:
        raise ValidationError("Group must be a non-empty list of objects", field="group")
    for member in group:
        _require_object(member, "group")
    return list(group)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class AnimationComposer:
    """
    High-level animation API over a Scene.

    Args:
        scene: Target scene; a new one with default config when omitted
    """

    def __init__(self, scene: Optional[Scene] = None):
        self.scene = scene if scene is not None else Scene()

    @property
    def clock(self):
        return self.scene.clock

    @property
    def default_easing(self) -> str:
        return self.scene.config.default_easing

    # ------------------------------------------------------------------
    # Keyframe primitive
    # ------------------------------------------------------------------

    def _normalize_keyframes(self, keyframes: Any, easing: Optional[str]) -> List[KeyframeSpec]:
        """Accept dicts, Keyframe instances or (frame, value[, easing]) tuples."""
        if not isinstance(keyframes, (list, tuple)):
            raise ValidationError("Keyframes must be a list", field="keyframes", value=type(keyframes).__name__)
        default = easing or self.default_easing
        specs = []
        for entry in keyframes:
            if isinstance(entry, Keyframe):
                frame, value, entry_easing = entry.frame, unwrap(entry.value), entry.easing
            elif isinstance(entry, dict):
                if "frame" not in entry or "value" not in entry:
                    raise ValidationError("Keyframe dict needs 'frame' and 'value'", field="keyframes", value=entry)
                frame, value, entry_easing = entry["frame"], entry["value"], entry.get("easing")
            elif isinstance(entry, (list, tuple)) and len(entry) in (2, 3):
                frame, value = entry[0], entry[1]
                entry_easing = entry[2] if len(entry) == 3 else None
            else:
                raise ValidationError("Unrecognized keyframe entry", field="keyframes", value=entry)
            specs.append((_frame(frame, "frame"), value, entry_easing or default))
        return specs

    @staticmethod
    def _apply(obj: AnimatableObject, name: str, specs: Iterable[KeyframeSpec], offset: int = 0) -> None:
        for frame, value, easing in specs:
            obj.set_keyframe(name, frame + offset, value, easing)

    @diagnostic_boundary("obj")
    def animate(self, obj: AnimatableObject, property_name: str, keyframes: Sequence, easing: Optional[str] = None):
        """
        Keyframe one property.

        Args:
            obj: Target object
            property_name: Property to animate
            keyframes: ``{frame, value[, easing]}`` dicts, Keyframe instances
                or ``(frame, value[, easing])`` tuples
            easing: Easing for entries that do not carry their own
                (defaults to the scene's default easing)

        Returns:
            ``obj``, for chaining
        """
        _require_object(obj)
        _require_property(obj, property_name)
        specs = self._normalize_keyframes(keyframes, easing)
        self._apply(obj, property_name, specs)
        return obj

    @diagnostic_boundary("obj")
    def animate_properties(self, obj: AnimatableObject, properties: Dict[str, Sequence], easing: Optional[str] = None):
        """Fan ``animate`` out over a ``{property: keyframes}`` mapping."""
        _require_object(obj)
        if not isinstance(properties, dict):
            raise ValidationError("Properties must be a mapping of property -> keyframes", field="properties")
        plan = []
        for name, keyframes in properties.items():
            _require_property(obj, name)
            plan.append((name, self._normalize_keyframes(keyframes, easing)))
        for name, specs in plan:
            self._apply(obj, name, specs)
        return obj

    # ------------------------------------------------------------------
    # Shapes
    # ------------------------------------------------------------------

    @diagnostic_boundary()
    def create_shape(self, kind: str, **props) -> Optional[AnimatableObject]:
        """
        Create a shape (or camera) and add it to the scene.

        ``x``/``y`` default to the canvas centre. ``size`` sets a circle's
        diameter or a rectangle's side; ``points`` seeds a path. Remaining
        keyword arguments are assigned as property values.
        """
        return self.scene.add_object(self._build_shape(kind, props))

    def _build_shape(self, kind: str, props: Dict[str, Any]) -> AnimatableObject:
        """Validate and construct a shape without adding it to the scene."""
        factory = SHAPE_FACTORIES.get(kind)
        if factory is None:
            raise ValidationError(f"Unknown shape type {kind!r}", field="kind", choices=sorted(SHAPE_FACTORIES))

        center_x, center_y = self.scene.config.canvas_center
        x = props.pop("x", None)
        y = props.pop("y", None)
        x = center_x if x is None else _number(x, "x")
        y = center_y if y is None else _number(y, "y")
        size = props.pop("size", None)
        if size is not None:
            size = _number(size, "size")
        for name in ("width", "height"):
            if name in props:
                props[name] = _number(props[name], name)

        if factory is Circle:
            obj = Circle(x, y, size if size is not None else 100.0)
        elif factory is Rectangle:
            width = props.pop("width", size if size is not None else 100.0)
            height = props.pop("height", size if size is not None else 80.0)
            obj = Rectangle(x, y, width, height)
        elif factory is Text:
            obj = Text(x, y, props.pop("text", "Text"))
        elif factory is Path:
            points = props.pop("points", None)
            try:
                obj = Path(x, y, points)
            except (ValueError, KeyError, TypeError) as e:
                raise ValidationError(f"Invalid path points: {e}", field="points") from e
        else:
            obj = Camera(x, y, _positive(props.pop("zoom", 1.0), "zoom"))

        for name, value in props.items():
            try:
                obj.set(name, value)
            except (ValueError, KeyError, TypeError) as e:
                raise ValidationError(f"Invalid value for {name}: {e}", field=name) from e
        return obj

    @diagnostic_boundary(fallback=list)
    def create_group(
        self,
        count: int,
        kind: str,
        arrangement: str = "circle",
        center: Optional[Tuple[float, float]] = None,
        radius: float = 150.0,
        **props,
    ) -> List[AnimatableObject]:
        """
        Create ``count`` shapes laid out on a circle, grid or line.

        Returns:
            The new shapes, in layout order
        """
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise ValidationError("count must be a positive integer", field="count", value=count)
        if kind not in SHAPE_FACTORIES:
            raise ValidationError(f"Unknown shape type {kind!r}", field="kind")
        if arrangement not in ARRANGEMENTS:
            raise ValidationError(f"Unknown arrangement {arrangement!r}", field="arrangement", choices=ARRANGEMENTS)
        center_x, center_y = _xy(center, "center") if center is not None else self.scene.config.canvas_center
        radius = _number(radius, "radius")

        positions = []
        if arrangement == "circle":
            for i in range(count):
                angle = (i / count) * 2 * math.pi
                positions.append((center_x + math.cos(angle) * radius, center_y + math.sin(angle) * radius))
        elif arrangement == "grid":
            cols = math.ceil(math.sqrt(count))
            rows = math.ceil(count / cols)
            cell_w = (radius * 2) / cols
            cell_h = (radius * 2) / rows
            for i in range(count):
                col, row = i % cols, i // cols
                positions.append((
                    center_x - radius + (col + 0.5) * cell_w,
                    center_y - radius + (row + 0.5) * cell_h,
                ))
        else:
            step = (2 * radius) / (count - 1 or 1)
            for i in range(count):
                positions.append((center_x - radius + step * i, center_y))

        # Build every member before adding any
        shapes = [self._build_shape(kind, dict(props, x=px, y=py)) for px, py in positions]
        return [self.scene.add_object(shape) for shape in shapes]

    # ------------------------------------------------------------------
    # Two-keyframe helpers
    # ------------------------------------------------------------------

    @diagnostic_boundary("obj")
    def fade_in(self, obj: AnimatableObject, start_frame: int = 0, duration: int = 30, easing: str = "easeOutCubic"):
        _require_object(obj)
        _require_property(obj, "opacity")
        start = _frame(start_frame, "start_frame")
        length = _frame(duration, "duration")
        obj.set("opacity", 0.0)
        self._apply(obj, "opacity", [(start, 0.0, easing), (start + length, 255.0, easing)])
        return obj

    @diagnostic_boundary("obj")
    def fade_out(self, obj: AnimatableObject, start_frame: int, duration: int = 30, easing: str = "easeInCubic"):
        _require_object(obj)
        _require_property(obj, "opacity")
        start = _frame(start_frame, "start_frame")
        length = _frame(duration, "duration")
        self._apply(obj, "opacity", [(start, 255.0, easing), (start + length, 0.0, easing)])
        return obj

    @diagnostic_boundary("obj")
    def move_from_to(
        self,
        obj: AnimatableObject,
        start_frame: int,
        end_frame: int,
        from_x: float,
        from_y: float,
        to_x: float,
        to_y: float,
        easing: str = "easeInOutCubic",
    ):
        _require_object(obj)
        _require_property(obj, "x")
        _require_property(obj, "y")
        start, end = _frame(start_frame, "start_frame"), _frame(end_frame, "end_frame")
        from_x, from_y = _number(from_x, "from_x"), _number(from_y, "from_y")
        to_x, to_y = _number(to_x, "to_x"), _number(to_y, "to_y")
        self._apply(obj, "x", [(start, from_x, easing), (end, to_x, easing)])
        self._apply(obj, "y", [(start, from_y, easing), (end, to_y, easing)])
        return obj

    def _scale_tracks(self, obj: AnimatableObject) -> List[Tuple[str, float]]:
        """(property, multiplier per unit scale) pairs driving an object's size."""
        if isinstance(obj, Camera):
            return [("zoom", 1.0)]
        if isinstance(obj, Circle):
            return [("width", 1.0), ("height", 1.0)]
        if isinstance(obj, Shape):
            width = obj.get("width")
            aspect = obj.get("height") / width if width else 1.0
            return [("width", 1.0), ("height", aspect)]
        raise ValidationError(f"{obj.TYPE_NAME} cannot be scaled", field="obj")

    @diagnostic_boundary("obj")
    def scale(
        self,
        obj: AnimatableObject,
        start_frame: int,
        end_frame: int,
        from_scale: float,
        to_scale: float,
        easing: str = "easeInOutQuad",
    ):
        """
        Animate size between two absolute values.

        Circles animate their diameter, other shapes their width with the
        height following the current aspect ratio, cameras their zoom.
        """
        _require_object(obj)
        start, end = _frame(start_frame, "start_frame"), _frame(end_frame, "end_frame")
        from_scale, to_scale = _number(from_scale, "from_scale"), _number(to_scale, "to_scale")
        for name, factor in self._scale_tracks(obj):
            self._apply(obj, name, [(start, from_scale * factor, easing), (end, to_scale * factor, easing)])
        return obj

    @diagnostic_boundary("obj")
    def rotate(
        self,
        obj: AnimatableObject,
        start_frame: int,
        end_frame: int,
        from_angle: float,
        to_angle: float,
        easing: str = "easeInOutCubic",
    ):
        _require_object(obj)
        _require_property(obj, "rotation")
        start, end = _frame(start_frame, "start_frame"), _frame(end_frame, "end_frame")
        from_angle, to_angle = _number(from_angle, "from_angle"), _number(to_angle, "to_angle")
        self._apply(obj, "rotation", [(start, from_angle, easing), (end, to_angle, easing)])
        return obj

    @diagnostic_boundary("obj")
    def pulse(
        self,
        obj: AnimatableObject,
        start_frame: int,
        count: int = 3,
        duration: int = 60,
        min_scale: float = 0.8,
        max_scale: float = 1.2,
        easing: str = "easeInOutQuad",
    ):
        """Alternate between ``min_scale`` and ``max_scale``, ending at the original size."""
        _require_object(obj)
        start = _frame(start_frame, "start_frame")
        length = _frame(duration, "duration")
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise ValidationError("count must be a positive integer", field="count", value=count)
        min_scale, max_scale = _number(min_scale, "min_scale"), _number(max_scale, "max_scale")
        tracks = self._scale_tracks(obj)

        step = length / count
        factors = [(start + _round_half_up(i * step), min_scale if i % 2 == 0 else max_scale) for i in range(count)]
        factors.append((start + length, 1.0))
        for name, _ in tracks:
            original = obj.get(name)
            self._apply(obj, name, [(frame, original * factor, easing) for frame, factor in factors])
        return obj

    # ------------------------------------------------------------------
    # Path following
    # ------------------------------------------------------------------

    @staticmethod
    def _path_frames(points: np.ndarray, start: int, end: int) -> np.ndarray:
        """Frame of each path point, proportional to arc length."""
        segments = np.hypot(np.diff(points[:, 0]), np.diff(points[:, 1]))
        cumulative = np.concatenate([[0.0], np.cumsum(segments)])
        total = cumulative[-1]
        if total > 0:
            fractions = cumulative / total
        else:
            fractions = np.linspace(0.0, 1.0, len(points))
        frames = start + np.floor(fractions * (end - start) + 0.5).astype(int)
        frames[0] = start
        frames[-1] = end
        return frames

    @staticmethod
    def _path_headings(points: np.ndarray) -> np.ndarray:
        """Heading in degrees of each segment, unwrapped to avoid 360 jumps."""
        dx = np.diff(points[:, 0])
        dy = np.diff(points[:, 1])
        angles = np.arctan2(dy, dx)
        # Degenerate segments keep the previous heading
        degenerate = (dx == 0) & (dy == 0)
        for i in np.flatnonzero(degenerate):
            angles[i] = angles[i - 1] if i > 0 else 0.0
        return np.degrees(np.unwrap(angles))

    @diagnostic_boundary("obj")
    def follow_path(
        self,
        obj: AnimatableObject,
        path: Sequence,
        start_frame: int,
        end_frame: int,
        easing: str = "linear",
        orient_to_path: bool = False,
        rotation_offset: float = 0.0,
    ):
        """
        Move through ``path`` points at constant speed.

        Each point gets an x/y keyframe at the frame matching its share of
        the total arc length; the first and last points land exactly on
        ``start_frame`` and ``end_frame``. With ``orient_to_path`` each
        segment's heading (plus ``rotation_offset``) is keyframed on
        ``rotation`` at the segment's start frame.
        """
        _require_object(obj)
        _require_property(obj, "x")
        _require_property(obj, "y")
        if orient_to_path:
            _require_property(obj, "rotation")
        if not isinstance(path, (list, tuple)) or len(path) < 2:
            raise ValidationError("Path must be a list of at least 2 points", field="path")
        coords = [_xy(p, "path") for p in path]
        start, end = _frame_range(start_frame, end_frame)
        rotation_offset = _number(rotation_offset, "rotation_offset")

        points = np.array(coords, dtype=float)
        frames = self._path_frames(points, start, end)

        for frame, (x, y) in zip(frames, coords):
            obj.set_keyframe("x", int(frame), x, easing)
            obj.set_keyframe("y", int(frame), y, easing)

        if orient_to_path:
            headings = self._path_headings(points) + rotation_offset
            for frame, heading in zip(frames[:-1], headings):
                obj.set_keyframe("rotation", int(frame), float(heading), easing)
        return obj

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------

    def _stagger(
        self,
        group: List[AnimatableObject],
        plan: List[Tuple[str, List[KeyframeSpec]]],
        stagger_frames: int,
        reverse: bool,
    ) -> None:
        ordered = list(reversed(group)) if reverse else group
        for index, obj in enumerate(ordered):
            for name, specs in plan:
                self._apply(obj, name, specs, offset=index * stagger_frames)

    @diagnostic_boundary("group")
    def animate_group(
        self,
        group: Sequence[AnimatableObject],
        property_name: str,
        keyframes: Sequence,
        stagger_frames: int = 5,
        easing: Optional[str] = None,
        reverse: bool = False,
    ):
        """
        Replay one keyframe template on every member, shifted by
        ``index * stagger_frames`` (members iterated in reverse if asked).
        """
        members = _require_group(group)
        for obj in members:
            _require_property(obj, property_name)
        stagger = _frame(stagger_frames, "stagger_frames")
        specs = self._normalize_keyframes(keyframes, easing)
        self._stagger(members, [(property_name, specs)], stagger, reverse)
        return group

    @diagnostic_boundary("group")
    def animate_group_properties(
        self,
        group: Sequence[AnimatableObject],
        properties: Dict[str, Sequence],
        stagger_frames: int = 5,
        easing: Optional[str] = None,
        reverse: bool = False,
    ):
        """``animate_group`` fanned out over a ``{property: keyframes}`` mapping."""
        members = _require_group(group)
        if not isinstance(properties, dict):
            raise ValidationError("Properties must be a mapping of property -> keyframes", field="properties")
        stagger = _frame(stagger_frames, "stagger_frames")
        plan = []
        for name, keyframes in properties.items():
            for obj in members:
                _require_property(obj, name)
            plan.append((name, self._normalize_keyframes(keyframes, easing)))
        self._stagger(members, plan, stagger, reverse)
        return group

    @diagnostic_boundary("group")
    def wave_effect(
        self,
        group: Sequence[AnimatableObject],
        property_name: str,
        start_frame: int,
        duration: int,
        min_value: float,
        max_value: float,
        easing: str = "easeInOutSine",
        cycles: int = 1,
        loop: bool = False,
    ):
        """
        Ripple min -> max -> min through the group.

        ``duration`` is split evenly between members to delay each one's
        start. One cycle lasts half of ``duration``; with ``loop`` the
        cycles repeat until the end of the timeline.
        """
        members = _require_group(group)
        for obj in members:
            _require_property(obj, property_name)
        min_value, max_value = _number(min_value, "min_value"), _number(max_value, "max_value")
        start = _frame(start_frame, "start_frame")
        length = _frame(duration, "duration")
        if length < 4:
            raise ValidationError("duration must be at least 4 frames", field="duration", value=duration)
        if isinstance(cycles, bool) or not isinstance(cycles, int) or cycles < 1:
            raise ValidationError("cycles must be a positive integer", field="cycles", value=cycles)

        frames_per_object = length // len(members)
        quarter = _round_half_up(length / 4)
        half = _round_half_up(length / 2)

        for index, obj in enumerate(members):
            base = start + index * frames_per_object
            repeats = cycles
            if loop:
                remaining = self.clock.total_frames - base
                repeats = max(cycles, math.ceil(remaining / half))
            specs = []
            for cycle in range(repeats):
                offset = base + cycle * half
                specs.append((offset, min_value, easing))
                specs.append((offset + quarter, max_value, easing))
            specs.append((base + repeats * half, min_value, easing))
            self._apply(obj, property_name, specs)
        return group

    # ------------------------------------------------------------------
    # Sampled signals
    # ------------------------------------------------------------------

    @diagnostic_boundary("obj")
    def oscillate(
        self,
        obj: AnimatableObject,
        property_name: str,
        start_frame: int,
        end_frame: int,
        center: float,
        amplitude: float,
        period: float,
        wave: str = "sin",
        samples_per_period: int = 8,
    ):
        """Sample a periodic wave into linear keyframes over [start_frame, end_frame]."""
        _require_object(obj)
        _require_property(obj, property_name)
        start, end = _frame_range(start_frame, end_frame)
        period = _positive(period, "period")
        if wave not in WAVE_NAMES:
            raise ValidationError(f"Unknown wave {wave!r}", field="wave", choices=sorted(WAVE_NAMES))
        samples = _positive(samples_per_period, "samples_per_period")
        center, amplitude = _number(center, "center"), _number(amplitude, "amplitude")

        step = max(1, _round_half_up(period / samples))
        frames = list(range(start, end, step)) + [end]
        specs = [
            (frame, oscillator(wave, frame - start, period, amplitude=amplitude, center=center), "linear")
            for frame in frames
        ]
        self._apply(obj, property_name, specs)
        return obj

    @diagnostic_boundary("obj")
    def type_text(self, obj: Text, start_frame: int, text: str, duration: int = 60):
        """
        Reveal ``text`` one character at a time over ``duration`` frames.

        Driven by a per-frame hook rather than keyframes, since partial
        strings do not interpolate. A previous typing effect on the same
        object is replaced.
        """
        if not isinstance(obj, Text):
            raise ValidationError("type_text needs a Text object", field="obj", value=obj)
        if not isinstance(text, str):
            raise ValidationError("text must be a string", field="text", value=text)
        start = _frame(start_frame, "start_frame")
        length = _frame(duration, "duration")

        effect = TypingEffect.build(start, text, length)
        for hook in list(obj.frame_hooks):
            if isinstance(hook, TypingEffect):
                obj.remove_frame_hook(hook)
        obj.set("text", "")
        obj.add_frame_hook(effect)
        return obj

    # ------------------------------------------------------------------
    # Particles
    # ------------------------------------------------------------------

    @diagnostic_boundary(fallback=list)
    def create_particle_system(self, x: float, y: float, count: int = 20, **options) -> List[AnimatableObject]:
        """
        Emit ``count`` particles from (x, y).

        Options:
            kind: Shape type of each particle (default "circle")
            size: Base particle size (10)
            color / end_color: Fill, optionally blended to ``end_color``
            duration: Base lifetime in frames (60)
            lifetime_variance / size_variance: Relative jitter in [0, 1)
            spread: Maximum travel distance (200)
            emit_rate: Particles per frame; all at once when omitted
            start_frame: First emission frame (0)
            scale_down: Shrink to 20% over the lifetime
            spin: Maximum rotation in degrees over the lifetime
            easing: Motion easing ("easeOutCubic")
            seed: RNG seed (defaults to the scene config's random_seed)

        Returns:
            The particle shapes
        """
        unknown = set(options) - PARTICLE_OPTIONS
        if unknown:
            raise ValidationError(f"Unknown particle options: {sorted(unknown)}", field="options")
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise ValidationError("count must be a positive integer", field="count", value=count)
        x, y = _number(x, "x"), _number(y, "y")

        kind = options.get("kind", "circle")
        if kind not in SHAPE_FACTORIES or kind == "camera":
            raise ValidationError(f"Unknown particle shape {kind!r}", field="kind")
        size = _positive(options.get("size", 10.0), "size")
        lifetime = _frame(options.get("duration", 60), "duration")
        if lifetime < 1:
            raise ValidationError("duration must be at least 1 frame", field="duration")
        lifetime_variance = _number(options.get("lifetime_variance", 0.0), "lifetime_variance")
        size_variance = _number(options.get("size_variance", 0.0), "size_variance")
        for field, variance in (("lifetime_variance", lifetime_variance), ("size_variance", size_variance)):
            if not 0.0 <= variance < 1.0:
                raise ValidationError("Variance must be in [0, 1)", field=field, value=variance)
        spread = _number(options.get("spread", 200.0), "spread")
        if spread < 0:
            raise ValidationError("spread must not be negative", field="spread", value=spread)
        emit_rate = options.get("emit_rate")
        if emit_rate is not None:
            emit_rate = _positive(emit_rate, "emit_rate")
        start = _frame(options.get("start_frame", 0), "start_frame")
        try:
            fill = Color.coerce(options.get("color", (255, 255, 255)))
            end_color = options.get("end_color")
            end_color = Color.coerce(end_color) if end_color is not None else None
        except (ValueError, KeyError, TypeError) as e:
            raise ValidationError(f"Invalid particle color: {e}", field="color") from e
        scale_down = bool(options.get("scale_down", False))
        spin = _number(options.get("spin", 0.0), "spin")
        easing = options.get("easing", "easeOutCubic")
        seed = _seed(options.get("seed", self.scene.config.random_seed))

        rng = np.random.default_rng(seed)
        particles = []
        for i in range(count):
            emit = start + (int(i // emit_rate) if emit_rate else 0)
            life = max(1, _round_half_up(lifetime * (1.0 + rng.uniform(-lifetime_variance, lifetime_variance))))
            particle_size = size * (1.0 + rng.uniform(-size_variance, size_variance))
            angle = rng.uniform(0.0, 2 * np.pi)
            distance = rng.uniform(0.0, spread)
            spin_to = rng.uniform(-spin, spin) if spin else 0.0
            end = emit + life

            particle = self.create_shape(kind, x=x, y=y, size=particle_size, fill=fill, name=f"Particle_{i}")
            self._apply(particle, "x", [(emit, x, easing), (end, x + np.cos(angle) * distance, easing)])
            self._apply(particle, "y", [(emit, y, easing), (end, y + np.sin(angle) * distance, easing)])
            self._apply(particle, "opacity", [(emit, 255.0, "easeInCubic"), (end, 0.0, "easeInCubic")])
            if end_color is not None:
                self._apply(particle, "fill", [(emit, fill, "linear"), (end, end_color, "linear")])
            if scale_down:
                for name, _ in self._scale_tracks(particle):
                    current = particle.get(name)
                    self._apply(particle, name, [(emit, current, easing), (end, current * 0.2, easing)])
            if spin_to:
                self._apply(particle, "rotation", [(emit, 0.0, easing), (end, spin_to, easing)])
            particles.append(particle)

        logger.debug(f"Created particle system with {count} particles at ({x}, {y})")
        return particles

    # ------------------------------------------------------------------
    # Camera
    # ------------------------------------------------------------------

    @diagnostic_boundary("camera")
    def camera_shake(
        self,
        camera: AnimatableObject,
        start_frame: int,
        duration: int,
        intensity: float = 10.0,
        frequency: int = 2,
        decay: bool = True,
        seed: Optional[int] = None,
    ):
        """
        Jitter x/y around the current position with smooth noise.

        A keyframe is placed every ``frequency`` frames; with ``decay`` the
        amplitude falls linearly to zero. The shake always ends back on
        the starting position.
        """
        _require_object(camera, "camera")
        _require_property(camera, "x")
        _require_property(camera, "y")
        start = _frame(start_frame, "start_frame")
        length = _frame(duration, "duration")
        if length < 1:
            raise ValidationError("duration must be at least 1 frame", field="duration")
        step = _frame(frequency, "frequency")
        if step < 1:
            raise ValidationError("frequency must be at least 1 frame", field="frequency")
        intensity = _number(intensity, "intensity")
        seed = _seed(seed)
        if seed is None:
            seed = int(np.random.default_rng(self.scene.config.random_seed).integers(2**31))

        base_x, base_y = camera.get("x"), camera.get("y")
        x_specs, y_specs = [], []
        for offset in range(0, length, step):
            amplitude = intensity * (1.0 - offset / length) if decay else intensity
            if offset == 0:
                amplitude = 0.0
            x_specs.append((start + offset, base_x + noise(offset, step, seed) * amplitude, "linear"))
            y_specs.append((start + offset, base_y + noise(offset, step, seed + 1) * amplitude, "linear"))
        x_specs.append((start + length, base_x, "linear"))
        y_specs.append((start + length, base_y, "linear"))
        self._apply(camera, "x", x_specs)
        self._apply(camera, "y", y_specs)
        return camera

    @diagnostic_boundary("camera")
    def camera_zoom(
        self,
        camera: AnimatableObject,
        start_frame: int,
        end_frame: int,
        from_zoom: float,
        to_zoom: float,
        focus: Optional[Any] = None,
        easing: str = "easeInOutCubic",
    ):
        """Zoom between two factors, optionally panning to ``focus`` (x, y)."""
        _require_object(camera, "camera")
        _require_property(camera, "zoom")
        start, end = _frame_range(start_frame, end_frame)
        _positive(from_zoom, "from_zoom")
        _positive(to_zoom, "to_zoom")
        target = _xy(focus, "focus") if focus is not None else None

        self._apply(camera, "zoom", [(start, from_zoom, easing), (end, to_zoom, easing)])
        if target is not None:
            self._apply(camera, "x", [(start, camera.get("x"), easing), (end, target[0], easing)])
            self._apply(camera, "y", [(start, camera.get("y"), easing), (end, target[1], easing)])
        return camera

    # ------------------------------------------------------------------
    # Frame actions / session
    # ------------------------------------------------------------------

    @diagnostic_boundary("self")
    def at_frame(self, frame: int, callback: Callable[[int], None]):
        """Run ``callback(frame)`` whenever the clock lands on ``frame``."""
        if not callable(callback):
            raise ValidationError("callback must be callable", field="callback", value=callback)
        self.scene.frame_actions.schedule(_frame(frame, "frame"), callback)
        return self

    def clear_all(self):
        self.scene.clear()
        self.clock.set_frame(0)
        return self

    def set_duration(self, seconds: float):
        self.clock.set_duration(seconds)
        return self

    def set_fps(self, fps: float):
        self.clock.set_fps(fps)
        return self

    def reset(self):
        self.clock.reset()
        return self

    def play(self):
        self.clock.play()
        return self

    def pause(self):
        self.clock.pause()
        return self


class TypingEffect:
    """Frame hook showing a growing prefix of a string."""

    def __init__(self, frames: List[int], texts: List[str]):
        self.frames = frames
        self.texts = texts

    @classmethod
    def build(cls, start_frame: int, text: str, duration: int) -> "TypingEffect":
        if not text:
            return cls([start_frame], [""])
        per_char = duration / len(text)
        frames, texts = [], []
        for i in range(len(text) + 1):
            frame = start_frame + _round_half_up(i * per_char)
            if frames and frames[-1] == frame:
                texts[-1] = text[:i]
            else:
                frames.append(frame)
                texts.append(text[:i])
        return cls(frames, texts)

    def text_at(self, frame: int) -> str:
        index = bisect_right(self.frames, frame)
        return self.texts[index - 1] if index > 0 else ""

    def __call__(self, obj: AnimatableObject, frame: int) -> None:
        obj.set("text", self.text_at(frame))


__all__ = [
    "AnimationComposer",
    "TypingEffect",
    "diagnostic_boundary",
    "SHAPE_FACTORIES",
]
