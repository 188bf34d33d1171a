"""
Animatable objects and their property tables.

Each object type declares its animatable properties as PropertyDescriptor
entries. The per-type table is assembled once, when the class is created,
and every keyframe and live-value access goes through it: unknown property
names are reported and ignored instead of silently creating attributes.
"""

import copy
import math
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Type

from .core import (
    DEFAULT_EASING,
    Color,
    Point,
    PropertyTimeline,
    ValueKind,
    as_value,
    get_logger,
    normalize_frame,
    unwrap,
    value_from_json,
    value_to_json,
)

logger = get_logger(__name__)

FrameHook = Callable[["AnimatableObject", int], None]

# Sentinel: keyframe the property's current live value
CURRENT_VALUE = object()


@dataclass(frozen=True)
class PropertyDescriptor:
    """
    Typed accessor for one animatable property.

    Attributes:
        name: Property name used in keyframe maps and persisted data
        kind: Declared value kind (drives coercion and decoding)
        default: Initial live value
    """
    name: str
    kind: ValueKind
    default: Any

    def coerce(self, raw: Any) -> Any:
        """Turn an assigned value into the live value stored on the object."""
        raw = unwrap(as_value(raw)) if not isinstance(raw, (dict, str)) else raw
        if self.kind is ValueKind.COLOR and not isinstance(raw, Color):
            try:
                return Color.coerce(raw)
            except (ValueError, KeyError, TypeError):
                return raw
        if self.kind is ValueKind.POINT and not isinstance(raw, Point):
            try:
                return Point.coerce(raw)
            except (ValueError, KeyError, TypeError):
                return raw
        if self.kind is ValueKind.LIST and isinstance(raw, (list, tuple)):
            return [Point.coerce(p) if isinstance(p, dict) else p for p in raw]
        return raw

    def get(self, obj: "AnimatableObject") -> Any:
        return obj._values[self.name]

    def set(self, obj: "AnimatableObject", raw: Any) -> None:
        obj._values[self.name] = self.coerce(raw)


def scalar(name: str, default: float = 0.0) -> PropertyDescriptor:
    return PropertyDescriptor(name, ValueKind.SCALAR, default)


def color(name: str, default: Color) -> PropertyDescriptor:
    return PropertyDescriptor(name, ValueKind.COLOR, default)


def opaque(name: str, default: Any) -> PropertyDescriptor:
    return PropertyDescriptor(name, ValueKind.OPAQUE, default)


class AnimatableObject:
    """
    Entity with named properties, each optionally driven by a timeline.

    Properties without a timeline keep whatever was last assigned;
    properties with a timeline are overwritten on every ``evaluate_at``.

    Usage:
        circle = Circle(100, 100)
        circle.set_keyframe("opacity", 0, 0)
        circle.set_keyframe("opacity", 30, 255, "easeOutCubic")
        circle.evaluate_at(15)
        circle.get("opacity")
    """

    TYPE_NAME = "AnimatableObject"
    PROPERTIES: Tuple[PropertyDescriptor, ...] = ()

    # Built per class in __init_subclass__
    property_table: Dict[str, PropertyDescriptor] = {}

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        table: Dict[str, PropertyDescriptor] = {}
        for base in reversed(cls.__mro__):
            for descriptor in base.__dict__.get("PROPERTIES", ()):
                table[descriptor.name] = descriptor
        cls.property_table = table
        if "TYPE_NAME" not in cls.__dict__:
            cls.TYPE_NAME = cls.__name__

    def __init__(self, object_id: Optional[str] = None, **properties):
        self.id = object_id or uuid.uuid4().hex[:12]
        self._values: Dict[str, Any] = {
            name: copy.deepcopy(d.default) for name, d in self.property_table.items()
        }
        self.keyframes: Dict[str, PropertyTimeline] = {}
        self.frame_hooks: List[FrameHook] = []
        # Set by Scene.add_object
        self.scene = None

        for name, value in properties.items():
            self.set(name, value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"

    # ------------------------------------------------------------------
    # Property access
    # ------------------------------------------------------------------

    @classmethod
    def property_names(cls) -> List[str]:
        return list(cls.property_table.keys())

    @classmethod
    def has_property(cls, name: str) -> bool:
        return name in cls.property_table

    def _descriptor(self, name: str, action: str) -> Optional[PropertyDescriptor]:
        descriptor = self.property_table.get(name)
        if descriptor is None:
            logger.warning(
                f"{action}: {self.TYPE_NAME} {self.id} has no property {name!r}"
            )
        return descriptor

    def get(self, name: str, default: Any = None) -> Any:
        """Live value of a property (``default`` for unknown names)."""
        descriptor = self.property_table.get(name)
        return descriptor.get(self) if descriptor else default

    def set(self, name: str, value: Any) -> bool:
        """Assign a live value. Returns False for unknown properties."""
        descriptor = self._descriptor(name, "set")
        if descriptor is None:
            return False
        descriptor.set(self, value)
        return True

    def values(self) -> Dict[str, Any]:
        """Snapshot of all live property values."""
        return dict(self._values)

    # ------------------------------------------------------------------
    # Keyframes
    # ------------------------------------------------------------------

    def timeline(self, name: str) -> Optional[PropertyTimeline]:
        return self.keyframes.get(name)

    def is_animated(self, name: str) -> bool:
        return name in self.keyframes

    def set_keyframe(
        self,
        name: str,
        frame: int,
        value: Any = CURRENT_VALUE,
        easing: str = DEFAULT_EASING,
    ) -> bool:
        """
        Insert or overwrite the keyframe of ``name`` at ``frame``.

        ``value`` defaults to the property's current live value.

        Returns:
            False (after reporting) for an unknown property or a frame that
            is not a non-negative integer
        """
        descriptor = self._descriptor(name, "set_keyframe")
        if descriptor is None:
            return False
        frame = normalize_frame(frame)
        if frame is None:
            logger.warning(f"set_keyframe: invalid frame for {self.TYPE_NAME}.{name}")
            return False
        if value is CURRENT_VALUE:
            value = descriptor.get(self)
        elif descriptor.kind in (ValueKind.COLOR, ValueKind.POINT):
            value = descriptor.coerce(value)

        timeline = self.keyframes.get(name)
        if timeline is None:
            timeline = PropertyTimeline(name)
            self.keyframes[name] = timeline
        timeline.upsert(frame, value, easing or DEFAULT_EASING)

        if self.scene is not None:
            self.scene.registry.register(name)
        return True

    def clear_keyframe(self, name: str, frame: int) -> bool:
        """
        Remove the keyframe of ``name`` at ``frame``.

        An emptied timeline is dropped from the map; the property is then
        unregistered from the scene registry unless another object still
        animates it.
        """
        if self._descriptor(name, "clear_keyframe") is None:
            return False
        normalized = normalize_frame(frame)
        if normalized is None:
            logger.warning(f"clear_keyframe: invalid frame {frame!r} for {self.TYPE_NAME}.{name}")
            return False
        frame = normalized
        timeline = self.keyframes.get(name)
        if timeline is None or not timeline.remove(frame):
            return False
        if not timeline:
            self._drop_timeline(name)
        return True

    def clear_property(self, name: str) -> bool:
        """Remove every keyframe of one property."""
        if name not in self.keyframes:
            return False
        self._drop_timeline(name)
        return True

    def _drop_timeline(self, name: str) -> None:
        del self.keyframes[name]
        if self.scene is not None:
            registry = self.scene.registry
            if not registry.property_still_used(name, self.scene.objects):
                registry.unregister(name)

    def evaluate_at(self, frame: int) -> None:
        """
        Write the value of every animated property at ``frame`` into its
        live slot, then run the per-frame hooks.
        """
        for name, timeline in self.keyframes.items():
            self._values[name] = unwrap(timeline.evaluate(frame))
        for hook in list(self.frame_hooks):
            hook(self, frame)

    def add_frame_hook(self, hook: FrameHook) -> None:
        """Register ``hook(obj, frame)`` to run after each timeline pass."""
        if hook not in self.frame_hooks:
            self.frame_hooks.append(hook)

    def remove_frame_hook(self, hook: FrameHook) -> bool:
        if hook in self.frame_hooks:
            self.frame_hooks.remove(hook)
            return True
        return False

    # ------------------------------------------------------------------
    # Copy / persistence
    # ------------------------------------------------------------------

    def clone(self) -> "AnimatableObject":
        """Copy with a fresh id, deep-copied values and keyframes, no hooks."""
        duplicate = type(self).__new__(type(self))
        AnimatableObject.__init__(duplicate)
        duplicate._values = copy.deepcopy(self._values)
        for name, timeline in self.keyframes.items():
            duplicate.keyframes[name] = PropertyTimeline.from_list(
                timeline.to_list(), name, self.property_table[name].kind
            )
        return duplicate

    def to_dict(self) -> Dict[str, Any]:
        """Persisted shape: type, id, flat property values, keyframe map."""
        data: Dict[str, Any] = {"type": self.TYPE_NAME, "id": self.id}
        for name, value in self._values.items():
            data[name] = value_to_json(value)
        data["keyframes"] = {
            name: timeline.to_list() for name, timeline in self.keyframes.items()
        }
        return data


# ============================================================================
# SHAPES
# ============================================================================

WHITE = Color(255, 255, 255, 255)
BLACK = Color(0, 0, 0, 255)


class Shape(AnimatableObject):
    """Base for drawable shapes; positions are shape centres."""

    PROPERTIES = (
        scalar("x"),
        scalar("y"),
        scalar("width", 100.0),
        scalar("height", 100.0),
        scalar("rotation"),  # degrees
        color("fill", WHITE),
        color("stroke", BLACK),
        scalar("stroke_weight", 1.0),
        scalar("opacity", 255.0),
        opaque("visible", True),
        opaque("name", "Shape"),
    )

    def __init__(self, x: float = 0.0, y: float = 0.0, object_id: Optional[str] = None, **properties):
        properties.setdefault("name", self.TYPE_NAME)
        super().__init__(object_id=object_id, x=x, y=y, **properties)

    def get_bounding_box(self) -> Dict[str, float]:
        width = self.get("width")
        height = self.get("height")
        return {
            "x": self.get("x") - width / 2,
            "y": self.get("y") - height / 2,
            "width": width,
            "height": height,
        }

    def contains_point(self, x: float, y: float) -> bool:
        """Hit test in the shape's rotated local frame."""
        angle = -math.radians(self.get("rotation"))
        dx = x - self.get("x")
        dy = y - self.get("y")
        local_x = dx * math.cos(angle) - dy * math.sin(angle)
        local_y = dx * math.sin(angle) + dy * math.cos(angle)
        return self._point_in_shape(local_x, local_y)

    def _point_in_shape(self, local_x: float, local_y: float) -> bool:
        half_w = self.get("width") / 2
        half_h = self.get("height") / 2
        return -half_w <= local_x <= half_w and -half_h <= local_y <= half_h


class Circle(Shape):

    def __init__(self, x: float = 0.0, y: float = 0.0, diameter: float = 100.0,
                 object_id: Optional[str] = None, **properties):
        properties.setdefault("width", diameter)
        properties.setdefault("height", diameter)
        super().__init__(x, y, object_id=object_id, **properties)

    def _point_in_shape(self, local_x: float, local_y: float) -> bool:
        radius_x = self.get("width") / 2
        radius_y = self.get("height") / 2
        if radius_x <= 0 or radius_y <= 0:
            return False
        return (local_x * local_x) / (radius_x * radius_x) + (local_y * local_y) / (radius_y * radius_y) <= 1


class Rectangle(Shape):

    PROPERTIES = (scalar("corner_radius"),)

    def __init__(self, x: float = 0.0, y: float = 0.0, width: float = 100.0, height: float = 100.0,
                 object_id: Optional[str] = None, **properties):
        super().__init__(x, y, object_id=object_id, width=width, height=height, **properties)


class Text(Shape):

    PROPERTIES = (
        opaque("text", "Text"),
        scalar("font_size", 24.0),
        opaque("font_family", "Arial"),
        opaque("text_align", "center"),
        opaque("text_style", "normal"),
        scalar("letter_spacing"),
        scalar("line_height", 1.2),
    )

    def __init__(self, x: float = 0.0, y: float = 0.0, text: str = "Text",
                 object_id: Optional[str] = None, **properties):
        super().__init__(x, y, object_id=object_id, text=text, **properties)


class Path(Shape):
    """Polyline; width/height track the bounds of its points."""

    PROPERTIES = (
        PropertyDescriptor("points", ValueKind.LIST, []),
        opaque("closed", False),
    )

    def __init__(self, x: float = 0.0, y: float = 0.0, points: Optional[Iterable[Any]] = None,
                 object_id: Optional[str] = None, **properties):
        super().__init__(x, y, object_id=object_id, **properties)
        if points is not None:
            self.set("points", [Point.coerce(p) for p in points])
            self.update_bounds()

    def add_point(self, x: float, y: float) -> int:
        points = self.get("points")
        points.append(Point(x, y))
        self.update_bounds()
        return len(points) - 1

    def remove_point(self, index: int) -> bool:
        points = self.get("points")
        if 0 <= index < len(points):
            del points[index]
            self.update_bounds()
            return True
        return False

    def move_point(self, index: int, x: float, y: float) -> bool:
        points = self.get("points")
        if 0 <= index < len(points):
            points[index] = Point(x, y)
            self.update_bounds()
            return True
        return False

    def update_bounds(self) -> None:
        points = [p for p in self.get("points") if isinstance(p, Point)]
        if not points:
            self.set("width", 0.0)
            self.set("height", 0.0)
            return
        xs = [p.x for p in points]
        ys = [p.y for p in points]
        self.set("width", max(xs) - min(xs))
        self.set("height", max(ys) - min(ys))


class Camera(AnimatableObject):
    """Scene camera: view centre, zoom factor and roll in degrees."""

    PROPERTIES = (
        scalar("x"),
        scalar("y"),
        scalar("zoom", 1.0),
        scalar("rotation"),
        opaque("name", "Camera"),
    )

    def __init__(self, x: float = 0.0, y: float = 0.0, zoom: float = 1.0,
                 object_id: Optional[str] = None, **properties):
        super().__init__(object_id=object_id, x=x, y=y, zoom=zoom, **properties)


OBJECT_TYPES: Dict[str, Type[AnimatableObject]] = {
    cls.TYPE_NAME: cls for cls in (Circle, Rectangle, Text, Path, Camera)
}


def object_from_dict(data: Dict[str, Any]) -> Optional[AnimatableObject]:
    """
    Rebuild an object from its persisted shape.

    Returns None (after a warning) for unknown types. Unknown or undecodable
    properties, keyframe tracks and keyframes are skipped with a warning.
    """
    cls = OBJECT_TYPES.get(data.get("type"))
    if cls is None:
        logger.warning(f"Unknown object type: {data.get('type')!r}")
        return None

    obj = cls(object_id=data.get("id"))
    for name, descriptor in cls.property_table.items():
        if name not in data:
            continue
        try:
            descriptor.set(obj, unwrap(value_from_json(data[name], descriptor.kind)))
        except (ValueError, TypeError, KeyError) as e:
            logger.warning(f"Skipping invalid value for {cls.TYPE_NAME}.{name}: {e}")

    keyframes = data.get("keyframes") or {}
    if not isinstance(keyframes, dict):
        logger.warning(f"Skipping malformed keyframe map of {cls.TYPE_NAME} {obj.id}")
        keyframes = {}
    for name, entries in keyframes.items():
        descriptor = cls.property_table.get(name)
        if descriptor is None:
            logger.warning(f"Skipping keyframes for unknown property {cls.TYPE_NAME}.{name}")
            continue
        if not isinstance(entries, list) or not entries:
            continue
        timeline = PropertyTimeline.from_list(entries, name, descriptor.kind)
        # Every entry may have been rejected
        if timeline:
            obj.keyframes[name] = timeline

    return obj


__all__ = [
    "PropertyDescriptor",
    "AnimatableObject",
    "CURRENT_VALUE",
    "Shape",
    "Circle",
    "Rectangle",
    "Text",
    "Path",
    "Camera",
    "OBJECT_TYPES",
    "object_from_dict",
]
