"""
Tagged value model for animatable properties.

Every keyframe value is one of five variants: Scalar, Color, Point,
ValueList or Opaque. The interpolator dispatches on ``kind`` rather than
probing object shape. ``as_value`` wraps live Python values into the union
and ``unwrap`` turns a variant back into the value stored on an object.
"""

from dataclasses import dataclass
from enum import Enum
from numbers import Real
from typing import Any, ClassVar, Dict, Optional, Tuple, Union

import numpy as np


class ValueKind(Enum):
    """Value variants understood by the interpolator."""
    SCALAR = "scalar"
    COLOR = "color"
    POINT = "point"
    LIST = "list"
    OPAQUE = "opaque"


def _clamp_channel(value: float) -> int:
    return int(max(0, min(255, round(value))))


@dataclass(frozen=True)
class Scalar:
    """A real number."""
    value: float
    kind: ClassVar[ValueKind] = ValueKind.SCALAR


@dataclass(frozen=True)
class Color:
    """
    RGBA color with integer channels 0-255.

    Channels are rounded and clamped on construction, so a Color can
    never hold an out-of-range channel.
    """
    r: int
    g: int
    b: int
    a: int = 255
    kind: ClassVar[ValueKind] = ValueKind.COLOR

    def __post_init__(self):
        for channel in ("r", "g", "b", "a"):
            object.__setattr__(self, channel, _clamp_channel(getattr(self, channel)))

    @classmethod
    def from_hex(cls, text: str) -> "Color":
        """Parse ``#rrggbb`` or ``#rrggbbaa``."""
        digits = text.lstrip("#")
        if len(digits) not in (6, 8):
            raise ValueError(f"Invalid hex color: {text!r}")
        channels = [int(digits[i:i + 2], 16) for i in range(0, len(digits), 2)]
        return cls(*channels)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Color":
        alpha = data.get("a")
        return cls(data["r"], data["g"], data["b"], 255 if alpha is None else alpha)

    @classmethod
    def coerce(cls, raw: Any) -> "Color":
        """Accept a Color, {r,g,b[,a]} dict, (r,g,b[,a]) sequence or hex string."""
        if isinstance(raw, Color):
            return raw
        if isinstance(raw, dict):
            return cls.from_dict(raw)
        if isinstance(raw, str):
            return cls.from_hex(raw)
        if isinstance(raw, (list, tuple)) and len(raw) in (3, 4):
            return cls(*raw)
        raise ValueError(f"Cannot interpret {raw!r} as a color")

    def to_dict(self) -> Dict[str, int]:
        return {"r": self.r, "g": self.g, "b": self.b, "a": self.a}

    def to_hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}{self.a:02x}"

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return (self.r, self.g, self.b, self.a)


@dataclass(frozen=True)
class Point:
    """2D point."""
    x: float
    y: float
    kind: ClassVar[ValueKind] = ValueKind.POINT

    @classmethod
    def coerce(cls, raw: Any) -> "Point":
        """Accept a Point, {x,y} dict or (x, y) pair."""
        if isinstance(raw, Point):
            return raw
        if isinstance(raw, dict):
            return cls(raw["x"], raw["y"])
        if isinstance(raw, (list, tuple)) and len(raw) == 2:
            return cls(raw[0], raw[1])
        raise ValueError(f"Cannot interpret {raw!r} as a point")

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class ValueList:
    """Ordered sequence of values; paired lists may differ in length."""
    items: Tuple["Value", ...]
    kind: ClassVar[ValueKind] = ValueKind.LIST

    def __len__(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class Opaque:
    """Any value the interpolator does not understand (step function)."""
    value: Any
    kind: ClassVar[ValueKind] = ValueKind.OPAQUE


Value = Union[Scalar, Color, Point, ValueList, Opaque]
VALUE_TYPES = (Scalar, Color, Point, ValueList, Opaque)


def is_value(obj: Any) -> bool:
    return isinstance(obj, VALUE_TYPES)


def as_value(raw: Any) -> Value:
    """
    Wrap a live Python value into the tagged union.

    bool stays opaque (it is an int subclass but must not blend).
    """
    if isinstance(raw, VALUE_TYPES):
        return raw
    if isinstance(raw, bool) or isinstance(raw, np.bool_):
        return Opaque(bool(raw))
    if isinstance(raw, (Real, np.number)):
        return Scalar(raw.item() if isinstance(raw, np.number) else raw)
    if isinstance(raw, (list, tuple)):
        return ValueList(tuple(as_value(item) for item in raw))
    return Opaque(raw)


def unwrap(value: Value) -> Any:
    """Convert a tagged value back into the live Python value."""
    if isinstance(value, Scalar):
        return value.value
    if isinstance(value, ValueList):
        return [unwrap(item) for item in value.items]
    if isinstance(value, Opaque):
        return value.value
    return value


# ============================================================================
# JSON SHAPE
# ============================================================================

def value_to_json(value: Any) -> Any:
    """Encode a tagged or live value into its persisted JSON shape."""
    value = as_value(value)
    if isinstance(value, Scalar):
        return value.value
    if isinstance(value, (Color, Point)):
        return value.to_dict()
    if isinstance(value, ValueList):
        return [value_to_json(item) for item in value.items]
    return value.value


def value_from_json(data: Any, kind: Optional[ValueKind] = None) -> Value:
    """
    Decode a persisted value.

    ``kind`` is the declared kind of the target property, when known; it
    disambiguates dicts. Without it, dicts with r/g/b keys are colors and
    dicts with x/y keys are points.
    """
    if isinstance(data, dict):
        if kind in (None, ValueKind.COLOR) and {"r", "g", "b"} <= data.keys():
            return Color.from_dict(data)
        if kind in (None, ValueKind.POINT) and {"x", "y"} <= data.keys():
            return Point(data["x"], data["y"])
        return Opaque(data)
    if kind is ValueKind.COLOR and isinstance(data, str):
        try:
            return Color.from_hex(data)
        except ValueError:
            return Opaque(data)
    if isinstance(data, list):
        return ValueList(tuple(value_from_json(item) for item in data))
    return as_value(data)


__all__ = [
    "ValueKind",
    "Scalar",
    "Color",
    "Point",
    "ValueList",
    "Opaque",
    "Value",
    "is_value",
    "as_value",
    "unwrap",
    "value_to_json",
    "value_from_json",
]
