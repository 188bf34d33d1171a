"""
Value interpolation between two keyframe values.

Dispatch is by the ``kind`` tag of both operands. Matching kinds blend;
anything else falls back to a step function. Progress is never clamped,
so overshooting easings extrapolate past the keyframe values.
"""

from typing import Callable, Dict

from .logging_config import get_logger
from .values import Color, Point, Scalar, Value, ValueKind, ValueList, as_value

logger = get_logger(__name__)


def lerp(a: float, b: float, t: float) -> float:
    """Linear interpolation between two values."""
    return a + (b - a) * t


def inverse_lerp(a: float, b: float, v: float) -> float:
    """Inverse linear interpolation - find t given value."""
    if abs(b - a) < 1e-10:
        return 0.0
    return (v - a) / (b - a)


def remap(value: float,
          in_min: float, in_max: float,
          out_min: float, out_max: float) -> float:
    """Remap value from one range to another."""
    t = inverse_lerp(in_min, in_max, value)
    return lerp(out_min, out_max, t)


def step(a: Value, b: Value, t: float) -> Value:
    """Hold ``a`` for the first half of the transition, then ``b``."""
    return a if t < 0.5 else b


def _interpolate_scalar(a: Scalar, b: Scalar, t: float) -> Scalar:
    return Scalar(lerp(a.value, b.value, t))


def _interpolate_color(a: Color, b: Color, t: float) -> Color:
    # Color rounds and clamps each channel on construction
    return Color(
        lerp(a.r, b.r, t),
        lerp(a.g, b.g, t),
        lerp(a.b, b.b, t),
        lerp(a.a, b.a, t),
    )


def _interpolate_point(a: Point, b: Point, t: float) -> Point:
    return Point(lerp(a.x, b.x, t), lerp(a.y, b.y, t))


def _interpolate_list(a: ValueList, b: ValueList, t: float) -> ValueList:
    """
    Element-wise blend. Past the end of the shorter list, the longer
    list's elements are carried over untouched.
    """
    shared = min(len(a.items), len(b.items))
    items = [interpolate(a.items[i], b.items[i], t) for i in range(shared)]
    longer = a.items if len(a.items) > len(b.items) else b.items
    items.extend(longer[shared:])
    return ValueList(tuple(items))


_INTERPOLATORS: Dict[ValueKind, Callable[[Value, Value, float], Value]] = {
    ValueKind.SCALAR: _interpolate_scalar,
    ValueKind.COLOR: _interpolate_color,
    ValueKind.POINT: _interpolate_point,
    ValueKind.LIST: _interpolate_list,
    ValueKind.OPAQUE: step,
}


def interpolate(a, b, t: float) -> Value:
    """
    Interpolate between two values.

    Args:
        a: Start value (tagged, or a live value wrapped via ``as_value``)
        b: End value
        t: Eased progress; 0 gives ``a``, 1 gives ``b``; not clamped

    Returns:
        Interpolated tagged value. Mismatched kinds and opaque values use
        the step fallback; this never raises.
    """
    a = as_value(a)
    b = as_value(b)
    if a.kind is not b.kind:
        logger.debug(f"Step fallback for {a.kind.value} -> {b.kind.value}")
        return step(a, b, t)
    return _INTERPOLATORS[a.kind](a, b, t)


__all__ = [
    "lerp",
    "inverse_lerp",
    "remap",
    "step",
    "interpolate",
]
