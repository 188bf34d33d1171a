"""
Easing library - named curves mapping normalized time to progress.

Textbook Penner families (quad, cubic, quart, quint, sine, expo, circ,
elastic, back, bounce) in in/out/in-out variants, plus CSS-style cubic
bezier presets. Every curve returns exactly 0.0 at t=0 and 1.0 at t=1.
Lookup never fails: unknown names resolve to linear.
"""

import math
from functools import partial
from typing import Callable, Dict, List, Tuple

from .logging_config import get_logger

logger = get_logger(__name__)

EasingFunction = Callable[[float], float]

# Overshoot constants
BACK_OVERSHOOT = 1.70158
BACK_OVERSHOOT_IN_OUT = BACK_OVERSHOOT * 1.525
ELASTIC_PERIOD = (2 * math.pi) / 3
ELASTIC_PERIOD_IN_OUT = (2 * math.pi) / 4.5
BOUNCE_N1 = 7.5625
BOUNCE_D1 = 2.75


def cubic_bezier_point(t: float, p0: float, p1: float, p2: float, p3: float) -> float:
    """Calculate point on cubic bezier curve at parameter t."""
    mt = 1 - t
    return mt*mt*mt*p0 + 3*mt*mt*t*p1 + 3*mt*t*t*p2 + t*t*t*p3


def bezier_easing(x1: float, y1: float, x2: float, y2: float, t: float) -> float:
    """
    CSS-style cubic bezier easing.

    Control points: (0,0), (x1,y1), (x2,y2), (1,1)

    Args:
        x1, y1: First control point
        x2, y2: Second control point
        t: Input value 0-1 (normalized time)

    Returns:
        Eased value (may leave 0-1 for overshooting control points)
    """
    if t <= 0:
        return 0.0
    if t >= 1:
        return 1.0

    # Binary search for the curve parameter whose x matches t
    low, high = 0.0, 1.0
    for _ in range(30):
        mid = (low + high) / 2
        x = cubic_bezier_point(mid, 0, x1, x2, 1)
        if x < t:
            low = mid
        else:
            high = mid

    param = (low + high) / 2
    return cubic_bezier_point(param, 0, y1, y2, 1)


# ============================================================================
# "IN" CURVES - out and in-out variants are derived from these
# ============================================================================

def linear(t: float) -> float:
    return t


def ease_in_quad(t: float) -> float:
    return t * t


def ease_in_cubic(t: float) -> float:
    return t * t * t


def ease_in_quart(t: float) -> float:
    return t * t * t * t


def ease_in_quint(t: float) -> float:
    return t * t * t * t * t


def ease_in_sine(t: float) -> float:
    return 1 - math.cos(t * math.pi / 2)


def ease_in_expo(t: float) -> float:
    return 0.0 if t == 0 else math.pow(2, 10 * t - 10)


def ease_in_circ(t: float) -> float:
    return 1 - math.sqrt(max(0.0, 1 - t * t))


def ease_in_elastic(t: float, period: float = ELASTIC_PERIOD, phase: float = 10.75) -> float:
    if t == 0 or t == 1:
        return float(t)
    return -math.pow(2, 10 * t - 10) * math.sin((t * 10 - phase) * period)


def ease_in_back(t: float, overshoot: float = BACK_OVERSHOOT) -> float:
    return (overshoot + 1) * t * t * t - overshoot * t * t


def ease_out_bounce(t: float) -> float:
    """Four-segment piecewise quadratic bounce."""
    if t < 1 / BOUNCE_D1:
        return BOUNCE_N1 * t * t
    if t < 2 / BOUNCE_D1:
        t -= 1.5 / BOUNCE_D1
        return BOUNCE_N1 * t * t + 0.75
    if t < 2.5 / BOUNCE_D1:
        t -= 2.25 / BOUNCE_D1
        return BOUNCE_N1 * t * t + 0.9375
    t -= 2.625 / BOUNCE_D1
    return BOUNCE_N1 * t * t + 0.984375


def ease_in_bounce(t: float) -> float:
    return 1 - ease_out_bounce(1 - t)


# ============================================================================
# COMBINATORS
# ============================================================================

def make_out(ease_in: EasingFunction) -> EasingFunction:
    """Time-reverse an "in" curve into its "out" counterpart."""

    def ease_out(t: float) -> float:
        return 1 - ease_in(1 - t)

    return ease_out


def make_in_out(ease_in: EasingFunction) -> EasingFunction:
    """
    Build an in-out curve: the "in" curve over the first half of the
    domain, the time-reversed curve over the second half, each scaled to
    half the range so both meet at (0.5, 0.5).
    """

    def ease_in_out(t: float) -> float:
        if t < 0.5:
            return ease_in(2 * t) / 2
        return 1 - ease_in(2 - 2 * t) / 2

    return ease_in_out


def pin_endpoints(func: EasingFunction) -> EasingFunction:
    """Force exact 0 and 1 at the domain endpoints."""

    def pinned(t: float) -> float:
        if t == 0:
            return 0.0
        if t == 1:
            return 1.0
        return func(t)

    pinned.__name__ = getattr(func, "__name__", "easing")
    return pinned


# ============================================================================
# REGISTRY
# ============================================================================

# Family name -> "in" curve
EASING_FAMILIES: Dict[str, EasingFunction] = {
    "Quad": ease_in_quad,
    "Cubic": ease_in_cubic,
    "Quart": ease_in_quart,
    "Quint": ease_in_quint,
    "Sine": ease_in_sine,
    "Expo": ease_in_expo,
    "Circ": ease_in_circ,
    "Elastic": ease_in_elastic,
    "Back": ease_in_back,
    "Bounce": ease_in_bounce,
}

# Conventional in-out variants: back overshoots further, elastic rings
# with a longer period so each half ends on a crest
_IN_OUT_OVERRIDES: Dict[str, EasingFunction] = {
    "Back": partial(ease_in_back, overshoot=BACK_OVERSHOOT_IN_OUT),
    "Elastic": partial(ease_in_elastic, period=ELASTIC_PERIOD_IN_OUT, phase=11.125),
}

# CSS-style presets, (x1, y1, x2, y2) control points
BEZIER_PRESETS: Dict[str, Tuple[float, float, float, float]] = {
    "ease": (0.25, 0.1, 0.25, 1.0),
    "easeIn": (0.42, 0.0, 1.0, 1.0),
    "easeOut": (0.0, 0.0, 0.58, 1.0),
    "easeInOut": (0.42, 0.0, 0.58, 1.0),
    "snap": (0.0, 1.0, 0.0, 1.0),           # Instant snap
    "anticipate": (0.38, -0.4, 0.88, 1.0),  # Pull back then forward
    "overshoot": (0.25, 0.0, 0.0, 1.4),     # Go past then settle
}


def _build_registry() -> Dict[str, EasingFunction]:
    registry: Dict[str, EasingFunction] = {"linear": pin_endpoints(linear)}
    for family, ease_in in EASING_FAMILIES.items():
        in_out_base = _IN_OUT_OVERRIDES.get(family, ease_in)
        registry[f"easeIn{family}"] = pin_endpoints(ease_in)
        registry[f"easeOut{family}"] = pin_endpoints(make_out(ease_in))
        registry[f"easeInOut{family}"] = pin_endpoints(make_in_out(in_out_base))
    for name, points in BEZIER_PRESETS.items():
        registry[name] = partial(bezier_easing, *points)
    return registry


EASING_FUNCTIONS: Dict[str, EasingFunction] = _build_registry()

DEFAULT_EASING = "linear"


def get_easing(name) -> EasingFunction:
    """
    Look up an easing curve by name.

    Unknown or non-string names resolve to linear; this never raises.
    """
    func = EASING_FUNCTIONS.get(name) if isinstance(name, str) else None
    if func is None:
        if name not in (None, ""):
            logger.debug(f"Unknown easing {name!r}, using linear")
        return EASING_FUNCTIONS[DEFAULT_EASING]
    return func


def apply_easing(t: float, easing_name: str) -> float:
    """
    Apply named easing function.

    Args:
        t: Input value 0-1
        easing_name: Name of easing curve

    Returns:
        Eased progress
    """
    return get_easing(easing_name)(t)


def apply_easing_to_range(
    t: float,
    from_val: float,
    to_val: float,
    easing_name: str = "linear"
) -> float:
    """Ease t, then blend between two scalars."""
    eased_t = apply_easing(t, easing_name)
    return from_val + (to_val - from_val) * eased_t


def is_known_easing(name) -> bool:
    return isinstance(name, str) and name in EASING_FUNCTIONS


def list_easings() -> List[str]:
    """Get every registered easing name, linear first."""
    return list(EASING_FUNCTIONS.keys())


__all__ = [
    "EasingFunction",
    "bezier_easing",
    "make_out",
    "make_in_out",
    "get_easing",
    "apply_easing",
    "apply_easing_to_range",
    "is_known_easing",
    "list_easings",
    "EASING_FAMILIES",
    "EASING_FUNCTIONS",
    "BEZIER_PRESETS",
    "DEFAULT_EASING",
    "ease_out_bounce",
]
