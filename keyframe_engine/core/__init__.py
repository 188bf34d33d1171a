"""
Core components - value model, easing, interpolation and keyframe storage.
"""

from .values import (
    ValueKind,
    Scalar,
    Color,
    Point,
    ValueList,
    Opaque,
    Value,
    as_value,
    unwrap,
    value_to_json,
    value_from_json,
)

from .easing import (
    bezier_easing,
    get_easing,
    apply_easing,
    apply_easing_to_range,
    is_known_easing,
    list_easings,
    EASING_FUNCTIONS,
    BEZIER_PRESETS,
    DEFAULT_EASING,
)

from .interpolation import (
    interpolate,
    lerp,
    inverse_lerp,
    remap,
)

from .keyframe import (
    Keyframe,
    PropertyTimeline,
    normalize_frame,
)

from .oscillators import (
    WaveType,
    oscillator,
    noise,
)

from .exceptions import (
    KeyframeEngineError,
    ValidationError,
    TimelineError,
    SerializationError,
)

from .logging_config import (
    get_logger,
    setup_logging,
    log_performance,
    LogContext,
)

__all__ = [
    # Values
    "ValueKind",
    "Scalar",
    "Color",
    "Point",
    "ValueList",
    "Opaque",
    "Value",
    "as_value",
    "unwrap",
    "value_to_json",
    "value_from_json",
    # Easing
    "bezier_easing",
    "get_easing",
    "apply_easing",
    "apply_easing_to_range",
    "is_known_easing",
    "list_easings",
    "EASING_FUNCTIONS",
    "BEZIER_PRESETS",
    "DEFAULT_EASING",
    # Interpolation
    "interpolate",
    "lerp",
    "inverse_lerp",
    "remap",
    # Keyframes
    "Keyframe",
    "PropertyTimeline",
    "normalize_frame",
    # Oscillators
    "WaveType",
    "oscillator",
    "noise",
    # Errors
    "KeyframeEngineError",
    "ValidationError",
    "TimelineError",
    "SerializationError",
    # Logging
    "get_logger",
    "setup_logging",
    "log_performance",
    "LogContext",
]
