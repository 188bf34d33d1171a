"""
Keyframe Animation Engine.

Frame-indexed keyframe evaluation for animatable objects, with a
declarative composer that expands high-level effects (path following,
staggered groups, waves, particles, camera moves) into keyframes.

Usage:
    from keyframe_engine import AnimationComposer

    composer = AnimationComposer()
    ball = composer.create_shape("circle", x=100, y=300, size=40)
    composer.fade_in(ball, 0, 24)
    composer.follow_path(ball, [(100, 300), (400, 100), (700, 300)], 0, 96)

    composer.scene.clock.set_frame(48)
    ball.get("x")  # -> 400.0
"""

from .core import (
    # Values
    ValueKind,
    Scalar,
    Color,
    Point,
    ValueList,
    Opaque,
    as_value,
    unwrap,
    # Easing
    bezier_easing,
    get_easing,
    apply_easing,
    list_easings,
    EASING_FUNCTIONS,
    # Interpolation
    interpolate,
    lerp,
    inverse_lerp,
    remap,
    # Keyframes
    Keyframe,
    PropertyTimeline,
    # Oscillators
    WaveType,
    oscillator,
    noise,
    # Errors
    KeyframeEngineError,
    ValidationError,
    TimelineError,
    SerializationError,
    # Logging
    get_logger,
    setup_logging,
)

from .objects import (
    PropertyDescriptor,
    AnimatableObject,
    CURRENT_VALUE,
    Shape,
    Circle,
    Rectangle,
    Text,
    Path,
    Camera,
    object_from_dict,
)

from .registry import KeyframeRegistry

from .clock import (
    Clock,
    Marker,
    TickSystem,
    FrameActions,
)

from .config import EngineConfig, DEFAULT_CONFIG

from .scene import Scene

from .composer import AnimationComposer, TypingEffect

from .renderer import TimelineBaker, bake_scene

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Core - Values
    "ValueKind",
    "Scalar",
    "Color",
    "Point",
    "ValueList",
    "Opaque",
    "as_value",
    "unwrap",
    # Core - Easing
    "bezier_easing",
    "get_easing",
    "apply_easing",
    "list_easings",
    "EASING_FUNCTIONS",
    # Core - Interpolation
    "interpolate",
    "lerp",
    "inverse_lerp",
    "remap",
    # Core - Keyframes
    "Keyframe",
    "PropertyTimeline",
    # Core - Oscillators
    "WaveType",
    "oscillator",
    "noise",
    # Core - Errors
    "KeyframeEngineError",
    "ValidationError",
    "TimelineError",
    "SerializationError",
    # Core - Logging
    "get_logger",
    "setup_logging",
    # Objects
    "PropertyDescriptor",
    "AnimatableObject",
    "CURRENT_VALUE",
    "Shape",
    "Circle",
    "Rectangle",
    "Text",
    "Path",
    "Camera",
    "object_from_dict",
    # Registry / clock
    "KeyframeRegistry",
    "Clock",
    "Marker",
    "TickSystem",
    "FrameActions",
    # Session
    "EngineConfig",
    "DEFAULT_CONFIG",
    "Scene",
    # Composer
    "AnimationComposer",
    "TypingEffect",
    # Baking
    "TimelineBaker",
    "bake_scene",
]
