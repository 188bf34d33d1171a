"""Engine configuration - scene-wide defaults.

Frozen so a running scene cannot have its defaults swapped underneath it;
derive a changed copy with ``replace``.
"""

import dataclasses
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class EngineConfig:
    """Defaults for a Scene, its Clock and the AnimationComposer."""

    # Timeline
    fps: float = 24.0
    duration_seconds: float = 10.0
    looping: bool = False

    # Canvas (composer centre / arrangement defaults)
    canvas_width: int = 800
    canvas_height: int = 600

    # Authoring
    default_easing: str = "easeInOutCubic"
    random_seed: Optional[int] = None   # None -> fresh entropy per particle system

    # Baking
    bake_precision: int = 6

    @property
    def total_frames(self) -> int:
        """Frame count implied by duration and frame rate."""
        return max(1, int(round(self.duration_seconds * self.fps)))

    @property
    def canvas_center(self) -> tuple:
        return (self.canvas_width / 2, self.canvas_height / 2)

    def replace(self, **changes) -> "EngineConfig":
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        """Create from dict; unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


# Default instance
DEFAULT_CONFIG = EngineConfig()
