"""
Timeline baker - renders keyframed properties to per-frame value tracks.

Model-agnostic output: ``{object_id: {property: [value per frame]}}``,
suitable for writing to JSON or handing to an external renderer. Baking
samples the timelines directly; live object values and the clock are left
untouched.
"""

from typing import Any, Dict, Iterable, List, Optional

import numpy as np

from .core import (
    Scalar,
    get_logger,
    log_performance,
    value_to_json,
)
from .scene import Scene

logger = get_logger(__name__)


class TimelineBaker:
    """
    Bake scene timelines to per-frame arrays.

    Usage:
        baker = TimelineBaker(precision=4)
        tracks = baker.bake(scene, start=0, end=48)
        # tracks = {"a1b2c3": {"x": [100.0, 101.2, ...], "fill": [{...}, ...]}}
    """

    def __init__(self, precision: int = 6):
        self.precision = precision

    @log_performance
    def bake(
        self,
        scene: Scene,
        start: int = 0,
        end: Optional[int] = None,
        properties: Optional[Iterable[str]] = None,
    ) -> Dict[str, Dict[str, List[Any]]]:
        """
        Sample every animated property over [start, end).

        Args:
            scene: Scene to bake
            start: First frame (inclusive)
            end: Last frame (exclusive); defaults to the clock's total_frames
            properties: Restrict output to these property names

        Returns:
            Dict mapping object id -> property -> per-frame values

        Raises:
            ValueError: If the frame range is empty or negative
        """
        end = scene.clock.total_frames if end is None else end
        if start < 0 or end <= start:
            raise ValueError(f"Invalid bake range [{start}, {end})")
        wanted = set(properties) if properties is not None else None

        result: Dict[str, Dict[str, List[Any]]] = {}
        for obj in scene.objects:
            tracks = {}
            for name, timeline in obj.keyframes.items():
                if wanted is not None and name not in wanted:
                    continue
                tracks[name] = self._bake_timeline(timeline, start, end)
            if tracks:
                result[obj.id] = tracks

        logger.debug(f"Baked {len(result)} objects over frames [{start}, {end})")
        return result

    def _bake_timeline(self, timeline, start: int, end: int) -> List[Any]:
        samples = [timeline.evaluate(frame) for frame in range(start, end)]
        if all(isinstance(s, Scalar) for s in samples):
            values = np.array([s.value for s in samples], dtype=float)
            return np.round(values, self.precision).tolist()
        return [value_to_json(s) for s in samples]


def bake_scene(
    scene: Scene,
    start: int = 0,
    end: Optional[int] = None,
    properties: Optional[Iterable[str]] = None,
    precision: Optional[int] = None,
) -> Dict[str, Dict[str, List[Any]]]:
    """Bake with the scene config's precision unless one is given."""
    precision = scene.config.bake_precision if precision is None else precision
    return TimelineBaker(precision).bake(scene, start, end, properties)


__all__ = ["TimelineBaker", "bake_scene"]
