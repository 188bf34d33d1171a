"""
Scene-wide index of animated property names.

The registry is a cache: each object's own keyframe map is authoritative,
and ``property_still_used`` rescans the objects before a name is dropped.
"""

from typing import Iterable, List, Set

from .core import get_logger

logger = get_logger(__name__)


class KeyframeRegistry:
    """Set of property names that have at least one keyframe somewhere."""

    def __init__(self):
        self._properties: Set[str] = set()

    def __contains__(self, name: str) -> bool:
        return name in self._properties

    def __len__(self) -> int:
        return len(self._properties)

    def register(self, name: str) -> None:
        if name not in self._properties:
            logger.debug(f"Registered animated property {name!r}")
            self._properties.add(name)

    def unregister(self, name: str) -> None:
        if name in self._properties:
            logger.debug(f"Unregistered animated property {name!r}")
            self._properties.discard(name)

    def all_registered(self) -> Set[str]:
        return set(self._properties)

    def sorted_names(self) -> List[str]:
        return sorted(self._properties)

    @staticmethod
    def property_still_used(name: str, objects: Iterable) -> bool:
        """True if any object currently has keyframes for ``name``."""
        return any(len(obj.keyframes.get(name) or ()) > 0 for obj in objects)

    def rebuild(self, objects: Iterable) -> None:
        """Recompute the cache from the objects' keyframe maps."""
        self._properties = {
            name
            for obj in objects
            for name, timeline in obj.keyframes.items()
            if len(timeline) > 0
        }

    def clear(self) -> None:
        self._properties.clear()


__all__ = ["KeyframeRegistry"]
