"""
Keyframe and PropertyTimeline data structures.

A PropertyTimeline is the sorted keyframe list for one property of one
object. At most one keyframe exists per frame: adding at an existing frame
overwrites it in place.
"""

import math
from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

from .easing import DEFAULT_EASING, get_easing
from .exceptions import SerializationError, TimelineError
from .interpolation import interpolate
from .logging_config import get_logger
from .values import Value, ValueKind, as_value, value_from_json, value_to_json

logger = get_logger(__name__)


@dataclass
class Keyframe:
    """
    Single keyframe for one property.

    ``frame`` is fixed once the keyframe exists; timelines index by it, so
    moving a keyframe goes through ``PropertyTimeline.move``.

    Attributes:
        frame: Frame number (0-indexed)
        value: Tagged value the property holds exactly at ``frame``
        easing: Easing id governing the transition to the next keyframe
    """
    frame: int
    value: Value
    easing: str = DEFAULT_EASING

    def __post_init__(self):
        self.value = as_value(self.value)

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "frame" and "frame" in self.__dict__:
            raise AttributeError("Keyframe.frame is read-only; use PropertyTimeline.move")
        super().__setattr__(name, value)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dict."""
        return {
            "frame": self.frame,
            "value": value_to_json(self.value),
            "easing": self.easing,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], kind: Optional[ValueKind] = None) -> "Keyframe":
        """
        Create from dict.

        Raises:
            SerializationError: If the entry is not a mapping, its frame is
                not a non-negative integer or its value cannot be decoded
        """
        if not isinstance(data, dict):
            raise SerializationError(f"Keyframe entry must be an object, got {type(data).__name__}")
        frame = normalize_frame(data.get("frame"))
        if frame is None:
            raise SerializationError("Keyframe frame must be a non-negative integer", frame=data.get("frame"))
        try:
            value = value_from_json(data.get("value"), kind)
        except (ValueError, TypeError, KeyError) as e:
            raise SerializationError(f"Invalid keyframe value: {e}", frame=frame) from e
        easing = data.get("easing")
        return cls(frame=frame, value=value, easing=easing if isinstance(easing, str) and easing else DEFAULT_EASING)


def normalize_frame(frame: Any) -> Optional[int]:
    """Frame number as an int, or None if it is not a non-negative integer."""
    if isinstance(frame, (bool, str)):
        return None
    try:
        as_float = float(frame)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(as_float) or as_float < 0 or as_float != int(as_float):
        return None
    return int(as_float)


class PropertyTimeline:
    """
    Sorted keyframe sequence for one (object, property) pair.

    Usage:
        timeline = PropertyTimeline("opacity")
        timeline.upsert(0, 0)
        timeline.upsert(30, 255, "easeOutCubic")
        timeline.evaluate(15)  # -> Scalar(...)
    """

    def __init__(self, property_name: str = ""):
        self.property_name = property_name
        self._keyframes: List[Keyframe] = []
        # Parallel list of frames for bisection
        self._frames: List[int] = []

    def __len__(self) -> int:
        return len(self._keyframes)

    def __iter__(self) -> Iterator[Keyframe]:
        return iter(self._keyframes)

    def __bool__(self) -> bool:
        return bool(self._keyframes)

    def __repr__(self) -> str:
        return f"PropertyTimeline({self.property_name!r}, frames={self._frames})"

    @property
    def keyframes(self) -> List[Keyframe]:
        """Keyframes in frame order (a copy)."""
        return list(self._keyframes)

    @property
    def frames(self) -> List[int]:
        return list(self._frames)

    @property
    def first_frame(self) -> Optional[int]:
        return self._frames[0] if self._frames else None

    @property
    def last_frame(self) -> Optional[int]:
        return self._frames[-1] if self._frames else None

    def _index_of(self, frame: int) -> int:
        index = bisect_left(self._frames, frame)
        if index < len(self._frames) and self._frames[index] == frame:
            return index
        return -1

    def get(self, frame: int) -> Optional[Keyframe]:
        """Keyframe at exactly ``frame``, if any."""
        index = self._index_of(frame)
        return self._keyframes[index] if index >= 0 else None

    def has_keyframe(self, frame: int) -> bool:
        return self._index_of(frame) >= 0

    def upsert(self, frame: int, value: Any, easing: str = DEFAULT_EASING) -> Keyframe:
        """
        Insert a keyframe, or overwrite value and easing of the one already
        at ``frame``.

        Returns:
            The stored keyframe
        """
        index = bisect_left(self._frames, frame)
        if index < len(self._frames) and self._frames[index] == frame:
            keyframe = self._keyframes[index]
            keyframe.value = as_value(value)
            keyframe.easing = easing
            return keyframe

        keyframe = Keyframe(frame=frame, value=value, easing=easing)
        self._frames.insert(index, frame)
        self._keyframes.insert(index, keyframe)
        return keyframe

    def remove(self, frame: int) -> bool:
        """
        Delete the keyframe at exactly ``frame``.

        Returns:
            True if a keyframe was removed. The owner drops the timeline
            once it is empty.
        """
        index = self._index_of(frame)
        if index < 0:
            return False
        del self._frames[index]
        del self._keyframes[index]
        return True

    def move(self, old_frame: int, new_frame: int) -> bool:
        """Move a keyframe to another frame, replacing any keyframe there."""
        keyframe = self.get(old_frame)
        if keyframe is None:
            return False
        if old_frame == new_frame:
            return True
        self.remove(old_frame)
        self.upsert(new_frame, keyframe.value, keyframe.easing)
        return True

    def evaluate(self, frame: float) -> Value:
        """
        Sample the timeline at ``frame``.

        Holds the first value before the first keyframe and the last value
        after the last one. Between two keyframes, the easing of the earlier
        keyframe shapes the transition.

        Raises:
            TimelineError: If the timeline has no keyframes
        """
        if not self._keyframes:
            raise TimelineError("Cannot evaluate an empty timeline", property_name=self.property_name)

        index = bisect_right(self._frames, frame)
        if index == 0:
            return self._keyframes[0].value
        prev = self._keyframes[index - 1]
        if index == len(self._keyframes) or prev.frame == frame:
            return prev.value

        nxt = self._keyframes[index]
        t_raw = (frame - prev.frame) / (nxt.frame - prev.frame)
        t_eased = get_easing(prev.easing)(t_raw)
        return interpolate(prev.value, nxt.value, t_eased)

    def to_list(self) -> List[Dict[str, Any]]:
        return [kf.to_dict() for kf in self._keyframes]

    @classmethod
    def from_list(
        cls,
        data: List[Dict[str, Any]],
        property_name: str = "",
        kind: Optional[ValueKind] = None,
    ) -> "PropertyTimeline":
        """
        Rebuild from persisted keyframes.

        Duplicate frames keep the last entry. Entries that cannot be
        decoded are skipped with a warning, so the result may be empty.
        """
        timeline = cls(property_name)
        for entry in data:
            try:
                keyframe = Keyframe.from_dict(entry, kind)
            except SerializationError as e:
                logger.warning(f"Skipping keyframe of {property_name or 'property'}: {e}")
                continue
            timeline.upsert(keyframe.frame, keyframe.value, keyframe.easing)
        return timeline


__all__ = [
    "Keyframe",
    "PropertyTimeline",
    "normalize_frame",
]
