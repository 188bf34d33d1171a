"""
Global frame clock.

Owns the current frame, frame rate, frame count, markers and play state.
Every change of frame is pushed synchronously to all objects, so a single
evaluation pass sees one frame for every object, followed by the
registered tick systems.
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, MutableSequence, Optional, Protocol, runtime_checkable

from .core import get_logger, normalize_frame

logger = get_logger(__name__)


@dataclass
class Marker:
    """Named position on the timeline."""
    frame: int
    label: str

    def to_dict(self) -> Dict[str, Any]:
        return {"frame": self.frame, "label": self.label}


@runtime_checkable
class TickSystem(Protocol):
    """Anything the clock notifies after each evaluation pass."""

    def on_tick(self, frame: int) -> None:
        ...


class FrameActions:
    """
    Tick system running callbacks scheduled for exact frames.

    Each callback fires every time the clock lands on its frame (seeks
    included), receiving the frame number.
    """

    def __init__(self):
        self._actions: Dict[int, List[Callable[[int], None]]] = defaultdict(list)

    def __len__(self) -> int:
        return sum(len(callbacks) for callbacks in self._actions.values())

    def schedule(self, frame: int, callback: Callable[[int], None]) -> None:
        self._actions[frame].append(callback)

    def cancel(self, frame: int, callback: Optional[Callable[[int], None]] = None) -> None:
        """Drop one callback, or every callback at ``frame``."""
        if callback is None:
            self._actions.pop(frame, None)
        elif callback in self._actions.get(frame, ()):
            self._actions[frame].remove(callback)

    def clear(self) -> None:
        self._actions.clear()

    def frames(self) -> List[int]:
        return sorted(f for f, callbacks in self._actions.items() if callbacks)

    def on_tick(self, frame: int) -> None:
        for callback in list(self._actions.get(frame, ())):
            callback(frame)


class Clock:
    """
    Frame counter with a stopped/playing state machine.

    ``objects`` is the scene's ordered object collection, iterated on
    every frame change. End-of-timeline policy: when playback runs past
    the last frame it wraps to frame 0; without looping it also stops.
    """

    def __init__(
        self,
        objects: Optional[MutableSequence] = None,
        fps: float = 24,
        total_frames: int = 240,
        looping: bool = False,
    ):
        self.objects = objects if objects is not None else []
        self.fps = fps
        self.total_frames = max(1, int(total_frames))
        self.current_frame = 0
        self.looping = looping
        self.is_playing = False
        self.markers: List[Marker] = []
        self.systems: List[TickSystem] = []

    @property
    def duration(self) -> float:
        """Wall-clock duration in seconds."""
        return self.total_frames / self.fps

    # ------------------------------------------------------------------
    # Play state
    # ------------------------------------------------------------------

    def play(self) -> None:
        self.is_playing = True

    def pause(self) -> None:
        self.is_playing = False

    def toggle(self) -> bool:
        self.is_playing = not self.is_playing
        return self.is_playing

    # ------------------------------------------------------------------
    # Frame changes
    # ------------------------------------------------------------------

    def _push_frame(self) -> None:
        frame = self.current_frame
        for obj in list(self.objects):
            obj.evaluate_at(frame)
        for system in list(self.systems):
            system.on_tick(frame)

    def advance_frame(self) -> int:
        """Step one frame forward, wrapping (and stopping unless looping) at the end."""
        self.current_frame += 1
        if self.current_frame >= self.total_frames:
            self.current_frame = 0
            if not self.looping:
                self.pause()
        self._push_frame()
        return self.current_frame

    def tick(self) -> int:
        """
        One external tick: advance while playing, otherwise re-evaluate
        the current frame so edits made since the last tick show up.
        """
        if self.is_playing:
            return self.advance_frame()
        self._push_frame()
        return self.current_frame

    def set_frame(self, frame: int) -> bool:
        """
        Seek to ``frame`` and evaluate immediately.

        Returns:
            False if ``frame`` is outside [0, total_frames); nothing changes
        """
        normalized = normalize_frame(frame)
        if normalized is None or normalized >= self.total_frames:
            logger.warning(f"Ignoring seek to frame {frame} outside [0, {self.total_frames})")
            return False
        self.current_frame = normalized
        self._push_frame()
        return True

    def reset(self) -> None:
        self.set_frame(0)

    def restart(self) -> None:
        """Seek to frame 0 and start playing."""
        self.set_frame(0)
        self.play()

    # ------------------------------------------------------------------
    # Duration / frame rate
    # ------------------------------------------------------------------

    def _clamp_current(self) -> None:
        if self.current_frame >= self.total_frames:
            self.current_frame = self.total_frames - 1

    def set_duration(self, seconds: float) -> bool:
        """Resize the timeline to ``seconds`` at the current frame rate."""
        if seconds <= 0:
            logger.warning(f"Ignoring non-positive duration {seconds}")
            return False
        self.total_frames = max(1, int(round(seconds * self.fps)))
        self._clamp_current()
        return True

    def set_fps(self, fps: float) -> bool:
        """Change the frame rate, rescaling the frame count to keep the duration."""
        if fps <= 0:
            logger.warning(f"Ignoring non-positive fps {fps}")
            return False
        duration = self.total_frames / self.fps
        self.fps = fps
        self.total_frames = max(1, int(round(duration * fps)))
        self._clamp_current()
        return True

    # ------------------------------------------------------------------
    # Markers
    # ------------------------------------------------------------------

    def add_marker(self, frame: int, label: str) -> Marker:
        marker = Marker(frame=int(frame), label=label)
        self.markers.append(marker)
        self.markers.sort(key=lambda m: m.frame)
        return marker

    def remove_marker(self, index: int) -> bool:
        if 0 <= index < len(self.markers):
            del self.markers[index]
            return True
        return False

    def markers_at(self, frame: int) -> List[Marker]:
        return [m for m in self.markers if m.frame == frame]

    # ------------------------------------------------------------------
    # Systems
    # ------------------------------------------------------------------

    def add_system(self, system: TickSystem) -> None:
        """Register a system notified with ``on_tick(frame)`` after each pass."""
        if not callable(getattr(system, "on_tick", None)):
            logger.warning(f"Ignoring system without on_tick: {system!r}")
            return
        if system not in self.systems:
            self.systems.append(system)

    def remove_system(self, system: TickSystem) -> bool:
        if system in self.systems:
            self.systems.remove(system)
            return True
        return False

    # ------------------------------------------------------------------
    # Time conversion
    # ------------------------------------------------------------------

    def frame_to_time(self, frame: int) -> Dict[str, Any]:
        """Split a frame number into minutes, seconds and leftover frames."""
        total_seconds = frame / self.fps
        minutes = int(total_seconds // 60)
        seconds = int(total_seconds % 60)
        frames = int(round(frame - int(total_seconds) * self.fps))
        return {
            "minutes": minutes,
            "seconds": seconds,
            "frames": frames,
            "formatted": f"{minutes:02d}:{seconds:02d}:{frames:02d}",
        }

    def time_to_frame(self, minutes: int, seconds: int, frames: int = 0) -> int:
        return int(round(minutes * 60 * self.fps + seconds * self.fps + frames))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fps": self.fps,
            "total_frames": self.total_frames,
            "current_frame": self.current_frame,
            "looping": self.looping,
            "markers": [m.to_dict() for m in self.markers],
        }


__all__ = [
    "Marker",
    "TickSystem",
    "FrameActions",
    "Clock",
]
