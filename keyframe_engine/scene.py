"""
Scene - the animation session.

Owns the ordered object collection, the clock iterating it, the keyframe
registry and the selected object. Also carries the keyframe bookkeeping
helpers used by editors (key/unkey the selection, list and move keyframes)
and project persistence.

Usage:
    scene = Scene()
    circle = scene.add_object(Circle(400, 300))
    scene.key_selection("x")
    scene.clock.set_frame(48)
    scene.save("project.json")
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .clock import Clock, FrameActions, Marker
from .config import DEFAULT_CONFIG, EngineConfig
from .core import SerializationError, get_logger, normalize_frame, unwrap
from .objects import CURRENT_VALUE, AnimatableObject, object_from_dict
from .registry import KeyframeRegistry

logger = get_logger(__name__)

PROJECT_VERSION = "1.0.0"


class Scene:
    """Objects, clock and registry of one animation session."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or DEFAULT_CONFIG
        # Shared with the clock; mutate in place, never rebind
        self.objects: List[AnimatableObject] = []
        self.registry = KeyframeRegistry()
        self.clock = Clock(
            self.objects,
            fps=self.config.fps,
            total_frames=self.config.total_frames,
            looping=self.config.looping,
        )
        self.frame_actions = FrameActions()
        self.clock.add_system(self.frame_actions)
        self.canvas_width = self.config.canvas_width
        self.canvas_height = self.config.canvas_height
        self.selected: Optional[AnimatableObject] = None

    def __len__(self) -> int:
        return len(self.objects)

    def __iter__(self):
        return iter(list(self.objects))

    # ------------------------------------------------------------------
    # Objects
    # ------------------------------------------------------------------

    def add_object(self, obj: AnimatableObject, select: bool = True) -> AnimatableObject:
        """Attach ``obj`` to the scene, registering its animated properties."""
        if obj in self.objects:
            return obj
        obj.scene = self
        self.objects.append(obj)
        for name in obj.keyframes:
            self.registry.register(name)
        if select:
            self.selected = obj
        return obj

    def remove_object(self, obj: AnimatableObject) -> bool:
        if obj not in self.objects:
            return False
        self.objects.remove(obj)
        obj.scene = None
        for name in obj.keyframes:
            if not self.registry.property_still_used(name, self.objects):
                self.registry.unregister(name)
        if self.selected is obj:
            self.selected = None
        return True

    def clear(self) -> None:
        """Remove every object and scheduled frame action."""
        for obj in self.objects:
            obj.scene = None
        del self.objects[:]
        self.registry.clear()
        self.frame_actions.clear()
        self.selected = None

    def select(self, obj: Optional[AnimatableObject]) -> None:
        if obj is not None and obj not in self.objects:
            logger.warning(f"Cannot select {obj!r}: not in scene")
            return
        self.selected = obj

    def find_object(self, object_id: str) -> Optional[AnimatableObject]:
        for obj in self.objects:
            if obj.id == object_id:
                return obj
        return None

    # ------------------------------------------------------------------
    # Playback
    # ------------------------------------------------------------------

    def update(self) -> int:
        """One external tick; returns the frame now shown."""
        return self.clock.tick()

    def evaluate(self) -> None:
        """Re-evaluate every object at the current frame."""
        self.clock.set_frame(self.clock.current_frame)

    # ------------------------------------------------------------------
    # Keyframe bookkeeping
    # ------------------------------------------------------------------

    def key_selection(self, property_name: str) -> bool:
        """Keyframe the selected object's live value at the current frame."""
        if self.selected is None:
            logger.warning(f"key_selection({property_name!r}): nothing selected")
            return False
        return self.selected.set_keyframe(property_name, self.clock.current_frame, CURRENT_VALUE)

    def unkey_selection(self, property_name: str) -> bool:
        """Remove the selected object's keyframe at the current frame."""
        if self.selected is None:
            logger.warning(f"unkey_selection({property_name!r}): nothing selected")
            return False
        return self.selected.clear_keyframe(property_name, self.clock.current_frame)

    @staticmethod
    def keyframes_for_object(obj: AnimatableObject) -> List[Dict[str, Any]]:
        """Flat keyframe records of one object, property by property."""
        return [
            {
                "property": name,
                "frame": keyframe.frame,
                "value": unwrap(keyframe.value),
                "easing": keyframe.easing,
            }
            for name, timeline in obj.keyframes.items()
            for keyframe in timeline
        ]

    def all_keyframes(self) -> List[Dict[str, Any]]:
        records = []
        for obj in self.objects:
            for record in self.keyframes_for_object(obj):
                records.append({"object_id": obj.id, **record})
        return records

    def update_keyframe(
        self,
        obj: AnimatableObject,
        property_name: str,
        original_frame: int,
        new_frame: Optional[int] = None,
        value: Any = CURRENT_VALUE,
        easing: Optional[str] = None,
    ) -> bool:
        """
        Edit an existing keyframe.

        Unchanged frames are updated in place; a new frame moves the
        keyframe (replacing one already there). ``value`` and ``easing``
        default to the keyframe's own.
        """
        original = normalize_frame(original_frame)
        if original is None:
            logger.warning(f"update_keyframe: invalid frame {original_frame!r}")
            return False
        original_frame = original
        timeline = obj.timeline(property_name)
        keyframe = timeline.get(original_frame) if timeline is not None else None
        if keyframe is None:
            logger.warning(
                f"update_keyframe: no {property_name!r} keyframe at frame {original_frame} on {obj!r}"
            )
            return False

        target = original_frame if new_frame is None else normalize_frame(new_frame)
        if target is None:
            logger.warning(f"update_keyframe: invalid frame {new_frame!r}")
            return False

        if value is CURRENT_VALUE:
            value = unwrap(keyframe.value)
        easing = easing or keyframe.easing
        if target != original_frame:
            timeline.move(original_frame, target)
        return obj.set_keyframe(property_name, target, value, easing)

    @staticmethod
    def has_keyframe_at(obj: AnimatableObject, property_name: str, frame: int) -> bool:
        frame = normalize_frame(frame)
        timeline = obj.timeline(property_name)
        return frame is not None and timeline is not None and timeline.has_keyframe(frame)

    @staticmethod
    def find_nearest_keyframe(obj: AnimatableObject, frame: int) -> Optional[Dict[str, Any]]:
        """Closest keyframe of any property; ties keep the first one found."""
        frame = normalize_frame(frame)
        if frame is None:
            return None
        nearest = None
        best = None
        for record in Scene.keyframes_for_object(obj):
            distance = abs(record["frame"] - frame)
            if best is None or distance < best:
                best = distance
                nearest = record
        return nearest

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": PROJECT_VERSION,
            "canvas": {"width": self.canvas_width, "height": self.canvas_height},
            "objects": [obj.to_dict() for obj in self.objects],
            "timeline": self.clock.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], config: Optional[EngineConfig] = None) -> "Scene":
        """
        Rebuild a scene and evaluate it at the recorded current frame.

        Raises:
            SerializationError: If the payload is not a project mapping
        """
        if not isinstance(data, dict):
            raise SerializationError(f"Project payload must be an object, got {type(data).__name__}")
        objects = data.get("objects") or []
        if not isinstance(objects, list):
            raise SerializationError("Project 'objects' must be a list")

        canvas = data.get("canvas") or {}
        timeline = data.get("timeline") or {}
        if not isinstance(canvas, dict) or not isinstance(timeline, dict):
            raise SerializationError("Project 'canvas' and 'timeline' must be objects")
        config = config or DEFAULT_CONFIG
        try:
            fps = float(timeline.get("fps") or config.fps)
            total_frames = int(timeline.get("total_frames") or config.total_frames)
            config = config.replace(
                fps=fps,
                duration_seconds=total_frames / fps,
                looping=bool(timeline.get("looping", config.looping)),
                canvas_width=int(canvas.get("width") or config.canvas_width),
                canvas_height=int(canvas.get("height") or config.canvas_height),
            )
        except (TypeError, ValueError, ZeroDivisionError) as e:
            raise SerializationError(f"Invalid timeline or canvas settings: {e}") from e

        scene = cls(config)
        scene.clock.total_frames = max(1, total_frames)
        markers = timeline.get("markers") or []
        if not isinstance(markers, list):
            logger.warning("Skipping malformed marker list")
            markers = []
        for entry in markers:
            frame = normalize_frame(entry.get("frame")) if isinstance(entry, dict) else None
            if frame is None:
                logger.warning(f"Skipping malformed marker: {entry!r}")
                continue
            scene.clock.markers.append(Marker(frame, str(entry.get("label", ""))))
        scene.clock.markers.sort(key=lambda m: m.frame)

        for entry in objects:
            if not isinstance(entry, dict):
                logger.warning(f"Skipping malformed object entry: {entry!r}")
                continue
            obj = object_from_dict(entry)
            if obj is not None:
                scene.add_object(obj, select=False)
        scene.registry.rebuild(scene.objects)

        current = normalize_frame(timeline.get("current_frame", 0)) or 0
        scene.clock.set_frame(min(current, scene.clock.total_frames - 1))
        logger.info(f"Loaded scene with {len(scene.objects)} objects")
        return scene

    def save(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        try:
            with open(path, "w") as f:
                json.dump(self.to_dict(), f, indent=2)
        except OSError as e:
            raise SerializationError(f"Could not write project: {e}", path=path) from e
        logger.info(f"Saved scene to {path}")
        return path

    @classmethod
    def load(cls, path: Union[str, Path], config: Optional[EngineConfig] = None) -> "Scene":
        """
        Load a project file written by ``save``.

        Raises:
            SerializationError: If the file is missing or not valid JSON
        """
        path = Path(path)
        try:
            with open(path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise SerializationError(f"Could not read project: {e}", path=path) from e
        return cls.from_dict(data, config)


__all__ = ["Scene", "PROJECT_VERSION"]
