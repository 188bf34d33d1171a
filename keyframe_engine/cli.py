#!/usr/bin/env python3
"""Command-line interface for inspecting and baking animation projects.

Usage:
    # Print live property values at the saved current frame
    python -m keyframe_engine project.json

    # Values at a specific frame
    python -m keyframe_engine project.json --frame 48

    # Bake every animated property to per-frame tracks
    python -m keyframe_engine project.json --bake tracks.json --start 0 --end 120

    # List available easing curves
    python -m keyframe_engine --list-easings
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from .core import KeyframeEngineError, LogContext, get_logger, list_easings, setup_logging, value_to_json
from .renderer import bake_scene
from .scene import Scene

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="keyframe_engine",
        description="Evaluate or bake keyframe animation projects",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Live values at frame 48
  python -m keyframe_engine project.json --frame 48

  # Bake frames 0-119 to JSON
  python -m keyframe_engine project.json --bake tracks.json --end 120
""",
    )

    parser.add_argument(
        "project",
        nargs="?",
        help="Path to project JSON",
    )

    parser.add_argument(
        "--frame",
        type=int,
        help="Frame to evaluate (default: saved current frame)",
    )

    parser.add_argument(
        "--bake",
        metavar="OUT",
        help="Write baked per-frame tracks to this JSON file",
    )

    parser.add_argument(
        "--start",
        type=int,
        default=0,
        help="First baked frame (default: 0)",
    )

    parser.add_argument(
        "--end",
        type=int,
        help="End of baked range, exclusive (default: total frames)",
    )

    parser.add_argument(
        "--list-easings",
        action="store_true",
        help="List available easing curves",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose logging",
    )

    return parser


def snapshot(scene: Scene) -> dict:
    """Live values of every object, keyed by object id."""
    return {
        obj.id: {name: value_to_json(value) for name, value in obj.values().items()}
        for obj in scene.objects
    }


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)

    if args.list_easings:
        for name in list_easings():
            print(name)
        return 0

    if not args.project:
        print("ERROR: a project file is required (or use --list-easings)", file=sys.stderr)
        return 1

    try:
        scene = Scene.load(args.project)
    except KeyframeEngineError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if args.bake:
        try:
            with LogContext(logger, f"bake {args.project}"):
                tracks = bake_scene(scene, args.start, args.end)
            with open(args.bake, "w") as f:
                json.dump(tracks, f, indent=2)
        except (ValueError, OSError) as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 1
        print(f"Baked {len(tracks)} objects to {args.bake}")
        return 0

    if args.frame is not None and not scene.clock.set_frame(args.frame):
        print(f"ERROR: frame {args.frame} outside [0, {scene.clock.total_frames})", file=sys.stderr)
        return 1

    print(json.dumps(snapshot(scene), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
