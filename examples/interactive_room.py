#!/usr/bin/env python3
"""Interactive fly-through of the reference room.

This script opens a window on the reference room and renders a new frame
every time the window is presented, moving the camera with the keyboard.

Usage:
    python -m examples.interactive_room [--width WIDTH] [--height HEIGHT]

Controls:
    - Left / Right: turn
    - Up / Down: look up / down
    - W / S: move forward / back
    - A / D: strafe left / right
    - P: export the current frame as a timestamped PNG
    - Escape: quit
"""

from __future__ import annotations

import argparse
import platform
import sys
from pathlib import Path

# Ensure the project root is in the Python path for direct execution
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import taichi as ti  # noqa: E402


def initialize_taichi() -> str:
    """Initialize Taichi with the best available backend.

    On macOS, prefers Metal. Falls back to CPU if GPU is unavailable.

    Returns:
        Name of the backend being used.
    """
    system = platform.system()

    if system == "Darwin":
        try:
            ti.init(arch=ti.metal)
            return "Metal (GPU)"
        except Exception:
            pass

    # Try generic GPU (CUDA on Linux/Windows, Vulkan as fallback)
    try:
        ti.init(arch=ti.gpu)
        return "GPU"
    except Exception:
        pass

    ti.init(arch=ti.cpu)
    return "CPU"


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Fly through the reference room.")
    parser.add_argument("--width", type=int, default=800, help="Window width (default: 800)")
    parser.add_argument("--height", type=int, default=600, help="Window height (default: 600)")
    return parser.parse_args()


def main() -> int:
    """Main entry point for the interactive fly-through.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    args = parse_args()

    # Initialize Taichi first (before creating fields and kernels)
    backend = initialize_taichi()
    print(f"Taichi backend: {backend}")

    from src.flytrace.core.frame import FrameRenderer, RenderSettings
    from src.flytrace.preview.interactive import FlyThroughPreview
    from src.flytrace.scene.room import create_room_scene

    if not FlyThroughPreview.is_display_available():
        print("Error: No display available. Cannot run interactive preview.", file=sys.stderr)
        print("This script requires a graphical display environment.", file=sys.stderr)
        return 1

    try:
        settings = RenderSettings(width=args.width, height=args.height)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    scene, camera = create_room_scene()
    renderer = FrameRenderer(scene, camera, settings)

    print(f"Creating fly-through window ({settings.width}x{settings.height})...")
    preview = FlyThroughPreview(renderer)

    print("Starting interactive rendering...")
    print("  - Arrow keys to look, WASD to move")
    print("  - Press P to export the current frame")
    print("  - Press Escape or close the window to exit")
    print()

    try:
        preview.run()
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
    finally:
        preview.close()
        print(f"Rendered {renderer.frame_count} frames (last {preview.fps():.1f} FPS).")

    return 0


if __name__ == "__main__":
    sys.exit(main())
