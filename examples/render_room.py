#!/usr/bin/env python3
"""Render frames of the reference room scene.

This script renders the reference room from the starting camera pose,
optionally turning the camera a little between frames, reports frame timing
and saves the last frame as a PNG.

Usage:
    python -m examples.render_room [options]

Options:
    --width WIDTH       Image width in pixels (default: 640)
    --height HEIGHT     Image height in pixels (default: 480)
    --frames FRAMES     Number of frames to render (default: 10)
    --turn DEGREES      Yaw change per frame in degrees (default: 0.4)
    --bounces N         Bounce budget per primary ray (default: 3)
    --output OUTPUT     Output file path (default: room.png)
    --show              Display the last frame with Matplotlib
    --quiet             Suppress progress output

Example:
    python -m examples.render_room --width 320 --height 240 --frames 60
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the reference room scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=640,
        help="Image width in pixels (default: 640)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=480,
        help="Image height in pixels (default: 480)",
    )
    parser.add_argument(
        "--frames",
        type=int,
        default=10,
        help="Number of frames to render (default: 10)",
    )
    parser.add_argument(
        "--turn",
        type=float,
        default=0.4,
        help="Yaw change per frame in degrees (default: 0.4)",
    )
    parser.add_argument(
        "--bounces",
        type=int,
        default=3,
        help="Bounce budget per primary ray (default: 3)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="room.png",
        help="Output file path (default: room.png)",
    )
    parser.add_argument(
        "--show",
        action="store_true",
        help="Display the last frame with Matplotlib",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def render_room(
    width: int = 640,
    height: int = 480,
    num_frames: int = 10,
    turn: float = 0.4,
    bounces: int = 3,
    output_path: str = "room.png",
    show: bool = False,
    quiet: bool = False,
) -> Path:
    """Render the room scene and save the last frame to file.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        num_frames: Number of frames to render (at least 1).
        turn: Yaw change per frame in degrees.
        bounces: Bounce budget per primary ray.
        output_path: Output file path (PNG).
        show: If True, display the last frame with Matplotlib.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.flytrace.core.frame import FrameRenderer, RenderSettings
    from src.flytrace.preview.display import show_frame
    from src.flytrace.preview.export import save_png
    from src.flytrace.scene.room import create_room_scene

    if num_frames < 1:
        raise ValueError(f"Number of frames must be at least 1, got {num_frames}")

    settings = RenderSettings(width=width, height=height, max_bounces=bounces)

    if not quiet:
        print(f"Creating room scene ({width}x{height})...")

    scene, camera = create_room_scene()
    renderer = FrameRenderer(scene, camera, settings)
    pixels = renderer.render()

    # The first frame includes kernel compilation
    if not quiet:
        print(f"  First frame (with compilation): {renderer.last_frame_seconds:.3f}s")

    total_seconds = 0.0
    for frame in range(1, num_frames):
        camera.rotate(turn, 0.0)
        renderer.render(out=pixels)
        total_seconds += renderer.last_frame_seconds

        if not quiet:
            fps = frame / total_seconds if total_seconds > 0 else 0.0
            print(
                f"\r  Frame {frame + 1}/{num_frames} - "
                f"{renderer.last_frame_seconds * 1000.0:.1f} ms ({fps:.1f} FPS avg)",
                end="",
                flush=True,
            )

    if not quiet and num_frames > 1:
        print()  # Newline after progress

    output_file = Path(output_path)
    save_png(pixels, width, height, str(output_file))

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")

    if show:
        show_frame(pixels, width, height, title=f"Room - frame {renderer.frame_count}")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu)
        if not args.quiet:
            print("Using GPU backend")
    except Exception:
        ti.init(arch=ti.cpu)
        if not args.quiet:
            print("Using CPU backend")

    try:
        render_room(
            width=args.width,
            height=args.height,
            num_frames=args.frames,
            turn=args.turn,
            bounces=args.bounces,
            output_path=args.output,
            show=args.show,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
