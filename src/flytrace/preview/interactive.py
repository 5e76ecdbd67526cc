"""Interactive fly-through window using Taichi GGUI.

This module provides the reference host for real-time rendering: it owns the
window, polls the keyboard, moves the camera between frames and presents
each frame from the renderer's packed pixel buffer.

Features:
    - Taichi GGUI-based window
    - First-person keyboard controls (arrow keys to look, WASD to move)
    - Escape to quit, P to export the current frame as a timestamped PNG
    - Frame timing for FPS reporting

Key bindings:
    Left / Right: yaw -/+ rotation_speed degrees
    Up / Down: pitch +/- rotation_speed degrees
    W / S: move along +/- front by move_speed
    A / D: move along -/+ right by move_speed

Rotation is applied before translation, so moving uses the updated basis.

Example:
    >>> from src.flytrace.preview.interactive import FlyThroughPreview
    >>> from src.flytrace.core.frame import FrameRenderer, RenderSettings
    >>> from src.flytrace.scene.room import create_room_scene
    >>>
    >>> scene, camera = create_room_scene()
    >>> renderer = FrameRenderer(scene, camera, RenderSettings(640, 480))
    >>> FlyThroughPreview(renderer).run()  # Blocks until window closed
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

import numpy as np
import taichi as ti

from src.flytrace.preview.export import pixels_to_float_image, save_png

if TYPE_CHECKING:
    from src.flytrace.camera.fly import FlyCamera
    from src.flytrace.core.frame import FrameRenderer


# Camera actions understood by apply_actions()
ROTATION_ACTIONS = ("turn_left", "turn_right", "look_up", "look_down")
MOVEMENT_ACTIONS = ("forward", "back", "strafe_left", "strafe_right")


@dataclass
class CameraControls:
    """Per-frame camera speeds for keyboard control.

    Attributes:
        rotation_speed: Degrees of yaw or pitch per frame a key is held.
        move_speed: World units moved per frame a key is held.
    """

    rotation_speed: float = 0.4
    move_speed: float = 0.02


def apply_actions(
    camera: FlyCamera,
    actions: Iterable[str],
    controls: CameraControls | None = None,
) -> None:
    """Apply one frame of held-key actions to a camera.

    All rotations are summed and applied first, then each movement is
    applied along the updated front or right vector.

    Args:
        camera: The FlyCamera to update.
        actions: Names from ROTATION_ACTIONS and MOVEMENT_ACTIONS.
        controls: Speeds to use. Uses CameraControls() when omitted.

    Raises:
        ValueError: If an action name is not recognized.
    """
    if controls is None:
        controls = CameraControls()

    actions = list(actions)
    for action in actions:
        if action not in ROTATION_ACTIONS and action not in MOVEMENT_ACTIONS:
            raise ValueError(f"Unknown camera action: {action}")

    dyaw = 0.0
    dpitch = 0.0
    if "turn_left" in actions:
        dyaw -= controls.rotation_speed
    if "turn_right" in actions:
        dyaw += controls.rotation_speed
    if "look_up" in actions:
        dpitch += controls.rotation_speed
    if "look_down" in actions:
        dpitch -= controls.rotation_speed

    if dyaw != 0.0 or dpitch != 0.0:
        camera.rotate(dyaw, dpitch)

    if "forward" in actions:
        camera.move(camera.front, controls.move_speed)
    if "back" in actions:
        camera.move(camera.front, -controls.move_speed)
    if "strafe_left" in actions:
        camera.move(camera.right, -controls.move_speed)
    if "strafe_right" in actions:
        camera.move(camera.right, controls.move_speed)


class FlyThroughPreview:
    """Interactive fly-through window using Taichi GGUI.

    Attributes:
        renderer: The FrameRenderer producing each frame.
        controls: Camera speeds for keyboard control.
        width: Window width in pixels (the renderer's width).
        height: Window height in pixels (the renderer's height).
        display_image: Taichi field storing the display image (RGB float).
    """

    def __init__(
        self,
        renderer: FrameRenderer,
        *,
        controls: CameraControls | None = None,
        title: str = "flytrace - Fly-Through Preview",
        export_prefix: str = "flytrace",
    ) -> None:
        self.renderer = renderer
        self.controls = controls if controls is not None else CameraControls()
        self.width = renderer.width
        self.height = renderer.height
        self._title = title
        self._export_prefix = export_prefix
        self._is_initialized = False

        # Defer window creation until run() to support headless checks
        self._window: ti.ui.Window | None = None
        self._canvas: ti.ui.Canvas | None = None

        # Reused across frames
        self._pixels = np.zeros(self.width * self.height, dtype=np.uint32)

        # Shape is (width, height) for Taichi field, RGB values stored as vec3
        self.display_image: ti.MatrixField = ti.Vector.field(
            3, dtype=ti.f32, shape=(self.width, self.height)
        )

    def _initialize_window(self) -> None:
        if self._is_initialized:
            return

        self._window = ti.ui.Window(
            name=self._title,
            res=(self.width, self.height),
            vsync=True,
        )
        self._canvas = self._window.get_canvas()
        self._is_initialized = True

    @property
    def window(self) -> ti.ui.Window:
        """Get the Taichi GGUI window, initializing if needed."""
        if self._window is None:
            self._initialize_window()
        assert self._window is not None
        return self._window

    @property
    def canvas(self) -> ti.ui.Canvas:
        """Get the canvas for rendering."""
        if self._canvas is None:
            self._initialize_window()
        assert self._canvas is not None
        return self._canvas

    def update_image(self, pixels: np.ndarray) -> None:
        """Update the display image from a packed pixel buffer.

        Args:
            pixels: Flat, row-major buffer of width * height packed pixels.
        """
        image = pixels_to_float_image(pixels, self.width, self.height)

        # NumPy images are (height, width) with row 0 at the top; the canvas
        # field is (width, height) with the origin at the bottom-left
        image_transposed = np.ascontiguousarray(
            np.transpose(np.flipud(image), (1, 0, 2))
        )
        self.display_image.from_numpy(image_transposed)

    def held_actions(self) -> list[str]:
        """Get the camera actions for every key currently held down."""
        window = self.window
        bindings = (
            (ti.ui.LEFT, "turn_left"),
            (ti.ui.RIGHT, "turn_right"),
            (ti.ui.UP, "look_up"),
            (ti.ui.DOWN, "look_down"),
            ("w", "forward"),
            ("s", "back"),
            ("a", "strafe_left"),
            ("d", "strafe_right"),
        )
        return [action for key, action in bindings if window.is_pressed(key)]

    def _handle_key_presses(self) -> None:
        for event in self.window.get_events(ti.ui.PRESS):
            if event.key == ti.ui.ESCAPE:
                self.close()
            elif event.key == "p":
                self._export_png()

    def is_running(self) -> bool:
        """Check if the window is still open."""
        return self.window.running

    def step(self) -> np.ndarray:
        """Advance one frame: handle input, move the camera, render, present.

        Returns:
            The packed pixel buffer of the rendered frame.
        """
        self._handle_key_presses()
        apply_actions(self.renderer.camera, self.held_actions(), self.controls)

        self.renderer.render(out=self._pixels)
        self.update_image(self._pixels)

        self.canvas.set_image(self.display_image)
        self.window.show()
        return self._pixels

    def run(self) -> None:
        """Run the main window event loop.

        This blocks until the window is closed or Escape is pressed.
        """
        self._initialize_window()

        while self.is_running():
            self.step()

    def close(self) -> None:
        """Close the preview window."""
        if self._window is not None:
            self._window.running = False

    def fps(self) -> float:
        """Frames per second implied by the last render() duration."""
        seconds = self.renderer.last_frame_seconds
        return 1.0 / seconds if seconds > 0.0 else 0.0

    def _export_png(self) -> None:
        """Export the last frame to a timestamped PNG file."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"{self._export_prefix}_{timestamp}.png"

        save_png(self._pixels, self.width, self.height, filename)
        print(f"Exported: {filename} (frame {self.renderer.frame_count})")

    @staticmethod
    def is_display_available() -> bool:
        """Check if a display is available for GUI rendering.

        Returns:
            True if a display is available, False for headless environments.
        """
        display = os.environ.get("DISPLAY")
        wayland = os.environ.get("WAYLAND_DISPLAY")

        # On macOS, display is available unless in SSH without X forwarding
        if os.uname().sysname == "Darwin":
            return not (os.environ.get("SSH_CONNECTION") and not display)

        if display or wayland:
            return True

        # Windows generally always has display
        return os.name == "nt"
