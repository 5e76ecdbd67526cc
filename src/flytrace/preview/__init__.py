"""Preview module for output and visualization.

This module is the host side of the renderer: it turns packed frame
buffers into images and drives the interactive window.

Components:
    display: Matplotlib-based still frame display
    export: Pixel unpacking and PNG export
    interactive: Taichi GGUI fly-through window with keyboard controls

Example:
    >>> from src.flytrace.preview import save_png, show_frame
    >>>
    >>> pixels = renderer.render()
    >>> show_frame(pixels, renderer.width, renderer.height)
    >>> save_png(pixels, renderer.width, renderer.height, "frame.png")

For the interactive window:
    >>> from src.flytrace.preview import FlyThroughPreview
    >>>
    >>> FlyThroughPreview(renderer).run()
"""

from .display import show_frame
from .export import pixels_to_float_image, save_png, unpack_pixels
from .interactive import (
    MOVEMENT_ACTIONS,
    ROTATION_ACTIONS,
    CameraControls,
    FlyThroughPreview,
    apply_actions,
)

__all__ = [
    # Display
    "show_frame",
    # Export
    "unpack_pixels",
    "pixels_to_float_image",
    "save_png",
    # Interactive
    "CameraControls",
    "FlyThroughPreview",
    "apply_actions",
    "ROTATION_ACTIONS",
    "MOVEMENT_ACTIONS",
]
