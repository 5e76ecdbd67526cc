"""Image export utilities for packed frame buffers.

This module converts the renderer's packed 0x00RRGGBB buffers into
ordinary RGB arrays and saves them to files.

Supported formats:
    - PNG (8-bit RGB via Pillow)

Example:
    >>> from src.flytrace.preview.export import save_png
    >>> from src.flytrace.core.frame import FrameRenderer, RenderSettings
    >>>
    >>> renderer = FrameRenderer(scene, camera, RenderSettings(640, 480))
    >>> pixels = renderer.render()
    >>> save_png(pixels, 640, 480, "frame.png")
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage


def unpack_pixels(
    pixels: npt.NDArray[np.uint32],
    width: int,
    height: int,
) -> npt.NDArray[np.uint8]:
    """Split a packed pixel buffer into 8-bit RGB channels.

    Args:
        pixels: Flat, row-major buffer of width * height packed pixels.
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        Array of shape (height, width, 3) with dtype uint8, row 0 at the top.

    Raises:
        ValueError: If the buffer size doesn't match width * height.
    """
    pixels = np.asarray(pixels)
    if pixels.size != width * height:
        raise ValueError(
            f"Pixel buffer has {pixels.size} entries, expected {width}x{height} = {width * height}"
        )

    packed = pixels.reshape(height, width).astype(np.uint32)

    image = np.empty((height, width, 3), dtype=np.uint8)
    image[..., 0] = (packed >> 16) & 0xFF
    image[..., 1] = (packed >> 8) & 0xFF
    image[..., 2] = packed & 0xFF
    return image


def pixels_to_float_image(
    pixels: npt.NDArray[np.uint32],
    width: int,
    height: int,
) -> npt.NDArray[np.float32]:
    """Convert a packed pixel buffer to a float RGB image in [0, 1].

    Returns:
        Array of shape (height, width, 3) with dtype float32.
    """
    return (unpack_pixels(pixels, width, height) / 255.0).astype(np.float32)


def save_png(
    pixels: npt.NDArray[np.uint32],
    width: int,
    height: int,
    filepath: str,
) -> None:
    """Save a packed pixel buffer as a PNG file.

    The buffer is already quantized, so no tone mapping or gamma
    correction is applied.

    Args:
        pixels: Flat, row-major buffer of width * height packed pixels.
        width: Image width in pixels.
        height: Image height in pixels.
        filepath: Output file path (should end in .png).
    """
    image_uint8 = unpack_pixels(pixels, width, height)

    # Save using Pillow
    pil_image = PILImage.fromarray(image_uint8, mode="RGB")
    pil_image.save(filepath)
