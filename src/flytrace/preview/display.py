"""Matplotlib-based display for rendered frames.

Example:
    >>> from src.flytrace.preview.display import show_frame
    >>>
    >>> pixels = renderer.render()
    >>> show_frame(pixels, renderer.width, renderer.height)
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from src.flytrace.preview.export import unpack_pixels


def show_frame(
    pixels: npt.NDArray[np.uint32],
    width: int,
    height: int,
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 6),
    block: bool = True,
) -> None:
    """Display a packed frame as a Matplotlib figure.

    Args:
        pixels: Flat, row-major buffer of width * height packed pixels.
        width: Image width in pixels.
        height: Image height in pixels.
        title: Custom title (default shows the image size).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    image = unpack_pixels(pixels, width, height)

    fig, ax = plt.subplots(1, 1, figsize=figsize)

    ax.imshow(image)
    ax.axis("off")
    ax.set_title(title if title is not None else f"Frame Preview - {width}x{height}")

    plt.tight_layout()
    plt.show(block=block)
