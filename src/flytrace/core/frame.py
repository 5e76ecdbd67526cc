"""Frame renderer producing packed 0xRRGGBB pixel buffers.

This module turns a Scene and a FlyCamera into one frame of pixels. Each
pixel fires one primary ray through a fixed viewport offset, shades it with
the reflection integrator and quantizes the colour into a 32-bit word.

Frame rendering:
    - Viewport offsets are computed once per renderer from the image size
    - One kernel launch per frame; Taichi parallelizes the outermost loop
      over pixels, and every pixel is written by exactly one iteration
    - The scene and camera are only read while the kernel runs

The output buffer is row-major with row 0 at the top of the image, one
uint32 per pixel laid out as 0x00RRGGBB.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.flytrace.core.frame import FrameRenderer, RenderSettings
    >>> from src.flytrace.scene.room import create_room_scene
    >>>
    >>> scene, camera = create_room_scene()
    >>> renderer = FrameRenderer(scene, camera, RenderSettings(width=320, height=240))
    >>> pixels = renderer.render()
    >>> pixels.shape
    (76800,)
    >>> camera.rotate(0.4, 0.0)
    >>> renderer.render(out=pixels)  # next frame into the same buffer
"""

import time
from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from src.flytrace.core.integrator import MAX_BOUNCES, shade_ray

# Type alias for 3D vectors
vec3 = tm.vec3

# Default viewport height in camera-space units (the viewport sits at unit
# distance along front)
DEFAULT_VIEWPORT_HEIGHT = 2.0


@dataclass
class RenderSettings:
    """Configuration for a frame renderer.

    Attributes:
        width: Image width in pixels (at least 2).
        height: Image height in pixels (at least 2).
        viewport_height: Height of the viewport at unit distance. The
            viewport width follows from the aspect ratio.
        max_bounces: Bounce budget for primary rays.

    Example:
        >>> settings = RenderSettings(width=800, height=600)
        >>> settings.viewport_width
        2.6666666666666665
    """

    width: int
    height: int
    viewport_height: float = DEFAULT_VIEWPORT_HEIGHT
    max_bounces: int = MAX_BOUNCES

    def __post_init__(self) -> None:
        if self.width < 2 or self.height < 2:
            raise ValueError(
                f"Image dimensions must be at least 2x2, got {self.width}x{self.height}"
            )
        if self.viewport_height <= 0.0:
            raise ValueError(f"Viewport height must be positive, got {self.viewport_height}")

    @property
    def viewport_width(self) -> float:
        return self.width / self.height * self.viewport_height

    @property
    def num_pixels(self) -> int:
        return self.width * self.height


def compute_viewport_offsets(
    width: int, height: int, viewport_height: float = DEFAULT_VIEWPORT_HEIGHT
) -> tuple[np.ndarray, np.ndarray]:
    """Compute the per-column and per-row viewport offsets.

    Column x maps to u = (x / (w - 1) - 0.5) * viewport_width, so the
    leftmost column is -viewport_width / 2. Row y maps to
    v = ((h - 1 - y) / (h - 1) - 0.5) * viewport_height, so row 0 is the top
    of the image.

    Args:
        width: Image width in pixels (at least 2).
        height: Image height in pixels (at least 2).
        viewport_height: Height of the viewport at unit distance.

    Returns:
        Tuple of (u_offsets, v_offsets) as float32 arrays of length width
        and height.
    """
    viewport_width = width / height * viewport_height

    x = np.arange(width, dtype=np.float64)
    y = np.arange(height, dtype=np.float64)

    u_offsets = (x / (width - 1) - 0.5) * viewport_width
    v_offsets = ((height - 1 - y) / (height - 1) - 0.5) * viewport_height

    return u_offsets.astype(np.float32), v_offsets.astype(np.float32)


@ti.func
def pack_color(color: vec3) -> ti.u32:
    """Quantize an RGB colour into a 0x00RRGGBB word.

    NaN channels become 0. Each channel is clamped to [0, 1] and scaled by
    255 with truncation, so 0.5 maps to 127.
    """
    c = color
    for i in ti.static(range(3)):
        if tm.isnan(c[i]):
            c[i] = 0.0
    c = tm.clamp(c, 0.0, 1.0)

    r = ti.cast(c[0] * 255.0, ti.u32)
    g = ti.cast(c[1] * 255.0, ti.u32)
    b = ti.cast(c[2] * 255.0, ti.u32)
    return (r << 16) | (g << 8) | b


@ti.data_oriented
class FrameRenderer:
    """Renders frames of a scene as seen from a fly camera.

    The renderer holds references to the scene and camera; moving the
    camera between render() calls changes the next frame. To change the
    image size, create a new renderer.

    Attributes:
        scene: The Scene to render.
        camera: The FlyCamera generating primary rays.
        settings: The RenderSettings fixed at construction.
        frame_count: Number of frames rendered so far.
        last_frame_seconds: Wall-clock duration of the last render() call.
    """

    def __init__(self, scene, camera, settings: RenderSettings) -> None:
        self.scene = scene
        self.camera = camera
        self.settings = settings

        self.frame_count = 0
        self.last_frame_seconds = 0.0

        width, height = settings.width, settings.height

        u_offsets, v_offsets = compute_viewport_offsets(width, height, settings.viewport_height)
        self.u_offsets = ti.field(dtype=ti.f32, shape=width)
        self.v_offsets = ti.field(dtype=ti.f32, shape=height)
        self.u_offsets.from_numpy(u_offsets)
        self.v_offsets.from_numpy(v_offsets)

        # Indexed [row, column] so the flattened buffer is row-major
        self.pixels = ti.field(dtype=ti.u32, shape=(height, width))

    @ti.kernel
    def _render_frame(self, max_bounces: ti.i32):
        for y, x in self.pixels:
            ray = self.camera.get_ray(self.u_offsets[x], self.v_offsets[y])
            color = shade_ray(self.scene, ray, max_bounces)
            self.pixels[y, x] = pack_color(color)

    def render(self, out: np.ndarray | None = None) -> np.ndarray:
        """Render one frame.

        Args:
            out: Optional flat uint32 buffer of width * height entries to
                fill in place.

        Returns:
            The flat, row-major uint32 pixel buffer (``out`` if given).

        Raises:
            ValueError: If ``out`` has the wrong shape.
        """
        num_pixels = self.settings.num_pixels
        if out is not None and out.shape != (num_pixels,):
            raise ValueError(
                f"Output buffer must have shape ({num_pixels},), got {out.shape}"
            )

        start = time.perf_counter()
        self._render_frame(self.settings.max_bounces)
        frame = self.pixels.to_numpy().reshape(num_pixels)
        self.last_frame_seconds = time.perf_counter() - start
        self.frame_count += 1

        if out is None:
            return frame.astype(np.uint32, copy=False)

        out[:] = frame
        return out

    @property
    def width(self) -> int:
        return self.settings.width

    @property
    def height(self) -> int:
        return self.settings.height
