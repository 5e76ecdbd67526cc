"""First-person free-flying camera.

This module implements a yaw/pitch camera that generates primary rays for
interactive fly-through rendering. The camera supports:
- Rotation by yaw and pitch deltas (degrees), with pitch clamped to avoid
  flipping over the poles
- Translation along any world-space direction (typically front or right)
- Ray generation from precomputed viewport offsets

The camera keeps an orthonormal basis derived from yaw and pitch:
- front: viewing direction
- right: normalize(front x world_up), with world_up = (0, 1, 0)
- up: right x front

Camera state lives on the Python side as NumPy arrays and is mirrored into
0-d Taichi fields after every change, so rays are generated inside kernels
while updates happen between frames.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.flytrace.camera.fly import FlyCamera
    >>>
    >>> camera = FlyCamera(position=(0.0, 2.0, 5.0), yaw=-90.0)
    >>> camera.front
    array([ 0.,  0., -1.])
    >>> camera.rotate(0.4, 0.0)  # turn right
    >>> camera.move(camera.front, 0.02)  # step forward
"""

import math

import numpy as np
import taichi as ti
import taichi.math as tm

from src.flytrace.core.ray import Ray, as_vector, make_ray, vec3

# World up vector used to derive the right axis
WORLD_UP = np.array([0.0, 1.0, 0.0])

# Pitch is clamped to this magnitude (degrees)
PITCH_LIMIT = 89.0


@ti.data_oriented
class FlyCamera:
    """Yaw/pitch camera with a derived front/right/up basis.

    Attributes:
        position: Camera position in world space (NumPy array).
        yaw: Rotation about the world up axis in degrees. 0 looks down +x,
            -90 looks down -z.
        pitch: Elevation in degrees, clamped to [-89, 89].
        fov: Field of view in degrees. Informational only; the frame
            renderer's viewport height controls the projection.
    """

    def __init__(
        self,
        position: tuple[float, float, float] = (0.0, 0.0, 0.0),
        yaw: float = 0.0,
        pitch: float = 0.0,
        fov: float = 60.0,
    ) -> None:
        self.position = as_vector(position, "position")
        self.yaw = float(yaw)
        self.pitch = float(pitch)
        self.fov = float(fov)

        self._front = np.array([1.0, 0.0, 0.0])
        self._right = np.array([0.0, 0.0, 1.0])
        self._up = np.array([0.0, 1.0, 0.0])

        # Kernel-visible copies of the camera state
        self._position_field = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._front_field = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._right_field = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._up_field = ti.Vector.field(3, dtype=ti.f32, shape=())

        self.update()

    # =========================================================================
    # Python-side state changes (between frames only)
    # =========================================================================

    def update(self) -> None:
        """Clamp pitch and recompute the basis from yaw and pitch.

        Must be called after yaw, pitch or position are assigned directly.
        rotate() and move() call it themselves.
        """
        self.pitch = max(-PITCH_LIMIT, min(PITCH_LIMIT, self.pitch))

        yaw_rad = math.radians(self.yaw)
        pitch_rad = math.radians(self.pitch)

        front = np.array(
            [
                math.cos(yaw_rad) * math.cos(pitch_rad),
                math.sin(pitch_rad),
                math.sin(yaw_rad) * math.cos(pitch_rad),
            ]
        )
        front = front / np.linalg.norm(front)

        # Never degenerate while |pitch| <= 89
        right = np.cross(front, WORLD_UP)
        right = right / np.linalg.norm(right)

        up = np.cross(right, front)

        self._front = front
        self._right = right
        self._up = up

        self._position_field[None] = self.position.tolist()
        self._front_field[None] = front.tolist()
        self._right_field[None] = right.tolist()
        self._up_field[None] = up.tolist()

    def rotate(self, dyaw: float, dpitch: float) -> None:
        """Add yaw and pitch deltas (degrees) and recompute the basis."""
        self.yaw += dyaw
        self.pitch += dpitch
        self.update()

    def move(self, direction: tuple[float, float, float], speed: float) -> None:
        """Translate the camera by direction * speed.

        The direction is used as given; pass front or right for the usual
        first-person movement.

        Args:
            direction: World-space direction to move along.
            speed: Distance multiplier (may be negative).
        """
        self.position = self.position + as_vector(direction, "direction") * speed
        self.update()

    @property
    def front(self) -> np.ndarray:
        return self._front.copy()

    @property
    def right(self) -> np.ndarray:
        return self._right.copy()

    @property
    def up(self) -> np.ndarray:
        return self._up.copy()

    def basis(self) -> dict:
        """Get the current camera position and basis.

        Returns:
            Dictionary with 'position', 'front', 'right' and 'up' tuples.
        """
        return {
            "position": tuple(float(c) for c in self.position),
            "front": tuple(float(c) for c in self._front),
            "right": tuple(float(c) for c in self._right),
            "up": tuple(float(c) for c in self._up),
        }

    # =========================================================================
    # Ray generation (Taichi scope)
    # =========================================================================

    @ti.func
    def get_ray(self, u_offset: ti.f32, v_offset: ti.f32) -> Ray:
        """Generate the primary ray through a viewport offset.

        The direction is front + up * v_offset + right * u_offset,
        normalized. Offsets of (0, 0) give a ray along front.

        Args:
            u_offset: Horizontal viewport offset (positive is right).
            v_offset: Vertical viewport offset (positive is up).

        Returns:
            A Ray starting at the camera position.
        """
        direction = (
            self._front_field[None]
            + self._up_field[None] * v_offset
            + self._right_field[None] * u_offset
        )
        return make_ray(self._position_field[None], tm.normalize(direction))

    @ti.kernel
    def _ray_direction_kernel(self, u_offset: ti.f32, v_offset: ti.f32) -> vec3:
        return self.get_ray(u_offset, v_offset).direction

    def ray_direction(self, u_offset: float, v_offset: float) -> tuple[float, float, float]:
        """Get the primary ray direction for a viewport offset from Python."""
        d = self._ray_direction_kernel(u_offset, v_offset)
        return (float(d[0]), float(d[1]), float(d[2]))

    def __repr__(self) -> str:
        x, y, z = self.position
        return f"FlyCamera(position=({x:.3f}, {y:.3f}, {z:.3f}), yaw={self.yaw:.1f}, pitch={self.pitch:.1f})"
