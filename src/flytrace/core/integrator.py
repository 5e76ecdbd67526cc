"""Depth-limited mirror reflection integrator.

This module resolves the colour seen along a ray: the closest hit is shaded
locally and, for reflective surfaces, blended with the colour seen along the
mirror-reflected ray.

For a hit with reflectivity r and bounce budget d, the colour is:
    local                                   if d <= 1 or r == 0
    local * (1 - r) + reflected * r         otherwise
where ``reflected`` is the colour along the reflected ray with budget d - 1.
A ray that hits nothing is black.

Taichi functions cannot recurse, so the recursion is unrolled into a loop
carrying the product of reflectivities seen so far. Each bounce adds its
local colour scaled by that weight, which gives the same sum as the
recursive definition.

Key features:
    - Fixed point light Phong shading at every hit
    - No attenuation and no shadow rays
    - Reflected rays start exactly at the hit point; the intersection
      tests' minimum distance keeps them off the originating surface

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.flytrace.core.integrator import shade
    >>> from src.flytrace.scene.room import create_room_scene
    >>>
    >>> scene, camera = create_room_scene()
    >>> # Hits the front of the sphere; the reflected ray escapes the room
    >>> shade(scene, origin=(0, 2, 5), direction=(0, 0, -1))
    (0.184, 0.184, 0.184)
"""

import taichi as ti
import taichi.math as tm

from src.flytrace.core.ray import Ray, as_vector, make_ray, near_zero, reflect, to_vec3, unit_vector
from src.flytrace.materials.phong import compute_lighting

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Default bounce budget for primary rays (1 primary hit + 2 reflections)
MAX_BOUNCES = 3

# Colour returned for rays that hit nothing
BACKGROUND_COLOR = vec3(0.0, 0.0, 0.0)


@ti.func
def shade_ray(scene: ti.template(), ray: Ray, bounce_budget: ti.i32) -> vec3:
    """Compute the colour seen along a ray.

    Args:
        scene: The Scene to trace against.
        ray: The ray to shade. Its direction must be unit length.
        bounce_budget: Remaining recursion depth. Values of 1 or less give
            local shading only.

    Returns:
        The unclamped RGB colour.
    """
    origin = ray.origin
    direction = ray.direction

    color = vec3(0.0, 0.0, 0.0)

    # Product of the reflectivities along the mirror chain
    weight = 1.0

    # Active flag for path continuation (Taichi doesn't support break in ti.func loops)
    active = 1

    steps = ti.max(bounce_budget, 1)
    ti.loop_config(serialize=True)
    for depth in range(steps):
        if active == 1:
            rec = scene.trace(make_ray(origin, direction))

            if rec.hit == 0:
                color += weight * BACKGROUND_COLOR
                active = 0
            else:
                local = compute_lighting(rec.point, rec.normal, -direction, rec.material)
                r = rec.material.reflectivity
                reflect_dir = reflect(direction, rec.normal)

                remaining = steps - depth
                if remaining > 1 and r > 0.0 and near_zero(reflect_dir) == 0:
                    color += weight * (1.0 - r) * local
                    weight *= r
                    origin = rec.point
                    direction = tm.normalize(reflect_dir)
                else:
                    color += weight * local
                    active = 0

    return color


@ti.kernel
def _shade_kernel(scene: ti.template(), origin: vec3, direction: vec3, bounce_budget: ti.i32) -> vec3:
    return shade_ray(scene, make_ray(origin, direction), bounce_budget)


def shade(
    scene,
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    bounce_budget: int = MAX_BOUNCES,
) -> tuple[float, float, float]:
    """Shade a single ray from Python.

    Used for testing and debugging individual rays.

    Args:
        scene: The Scene to trace against.
        origin: The ray origin as (x, y, z).
        direction: The ray direction; normalized before tracing.
        bounce_budget: Recursion depth (default MAX_BOUNCES).

    Returns:
        The unclamped RGB colour as a tuple.

    Raises:
        ValueError: If direction is zero-length.
    """
    origin_arr = as_vector(origin, "origin")
    direction_arr = unit_vector(direction, "direction")
    color = _shade_kernel(scene, to_vec3(origin_arr), to_vec3(direction_arr), bounce_budget)
    return (float(color[0]), float(color[1]), float(color[2]))
