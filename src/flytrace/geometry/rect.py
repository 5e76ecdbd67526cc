"""Finite rectangle primitive with ray-rectangle intersection.

This module provides a Rect dataclass and intersection function for the
walls, floor and ceiling of a scene.

A rect is defined by:
- point: The anchor at the centre of the rectangle
- normal: Unit plane normal
- u, v: Unit, mutually orthogonal in-plane axes
- width, height: Extents along u and v, centred on the anchor

Ray-rect intersection first intersects the infinite plane, then projects the
hit onto u and v and keeps it only if both coordinates lie within half the
corresponding extent.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.flytrace.geometry.rect import Rect, hit_rect
    >>> # Use hit_rect within a Taichi kernel:
    >>> # rec = hit_rect(ray, floor, rec)
"""

import taichi as ti
import taichi.math as tm

from src.flytrace.core.ray import Ray, ray_at
from src.flytrace.materials.phong import Material

from .sphere import T_EPSILON, HitRecord

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# |normal . direction| below this counts as parallel to the plane
PARALLEL_EPSILON = 1e-4


@ti.dataclass
class Rect:
    """A finite planar rectangle.

    The normal, u and v must be mutually orthonormal. Scene construction
    normalizes and checks them; the intersection code assumes it.

    Attributes:
        point: The anchor point at the centre of the rect (vec3).
        normal: Unit plane normal (vec3).
        u: Unit in-plane axis for the width (vec3).
        v: Unit in-plane axis for the height (vec3).
        width: Extent along u.
        height: Extent along v.
        material: The surface material.
    """

    point: vec3
    normal: vec3
    u: vec3
    v: vec3
    width: ti.f32
    height: ti.f32
    material: Material


@ti.func
def hit_rect(ray: Ray, rect: Rect, closest: HitRecord) -> HitRecord:
    """Test a ray against a rect, keeping the closer of two hits.

    The ray-plane distance is:
        t = dot(point - origin, normal) / dot(normal, direction)

    Rays whose direction is (nearly) parallel to the plane never hit.

    Args:
        ray: The ray to test. Its direction must be unit length.
        rect: The rect to test against.
        closest: The closest hit found so far.

    Returns:
        A record for this rect if it is hit closer than ``closest``,
        otherwise ``closest`` unchanged.
    """
    result = closest

    denom = tm.dot(rect.normal, ray.direction)

    if ti.abs(denom) >= PARALLEL_EPSILON:
        t = tm.dot(rect.point - ray.origin, rect.normal) / denom

        if t >= T_EPSILON and t < closest.t:
            point = ray_at(ray, t)

            # Planar coordinates of the hit relative to the anchor
            offset = point - rect.point
            pu = tm.dot(offset, rect.u)
            pv = tm.dot(offset, rect.v)

            if ti.abs(pu) <= rect.width * 0.5 and ti.abs(pv) <= rect.height * 0.5:
                result = HitRecord(
                    hit=1,
                    t=t,
                    point=point,
                    normal=rect.normal,
                    material=rect.material,
                )

    return result

