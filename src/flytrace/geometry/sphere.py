"""Sphere primitive and the closest-hit record shared by all primitives.

This module provides the HitRecord dataclass, the Sphere dataclass and the
ray-sphere intersection function.

Intersection tests follow a fold discipline: each test receives the closest
hit found so far and returns either that record unchanged or a new record
for a strictly closer hit. A scene resolves its nearest hit by threading one
record through every primitive, whatever its type.

The ray-sphere test substitutes the ray into the implicit sphere equation
using the vector from the sphere center to the ray origin. Ray directions are
unit length, so the quadratic coefficient is 1 and the half-b form reduces to:
    b = dot(oc, direction)
    c = dot(oc, oc) - radius^2
    t = -b -/+ sqrt(b^2 - c)

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.flytrace.geometry.sphere import Sphere, empty_hit_record, hit_sphere
    >>> # Use within a Taichi kernel:
    >>> # rec = hit_sphere(ray, sphere, empty_hit_record())
"""

import taichi as ti
import taichi.math as tm

from src.flytrace.core.ray import Ray, ray_at
from src.flytrace.materials.phong import Material

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Hits closer than this are rejected to avoid self-intersection at the
# origin of reflected rays
T_EPSILON = 0.001


@ti.dataclass
class HitRecord:
    """Record of the closest ray-primitive intersection found so far.

    Attributes:
        hit: 1 if any primitive was hit, 0 otherwise.
        t: Distance along the ray to the hit. +inf while nothing was hit.
        point: The world-space hit point. Only valid if hit == 1.
        normal: The surface normal at the hit point. Only valid if hit == 1.
        material: The material of the hit surface. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    material: Material


@ti.dataclass
class Sphere:
    """A sphere defined by center point, radius and material.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
        material: The surface material.
    """

    center: vec3
    radius: ti.f32
    material: Material


@ti.func
def empty_hit_record() -> HitRecord:
    """Create a HitRecord for 'nothing hit yet' (hit=0, t=+inf)."""
    return HitRecord(
        hit=0,
        t=tm.inf,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        material=Material(color=vec3(0.0, 0.0, 0.0), reflectivity=0.0, specular=0.0),
    )


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, closest: HitRecord) -> HitRecord:
    """Test a ray against a sphere, keeping the closer of two hits.

    The nearer root is tried first; if it lies behind T_EPSILON (the ray
    starts inside the sphere or on its surface) the farther root is used.
    A hit that is not strictly closer than ``closest.t`` is ignored.

    Args:
        ray: The ray to test. Its direction must be unit length.
        sphere: The sphere to test against.
        closest: The closest hit found so far.

    Returns:
        A record for this sphere if it is hit closer than ``closest``,
        otherwise ``closest`` unchanged.
    """
    result = closest

    oc = ray.origin - sphere.center
    b = tm.dot(oc, ray.direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = b * b - c

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)
        t = -b - sqrt_d
        if t < T_EPSILON:
            t = -b + sqrt_d

        if t >= T_EPSILON and t < closest.t:
            point = ray_at(ray, t)
            result = HitRecord(
                hit=1,
                t=t,
                point=point,
                # Outward normal; unit length because |point - center| == radius
                normal=(point - sphere.center) / sphere.radius,
                material=sphere.material,
            )

    return result


@ti.func
def make_sphere(center: vec3, radius: ti.f32, material: Material) -> Sphere:
    """Create a sphere inside a Taichi scope."""
    return Sphere(center=center, radius=radius, material=material)
