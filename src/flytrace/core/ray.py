"""Ray data structure and vector utilities for CPU ray tracing.

This module provides the fundamental Ray dataclass and the vector helpers
shared by the intersection, shading and camera code. Device-side helpers are
Taichi functions; construction-time helpers run in Python on NumPy arrays.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 2.0, 5.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Vectors shorter than this are treated as zero-length
ZERO_LENGTH_EPSILON = 1e-8


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of the ray (vec3). Must be unit length so
            that hit distances are Euclidean distances.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction inside a Taichi scope."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    The caller guarantees a non-zero input; a zero vector yields NaN.
    """
    return tm.normalize(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product of two vectors."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product of two vectors."""
    return tm.cross(a, b)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The mirrored direction ``incident - 2 (incident . normal) normal``.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Return 1 if every component of v is near zero, 0 otherwise."""
    s = ZERO_LENGTH_EPSILON
    result = 0
    if ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s:
        result = 1
    return result


# =============================================================================
# Python-side Helpers (scene construction and camera updates)
# =============================================================================


def as_vector(v: npt.ArrayLike, name: str = "vector") -> npt.NDArray[np.float64]:
    """Convert a 3-component sequence to a float64 NumPy array.

    Raises:
        ValueError: If v does not have exactly three finite components.
    """
    arr = np.asarray(v, dtype=np.float64).reshape(-1)
    if arr.shape != (3,):
        raise ValueError(f"{name} must have 3 components, got {arr.shape[0]}")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{name} has non-finite components: {arr.tolist()}")
    return arr


def unit_vector(v: npt.ArrayLike, name: str = "vector") -> npt.NDArray[np.float64]:
    """Normalize a 3-component vector, rejecting zero-length input.

    Args:
        v: The vector to normalize.
        name: Name used in the error message.

    Returns:
        A unit-length float64 NumPy array.

    Raises:
        ValueError: If v is zero-length or malformed.
    """
    arr = as_vector(v, name)
    norm = float(np.linalg.norm(arr))
    if norm < ZERO_LENGTH_EPSILON:
        raise ValueError(f"{name} must be non-zero to normalize, got {arr.tolist()}")
    return arr / norm


def to_vec3(v: npt.ArrayLike) -> vec3:
    """Build a Taichi vec3 from a 3-component Python/NumPy vector."""
    arr = np.asarray(v, dtype=np.float64).reshape(-1)
    return vec3(float(arr[0]), float(arr[1]), float(arr[2]))
