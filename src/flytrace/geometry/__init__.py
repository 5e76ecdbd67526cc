"""Geometry module for shape primitives.

This module provides geometric primitives and intersection algorithms:

Components:
    sphere: Sphere primitive, HitRecord and ray-sphere intersection
    rect: Finite rectangle primitive with ray-rect intersection

All intersection routines are implemented as Taichi functions (@ti.func).
Every routine takes the closest hit found so far and returns the new
closest hit, so a scene can fold one record through primitives of any type:
    rec = hit_sphere(ray, sphere, rec)
    rec = hit_rect(ray, rect, rec)
"""

from .rect import PARALLEL_EPSILON, Rect, hit_rect
from .sphere import T_EPSILON, HitRecord, Sphere, empty_hit_record, hit_sphere, make_sphere

__all__ = [
    "HitRecord",
    "empty_hit_record",
    "T_EPSILON",
    "Sphere",
    "hit_sphere",
    "make_sphere",
    "Rect",
    "hit_rect",
    "PARALLEL_EPSILON",
]
