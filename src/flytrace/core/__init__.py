"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    ray: Ray data structure and vector utilities
    integrator: Depth-limited mirror reflection integrator
    frame: Per-frame camera ray generation and pixel packing

The core module resolves one colour per camera ray by combining local
shading with mirror-reflected colour, then quantizes the result into a
packed 0xRRGGBB buffer for the host display layer.

All per-pixel work runs inside Taichi kernels so that the frame loop is
parallelized across the CPU thread pool.
"""

from .ray import (
    Ray,
    as_vector,
    cross,
    dot,
    length,
    make_ray,
    near_zero,
    normalize,
    ray_at,
    reflect,
    to_vec3,
    unit_vector,
    vec3,
)

# Note: integrator and frame are NOT imported here to avoid circular imports.
# Import directly from src.flytrace.core.integrator or src.flytrace.core.frame.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "near_zero",
    "as_vector",
    "unit_vector",
    "to_vec3",
]
