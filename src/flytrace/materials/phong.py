"""Phong-style local shading with a single fixed point light.

This module implements the local illumination model used at every ray hit:
an ambient term, a Lambertian diffuse term and a white specular highlight,
all driven by one point light at a constant world position.

The colour returned is:
    color * 0.2                                   (ambient)
  + color * max(0, N . L) * 0.6                   (diffuse)
  + max(0, V . reflect(-L, N))^32 * specular      (specular, all channels)

There is no distance attenuation and no shadow ray: objects never occlude
the light. The sum is left unclamped; clamping happens when the frame is
quantized.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.flytrace.materials.phong import Material, compute_lighting
    >>> # Use within a Taichi kernel:
    >>> # color = compute_lighting(point, normal, view_dir, material)
"""

import math

import taichi as ti
import taichi.math as tm

from src.flytrace.core.ray import reflect

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Lighting Constants
# =============================================================================

# World position of the single point light
LIGHT_POSITION = vec3(0.0, 4.0, 0.0)

AMBIENT_STRENGTH = 0.2
DIFFUSE_STRENGTH = 0.6


@ti.dataclass
class Material:
    """Surface material properties.

    Attributes:
        color: Base colour (RGB, channels in [0, 1]).
        reflectivity: Fraction of the outgoing colour taken from the mirror
            reflection, in [0, 1].
        specular: Non-negative multiplier for the white highlight.
    """

    color: vec3
    reflectivity: ti.f32
    specular: ti.f32


@ti.func
def make_material(color: vec3, reflectivity: ti.f32, specular: ti.f32) -> Material:
    """Create a material inside a Taichi scope."""
    return Material(color=color, reflectivity=reflectivity, specular=specular)


@ti.func
def specular_power(x: ti.f32) -> ti.f32:
    """Raise x to the 32nd power with five repeated squarings."""
    p = x * x  # 2
    p = p * p  # 4
    p = p * p  # 8
    p = p * p  # 16
    p = p * p  # 32
    return p


@ti.func
def compute_lighting(point: vec3, normal: vec3, view_dir: vec3, material: Material) -> vec3:
    """Compute the local colour at a surface point.

    Args:
        point: The world-space hit point.
        normal: The unit surface normal at the hit point.
        view_dir: Unit vector from the hit point back toward the viewer
            (the negated ray direction).
        material: The material of the hit surface.

    Returns:
        ambient + diffuse + specular, unclamped.
    """
    light_dir = tm.normalize(LIGHT_POSITION - point)

    ambient = material.color * AMBIENT_STRENGTH

    diff = ti.max(tm.dot(normal, light_dir), 0.0)
    diffuse = material.color * (diff * DIFFUSE_STRENGTH)

    reflect_dir = reflect(-light_dir, normal)
    spec = specular_power(ti.max(tm.dot(view_dir, reflect_dir), 0.0))
    highlight = spec * material.specular
    specular = vec3(highlight, highlight, highlight)

    return ambient + diffuse + specular


# =============================================================================
# Python-side Validation
# =============================================================================


def validate_material(
    color: tuple[float, float, float],
    reflectivity: float,
    specular: float,
) -> None:
    """Check material parameters before they are written to a scene.

    Args:
        color: Base colour as (R, G, B), each component in [0, 1].
        reflectivity: Mirror fraction in [0, 1].
        specular: Highlight multiplier, finite and non-negative.

    Raises:
        ValueError: If any parameter is out of range or not finite.
    """
    if len(color) != 3:
        raise ValueError(f"Color must have 3 components, got {len(color)}")

    for i, component in enumerate(color):
        if not math.isfinite(component) or component < 0.0 or component > 1.0:
            raise ValueError(f"Color component {i} = {component} is outside [0, 1].")

    if not math.isfinite(reflectivity) or reflectivity < 0.0 or reflectivity > 1.0:
        raise ValueError(
            f"Reflectivity = {reflectivity} is outside [0, 1]. "
            "Reflectivity must be between 0 (matte) and 1 (perfect mirror)."
        )

    if not math.isfinite(specular) or specular < 0.0:
        raise ValueError(f"Specular = {specular} must be finite and non-negative.")
