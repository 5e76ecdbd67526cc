"""Materials module for local shading.

This module implements the surface material and the local illumination
model evaluated at every ray hit:

Components:
    phong: Material dataclass, fixed point light and ambient + diffuse +
        specular shading

Mirror reflection is not a separate material type: every material carries
a reflectivity in [0, 1] that the integrator uses to blend local shading
with the colour seen along the reflected ray.

All shading computations are implemented as Taichi functions.
"""

from .phong import (
    AMBIENT_STRENGTH,
    DIFFUSE_STRENGTH,
    LIGHT_POSITION,
    Material,
    compute_lighting,
    make_material,
    specular_power,
    validate_material,
)

__all__ = [
    "Material",
    "make_material",
    "compute_lighting",
    "specular_power",
    "validate_material",
    "LIGHT_POSITION",
    "AMBIENT_STRENGTH",
    "DIFFUSE_STRENGTH",
]
