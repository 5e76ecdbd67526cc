"""Scene container holding the primitives a frame is rendered against.

This module provides the Scene class, an explicit caller-owned value that
stores spheres and rects in Taichi fields and resolves the closest hit for a
ray by a linear scan over every primitive.

The Scene maintains:
- Structure-of-Arrays storage for sphere and rect geometry and materials
- Construction-time validation (non-degenerate vectors, material ranges)
- A fixed capacity chosen at construction; exceeding it raises
- Python-side records of every primitive for inspection and serialization

The scene is built once before rendering. It must not be modified while a
frame kernel is running.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.flytrace.scene.manager import Scene
    >>> scene = Scene()
    >>> scene.add_rect(
    ...     point=(0, 0, 0), normal=(0, 1, 0), u=(1, 0, 0), v=(0, 0, 1),
    ...     width=6.0, height=5.0, color=(0.2, 0.2, 1.0), reflectivity=0.3,
    ... )
    >>> scene.add_sphere(center=(0, 2, 0), radius=1.0, color=(1.0, 1.0, 1.0))
    >>> hit = scene.cast_ray(origin=(0, 2, 5), direction=(0, 0, -1))
    >>> hit.t
    4.0
"""

from dataclasses import dataclass, field
from typing import Any

import numpy as np
import taichi as ti
import taichi.math as tm

from src.flytrace.core.ray import Ray, as_vector, make_ray, to_vec3, unit_vector
from src.flytrace.geometry.rect import Rect, hit_rect
from src.flytrace.geometry.sphere import HitRecord, Sphere, empty_hit_record, hit_sphere, make_sphere
from src.flytrace.materials.phong import make_material, validate_material

# Type alias for 3D vectors
vec3 = tm.vec3

# Default primitive capacity per type
MAX_SPHERES = 64
MAX_RECTS = 64

# |dot| above this between two rect axes counts as not orthogonal
ORTHOGONALITY_TOLERANCE = 1e-4


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: The center of the sphere.
        radius: The radius of the sphere.
        color: Base colour of the sphere's material.
        reflectivity: Mirror fraction of the sphere's material.
        specular: Highlight multiplier of the sphere's material.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    color: tuple[float, float, float]
    reflectivity: float
    specular: float


@dataclass
class RectInfo:
    """Information about a rect in the scene.

    The normal and axes are stored normalized, as they were written to the
    Taichi fields.
    """

    rect_index: int
    point: tuple[float, float, float]
    normal: tuple[float, float, float]
    u: tuple[float, float, float]
    v: tuple[float, float, float]
    width: float
    height: float
    color: tuple[float, float, float]
    reflectivity: float
    specular: float


@dataclass
class RayHit:
    """Python-side result of casting a single ray into the scene.

    Attributes:
        t: Distance along the (normalized) ray to the hit.
        point: The world-space hit point.
        normal: The surface normal at the hit point.
        color: Base colour of the hit material.
        reflectivity: Reflectivity of the hit material.
        specular: Specular multiplier of the hit material.
    """

    t: float
    point: tuple[float, float, float]
    normal: tuple[float, float, float]
    color: tuple[float, float, float]
    reflectivity: float
    specular: float


@dataclass
class SceneConfig:
    """Plain-data description of a scene.

    Attributes:
        spheres: List of sphere configurations (keyword arguments of
            Scene.add_sphere).
        rects: List of rect configurations (keyword arguments of
            Scene.add_rect).
    """

    spheres: list[dict[str, Any]] = field(default_factory=list)
    rects: list[dict[str, Any]] = field(default_factory=list)


def _as_tuple(v: np.ndarray) -> tuple[float, float, float]:
    return (float(v[0]), float(v[1]), float(v[2]))


def _check_sphere(
    center: tuple[float, float, float],
    radius: float,
    color: tuple[float, float, float],
    reflectivity: float = 0.0,
    specular: float = 0.0,
) -> np.ndarray:
    """Validate sphere parameters and return the center as an array."""
    center_arr = as_vector(center, "center")
    if not np.isfinite(radius) or radius <= 0.0:
        raise ValueError(f"Sphere radius must be positive and finite, got {radius}")
    validate_material(color, reflectivity, specular)
    return center_arr


def _check_rect(
    point: tuple[float, float, float],
    normal: tuple[float, float, float],
    u: tuple[float, float, float],
    v: tuple[float, float, float],
    width: float,
    height: float,
    color: tuple[float, float, float],
    reflectivity: float = 0.0,
    specular: float = 0.0,
) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Validate rect parameters.

    Returns:
        Tuple of (point, normal, u, v) arrays with the three axes normalized.
    """
    point_arr = as_vector(point, "point")
    n = unit_vector(normal, "normal")
    u_axis = unit_vector(u, "u")
    v_axis = unit_vector(v, "v")

    for (name_a, a), (name_b, b) in (
        (("normal", n), ("u", u_axis)),
        (("normal", n), ("v", v_axis)),
        (("u", u_axis), ("v", v_axis)),
    ):
        d = float(np.dot(a, b))
        if abs(d) > ORTHOGONALITY_TOLERANCE:
            raise ValueError(f"Rect {name_a} and {name_b} are not orthogonal (dot = {d:.6f})")

    if not (np.isfinite(width) and np.isfinite(height)) or width <= 0.0 or height <= 0.0:
        raise ValueError(
            f"Rect extents must be positive and finite, got width={width}, height={height}"
        )
    validate_material(color, reflectivity, specular)
    return point_arr, n, u_axis, v_axis


def _sphere_entry(sphere_config: dict[str, Any]) -> dict[str, Any]:
    try:
        return dict(
            center=tuple(sphere_config["center"]),
            radius=sphere_config["radius"],
            color=tuple(sphere_config["color"]),
            reflectivity=sphere_config.get("reflectivity", 0.0),
            specular=sphere_config.get("specular", 0.0),
        )
    except KeyError as e:
        raise ValueError(f"Sphere configuration is missing {e}") from e


def _rect_entry(rect_config: dict[str, Any]) -> dict[str, Any]:
    try:
        return dict(
            point=tuple(rect_config["point"]),
            normal=tuple(rect_config["normal"]),
            u=tuple(rect_config["u"]),
            v=tuple(rect_config["v"]),
            width=rect_config["width"],
            height=rect_config["height"],
            color=tuple(rect_config["color"]),
            reflectivity=rect_config.get("reflectivity", 0.0),
            specular=rect_config.get("specular", 0.0),
        )
    except KeyError as e:
        raise ValueError(f"Rect configuration is missing {e}") from e


@ti.data_oriented
class Scene:
    """Fixed-capacity collection of spheres and rects.

    Each Scene owns its Taichi fields, so several scenes can coexist and be
    passed to kernels as template arguments.

    Attributes:
        spheres: List of SphereInfo for all spheres in the scene.
        rects: List of RectInfo for all rects in the scene.

    Example:
        >>> scene = Scene(max_spheres=4, max_rects=8)
        >>> scene.add_sphere((0, 2, 0), 1.0, color=(1.0, 1.0, 1.0), reflectivity=0.08)
        0
    """

    def __init__(self, max_spheres: int = MAX_SPHERES, max_rects: int = MAX_RECTS) -> None:
        """Allocate storage for an empty scene.

        Args:
            max_spheres: Maximum number of spheres the scene can hold.
            max_rects: Maximum number of rects the scene can hold.

        Raises:
            ValueError: If either capacity is less than 1.
        """
        if max_spheres < 1 or max_rects < 1:
            raise ValueError(
                f"Scene capacities must be at least 1, got "
                f"max_spheres={max_spheres}, max_rects={max_rects}"
            )

        self.max_spheres = max_spheres
        self.max_rects = max_rects
        self.spheres: list[SphereInfo] = []
        self.rects: list[RectInfo] = []

        # Sphere storage: Structure of Arrays layout
        self.sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=max_spheres)
        self.sphere_radii = ti.field(dtype=ti.f32, shape=max_spheres)
        self.sphere_colors = ti.Vector.field(3, dtype=ti.f32, shape=max_spheres)
        self.sphere_reflectivity = ti.field(dtype=ti.f32, shape=max_spheres)
        self.sphere_specular = ti.field(dtype=ti.f32, shape=max_spheres)
        self.num_spheres = ti.field(dtype=ti.i32, shape=())

        # Rect storage
        self.rect_points = ti.Vector.field(3, dtype=ti.f32, shape=max_rects)
        self.rect_normals = ti.Vector.field(3, dtype=ti.f32, shape=max_rects)
        self.rect_u = ti.Vector.field(3, dtype=ti.f32, shape=max_rects)
        self.rect_v = ti.Vector.field(3, dtype=ti.f32, shape=max_rects)
        self.rect_extents = ti.Vector.field(2, dtype=ti.f32, shape=max_rects)
        self.rect_colors = ti.Vector.field(3, dtype=ti.f32, shape=max_rects)
        self.rect_reflectivity = ti.field(dtype=ti.f32, shape=max_rects)
        self.rect_specular = ti.field(dtype=ti.f32, shape=max_rects)
        self.num_rects = ti.field(dtype=ti.i32, shape=())

        # Single-ray probe results for cast_ray()
        self._probe_hit = ti.field(dtype=ti.i32, shape=())
        self._probe_t = ti.field(dtype=ti.f32, shape=())
        self._probe_point = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._probe_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._probe_color = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._probe_reflectivity = ti.field(dtype=ti.f32, shape=())
        self._probe_specular = ti.field(dtype=ti.f32, shape=())

        self.clear()

    def clear(self) -> None:
        """Remove all primitives from the scene.

        The field data is not zeroed; it is overwritten as new primitives
        are added.
        """
        self.num_spheres[None] = 0
        self.num_rects[None] = 0
        self.spheres.clear()
        self.rects.clear()

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        color: tuple[float, float, float],
        reflectivity: float = 0.0,
        specular: float = 0.0,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere (must be positive).
            color: Base colour as (R, G, B), each in [0, 1].
            reflectivity: Mirror fraction in [0, 1].
            specular: Highlight multiplier, non-negative.

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If the geometry or material is invalid.
        """
        center_arr = _check_sphere(center, radius, color, reflectivity, specular)

        idx = self.num_spheres[None]
        if idx >= self.max_spheres:
            raise RuntimeError(f"Maximum number of spheres ({self.max_spheres}) exceeded")

        self.sphere_centers[idx] = center_arr.tolist()
        self.sphere_radii[idx] = radius
        self.sphere_colors[idx] = [float(c) for c in color]
        self.sphere_reflectivity[idx] = reflectivity
        self.sphere_specular[idx] = specular
        self.num_spheres[None] = idx + 1

        self.spheres.append(
            SphereInfo(
                sphere_index=idx,
                center=_as_tuple(center_arr),
                radius=float(radius),
                color=(float(color[0]), float(color[1]), float(color[2])),
                reflectivity=float(reflectivity),
                specular=float(specular),
            )
        )
        return idx

    def add_rect(
        self,
        point: tuple[float, float, float],
        normal: tuple[float, float, float],
        u: tuple[float, float, float],
        v: tuple[float, float, float],
        width: float,
        height: float,
        color: tuple[float, float, float],
        reflectivity: float = 0.0,
        specular: float = 0.0,
    ) -> int:
        """Add a finite rectangle to the scene.

        The normal, u and v are normalized independently and must be
        mutually orthogonal. The rect spans width along u and height along
        v, centred on point.

        Args:
            point: The anchor (centre) point as (x, y, z).
            normal: The plane normal.
            u: In-plane axis for the width.
            v: In-plane axis for the height.
            width: Extent along u (must be positive).
            height: Extent along v (must be positive).
            color: Base colour as (R, G, B), each in [0, 1].
            reflectivity: Mirror fraction in [0, 1].
            specular: Highlight multiplier, non-negative.

        Returns:
            The index of the added rect.

        Raises:
            RuntimeError: If the maximum number of rects is exceeded.
            ValueError: If a vector is zero-length, the axes are not
                orthogonal, an extent is not positive or the material is
                invalid.
        """
        point_arr, n, u_axis, v_axis = _check_rect(
            point, normal, u, v, width, height, color, reflectivity, specular
        )

        idx = self.num_rects[None]
        if idx >= self.max_rects:
            raise RuntimeError(f"Maximum number of rects ({self.max_rects}) exceeded")

        self.rect_points[idx] = point_arr.tolist()
        self.rect_normals[idx] = n.tolist()
        self.rect_u[idx] = u_axis.tolist()
        self.rect_v[idx] = v_axis.tolist()
        self.rect_extents[idx] = [float(width), float(height)]
        self.rect_colors[idx] = [float(c) for c in color]
        self.rect_reflectivity[idx] = reflectivity
        self.rect_specular[idx] = specular
        self.num_rects[None] = idx + 1

        self.rects.append(
            RectInfo(
                rect_index=idx,
                point=_as_tuple(point_arr),
                normal=_as_tuple(n),
                u=_as_tuple(u_axis),
                v=_as_tuple(v_axis),
                width=float(width),
                height=float(height),
                color=(float(color[0]), float(color[1]), float(color[2])),
                reflectivity=float(reflectivity),
                specular=float(specular),
            )
        )
        return idx

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return int(self.num_spheres[None])

    def get_rect_count(self) -> int:
        """Get the number of rects in the scene."""
        return int(self.num_rects[None])

    def get_primitive_count(self) -> int:
        """Get the total number of primitives in the scene."""
        return self.get_sphere_count() + self.get_rect_count()

    # =========================================================================
    # Ray Queries (Taichi scope)
    # =========================================================================

    @ti.func
    def _sphere_at(self, i: ti.i32) -> Sphere:
        material = make_material(
            self.sphere_colors[i], self.sphere_reflectivity[i], self.sphere_specular[i]
        )
        return make_sphere(self.sphere_centers[i], self.sphere_radii[i], material)

    @ti.func
    def _rect_at(self, i: ti.i32) -> Rect:
        material = make_material(
            self.rect_colors[i], self.rect_reflectivity[i], self.rect_specular[i]
        )
        extents = self.rect_extents[i]
        return Rect(
            point=self.rect_points[i],
            normal=self.rect_normals[i],
            u=self.rect_u[i],
            v=self.rect_v[i],
            width=extents[0],
            height=extents[1],
            material=material,
        )

    @ti.func
    def trace(self, ray: Ray) -> HitRecord:
        """Find the closest hit for a ray across every primitive.

        Every sphere and then every rect is offered the running closest
        hit. Each test only replaces it with a strictly closer hit, so the
        scan order does not affect the result.

        Args:
            ray: The ray to trace. Its direction must be unit length.

        Returns:
            The closest HitRecord, with hit == 0 if nothing was hit.
        """
        closest = empty_hit_record()

        # Serial even when inlined at the top level of a kernel
        ti.loop_config(serialize=True)
        for i in range(self.num_spheres[None]):
            closest = hit_sphere(ray, self._sphere_at(i), closest)

        ti.loop_config(serialize=True)
        for i in range(self.num_rects[None]):
            closest = hit_rect(ray, self._rect_at(i), closest)

        return closest

    @ti.kernel
    def _cast_ray_kernel(self, origin: vec3, direction: vec3):
        rec = self.trace(make_ray(origin, direction))
        self._probe_hit[None] = rec.hit
        self._probe_t[None] = rec.t
        self._probe_point[None] = rec.point
        self._probe_normal[None] = rec.normal
        self._probe_color[None] = rec.material.color
        self._probe_reflectivity[None] = rec.material.reflectivity
        self._probe_specular[None] = rec.material.specular

    def cast_ray(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
    ) -> RayHit | None:
        """Trace a single ray from Python and report the closest hit.

        This is a Python-callable function for tools and tests. Rendering
        uses trace() from inside the frame kernel.

        Args:
            origin: The ray origin as (x, y, z).
            direction: The ray direction; normalized before tracing.

        Returns:
            A RayHit for the closest hit, or None if the ray hits nothing.

        Raises:
            ValueError: If direction is zero-length.
        """
        origin_arr = as_vector(origin, "origin")
        direction_arr = unit_vector(direction, "direction")
        self._cast_ray_kernel(to_vec3(origin_arr), to_vec3(direction_arr))

        if self._probe_hit[None] == 0:
            return None

        return RayHit(
            t=float(self._probe_t[None]),
            point=_as_tuple(self._probe_point[None]),
            normal=_as_tuple(self._probe_normal[None]),
            color=_as_tuple(self._probe_color[None]),
            reflectivity=float(self._probe_reflectivity[None]),
            specular=float(self._probe_specular[None]),
        )

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object.

        Returns:
            A SceneConfig whose entries can be passed back to add_sphere()
            and add_rect() as keyword arguments.
        """
        config = SceneConfig()

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "color": list(sphere.color),
                    "reflectivity": sphere.reflectivity,
                    "specular": sphere.specular,
                }
            )

        for rect in self.rects:
            config.rects.append(
                {
                    "point": list(rect.point),
                    "normal": list(rect.normal),
                    "u": list(rect.u),
                    "v": list(rect.v),
                    "width": rect.width,
                    "height": rect.height,
                    "color": list(rect.color),
                    "reflectivity": rect.reflectivity,
                    "specular": rect.specular,
                }
            )

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Every entry is validated before the current scene is cleared, so a
        failed load leaves the scene unchanged. The primitives are then
        added in order.

        Args:
            config: The scene configuration to load.

        Raises:
            ValueError: If an entry is missing a required key or is invalid.
            RuntimeError: If the configuration exceeds the scene capacity.
        """
        sphere_entries = [_sphere_entry(c) for c in config.spheres]
        rect_entries = [_rect_entry(c) for c in config.rects]

        for entry in sphere_entries:
            _check_sphere(**entry)
        for entry in rect_entries:
            _check_rect(**entry)

        if len(sphere_entries) > self.max_spheres:
            raise RuntimeError(f"Maximum number of spheres ({self.max_spheres}) exceeded")
        if len(rect_entries) > self.max_rects:
            raise RuntimeError(f"Maximum number of rects ({self.max_rects}) exceeded")

        self.clear()

        for entry in sphere_entries:
            self.add_sphere(**entry)
        for entry in rect_entries:
            self.add_rect(**entry)

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {"spheres": config.spheres, "rects": config.rects}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary.

        Args:
            data: Dictionary with 'spheres' and 'rects' keys.

        Raises:
            ValueError: If the dictionary has keys other than 'spheres'
                and 'rects', or an entry is invalid.
        """
        unknown = set(data) - {"spheres", "rects"}
        if unknown:
            raise ValueError(f"Unknown primitive types: {sorted(unknown)}")

        config = SceneConfig(
            spheres=data.get("spheres", []),
            rects=data.get("rects", []),
        )
        self.from_config(config)

    def __repr__(self) -> str:
        return (
            f"Scene(spheres={self.get_sphere_count()}/{self.max_spheres}, "
            f"rects={self.get_rect_count()}/{self.max_rects})"
        )
