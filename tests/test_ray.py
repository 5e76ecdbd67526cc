"""Unit tests for the ray module.

Tests cover:
- Ray dataclass and ray_at function
- Vector utility functions (dot, cross, normalize, length, reflect)
- Degenerate direction detection
- Python-side vector validation
"""

import numpy as np
import pytest
import taichi as ti


class TestRayBasics:
    """Tests for Ray dataclass and basic operations."""

    def test_ray_at(self):
        """Test ray_at computes origin + t * direction."""
        from src.flytrace.core.ray import Ray, ray_at, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(1.0, 2.0, 3.0), direction=vec3(0.0, 0.0, -1.0))
            result[None] = ray_at(ray, 2.5)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-6
        assert abs(r[1] - 2.0) < 1e-6
        assert abs(r[2] - 0.5) < 1e-6

    def test_make_ray_keeps_direction(self):
        """Test make_ray stores origin and direction unchanged."""
        from src.flytrace.core.ray import make_ray, vec3

        origin = ti.field(dtype=ti.math.vec3, shape=())
        direction = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(0.0, 2.0, 5.0), vec3(0.0, 1.0, 0.0))
            origin[None] = ray.origin
            direction[None] = ray.direction

        test_kernel()
        assert abs(origin[None][1] - 2.0) < 1e-6
        assert abs(origin[None][2] - 5.0) < 1e-6
        assert abs(direction[None][1] - 1.0) < 1e-6


class TestVectorUtilities:
    """Tests for the vector helpers used during shading."""

    def test_length_and_normalize(self):
        """A 3-4-0 vector has length 5 and normalizes to (0.6, 0.8, 0)."""
        from src.flytrace.core.ray import length, normalize, vec3

        len_result = ti.field(dtype=ti.f32, shape=())
        norm_result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            v = vec3(3.0, 4.0, 0.0)
            len_result[None] = length(v)
            norm_result[None] = normalize(v)

        test_kernel()
        assert abs(len_result[None] - 5.0) < 1e-5
        n = norm_result[None]
        assert abs(n[0] - 0.6) < 1e-6
        assert abs(n[1] - 0.8) < 1e-6
        assert abs(n[2]) < 1e-6

    def test_dot_and_cross(self):
        """x cross y is z, and perpendicular vectors have zero dot product."""
        from src.flytrace.core.ray import cross, dot, vec3

        dot_result = ti.field(dtype=ti.f32, shape=())
        cross_result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            x = vec3(1.0, 0.0, 0.0)
            y = vec3(0.0, 1.0, 0.0)
            dot_result[None] = dot(x, y)
            cross_result[None] = cross(x, y)

        test_kernel()
        assert abs(dot_result[None]) < 1e-6
        c = cross_result[None]
        assert abs(c[0]) < 1e-6
        assert abs(c[1]) < 1e-6
        assert abs(c[2] - 1.0) < 1e-6

    def test_reflect_off_floor(self):
        """A ray going down and forward bounces up and forward."""
        from src.flytrace.core.ray import reflect, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            incident = vec3(0.0, -1.0, -1.0)
            result[None] = reflect(incident, vec3(0.0, 1.0, 0.0))

        test_kernel()
        r = result[None]
        assert abs(r[0]) < 1e-6
        assert abs(r[1] - 1.0) < 1e-6
        assert abs(r[2] + 1.0) < 1e-6

    def test_near_zero(self):
        """near_zero flags only vectors with every component tiny."""
        from src.flytrace.core.ray import near_zero, vec3

        tiny = ti.field(dtype=ti.i32, shape=())
        mixed = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            tiny[None] = near_zero(vec3(1e-10, -1e-10, 0.0))
            mixed[None] = near_zero(vec3(1e-10, 0.5, 0.0))

        test_kernel()
        assert tiny[None] == 1
        assert mixed[None] == 0


class TestPythonValidation:
    """Tests for the Python-side vector helpers."""

    def test_as_vector(self):
        from src.flytrace.core.ray import as_vector

        v = as_vector((1, 2, 3))
        assert v.dtype == np.float64
        assert v.tolist() == [1.0, 2.0, 3.0]

    @pytest.mark.parametrize("bad", [(1.0, 2.0), (1.0, 2.0, 3.0, 4.0), (0.0, float("nan"), 1.0)])
    def test_as_vector_rejects_malformed(self, bad):
        from src.flytrace.core.ray import as_vector

        with pytest.raises(ValueError):
            as_vector(bad, "center")

    def test_unit_vector(self):
        from src.flytrace.core.ray import unit_vector

        v = unit_vector((0.0, 0.0, -2.0))
        assert np.allclose(v, [0.0, 0.0, -1.0])

    def test_unit_vector_rejects_zero_length(self):
        from src.flytrace.core.ray import unit_vector

        with pytest.raises(ValueError, match="normal"):
            unit_vector((0.0, 0.0, 0.0), "normal")
