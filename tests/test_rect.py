"""Unit tests for rect intersection.

Tests cover:
- Ray hitting an axis-aligned ground rect at the analytic distance
- Rays parallel to the plane never hitting
- Hits outside the extents being rejected
- Hits on the boundary being accepted
- Closest-hit fold against a nearer record
"""

import pytest
import taichi as ti


def _make_ground_kernel():
    """Build a kernel that traces one ray against a 6x5 ground rect at y = 0."""
    from src.flytrace.core.ray import make_ray
    from src.flytrace.geometry.rect import Rect, hit_rect, vec3
    from src.flytrace.geometry.sphere import empty_hit_record
    from src.flytrace.materials.phong import Material

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    point = ti.field(dtype=ti.math.vec3, shape=())
    normal = ti.field(dtype=ti.math.vec3, shape=())

    @ti.kernel
    def trace_ground(origin: vec3, direction: vec3):
        material = Material(color=vec3(0.2, 0.2, 1.0), reflectivity=0.3, specular=0.5)
        ground = Rect(
            point=vec3(0.0, 0.0, 0.0),
            normal=vec3(0.0, 1.0, 0.0),
            u=vec3(1.0, 0.0, 0.0),
            v=vec3(0.0, 0.0, 1.0),
            width=6.0,
            height=5.0,
            material=material,
        )
        rec = hit_rect(make_ray(origin, direction), ground, empty_hit_record())
        hit[None] = rec.hit
        t_val[None] = rec.t
        point[None] = rec.point
        normal[None] = rec.normal

    return trace_ground, hit, t_val, point, normal


class TestRectIntersection:
    """Tests for ray-rect intersection."""

    @pytest.mark.parametrize(
        "origin, direction",
        [
            ((0.0, 2.0, 0.0), (0.0, -1.0, 0.0)),
            ((0.0, 2.0, 5.0), (0.0, -0.6, -0.8)),
            ((1.0, 3.0, 1.0), (0.48, -0.8, -0.36)),
        ],
    )
    def test_ground_distance(self, origin, direction):
        """For a downward ray, t = origin.y / -direction.y and the hit lies on y = 0."""
        from src.flytrace.geometry.rect import vec3

        trace_ground, hit, t_val, point, normal = _make_ground_kernel()
        trace_ground(vec3(*origin), vec3(*direction))

        expected_t = origin[1] / -direction[1]
        assert hit[None] == 1
        assert abs(t_val[None] - expected_t) < 1e-4
        assert abs(point[None][1]) < 1e-4
        assert abs(normal[None][1] - 1.0) < 1e-6

    @pytest.mark.parametrize(
        "direction",
        [(1.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.6, 0.0, 0.8)],
    )
    def test_parallel_ray_never_hits(self, direction):
        """Rays parallel to the plane miss even when they start on it."""
        from src.flytrace.geometry.rect import vec3

        trace_ground, hit, _, _, _ = _make_ground_kernel()
        trace_ground(vec3(0.0, 0.0, 0.0), vec3(*direction))
        assert hit[None] == 0

        trace_ground(vec3(0.0, 1.0, 0.0), vec3(*direction))
        assert hit[None] == 0

    def test_outside_extents_misses(self):
        """A hit beyond half the width along u is rejected."""
        from src.flytrace.geometry.rect import vec3

        trace_ground, hit, _, _, _ = _make_ground_kernel()
        trace_ground(vec3(3.5, 1.0, 0.0), vec3(0.0, -1.0, 0.0))
        assert hit[None] == 0

        # Depth is 5, so z = 2.6 is outside along v
        trace_ground(vec3(0.0, 1.0, 2.6), vec3(0.0, -1.0, 0.0))
        assert hit[None] == 0

    def test_inside_extents_near_edge_hits(self):
        """Hits just inside the edges are accepted."""
        from src.flytrace.geometry.rect import vec3

        trace_ground, hit, _, _, _ = _make_ground_kernel()
        trace_ground(vec3(2.99, 1.0, 2.49), vec3(0.0, -1.0, 0.0))
        assert hit[None] == 1

    def test_back_side_hit(self):
        """The rect is two-sided; a ray from below hits with the fixed normal."""
        from src.flytrace.geometry.rect import vec3

        trace_ground, hit, t_val, _, normal = _make_ground_kernel()
        trace_ground(vec3(0.0, -2.0, 0.0), vec3(0.0, 1.0, 0.0))
        assert hit[None] == 1
        assert abs(t_val[None] - 2.0) < 1e-5
        assert abs(normal[None][1] - 1.0) < 1e-6

    def test_ray_leaving_plane_misses(self):
        """A ray pointing away from the plane has negative t and misses."""
        from src.flytrace.geometry.rect import vec3

        trace_ground, hit, _, _, _ = _make_ground_kernel()
        trace_ground(vec3(0.0, 2.0, 0.0), vec3(0.0, 1.0, 0.0))
        assert hit[None] == 0

    def test_nearer_record_is_kept(self):
        """A rect behind the current closest hit does not replace it."""
        from src.flytrace.core.ray import make_ray
        from src.flytrace.geometry.rect import Rect, hit_rect, vec3
        from src.flytrace.geometry.sphere import HitRecord
        from src.flytrace.materials.phong import Material

        t_val = ti.field(dtype=ti.f32, shape=())
        color = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            near_mat = Material(color=vec3(1.0, 0.0, 0.0), reflectivity=0.0, specular=0.0)
            closest = HitRecord(
                hit=1,
                t=1.0,
                point=vec3(0.0, 1.0, 0.0),
                normal=vec3(0.0, 1.0, 0.0),
                material=near_mat,
            )
            floor_mat = Material(color=vec3(0.0, 1.0, 0.0), reflectivity=0.0, specular=0.0)
            floor = Rect(
                point=vec3(0.0, 0.0, 0.0),
                normal=vec3(0.0, 1.0, 0.0),
                u=vec3(1.0, 0.0, 0.0),
                v=vec3(0.0, 0.0, 1.0),
                width=10.0,
                height=10.0,
                material=floor_mat,
            )
            ray = make_ray(vec3(0.0, 2.0, 0.0), vec3(0.0, -1.0, 0.0))
            rec = hit_rect(ray, floor, closest)
            t_val[None] = rec.t
            color[None] = rec.material.color

        test_kernel()
        assert abs(t_val[None] - 1.0) < 1e-6
        assert abs(color[None][0] - 1.0) < 1e-6
        assert abs(color[None][1]) < 1e-6
