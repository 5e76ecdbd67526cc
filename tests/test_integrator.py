"""Tests for the depth-limited reflection integrator.

The test scene is a floor at y = 0 and a ceiling at y = 3, both below the
light at (0, 4, 0). A ray shot straight down from (0, 2, 0) hits the floor
directly under the light, so every term has a closed form:
    floor local   = 0.8 * floor color (ambient + full diffuse, no specular)
    ceiling local = 0.2 * ceiling color (faces away from the light)

Note: Imports are done inside test methods so that Taichi is initialized by
the conftest.py fixture before any fields are created.
"""

import pytest

FLOOR_COLOR = (0.5, 0.25, 1.0)
CEILING_COLOR = (1.0, 0.5, 0.0)

FLOOR_LOCAL = tuple(0.8 * c for c in FLOOR_COLOR)
CEILING_LOCAL = tuple(0.2 * c for c in CEILING_COLOR)


def _build_scene(floor_reflectivity=0.5, ceiling_reflectivity=0.0, with_ceiling=True):
    from src.flytrace.scene.manager import Scene

    scene = Scene(max_spheres=1, max_rects=2)
    scene.add_rect(
        point=(0.0, 0.0, 0.0),
        normal=(0.0, 1.0, 0.0),
        u=(1.0, 0.0, 0.0),
        v=(0.0, 0.0, 1.0),
        width=20.0,
        height=20.0,
        color=FLOOR_COLOR,
        reflectivity=floor_reflectivity,
    )
    if with_ceiling:
        scene.add_rect(
            point=(0.0, 3.0, 0.0),
            normal=(0.0, -1.0, 0.0),
            u=(1.0, 0.0, 0.0),
            v=(0.0, 0.0, 1.0),
            width=20.0,
            height=20.0,
            color=CEILING_COLOR,
            reflectivity=ceiling_reflectivity,
        )
    return scene


def _assert_color(actual, expected, tol=1e-5):
    for a, e in zip(actual, expected):
        assert abs(a - e) < tol, f"{actual} != {expected}"


class TestBounceBudget:
    """Tests for the bounce budget contract."""

    def test_budget_one_is_local_only(self):
        """With budget 1 the reflectivity is ignored."""
        from src.flytrace.core.integrator import shade

        color = shade(_build_scene(), (0.0, 2.0, 0.0), (0.0, -1.0, 0.0), bounce_budget=1)
        _assert_color(color, FLOOR_LOCAL)

    def test_budget_one_matches_non_reflective(self):
        """Budget 1 on a reflective floor equals any budget on a matte floor."""
        from src.flytrace.core.integrator import shade

        reflective = shade(
            _build_scene(floor_reflectivity=0.5), (0.0, 2.0, 0.0), (0.0, -1.0, 0.0), 1
        )
        matte = shade(_build_scene(floor_reflectivity=0.0), (0.0, 2.0, 0.0), (0.0, -1.0, 0.0), 3)
        _assert_color(reflective, matte)

    @pytest.mark.parametrize("budget", [0, -2])
    def test_non_positive_budget_is_local_only(self, budget):
        from src.flytrace.core.integrator import shade

        color = shade(_build_scene(), (0.0, 2.0, 0.0), (0.0, -1.0, 0.0), bounce_budget=budget)
        _assert_color(color, FLOOR_LOCAL)

    def test_budget_two_blends_one_reflection(self):
        """local * (1 - r) + reflected * r with r = 0.5."""
        from src.flytrace.core.integrator import shade

        color = shade(_build_scene(), (0.0, 2.0, 0.0), (0.0, -1.0, 0.0), bounce_budget=2)
        expected = tuple(0.5 * f + 0.5 * c for f, c in zip(FLOOR_LOCAL, CEILING_LOCAL))
        _assert_color(color, expected)

    def test_budget_three_between_two_mirrors(self):
        """Floor, ceiling and floor again, each blended at r = 0.5."""
        from src.flytrace.core.integrator import shade

        scene = _build_scene(floor_reflectivity=0.5, ceiling_reflectivity=0.5)
        color = shade(scene, (0.0, 2.0, 0.0), (0.0, -1.0, 0.0), bounce_budget=3)

        # 0.5 * F + 0.5 * (0.5 * C + 0.5 * F)
        expected = tuple(0.75 * f + 0.25 * c for f, c in zip(FLOOR_LOCAL, CEILING_LOCAL))
        _assert_color(color, expected)

    def test_matte_surface_stops_recursion(self):
        """A budget beyond the first matte surface changes nothing."""
        from src.flytrace.core.integrator import shade

        scene = _build_scene()
        two = shade(scene, (0.0, 2.0, 0.0), (0.0, -1.0, 0.0), bounce_budget=2)
        five = shade(scene, (0.0, 2.0, 0.0), (0.0, -1.0, 0.0), bounce_budget=5)
        _assert_color(two, five)


class TestMisses:
    """Tests for rays that escape the scene."""

    def test_miss_is_black(self):
        from src.flytrace.core.integrator import shade

        scene = _build_scene(with_ceiling=False)
        color = shade(scene, (0.0, 2.0, 0.0), (0.0, 1.0, 0.0))
        assert color == (0.0, 0.0, 0.0)

    def test_escaping_reflection_contributes_black(self):
        """Without a ceiling the reflected ray misses and only local * (1 - r) remains."""
        from src.flytrace.core.integrator import MAX_BOUNCES, shade

        scene = _build_scene(with_ceiling=False)
        color = shade(scene, (0.0, 2.0, 0.0), (0.0, -1.0, 0.0), bounce_budget=MAX_BOUNCES)
        _assert_color(color, tuple(0.5 * f for f in FLOOR_LOCAL))

    def test_zero_direction_raises(self):
        from src.flytrace.core.integrator import shade

        with pytest.raises(ValueError):
            shade(_build_scene(), (0.0, 2.0, 0.0), (0.0, 0.0, 0.0))


class TestRoomScene:
    """Spot checks against the reference room."""

    def test_sphere_front(self):
        """The sphere's front faces away from the light; its reflection escapes."""
        from src.flytrace.core.integrator import shade
        from src.flytrace.scene.room import create_room_scene

        scene, camera = create_room_scene()
        color = shade(scene, tuple(camera.position), tuple(camera.front))
        # ambient 0.2 * (1 - 0.08); the reflected ray leaves through the open front
        _assert_color(color, (0.184, 0.184, 0.184))
