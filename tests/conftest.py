"""Pytest configuration for flytrace tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls, which would
    invalidate fields owned by scenes and cameras created earlier.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture
def empty_scene():
    """A small Scene with no primitives."""
    from src.flytrace.scene.manager import Scene

    return Scene(max_spheres=8, max_rects=8)


@pytest.fixture
def ground_scene():
    """A Scene holding one large grey, non-reflective ground rect at y = 0."""
    from src.flytrace.scene.manager import Scene

    scene = Scene(max_spheres=4, max_rects=4)
    scene.add_rect(
        point=(0.0, 0.0, 0.0),
        normal=(0.0, 1.0, 0.0),
        u=(1.0, 0.0, 0.0),
        v=(0.0, 0.0, 1.0),
        width=100.0,
        height=100.0,
        color=(0.5, 0.5, 0.5),
    )
    return scene
