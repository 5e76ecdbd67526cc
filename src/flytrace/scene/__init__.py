"""Scene module for primitive storage and ray-scene queries.

This module handles scene representation and closest-hit resolution:

Components:
    manager: Scene container holding spheres and rects in Taichi fields
    room: The reference room used by the example fly-through

Scene data is organized for linear-scan access:
    - Structure-of-Arrays layout for geometric and material data
    - Fixed capacity per primitive type, chosen at construction
    - No acceleration structure; every ray tests every primitive
"""

from .manager import (
    MAX_RECTS,
    MAX_SPHERES,
    RayHit,
    RectInfo,
    Scene,
    SceneConfig,
    SphereInfo,
)
from .room import RoomParams, build_room, create_room_camera, create_room_scene

__all__ = [
    # Manager module
    "Scene",
    "SceneConfig",
    "SphereInfo",
    "RectInfo",
    "RayHit",
    "MAX_SPHERES",
    "MAX_RECTS",
    # Room module
    "RoomParams",
    "build_room",
    "create_room_camera",
    "create_room_scene",
]
