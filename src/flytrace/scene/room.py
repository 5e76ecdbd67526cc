"""Reference room scene configuration.

This module provides a factory function to create the default fly-through
scene: a small open-fronted room with a reflective sphere in the middle.

The room consists of:
- Floor: blue, reflective (reflectivity 0.3) with a specular highlight
- Ceiling: white
- Left wall: red
- Right wall: green
- Back wall: white
- A white sphere of radius 1 floating at the centre of the room

The room spans x in [-3, 3], y in [0, 4] and z in [-2.5, 2.5], with the
front left open. The point light sits at (0, 4, 0), in the plane of the
ceiling. The camera starts outside the open front looking down -z.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.flytrace.scene.room import create_room_scene
    >>> from src.flytrace.core.frame import FrameRenderer, RenderSettings
    >>>
    >>> scene, camera = create_room_scene()
    >>> renderer = FrameRenderer(scene, camera, RenderSettings(640, 480))
    >>> pixels = renderer.render()
"""

from dataclasses import dataclass

from src.flytrace.camera.fly import FlyCamera
from src.flytrace.scene.manager import Scene

# =============================================================================
# Room Parameters
# =============================================================================

# Room extents
ROOM_WIDTH = 6.0
ROOM_HEIGHT = 4.0
ROOM_DEPTH = 5.0

# Walls other than the floor are faintly reflective
WALL_REFLECTIVITY = 0.08


@dataclass
class RoomParams:
    """Parameters for configuring the room scene.

    All parameters have defaults matching the reference room.

    Attributes:
        floor_color: RGB colour of the floor.
        floor_reflectivity: Mirror fraction of the floor.
        floor_specular: Highlight strength on the floor.
        left_wall_color: RGB colour of the left wall (x = -3).
        right_wall_color: RGB colour of the right wall (x = 3).
        back_wall_color: RGB colour of the back wall and ceiling.
        sphere_color: RGB colour of the sphere.
        sphere_reflectivity: Mirror fraction of the sphere.

    Example:
        >>> params = RoomParams(floor_reflectivity=0.6)  # Shinier floor
        >>> scene, camera = create_room_scene(params)
    """

    floor_color: tuple[float, float, float] = (0.2, 0.2, 1.0)
    floor_reflectivity: float = 0.3
    floor_specular: float = 0.5
    left_wall_color: tuple[float, float, float] = (1.0, 0.2, 0.2)
    right_wall_color: tuple[float, float, float] = (0.2, 1.0, 0.2)
    back_wall_color: tuple[float, float, float] = (1.0, 1.0, 1.0)
    sphere_color: tuple[float, float, float] = (1.0, 1.0, 1.0)
    sphere_reflectivity: float = WALL_REFLECTIVITY


def build_room(scene: Scene, params: RoomParams | None = None) -> None:
    """Add the room's walls and sphere to an existing scene.

    The scene is cleared first.

    Args:
        scene: The Scene to populate. Needs room for 1 sphere and 5 rects.
        params: Optional room parameters. Uses RoomParams() when omitted.
    """
    if params is None:
        params = RoomParams()

    scene.clear()

    half_width = ROOM_WIDTH / 2.0
    half_height = ROOM_HEIGHT / 2.0
    half_depth = ROOM_DEPTH / 2.0

    # Floor (y = 0), normal pointing up
    scene.add_rect(
        point=(0.0, 0.0, 0.0),
        normal=(0.0, 1.0, 0.0),
        u=(1.0, 0.0, 0.0),
        v=(0.0, 0.0, 1.0),
        width=ROOM_WIDTH,
        height=ROOM_DEPTH,
        color=params.floor_color,
        reflectivity=params.floor_reflectivity,
        specular=params.floor_specular,
    )

    # Ceiling (y = 4), normal pointing down
    scene.add_rect(
        point=(0.0, ROOM_HEIGHT, 0.0),
        normal=(0.0, -1.0, 0.0),
        u=(1.0, 0.0, 0.0),
        v=(0.0, 0.0, 1.0),
        width=ROOM_WIDTH,
        height=ROOM_DEPTH,
        color=params.back_wall_color,
        reflectivity=WALL_REFLECTIVITY,
    )

    # Left wall (x = -3), normal pointing +x
    scene.add_rect(
        point=(-half_width, half_height, 0.0),
        normal=(1.0, 0.0, 0.0),
        u=(0.0, 0.0, 1.0),
        v=(0.0, 1.0, 0.0),
        width=ROOM_DEPTH,
        height=ROOM_HEIGHT,
        color=params.left_wall_color,
        reflectivity=WALL_REFLECTIVITY,
    )

    # Right wall (x = 3), normal pointing -x
    scene.add_rect(
        point=(half_width, half_height, 0.0),
        normal=(-1.0, 0.0, 0.0),
        u=(0.0, 0.0, 1.0),
        v=(0.0, 1.0, 0.0),
        width=ROOM_DEPTH,
        height=ROOM_HEIGHT,
        color=params.right_wall_color,
        reflectivity=WALL_REFLECTIVITY,
    )

    # Back wall (z = -2.5), normal pointing +z
    scene.add_rect(
        point=(0.0, half_height, -half_depth),
        normal=(0.0, 0.0, 1.0),
        u=(1.0, 0.0, 0.0),
        v=(0.0, 1.0, 0.0),
        width=ROOM_WIDTH,
        height=ROOM_HEIGHT,
        color=params.back_wall_color,
        reflectivity=WALL_REFLECTIVITY,
    )

    scene.add_sphere(
        center=(0.0, half_height, 0.0),
        radius=1.0,
        color=params.sphere_color,
        reflectivity=params.sphere_reflectivity,
    )


def create_room_camera() -> FlyCamera:
    """Create the camera at its starting pose outside the open front."""
    return FlyCamera(position=(0.0, 2.0, 5.0), yaw=-90.0, pitch=0.0)


def create_room_scene(params: RoomParams | None = None) -> tuple[Scene, FlyCamera]:
    """Create the reference room scene and its starting camera.

    Args:
        params: Optional room parameters. Uses RoomParams() when omitted.

    Returns:
        A tuple of (scene, camera).
    """
    scene = Scene()
    build_room(scene, params)
    return scene, create_room_camera()
