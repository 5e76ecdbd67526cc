"""Camera module for view and ray generation.

Components:
    fly: First-person yaw/pitch camera with keyboard-style movement

Ray generation uses viewport offsets precomputed by the frame renderer:
    u: horizontal offset, positive to the right
    v: vertical offset, positive upward
"""

from .fly import PITCH_LIMIT, WORLD_UP, FlyCamera

__all__ = [
    "FlyCamera",
    "PITCH_LIMIT",
    "WORLD_UP",
]
