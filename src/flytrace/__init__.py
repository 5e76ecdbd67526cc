"""Real-time CPU ray tracer with a free-flying camera.

This package renders a small static scene of spheres and rectangles from a
first-person camera, using Taichi to parallelize the per-pixel work:
- Phong shading with a single fixed point light
- Depth-limited mirror reflection
- Packed 0xRRGGBB frame buffers for a host window to present

Subpackages:
    core: Rays, vector utilities, the reflection integrator and frame rendering
    geometry: Shape primitives and intersection algorithms
    materials: Surface material and local shading
    scene: Scene storage and the reference room
    camera: First-person fly camera
    preview: Image export, still display and the interactive window
"""

__version__ = "0.1.0"
