"""A Monte Carlo path tracer for scenes made of spheres.

Subpackages:
    core: Rays, random sampling, the path tracing integrator and the renderer
    geometry: Sphere primitive and ray-sphere intersection
    materials: Diffuse albedo plus emission
    scene: Sphere storage, closest-hit queries and preset scenes
    camera: Pinhole camera through the Z = 0 image plane
    preview: PNG export
"""

__version__ = "0.1.0"
