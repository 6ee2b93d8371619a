"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with near-root ray-sphere intersection

Intersection routines are Taichi functions (@ti.func) so the scene's linear
closest-hit scan can run inside the rendering kernel. There is no spatial
acceleration structure.
"""

from .sphere import HitRecord, Sphere, hit_sphere

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
]
