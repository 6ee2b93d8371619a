"""Scene module for scene management and closest-hit queries.

Components:
    intersection: Sphere storage in Taichi fields and the closest-hit scan
    manager: The Scene class, an ordered collection of spheres with materials
    presets: Ready-made scenes with their cameras

Sphere data is stored Structure-of-Arrays in Taichi fields so the rendering
kernel can scan it directly. The scan is linear; there is no spatial index.
"""

from .intersection import (
    MAX_SPHERES,
    HitInfo,
    SceneHitRecord,
    add_sphere,
    clear_scene,
    closest_hit,
    get_sphere_count,
    intersect_scene,
)
from .manager import Scene, SceneConfig, SphereInfo
from .presets import SCENE_PRESETS, create_lit_scene, create_two_sphere_scene

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "HitInfo",
    "add_sphere",
    "clear_scene",
    "closest_hit",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "Scene",
    "SceneConfig",
    "SphereInfo",
    # Presets
    "create_two_sphere_scene",
    "create_lit_scene",
    "SCENE_PRESETS",
]
