"""Scene-level closest-hit queries.

The scene's spheres and their materials are stored in Taichi fields in a
Structure-of-Arrays layout. intersect_scene() scans every sphere in insertion
order and keeps the hit with the strictly smallest distance, so on an exact
tie the earlier sphere wins. The hit record carries a copy of the hit
sphere's material values.

A ray that hits nothing has escaped the scene; the integrator treats the
background as black.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.materials.material import Material
    >>> from src.pathtracer.scene.intersection import add_sphere, clear_scene, closest_hit
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, -15.0), 5.0, Material(albedo=(0.8, 0.2, 0.2)))
    0
    >>> closest_hit((0.0, 0.0, 1.0), (0.0, 0.0, -1.0)).distance
    11.0
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from src.pathtracer.geometry.sphere import Sphere, hit_sphere
from src.pathtracer.materials.material import Material

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with a copy of the hit material.

    Attributes:
        hit: Whether the ray intersected any sphere (1 if hit, 0 if miss).
        distance: Distance along the ray as a multiple of its direction.
        position: The intersection point.
        normal: Unit outward normal at the intersection point.
        albedo: Albedo of the hit sphere's material.
        emission_colour: Emission colour of the hit sphere's material.
        emission_strength: Emission strength of the hit sphere's material.
        sphere_index: Index of the hit sphere, -1 on a miss.
    """

    hit: ti.i32
    distance: ti.f32
    position: vec3
    normal: vec3
    albedo: vec3
    emission_colour: vec3
    emission_strength: ti.f32
    sphere_index: ti.i32


@dataclass(frozen=True)
class HitInfo:
    """Python-side result of a closest-hit query.

    Attributes:
        distance: Distance along the ray as a multiple of its direction.
        position: The intersection point (x, y, z).
        normal: Unit outward surface normal (x, y, z).
        material: Copy of the hit sphere's material.
        sphere_index: Index of the hit sphere in insertion order.
    """

    distance: float
    position: tuple[float, float, float]
    normal: tuple[float, float, float]
    material: Material
    sphere_index: int


# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_emission_colours = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_emission_strengths = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Object whose spheres are currently loaded (see clear_scene)
_active_owner: object | None = None

# Single-ray query results (written by _query_closest_hit)
_query_hit = ti.field(dtype=ti.i32, shape=())
_query_distance = ti.field(dtype=ti.f32, shape=())
_query_position = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_albedo = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_emission_colour = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_emission_strength = ti.field(dtype=ti.f32, shape=())
_query_sphere_index = ti.field(dtype=ti.i32, shape=())


def clear_scene(owner: object | None = None) -> None:
    """Clear all spheres from the scene.

    Resets the sphere count to zero. Field data is overwritten as new
    spheres are added.

    Args:
        owner: The object whose spheres will be loaded next, or None.
            get_active_owner() returns it until the next clear.
    """
    global _active_owner
    num_spheres[None] = 0
    _active_owner = owner


def get_active_owner() -> object | None:
    """Get the owner passed to the most recent clear_scene() call."""
    return _active_owner


def add_sphere(
    center: tuple[float, float, float],
    radius: float,
    material: Material,
) -> int:
    """Append a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere. Must be positive.
        material: The sphere's material; its values are copied into the scene.

    Returns:
        The index of the added sphere.

    Raises:
        ValueError: If the radius is not positive.
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    if not radius > 0.0:
        raise ValueError(f"Sphere radius must be positive, got {radius}")

    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")

    sphere_centers[idx] = center
    sphere_radii[idx] = radius
    sphere_albedos[idx] = material.albedo
    sphere_emission_colours[idx] = material.emission_colour
    sphere_emission_strengths[idx] = material.emission_strength
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        distance=0.0,
        position=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        albedo=vec3(0.0, 0.0, 0.0),
        emission_colour=vec3(0.0, 0.0, 0.0),
        emission_strength=0.0,
        sphere_index=-1,
    )


@ti.func
def intersect_scene(ray_origin: vec3, ray_direction: vec3) -> SceneHitRecord:
    """Find the closest sphere hit along a ray.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.

    Returns:
        A SceneHitRecord for the nearest intersection, or a miss record
        (hit == 0) if the ray escapes the scene.
    """
    result = _make_miss_record()

    for i in range(num_spheres[None]):
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray_origin, ray_direction, sphere)
        if rec.hit == 1:
            if result.hit == 0 or rec.distance < result.distance:
                result = SceneHitRecord(
                    hit=1,
                    distance=rec.distance,
                    position=rec.position,
                    normal=rec.normal,
                    albedo=sphere_albedos[i],
                    emission_colour=sphere_emission_colours[i],
                    emission_strength=sphere_emission_strengths[i],
                    sphere_index=i,
                )

    return result


@ti.kernel
def _query_closest_hit(ray_origin: vec3, ray_direction: vec3):
    rec = intersect_scene(ray_origin, ray_direction)
    _query_hit[None] = rec.hit
    _query_distance[None] = rec.distance
    _query_position[None] = rec.position
    _query_normal[None] = rec.normal
    _query_albedo[None] = rec.albedo
    _query_emission_colour[None] = rec.emission_colour
    _query_emission_strength[None] = rec.emission_strength
    _query_sphere_index[None] = rec.sphere_index


def _to_tuple(v) -> tuple[float, float, float]:
    return (float(v[0]), float(v[1]), float(v[2]))


def closest_hit(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
) -> HitInfo | None:
    """Query the closest hit for a single ray from Python.

    This runs one small kernel per call and is meant for tests and tooling;
    rendering calls intersect_scene() from inside its own kernel.

    Args:
        origin: Ray origin (x, y, z).
        direction: Ray direction (x, y, z), not necessarily normalized.

    Returns:
        The closest hit, or None if the ray escapes the scene.
    """
    _query_closest_hit(
        vec3(origin[0], origin[1], origin[2]),
        vec3(direction[0], direction[1], direction[2]),
    )
    if _query_hit[None] == 0:
        return None

    material = Material(
        albedo=_to_tuple(_query_albedo[None]),
        emission_colour=_to_tuple(_query_emission_colour[None]),
        emission_strength=float(_query_emission_strength[None]),
    )
    return HitInfo(
        distance=float(_query_distance[None]),
        position=_to_tuple(_query_position[None]),
        normal=_to_tuple(_query_normal[None]),
        material=material,
        sphere_index=int(_query_sphere_index[None]),
    )
