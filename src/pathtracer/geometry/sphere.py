"""Sphere primitive with ray-sphere intersection.

This module provides the Sphere dataclass and the intersection routine used by
the scene's closest-hit query.

The intersection solves the classic quadratic

    a*t^2 + b*t + c = 0
    a = dot(d, d),  b = 2 * dot(o, d),  c = dot(o, o) - radius^2

with o = ray_origin - center, and only ever considers the near root
t = (-b - sqrt(b^2 - 4ac)) / 2a. A negative near root is reported as a miss,
even when the far root is positive. A ray that starts inside a sphere
therefore never sees that sphere. Paths leaving a convex surface rely on this:
the bounce ray's near root is behind its origin, so it cannot hit the surface
it just left.

Distances are multiples of the (possibly unnormalised) direction vector.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -15), radius=5.0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere. Non-positive radii never intersect.
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-sphere intersection.

    Attributes:
        hit: Whether the ray intersected the sphere (1 if hit, 0 if miss).
        distance: The near root t >= 0, as a multiple of the ray direction.
            Only valid if hit == 1.
        position: The intersection point origin + direction * distance.
            Only valid if hit == 1.
        normal: Unit surface normal pointing from the center through the
            intersection point. Only valid if hit == 1.
    """

    hit: ti.i32
    distance: ti.f32
    position: vec3
    normal: vec3


@ti.func
def hit_sphere(ray_origin: vec3, ray_direction: vec3, sphere: Sphere) -> HitRecord:
    """Test a ray against a sphere using the near root of the quadratic.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be normalized).
        sphere: The sphere to test.

    Returns:
        A HitRecord; check the hit field to determine if intersection occurred.
        Zero-length directions and non-positive radii are misses.
    """
    offset_origin = ray_origin - sphere.center

    a = tm.dot(ray_direction, ray_direction)
    b = 2.0 * tm.dot(offset_origin, ray_direction)
    c = tm.dot(offset_origin, offset_origin) - sphere.radius * sphere.radius
    discriminant = b * b - 4.0 * a * c

    # Initialize result fields (Taichi requires outer-scope declaration)
    did_hit = 0
    hit_distance = 0.0
    hit_position = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)

    if a > 0.0 and sphere.radius > 0.0 and discriminant >= 0.0:
        distance = (-b - ti.sqrt(discriminant)) / (2.0 * a)

        if distance >= 0.0:
            did_hit = 1
            hit_distance = distance
            hit_position = ray_origin + ray_direction * distance
            hit_normal = tm.normalize(hit_position - sphere.center)

    return HitRecord(
        hit=did_hit,
        distance=hit_distance,
        position=hit_position,
        normal=hit_normal,
    )
