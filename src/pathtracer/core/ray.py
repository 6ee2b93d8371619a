"""Ray data structure and vector utilities for the path tracer.

This module provides the Ray dataclass, built by the camera for every primary
ray, and the zero-safe normalize() used by direction sampling. Both are
Taichi functions so they can be called from inside kernels.

Ray directions are left unnormalised in most of the renderer: intersection
distances are expressed as multiples of the direction vector, so
origin + t * direction is the hit point whatever the direction's magnitude.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 1.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Not required to be
            unit length.
    """

    origin: vec3
    direction: vec3


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction inside a Taichi kernel."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    Zero-length input returns a zero vector instead of propagating NaN.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the same direction as v, or (0, 0, 0).
    """
    len_sq = tm.dot(v, v)
    result = vec3(0.0, 0.0, 0.0)
    if len_sq > 0.0:
        result = v / ti.sqrt(len_sq)
    return result
