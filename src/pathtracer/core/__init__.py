"""Core rendering module.

Components:
    ray: Ray data structure and vector utilities
    sampler: Explicit-state random numbers and direction sampling
    integrator: Path tracing kernels, render target and quantisation
    renderer: Render settings and the progressive frame renderer

The integrator estimates the radiance reaching each pixel with a simple Monte
Carlo path tracer: uniform hemisphere bounces, throughput equal to the product
of albedos, and paths truncated at a fixed bounce count.

All compute-intensive operations run in Taichi kernels.
"""

from .ray import Ray, make_ray, normalize, vec3
from .sampler import (
    next_uniform,
    pcg_hash,
    random_hemisphere_direction,
    random_standard_normal,
    random_unit_vector,
    sample_hemisphere_directions,
    sample_standard_normals,
    sample_unit_vectors,
    seed_rng,
    seed_sample_rng,
)

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import directly from src.pathtracer.core.integrator or src.pathtracer.core.renderer.

__all__ = [
    "Ray",
    "make_ray",
    "vec3",
    "normalize",
    "pcg_hash",
    "seed_rng",
    "seed_sample_rng",
    "next_uniform",
    "random_standard_normal",
    "random_unit_vector",
    "random_hemisphere_direction",
    "sample_standard_normals",
    "sample_unit_vectors",
    "sample_hemisphere_directions",
]
