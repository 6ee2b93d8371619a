"""Random sampling for Monte Carlo path tracing.

Every sampling routine takes an explicit random state and returns the advanced
state alongside its sample, so no kernel ever draws from a shared global
generator. The renderer derives a fresh 32-bit state for every sample from the
render seed, the pixel index and the sample index. No state is carried from
one sample to the next, so a stream never has to outlast the draws of one
path, and renders are reproducible for a fixed seed regardless of how Taichi
schedules the parallel pixel loop.

The generator is the PCG hash (Jarzynski & Olano, "Hash Functions for GPU
Rendering", JCGT 2020): each draw rehashes the state and uses its top 24 bits
as a float in [0, 1).

Directions are built from Gaussian samples (Box-Muller): a vector of three
independent standard normals, normalised, is uniformly distributed over the
unit sphere. Hemisphere samples flip that vector onto the side of the normal.
The hemisphere distribution is uniform, not cosine-weighted, and the
integrator applies no pdf correction for it.

Example:
    >>> @ti.kernel
    ... def sample() -> tm.vec3:
    ...     rng = seed_rng(ti.u32(7), ti.u32(0))
    ...     direction, rng = random_hemisphere_direction(tm.vec3(0, 1, 0), rng)
    ...     return direction
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import normalize, vec3

# PCG hash multipliers and increment. The increment 2891336453 does not fit an
# i32 literal, so it is applied as the equivalent subtraction modulo 2^32.
_PCG_MULTIPLIER = 747796405
_PCG_INCREMENT_WRAPPED = 1403630843
_PCG_WORD_MULTIPLIER = 277803737

# 2^24: the number of distinct floats produced by next_uniform()
_UNIFORM_SCALE = 16777216.0

# Maximum number of samples the Python-side batch samplers return at once
MAX_BATCH_SAMPLES = 1 << 16

_batch_vectors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_BATCH_SAMPLES)
_batch_scalars = ti.field(dtype=ti.f32, shape=MAX_BATCH_SAMPLES)


# =============================================================================
# Random State
# =============================================================================


@ti.func
def pcg_hash(value: ti.u32) -> ti.u32:
    """Hash a 32-bit value with the PCG output permutation."""
    state = value * ti.u32(_PCG_MULTIPLIER) - ti.u32(_PCG_INCREMENT_WRAPPED)
    word = ((state >> ((state >> ti.u32(28)) + ti.u32(4))) ^ state) * ti.u32(
        _PCG_WORD_MULTIPLIER
    )
    return (word >> ti.u32(22)) ^ word


@ti.func
def seed_rng(seed: ti.u32, stream: ti.u32) -> ti.u32:
    """Derive an independent random state for one stream of a seeded render.

    Args:
        seed: The render seed shared by all streams.
        stream: Stream index, e.g. the flattened pixel index.

    Returns:
        The initial random state for the stream.
    """
    return pcg_hash(stream ^ pcg_hash(seed))


@ti.func
def seed_sample_rng(seed: ti.u32, stream: ti.u32, sample: ti.u32) -> ti.u32:
    """Derive the random state for one sample of one stream.

    Each sample starts from its own hashed state, so a stream only ever
    advances over the draws of a single path. For a fixed stream the
    starting states of different samples are distinct, since pcg_hash is a
    permutation of the 32-bit values.

    Args:
        seed: The render seed shared by all streams.
        stream: Stream index, e.g. the flattened pixel index.
        sample: Sample index within the stream.

    Returns:
        The initial random state for the sample.
    """
    return pcg_hash(sample ^ seed_rng(seed, stream))


@ti.func
def next_uniform(rng: ti.u32):
    """Draw a uniform float in [0, 1).

    Args:
        rng: The current random state.

    Returns:
        A tuple of (value, advanced_state).
    """
    state = pcg_hash(rng)
    value = ti.cast(state >> ti.u32(8), ti.f32) / _UNIFORM_SCALE
    return value, state


# =============================================================================
# Distributions
# =============================================================================


@ti.func
def random_standard_normal(rng: ti.u32):
    """Draw a standard normal sample with the Box-Muller transform.

    Uses rho = sqrt(-2 ln u1), theta = 2 pi u2 and returns rho * cos(theta).
    Two fresh uniforms are drawn per call. u1 is taken from (0, 1] so the
    logarithm stays finite.

    Args:
        rng: The current random state.

    Returns:
        A tuple of (value, advanced_state).
    """
    state = rng
    u1, state = next_uniform(state)
    u2, state = next_uniform(state)
    rho = ti.sqrt(-2.0 * ti.log(1.0 - u1))
    theta = 2.0 * tm.pi * u2
    return rho * ti.cos(theta), state


@ti.func
def random_unit_vector(rng: ti.u32):
    """Generate a unit vector uniformly distributed over the sphere.

    Three independent standard normals are assembled into a vector and
    normalised; the multivariate normal is rotationally symmetric so the
    direction is uniform.

    Args:
        rng: The current random state.

    Returns:
        A tuple of (unit_vector, advanced_state).
    """
    state = rng
    x, state = random_standard_normal(state)
    y, state = random_standard_normal(state)
    z, state = random_standard_normal(state)
    return normalize(vec3(x, y, z)), state


@ti.func
def random_hemisphere_direction(normal: vec3, rng: ti.u32):
    """Generate a unit vector uniformly distributed over the hemisphere of normal.

    A sphere sample pointing into the surface is negated. A sample exactly
    perpendicular to the normal is kept as is.

    Args:
        normal: The surface normal defining the hemisphere.
        rng: The current random state.

    Returns:
        A tuple of (direction, advanced_state) with dot(normal, direction) >= 0.
    """
    direction, state = random_unit_vector(rng)
    if tm.dot(normal, direction) < 0.0:
        direction = -direction
    return direction, state


# =============================================================================
# Python-side Batch Sampling
# =============================================================================


@ti.kernel
def _fill_standard_normals(count: ti.i32, seed: ti.u32):
    for i in range(count):
        rng = seed_rng(seed, ti.cast(i, ti.u32))
        value, rng = random_standard_normal(rng)
        _batch_scalars[i] = value


@ti.kernel
def _fill_unit_vectors(count: ti.i32, seed: ti.u32):
    for i in range(count):
        rng = seed_rng(seed, ti.cast(i, ti.u32))
        direction, rng = random_unit_vector(rng)
        _batch_vectors[i] = direction


@ti.kernel
def _fill_hemisphere_directions(count: ti.i32, seed: ti.u32, normal: vec3):
    for i in range(count):
        rng = seed_rng(seed, ti.cast(i, ti.u32))
        direction, rng = random_hemisphere_direction(normal, rng)
        _batch_vectors[i] = direction


def _check_batch_count(count: int) -> None:
    if count <= 0 or count > MAX_BATCH_SAMPLES:
        raise ValueError(f"Sample count must be in [1, {MAX_BATCH_SAMPLES}], got {count}")


def sample_standard_normals(count: int, seed: int = 0) -> npt.NDArray[np.float32]:
    """Draw independent Box-Muller normal samples.

    Args:
        count: Number of samples (at most MAX_BATCH_SAMPLES).
        seed: Seed for the per-sample random streams.

    Returns:
        NumPy array of shape (count,).

    Raises:
        ValueError: If count is out of range.
    """
    _check_batch_count(count)
    _fill_standard_normals(count, seed & 0xFFFFFFFF)
    return _batch_scalars.to_numpy()[:count]


def sample_unit_vectors(count: int, seed: int = 0) -> npt.NDArray[np.float32]:
    """Draw directions uniformly distributed over the unit sphere.

    Returns:
        NumPy array of shape (count, 3).
    """
    _check_batch_count(count)
    _fill_unit_vectors(count, seed & 0xFFFFFFFF)
    return _batch_vectors.to_numpy()[:count]


def sample_hemisphere_directions(
    normal: tuple[float, float, float],
    count: int,
    seed: int = 0,
) -> npt.NDArray[np.float32]:
    """Draw directions uniformly distributed over the hemisphere of normal.

    Args:
        normal: The hemisphere's normal (x, y, z).
        count: Number of samples (at most MAX_BATCH_SAMPLES).
        seed: Seed for the per-sample random streams.

    Returns:
        NumPy array of shape (count, 3).

    Raises:
        ValueError: If count is out of range.
    """
    _check_batch_count(count)
    _fill_hemisphere_directions(count, seed & 0xFFFFFFFF, vec3(normal[0], normal[1], normal[2]))
    return _batch_vectors.to_numpy()[:count]
