"""Random sampling utilities driven by explicit random streams.

Every sampling function takes a ``stream`` index instead of reading a global
generator. A stream is a counter-based generator: the n-th draw of stream s
is a PCG hash of (seed, s, n), and only the counter is stored, one per stream
in a Taichi field. Parallel code gives each lane its own stream (for example
the loop index of a ``ti.ndrange``), so no two lanes ever touch the same
counter and results are reproducible for a given seed. Stream indices wrap
modulo MAX_RANDOM_STREAMS, so lanes beyond that count alias lower streams
instead of writing outside the counter field.

Distributions provided:
    - uniform floats in [0, 1)
    - points in the unit sphere (rejection sampling)
    - unit vectors uniform on the sphere (pdf = 1 / (4 pi))
    - unit vectors on the hemisphere around a normal
    - cosine-weighted directions in a local z-up frame (pdf = cos(theta) / pi)

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.scattering.core.sampling import seed_random_streams
    >>> seed_random_streams(1234)
    >>> # Within a Taichi kernel, lane i draws from stream i:
    >>> # for i in range(n):
    >>> #     d = random_unit_vector(i)
"""

import logging

import taichi as ti
import taichi.math as tm

from src.scattering.core.ray import dot, length_squared

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# Number of independent random streams (one per parallel lane)
MAX_RANDOM_STREAMS = 1 << 18

# Seed used when streams are (re)initialised without an explicit seed
DEFAULT_SEED = 42

# Per-stream draw counters and the shared seed
_stream_counters = ti.field(dtype=ti.u32, shape=MAX_RANDOM_STREAMS)
_stream_seed = ti.field(dtype=ti.u32, shape=())


def seed_random_streams(seed: int = DEFAULT_SEED) -> None:
    """Reset every random stream and set the generator seed.

    After reseeding, the sequence of draws on each stream is identical to
    the sequence produced after any earlier reseed with the same value.

    Args:
        seed: Any integer; only the low 32 bits are used.
    """
    _stream_seed[None] = seed & 0xFFFFFFFF
    _stream_counters.fill(0)
    logger.info("Seeded %d random streams with seed %d", MAX_RANDOM_STREAMS, seed)


def get_stream_draw_count(stream: int) -> int:
    """Get how many uniform values a stream has produced since the last seed."""
    if stream < 0 or stream >= MAX_RANDOM_STREAMS:
        raise ValueError(f"Invalid random stream: {stream}")
    return int(_stream_counters[stream])


@ti.func
def _pcg_hash(value: ti.u32) -> ti.u32:
    """PCG output permutation used as a stateless 32-bit hash."""
    state = value * ti.cast(747796405, ti.u32) + ti.cast(1442695041, ti.u32)
    shift = (state >> ti.cast(28, ti.u32)) + ti.cast(4, ti.u32)
    word = ((state >> shift) ^ state) * ti.cast(277803737, ti.u32)
    return (word >> ti.cast(22, ti.u32)) ^ word


@ti.func
def random_float(stream: ti.i32) -> ti.f32:
    """Draw a uniform float in [0, 1) from a stream.

    Advances the stream's counter by one. The top 24 bits of the hash are
    used so the result is exactly representable and strictly below 1.
    Stream indices wrap modulo MAX_RANDOM_STREAMS, so stream s and
    s + MAX_RANDOM_STREAMS share a counter.

    Args:
        stream: The random stream owned by the calling lane.

    Returns:
        A uniform value in [0, 1).
    """
    idx = stream % MAX_RANDOM_STREAMS
    counter = _stream_counters[idx]
    _stream_counters[idx] = counter + ti.cast(1, ti.u32)
    h = _pcg_hash(_stream_seed[None] ^ _pcg_hash(ti.cast(idx, ti.u32) + _pcg_hash(counter)))
    return ti.cast(h >> ti.cast(8, ti.u32), ti.f32) * (1.0 / 16777216.0)


@ti.func
def random_in_unit_sphere(stream: ti.i32) -> vec3:
    """Generate a random point inside the unit sphere.

    Uses rejection sampling to generate uniformly distributed points
    within the unit sphere.

    Returns:
        A random point with length < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    # Rejection sampling loop
    for _ in range(100):  # Max iterations to avoid infinite loops
        if not found:
            p = vec3(
                random_float(stream) * 2.0 - 1.0,
                random_float(stream) * 2.0 - 1.0,
                random_float(stream) * 2.0 - 1.0,
            )
            if length_squared(p) < 1.0:
                found = True
    return p


@ti.func
def random_unit_vector(stream: ti.i32) -> vec3:
    """Generate a unit vector uniformly distributed on the sphere.

    Samples z uniformly in [-1, 1] and the azimuth uniformly in [0, 2 pi),
    which is area-preserving (Archimedes), so the density with respect to
    solid angle is 1 / (4 pi). Always consumes exactly two draws.

    Args:
        stream: The random stream owned by the calling lane.

    Returns:
        A random unit vector.
    """
    z = 1.0 - 2.0 * random_float(stream)
    r = ti.sqrt(tm.max(0.0, 1.0 - z * z))
    phi = 2.0 * tm.pi * random_float(stream)
    return vec3(r * ti.cos(phi), r * ti.sin(phi), z)


@ti.func
def random_on_hemisphere(normal: vec3, stream: ti.i32) -> vec3:
    """Generate a uniform unit vector on the hemisphere around a normal.

    The density with respect to solid angle is 1 / (2 pi).

    Args:
        normal: The normal defining the hemisphere orientation.
        stream: The random stream owned by the calling lane.

    Returns:
        A random unit vector whose dot product with normal is non-negative.
    """
    on_sphere = random_unit_vector(stream)
    result = on_sphere
    if dot(on_sphere, normal) < 0.0:
        result = -on_sphere
    return result


@ti.func
def random_cosine_direction(stream: ti.i32) -> vec3:
    """Generate a random direction with cosine-weighted distribution.

    The direction is expressed in a local frame whose z axis is the
    hemisphere pole. The distribution has PDF = cos(theta) / pi.

    Returns:
        A random unit direction in the local coordinate frame (z-up).
    """
    r1 = random_float(stream)
    r2 = random_float(stream)
    phi = 2.0 * tm.pi * r1
    sqrt_r2 = ti.sqrt(r2)
    x = ti.cos(phi) * sqrt_r2
    y = ti.sin(phi) * sqrt_r2
    z = ti.sqrt(1.0 - r2)
    return vec3(x, y, z)
