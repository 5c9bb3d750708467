"""Core building blocks for the scattering model.

Components:
    ray: Ray data structure and vector formulas (reflect, refract, Schlick)
    sampling: Stream-based random number generation and direction sampling
    onb: Orthonormal basis for mapping local samples into world space

All numerical routines are Taichi functions usable inside kernels. The
random source is passed explicitly as a stream index so that parallel lanes
never share generator state.
"""

from .onb import Onb, onb_from_w, onb_local
from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    ray_at,
    reflect,
    refract,
    schlick_fresnel,
    validate_vec3,
    vec3,
)
from .sampling import (
    DEFAULT_SEED,
    MAX_RANDOM_STREAMS,
    get_stream_draw_count,
    random_cosine_direction,
    random_float,
    random_in_unit_sphere,
    random_on_hemisphere,
    random_unit_vector,
    seed_random_streams,
)

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "refract",
    "schlick_fresnel",
    "near_zero",
    "validate_vec3",
    "Onb",
    "onb_from_w",
    "onb_local",
    "DEFAULT_SEED",
    "MAX_RANDOM_STREAMS",
    "seed_random_streams",
    "get_stream_draw_count",
    "random_float",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_on_hemisphere",
    "random_cosine_direction",
]
