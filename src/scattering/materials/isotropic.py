"""Isotropic phase function for participating media.

An isotropic medium scatters uniformly over the whole sphere of directions,
so its density is the constant 1 / (4 pi) regardless of the incoming and
outgoing directions.
"""

from collections.abc import Sequence

import taichi as ti
import taichi.math as tm

from src.scattering.core.ray import Ray, make_ray
from src.scattering.core.sampling import random_unit_vector
from src.scattering.geometry.hit_record import HitRecord
from src.scattering.materials.material import (
    MaterialType,
    ScatterRecord,
    make_sampled_record,
    register_material,
)
from src.scattering.textures.texture import resolve_texture

# Type alias for 3D vectors
vec3 = tm.vec3

# Uniform density over the unit sphere
ISOTROPIC_PDF = 1.0 / (4.0 * tm.pi)


@ti.func
def scatter_isotropic(
    albedo: vec3,
    ray_in: Ray,
    rec: HitRecord,
    stream: ti.i32,
) -> ScatterRecord:
    """Sample a uniformly distributed scattered direction.

    Returns:
        A sampled ScatterRecord with attenuation = albedo and
        pdf = 1 / (4 pi).
    """
    scattered = make_ray(rec.point, random_unit_vector(stream), ray_in.time)
    return make_sampled_record(albedo, scattered, ISOTROPIC_PDF)


@ti.func
def scattering_pdf_isotropic() -> ti.f32:
    return ISOTROPIC_PDF


def add_isotropic_material(
    albedo: Sequence[float] | None = None,
    texture_id: int | None = None,
) -> int:
    """Add an isotropic (volume) material to the material registry.

    Exactly one of albedo or texture_id must be given.

    Returns:
        The id of the added material.

    Raises:
        RuntimeError: If a registry is full.
        ValueError: If the arguments are inconsistent or malformed.
    """
    texture = resolve_texture(albedo, texture_id)
    return register_material(MaterialType.ISOTROPIC, texture_id=texture)
