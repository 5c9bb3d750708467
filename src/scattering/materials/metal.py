"""Metal (specular reflective) material implementation.

This module implements ideal and fuzzy specular reflection. Perfect metals
(fuzz = 0) produce mirror reflections, while fuzzier metals perturb the
mirror direction by a random vector on the unit sphere scaled by fuzz.

The reflection formula is:
    R = I - 2(I . N)N

where I is the unit incident direction and N is the surface normal. The ray
is absorbed when the perturbed direction points below the surface.

Metal is a specular material: the direction is not drawn from a continuous
distribution, so its ScatterRecord is flagged is_specular and carries no
density.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.scattering.materials.metal import add_metal_material
    >>> gold = add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.3)
"""

import logging
from collections.abc import Sequence

import taichi as ti
import taichi.math as tm

from src.scattering.core.ray import Ray, dot, make_ray, normalize, reflect
from src.scattering.core.sampling import random_unit_vector
from src.scattering.geometry.hit_record import HitRecord
from src.scattering.materials.material import (
    MaterialType,
    ScatterRecord,
    make_specular_record,
    register_material,
)

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_metal(
    albedo: vec3,
    fuzz: ti.f32,
    ray_in: Ray,
    rec: HitRecord,
    stream: ti.i32,
) -> ScatterRecord:
    """Compute the scattered ray for a metal surface.

    Reflects the unit incident direction about the normal and adds
    fuzz * random_unit_vector. One unit vector is drawn even when fuzz is 0,
    so the stream advances by the same amount for every metal scatter.

    Args:
        albedo: The reflective color (RGB).
        fuzz: The perturbation scale in [0, 1]. 0 = perfect mirror.
        ray_in: The incoming ray.
        rec: The hit record.
        stream: Random stream owned by the calling lane.

    Returns:
        A specular ScatterRecord with attenuation = albedo. did_scatter is 0
        when the perturbed direction does not leave the surface.
    """
    reflected = reflect(normalize(ray_in.direction), rec.normal)
    scattered_direction = reflected + fuzz * random_unit_vector(stream)

    did_scatter = 0
    if dot(scattered_direction, rec.normal) > 0.0:
        did_scatter = 1

    scattered = make_ray(rec.point, scattered_direction, ray_in.time)
    return make_specular_record(did_scatter, albedo, scattered)


def clamp_fuzz(fuzz: float) -> float:
    """Clamp a fuzz parameter to [0, 1], logging when it changes."""
    clamped = min(max(fuzz, 0.0), 1.0)
    if clamped != fuzz:
        logger.warning("Metal fuzz %s is outside [0, 1], using %s", fuzz, clamped)
    return clamped


def add_metal_material(
    albedo: Sequence[float],
    fuzz: float = 0.0,
) -> int:
    """Add a metal material to the material registry.

    Args:
        albedo: The reflective color as (R, G, B).
        fuzz: The reflection perturbation. Values above 1 are clamped to 1
            and negative values to 0. Default is 0 (perfect mirror).

    Returns:
        The id of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If the albedo is malformed.
    """
    return register_material(MaterialType.METAL, albedo=albedo, fuzz=clamp_fuzz(fuzz))
