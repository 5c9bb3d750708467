"""Lambertian (ideal diffuse) material implementation.

This module implements the Lambertian BRDF, which models ideal diffuse
reflection where incident light is scattered in all directions weighted by
the cosine of the angle from the surface normal.

The Lambertian BRDF is:
    f_r(wi, wo) = albedo / pi

Directions are drawn with cosine-weighted hemisphere sampling, whose
probability density function is:
    pdf(wi) = cos(theta) / pi

where theta is the angle between the sampled direction and the surface
normal. The same formula is used for scattering_pdf, so the pdf returned by
scatter_lambertian always equals pdf_lambertian on the returned direction.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.scattering.materials.lambertian import add_lambertian_material
    >>> red = add_lambertian_material(albedo=(0.8, 0.1, 0.1))
    >>> # Within a Taichi kernel:
    >>> # record = scatter_lambertian(albedo, ray_in, rec, stream)
"""

from collections.abc import Sequence

import taichi as ti
import taichi.math as tm

from src.scattering.core.onb import onb_from_w, onb_local
from src.scattering.core.ray import Ray, dot, make_ray, near_zero, normalize
from src.scattering.core.sampling import random_cosine_direction
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


@ti.func
def pdf_lambertian(normal: vec3, scattered_direction: vec3) -> ti.f32:
    """Compute the PDF for Lambertian cosine-weighted sampling.

    For cosine-weighted hemisphere sampling, the PDF is:
        pdf = cos(theta) / pi

    Args:
        normal: The surface normal (should be normalized).
        scattered_direction: The scatter direction (should be normalized).

    Returns:
        The probability density function value. Returns 0 if the direction
        is below the surface (negative cosine).
    """
    cos_theta = dot(normal, scattered_direction)
    pdf = 0.0
    if cos_theta > 0.0:
        pdf = cos_theta / tm.pi
    return pdf


@ti.func
def scatter_lambertian(
    albedo: vec3,
    ray_in: Ray,
    rec: HitRecord,
    stream: ti.i32,
) -> ScatterRecord:
    """Sample a scattered ray for a Lambertian surface.

    Builds an orthonormal basis around the normal and maps a cosine-weighted
    local direction into world space. A Lambertian surface never absorbs the
    ray.

    With cosine-weighted sampling the BRDF and cosine terms cancel against
    the pdf:
        (albedo / pi) * cos_theta / (cos_theta / pi) = albedo

    Args:
        albedo: The diffuse reflectance color at the hit point (RGB).
        ray_in: The incoming ray; only its time is used.
        rec: The hit record.
        stream: Random stream owned by the calling lane.

    Returns:
        A sampled ScatterRecord with attenuation = albedo and
        pdf = cos(theta) / pi.
    """
    uvw = onb_from_w(rec.normal)
    scattered_direction = onb_local(uvw, random_cosine_direction(stream))

    # Degenerate samples (floating point issues) fall back to the normal
    if near_zero(scattered_direction):
        scattered_direction = uvw.w

    pdf = pdf_lambertian(uvw.w, normalize(scattered_direction))
    scattered = make_ray(rec.point, scattered_direction, ray_in.time)
    return make_sampled_record(albedo, scattered, pdf)


@ti.func
def scattering_pdf_lambertian(rec: HitRecord, scattered: Ray) -> ti.f32:
    """Density of an arbitrary scattered ray under cosine-weighted sampling.

    The direction need not be normalized. Directions below the surface
    have density 0.
    """
    return pdf_lambertian(normalize(rec.normal), normalize(scattered.direction))


def add_lambertian_material(
    albedo: Sequence[float] | None = None,
    texture_id: int | None = None,
) -> int:
    """Add a Lambertian material to the material registry.

    Exactly one of albedo or texture_id must be given. A flat albedo is
    wrapped in a new solid-color texture; a texture_id is shared.

    Args:
        albedo: The diffuse reflectance color as (R, G, B).
        texture_id: Id of an existing texture providing the albedo.

    Returns:
        The id of the added material.

    Raises:
        RuntimeError: If a registry is full.
        ValueError: If the arguments are inconsistent or malformed.
    """
    texture = resolve_texture(albedo, texture_id)
    return register_material(MaterialType.LAMBERTIAN, texture_id=texture)
