"""Dielectric (glass/water) material implementation.

This module implements transparent materials like glass and water with
refraction and Fresnel reflectance.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when (n1 / n2) * sin(theta1) > 1

Each scatter draws exactly one uniform value and reflects when total
internal reflection forces it or when the draw falls below the Fresnel
reflectance; otherwise it refracts. Dielectrics never absorb, so the
attenuation is white. The outcome is a choice between two deterministic
directions, so the ScatterRecord is flagged is_specular.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.scattering.materials.dielectric import add_dielectric_material
    >>> glass = add_dielectric_material(ir=1.5)
"""

import taichi as ti
import taichi.math as tm

from src.scattering.core.ray import (
    Ray,
    dot,
    make_ray,
    normalize,
    reflect,
    refract,
    schlick_fresnel,
)
from src.scattering.core.sampling import random_float
from src.scattering.geometry.hit_record import HitRecord
from src.scattering.materials.material import (
    MaterialType,
    ScatterRecord,
    make_specular_record,
    register_material,
)

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def refraction_ratio(ir: ti.f32, front_face: ti.i32) -> ti.f32:
    """Ratio n_incident / n_transmitted for a hit on the given side.

    Entering the material (front_face = 1) the ratio is 1 / ir, leaving it
    the ratio is ir.
    """
    ratio = 1.0 / ir
    if front_face == 0:
        ratio = ir
    return ratio


@ti.func
def _incidence_cosine(unit_direction: vec3, normal: vec3) -> ti.f32:
    return tm.min(dot(-unit_direction, normal), 1.0)


@ti.func
def will_reflect(ir: ti.f32, incident_direction: vec3, normal: vec3, front_face: ti.i32) -> ti.i32:
    """Determine if total internal reflection will occur.

    Args:
        ir: Index of refraction of the material.
        incident_direction: The incoming ray direction.
        normal: The surface normal, facing against the incoming ray.
        front_face: 1 if the ray hits the outside of the surface, 0 otherwise.

    Returns:
        1 if refraction is impossible, 0 otherwise.
    """
    ratio = refraction_ratio(ir, front_face)
    cos_theta = _incidence_cosine(normalize(incident_direction), normal)
    sin_theta = ti.sqrt(tm.max(0.0, 1.0 - cos_theta * cos_theta))
    result = 0
    if ratio * sin_theta > 1.0:
        result = 1
    return result


@ti.func
def fresnel_reflectance(
    ir: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.f32:
    """Compute Fresnel reflectance using Schlick's approximation.

    Returns:
        The reflectance coefficient in [0, 1].
    """
    ratio = refraction_ratio(ir, front_face)
    cos_theta = _incidence_cosine(normalize(incident_direction), normal)
    return schlick_fresnel(cos_theta, ratio)


@ti.func
def choose_dielectric_direction(
    ir: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    sample: ti.f32,
):
    """Choose between reflection and refraction for a given uniform draw.

    Args:
        ir: Index of refraction of the material.
        incident_direction: The incoming ray direction (need not be unit).
        normal: The surface normal, facing against the incoming ray.
        front_face: 1 if the ray hits the outside of the surface, 0 otherwise.
        sample: A uniform value in [0, 1).

    Returns:
        A tuple of (direction, reflected) where reflected is 1 when the
        mirror direction was chosen.
    """
    unit_direction = normalize(incident_direction)

    direction = vec3(0.0, 0.0, 0.0)
    reflected = 0
    if (
        will_reflect(ir, unit_direction, normal, front_face) == 1
        or sample < fresnel_reflectance(ir, unit_direction, normal, front_face)
    ):
        direction = reflect(unit_direction, normal)
        reflected = 1
    else:
        direction = refract(unit_direction, normal, refraction_ratio(ir, front_face))

    return direction, reflected


@ti.func
def scatter_dielectric(
    ir: ti.f32,
    ray_in: Ray,
    rec: HitRecord,
    stream: ti.i32,
) -> ScatterRecord:
    """Compute the scattered ray for a dielectric surface.

    Args:
        ir: Index of refraction of the material.
        ray_in: The incoming ray.
        rec: The hit record.
        stream: Random stream owned by the calling lane.

    Returns:
        A specular ScatterRecord with white attenuation. Dielectrics always
        scatter.
    """
    sample = random_float(stream)
    direction, _ = choose_dielectric_direction(
        ir, ray_in.direction, rec.normal, rec.front_face, sample
    )
    scattered = make_ray(rec.point, direction, ray_in.time)
    return make_specular_record(1, vec3(1.0, 1.0, 1.0), scattered)


def add_dielectric_material(ir: float = 1.5) -> int:
    """Add a dielectric material to the material registry.

    Args:
        ir: Index of refraction relative to the surrounding medium. Default
            is 1.5 (typical glass). Common values:
            - Air: 1.0
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4

    Returns:
        The id of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If ir is not positive.
    """
    if not ir > 0.0:
        raise ValueError(
            f"Index of refraction = {ir} is not positive. "
            "The refraction ratio 1 / ir would be undefined."
        )
    return register_material(MaterialType.DIELECTRIC, ir=ir)
