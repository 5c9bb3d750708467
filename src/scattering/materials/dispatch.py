"""Material dispatch over the closed set of material variants.

The three operations of the material interface are selected here by the
material's kind tag:

    - emitted(): radiance leaving the surface without being scattered
    - scatter(): absorb or scatter an incoming ray
    - scattering_pdf(): density of a scattered direction

Textured variants (Lambertian, DiffuseLight, Isotropic) look up their color
from the texture registry at the hit's surface coordinates before delegating
to the variant implementation. The *_by_id forms load the material named by
the hit record from the material registry.

Example:
    >>> # Within a Taichi kernel, after intersecting the scene:
    >>> # emission = emitted_by_id(ray, rec)
    >>> # record = scatter_by_id(ray, rec, stream)
    >>> # if record.did_scatter == 1 and record.is_specular == 0:
    >>> #     weight = scattering_pdf_by_id(ray, rec, record.scattered) / record.pdf
"""

import taichi as ti
import taichi.math as tm

from src.scattering.core.ray import Ray
from src.scattering.geometry.hit_record import HitRecord
from src.scattering.materials.dielectric import scatter_dielectric
from src.scattering.materials.diffuse_light import emitted_diffuse_light
from src.scattering.materials.isotropic import scatter_isotropic, scattering_pdf_isotropic
from src.scattering.materials.lambertian import scatter_lambertian, scattering_pdf_lambertian
from src.scattering.materials.material import (
    Material,
    MaterialType,
    ScatterRecord,
    get_material,
    get_material_type,
    make_absorbed_record,
)
from src.scattering.materials.metal import scatter_metal
from src.scattering.textures.texture import texture_value_by_id

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def emitted(
    material: Material,
    ray_in: Ray,
    rec: HitRecord,
    u: ti.f32,
    v: ti.f32,
    p: vec3,
) -> vec3:
    """Radiance emitted by a material at a hit.

    Args:
        material: The material that was hit.
        ray_in: The incoming ray.
        rec: The hit record; front_face decides light visibility.
        u: First surface coordinate for the texture lookup.
        v: Second surface coordinate for the texture lookup.
        p: The point for the texture lookup.

    Returns:
        The emitted radiance, black for every non-emissive material.
    """
    result = vec3(0.0, 0.0, 0.0)
    if material.kind == int(MaterialType.DIFFUSE_LIGHT):
        emit = texture_value_by_id(material.texture_id, u, v, p)
        result = emitted_diffuse_light(emit, rec)
    return result


@ti.func
def scatter(
    material: Material,
    ray_in: Ray,
    rec: HitRecord,
    stream: ti.i32,
) -> ScatterRecord:
    """Dispatch to the appropriate material scattering function.

    Args:
        material: The material that was hit.
        ray_in: The incoming ray.
        rec: The hit record.
        stream: Random stream owned by the calling lane.

    Returns:
        The ScatterRecord of the variant. DiffuseLight and unknown kinds
        absorb the ray.
    """
    record = make_absorbed_record()

    if material.kind == int(MaterialType.LAMBERTIAN):
        albedo = texture_value_by_id(material.texture_id, rec.u, rec.v, rec.point)
        record = scatter_lambertian(albedo, ray_in, rec, stream)

    elif material.kind == int(MaterialType.METAL):
        record = scatter_metal(material.albedo, material.fuzz, ray_in, rec, stream)

    elif material.kind == int(MaterialType.DIELECTRIC):
        record = scatter_dielectric(material.ir, ray_in, rec, stream)

    elif material.kind == int(MaterialType.ISOTROPIC):
        albedo = texture_value_by_id(material.texture_id, rec.u, rec.v, rec.point)
        record = scatter_isotropic(albedo, ray_in, rec, stream)

    return record


@ti.func
def scattering_pdf(
    material: Material,
    ray_in: Ray,
    rec: HitRecord,
    scattered: Ray,
) -> ti.f32:
    """Density of a scattered ray under the material's sampling distribution.

    Returns:
        The solid-angle density, 0 for specular and non-scattering materials.
    """
    pdf = 0.0
    if material.kind == int(MaterialType.LAMBERTIAN):
        pdf = scattering_pdf_lambertian(rec, scattered)
    elif material.kind == int(MaterialType.ISOTROPIC):
        pdf = scattering_pdf_isotropic()
    return pdf


@ti.func
def emitted_by_id(ray_in: Ray, rec: HitRecord) -> vec3:
    """emitted() for the material named by rec.material_id at the hit."""
    result = vec3(0.0, 0.0, 0.0)
    if get_material_type(rec.material_id) >= 0:
        result = emitted(get_material(rec.material_id), ray_in, rec, rec.u, rec.v, rec.point)
    return result


@ti.func
def scatter_by_id(ray_in: Ray, rec: HitRecord, stream: ti.i32) -> ScatterRecord:
    """scatter() for the material named by rec.material_id.

    Invalid material ids absorb the ray.
    """
    record = make_absorbed_record()
    if get_material_type(rec.material_id) >= 0:
        record = scatter(get_material(rec.material_id), ray_in, rec, stream)
    return record


@ti.func
def scattering_pdf_by_id(ray_in: Ray, rec: HitRecord, scattered: Ray) -> ti.f32:
    """scattering_pdf() for the material named by rec.material_id."""
    pdf = 0.0
    if get_material_type(rec.material_id) >= 0:
        pdf = scattering_pdf(get_material(rec.material_id), ray_in, rec, scattered)
    return pdf
