"""Base material interface and material registry.

Every material is one variant of a closed set, tagged by MaterialType and
stored in a Structure-of-Arrays registry. The three operations of the
material interface are dispatched on that tag (see dispatch.py):

    - emitted(): radiance emitted by the surface (black unless emissive)
    - scatter(): absorb the ray or produce a scattered ray, an attenuation
      and, for materials that sample a continuous distribution, its PDF
    - scattering_pdf(): density of a given scattered direction under the
      material's sampling distribution

The outcome of scatter() is a single ScatterRecord. Its two flags replace
output parameters:

    - did_scatter == 0: the ray was absorbed, no other field is meaningful.
    - is_specular == 1: the direction is a deterministic function of the
      incoming ray (mirror, glass), so no continuous density exists and pdf
      is 0. The caller must use the sample directly instead of dividing by
      a density.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.scattering.materials.material import MaterialType, register_material
    >>> mat_id = register_material(MaterialType.DIELECTRIC, ir=1.5)
"""

import logging
from collections.abc import Sequence
from enum import IntEnum
from typing import Any

import taichi as ti
import taichi.math as tm

from src.scattering.core.ray import Ray
from src.scattering.textures.texture import validate_color

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Used for material dispatch to determine which scattering function to
    call.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2
    DIFFUSE_LIGHT = 3
    ISOTROPIC = 4


@ti.dataclass
class Material:
    """Tagged material parameters.

    Attributes:
        kind: The MaterialType of the material.
        texture_id: Texture providing albedo (Lambertian, Isotropic) or
            emission (DiffuseLight). -1 for materials without a texture.
        albedo: Reflective color of a Metal.
        fuzz: Reflection perturbation of a Metal, in [0, 1].
        ir: Index of refraction of a Dielectric.
    """

    kind: ti.i32
    texture_id: ti.i32
    albedo: vec3
    fuzz: ti.f32
    ir: ti.f32


@ti.dataclass
class ScatterRecord:
    """Result of a scatter evaluation.

    Attributes:
        did_scatter: 1 if a scattered ray was produced, 0 if absorbed.
        is_specular: 1 if the direction was chosen deterministically and has
            no continuous density, 0 if it was importance sampled.
        attenuation: Color multiplier for the light carried by the scattered
            ray.
        scattered: The scattered ray, starting at the hit point with the
            incoming ray's time.
        pdf: Solid-angle density of the sampled direction. Only meaningful
            when did_scatter == 1 and is_specular == 0.
    """

    did_scatter: ti.i32
    is_specular: ti.i32
    attenuation: vec3
    scattered: Ray
    pdf: ti.f32


@ti.func
def make_absorbed_record() -> ScatterRecord:
    """ScatterRecord for a ray absorbed by the surface."""
    return ScatterRecord(
        did_scatter=0,
        is_specular=0,
        attenuation=vec3(0.0, 0.0, 0.0),
        scattered=Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, 0.0), time=0.0),
        pdf=0.0,
    )


@ti.func
def make_sampled_record(attenuation: vec3, scattered: Ray, pdf: ti.f32) -> ScatterRecord:
    """ScatterRecord for a direction importance sampled with density pdf."""
    return ScatterRecord(
        did_scatter=1,
        is_specular=0,
        attenuation=attenuation,
        scattered=scattered,
        pdf=pdf,
    )


@ti.func
def make_specular_record(did_scatter: ti.i32, attenuation: vec3, scattered: Ray) -> ScatterRecord:
    """ScatterRecord for a deterministic (delta distribution) direction."""
    return ScatterRecord(
        did_scatter=did_scatter,
        is_specular=1,
        attenuation=attenuation,
        scattered=scattered,
        pdf=0.0,
    )


# =============================================================================
# Material Field Storage
# =============================================================================

# Maximum number of materials in the scene
MAX_MATERIALS = 1024

material_kinds = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_texture_ids = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_fuzzes = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_irs = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Clear all materials.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_materials[None] = 0


def register_material(
    kind: MaterialType,
    texture_id: int = -1,
    albedo: Sequence[float] = (0.0, 0.0, 0.0),
    fuzz: float = 0.0,
    ir: float = 1.0,
) -> int:
    """Store a material in the registry.

    This is the low-level entry point used by the per-variant constructors
    (add_lambertian_material, add_metal_material, ...), which validate and
    normalize their parameters first.

    Args:
        kind: The material variant.
        texture_id: Texture id for textured variants, -1 otherwise.
        albedo: Metal reflective color.
        fuzz: Metal fuzz.
        ir: Dielectric index of refraction.

    Returns:
        The id of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    rgb = validate_color(albedo, "albedo")
    material_kinds[idx] = int(kind)
    material_texture_ids[idx] = texture_id
    material_albedos[idx] = vec3(rgb[0], rgb[1], rgb[2])
    material_fuzzes[idx] = fuzz
    material_irs[idx] = ir
    num_materials[None] = idx + 1
    logger.debug("Registered %s material %d", MaterialType(kind).name.lower(), idx)
    return idx


def get_material_count() -> int:
    """Get the number of materials in the registry."""
    return int(num_materials[None])


def check_material_id(material_id: int) -> None:
    """Raise ValueError unless material_id names a registered material."""
    if material_id < 0 or material_id >= num_materials[None]:
        raise ValueError(f"Invalid material_id: {material_id}")


def get_material_kind(material_id: int) -> MaterialType:
    """Get the variant of a registered material (Python side).

    Raises:
        ValueError: If material_id does not name a registered material.
    """
    check_material_id(material_id)
    return MaterialType(int(material_kinds[material_id]))


def get_material_params(material_id: int) -> dict[str, Any]:
    """Read back the stored parameters of a material (Python side).

    Only the parameters meaningful for the material's variant are returned.

    Raises:
        ValueError: If material_id does not name a registered material.
    """
    kind = get_material_kind(material_id)
    if kind == MaterialType.METAL:
        albedo = material_albedos[material_id]
        return {
            "albedo": (float(albedo[0]), float(albedo[1]), float(albedo[2])),
            "fuzz": float(material_fuzzes[material_id]),
        }
    if kind == MaterialType.DIELECTRIC:
        return {"ir": float(material_irs[material_id])}
    return {"texture_id": int(material_texture_ids[material_id])}


@ti.func
def get_material(material_id: ti.i32) -> Material:
    """Load a material from the registry by id."""
    return Material(
        kind=material_kinds[material_id],
        texture_id=material_texture_ids[material_id],
        albedo=material_albedos[material_id],
        fuzz=material_fuzzes[material_id],
        ir=material_irs[material_id],
    )


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material type for a given material ID inside a kernel.

    Returns:
        The material type as an integer (see MaterialType), or -1 for
        invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_kinds[material_id]
    return result
