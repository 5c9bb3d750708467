"""Diffuse area light material.

A DiffuseLight never scatters. It emits the radiance given by its texture
from its front face only; hits on the back face see black.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.scattering.materials.diffuse_light import add_diffuse_light_material
    >>> lamp = add_diffuse_light_material(emit=(4.0, 4.0, 4.0))
"""

from collections.abc import Sequence

import taichi as ti
import taichi.math as tm

from src.scattering.geometry.hit_record import HitRecord
from src.scattering.materials.material import MaterialType, register_material
from src.scattering.textures.texture import resolve_texture

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def emitted_diffuse_light(emit: vec3, rec: HitRecord) -> vec3:
    """Radiance emitted towards the incoming ray.

    Args:
        emit: The emission color sampled from the light's texture.
        rec: The hit record; only front_face is used.

    Returns:
        emit on the front face, black on the back face.
    """
    result = vec3(0.0, 0.0, 0.0)
    if rec.front_face == 1:
        result = emit
    return result


def add_diffuse_light_material(
    emit: Sequence[float] | None = None,
    texture_id: int | None = None,
) -> int:
    """Add a diffuse light material to the material registry.

    Exactly one of emit or texture_id must be given. Emission values may
    exceed 1.

    Args:
        emit: The emitted radiance as (R, G, B).
        texture_id: Id of an existing texture providing the emission.

    Returns:
        The id of the added material.

    Raises:
        RuntimeError: If a registry is full.
        ValueError: If the arguments are inconsistent or malformed.
    """
    texture = resolve_texture(emit, texture_id)
    return register_material(MaterialType.DIFFUSE_LIGHT, texture_id=texture)
