"""Texture registry and evaluation.

A texture maps surface coordinates (u, v) and a hit point to a color. Two
kinds are supported:

    - SOLID_COLOR: a constant color. Materials built directly from a color
      wrap it in one of these automatically.
    - CHECKER: a 3D checker pattern alternating between two colors with a
      given cell size.

Textures live in a Structure-of-Arrays registry for the lifetime of the
scene and are referenced by integer id, so several materials can share one
texture.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.scattering.textures.texture import add_checker_texture
    >>> checker = add_checker_texture(0.32, (0.2, 0.3, 0.1), (0.9, 0.9, 0.9))
    >>> # Within a Taichi kernel:
    >>> # color = texture_value_by_id(checker, rec.u, rec.v, rec.point)
"""

import logging
from collections.abc import Sequence
from enum import IntEnum

import taichi as ti
import taichi.math as tm

from src.scattering.core.ray import validate_vec3

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3


class TextureType(IntEnum):
    """Enumeration of supported texture kinds."""

    SOLID_COLOR = 0
    CHECKER = 1


@ti.dataclass
class Texture:
    """Texture parameters.

    Attributes:
        kind: The TextureType of the texture.
        even: The solid color, or the color of even checker cells.
        odd: The color of odd checker cells (unused for solid colors).
        scale: The checker cell size in world units (unused for solid colors).
    """

    kind: ti.i32
    even: vec3
    odd: vec3
    scale: ti.f32


# =============================================================================
# Texture Field Storage
# =============================================================================

# Maximum number of textures in the scene
MAX_TEXTURES = 1024

texture_kinds = ti.field(dtype=ti.i32, shape=MAX_TEXTURES)
texture_even_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TEXTURES)
texture_odd_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TEXTURES)
texture_scales = ti.field(dtype=ti.f32, shape=MAX_TEXTURES)
num_textures = ti.field(dtype=ti.i32, shape=())


def validate_color(color: Sequence[float], name: str = "color") -> tuple[float, float, float]:
    """Check that a color has three finite components.

    Components are not restricted to [0, 1]: colors are linear HDR values.

    Args:
        color: The color as an (R, G, B) sequence.
        name: Parameter name used in error messages.

    Returns:
        The color as a tuple of floats.

    Raises:
        ValueError: If the color does not have exactly three finite components.
    """
    return validate_vec3(color, name)


def clear_textures() -> None:
    """Clear all textures.

    Resets the texture count to zero. Existing data in the fields will be
    overwritten when new textures are added.
    """
    num_textures[None] = 0


def _add_texture(
    kind: TextureType,
    even: tuple[float, float, float],
    odd: tuple[float, float, float],
    scale: float,
) -> int:
    idx = num_textures[None]
    if idx >= MAX_TEXTURES:
        raise RuntimeError(f"Maximum number of textures ({MAX_TEXTURES}) exceeded")

    texture_kinds[idx] = int(kind)
    texture_even_colors[idx] = vec3(even[0], even[1], even[2])
    texture_odd_colors[idx] = vec3(odd[0], odd[1], odd[2])
    texture_scales[idx] = scale
    num_textures[None] = idx + 1
    logger.debug("Registered %s texture %d", kind.name.lower(), idx)
    return idx


def add_solid_color_texture(color: Sequence[float]) -> int:
    """Add a constant-color texture.

    Args:
        color: The color as (R, G, B). Values may exceed 1.0 (HDR).

    Returns:
        The id of the added texture.

    Raises:
        RuntimeError: If the maximum number of textures is exceeded.
        ValueError: If the color is malformed.
    """
    rgb = validate_color(color)
    return _add_texture(TextureType.SOLID_COLOR, rgb, rgb, 1.0)


def add_checker_texture(
    scale: float,
    even: Sequence[float],
    odd: Sequence[float],
) -> int:
    """Add a 3D checker texture.

    The cell containing point p is even when
    floor(p.x / scale) + floor(p.y / scale) + floor(p.z / scale) is even.

    Args:
        scale: The cell size in world units. Must be positive.
        even: The color of even cells.
        odd: The color of odd cells.

    Returns:
        The id of the added texture.

    Raises:
        RuntimeError: If the maximum number of textures is exceeded.
        ValueError: If scale is not positive or a color is malformed.
    """
    if not scale > 0.0:
        raise ValueError(f"Checker scale = {scale} must be positive")
    return _add_texture(
        TextureType.CHECKER,
        validate_color(even, "even"),
        validate_color(odd, "odd"),
        scale,
    )


def get_texture_count() -> int:
    """Get the number of textures in the registry."""
    return int(num_textures[None])


def get_texture_type(texture_id: int) -> TextureType:
    """Get the kind of a registered texture (Python side).

    Raises:
        ValueError: If texture_id does not name a registered texture.
    """
    check_texture_id(texture_id)
    return TextureType(int(texture_kinds[texture_id]))


def check_texture_id(texture_id: int) -> None:
    """Raise ValueError unless texture_id names a registered texture."""
    if texture_id < 0 or texture_id >= num_textures[None]:
        raise ValueError(f"Invalid texture_id: {texture_id}")


def resolve_texture(
    color: Sequence[float] | None,
    texture_id: int | None,
) -> int:
    """Turn the (color, texture_id) constructor arguments into a texture id.

    Materials accept either a flat color, wrapped here in a new solid-color
    texture, or the id of an existing texture to share.

    Raises:
        ValueError: If both or neither argument is given, or the id is invalid.
    """
    if (color is None) == (texture_id is None):
        raise ValueError("Exactly one of a color or a texture_id must be given")
    if texture_id is None:
        return add_solid_color_texture(color)
    check_texture_id(texture_id)
    return texture_id


# =============================================================================
# Texture Evaluation
# =============================================================================


@ti.func
def get_texture(texture_id: ti.i32) -> Texture:
    """Load a texture from the registry by id."""
    return Texture(
        kind=texture_kinds[texture_id],
        even=texture_even_colors[texture_id],
        odd=texture_odd_colors[texture_id],
        scale=texture_scales[texture_id],
    )


@ti.func
def texture_value(tex: Texture, u: ti.f32, v: ti.f32, p: vec3) -> vec3:
    """Evaluate a texture at surface coordinates (u, v) and point p.

    Args:
        tex: The texture to evaluate.
        u: First surface coordinate.
        v: Second surface coordinate.
        p: The hit point in world space.

    Returns:
        The texture color.
    """
    result = tex.even

    if tex.kind == int(TextureType.CHECKER):
        inv_scale = 1.0 / tex.scale
        x_int = ti.cast(ti.floor(inv_scale * p.x), ti.i32)
        y_int = ti.cast(ti.floor(inv_scale * p.y), ti.i32)
        z_int = ti.cast(ti.floor(inv_scale * p.z), ti.i32)
        if (x_int + y_int + z_int) % 2 != 0:
            result = tex.odd

    return result


@ti.func
def texture_value_by_id(texture_id: ti.i32, u: ti.f32, v: ti.f32, p: vec3) -> vec3:
    """Evaluate a registered texture by id.

    Returns:
        The texture color, or black for an id outside the registry.
    """
    result = vec3(0.0, 0.0, 0.0)
    if 0 <= texture_id < num_textures[None]:
        result = texture_value(get_texture(texture_id), u, v, p)
    return result
