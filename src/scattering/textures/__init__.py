"""Texture registry: solid colors and 3D checker patterns.

Materials reference textures by id; a material constructed from a flat
color wraps it in a solid-color texture automatically.
"""

from .texture import (
    MAX_TEXTURES,
    Texture,
    TextureType,
    add_checker_texture,
    add_solid_color_texture,
    check_texture_id,
    clear_textures,
    get_texture,
    get_texture_count,
    get_texture_type,
    resolve_texture,
    texture_value,
    texture_value_by_id,
    validate_color,
)

__all__ = [
    "MAX_TEXTURES",
    "Texture",
    "TextureType",
    "add_checker_texture",
    "add_solid_color_texture",
    "check_texture_id",
    "clear_textures",
    "get_texture",
    "get_texture_count",
    "get_texture_type",
    "resolve_texture",
    "texture_value",
    "texture_value_by_id",
    "validate_color",
]
