"""Material library for building and serializing material sets.

This module provides a high-level API over the texture and material
registries. It tracks every texture and material it creates so that the
whole set can be inspected from Python and exported to, or rebuilt from, a
plain configuration.

The MaterialLibrary maintains:
- The texture id and material id spaces used by the Taichi registries
- Per-entry parameters as they were stored (after clamping)
- Configuration round trip via LibraryConfig or plain dictionaries

Materials built from a flat color get an explicit solid-color texture
recorded in the library, so an exported configuration always references
textures by id and reloads with identical ids.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.scattering.materials.library import MaterialLibrary
    >>> library = MaterialLibrary()
    >>> checker = library.add_checker_texture(0.32, (0.2, 0.3, 0.1), (0.9, 0.9, 0.9))
    >>> ground = library.add_lambertian_material(texture_id=checker)
    >>> glass = library.add_dielectric_material(ir=1.5)
    >>> data = library.to_dict()
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from src.scattering.materials.dielectric import add_dielectric_material
from src.scattering.materials.diffuse_light import add_diffuse_light_material
from src.scattering.materials.isotropic import add_isotropic_material
from src.scattering.materials.lambertian import add_lambertian_material
from src.scattering.materials.material import (
    MAX_MATERIALS,
    MaterialType,
    clear_materials,
    get_material_count,
    get_material_params,
)
from src.scattering.materials.metal import add_metal_material
from src.scattering.textures.texture import (
    MAX_TEXTURES,
    TextureType,
    add_checker_texture,
    add_solid_color_texture,
    check_texture_id,
    clear_textures,
    get_texture_count,
    validate_color,
)

logger = logging.getLogger(__name__)

# Variants whose color comes from a texture, with the name of their color
# parameter in configurations
_TEXTURED_COLOR_KEYS = {
    MaterialType.LAMBERTIAN: "albedo",
    MaterialType.DIFFUSE_LIGHT: "emit",
    MaterialType.ISOTROPIC: "albedo",
}


@dataclass
class TextureInfo:
    """Information about a registered texture.

    Attributes:
        texture_id: The texture registry id.
        texture_type: The kind of texture.
        params: The stored texture parameters.
    """

    texture_id: int
    texture_type: TextureType
    params: dict[str, Any]


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The material registry id.
        material_type: The material variant.
        params: The stored material parameters. Textured variants carry
            a texture_id, Metal an albedo and fuzz, Dielectric an ir.
    """

    material_id: int
    material_type: MaterialType
    params: dict[str, Any]


@dataclass
class LibraryConfig:
    """Configuration for material library serialization.

    Attributes:
        textures: List of texture configurations, in id order.
        materials: List of material configurations, in id order.
    """

    textures: list[dict[str, Any]] = field(default_factory=list)
    materials: list[dict[str, Any]] = field(default_factory=list)


def _parse_type(value: Any, enum_type: type, kind: str) -> Any:
    """Look up an enum member from its lower-case configuration name."""
    name = str(value).upper()
    if name not in enum_type.__members__:
        raise ValueError(f"Unknown {kind} type: {value}")
    return enum_type[name]


class MaterialLibrary:
    """Registry front end tracking textures and materials.

    Creating a library clears the global texture and material registries;
    only one library should be in use at a time.

    Attributes:
        textures: List of TextureInfo for all registered textures.
        materials: List of MaterialInfo for all registered materials.

    Example:
        >>> library = MaterialLibrary()
        >>> red = library.add_lambertian_material(albedo=(0.8, 0.1, 0.1))
        >>> gold = library.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.3)
        >>> lamp = library.add_diffuse_light_material(emit=(4.0, 4.0, 4.0))
        >>> library.get_material_type_python(gold)
        <MaterialType.METAL: 1>
    """

    def __init__(self) -> None:
        """Initialize an empty library."""
        self.textures: list[TextureInfo] = []
        self.materials: list[MaterialInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear the registries and the local tracking."""
        clear_textures()
        clear_materials()
        self.textures.clear()
        self.materials.clear()

    def clear(self) -> None:
        """Remove every texture and material."""
        self._clear_all()
        logger.debug("Cleared material library")

    # =========================================================================
    # Texture Management
    # =========================================================================

    def add_solid_color_texture(self, color: Sequence[float]) -> int:
        """Add a constant-color texture.

        Args:
            color: The color as (R, G, B).

        Returns:
            The id of the added texture.

        Raises:
            RuntimeError: If the maximum number of textures is exceeded.
            ValueError: If the color is malformed.
        """
        rgb = validate_color(color)
        texture_id = add_solid_color_texture(rgb)
        self.textures.append(
            TextureInfo(
                texture_id=texture_id,
                texture_type=TextureType.SOLID_COLOR,
                params={"color": rgb},
            )
        )
        return texture_id

    def add_checker_texture(
        self,
        scale: float,
        even: Sequence[float],
        odd: Sequence[float],
    ) -> int:
        """Add a 3D checker texture.

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
        texture_id = add_checker_texture(scale, even, odd)
        self.textures.append(
            TextureInfo(
                texture_id=texture_id,
                texture_type=TextureType.CHECKER,
                params={
                    "scale": float(scale),
                    "even": validate_color(even, "even"),
                    "odd": validate_color(odd, "odd"),
                },
            )
        )
        return texture_id

    def _texture_for(
        self,
        color: Sequence[float] | None,
        texture_id: int | None,
        color_name: str,
    ) -> int:
        """Resolve the color-or-texture arguments of a textured material."""
        if (color is None) == (texture_id is None):
            raise ValueError(f"Exactly one of {color_name} or texture_id must be given")
        if texture_id is None:
            return self.add_solid_color_texture(color)
        check_texture_id(texture_id)
        return texture_id

    # =========================================================================
    # Material Management
    # =========================================================================

    def _track_material(self, material_id: int, material_type: MaterialType) -> int:
        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=material_type,
                params=get_material_params(material_id),
            )
        )
        return material_id

    def add_lambertian_material(
        self,
        albedo: Sequence[float] | None = None,
        texture_id: int | None = None,
    ) -> int:
        """Add a Lambertian (diffuse) material.

        Args:
            albedo: The diffuse reflectance color as (R, G, B).
            texture_id: Id of an existing texture providing the albedo.

        Returns:
            The id of the added material.

        Raises:
            RuntimeError: If a registry is full.
            ValueError: If not exactly one of albedo or texture_id is given.
        """
        texture = self._texture_for(albedo, texture_id, "albedo")
        material_id = add_lambertian_material(texture_id=texture)
        return self._track_material(material_id, MaterialType.LAMBERTIAN)

    def add_metal_material(
        self,
        albedo: Sequence[float],
        fuzz: float = 0.0,
    ) -> int:
        """Add a metal (specular reflective) material.

        Args:
            albedo: The reflective color as (R, G, B).
            fuzz: The reflection perturbation, clamped to [0, 1].

        Returns:
            The id of the added material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If the albedo is malformed.
        """
        material_id = add_metal_material(albedo, fuzz)
        return self._track_material(material_id, MaterialType.METAL)

    def add_dielectric_material(self, ir: float = 1.5) -> int:
        """Add a dielectric (glass/water) material.

        Args:
            ir: Index of refraction. Default is 1.5 (typical glass).

        Returns:
            The id of the added material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If ir is not positive.
        """
        material_id = add_dielectric_material(ir)
        return self._track_material(material_id, MaterialType.DIELECTRIC)

    def add_diffuse_light_material(
        self,
        emit: Sequence[float] | None = None,
        texture_id: int | None = None,
    ) -> int:
        """Add a diffuse area light material.

        Args:
            emit: The emitted radiance as (R, G, B). May exceed 1.
            texture_id: Id of an existing texture providing the emission.

        Returns:
            The id of the added material.

        Raises:
            RuntimeError: If a registry is full.
            ValueError: If not exactly one of emit or texture_id is given.
        """
        texture = self._texture_for(emit, texture_id, "emit")
        material_id = add_diffuse_light_material(texture_id=texture)
        return self._track_material(material_id, MaterialType.DIFFUSE_LIGHT)

    def add_isotropic_material(
        self,
        albedo: Sequence[float] | None = None,
        texture_id: int | None = None,
    ) -> int:
        """Add an isotropic (participating medium) material.

        Args:
            albedo: The medium color as (R, G, B).
            texture_id: Id of an existing texture providing the albedo.

        Returns:
            The id of the added material.

        Raises:
            RuntimeError: If a registry is full.
            ValueError: If not exactly one of albedo or texture_id is given.
        """
        texture = self._texture_for(albedo, texture_id, "albedo")
        material_id = add_isotropic_material(texture_id=texture)
        return self._track_material(material_id, MaterialType.ISOTROPIC)

    # =========================================================================
    # Queries
    # =========================================================================

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material by id.

        Returns:
            MaterialInfo for the material, or None if not found.
        """
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def get_texture_info(self, texture_id: int) -> TextureInfo | None:
        """Get information about a texture by id.

        Returns:
            TextureInfo for the texture, or None if not found.
        """
        if 0 <= texture_id < len(self.textures):
            return self.textures[texture_id]
        return None

    def get_material_type_python(self, material_id: int) -> MaterialType | None:
        """Get the material type for a given material id (Python side).

        For kernel-side lookup, use the get_material_type() Taichi function.

        Returns:
            The MaterialType, or None for invalid material ids.
        """
        info = self.get_material_info(material_id)
        if info is None:
            return None
        return info.material_type

    def get_material_count(self) -> int:
        """Get the number of materials in the library."""
        return get_material_count()

    def get_texture_count(self) -> int:
        """Get the number of textures in the library."""
        return get_texture_count()

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_MATERIALS

    @staticmethod
    def get_max_textures() -> int:
        """Get the maximum number of textures supported."""
        return MAX_TEXTURES

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_config(self) -> LibraryConfig:
        """Export the library to a configuration object.

        Returns:
            A LibraryConfig containing all textures and materials.
        """
        config = LibraryConfig()

        for tex in self.textures:
            tex_config: dict[str, Any] = {"type": tex.texture_type.name.lower()}
            for key, value in tex.params.items():
                tex_config[key] = list(value) if isinstance(value, tuple) else value
            config.textures.append(tex_config)

        for mat in self.materials:
            mat_config: dict[str, Any] = {"type": mat.material_type.name.lower()}
            for key, value in mat.params.items():
                mat_config[key] = list(value) if isinstance(value, tuple) else value
            config.materials.append(mat_config)

        return config

    def from_config(self, config: LibraryConfig) -> None:
        """Load the library from a configuration object.

        Clears the current library, then loads textures followed by
        materials, so texture ids in the configuration stay valid.
        Textured materials may give a color ("albedo", or "emit" for
        lights) instead of a texture_id.

        Args:
            config: The library configuration to load.

        Raises:
            ValueError: If the configuration contains an unknown type or
                invalid data.
        """
        self.clear()

        for tex_config in config.textures:
            tex_type = _parse_type(tex_config.get("type", ""), TextureType, "texture")
            if tex_type == TextureType.SOLID_COLOR:
                self.add_solid_color_texture(tex_config.get("color", [0.5, 0.5, 0.5]))
            else:
                self.add_checker_texture(
                    tex_config.get("scale", 1.0),
                    tex_config.get("even", [0.0, 0.0, 0.0]),
                    tex_config.get("odd", [1.0, 1.0, 1.0]),
                )

        for mat_config in config.materials:
            mat_type = _parse_type(mat_config.get("type", ""), MaterialType, "material")
            if mat_type == MaterialType.METAL:
                self.add_metal_material(
                    mat_config.get("albedo", [0.8, 0.8, 0.8]),
                    mat_config.get("fuzz", 0.0),
                )
            elif mat_type == MaterialType.DIELECTRIC:
                self.add_dielectric_material(mat_config.get("ir", 1.5))
            else:
                color = mat_config.get(_TEXTURED_COLOR_KEYS[mat_type])
                texture_id = mat_config.get("texture_id")
                if mat_type == MaterialType.LAMBERTIAN:
                    self.add_lambertian_material(albedo=color, texture_id=texture_id)
                elif mat_type == MaterialType.DIFFUSE_LIGHT:
                    self.add_diffuse_light_material(emit=color, texture_id=texture_id)
                else:
                    self.add_isotropic_material(albedo=color, texture_id=texture_id)

        logger.info(
            "Loaded %d textures and %d materials",
            len(self.textures),
            len(self.materials),
        )

    def to_dict(self) -> dict[str, Any]:
        """Export the library to a dictionary (for JSON serialization).

        Returns:
            A dictionary with 'textures' and 'materials' keys.
        """
        config = self.to_config()
        return {
            "textures": config.textures,
            "materials": config.materials,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load the library from a dictionary.

        Args:
            data: Dictionary with 'textures' and 'materials' keys.
        """
        config = LibraryConfig(
            textures=data.get("textures", []),
            materials=data.get("materials", []),
        )
        self.from_config(config)
