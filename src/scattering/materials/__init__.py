"""Materials module for surface and volume scattering.

This module implements the material models a path tracer consults at every
ray-surface hit:

Components:
    material: Material tags, ScatterRecord and the material registry
    lambertian: Ideal diffuse reflection (cosine-weighted sampling)
    metal: Specular reflection with optional fuzz
    dielectric: Glass-like materials with refraction (Schlick Fresnel)
    diffuse_light: Front-face area light emission
    isotropic: Uniform phase function for participating media
    dispatch: emitted/scatter/scattering_pdf over the material variants
    library: MaterialLibrary with configuration round trip
    probe: Host-side kernels returning NumPy arrays

Each material provides:
    - emitted(): Radiance emitted at the hit (black unless a light)
    - scatter(): Absorb, or produce a scattered ray with its attenuation
    - scattering_pdf(): Probability density of a scattered direction

All scattering computations are implemented as Taichi functions; randomness
comes from an explicit stream index (see core.sampling).
"""

from .dielectric import (
    add_dielectric_material,
    choose_dielectric_direction,
    fresnel_reflectance,
    refraction_ratio,
    scatter_dielectric,
    will_reflect,
)
from .diffuse_light import add_diffuse_light_material, emitted_diffuse_light
from .dispatch import (
    emitted,
    emitted_by_id,
    scatter,
    scatter_by_id,
    scattering_pdf,
    scattering_pdf_by_id,
)
from .isotropic import (
    ISOTROPIC_PDF,
    add_isotropic_material,
    scatter_isotropic,
    scattering_pdf_isotropic,
)
from .lambertian import (
    add_lambertian_material,
    pdf_lambertian,
    scatter_lambertian,
    scattering_pdf_lambertian,
)
from .library import LibraryConfig, MaterialInfo, MaterialLibrary, TextureInfo
from .material import (
    MAX_MATERIALS,
    Material,
    MaterialType,
    ScatterRecord,
    check_material_id,
    clear_materials,
    get_material,
    get_material_count,
    get_material_kind,
    get_material_params,
    get_material_type,
    make_absorbed_record,
    make_sampled_record,
    make_specular_record,
    register_material,
)
from .metal import add_metal_material, clamp_fuzz, scatter_metal
from .probe import (
    MAX_PROBE_SAMPLES,
    ScatterSamples,
    evaluate_emitted,
    evaluate_scattering_pdf,
    sample_scatter,
)

__all__ = [
    # Registry
    "MAX_MATERIALS",
    "Material",
    "MaterialType",
    "ScatterRecord",
    "make_absorbed_record",
    "make_sampled_record",
    "make_specular_record",
    "register_material",
    "clear_materials",
    "check_material_id",
    "get_material",
    "get_material_count",
    "get_material_kind",
    "get_material_params",
    "get_material_type",
    # Lambertian
    "pdf_lambertian",
    "scatter_lambertian",
    "scattering_pdf_lambertian",
    "add_lambertian_material",
    # Metal
    "scatter_metal",
    "clamp_fuzz",
    "add_metal_material",
    # Dielectric
    "refraction_ratio",
    "will_reflect",
    "fresnel_reflectance",
    "choose_dielectric_direction",
    "scatter_dielectric",
    "add_dielectric_material",
    # DiffuseLight
    "emitted_diffuse_light",
    "add_diffuse_light_material",
    # Isotropic
    "ISOTROPIC_PDF",
    "scatter_isotropic",
    "scattering_pdf_isotropic",
    "add_isotropic_material",
    # Dispatch
    "emitted",
    "scatter",
    "scattering_pdf",
    "emitted_by_id",
    "scatter_by_id",
    "scattering_pdf_by_id",
    # Library
    "MaterialLibrary",
    "MaterialInfo",
    "TextureInfo",
    "LibraryConfig",
    # Probes
    "MAX_PROBE_SAMPLES",
    "ScatterSamples",
    "sample_scatter",
    "evaluate_scattering_pdf",
    "evaluate_emitted",
]
