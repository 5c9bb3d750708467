"""Material scattering model for Taichi-based path tracers.

This package provides the part of a path tracer that decides what happens
when a ray hits a surface, with support for:
- Lambertian, metal, dielectric, diffuse light and isotropic materials
- Solid-color and checker textures shared by id
- Explicit per-lane random streams for reproducible parallel sampling
- Host-side probes for checking material statistics

Subpackages:
    core: Rays, vector formulas, orthonormal bases and random streams
    geometry: Hit records and a sphere primitive producing them
    textures: Texture registry and evaluation
    materials: Material models, dispatch, library and probes
"""

__version__ = "0.1.0"
