"""Ray data structure and vector utilities for the scattering core.

This module provides the Ray dataclass carried between bounces and the
vector formulas the materials are built on (reflection, refraction and
Schlick's Fresnel approximation). All operations are Taichi functions so
they can be called from kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.scattering.core.ray import make_ray, ray_at, vec3
    >>> # Within a Taichi kernel:
    >>> # ray = make_ray(vec3(0.0), vec3(0.0, 0.0, -1.0), 0.5)
    >>> # point = ray_at(ray, 5.0)
"""

import math
from collections.abc import Sequence

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


def validate_vec3(value: Sequence[float], name: str = "vector") -> tuple[float, float, float]:
    """Check that a Python-side vector has three finite components.

    Raises:
        ValueError: If the value does not have exactly three finite components.
    """
    if len(value) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(value)}")
    components = (float(value[0]), float(value[1]), float(value[2]))
    for i, component in enumerate(components):
        if not math.isfinite(component):
            raise ValueError(f"{name} component {i} = {component} is not finite")
    return components


@ti.dataclass
class Ray:
    """A ray with an origin point, direction vector and time.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Not required to be
            unit length.
        time: The time at which the ray exists, used for motion sampling.
            Scattered rays inherit the time of the incoming ray.
    """

    origin: vec3
    direction: vec3
    time: ti.f32


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3, time: ti.f32) -> Ray:
    """Create a ray from origin, direction and time."""
    return Ray(origin=origin, direction=direction, time=time)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Squared length of a vector, avoiding the square root."""
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    return tm.normalize(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    return tm.cross(a, b)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector R = I - 2(I . N)N.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(unit_incident: vec3, normal: vec3, eta: ti.f32) -> vec3:
    """Refract a unit incident vector through a surface.

    Splits the refracted direction into the components perpendicular and
    parallel to the normal:
        r_perp = eta * (I + cos_theta * N)
        r_parallel = -sqrt(|1 - |r_perp|^2|) * N

    The caller is responsible for checking total internal reflection first;
    this function always returns a direction.

    Args:
        unit_incident: The incoming direction (must be normalized).
        normal: The surface normal, facing against the incident direction.
        eta: The ratio of refractive indices (n_incident / n_transmitted).

    Returns:
        The refracted direction vector (unit length for unit input).
    """
    cos_theta = tm.min(-tm.dot(unit_incident, normal), 1.0)
    r_out_perp = eta * (unit_incident + cos_theta * normal)
    r_out_parallel = -ti.sqrt(ti.abs(1.0 - length_squared(r_out_perp))) * normal
    return r_out_perp + r_out_parallel


@ti.func
def schlick_fresnel(cosine: ti.f32, ref_idx: ti.f32) -> ti.f32:
    """Compute Fresnel reflectance using Schlick's approximation.

    Args:
        cosine: Cosine of the angle between incident direction and normal.
        ref_idx: Ratio of refractive indices.

    Returns:
        r0 + (1 - r0) * (1 - cosine)^5 with r0 = ((1 - ref_idx) / (1 + ref_idx))^2.
    """
    r0 = (1.0 - ref_idx) / (1.0 + ref_idx)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Return 1 if all components of v are within 1e-8 of zero."""
    s = 1e-8
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s
