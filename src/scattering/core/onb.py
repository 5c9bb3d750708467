"""Orthonormal basis used to map local sampling directions into world space.

Sampling routines such as cosine-weighted hemisphere sampling produce
directions in a local frame whose z axis is the pole of the distribution.
An Onb built from the surface normal carries those directions into world
coordinates.

Example:
    >>> # Within a Taichi kernel:
    >>> # uvw = onb_from_w(normal)
    >>> # world_dir = onb_local(uvw, random_cosine_direction(stream))
"""

import taichi as ti
import taichi.math as tm

from src.scattering.core.ray import cross, normalize

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.dataclass
class Onb:
    """Orthonormal basis (u, v, w) with w as the "up" axis.

    Attributes:
        u: First tangent axis (w x v).
        v: Second tangent axis, perpendicular to w.
        w: The up axis, the normalized vector the basis was built from.
    """

    u: vec3
    v: vec3
    w: vec3


@ti.func
def onb_from_w(w: vec3) -> Onb:
    """Build an orthonormal basis whose w axis is the given vector.

    Args:
        w: The up direction (need not be normalized, must be non-zero).

    Returns:
        An Onb with w = normalize(w) and u, v spanning the tangent plane.
    """
    unit_w = normalize(w)
    # Choose a helper vector not parallel to w
    a = vec3(1.0, 0.0, 0.0)
    if ti.abs(unit_w.x) > 0.9:
        a = vec3(0.0, 1.0, 0.0)
    v = normalize(cross(unit_w, a))
    u = cross(unit_w, v)
    return Onb(u=u, v=v, w=unit_w)


@ti.func
def onb_local(basis: Onb, a: vec3) -> vec3:
    """Transform a direction from the basis' local frame to world space."""
    return a.x * basis.u + a.y * basis.v + a.z * basis.w
