"""Sphere primitive producing hit records for the materials.

The intersection uses the robust quadratic formula from Ray Tracing Gems to
avoid catastrophic cancellation when b^2 is nearly equal to 4ac. Hits carry
spherical (u, v) texture coordinates and the sphere's material id so they can
be handed straight to the material dispatch.

Example:
    >>> # Within a Taichi kernel:
    >>> # sphere = make_sphere(vec3(0.0, 0.0, -1.0), 0.5, material_id)
    >>> # rec = hit_sphere(ray, sphere, 1e-4, 1e10)
"""

import taichi as ti
import taichi.math as tm

from src.scattering.core.ray import Ray, dot, ray_at
from src.scattering.geometry.hit_record import (
    HitRecord,
    make_hit_record,
    make_miss_record,
    set_face_normal,
)

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point, radius and material.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
        material_id: Registry id of the material covering the sphere.
    """

    center: vec3
    radius: ti.f32
    material_id: ti.i32


@ti.func
def make_sphere(center: vec3, radius: ti.f32, material_id: ti.i32) -> Sphere:
    return Sphere(center=center, radius=radius, material_id=material_id)


@ti.func
def get_sphere_uv(outward_normal: vec3):
    """Compute texture coordinates for a point on the unit sphere.

    u is the azimuth around the y axis measured from -x, v the polar angle
    measured from -y, both mapped to [0, 1].

    Args:
        outward_normal: The unit outward normal at the hit point.

    Returns:
        A tuple (u, v).
    """
    theta = ti.acos(tm.clamp(-outward_normal.y, -1.0, 1.0))
    phi = ti.atan2(-outward_normal.z, outward_normal.x) + tm.pi
    return phi / (2.0 * tm.pi), theta / tm.pi


@ti.func
def _solve_quadratic_robust(h: ti.f32, a: ti.f32, c: ti.f32, sqrt_d: ti.f32):
    """Solve a*t^2 + 2*h*t + c = 0 with the numerically stable formula.

    Returns:
        Tuple of (t0, t1) where t0 <= t1.
    """
    # q = -(h + sign(h) * sqrt(discriminant)) avoids cancellation
    sign_h = ti.select(h < 0.0, -1.0, 1.0)
    q = -(h + sign_h * sqrt_d)

    t0 = 0.0
    t1 = 0.0

    if ti.abs(q) < 1e-10:
        # Tangent ray, fall back to the textbook formula
        t0 = (-h - sqrt_d) / a
        t1 = (-h + sqrt_d) / a
    else:
        t0 = q / a
        t1 = c / q

    if t0 > t1:
        temp = t0
        t0 = t1
        t1 = temp

    return t0, t1


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, t_min: ti.f32, t_max: ti.f32) -> HitRecord:
    """Intersect a ray with a sphere.

    Solves |origin + t * direction - center|^2 = radius^2 in the half-b form
    a*t^2 + 2*h*t + c = 0 with a = d.d, h = d.oc, c = oc.oc - r^2.

    Args:
        ray: The incoming ray (direction need not be normalized).
        sphere: The sphere to test intersection against.
        t_min: Minimum t value to consider a valid hit.
        t_max: Maximum t value to consider a valid hit.

    Returns:
        A HitRecord for the closest valid intersection, or a miss record.
    """
    oc = ray.origin - sphere.center

    a = dot(ray.direction, ray.direction)
    h = dot(ray.direction, oc)
    c = dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = h * h - a * c

    result = make_miss_record()

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)
        t0, t1 = _solve_quadratic_robust(h, a, c, sqrt_d)

        # Find the first valid intersection in (t_min, t_max)
        t = t0
        valid = (t > t_min) and (t < t_max)
        if not valid:
            t = t1
            valid = (t > t_min) and (t < t_max)

        if valid:
            point = ray_at(ray, t)
            outward_normal = (point - sphere.center) / sphere.radius
            normal, front_face = set_face_normal(ray.direction, outward_normal)
            u, v = get_sphere_uv(outward_normal)
            result = make_hit_record(t, point, normal, front_face, u, v, sphere.material_id)

    return result
