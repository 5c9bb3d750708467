"""Hit record consumed by the materials.

A HitRecord describes one ray-surface intersection: where it happened, the
normal oriented against the incoming ray, which side of the surface was hit,
the surface texture coordinates and the material to shade with. Materials
only ever read a HitRecord.

Example:
    >>> # Within a Taichi kernel:
    >>> # normal, front_face = set_face_normal(ray.direction, outward_normal)
    >>> # rec = make_hit_record(t, point, normal, front_face, u, v, material_id)
"""

import taichi as ti
import taichi.math as tm

from src.scattering.core.ray import dot

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.dataclass
class HitRecord:
    """Record of a ray-surface intersection.

    Attributes:
        hit: Whether the ray intersected a surface (1 if hit, 0 if miss).
        t: The parameter value along the ray where intersection occurred.
        point: The 3D point where the ray intersected the surface.
        normal: The unit surface normal at the intersection point. Always
            points against the incoming ray.
        front_face: 1 if the ray approached from the outward side of the
            surface, 0 if it hit the surface from inside.
        u: First surface texture coordinate.
        v: Second surface texture coordinate.
        material_id: The registry id of the surface material, or -1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    u: ti.f32
    v: ti.f32
    material_id: ti.i32


@ti.func
def set_face_normal(ray_direction: vec3, outward_normal: vec3):
    """Orient a geometric normal against the incoming ray.

    Args:
        ray_direction: The direction of the incoming ray.
        outward_normal: The unit normal pointing out of the surface.

    Returns:
        A tuple of (normal, front_face) where normal faces the ray and
        front_face is 1 when the ray arrived from outside.
    """
    front_face = 1
    normal = outward_normal
    if dot(ray_direction, outward_normal) > 0.0:
        front_face = 0
        normal = -outward_normal
    return normal, front_face


@ti.func
def make_hit_record(
    t: ti.f32,
    point: vec3,
    normal: vec3,
    front_face: ti.i32,
    u: ti.f32,
    v: ti.f32,
    material_id: ti.i32,
) -> HitRecord:
    """Create a HitRecord for a successful intersection."""
    return HitRecord(
        hit=1,
        t=t,
        point=point,
        normal=normal,
        front_face=front_face,
        u=u,
        v=v,
        material_id=material_id,
    )


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        u=0.0,
        v=0.0,
        material_id=-1,
    )
