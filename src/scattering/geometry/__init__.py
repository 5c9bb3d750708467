"""Hit records and the sphere primitive that produces them.

Components:
    hit_record: HitRecord dataclass and face-orientation helpers
    sphere: Sphere dataclass with robust ray-sphere intersection and UVs
"""

from .hit_record import HitRecord, make_hit_record, make_miss_record, set_face_normal
from .sphere import Sphere, get_sphere_uv, hit_sphere, make_sphere

__all__ = [
    "HitRecord",
    "make_hit_record",
    "make_miss_record",
    "set_face_normal",
    "Sphere",
    "make_sphere",
    "get_sphere_uv",
    "hit_sphere",
]
