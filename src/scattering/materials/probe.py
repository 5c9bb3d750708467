"""Host-side probes for evaluating materials outside a renderer.

Each probe writes a single hit query into scalar fields, runs a parallel
kernel in which lane i draws from random stream i, and copies the results
back as NumPy arrays. The probes are what the test suite and diagnostic
scripts use to check the statistical behavior of the materials:

    - sample_scatter(): N independent scatter() calls at the same hit
    - evaluate_scattering_pdf(): scattering_pdf() for a batch of directions
    - evaluate_emitted(): emitted() at a single hit

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.scattering.materials.lambertian import add_lambertian_material
    >>> from src.scattering.materials.probe import sample_scatter
    >>> mat_id = add_lambertian_material(albedo=(0.5, 0.5, 0.5))
    >>> samples = sample_scatter(mat_id, 10000, normal=(0.0, 0.0, 1.0))
    >>> samples.direction.shape
    (10000, 3)
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from src.scattering.core.ray import Ray, length, make_ray, validate_vec3
from src.scattering.core.sampling import MAX_RANDOM_STREAMS
from src.scattering.geometry.hit_record import HitRecord, make_hit_record
from src.scattering.materials.dispatch import emitted_by_id, scatter_by_id, scattering_pdf_by_id
from src.scattering.materials.material import check_material_id

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# Maximum batch size of a single probe call
MAX_PROBE_SAMPLES = min(1 << 16, MAX_RANDOM_STREAMS)

# =============================================================================
# Query Storage
# =============================================================================

_query_ray_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_ray_direction = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_ray_time = ti.field(dtype=ti.f32, shape=())
_query_point = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_front_face = ti.field(dtype=ti.i32, shape=())
_query_u = ti.field(dtype=ti.f32, shape=())
_query_v = ti.field(dtype=ti.f32, shape=())
_query_material_id = ti.field(dtype=ti.i32, shape=())

# =============================================================================
# Result Storage
# =============================================================================

_out_did_scatter = ti.field(dtype=ti.i32, shape=MAX_PROBE_SAMPLES)
_out_is_specular = ti.field(dtype=ti.i32, shape=MAX_PROBE_SAMPLES)
_out_attenuation = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PROBE_SAMPLES)
_out_origin = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PROBE_SAMPLES)
_out_direction = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PROBE_SAMPLES)
_out_time = ti.field(dtype=ti.f32, shape=MAX_PROBE_SAMPLES)
_out_pdf = ti.field(dtype=ti.f32, shape=MAX_PROBE_SAMPLES)
_out_emitted = ti.Vector.field(3, dtype=ti.f32, shape=())

# Directions to evaluate in evaluate_scattering_pdf
_in_direction = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PROBE_SAMPLES)


@dataclass
class ScatterSamples:
    """Results of a batch of scatter() calls, one row per sample.

    Attributes:
        did_scatter: Boolean array (N,), False where the ray was absorbed.
        is_specular: Boolean array (N,).
        attenuation: Array (N, 3).
        origin: Scattered ray origins, array (N, 3).
        direction: Scattered ray directions, array (N, 3). Not normalized
            for Metal.
        time: Scattered ray times, array (N,).
        pdf: Sampling densities, array (N,). 0 for specular samples.
    """

    did_scatter: np.ndarray
    is_specular: np.ndarray
    attenuation: np.ndarray
    origin: np.ndarray
    direction: np.ndarray
    time: np.ndarray
    pdf: np.ndarray

    def __len__(self) -> int:
        return len(self.did_scatter)


def _check_sample_count(num_samples: int) -> None:
    if num_samples < 1:
        raise ValueError(f"num_samples = {num_samples} must be at least 1")
    if num_samples > MAX_PROBE_SAMPLES:
        raise RuntimeError(
            f"num_samples = {num_samples} exceeds the probe capacity ({MAX_PROBE_SAMPLES})"
        )


def _set_query(
    material_id: int,
    point: Sequence[float],
    normal: Sequence[float],
    front_face: bool,
    u: float,
    v: float,
    ray_origin: Sequence[float] | None,
    ray_direction: Sequence[float] | None,
    time: float,
) -> None:
    """Validate a hit description and store it in the query fields."""
    check_material_id(material_id)

    p = np.asarray(validate_vec3(point, "point"), dtype=np.float64)
    n = np.asarray(validate_vec3(normal, "normal"), dtype=np.float64)
    n_len = np.linalg.norm(n)
    if n_len < 1e-8:
        raise ValueError("normal must be non-zero")
    n = n / n_len

    # By default the ray arrives along -normal from one unit above the point
    if ray_direction is None:
        d = -n
    else:
        d = np.asarray(validate_vec3(ray_direction, "ray_direction"), dtype=np.float64)
    if ray_origin is None:
        o = p - d
    else:
        o = np.asarray(validate_vec3(ray_origin, "ray_origin"), dtype=np.float64)

    _query_ray_origin[None] = vec3(*o)
    _query_ray_direction[None] = vec3(*d)
    _query_ray_time[None] = time
    _query_point[None] = vec3(*p)
    _query_normal[None] = vec3(*n)
    _query_front_face[None] = 1 if front_face else 0
    _query_u[None] = u
    _query_v[None] = v
    _query_material_id[None] = material_id


@ti.func
def _query_ray() -> Ray:
    return make_ray(_query_ray_origin[None], _query_ray_direction[None], _query_ray_time[None])


@ti.func
def _query_hit() -> HitRecord:
    ray_in = _query_ray()
    return make_hit_record(
        length(_query_point[None] - ray_in.origin),
        _query_point[None],
        _query_normal[None],
        _query_front_face[None],
        _query_u[None],
        _query_v[None],
        _query_material_id[None],
    )


@ti.kernel
def _sample_scatter_kernel(num_samples: ti.i32):
    for i in range(num_samples):
        ray_in = _query_ray()
        rec = _query_hit()
        record = scatter_by_id(ray_in, rec, i)
        _out_did_scatter[i] = record.did_scatter
        _out_is_specular[i] = record.is_specular
        _out_attenuation[i] = record.attenuation
        _out_origin[i] = record.scattered.origin
        _out_direction[i] = record.scattered.direction
        _out_time[i] = record.scattered.time
        _out_pdf[i] = record.pdf


@ti.kernel
def _scattering_pdf_kernel(num_directions: ti.i32):
    for i in range(num_directions):
        ray_in = _query_ray()
        rec = _query_hit()
        scattered = make_ray(rec.point, _in_direction[i], ray_in.time)
        _out_pdf[i] = scattering_pdf_by_id(ray_in, rec, scattered)


@ti.kernel
def _emitted_kernel():
    _out_emitted[None] = emitted_by_id(_query_ray(), _query_hit())


def sample_scatter(
    material_id: int,
    num_samples: int,
    point: Sequence[float] = (0.0, 0.0, 0.0),
    normal: Sequence[float] = (0.0, 1.0, 0.0),
    front_face: bool = True,
    u: float = 0.0,
    v: float = 0.0,
    ray_origin: Sequence[float] | None = None,
    ray_direction: Sequence[float] | None = None,
    time: float = 0.0,
) -> ScatterSamples:
    """Scatter the same incoming ray num_samples times.

    Sample i uses random stream i, so the samples are independent and the
    batch is reproducible after seed_random_streams().

    Args:
        material_id: The material to evaluate.
        num_samples: Number of scatter calls.
        point: The hit point.
        normal: The surface normal at the hit, facing the incoming ray.
            Normalized before use.
        front_face: Whether the hit is on the outward side of the surface.
        u: First texture coordinate of the hit.
        v: Second texture coordinate of the hit.
        ray_origin: Origin of the incoming ray. Defaults to point - direction.
        ray_direction: Direction of the incoming ray. Defaults to -normal.
        time: Time of the incoming ray.

    Returns:
        A ScatterSamples with one row per scatter call.

    Raises:
        ValueError: If the material id or the hit description is invalid.
        RuntimeError: If num_samples exceeds MAX_PROBE_SAMPLES.
    """
    _check_sample_count(num_samples)
    _set_query(material_id, point, normal, front_face, u, v, ray_origin, ray_direction, time)
    _sample_scatter_kernel(num_samples)
    logger.debug("Sampled material %d %d times", material_id, num_samples)

    return ScatterSamples(
        did_scatter=_out_did_scatter.to_numpy()[:num_samples] != 0,
        is_specular=_out_is_specular.to_numpy()[:num_samples] != 0,
        attenuation=_out_attenuation.to_numpy()[:num_samples],
        origin=_out_origin.to_numpy()[:num_samples],
        direction=_out_direction.to_numpy()[:num_samples],
        time=_out_time.to_numpy()[:num_samples],
        pdf=_out_pdf.to_numpy()[:num_samples],
    )


def evaluate_scattering_pdf(
    material_id: int,
    directions: np.ndarray,
    point: Sequence[float] = (0.0, 0.0, 0.0),
    normal: Sequence[float] = (0.0, 1.0, 0.0),
    front_face: bool = True,
    u: float = 0.0,
    v: float = 0.0,
    ray_origin: Sequence[float] | None = None,
    ray_direction: Sequence[float] | None = None,
    time: float = 0.0,
) -> np.ndarray:
    """Evaluate scattering_pdf() for a batch of scattered directions.

    Args:
        material_id: The material to evaluate.
        directions: Array (N, 3) of scattered directions. Need not be unit.
        Remaining arguments describe the hit as in sample_scatter().

    Returns:
        Array (N,) of densities.

    Raises:
        ValueError: If the inputs are malformed.
        RuntimeError: If N exceeds MAX_PROBE_SAMPLES.
    """
    dirs = np.asarray(directions, dtype=np.float32)
    if dirs.ndim != 2 or dirs.shape[1] != 3:
        raise ValueError(f"directions must have shape (N, 3), got {dirs.shape}")
    num_directions = dirs.shape[0]
    _check_sample_count(num_directions)
    _set_query(material_id, point, normal, front_face, u, v, ray_origin, ray_direction, time)

    padded = np.zeros((MAX_PROBE_SAMPLES, 3), dtype=np.float32)
    padded[:num_directions] = dirs
    _in_direction.from_numpy(padded)
    _scattering_pdf_kernel(num_directions)

    return _out_pdf.to_numpy()[:num_directions]


def evaluate_emitted(
    material_id: int,
    point: Sequence[float] = (0.0, 0.0, 0.0),
    normal: Sequence[float] = (0.0, 1.0, 0.0),
    front_face: bool = True,
    u: float = 0.0,
    v: float = 0.0,
    ray_origin: Sequence[float] | None = None,
    ray_direction: Sequence[float] | None = None,
    time: float = 0.0,
) -> np.ndarray:
    """Evaluate emitted() at a single hit.

    Returns:
        Array (3,) with the emitted radiance.

    Raises:
        ValueError: If the material id or the hit description is invalid.
    """
    _set_query(material_id, point, normal, front_face, u, v, ray_origin, ray_direction, time)
    _emitted_kernel()
    return _out_emitted.to_numpy()
