"""Integration tests for the scattering model inside a small path tracer.

This module intersects rays with a handful of spheres and feeds the
resulting hit records through the material dispatch, the way a renderer
would. It verifies that the pieces work together: hit records produced by
the sphere primitive, texture lookups at the hit, emission, scattering and
the pdf weighting of sampled directions.

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

import numpy as np
import taichi as ti

NUM_PATHS = 4096
MAX_DEPTH = 8
RAY_TIME = 0.25


def _build_scene():
    """Create the classic four-sphere scene and return its sphere fields."""
    from src.scattering.materials.library import MaterialLibrary

    library = MaterialLibrary()
    checker = library.add_checker_texture(0.32, (0.2, 0.3, 0.1), (0.9, 0.9, 0.9))
    material_ids = [
        library.add_lambertian_material(texture_id=checker),
        library.add_dielectric_material(ir=1.5),
        library.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.1),
        library.add_diffuse_light_material(emit=(4.0, 4.0, 4.0)),
    ]

    centers = ti.Vector.field(3, dtype=ti.f32, shape=4)
    radii = ti.field(dtype=ti.f32, shape=4)
    mat_ids = ti.field(dtype=ti.i32, shape=4)
    centers.from_numpy(
        np.array(
            [[0.0, -1000.0, 0.0], [0.0, 1.0, 0.0], [4.0, 1.0, 0.0], [-4.0, 1.0, 0.0]],
            dtype=np.float32,
        )
    )
    radii.from_numpy(np.array([1000.0, 1.0, 1.0, 1.0], dtype=np.float32))
    mat_ids.from_numpy(np.array(material_ids, dtype=np.int32))
    return library, centers, radii, mat_ids


class TestPathTracing:
    """End-to-end tests of the material contract."""

    def test_paths_are_finite_and_keep_time(self):
        """Test that traced radiance is finite, non-negative and time is preserved."""
        from src.scattering.core.ray import make_ray, normalize, vec3
        from src.scattering.core.sampling import random_float
        from src.scattering.geometry.hit_record import make_miss_record
        from src.scattering.geometry.sphere import hit_sphere, make_sphere
        from src.scattering.materials.dispatch import (
            emitted_by_id,
            scatter_by_id,
            scattering_pdf_by_id,
        )

        _, centers, radii, mat_ids = _build_scene()
        radiance = ti.Vector.field(3, dtype=ti.f32, shape=NUM_PATHS)
        bounces = ti.field(dtype=ti.i32, shape=NUM_PATHS)
        time_error = ti.field(dtype=ti.f32, shape=())

        @ti.func
        def closest_hit(ray):
            best = make_miss_record()
            closest = 1e9
            for k in ti.static(range(4)):
                rec = hit_sphere(ray, make_sphere(centers[k], radii[k], mat_ids[k]), 0.001, closest)
                if rec.hit == 1:
                    closest = rec.t
                    best = rec
            return best

        @ti.kernel
        def trace():
            for i in range(NUM_PATHS):
                jitter = vec3(random_float(i) - 0.5, random_float(i) - 0.5, 0.0)
                ray = make_ray(vec3(13.0, 2.0, 3.0), normalize(vec3(-13.0, -1.5, -3.0) + jitter * 4.0), RAY_TIME)
                throughput = vec3(1.0, 1.0, 1.0)
                color = vec3(0.0, 0.0, 0.0)
                alive = 1
                for _ in range(MAX_DEPTH):
                    if alive == 1:
                        rec = closest_hit(ray)
                        if rec.hit == 0:
                            color += throughput * vec3(0.5, 0.7, 1.0)
                            alive = 0
                        else:
                            color += throughput * emitted_by_id(ray, rec)
                            record = scatter_by_id(ray, rec, i)
                            if record.did_scatter == 0:
                                alive = 0
                            else:
                                weight = record.attenuation
                                if record.is_specular == 0 and record.pdf > 0.0:
                                    density = scattering_pdf_by_id(ray, rec, record.scattered)
                                    weight = record.attenuation * density / record.pdf
                                throughput *= weight
                                ti.atomic_max(time_error[None], ti.abs(record.scattered.time - RAY_TIME))
                                bounces[i] += 1
                                ray = record.scattered
                radiance[i] = color

        trace()

        r = radiance.to_numpy()
        assert np.all(np.isfinite(r))
        assert r.min() >= 0.0
        assert r.mean() > 0.0
        assert time_error[None] == 0.0
        assert bounces.to_numpy().max() > 1

    def test_light_sphere_front_and_back(self):
        """Test emission seen from outside and from inside a light sphere."""
        from src.scattering.core.ray import make_ray, vec3
        from src.scattering.geometry.sphere import hit_sphere, make_sphere
        from src.scattering.materials.dispatch import emitted_by_id

        _, _, _, mat_ids = _build_scene()
        result = ti.Vector.field(3, dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel(light_id: ti.i32):
            light = make_sphere(vec3(-4.0, 1.0, 0.0), 1.0, light_id)
            outside = make_ray(vec3(-4.0, 1.0, 10.0), vec3(0.0, 0.0, -1.0), 0.0)
            inside = make_ray(vec3(-4.0, 1.0, 0.0), vec3(0.0, 0.0, -1.0), 0.0)
            rec_out = hit_sphere(outside, light, 0.001, 1e9)
            rec_in = hit_sphere(inside, light, 0.001, 1e9)
            result[0] = emitted_by_id(outside, rec_out)
            result[1] = emitted_by_id(inside, rec_in)

        test_kernel(int(mat_ids[3]))
        r = result.to_numpy()
        np.testing.assert_allclose(r[0], [4.0, 4.0, 4.0])
        np.testing.assert_allclose(r[1], [0.0, 0.0, 0.0])

    def test_glass_sphere_transmits_center_ray(self):
        """Test that most rays through a glass sphere's center pass straight through."""
        from src.scattering.core.ray import make_ray, vec3
        from src.scattering.geometry.sphere import hit_sphere, make_sphere
        from src.scattering.materials.dispatch import scatter_by_id

        _, _, _, mat_ids = _build_scene()
        exit_z = ti.field(dtype=ti.f32, shape=NUM_PATHS)

        @ti.kernel
        def test_kernel(glass_id: ti.i32):
            glass = make_sphere(vec3(0.0, 1.0, 0.0), 1.0, glass_id)
            for i in range(NUM_PATHS):
                ray = make_ray(vec3(0.0, 1.0, 5.0), vec3(0.0, 0.0, -1.0), 0.0)
                # Enter, then leave the sphere
                for _ in range(2):
                    rec = hit_sphere(ray, glass, 0.001, 1e9)
                    if rec.hit == 1:
                        ray = scatter_by_id(ray, rec, i).scattered
                exit_z[i] = ray.direction.z

        test_kernel(int(mat_ids[1]))
        z = exit_z.to_numpy()
        transmitted = np.mean(z < -0.999)
        # Each interface reflects about 4% at normal incidence
        assert abs(transmitted - 0.96 * 0.96) < 0.02
