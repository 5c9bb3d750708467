"""Unit tests for the Lambertian material module.

Tests cover:
- PDF calculation for cosine-weighted sampling
- Scatter function (direction, attenuation, pdf, ray time)
- Agreement between the scatter pdf and scattering_pdf
- Normalization of the density over the sphere
- Material registration with colors and shared textures
"""

import math

import numpy as np
import pytest
import taichi as ti


class TestLambertianPdf:
    """Tests for PDF calculation."""

    def test_pdf_normal_direction(self):
        """Test PDF when scattered direction equals normal (cos_theta = 1)."""
        from src.scattering.materials.lambertian import pdf_lambertian

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            normal = ti.math.vec3(0.0, 1.0, 0.0)
            result[None] = pdf_lambertian(normal, normal)

        test_kernel()
        assert abs(result[None] - 1.0 / math.pi) < 1e-6

    def test_pdf_45_degrees(self):
        """Test PDF at 45 degree angle."""
        from src.scattering.materials.lambertian import pdf_lambertian

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            normal = ti.math.vec3(0.0, 1.0, 0.0)
            inv_sqrt2 = 1.0 / ti.sqrt(2.0)
            scattered = ti.math.vec3(inv_sqrt2, inv_sqrt2, 0.0)
            result[None] = pdf_lambertian(normal, scattered)

        test_kernel()
        expected = (1.0 / math.sqrt(2.0)) / math.pi
        assert abs(result[None] - expected) < 1e-5

    def test_pdf_below_surface(self):
        """Test PDF returns zero for directions below surface."""
        from src.scattering.materials.lambertian import pdf_lambertian

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            normal = ti.math.vec3(0.0, 1.0, 0.0)
            result[None] = pdf_lambertian(normal, ti.math.vec3(0.0, -1.0, 0.0))

        test_kernel()
        assert result[None] == 0.0

    def test_scattering_pdf_ignores_direction_length(self):
        """Test that scattering_pdf normalizes the scattered direction."""
        from src.scattering.materials.probe import evaluate_scattering_pdf
        from src.scattering.materials.lambertian import add_lambertian_material

        mat = add_lambertian_material(albedo=(0.5, 0.5, 0.5))
        pdf = evaluate_scattering_pdf(
            mat,
            np.array([[0.0, 1.0, 0.0], [0.0, 10.0, 0.0], [3.0, 3.0, 0.0]]),
            normal=(0.0, 1.0, 0.0),
        )
        assert abs(pdf[0] - 1.0 / math.pi) < 1e-6
        assert abs(pdf[1] - 1.0 / math.pi) < 1e-6
        assert abs(pdf[2] - (1.0 / math.sqrt(2.0)) / math.pi) < 1e-5

    def test_density_integrates_to_one(self):
        """Test the Monte Carlo integral of scattering_pdf over the sphere."""
        from src.scattering.materials.lambertian import add_lambertian_material
        from src.scattering.materials.probe import evaluate_scattering_pdf

        mat = add_lambertian_material(albedo=(0.5, 0.5, 0.5))
        rng = np.random.default_rng(7)
        dirs = rng.normal(size=(50000, 3))
        dirs /= np.linalg.norm(dirs, axis=1, keepdims=True)

        pdf = evaluate_scattering_pdf(mat, dirs, normal=(0.3, 0.9, -0.2))
        assert pdf.min() >= 0.0
        # Uniform sphere samples have density 1 / (4 pi)
        integral = pdf.mean() * 4.0 * math.pi
        assert abs(integral - 1.0) < 0.05


class TestScatterLambertian:
    """Tests for the scatter function."""

    def test_scatter_in_kernel(self):
        """Test scatter_lambertian directly inside a kernel."""
        from src.scattering.core.ray import make_ray, vec3
        from src.scattering.geometry.hit_record import make_hit_record
        from src.scattering.materials.lambertian import scatter_lambertian

        min_dot = ti.field(dtype=ti.f32, shape=())
        min_dot[None] = 10.0
        flags = ti.field(dtype=ti.i32, shape=2)

        @ti.kernel
        def test_kernel():
            albedo = vec3(0.5, 0.5, 0.5)
            normal = vec3(0.0, 1.0, 0.0)
            ray_in = make_ray(vec3(0.0, 1.0, 0.0), vec3(0.0, -1.0, 0.0), 0.0)
            rec = make_hit_record(1.0, vec3(0.0, 0.0, 0.0), normal, 1, 0.0, 0.0, 0)
            for i in range(1000):
                record = scatter_lambertian(albedo, ray_in, rec, i)
                d = ti.math.dot(ti.math.normalize(record.scattered.direction), normal)
                ti.atomic_min(min_dot[None], d)
                ti.atomic_add(flags[0], record.did_scatter)
                ti.atomic_add(flags[1], record.is_specular)

        test_kernel()
        assert min_dot[None] >= 0.0
        assert flags[0] == 1000
        assert flags[1] == 0

    def test_scatter_record(self):
        """Test attenuation, origin, time and hemisphere of sampled rays."""
        from src.scattering.materials.lambertian import add_lambertian_material
        from src.scattering.materials.probe import sample_scatter

        mat = add_lambertian_material(albedo=(0.7, 0.3, 0.5))
        samples = sample_scatter(
            mat, 10000, point=(1.0, 2.0, 3.0), normal=(0.0, 0.0, 1.0), time=0.37
        )

        assert samples.did_scatter.all()
        assert not samples.is_specular.any()
        np.testing.assert_allclose(samples.attenuation, [[0.7, 0.3, 0.5]] * 10000, atol=1e-6)
        np.testing.assert_allclose(samples.origin, [[1.0, 2.0, 3.0]] * 10000, atol=1e-6)
        np.testing.assert_allclose(samples.time, 0.37, atol=1e-7)
        assert samples.direction[:, 2].min() >= 0.0

    def test_mean_cosine(self):
        """Test that cosine-weighted sampling has E[cos] = 2/3."""
        from src.scattering.materials.lambertian import add_lambertian_material
        from src.scattering.materials.probe import sample_scatter

        mat = add_lambertian_material(albedo=(0.5, 0.5, 0.5))
        normal = np.array([1.0, 1.0, 0.0]) / math.sqrt(2.0)
        samples = sample_scatter(mat, 50000, normal=tuple(normal))

        dirs = samples.direction / np.linalg.norm(samples.direction, axis=1, keepdims=True)
        mean_cos = float((dirs @ normal).mean())
        assert abs(mean_cos - 2.0 / 3.0) < 0.02

    def test_pdf_matches_scattering_pdf(self):
        """Test that the scatter pdf equals scattering_pdf on the same ray."""
        from src.scattering.materials.lambertian import add_lambertian_material
        from src.scattering.materials.probe import evaluate_scattering_pdf, sample_scatter

        mat = add_lambertian_material(albedo=(0.5, 0.5, 0.5))
        normal = (0.2, -0.4, 0.9)
        samples = sample_scatter(mat, 4096, normal=normal)
        pdf = evaluate_scattering_pdf(mat, samples.direction, normal=normal)

        np.testing.assert_allclose(samples.pdf, pdf, atol=1e-6)
        assert samples.pdf.min() >= 0.0

    def test_textured_albedo(self):
        """Test that the attenuation is looked up from the texture at the hit."""
        from src.scattering.materials.lambertian import add_lambertian_material
        from src.scattering.materials.probe import sample_scatter
        from src.scattering.textures.texture import add_checker_texture

        checker = add_checker_texture(1.0, (0.1, 0.1, 0.1), (0.9, 0.9, 0.9))
        mat = add_lambertian_material(texture_id=checker)

        even = sample_scatter(mat, 8, point=(0.5, 0.5, 0.5))
        odd = sample_scatter(mat, 8, point=(1.5, 0.5, 0.5))
        np.testing.assert_allclose(even.attenuation, [[0.1, 0.1, 0.1]] * 8, atol=1e-6)
        np.testing.assert_allclose(odd.attenuation, [[0.9, 0.9, 0.9]] * 8, atol=1e-6)


class TestLambertianRegistry:
    """Tests for Lambertian material registration."""

    def test_add_with_albedo_wraps_texture(self):
        """Test that a color creates a solid texture."""
        from src.scattering.materials.lambertian import add_lambertian_material
        from src.scattering.materials.material import MaterialType, get_material_kind, get_material_params
        from src.scattering.textures.texture import TextureType, get_texture_count, get_texture_type

        mat = add_lambertian_material(albedo=(0.8, 0.1, 0.1))
        assert mat == 0
        assert get_material_kind(mat) == MaterialType.LAMBERTIAN
        assert get_texture_count() == 1
        tex = get_material_params(mat)["texture_id"]
        assert get_texture_type(tex) == TextureType.SOLID_COLOR

    def test_shared_texture(self):
        """Test that two materials can share one texture."""
        from src.scattering.materials.lambertian import add_lambertian_material
        from src.scattering.materials.material import get_material_params
        from src.scattering.textures.texture import add_solid_color_texture, get_texture_count

        tex = add_solid_color_texture((0.4, 0.4, 0.4))
        a = add_lambertian_material(texture_id=tex)
        b = add_lambertian_material(texture_id=tex)
        assert get_material_params(a)["texture_id"] == tex
        assert get_material_params(b)["texture_id"] == tex
        assert get_texture_count() == 1

    def test_invalid_arguments(self):
        """Test that inconsistent constructor arguments raise ValueError."""
        from src.scattering.materials.lambertian import add_lambertian_material

        with pytest.raises(ValueError):
            add_lambertian_material()
        with pytest.raises(ValueError):
            add_lambertian_material(albedo=(0.5, 0.5))
        with pytest.raises(ValueError):
            add_lambertian_material(texture_id=5)
