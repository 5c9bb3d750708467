"""Unit tests for the isotropic material module."""

import math

import numpy as np
import pytest


class TestIsotropic:
    """Tests for isotropic scattering."""

    def test_scatter_record(self):
        """Test attenuation, constant pdf and time of sampled rays."""
        from src.scattering.materials.isotropic import add_isotropic_material
        from src.scattering.materials.probe import sample_scatter

        medium = add_isotropic_material(albedo=(0.2, 0.4, 0.9))
        samples = sample_scatter(medium, 4096, point=(1.0, 1.0, 1.0), time=0.5)

        assert samples.did_scatter.all()
        assert not samples.is_specular.any()
        np.testing.assert_allclose(samples.attenuation, [[0.2, 0.4, 0.9]] * 4096, atol=1e-6)
        np.testing.assert_allclose(samples.pdf, 1.0 / (4.0 * math.pi), atol=1e-7)
        np.testing.assert_allclose(samples.time, 0.5)
        np.testing.assert_allclose(samples.origin, [[1.0, 1.0, 1.0]] * 4096)

    def test_directions_cover_sphere(self):
        """Test that scattered directions are uniform over the full sphere."""
        from src.scattering.materials.isotropic import add_isotropic_material
        from src.scattering.materials.probe import sample_scatter

        medium = add_isotropic_material(albedo=(0.5, 0.5, 0.5))
        samples = sample_scatter(medium, 65536, normal=(0.0, 1.0, 0.0))
        d = samples.direction

        np.testing.assert_allclose(np.linalg.norm(d, axis=1), 1.0, atol=1e-5)
        assert np.all(np.abs(d.mean(axis=0)) < 0.02)
        # Half of the directions go back through the surface
        assert abs(np.mean(d[:, 1] < 0.0) - 0.5) < 0.02

    def test_scattering_pdf_constant(self):
        """Test that scattering_pdf is 1 / (4 pi) for any direction."""
        from src.scattering.materials.isotropic import add_isotropic_material
        from src.scattering.materials.probe import evaluate_scattering_pdf

        medium = add_isotropic_material(albedo=(0.5, 0.5, 0.5))
        dirs = np.array([[0.0, 1.0, 0.0], [0.0, -1.0, 0.0], [3.0, -2.0, 1.0]])
        pdf = evaluate_scattering_pdf(medium, dirs)
        np.testing.assert_allclose(pdf, 1.0 / (4.0 * math.pi), atol=1e-7)

    def test_invalid_arguments(self):
        """Test that exactly one of albedo or texture_id is required."""
        from src.scattering.materials.isotropic import add_isotropic_material

        with pytest.raises(ValueError):
            add_isotropic_material()
