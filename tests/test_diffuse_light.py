"""Unit tests for the diffuse light material module."""

import numpy as np
import pytest


class TestDiffuseLight:
    """Tests for emission and scattering of diffuse lights."""

    def test_front_face_emits(self):
        """Test that a front-face hit sees the emission color."""
        from src.scattering.materials.diffuse_light import add_diffuse_light_material
        from src.scattering.materials.probe import evaluate_emitted

        light = add_diffuse_light_material(emit=(4.0, 4.0, 4.0))
        np.testing.assert_allclose(evaluate_emitted(light, front_face=True), [4.0, 4.0, 4.0])

    def test_back_face_is_black(self):
        """Test that a back-face hit sees no emission."""
        from src.scattering.materials.diffuse_light import add_diffuse_light_material
        from src.scattering.materials.probe import evaluate_emitted

        light = add_diffuse_light_material(emit=(4.0, 4.0, 4.0))
        np.testing.assert_allclose(evaluate_emitted(light, front_face=False), [0.0, 0.0, 0.0])

    def test_never_scatters(self):
        """Test that lights absorb every incoming ray."""
        from src.scattering.materials.diffuse_light import add_diffuse_light_material
        from src.scattering.materials.probe import evaluate_scattering_pdf, sample_scatter

        light = add_diffuse_light_material(emit=(15.0, 15.0, 15.0))
        samples = sample_scatter(light, 128)
        assert not samples.did_scatter.any()

        pdf = evaluate_scattering_pdf(light, np.array([[0.0, 1.0, 0.0]]))
        assert pdf[0] == 0.0

    def test_scatter_draws_no_randomness(self):
        """Test that scattering a light leaves the random streams untouched."""
        from src.scattering.core.sampling import get_stream_draw_count
        from src.scattering.materials.diffuse_light import add_diffuse_light_material
        from src.scattering.materials.probe import sample_scatter

        light = add_diffuse_light_material(emit=(1.0, 1.0, 1.0))
        sample_scatter(light, 4)
        assert get_stream_draw_count(0) == 0

    def test_textured_emission(self):
        """Test that emission is looked up from a texture at the hit point."""
        from src.scattering.materials.diffuse_light import add_diffuse_light_material
        from src.scattering.materials.probe import evaluate_emitted
        from src.scattering.textures.texture import add_checker_texture

        checker = add_checker_texture(1.0, (1.0, 2.0, 3.0), (0.0, 0.0, 0.0))
        light = add_diffuse_light_material(texture_id=checker)
        np.testing.assert_allclose(evaluate_emitted(light, point=(0.5, 0.5, 0.5)), [1.0, 2.0, 3.0])
        np.testing.assert_allclose(evaluate_emitted(light, point=(1.5, 0.5, 0.5)), [0.0, 0.0, 0.0])

    def test_invalid_arguments(self):
        """Test that exactly one of emit or texture_id is required."""
        from src.scattering.materials.diffuse_light import add_diffuse_light_material

        with pytest.raises(ValueError):
            add_diffuse_light_material()
        with pytest.raises(ValueError):
            add_diffuse_light_material(emit=(1.0, 1.0, 1.0), texture_id=0)
