"""Pytest configuration for scattering tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield
    # Note: We don't call ti.reset() here as it can cause issues
    # with subsequent tests if any cleanup happens after


@pytest.fixture(autouse=True)
def clear_registries():
    """Clear textures and materials and reseed the random streams.

    This ensures tests are isolated from each other and every test sees the
    same random sequences.
    """
    # Import here to ensure Taichi is initialized first
    from src.scattering.core.sampling import seed_random_streams
    from src.scattering.materials.material import clear_materials
    from src.scattering.textures.texture import clear_textures

    def _clear_all():
        clear_textures()
        clear_materials()
        seed_random_streams()

    # Clear everything before test
    _clear_all()

    yield

    # Clear everything after test
    _clear_all()
