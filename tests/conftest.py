"""Pytest configuration for mcray tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.

Taichi fields are declared when mcray modules are imported, so test modules
import mcray inside test functions, after the session fixture has run.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene and material registries and the render target around each test."""
    from mcray.core.integrator import clear_render_target
    from mcray.materials.dielectric import clear_dielectric_materials
    from mcray.materials.lambertian import clear_lambertian_materials
    from mcray.materials.metal import clear_metal_materials
    from mcray.scene.intersection import clear_scene
    from mcray.scene.manager import _clear_material_tracking

    def _clear_all():
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        _clear_material_tracking()
        clear_render_target()

    _clear_all()
    yield
    _clear_all()
