"""Pytest configuration for path tracer tests.

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


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene and render target data around each test.

    This ensures tests are isolated from each other.
    """
    # Import here to ensure Taichi is initialized first
    from src.pathtracer.camera.pinhole import PinholeCamera, setup_camera
    from src.pathtracer.core import integrator
    from src.pathtracer.scene.intersection import clear_scene

    def _clear_all():
        clear_scene()
        setup_camera(PinholeCamera())
        integrator.clear_render_target()
        integrator._render_target_initialized[None] = 0

    _clear_all()

    yield

    _clear_all()
