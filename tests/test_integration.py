"""Integration tests for the end-to-end rendering pipeline.

This module tests the complete pipeline from scene creation through the final
8-bit image and PNG output. Tests are designed to be fast (low resolution, few
samples) while still exercising every stage.

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

CORNERS = [(0, 0), (0, 99), (99, 0), (99, 99)]


def _single_sphere_scene(material):
    """A sphere of radius 5 at (0, 0, -15), seen from the default camera."""
    from src.pathtracer.camera.pinhole import PinholeCamera
    from src.pathtracer.scene.manager import Scene

    scene = Scene()
    scene.add_sphere((0.0, 0.0, -15.0), 5.0, material)
    return scene, PinholeCamera(position=(0.0, 0.0, 1.0))


class TestSingleSphereFrame:
    """End-to-end 100x100 renders of a single sphere."""

    def test_albedo_frame(self) -> None:
        """Test the centre pixel shows the sphere and the corners are black."""
        from src.pathtracer.core.integrator import ShadingMode
        from src.pathtracer.core.renderer import RenderSettings, render_frame
        from src.pathtracer.materials.material import Material

        scene, camera = _single_sphere_scene(Material(albedo=(0.8, 0.2, 0.2)))
        settings = RenderSettings.from_preset(
            "thumbnail", samples_per_pixel=1, shading=ShadingMode.ALBEDO
        )
        pixels = render_frame(scene, camera, settings)

        assert pixels.shape == (100, 100, 3)
        assert tuple(pixels[50, 50]) == (204, 51, 51)
        for row, col in CORNERS:
            assert not pixels[row, col].any()

    def test_emissive_sphere_path_traced(self) -> None:
        """Test a glowing sphere path traces to its emission on a black background."""
        from src.pathtracer.core.renderer import RenderSettings, render_frame
        from src.pathtracer.materials.material import emissive

        scene, camera = _single_sphere_scene(emissive((1.0, 0.5, 0.0), 1.0))
        pixels = render_frame(
            scene, camera, RenderSettings.from_preset("thumbnail", samples_per_pixel=4)
        )

        assert tuple(pixels[50, 50]) == (255, 127, 0)
        for row, col in CORNERS:
            assert not pixels[row, col].any()

    def test_unlit_sphere_is_black(self) -> None:
        """Test a scene without light sources renders black."""
        from src.pathtracer.core.renderer import RenderSettings, render_frame
        from src.pathtracer.materials.material import Material

        scene, camera = _single_sphere_scene(Material(albedo=(0.8, 0.2, 0.2)))
        pixels = render_frame(
            scene, camera, RenderSettings.from_preset("thumbnail", samples_per_pixel=4)
        )

        assert not pixels.any()

    def test_image_is_upright(self) -> None:
        """Test a sphere above the axis appears in the top half of the image."""
        from src.pathtracer.camera.pinhole import PinholeCamera
        from src.pathtracer.core.integrator import ShadingMode
        from src.pathtracer.core.renderer import RenderSettings, render_frame
        from src.pathtracer.materials.material import Material
        from src.pathtracer.scene.manager import Scene

        scene = Scene()
        scene.add_sphere((0.0, 4.0, -15.0), 2.0, Material(albedo=(1.0, 1.0, 1.0)))
        settings = RenderSettings.from_preset(
            "thumbnail", samples_per_pixel=1, shading=ShadingMode.ALBEDO
        )
        pixels = render_frame(scene, PinholeCamera(), settings)

        lit_rows = np.nonzero(pixels.any(axis=(1, 2)))[0]
        assert lit_rows.size > 0
        assert lit_rows.max() < 50


class TestLitScene:
    """Integration tests for the lit preset scene."""

    def test_lit_scene_renders(self) -> None:
        """Test the lit scene produces a finite, non-negative, partly lit image."""
        from src.pathtracer.camera.pinhole import setup_camera
        from src.pathtracer.core.renderer import Renderer, RenderSettings
        from src.pathtracer.scene.presets import create_lit_scene

        _, camera = create_lit_scene()
        setup_camera(camera)
        renderer = Renderer(RenderSettings(width=64, height=36, samples_per_pixel=8))
        renderer.render(batch_size=4)

        radiance = renderer.get_radiance_numpy()
        assert renderer.sample_count == 8
        assert not np.any(np.isnan(radiance))
        assert not np.any(np.isinf(radiance))
        assert np.all(radiance >= 0.0)
        assert np.sum(radiance) > 0.0

    def test_render_is_reproducible(self) -> None:
        """Test two renders with the same seed are identical."""
        from src.pathtracer.core.renderer import RenderSettings, render_frame
        from src.pathtracer.scene.presets import create_lit_scene

        settings = RenderSettings(width=32, height=18, samples_per_pixel=4, seed=9)
        scene, camera = create_lit_scene()
        first = render_frame(scene, camera, settings)
        scene, camera = create_lit_scene()
        second = render_frame(scene, camera, settings)

        np.testing.assert_array_equal(first, second)


class TestRenderScript:
    """Tests for the example render script."""

    def test_parse_args_defaults(self) -> None:
        """Test the command-line defaults."""
        from examples.render_spheres import parse_args

        args = parse_args([])
        assert args.preset == "hd"
        assert args.samples == 50
        assert args.bounces == 20
        assert args.seed == 0
        assert args.shading == "path"
        assert args.scene == "lit"
        assert not args.quiet

    def test_render_spheres_writes_png(self, tmp_path: Path) -> None:
        """Test the script's render function writes the requested image."""
        from PIL import Image

        from examples.render_spheres import render_spheres

        output = tmp_path / "spheres.png"
        result = render_spheres(
            preset="thumbnail",
            width=48,
            height=27,
            num_samples=2,
            shading="albedo",
            scene_name="two_spheres",
            output_path=str(output),
            batch_size=1,
            quiet=True,
        )

        assert result == output
        with Image.open(output) as loaded:
            assert loaded.size == (48, 27)


@pytest.mark.slow
class TestHighQualityRender:
    """Higher quality render tests (marked slow for optional execution)."""

    def test_lit_scene_hd_render(self, tmp_path: Path) -> None:
        """Render the lit scene at the default resolution and save it.

        Run with: pytest -m slow tests/test_integration.py
        """
        from src.pathtracer.core.renderer import RenderSettings, render_frame
        from src.pathtracer.preview.export import save_png_from_array
        from src.pathtracer.scene.presets import create_lit_scene

        scene, camera = create_lit_scene()
        pixels = render_frame(scene, camera, RenderSettings(samples_per_pixel=16))

        output_path = tmp_path / "lit_scene.png"
        save_png_from_array(pixels, str(output_path))

        assert output_path.exists()
        assert pixels.shape == (720, 1280, 3)
        assert pixels.any()
