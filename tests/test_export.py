"""Unit tests for PNG export and image helpers."""

import numpy as np
import pytest
from PIL import Image


class TestImageToUint8:
    """Tests for image_to_uint8."""

    def test_quantization(self):
        """Test scaling, truncation, saturation and NaN handling."""
        from src.pathtracer.preview.export import image_to_uint8

        image = np.array([[[1.5, -0.2, 0.5], [1.0, 0.0, np.nan]]], dtype=np.float32)
        result = image_to_uint8(image)

        assert result.dtype == np.uint8
        assert result.tolist() == [[[255, 0, 127], [255, 0, 0]]]


class TestComputeRmse:
    """Tests for compute_rmse."""

    def test_identical_images(self):
        """Test identical images have zero error."""
        from src.pathtracer.preview.export import compute_rmse

        image = np.random.default_rng(0).random((4, 4, 3))
        assert compute_rmse(image, image) == 0.0

    def test_constant_offset(self):
        """Test a constant offset gives that offset as the error."""
        from src.pathtracer.preview.export import compute_rmse

        a = np.zeros((4, 4, 3))
        assert abs(compute_rmse(a, a + 0.25) - 0.25) < 1e-12

    def test_shape_mismatch(self):
        """Test mismatched shapes raise."""
        from src.pathtracer.preview.export import compute_rmse

        with pytest.raises(ValueError):
            compute_rmse(np.zeros((2, 2, 3)), np.zeros((3, 2, 3)))


class TestSavePng:
    """Tests for the PNG writers."""

    def test_save_uint8_array(self, tmp_path):
        """Test a byte image is written unchanged."""
        from src.pathtracer.preview.export import save_png_from_array

        image = np.zeros((10, 20, 3), dtype=np.uint8)
        image[0, 0] = (255, 128, 0)
        path = tmp_path / "bytes.png"
        save_png_from_array(image, str(path))

        with Image.open(path) as loaded:
            assert loaded.size == (20, 10)
            assert loaded.mode == "RGB"
            np.testing.assert_array_equal(np.asarray(loaded), image)

    def test_save_float_array(self, tmp_path):
        """Test a float image is quantised before writing."""
        from src.pathtracer.preview.export import save_png_from_array

        image = np.full((4, 4, 3), 2.0, dtype=np.float32)
        path = tmp_path / "float.png"
        save_png_from_array(image, str(path))

        with Image.open(path) as loaded:
            assert np.all(np.asarray(loaded) == 255)

    def test_invalid_shape(self, tmp_path):
        """Test non-RGB arrays are rejected."""
        from src.pathtracer.preview.export import save_png_from_array

        with pytest.raises(ValueError):
            save_png_from_array(np.zeros((4, 4), dtype=np.uint8), str(tmp_path / "bad.png"))

    def test_save_renderer(self, tmp_path):
        """Test saving a renderer's pixel buffer."""
        from src.pathtracer.core.integrator import ShadingMode
        from src.pathtracer.core.renderer import Renderer, RenderSettings
        from src.pathtracer.preview.export import save_png
        from src.pathtracer.scene.presets import create_two_sphere_scene

        create_two_sphere_scene()
        renderer = Renderer(
            RenderSettings(width=32, height=16, samples_per_pixel=1, shading=ShadingMode.ALBEDO)
        )
        renderer.render()
        path = tmp_path / "render.png"
        save_png(renderer, str(path))

        with Image.open(path) as loaded:
            assert loaded.size == (32, 16)
            np.testing.assert_array_equal(np.asarray(loaded), renderer.get_image_uint8())

    def test_renderer_save_image(self, tmp_path):
        """Test Renderer.save_image writes a PNG."""
        from src.pathtracer.core.renderer import Renderer, RenderSettings

        renderer = Renderer(RenderSettings(width=8, height=8, samples_per_pixel=1))
        renderer.render()
        path = tmp_path / "out.png"
        renderer.save_image(str(path))
        assert path.exists()
