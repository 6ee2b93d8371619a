"""Unit tests for the surface material."""

import pytest
import taichi as ti


class TestMaterial:
    """Tests for Material construction and properties."""

    def test_defaults(self):
        """Test a plain diffuse material emits nothing."""
        from src.pathtracer.materials.material import BLACK, Material

        material = Material(albedo=(0.8, 0.2, 0.2))
        assert material.emission_colour == BLACK
        assert material.emission_strength == 0.0
        assert not material.is_emissive
        assert material.emitted_radiance == (0.0, 0.0, 0.0)

    def test_emitted_radiance(self):
        """Test emitted radiance is colour times strength."""
        from src.pathtracer.materials.material import Material

        material = Material(
            albedo=(0.0, 0.0, 0.0),
            emission_colour=(1.0, 0.5, 0.25),
            emission_strength=4.0,
        )
        assert material.emitted_radiance == (4.0, 2.0, 1.0)
        assert material.is_emissive

    def test_emissive_helper(self):
        """Test emissive() creates a black-albedo light."""
        from src.pathtracer.materials.material import BLACK, emissive

        light = emissive((1.0, 1.0, 1.0), 2.0)
        assert light.albedo == BLACK
        assert light.emitted_radiance == (2.0, 2.0, 2.0)

    def test_values_are_coerced_to_float_tuples(self):
        """Test lists and ints are stored as float tuples."""
        from src.pathtracer.materials.material import Material

        material = Material(albedo=[1, 0, 0], emission_strength=1)
        assert material.albedo == (1.0, 0.0, 0.0)
        assert isinstance(material.emission_strength, float)

    def test_negative_strength_rejected(self):
        """Test negative emission strength is invalid."""
        from src.pathtracer.materials.material import Material

        with pytest.raises(ValueError):
            Material(albedo=(0.5, 0.5, 0.5), emission_strength=-1.0)

    def test_wrong_component_count_rejected(self):
        """Test colours must have three components."""
        from src.pathtracer.materials.material import Material

        with pytest.raises(ValueError):
            Material(albedo=(0.5, 0.5))

    def test_dict_round_trip(self):
        """Test to_dict and from_dict preserve every value."""
        from src.pathtracer.materials.material import Material

        material = Material(
            albedo=(0.1, 0.2, 0.3),
            emission_colour=(0.4, 0.5, 0.6),
            emission_strength=7.0,
        )
        assert Material.from_dict(material.to_dict()) == material

    def test_emitted_radiance_in_kernel(self):
        """Test the kernel-side emitted radiance matches the Python property."""
        from src.pathtracer.materials.material import emitted_radiance, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = emitted_radiance(vec3(1.0, 0.5, 0.25), 4.0)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 4.0) < 1e-6
        assert abs(r[1] - 2.0) < 1e-6
        assert abs(r[2] - 1.0) < 1e-6
