"""Unit tests for the Ray dataclass and vector utilities."""

import taichi as ti


class TestRay:
    """Tests for Ray construction."""

    def test_make_ray(self):
        """Test make_ray stores origin and direction unchanged."""
        from src.pathtracer.core.ray import make_ray, vec3

        origin = ti.field(dtype=ti.math.vec3, shape=())
        direction = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(1.0, 2.0, 3.0), vec3(0.0, 0.0, -2.0))
            origin[None] = ray.origin
            direction[None] = ray.direction

        test_kernel()
        o = origin[None]
        d = direction[None]
        assert (o[0], o[1], o[2]) == (1.0, 2.0, 3.0)
        # Directions are not normalized
        assert (d[0], d[1], d[2]) == (0.0, 0.0, -2.0)


class TestVectorUtilities:
    """Tests for normalize."""

    def test_normalize(self):
        """Test normalize produces a unit vector in the same direction."""
        from src.pathtracer.core.ray import normalize, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = normalize(vec3(0.0, 3.0, 4.0))

        test_kernel()
        n = result[None]
        assert abs(n[0]) < 1e-6
        assert abs(n[1] - 0.6) < 1e-6
        assert abs(n[2] - 0.8) < 1e-6

    def test_normalize_zero_vector(self):
        """Test normalizing a zero vector returns zero instead of NaN."""
        from src.pathtracer.core.ray import normalize, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = normalize(vec3(0.0, 0.0, 0.0))

        test_kernel()
        n = result[None]
        assert (n[0], n[1], n[2]) == (0.0, 0.0, 0.0)
