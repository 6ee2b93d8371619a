"""Unit tests for the preset scenes."""


class TestPresets:
    """Tests for create_two_sphere_scene and create_lit_scene."""

    def test_two_sphere_scene(self):
        """Test the two-sphere scene layout."""
        from src.pathtracer.scene.presets import create_two_sphere_scene

        scene, camera = create_two_sphere_scene()
        red, blue = list(scene)

        assert camera.position == (0.0, 0.0, 1.0)
        assert red.center == (0.0, 0.0, -15.0)
        assert red.radius == 5.0
        assert red.material.albedo == (0.8, 0.2, 0.2)
        assert blue.center == (-10.0, 0.0, -15.0)
        assert blue.radius == 3.0
        assert blue.material.albedo == (0.2, 0.2, 0.8)
        assert not scene.has_emitters

    def test_lit_scene(self):
        """Test the lit scene adds a ground sphere and a light."""
        from src.pathtracer.scene.presets import create_lit_scene

        scene, _ = create_lit_scene()

        assert len(scene) == 4
        assert scene.get_sphere_count() == 4
        assert scene.has_emitters
        emitters = [info for info in scene if info.material.is_emissive]
        assert len(emitters) == 1

    def test_lit_scene_light_parameters(self):
        """Test the light's colour and strength can be chosen."""
        from src.pathtracer.scene.presets import create_lit_scene

        scene, _ = create_lit_scene(light_strength=2.0, light_colour=(1.0, 0.5, 0.0))
        light = scene.spheres[-1]
        assert light.material.emitted_radiance == (2.0, 1.0, 0.0)

    def test_red_sphere_visible_from_camera(self):
        """Test the camera's forward ray hits the red sphere first."""
        from src.pathtracer.scene.presets import create_lit_scene

        scene, camera = create_lit_scene()
        hit = scene.closest_hit(camera.position, (0.0, 0.0, -1.0))

        assert hit is not None
        assert hit.sphere_index == 0
        assert abs(hit.distance - 11.0) < 1e-4

    def test_scene_presets_registry(self):
        """Test presets are available by name."""
        from src.pathtracer.scene.presets import SCENE_PRESETS

        assert set(SCENE_PRESETS) == {"two_spheres", "lit"}
        scene, _ = SCENE_PRESETS["two_spheres"]()
        assert len(scene) == 2
