"""Ready-made scenes.

Two scenes are provided:

- The two-sphere scene: a red sphere of radius 5 at (0, 0, -15) and a blue
  sphere of radius 3 at (-10, 0, -15), neither emitting light. Path traced it
  renders black; it is meant for the ALBEDO and NORMALS shading modes and for
  geometry checks.
- The lit scene: the same two spheres resting above a large grey ground
  sphere, under a bright white light sphere.

Both are viewed from the default camera at (0, 0, 1) looking through the
image plane at Z = 0.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.scene.presets import create_lit_scene
    >>> scene, camera = create_lit_scene()
    >>> len(scene)
    4
"""

from src.pathtracer.camera.pinhole import DEFAULT_CAMERA_POSITION, PinholeCamera
from src.pathtracer.materials.material import Material, emissive
from src.pathtracer.scene.manager import Scene

# =============================================================================
# Scene Constants
# =============================================================================

RED_ALBEDO = (0.8, 0.2, 0.2)
BLUE_ALBEDO = (0.2, 0.2, 0.8)
GROUND_ALBEDO = (0.5, 0.5, 0.5)

RED_SPHERE_CENTER = (0.0, 0.0, -15.0)
RED_SPHERE_RADIUS = 5.0
BLUE_SPHERE_CENTER = (-10.0, 0.0, -15.0)
BLUE_SPHERE_RADIUS = 3.0

# Ground: a huge sphere whose top touches y = -5
GROUND_CENTER = (0.0, -1005.0, -15.0)
GROUND_RADIUS = 1000.0

# Light: above and behind the camera's view of the spheres
LIGHT_CENTER = (-5.0, 25.0, -10.0)
LIGHT_RADIUS = 10.0
LIGHT_COLOUR = (1.0, 1.0, 1.0)
LIGHT_STRENGTH = 4.0


# =============================================================================
# Scene Factories
# =============================================================================


def create_two_sphere_scene() -> tuple[Scene, PinholeCamera]:
    """Create the unlit red and blue sphere scene.

    Returns:
        A tuple of (Scene, PinholeCamera).
    """
    scene = Scene()
    scene.add_sphere(RED_SPHERE_CENTER, RED_SPHERE_RADIUS, Material(albedo=RED_ALBEDO))
    scene.add_sphere(BLUE_SPHERE_CENTER, BLUE_SPHERE_RADIUS, Material(albedo=BLUE_ALBEDO))
    return scene, PinholeCamera(position=DEFAULT_CAMERA_POSITION)


def create_lit_scene(
    light_strength: float = LIGHT_STRENGTH,
    light_colour: tuple[float, float, float] = LIGHT_COLOUR,
) -> tuple[Scene, PinholeCamera]:
    """Create the red and blue spheres on a ground sphere under a light.

    Args:
        light_strength: Emission strength of the light sphere.
        light_colour: Emission colour of the light sphere.

    Returns:
        A tuple of (Scene, PinholeCamera).
    """
    scene, camera = create_two_sphere_scene()
    scene.add_sphere(GROUND_CENTER, GROUND_RADIUS, Material(albedo=GROUND_ALBEDO))
    scene.add_sphere(LIGHT_CENTER, LIGHT_RADIUS, emissive(light_colour, light_strength))
    return scene, camera


# Scene factories by name, for command-line selection
SCENE_PRESETS = {
    "two_spheres": create_two_sphere_scene,
    "lit": create_lit_scene,
}
