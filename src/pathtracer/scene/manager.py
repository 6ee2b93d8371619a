"""Scene manager: an ordered, runtime-built collection of spheres.

The Scene class is the Python-side owner of the scene. It keeps a SphereInfo
record for each sphere in insertion order and mirrors every sphere into the
Taichi fields of src.pathtracer.scene.intersection, which the rendering kernel
reads. The scene is built once before rendering and is never modified by the
renderer.

Because the primitive fields are module-level, only one Scene is loaded into
them at a time. Constructing a Scene (or calling clear()) makes it the active
scene. Any other Scene reloads its own spheres through activate() before it
is queried, extended or rendered, so a Scene object always sees its own
spheres.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.materials.material import Material
    >>> from src.pathtracer.scene.manager import Scene
    >>> scene = Scene()
    >>> scene.add_sphere((0, 0, -15), 5.0, Material(albedo=(0.8, 0.2, 0.2)))
    0
    >>> scene.add_sphere((-10, 0, -15), 3.0, Material(albedo=(0.2, 0.2, 0.8)))
    1
    >>> len(scene)
    2
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from src.pathtracer.materials.material import Material
from src.pathtracer.scene.intersection import (
    MAX_SPHERES,
    HitInfo,
    add_sphere,
    clear_scene,
    closest_hit,
    get_active_owner,
    get_sphere_count,
)


@dataclass(frozen=True)
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: The center of the sphere.
        radius: The radius of the sphere.
        material: The material assigned to the sphere.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material: Material


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        spheres: List of sphere configurations, each with center, radius and
            an inline material dictionary.
    """

    spheres: list[dict[str, Any]] = field(default_factory=list)


class Scene:
    """Ordered collection of spheres with materials.

    Attributes:
        spheres: SphereInfo for every sphere, in insertion order.
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.spheres: list[SphereInfo] = []
        self.clear()

    def clear(self) -> None:
        """Remove every sphere from the scene and make it the active scene."""
        self.spheres.clear()
        clear_scene(owner=self)

    @property
    def is_active(self) -> bool:
        """Whether the shared Taichi storage currently holds this scene."""
        return get_active_owner() is self and get_sphere_count() == len(self.spheres)

    def activate(self) -> None:
        """Load this scene's spheres into the shared Taichi storage.

        Does nothing if the scene is already active.
        """
        if self.is_active:
            return

        clear_scene(owner=self)
        for info in self.spheres:
            add_sphere(info.center, info.radius, info.material)

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material: Material,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere. Must be positive.
            material: The sphere's material.

        Returns:
            The index of the added sphere.

        Raises:
            ValueError: If the radius is not positive.
            RuntimeError: If the maximum number of spheres is exceeded.
        """
        self.activate()
        center = (float(center[0]), float(center[1]), float(center[2]))
        sphere_index = add_sphere(center, radius, material)

        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=center,
                radius=float(radius),
                material=material,
            )
        )
        return sphere_index

    def closest_hit(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
    ) -> HitInfo | None:
        """Find the nearest sphere hit by a ray.

        Args:
            origin: Ray origin (x, y, z).
            direction: Ray direction (x, y, z), not necessarily normalized.

        Returns:
            The closest hit, or None if the ray escapes the scene.
        """
        self.activate()
        return closest_hit(origin, direction)

    @property
    def has_emitters(self) -> bool:
        """Whether any sphere emits light."""
        return any(info.material.is_emissive for info in self.spheres)

    def get_sphere_count(self) -> int:
        """Get the number of spheres stored in the Taichi fields."""
        return get_sphere_count()

    def __len__(self) -> int:
        return len(self.spheres)

    def __iter__(self) -> Iterator[SphereInfo]:
        return iter(self.spheres)

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        config = SceneConfig()
        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material": sphere.material.to_dict(),
                }
            )
        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene and loads the configuration.

        Args:
            config: The scene configuration to load.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()

        for sphere_config in config.spheres:
            try:
                center_list = sphere_config["center"]
                radius = sphere_config["radius"]
                material = Material.from_dict(sphere_config["material"])
            except KeyError as e:
                raise ValueError(f"Sphere configuration is missing {e}") from e

            center: tuple[float, float, float] = (
                center_list[0],
                center_list[1],
                center_list[2],
            )
            self.add_sphere(center, radius, material)

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        return {"spheres": self.to_config().spheres}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary produced by to_dict()."""
        self.from_config(SceneConfig(spheres=data.get("spheres", [])))

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of spheres supported."""
        return MAX_SPHERES

    def __repr__(self) -> str:
        return f"Scene(spheres={len(self.spheres)})"
