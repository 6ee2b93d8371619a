"""Surface material: diffuse reflectance plus optional emission.

Every surface in the renderer uses the same material model:

    albedo:             per-channel reflectance multiplied into the path
                        throughput at each bounce
    emission_colour:    colour of light emitted by the surface
    emission_strength:  scalar multiplier for the emission colour

The radiance a surface emits is emission_colour * emission_strength. Scattered
directions are drawn uniformly over the hemisphere of the surface normal (see
src.pathtracer.core.sampler); there is no BRDF evaluation or pdf weighting.

Materials are immutable values. The scene stores a copy of each sphere's
material in its primitive arrays and the closest-hit query copies those values
into the hit record.

Example:
    >>> red = Material(albedo=(0.8, 0.2, 0.2))
    >>> lamp = Material(albedo=(0.0, 0.0, 0.0), emission_colour=(1.0, 0.9, 0.8),
    ...                 emission_strength=4.0)
    >>> lamp.emitted_radiance
    (4.0, 3.6, 3.2)
"""

from dataclasses import dataclass
from typing import Any

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3

BLACK = (0.0, 0.0, 0.0)


@dataclass(frozen=True)
class Material:
    """Reflectance and emission of a surface.

    Attributes:
        albedo: Per-channel reflectance (R, G, B). Conventionally in [0, 1]
            but not clamped.
        emission_colour: Colour of emitted light (R, G, B).
        emission_strength: Non-negative multiplier for emission_colour.
    """

    albedo: tuple[float, float, float]
    emission_colour: tuple[float, float, float] = BLACK
    emission_strength: float = 0.0

    def __post_init__(self) -> None:
        for name in ("albedo", "emission_colour"):
            value = getattr(self, name)
            if len(value) != 3:
                raise ValueError(f"{name} must have 3 components, got {len(value)}")
            object.__setattr__(self, name, tuple(float(c) for c in value))

        if self.emission_strength < 0.0:
            raise ValueError(
                f"emission_strength must be non-negative, got {self.emission_strength}"
            )
        object.__setattr__(self, "emission_strength", float(self.emission_strength))

    @property
    def emitted_radiance(self) -> tuple[float, float, float]:
        """The radiance emitted by the surface: emission_colour * emission_strength."""
        r, g, b = self.emission_colour
        s = self.emission_strength
        return (r * s, g * s, b * s)

    @property
    def is_emissive(self) -> bool:
        """Whether the surface emits any light."""
        return self.emission_strength > 0.0 and any(c != 0.0 for c in self.emission_colour)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the material to a plain dictionary."""
        return {
            "albedo": list(self.albedo),
            "emission_colour": list(self.emission_colour),
            "emission_strength": self.emission_strength,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Material":
        """Create a material from a dictionary produced by to_dict()."""
        return cls(
            albedo=tuple(data["albedo"]),
            emission_colour=tuple(data.get("emission_colour", BLACK)),
            emission_strength=data.get("emission_strength", 0.0),
        )


def emissive(colour: tuple[float, float, float], strength: float) -> Material:
    """Create a light-emitting material that reflects nothing."""
    return Material(albedo=BLACK, emission_colour=colour, emission_strength=strength)


@ti.func
def emitted_radiance(emission_colour: vec3, emission_strength: ti.f32) -> vec3:
    """Radiance emitted by a surface with the given emission parameters."""
    return emission_colour * emission_strength
