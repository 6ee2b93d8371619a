"""Materials module.

Components:
    material: The single diffuse-plus-emission material model

Each surface reflects light by its albedo and may emit light of
emission_colour scaled by emission_strength. Scattering directions are chosen
uniformly over the hemisphere by the integrator.
"""

from .material import BLACK, Material, emissive, emitted_radiance

__all__ = [
    "Material",
    "BLACK",
    "emissive",
    "emitted_radiance",
]
