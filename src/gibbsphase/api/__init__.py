from .chemistry import Element, Species, StandardProperties
from .phase import Phase, collect_species

__all__ = [
    "Element",
    "Species",
    "StandardProperties",
    "Phase",
    "collect_species",
]
