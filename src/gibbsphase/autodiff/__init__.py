from .thermo import ThermoScalar, ThermoVector
from .chemical import ChemicalScalar, ChemicalVector
from . import functions

__all__ = [
    "ThermoScalar",
    "ThermoVector",
    "ChemicalScalar",
    "ChemicalVector",
    "functions",
]
