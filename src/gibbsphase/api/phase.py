"""
Phase: species container and property evaluation engine.

A Phase stores an ordered list of species and a set of injected functions
describing its compositional behaviour:

    concentration(T, P, n)          -> ChemicalVector
    activity coefficient(T, P, n)   -> ChemicalVector (natural log)
    activity(T, P, n)               -> ChemicalVector (natural log)
    molar volume(T, P, n)           -> ChemicalScalar (m3/mol)

Standard-state properties come from the StandardProperties of each species.
The order of the species defines the index of every entry of the returned
vectors. Units: T in K, P in Pa, n in mol, energies in J/mol.
"""

from __future__ import annotations

import functools
import logging
from typing import Callable, Iterable, List, Sequence, Tuple

import jax.numpy as jnp
import numpy as np

from gibbsphase.api.chemistry import Element, Species
from gibbsphase.autodiff.chemical import ChemicalScalar, ChemicalVector
from gibbsphase.autodiff.thermo import ThermoScalar, ThermoVector
from gibbsphase.stoichiometry.formula_matrix import formula_matrix
from gibbsphase.utils.constants import R_gas_constant_si
from gibbsphase.utils.exceptions import (
    EmptyPhaseError,
    MissingFunctionError,
    PhaseConfigurationError,
    PhaseFrozenError,
    SpeciesIndexError,
)

__all__ = ["Phase", "collect_species", "ChemicalVectorFunction", "ChemicalScalarFunction"]

logger = logging.getLogger(__name__)

ChemicalVectorFunction = Callable[[float, float, jnp.ndarray], ChemicalVector]
ChemicalScalarFunction = Callable[[float, float, jnp.ndarray], ChemicalScalar]

CONCENTRATION = "concentration"
ACTIVITY_COEFFICIENT = "activity coefficient"
ACTIVITY = "activity"
MOLAR_VOLUME = "molar volume"


def _collect_elements(species: Sequence[Species]) -> Tuple[Element, ...]:
    elements = []
    for s in species:
        for element, _ in s.elements:
            if element not in elements:
                elements.append(element)
    return tuple(elements)


@functools.total_ordering
class Phase:
    """A homogeneous part of a chemical system and the evaluation of its properties.

    Phases are compared, ordered and hashed by name only.
    """

    def __init__(self) -> None:
        self._name: str = ""
        self._species: Tuple[Species, ...] = ()
        self._elements: Tuple[Element, ...] = ()
        self._functions = {
            CONCENTRATION: None,
            ACTIVITY_COEFFICIENT: None,
            ACTIVITY: None,
            MOLAR_VOLUME: None,
        }
        self._frozen = False

    def __repr__(self) -> str:
        names = ", ".join(s.name for s in self._species)
        return f"Phase(name={self._name!r}, species=[{names}])"

    # -- configuration --------------------------------------------------------

    def _check_not_frozen(self, attribute: str) -> None:
        if self._frozen:
            raise PhaseFrozenError(attribute, self._name)

    def freeze(self) -> None:
        """Mark the configuration as final. Setters raise PhaseFrozenError afterwards."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def set_name(self, name: str) -> None:
        """Set the name of the phase."""
        self._check_not_frozen("name")
        self._name = name

    def set_species(self, species: Iterable[Species]) -> None:
        """Set the species of the phase and recompute its elements."""
        self._check_not_frozen("species")
        species = tuple(species)
        stale = [slot for slot, f in self._functions.items() if f is not None]
        if self._species and stale and len(species) != len(self._species):
            logger.warning(
                "Species of phase '%s' changed from %d to %d; re-set the %s function(s).",
                self._name,
                len(self._species),
                len(species),
                ", ".join(stale),
            )
        self._species = species
        self._elements = _collect_elements(species)
        logger.debug(
            "Phase '%s': %d species, %d elements",
            self._name,
            len(self._species),
            len(self._elements),
        )

    def _set_function(self, slot: str, function) -> None:
        self._check_not_frozen(f"{slot} function")
        self._functions[slot] = function
        logger.debug("Phase '%s': %s function set", self._name, slot)

    def set_concentration_function(self, function: ChemicalVectorFunction) -> None:
        """Set the function for the concentrations of the species."""
        self._set_function(CONCENTRATION, function)

    def set_activity_coefficient_function(self, function: ChemicalVectorFunction) -> None:
        """Set the function for the natural log of the activity coefficients of the species."""
        self._set_function(ACTIVITY_COEFFICIENT, function)

    def set_activity_function(self, function: ChemicalVectorFunction) -> None:
        """Set the function for the natural log of the activities of the species."""
        self._set_function(ACTIVITY, function)

    def set_molar_volume_function(self, function: ChemicalScalarFunction) -> None:
        """Set the function for the molar volume of the phase (m3/mol).

        If it is not set, the molar volume is v = sum_i x_i v_i^o, with x_i the
        mole fraction and v_i^o the standard molar volume of the i-th species.
        """
        self._set_function(MOLAR_VOLUME, function)

    # -- accessors ------------------------------------------------------------

    @property
    def num_elements(self) -> int:
        return len(self._elements)

    @property
    def num_species(self) -> int:
        return len(self._species)

    @property
    def name(self) -> str:
        return self._name

    @property
    def elements(self) -> Tuple[Element, ...]:
        return self._elements

    @property
    def species(self) -> Tuple[Species, ...]:
        return self._species

    def species_at(self, index: int) -> Species:
        """Get the species with a given index."""
        if not 0 <= index < len(self._species):
            raise SpeciesIndexError(index, len(self._species), self._name)
        return self._species[index]

    def index_species(self, name: str) -> int:
        """Get the index of a species by name."""
        for i, s in enumerate(self._species):
            if s.name == name:
                return i
        raise KeyError(f"Species '{name}' is not in phase '{self._name}'.")

    def formula_matrix(self) -> np.ndarray:
        """Formula matrix of the phase (num_elements x num_species)."""
        return formula_matrix(self._species, self._elements)

    # -- standard-state properties -------------------------------------------

    def _check_species(self) -> None:
        if not self._species:
            raise EmptyPhaseError(self._name)

    def _standard(self, prop: str, T: float, P: float) -> ThermoVector:
        self._check_species()
        values = []
        for s in self._species:
            if s.standard is None:
                raise PhaseConfigurationError(
                    f"Species '{s.name}' of phase '{self._name}' has no standard properties.",
                    slot=prop,
                    phase=self._name,
                )
            values.append(getattr(s.standard, prop)(T, P))
        return ThermoVector.stack(values)

    def standard_gibbs_energies(self, T: float, P: float) -> ThermoVector:
        """Standard molar Gibbs energies of the species (J/mol)."""
        return self._standard("gibbs_energy", T, P)

    def standard_enthalpies(self, T: float, P: float) -> ThermoVector:
        """Standard molar enthalpies of the species (J/mol)."""
        return self._standard("enthalpy", T, P)

    def standard_helmholtz_energies(self, T: float, P: float) -> ThermoVector:
        """Standard molar Helmholtz energies of the species, A = G - PV (J/mol)."""
        G = self.standard_gibbs_energies(T, P)
        V = self.standard_volumes(T, P)
        return G - ThermoScalar.pressure(P) * V

    def standard_entropies(self, T: float, P: float) -> ThermoVector:
        """Standard molar entropies of the species, S = (H - G)/T (J/(mol K))."""
        G = self.standard_gibbs_energies(T, P)
        H = self.standard_enthalpies(T, P)
        return (H - G) / ThermoScalar.temperature(T)

    def standard_volumes(self, T: float, P: float) -> ThermoVector:
        """Standard molar volumes of the species (m3/mol)."""
        return self._standard("volume", T, P)

    def standard_internal_energies(self, T: float, P: float) -> ThermoVector:
        """Standard molar internal energies of the species, U = H - PV (J/mol)."""
        H = self.standard_enthalpies(T, P)
        V = self.standard_volumes(T, P)
        return H - ThermoScalar.pressure(P) * V

    def standard_heat_capacities(self, T: float, P: float) -> ThermoVector:
        """Standard molar isobaric heat capacities of the species (J/(mol K))."""
        return self._standard("heat_capacity", T, P)

    # -- compositional properties --------------------------------------------

    def _amounts(self, n) -> jnp.ndarray:
        self._check_species()
        n = jnp.asarray(n, dtype=float)
        if n.ndim != 1 or n.shape[0] != len(self._species):
            raise ValueError(
                f"n has shape {n.shape} but phase '{self._name}' has "
                f"{len(self._species)} species."
            )
        return n

    def _check_type(self, slot: str, result, expected: type) -> None:
        if not isinstance(result, expected):
            raise PhaseConfigurationError(
                f"The {slot} function of phase '{self._name}' returned "
                f"{type(result).__name__}, expected {expected.__name__}.",
                slot=slot,
                phase=self._name,
            )

    def _check_vector(self, slot: str, result: ChemicalVector, n: jnp.ndarray) -> ChemicalVector:
        self._check_type(slot, result, ChemicalVector)
        K = len(self._species)
        if result.val.shape != (K,) or result.ddn.shape != (K, n.shape[0]):
            raise PhaseConfigurationError(
                f"The {slot} function of phase '{self._name}' returned values of shape "
                f"{result.val.shape} with Jacobian {result.ddn.shape}, expected "
                f"({K},) and ({K}, {n.shape[0]}).",
                slot=slot,
                phase=self._name,
            )
        return result

    def _check_scalar(self, slot: str, result: ChemicalScalar, n: jnp.ndarray) -> ChemicalScalar:
        self._check_type(slot, result, ChemicalScalar)
        if result.val.shape != () or result.ddn.shape != (n.shape[0],):
            raise PhaseConfigurationError(
                f"The {slot} function of phase '{self._name}' returned a value of shape "
                f"{result.val.shape} with gradient {result.ddn.shape}, expected "
                f"() and ({n.shape[0]},).",
                slot=slot,
                phase=self._name,
            )
        return result

    def _evaluate_vector(self, slot: str, T: float, P: float, n) -> ChemicalVector:
        n = self._amounts(n)
        function = self._functions[slot]
        if function is None:
            raise MissingFunctionError(slot, self._name)
        return self._check_vector(slot, function(T, P, n), n)

    def concentrations(self, T: float, P: float, n) -> ChemicalVector:
        """Concentrations of the species (no uniform units)."""
        return self._evaluate_vector(CONCENTRATION, T, P, n)

    def activity_coefficients(self, T: float, P: float, n) -> ChemicalVector:
        """Natural log of the activity coefficients of the species."""
        return self._evaluate_vector(ACTIVITY_COEFFICIENT, T, P, n)

    def activities(self, T: float, P: float, n) -> ChemicalVector:
        """Natural log of the activities of the species."""
        return self._evaluate_vector(ACTIVITY, T, P, n)

    def chemical_potentials(self, T: float, P: float, n) -> ChemicalVector:
        """Chemical potentials of the species, mu = G^o + RT ln a (J/mol)."""
        G = self.standard_gibbs_energies(T, P)
        ln_a = self.activities(T, P, n)
        return G + R_gas_constant_si * ThermoScalar.temperature(T) * ln_a

    def molar_volume(self, T: float, P: float, n) -> ChemicalScalar:
        """Molar volume of the phase (m3/mol)."""
        n = self._amounts(n)
        function = self._functions[MOLAR_VOLUME]
        if function is not None:
            return self._check_scalar(MOLAR_VOLUME, function(T, P, n), n)
        logger.debug("Phase '%s': ideal mixing molar volume", self._name)
        x = ChemicalVector.mole_fractions(n)
        v = self.standard_volumes(T, P)
        return (x * v).sum()

    # -- comparison -----------------------------------------------------------

    def __eq__(self, other):
        if not isinstance(other, Phase):
            return NotImplemented
        return self._name == other._name

    def __lt__(self, other):
        if not isinstance(other, Phase):
            return NotImplemented
        return self._name < other._name

    def __hash__(self):
        return hash(self._name)


def collect_species(phases: Iterable[Phase]) -> List[Species]:
    """List the species of the phases in order of appearance, without deduplication."""
    species = []
    for phase in phases:
        species.extend(phase.species)
    return species
