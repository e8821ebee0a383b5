from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional, Tuple

from gibbsphase.autodiff.thermo import ThermoScalar
from gibbsphase.stoichiometry.formula_matrix import parse_formula

ThermoScalarFunction = Callable[[float, float], ThermoScalar]


@dataclass(frozen=True)
class Element:
    """
    A chemical element.

    Fields:
        symbol: Element symbol, e.g. "Ca".
        name: Element name, e.g. "Calcium".
        molar_mass: Molar mass in kg/mol.
    """

    symbol: str
    name: str = ""
    molar_mass: float = 0.0


@dataclass(frozen=True)
class StandardProperties:
    """
    Standard-state property functions of one species.

    Each callable maps (T [K], P [Pa]) to a ThermoScalar carrying the value and
    its T and P derivatives. Entropy, Helmholtz and internal energies are not
    stored; a Phase derives them from these four through thermodynamic identities.

    Fields:
        gibbs_energy: Standard molar Gibbs energy (J/mol).
        enthalpy: Standard molar enthalpy (J/mol).
        volume: Standard molar volume (m3/mol).
        heat_capacity: Standard molar isobaric heat capacity (J/(mol K)).
    """

    gibbs_energy: ThermoScalarFunction
    enthalpy: ThermoScalarFunction
    volume: ThermoScalarFunction
    heat_capacity: ThermoScalarFunction


@dataclass(frozen=True)
class Species:
    """
    An immutable chemical species record.

    Fields:
        name: Species name, e.g. "CO2(g)".
        formula: Chemical formula, e.g. "CO2".
        elements: Ordered (Element, stoichiometric coefficient) pairs.
        charge: Electric charge.
        phase: Tag of the phase the species belongs to.
        standard: Standard-state property functions, or None if not available.
    """

    name: str
    formula: str = ""
    elements: Tuple[Tuple[Element, float], ...] = ()
    charge: float = 0.0
    phase: str = ""
    standard: Optional[StandardProperties] = field(default=None, compare=False)

    @classmethod
    def from_formula(
        cls,
        name: str,
        formula: str,
        elements: Mapping[str, Element],
        charge: Optional[float] = None,
        phase: str = "",
        standard: Optional[StandardProperties] = None,
    ) -> "Species":
        """Build a species by parsing its formula against known elements.

        Args:
            name: species name
            formula: chemical formula, optionally with a charge suffix such as "Ca+2"
            elements: mapping from element symbol to Element
            charge: electric charge, overriding the one parsed from the formula
            phase: phase tag
            standard: standard-state property functions

        Raises:
            KeyError: if the formula references a symbol missing in elements
        """
        counts, parsed_charge = parse_formula(formula)
        pairs = tuple((elements[symbol], count) for symbol, count in counts)
        return cls(
            name=name,
            formula=formula,
            elements=pairs,
            charge=parsed_charge if charge is None else charge,
            phase=phase,
            standard=standard,
        )

    @property
    def molar_mass(self) -> float:
        """Molar mass in kg/mol."""
        return sum(element.molar_mass * coeff for element, coeff in self.elements)

    def element_coefficient(self, symbol: str) -> float:
        """Stoichiometric coefficient of an element in the species (0 if absent)."""
        return sum(coeff for element, coeff in self.elements if element.symbol == symbol)
