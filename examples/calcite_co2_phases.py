"""
Phase Properties for a Calcite-CO2-Brine System
===============================================

This example assembles three phases with the function-injection interface of
gibbsphase and evaluates the quantities an equilibrium solver needs:

- standard Gibbs energies with their T and P derivatives
- log activities and chemical potentials with the Jacobian w.r.t. n
- the molar volume of each phase (ideal mixing default for the mineral)

Standard-state data are the constant heat capacity models used by the tests.
The activity models below are written inline for illustration.
"""
import logging

import jax.numpy as jnp
from jax import config

from gibbsphase.api import Phase, collect_species
from gibbsphase.autodiff import ChemicalScalar, ChemicalVector, functions
from gibbsphase.test.synthetic_models import make_species
from gibbsphase.utils.constants import R_gas_constant_si, reference_pressure_si

config.update("jax_enable_x64", True)
logging.basicConfig(level=logging.DEBUG)

##############################################################################
# Activity models
# ---------------
# An ideal gas (ln a = ln x + ln P/Pref) and an ideal solution (ln a = ln x).


def ideal_gas_ln_activities(T, P, n):
    x = ChemicalVector.mole_fractions(n)
    return functions.log(x) + jnp.log(P / reference_pressure_si)


def ideal_gas_molar_volume(T, P, n):
    return ChemicalScalar.constant(R_gas_constant_si * T / P, n.shape[0])


def ideal_solution_ln_activities(T, P, n):
    return functions.log(ChemicalVector.mole_fractions(n))


##############################################################################
# Phases
# ------

aqueous = Phase()
aqueous.set_name("Aqueous")
aqueous.set_species(
    [make_species(s, "Aqueous") for s in ["H2O(l)", "H+", "OH-", "CO2(aq)", "Na+", "Cl-"]]
)
aqueous.set_activity_function(ideal_solution_ln_activities)

gaseous = Phase()
gaseous.set_name("Gaseous")
gaseous.set_species([make_species(s, "Gaseous") for s in ["CO2(g)", "H2O(g)"]])
gaseous.set_activity_function(ideal_gas_ln_activities)
gaseous.set_molar_volume_function(ideal_gas_molar_volume)

calcite = Phase()
calcite.set_name("Calcite")
calcite.set_species([make_species("Calcite", "Calcite")])
calcite.set_activity_function(ideal_solution_ln_activities)

phases = sorted([aqueous, gaseous, calcite])
for phase in phases:
    phase.freeze()

##############################################################################
# Evaluation
# ----------

T = 333.15  # K
P = 2.0e7  # Pa
amounts = {
    "Aqueous": jnp.array([55.5, 1.0e-7, 1.0e-7, 0.5, 0.1, 0.1]),
    "Gaseous": jnp.array([2.0, 0.01]),
    "Calcite": jnp.array([1.0]),
}

print("species in the system:", [s.name for s in collect_species(phases)])

for phase in phases:
    n = amounts[phase.name]
    G = phase.standard_gibbs_energies(T, P)
    mu = phase.chemical_potentials(T, P, n)
    v = phase.molar_volume(T, P, n)
    print(f"--- {phase.name} ---")
    for i, species in enumerate(phase.species):
        print(
            f"{species.name:>8s}  G0 = {G.val[i]:14.2f} J/mol  "
            f"dG0/dT = {G.ddt[i]:9.3f}  mu = {mu.val[i]:14.2f} J/mol"
        )
    print("dmu/dn =\n", mu.ddn)
    print(f"molar volume = {v.val:.4e} m3/mol, dv/dn = {v.ddn}")
