"""Standard-state property functions built from a single Gibbs energy function.

A standard-state model only has to provide the molar Gibbs energy g(T, P) as a
JAX-differentiable function. Everything else follows from it:

    V = dg/dP,  S = -dg/dT,  H = g + T S,  Cp = dH/dT

and jax.grad gives the T and P derivatives of each of these, which are packed
in ThermoScalar objects. Properties derived this way are thermodynamically
consistent by construction (e.g. dS/dP = -dV/dT).
"""

from __future__ import annotations

from typing import Callable, Union

import jax
import jax.numpy as jnp
from interpax import interp1d

from gibbsphase.api.chemistry import StandardProperties
from gibbsphase.autodiff.thermo import ThermoScalar
from gibbsphase.utils.constants import reference_pressure_si

GibbsFunction = Callable[[jnp.ndarray, jnp.ndarray], jnp.ndarray]


def _thermo_scalar_function(f: GibbsFunction) -> Callable[[float, float], ThermoScalar]:
    value_and_grad = jax.jit(jax.value_and_grad(f, argnums=(0, 1)))

    def evaluate(T: Union[float, jnp.ndarray], P: Union[float, jnp.ndarray]) -> ThermoScalar:
        val, (ddt, ddp) = value_and_grad(
            jnp.asarray(T, dtype=float), jnp.asarray(P, dtype=float)
        )
        return ThermoScalar(val, ddt, ddp)

    return evaluate


def standard_properties_from_gibbs(gibbs: GibbsFunction) -> StandardProperties:
    """Derive the standard-state property functions of a species from g(T, P).

    Args:
        gibbs: standard molar Gibbs energy g(T [K], P [Pa]) in J/mol. MUST be
            JAX-differentiable (twice w.r.t. T for the heat capacity derivatives).

    Returns:
        StandardProperties with Gibbs energy, enthalpy, volume and heat capacity.
    """

    def volume(T, P):
        return jax.grad(gibbs, argnums=1)(T, P)

    def entropy(T, P):
        return -jax.grad(gibbs, argnums=0)(T, P)

    def enthalpy(T, P):
        return gibbs(T, P) + T * entropy(T, P)

    def heat_capacity(T, P):
        return jax.grad(enthalpy, argnums=0)(T, P)

    return StandardProperties(
        gibbs_energy=_thermo_scalar_function(gibbs),
        enthalpy=_thermo_scalar_function(enthalpy),
        volume=_thermo_scalar_function(volume),
        heat_capacity=_thermo_scalar_function(heat_capacity),
    )


def tabulated_gibbs_function(
    T_table,
    G_table,
    molar_volume: float = 0.0,
    Pref: float = reference_pressure_si,
    unit_conversion_factor: float = 1.0,
    method: str = "cubic",
) -> GibbsFunction:
    """Gibbs energy function interpolated from a tabulated temperature grid.

    Args:
        T_table (1D array): temperature grid (K)
        G_table (1D array): standard molar Gibbs energy on the grid, at Pref
        molar_volume (float): constant molar volume (m3/mol) for the pressure correction V0 (P - Pref)
        Pref (float): pressure of the tabulated data (Pa), default to 1 bar
        unit_conversion_factor (float): multiplies G_table, e.g. 1.e3 for tables in kJ/mol
        method (str): method of interpolation used in interpax.interp1d, e.g. 'linear', 'cubic', 'cubic2', 'akima'

    Returns:
        g(T, P) in J/mol, differentiable with jax.grad

    Notes:
        Heat capacities need the second temperature derivative of g, so 'linear'
        and 'nearest' interpolation give zero heat capacities.
    """
    T_table = jnp.asarray(T_table, dtype=float)
    G_table = jnp.asarray(G_table, dtype=float) * unit_conversion_factor

    def gibbs(T, P):
        g_ref = interp1d(T, T_table, G_table, method=method)
        return jnp.reshape(g_ref, ()) + molar_volume * (P - Pref)

    return gibbs
