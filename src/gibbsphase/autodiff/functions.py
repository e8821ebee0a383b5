"""Elementary functions acting on thermo and chemical containers.

Plain numbers and arrays are passed through to jax.numpy, so a model can be
written once and evaluated on either.
"""

import jax.numpy as jnp

from gibbsphase.autodiff.chemical import _ChemicalBase
from gibbsphase.autodiff.thermo import _ThermoBase

_CONTAINERS = (_ThermoBase, _ChemicalBase)


def exp(var):
    if not isinstance(var, _CONTAINERS):
        return jnp.exp(var)
    val = jnp.exp(var.val)
    return var._chain(val, val)


def log(var):
    if not isinstance(var, _CONTAINERS):
        return jnp.log(var)
    return var._chain(jnp.log(var.val), 1.0 / var.val)


def sqrt(var):
    if not isinstance(var, _CONTAINERS):
        return jnp.sqrt(var)
    val = jnp.sqrt(var.val)
    return var._chain(val, 0.5 / val)


def sum(var):
    """Sum the entries of a vector container into a scalar container."""
    if not isinstance(var, _CONTAINERS):
        return jnp.sum(var)
    if var.val.ndim == 0:
        return var
    return var.sum()
