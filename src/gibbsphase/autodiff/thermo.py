"""Thermodynamic value types carrying derivatives with respect to T and P.

ThermoScalar and ThermoVector hold a value together with its partial
derivatives with respect to temperature (ddt) and pressure (ddp). Standard
state properties depend on (T, P) only, so these containers have no
compositional sensitivity. Arithmetic between containers, and with plain
numbers or arrays, applies the exact differentiation rule of each operation.

Combining a thermo container with a chemical container (see
gibbsphase.autodiff.chemical) defers to the chemical one, which promotes the
thermo operand with a zero gradient in the mole amounts.
"""

from __future__ import annotations

from dataclasses import dataclass
from numbers import Number
from typing import Sequence

import jax
import jax.numpy as jnp
import numpy as np
from jax import tree_util

Array = jax.Array


def _is_numeric(x) -> bool:
    return isinstance(x, (Number, np.ndarray, np.generic, jax.Array))


def _as_array(x) -> Array:
    return jnp.asarray(x, dtype=float)


@dataclass(frozen=True, eq=False)
class _ThermoBase:
    val: Array
    ddt: Array
    ddp: Array

    # numpy arrays on the left must defer to the reflected operators
    __array_ufunc__ = None

    def tree_flatten(self):
        children = (self.val, self.ddt, self.ddp)
        return children, None

    @classmethod
    def tree_unflatten(cls, aux_data, children):
        val, ddt, ddp = children
        return cls(val, ddt, ddp)

    def _chain(self, val, dval):
        """Apply f to the container given f(val) and f'(val)."""
        return make_thermo(val, dval * self.ddt, dval * self.ddp)

    def __neg__(self):
        return make_thermo(-self.val, -self.ddt, -self.ddp)

    def __pos__(self):
        return self

    def __add__(self, other):
        b = _cast(other)
        if b is None:
            return NotImplemented
        return make_thermo(self.val + b.val, self.ddt + b.ddt, self.ddp + b.ddp)

    def __radd__(self, other):
        return self.__add__(other)

    def __sub__(self, other):
        b = _cast(other)
        if b is None:
            return NotImplemented
        return make_thermo(self.val - b.val, self.ddt - b.ddt, self.ddp - b.ddp)

    def __rsub__(self, other):
        b = _cast(other)
        if b is None:
            return NotImplemented
        return b - self

    def __mul__(self, other):
        b = _cast(other)
        if b is None:
            return NotImplemented
        return make_thermo(
            self.val * b.val,
            self.ddt * b.val + self.val * b.ddt,
            self.ddp * b.val + self.val * b.ddp,
        )

    def __rmul__(self, other):
        b = _cast(other)
        if b is None:
            return NotImplemented
        return b * self

    def __truediv__(self, other):
        b = _cast(other)
        if b is None:
            return NotImplemented
        val = self.val / b.val
        return make_thermo(
            val,
            (self.ddt - val * b.ddt) / b.val,
            (self.ddp - val * b.ddp) / b.val,
        )

    def __rtruediv__(self, other):
        b = _cast(other)
        if b is None:
            return NotImplemented
        return b / self

    def __pow__(self, exponent):
        if not _is_numeric(exponent):
            return NotImplemented
        return self._chain(self.val**exponent, exponent * self.val ** (exponent - 1))


@tree_util.register_pytree_node_class
@dataclass(frozen=True, eq=False)
class ThermoScalar(_ThermoBase):
    """A scalar with derivatives with respect to temperature and pressure."""

    @classmethod
    def constant(cls, value) -> "ThermoScalar":
        zero = jnp.zeros((), dtype=float)
        return cls(_as_array(value), zero, zero)

    @classmethod
    def temperature(cls, T) -> "ThermoScalar":
        """Temperature as the independent variable: ddt = 1, ddp = 0."""
        return cls(_as_array(T), jnp.ones((), dtype=float), jnp.zeros((), dtype=float))

    @classmethod
    def pressure(cls, P) -> "ThermoScalar":
        """Pressure as the independent variable: ddt = 0, ddp = 1."""
        return cls(_as_array(P), jnp.zeros((), dtype=float), jnp.ones((), dtype=float))


@tree_util.register_pytree_node_class
@dataclass(frozen=True, eq=False)
class ThermoVector(_ThermoBase):
    """One value with T and P derivatives per species, stored as (K,) arrays."""

    @classmethod
    def constant(cls, values) -> "ThermoVector":
        val = jnp.atleast_1d(_as_array(values))
        return cls(val, jnp.zeros_like(val), jnp.zeros_like(val))

    @classmethod
    def stack(cls, scalars: Sequence[ThermoScalar]) -> "ThermoVector":
        """Assemble a vector from one ThermoScalar per species, in order."""
        if len(scalars) == 0:
            empty = jnp.zeros((0,), dtype=float)
            return cls(empty, empty, empty)
        return cls(
            jnp.stack([_as_array(s.val) for s in scalars]),
            jnp.stack([_as_array(s.ddt) for s in scalars]),
            jnp.stack([_as_array(s.ddp) for s in scalars]),
        )

    def __len__(self):
        return self.val.shape[0]

    def __getitem__(self, index):
        return make_thermo(self.val[index], self.ddt[index], self.ddp[index])

    def sum(self) -> ThermoScalar:
        return ThermoScalar(jnp.sum(self.val), jnp.sum(self.ddt), jnp.sum(self.ddp))


def make_thermo(val, ddt, ddp):
    """Wrap arrays in a ThermoScalar or ThermoVector depending on the value shape."""
    val = _as_array(val)
    ddt = jnp.broadcast_to(_as_array(ddt), val.shape)
    ddp = jnp.broadcast_to(_as_array(ddp), val.shape)
    if val.ndim == 0:
        return ThermoScalar(val, ddt, ddp)
    return ThermoVector(val, ddt, ddp)


def _cast(other):
    if isinstance(other, _ThermoBase):
        return other
    if _is_numeric(other):
        val = _as_array(other)
        return make_thermo(val, jnp.zeros_like(val), jnp.zeros_like(val))
    return None
