"""Chemical value types carrying derivatives with respect to T, P and n.

A ChemicalScalar holds a value, its derivatives with respect to temperature
and pressure, and its gradient ddn with respect to the N mole amounts of a
phase. A ChemicalVector holds K such entries contiguously: val, ddt and ddp of
shape (K,) and the Jacobian ddn of shape (K, N).

These are the containers returned by the compositional functions injected in
a Phase. Arithmetic follows the exact sum, product and quotient rules.
Scalars broadcast against vectors (ddn of shape (N,) against (K, N)) and thermo
containers or plain numbers are promoted with a zero gradient in n.

Example:
    >>> n = jnp.array([1.0, 3.0])
    >>> x = ChemicalVector.mole_fractions(n)
    >>> x.val
    Array([0.25, 0.75], dtype=float64)
    >>> x.ddn  # (delta_ij - x_i) / ntot
    Array([[ 0.1875, -0.0625],
           [-0.1875,  0.0625]], dtype=float64)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import jax
import jax.numpy as jnp
from jax import tree_util

from gibbsphase.autodiff.thermo import _ThermoBase, _as_array, _is_numeric

Array = jax.Array


@dataclass(frozen=True, eq=False)
class _ChemicalBase:
    val: Array
    ddt: Array
    ddp: Array
    ddn: Array

    __array_ufunc__ = None

    def tree_flatten(self):
        children = (self.val, self.ddt, self.ddp, self.ddn)
        return children, None

    @classmethod
    def tree_unflatten(cls, aux_data, children):
        val, ddt, ddp, ddn = children
        return cls(val, ddt, ddp, ddn)

    @property
    def nspecies(self) -> int:
        """Number of mole amounts the gradient is taken with respect to."""
        return self.ddn.shape[-1]

    def _chain(self, val, dval):
        return make_chemical(
            val, dval * self.ddt, dval * self.ddp, dval[..., None] * self.ddn
        )

    def __neg__(self):
        return make_chemical(-self.val, -self.ddt, -self.ddp, -self.ddn)

    def __pos__(self):
        return self

    def __add__(self, other):
        b = _cast(other, self.nspecies)
        if b is None:
            return NotImplemented
        return _add(self, b)

    def __radd__(self, other):
        b = _cast(other, self.nspecies)
        if b is None:
            return NotImplemented
        return _add(b, self)

    def __sub__(self, other):
        b = _cast(other, self.nspecies)
        if b is None:
            return NotImplemented
        return _add(self, -b)

    def __rsub__(self, other):
        b = _cast(other, self.nspecies)
        if b is None:
            return NotImplemented
        return _add(b, -self)

    def __mul__(self, other):
        b = _cast(other, self.nspecies)
        if b is None:
            return NotImplemented
        return _mul(self, b)

    def __rmul__(self, other):
        b = _cast(other, self.nspecies)
        if b is None:
            return NotImplemented
        return _mul(b, self)

    def __truediv__(self, other):
        b = _cast(other, self.nspecies)
        if b is None:
            return NotImplemented
        return _div(self, b)

    def __rtruediv__(self, other):
        b = _cast(other, self.nspecies)
        if b is None:
            return NotImplemented
        return _div(b, self)

    def __pow__(self, exponent):
        if not _is_numeric(exponent):
            return NotImplemented
        return self._chain(self.val**exponent, exponent * self.val ** (exponent - 1))


@tree_util.register_pytree_node_class
@dataclass(frozen=True, eq=False)
class ChemicalScalar(_ChemicalBase):
    """A scalar with derivatives with respect to T, P and the mole amounts."""

    @classmethod
    def constant(cls, value, nspecies: int) -> "ChemicalScalar":
        zero = jnp.zeros((), dtype=float)
        return cls(_as_array(value), zero, zero, jnp.zeros((nspecies,), dtype=float))

    @classmethod
    def amount(cls, n, index: int) -> "ChemicalScalar":
        """The mole amount n[index] as a function of n (one-hot gradient)."""
        n = _as_array(n)
        zero = jnp.zeros((), dtype=float)
        ddn = jnp.zeros(n.shape, dtype=float).at[index].set(1.0)
        return cls(n[index], zero, zero, ddn)

    @classmethod
    def total_amount(cls, n) -> "ChemicalScalar":
        """The sum of the mole amounts n (gradient of ones)."""
        n = _as_array(n)
        zero = jnp.zeros((), dtype=float)
        return cls(jnp.sum(n), zero, zero, jnp.ones(n.shape, dtype=float))


@tree_util.register_pytree_node_class
@dataclass(frozen=True, eq=False)
class ChemicalVector(_ChemicalBase):
    """One ChemicalScalar per species with a (K, N) Jacobian."""

    @classmethod
    def constant(cls, values, nspecies: int) -> "ChemicalVector":
        val = jnp.atleast_1d(_as_array(values))
        zeros = jnp.zeros_like(val)
        return cls(val, zeros, zeros, jnp.zeros(val.shape + (nspecies,), dtype=float))

    @classmethod
    def amounts(cls, n) -> "ChemicalVector":
        """The mole amounts n as functions of themselves (identity Jacobian)."""
        n = jnp.atleast_1d(_as_array(n))
        zeros = jnp.zeros_like(n)
        return cls(n, zeros, zeros, jnp.eye(n.shape[0], dtype=float))

    @classmethod
    def mole_fractions(cls, n) -> "ChemicalVector":
        """Mole fractions x = n / sum(n) with their exact Jacobian."""
        amounts = cls.amounts(n)
        return amounts / amounts.sum()

    @classmethod
    def from_thermo(cls, vector, nspecies: int) -> "ChemicalVector":
        """Promote a ThermoVector, with zero gradient in the mole amounts."""
        return _promote(vector, nspecies)

    @classmethod
    def stack(cls, scalars: Sequence[ChemicalScalar], nspecies: int = 0) -> "ChemicalVector":
        """Assemble a vector from ChemicalScalars sharing the same nspecies.

        An empty sequence gives an empty vector with a (0, nspecies) Jacobian.
        """
        if len(scalars) == 0:
            empty = jnp.zeros((0,), dtype=float)
            return cls(empty, empty, empty, jnp.zeros((0, nspecies), dtype=float))
        return cls(
            jnp.stack([_as_array(s.val) for s in scalars]),
            jnp.stack([_as_array(s.ddt) for s in scalars]),
            jnp.stack([_as_array(s.ddp) for s in scalars]),
            jnp.stack([_as_array(s.ddn) for s in scalars]),
        )

    def __len__(self):
        return self.val.shape[0]

    def __getitem__(self, index):
        return make_chemical(
            self.val[index], self.ddt[index], self.ddp[index], self.ddn[index]
        )

    def sum(self) -> ChemicalScalar:
        return ChemicalScalar(
            jnp.sum(self.val),
            jnp.sum(self.ddt),
            jnp.sum(self.ddp),
            jnp.sum(self.ddn, axis=0),
        )


def make_chemical(val, ddt, ddp, ddn):
    """Wrap arrays in a ChemicalScalar or ChemicalVector depending on the value shape."""
    val = _as_array(val)
    ddn = _as_array(ddn)
    nspecies = ddn.shape[-1]
    ddt = jnp.broadcast_to(_as_array(ddt), val.shape)
    ddp = jnp.broadcast_to(_as_array(ddp), val.shape)
    ddn = jnp.broadcast_to(ddn, val.shape + (nspecies,))
    if val.ndim == 0:
        return ChemicalScalar(val, ddt, ddp, ddn)
    return ChemicalVector(val, ddt, ddp, ddn)


def _promote(other, nspecies):
    val = _as_array(other.val)
    return make_chemical(
        val, other.ddt, other.ddp, jnp.zeros(val.shape + (nspecies,), dtype=float)
    )


def _cast(other, nspecies):
    if isinstance(other, _ChemicalBase):
        if other.nspecies != nspecies:
            raise ValueError(
                f"Cannot combine gradients over {other.nspecies} and {nspecies} mole amounts."
            )
        return other
    if isinstance(other, _ThermoBase):
        return _promote(other, nspecies)
    if _is_numeric(other):
        val = _as_array(other)
        zeros = jnp.zeros_like(val)
        return make_chemical(val, zeros, zeros, jnp.zeros(val.shape + (nspecies,)))
    return None


def _add(a, b):
    return make_chemical(a.val + b.val, a.ddt + b.ddt, a.ddp + b.ddp, a.ddn + b.ddn)


def _mul(a, b):
    return make_chemical(
        a.val * b.val,
        a.ddt * b.val + a.val * b.ddt,
        a.ddp * b.val + a.val * b.ddp,
        a.ddn * b.val[..., None] + a.val[..., None] * b.ddn,
    )


def _div(a, b):
    val = a.val / b.val
    return make_chemical(
        val,
        (a.ddt - val * b.ddt) / b.val,
        (a.ddp - val * b.ddp) / b.val,
        (a.ddn - val[..., None] * b.ddn) / b.val[..., None],
    )
