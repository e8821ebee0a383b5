import jax.numpy as jnp
import numpy as np
import pytest
from jax import config

from gibbsphase.autodiff.chemical import ChemicalScalar, ChemicalVector
from gibbsphase.autodiff.thermo import ThermoScalar, ThermoVector
from gibbsphase.autodiff import functions

config.update("jax_enable_x64", True)


def _central_difference(f, n, j, rel_step=1.0e-6):
    h = rel_step * n[j]
    n_plus = n.at[j].add(h)
    n_minus = n.at[j].add(-h)
    return (f(n_plus) - f(n_minus)) / (2.0 * h)


def test_amounts_identity_and_one_hot():
    n = jnp.array([1.0, 2.0, 3.0])
    amounts = ChemicalVector.amounts(n)
    assert jnp.array_equal(amounts.ddn, jnp.eye(3))
    n1 = ChemicalScalar.amount(n, 1)
    assert n1.val == 2.0
    assert jnp.array_equal(n1.ddn, jnp.array([0.0, 1.0, 0.0]))
    ntot = ChemicalScalar.total_amount(n)
    assert ntot.val == 6.0
    assert jnp.array_equal(ntot.ddn, jnp.ones(3))


def test_constants_have_zero_derivatives():
    c = ChemicalVector.constant([1.0, 2.0], 4)
    assert c.ddn.shape == (2, 4)
    assert not jnp.any(c.ddn)
    s = ChemicalScalar.constant(5.0, 4)
    assert s.ddn.shape == (4,)
    assert s.ddt == 0.0 and s.ddp == 0.0


def test_mole_fraction_jacobian():
    n = jnp.array([1.0, 3.0, 4.0])
    x = ChemicalVector.mole_fractions(n)
    ntot = 8.0
    expected = (jnp.eye(3) - (n / ntot)[:, None]) / ntot
    assert jnp.allclose(x.val, n / ntot)
    assert jnp.allclose(x.ddn, expected)
    # sum_i x_i = 1 for any n
    assert jnp.allclose(x.sum().ddn, jnp.zeros(3))


def test_log_of_mole_fractions_against_finite_differences():
    n = jnp.array([0.5, 1.5, 2.0])
    lnx = functions.log(ChemicalVector.mole_fractions(n))

    def f(m):
        return jnp.log(m / jnp.sum(m))

    for j in range(3):
        fd = _central_difference(f, n, j)
        assert jnp.allclose(lnx.ddn[:, j], fd, rtol=1.0e-6)


def test_nonlinear_expression_against_finite_differences():
    n = jnp.array([0.2, 0.7, 1.1])
    x = ChemicalVector.mole_fractions(n)
    ntot = ChemicalScalar.total_amount(n)
    g = (ntot * x * functions.log(x)).sum() / (1.0 + x[0] ** 2)

    def f(m):
        xm = m / jnp.sum(m)
        return jnp.sum(jnp.sum(m) * xm * jnp.log(xm)) / (1.0 + xm[0] ** 2)

    assert isinstance(g, ChemicalScalar)
    assert g.val == pytest.approx(f(n))
    for j in range(3):
        assert g.ddn[j] == pytest.approx(_central_difference(f, n, j), rel=1.0e-6)


def test_thermo_operands_are_promoted():
    n = jnp.array([1.0, 1.0])
    lnx = functions.log(ChemicalVector.mole_fractions(n))
    T = ThermoScalar.temperature(300.0)
    G = ThermoVector(jnp.array([-10.0, -20.0]), jnp.array([-1.0, -2.0]), jnp.array([1.0e-5, 2.0e-5]))
    mu = G + 8.0 * T * lnx
    assert isinstance(mu, ChemicalVector)
    assert mu.ddn.shape == (2, 2)
    # d(mu)/dT = dG/dT + 8 ln x
    assert jnp.allclose(mu.ddt, G.ddt + 8.0 * lnx.val)
    assert jnp.allclose(mu.ddp, G.ddp)
    assert jnp.allclose(mu.ddn, 8.0 * 300.0 * lnx.ddn)

    diff = G - lnx
    assert jnp.allclose(diff.val, G.val - lnx.val)
    assert jnp.allclose(diff.ddn, -lnx.ddn)


def test_scalar_vector_broadcast_and_division():
    n = jnp.array([2.0, 3.0])
    ntot = ChemicalScalar.total_amount(n)
    amounts = ChemicalVector.amounts(n)
    x = amounts / ntot
    x_ref = ChemicalVector.mole_fractions(n)
    assert jnp.allclose(x.val, x_ref.val)
    assert jnp.allclose(x.ddn, x_ref.ddn)
    inv = 1.0 / amounts
    assert jnp.allclose(inv.ddn, jnp.diag(-1.0 / n**2))


def test_indexing_and_stack():
    n = jnp.array([2.0, 3.0, 5.0])
    x = ChemicalVector.mole_fractions(n)
    rebuilt = ChemicalVector.stack([x[i] for i in range(len(x))])
    assert isinstance(x[0], ChemicalScalar)
    assert jnp.array_equal(rebuilt.val, x.val)
    assert jnp.array_equal(rebuilt.ddn, x.ddn)


def test_stack_of_no_scalars():
    empty = ChemicalVector.stack([], nspecies=3)
    assert len(empty) == 0
    assert empty.ddn.shape == (0, 3)
    assert ThermoVector.stack([]).val.shape == (0,)


def test_mismatched_gradient_dimension():
    a = ChemicalVector.amounts(jnp.ones(2))
    b = ChemicalVector.amounts(jnp.ones(3))
    with pytest.raises(ValueError):
        a + b[:2]


def test_nan_propagates_unchanged():
    n = jnp.array([0.0, 1.0])
    lnx = functions.log(ChemicalVector.mole_fractions(n))
    assert np.isneginf(lnx.val[0])


def test_from_thermo_keeps_temperature_and_pressure_derivatives():
    G = ThermoVector(jnp.array([1.0, 2.0]), jnp.array([3.0, 4.0]), jnp.array([5.0, 6.0]))
    promoted = ChemicalVector.from_thermo(G, 3)
    assert isinstance(promoted, ChemicalVector)
    assert jnp.array_equal(promoted.ddt, G.ddt)
    assert jnp.array_equal(promoted.ddp, G.ddp)
    assert promoted.ddn.shape == (2, 3)
    assert not jnp.any(promoted.ddn)
