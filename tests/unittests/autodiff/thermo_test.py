import numpy as np
import jax.numpy as jnp
import pytest
from jax import config

from gibbsphase.autodiff.thermo import ThermoScalar, ThermoVector
from gibbsphase.autodiff import functions

config.update("jax_enable_x64", True)


def test_temperature_and_pressure_variables():
    T = ThermoScalar.temperature(300.0)
    P = ThermoScalar.pressure(1.0e5)
    c = ThermoScalar.constant(2.0)
    assert (T.val, T.ddt, T.ddp) == (300.0, 1.0, 0.0)
    assert (P.val, P.ddt, P.ddp) == (1.0e5, 0.0, 1.0)
    assert (c.val, c.ddt, c.ddp) == (2.0, 0.0, 0.0)


def test_product_and_quotient_rules():
    T = ThermoScalar.temperature(300.0)
    P = ThermoScalar.pressure(2.0e5)

    f = T * P / (T + 1.0)
    # d/dT [T P/(T+1)] = P/(T+1)^2, d/dP = T/(T+1)
    assert f.val == pytest.approx(300.0 * 2.0e5 / 301.0)
    assert f.ddt == pytest.approx(2.0e5 / 301.0**2)
    assert f.ddp == pytest.approx(300.0 / 301.0)


def test_subtraction_and_reflected_operators():
    T = ThermoScalar.temperature(400.0)
    g = 10.0 - 2.0 * T
    h = 1.0 / T
    assert g.val == pytest.approx(-790.0)
    assert g.ddt == pytest.approx(-2.0)
    assert h.ddt == pytest.approx(-1.0 / 400.0**2)
    assert (-T).ddt == pytest.approx(-1.0)


def test_power_log_exp_chain_rule():
    T = ThermoScalar.temperature(2.0)
    assert (T**3).ddt == pytest.approx(12.0)
    assert functions.log(T).ddt == pytest.approx(0.5)
    assert functions.exp(T).ddt == pytest.approx(np.exp(2.0))
    assert functions.sqrt(T).ddt == pytest.approx(0.5 / np.sqrt(2.0))


def test_vector_scalar_broadcast():
    v = ThermoVector(
        jnp.array([1.0, 2.0, 3.0]), jnp.array([0.1, 0.2, 0.3]), jnp.zeros(3)
    )
    T = ThermoScalar.temperature(10.0)
    w = v * T
    assert isinstance(w, ThermoVector)
    assert jnp.allclose(w.val, jnp.array([10.0, 20.0, 30.0]))
    # d(v T)/dT = v' T + v
    assert jnp.allclose(w.ddt, jnp.array([2.0, 4.0, 6.0]))
    assert isinstance(w[1], ThermoScalar)
    assert w[1].ddt == pytest.approx(4.0)


def test_numpy_array_on_the_left():
    v = ThermoVector.constant([1.0, 2.0])
    w = np.array([3.0, 4.0]) * v
    assert isinstance(w, ThermoVector)
    assert jnp.allclose(w.val, jnp.array([3.0, 8.0]))


def test_stack_and_sum():
    scalars = [ThermoScalar(jnp.asarray(float(i)), jnp.asarray(1.0), jnp.asarray(2.0)) for i in range(4)]
    v = ThermoVector.stack(scalars)
    assert len(v) == 4
    s = v.sum()
    assert (s.val, s.ddt, s.ddp) == (6.0, 4.0, 8.0)
