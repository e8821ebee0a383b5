"""gibbsphase: phase evaluation engine with exact first-order derivatives.

Double precision is switched on at import time; the derivative containers
and the tolerances used by equilibrium solvers rely on it.
"""

from jax import config

config.update("jax_enable_x64", True)

__version__ = "0.1.0"
