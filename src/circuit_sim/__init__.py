"""
circuit_sim

Fixed-step time integration of ODE initial value problems in JAX: explicit
stepping, implicit stepping resolved by Newton-Raphson, and implicit linear
stepping resolved by a dense direct solve. Ships the scalar test equation
dx/dt = 5 t^2 x^2 and a two-node RC circuit as built-in problems.

Main components:
- integrate: time-stepping schemes, root finders, linear solvers, driver
- problems: built-in right-hand sides and linear step systems
- data_utils: trajectory sinks and file I/O
"""

import jax

# Tolerances down to 1e-8 on O(1) residuals need double precision
jax.config.update("jax_enable_x64", True)

from .integrate import (  # noqa: E402
    solve_ivp,
    solve_with_history,
    integrate,
    ForwardEuler,
    Trapezoidal,
    BackwardEuler,
    LinearBackwardEuler,
    NewtonRaphson,
)
from .problems import QuadraticGrowth, RCLadder  # noqa: E402

__all__ = [
    # ODE integration
    "solve_ivp",
    "solve_with_history",
    "integrate",

    # Time-stepping methods
    "ForwardEuler",
    "Trapezoidal",
    "BackwardEuler",
    "LinearBackwardEuler",
    "NewtonRaphson",

    # Problems
    "QuadraticGrowth",
    "RCLadder",
]
