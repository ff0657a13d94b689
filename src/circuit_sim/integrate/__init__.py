"""
Fixed-step time integration schemes for initial value problems written in JAX.
"""

# Solver interfaces
from .solve import TimeGrid, integrate, solve_ivp, solve_with_history

# Time-stepping schemes
from .timesteppers import (
    StepperProtocol,
    ForwardEuler,
    Trapezoidal,
    BackwardEuler,
    LinearBackwardEuler,
)

# Root-finding algorithms
from .rootfinders import RootFinderProtocol, NewtonRaphson

# Linear solvers
from .linsolvers import (
    LinearSolverProtocol,
    DirectDense,
    ExplicitInverse,
    invert,
    multiply,
    solve,
)

# Errors
from .errors import (
    IntegrationError,
    DegenerateDerivativeError,
    NonConvergenceError,
    SingularSystemError,
)

__all__ = [
    # Solver interfaces
    'TimeGrid',
    'integrate',
    'solve_ivp',
    'solve_with_history',

    # Time-stepping methods
    'StepperProtocol',
    'ForwardEuler',
    'Trapezoidal',
    'BackwardEuler',
    'LinearBackwardEuler',

    # Root-finding algorithms
    'RootFinderProtocol',
    'NewtonRaphson',

    # Linear solvers
    'LinearSolverProtocol',
    'DirectDense',
    'ExplicitInverse',
    'invert',
    'multiply',
    'solve',

    # Errors
    'IntegrationError',
    'DegenerateDerivativeError',
    'NonConvergenceError',
    'SingularSystemError',
]
