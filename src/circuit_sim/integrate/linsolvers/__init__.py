"""Linear solvers used in root-finding and implicit time stepping schemes."""

from .protocol import LinearSolverProtocol
from .direct import (
    DEFAULT_SINGULAR_TOL,
    DirectDense,
    ExplicitInverse,
    invert,
    multiply,
    solve,
)


__all__ = [
    # Protocol
    "LinearSolverProtocol",

    # Direct solvers
    "DirectDense",
    "ExplicitInverse",

    # Dense linear algebra
    "DEFAULT_SINGULAR_TOL",
    "invert",
    "multiply",
    "solve",
]
