"""
Built-in problems

Right-hand sides, Jacobians and linear step systems for the scalar
nonlinear test equation and the two-node RC circuit.
"""

from .protocol import ExplicitProblem, NonlinearProblem, LinearProblem
from .quadratic import QuadraticGrowth
from .rc_circuit import RCLadder

__all__ = [
    # Protocols
    "ExplicitProblem",
    "NonlinearProblem",
    "LinearProblem",

    # Problems
    "QuadraticGrowth",
    "RCLadder",
]
