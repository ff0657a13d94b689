"""Protocol for linear solvers used in implicit time-stepping methods."""

from typing import Protocol, runtime_checkable

from jax import Array


@runtime_checkable
class LinearSolverProtocol(Protocol):
    """
    Protocol for linear solvers.

    Defines the interface for solving dense linear systems of the form A*x = b.
    Any class implementing a __call__() method with this signature can be used
    as a linear solver in Newton iterations and linear implicit schemes.
    """

    def __call__(self, A: Array, b: Array) -> Array:
        """
        Solve the linear system A*x = b.

        Args:
            A: Dense coefficient matrix
            b: Right-hand side vector

        Returns:
            Solution vector x such that A*x ≈ b

        Raises:
            SingularSystemError: If the system cannot be solved
        """
        ...
