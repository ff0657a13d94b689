"""Protocols describing what each time-stepping discipline needs from a problem."""

from typing import Protocol, Tuple, runtime_checkable

from jax import Array


@runtime_checkable
class ExplicitProblem(Protocol):
    """Problem usable with explicit schemes: dy/dt = rhs(t, y)."""

    def rhs(self, t: float, y: Array) -> Array:
        ...


@runtime_checkable
class NonlinearProblem(ExplicitProblem, Protocol):
    """Problem usable with Newton-based implicit schemes."""

    def jac(self, t: float, y: Array) -> Array:
        """Dense Jacobian df/dy, shape (n, n)."""
        ...


@runtime_checkable
class LinearProblem(Protocol):
    """Problem whose implicit step reduces to a linear system A*y_next = b."""

    def linear_system(
        self, h: float, t: float, y: Array
    ) -> Tuple[Array, Array]:
        """
        Assemble the system defining one implicit step from (t, y) to t + h.

        Returns:
            (A, b) with A of shape (n, n) and b of shape (n,).
        """
        ...
