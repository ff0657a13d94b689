"""Protocol for root-finding algorithms."""

from typing import Protocol, runtime_checkable

from jax import Array

from ..custom_types import ResidualFunction, JacobianConstructor


@runtime_checkable
class RootFinderProtocol(Protocol):
    """
    Protocol for root-finding algorithms.

    Defines the interface for finding roots of nonlinear equations.
    Used by implicit time-stepping schemes to solve the nonlinear equations
    that arise from implicit discretization.
    """

    def __call__(
        self,
        residual_fn: ResidualFunction,
        y_guess: Array,
        jac_fn: JacobianConstructor,
    ) -> Array:
        """
        Find the root of residual_fn(y) = 0.

        Args:
            residual_fn: Function mapping y -> R(y), where we seek R(y) = 0
            y_guess: Initial guess for the solution
            jac_fn: Dense Jacobian (or scalar derivative) function y -> J

        Returns:
            Solution y such that residual_fn(y) ≈ 0

        Raises:
            IntegrationError: If no acceptable root is found
        """
        ...
