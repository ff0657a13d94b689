"""Scalar test problem dx/dt = k t^2 x^2."""

from dataclasses import dataclass

from jax import Array
import jax.numpy as jnp


@dataclass(frozen=True)
class QuadraticGrowth:
    """
    Nonlinear scalar ODE

    $$ \\frac{dx}{dt} = k t^2 x^2 $$

    with exact solution $x(t) = 1 / (1/x_0 - k t^3 / 3)$ for $x(0) = x_0$.
    Applied elementwise when y holds more than one component.

    Attributes:
        coefficient: The constant k.
    """

    coefficient: float = 5.0

    def rhs(self, t: float, y: Array) -> Array:
        return self.coefficient * t * t * y * y

    def jac(self, t: float, y: Array) -> Array:
        return jnp.diag(2.0 * self.coefficient * t * t * jnp.atleast_1d(y))

    def exact(self, t: float, y0: float) -> float:
        """Analytical solution at time t from y(0) = y0."""
        return 1.0 / (1.0 / y0 - self.coefficient * t ** 3 / 3.0)
