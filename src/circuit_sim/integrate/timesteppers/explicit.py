"""Explicit time-stepping schemes."""

from flax import nnx
from jax import Array

from ...problems import ExplicitProblem


class ForwardEuler(nnx.Module):
    """
    Forward Euler method.

    Discretisation:
        $$ \\frac{\\partial y}{\\partial t} \\rightarrow
        \\frac{(y_{n+1} - y_n)}{h} = f(t_n, y_n) $$

    Stable only for step sizes below twice the smallest time constant of
    the system.
    """

    def step(
        self,
        problem: ExplicitProblem,
        t: float,
        y: Array,
        h: float,
    ) -> Array:
        """
        Perform a single Forward Euler step.

        Computes $$ y_{n+1} = y_n + h f(t_n, y_n). $$

        Args:
            problem: Problem providing the right-hand side `rhs(t, y)`.
            t: Current time.
            y: Current solution.
            h: Time step size.

        Returns:
            Solution at t + h.
        """
        return y + h * problem.rhs(t, y)
