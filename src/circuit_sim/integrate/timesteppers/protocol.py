"""Protocols for time-stepping schemes."""

from typing import Protocol, runtime_checkable
from jax import Array


@runtime_checkable
class StepperProtocol(Protocol):
    """
    Protocol for time-stepping schemes.

    Defines the interface for advancing an ODE one time step.
    Any class implementing a step() method with this signature can be used
    as a time-stepping method in `integrate` and `solve_ivp`.
    """

    def step(
        self,
        problem,
        t: float,
        y: Array,
        h: float,
    ) -> Array:
        """
        Take a single time step.

        Args:
            problem: Problem definition providing the model functions the
                scheme needs (`rhs`, `jac` or `linear_system`).
            t: Current time.
            y: Current solution. Not modified.
            h: Time step size.

        Returns:
            Solution at t + h.
        """
        ...
