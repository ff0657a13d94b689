"""Exceptions raised when a time step cannot be completed."""

from typing import Optional


class IntegrationError(RuntimeError):
    """
    Base class for failures that abort an integration run.

    The time-stepping driver fills in `step` and `t` before re-raising, so
    the message names where in the trajectory the failure happened.

    Attributes:
        step: Index of the step that failed (0 is the step leaving t_start).
        t: Time at the start of the failing step.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.step: Optional[int] = None
        self.t: Optional[float] = None

    def at_step(self, step: int, t: float) -> "IntegrationError":
        """Record the step index and time at which the failure occurred."""
        self.step = step
        self.t = t
        return self

    def __str__(self) -> str:
        if self.step is None:
            return self.message
        return f"{self.message} (step {self.step}, t = {self.t:.6e})"


class DegenerateDerivativeError(IntegrationError):
    """
    Newton-Raphson derivative is too flat to take a reliable update.

    For scalar problems `threshold` is the absolute `singularity_threshold`.
    For systems it is the linear solver's singularity bound, see
    `from_singular_jacobian`.
    """

    def __init__(
        self,
        iteration: int,
        derivative: float,
        threshold: float,
        message: Optional[str] = None,
    ):
        if message is None:
            message = (
                f"Newton-Raphson derivative too small at iteration {iteration}: "
                f"|df| = {abs(derivative):.6e} < {threshold:.1e}"
            )
        super().__init__(message)
        self.iteration = iteration
        self.derivative = derivative
        self.threshold = threshold

    @classmethod
    def from_singular_jacobian(
        cls, iteration: int, err: "SingularSystemError"
    ) -> "DegenerateDerivativeError":
        """Wrap the linear solver's rejection of a Jacobian."""
        return cls(
            iteration,
            err.magnitude,
            err.threshold,
            message=(
                f"Newton-Raphson Jacobian singular at iteration {iteration}: "
                f"|det| or pivot = {abs(err.magnitude):.6e} <= {err.threshold:.6e} "
                f"(relative tolerance {err.tol:.1e} of scale {err.scale:.6e})"
            ),
        )


class NonConvergenceError(IntegrationError):
    """Newton-Raphson exhausted its iteration budget."""

    def __init__(self, iterations: int, residual: float, tol: float):
        super().__init__(
            f"Newton-Raphson did not converge within {iterations} iterations: "
            f"|f| = {residual:.6e} > {tol:.1e}. "
            "Increase the iteration count or reduce the step size."
        )
        self.iterations = iterations
        self.residual = residual
        self.tol = tol


class SingularSystemError(IntegrationError):
    """
    Coefficient matrix of a linear system is not invertible.

    The test is relative: the system is rejected when the determinant (2x2)
    or a pivot satisfies |magnitude| <= tol * scale.
    """

    def __init__(self, magnitude: float, tol: float, size: int, scale: float = 1.0):
        self.magnitude = magnitude
        self.tol = tol
        self.size = size
        self.scale = scale
        self.threshold = tol * scale
        super().__init__(
            f"Singular {size}x{size} system: |det| or pivot = {abs(magnitude):.6e} "
            f"<= {self.threshold:.6e} (relative tolerance {tol:.1e} of scale {scale:.6e})"
        )
