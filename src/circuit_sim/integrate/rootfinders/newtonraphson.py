"""Newton-Raphson method for root finding."""

import logging

from flax import nnx
from jax import Array
import jax.numpy as jnp

from ..linsolvers import LinearSolverProtocol, DirectDense
from ..custom_types import ResidualFunction, JacobianConstructor
from ..errors import (
    DegenerateDerivativeError,
    NonConvergenceError,
    SingularSystemError,
)

logger = logging.getLogger(__name__)


class NewtonRaphson(nnx.Module):
    """
    Newton-Raphson root-finding algorithm.

    Iterative update: $y \\leftarrow y - J^{-1}(y) R(y)$

    The residual is checked before the Jacobian is evaluated, so an initial
    guess that already satisfies the tolerance is returned unchanged.
    Scalar problems divide by the derivative directly; larger systems
    solve $J \\delta = -R$ with `linsolver`.

    Implements: RootFinderProtocol

    Attributes:
        tol: Convergence tolerance for the residual norm
        maxiter: Maximum number of Newton-Raphson iterations
        singularity_threshold: Smallest admissible derivative magnitude
        linsolver: Linear solver for systems with more than one unknown
            (default: DirectDense)
    """

    def __init__(
        self,
        tol: float = 1e-8,
        maxiter: int = 10,
        singularity_threshold: float = 1e-10,
        linsolver: LinearSolverProtocol = DirectDense()
    ):
        if maxiter < 1:
            raise ValueError(f"maxiter must be at least 1, got {maxiter}")
        self.tol = tol
        self.maxiter = maxiter
        self.singularity_threshold = singularity_threshold
        self.linsolver = linsolver

    def __call__(
        self,
        residual_fn: ResidualFunction,
        y_guess: Array,
        jac_fn: JacobianConstructor,
    ) -> Array:
        """
        Find the root of residual_fn(y) = 0 using Newton-Raphson method.

        Args:
            residual_fn: Residual function R(y)
            y_guess: Initial guess
            jac_fn: Function returning the derivative dR/dy with
                signature y -> J(y). A scalar or (1, 1) array for
                single-variable problems, a dense matrix otherwise.

        Returns:
            Solution y with |R(y)| <= tol

        Raises:
            DegenerateDerivativeError: If a scalar derivative falls below
                `singularity_threshold`, or `linsolver` rejects the Jacobian
                as singular
            NonConvergenceError: If `maxiter` iterations pass without the
                residual falling within tolerance
        """
        y_k = jnp.asarray(y_guess)
        r_norm = float("inf")

        for k in range(self.maxiter):
            r_k = residual_fn(y_k)
            r_norm = float(jnp.linalg.norm(r_k))
            if r_norm <= self.tol:
                logger.debug(f"NR [{k}]: f = {r_norm:13.6e}")
                return y_k

            J = jnp.asarray(jac_fn(y_k))

            if J.size == 1:
                # Scalar problem
                df = float(J.reshape(()))
                if abs(df) < self.singularity_threshold:
                    raise DegenerateDerivativeError(
                        k, df, self.singularity_threshold
                    )
                delta = -r_k / J.reshape(())
            else:
                try:
                    delta = self.linsolver(J, -r_k)
                except SingularSystemError as err:
                    raise DegenerateDerivativeError.from_singular_jacobian(k, err) from err

            y_k = y_k + delta

            logger.debug(
                f"NR [{k}]: f = {r_norm:13.6e}, "
                f"|delta| = {float(jnp.linalg.norm(delta)):13.6e}"
            )

        raise NonConvergenceError(self.maxiter, r_norm, self.tol)
