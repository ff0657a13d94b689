"""
Implicit time-stepping schemes.
"""

from typing import Callable

from flax import nnx
from jax import Array
import jax.numpy as jnp

from ..rootfinders import RootFinderProtocol, NewtonRaphson
from ..linsolvers import LinearSolverProtocol, DirectDense
from ...problems import NonlinearProblem, LinearProblem


class Trapezoidal(nnx.Module):
    """
    Trapezoidal rule.

    Discretisation:
    $$ \\frac{y_{n+1} - y_n}{h} = \\frac{1}{2}
    \\left( f(t_n, y_n) + f(t_{n+1}, y_{n+1}) \\right) $$

    Residual (scaled by -2):
    $$ R(y_{n+1}) = h f(t_{n+1}, y_{n+1}) - 2 y_{n+1} + h f(t_n, y_n) + 2 y_n $$

    Derivative:
    $$ \\frac{\\partial R}{\\partial y_{n+1}}
    = h \\frac{\\partial f(t_{n+1}, y_{n+1})}{\\partial y} - 2 I $$

    The residual and its derivative carry the same scaling; Newton-Raphson
    relies on the ratio R / R' being exact.

    Attributes:
        root_finder: Root-finding algorithm for the implicit equation.
            Default: NewtonRaphson.
    """

    def __init__(self, root_finder: RootFinderProtocol = NewtonRaphson()):
        self.root_finder = root_finder

    @staticmethod
    def make_residual(
        problem: NonlinearProblem,
        t_prev: float,
        y_prev: Array,
        h: float,
    ) -> Callable[[Array], Array]:
        """
        Create residual function for a trapezoidal step.

        Args:
            problem: Problem providing `rhs(t, y)`.
            t_prev: Time at previous step.
            y_prev: Solution at previous time step.
            h: Time step size.

        Returns:
            A function with signature y -> R(y)
        """
        t_next = t_prev + h
        explicit_part = h * problem.rhs(t_prev, y_prev) + 2.0 * y_prev
        return lambda y_np1: (
            h * problem.rhs(t_next, y_np1) - 2.0 * y_np1 + explicit_part
        )

    @staticmethod
    def make_derivative(
        problem: NonlinearProblem, t_prev: float, h: float
    ) -> Callable[[Array], Array]:
        """
        Function factory for the derivative of the trapezoidal residual.

        Args:
            problem: Problem providing the Jacobian `jac(t, y)`.
            t_prev: Time at previous step.
            h: Time step size.

        Returns:
            A function with signature y -> dR/dy.
        """
        t_next = t_prev + h
        return lambda y: h * problem.jac(t_next, y) - 2.0 * jnp.eye(y.size)

    def step(
        self,
        problem: NonlinearProblem,
        t: float,
        y: Array,
        h: float,
    ) -> Array:
        """
        Perform a trapezoidal step.

        The current solution is the initial guess for the root finder.

        Args:
            problem: Problem providing `rhs` and `jac`.
            t: Current time.
            y: Current solution at time t.
            h: Time step size.

        Returns:
            Solution at time t + h.
        """
        residual_fn = self.make_residual(problem, t, y, h)
        jac_fn = self.make_derivative(problem, t, h)
        return self.root_finder(residual_fn, y, jac_fn)


class BackwardEuler(nnx.Module):
    """
    Backward Euler time-stepping scheme for nonlinear problems.

    Discretisation:
    $$ \\frac{\\partial y}{\\partial t} \\rightarrow
    \\frac{y_{n+1} - y_n}{h} = f(t_{n+1}, y_{n+1}) $$

    Residual:
    $$ R(y_{n+1}) = y_{n+1} - y_n - h f(t_{n+1}, y_{n+1}) $$

    Jacobian:
    $$ J = \\frac{\\partial R}{\\partial y_{n+1}}
    = I - h \\frac{\\partial f(t_{n+1}, y_{n+1})}{\\partial y} $$

    Attributes:
        root_finder: Root-finding algorithm for implicit equations.
            Default: NewtonRaphson.
    """

    def __init__(self, root_finder: RootFinderProtocol = NewtonRaphson()):
        self.root_finder = root_finder

    @staticmethod
    def make_residual(
        problem: NonlinearProblem,
        t_prev: float,
        y_prev: Array,
        h: float,
    ) -> Callable[[Array], Array]:
        """
        Create residual function for a backward Euler scheme.

        Residual: $R(y_{n+1}) = y_{n+1} - y_n - h f(t_{n+1}, y_{n+1})$

        Returns:
            A function with signature y -> R(y)
        """
        t_next = t_prev + h
        return lambda y_np1: y_np1 - y_prev - h * problem.rhs(t_next, y_np1)

    @staticmethod
    def make_jacobian(
        problem: NonlinearProblem, t_prev: float, h: float
    ) -> Callable[[Array], Array]:
        """
        Function factory for dense Jacobian matrix.

        Jacobian: $J = I - h \\frac{\\partial f}{\\partial y}$

        Returns:
            A function with signature y -> J_y.
        """
        t_next = t_prev + h
        return lambda y: jnp.eye(y.size) - h * problem.jac(t_next, y)

    def step(
        self,
        problem: NonlinearProblem,
        t: float,
        y: Array,
        h: float,
    ) -> Array:
        """
        Perform a backward Euler step.

        Solves $$ y_{n+1} - y_n - h f(t_{n+1}, y_{n+1}) = 0 $$
        for $y_{n+1}$ using a root-finding algorithm.

        Args:
            problem: Problem providing `rhs` and `jac`.
            t: Current time.
            y: Current solution at time t.
            h: Time step size.

        Returns:
            Solution at time t + h.
        """
        residual_fn = self.make_residual(problem, t, y, h)
        jac_fn = self.make_jacobian(problem, t, h)
        return self.root_finder(residual_fn, y, jac_fn)


class LinearBackwardEuler(nnx.Module):
    """
    Backward Euler for linear systems.

    For a linear right-hand side the implicit equation reduces to
    $$ A(h) \\, y_{n+1} = b(h, t_{n+1}, y_n), $$
    which the problem assembles every step (the forcing depends on
    $t_{n+1}$) and a direct solver resolves in one pass.

    Attributes:
        linsolver: Dense linear solver. Default: DirectDense. Use
            ExplicitInverse to form the inverse matrix explicitly.
    """

    def __init__(self, linsolver: LinearSolverProtocol = DirectDense()):
        self.linsolver = linsolver

    def step(
        self,
        problem: LinearProblem,
        t: float,
        y: Array,
        h: float,
    ) -> Array:
        """
        Perform a linear backward Euler step.

        Args:
            problem: Problem providing `linear_system(h, t, y) -> (A, b)`.
            t: Current time.
            y: Current solution at time t.
            h: Time step size.

        Returns:
            Solution at time t + h.

        Raises:
            SingularSystemError: If A is singular.
        """
        A, b = problem.linear_system(h, t, y)
        return self.linsolver(A, b)
