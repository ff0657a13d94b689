"""Unit tests for the time stepping schemes."""

import pytest
import jax.numpy as jnp

from circuit_sim.integrate import (
    ForwardEuler,
    Trapezoidal,
    BackwardEuler,
    LinearBackwardEuler,
    NewtonRaphson,
    DirectDense,
    ExplicitInverse,
    StepperProtocol,
    SingularSystemError,
    solve_ivp,
)
from circuit_sim.problems import QuadraticGrowth, RCLadder


@pytest.fixture
def quadratic_setup():
    """dx/dt = 5 t^2 x^2 with x(0) = -1, h = 0.01."""
    return {
        'problem': QuadraticGrowth(coefficient=5.0),
        'y0': jnp.array([-1.0]),
        'h': 0.01,
    }


@pytest.fixture
def rc_setup():
    """Two-node RC ladder, 1 kOhm / 1 uF, driven at 1 V / 1 kHz."""
    return {
        'problem': RCLadder(),
        'y0': jnp.array([0.0, 0.0]),
        'h': 1.0e-5,
    }


class SingularProblem:
    """Linear problem whose step matrix is not invertible."""

    def linear_system(self, h, t, y):
        return jnp.array([[1.0, 2.0], [2.0, 4.0]]), y


class TestExplicitMethods:

    def test_forward_euler_identity_scalar(self, quadratic_setup):
        problem, h = quadratic_setup['problem'], quadratic_setup['h']
        for t, x in [(0.0, -1.0), (0.37, -0.8), (2.5, -0.02)]:
            y = jnp.array([x])
            y_next = ForwardEuler().step(problem, t, y, h)
            assert jnp.array_equal(y_next, y + h * problem.rhs(t, y))

    def test_forward_euler_identity_circuit(self, rc_setup):
        problem, h = rc_setup['problem'], rc_setup['h']
        y = jnp.array([0.3, 0.1])
        y_next = ForwardEuler().step(problem, 1.3e-4, y, h)
        assert jnp.array_equal(y_next, y + h * problem.rhs(1.3e-4, y))

    def test_forward_euler_first_step(self, quadratic_setup):
        # f(0, x) = 0, so the first step leaves x unchanged
        setup = quadratic_setup
        y_next = ForwardEuler().step(setup['problem'], 0.0, setup['y0'], setup['h'])
        assert jnp.array_equal(y_next, setup['y0'])

    def test_does_not_modify_input(self, rc_setup):
        y = jnp.array([0.3, 0.1])
        y_copy = jnp.array(y)
        ForwardEuler().step(rc_setup['problem'], 0.0, y, rc_setup['h'])
        assert jnp.array_equal(y, y_copy)

    def test_protocol(self):
        assert isinstance(ForwardEuler(), StepperProtocol)
        assert isinstance(Trapezoidal(), StepperProtocol)
        assert isinstance(BackwardEuler(), StepperProtocol)
        assert isinstance(LinearBackwardEuler(), StepperProtocol)


class TestTrapezoidal:

    def test_residual_form(self, quadratic_setup):
        """Residual is 5h t_nn^2 x_nn^2 - 2 x_nn + 5h t_n^2 x_n^2 + 2 x_n."""
        problem, h = quadratic_setup['problem'], quadratic_setup['h']
        t_n, x_n, x_nn = 1.2, -0.6, -0.55
        t_nn = t_n + h

        R = Trapezoidal.make_residual(problem, t_n, jnp.array([x_n]), h)
        expected = (
            5.0 * h * t_nn**2 * x_nn**2 - 2.0 * x_nn
            + 5.0 * h * t_n**2 * x_n**2 + 2.0 * x_n
        )
        assert jnp.allclose(R(jnp.array([x_nn])), expected, rtol=1e-12)

        dR = Trapezoidal.make_derivative(problem, t_n, h)
        expected_df = 10.0 * h * t_nn**2 * x_nn - 2.0
        assert jnp.allclose(dR(jnp.array([x_nn])), expected_df, rtol=1e-12)

    def test_derivative_consistent_with_residual(self, quadratic_setup):
        problem, h = quadratic_setup['problem'], quadratic_setup['h']
        t_n, y_n = 3.0, jnp.array([-0.01])
        R = Trapezoidal.make_residual(problem, t_n, y_n, h)
        dR = Trapezoidal.make_derivative(problem, t_n, h)

        y, eps = jnp.array([-0.012]), 1e-7
        fd = (R(y + eps) - R(y - eps)) / (2 * eps)
        assert jnp.allclose(dR(y)[0, 0], fd[0], rtol=1e-6)

    def test_converged_step_satisfies_tolerance(self, quadratic_setup):
        problem, h = quadratic_setup['problem'], quadratic_setup['h']
        root_finder = NewtonRaphson(tol=1e-8, maxiter=10)
        method = Trapezoidal(root_finder=root_finder)

        for t, x in [(0.0, -1.0), (1.0, -0.4), (4.5, -0.006)]:
            y = jnp.array([x])
            y_next = method.step(problem, t, y, h)
            R = Trapezoidal.make_residual(problem, t, y, h)
            assert float(jnp.abs(R(y_next))[0]) <= root_finder.tol

    def test_more_accurate_than_forward_euler(self, quadratic_setup):
        setup = quadratic_setup
        problem = setup['problem']
        y_exact = problem.exact(1.0, -1.0)

        _, y_fe = solve_ivp(problem, (0.0, 1.0), setup['y0'], ForwardEuler(), step_size=setup['h'])
        _, y_tr = solve_ivp(problem, (0.0, 1.0), setup['y0'], Trapezoidal(), step_size=setup['h'])

        err_fe = abs(float(y_fe[0]) - y_exact)
        err_tr = abs(float(y_tr[0]) - y_exact)
        assert err_tr < 1e-3
        assert err_tr < err_fe


class TestImplicitMethods:

    def test_backward_euler_matches_linear_solve(self, rc_setup):
        """For a linear problem, Newton on the backward Euler residual
        reproduces the direct linear step."""
        problem, h = rc_setup['problem'], rc_setup['h']
        newton = BackwardEuler(root_finder=NewtonRaphson(tol=1e-12))
        linear = LinearBackwardEuler()

        y_newton = y_linear = rc_setup['y0']
        for k in range(20):
            t = k * h
            y_newton = newton.step(problem, t, y_newton, h)
            y_linear = linear.step(problem, t, y_linear, h)

        assert jnp.allclose(y_newton, y_linear, rtol=1e-9, atol=1e-14)

    def test_backward_euler_residual(self, quadratic_setup):
        problem, h = quadratic_setup['problem'], quadratic_setup['h']
        y = jnp.array([-0.5])
        y_next = BackwardEuler().step(problem, 1.0, y, h)
        R = BackwardEuler.make_residual(problem, 1.0, y, h)
        assert float(jnp.abs(R(y_next))[0]) <= 1e-8

    def test_linear_solvers_bit_compatible(self, rc_setup):
        problem, h = rc_setup['problem'], rc_setup['h']
        y = jnp.array([0.25, 0.1])
        y_direct = LinearBackwardEuler(linsolver=DirectDense()).step(problem, 3e-4, y, h)
        y_inverse = LinearBackwardEuler(linsolver=ExplicitInverse()).step(problem, 3e-4, y, h)
        assert jnp.array_equal(y_direct, y_inverse)

    def test_zero_state_is_fixed_point(self):
        problem = RCLadder(amplitude=0.0)
        y = jnp.zeros(2)
        for k in range(10):
            y = LinearBackwardEuler().step(problem, k * 1e-5, y, 1e-5)
            assert jnp.array_equal(y, jnp.zeros(2))

    def test_singular_system_propagates(self):
        with pytest.raises(SingularSystemError):
            LinearBackwardEuler().step(SingularProblem(), 0.0, jnp.ones(2), 0.1)

    def test_stiff_stability(self, rc_setup):
        """h above 2*tau_fast: forward Euler diverges, backward Euler does not."""
        problem = rc_setup['problem']
        h = 2.0e-3
        t_span = (0.0, 50 * h)

        y0 = jnp.array([1.0, 0.0])

        _, y_fe = solve_ivp(problem, t_span, y0, ForwardEuler(), step_size=h)
        _, y_be = solve_ivp(problem, t_span, y0, LinearBackwardEuler(), step_size=h)

        assert float(jnp.max(jnp.abs(y_fe))) > 1e3
        assert float(jnp.max(jnp.abs(y_be))) < 1.5
