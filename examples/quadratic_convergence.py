import jax.numpy as jnp
import circuit_sim as cs


def main(t_span=(0.0, 5.0), x0=-1.0, step_sizes=(0.04, 0.02, 0.01, 0.005)):
    """
    Integrate dx/dt = 5 t^2 x^2 with forward Euler and the trapezoidal rule
    and compare both against the closed-form solution.

    Arguments:
        t_span - Simulation time (default (0.0, 5.0))
        x0 - Initial condition (default -1.0)
        step_sizes - Step sizes to compare (default (0.04, 0.02, 0.01, 0.005))
    """
    problem = cs.QuadraticGrowth(coefficient=5.0)
    methods = {
        "forward-euler": cs.ForwardEuler(),
        "trapezoidal": cs.Trapezoidal(root_finder=cs.NewtonRaphson(tol=1e-10, maxiter=20)),
    }

    print(f"{'h':>8}  " + "  ".join(f"{name:>14}" for name in methods))
    for h in step_sizes:
        errors = []
        for method in methods.values():
            t, x = cs.solve_with_history(problem, t_span, jnp.array([x0]), method, step_size=h)
            exact = problem.exact(t, x0)
            errors.append(float(jnp.max(jnp.abs(x[:, 0] - exact))))
        print(f"{h:8.4f}  " + "  ".join(f"{e:14.6e}" for e in errors))


if __name__ == "__main__":
    main()
