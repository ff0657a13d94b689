import logging
import math
import time
from dataclasses import dataclass
from typing import Tuple, Optional

from jax import Array
import jax.numpy as jnp

from .custom_types import TrajectorySink, ProgressCallback
from .errors import IntegrationError
from .timesteppers import StepperProtocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimeGrid:
    """
    Fixed time grid t_k = t_start + k*h.

    Times are computed from the step index rather than accumulated, so no
    rounding drift builds up over long runs.

    Attributes:
        t_start: Initial time
        t_end: Final time (horizon)
        h: Step size
    """

    t_start: float
    t_end: float
    h: float

    def __post_init__(self):
        if not all(math.isfinite(v) for v in (self.t_start, self.t_end, self.h)):
            raise ValueError("t_start, t_end and h must be finite")
        if not self.h > 0.0:
            raise ValueError(f"Step size must be positive, got h={self.h}")
        if not self.t_start < self.t_end:
            raise ValueError(
                f"t_start must be smaller than t_end, got ({self.t_start}, {self.t_end})"
            )

    def time(self, k: int) -> float:
        """Time after k steps."""
        return self.t_start + k * self.h

    @property
    def n_steps(self) -> int:
        """Number of steps taken before the horizon is reached."""
        k = max(int(math.floor((self.t_end - self.t_start) / self.h)) - 1, 0)
        while self.time(k) < self.t_end:
            k += 1
        return k


def integrate(
    problem,
    grid: TimeGrid,
    y0: Array,
    method: StepperProtocol,
    sink: Optional[TrajectorySink] = None,
    progress: Optional[ProgressCallback] = None,
) -> Tuple[float, Array]:
    """
    Advance y0 over `grid` with `method`, emitting every sample to `sink`.

    Each sample is emitted before the step that leaves it. Stepping stops at
    the first grid time t >= t_end and the state at that time is emitted
    last, so a run of n steps produces n + 1 samples.

    Args:
        problem: Problem definition handed to `method.step`.
        grid: Time grid.
        y0: Initial condition.
        method: Time-stepping method instance (e.g., ForwardEuler()).
        sink: Optional callable receiving (t, y) for every sample.
        progress: Optional callable receiving the number of completed steps.

    Returns:
        t_final: Final time
        y_final: Solution at t_final

    Raises:
        IntegrationError: If a step fails. `step` and `t` on the exception
            identify the failing step; nothing after the last completed step
            has been emitted.
    """
    y = jnp.atleast_1d(jnp.asarray(y0, dtype=float))
    k = 0
    t = grid.time(k)

    while True:
        if sink is not None:
            sink(t, y)

        try:
            y = method.step(problem, t, y, grid.h)
        except IntegrationError as err:
            err.at_step(k, t)
            raise

        k += 1
        t = grid.time(k)

        if progress is not None:
            progress(k)

        if not t < grid.t_end:
            break

    if sink is not None:
        sink(t, y)

    return t, y


def solve_ivp(
    problem,
    t_span: Tuple[float, float],
    y0: Array,
    method: StepperProtocol,
    step_size: float,
    sink: Optional[TrajectorySink] = None,
    progress: Optional[ProgressCallback] = None,
) -> Tuple[float, Array]:
    """
    Integrate dy/dt = problem.rhs(t, y) over the time interval t_span.

    Args:
        problem: Problem definition (see `circuit_sim.problems`)
        t_span: (t_start, t_end) time interval
        y0: Initial condition
        method: Time-stepping method instance (e.g., ForwardEuler(),
            Trapezoidal(), LinearBackwardEuler())
        step_size: Time step size
        sink: Optional callable receiving every (t, y) sample
        progress: Optional callable receiving the number of completed steps

    Returns:
        t_final: Final time
        y_final: Solution at t_final

    Example usage:
    ```python
    import jax.numpy as jnp
    from circuit_sim.integrate import solve_ivp, Trapezoidal, NewtonRaphson
    from circuit_sim.problems import QuadraticGrowth

    method = Trapezoidal(root_finder=NewtonRaphson(tol=1e-8, maxiter=10))
    t, y = solve_ivp(
        QuadraticGrowth(), (0.0, 5.0), jnp.array([-1.0]), method, step_size=0.01
    )
    ```
    """
    t_start, t_end = t_span
    grid = TimeGrid(t_start, t_end, step_size)
    return integrate(problem, grid, y0, method, sink=sink, progress=progress)


def solve_with_history(
    problem,
    t_span: Tuple[float, float],
    y0: Array,
    method: StepperProtocol,
    step_size: float,
    verbose: bool = False
) -> Tuple[Array, Array]:
    """
    Integrate over t_span and return every sample.

    Args:
        problem: Problem definition
        t_span: (t_start, t_end) time interval
        y0: Initial condition
        method: Time-stepping method instance
        step_size: Time step size
        verbose: Log progress information at INFO level

    Returns:
        t: Array of time points, shape (n_steps + 1,)
        y: Array of solution values at times t, shape (n_steps + 1, *y0.shape)
    """
    t_start, t_end = t_span
    grid = TimeGrid(t_start, t_end, step_size)

    if verbose:
        logger.info(f"Solving with {type(method).__name__}")
        logger.info(
            f"Time: [{t_start}, {t_end}], dt={step_size}, {grid.n_steps} total steps"
        )

    t_save = []
    y_save = []

    def record(t, y):
        t_save.append(t)
        y_save.append(y)

    start_wallclock = time.time()
    integrate(problem, grid, y0, method, sink=record)
    elapsed_wallclock = time.time() - start_wallclock

    t_arr = jnp.asarray(t_save)
    y_arr = jnp.stack(y_save, axis=0)

    if verbose:
        n_steps = len(t_save) - 1
        logger.info(
            f"Completed in {elapsed_wallclock:.3f}s "
            f"({n_steps / max(elapsed_wallclock, 1e-12):.1f} steps/s)"
        )

    return t_arr, y_arr
