"""
Command-line interface for running the preset simulations.

Example:
    python -m circuit_sim rc-backward-euler --output rc-be.dat
    python -m circuit_sim quadratic-trapezoidal --step-size 0.005 --verbose
"""

import argparse
import logging
import time
from typing import List, Optional

import jax

from circuit_sim.config import (
    PRESETS,
    RunConfig,
    build_method,
    build_problem,
    get_preset,
    load_config,
)
from circuit_sim.data_utils import TrajectoryRecorder, TrajectoryWriter, save_trajectory
from circuit_sim.integrate import IntegrationError, integrate
from circuit_sim.logging_config import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="circuit-sim",
        description="Fixed-step ODE integration of the reference problems"
    )
    parser.add_argument('preset', nargs='?', choices=sorted(PRESETS), help='Preset simulation to run')
    parser.add_argument('--config', type=str, default=None, help='JSON run configuration (may name a "preset")')
    parser.add_argument('--output', type=str, default=None, help='Trajectory file (default: preset output name)')
    parser.add_argument('--npz', type=str, default=None, help='Also save the trajectory to this NPZ file')
    parser.add_argument('--step-size', type=float, default=None, help='Time step size h')
    parser.add_argument('--t-start', type=float, default=None, help='Initial time')
    parser.add_argument('--t-end', type=float, default=None, help='Final time')
    parser.add_argument('--initial-state', type=float, nargs='+', default=None, help='Initial state components')
    parser.add_argument('--max-iterations', type=int, default=None, help='Newton-Raphson iteration cap (default: 10)')
    parser.add_argument('--tolerance', type=float, default=None, help='Newton-Raphson tolerance (default: 1e-8)')
    parser.add_argument('--singularity-threshold', type=float, default=None, help='Smallest admissible derivative (default: 1e-10)')
    parser.add_argument('--verbose', action='store_true', help='Log every step and Newton iteration')
    parser.add_argument('--log-file', type=str, default=None, help='Also write the log to this file')
    return parser


def resolve_config(args: argparse.Namespace) -> RunConfig:
    """Combine preset, JSON file and command-line overrides (in that order)."""
    if args.config is not None:
        config = load_config(args.config)
        if args.preset is not None:
            logger.warning("Both a preset and --config given; using --config")
    elif args.preset is not None:
        config = get_preset(args.preset)
    else:
        raise ValueError("Either a preset or --config must be given")

    return config.with_overrides(
        h=args.step_size,
        t_start=args.t_start,
        t_end=args.t_end,
        initial_state=tuple(args.initial_state) if args.initial_state else None,
        max_newton_iterations=args.max_iterations,
        newton_tolerance=args.tolerance,
        singularity_threshold=args.singularity_threshold,
        output=args.output,
    )


def run(config: RunConfig, npz_path: Optional[str] = None) -> int:
    """
    Run one simulation, writing the trajectory to `config.output`.

    Returns:
        Exit status: 0 on success, 1 if the integration aborted.
    """
    problem = build_problem(config)
    method = build_method(config)
    grid = config.time_grid()

    logger.info(f"Problem: {type(problem).__name__} {dict(config.model_parameters)}")
    logger.info(f"Method: {type(method).__name__}")
    logger.info(
        f"Time: [{grid.t_start}, {grid.t_end}], h={grid.h}, {grid.n_steps} steps"
    )
    logger.debug(f"JAX backend: {jax.default_backend()}")

    recorder = TrajectoryRecorder() if npz_path else None

    def report(iteration: int):
        logger.debug(f"Iteration: {iteration}")

    start_time = time.time()
    with TrajectoryWriter(config.output, columns=config.columns) as writer:
        def sink(t, y):
            writer(t, y)
            if recorder is not None:
                recorder(t, y)

        try:
            t_final, y_final = integrate(
                problem, grid, config.y0(), method, sink=sink, progress=report
            )
        except IntegrationError as err:
            logger.error(f"{type(err).__name__}: {err}")
            logger.error(
                f"Integration aborted; {writer.rows_written} samples kept in {config.output}"
            )
            return 1

    logger.info(
        f"Completed in {time.time() - start_time:.3f}s; "
        f"final state at t = {t_final:.6e}: {[float(v) for v in y_final]}"
    )

    if recorder is not None:
        t_arr, y_arr = recorder.as_arrays()
        save_trajectory(
            npz_path, t_arr, y_arr,
            metadata={
                "problem": config.problem,
                "method": config.method,
                "h": config.h,
                "t_start": config.t_start,
                "t_end": config.t_end,
            },
        )

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.INFO, args.log_file)

    try:
        config = resolve_config(args)
    except (ValueError, TypeError, OSError) as err:
        parser.error(str(err))

    return run(config, npz_path=args.npz)
