"""
Run configuration
=================
Named inputs of an integration run and the presets reproducing the
reference simulations.

A run is described by a frozen `RunConfig`. Configurations can start from a
preset (`get_preset`), be loaded from JSON (`load_config`) and be adjusted
with `RunConfig.with_overrides`. `build_problem` and `build_method` turn a
configuration into the objects consumed by `circuit_sim.integrate`.

Exports:
    PRESETS (dict): Preset name -> RunConfig.
    PROBLEMS (dict): Problem name -> problem class.
    METHODS (tuple): Names of the available time-stepping methods.
"""
import dataclasses
import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

import jax.numpy as jnp
from jax import Array

from circuit_sim.integrate import (
    TimeGrid,
    ForwardEuler,
    Trapezoidal,
    BackwardEuler,
    LinearBackwardEuler,
    NewtonRaphson,
    DirectDense,
    LinearSolverProtocol,
)
from circuit_sim.problems import QuadraticGrowth, RCLadder

PROBLEMS = {
    "quadratic": QuadraticGrowth,
    "rc": RCLadder,
}

# State dimension of each problem, None for elementwise problems
STATE_DIM = {
    "quadratic": None,
    "rc": 2,
}

STATE_LABELS = {
    "quadratic": ("x",),
    "rc": ("v1", "v2"),
}

METHODS = (
    "forward-euler",
    "trapezoidal",
    "backward-euler",
    "linear-backward-euler",
)


@dataclass(frozen=True)
class RunConfig:
    """
    Inputs of one integration run. Immutable once constructed.

    Attributes:
        problem: Problem name, a key of PROBLEMS
        method: Time-stepping method name, one of METHODS
        initial_state: State at t_start
        h: Step size
        t_start: Initial time
        t_end: Horizon
        max_newton_iterations: Newton-Raphson iteration cap
        newton_tolerance: Newton-Raphson residual tolerance
        singularity_threshold: Smallest admissible Newton derivative magnitude
        model_parameters: Keyword arguments of the problem class
        output: Default trajectory file name
    """

    problem: str
    method: str
    initial_state: Tuple[float, ...]
    h: float = 0.01
    t_start: float = 0.0
    t_end: float = 5.0
    max_newton_iterations: int = 10
    newton_tolerance: float = 1e-8
    singularity_threshold: float = 1e-10
    model_parameters: Mapping[str, float] = field(default_factory=dict)
    output: str = "trajectory.dat"

    def __post_init__(self):
        if self.problem not in PROBLEMS:
            raise ValueError(
                f"Unknown problem '{self.problem}'. Available: {sorted(PROBLEMS)}"
            )
        if self.method not in METHODS:
            raise ValueError(
                f"Unknown method '{self.method}'. Available: {list(METHODS)}"
            )
        if self.method == "linear-backward-euler" and self.problem != "rc":
            raise ValueError(
                f"Method '{self.method}' requires a linear problem, got '{self.problem}'"
            )

        object.__setattr__(
            self, "initial_state", tuple(float(v) for v in self.initial_state)
        )
        object.__setattr__(
            self, "model_parameters", MappingProxyType(dict(self.model_parameters))
        )
        # The problem class validates its own parameters
        try:
            PROBLEMS[self.problem](**self.model_parameters)
        except TypeError as err:
            raise ValueError(
                f"Invalid model_parameters for problem '{self.problem}': {err}"
            ) from err

        dim = STATE_DIM[self.problem]
        if len(self.initial_state) == 0 or (
            dim is not None and len(self.initial_state) != dim
        ):
            raise ValueError(
                f"Problem '{self.problem}' expects a state of size {dim or '>= 1'}, "
                f"got {len(self.initial_state)}"
            )
        if self.max_newton_iterations < 1:
            raise ValueError("max_newton_iterations must be at least 1")
        if not self.newton_tolerance > 0.0:
            raise ValueError("newton_tolerance must be positive")
        if not self.singularity_threshold >= 0.0:
            raise ValueError("singularity_threshold must be non-negative")

        # Validates h, t_start and t_end
        self.time_grid()

    def time_grid(self) -> TimeGrid:
        return TimeGrid(self.t_start, self.t_end, self.h)

    def y0(self) -> Array:
        return jnp.asarray(self.initial_state, dtype=float)

    @property
    def columns(self) -> Tuple[str, ...]:
        """Column labels of the state components in output order."""
        labels = STATE_LABELS[self.problem]
        if len(labels) == len(self.initial_state):
            return labels
        return tuple(f"{labels[0]}{i}" for i in range(len(self.initial_state)))

    def with_overrides(self, **overrides: Any) -> "RunConfig":
        """Return a copy with the given fields replaced; None values are ignored."""
        overrides = {k: v for k, v in overrides.items() if v is not None}
        if "model_parameters" in overrides:
            merged = dict(self.model_parameters)
            merged.update(overrides["model_parameters"])
            overrides["model_parameters"] = merged
        return dataclasses.replace(self, **overrides)

    def to_dict(self) -> Dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in dataclasses.fields(self)}
        data["initial_state"] = list(self.initial_state)
        data["model_parameters"] = dict(self.model_parameters)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RunConfig":
        """
        Build a configuration from a mapping.

        A "preset" key selects the preset to start from; the remaining keys
        override its fields.
        """
        data = dict(data)
        names = {f.name for f in dataclasses.fields(cls)}

        preset = data.pop("preset", None)
        unknown = set(data) - names
        if unknown:
            raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")

        if preset is not None:
            return get_preset(preset).with_overrides(**data)
        return cls(**data)


PRESETS: Dict[str, RunConfig] = {
    # dx/dt = 5 t^2 x^2, x(0) = -1
    "quadratic-euler": RunConfig(
        problem="quadratic",
        method="forward-euler",
        initial_state=(-1.0,),
        h=0.01,
        t_end=5.0,
        model_parameters={"coefficient": 5.0},
        output="1-1.dat",
    ),
    "quadratic-trapezoidal": RunConfig(
        problem="quadratic",
        method="trapezoidal",
        initial_state=(-1.0,),
        h=0.01,
        t_end=5.0,
        model_parameters={"coefficient": 5.0},
        output="trapezoidal.dat",
    ),
    # RC ladder, tau = 1 ms guessed time constant: h = tau/100, t_end = 15 tau
    "rc-forward-euler": RunConfig(
        problem="rc",
        method="forward-euler",
        initial_state=(0.0, 0.0),
        h=1.0e-5,
        t_end=1.5e-2,
        output="rc-fe.dat",
    ),
    "rc-backward-euler": RunConfig(
        problem="rc",
        method="linear-backward-euler",
        initial_state=(0.0, 0.0),
        h=1.0e-5,
        t_end=1.5e-2,
        output="rc-be.dat",
    ),
}


def get_preset(name: str) -> RunConfig:
    if name not in PRESETS:
        raise ValueError(f"Unknown preset '{name}'. Available: {sorted(PRESETS)}")
    return PRESETS[name]


def load_config(path: str) -> RunConfig:
    """Load a RunConfig from a JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in {path}")
    return RunConfig.from_dict(data)


def build_problem(config: RunConfig):
    return PROBLEMS[config.problem](**config.model_parameters)


def build_method(config: RunConfig, linsolver: Optional[LinearSolverProtocol] = None):
    """Instantiate the time-stepping method named in the configuration."""
    linsolver = linsolver if linsolver is not None else DirectDense()
    root_finder = NewtonRaphson(
        tol=config.newton_tolerance,
        maxiter=config.max_newton_iterations,
        singularity_threshold=config.singularity_threshold,
        linsolver=linsolver,
    )

    if config.method == "forward-euler":
        return ForwardEuler()
    if config.method == "trapezoidal":
        return Trapezoidal(root_finder=root_finder)
    if config.method == "backward-euler":
        return BackwardEuler(root_finder=root_finder)
    return LinearBackwardEuler(linsolver=linsolver)
