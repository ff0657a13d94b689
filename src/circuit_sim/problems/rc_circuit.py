"""Two-node RC ladder driven by a sinusoidal voltage source."""

from dataclasses import dataclass
import math
from typing import Tuple

from jax import Array
import jax.numpy as jnp


@dataclass(frozen=True)
class RCLadder:
    """
    Two-node RC ladder.

    The source $v_s$ feeds node 1 through $R_1$; $R_2$ joins node 1 to
    node 2; $C_1$ and $C_2$ tie each node to ground. Nodal analysis gives

    $$ C_1 \\frac{dv_1}{dt} = g_1 (v_s - v_1) + g_2 (v_2 - v_1) $$
    $$ C_2 \\frac{dv_2}{dt} = g_2 (v_1 - v_2) $$

    with $g_i = 1 / R_i$ and $v_s(t) = V_m \\sin(2 \\pi f t)$.

    State ordering is (v1, v2).

    Attributes:
        r1: Source resistance (ohm)
        r2: Coupling resistance (ohm)
        c1: Node 1 capacitance (F)
        c2: Node 2 capacitance (F)
        amplitude: Source amplitude V_m (V). Zero disables the forcing.
        frequency: Source frequency f (Hz)
    """

    r1: float = 1.0e3
    r2: float = 1.0e3
    c1: float = 1.0e-6
    c2: float = 1.0e-6
    amplitude: float = 1.0
    frequency: float = 1.0e3

    def __post_init__(self):
        for name in ("r1", "r2", "c1", "c2"):
            if not getattr(self, name) > 0.0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")

    @property
    def g1(self) -> float:
        return 1.0 / self.r1

    @property
    def g2(self) -> float:
        return 1.0 / self.r2

    @property
    def omega(self) -> float:
        return 2 * math.pi * self.frequency

    def source(self, t: float) -> Array:
        """Source voltage v_s(t)."""
        return self.amplitude * jnp.sin(self.omega * t)

    def rhs(self, t: float, y: Array) -> Array:
        v1, v2 = y[0], y[1]
        vs = self.source(t)
        dv1 = (1.0 / self.c1) * (((vs - v1) * self.g1) + ((v2 - v1) * self.g2))
        dv2 = (-1.0 / self.c2) * ((v2 - v1) * self.g2)
        return jnp.array([dv1, dv2])

    def jac(self, t: float, y: Array) -> Array:
        return jnp.array([
            [-(self.g1 + self.g2) / self.c1, self.g2 / self.c1],
            [self.g2 / self.c2, -self.g2 / self.c2],
        ])

    def linear_system(
        self, h: float, t: float, y: Array
    ) -> Tuple[Array, Array]:
        """
        Backward Euler system for the step t -> t + h.

        $$ A = I - h J, \\qquad
        b = \\left(v_{1,n} + \\frac{h}{C_1} g_1 v_s(t_{n+1}),\\; v_{2,n}\\right) $$
        """
        c1, c2, g1, g2 = self.c1, self.c2, self.g1, self.g2
        vs_next = self.source(t + h)

        A = jnp.array([
            [1.0 + ((h / c1) * (g1 + g2)), -(h / c1) * g2],
            [-(h / c2) * g2, 1.0 + ((h / c2) * g2)],
        ])
        b = jnp.array([
            y[0] + ((h / c1) * g1 * vs_next),
            y[1],
        ])
        return A, b

    def time_constants(self) -> Tuple[float, float]:
        """Time constants -1/lambda of the homogeneous system, ascending."""
        eigvals = jnp.linalg.eigvals(self.jac(0.0, jnp.zeros(2))).real
        taus = sorted(float(-1.0 / lam) for lam in eigvals)
        return taus[0], taus[1]
