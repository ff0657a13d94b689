"""Type aliases to improve type hint readability."""

from typing import Callable, TypeAlias
from jax import Array

ResidualFunction: TypeAlias = Callable[[Array], Array]
JacobianConstructor: TypeAlias = Callable[[Array], Array]
TrajectorySink: TypeAlias = Callable[[float, Array], None]
ProgressCallback: TypeAlias = Callable[[int], None]
