"""Root-finding algorithms used in implicit time stepping schemes."""

from .protocol import RootFinderProtocol
from .newtonraphson import NewtonRaphson


__all__ = [
    "RootFinderProtocol",
    "NewtonRaphson",
]