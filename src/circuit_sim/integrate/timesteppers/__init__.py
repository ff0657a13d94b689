"""Time-stepping schemes for initial value problems."""

from .protocol import StepperProtocol
from .explicit import ForwardEuler
from .implicit import Trapezoidal, BackwardEuler, LinearBackwardEuler

__all__ = [
    # Protocol
    'StepperProtocol',

    # Explicit methods
    'ForwardEuler',

    # Implicit methods
    'Trapezoidal',
    'BackwardEuler',
    'LinearBackwardEuler',
]
