"""Finite difference methods.

Provides exact coefficient computation for arbitrary grids, methods that
choose their own step size, and Richardson extrapolation over the step size.
"""

from .constructors import backward_fdm, central_fdm, forward_fdm, named_fdm
from .extrapolation import extrapolate_fdm
from .method import FiniteDifferenceMethod, estimate_step, make_method

__all__ = [
    "FiniteDifferenceMethod",
    "make_method",
    "estimate_step",
    "named_fdm",
    "forward_fdm",
    "central_fdm",
    "backward_fdm",
    "extrapolate_fdm",
]
