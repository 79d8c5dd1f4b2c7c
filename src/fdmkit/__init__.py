"""Provides all fdmkit methods."""

from importlib.metadata import PackageNotFoundError, version

from fdmkit.exceptions import (
    DerivativeOrderTooHighError,
    FdmError,
    InvalidParameterError,
    MethodOrderTooLargeError,
    NegativeDerivativeOrderError,
    SingularGridError,
    UnknownGridError,
)
from fdmkit.finite.bounds import DEFAULT_CONDITION
from fdmkit.finite.coefficients import CoefficientCache
from fdmkit.finite.constructors import (
    backward_fdm,
    central_fdm,
    forward_fdm,
    named_fdm,
)
from fdmkit.finite.extrapolation import extrapolate_fdm
from fdmkit.finite.method import FiniteDifferenceMethod, estimate_step, make_method
from fdmkit.utils.numerics import estimate_magnitude, estimate_roundoff_error

try:
    __version__ = version("fdmkit")
except PackageNotFoundError:
    pass

__all__ = [
    "FiniteDifferenceMethod",
    "make_method",
    "named_fdm",
    "forward_fdm",
    "central_fdm",
    "backward_fdm",
    "estimate_step",
    "extrapolate_fdm",
    "estimate_magnitude",
    "estimate_roundoff_error",
    "CoefficientCache",
    "DEFAULT_CONDITION",
    "FdmError",
    "InvalidParameterError",
    "NegativeDerivativeOrderError",
    "DerivativeOrderTooHighError",
    "MethodOrderTooLargeError",
    "UnknownGridError",
    "SingularGridError",
]
