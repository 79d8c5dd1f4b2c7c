"""Exceptions raised by fdmkit.

All invalid-parameter errors are raised when a method is constructed and are
also :class:`ValueError` subclasses, so callers that only care about "bad
input" can catch ``ValueError``.
"""


class FdmError(Exception):
    """Base exception for finite difference method operations."""

    pass


class InvalidParameterError(FdmError, ValueError):
    """A finite difference method was requested with invalid parameters."""

    pass


class NegativeDerivativeOrderError(InvalidParameterError):
    """The order of the derivative ``q`` is negative."""

    pass


class DerivativeOrderTooHighError(InvalidParameterError):
    """The order of the derivative ``q`` is not below the order of the method ``p``."""

    pass


class MethodOrderTooLargeError(InvalidParameterError):
    """The order of the method ``p`` exceeds the largest supported order."""

    pass


class UnknownGridError(FdmError, ValueError):
    """A named grid was requested that does not exist."""

    pass


class SingularGridError(FdmError, ValueError):
    """The grid contains repeated points, so no coefficients exist."""

    pass
