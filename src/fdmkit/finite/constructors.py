"""Constructors for finite difference methods on named grids.

Examples:
---------
>>> import numpy as np
>>> from fdmkit import backward_fdm, central_fdm, forward_fdm
>>> central_fdm(3, 1).grid.tolist()
[-1, 0, 1]
>>> forward_fdm(3, 1, geom=True).grid.tolist()
[0, 1, 3]
>>> bool(abs(backward_fdm(4, 2)(np.exp, 0.5) - np.exp(0.5)) < 1e-5)
True
"""

from __future__ import annotations

from fdmkit.exceptions import InvalidParameterError
from fdmkit.finite.bounds import (
    DEFAULT_CONDITION,
    AdaptiveBoundEstimator,
    DefaultBoundEstimator,
)
from fdmkit.finite.coefficients import (
    MAX_METHOD_ORDER,
    CoefficientCache,
    check_p_q,
    get_coefficients,
)
from fdmkit.finite.grids import exponentiate_grid, named_grid
from fdmkit.finite.method import FiniteDifferenceMethod
from fdmkit.logger import fdmkit_logger
from fdmkit.utils.types import BoundEstimator

__all__ = [
    "named_fdm",
    "forward_fdm",
    "central_fdm",
    "backward_fdm",
    "make_bound_estimator",
]


def make_bound_estimator(
    direction: str,
    p: int,
    adapt: int,
    condition: float = DEFAULT_CONDITION,
    *,
    geom: bool = False,
    cache: CoefficientCache | None = None,
) -> BoundEstimator:
    """Builds the bound estimator for a method of order ``p`` on a named grid.

    With ``adapt == 0`` the ``p``-th derivative is bounded by the
    :class:`DefaultBoundEstimator`. Otherwise a method of order ``p + 1`` for
    the ``p``-th derivative on the same kind of grid is constructed, with
    ``adapt - 1`` levels of adaptation of its own, and the magnitude of its
    estimates is used as the bound.

    Args:
        direction: Name of the grid, see :data:`fdmkit.finite.grids.DIRECTIONS`.
        p: Order of the method that needs the bound.
        adapt: Number of levels of adaptation.
        condition: Condition number of the default bound estimator.
        geom: Use geometrically spaced grids.
        cache: Coefficient cache used for the higher order methods.

    Returns:
        The bound estimator.
    """
    if adapt < 1:
        return DefaultBoundEstimator(condition)
    if p + 1 > MAX_METHOD_ORDER:
        fdmkit_logger.debug(
            "Cannot adapt a method of order %d; using the default bound estimator.", p
        )
        return DefaultBoundEstimator(condition)
    higher = named_fdm(
        direction,
        p + 1,
        p,
        adapt=adapt - 1,
        condition=condition,
        geom=geom,
        cache=cache,
    )
    return AdaptiveBoundEstimator(higher)


def named_fdm(
    direction: str,
    p: int,
    q: int,
    *,
    adapt: int = 1,
    condition: float = DEFAULT_CONDITION,
    geom: bool = False,
    cache: CoefficientCache | None = None,
) -> FiniteDifferenceMethod:
    """Constructs a finite difference method on a named grid of ``p`` points.

    Args:
        direction: ``"forward"``, ``"central"`` or ``"backward"``.
        p: Number of grid points.
        q: Order of the derivative to estimate.
        adapt: Use another finite difference method to estimate the
            magnitude of the ``p``-th order derivative, which is important
            for the step size computation. Recurse this procedure ``adapt``
            times.
        condition: Condition number. See
            :data:`fdmkit.finite.bounds.DEFAULT_CONDITION`.
        geom: Use geometrically spaced points instead of linearly spaced
            points.
        cache: Coefficient cache to use. Defaults to the process-wide one.

    Returns:
        The specified finite difference method.

    Raises:
        UnknownGridError: If ``direction`` is not a known grid.
        InvalidParameterError: If ``p`` and ``q`` are inconsistent or
            ``adapt`` is negative.
    """
    check_p_q(p, q)
    if adapt < 0:
        raise InvalidParameterError(f"adapt must be non-negative, but is {adapt}.")

    grid = named_grid(direction, p)
    if geom:
        grid = exponentiate_grid(grid)
    coefs = get_coefficients(grid, q, cache=cache)
    return FiniteDifferenceMethod(
        grid,
        q,
        coefs,
        make_bound_estimator(direction, p, adapt, condition, geom=geom, cache=cache),
    )


def forward_fdm(
    p: int,
    q: int,
    *,
    adapt: int = 1,
    condition: float = DEFAULT_CONDITION,
    geom: bool = False,
    cache: CoefficientCache | None = None,
) -> FiniteDifferenceMethod:
    """Constructs a finite difference method at a forward grid of ``p`` points.

    See :func:`named_fdm` for the arguments.
    """
    return named_fdm(
        "forward", p, q, adapt=adapt, condition=condition, geom=geom, cache=cache
    )


def central_fdm(
    p: int,
    q: int,
    *,
    adapt: int = 1,
    condition: float = DEFAULT_CONDITION,
    geom: bool = False,
    cache: CoefficientCache | None = None,
) -> FiniteDifferenceMethod:
    """Constructs a finite difference method at a central grid of ``p`` points.

    See :func:`named_fdm` for the arguments.
    """
    return named_fdm(
        "central", p, q, adapt=adapt, condition=condition, geom=geom, cache=cache
    )


def backward_fdm(
    p: int,
    q: int,
    *,
    adapt: int = 1,
    condition: float = DEFAULT_CONDITION,
    geom: bool = False,
    cache: CoefficientCache | None = None,
) -> FiniteDifferenceMethod:
    """Constructs a finite difference method at a backward grid of ``p`` points.

    See :func:`named_fdm` for the arguments.
    """
    return named_fdm(
        "backward", p, q, adapt=adapt, condition=condition, geom=geom, cache=cache
    )
