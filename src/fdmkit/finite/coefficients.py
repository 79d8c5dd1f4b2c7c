"""Exact computation of finite difference coefficients.

For a grid of offsets ``g_0, ..., g_{p-1}`` and a derivative order ``q``,
the coefficients ``c_k`` solve the Vandermonde-like system

.. math::

    \\sum_k c_k g_k^i = q! \\, \\delta_{iq}, \\qquad i = 0, \\ldots, p - 1,

so that ``sum(c_k * f(x + h * g_k)) / h**q`` reproduces the ``q``-th
derivative of every polynomial of degree less than ``p`` exactly.

The system becomes badly conditioned quickly as ``p`` grows, so it is
solved in exact rational arithmetic with :class:`fractions.Fraction`, whose
numerators and denominators are unbounded Python integers. Only the final
solution is rounded to ``float64``.

Examples:
---------
>>> from fdmkit.finite.coefficients import solve_coefficients
>>> solve_coefficients([-1, 0, 1], 1).tolist()
[-0.5, 0.0, 0.5]
"""

from __future__ import annotations

import math
import threading
from fractions import Fraction
from typing import Any

import numpy as np

from fdmkit.exceptions import (
    DerivativeOrderTooHighError,
    MethodOrderTooLargeError,
    NegativeDerivativeOrderError,
    SingularGridError,
)
from fdmkit.logger import fdmkit_logger
from fdmkit.utils.thread_safety import wrap_with_lock
from fdmkit.utils.types import ArrayLike1D, FloatArray

__all__ = [
    "MAX_METHOD_ORDER",
    "check_p_q",
    "grid_key",
    "solve_coefficients_exact",
    "solve_coefficients",
    "CoefficientCache",
    "DEFAULT_CACHE",
    "get_coefficients",
]


#: Largest supported order of a method. ``factorial(p)`` must fit in a 64-bit
#: integer for the truncation term of the step-size optimizer, and
#: ``factorial(21)`` does not.
MAX_METHOD_ORDER = 20


def check_p_q(p: int, q: int) -> None:
    """Checks the method and derivative orders for consistency.

    Args:
        p: Order of the method, i.e. the number of grid points.
        q: Order of the derivative.

    Raises:
        NegativeDerivativeOrderError: If ``q < 0``.
        DerivativeOrderTooHighError: If ``q >= p``.
        MethodOrderTooLargeError: If ``p > MAX_METHOD_ORDER``.
    """
    if q < 0:
        raise NegativeDerivativeOrderError(
            f"order of derivative (q) must be non-negative, but is {q}."
        )
    if q >= p:
        raise DerivativeOrderTooHighError(
            "order of the method (p) must be strictly greater than that of "
            f"the derivative (q), but p={p} and q={q}."
        )
    if p > MAX_METHOD_ORDER:
        raise MethodOrderTooLargeError(
            f"order of the method (p={p}) is too large to be computed; "
            f"at most {MAX_METHOD_ORDER} grid points are supported."
        )


def grid_key(grid: ArrayLike1D) -> tuple[Any, ...]:
    """Returns a hashable representation of a grid made of Python numbers."""
    return tuple(np.asarray(grid).ravel().tolist())


def _solve_exact(matrix: list[list[Fraction]], rhs: list[Fraction]) -> list[Fraction]:
    """Solves ``matrix @ x = rhs`` by Gauss-Jordan elimination over the rationals.

    Raises:
        SingularGridError: If the matrix is singular.
    """
    n = len(rhs)
    rows = [row[:] + [b] for row, b in zip(matrix, rhs)]

    for col in range(n):
        pivot = next((r for r in range(col, n) if rows[r][col] != 0), None)
        if pivot is None:
            raise SingularGridError(
                "the grid must consist of distinct points; "
                "the coefficient system is singular."
            )
        rows[col], rows[pivot] = rows[pivot], rows[col]

        lead = rows[col][col]
        rows[col] = [v / lead for v in rows[col]]
        for r in range(n):
            if r == col or rows[r][col] == 0:
                continue
            factor = rows[r][col]
            rows[r] = [a - factor * b for a, b in zip(rows[r], rows[col])]

    return [row[n] for row in rows]


def solve_coefficients_exact(grid: ArrayLike1D, q: int) -> list[Fraction]:
    """Computes the finite difference coefficients as exact fractions.

    Args:
        grid: Multiples of the step size that the function is evaluated at.
            Entries may be integers, floats or :class:`fractions.Fraction`.
            Floats are converted exactly.
        q: Order of the derivative to estimate.

    Returns:
        The coefficients, one per grid point.

    Raises:
        InvalidParameterError: If ``q`` and ``len(grid)`` are inconsistent
            (see :func:`check_p_q`).
        SingularGridError: If the grid contains repeated points.
    """
    points = grid_key(grid)
    p = len(points)
    check_p_q(p, q)

    nodes = [Fraction(g) for g in points]
    matrix = [[g**i for g in nodes] for i in range(p)]
    rhs = [Fraction(0)] * p
    rhs[q] = Fraction(math.factorial(q))
    return _solve_exact(matrix, rhs)


def solve_coefficients(grid: ArrayLike1D, q: int) -> FloatArray:
    """Computes the finite difference coefficients for a grid and derivative order.

    The coefficients are solved for exactly by :func:`solve_coefficients_exact`
    and rounded to ``float64`` afterwards.

    Returns:
        The coefficients, one per grid point, as a ``float64`` array.
    """
    return np.array(
        [float(c) for c in solve_coefficients_exact(grid, q)], dtype=np.float64
    )


class CoefficientCache:
    """A thread-safe cache of finite difference coefficients.

    Entries are keyed by ``(grid, q)`` and never invalidated; coefficients
    only depend on the key. Lookups and insertions are serialised by a
    reentrant lock, so concurrent misses for the same key compute the
    coefficients once and every caller observes the same, complete array.
    Cached arrays are read-only and shared between all callers.
    """

    def __init__(self) -> None:
        """Initialises an empty cache."""
        self._entries: dict[tuple[tuple[Any, ...], int], FloatArray] = {}
        self._lock = threading.RLock()
        self._get = wrap_with_lock(self._lookup, lock=self._lock)
        self._clear = wrap_with_lock(self._entries.clear, lock=self._lock)

    def _lookup(self, grid: ArrayLike1D, q: int) -> FloatArray:
        key = (grid_key(grid), int(q))
        coefs = self._entries.get(key)
        if coefs is None:
            fdmkit_logger.debug("Computing coefficients for grid=%s, q=%d.", key[0], q)
            coefs = solve_coefficients(key[0], q)
            coefs.setflags(write=False)
            self._entries[key] = coefs
        return coefs

    def get(self, grid: ArrayLike1D, q: int) -> FloatArray:
        """Returns the coefficients for ``(grid, q)``, computing them on a miss."""
        return self._get(grid, q)

    def clear(self) -> None:
        """Removes all entries."""
        self._clear()

    def __contains__(self, key: tuple[ArrayLike1D, int]) -> bool:
        grid, q = key
        with self._lock:
            return (grid_key(grid), int(q)) in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


#: The process-wide coefficient cache.
DEFAULT_CACHE = CoefficientCache()


def get_coefficients(
    grid: ArrayLike1D,
    q: int,
    *,
    cache: CoefficientCache | None = None,
    use_cache: bool = True,
) -> FloatArray:
    """Returns the coefficients for ``(grid, q)``.

    Args:
        grid: Multiples of the step size that the function is evaluated at.
        q: Order of the derivative to estimate.
        cache: The cache to use. Defaults to :data:`DEFAULT_CACHE`.
        use_cache: If ``False``, solve for the coefficients without touching
            any cache.

    Returns:
        The coefficients. Arrays coming from a cache are read-only.
    """
    check_p_q(len(grid_key(grid)), q)
    if not use_cache:
        return solve_coefficients(grid, q)
    return (DEFAULT_CACHE if cache is None else cache).get(grid, q)
