"""Richardson extrapolation of step-indexed approximations.

An approximation ``A(h)`` that converges as ``A(h) = L + a_1 h^p + a_2 h^{2p}
+ ...`` can be refined by evaluating it at a geometric sequence of step
sizes and eliminating the error terms one by one (Neville's scheme).
"""

from __future__ import annotations

import math
from collections.abc import Callable
from typing import Any, Sequence

import numpy as np
from numpy.typing import NDArray

from fdmkit.logger import fdmkit_logger

__all__ = [
    "DEFAULT_CONTRACT",
    "DEFAULT_MAXEVAL",
    "richardson_extrapolate",
    "extrapolate",
]


#: Default ratio between consecutive step sizes in :func:`extrapolate`.
DEFAULT_CONTRACT = 0.125
#: Default maximum number of evaluations in :func:`extrapolate`.
DEFAULT_MAXEVAL = 1000


def _neville_update(
    tableau: list[NDArray[np.float64]],
    value: NDArray[np.float64],
    c: float,
) -> NDArray[np.float64]:
    """Adds the approximation at the next (smaller) step size to a Neville tableau.

    ``tableau[i]`` holds the extrapolant built from the approximations
    ``i, ..., n - 1``; it is updated in place.

    Args:
        tableau: The current tableau, from coarsest to finest.
        value: The approximation at the next step size.
        c: Ratio ``(h_{k+1} / h_k)^p`` of the leading error terms of
            consecutive approximations.

    Returns:
        The extrapolant using all approximations.
    """
    tableau.append(value)
    ck = 1.0
    for i in range(len(tableau) - 2, -1, -1):
        ck *= c
        finer = tableau[i + 1]
        tableau[i] = finer + (finer - tableau[i]) * (ck / (1.0 - ck))
    return tableau[0]


def _as_output(value: NDArray[np.float64]) -> NDArray[np.float64] | float:
    return float(value) if value.ndim == 0 else value


def richardson_extrapolate(
        base_values: Sequence[NDArray[np.float64] | float],
        p: int,
        r: float = 2.0,
) -> NDArray[np.float64] | float:
    """Computes Richardson extrapolation on a sequence of approximations.

    Richardson extrapolation improves the accuracy of a sequence of
    numerical approximations that converge with a known leading-order error
    term. Given a sequence of approximations computed with decreasing step sizes,
    this method combines them to eliminate the leading error term, yielding
    a more accurate estimate of the true value.

    Args:
        base_values:
            Sequence of approximations at different step sizes.
            The step sizes are assumed to decrease by a factor of `r`
            between successive entries.
        p:
            The order of the leading error term in the approximations.
            Subsequent error terms are assumed to be of order ``2p, 3p, ...``.
        r:
            The step-size reduction factor between successive entries
            (default is 2.0).

    Returns:
        The extrapolated value with improved accuracy.

    Raises:
        ValueError: If `base_values` has fewer than two entries.
    """
    n = len(base_values)
    if n < 2:
        raise ValueError("richardson_extrapolate requires at least two base values.")

    c = float(r) ** (-p)
    tableau: list[NDArray[np.float64]] = []
    for v in base_values:
        result = _neville_update(tableau, np.asarray(v, dtype=float), c)
    return _as_output(result)


def extrapolate(
    step_fn: Callable[[float], Any],
    h0: float,
    *,
    contract: float = DEFAULT_CONTRACT,
    x0: float = 0.0,
    power: float = 1,
    atol: float = 0.0,
    rtol: float | None = None,
    maxeval: int = DEFAULT_MAXEVAL,
    breaktol: float = 2.0,
) -> tuple[NDArray[np.float64] | float, float]:
    """Extrapolates ``step_fn(x0 + h)`` to ``h -> 0``.

    ``step_fn`` is evaluated at ``x0 + h`` for ``h = h0, h0 * contract,
    h0 * contract**2, ...``. After every evaluation the Richardson tableau is
    extended and the error is estimated as the norm of the difference
    between the new and the previous extrapolant. The extrapolant with the
    smallest error seen so far is kept.

    The iteration stops when

    * the error drops below ``max(rtol * norm(best), atol)``,
    * the error is not finite,
    * the error exceeds ``breaktol`` times the smallest error so far, which
      signals that round-off has started to dominate, or
    * ``maxeval`` evaluations have been made.

    Args:
        step_fn: Step-indexed approximation. May return a scalar or an array.
        h0: Initial step. May be negative to approach ``x0`` from below.
        contract: Ratio between consecutive steps, in ``(0, 1)``.
        x0: Point that the steps are taken relative to.
        power: Order of the leading error term; the error of ``step_fn``
            is assumed to be a series in powers of ``h**power``.
        atol: Absolute tolerance.
        rtol: Relative tolerance. Defaults to ``sqrt(eps)`` if ``atol`` is
            zero and to zero otherwise.
        maxeval: Maximum number of evaluations of ``step_fn``.
        breaktol: Stop once the error grows by more than this factor over
            the best error. Pass ``math.inf`` to never stop on growth.

    Returns:
        The extrapolated value and an estimate of its error.

    Raises:
        ValueError: If ``contract``, ``h0``, ``power`` or ``maxeval`` are invalid.
    """
    if not 0 < contract < 1:
        raise ValueError(f"contract must lie in (0, 1), but is {contract}.")
    if h0 == 0:
        raise ValueError("the initial step h0 must be non-zero.")
    if power <= 0:
        raise ValueError(f"power must be positive, but is {power}.")
    if maxeval < 1:
        raise ValueError(f"maxeval must be at least 1, but is {maxeval}.")
    if rtol is None:
        rtol = 0.0 if atol > 0 else math.sqrt(np.finfo(np.float64).eps)

    c = contract**power
    h = h0
    tableau: list[NDArray[np.float64]] = []
    best = _neville_update(tableau, np.asarray(step_fn(x0 + h), dtype=float), c)
    best_err = math.inf
    previous = best
    numeval = 1

    while numeval < maxeval:
        numeval += 1
        h *= contract
        estimate = _neville_update(tableau, np.asarray(step_fn(x0 + h), dtype=float), c)
        err = float(np.linalg.norm(estimate - previous))
        previous = estimate
        fdmkit_logger.debug("Extrapolation step h=%.6g: error %.6g.", h, err)

        if err > breaktol * best_err:
            break
        if err < best_err:
            best, best_err = estimate, err
        if not math.isfinite(err) or best_err <= max(rtol * float(np.linalg.norm(best)), atol):
            break
    else:
        fdmkit_logger.warning(
            "Extrapolation stopped after %d evaluations with error %.6g "
            "before reaching the requested tolerance.",
            numeval,
            best_err,
        )

    return _as_output(best), best_err
