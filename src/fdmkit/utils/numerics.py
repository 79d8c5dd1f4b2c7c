"""Numerical utilities.

Rough estimates of the scale of a function and of the floating-point noise
in its evaluations. Both are used by the step-size optimizer to balance
truncation error against round-off error.
"""

from __future__ import annotations

from typing import Any

import numpy as np

from fdmkit.logger import fdmkit_logger
from fdmkit.utils.types import ScalarFunction

__all__ = [
    "float_type",
    "as_float",
    "default_max_step",
    "max_abs",
    "estimate_magnitude",
    "estimate_roundoff_error",
]


def float_type(x: Any) -> type[np.floating]:
    """Returns the floating point type that computations at ``x`` are carried out in.

    Numpy floating scalars keep their own precision. Everything else
    (Python ints and floats, numpy integers) is promoted to ``float64``.

    Args:
        x: The evaluation point.

    Returns:
        A numpy floating point type.
    """
    dtype = np.asarray(x).dtype
    if np.issubdtype(dtype, np.floating):
        return dtype.type
    return np.float64


def as_float(x: Any) -> np.floating:
    """Converts ``x`` to a scalar of its working floating point type."""
    return float_type(x)(x)


def default_max_step(x: Any) -> np.floating:
    """Returns the default step size cap ``0.1 * max(|x|, 1)``."""
    x = as_float(x)
    t = type(x)
    return t(0.1) * max(abs(x), t(1))


def max_abs(value: Any) -> np.floating:
    """Returns the largest absolute component of a scalar or array-like.

    Integer outputs are promoted to ``float64``; floating outputs keep their
    precision so that :func:`estimate_roundoff_error` sees the right spacing.
    """
    arr = np.abs(np.asarray(value))
    if not np.issubdtype(arr.dtype, np.floating):
        arr = arr.astype(np.float64)
    return arr.max()


def estimate_magnitude(f: ScalarFunction, x: Any) -> np.floating:
    """Estimates the magnitude of ``f`` in a neighbourhood of ``x``.

    The outputs of ``f`` are assumed to have a "typical" order of magnitude,
    so the result should be read as a very rough estimate. For
    vector-valued functions the largest absolute component is used.

    If ``f(x) == 0``, ``x`` is taken to be a pathological input for ``f``
    (think ``sin(0)``) and the estimate is retried once at
    ``x + 0.1 * max(|x|, 1)``. The perturbed point is assumed not to be
    pathological as well; if it is, zero is returned.

    Args:
        f: The function to estimate the magnitude of.
        x: The point around which to estimate the magnitude.

    Returns:
        The estimated magnitude.
    """
    x = as_float(x)
    magnitude = max_abs(f(x))
    if magnitude > 0:
        return magnitude

    delta = default_max_step(x)
    fdmkit_logger.debug(
        "f(%r) vanishes; estimating magnitude at the perturbed point %r.",
        x,
        x + delta,
    )
    return max_abs(f(x + delta))


def estimate_roundoff_error(f: ScalarFunction, x: Any) -> np.floating:
    """Estimates the round-off error of evaluating ``f`` at ``x``.

    This is the spacing between floating point numbers at the estimated
    magnitude of ``f(x)``. Since the function may vanish around ``x``, the
    result is bounded from below by ``eps / 1000`` of the working type of
    ``x``, which leaves four orders of magnitude of room.

    Args:
        f: The function whose evaluations are assessed.
        x: The evaluation point.

    Returns:
        The estimated round-off error.
    """
    eps = np.finfo(float_type(x)).eps
    spacing = np.spacing(estimate_magnitude(f, x))
    return max(spacing, eps / 1000)
