"""Richardson extrapolation of finite difference methods.

Examples:
---------
>>> import numpy as np
>>> from fdmkit import central_fdm, extrapolate_fdm
>>> value, err = extrapolate_fdm(central_fdm(3, 1), np.sin, 1.0)
>>> bool(abs(value - np.cos(1.0)) < 1e-8)
True
"""

from __future__ import annotations

import math
from typing import Any

from numpy.typing import NDArray

from fdmkit.finite.method import FiniteDifferenceMethod
from fdmkit.utils.extrapolation import extrapolate
from fdmkit.utils.numerics import as_float, default_max_step
from fdmkit.utils.types import ScalarFunction

__all__ = ["extrapolate_fdm"]


def extrapolate_fdm(
    method: FiniteDifferenceMethod,
    f: ScalarFunction,
    x: Any,
    h0: float | None = None,
    *,
    power: float = 1,
    breaktol: float = math.inf,
    **kwargs: Any,
) -> tuple[NDArray | float, float]:
    """Uses Richardson extrapolation to refine a finite difference method.

    The method is evaluated at a sequence of decreasing step sizes starting
    from ``h0`` and the estimates are extrapolated to a zero step size by
    :func:`fdmkit.utils.extrapolation.extrapolate`.

    If ``power`` is left at ``1`` and the method is symmetric, ``power = 2``
    is used instead, since the error of a symmetric method only contains
    even powers of the step size.

    Args:
        method: Finite difference method to refine.
        f: Function to evaluate the derivative of.
        x: Point to estimate the derivative at.
        h0: Initial step size. Defaults to ``0.1 * max(|x|, 1)``.
        power: Order of the leading error term of the method.
        breaktol: Stop once the error grows by this factor over the best
            error. Defaults to never stopping on growth.
        **kwargs: Further keyword arguments for
            :func:`fdmkit.utils.extrapolation.extrapolate`, such as
            ``contract``, ``rtol``, ``atol`` or ``maxeval``.

    Returns:
        The estimate of the derivative and an estimate of its error.
    """
    x = as_float(x)
    if h0 is None:
        h0 = default_max_step(x)
    if power == 1 and method.is_symmetric():
        power = 2
    return extrapolate(
        lambda h: method.evaluate(f, x, h),
        float(h0),
        power=power,
        breaktol=breaktol,
        **kwargs,
    )
