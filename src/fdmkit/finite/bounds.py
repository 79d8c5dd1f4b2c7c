"""Bound estimators for the step-size optimizer.

The step-size optimizer needs the magnitude of the ``p``-th derivative of
the function, where ``p`` is the order of the method. Two estimators are
provided:

* :class:`DefaultBoundEstimator` assumes that derivative to be of the same
  order as the function itself, amplified by a condition number.
* :class:`AdaptiveBoundEstimator` measures it with a higher order finite
  difference method.

Both are callables with the signature ``(f, x) -> bound``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from fdmkit.utils.numerics import estimate_magnitude
from fdmkit.utils.types import ScalarFunction

__all__ = [
    "DEFAULT_CONDITION",
    "DefaultBoundEstimator",
    "AdaptiveBoundEstimator",
]


#: The default condition number used when computing bounds. It amplifies the
#: estimated magnitude of a function to bound the magnitude of its derivatives.
DEFAULT_CONDITION = 100


@dataclass(frozen=True)
class DefaultBoundEstimator:
    """Bounds a derivative by ``condition * estimate_magnitude(f, x)``."""

    condition: float = DEFAULT_CONDITION

    def __call__(self, f: ScalarFunction, x: Any) -> np.floating:
        return self.condition * estimate_magnitude(f, x)


@dataclass(frozen=True)
class AdaptiveBoundEstimator:
    """Bounds a derivative by the magnitude of a finite difference estimate of it.

    Attributes:
        method: A finite difference method estimating the derivative that
            has to be bounded. It picks its own step size, so it may carry
            an adaptive bound estimator itself.
    """

    method: Any

    def __call__(self, f: ScalarFunction, x: Any) -> np.floating:
        return estimate_magnitude(lambda y: self.method(f, y), x)
