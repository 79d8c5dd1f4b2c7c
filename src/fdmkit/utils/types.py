"""Shared typing aliases for fdmkit."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Sequence, TypeAlias

import numpy as np
from numpy.typing import NDArray

Float: TypeAlias = np.floating
FloatArray: TypeAlias = NDArray[np.float64]

ArrayLike1D: TypeAlias = Sequence[float] | NDArray[np.floating]

#: A function of one real variable returning a scalar or a 1D array.
ScalarFunction: TypeAlias = Callable[[float], Any]

#: ``(f, x) -> bound`` on the magnitude of a derivative of ``f`` near ``x``.
BoundEstimator: TypeAlias = Callable[[ScalarFunction, float], float]
