"""Provides the :class:`FiniteDifferenceMethod` class and its step-size optimizer.

A finite difference method combines a grid, the order of the derivative to
estimate, the coefficients for that grid and a bound estimator. It can be
evaluated at a given step size, or it can pick the step size itself by
minimising an upper bound on the total error of the estimate.

Examples:
---------
>>> import numpy as np
>>> from fdmkit import central_fdm
>>> fdm = central_fdm(5, 1)
>>> print(fdm)
FiniteDifferenceMethod:
  order of method:       5
  order of derivative:   1
  grid:                  [-2, -1, 0, 1, 2]
  coefficients:          [0.08333333333333333, -0.6666666666666666, 0.0, 0.6666666666666666, -0.08333333333333333]
>>> bool(abs(fdm(np.sin, 1.0) - np.cos(1.0)) < 1e-12)
True
>>> bool(abs(fdm(np.sin, 1.0, 1e-3) - np.cos(1.0)) < 1e-11)
True
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray

from fdmkit.exceptions import InvalidParameterError
from fdmkit.finite.bounds import DEFAULT_CONDITION, DefaultBoundEstimator
from fdmkit.finite.coefficients import CoefficientCache, check_p_q, get_coefficients
from fdmkit.logger import fdmkit_logger
from fdmkit.utils.numerics import (
    as_float,
    default_max_step,
    estimate_roundoff_error,
)
from fdmkit.utils.types import ArrayLike1D, BoundEstimator, FloatArray, ScalarFunction

__all__ = [
    "FiniteDifferenceMethod",
    "make_method",
    "estimate_step",
]


def _read_only(values: Any, dtype: Any = None) -> NDArray:
    """Returns ``values`` as a read-only 1D array, copying only if needed."""
    arr = np.asarray(values, dtype=dtype)
    if arr.dtype == object:
        arr = arr.astype(np.float64)
    if arr.flags.writeable:
        arr = arr.copy()
        arr.setflags(write=False)
    return arr


def _is_symmetric(
    vec: NDArray,
    *,
    centre_zero: bool = False,
    negate_half: bool = False,
) -> bool:
    """Checks whether the first half of ``vec`` mirrors the second half.

    Args:
        vec: The vector to check.
        centre_zero: For odd lengths, additionally require the middle
            entry to be zero.
        negate_half: Compare the first half against the negated, rather
            than the plain, reversed second half.

    Returns:
        Whether ``vec`` is symmetric in the requested sense.
    """
    half_sign = -1 if negate_half else 1
    half = len(vec) // 2
    if len(vec) % 2 == 1:
        if centre_zero and vec[half] != 0:
            return False
        tail = vec[half + 1:]
    else:
        tail = vec[half:]
    return bool(np.array_equal(vec[:half], half_sign * tail[::-1]))


@dataclass(frozen=True, eq=False)
class FiniteDifferenceMethod:
    """A finite difference method.

    Calling a method with ``(f, x)`` estimates the ``q``-th derivative of
    ``f`` at ``x`` with an automatically determined step size; calling it
    with ``(f, x, h)`` uses the step size ``h``. Vector-valued functions are
    differentiated component-wise.

    Attributes:
        grid: Multiples of the step size that the function will be
            evaluated at. Its length ``p`` is the order of the method.
        q: Order of the derivative to estimate.
        coefs: Coefficients that the function evaluations on the grid are
            weighted by.
        bound_estimator: A function that takes the function and the
            evaluation point and returns a bound on the magnitude of the
            ``p``-th derivative. Only used to pick step sizes.
    """

    grid: NDArray
    q: int
    coefs: FloatArray
    bound_estimator: BoundEstimator

    def __post_init__(self) -> None:
        """Validates the method and freezes its arrays."""
        grid = _read_only(self.grid)
        coefs = _read_only(self.coefs, dtype=np.float64)
        if grid.ndim != 1 or coefs.shape != grid.shape:
            raise InvalidParameterError(
                "grid and coefs must be 1D arrays of the same length, "
                f"but have shapes {grid.shape} and {coefs.shape}."
            )
        check_p_q(grid.size, self.q)
        object.__setattr__(self, "grid", grid)
        object.__setattr__(self, "coefs", coefs)

    @classmethod
    def from_grid(
        cls,
        grid: ArrayLike1D,
        q: int,
        *,
        condition: float = DEFAULT_CONDITION,
        cache: CoefficientCache | None = None,
        use_cache: bool = True,
    ) -> FiniteDifferenceMethod:
        """Constructs a finite difference method on an arbitrary grid.

        Args:
            grid: Multiples of the step size to evaluate the function at.
            q: Order of the derivative to estimate.
            condition: Condition number of the default bound estimator.
                See :data:`fdmkit.finite.bounds.DEFAULT_CONDITION`.
            cache: Coefficient cache to use. Defaults to the process-wide one.
            use_cache: If ``False``, the coefficients are solved for afresh.

        Returns:
            The specified finite difference method.

        Raises:
            InvalidParameterError: If ``q`` is negative, not smaller than
                ``len(grid)``, or ``len(grid)`` is too large.
        """
        coefs = get_coefficients(grid, q, cache=cache, use_cache=use_cache)
        return cls(grid, q, coefs, DefaultBoundEstimator(condition))

    @property
    def p(self) -> int:
        """The order of the method."""
        return self.grid.size

    def __call__(
        self,
        f: ScalarFunction,
        x: Any,
        h: float | None = None,
        *,
        factor: float = 1,
        max_step: float | None = None,
    ) -> NDArray | float:
        """Estimates the derivative of ``f`` at ``x``.

        Args:
            f: Function to estimate the derivative of.
            x: Input to estimate the derivative at.
            h: Step size. If ``None``, the step size is determined by
                :func:`estimate_step`.
            factor: Factor to amplify the estimated round-off error by.
                This can be used to force a more conservative step size.
                Ignored if ``h`` is given.
            max_step: Maximum step size. Defaults to ``0.1 * max(|x|, 1)``.
                Ignored if ``h`` is given.

        Returns:
            The estimate of the derivative.
        """
        if h is not None:
            return self.evaluate(f, x, h)

        x = as_float(x)
        # The step size is meaningless for the zeroth derivative.
        if self.q == 0:
            return f(x)
        h, _ = estimate_step(self, f, x, factor=factor, max_step=max_step)
        return self.evaluate(f, x, h)

    def evaluate(self, f: ScalarFunction, x: Any, h: float) -> NDArray | float:
        """Estimates the derivative of ``f`` at ``x`` using step size ``h``.

        The evaluation is carried out in the floating point type of ``x``.

        Args:
            f: Function to estimate the derivative of.
            x: Input to estimate the derivative at.
            h: Step size.

        Returns:
            The estimate of the derivative. Returns a float for scalar-valued
            functions, or a NumPy array for vector-valued functions.
        """
        x = as_float(x)
        t = type(x)
        h = t(h)

        values = np.asarray([f(t(x + h * g)) for g in self.grid])
        coefs = self.coefs.astype(t)
        # values shape: (p,) for scalar outputs, (p, *out_shape) otherwise
        deriv = np.tensordot(coefs, values, axes=(0, 0)) / h**self.q

        if np.ndim(deriv) == 0:
            return float(deriv)
        return deriv

    def is_symmetric(self) -> bool:
        """Checks whether the method is symmetric.

        A method is symmetric if its grid is antisymmetric about zero and its
        coefficients are antisymmetric under reversal. The error of such a
        method only contains even powers of the step size, which doubles the
        convergence rate of Richardson extrapolation.
        """
        grid_symmetric = _is_symmetric(self.grid, centre_zero=True, negate_half=True)
        coefs_symmetric = _is_symmetric(self.coefs, negate_half=True)
        return grid_symmetric and coefs_symmetric

    def __str__(self) -> str:
        return (
            "FiniteDifferenceMethod:\n"
            f"  order of method:       {self.p}\n"
            f"  order of derivative:   {self.q}\n"
            f"  grid:                  {self.grid.tolist()}\n"
            f"  coefficients:          {self.coefs.tolist()}"
        )


def make_method(
    grid: ArrayLike1D,
    q: int,
    condition: float = DEFAULT_CONDITION,
    *,
    cache: CoefficientCache | None = None,
    use_cache: bool = True,
) -> FiniteDifferenceMethod:
    """Constructs a finite difference method on an arbitrary grid.

    See :meth:`FiniteDifferenceMethod.from_grid`.
    """
    return FiniteDifferenceMethod.from_grid(
        grid, q, condition=condition, cache=cache, use_cache=use_cache
    )


def estimate_step(
    method: FiniteDifferenceMethod,
    f: ScalarFunction,
    x: Any,
    *,
    factor: float = 1,
    max_step: float | None = None,
) -> tuple[np.floating, np.floating]:
    """Estimates the step size for a finite difference method.

    The step size minimises the upper bound

    .. math::

        \\frac{C_1}{h^q} + C_2 h^{p - q}

    on the error of the estimate, where ``C1`` is the round-off error
    amplified by the coefficients and ``C2`` is the truncation error
    coefficient of the next Taylor term. The minimiser is available in
    closed form and is capped at ``max_step``.

    Args:
        method: Finite difference method to estimate the step size for.
        f: Function to evaluate the derivative of.
        x: Point to estimate the derivative at.
        factor: Factor to amplify the estimated round-off error by. This
            can be used to force a more conservative step size.
        max_step: Maximum step size. Defaults to ``0.1 * max(|x|, 1)``.

    Returns:
        The estimated step size (in the floating point type of ``x``) and an
        estimate of the error of the finite difference estimate at that step.
    """
    x = as_float(x)
    if max_step is None:
        max_step = default_max_step(x)
    p = method.p
    q = method.q

    # Estimate the round-off error.
    eps = estimate_roundoff_error(f, x) * factor

    # Estimate the bound on the derivatives.
    bound = method.bound_estimator(f, x)

    c1 = eps * np.sum(np.abs(method.coefs))
    grid_p = method.grid.astype(np.float64) ** p
    c2 = bound * np.sum(np.abs(method.coefs * grid_p)) / math.factorial(p)

    # A vanishing bound (e.g. a polynomial of degree < p) sends h to max_step.
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        ratio = np.float64(q / (p - q)) * (np.float64(c1) / np.float64(c2))
        h = type(x)(min(ratio ** (1 / p), max_step))
        accuracy = h ** (-q) * c1 + h ** (p - q) * c2

    fdmkit_logger.debug(
        "Step size %.6g with estimated accuracy %.6g for p=%d, q=%d at x=%r.",
        h,
        accuracy,
        p,
        q,
        x,
    )
    return h, accuracy
