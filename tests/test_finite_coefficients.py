"""Tests for the exact coefficient solver and the coefficient cache."""

from __future__ import annotations

import math
from fractions import Fraction

import numpy as np
import pytest
from numpy.testing import assert_allclose

from fdmkit.exceptions import (
    DerivativeOrderTooHighError,
    InvalidParameterError,
    MethodOrderTooLargeError,
    NegativeDerivativeOrderError,
    SingularGridError,
)
from fdmkit.finite.coefficients import (
    DEFAULT_CACHE,
    CoefficientCache,
    check_p_q,
    get_coefficients,
    solve_coefficients,
    solve_coefficients_exact,
)
from fdmkit.finite.grids import backward_grid, central_grid, forward_grid


def _moments(coefs, grid, k):
    """Returns sum(coefs[i] * grid[i]**k) in exact arithmetic."""
    return sum(Fraction(c) * Fraction(g) ** k for c, g in zip(coefs, grid))


@pytest.mark.parametrize("p", range(1, 21))
def test_exact_coefficients_satisfy_moment_conditions(p):
    """Tests that sum(c_i * g_i**k) == k! if k == q else 0, for all k < p."""
    grid = central_grid(p).tolist()
    for q in range(p):
        coefs = solve_coefficients_exact(grid, q)
        for k in range(p):
            expected = math.factorial(k) if k == q else 0
            assert _moments(coefs, grid, k) == expected


@pytest.mark.parametrize("builder", [forward_grid, backward_grid])
@pytest.mark.parametrize("p, q", [(2, 1), (7, 3), (13, 1), (20, 6)])
def test_exact_coefficients_one_sided_grids(builder, p, q):
    """Tests the moment conditions on forward and backward grids."""
    grid = builder(p).tolist()
    coefs = solve_coefficients_exact(grid, q)
    for k in range(p):
        expected = math.factorial(k) if k == q else 0
        assert _moments(coefs, grid, k) == expected


@pytest.mark.parametrize("p, q", [(5, 1), (12, 4), (20, 1), (20, 19)])
def test_float_coefficients_are_correctly_rounded(p, q):
    """Tests that float coefficients only differ from the exact ones by rounding."""
    grid = central_grid(p).tolist()
    exact = solve_coefficients_exact(grid, q)
    coefs = solve_coefficients(grid, q)
    assert coefs.dtype == np.float64
    assert coefs.tolist() == [float(c) for c in exact]

    # The moment conditions hold up to the rounding of the coefficients.
    for k in range(p):
        expected = math.factorial(k) if k == q else 0
        scale = sum(abs(Fraction(c)) * abs(Fraction(g)) ** k for c, g in zip(coefs, grid))
        assert abs(_moments(coefs, grid, k) - expected) <= 1e-15 * scale


def test_known_central_coefficients():
    """Tests textbook stencils."""
    assert_allclose(solve_coefficients([-1, 0, 1], 1), [-0.5, 0.0, 0.5])
    assert_allclose(solve_coefficients([-1, 0, 1], 2), [1.0, -2.0, 1.0])
    assert_allclose(
        solve_coefficients([-2, -1, 0, 1, 2], 1),
        [1 / 12, -2 / 3, 0.0, 2 / 3, -1 / 12],
        rtol=1e-15,
    )
    assert_allclose(solve_coefficients([0, 1], 1), [-1.0, 1.0])


def test_zeroth_derivative_on_grid_containing_zero():
    """Tests that q == 0 picks out the function value at zero."""
    assert solve_coefficients([-1, 0, 1], 0).tolist() == [0.0, 1.0, 0.0]


def test_non_integer_grid_is_solved_exactly():
    """Tests fractional and float grids."""
    coefs = solve_coefficients_exact([Fraction(-1, 2), Fraction(1, 2)], 1)
    assert coefs == [Fraction(-1), Fraction(1)]
    assert_allclose(solve_coefficients([-0.5, 0.5], 1), [-1.0, 1.0])


def test_singular_grid_raises():
    """Tests that repeated grid points are rejected."""
    with pytest.raises(SingularGridError):
        solve_coefficients([0, 1, 1], 1)


@pytest.mark.parametrize(
    "p, q, error",
    [
        (3, -1, NegativeDerivativeOrderError),
        (3, 3, DerivativeOrderTooHighError),
        (3, 4, DerivativeOrderTooHighError),
        (21, 1, MethodOrderTooLargeError),
    ],
)
def test_check_p_q_raises_distinct_errors(p, q, error):
    """Tests that each invalid combination raises its own error type."""
    with pytest.raises(error):
        check_p_q(p, q)
    with pytest.raises(InvalidParameterError):
        check_p_q(p, q)
    with pytest.raises(ValueError):
        check_p_q(p, q)


def test_check_p_q_accepts_boundary_values():
    """Tests that q == 0 and p == 20 are allowed."""
    check_p_q(1, 0)
    check_p_q(20, 19)


def test_solver_validates_before_solving():
    """Tests that invalid orders are rejected by the solver itself."""
    with pytest.raises(MethodOrderTooLargeError):
        solve_coefficients(list(range(21)), 1)


def test_cache_computes_once(fresh_cache):
    """Tests that repeated lookups return the very same read-only array."""
    first = fresh_cache.get([-1, 0, 1], 1)
    second = fresh_cache.get(np.array([-1, 0, 1]), 1)
    assert first is second
    assert not first.flags.writeable
    assert len(fresh_cache) == 1
    assert ([-1, 0, 1], 1) in fresh_cache
    assert ([-1, 0, 1], 2) not in fresh_cache


def test_cache_keys_on_grid_and_order(fresh_cache):
    """Tests that different grids or orders get their own entries."""
    fresh_cache.get([-1, 0, 1], 1)
    fresh_cache.get([-1, 0, 1], 2)
    fresh_cache.get([0, 1, 2], 1)
    assert len(fresh_cache) == 3


def test_cache_clear(fresh_cache):
    """Tests that clearing empties the cache and recomputes identical values."""
    before = fresh_cache.get([0, 1, 2, 3], 2)
    fresh_cache.clear()
    assert len(fresh_cache) == 0
    after = fresh_cache.get([0, 1, 2, 3], 2)
    assert before is not after
    assert before.tobytes() == after.tobytes()


def test_get_coefficients_defaults_to_process_cache():
    """Tests that the process-wide cache is used unless another is injected."""
    coefs = get_coefficients([-3, -1, 1, 3], 1)
    assert ([-3, -1, 1, 3], 1) in DEFAULT_CACHE
    assert get_coefficients([-3, -1, 1, 3], 1) is coefs


def test_get_coefficients_can_bypass_cache():
    """Tests that use_cache=False neither reads nor fills a cache."""
    cache = CoefficientCache()
    coefs = get_coefficients([0, 2, 5], 1, cache=cache, use_cache=False)
    assert len(cache) == 0
    assert coefs.flags.writeable
    assert coefs.tobytes() == cache.get([0, 2, 5], 1).tobytes()


def test_get_coefficients_validates_orders(fresh_cache):
    """Tests that invalid orders never reach the cache."""
    with pytest.raises(DerivativeOrderTooHighError):
        get_coefficients([0, 1], 2, cache=fresh_cache)
    assert len(fresh_cache) == 0
