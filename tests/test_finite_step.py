"""Tests for the step-size optimizer."""

from __future__ import annotations

import logging
import math

import numpy as np
import pytest
from numpy.testing import assert_allclose

from fdmkit import (
    FiniteDifferenceMethod,
    backward_fdm,
    central_fdm,
    estimate_step,
    forward_fdm,
    make_method,
)
from fdmkit.finite.coefficients import solve_coefficients


def _constant_bound(value):
    """Returns a bound estimator that always reports ``value``."""
    def bound(f, x):
        return value

    return bound


def test_estimate_step_closed_form():
    """Tests the closed-form balance of round-off and truncation error."""
    grid = [-1, 0, 1]
    m = FiniteDifferenceMethod(grid, 1, solve_coefficients(grid, 1), _constant_bound(1.0))
    eps = np.spacing(1.0)

    h, accuracy = estimate_step(m, lambda x: 1.0, 0.0)

    c1 = eps * 1.0
    c2 = 1.0 * (0.5 + 0.5) / 6
    expected_h = (0.5 * c1 / c2) ** (1 / 3)
    assert_allclose(h, expected_h, rtol=1e-12)
    assert_allclose(accuracy, c1 / expected_h + expected_h**2 * c2, rtol=1e-12)


def test_estimate_step_factor_scales_roundoff():
    """Tests that the round-off factor enlarges the step as factor**(1/p)."""
    m = central_fdm(5, 1)
    h1, acc1 = estimate_step(m, np.sin, 1.0)
    h2, acc2 = estimate_step(m, np.sin, 1.0, factor=1e5)
    assert_allclose(h2 / h1, 10.0, rtol=1e-10)
    assert acc2 > acc1


def test_estimate_step_respects_max_step():
    """Tests that the step is clamped to max_step."""
    m = central_fdm(5, 1)
    h, accuracy = estimate_step(m, np.sin, 1.0, max_step=1e-5)
    assert h == 1e-5
    assert np.isfinite(accuracy)


def test_vanishing_bound_gives_max_step():
    """Tests that a zero derivative bound sends the step to the default cap."""
    grid = [-1, 0, 1]
    m = FiniteDifferenceMethod(grid, 1, solve_coefficients(grid, 1), _constant_bound(0.0))
    h, accuracy = estimate_step(m, np.exp, 3.0)
    assert_allclose(h, 0.3)
    assert np.isfinite(accuracy)
    assert accuracy > 0


@pytest.mark.parametrize(
    "m",
    [
        central_fdm(3, 1),
        central_fdm(5, 1),
        central_fdm(7, 2),
        forward_fdm(4, 1),
        backward_fdm(6, 3),
        central_fdm(5, 1, adapt=0),
        central_fdm(5, 1, adapt=2),
        central_fdm(9, 1, geom=True),
    ],
)
@pytest.mark.parametrize(
    "f, x",
    [
        (np.sin, 1.0),
        (np.sin, 0.0),
        (np.exp, -2.0),
        (np.log, 50.0),
        (lambda x: 1.0 / (1.0 + x * x), 0.3),
    ],
)
def test_step_is_bounded_and_accuracy_finite(m, f, x):
    """Tests that h <= max_step and the accuracy is finite and non-negative."""
    max_step = 0.1 * max(abs(x), 1.0)
    h, accuracy = estimate_step(m, f, x)
    assert 0 < h <= max_step
    assert np.isfinite(accuracy)
    assert accuracy >= 0


def test_reported_accuracy_bounds_actual_error():
    """Tests that the accuracy estimate is of the order of the actual error."""
    m = central_fdm(5, 1)
    h, accuracy = estimate_step(m, np.sin, 1.0)
    assert 1e-4 < h < 1e-2
    assert accuracy < 1e-11
    assert abs(m(np.sin, 1.0, h) - math.cos(1.0)) < 10 * accuracy


def test_step_is_in_working_type():
    """Tests that the step is returned in the float type of x."""
    m = central_fdm(3, 1)
    h, _ = estimate_step(m, np.sin, np.float32(1.0))
    assert isinstance(h, np.float32)
    h, _ = estimate_step(m, np.sin, 1)
    assert isinstance(h, np.float64)


def test_high_order_method_step():
    """Tests that the optimizer copes with the largest supported order."""
    m = make_method(list(range(-10, 0)) + list(range(1, 11)), 1)
    h, accuracy = estimate_step(m, np.sin, 1.0)
    assert 0 < h <= 0.1
    assert np.isfinite(accuracy)


def test_estimate_step_logs_choice(caplog):
    """Tests that the chosen step is logged at DEBUG level."""
    with caplog.at_level(logging.DEBUG, logger="fdmkit"):
        estimate_step(central_fdm(3, 1, adapt=0), np.sin, 1.0)
    assert any("Step size" in r.getMessage() for r in caplog.records)
