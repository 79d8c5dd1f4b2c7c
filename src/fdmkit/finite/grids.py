"""Canonical grids for finite difference methods.

A grid holds the multiples of the step size ``h`` at which a function is
sampled. All grids here are integer valued, so the coefficient solver can
work with them exactly.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from fdmkit.exceptions import UnknownGridError
from fdmkit.utils.types import ArrayLike1D

__all__ = [
    "DIRECTIONS",
    "forward_grid",
    "backward_grid",
    "central_grid",
    "exponentiate_grid",
    "named_grid",
]


#: Supported names for :func:`named_grid`.
DIRECTIONS = ("forward", "central", "backward")


def forward_grid(p: int) -> NDArray[np.int64]:
    """Returns the forward grid ``[0, 1, ..., p - 1]``."""
    return np.arange(0, p, dtype=np.int64)


def backward_grid(p: int) -> NDArray[np.int64]:
    """Returns the backward grid ``[1 - p, ..., -1, 0]``."""
    return np.arange(1 - p, 1, dtype=np.int64)


def central_grid(p: int) -> NDArray[np.int64]:
    """Returns a grid of ``p`` points centred on zero.

    For odd ``p`` the grid contains zero. For even ``p`` zero is skipped so
    that the grid stays symmetric, e.g. ``central_grid(4) == [-2, -1, 1, 2]``.

    Args:
        p: Number of grid points.

    Returns:
        The central grid.
    """
    half = p // 2
    if p % 2 == 1:
        return np.arange(-half, half + 1, dtype=np.int64)
    return np.concatenate(
        [np.arange(-half, 0, dtype=np.int64), np.arange(1, half + 1, dtype=np.int64)]
    )


def exponentiate_grid(grid: ArrayLike1D, base: int = 3) -> NDArray[np.int64]:
    """Warps a linear integer grid into a geometrically spaced one.

    Each point ``g`` is mapped to ``sign(g) * base**|g| / base``, so ``0``
    stays put, ``±1`` stays put and the outer points spread out by a factor
    of ``base`` per step.

    Args:
        grid: An integer grid.
        base: The growth factor between consecutive points.

    Returns:
        The warped grid.
    """
    g = np.asarray(grid, dtype=np.int64)
    # base**|g| / base == base**(|g| - 1) for g != 0; zero maps to zero.
    magnitude = np.where(g == 0, 0, base ** np.maximum(np.abs(g) - 1, 0))
    return (np.sign(g) * magnitude).astype(np.int64)


def named_grid(direction: str, p: int) -> NDArray[np.int64]:
    """Returns the grid of ``p`` points for a named direction.

    Args:
        direction: One of :data:`DIRECTIONS`.
        p: Number of grid points.

    Returns:
        The grid.

    Raises:
        UnknownGridError: If ``direction`` is not one of :data:`DIRECTIONS`.
    """
    builders = {
        "forward": forward_grid,
        "central": central_grid,
        "backward": backward_grid,
    }
    try:
        builder = builders[direction]
    except KeyError:
        raise UnknownGridError(
            f"Unknown grid direction {direction!r}. "
            f"Must be one of {list(DIRECTIONS)}."
        ) from None
    return builder(p)
