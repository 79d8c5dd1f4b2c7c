"""Utility functions for the fdmkit package."""

from .extrapolation import extrapolate, richardson_extrapolate
from .numerics import estimate_magnitude, estimate_roundoff_error

__all__ = [
    "estimate_magnitude",
    "estimate_roundoff_error",
    "extrapolate",
    "richardson_extrapolate",
]
