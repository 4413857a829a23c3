"""Adoption curves mapping elapsed horizon to production progress."""

from __future__ import annotations

from enum import Enum
from typing import Union

import numpy as np
from scipy.special import expit

# Exponents for the power-law shapes
FRONT_EXPONENT = 0.65
BACK_EXPONENT = 1.75

# Logistic steepness; the curve is centred on t = 0.5
S_CURVE_STEEPNESS = 6.0


class UptakeShape(str, Enum):
    """Adoption shapes for how production scale materializes over the horizon."""

    LINEAR = "linear"  # Doublings accrue evenly
    FRONT = "front"  # Concave: most scale-up early
    BACK = "back"  # Convex: most scale-up late
    S_CURVE = "s-curve"  # Logistic: slow, fast, slow


def _logistic(t):
    return expit(S_CURVE_STEEPNESS * (t - 0.5))


def _shape_progress(t, shape: Union[UptakeShape, str]):
    """Evaluate a shape at normalized position(s) t."""
    try:
        shape = UptakeShape(shape)
    except ValueError:
        shape = UptakeShape.LINEAR

    if shape is UptakeShape.FRONT:
        return np.power(t, FRONT_EXPONENT)
    if shape is UptakeShape.BACK:
        return np.power(t, BACK_EXPONENT)
    if shape is UptakeShape.S_CURVE:
        low = _logistic(0.0)
        high = _logistic(1.0)
        scaled = (_logistic(t) - low) / (high - low)
        return np.where(np.isfinite(scaled), scaled, 0.0)
    return t


def adoption_progress(index: int, total: int, shape: Union[UptakeShape, str] = UptakeShape.LINEAR) -> float:
    """
    Fraction of total doublings reached at a forecast step.

    Args:
        index: Zero-based step index
        total: Number of steps in the horizon
        shape: Adoption shape; unknown names fall back to linear

    Returns:
        Progress fraction in [0, 1]. A horizon of one step (or fewer) is
        treated as fully arrived and returns 1.
    """
    if total <= 1:
        return 1.0
    t = np.float64(index) / (total - 1)
    with np.errstate(invalid="ignore"):
        return float(_shape_progress(t, shape))


def adoption_curve(total: int, shape: Union[UptakeShape, str] = UptakeShape.LINEAR) -> np.ndarray:
    """
    Progress fraction for every step of a horizon.

    Args:
        total: Number of steps
        shape: Adoption shape

    Returns:
        Array of length ``total`` with the same values as calling
        ``adoption_progress`` per step
    """
    if total <= 0:
        return np.empty(0)
    if total == 1:
        return np.ones(1)
    t = np.arange(total, dtype=float) / (total - 1)
    return np.asarray(_shape_progress(t, shape), dtype=float)
