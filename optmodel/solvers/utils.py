"""
Numerical helpers shared by the solver adapters.
"""

from __future__ import annotations

from typing import Optional

import numpy as np


def project_box(x: np.ndarray, lb: Optional[np.ndarray], ub: Optional[np.ndarray]) -> np.ndarray:
    """
    Project ``x`` onto the box defined by ``lb`` and ``ub``.

    Parameters may be ``None`` (interpreted as ``-inf``/``+inf``), in which
    case the projection leaves the corresponding coordinates unchanged.
    """

    projected = np.array(x, dtype=float, copy=True)
    if lb is not None:
        projected = np.maximum(projected, lb)
    if ub is not None:
        projected = np.minimum(projected, ub)
    return projected


def push_into_interior(
    x: np.ndarray, lb: np.ndarray, ub: np.ndarray, push: float = 1e-2
) -> np.ndarray:
    """
    Move points lying on a bound slightly into the interior of the box.

    Interior-point methods and functions such as ``log`` behave badly on the
    boundary. Each coordinate is kept at least ``push * max(1, |bound|)``
    away from a finite bound, and never more than half the box width.
    Fixed coordinates (``lb == ub``) are left alone.
    """

    pushed = project_box(x, lb, ub)
    width = ub - lb
    for j in range(pushed.shape[0]):
        if not width[j] > 0.0:
            continue
        if np.isfinite(lb[j]):
            margin = push * max(1.0, abs(lb[j]))
            if np.isfinite(width[j]):
                margin = min(margin, 0.5 * width[j])
            pushed[j] = max(pushed[j], lb[j] + margin)
        if np.isfinite(ub[j]):
            margin = push * max(1.0, abs(ub[j]))
            if np.isfinite(width[j]):
                margin = min(margin, 0.5 * width[j])
            pushed[j] = min(pushed[j], ub[j] - margin)
    return pushed


def bound_violation(
    values: np.ndarray, lower: np.ndarray, upper: np.ndarray
) -> float:
    """Largest amount by which ``values`` leave ``[lower, upper]`` (0 if inside)."""

    if values.size == 0:
        return 0.0
    below = np.where(np.isfinite(lower), lower - values, 0.0)
    above = np.where(np.isfinite(upper), values - upper, 0.0)
    return float(max(0.0, np.max(below), np.max(above)))


__all__ = ["project_box", "push_into_interior", "bound_violation"]
