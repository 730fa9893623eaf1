"""Small numeric helpers."""

from __future__ import annotations

F32_EPSILON = 1.1920929e-07
"""Machine epsilon of a 32-bit float, used as the comparison tolerance."""

F32_MAX = 3.4028234663852886e38
"""Largest finite 32-bit float."""


def nearly_eq(x: float, y: float) -> bool:
    """Return True if ``x`` and ``y`` differ by less than the f32 epsilon."""
    return abs(x - y) < F32_EPSILON


def nearly_zero(x: float) -> bool:
    """Return True if ``x`` is within the f32 epsilon of zero."""
    return nearly_eq(x, 0.0)