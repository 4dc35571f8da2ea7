"""Angle utilities shared across natalengine modules."""

from __future__ import annotations

import math

__all__ = [
    "norm360",
    "separation",
]


def norm360(x: float) -> float:
    """Normalize angle to [0, 360)."""

    y = math.fmod(x, 360.0)
    if y < 0:
        y += 360.0
    # -1e-17 + 360.0 rounds to exactly 360.0
    return 0.0 if y >= 360.0 else y


def separation(a: float, b: float) -> float:
    """Return the shortest-arc separation between ``a`` and ``b`` in [0, 180]."""

    angle = abs(norm360(a) - norm360(b))
    if angle > 180.0:
        angle = 360.0 - angle
    return angle
