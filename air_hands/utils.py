"""
utils.py
========
Shared math helpers over numpy landmark arrays (rows are x, y, z).
"""

from __future__ import annotations

import math
from typing import Tuple

import numpy as np

EPS = 1e-9


def clamp(value: float, lo: float, hi: float) -> float:
    return min(max(value, lo), hi)


def distance2(a, b) -> float:
    """Planar (x, y) distance; detector depth is too noisy for thresholds."""
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    return float(np.hypot(a[0] - b[0], a[1] - b[1]))


def mean_point(points: np.ndarray) -> np.ndarray:
    return np.asarray(points, dtype=float).mean(axis=0)


def angle_between(a, b) -> float | None:
    """Angle in radians between two vectors, or None if either has zero length."""
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    mag = float(np.linalg.norm(a) * np.linalg.norm(b))
    if mag < EPS:
        return None
    return math.acos(clamp(float(np.dot(a, b)) / mag, -1.0, 1.0))


def wrap_angle(angle: float) -> float:
    """Wrap to (-pi, pi]."""
    wrapped = math.atan2(math.sin(angle), math.cos(angle))
    return math.pi if wrapped == -math.pi else wrapped


def as_point(arr) -> Tuple[float, float, float]:
    return (float(arr[0]), float(arr[1]), float(arr[2]))
