"""
filters.py
==========
Low-latency smoothing utilities. Implements the One Euro filter which provides
good temporal smoothing with minimal lag by adapting cutoff based on motion.

Exported:
- OneEuroFilter: class with `filter(value, timestamp_s)` → float
- PointFilter: x/y/z bank of OneEuroFilter for one tracked point
"""

from __future__ import annotations

import math
from typing import Tuple


class LowPass:
    def __init__(self, alpha: float, init_value: float | None = None):
        self.alpha = alpha
        self.initialized = init_value is not None
        self.last = init_value if init_value is not None else 0.0

    def apply(self, value: float, alpha: float | None = None) -> float:
        a = self.alpha if alpha is None else alpha
        if not self.initialized:
            self.last = value
            self.initialized = True
        self.last = a * value + (1.0 - a) * self.last
        return self.last


def _smoothing_factor(t_e: float, cutoff: float) -> float:
    # Same as 1 / (1 + tau / t_e) with tau = 1 / (2*pi*cutoff)
    r = 2 * math.pi * cutoff * t_e
    return r / (r + 1.0)


class OneEuroFilter:
    def __init__(self, min_cutoff: float = 1.0, beta: float = 0.0, d_cutoff: float = 1.0):
        if min_cutoff <= 0 or d_cutoff <= 0:
            raise ValueError("One Euro cutoffs must be positive")
        if beta < 0:
            raise ValueError("One Euro beta must not be negative")
        self.min_cutoff = float(min_cutoff)
        self.beta = float(beta)
        self.d_cutoff = float(d_cutoff)
        self.reset()

    def reset(self) -> None:
        self.x_hat = LowPass(alpha=0.0)
        self.dx_hat = LowPass(alpha=0.0)
        self.last_time: float | None = None

    @property
    def value(self) -> float | None:
        return self.x_hat.last if self.last_time is not None else None

    def filter(self, value: float, timestamp_s: float) -> float:
        if self.last_time is None:
            self.last_time = timestamp_s
            self.x_hat = LowPass(alpha=1.0, init_value=value)
            self.dx_hat = LowPass(alpha=1.0, init_value=0.0)
            return value
        dt = timestamp_s - self.last_time
        if dt <= 0:
            # duplicate or out-of-order sample: hold the last output
            return self.x_hat.last
        self.last_time = timestamp_s
        dx = (value - self.x_hat.last) / dt
        alpha_d = _smoothing_factor(dt, self.d_cutoff)
        edx = self.dx_hat.apply(dx, alpha=alpha_d)
        cutoff = self.min_cutoff + self.beta * abs(edx)
        alpha = _smoothing_factor(dt, cutoff)
        return self.x_hat.apply(value, alpha=alpha)


class PointFilter:
    """One OneEuroFilter per coordinate of a tracked landmark."""

    def __init__(
        self,
        min_cutoff: float = 1.2,
        beta: float = 0.02,
        z_min_cutoff: float = 1.4,
        z_beta: float = 0.015,
        d_cutoff: float = 1.0,
    ):
        self.x = OneEuroFilter(min_cutoff, beta, d_cutoff)
        self.y = OneEuroFilter(min_cutoff, beta, d_cutoff)
        self.z = OneEuroFilter(z_min_cutoff, z_beta, d_cutoff)

    def reset(self) -> None:
        self.x.reset()
        self.y.reset()
        self.z.reset()

    def filter(self, point, timestamp_s: float) -> Tuple[float, float, float]:
        return (
            self.x.filter(float(point[0]), timestamp_s),
            self.y.filter(float(point[1]), timestamp_s),
            self.z.filter(float(point[2]), timestamp_s),
        )
