"""
synthetic.py
============
Builds plausible 21-point skeletons for scripted demos and tests, no camera
needed.

Hands are laid out in a local frame where the wrist is the origin, "up" is
-y (image convention) and the index/middle/ring knuckles sit exactly one unit
from the wrist, so the reference scale equals `scale` and a requested pinch
ratio comes out exact.
"""

from __future__ import annotations

import math
from typing import Optional, Tuple

import numpy as np

from .landmarks import NUM_LANDMARKS, HandLandmark as L, HandObservation

POSTURES = ("neutral", "open", "fist", "thumbs_up")

# (knuckle angle from straight up, knuckle radius) per finger
_FINGERS = {
    "index": (-0.3, 1.0, L.INDEX_MCP),
    "middle": (0.0, 1.0, L.MIDDLE_MCP),
    "ring": (0.3, 1.0, L.RING_MCP),
    "pinky": (0.55, 0.9, L.PINKY_MCP),
}
_TIP_RADIUS = {"neutral": 2.0, "open": 3.2, "fist": 0.9, "thumbs_up": 0.9}
_THUMB = {
    # (mcp, tip)
    "neutral": ((-0.55, -0.45), (-1.2, -0.9)),
    "open": ((-0.55, -0.45), (-1.9, -1.1)),
    "fist": ((-0.55, -0.45), (0.1, -0.6)),
    "thumbs_up": ((-0.5, -0.3), (-0.5, -1.8)),
}
_THUMB_CMC = (-0.35, -0.2)


def _direction(theta: float) -> np.ndarray:
    return np.array([math.sin(theta), -math.cos(theta)])


def local_skeleton(posture: str = "neutral", pinch: Optional[float] = None) -> np.ndarray:
    """(21, 2) right-hand skeleton in hand units."""
    if posture not in POSTURES:
        raise ValueError(f"unknown posture {posture!r}, expected one of {POSTURES}")
    pts = np.zeros((NUM_LANDMARKS, 2))
    tip_r = _TIP_RADIUS[posture]
    for theta, mcp_r, mcp_idx in _FINGERS.values():
        d = _direction(theta)
        for k, r in enumerate(np.linspace(mcp_r, tip_r, 4)):
            pts[mcp_idx + k] = d * r

    mcp, tip = (np.array(p) for p in _THUMB[posture])
    if pinch is not None:
        tip = pts[L.INDEX_TIP] + np.array([-pinch, 0.0])
    pts[L.THUMB_CMC] = _THUMB_CMC
    pts[L.THUMB_MCP] = mcp
    pts[L.THUMB_IP] = (mcp + tip) / 2.0
    pts[L.THUMB_TIP] = tip
    return pts


def skeleton(
    wrist: Tuple[float, float] = (0.5, 0.7),
    scale: float = 0.08,
    posture: str = "neutral",
    pinch: Optional[float] = None,
    roll: float = 0.0,
    handedness: str = "right",
    depth: float = 0.0,
) -> np.ndarray:
    """(21, 3) skeleton in normalized image coordinates."""
    local = local_skeleton(posture, pinch)
    if handedness.lower() == "left":
        local[:, 0] = -local[:, 0]
    c, s = math.cos(roll), math.sin(roll)
    rot = np.array([[c, -s], [s, c]])
    xy = np.asarray(wrist, dtype=float) + scale * local @ rot.T
    return np.hstack([xy, np.full((NUM_LANDMARKS, 1), depth)])


def make_hand(
    wrist: Tuple[float, float] = (0.5, 0.7),
    scale: float = 0.08,
    posture: str = "neutral",
    pinch: Optional[float] = None,
    roll: float = 0.0,
    handedness: str = "right",
    confidence: float = 1.0,
    depth: float = 0.0,
) -> HandObservation:
    return HandObservation(skeleton(wrist, scale, posture, pinch, roll, handedness, depth), handedness, confidence)
