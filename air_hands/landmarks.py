"""
landmarks.py
============
Hand skeleton layout and the per-frame observation handed to the engine.

A skeleton is 21 normalized points in MediaPipe order. Observations are
read-only snapshots owned by the caller; `observations_from_mediapipe` adapts
a MediaPipe Hands result without importing mediapipe itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, List

import numpy as np

NUM_LANDMARKS = 21


class HandLandmark(IntEnum):
    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_MCP = 5
    INDEX_PIP = 6
    INDEX_DIP = 7
    INDEX_TIP = 8
    MIDDLE_MCP = 9
    MIDDLE_PIP = 10
    MIDDLE_DIP = 11
    MIDDLE_TIP = 12
    RING_MCP = 13
    RING_PIP = 14
    RING_DIP = 15
    RING_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


TIP_INDEXES = (
    HandLandmark.THUMB_TIP,
    HandLandmark.INDEX_TIP,
    HandLandmark.MIDDLE_TIP,
    HandLandmark.RING_TIP,
    HandLandmark.PINKY_TIP,
)
REFERENCE_MCPS = (HandLandmark.INDEX_MCP, HandLandmark.MIDDLE_MCP, HandLandmark.RING_MCP)
PALM_INDEXES = (
    HandLandmark.WRIST,
    HandLandmark.INDEX_MCP,
    HandLandmark.MIDDLE_MCP,
    HandLandmark.RING_MCP,
    HandLandmark.PINKY_MCP,
)


def landmarks_to_array(landmarks) -> np.ndarray:
    """Accept an (N, 2|3) array-like or objects with .x/.y[/.z]; return (21, 3) floats."""
    if isinstance(landmarks, np.ndarray):
        arr = np.array(landmarks, dtype=float)
    else:
        rows = []
        for lm in landmarks:
            if hasattr(lm, "x"):
                rows.append((lm.x, lm.y, getattr(lm, "z", 0.0) or 0.0))
            else:
                rows.append(tuple(lm))
        arr = np.asarray(rows, dtype=float)
    if arr.ndim != 2 or arr.shape[0] != NUM_LANDMARKS or arr.shape[1] not in (2, 3):
        raise ValueError(f"expected {NUM_LANDMARKS} landmarks of 2 or 3 coordinates, got shape {arr.shape}")
    if arr.shape[1] == 2:
        arr = np.hstack([arr, np.zeros((NUM_LANDMARKS, 1))])
    return arr


@dataclass(frozen=True, eq=False)
class HandObservation:
    landmarks: np.ndarray
    handedness: str = "right"
    confidence: float = 1.0

    def __post_init__(self) -> None:
        arr = landmarks_to_array(self.landmarks)
        arr.flags.writeable = False
        object.__setattr__(self, "landmarks", arr)
        object.__setattr__(self, "handedness", str(self.handedness).strip().lower())
        object.__setattr__(self, "confidence", float(self.confidence))

    def __getitem__(self, idx: int) -> np.ndarray:
        return self.landmarks[idx]

    def mirrored(self) -> "HandObservation":
        arr = self.landmarks.copy()
        arr[:, 0] = 1.0 - arr[:, 0]
        return HandObservation(arr, self.handedness, self.confidence)


def observations_from_mediapipe(result) -> List[HandObservation]:
    """Convert `mp.solutions.hands.Hands().process(...)` output into observations."""
    hands = getattr(result, "multi_hand_landmarks", None) or []
    handedness = getattr(result, "multi_handedness", None) or []
    out = []
    for i, hand_lm in enumerate(hands):
        label, score = "unknown", 1.0
        if i < len(handedness):
            cls = handedness[i].classification[0]
            label, score = cls.label, cls.score
        out.append(HandObservation(hand_lm.landmark, label, score))
    return out


def filter_confident(observations: Iterable[HandObservation], min_confidence: float) -> List[HandObservation]:
    return [o for o in observations if o.confidence >= min_confidence]
