"""
tracking.py
===========
Persistent per-hand state and the identity table that owns it.

A `HandTrackingState` lives exactly as long as its identity keeps showing up
in consecutive frames. `HandTable.sync` is called once per frame: it resolves
an identity for each observation, creates state for newcomers and drops state
for identities that are absent.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .config import EngineConfig
from .events import Orientation, Point, Posture
from .filters import PointFilter
from .landmarks import PALM_INDEXES, HandObservation
from .utils import distance2, mean_point

logger = logging.getLogger(__name__)


@dataclass
class HandTrackingState:
    identity: str
    handedness: str
    filters: PointFilter

    # pinch
    pinching: bool = False
    pinch_started_at: float = 0.0
    last_release_at: Optional[float] = None
    pending_double_pinch: bool = False
    completed_double: bool = False
    pinch_point: Optional[Point] = None
    last_pinch_tip: Optional[Point] = None

    # posture
    posture: Posture = Posture.NEUTRAL
    open_palm_since: Optional[float] = None
    panels_fired: bool = False
    quick_help_fired: bool = False
    thumbs_up: bool = False

    # palm motion
    last_center: Optional[Point] = None
    last_time: Optional[float] = None
    velocity_x: float = 0.0
    orientation: Orientation = field(default_factory=Orientation)

    @classmethod
    def create(cls, identity: str, handedness: str, cfg: EngineConfig) -> "HandTrackingState":
        filters = PointFilter(cfg.min_cutoff, cfg.beta, cfg.z_min_cutoff, cfg.z_beta, cfg.d_cutoff)
        return cls(identity=identity, handedness=handedness, filters=filters)


@dataclass
class TwoHandAnchor:
    distance: float
    center: Tuple[float, float]
    angle: float


def palm_center(obs: HandObservation) -> np.ndarray:
    return mean_point(obs.landmarks[[int(i) for i in PALM_INDEXES]])


class HandTable:
    """Identity-keyed table of tracking states, owned by one engine."""

    def __init__(self, cfg: EngineConfig):
        self.cfg = cfg
        self._states: Dict[str, HandTrackingState] = {}

    def __len__(self) -> int:
        return len(self._states)

    def get(self, identity: str) -> Optional[HandTrackingState]:
        return self._states.get(identity)

    def clear(self) -> None:
        self._states.clear()

    def sync(self, observations: Sequence[HandObservation]) -> List[Tuple[HandTrackingState, HandObservation]]:
        keys = self.assign(observations)
        for gone in [k for k in self._states if k not in keys]:
            logger.debug("hand %s left, dropping state", gone)
            del self._states[gone]
        pairs = []
        for key, obs in zip(keys, observations):
            state = self._states.get(key)
            if state is None:
                logger.debug("hand %s appeared (%s, conf=%.2f)", key, obs.handedness, obs.confidence)
                state = HandTrackingState.create(key, obs.handedness, self.cfg)
                self._states[key] = state
            pairs.append((state, obs))
        return pairs

    def assign(self, observations: Sequence[HandObservation]) -> List[str]:
        labels = [o.handedness for o in observations]
        if not self.cfg.bind_by_continuity and len(set(labels)) == len(labels):
            return labels

        # Greedy nearest-previous-palm matching, closest pairs first
        centers = [palm_center(o) for o in observations]
        candidates = []
        for key, state in self._states.items():
            if state.last_center is None:
                continue
            for i, c in enumerate(centers):
                d = distance2(c, state.last_center)
                if d <= self.cfg.continuity_max_distance:
                    candidates.append((d, i, key))
        candidates.sort()
        keys: List[Optional[str]] = [None] * len(observations)
        taken = set()
        for _, i, key in candidates:
            if keys[i] is None and key not in taken:
                keys[i] = key
                taken.add(key)

        for i, label in enumerate(labels):
            if keys[i] is not None:
                continue
            key, n = label, 2
            while key in taken:
                key = f"{label}-{n}"
                n += 1
            keys[i] = key
            taken.add(key)
        return keys  # type: ignore[return-value]
