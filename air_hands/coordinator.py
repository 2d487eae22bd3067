"""
coordinator.py
==============
Cross-hand arbitration between single-hand manipulation (draw stroke plus
rotate by pinch travel) and two-hand manipulation (scale / pan / roll).

Two-hand deltas are frame-to-frame: the anchor is re-seeded after every
frame, so callers accumulate `scale` multiplicatively and the rest additively.
Roll is the change in angle of the line joining the two pinch tips, with the
hands ordered by identity so the sign is stable.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence, Tuple

from .config import EngineConfig
from .events import DrawDirective, HandReading, SceneDirective, Vec2, Vec3
from .tracking import HandTrackingState, TwoHandAnchor
from .utils import EPS, wrap_angle

logger = logging.getLogger(__name__)

Tracked = Tuple[HandTrackingState, HandReading]


def anchor_from(p1, p2) -> TwoHandAnchor:
    dx, dy = p2[0] - p1[0], p2[1] - p1[1]
    return TwoHandAnchor(
        distance=math.hypot(dx, dy),
        center=((p1[0] + p2[0]) / 2.0, (p1[1] + p2[1]) / 2.0),
        angle=math.atan2(dy, dx),
    )


class CrossHandCoordinator:
    def __init__(self, cfg: EngineConfig):
        self.cfg = cfg
        self.anchor: Optional[TwoHandAnchor] = None
        self.stroke_hand: Optional[str] = None

    def reset(self) -> None:
        self.anchor = None
        self.stroke_hand = None

    def update(self, tracked: Sequence[Tracked]) -> Tuple[DrawDirective, SceneDirective]:
        pinching = [(s, r) for s, r in tracked if r.pinching]
        if len(pinching) == 2:
            return self._two_hand(tracked, pinching)
        if self.anchor is not None:
            logger.debug("two-hand manipulation ended")
        self.anchor = None
        if len(pinching) == 1:
            return self._single_hand(*pinching[0])
        return self._end_stroke(), SceneDirective()

    def _end_stroke(self) -> DrawDirective:
        if self.stroke_hand is None:
            return DrawDirective()
        logger.debug("stroke by %s ended", self.stroke_hand)
        ended, self.stroke_hand = self.stroke_hand, None
        return DrawDirective(just_ended=True, hand=ended)

    def _single_hand(self, state: HandTrackingState, reading: HandReading) -> Tuple[DrawDirective, SceneDirective]:
        just_ended = self.stroke_hand is not None and self.stroke_hand != reading.identity
        prev = state.last_pinch_tip
        tip = reading.pinch_tip
        state.last_pinch_tip = tip

        scene = SceneDirective()
        just_started = prev is None or self.stroke_hand != reading.identity
        if prev is not None and tip is not None and not just_started:
            dx = tip[0] - prev[0]
            dy = tip[1] - prev[1]
            scene = SceneDirective(rotation=Vec3(x=dy * self.cfg.pitch_gain, y=dx * self.cfg.yaw_gain), active_hands=1)
        if just_started:
            logger.debug("stroke by %s started", reading.identity)
        self.stroke_hand = reading.identity

        draw = DrawDirective(
            active=True,
            just_started=just_started,
            just_ended=just_ended,
            point=reading.pinch_point,
            pressure=reading.pinch_strength,
            hand=reading.identity,
        )
        return draw, scene

    def _two_hand(self, tracked: Sequence[Tracked], pinching: List[Tracked]) -> Tuple[DrawDirective, SceneDirective]:
        # Single-hand manipulation restarts from scratch once this ends
        for state, _ in tracked:
            state.last_pinch_tip = None
        draw = self._end_stroke()

        first, second = sorted((r for _, r in pinching), key=lambda r: r.identity)
        current = anchor_from(first.pinch_tip, second.pinch_tip)
        previous, self.anchor = self.anchor, current
        if previous is None:
            logger.debug("two-hand anchor seeded: d=%.4f angle=%.3f", current.distance, current.angle)
            return draw, SceneDirective(active_hands=2)

        scale = current.distance / previous.distance if previous.distance > EPS else 1.0
        scene = SceneDirective(
            rotation=Vec3(z=wrap_angle(current.angle - previous.angle)),
            scale=scale,
            translation=Vec2(current.center[0] - previous.center[0], current.center[1] - previous.center[1]),
            active_hands=2,
        )
        return draw, scene
