"""
engine.py
=========
Per-frame orchestrator: gates and normalizes observations, syncs the hand
table, classifies each hand, arbitrates single- vs two-hand manipulation, and
aggregates global commands into one immutable `GestureBundle`.

High-level flow per `process()` call:
1) Drop low-confidence hands, keep at most `max_hands`, mirror if configured
2) Sync identities: new hands get fresh state, absent hands lose theirs
3) Classify each hand (pinch, posture, holds, thumbs-up, swipe, orientation)
4) Coordinate hands into a draw directive and a scene directive
5) Aggregate per-hand events into cooldown-limited global commands

The engine is synchronous and single-writer; do not share one between threads.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, Optional

from .aggregator import GlobalAggregator
from .config import EngineConfig
from .coordinator import CrossHandCoordinator
from .events import GestureBundle, Tool
from .gestures import classify_hand
from .landmarks import HandObservation, filter_confident
from .tracking import HandTable

logger = logging.getLogger(__name__)


class GestureEngine:
    def __init__(self, config: Optional[EngineConfig] = None, tool: Tool = Tool.DRAW):
        self.cfg = (config or EngineConfig()).validate()
        self.table = HandTable(self.cfg)
        self.coordinator = CrossHandCoordinator(self.cfg)
        self.aggregator = GlobalAggregator(self.cfg, tool)
        self.last_timestamp: Optional[float] = None

    @property
    def tool(self) -> Tool:
        return self.aggregator.tool

    def reset(self) -> None:
        self.table.clear()
        self.coordinator.reset()
        self.aggregator.reset()
        self.last_timestamp = None

    def _accept(self, observations: Iterable[HandObservation]) -> list:
        hands = filter_confident(observations, self.cfg.min_confidence)
        if len(hands) > self.cfg.max_hands:
            logger.debug("dropping %d hands over max_hands=%d", len(hands) - self.cfg.max_hands, self.cfg.max_hands)
            hands = hands[: self.cfg.max_hands]
        if self.cfg.mirror:
            hands = [h.mirrored() for h in hands]
        return hands

    def process(self, observations: Iterable[HandObservation], timestamp: float) -> GestureBundle:
        if self.last_timestamp is not None and timestamp < self.last_timestamp:
            logger.debug("timestamp went backwards (%.4f < %.4f)", timestamp, self.last_timestamp)
        self.last_timestamp = timestamp

        hands = self._accept(observations)
        pairs = self.table.sync(hands)
        tracked = [(state, classify_hand(state, obs, timestamp, self.cfg)) for state, obs in pairs]
        readings = tuple(r for _, r in tracked)

        draw, scene = self.coordinator.update(tracked)
        commands = self.aggregator.update(readings, timestamp)
        draw = replace(draw, tool=self.aggregator.tool)

        return GestureBundle(
            timestamp=timestamp,
            draw=draw,
            scene=scene,
            commands=tuple(commands),
            hands=readings,
            pinch_hands=sum(1 for r in readings if r.pinching),
        )
