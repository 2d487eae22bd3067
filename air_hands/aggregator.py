"""
aggregator.py
=============
Turns per-hand events into global commands, each kind rate-limited by its own
cooldown window. A trigger that lands inside the window is dropped, never
queued. Also owns the current drawing tool, flipped by a double pinch.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from .config import EngineConfig
from .events import Command, CommandKind, Direction, HandEventKind, HandReading, Tool

logger = logging.getLogger(__name__)


class Cooldowns:
    """Last firing time per command kind."""

    def __init__(self, windows: Dict[CommandKind, float]):
        self.windows = windows
        self.last: Dict[CommandKind, float] = {}

    def ready(self, kind: CommandKind, now: float) -> bool:
        last = self.last.get(kind)
        return last is None or now - last >= self.windows.get(kind, 0.0)

    def fire(self, kind: CommandKind, now: float) -> bool:
        if not self.ready(kind, now):
            logger.debug("%s suppressed by cooldown", kind.value)
            return False
        self.last[kind] = now
        return True

    def reset(self) -> None:
        self.last.clear()


class GlobalAggregator:
    def __init__(self, cfg: EngineConfig, tool: Tool = Tool.DRAW):
        self.cfg = cfg
        self.initial_tool = tool
        self.tool = tool
        self.cooldowns = Cooldowns({
            CommandKind.TOGGLE_PANELS: cfg.panels_cooldown_s,
            CommandKind.PAUSE_TOGGLE: cfg.pause_cooldown_s,
            CommandKind.SCREENSHOT: cfg.screenshot_cooldown_s,
            CommandKind.CYCLE_SHAPE: cfg.shape_cooldown_s,
        })

    def reset(self) -> None:
        self.cooldowns.reset()
        self.tool = self.initial_tool

    def update(self, readings: Sequence[HandReading], now: float) -> List[Command]:
        commands: List[Command] = []
        emitted = set()

        def emit(kind: CommandKind, direction: Optional[Direction] = None) -> None:
            if kind in emitted or not self.cooldowns.fire(kind, now):
                return
            emitted.add(kind)
            commands.append(Command(kind, direction))
            logger.info("command %s%s", kind.value, f" ({direction.value})" if direction else "")

        for r in readings:
            for event in r.events:
                kind = event.kind
                if kind is HandEventKind.DOUBLE_PINCH and CommandKind.TOGGLE_TOOL not in emitted:
                    self.tool = self.tool.toggled()
                    emit(CommandKind.TOGGLE_TOOL)
                elif kind is HandEventKind.OPEN_PALM_HOLD:
                    emit(CommandKind.TOGGLE_PANELS)
                elif kind is HandEventKind.OPEN_PALM_LONG_HOLD:
                    emit(CommandKind.QUICK_HELP)
                elif kind is HandEventKind.FIST and not r.thumbs_up:
                    emit(CommandKind.PAUSE_TOGGLE)
                elif kind is HandEventKind.THUMBS_UP:
                    emit(CommandKind.SCREENSHOT)
                elif kind is HandEventKind.SWIPE:
                    emit(CommandKind.CYCLE_SHAPE, Direction.NEXT if event.direction > 0 else Direction.PREV)
        return commands
