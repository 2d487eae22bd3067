"""
events.py
=========
Closed set of event kinds and the immutable per-frame output bundle.

Per-hand events (`HandEvent`) come out of the single-hand classifier; global
commands (`Command`) come out of the aggregator. Both are small tagged values
over an Enum so consumers can match on `kind` instead of string tags.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple, Optional, Tuple

Point = Tuple[float, float, float]


class Posture(Enum):
    NEUTRAL = "neutral"
    OPEN_PALM = "open_palm"
    FIST = "fist"


class Tool(Enum):
    DRAW = "draw"
    ERASE = "erase"

    def toggled(self) -> "Tool":
        return Tool.ERASE if self is Tool.DRAW else Tool.DRAW


class Direction(Enum):
    NEXT = "next"
    PREV = "prev"


class HandEventKind(Enum):
    PINCH_START = "pinch-start"
    PINCH_HOLD = "pinch-hold"
    PINCH_END = "pinch-end"
    DOUBLE_PINCH = "double-pinch"
    OPEN_PALM = "open-palm"
    OPEN_PALM_HOLD = "open-palm-hold"
    OPEN_PALM_LONG_HOLD = "open-palm-long-hold"
    FIST = "fist"
    THUMBS_UP = "thumbs-up"
    SWIPE = "swipe"


class CommandKind(Enum):
    TOGGLE_PANELS = "toggle-panels"
    PAUSE_TOGGLE = "pause-toggle"
    SCREENSHOT = "screenshot"
    QUICK_HELP = "quick-help"
    CYCLE_SHAPE = "cycle-shape"
    TOGGLE_TOOL = "toggle-tool"


@dataclass(frozen=True)
class HandEvent:
    kind: HandEventKind
    # swipe only: +1 right, -1 left
    direction: int = 0


@dataclass(frozen=True)
class Command:
    kind: CommandKind
    # cycle-shape only
    direction: Optional[Direction] = None


class Orientation(NamedTuple):
    roll: float = 0.0
    pitch: float = 0.0
    yaw: float = 0.0


class Vec3(NamedTuple):
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


class Vec2(NamedTuple):
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class HandReading:
    """Everything the classifier derived for one hand on one frame."""

    identity: str
    handedness: str
    pinching: bool = False
    pinch_ratio: float = 0.0
    pinch_strength: float = 0.0
    pinch_point: Optional[Point] = None  # filtered index tip, only while pinching
    pinch_tip: Optional[Point] = None  # raw index tip, only while pinching
    posture: Posture = Posture.NEUTRAL
    thumbs_up: bool = False
    palm_center: Point = (0.0, 0.0, 0.0)
    velocity_x: float = 0.0
    orientation: Orientation = Orientation()
    reference_scale: float = 0.0
    events: Tuple[HandEvent, ...] = ()

    def has(self, kind: HandEventKind) -> bool:
        return any(e.kind is kind for e in self.events)


@dataclass(frozen=True)
class DrawDirective:
    active: bool = False
    just_started: bool = False
    just_ended: bool = False
    point: Optional[Point] = None
    pressure: float = 0.0
    tool: Tool = Tool.DRAW
    hand: Optional[str] = None


@dataclass(frozen=True)
class SceneDirective:
    rotation: Vec3 = Vec3()
    scale: float = 1.0
    translation: Vec2 = Vec2()
    active_hands: int = 0


@dataclass(frozen=True)
class GestureBundle:
    timestamp: float = 0.0
    draw: DrawDirective = field(default_factory=DrawDirective)
    scene: SceneDirective = field(default_factory=SceneDirective)
    commands: Tuple[Command, ...] = ()
    hands: Tuple[HandReading, ...] = ()
    pinch_hands: int = 0

    def has_command(self, kind: CommandKind) -> bool:
        return any(c.kind is kind for c in self.commands)
