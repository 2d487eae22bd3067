"""
demo.py
=======
Scripted demo: replays synthetic hand sequences through `GestureEngine` and
logs what comes out, so thresholds can be tried without a camera.

High-level flow:
1) Parse CLI args into an `EngineConfig`
2) Build the requested scenario(s) as lists of per-frame observations
3) Feed each frame with its timestamp and log draw/scene/command output
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from .config import config_from_args, parse_args
from .engine import GestureEngine
from .events import GestureBundle
from .landmarks import HandObservation
from .synthetic import make_hand

logger = logging.getLogger(__name__)

Frame = List[HandObservation]


def draw_scenario() -> Iterator[Frame]:
    yield [make_hand(pinch=0.5)]
    for i in range(12):
        yield [make_hand(wrist=(0.4 + 0.01 * i, 0.7 - 0.004 * i), pinch=0.2 - 0.005 * (i % 4))]
    yield [make_hand(wrist=(0.52, 0.65), pinch=0.45)]


def zoom_scenario() -> Iterator[Frame]:
    for i in range(10):
        spread = 0.12 + 0.015 * i
        tilt = 0.01 * i
        yield [
            make_hand(wrist=(0.5 - spread, 0.7 + tilt), pinch=0.15, handedness="left"),
            make_hand(wrist=(0.5 + spread, 0.7 - tilt), pinch=0.15, handedness="right"),
        ]
    yield [make_hand(wrist=(0.65, 0.7), pinch=0.5)]


def palm_scenario() -> Iterator[Frame]:
    for _ in range(40):
        yield [make_hand(posture="open")]
    for i in range(6):
        yield [make_hand(wrist=(0.5 + 0.04 * i, 0.7), posture="open")]


def commands_scenario() -> Iterator[Frame]:
    for posture in ("neutral", "fist", "fist", "neutral", "thumbs_up", "thumbs_up", "neutral"):
        for _ in range(3):
            yield [make_hand(posture=posture)]
    for pinch in (0.5, 0.15, 0.15, 0.5, 0.5, 0.15, 0.5):
        yield [make_hand(pinch=pinch)]


SCENARIOS: Dict[str, Callable[[], Iterator[Frame]]] = {
    "draw": draw_scenario,
    "zoom": zoom_scenario,
    "palm": palm_scenario,
    "commands": commands_scenario,
}


def describe(bundle: GestureBundle) -> Optional[str]:
    parts = []
    d = bundle.draw
    if d.just_started:
        parts.append(f"stroke start {d.tool.value}")
    if d.active and d.point is not None:
        parts.append(f"draw ({d.point[0]:.3f},{d.point[1]:.3f}) p={d.pressure:.2f}")
    if d.just_ended:
        parts.append("stroke end")
    s = bundle.scene
    if s.active_hands == 1:
        parts.append(f"rotate x={s.rotation.x:+.2f} y={s.rotation.y:+.2f}")
    elif s.active_hands == 2:
        parts.append(f"scale={s.scale:.3f} pan=({s.translation.x:+.3f},{s.translation.y:+.3f}) roll={s.rotation.z:+.3f}")
    for c in bundle.commands:
        parts.append(c.kind.value + (f":{c.direction.value}" if c.direction else ""))
    return ", ".join(parts) if parts else None


def run(engine: GestureEngine, frames: Sequence[Frame], fps: float, start: float = 0.0) -> Tuple[List[GestureBundle], float]:
    bundles = []
    t = start
    for frame in frames:
        bundle = engine.process(frame, t)
        bundles.append(bundle)
        line = describe(bundle)
        if line:
            logger.info("t=%.3f %s", t, line)
        t += 1.0 / fps
    return bundles, t


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    cfg = config_from_args(args)
    if args.fps <= 0:
        raise SystemExit("--fps must be positive")

    names = list(SCENARIOS) if args.scenario == "all" else [args.scenario]
    t = 0.0
    for name in names:
        logger.info("--- scenario %s ---", name)
        engine = GestureEngine(cfg)
        _, t = run(engine, list(SCENARIOS[name]()), args.fps, t)
