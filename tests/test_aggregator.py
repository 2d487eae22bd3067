from __future__ import annotations

from air_hands.aggregator import Cooldowns, GlobalAggregator
from air_hands.config import EngineConfig
from air_hands.events import CommandKind as C, Direction, HandEvent, HandEventKind as K, HandReading, Tool

CFG = EngineConfig()


def _reading(*events, identity: str = "right", thumbs_up: bool = False) -> HandReading:
    evs = tuple(e if isinstance(e, HandEvent) else HandEvent(e) for e in events)
    return HandReading(identity=identity, handedness=identity, thumbs_up=thumbs_up, events=evs)


def _kinds(commands) -> list:
    return [c.kind for c in commands]


def test_cooldown_suppresses_then_allows() -> None:
    agg = GlobalAggregator(CFG)
    assert _kinds(agg.update([_reading(K.FIST)], 0.0)) == [C.PAUSE_TOGGLE]
    assert agg.update([_reading(K.FIST)], 0.5) == []
    assert _kinds(agg.update([_reading(K.FIST)], 0.5 + CFG.pause_cooldown_s)) == [C.PAUSE_TOGGLE]


def test_dropped_trigger_does_not_extend_window() -> None:
    agg = GlobalAggregator(CFG)
    agg.update([_reading(K.THUMBS_UP, thumbs_up=True)], 0.0)
    assert agg.update([_reading(K.THUMBS_UP, thumbs_up=True)], 1.4) == []
    assert _kinds(agg.update([_reading(K.THUMBS_UP, thumbs_up=True)], 1.5)) == [C.SCREENSHOT]


def test_cooldowns_are_independent_per_kind() -> None:
    agg = GlobalAggregator(CFG)
    agg.update([_reading(K.FIST)], 0.0)
    out = agg.update([_reading(K.OPEN_PALM_HOLD), _reading(K.FIST, identity="left")], 0.1)
    assert _kinds(out) == [C.TOGGLE_PANELS]
    out = agg.update([_reading(HandEvent(K.SWIPE, 1))], 0.2)
    assert out[0].kind is C.CYCLE_SHAPE and out[0].direction is Direction.NEXT


def test_same_command_from_both_hands_fires_once() -> None:
    agg = GlobalAggregator(CFG)
    out = agg.update([_reading(K.FIST, identity="left"), _reading(K.FIST, identity="right")], 0.0)
    assert _kinds(out) == [C.PAUSE_TOGGLE]


def test_fist_of_a_thumbs_up_is_not_a_pause() -> None:
    agg = GlobalAggregator(CFG)
    out = agg.update([_reading(K.FIST, K.THUMBS_UP, thumbs_up=True)], 0.0)
    assert _kinds(out) == [C.SCREENSHOT]


def test_quick_help_is_edge_triggered_without_cooldown() -> None:
    agg = GlobalAggregator(CFG)
    assert _kinds(agg.update([_reading(K.OPEN_PALM_LONG_HOLD)], 0.0)) == [C.QUICK_HELP]
    assert agg.update([_reading()], 0.05) == []
    assert _kinds(agg.update([_reading(K.OPEN_PALM_LONG_HOLD)], 0.1)) == [C.QUICK_HELP]


def test_swipe_direction_maps_to_shape_cycle() -> None:
    agg = GlobalAggregator(CFG)
    out = agg.update([_reading(HandEvent(K.SWIPE, -1))], 0.0)
    assert out[0].direction is Direction.PREV
    assert agg.update([_reading(HandEvent(K.SWIPE, 1))], 0.3) == []


def test_double_pinch_flips_tool() -> None:
    agg = GlobalAggregator(CFG)
    assert agg.tool is Tool.DRAW
    assert _kinds(agg.update([_reading(K.DOUBLE_PINCH)], 0.0)) == [C.TOGGLE_TOOL]
    assert agg.tool is Tool.ERASE
    agg.update([_reading(K.DOUBLE_PINCH)], 0.1)
    assert agg.tool is Tool.DRAW
    agg.reset()
    assert agg.tool is Tool.DRAW


def test_cooldowns_helper() -> None:
    cd = Cooldowns({C.SCREENSHOT: 1.0})
    assert cd.ready(C.SCREENSHOT, 5.0)
    assert cd.fire(C.SCREENSHOT, 5.0)
    assert not cd.fire(C.SCREENSHOT, 5.9)
    assert cd.fire(C.SCREENSHOT, 6.0)
    # kinds without a window are always ready
    assert cd.fire(C.QUICK_HELP, 0.0) and cd.fire(C.QUICK_HELP, 0.0)
