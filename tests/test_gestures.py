from __future__ import annotations

import math

import numpy as np
import pytest

from air_hands.config import EngineConfig
from air_hands.events import HandEventKind as K, Posture
from air_hands.gestures import (
    classify_hand,
    classify_posture,
    normalized_pinch,
    pinch_strength,
    reference_scale,
)
from air_hands.landmarks import HandLandmark as L, HandObservation
from air_hands.synthetic import make_hand, skeleton
from air_hands.tracking import HandTrackingState

CFG = EngineConfig()


def _state(identity: str = "right") -> HandTrackingState:
    return HandTrackingState.create(identity, identity, CFG)


def _kinds(reading) -> list:
    return [e.kind for e in reading.events]


def test_reference_scale_tracks_hand_size() -> None:
    small = skeleton(scale=0.05)
    big = skeleton(scale=0.15)
    assert reference_scale(small) == pytest.approx(0.05)
    assert reference_scale(big) == pytest.approx(0.15)
    # normalized pinch is size independent
    a = skeleton(scale=0.05, pinch=0.2)
    b = skeleton(scale=0.15, pinch=0.2)
    assert normalized_pinch(a, reference_scale(a)) == pytest.approx(0.2)
    assert normalized_pinch(b, reference_scale(b)) == pytest.approx(0.2)


def test_pinch_start_hold_end() -> None:
    state = _state()
    r = classify_hand(state, make_hand(pinch=0.5), 0.0, CFG)
    assert not r.pinching and r.pinch_point is None and r.pinch_tip is None
    r = classify_hand(state, make_hand(pinch=0.2), 0.033, CFG)
    assert r.pinching and K.PINCH_START in _kinds(r)
    r = classify_hand(state, make_hand(pinch=0.2), 0.066, CFG)
    assert _kinds(r).count(K.PINCH_HOLD) == 1
    r = classify_hand(state, make_hand(pinch=0.4), 0.1, CFG)
    assert not r.pinching and K.PINCH_END in _kinds(r)
    assert state.pinch_point is None


def test_pinch_hysteresis_does_not_chatter() -> None:
    eps = 0.01
    state = _state()
    classify_hand(state, make_hand(pinch=0.2), 0.0, CFG)
    assert state.pinching
    t = 0.0
    for i in range(30):
        t += 0.033
        ratio = CFG.pinch_on - eps if i % 2 else CFG.pinch_off - eps
        r = classify_hand(state, make_hand(pinch=ratio), t, CFG)
        assert r.pinching
        assert K.PINCH_END not in _kinds(r)

    released = _state()
    for i in range(30):
        ratio = CFG.pinch_on + eps if i % 2 else CFG.pinch_off - eps
        r = classify_hand(released, make_hand(pinch=ratio), i * 0.033, CFG)
        assert not r.pinching


def test_pinch_strength_scales_below_on_threshold() -> None:
    assert pinch_strength(0.28, 0.28) == 0.0
    assert pinch_strength(0.0, 0.28) == 1.0
    assert pinch_strength(0.14, 0.28) == pytest.approx(0.5)
    assert pinch_strength(0.33, 0.28) == 0.0

    state = _state()
    r = classify_hand(state, make_hand(pinch=0.14), 0.0, CFG)
    assert r.pinch_strength == pytest.approx(0.5)


def test_pinch_point_is_filtered_and_reseeded() -> None:
    state = _state()
    first = make_hand(wrist=(0.5, 0.7), pinch=0.1)
    r = classify_hand(state, first, 0.0, CFG)
    # the first sample of a pinch is never lagged
    assert r.pinch_point == pytest.approx(tuple(first[L.INDEX_TIP]))

    moved = make_hand(wrist=(0.6, 0.7), pinch=0.1)
    r = classify_hand(state, moved, 0.033, CFG)
    raw_x = moved[L.INDEX_TIP][0]
    assert first[L.INDEX_TIP][0] < r.pinch_point[0] < raw_x
    assert r.pinch_tip[0] == pytest.approx(raw_x)

    classify_hand(state, make_hand(wrist=(0.6, 0.7), pinch=0.5), 0.066, CFG)
    far = make_hand(wrist=(0.2, 0.3), pinch=0.1)
    r = classify_hand(state, far, 0.1, CFG)
    assert r.pinch_point == pytest.approx(tuple(far[L.INDEX_TIP]))


def _pinch_cycles(state, starts_and_ends):
    found = []
    for start, end in starts_and_ends:
        found.append(classify_hand(state, make_hand(pinch=0.15), start, CFG))
        classify_hand(state, make_hand(pinch=0.5), end, CFG)
    return found


def test_double_pinch_fires_once_on_second_start() -> None:
    state = _state()
    classify_hand(state, make_hand(pinch=0.5), 0.0, CFG)
    starts = _pinch_cycles(state, [(0.05, 0.15), (0.25, 0.35)])
    assert K.DOUBLE_PINCH not in _kinds(starts[0])
    assert _kinds(starts[1]).count(K.DOUBLE_PINCH) == 1


def test_third_quick_pinch_needs_a_fresh_pair() -> None:
    state = _state()
    classify_hand(state, make_hand(pinch=0.5), 0.0, CFG)
    starts = _pinch_cycles(state, [(0.05, 0.1), (0.2, 0.25), (0.35, 0.4), (0.5, 0.55)])
    doubles = [K.DOUBLE_PINCH in _kinds(r) for r in starts]
    assert doubles == [False, True, False, True]


def test_isolated_or_slow_pinches_never_double() -> None:
    state = _state()
    classify_hand(state, make_hand(pinch=0.5), 0.0, CFG)
    starts = _pinch_cycles(state, [(0.05, 0.15), (1.0, 1.1)])
    assert all(K.DOUBLE_PINCH not in _kinds(r) for r in starts)

    slow = _state()
    classify_hand(slow, make_hand(pinch=0.5), 0.0, CFG)
    starts = _pinch_cycles(slow, [(0.05, 0.6), (0.7, 0.8)])
    assert all(K.DOUBLE_PINCH not in _kinds(r) for r in starts)


def test_postures_are_exclusive_with_dead_zone() -> None:
    assert classify_posture(3.0, CFG) is Posture.OPEN_PALM
    assert classify_posture(1.0, CFG) is Posture.FIST
    assert classify_posture(2.0, CFG) is Posture.NEUTRAL
    assert classify_posture(CFG.palm_open_ratio, CFG) is Posture.NEUTRAL
    assert classify_posture(CFG.fist_ratio, CFG) is Posture.NEUTRAL

    for posture, expected in (("open", Posture.OPEN_PALM), ("fist", Posture.FIST), ("neutral", Posture.NEUTRAL)):
        r = classify_hand(_state(), make_hand(posture=posture), 0.0, CFG)
        assert r.posture is expected


def test_posture_events_fire_on_entry_only() -> None:
    state = _state()
    r = classify_hand(state, make_hand(posture="fist"), 0.0, CFG)
    assert K.FIST in _kinds(r)
    r = classify_hand(state, make_hand(posture="fist"), 0.033, CFG)
    assert K.FIST not in _kinds(r)
    r = classify_hand(state, make_hand(posture="open"), 0.066, CFG)
    assert K.OPEN_PALM in _kinds(r)


def test_open_palm_holds_fire_once_per_hold() -> None:
    state = _state()
    seen = []
    for i in range(16):
        r = classify_hand(state, make_hand(posture="open"), i * 0.1, CFG)
        seen.extend((round(i * 0.1, 1), k) for k in _kinds(r))
    holds = [t for t, k in seen if k is K.OPEN_PALM_HOLD]
    long_holds = [t for t, k in seen if k is K.OPEN_PALM_LONG_HOLD]
    assert holds == [0.2]
    assert long_holds == [1.0]
    assert state.quick_help_fired


def test_open_palm_hold_restarts_after_release() -> None:
    state = _state()
    for i in range(4):
        classify_hand(state, make_hand(posture="open"), i * 0.1, CFG)
    assert state.panels_fired
    classify_hand(state, make_hand(posture="neutral"), 0.4, CFG)
    assert state.open_palm_since is None
    assert not state.panels_fired and not state.quick_help_fired
    r = classify_hand(state, make_hand(posture="open"), 0.5, CFG)
    assert state.open_palm_since == 0.5
    assert K.OPEN_PALM_HOLD not in _kinds(r)
    r = classify_hand(state, make_hand(posture="open"), 0.75, CFG)
    assert K.OPEN_PALM_HOLD in _kinds(r)


def test_thumbs_up_needs_curled_fingers_and_upright_thumb() -> None:
    state = _state()
    r = classify_hand(state, make_hand(posture="thumbs_up"), 0.0, CFG)
    assert r.thumbs_up
    assert K.THUMBS_UP in _kinds(r)
    assert r.posture is Posture.FIST

    assert not classify_hand(_state(), make_hand(posture="fist"), 0.0, CFG).thumbs_up
    assert not classify_hand(_state(), make_hand(posture="neutral"), 0.0, CFG).thumbs_up
    # same shape upside down points the thumb at the floor
    assert not classify_hand(_state(), make_hand(posture="thumbs_up", roll=math.pi), 0.0, CFG).thumbs_up


def test_swipe_with_open_palm() -> None:
    state = _state()
    classify_hand(state, make_hand(wrist=(0.5, 0.7), posture="open"), 0.0, CFG)
    r = classify_hand(state, make_hand(wrist=(0.54, 0.7), posture="open"), 0.033, CFG)
    assert r.velocity_x == pytest.approx(0.04 / 0.033)
    swipes = [e for e in r.events if e.kind is K.SWIPE]
    assert len(swipes) == 1 and swipes[0].direction == 1

    r = classify_hand(state, make_hand(wrist=(0.49, 0.7), posture="open"), 0.066, CFG)
    assert [e.direction for e in r.events if e.kind is K.SWIPE] == [-1]


def test_slow_or_closed_motion_is_not_a_swipe() -> None:
    state = _state()
    classify_hand(state, make_hand(wrist=(0.5, 0.7), posture="open"), 0.0, CFG)
    r = classify_hand(state, make_hand(wrist=(0.51, 0.7), posture="open"), 0.033, CFG)
    assert K.SWIPE not in _kinds(r)

    closed = _state()
    classify_hand(closed, make_hand(wrist=(0.5, 0.7)), 0.0, CFG)
    r = classify_hand(closed, make_hand(wrist=(0.6, 0.7)), 0.033, CFG)
    assert K.SWIPE not in _kinds(r)


def test_duplicate_timestamp_keeps_velocity() -> None:
    state = _state()
    classify_hand(state, make_hand(wrist=(0.5, 0.7), posture="open"), 0.0, CFG)
    classify_hand(state, make_hand(wrist=(0.54, 0.7), posture="open"), 0.033, CFG)
    v = state.velocity_x
    r = classify_hand(state, make_hand(wrist=(0.9, 0.7), posture="open"), 0.033, CFG)
    assert r.velocity_x == v
    assert K.SWIPE not in _kinds(r)
    assert state.last_center[0] == pytest.approx(r.palm_center[0] - 0.36)


def test_orientation_roll_follows_hand_tilt() -> None:
    r = classify_hand(_state(), make_hand(roll=0.4), 0.0, CFG)
    assert r.orientation.roll == pytest.approx(0.4)
    assert r.orientation.pitch == pytest.approx(0.0)
    assert r.orientation.yaw == pytest.approx(0.0)


def test_collapsed_skeleton_does_not_raise() -> None:
    state = _state()
    classify_hand(state, make_hand(roll=0.3), 0.0, CFG)
    flat = HandObservation(np.full((21, 3), 0.5), "right")
    r = classify_hand(state, flat, 0.033, CFG)
    assert r.reference_scale == CFG.fallback_reference_scale
    assert r.orientation.roll == pytest.approx(0.3)
