"""
gestures.py
===========
Single-hand gesture state machines: hysteresis pinch with strength and
double-pinch, open palm / fist postures with hold timers, thumbs-up, lateral
swipe, and a rough orientation estimate.

This module is pure logic. It takes one hand's landmarks and the frame time,
mutates that hand's `HandTrackingState` and returns a `HandReading` with the
events that hand produced this frame.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional

import numpy as np

from .config import EngineConfig
from .events import HandEvent, HandEventKind, HandReading, Orientation, Posture
from .landmarks import REFERENCE_MCPS, TIP_INDEXES, HandLandmark as L, HandObservation
from .tracking import HandTrackingState, palm_center
from .utils import EPS, angle_between, as_point, clamp, distance2

logger = logging.getLogger(__name__)

UP = np.array([0.0, -1.0, 0.0])


def reference_scale(lm: np.ndarray, fallback: float = 0.15) -> float:
    wrist = lm[L.WRIST]
    span = sum(distance2(wrist, lm[i]) for i in REFERENCE_MCPS) / len(REFERENCE_MCPS)
    return span if span > EPS else fallback


def normalized_pinch(lm: np.ndarray, scale: float) -> float:
    return distance2(lm[L.THUMB_TIP], lm[L.INDEX_TIP]) / scale


def pinch_strength(ratio: float, pinch_on: float) -> float:
    """0 right at the ON threshold, 1 with thumb and index touching."""
    return clamp(1.0 - ratio / pinch_on, 0.0, 1.0)


def tip_spread(lm: np.ndarray, scale: float, tips=TIP_INDEXES) -> float:
    wrist = lm[L.WRIST]
    return sum(distance2(lm[i], wrist) for i in tips) / (len(tips) * scale)


def classify_posture(spread: float, cfg: EngineConfig) -> Posture:
    if spread > cfg.palm_open_ratio:
        return Posture.OPEN_PALM
    if spread < cfg.fist_ratio:
        return Posture.FIST
    return Posture.NEUTRAL


def is_thumbs_up(lm: np.ndarray, scale: float, cfg: EngineConfig) -> bool:
    fingers = tip_spread(lm, scale, TIP_INDEXES[1:])
    if fingers >= cfg.fist_ratio:
        return False
    angle = angle_between(lm[L.THUMB_TIP] - lm[L.THUMB_MCP], UP)
    return angle is not None and angle < cfg.thumbs_up_angle


def estimate_orientation(lm: np.ndarray, previous: Orientation) -> Orientation:
    """Rough (roll, pitch, yaw) in radians, zero for an upright hand facing the camera.

    Only good enough as a coarse signal; z from the detector is relative depth.
    """
    up = lm[L.MIDDLE_MCP] - lm[L.WRIST]
    across = lm[L.PINKY_MCP] - lm[L.INDEX_MCP]
    up_len = math.hypot(up[0], up[1])
    across_len = math.hypot(across[0], across[1])
    if up_len < EPS or across_len < EPS:
        return previous
    roll = math.atan2(up[0], -up[1])
    pitch = math.atan2(-up[2], up_len)
    yaw = math.atan2(across[2], across_len)
    return Orientation(roll, pitch, yaw)


def update_pinch(state: HandTrackingState, now: float, ratio: float, lm: np.ndarray, cfg: EngineConfig, events: List[HandEvent]) -> None:
    if state.pinching:
        if ratio > cfg.pinch_off:
            state.pinching = False
            duration = now - state.pinch_started_at
            # the pinch that completed a double cannot open another one
            state.pending_double_pinch = duration < cfg.double_pinch_window_s and not state.completed_double
            state.completed_double = False
            state.last_release_at = now
            state.pinch_point = None
            state.last_pinch_tip = None
            events.append(HandEvent(HandEventKind.PINCH_END))
            logger.debug("hand %s pinch end after %.3fs", state.identity, duration)
        else:
            events.append(HandEvent(HandEventKind.PINCH_HOLD))
    elif ratio < cfg.pinch_on:
        state.pinching = True
        state.pinch_started_at = now
        state.last_pinch_tip = None
        state.filters.reset()
        events.append(HandEvent(HandEventKind.PINCH_START))
        logger.debug("hand %s pinch start (ratio %.3f)", state.identity, ratio)
        if state.pending_double_pinch and state.last_release_at is not None \
                and now - state.last_release_at < cfg.double_pinch_window_s:
            events.append(HandEvent(HandEventKind.DOUBLE_PINCH))
            state.completed_double = True
            logger.debug("hand %s double pinch", state.identity)
        state.pending_double_pinch = False

    if state.pinching:
        state.pinch_point = state.filters.filter(lm[L.INDEX_TIP], now)


def update_posture(state: HandTrackingState, now: float, posture: Posture, thumbs_up: bool, cfg: EngineConfig, events: List[HandEvent]) -> None:
    if posture is not state.posture:
        if posture is Posture.OPEN_PALM:
            events.append(HandEvent(HandEventKind.OPEN_PALM))
        elif posture is Posture.FIST:
            events.append(HandEvent(HandEventKind.FIST))
        logger.debug("hand %s posture %s -> %s", state.identity, state.posture.value, posture.value)
        state.posture = posture

    if thumbs_up and not state.thumbs_up:
        events.append(HandEvent(HandEventKind.THUMBS_UP))
    state.thumbs_up = thumbs_up

    if posture is not Posture.OPEN_PALM:
        state.open_palm_since = None
        state.panels_fired = False
        state.quick_help_fired = False
        return
    if state.open_palm_since is None:
        state.open_palm_since = now
    held = now - state.open_palm_since
    if not state.panels_fired and held >= cfg.panel_hold_s:
        state.panels_fired = True
        events.append(HandEvent(HandEventKind.OPEN_PALM_HOLD))
    if not state.quick_help_fired and held >= cfg.help_hold_s:
        state.quick_help_fired = True
        events.append(HandEvent(HandEventKind.OPEN_PALM_LONG_HOLD))


def update_swipe(state: HandTrackingState, now: float, center: np.ndarray, cfg: EngineConfig, events: List[HandEvent]) -> None:
    measured = False
    if state.last_center is not None and state.last_time is not None:
        dt = now - state.last_time
        if dt <= 0:
            return
        state.velocity_x = (float(center[0]) - state.last_center[0]) / dt
        measured = True
    state.last_center = as_point(center)
    state.last_time = now
    if measured and state.posture is Posture.OPEN_PALM and abs(state.velocity_x) > cfg.swipe_velocity:
        events.append(HandEvent(HandEventKind.SWIPE, 1 if state.velocity_x > 0 else -1))


def classify_hand(state: HandTrackingState, obs: HandObservation, now: float, cfg: EngineConfig) -> HandReading:
    lm = obs.landmarks
    events: List[HandEvent] = []
    scale = reference_scale(lm, cfg.fallback_reference_scale)

    ratio = normalized_pinch(lm, scale)
    update_pinch(state, now, ratio, lm, cfg, events)

    posture = classify_posture(tip_spread(lm, scale), cfg)
    update_posture(state, now, posture, is_thumbs_up(lm, scale, cfg), cfg, events)

    center = palm_center(obs)
    update_swipe(state, now, center, cfg, events)

    state.orientation = estimate_orientation(lm, state.orientation)

    tip: Optional[tuple] = as_point(lm[L.INDEX_TIP]) if state.pinching else None
    return HandReading(
        identity=state.identity,
        handedness=obs.handedness,
        pinching=state.pinching,
        pinch_ratio=ratio,
        pinch_strength=pinch_strength(ratio, cfg.pinch_on) if state.pinching else 0.0,
        pinch_point=state.pinch_point,
        pinch_tip=tip,
        posture=state.posture,
        thumbs_up=state.thumbs_up,
        palm_center=as_point(center),
        velocity_x=state.velocity_x,
        orientation=state.orientation,
        reference_scale=scale,
        events=tuple(events),
    )
