"""
config.py
=========
Centralized configuration and CLI argument parsing for AirHands.

This module defines default thresholds in `EngineConfig` and exposes
`add_args()` / `config_from_args()` so any frontend can surface them as flags.
The rest of the package reads thresholds from an `EngineConfig` instance to
avoid scattering constants across modules.

Key groups:
- Input: confidence gate, hand count, mirroring, identity binding.
- Filtering: One Euro params for the pinch point.
- Pinch: hysteresis thresholds, double-pinch window.
- Posture: open palm / fist ratios, hold timers, thumbs-up angle, swipe speed.
- Manipulation: single-hand rotation gains.
- Global commands: cooldown windows.

All durations are seconds; all distances are ratios of the hand's reference
scale (wrist to index/middle/ring knuckles).
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass, fields, replace
from typing import Optional, Sequence


@dataclass
class EngineConfig:
    # Input
    min_confidence: float = 0.5
    max_hands: int = 2
    mirror: bool = False
    bind_by_continuity: bool = False
    continuity_max_distance: float = 0.25

    # Filtering (One Euro) for the pinch point
    min_cutoff: float = 1.2
    beta: float = 0.02
    z_min_cutoff: float = 1.4
    z_beta: float = 0.015
    d_cutoff: float = 1.0

    # Pinch thresholds and timings (normalized by hand scale)
    pinch_on: float = 0.28
    pinch_off: float = 0.36
    double_pinch_window_s: float = 0.32
    fallback_reference_scale: float = 0.15

    # Posture
    palm_open_ratio: float = 2.8
    fist_ratio: float = 1.25
    panel_hold_s: float = 0.2
    help_hold_s: float = 1.0
    thumbs_up_angle: float = 0.9  # radians
    swipe_velocity: float = 0.7  # normalized units / s

    # Single-hand rotation, degrees per normalized unit
    yaw_gain: float = -220.0
    pitch_gain: float = -180.0

    # Global command cooldowns
    panels_cooldown_s: float = 0.6
    pause_cooldown_s: float = 0.8
    screenshot_cooldown_s: float = 1.5
    shape_cooldown_s: float = 0.6

    def validate(self) -> "EngineConfig":
        if self.pinch_off <= self.pinch_on:
            raise ValueError(f"pinch_off ({self.pinch_off}) must be larger than pinch_on ({self.pinch_on})")
        if self.palm_open_ratio <= self.fist_ratio:
            raise ValueError(f"palm_open_ratio ({self.palm_open_ratio}) must be larger than fist_ratio ({self.fist_ratio})")
        for name in ("min_cutoff", "z_min_cutoff", "d_cutoff", "fallback_reference_scale"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        for name in ("panels_cooldown_s", "pause_cooldown_s", "screenshot_cooldown_s", "shape_cooldown_s",
                     "double_pinch_window_s", "panel_hold_s", "help_hold_s", "beta", "z_beta"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")
        if self.max_hands < 1:
            raise ValueError("max_hands must be at least 1")
        return self


def add_args(parser: argparse.ArgumentParser, d: EngineConfig) -> None:
    # Input
    parser.add_argument("--hand_conf_min", type=float, default=d.min_confidence, help="Minimum hand confidence to accept an observation")
    parser.add_argument("--max_hands", type=int, default=d.max_hands, help="Maximum hands processed per frame")
    parser.add_argument("--mirror", action="store_true", default=d.mirror, help="Mirror landmark x before processing")
    parser.add_argument("--bind_by_continuity", action="store_true", default=d.bind_by_continuity, help="Match hands to previous palm positions instead of trusting handedness labels")

    # Filtering
    parser.add_argument("--min_cutoff", type=float, default=d.min_cutoff, help="One Euro min cutoff (lower=smoother, more lag)")
    parser.add_argument("--beta", type=float, default=d.beta, help="One Euro beta parameter (higher=snappier, less smooth)")
    parser.add_argument("--d_cutoff", type=float, default=d.d_cutoff, help="One Euro derivative cutoff")

    # Gestures core
    parser.add_argument("--pinch_on", type=float, default=d.pinch_on, help="Pinch ON threshold (ratio of hand scale)")
    parser.add_argument("--pinch_off", type=float, default=d.pinch_off, help="Pinch OFF threshold (ratio of hand scale)")
    parser.add_argument("--double_window", type=float, default=d.double_pinch_window_s, help="Double-pinch window seconds")
    parser.add_argument("--palm_open", type=float, default=d.palm_open_ratio, help="Open palm tip distance ratio")
    parser.add_argument("--fist", type=float, default=d.fist_ratio, help="Fist tip distance ratio")
    parser.add_argument("--panel_hold", type=float, default=d.panel_hold_s, help="Open palm hold before toggling panels (s)")
    parser.add_argument("--help_hold", type=float, default=d.help_hold_s, help="Open palm hold before quick help (s)")
    parser.add_argument("--swipe_velocity", type=float, default=d.swipe_velocity, help="Palm speed that counts as a swipe (units/s)")

    # Manipulation
    parser.add_argument("--yaw_gain", type=float, default=d.yaw_gain, help="Yaw degrees per unit of horizontal pinch travel")
    parser.add_argument("--pitch_gain", type=float, default=d.pitch_gain, help="Pitch degrees per unit of vertical pinch travel")


_ARG_TO_FIELD = {
    "hand_conf_min": "min_confidence",
    "double_window": "double_pinch_window_s",
    "palm_open": "palm_open_ratio",
    "fist": "fist_ratio",
    "panel_hold": "panel_hold_s",
    "help_hold": "help_hold_s",
}


def config_from_args(args: argparse.Namespace, base: Optional[EngineConfig] = None) -> EngineConfig:
    names = {f.name for f in fields(EngineConfig)}
    overrides = {}
    for key, value in vars(args).items():
        name = _ARG_TO_FIELD.get(key, key)
        if name in names:
            overrides[name] = value
    return replace(base or EngineConfig(), **overrides).validate()


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    d = EngineConfig()
    parser = argparse.ArgumentParser(description="AirHands gesture engine demo")
    add_args(parser, d)
    parser.add_argument("--scenario", choices=["all", "draw", "zoom", "palm", "commands"], default="all", help="Scripted scenario to replay")
    parser.add_argument("--fps", type=float, default=30.0, help="Synthetic frame rate")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser.parse_args(argv)
