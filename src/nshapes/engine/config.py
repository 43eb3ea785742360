from __future__ import annotations

from dataclasses import dataclass

from .types import AttributeName

ALL_ATTRIBUTES: tuple[AttributeName, ...] = ("shape", "color", "number", "shading", "background")
DEFAULT_ATTRIBUTES: tuple[AttributeName, ...] = ("shape", "color", "number", "shading")


@dataclass(frozen=True)
class GridConfig:
    columns: int = 3


@dataclass(frozen=True)
class RewardConfig:
    explosion_points: int = 1
    explosion_money: int = 1
    laser_points: int = 2
    laser_money: int = 1
    ricochet_points: int = 1
    ricochet_money: int = 1
    healing_amount: int = 1
    hint_amount: int = 1
    grace_amount: int = 1
    default_time_gain: float = 10
    default_board_growth: int = 1


@dataclass(frozen=True)
class InactivityDefaults:
    warning_lead_ms: float = 5000


@dataclass(frozen=True)
class EffectCap:
    default_cap: float
    cap_increase: float


EFFECT_CAPS: dict[str, EffectCap] = {
    "echo": EffectCap(default_cap=25, cap_increase=5),
    "laser": EffectCap(default_cap=30, cap_increase=5),
    "grace_gain": EffectCap(default_cap=30, cap_increase=5),
    "explosion": EffectCap(default_cap=40, cap_increase=10),
    "hint": EffectCap(default_cap=40, cap_increase=10),
    "time_gain": EffectCap(default_cap=40, cap_increase=10),
    "healing": EffectCap(default_cap=50, cap_increase=10),
    "fire": EffectCap(default_cap=50, cap_increase=10),
    "ricochet": EffectCap(default_cap=60, cap_increase=10),
    "board_growth": EffectCap(default_cap=60, cap_increase=10),
    "coin_gain": EffectCap(default_cap=70, cap_increase=15),
    "xp_gain": EffectCap(default_cap=100, cap_increase=0),  # no cap increase for XP
}

# PlayerStats field each cap clamps
CAPPED_STATS: dict[str, str] = {
    "echo": "echo_chance",
    "laser": "laser_chance",
    "grace_gain": "grace_gain_chance",
    "explosion": "explosion_chance",
    "hint": "hint_gain_chance",
    "time_gain": "time_gain_chance",
    "healing": "healing_chance",
    "fire": "fire_spread_chance",
    "ricochet": "ricochet_chance",
    "board_growth": "board_growth_chance",
    "coin_gain": "coin_gain_chance",
    "xp_gain": "xp_gain_chance",
}

GRID = GridConfig()
REWARDS = RewardConfig()
INACTIVITY = InactivityDefaults()


def default_caps() -> dict[str, float]:
    return {name: cap.default_cap for name, cap in EFFECT_CAPS.items()}
