from __future__ import annotations

import dataclasses
import logging
import math
from collections.abc import Iterable, Mapping
from typing import Protocol

from .config import CAPPED_STATS, default_caps
from .types import PlayerStats, Weapon

logger = logging.getLogger(__name__)

REDUCTION_SUFFIX = "_reduction"

# Weapon counter type -> PlayerStats field it weakens
COUNTER_TARGETS: dict[str, str] = {
    "fire": "fire_spread_chance",
    "explosion": "explosion_chance",
    "laser": "laser_chance",
    "hint": "hint_gain_chance",
    "grace": "grace_gain_chance",
    "time": "time_gain_chance",
    "healing": "healing_chance",
}

_STAT_FIELDS = frozenset(f.name for f in dataclasses.fields(PlayerStats))


class StatModifierSource(Protocol):
    def get_stat_modifiers(self) -> dict[str, object]: ...


def get_effective_stat(accumulated: float, cap: float) -> float:
    return min(accumulated, cap)


def is_stat_capped(accumulated: float, cap: float) -> bool:
    return accumulated >= cap


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def aggregate_weapon_stats(
    weapons: Iterable[Weapon],
    base: PlayerStats | None = None,
    caps: Mapping[str, float] | None = None,
) -> PlayerStats:
    """Sum every weapon's effect fields onto ``base`` and clamp to the caps."""
    totals: dict[str, float] = dataclasses.asdict(base or PlayerStats())
    for w in weapons:
        for key, amount in w.effects.items():
            if key not in _STAT_FIELDS:
                logger.debug("Ignoring unknown weapon effect %r on %s", key, w.id)
                continue
            totals[key] += amount

    effective_caps = default_caps() if caps is None else dict(caps)
    for cap_name, stat in CAPPED_STATS.items():
        cap = effective_caps.get(cap_name)
        if cap is not None:
            totals[stat] = get_effective_stat(totals[stat], cap)
    totals["board_growth_amount"] = int(totals["board_growth_amount"])
    return PlayerStats(**totals)


def apply_enemy_stat_modifiers(
    stats: PlayerStats, enemy: StatModifierSource | None
) -> PlayerStats:
    """Weaken countered chances to a third, keeping non-zero chances alive."""
    if enemy is None:
        return stats

    changes: dict[str, float] = {}
    for key, reduction in enemy.get_stat_modifiers().items():
        if not key.endswith(REDUCTION_SUFFIX):
            continue
        stat = key[: -len(REDUCTION_SUFFIX)]
        if stat not in _STAT_FIELDS or not isinstance(reduction, (int, float)) or reduction <= 0:
            continue
        base = getattr(stats, stat)
        if base <= 0:
            continue
        changes[stat] = max(1, _round_half_up(base / 3))
    return dataclasses.replace(stats, **changes) if changes else stats
