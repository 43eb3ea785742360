"""Deterministic, headless rules core for NShapes.

IMPORTANT: This package must never import a UI toolkit.
"""

from .combos import validate
from .enemies import EnemyInstance, EnemyRegistry, UnknownEnemyError, compose_effects
from .types import Card, PlayerStats, RoundStats, Weapon, WeaponEffectResult
from .weapons import process_weapon_effects

__all__ = [
    "Card",
    "EnemyInstance",
    "EnemyRegistry",
    "PlayerStats",
    "RoundStats",
    "UnknownEnemyError",
    "Weapon",
    "WeaponEffectResult",
    "compose_effects",
    "process_weapon_effects",
    "validate",
]
