from __future__ import annotations

from collections.abc import Sequence

from .enemies import EnemyInstance
from .types import Card, CardModification, MatchResult, TickResult, WeaponEffectResult


def _ids(cards: Sequence[Card]) -> list[str]:
    return [c.id for c in cards]


def _modification_to_dict(m: CardModification) -> dict[str, object]:
    return {"card_id": m.card_id, "changes": dict(m.changes)}


def card_to_dict(c: Card) -> dict[str, object]:
    return {
        "id": c.id,
        "shape": c.shape,
        "color": c.color,
        "number": c.number,
        "shading": c.shading,
        "background": c.background,
        "selected": c.selected,
        "on_fire": c.on_fire,
        "is_face_down": c.is_face_down,
        "is_dud": c.is_dud,
        "health": c.health,
        "has_bomb": c.has_bomb,
        "bomb_timer": c.bomb_timer,
        "has_countdown": c.has_countdown,
        "countdown_timer": c.countdown_timer,
    }


def weapon_result_to_dict(r: WeaponEffectResult) -> dict[str, object]:
    return {
        "explosive_cards": _ids(r.explosive_cards),
        "laser_cards": _ids(r.laser_cards),
        "fire_cards": _ids(r.fire_cards),
        "ricochet_cards": _ids(r.ricochet_cards),
        "ricochet_count": r.ricochet_count,
        "laser_count": r.laser_count,
        "bonus_points": r.bonus_points,
        "bonus_money": r.bonus_money,
        "bonus_healing": r.bonus_healing,
        "bonus_hints": r.bonus_hints,
        "bonus_time": r.bonus_time,
        "bonus_graces": r.bonus_graces,
        "board_growth": r.board_growth,
        "notifications": list(r.notifications),
        "auto_matched_sets": [_ids(s) for s in r.auto_matched_sets],
    }


def tick_result_to_dict(r: TickResult) -> dict[str, object]:
    return {
        "score_delta": r.score_delta,
        "health_delta": r.health_delta,
        "time_delta": r.time_delta,
        "cards_to_remove": list(r.cards_to_remove),
        "card_modifications": [_modification_to_dict(m) for m in r.card_modifications],
        "cards_to_flip": list(r.cards_to_flip),
        "events": [dict(e) for e in r.events],
        "instant_death": r.instant_death,
    }


def match_result_to_dict(r: MatchResult) -> dict[str, object]:
    return {
        "time_delta": r.time_delta,
        "points_multiplier": r.points_multiplier,
        "cards_to_remove": list(r.cards_to_remove),
        "cards_to_flip": list(r.cards_to_flip),
        "events": [dict(e) for e in r.events],
    }


def enemy_snapshot(enemy: EnemyInstance) -> dict[str, object]:
    """Return a JSON-serializable view of an enemy and its current modifiers."""
    return {
        "name": enemy.name,
        "tier": enemy.tier,
        "description": enemy.description,
        "defeat_condition_text": enemy.defeat_condition_text,
        "effects": [s.behavior.name for s in enemy.slots],
        "ui_modifiers": enemy.get_ui_modifiers(),
        "stat_modifiers": enemy.get_stat_modifiers(),
    }
