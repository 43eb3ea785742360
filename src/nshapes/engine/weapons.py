"""Resolve every weapon roll triggered by one valid match."""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence

from .chance import roll
from .combos import validate
from .config import DEFAULT_ATTRIBUTES, REWARDS, RewardConfig
from .destruction import explosive_cards, fire_spread_cards, laser_cards, ricochet_cards
from .types import Card, PlayerStats, Weapon, WeaponEffectResult, card_ids

logger = logging.getLogger(__name__)


def _roll_bonuses(
    result: WeaponEffectResult, stats: PlayerStats, rng: random.Random, rewards: RewardConfig
) -> None:
    if stats.healing_chance > 0 and roll(rng, stats.healing_chance):
        result.bonus_healing += rewards.healing_amount
        result.notifications.append(f"+{rewards.healing_amount} HP")

    if stats.hint_gain_chance > 0 and roll(rng, stats.hint_gain_chance):
        result.bonus_hints += rewards.hint_amount
        result.notifications.append(f"+{rewards.hint_amount} Hint")

    if stats.time_gain_chance > 0 and roll(rng, stats.time_gain_chance):
        amount = stats.time_gain_amount or rewards.default_time_gain
        result.bonus_time += amount
        result.notifications.append(f"+{amount:g}s")

    if stats.grace_gain_chance > 0 and roll(rng, stats.grace_gain_chance):
        result.bonus_graces += rewards.grace_amount
        result.notifications.append(f"+{rewards.grace_amount} Grace")

    if stats.board_growth_chance > 0 and roll(rng, stats.board_growth_chance):
        amount = stats.board_growth_amount or rewards.default_board_growth
        result.board_growth += amount
        result.notifications.append(f"+{amount} Cards")


def _roll_lasers(
    board: Sequence[Card],
    matched: Sequence[Card],
    stats: PlayerStats,
    weapons: Sequence[Weapon] | None,
    blocked: set[str],
    rng: random.Random,
) -> tuple[list[Card], int]:
    hits: list[Card] = []
    seen = set(blocked)
    fired = 0

    if weapons:
        # Each laser weapon rolls on its own
        for w in weapons:
            if w.special_effect != "laser":
                continue
            chance = w.effect("laser_chance")
            if chance <= 0 or not roll(rng, chance):
                continue
            fired += 1
            logger.debug("Laser fired from weapon %s", w.id)
            for c in laser_cards(board, matched, rng):
                if c.id not in seen:
                    seen.add(c.id)
                    hits.append(c)
    elif stats.laser_chance > 0 and roll(rng, stats.laser_chance):
        fired = 1
        hits = [c for c in laser_cards(board, matched, rng) if c.id not in seen]
    return hits, fired


def _roll_destruction(
    result: WeaponEffectResult,
    board: Sequence[Card],
    matched: Sequence[Card],
    stats: PlayerStats,
    weapons: Sequence[Weapon] | None,
    rng: random.Random,
) -> None:
    if stats.explosion_chance > 0:
        result.explosive_cards = explosive_cards(board, matched, stats.explosion_chance, rng)

    # Priority: explosion, laser, fire, ricochet
    result.laser_cards, result.laser_count = _roll_lasers(
        board, matched, stats, weapons, card_ids(result.explosive_cards), rng
    )

    if stats.fire_spread_chance > 0:
        result.fire_cards = fire_spread_cards(
            board,
            matched,
            stats.fire_spread_chance,
            rng,
            excluded=[*result.explosive_cards, *result.laser_cards],
        )

    if stats.ricochet_chance > 0:
        result.ricochet_cards = ricochet_cards(
            board,
            matched,
            [*result.explosive_cards, *result.laser_cards, *result.fire_cards],
            stats.ricochet_chance,
            stats.ricochet_chain_chance,
            rng,
        )
    result.ricochet_count = len(result.ricochet_cards)


def _merge_echo(outer: WeaponEffectResult, inner: WeaponEffectResult, blocked: set[str]) -> None:
    for name in ("explosive_cards", "laser_cards", "fire_cards", "ricochet_cards"):
        target: list[Card] = getattr(outer, name)
        for c in getattr(inner, name):
            if c.id not in blocked:
                blocked.add(c.id)
                target.append(c)
    outer.ricochet_count = len(outer.ricochet_cards)
    outer.laser_count += inner.laser_count
    outer.bonus_healing += inner.bonus_healing
    outer.bonus_hints += inner.bonus_hints
    outer.bonus_time += inner.bonus_time
    outer.bonus_graces += inner.bonus_graces
    outer.board_growth += inner.board_growth
    outer.notifications.extend(inner.notifications)


def _resolve(
    board: Sequence[Card],
    matched: Sequence[Card],
    stats: PlayerStats,
    rng: random.Random,
    weapons: Sequence[Weapon] | None,
    active_attributes: Sequence[str],
    echo_sets: Sequence[Sequence[Card]],
    is_echo_match: bool,
    rewards: RewardConfig,
) -> WeaponEffectResult:
    result = WeaponEffectResult()
    _roll_bonuses(result, stats, rng, rewards)
    _roll_destruction(result, board, matched, stats, weapons, rng)

    if is_echo_match:
        return result

    blocked = result.claimed_ids() | card_ids(matched)
    for echo in echo_sets:
        ids = card_ids(echo)
        if ids & blocked:
            logger.debug("Skipping echo set %s: cards already claimed", sorted(ids))
            continue
        if not validate(echo, active_attributes).is_valid:
            logger.warning("Dropping invalid echo set %s", sorted(ids))
            continue
        blocked |= ids
        inner = _resolve(board, echo, stats, rng, weapons, active_attributes, (), True, rewards)
        _merge_echo(result, inner, blocked)
        result.auto_matched_sets.append(list(echo))
        logger.debug("Resolved echo set %s", sorted(ids))
    return result


def _award_destruction(result: WeaponEffectResult, rewards: RewardConfig) -> None:
    notes: list[str] = []

    exploded = len(result.explosive_cards)
    if exploded:
        result.bonus_points += exploded * rewards.explosion_points
        result.bonus_money += exploded * rewards.explosion_money
        notes.append(f"Explosion! +{exploded * rewards.explosion_points}")

    lasered = len(result.laser_cards)
    if result.laser_count > 0 and lasered:
        result.bonus_points += lasered * rewards.laser_points
        result.bonus_money += lasered * rewards.laser_money
        label = f"{result.laser_count}x Laser!" if result.laser_count > 1 else "Laser!"
        notes.append(f"{label} +{lasered * rewards.laser_points}")

    if result.fire_cards:
        notes.append(f"Fire! {len(result.fire_cards)} cards")

    hits = result.ricochet_count
    if hits:
        result.bonus_points += hits * rewards.ricochet_points
        result.bonus_money += hits * rewards.ricochet_money
        notes.append(f"Ricochet x{hits}!" if hits > 1 else "Ricochet!")

    result.notifications[:0] = notes


def process_weapon_effects(
    board: Sequence[Card],
    matched: Sequence[Card],
    stats: PlayerStats,
    rng: random.Random,
    weapons: Sequence[Weapon] | None = None,
    active_attributes: Sequence[str] = DEFAULT_ATTRIBUTES,
    echo_sets: Sequence[Sequence[Card]] = (),
    is_echo_match: bool = False,
    rewards: RewardConfig = REWARDS,
) -> WeaponEffectResult:
    """Combine every weapon roll for one match into a single result.

    ``echo_sets`` are bonus sets reported by the board collaborator; each is
    re-validated and resolved once with ``is_echo_match=True``. No card id
    ends up in more than one destructive list.
    """
    result = _resolve(
        board, matched, stats, rng, weapons, active_attributes, echo_sets, is_echo_match, rewards
    )
    _award_destruction(result, rewards)
    return result
