from __future__ import annotations

import logging
import random
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Callable

from .behaviors import EffectBehavior
from .defeat import DefeatCondition, always_defeated, never_defeated
from .types import Card, MatchResult, RoundStats, StartResult, TickResult

logger = logging.getLogger(__name__)

EffectSpec = tuple[EffectBehavior, Any]
EnemyFactory = Callable[[], "EnemyInstance"]


class UnknownEnemyError(LookupError):
    def __init__(self, name: str) -> None:
        super().__init__(f"No enemy registered under {name!r}")
        self.name = name


@dataclass(frozen=True)
class EnemyMeta:
    name: str
    tier: int
    description: str = ""
    defeat_condition_text: str = ""
    icon: str | None = None


@dataclass
class EffectSlot:
    behavior: EffectBehavior
    config: Any
    state: Any


def _dedupe(ids: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for cid in ids:
        if cid not in seen:
            seen.add(cid)
            out.append(cid)
    return out


def _merge_modifiers(parts: Iterable[Mapping[str, object]]) -> dict[str, object]:
    merged: dict[str, object] = {}
    for part in parts:
        for key, value in part.items():
            existing = merged.get(key)
            if isinstance(value, list) and isinstance(existing, list):
                merged[key] = existing + value
            elif isinstance(value, list):
                merged[key] = list(value)
            else:
                merged[key] = value
    return merged


def _merge_match(results: Iterable[MatchResult]) -> MatchResult:
    out = MatchResult(points_multiplier=1.0)
    for r in results:
        out.time_delta += r.time_delta
        if r.points_multiplier is not None:
            out.points_multiplier = r.points_multiplier
        out.cards_to_remove.extend(r.cards_to_remove)
        out.cards_to_flip.extend(r.cards_to_flip)
        out.events.extend(r.events)
    out.cards_to_remove = _dedupe(out.cards_to_remove)
    out.cards_to_flip = _dedupe(out.cards_to_flip)
    return out


@dataclass
class EnemyInstance:
    """One enemy for one round: metadata plus independent effect slots.

    Every hook fans out to the slots that define it, in registration order,
    and folds the partial results together.
    """

    meta: EnemyMeta
    slots: list[EffectSlot]
    defeat_condition: DefeatCondition = never_defeated
    rng: random.Random = field(default_factory=random.Random)

    @property
    def name(self) -> str:
        return self.meta.name

    @property
    def tier(self) -> int:
        return self.meta.tier

    @property
    def description(self) -> str:
        return self.meta.description

    @property
    def defeat_condition_text(self) -> str:
        return self.meta.defeat_condition_text

    def _with(self, hook: str) -> list[EffectSlot]:
        return [s for s in self.slots if hook in s.behavior.hooks]

    def on_round_start(self, board: Sequence[Card]) -> StartResult:
        out = StartResult()
        for s in self._with("on_round_start"):
            r = s.behavior.on_round_start(board, s.state, s.config, self.rng)
            out.card_modifications.extend(r.card_modifications)
            out.events.extend(r.events)
        return out

    def on_card_draw(self, card: Card) -> Card:
        for s in self._with("on_card_draw"):
            card = s.behavior.on_card_draw(card, s.state, s.config, self.rng)
        return card

    def on_tick(self, delta_ms: float, board: Sequence[Card]) -> TickResult:
        out = TickResult()
        for s in self._with("on_tick"):
            r = s.behavior.on_tick(delta_ms, board, s.state, s.config, self.rng)
            out.score_delta += r.score_delta
            out.health_delta += r.health_delta
            out.time_delta += r.time_delta
            out.cards_to_remove.extend(r.cards_to_remove)
            out.card_modifications.extend(r.card_modifications)
            out.cards_to_flip.extend(r.cards_to_flip)
            out.events.extend(r.events)
            out.instant_death = out.instant_death or r.instant_death
        out.cards_to_remove = _dedupe(out.cards_to_remove)
        out.cards_to_flip = _dedupe(out.cards_to_flip)
        return out

    def on_valid_match(self, matched: Sequence[Card], board: Sequence[Card]) -> MatchResult:
        return _merge_match(
            s.behavior.on_valid_match(matched, board, s.state, s.config, self.rng)
            for s in self._with("on_valid_match")
        )

    def on_invalid_match(self, cards: Sequence[Card], board: Sequence[Card]) -> MatchResult:
        return _merge_match(
            s.behavior.on_invalid_match(cards, board, s.state, s.config, self.rng)
            for s in self._with("on_invalid_match")
        )

    def on_round_end(self) -> None:
        for s in self.slots:
            s.state = s.behavior.new_state()

    def get_ui_modifiers(self) -> dict[str, object]:
        return _merge_modifiers(
            s.behavior.get_ui_modifiers(s.state, s.config) for s in self._with("get_ui_modifiers")
        )

    def get_stat_modifiers(self) -> dict[str, object]:
        return _merge_modifiers(
            s.behavior.get_stat_modifiers(s.config) for s in self._with("get_stat_modifiers")
        )

    def check_defeat_condition(self, stats: RoundStats) -> bool:
        return self.defeat_condition(stats)


def compose_effects(
    meta: EnemyMeta,
    effects: Iterable[EffectSpec],
    defeat_condition: DefeatCondition | None = None,
    rng: random.Random | None = None,
) -> EnemyInstance:
    """Build an enemy from ``(behavior, config)`` pairs.

    Each pair gets its own freshly allocated state. A mapping config is
    converted with the behavior's config type.
    """
    slots: list[EffectSlot] = []
    for behavior, config in effects:
        if isinstance(config, Mapping):
            config = behavior.make_config(config)
        slots.append(EffectSlot(behavior=behavior, config=config, state=behavior.new_state()))

    logger.debug(
        "Composed enemy %s from %s", meta.name, [s.behavior.name for s in slots] or "no effects"
    )
    return EnemyInstance(
        meta=meta,
        slots=slots,
        defeat_condition=defeat_condition or never_defeated,
        rng=rng if rng is not None else random.Random(),
    )


def create_dummy_enemy() -> EnemyInstance:
    """No-op enemy used when a round has no opponent; always counts as beaten."""
    return compose_effects(
        EnemyMeta(name="Dummy", tier=0, description="No effects"),
        [],
        defeat_condition=always_defeated,
    )


class EnemyRegistry:
    """Named enemy factories. Each ``create`` builds a brand-new instance."""

    def __init__(self) -> None:
        self._factories: dict[str, EnemyFactory] = {}
        self._tiers: dict[str, int] = {}

    def register(self, name: str, factory: EnemyFactory, tier: int | None = None) -> None:
        if name in self._factories:
            logger.warning("Enemy %r registered twice; replacing the earlier factory", name)
        self._factories[name] = factory
        if tier is not None:
            self._tiers[name] = tier
        else:
            self._tiers.pop(name, None)

    def create(self, name: str) -> EnemyInstance:
        factory = self._factories.get(name)
        if factory is None:
            raise UnknownEnemyError(name)
        return factory()

    def is_registered(self, name: str) -> bool:
        return name in self._factories

    def __contains__(self, name: object) -> bool:
        return name in self._factories

    def __len__(self) -> int:
        return len(self._factories)

    def names(self) -> list[str]:
        return list(self._factories)

    def names_by_tier(self, tier: int) -> list[str]:
        return [n for n in self._factories if self._tiers.get(n) == tier]

    def random_enemies(self, tier: int, count: int, rng: random.Random) -> list[EnemyInstance]:
        """Up to ``count`` distinct enemies of ``tier``, freshly created."""
        pool = self.names_by_tier(tier)
        if count <= 0 or not pool:
            return []
        return [self.create(n) for n in rng.sample(pool, min(count, len(pool)))]
