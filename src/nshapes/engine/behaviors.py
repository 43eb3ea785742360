"""Composable enemy effect behaviors.

A behavior is a record of optional hooks plus the types of its config and
private state. Hooks receive the state record of their own slot and never
see another behavior's state:

    on_round_start(board, state, config, rng) -> StartResult
    on_card_draw(card, state, config, rng) -> Card
    on_tick(delta_ms, board, state, config, rng) -> TickResult
    on_valid_match(cards, board, state, config, rng) -> MatchResult
    on_invalid_match(cards, board, state, config, rng) -> MatchResult
    get_stat_modifiers(config) -> dict
    get_ui_modifiers(state, config) -> dict
"""

from __future__ import annotations

import dataclasses
import random
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Callable

from .chance import pick, roll, sample
from .config import DEFAULT_ATTRIBUTES, INACTIVITY
from .stats import COUNTER_TARGETS, REDUCTION_SUFFIX
from .types import (
    ATTRIBUTE_VALUES,
    Card,
    CardModification,
    MatchResult,
    Penalty,
    StartResult,
    TickResult,
)

HOOK_NAMES = (
    "on_round_start",
    "on_card_draw",
    "on_tick",
    "on_valid_match",
    "on_invalid_match",
    "get_stat_modifiers",
    "get_ui_modifiers",
)

RoundStartHook = Callable[[Sequence[Card], Any, Any, random.Random], StartResult]
CardDrawHook = Callable[[Card, Any, Any, random.Random], Card]
TickHook = Callable[[float, Sequence[Card], Any, Any, random.Random], TickResult]
MatchHook = Callable[[Sequence[Card], Sequence[Card], Any, Any, random.Random], MatchResult]
StatHook = Callable[[Any], dict[str, object]]
UIHook = Callable[[Any, Any], dict[str, object]]


@dataclass
class NoState:
    pass


@dataclass(frozen=True)
class EffectBehavior:
    name: str
    config_type: type
    state_type: type = NoState
    on_round_start: RoundStartHook | None = None
    on_card_draw: CardDrawHook | None = None
    on_tick: TickHook | None = None
    on_valid_match: MatchHook | None = None
    on_invalid_match: MatchHook | None = None
    get_stat_modifiers: StatHook | None = None
    get_ui_modifiers: UIHook | None = None

    @property
    def hooks(self) -> frozenset[str]:
        return frozenset(h for h in HOOK_NAMES if getattr(self, h) is not None)

    def new_state(self) -> Any:
        return self.state_type()

    def make_config(self, raw: Mapping[str, object]) -> Any:
        return self.config_type(**raw)


def _playable(board: Sequence[Card]) -> list[Card]:
    return [c for c in board if not c.is_dud and not c.is_face_down]


# ---------------------------------------------------------------------------
# Inactivity
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InactivityConfig:
    max_ms: float
    penalty: Penalty = "damage"


@dataclass
class InactivityState:
    time_since_match: float = 0
    warned: bool = False


def _inactivity_reset(state: InactivityState) -> None:
    state.time_since_match = 0
    state.warned = False


def _inactivity_round_start(
    board: Sequence[Card], state: InactivityState, config: InactivityConfig, rng: random.Random
) -> StartResult:
    _inactivity_reset(state)
    return StartResult()


def _inactivity_match(
    cards: Sequence[Card],
    board: Sequence[Card],
    state: InactivityState,
    config: InactivityConfig,
    rng: random.Random,
) -> MatchResult:
    _inactivity_reset(state)
    return MatchResult()


def _inactivity_tick(
    delta_ms: float,
    board: Sequence[Card],
    state: InactivityState,
    config: InactivityConfig,
    rng: random.Random,
) -> TickResult:
    state.time_since_match += delta_ms

    if state.time_since_match >= config.max_ms:
        _inactivity_reset(state)
        return TickResult(
            health_delta=-1 if config.penalty == "damage" else 0,
            instant_death=config.penalty == "death",
            events=[{"type": "inactivity_penalty", "penalty": config.penalty}],
        )

    # Edge-triggered: fires once per approach to the limit
    if not state.warned and state.time_since_match >= config.max_ms - INACTIVITY.warning_lead_ms:
        state.warned = True
        seconds = int(INACTIVITY.warning_lead_ms // 1000)
        return TickResult(events=[{"type": "inactivity_warning", "seconds_remaining": seconds}])
    return TickResult()


def _inactivity_ui(state: InactivityState, config: InactivityConfig) -> dict[str, object]:
    return {
        "show_inactivity_bar": {
            "current": state.time_since_match,
            "max": config.max_ms,
            "penalty": config.penalty,
        }
    }


INACTIVITY_EFFECT = EffectBehavior(
    name="inactivity",
    config_type=InactivityConfig,
    state_type=InactivityState,
    on_round_start=_inactivity_round_start,
    on_tick=_inactivity_tick,
    on_valid_match=_inactivity_match,
    get_ui_modifiers=_inactivity_ui,
)


# ---------------------------------------------------------------------------
# Score decay
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScoreDecayConfig:
    rate_per_second: float


def _score_decay_tick(
    delta_ms: float,
    board: Sequence[Card],
    state: NoState,
    config: ScoreDecayConfig,
    rng: random.Random,
) -> TickResult:
    return TickResult(score_delta=-config.rate_per_second * delta_ms / 1000)


def _score_decay_ui(state: NoState, config: ScoreDecayConfig) -> dict[str, object]:
    return {"show_score_decay": {"rate": config.rate_per_second}}


SCORE_DECAY_EFFECT = EffectBehavior(
    name="score_decay",
    config_type=ScoreDecayConfig,
    on_tick=_score_decay_tick,
    get_ui_modifiers=_score_decay_ui,
)


# ---------------------------------------------------------------------------
# Interval timers: card removal, position shuffle, attribute change
# ---------------------------------------------------------------------------


@dataclass
class IntervalState:
    elapsed: float = 0


def _reset_interval(
    board: Sequence[Card], state: IntervalState, config: object, rng: random.Random
) -> StartResult:
    state.elapsed = 0
    return StartResult()


@dataclass(frozen=True)
class CardRemovalConfig:
    interval_ms: float
    min_board_size: int


def _card_removal_tick(
    delta_ms: float,
    board: Sequence[Card],
    state: IntervalState,
    config: CardRemovalConfig,
    rng: random.Random,
) -> TickResult:
    state.elapsed += delta_ms
    if state.elapsed < config.interval_ms or len(board) <= config.min_board_size:
        return TickResult()

    candidates = [c for c in board if not c.is_dud and not c.selected]
    if not candidates:
        return TickResult()
    state.elapsed = 0
    target = pick(rng, candidates)
    return TickResult(
        cards_to_remove=[target.id],
        events=[{"type": "card_removed", "card_id": target.id, "reason": "enemy_effect"}],
    )


CARD_REMOVAL_EFFECT = EffectBehavior(
    name="card_removal",
    config_type=CardRemovalConfig,
    state_type=IntervalState,
    on_round_start=_reset_interval,
    on_tick=_card_removal_tick,
)


@dataclass(frozen=True)
class PositionShuffleConfig:
    interval_ms: float


def _shuffle_tick(
    delta_ms: float,
    board: Sequence[Card],
    state: IntervalState,
    config: PositionShuffleConfig,
    rng: random.Random,
) -> TickResult:
    state.elapsed += delta_ms
    if state.elapsed < config.interval_ms:
        return TickResult()
    state.elapsed = 0
    return TickResult(events=[{"type": "positions_shuffled"}])


POSITION_SHUFFLE_EFFECT = EffectBehavior(
    name="position_shuffle",
    config_type=PositionShuffleConfig,
    state_type=IntervalState,
    on_round_start=_reset_interval,
    on_tick=_shuffle_tick,
)


@dataclass(frozen=True)
class AttributeChangeConfig:
    interval_ms: float
    attributes: tuple[str, ...] = DEFAULT_ATTRIBUTES

    def __post_init__(self) -> None:
        # JSON hands us a list
        object.__setattr__(self, "attributes", tuple(self.attributes))
        unknown = [a for a in self.attributes if a not in ATTRIBUTE_VALUES]
        if unknown:
            raise ValueError(f"Unknown card attributes: {unknown}")


def _attribute_change_tick(
    delta_ms: float,
    board: Sequence[Card],
    state: IntervalState,
    config: AttributeChangeConfig,
    rng: random.Random,
) -> TickResult:
    state.elapsed += delta_ms
    if state.elapsed < config.interval_ms:
        return TickResult()
    state.elapsed = 0

    candidates = _playable(board)
    if not candidates or not config.attributes:
        return TickResult()
    target = pick(rng, candidates)
    attribute = pick(rng, config.attributes)
    current = target.attribute(attribute)
    new_value = pick(rng, [v for v in ATTRIBUTE_VALUES[attribute] if v != current])
    return TickResult(
        card_modifications=[CardModification(card_id=target.id, changes={attribute: new_value})],
        events=[{"type": "attribute_changed", "card_ids": [target.id], "attribute": attribute}],
    )


ATTRIBUTE_CHANGE_EFFECT = EffectBehavior(
    name="attribute_change",
    config_type=AttributeChangeConfig,
    state_type=IntervalState,
    on_round_start=_reset_interval,
    on_tick=_attribute_change_tick,
)


# ---------------------------------------------------------------------------
# Card draw modifiers: dud, face-down
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DudCardConfig:
    chance: float


def _dud_draw(card: Card, state: NoState, config: DudCardConfig, rng: random.Random) -> Card:
    if roll(rng, config.chance):
        return dataclasses.replace(card, is_dud=True)
    return card


DUD_CARD_EFFECT = EffectBehavior(name="dud_card", config_type=DudCardConfig, on_card_draw=_dud_draw)


@dataclass(frozen=True)
class FaceDownConfig:
    chance: float
    flip_chance: float


def _face_down_draw(card: Card, state: NoState, config: FaceDownConfig, rng: random.Random) -> Card:
    if roll(rng, config.chance):
        return dataclasses.replace(card, is_face_down=True)
    return card


def _face_down_match(
    cards: Sequence[Card],
    board: Sequence[Card],
    state: NoState,
    config: FaceDownConfig,
    rng: random.Random,
) -> MatchResult:
    # Every face-down card on the board gets its own flip roll
    flipped = [c.id for c in board if c.is_face_down and roll(rng, config.flip_chance)]
    return MatchResult(
        cards_to_flip=flipped,
        events=[{"type": "card_flipped", "card_id": cid} for cid in flipped],
    )


FACE_DOWN_EFFECT = EffectBehavior(
    name="face_down",
    config_type=FaceDownConfig,
    on_card_draw=_face_down_draw,
    on_valid_match=_face_down_match,
)


# ---------------------------------------------------------------------------
# Pure modifiers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MultiplierConfig:
    multiplier: float


def _timer_speed_ui(state: NoState, config: MultiplierConfig) -> dict[str, object]:
    return {"timer_speed_multiplier": config.multiplier}


def _damage_multiplier_stats(config: MultiplierConfig) -> dict[str, object]:
    return {"damage_multiplier": config.multiplier}


def _points_multiplier_stats(config: MultiplierConfig) -> dict[str, object]:
    return {"points_multiplier": config.multiplier}


def _points_multiplier_match(
    cards: Sequence[Card],
    board: Sequence[Card],
    state: NoState,
    config: MultiplierConfig,
    rng: random.Random,
) -> MatchResult:
    return MatchResult(points_multiplier=config.multiplier)


TIMER_SPEED_EFFECT = EffectBehavior(
    name="timer_speed",
    config_type=MultiplierConfig,
    get_ui_modifiers=_timer_speed_ui,
)

DAMAGE_MULTIPLIER_EFFECT = EffectBehavior(
    name="damage_multiplier",
    config_type=MultiplierConfig,
    get_stat_modifiers=_damage_multiplier_stats,
)

POINTS_MULTIPLIER_EFFECT = EffectBehavior(
    name="points_multiplier",
    config_type=MultiplierConfig,
    on_valid_match=_points_multiplier_match,
    get_stat_modifiers=_points_multiplier_stats,
)


@dataclass(frozen=True)
class WeaponCounterConfig:
    weapon_type: str
    reduction: float


def _weapon_counter_stats(config: WeaponCounterConfig) -> dict[str, object]:
    target = COUNTER_TARGETS.get(config.weapon_type)
    if target is None:
        return {}
    return {target + REDUCTION_SUFFIX: config.reduction}


def _weapon_counter_ui(state: NoState, config: WeaponCounterConfig) -> dict[str, object]:
    return {"weapon_counters": [{"type": config.weapon_type, "reduction": config.reduction}]}


WEAPON_COUNTER_EFFECT = EffectBehavior(
    name="weapon_counter",
    config_type=WeaponCounterConfig,
    get_stat_modifiers=_weapon_counter_stats,
    get_ui_modifiers=_weapon_counter_ui,
)


@dataclass(frozen=True)
class HintDisableConfig:
    disable_auto: bool = False
    disable_manual: bool = False


def _hint_disable_ui(state: NoState, config: HintDisableConfig) -> dict[str, object]:
    return {
        "disable_auto_hint": config.disable_auto,
        "disable_manual_hint": config.disable_manual,
    }


HINT_DISABLE_EFFECT = EffectBehavior(
    name="hint_disable",
    config_type=HintDisableConfig,
    get_ui_modifiers=_hint_disable_ui,
)


# ---------------------------------------------------------------------------
# Match-triggered penalties
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TimeStealConfig:
    amount: float


def _time_steal_match(
    cards: Sequence[Card],
    board: Sequence[Card],
    state: NoState,
    config: TimeStealConfig,
    rng: random.Random,
) -> MatchResult:
    amount = abs(config.amount)
    return MatchResult(time_delta=-amount, events=[{"type": "time_stolen", "amount": amount}])


TIME_STEAL_EFFECT = EffectBehavior(
    name="time_steal",
    config_type=TimeStealConfig,
    on_valid_match=_time_steal_match,
)


@dataclass(frozen=True)
class ExtraRemovalConfig:
    count: int
    min_board_size: int


def _remove_extra(
    cards: Sequence[Card],
    board: Sequence[Card],
    config: ExtraRemovalConfig,
    rng: random.Random,
    reason: str,
) -> MatchResult:
    budget = min(config.count, max(0, len(board) - config.min_board_size))
    if budget <= 0:
        return MatchResult()
    involved = {c.id for c in cards}
    candidates = [c for c in board if not c.is_dud and c.id not in involved]
    removed = sample(rng, candidates, budget)
    return MatchResult(
        cards_to_remove=[c.id for c in removed],
        events=[{"type": "card_removed", "card_id": c.id, "reason": reason} for c in removed],
    )


def _extra_removal_on_match(
    cards: Sequence[Card],
    board: Sequence[Card],
    state: NoState,
    config: ExtraRemovalConfig,
    rng: random.Random,
) -> MatchResult:
    return _remove_extra(cards, board, config, rng, "enemy_match_penalty")


def _extra_removal_on_invalid(
    cards: Sequence[Card],
    board: Sequence[Card],
    state: NoState,
    config: ExtraRemovalConfig,
    rng: random.Random,
) -> MatchResult:
    return _remove_extra(cards, board, config, rng, "enemy_invalid_penalty")


EXTRA_REMOVAL_ON_MATCH_EFFECT = EffectBehavior(
    name="extra_removal_on_match",
    config_type=ExtraRemovalConfig,
    on_valid_match=_extra_removal_on_match,
)

EXTRA_REMOVAL_ON_INVALID_EFFECT = EffectBehavior(
    name="extra_removal_on_invalid",
    config_type=ExtraRemovalConfig,
    on_invalid_match=_extra_removal_on_invalid,
)


# ---------------------------------------------------------------------------
# Bombs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BombConfig:
    bomb_chance: float
    bomb_timer_ms: int
    min_board_size: int


@dataclass
class BombState:
    timers: dict[str, float] = field(default_factory=dict)


def _bomb_draw(card: Card, state: BombState, config: BombConfig, rng: random.Random) -> Card:
    if roll(rng, config.bomb_chance):
        return dataclasses.replace(card, has_bomb=True, bomb_timer=config.bomb_timer_ms)
    return card


def _bomb_tick(
    delta_ms: float,
    board: Sequence[Card],
    state: BombState,
    config: BombConfig,
    rng: random.Random,
) -> TickResult:
    on_board = {c.id for c in board}
    for c in board:
        if c.has_bomb and c.id not in state.timers:
            state.timers[c.id] = c.bomb_timer if c.bomb_timer is not None else config.bomb_timer_ms
    for cid in [cid for cid in state.timers if cid not in on_board]:
        del state.timers[cid]

    result = TickResult()
    for cid in list(state.timers):
        state.timers[cid] -= delta_ms
        remaining = state.timers[cid]
        result.card_modifications.append(
            CardModification(card_id=cid, changes={"bomb_timer": max(0, remaining)})
        )
        if remaining <= 0 and len(board) > config.min_board_size:
            result.cards_to_remove.append(cid)
            result.events.append({"type": "bomb_exploded", "card_id": cid})
            del state.timers[cid]
    return result


def _bomb_ui(state: BombState, config: BombConfig) -> dict[str, object]:
    if not state.timers:
        return {}
    return {
        "show_bomb_cards": [
            {"card_id": cid, "time_remaining": t} for cid, t in state.timers.items()
        ]
    }


BOMB_EFFECT = EffectBehavior(
    name="bomb",
    config_type=BombConfig,
    state_type=BombState,
    on_card_draw=_bomb_draw,
    on_tick=_bomb_tick,
    get_ui_modifiers=_bomb_ui,
)


# ---------------------------------------------------------------------------
# Countdown card
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CountdownConfig:
    countdown_ms: float


@dataclass
class CountdownState:
    card_id: str | None = None
    timer: float = 0
    warned: bool = False


def _arm_countdown(
    candidates: list[Card], state: CountdownState, config: CountdownConfig, rng: random.Random
) -> list[CardModification]:
    if not candidates:
        state.card_id = None
        return []
    target = pick(rng, candidates)
    state.card_id = target.id
    state.timer = config.countdown_ms
    state.warned = False
    return [
        CardModification(
            card_id=target.id,
            changes={"has_countdown": True, "countdown_timer": config.countdown_ms},
        )
    ]


def _countdown_round_start(
    board: Sequence[Card], state: CountdownState, config: CountdownConfig, rng: random.Random
) -> StartResult:
    return StartResult(card_modifications=_arm_countdown(_playable(board), state, config, rng))


def _countdown_tick(
    delta_ms: float,
    board: Sequence[Card],
    state: CountdownState,
    config: CountdownConfig,
    rng: random.Random,
) -> TickResult:
    if state.card_id is None:
        return TickResult()

    if not any(c.id == state.card_id for c in board):
        # Countdown card left the board; pick a fresh one
        candidates = [c for c in _playable(board) if not c.has_countdown]
        return TickResult(card_modifications=_arm_countdown(candidates, state, config, rng))

    state.timer -= delta_ms
    current = state.card_id
    result = TickResult(
        card_modifications=[
            CardModification(card_id=current, changes={"countdown_timer": max(0, state.timer)})
        ]
    )

    if not state.warned and 0 < state.timer <= INACTIVITY.warning_lead_ms:
        state.warned = True
        result.events.append(
            {
                "type": "countdown_warning",
                "card_id": current,
                "seconds_remaining": int(INACTIVITY.warning_lead_ms // 1000),
            }
        )

    if state.timer <= 0:
        result.health_delta = -1
        result.events.append({"type": "countdown_expired", "card_id": current})
        result.card_modifications.append(
            CardModification(card_id=current, changes={"has_countdown": False, "countdown_timer": None})
        )
        candidates = [c for c in _playable(board) if c.id != current]
        result.card_modifications.extend(_arm_countdown(candidates, state, config, rng))
    return result


def _countdown_ui(state: CountdownState, config: CountdownConfig) -> dict[str, object]:
    if state.card_id is None:
        return {}
    return {"show_countdown_cards": [{"card_id": state.card_id, "time_remaining": state.timer}]}


COUNTDOWN_EFFECT = EffectBehavior(
    name="countdown",
    config_type=CountdownConfig,
    state_type=CountdownState,
    on_round_start=_countdown_round_start,
    on_tick=_countdown_tick,
    get_ui_modifiers=_countdown_ui,
)


# ---------------------------------------------------------------------------
# Triple-health cards
# ---------------------------------------------------------------------------

TRIPLE_HEALTH = 3


@dataclass(frozen=True)
class TripleCardConfig:
    count: int


@dataclass
class TripleCardState:
    health: dict[str, int] = field(default_factory=dict)


def _triple_round_start(
    board: Sequence[Card], state: TripleCardState, config: TripleCardConfig, rng: random.Random
) -> StartResult:
    targets = sample(rng, _playable(board), config.count)
    state.health = {c.id: TRIPLE_HEALTH for c in targets}
    return StartResult(
        card_modifications=[
            CardModification(card_id=c.id, changes={"health": TRIPLE_HEALTH}) for c in targets
        ]
    )


def _triple_match(
    cards: Sequence[Card],
    board: Sequence[Card],
    state: TripleCardState,
    config: TripleCardConfig,
    rng: random.Random,
) -> MatchResult:
    result = MatchResult()
    for c in cards:
        if c.id not in state.health:
            continue
        state.health[c.id] -= 1
        if state.health[c.id] <= 0:
            del state.health[c.id]
            result.events.append({"type": "triple_card_cleared", "card_id": c.id})
    return result


TRIPLE_CARD_EFFECT = EffectBehavior(
    name="triple_card",
    config_type=TripleCardConfig,
    state_type=TripleCardState,
    on_round_start=_triple_round_start,
    on_valid_match=_triple_match,
)


BEHAVIORS: dict[str, EffectBehavior] = {
    b.name: b
    for b in (
        INACTIVITY_EFFECT,
        SCORE_DECAY_EFFECT,
        CARD_REMOVAL_EFFECT,
        POSITION_SHUFFLE_EFFECT,
        ATTRIBUTE_CHANGE_EFFECT,
        DUD_CARD_EFFECT,
        FACE_DOWN_EFFECT,
        TIMER_SPEED_EFFECT,
        DAMAGE_MULTIPLIER_EFFECT,
        POINTS_MULTIPLIER_EFFECT,
        WEAPON_COUNTER_EFFECT,
        HINT_DISABLE_EFFECT,
        TIME_STEAL_EFFECT,
        EXTRA_REMOVAL_ON_MATCH_EFFECT,
        EXTRA_REMOVAL_ON_INVALID_EFFECT,
        BOMB_EFFECT,
        COUNTDOWN_EFFECT,
        TRIPLE_CARD_EFFECT,
    )
}
