from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Literal, Union

Shape = Literal["oval", "squiggle", "diamond"]
Color = Literal["red", "green", "purple"]
Number = Literal[1, 2, 3]
Shading = Literal["solid", "striped", "open"]
Background = Literal["white", "beige", "charcoal"]

AttributeName = Literal["shape", "color", "number", "shading", "background"]

SpecialEffect = Literal["explosive", "laser", "fire", "ricochet", "echo"]

Penalty = Literal["damage", "death"]

AttributeValue = Union[str, int]

Event = dict[str, object]

ATTRIBUTE_VALUES: dict[str, tuple[AttributeValue, ...]] = {
    "shape": ("oval", "squiggle", "diamond"),
    "color": ("red", "green", "purple"),
    "number": (1, 2, 3),
    "shading": ("solid", "striped", "open"),
    "background": ("white", "beige", "charcoal"),
}


@dataclass
class Card:
    id: str
    shape: Shape
    color: Color
    number: Number
    shading: Shading
    background: Background = "white"
    selected: bool = False

    # Transient modifiers, mutated over the card's lifetime
    on_fire: bool = False
    is_face_down: bool = False
    is_dud: bool = False
    health: int = 1
    has_bomb: bool = False
    bomb_timer: int | None = None
    has_countdown: bool = False
    countdown_timer: int | None = None

    def attribute(self, name: str) -> AttributeValue:
        return getattr(self, name)


Board = list[Card]


@dataclass(frozen=True)
class Weapon:
    id: str
    name: str
    level: int
    special_effect: SpecialEffect | None
    effects: Mapping[str, float]
    description: str = ""

    def effect(self, key: str) -> float:
        return float(self.effects.get(key, 0))


@dataclass(frozen=True)
class PlayerStats:
    """Aggregate chance/amount fields. Chances are percentages (0-100)."""

    explosion_chance: float = 0
    laser_chance: float = 0
    fire_spread_chance: float = 0
    ricochet_chance: float = 0
    ricochet_chain_chance: float = 0
    healing_chance: float = 0
    hint_gain_chance: float = 0
    time_gain_chance: float = 0
    time_gain_amount: float = 0
    grace_gain_chance: float = 0
    board_growth_chance: float = 0
    board_growth_amount: int = 0
    echo_chance: float = 0
    coin_gain_chance: float = 0
    xp_gain_chance: float = 0


@dataclass(frozen=True)
class RoundStats:
    """Read-only counters handed to defeat predicates."""

    total_matches: int = 0
    current_streak: int = 0
    max_streak: int = 0
    invalid_matches: int = 0

    match_times: tuple[float, ...] = ()
    time_remaining: float = 0

    cards_remaining: int = 0
    triple_cards_cleared: int = 0
    face_down_cards_matched: int = 0
    bombs_defused: int = 0
    countdown_cards_matched: int = 0

    shapes_matched: frozenset[str] = frozenset()
    colors_matched: frozenset[str] = frozenset()
    all_different_matches: int = 0
    all_same_color_matches: int = 0
    squiggle_matches: int = 0

    graces_used: int = 0
    hints_used: int = 0
    hints_remaining: int = 0
    graces_remaining: int = 0
    damage_received: int = 0
    weapon_effects_triggered: frozenset[str] = frozenset()

    current_score: float = 0
    target_score: float = 0


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    invalid_attributes: tuple[str, ...]


@dataclass(frozen=True)
class CardModification:
    card_id: str
    changes: Mapping[str, object]


@dataclass
class StartResult:
    card_modifications: list[CardModification] = field(default_factory=list)
    events: list[Event] = field(default_factory=list)


@dataclass
class TickResult:
    score_delta: float = 0
    health_delta: int = 0
    time_delta: float = 0
    cards_to_remove: list[str] = field(default_factory=list)
    card_modifications: list[CardModification] = field(default_factory=list)
    cards_to_flip: list[str] = field(default_factory=list)
    events: list[Event] = field(default_factory=list)
    instant_death: bool = False


@dataclass
class MatchResult:
    time_delta: float = 0
    # None means "not set"; composed results always carry a number.
    points_multiplier: float | None = None
    cards_to_remove: list[str] = field(default_factory=list)
    cards_to_flip: list[str] = field(default_factory=list)
    events: list[Event] = field(default_factory=list)


@dataclass
class WeaponEffectResult:
    explosive_cards: list[Card] = field(default_factory=list)
    laser_cards: list[Card] = field(default_factory=list)
    fire_cards: list[Card] = field(default_factory=list)
    ricochet_cards: list[Card] = field(default_factory=list)
    ricochet_count: int = 0
    laser_count: int = 0
    bonus_points: int = 0
    bonus_money: int = 0
    bonus_healing: int = 0
    bonus_hints: int = 0
    bonus_time: float = 0
    bonus_graces: int = 0
    board_growth: int = 0
    notifications: list[str] = field(default_factory=list)
    auto_matched_sets: list[list[Card]] = field(default_factory=list)

    def destroyed_ids(self) -> set[str]:
        return {c.id for c in (*self.explosive_cards, *self.laser_cards, *self.ricochet_cards)}

    def claimed_ids(self) -> set[str]:
        return self.destroyed_ids() | {c.id for c in self.fire_cards}


def card_ids(cards: Sequence[Card]) -> set[str]:
    return {c.id for c in cards}
