from __future__ import annotations

import logging
import random

import pytest

from nshapes.engine.behaviors import (
    CARD_REMOVAL_EFFECT,
    DUD_CARD_EFFECT,
    EXTRA_REMOVAL_ON_MATCH_EFFECT,
    INACTIVITY_EFFECT,
    POINTS_MULTIPLIER_EFFECT,
    SCORE_DECAY_EFFECT,
    TIME_STEAL_EFFECT,
    WEAPON_COUNTER_EFFECT,
    CardRemovalConfig,
    DudCardConfig,
    ExtraRemovalConfig,
    InactivityConfig,
    MultiplierConfig,
    ScoreDecayConfig,
    TimeStealConfig,
    WeaponCounterConfig,
)
from nshapes.engine.defeat import at_least
from nshapes.engine.enemies import (
    EnemyMeta,
    EnemyRegistry,
    UnknownEnemyError,
    compose_effects,
    create_dummy_enemy,
)
from nshapes.engine.types import Card, RoundStats

META = EnemyMeta(name="Test Beast", tier=1, description="test", defeat_condition_text="n/a")


def _board(n: int) -> list[Card]:
    return [Card(id=f"c{i}", shape="oval", color="red", number=1 + i % 3, shading="solid") for i in range(n)]


def test_numeric_deltas_sum() -> None:
    enemy = compose_effects(
        META,
        [(SCORE_DECAY_EFFECT, ScoreDecayConfig(5)), (SCORE_DECAY_EFFECT, ScoreDecayConfig(3))],
    )
    assert enemy.on_tick(1000, []).score_delta == -8


def test_mapping_configs_are_converted() -> None:
    enemy = compose_effects(META, [(SCORE_DECAY_EFFECT, {"rate_per_second": 2})])
    assert enemy.slots[0].config == ScoreDecayConfig(rate_per_second=2)


def test_each_slot_owns_its_state() -> None:
    enemy = compose_effects(
        META,
        [
            (INACTIVITY_EFFECT, InactivityConfig(max_ms=60000)),
            (INACTIVITY_EFFECT, InactivityConfig(max_ms=90000)),
        ],
    )
    a, b = enemy.slots
    assert a.state is not b.state
    enemy.on_tick(1000, [])
    a.state.time_since_match = 0
    assert b.state.time_since_match == 1000


def test_match_resets_inactivity_through_enemy() -> None:
    enemy = compose_effects(META, [(INACTIVITY_EFFECT, InactivityConfig(max_ms=60000))])
    enemy.on_tick(3000, [])
    enemy.on_valid_match([], [])
    assert enemy.slots[0].state.time_since_match == 0
    enemy.on_tick(3000, [])
    enemy.on_round_start([])
    assert enemy.slots[0].state.time_since_match == 0


def test_removal_lists_deduplicated_and_death_is_any() -> None:
    board = _board(3)
    cfg = CardRemovalConfig(interval_ms=100, min_board_size=0)
    enemy = compose_effects(
        META,
        [
            (CARD_REMOVAL_EFFECT, cfg),
            (CARD_REMOVAL_EFFECT, cfg),
            (CARD_REMOVAL_EFFECT, cfg),
            (INACTIVITY_EFFECT, InactivityConfig(max_ms=100, penalty="death")),
            (INACTIVITY_EFFECT, InactivityConfig(max_ms=10**6, penalty="damage")),
        ],
        rng=random.Random(4),
    )
    r = enemy.on_tick(100, board)
    assert len(r.cards_to_remove) == len(set(r.cards_to_remove))
    assert 1 <= len(r.cards_to_remove) <= 3
    assert r.instant_death is True
    assert len([e for e in r.events if e["type"] == "card_removed"]) == 3


def test_match_merge() -> None:
    board = _board(9)
    enemy = compose_effects(
        META,
        [
            (TIME_STEAL_EFFECT, TimeStealConfig(3)),
            (POINTS_MULTIPLIER_EFFECT, MultiplierConfig(2.0)),
            (TIME_STEAL_EFFECT, TimeStealConfig(4)),
            (POINTS_MULTIPLIER_EFFECT, MultiplierConfig(1.5)),
            (EXTRA_REMOVAL_ON_MATCH_EFFECT, ExtraRemovalConfig(count=1, min_board_size=6)),
        ],
        rng=random.Random(0),
    )
    r = enemy.on_valid_match(board[0:3], board)
    assert r.time_delta == -7
    assert r.points_multiplier == 1.5
    assert len(r.cards_to_remove) == 1
    assert [e["type"] for e in r.events] == ["time_stolen", "time_stolen", "card_removed"]


def test_points_multiplier_defaults_to_one() -> None:
    enemy = compose_effects(META, [(TIME_STEAL_EFFECT, TimeStealConfig(3))])
    assert enemy.on_valid_match([], []).points_multiplier == 1.0
    assert enemy.on_invalid_match([], []).points_multiplier == 1.0


def test_card_draw_chains_behaviors() -> None:
    enemy = compose_effects(META, [(DUD_CARD_EFFECT, DudCardConfig(chance=100))])
    card = _board(1)[0]
    assert enemy.on_card_draw(card).is_dud
    assert compose_effects(META, []).on_card_draw(card) is card


def test_modifier_merge_concatenates_lists() -> None:
    enemy = compose_effects(
        META,
        [
            (WEAPON_COUNTER_EFFECT, WeaponCounterConfig("fire", 35)),
            (WEAPON_COUNTER_EFFECT, WeaponCounterConfig("explosion", 35)),
        ],
    )
    ui = enemy.get_ui_modifiers()
    assert ui["weapon_counters"] == [
        {"type": "fire", "reduction": 35},
        {"type": "explosion", "reduction": 35},
    ]
    assert enemy.get_stat_modifiers() == {
        "fire_spread_chance_reduction": 35,
        "explosion_chance_reduction": 35,
    }


def test_round_end_reallocates_state() -> None:
    enemy = compose_effects(META, [(INACTIVITY_EFFECT, InactivityConfig(max_ms=60000))])
    enemy.on_tick(5000, [])
    old = enemy.slots[0].state
    enemy.on_round_end()
    assert enemy.slots[0].state is not old
    assert enemy.slots[0].state.time_since_match == 0


def test_defeat_condition() -> None:
    assert compose_effects(META, []).check_defeat_condition(RoundStats()) is False
    enemy = compose_effects(META, [], defeat_condition=at_least("max_streak", 4))
    assert not enemy.check_defeat_condition(RoundStats(max_streak=3))
    assert enemy.check_defeat_condition(RoundStats(max_streak=4))
    assert create_dummy_enemy().check_defeat_condition(RoundStats())


def _factory():
    return compose_effects(META, [(INACTIVITY_EFFECT, InactivityConfig(max_ms=60000))])


def test_registry_creates_fresh_instances() -> None:
    registry = EnemyRegistry()
    registry.register("Test Beast", _factory, tier=1)
    a = registry.create("Test Beast")
    b = registry.create("Test Beast")
    assert a is not b
    assert a.slots[0].state is not b.slots[0].state
    a.on_tick(1000, [])
    assert b.slots[0].state.time_since_match == 0
    assert "Test Beast" in registry
    assert registry.is_registered("Test Beast")
    assert registry.names() == ["Test Beast"]


def test_registry_unknown_name_fails_fast() -> None:
    registry = EnemyRegistry()
    with pytest.raises(UnknownEnemyError) as exc:
        registry.create("Nobody")
    assert exc.value.name == "Nobody"
    assert isinstance(exc.value, LookupError)


def test_registry_overwrite_warns(caplog: pytest.LogCaptureFixture) -> None:
    registry = EnemyRegistry()
    registry.register("Test Beast", _factory)
    with caplog.at_level(logging.WARNING, logger="nshapes.engine.enemies"):
        registry.register("Test Beast", create_dummy_enemy)
    assert "registered twice" in caplog.text
    assert registry.create("Test Beast").name == "Dummy"
    assert len(registry) == 1


def test_registry_tiers_and_random_pick() -> None:
    registry = EnemyRegistry()
    for name, tier in (("A", 1), ("B", 1), ("C", 2), ("D", 1)):
        registry.register(name, _factory, tier=tier)
    assert registry.names_by_tier(1) == ["A", "B", "D"]
    picked = registry.random_enemies(1, 2, random.Random(0))
    assert len(picked) == 2
    assert registry.random_enemies(3, 2, random.Random(0)) == []
    assert len(registry.random_enemies(2, 5, random.Random(0))) == 1
