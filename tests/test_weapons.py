from __future__ import annotations

import random

from nshapes.engine.types import Card, PlayerStats, Weapon
from nshapes.engine.weapons import process_weapon_effects


def _board(n: int) -> list[Card]:
    shapes = ("oval", "squiggle", "diamond")
    return [
        Card(id=f"c{i}", shape=shapes[i % 3], color="red", number=1 + (i // 3) % 3, shading="solid")
        for i in range(n)
    ]


def _trio(prefix: str, shape, color, shading) -> list[Card]:
    return [
        Card(id=f"{prefix}{n}", shape=shape, color=color, number=n, shading=shading)
        for n in (1, 2, 3)
    ]


def test_no_stats_no_effects() -> None:
    board = _board(12)
    result = process_weapon_effects(board, board[0:3], PlayerStats(), random.Random(0))
    assert result.destroyed_ids() == set()
    assert result.fire_cards == []
    assert result.notifications == []
    assert result.bonus_points == 0


def test_explosion_rewards_and_notification() -> None:
    board = _board(12)
    result = process_weapon_effects(
        board, [board[4]], PlayerStats(explosion_chance=100), random.Random(0)
    )
    assert len(result.explosive_cards) == 4
    assert result.bonus_points == 4
    assert result.bonus_money == 4
    assert result.notifications == ["Explosion! +4"]


def test_destructive_categories_are_disjoint() -> None:
    board = _board(15)
    matched = [board[6], board[7], board[8]]
    matched_ids = {c.id for c in matched}
    stats = PlayerStats(
        explosion_chance=60,
        laser_chance=60,
        fire_spread_chance=60,
        ricochet_chance=60,
        ricochet_chain_chance=60,
    )
    for seed in range(60):
        r = process_weapon_effects(board, matched, stats, random.Random(seed))
        lists = [r.explosive_cards, r.laser_cards, r.fire_cards, r.ricochet_cards]
        all_ids = [c.id for lst in lists for c in lst]
        assert len(all_ids) == len(set(all_ids))
        assert not set(all_ids) & matched_ids
        assert r.ricochet_count == len(r.ricochet_cards)


def test_each_laser_weapon_rolls_separately() -> None:
    board = _board(12)
    lasers = [
        Weapon(id="prismatic_ray_legendary", name="Prismatic Ray", level=3, special_effect="laser", effects={"laser_chance": 100}),
        Weapon(id="prismatic_ray_legendary", name="Prismatic Ray", level=3, special_effect="laser", effects={"laser_chance": 100}),
    ]
    r = process_weapon_effects(board, [board[4]], PlayerStats(), random.Random(5), weapons=lasers)
    assert r.laser_count == 2
    ids = [c.id for c in r.laser_cards]
    assert ids and len(ids) == len(set(ids))
    assert r.bonus_points == 2 * len(ids)
    assert r.notifications[0].startswith("2x Laser! +")


def test_laser_falls_back_to_stats_without_weapons() -> None:
    board = _board(12)
    r = process_weapon_effects(board, [board[4]], PlayerStats(laser_chance=100), random.Random(2))
    assert r.laser_count == 1
    assert r.notifications[0].startswith("Laser! +")


def test_non_laser_weapons_do_not_fire_lasers() -> None:
    board = _board(12)
    powder = Weapon(id="blast_powder_common", name="Blast Powder", level=1, special_effect="explosive", effects={"explosion_chance": 10})
    r = process_weapon_effects(board, [board[4]], PlayerStats(laser_chance=100), random.Random(2), weapons=[powder])
    assert r.laser_count == 0
    assert r.laser_cards == []


def test_bonus_rolls() -> None:
    board = _board(9)
    stats = PlayerStats(
        healing_chance=100,
        hint_gain_chance=100,
        time_gain_chance=100,
        grace_gain_chance=100,
        board_growth_chance=100,
        board_growth_amount=2,
    )
    r = process_weapon_effects(board, board[0:3], stats, random.Random(0))
    assert r.bonus_healing == 1
    assert r.bonus_hints == 1
    assert r.bonus_time == 10
    assert r.bonus_graces == 1
    assert r.board_growth == 2
    assert r.notifications == ["+1 HP", "+1 Hint", "+10s", "+1 Grace", "+2 Cards"]


def test_echo_set_resolves_once_and_sums_rewards() -> None:
    matched = _trio("a", "oval", "red", "solid")
    echo = _trio("b", "diamond", "green", "open")
    board = matched + echo + _board(6)
    r = process_weapon_effects(
        board, matched, PlayerStats(healing_chance=100), random.Random(0), echo_sets=[echo]
    )
    assert [[c.id for c in s] for s in r.auto_matched_sets] == [["b1", "b2", "b3"]]
    assert r.bonus_healing == 2


def test_echo_results_stay_disjoint_and_sum_rewards() -> None:
    matched = _trio("a", "oval", "red", "solid")
    echo = _trio("b", "diamond", "green", "open")
    board = matched + echo + _board(9)
    stats = PlayerStats(
        explosion_chance=60,
        laser_chance=60,
        fire_spread_chance=60,
        ricochet_chance=60,
        ricochet_chain_chance=60,
    )
    for seed in range(100):
        r = process_weapon_effects(board, matched, stats, random.Random(seed), echo_sets=[echo])
        lists = [r.explosive_cards, r.laser_cards, r.fire_cards, r.ricochet_cards]
        all_ids = [c.id for lst in lists for c in lst]
        assert len(all_ids) == len(set(all_ids))
        assert not set(all_ids) & {c.id for c in matched}
        hits = len(r.explosive_cards) + len(r.ricochet_cards)
        assert r.bonus_points == hits + 2 * len(r.laser_cards)
        assert r.bonus_money == hits + len(r.laser_cards)


def test_invalid_or_overlapping_echo_sets_are_dropped() -> None:
    matched = _trio("a", "oval", "red", "solid")
    echo = _trio("b", "diamond", "green", "open")
    broken = [echo[0], echo[1], Card(id="odd", shape="diamond", color="red", number=3, shading="open")]
    overlapping = [matched[0], echo[1], echo[2]]
    board = matched + echo + [broken[2]]
    r = process_weapon_effects(
        board,
        matched,
        PlayerStats(healing_chance=100),
        random.Random(0),
        echo_sets=[broken, overlapping],
    )
    assert r.auto_matched_sets == []
    assert r.bonus_healing == 1


def test_echo_match_does_not_recurse() -> None:
    matched = _trio("a", "oval", "red", "solid")
    echo = _trio("b", "diamond", "green", "open")
    r = process_weapon_effects(
        matched + echo,
        matched,
        PlayerStats(),
        random.Random(0),
        echo_sets=[echo],
        is_echo_match=True,
    )
    assert r.auto_matched_sets == []


def test_same_seed_same_result() -> None:
    board = _board(15)
    stats = PlayerStats(explosion_chance=40, fire_spread_chance=40, ricochet_chance=40, ricochet_chain_chance=40)

    def run() -> list[str]:
        r = process_weapon_effects(board, board[3:6], stats, random.Random(99))
        return [c.id for c in (*r.explosive_cards, *r.fire_cards, *r.ricochet_cards)] + r.notifications

    assert run() == run()
