from __future__ import annotations

import json
import random
from pathlib import Path

from nshapes.engine.behaviors import INACTIVITY_EFFECT, WEAPON_COUNTER_EFFECT, InactivityConfig, WeaponCounterConfig
from nshapes.engine.enemies import EnemyMeta, compose_effects
from nshapes.engine.serialize import enemy_snapshot, tick_result_to_dict, weapon_result_to_dict
from nshapes.engine.types import Card, PlayerStats
from nshapes.engine.weapons import process_weapon_effects
from nshapes.services.telemetry import TelemetryService


def _board(n: int) -> list[Card]:
    return [Card(id=f"c{i}", shape="oval", color="red", number=1 + i % 3, shading="solid") for i in range(n)]


def test_weapon_result_snapshot_is_json() -> None:
    board = _board(12)
    r = process_weapon_effects(board, [board[4]], PlayerStats(explosion_chance=100), random.Random(0))
    data = weapon_result_to_dict(r)
    assert data["explosive_cards"] == ["c1", "c7", "c3", "c5"]
    assert data["bonus_points"] == 4
    json.dumps(data)


def test_enemy_snapshot() -> None:
    enemy = compose_effects(
        EnemyMeta(name="Shadow Bat", tier=1, description="Laser effects reduced by 20%"),
        [
            (WEAPON_COUNTER_EFFECT, WeaponCounterConfig("laser", 20)),
            (INACTIVITY_EFFECT, InactivityConfig(max_ms=30000)),
        ],
    )
    snap = enemy_snapshot(enemy)
    assert snap["effects"] == ["weapon_counter", "inactivity"]
    assert snap["stat_modifiers"] == {"laser_chance_reduction": 20}
    assert snap["ui_modifiers"]["weapon_counters"] == [{"type": "laser", "reduction": 20}]
    json.dumps(snap)

    tick = tick_result_to_dict(enemy.on_tick(26000, []))
    assert tick["events"] == [{"type": "inactivity_warning", "seconds_remaining": 5}]


def test_telemetry_writes_jsonl(tmp_path: Path) -> None:
    log = TelemetryService(tmp_path / "logs" / "telemetry.jsonl")
    board = _board(9)
    log.log_weapon_result(process_weapon_effects(board, board[0:3], PlayerStats(), random.Random(0)))
    log.log_enemy_events("Night Owl", [{"type": "card_flipped", "card_id": "c1"}, {"type": "positions_shuffled"}])

    lines = [json.loads(line) for line in log.path.read_text(encoding="utf-8").splitlines()]
    assert [rec["type"] for rec in lines] == ["weapon_effects", "enemy.card_flipped", "enemy.positions_shuffled"]
    assert lines[1]["payload"] == {"enemy": "Night Owl", "type": "card_flipped", "card_id": "c1"}
    assert all("ts" in rec for rec in lines)
