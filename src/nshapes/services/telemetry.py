from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping, Sequence

from nshapes.engine.serialize import weapon_result_to_dict
from nshapes.engine.types import Event, WeaponEffectResult


@dataclass
class TelemetryService:
    path: Path

    def log(self, event_type: str, payload: Mapping[str, object]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        rec = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "type": event_type,
            "payload": dict(payload),
        }
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(rec, ensure_ascii=False) + "\n")

    def log_weapon_result(self, result: WeaponEffectResult) -> None:
        self.log("weapon_effects", weapon_result_to_dict(result))

    def log_enemy_events(self, enemy_name: str, events: Sequence[Event]) -> None:
        # One line per event keeps the file greppable by type
        for ev in events:
            self.log(f"enemy.{ev.get('type', 'unknown')}", {"enemy": enemy_name, **ev})
