from __future__ import annotations

import functools
import json
import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from jsonschema import Draft202012Validator

from nshapes.engine.behaviors import BEHAVIORS, WEAPON_COUNTER_EFFECT, EffectBehavior, WeaponCounterConfig
from nshapes.engine.chance import sample
from nshapes.engine.defeat import DefeatCondition, build_conditions
from nshapes.engine.enemies import EnemyInstance, EnemyMeta, EnemyRegistry, compose_effects
from nshapes.engine.types import Weapon

logger = logging.getLogger(__name__)


class ContentError(RuntimeError):
    pass


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ContentError(f"Missing content file: {path}") from e
    except json.JSONDecodeError as e:
        raise ContentError(f"Invalid JSON in {path}: {e}") from e


def validate_json(instance: object, schema: object, *, context: str) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: e.path)
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise ContentError("\n".join(lines))


def _require_str(obj: Mapping[str, object], key: str) -> str:
    v = obj.get(key)
    if not isinstance(v, str):
        raise ContentError(f"Expected string for {key}")
    return v


def _require_int(obj: Mapping[str, object], key: str) -> int:
    v = obj.get(key)
    if not isinstance(v, int):
        raise ContentError(f"Expected int for {key}")
    return v


def _require_list(obj: Mapping[str, object], key: str) -> list[object]:
    v = obj.get(key)
    if not isinstance(v, list):
        raise ContentError(f"Expected list for {key}")
    return v


def _optional_str(obj: Mapping[str, object], key: str) -> str | None:
    v = obj.get(key)
    if v is None:
        return None
    if not isinstance(v, str):
        raise ContentError(f"Expected string for {key}")
    return v


@dataclass(frozen=True)
class RandomCounters:
    """Weapon counters rolled fresh for every enemy instance."""

    types: tuple[str, ...]
    pick: int
    reduction: float


@dataclass(frozen=True)
class EnemyDefinition:
    name: str
    tier: int
    description: str
    defeat_condition_text: str
    effects: tuple[tuple[EffectBehavior, Any], ...]
    random_counters: RandomCounters | None
    defeat: tuple[Mapping[str, object], ...]
    defeat_condition: DefeatCondition
    icon: str | None = None

    def create(self, rng: random.Random) -> EnemyInstance:
        effects = list(self.effects)
        if self.random_counters is not None:
            rc = self.random_counters
            for t in sample(rng, rc.types, rc.pick):
                effects.append(
                    (WEAPON_COUNTER_EFFECT, WeaponCounterConfig(weapon_type=t, reduction=rc.reduction))
                )
        meta = EnemyMeta(
            name=self.name,
            tier=self.tier,
            description=self.description,
            defeat_condition_text=self.defeat_condition_text,
            icon=self.icon,
        )
        return compose_effects(meta, effects, self.defeat_condition, rng)


def _parse_effect(raw: Mapping[str, object], enemy: str) -> tuple[EffectBehavior, Any]:
    name = _require_str(raw, "behavior")
    behavior = BEHAVIORS.get(name)
    if behavior is None:
        raise ContentError(f"Unknown behavior {name!r} on enemy {enemy}")
    cfg_raw = raw.get("config", {})
    if not isinstance(cfg_raw, dict):
        raise ContentError(f"config for {name} on enemy {enemy} must be an object")
    try:
        return behavior, behavior.make_config(cfg_raw)
    except (TypeError, ValueError) as e:
        raise ContentError(f"Bad config for {name} on enemy {enemy}: {e}") from e


def _parse_random_counters(raw: object) -> RandomCounters | None:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ContentError("random_counters must be an object")
    types = tuple(t for t in _require_list(raw, "types") if isinstance(t, str))
    reduction = raw.get("reduction")
    if not isinstance(reduction, (int, float)):
        raise ContentError("random_counters.reduction must be a number")
    return RandomCounters(types=types, pick=_require_int(raw, "pick"), reduction=float(reduction))


def _parse_enemy(item: Mapping[str, object]) -> EnemyDefinition:
    name = _require_str(item, "name")
    effects = tuple(
        _parse_effect(e, name) for e in _require_list(item, "effects") if isinstance(e, dict)
    )
    clauses = tuple(c for c in _require_list(item, "defeat") if isinstance(c, dict))
    try:
        condition = build_conditions(clauses)
    except (KeyError, ValueError) as e:
        raise ContentError(f"Bad defeat condition on enemy {name}: {e}") from e

    return EnemyDefinition(
        name=name,
        tier=_require_int(item, "tier"),
        description=_require_str(item, "description"),
        defeat_condition_text=_require_str(item, "defeat_condition_text"),
        effects=effects,
        random_counters=_parse_random_counters(item.get("random_counters")),
        defeat=clauses,
        defeat_condition=condition,
        icon=_optional_str(item, "icon"),
    )


def _parse_weapon(item: Mapping[str, object]) -> Weapon:
    effects_raw = item.get("effects", {})
    effects: dict[str, float] = {}
    if isinstance(effects_raw, dict):
        for k, v in effects_raw.items():
            if isinstance(k, str) and isinstance(v, (int, float)):
                effects[k] = float(v)
    return Weapon(
        id=_require_str(item, "id"),
        name=_require_str(item, "name"),
        level=_require_int(item, "level"),
        special_effect=_optional_str(item, "special_effect"),  # type: ignore[arg-type]
        effects=effects,
        description=_optional_str(item, "description") or "",
    )


class ContentService:
    def __init__(self, data_dir: Path, schema_dir: Path) -> None:
        self._data_dir = data_dir
        self._schema_dir = schema_dir

    def _load_validated(self, name: str) -> dict[str, object]:
        path = self._data_dir / f"{name}.json"
        schema = _load_json(self._schema_dir / f"{name}.schema.json")
        raw = _load_json(path)
        validate_json(raw, schema, context=str(path))
        if not isinstance(raw, dict):
            raise ContentError(f"{name}.json must be an object")
        logger.debug("Parsed %s", path)
        return raw

    def load_enemies(self) -> tuple[EnemyDefinition, ...]:
        raw = self._load_validated("enemies")
        out = tuple(_parse_enemy(e) for e in _require_list(raw, "enemies") if isinstance(e, dict))
        logger.info("Loaded %d enemies", len(out))
        return out

    def load_weapons(self) -> dict[str, Weapon]:
        raw = self._load_validated("weapons")
        weapons: dict[str, Weapon] = {}
        for item in _require_list(raw, "weapons"):
            if not isinstance(item, dict):
                continue
            w = _parse_weapon(item)
            weapons[w.id] = w
        logger.info("Loaded %d weapons", len(weapons))
        return weapons

    def build_registry(self, rng: random.Random) -> EnemyRegistry:
        registry = EnemyRegistry()
        for d in self.load_enemies():
            registry.register(d.name, functools.partial(d.create, rng), tier=d.tier)
        return registry

    def validate_all(self) -> None:
        # Load is validation (schema + parse)
        _ = self.load_enemies()
        _ = self.load_weapons()
