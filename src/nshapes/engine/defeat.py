"""Defeat-condition predicates built from declarative clauses.

A clause is a mapping with a ``kind`` key, e.g.
``{"kind": "at_least", "stat": "max_streak", "value": 4}``. Content files
list one or more clauses; all of them must hold for the enemy to be beaten.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping
from typing import Callable

from .types import RoundStats

DefeatCondition = Callable[[RoundStats], bool]

_STAT_NAMES = frozenset(f.name for f in dataclasses.fields(RoundStats))


def never_defeated(stats: RoundStats) -> bool:
    return False


def always_defeated(stats: RoundStats) -> bool:
    return True


def stat_value(stats: RoundStats, name: str) -> float:
    """Numeric view of a stat; set-valued stats count their members."""
    value = getattr(stats, name)
    if isinstance(value, (frozenset, set, tuple, list)):
        return len(value)
    return value


def _stat_name(clause: Mapping[str, object]) -> str:
    name = str(clause["stat"])
    if name not in _STAT_NAMES:
        raise ValueError(f"Unknown round stat {name!r}")
    return name


def score_ratio(ratio: float) -> DefeatCondition:
    def check(stats: RoundStats) -> bool:
        return stats.current_score >= stats.target_score * ratio

    return check


def at_least(stat: str, value: float) -> DefeatCondition:
    return lambda stats: stat_value(stats, stat) >= value


def at_most(stat: str, value: float) -> DefeatCondition:
    return lambda stats: stat_value(stats, stat) <= value


def fast_matches(under_ms: float, count: int) -> DefeatCondition:
    """At least ``count`` matches, anywhere in the round, each under ``under_ms``."""

    def check(stats: RoundStats) -> bool:
        return sum(1 for t in stats.match_times if t < under_ms) >= count

    return check


def first_matches_under(count: int, under_ms: float) -> DefeatCondition:
    def check(stats: RoundStats) -> bool:
        if len(stats.match_times) < count:
            return False
        return all(t < under_ms for t in stats.match_times[:count])

    return check


def matches_within(count: int, window_ms: float) -> DefeatCondition:
    """Some run of ``count`` consecutive matches fits inside ``window_ms``.

    ``match_times[i]`` is the gap before match ``i``, so the span of matches
    ``i..i+count-1`` is the sum of the gaps after the first of them.
    """

    def check(stats: RoundStats) -> bool:
        times = stats.match_times
        if count <= 0 or len(times) < count:
            return False
        for i in range(len(times) - count + 1):
            if sum(times[i + 1 : i + count]) <= window_ms:
                return True
        return False

    return check


def effects_triggered(count: int, effects: Iterable[str] | None = None) -> DefeatCondition:
    wanted = frozenset(effects) if effects is not None else None

    def check(stats: RoundStats) -> bool:
        seen = stats.weapon_effects_triggered
        if wanted is not None:
            seen = seen & wanted
        return len(seen) >= count

    return check


def all_of(conditions: Iterable[DefeatCondition]) -> DefeatCondition:
    checks = tuple(conditions)
    if not checks:
        return never_defeated
    return lambda stats: all(c(stats) for c in checks)


def build_condition(clause: Mapping[str, object]) -> DefeatCondition:
    kind = clause.get("kind")
    if kind == "score_ratio":
        return score_ratio(float(clause["ratio"]))  # type: ignore[arg-type]
    if kind == "at_least":
        return at_least(_stat_name(clause), float(clause["value"]))  # type: ignore[arg-type]
    if kind == "at_most":
        return at_most(_stat_name(clause), float(clause["value"]))  # type: ignore[arg-type]
    if kind == "fast_matches":
        return fast_matches(float(clause["under_ms"]), int(clause["count"]))  # type: ignore[arg-type]
    if kind == "first_matches_under":
        return first_matches_under(int(clause["count"]), float(clause["under_ms"]))  # type: ignore[arg-type]
    if kind == "matches_within":
        return matches_within(int(clause["count"]), float(clause["window_ms"]))  # type: ignore[arg-type]
    if kind == "effects_triggered":
        effects = clause.get("effects")
        return effects_triggered(
            int(clause["count"]),  # type: ignore[arg-type]
            [str(e) for e in effects] if isinstance(effects, list) else None,
        )
    raise ValueError(f"Unknown defeat condition kind {kind!r}")


def build_conditions(clauses: Iterable[Mapping[str, object]]) -> DefeatCondition:
    return all_of(build_condition(c) for c in clauses)
