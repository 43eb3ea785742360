from __future__ import annotations

import random
from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


def roll(rng: random.Random, chance: float) -> bool:
    """Percent roll: succeeds when the draw is below ``chance / 100``."""
    return rng.random() * 100 < chance


def pick(rng: random.Random, items: Sequence[T]) -> T:
    return items[int(rng.random() * len(items))]


def sample(rng: random.Random, items: Sequence[T], count: int) -> list[T]:
    if count <= 0:
        return []
    return rng.sample(list(items), min(count, len(items)))
