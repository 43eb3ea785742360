"""Spatial destructive effects: explosion, laser, fire spread and ricochet.

All functions take the full board plus the just-matched cards and never
target a matched card. Randomness comes from the ``rng`` argument only.
"""

from __future__ import annotations

import random
from collections.abc import Iterable, Iterator, Sequence

from .chance import pick, roll
from .grid import adjacent_indices, line_indices
from .types import Card, card_ids


def _index_of(board: Sequence[Card], card_id: str) -> int:
    for i, c in enumerate(board):
        if c.id == card_id:
            return i
    return -1


def _adjacent_indices_of(board: Sequence[Card], matched: Sequence[Card]) -> Iterator[int]:
    """Neighbor indices of each matched card in turn; shared neighbors repeat."""
    for m in matched:
        idx = _index_of(board, m.id)
        if idx == -1:
            continue
        yield from adjacent_indices(idx, len(board))


def explosive_cards(
    board: Sequence[Card], matched: Sequence[Card], chance: float, rng: random.Random
) -> list[Card]:
    """Roll ``chance`` for each neighbor of each matched card.

    A neighbor shared by several matched cards gets one roll per matched
    card until one of them succeeds.
    """
    matched_ids = card_ids(matched)
    exploded: set[int] = set()
    out: list[Card] = []
    for adj in _adjacent_indices_of(board, matched):
        if adj in exploded or not roll(rng, chance):
            continue
        exploded.add(adj)
        card = board[adj]
        if card.id not in matched_ids:
            out.append(card)
    return out


def laser_cards(board: Sequence[Card], matched: Sequence[Card], rng: random.Random) -> list[Card]:
    """Full row or column through one random matched card, minus the match."""
    if not matched:
        return []
    origin = pick(rng, matched)
    origin_idx = _index_of(board, origin.id)
    if origin_idx == -1:
        return []
    is_row = rng.random() < 0.5
    matched_ids = card_ids(matched)
    return [
        board[i]
        for i in line_indices(origin_idx, len(board), is_row)
        if board[i].id not in matched_ids
    ]


def fire_spread_cards(
    board: Sequence[Card],
    matched: Sequence[Card],
    chance: float,
    rng: random.Random,
    excluded: Iterable[Card] = (),
) -> list[Card]:
    blocked = card_ids(matched) | {c.id for c in excluded}
    ignited: set[int] = set()
    out: list[Card] = []
    for adj in _adjacent_indices_of(board, matched):
        if adj in ignited or not roll(rng, chance):
            continue
        card = board[adj]
        if card.on_fire or card.id in blocked:
            continue
        ignited.add(adj)
        out.append(card)
    return out


def ricochet_cards(
    board: Sequence[Card],
    matched: Sequence[Card],
    excluded: Iterable[Card],
    initial_chance: float,
    chain_chance: float,
    rng: random.Random,
) -> list[Card]:
    """Random chain destruction.

    One roll against ``initial_chance`` starts the chain; after every hit a
    roll against ``chain_chance`` decides whether it continues. A card is
    hit at most once, so the chain is bounded by the board size.
    """
    if not roll(rng, initial_chance):
        return []

    taken = card_ids(matched) | {c.id for c in excluded}
    hits: list[Card] = []
    while True:
        pool = [c for c in board if c.id not in taken]
        if not pool:
            break
        target = pick(rng, pool)
        hits.append(target)
        taken.add(target.id)
        if not roll(rng, chain_chance):
            break
    return hits
