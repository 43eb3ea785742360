from __future__ import annotations

import itertools
from collections.abc import Sequence

from .config import DEFAULT_ATTRIBUTES
from .types import ATTRIBUTE_VALUES, AttributeName, Card, ValidationResult

COUNT_ATTRIBUTE = "count"

_LABELS = {
    "shape": "shapes",
    "color": "colors",
    "number": "numbers",
    "shading": "shadings",
    "background": "backgrounds",
}


def validate(
    cards: Sequence[Card], active_attributes: Sequence[str] = DEFAULT_ATTRIBUTES
) -> ValidationResult:
    """Check whether three cards form a valid combination.

    Each active attribute must be all the same or all different across the
    triple. Invalid attributes are reported in active-attribute order.
    """
    if len(cards) != 3:
        return ValidationResult(is_valid=False, invalid_attributes=(COUNT_ATTRIBUTE,))

    invalid: list[str] = []
    for attr in active_attributes:
        distinct = {c.attribute(attr) for c in cards}
        if len(distinct) == 2:
            invalid.append(attr)
    return ValidationResult(is_valid=not invalid, invalid_attributes=tuple(invalid))


def is_grace_eligible(result: ValidationResult, graces_remaining: int) -> bool:
    """A near-miss is recoverable only with exactly one invalid attribute."""
    if result.is_valid or graces_remaining <= 0:
        return False
    if result.invalid_attributes == (COUNT_ATTRIBUTE,):
        return False
    return len(result.invalid_attributes) == 1


def error_message(cards: Sequence[Card], result: ValidationResult) -> str:
    if result.is_valid:
        return ""
    if COUNT_ATTRIBUTE in result.invalid_attributes:
        return "A valid combination must consist of exactly 3 cards."

    details: list[str] = []
    for attr in result.invalid_attributes:
        counts: dict[str, int] = {}
        for c in cards:
            key = str(c.attribute(attr))
            counts[key] = counts.get(key, 0) + 1
        value_str = " and ".join(f"{n} {v}" for v, n in counts.items())
        label = _LABELS.get(attr, attr)
        details.append(f"The {label} ({value_str}) must be all the same or all different")

    if len(details) == 1:
        return f"Not a valid combination: {details[0]}."
    return f"Not a valid combination: {', and '.join(details)}."


def find_all_combinations(
    board: Sequence[Card], active_attributes: Sequence[str] = DEFAULT_ATTRIBUTES
) -> list[list[Card]]:
    found: list[list[Card]] = []
    for triple in itertools.combinations(board, 3):
        if validate(triple, active_attributes).is_valid:
            found.append(list(triple))
    return found


def create_deck(active_attributes: Sequence[AttributeName] = DEFAULT_ATTRIBUTES) -> list[Card]:
    """One card per value combination of the active attributes.

    Inactive attributes are pinned to their first value.
    """
    pools = [
        ATTRIBUTE_VALUES[attr] if attr in active_attributes else ATTRIBUTE_VALUES[attr][:1]
        for attr in ("shape", "color", "number", "shading", "background")
    ]
    include_background = "background" in active_attributes
    deck: list[Card] = []
    for n, (shape, color, number, shading, background) in enumerate(itertools.product(*pools), start=1):
        parts = [shape, color, number, shading] + ([background] if include_background else [])
        deck.append(
            Card(
                id="-".join(str(p) for p in parts) + f"-{n}",
                shape=shape,  # type: ignore[arg-type]
                color=color,  # type: ignore[arg-type]
                number=number,  # type: ignore[arg-type]
                shading=shading,  # type: ignore[arg-type]
                background=background,  # type: ignore[arg-type]
            )
        )
    return deck
