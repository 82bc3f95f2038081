from __future__ import annotations

import math
from typing import Callable, Mapping, Optional, Sequence, TypeVar

T = TypeVar("T")

Draw = Callable[[], float]


def pick_uniform(seq: Draw, items: Sequence[T]) -> T:
    return items[math.floor(seq() * len(items))]


def pick_biased(seq: Draw, items: Sequence[T], bias: Optional[str] = None) -> T:
    """
    Pick with the index pulled towards one end of the list.

    A second draw scales the distance from the chosen end, so "start" favours
    low indices and "end" favours high ones. Any other bias is uniform.
    """
    n = len(items)
    idx = math.floor(seq() * n)
    if bias == "start":
        return items[math.floor(idx * seq())]
    if bias == "end":
        return items[n - 1 - math.floor((n - 1 - idx) * seq())]
    return items[idx]


def weighted_index(seq: Draw, weights: Sequence[float]) -> int:
    total = sum(weights)
    if total <= 0:
        return 0
    remaining = seq() * total
    for i, weight in enumerate(weights):
        remaining -= weight
        if remaining <= 0:
            return i
    return len(weights) - 1


def pick_weighted(seq: Draw, items: Sequence[T], weights: Mapping[str, float], key: Callable[[T], str]) -> T:
    """Cumulative weighted pick keyed by name; missing names weigh nothing."""
    roll = seq()
    cumulative = 0.0
    for item in items:
        cumulative += weights.get(key(item), 0.0)
        if roll < cumulative:
            return item
    return items[-1]
