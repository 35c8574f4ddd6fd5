"""Weighted random selection by cumulative-sum comparison.

Weights are always normalized to sum to 1 before the draw. When float slack
leaves the draw above the final cumulative sum, the most common candidate is
returned, so a non-empty candidate set always yields a pick.
"""

from __future__ import annotations

import random
from typing import Sequence, TypeVar

from fishtycoon.catalog import CatalogError

T = TypeVar("T")


def normalize(weights: Sequence[float]) -> list[float]:
    """Scale non-negative weights so they sum to 1."""
    if any(w < 0 for w in weights):
        raise ValueError(f"Negative weight in {list(weights)}")
    total = sum(weights)
    if total <= 0:
        raise ValueError("Weights must sum to a positive total")
    return [w / total for w in weights]


def fallback(candidates: Sequence[tuple[T, float]]) -> T:
    """The highest-weight (most common) candidate; first wins ties."""
    best_item, best_weight = candidates[0]
    for item, weight in candidates[1:]:
        if weight > best_weight:
            best_item, best_weight = item, weight
    return best_item


def resolve(
    candidates: Sequence[tuple[T, float]],
    draw: float,
    *,
    default: T | None = None,
) -> T:
    """Pick the first candidate whose running cumulative weight reaches `draw`.

    `candidates` must already be normalized.
    """
    if not candidates:
        raise CatalogError("No candidates to choose from")

    running = 0.0
    for item, weight in candidates:
        running += weight
        if draw <= running:
            return item
    return default if default is not None else fallback(candidates)


def choose(candidates: Sequence[tuple[T, float]], rng: random.Random) -> T:
    """Normalize, draw uniformly in [0, 1), resolve."""
    if not candidates:
        raise CatalogError("No candidates to choose from")
    items = [item for item, _ in candidates]
    weights = normalize([weight for _, weight in candidates])
    return resolve(list(zip(items, weights)), rng.random())
