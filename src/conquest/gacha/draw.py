"""Weighted roulette selection."""

from __future__ import annotations

import random
from collections.abc import Sequence
from typing import Protocol, TypeVar


class Weighted(Protocol):
    weight: int


T = TypeVar("T", bound=Weighted)


def total_weight(pool: Sequence[Weighted]) -> int:
    return sum(entry.weight for entry in pool)


def pick_weighted(pool: Sequence[T], sample: int) -> T:
    """Pick the entry whose cumulative weight range contains ``sample``.

    ``sample`` must lie in ``[0, total_weight(pool))``. With weights
    ``[1, 2, 7]`` the ranges are ``[0, 1)``, ``[1, 3)`` and ``[3, 10)``.
    """
    boundary = 0
    for entry in pool:
        boundary += entry.weight
        if sample < boundary:
            return entry
    msg = f"sample {sample} outside total weight {boundary}"
    raise ValueError(msg)


def draw(pool: Sequence[T], times: int, rng: random.Random | None = None) -> list[T]:
    """Draw ``times`` entries independently, with replacement."""
    total = total_weight(pool)
    if total <= 0:
        msg = "pool has no weight"
        raise ValueError(msg)
    source = rng or random
    return [pick_weighted(pool, source.randrange(total)) for _ in range(times)]
