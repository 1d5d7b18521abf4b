"""Random winner selection."""

from __future__ import annotations

import random
from typing import Iterable, Optional

from .types import Participant


def _unique_preserve_order(candidates: Iterable[Participant]) -> list[Participant]:
    """Return candidates with repeated ids removed, keeping the first one seen."""

    unique: list[Participant] = []
    seen: set[str] = set()
    for participant in candidates:
        if participant.id in seen:
            continue
        seen.add(participant.id)
        unique.append(participant)
    return unique


def shuffled(
    candidates: Iterable[Participant],
    *,
    rng: Optional[random.Random] = None,
) -> list[Participant]:
    """Return an unbiased random permutation of ``candidates``.

    Uses the Fisher–Yates shuffle on a copy, walking from the last position
    down and swapping each slot with a uniformly chosen slot at or before it,
    so every permutation is equally likely. The input is never mutated.
    """

    rng = rng or random.Random()
    deck = _unique_preserve_order(candidates)
    for i in range(len(deck) - 1, 0, -1):
        j = rng.randrange(i + 1)
        deck[i], deck[j] = deck[j], deck[i]
    return deck


def draw_winners(
    candidates: Iterable[Participant],
    count: int,
    *,
    rng: Optional[random.Random] = None,
) -> list[Participant]:
    """Pick ``count`` distinct winners uniformly at random.

    Parameters
    ----------
    candidates : Iterable[Participant]
        Eligible participants. Repeated ids are collapsed so nobody can be
        picked twice.
    count : int
        Requested number of winners. Values below zero are treated as zero
        and values above the number of candidates are clamped.
    rng : random.Random, optional
        Random generator to use; useful for deterministic tests. If not
        provided, a new non-deterministic generator is used.

    Returns
    -------
    list[Participant]
        ``min(count, len(candidates))`` winners in draw order. Empty when
        there are no candidates or ``count`` is zero.
    """

    deck = shuffled(candidates, rng=rng)
    count = max(0, min(count, len(deck)))
    return deck[:count]


__all__ = ["draw_winners", "shuffled"]
