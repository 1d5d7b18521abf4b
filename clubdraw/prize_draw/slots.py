"""Remaining-slot arithmetic derived from the winner ledger."""

from __future__ import annotations

from typing import Iterable

from .types import PrizeDefinition, Scope, WinnerRecord


def record_matches_prize(
    record: WinnerRecord,
    prize: PrizeDefinition,
    scope: Scope,
    scope_context: str,
    *,
    legacy_name_match: bool = True,
) -> bool:
    """Return ``True`` if ``record`` consumes a slot of ``prize``.

    Records carrying a ``prize_id`` match on the id alone. Records written
    before prizes had ids (``prize_id`` is ``None``) match when scope, prize
    name and scope context all agree, unless ``legacy_name_match`` is off.
    """

    if record.prize_id is not None:
        return record.prize_id == prize.id
    if not legacy_name_match:
        return False
    return (
        record.scope == scope
        and record.prize_name == prize.name
        and record.scope_context == scope_context
    )


def count_prize_winners(
    prize: PrizeDefinition,
    ledger: Iterable[WinnerRecord],
    scope: Scope,
    scope_context: str,
    *,
    legacy_name_match: bool = True,
) -> int:
    """Return how many active records count against ``prize``."""

    return sum(
        1
        for record in ledger
        if record_matches_prize(
            record, prize, scope, scope_context, legacy_name_match=legacy_name_match
        )
    )


def remaining_slots(
    prize: PrizeDefinition,
    ledger: Iterable[WinnerRecord],
    scope: Scope,
    scope_context: str,
    *,
    legacy_name_match: bool = True,
) -> int:
    """Return ``max(0, prize.total_slots - matching records)``.

    Parameters
    ----------
    prize : PrizeDefinition
        Prize to inspect. A bonus applied to ``total_slots`` is reflected
        immediately.
    ledger : Iterable[WinnerRecord]
        Active winner records.
    scope : Scope
        Scope the prize belongs to.
    scope_context : str
        Zone name, club name or the district context of the prize.
    legacy_name_match : bool, default: True
        Whether records without a ``prize_id`` are matched by name.

    Returns
    -------
    int
        Slots still available; ``0`` once the prize is exhausted.
    """

    used = count_prize_winners(
        prize, ledger, scope, scope_context, legacy_name_match=legacy_name_match
    )
    return max(0, prize.total_slots - used)


__all__ = ["count_prize_winners", "record_matches_prize", "remaining_slots"]
