"""Eligibility rules for scope-local draws."""

from __future__ import annotations

from typing import Iterable, Optional

from .types import Participant, Scope, WinnerRecord


def needs_scope_target(scope: Scope, filter_value: Optional[str]) -> bool:
    """Return ``True`` when ``scope`` requires a zone/club but none is selected."""
    return Scope(scope).needs_target and not filter_value


def eligible_participants(
    roster: Iterable[Participant],
    ledger: Iterable[WinnerRecord],
    scope: Scope,
    filter_value: Optional[str] = None,
) -> list[Participant]:
    """Return the participants that may still be drawn in ``scope``.

    1. Zone and club draws without a selected zone/club have no candidates.
    2. The roster is narrowed to the selected zone (``ZONE``) or club
       (``CLUB``); ``DISTRICT`` keeps everyone.
    3. Anyone who already won *in the same scope* is removed. Wins in other
       scopes do not matter.

    Parameters
    ----------
    roster : Iterable[Participant]
        Current roster snapshot.
    ledger : Iterable[WinnerRecord]
        Active winner records.
    scope : Scope
        Scope of the draw.
    filter_value : Optional[str], default: None
        Zone name for ``ZONE`` draws, club name for ``CLUB`` draws. Ignored
        for ``DISTRICT``.

    Returns
    -------
    list[Participant]
        Eligible participants in roster order.
    """

    scope = Scope(scope)
    if needs_scope_target(scope, filter_value):
        return []

    already_won = {record.participant_id for record in ledger if record.scope == scope}

    candidates: list[Participant] = []
    for participant in roster:
        if scope is Scope.ZONE and participant.zone != filter_value:
            continue
        if scope is Scope.CLUB and participant.club != filter_value:
            continue
        if participant.id in already_won:
            continue
        candidates.append(participant)
    return candidates


__all__ = ["eligible_participants", "needs_scope_target"]
