"""Value objects shared by the eligibility, draw and slot calculators."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
import uuid


class Scope(str, Enum):
    """Draw tier ("layer"). Winner exclusion is tracked per scope."""

    DISTRICT = "district"
    ZONE = "zone"
    CLUB = "club"

    @property
    def needs_target(self) -> bool:
        """``True`` for scopes that only make sense with a zone or club name."""
        return self is not Scope.DISTRICT


DISTRICT_CONTEXT = "全體"
"""Scope context value stored on district-wide winner records."""


def scope_context_for(scope: Scope, filter_value: Optional[str]) -> str:
    """Return the context value recorded on winners drawn in ``scope``.

    District draws always use :data:`DISTRICT_CONTEXT`; zone and club draws
    use the selected zone or club name.

    Raises
    ------
    ValueError
        If ``scope`` needs a target and ``filter_value`` is empty.
    """
    scope = Scope(scope)
    if scope is Scope.DISTRICT:
        return DISTRICT_CONTEXT
    if not filter_value:
        raise ValueError(f"A {scope.value} name is required for {scope.value} draws")
    return filter_value


def _now_millis() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)


@dataclass(frozen=True)
class Participant:
    """A member eligible for draws.

    Attributes
    ----------
    id : str
        Unique identifier within a roster snapshot.
    name : str
        Display name.
    club : str
        Club the member belongs to.
    zone : str
        Zone the club belongs to.
    title : Optional[str]
        Optional position title, e.g. ``"社長"``.
    """

    id: str
    name: str
    club: str
    zone: str
    title: Optional[str] = None


@dataclass(frozen=True)
class PrizeDefinition:
    """A prize with a fixed number of winner slots.

    Attributes
    ----------
    id : str
        Unique prize identifier.
    name : str
        Prize name shown to the audience, e.g. ``"社長獎"``. Several prizes in
        one context may share a name.
    total_slots : int
        Number of winners this prize is meant to have. Never negative.
    item_description : Optional[str]
        What the winner receives, e.g. ``"紅包 $1,000"``.
    sponsor : Optional[str]
        Sponsor name.
    sponsor_title : Optional[str]
        Sponsor title, e.g. ``"DG"``.
    """

    id: str
    name: str
    total_slots: int
    item_description: Optional[str] = None
    sponsor: Optional[str] = None
    sponsor_title: Optional[str] = None

    def __post_init__(self) -> None:
        if self.total_slots < 0:
            raise ValueError("total_slots must be non-negative")


@dataclass(frozen=True)
class WinnerRecord:
    """One entry of the winner ledger.

    Attributes
    ----------
    id : str
        Unique record identifier (a UUID for records created by a draw).
    participant_id : str
        Winning participant.
    scope : Scope
        Scope the draw ran in. Exclusion only applies within this scope.
    prize_id : Optional[str]
        Prize awarded. ``None`` only for records created before prizes had
        identifiers; such records are matched by ``prize_name`` instead.
    scope_context : str
        Zone name, club name, or :data:`DISTRICT_CONTEXT`.
    timestamp : int
        Milliseconds since the epoch when the winner was drawn.
    participant_name, participant_club, participant_zone : str
        Participant details captured at draw time for display.
    prize_name, prize_item : str
        Prize details captured at draw time for display.
    """

    id: str
    participant_id: str
    scope: Scope
    prize_id: Optional[str]
    scope_context: str
    timestamp: int
    participant_name: str = ""
    participant_club: str = ""
    participant_zone: str = ""
    prize_name: str = ""
    prize_item: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.scope, Scope):
            object.__setattr__(self, "scope", Scope(self.scope))

    @classmethod
    def for_draw(
        cls,
        participant: Participant,
        prize: PrizeDefinition,
        scope: Scope,
        scope_context: str,
        *,
        timestamp: Optional[int] = None,
        record_id: Optional[str] = None,
    ) -> "WinnerRecord":
        """Build the record for ``participant`` winning ``prize``."""

        return cls(
            id=record_id or str(uuid.uuid4()),
            participant_id=participant.id,
            scope=scope,
            prize_id=prize.id,
            scope_context=scope_context,
            timestamp=_now_millis() if timestamp is None else timestamp,
            participant_name=participant.name,
            participant_club=participant.club,
            participant_zone=participant.zone,
            prize_name=prize.name,
            prize_item=prize.item_description or "",
        )


def with_bonus_slots(prize: PrizeDefinition, amount: int = 1) -> PrizeDefinition:
    """Return a copy of ``prize`` with ``amount`` extra slots."""

    if amount < 1:
        raise ValueError("bonus amount must be a positive integer")
    return replace(prize, total_slots=prize.total_slots + amount)


__all__ = [
    "DISTRICT_CONTEXT",
    "Participant",
    "PrizeDefinition",
    "Scope",
    "WinnerRecord",
    "scope_context_for",
    "with_bonus_slots",
]
