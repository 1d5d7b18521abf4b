"""Eligibility and draw engine for scope-local prize draws."""

from .catalog import PrizeCatalog
from .draw import draw_winners, shuffled
from .eligibility import eligible_participants, needs_scope_target
from .ledger import WinnerLedger
from .lifecycle import (
    ConfirmationRequiredError,
    DrawBlockedError,
    DrawCondition,
    DrawMode,
    DrawReadiness,
    DrawSession,
    DrawState,
    DrawStateError,
)
from .roster import ImportIssue, Roster, RosterImport, build_roster
from .slots import count_prize_winners, record_matches_prize, remaining_slots
from .types import (
    DISTRICT_CONTEXT,
    Participant,
    PrizeDefinition,
    Scope,
    WinnerRecord,
    scope_context_for,
    with_bonus_slots,
)

__all__ = [
    "ConfirmationRequiredError",
    "DISTRICT_CONTEXT",
    "DrawBlockedError",
    "DrawCondition",
    "DrawMode",
    "DrawReadiness",
    "DrawSession",
    "DrawState",
    "DrawStateError",
    "ImportIssue",
    "Participant",
    "PrizeCatalog",
    "PrizeDefinition",
    "Roster",
    "RosterImport",
    "Scope",
    "WinnerLedger",
    "WinnerRecord",
    "build_roster",
    "count_prize_winners",
    "draw_winners",
    "eligible_participants",
    "needs_scope_target",
    "record_matches_prize",
    "remaining_slots",
    "scope_context_for",
    "shuffled",
    "with_bonus_slots",
]
