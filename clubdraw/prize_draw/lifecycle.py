"""Draw session state machine: IDLE -> ARMED -> DRAWING -> REVEALED."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import random
from typing import Callable, Optional

from .catalog import PrizeCatalog
from .draw import draw_winners
from .eligibility import eligible_participants, needs_scope_target
from .ledger import WinnerLedger
from .roster import Roster
from .slots import remaining_slots
from .types import Participant, PrizeDefinition, Scope, WinnerRecord, scope_context_for


class DrawState(str, Enum):
    IDLE = "idle"
    ARMED = "armed"
    DRAWING = "drawing"
    REVEALED = "revealed"


class DrawMode(str, Enum):
    """How many winners a single draw asks for."""

    ONE = "one"
    ALL = "all"
    CUSTOM = "custom"


class DrawCondition(str, Enum):
    """Reasons a draw cannot start as requested."""

    NO_SCOPE_TARGET = "no_scope_target"
    NO_PRIZE_SELECTED = "no_prize_selected"
    NO_ELIGIBLE_CANDIDATES = "no_eligible_candidates"
    PRIZE_EXHAUSTED = "prize_exhausted"
    INSUFFICIENT_CANDIDATES = "insufficient_candidates"


class DrawBlockedError(ValueError):
    """Raised when a draw cannot start; ``condition`` says why."""

    def __init__(self, condition: DrawCondition, message: str) -> None:
        super().__init__(message)
        self.condition = condition


class ConfirmationRequiredError(DrawBlockedError):
    """Raised when fewer candidates are eligible than requested.

    Call :meth:`DrawSession.start` again with ``confirm_downgrade=True`` to
    draw ``eligible_count`` winners instead.
    """

    def __init__(self, message: str, *, eligible_count: int, requested_count: int) -> None:
        super().__init__(DrawCondition.INSUFFICIENT_CANDIDATES, message)
        self.eligible_count = eligible_count
        self.requested_count = requested_count


class DrawStateError(RuntimeError):
    """Raised for transitions that are not valid from the current state."""


@dataclass(frozen=True)
class DrawReadiness:
    """Snapshot of whether the selected prize can be drawn right now.

    Attributes
    ----------
    condition : Optional[DrawCondition]
        First blocking or confirmation condition found, ``None`` when ready.
    message : str
        Human readable explanation, empty when ready.
    eligible_count : int
        Candidates left in the selected scope.
    remaining_slots : int
        Slots left on the selected prize (``0`` without a prize).
    requested_count : int
        Winners the current draw mode asks for.
    """

    condition: Optional[DrawCondition]
    message: str
    eligible_count: int
    remaining_slots: int
    requested_count: int

    @property
    def ready(self) -> bool:
        return self.condition is None

    @property
    def needs_confirmation(self) -> bool:
        return self.condition is DrawCondition.INSUFFICIENT_CANDIDATES

    @property
    def blocked(self) -> bool:
        return self.condition is not None and not self.needs_confirmation


class DrawSession:
    """Drives one operator's draws over a roster, catalog and ledger.

    The session holds only selection state (scope, target, prize, draw mode)
    and the in-flight draw. Eligibility and remaining slots are recomputed
    from the ledger on every read.
    """

    def __init__(
        self,
        roster: Roster,
        catalog: PrizeCatalog,
        ledger: WinnerLedger,
        *,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], int]] = None,
        legacy_name_match: bool = True,
    ) -> None:
        """Create a session.

        Parameters
        ----------
        roster : Roster
            Participants to draw from.
        catalog : PrizeCatalog
            Prizes per scope context. Bonus slots are written back to it.
        ledger : WinnerLedger
            Winner log; new winners are appended as one batch per draw.
        rng : random.Random, optional
            Random generator passed to the draw engine.
        clock : Callable[[], int], optional
            Returns the timestamp (epoch milliseconds) stamped on new records.
        legacy_name_match : bool, default: True
            Whether records without a prize id count against same-named prizes.
        """
        self.roster = roster
        self.catalog = catalog
        self.ledger = ledger
        self._rng = rng or random.Random()
        self._clock = clock
        self._legacy_name_match = legacy_name_match

        self._scope = Scope.DISTRICT
        self._filter_value: Optional[str] = None
        self._prize_id: Optional[str] = None
        self._mode = DrawMode.ONE
        self._batch_size = 1

        self._drawing = False
        self._revealed = False
        self._locked_count = 0
        self._last_winners: tuple[WinnerRecord, ...] = ()

    # -------- selection --------
    @property
    def scope(self) -> Scope:
        return self._scope

    @property
    def filter_value(self) -> Optional[str]:
        return self._filter_value

    @property
    def scope_context(self) -> Optional[str]:
        """Context recorded on new winners, ``None`` while no target is selected."""
        if needs_scope_target(self._scope, self._filter_value):
            return None
        return scope_context_for(self._scope, self._filter_value)

    @property
    def prize(self) -> Optional[PrizeDefinition]:
        """Selected prize, ``None`` if nothing is selected or it left the catalog."""
        if self._prize_id is None or self._prize_id not in self.catalog:
            return None
        if self.catalog.locate(self._prize_id) != (self._scope, self.scope_context):
            return None
        return self.catalog.get(self._prize_id)

    @property
    def prizes(self) -> list[PrizeDefinition]:
        """Prizes available for the selected scope and target."""
        return self.catalog.prizes_for(self._scope, self._filter_value)

    @property
    def mode(self) -> DrawMode:
        return self._mode

    @property
    def last_winners(self) -> tuple[WinnerRecord, ...]:
        return self._last_winners

    @property
    def state(self) -> DrawState:
        if self._drawing:
            return DrawState.DRAWING
        if self._revealed:
            return DrawState.REVEALED
        if self._prize_id is not None and not self.readiness().blocked:
            return DrawState.ARMED
        return DrawState.IDLE

    def select_scope(self, scope: Scope, filter_value: Optional[str] = None) -> None:
        """Switch scope/target. Clears the prize selection and any revealed draw."""
        self._ensure_not_drawing("change scope")
        self._scope = Scope(scope)
        self._filter_value = None if self._scope is Scope.DISTRICT else (filter_value or None)
        self._reset_selection()

    def select_prize(self, prize_id: Optional[str]) -> None:
        """Select a prize of the current scope context (``None`` clears it)."""
        self._ensure_not_drawing("change prize")
        if prize_id is not None and prize_id not in {p.id for p in self.prizes}:
            raise KeyError(f"Prize '{prize_id}' is not offered in the selected scope")
        self._prize_id = prize_id
        self._revealed = False
        self._last_winners = ()

    def set_mode(self, mode: DrawMode, batch_size: Optional[int] = None) -> None:
        """Choose how many winners to request: one, all remaining, or a batch."""
        self._ensure_not_drawing("change draw mode")
        mode = DrawMode(mode)
        if mode is DrawMode.CUSTOM:
            if batch_size is None or batch_size < 1:
                raise ValueError("batch_size must be a positive integer for custom draws")
            self._batch_size = batch_size
        self._mode = mode

    # -------- derived values --------
    def eligible(self) -> list[Participant]:
        return eligible_participants(self.roster, self.ledger, self._scope, self._filter_value)

    def remaining(self) -> int:
        prize = self.prize
        context = self.scope_context
        if prize is None or context is None:
            return 0
        return remaining_slots(
            prize,
            self.ledger,
            self._scope,
            context,
            legacy_name_match=self._legacy_name_match,
        )

    def requested_count(self, remaining: Optional[int] = None) -> int:
        if remaining is None:
            remaining = self.remaining()
        if self._mode is DrawMode.ONE:
            return 1
        if self._mode is DrawMode.ALL:
            return remaining
        return min(self._batch_size, remaining)

    def readiness(self) -> DrawReadiness:
        """Evaluate the start conditions without changing state."""
        eligible_count = len(self.eligible())
        remaining = self.remaining()
        requested = self.requested_count(remaining)

        def result(condition: Optional[DrawCondition], message: str = "") -> DrawReadiness:
            return DrawReadiness(
                condition=condition,
                message=message,
                eligible_count=eligible_count,
                remaining_slots=remaining,
                requested_count=requested,
            )

        if needs_scope_target(self._scope, self._filter_value):
            return result(
                DrawCondition.NO_SCOPE_TARGET,
                f"Select a {self._scope.value} before drawing.",
            )
        prize = self.prize
        if prize is None:
            return result(DrawCondition.NO_PRIZE_SELECTED, "Select a prize before drawing.")
        if eligible_count == 0:
            return result(
                DrawCondition.NO_ELIGIBLE_CANDIDATES,
                "Nobody in the selected scope is still eligible.",
            )
        if remaining <= 0:
            return result(
                DrawCondition.PRIZE_EXHAUSTED,
                f"All {prize.total_slots} slot(s) of '{prize.name}' have been drawn.",
            )
        if requested > eligible_count:
            return result(
                DrawCondition.INSUFFICIENT_CANDIDATES,
                f"Only {eligible_count} eligible participant(s) for {requested} "
                "requested winner(s); confirm to draw them all.",
            )
        return result(None)

    # -------- transitions --------
    def start(self, *, confirm_downgrade: bool = False) -> int:
        """Enter DRAWING and return the number of winners that will be drawn.

        Raises
        ------
        DrawBlockedError
            If no target or prize is selected, nobody is eligible, or the
            prize is exhausted.
        ConfirmationRequiredError
            If more winners are requested than are eligible and
            ``confirm_downgrade`` is not set.
        DrawStateError
            If a draw is already running.
        """
        self._ensure_not_drawing("start another draw")
        readiness = self.readiness()
        if readiness.blocked:
            assert readiness.condition is not None
            raise DrawBlockedError(readiness.condition, readiness.message)
        if readiness.needs_confirmation:
            if not confirm_downgrade:
                raise ConfirmationRequiredError(
                    readiness.message,
                    eligible_count=readiness.eligible_count,
                    requested_count=readiness.requested_count,
                )
            count = readiness.eligible_count
        else:
            count = readiness.requested_count

        self._locked_count = count
        self._drawing = True
        self._revealed = False
        self._last_winners = ()
        return count

    def stop(self) -> tuple[WinnerRecord, ...]:
        """Run the draw, append the winners to the ledger and enter REVEALED.

        Calling ``stop`` again after the reveal returns the same winners
        without drawing or committing anything.

        Raises
        ------
        DrawStateError
            If no draw was started.
        DrawBlockedError
            If the selected prize left the catalog while drawing. The draw is
            cancelled and the ledger is left untouched.
        """
        if not self._drawing:
            if self._revealed:
                return self._last_winners
            raise DrawStateError("No draw is running")

        prize = self.prize
        context = self.scope_context
        if prize is None or context is None:
            # The catalog was replaced mid-draw; end the draw without a result.
            self.cancel()
            raise DrawBlockedError(
                DrawCondition.NO_PRIZE_SELECTED,
                "The selected prize is no longer offered; select a prize again.",
            )

        candidates = self.eligible()
        count = min(self._locked_count, len(candidates), self.remaining())
        picked = draw_winners(candidates, count, rng=self._rng)
        timestamp = self._clock() if self._clock is not None else None
        records = [
            WinnerRecord.for_draw(p, prize, self._scope, context, timestamp=timestamp)
            for p in picked
        ]
        committed = self.ledger.append_batch(records)

        self._drawing = False
        self._revealed = True
        self._last_winners = committed
        return committed

    def cancel(self) -> bool:
        """Abort a running draw without touching the ledger."""
        if not self._drawing:
            return False
        self._drawing = False
        self._locked_count = 0
        return True

    # -------- ledger and catalog edits --------
    def add_bonus_slot(self, amount: int = 1) -> PrizeDefinition:
        """Add slots to the selected prize, e.g. after it ran out."""
        self._ensure_not_drawing("add bonus slots")
        prize = self.prize
        if prize is None:
            raise DrawBlockedError(DrawCondition.NO_PRIZE_SELECTED, "Select a prize first.")
        return self.catalog.add_bonus(prize.id, amount)

    def undo(self, record_id: str) -> WinnerRecord:
        """Delete one winner record, returning its slot and eligibility."""
        self._ensure_not_drawing("delete winners")
        removed = self.ledger.delete(record_id)
        self._last_winners = tuple(r for r in self._last_winners if r.id != record_id)
        return removed

    def reset_scope(self) -> list[WinnerRecord]:
        """Delete every winner record of the current scope."""
        self._ensure_not_drawing("reset winners")
        removed = self.ledger.clear_scope(self._scope)
        self._revealed = False
        self._last_winners = ()
        return removed

    def _ensure_not_drawing(self, action: str) -> None:
        if self._drawing:
            raise DrawStateError(f"Cannot {action} while a draw is running")

    def _reset_selection(self) -> None:
        self._prize_id = None
        self._revealed = False
        self._last_winners = ()


__all__ = [
    "ConfirmationRequiredError",
    "DrawBlockedError",
    "DrawCondition",
    "DrawMode",
    "DrawReadiness",
    "DrawSession",
    "DrawState",
    "DrawStateError",
]
