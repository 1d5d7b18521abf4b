"""In-memory winner ledger."""

from __future__ import annotations

from typing import Iterable, Iterator, Optional

from .types import Scope, WinnerRecord


class WinnerLedger:
    """Ordered, append-mostly log of :class:`WinnerRecord` entries.

    The ledger is the only place that knows who has won what. Eligibility and
    remaining slots are derived from it on every read, so a deletion shows up
    in the next query without any cache invalidation.
    """

    def __init__(self, records: Iterable[WinnerRecord] = ()) -> None:
        self._records: list[WinnerRecord] = []
        self.append_batch(records)

    def __iter__(self) -> Iterator[WinnerRecord]:
        return iter(tuple(self._records))

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return f"<WinnerLedger(records={len(self._records)})>"

    def get(self, record_id: str) -> Optional[WinnerRecord]:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def records(
        self,
        scope: Optional[Scope] = None,
        scope_context: Optional[str] = None,
    ) -> list[WinnerRecord]:
        """Return records in append order, optionally narrowed to a scope/context."""
        return [
            r
            for r in self._records
            if (scope is None or r.scope == scope)
            and (scope_context is None or r.scope_context == scope_context)
        ]

    def winner_ids(self, scope: Scope) -> frozenset[str]:
        """Return the participant ids that already won in ``scope``."""
        return frozenset(r.participant_id for r in self._records if r.scope == scope)

    def append(self, record: WinnerRecord) -> WinnerRecord:
        return self.append_batch([record])[0]

    def append_batch(self, records: Iterable[WinnerRecord]) -> tuple[WinnerRecord, ...]:
        """Append all of ``records`` or none of them.

        The whole batch is validated against the current ledger and against
        itself before anything is stored.

        Raises
        ------
        ValueError
            If a record id is already used, or a participant would win twice
            in the same scope.
        """
        batch = tuple(records)
        record_ids = {r.id for r in self._records}
        scope_winners = {(r.scope, r.participant_id) for r in self._records}
        for record in batch:
            if record.id in record_ids:
                raise ValueError(f"Winner record '{record.id}' already exists")
            key = (record.scope, record.participant_id)
            if key in scope_winners:
                raise ValueError(
                    f"Participant '{record.participant_id}' already won in "
                    f"{record.scope.value} scope"
                )
            record_ids.add(record.id)
            scope_winners.add(key)

        self._records.extend(batch)
        return batch

    def delete(self, record_id: str) -> WinnerRecord:
        """Remove one record, returning its slot and the participant's eligibility."""
        for idx, record in enumerate(self._records):
            if record.id == record_id:
                return self._records.pop(idx)
        raise KeyError(f"Unknown winner record '{record_id}'")

    def clear_scope(self, scope: Scope, scope_context: Optional[str] = None) -> list[WinnerRecord]:
        """Remove every record of ``scope`` (optionally one context) and return them."""
        removed = self.records(scope, scope_context)
        if removed:
            removed_ids = {r.id for r in removed}
            self._records = [r for r in self._records if r.id not in removed_ids]
        return removed

    def clear(self) -> int:
        count = len(self._records)
        self._records.clear()
        return count


__all__ = ["WinnerLedger"]
