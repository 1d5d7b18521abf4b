"""Prize definitions grouped by the scope context they belong to."""

from __future__ import annotations

from typing import Iterable, Iterator, Optional

from .types import PrizeDefinition, Scope, scope_context_for, with_bonus_slots

ContextKey = tuple[Scope, str]


class PrizeCatalog:
    """Mutable registry of prizes keyed by ``(scope, scope_context)``.

    Each prize belongs to exactly one context: the district, one zone or one
    club. Prize ids are unique across the whole catalog.
    """

    def __init__(self) -> None:
        self._prizes: dict[ContextKey, list[PrizeDefinition]] = {}
        self._index: dict[str, ContextKey] = {}

    def __iter__(self) -> Iterator[tuple[Scope, str, PrizeDefinition]]:
        for (scope, context), prizes in self._prizes.items():
            for prize in prizes:
                yield scope, context, prize

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, prize_id: object) -> bool:
        return prize_id in self._index

    def replace(
        self,
        scope: Scope,
        filter_value: Optional[str],
        prizes: Iterable[PrizeDefinition],
    ) -> list[PrizeDefinition]:
        """Replace every prize of one context with ``prizes``.

        Raises
        ------
        ValueError
            If the context is incomplete, an id repeats within ``prizes``, or
            an id is already used by another context.
        """
        scope = Scope(scope)
        key = (scope, scope_context_for(scope, filter_value))
        new_prizes = list(prizes)

        seen: set[str] = set()
        for prize in new_prizes:
            if prize.id in seen:
                raise ValueError(f"Duplicate prize id '{prize.id}'")
            seen.add(prize.id)
            owner = self._index.get(prize.id)
            if owner is not None and owner != key:
                raise ValueError(
                    f"Prize id '{prize.id}' already belongs to "
                    f"{owner[0].value} context '{owner[1]}'"
                )

        for old in self._prizes.pop(key, []):
            self._index.pop(old.id, None)
        if new_prizes:
            self._prizes[key] = new_prizes
            for prize in new_prizes:
                self._index[prize.id] = key
        return list(new_prizes)

    def prizes_for(self, scope: Scope, filter_value: Optional[str] = None) -> list[PrizeDefinition]:
        """Return the prizes of a context; empty when the target is missing."""
        scope = Scope(scope)
        if scope.needs_target and not filter_value:
            return []
        return list(self._prizes.get((scope, scope_context_for(scope, filter_value)), []))

    def get(self, prize_id: str) -> PrizeDefinition:
        """Return the prize registered under ``prize_id``."""
        scope, context = self.locate(prize_id)
        for prize in self._prizes[(scope, context)]:
            if prize.id == prize_id:
                return prize
        raise KeyError(f"Unknown prize '{prize_id}'")  # pragma: no cover - index is kept in sync

    def locate(self, prize_id: str) -> ContextKey:
        """Return the ``(scope, scope_context)`` that ``prize_id`` belongs to."""
        try:
            return self._index[prize_id]
        except KeyError as exc:
            raise KeyError(f"Unknown prize '{prize_id}'") from exc

    def add_bonus(self, prize_id: str, amount: int = 1) -> PrizeDefinition:
        """Increase a prize's ``total_slots`` in place and return the new definition."""
        key = self.locate(prize_id)
        prizes = self._prizes[key]
        for idx, prize in enumerate(prizes):
            if prize.id == prize_id:
                prizes[idx] = with_bonus_slots(prize, amount)
                return prizes[idx]
        raise KeyError(f"Unknown prize '{prize_id}'")  # pragma: no cover - index is kept in sync

    def clear(self) -> None:
        self._prizes.clear()
        self._index.clear()

    def slot_totals(self) -> dict[Scope, int]:
        """Return the sum of ``total_slots`` per scope."""
        totals = {scope: 0 for scope in Scope}
        for scope, _context, prize in self:
            totals[scope] += prize.total_slots
        return totals


__all__ = ["PrizeCatalog"]
