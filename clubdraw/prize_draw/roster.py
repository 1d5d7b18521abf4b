"""Participant roster snapshots and validation of imported rows."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Mapping, Optional, Sequence

from .types import Participant

# Accepted keys per field, in lookup order. The Chinese headers are the ones
# used by the event's registration sheet.
ROSTER_COLUMNS: dict[str, tuple[str, ...]] = {
    "id": ("id", "編號"),
    "name": ("name", "姓名"),
    "club": ("club", "社團"),
    "zone": ("zone", "分區"),
    "title": ("title", "職稱"),
}


class Roster:
    """Immutable, ordered collection of participants with unique ids."""

    def __init__(self, participants: Iterable[Participant] = ()) -> None:
        members = tuple(participants)
        by_id: dict[str, Participant] = {}
        for participant in members:
            if participant.id in by_id:
                raise ValueError(f"Duplicate participant id '{participant.id}' in roster")
            by_id[participant.id] = participant
        self._participants = members
        self._by_id = by_id

    def __iter__(self) -> Iterator[Participant]:
        return iter(self._participants)

    def __len__(self) -> int:
        return len(self._participants)

    def __contains__(self, participant_id: object) -> bool:
        return participant_id in self._by_id

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return f"<Roster(participants={len(self._participants)})>"

    @property
    def participants(self) -> tuple[Participant, ...]:
        return self._participants

    @property
    def ids(self) -> frozenset[str]:
        return frozenset(self._by_id)

    def get(self, participant_id: str) -> Optional[Participant]:
        """Return the participant with ``participant_id`` if present."""
        return self._by_id.get(participant_id)

    def zones(self) -> list[str]:
        """Return the distinct zone names, sorted."""
        return sorted({p.zone for p in self._participants})

    def clubs(self, zone: Optional[str] = None) -> list[str]:
        """Return the distinct club names, sorted, optionally within ``zone``."""
        return sorted(
            {p.club for p in self._participants if zone is None or p.zone == zone}
        )

    def zone_clubs(self) -> dict[str, list[str]]:
        """Return a mapping of zone name to its sorted club names."""
        mapping: dict[str, set[str]] = {}
        for p in self._participants:
            mapping.setdefault(p.zone, set()).add(p.club)
        return {zone: sorted(clubs) for zone, clubs in sorted(mapping.items())}


@dataclass(frozen=True)
class ImportIssue:
    """A problem found in one imported row.

    ``row`` follows spreadsheet numbering (the header is row 1); ``0`` marks
    an issue with the input as a whole.
    """

    row: int
    column: str
    message: str


@dataclass
class RosterImport:
    """Outcome of :func:`build_roster`."""

    roster: Roster
    issues: list[ImportIssue] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.issues


def _cell(row: Mapping[str, Any], key: str) -> str:
    for column in ROSTER_COLUMNS[key]:
        value = row.get(column)
        if value is not None and str(value).strip():
            return str(value).strip()
    return ""


def build_roster(rows: Sequence[Mapping[str, Any]], *, first_row: int = 2) -> RosterImport:
    """Validate parsed rows and build a :class:`Roster` from the valid ones.

    Rows missing a name, club or zone are skipped and reported. A row without
    an id gets ``p-<row number>``. Later rows reusing an id are skipped and
    reported as duplicates.

    Parameters
    ----------
    rows : Sequence[Mapping[str, Any]]
        One mapping per data row, keyed by the headers in
        :data:`ROSTER_COLUMNS`.
    first_row : int, default: 2
        Row number of ``rows[0]`` used in issue reports.

    Returns
    -------
    RosterImport
        Roster of the valid rows plus the collected issues.
    """

    issues: list[ImportIssue] = []
    if not rows:
        issues.append(ImportIssue(row=0, column="", message="No participant rows to import"))
        return RosterImport(roster=Roster(), issues=issues)

    participants: list[Participant] = []
    seen: set[str] = set()
    for offset, row in enumerate(rows):
        row_number = first_row + offset
        name = _cell(row, "name")
        club = _cell(row, "club")
        zone = _cell(row, "zone")
        if not name:
            issues.append(ImportIssue(row_number, ROSTER_COLUMNS["name"][-1], "name is required"))
            continue
        if not club:
            issues.append(ImportIssue(row_number, ROSTER_COLUMNS["club"][-1], "club is required"))
            continue
        if not zone:
            issues.append(ImportIssue(row_number, ROSTER_COLUMNS["zone"][-1], "zone is required"))
            continue

        participant_id = _cell(row, "id") or f"p-{row_number}"
        if participant_id in seen:
            issues.append(
                ImportIssue(
                    row_number,
                    ROSTER_COLUMNS["id"][-1],
                    f"duplicate participant id '{participant_id}'",
                )
            )
            continue
        seen.add(participant_id)
        participants.append(
            Participant(
                id=participant_id,
                name=name,
                club=club,
                zone=zone,
                title=_cell(row, "title") or None,
            )
        )

    return RosterImport(roster=Roster(participants), issues=issues)


__all__ = ["ImportIssue", "ROSTER_COLUMNS", "Roster", "RosterImport", "build_roster"]
