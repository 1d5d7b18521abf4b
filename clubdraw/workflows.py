import logging
import random
from typing import Iterable, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from .defaults import default_prize_entries
from .models import Member, Prize, Winner
from .prize_draw.catalog import PrizeCatalog
from .prize_draw.ledger import WinnerLedger
from .prize_draw.lifecycle import DrawMode, DrawSession
from .prize_draw.roster import Roster
from .prize_draw.slots import remaining_slots
from .prize_draw.types import PrizeDefinition, Scope, WinnerRecord, scope_context_for

logger = logging.getLogger(__name__)


def load_roster(session: Session) -> Roster:
    """Return the stored roster as an engine snapshot."""
    return Roster(m.to_participant() for m in Member.all_ordered(session))


def load_catalog(session: Session) -> PrizeCatalog:
    """Return every stored prize grouped by scope context."""
    grouped: dict[tuple[Scope, Optional[str]], list[PrizeDefinition]] = {}
    prizes = session.scalars(select(Prize).order_by(Prize.position, Prize.id)).all()
    for prize in prizes:
        grouped.setdefault((prize.scope_enum, prize.filter_value), []).append(
            prize.to_definition()
        )

    catalog = PrizeCatalog()
    for (scope, filter_value), definitions in grouped.items():
        catalog.replace(scope, filter_value, definitions)
    return catalog


def load_ledger(session: Session) -> WinnerLedger:
    """Return the stored winners, oldest first, as an engine ledger."""
    return WinnerLedger(w.to_record() for w in Winner.all_ordered(session))


def replace_roster(
    session: Session,
    roster: Roster,
    *,
    clear_winners: bool = False,
) -> int:
    """Replace the stored roster with ``roster``.

    Winner records point at roster ids, so a replacement that would orphan
    existing winners is refused unless ``clear_winners`` is set, in which case
    the whole ledger is deleted first. Members whose id survives are updated
    in place.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session.
    roster : Roster
        New roster snapshot.
    clear_winners : bool, default: False
        Delete every winner record before replacing the roster.

    Returns
    -------
    int
        Number of members stored.

    Raises
    ------
    ValueError
        If existing winners reference ids missing from ``roster`` and
        ``clear_winners`` is not set.
    """

    if clear_winners:
        cleared = clear_winners_for_scope(session, None)
        logger.info(f"Cleared {cleared} winner record(s) before roster replacement")
    else:
        orphaned = sorted(
            set(session.scalars(select(Winner.participant_id)).all()) - roster.ids
        )
        if orphaned:
            raise ValueError(
                f"{len(orphaned)} winner record(s) reference participants missing "
                "from the new roster; clear the winners or keep their ids stable"
            )

    session.execute(delete(Member).where(Member.id.not_in(sorted(roster.ids))))
    existing = {m.id: m for m in session.scalars(select(Member)).all()}
    for position, participant in enumerate(roster):
        member = existing.get(participant.id)
        if member is None:
            session.add(Member.from_participant(participant, position=position))
            continue
        member.name = participant.name
        member.club = participant.club
        member.zone = participant.zone
        member.title = participant.title
        member.position = position

    session.flush()
    logger.info(f"Roster replaced with {len(roster)} participant(s)")
    return len(roster)


def replace_prizes(
    session: Session,
    scope: Scope,
    filter_value: Optional[str],
    prizes: Sequence[PrizeDefinition],
    *,
    zone: Optional[str] = None,
) -> list[Prize]:
    """Replace the prizes of one scope context.

    Prizes keeping their id are updated in place, so their winners stay
    linked. Winners of removed prizes keep their record with ``prize_id``
    cleared and are matched by prize name from then on.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session.
    scope : Scope
        Scope of the context.
    filter_value : Optional[str]
        Zone name (``ZONE``) or club name (``CLUB``); ignored for ``DISTRICT``.
    prizes : Sequence[PrizeDefinition]
        New prize list for the context, in display order.
    zone : Optional[str], default: None
        Zone of the club, recorded on club prizes.

    Returns
    -------
    list[Prize]
        The stored prize rows in display order.

    Raises
    ------
    ValueError
        If the context is incomplete or a prize id is used by another context.
    """

    scope = Scope(scope)
    context = scope_context_for(scope, filter_value)
    if scope is Scope.DISTRICT:
        filter_value = None

    # Reject repeated ids and ids owned by another context before writing.
    PrizeCatalog().replace(scope, filter_value, prizes)
    for prize in prizes:
        owner = session.get(Prize, prize.id)
        if owner is not None and (owner.scope_enum, owner.scope_context) != (scope, context):
            raise ValueError(
                f"Prize id '{prize.id}' already belongs to "
                f"{owner.scope} context '{owner.scope_context}'"
            )

    current = {p.id: p for p in Prize.for_context(session, scope, filter_value)}
    keep = {p.id for p in prizes}
    for prize_id, row in current.items():
        if prize_id not in keep:
            session.delete(row)

    rows: list[Prize] = []
    for position, definition in enumerate(prizes):
        row = current.get(definition.id)
        if row is None:
            row = Prize.from_definition(
                definition, scope, filter_value, zone=zone, position=position
            )
            session.add(row)
        else:
            row.name = definition.name
            row.item_name = definition.item_description
            row.total_slots = definition.total_slots
            row.sponsor = definition.sponsor
            row.sponsor_title = definition.sponsor_title
            row.position = position
            if scope is Scope.CLUB and zone is not None:
                row.zone = zone
        rows.append(row)

    session.flush()
    logger.info(f"Stored {len(rows)} prize(s) for {scope.value} context '{context}'")
    return rows


def load_default_prizes(session: Session) -> int:
    """Store the built-in prize catalog, replacing each of its contexts."""
    grouped: dict[tuple[Scope, Optional[str]], tuple[Optional[str], list[PrizeDefinition]]] = {}
    for entry in default_prize_entries():
        _zone, bucket = grouped.setdefault((entry.scope, entry.filter_value), (entry.zone, []))
        bucket.append(entry.prize)

    total = 0
    for (scope, filter_value), (zone, definitions) in grouped.items():
        total += len(replace_prizes(session, scope, filter_value, definitions, zone=zone))
    return total


def add_bonus_slot(session: Session, prize_id: str, amount: int = 1) -> Prize:
    """Add ``amount`` slots to a stored prize.

    Raises
    ------
    KeyError
        If no prize has ``prize_id``.
    ValueError
        If ``amount`` is not positive.
    """

    prize = session.get(Prize, prize_id)
    if prize is None:
        raise KeyError(f"Unknown prize '{prize_id}'")
    prize.add_bonus_slots(amount)
    session.flush()
    logger.info(f"Prize '{prize_id}' now has {prize.total_slots} slot(s)")
    return prize


def prize_remaining_slots(
    session: Session,
    prize_id: str,
    *,
    legacy_name_match: bool = True,
) -> int:
    """Return the remaining slots of a stored prize."""

    prize = session.get(Prize, prize_id)
    if prize is None:
        raise KeyError(f"Unknown prize '{prize_id}'")
    return remaining_slots(
        prize.to_definition(),
        load_ledger(session),
        prize.scope_enum,
        prize.scope_context,
        legacy_name_match=legacy_name_match,
    )


def commit_winners(session: Session, records: Iterable[WinnerRecord]) -> list[Winner]:
    """Persist one draw batch atomically.

    The batch is checked against the stored ledger first and then written in
    a single flush. If the flush fails the caller's transaction must be
    rolled back, which discards the whole batch.

    Raises
    ------
    ValueError
        If a record id already exists or a participant already won in the
        record's scope.
    """

    batch = list(records)
    if not batch:
        return []

    load_ledger(session).append_batch(batch)

    rows = [Winner.from_record(record) for record in batch]
    session.add_all(rows)
    session.flush()

    logger.info(
        f"Committed {len(rows)} winner(s) for {batch[0].scope.value} "
        f"context '{batch[0].scope_context}'"
    )
    return rows


def run_draw(
    session: Session,
    scope: Scope,
    filter_value: Optional[str],
    prize_id: str,
    *,
    count: Optional[int] = None,
    confirm_downgrade: bool = False,
    rng: Optional[random.Random] = None,
    legacy_name_match: bool = True,
) -> list[Winner]:
    """Draw winners for a stored prize and persist them in one batch.

    The roster, catalog and ledger are read from ``session`` right before the
    draw, and the winners are written in the same transaction. Hosts serving
    several operators should serialize calls for the same prize; the unique
    ``(scope, participant_id)`` constraint rejects a batch that would award
    someone twice.

    This function essentially wraps :class:`DrawSession`.

    Parameters
    ----------
    session : Session
        Active session used for reads and persistence.
    scope : Scope
        Scope of the draw.
    filter_value : Optional[str]
        Zone or club name for ``ZONE``/``CLUB`` draws.
    prize_id : str
        Prize to draw; it must belong to the selected scope context.
    count : Optional[int], default: None
        Number of winners. ``None`` draws every remaining slot. The count is
        capped by the remaining slots.
    confirm_downgrade : bool, default: False
        Accept drawing fewer winners when fewer participants are eligible.
    rng : Optional[random.Random], default: None
        Random generator for the draw.
    legacy_name_match : bool, default: True
        Whether records without a prize id count against same-named prizes.

    Returns
    -------
    list[Winner]
        Persisted winner rows in draw order.

    Raises
    ------
    DrawBlockedError
        If the draw cannot start (no target, nobody eligible, prize exhausted).
    ConfirmationRequiredError
        If fewer participants are eligible than requested and
        ``confirm_downgrade`` is not set.
    KeyError
        If the prize is not offered in the selected scope context.
    """

    draw = DrawSession(
        load_roster(session),
        load_catalog(session),
        load_ledger(session),
        rng=rng,
        legacy_name_match=legacy_name_match,
    )
    draw.select_scope(scope, filter_value)
    draw.select_prize(prize_id)
    if count is None:
        draw.set_mode(DrawMode.ALL)
    else:
        draw.set_mode(DrawMode.CUSTOM, batch_size=count)

    expected = draw.start(confirm_downgrade=confirm_downgrade)
    logger.debug(f"Drawing {expected} winner(s) for prize '{prize_id}'")
    records = draw.stop()
    return commit_winners(session, records)


def delete_winner(session: Session, record_id: str) -> Winner:
    """Delete one winner record so its slot and eligibility are returned.

    Raises
    ------
    KeyError
        If no record has ``record_id``.
    """

    winner = session.get(Winner, record_id)
    if winner is None:
        raise KeyError(f"Unknown winner record '{record_id}'")
    session.delete(winner)
    session.flush()
    logger.info(
        f"Deleted winner '{record_id}' ({winner.participant_id}) from {winner.scope} scope"
    )
    return winner


def clear_winners_for_scope(session: Session, scope: Optional[Scope]) -> int:
    """Delete every winner of ``scope``, or the whole ledger when ``scope`` is ``None``."""

    stmt = delete(Winner)
    if scope is not None:
        stmt = stmt.where(Winner.scope == Scope(scope).value)
    result = session.execute(stmt)
    session.flush()
    removed = result.rowcount or 0
    logger.info(
        f"Cleared {removed} winner record(s)"
        + (f" from {Scope(scope).value} scope" if scope is not None else "")
    )
    return removed
