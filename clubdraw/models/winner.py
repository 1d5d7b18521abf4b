"""Persisted winner ledger."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
    select,
)
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from ..db.utils import dt_iso
from ..prize_draw.types import Scope, WinnerRecord
from .base import Base

if TYPE_CHECKING:
    from .prize import Prize


class Winner(Base):
    """One drawn winner: a participant bound to a prize in a scope."""

    __tablename__ = "winners"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    """Record identifier (UUID string)."""

    participant_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    """Roster id of the winner. Not a foreign key so winners outlive roster rows."""

    participant_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    participant_club: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    participant_zone: Mapped[str] = mapped_column(String(50), nullable=False, default="")

    scope: Mapped[str] = mapped_column(String(20), nullable=False)
    """Scope the winner was drawn in."""

    prize_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("prizes.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    """Prize awarded. Becomes ``NULL`` if the prize row is removed, after which
    the record is matched by ``prize_name`` like records that predate prize ids."""

    prize_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    prize_item: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    scope_context: Mapped[str] = mapped_column(String(100), nullable=False)
    """Zone name, club name or the district context."""

    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False)
    """Epoch milliseconds when the winner was drawn."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    prize: Mapped[Optional["Prize"]] = relationship(back_populates="winners")

    __table_args__ = (
        # Winning is scope-local: one win per participant per scope.
        UniqueConstraint("scope", "participant_id", name="uq_winners_scope_participant"),
        CheckConstraint("scope IN ('district','zone','club')", name="scope_enum"),
        Index("ix_winners_scope_context", "scope", "scope_context"),
    )

    def __init__(
        self,
        *,
        id: str,
        participant_id: str,
        scope: Scope | str,
        scope_context: str,
        timestamp: int,
        prize_id: Optional[str] = None,
        participant_name: str = "",
        participant_club: str = "",
        participant_zone: str = "",
        prize_name: str = "",
        prize_item: str = "",
        created_at: Optional[datetime] = None,
    ) -> None:
        self.id = id
        self.participant_id = participant_id
        self.scope = Scope(scope).value
        self.scope_context = scope_context
        self.timestamp = timestamp
        self.prize_id = prize_id
        self.participant_name = participant_name
        self.participant_club = participant_club
        self.participant_zone = participant_zone
        self.prize_name = prize_name
        self.prize_item = prize_item
        if created_at is not None:
            self.created_at = created_at

    def __repr__(self) -> str:
        return (
            f"<Winner(id='{self.id}', participant_id='{self.participant_id}', "
            f"scope='{self.scope}', prize_id='{self.prize_id}', "
            f"scope_context='{self.scope_context}')>"
        )

    @classmethod
    def from_record(cls, record: WinnerRecord) -> "Winner":
        return cls(
            id=record.id,
            participant_id=record.participant_id,
            scope=record.scope,
            scope_context=record.scope_context,
            timestamp=record.timestamp,
            prize_id=record.prize_id,
            participant_name=record.participant_name,
            participant_club=record.participant_club,
            participant_zone=record.participant_zone,
            prize_name=record.prize_name,
            prize_item=record.prize_item,
        )

    def to_record(self) -> WinnerRecord:
        """Return the immutable snapshot used by the draw engine."""
        return WinnerRecord(
            id=self.id,
            participant_id=self.participant_id,
            scope=Scope(self.scope),
            prize_id=self.prize_id,
            scope_context=self.scope_context,
            timestamp=self.timestamp,
            participant_name=self.participant_name,
            participant_club=self.participant_club,
            participant_zone=self.participant_zone,
            prize_name=self.prize_name,
            prize_item=self.prize_item,
        )

    def to_json(self) -> dict[str, Any]:
        """Serialize the record for display or export collaborators."""
        return {
            "id": self.id,
            "participant_id": self.participant_id,
            "participant_name": self.participant_name,
            "participant_club": self.participant_club,
            "participant_zone": self.participant_zone,
            "scope": self.scope,
            "prize_id": self.prize_id,
            "prize_name": self.prize_name,
            "prize_item": self.prize_item,
            "scope_context": self.scope_context,
            "timestamp": self.timestamp,
            "created_at": dt_iso(self.created_at),
        }

    @classmethod
    def all_ordered(cls, session: Session, scope: Optional[Scope] = None) -> list["Winner"]:
        """Return winners oldest first, optionally limited to one scope."""
        stmt = select(cls)
        if scope is not None:
            stmt = stmt.where(cls.scope == Scope(scope).value)
        return list(session.scalars(stmt.order_by(cls.timestamp, cls.created_at, cls.id)).all())


__all__ = ["Winner"]
