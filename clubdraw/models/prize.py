"""Prize catalog rows."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    String,
    select,
)
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from ..prize_draw.types import (
    PrizeDefinition,
    Scope,
    scope_context_for,
    with_bonus_slots,
)
from .base import Base

if TYPE_CHECKING:
    from .winner import Winner


class Prize(Base):
    """A prize offered in exactly one district, zone or club context."""

    __tablename__ = "prizes"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    """Stable prize identifier, e.g. ``"z4-dag-1"``."""

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    """Prize name, e.g. ``"分區長官獎"``. Not unique."""

    item_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    """Description of what the winner receives."""

    total_slots: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    """Number of winners. Raised in place when bonus slots are added."""

    sponsor: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    sponsor_title: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    scope: Mapped[str] = mapped_column(String(20), nullable=False)
    """One of the :class:`~clubdraw.prize_draw.types.Scope` values."""

    zone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    """Zone name for zone prizes."""

    club: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    """Club name for club prizes."""

    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    """Display order within the prize's context."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    winners: Mapped[list["Winner"]] = relationship(back_populates="prize")
    """Winner rows still linked to this prize by id."""

    __table_args__ = (
        CheckConstraint("total_slots >= 0", name="total_slots_non_negative"),
        CheckConstraint("scope IN ('district','zone','club')", name="scope_enum"),
        CheckConstraint(
            "(scope = 'district' AND zone IS NULL AND club IS NULL) OR "
            "(scope = 'zone' AND zone IS NOT NULL AND club IS NULL) OR "
            "(scope = 'club' AND club IS NOT NULL)",
            name="scope_context_consistency",
        ),
        Index("ix_prizes_context", "scope", "zone", "club"),
    )

    def __init__(
        self,
        *,
        id: str,
        name: str,
        scope: Scope | str,
        total_slots: int = 1,
        item_name: Optional[str] = None,
        sponsor: Optional[str] = None,
        sponsor_title: Optional[str] = None,
        zone: Optional[str] = None,
        club: Optional[str] = None,
        position: int = 0,
        created_at: Optional[datetime] = None,
    ) -> None:
        if total_slots < 0:
            raise ValueError("total_slots must be non-negative")
        self.id = id
        self.name = name
        self.scope = Scope(scope).value
        self.total_slots = total_slots
        self.item_name = item_name
        self.sponsor = sponsor
        self.sponsor_title = sponsor_title
        self.zone = zone
        self.club = club
        self.position = position
        if created_at is not None:
            self.created_at = created_at

    def __repr__(self) -> str:
        return (
            f"<Prize(id='{self.id}', name='{self.name}', scope='{self.scope}', "
            f"context='{self.scope_context}', total_slots={self.total_slots})>"
        )

    @property
    def scope_enum(self) -> Scope:
        return Scope(self.scope)

    @property
    def filter_value(self) -> Optional[str]:
        """Zone or club name this prize is drawn for; ``None`` for district prizes."""
        scope = self.scope_enum
        if scope is Scope.ZONE:
            return self.zone
        if scope is Scope.CLUB:
            return self.club
        return None

    @property
    def scope_context(self) -> str:
        return scope_context_for(self.scope_enum, self.filter_value)

    @classmethod
    def from_definition(
        cls,
        definition: PrizeDefinition,
        scope: Scope,
        filter_value: Optional[str] = None,
        *,
        zone: Optional[str] = None,
        position: int = 0,
    ) -> "Prize":
        """Create a row for ``definition`` in the given scope context.

        ``zone`` may be supplied for club prizes to record which zone the club
        belongs to.
        """
        scope = Scope(scope)
        scope_context_for(scope, filter_value)
        return cls(
            id=definition.id,
            name=definition.name,
            scope=scope,
            total_slots=definition.total_slots,
            item_name=definition.item_description,
            sponsor=definition.sponsor,
            sponsor_title=definition.sponsor_title,
            zone=filter_value if scope is Scope.ZONE else (zone if scope is Scope.CLUB else None),
            club=filter_value if scope is Scope.CLUB else None,
            position=position,
        )

    def to_definition(self) -> PrizeDefinition:
        """Return the immutable snapshot used by the slot calculator."""
        return PrizeDefinition(
            id=self.id,
            name=self.name,
            total_slots=self.total_slots,
            item_description=self.item_name,
            sponsor=self.sponsor,
            sponsor_title=self.sponsor_title,
        )

    def add_bonus_slots(self, amount: int = 1) -> int:
        """Increase ``total_slots`` by ``amount`` and return the new total."""
        self.total_slots = with_bonus_slots(self.to_definition(), amount).total_slots
        return self.total_slots

    @classmethod
    def for_context(
        cls, session: Session, scope: Scope, filter_value: Optional[str] = None
    ) -> list["Prize"]:
        """Return the prizes of one scope context in display order."""
        scope = Scope(scope)
        stmt = select(cls).where(cls.scope == scope.value)
        if scope is Scope.ZONE:
            stmt = stmt.where(cls.zone == filter_value)
        elif scope is Scope.CLUB:
            stmt = stmt.where(cls.club == filter_value)
        return list(session.scalars(stmt.order_by(cls.position, cls.id)).all())


__all__ = ["Prize"]
