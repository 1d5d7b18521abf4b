from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Index, Integer, String, select
from sqlalchemy.orm import Mapped, Session, mapped_column

from ..prize_draw.types import Participant
from .base import Base


class Member(Base):
    """A club member on the event roster."""

    __tablename__ = "participants"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    """Roster identifier, unique within the current roster."""

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    club: Mapped[str] = mapped_column(String(100), nullable=False)
    zone: Mapped[str] = mapped_column(String(50), nullable=False)
    title: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    """Row order of the imported roster."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("ix_participants_zone_club", "zone", "club"),
    )

    def __init__(
        self,
        *,
        id: str,
        name: str,
        club: str,
        zone: str,
        title: Optional[str] = None,
        position: int = 0,
        created_at: Optional[datetime] = None,
    ) -> None:
        self.id = id
        self.name = name
        self.club = club
        self.zone = zone
        self.title = title
        self.position = position
        if created_at is not None:
            self.created_at = created_at

    def __repr__(self) -> str:
        return (
            f"<Member(id='{self.id}', name='{self.name}', "
            f"club='{self.club}', zone='{self.zone}')>"
        )

    @classmethod
    def from_participant(cls, participant: Participant, *, position: int = 0) -> "Member":
        return cls(
            id=participant.id,
            name=participant.name,
            club=participant.club,
            zone=participant.zone,
            title=participant.title,
            position=position,
        )

    def to_participant(self) -> Participant:
        """Return the immutable snapshot used by the draw engine."""
        return Participant(
            id=self.id,
            name=self.name,
            club=self.club,
            zone=self.zone,
            title=self.title,
        )

    @classmethod
    def all_ordered(cls, session: Session) -> list["Member"]:
        """Return every member in roster order."""
        return list(session.scalars(select(cls).order_by(cls.position, cls.id)).all())
