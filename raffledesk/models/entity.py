"""Club entity and its ticket counter."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, SmallInteger, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from raffledesk.models.base import Base, new_id, utcnow

DEFAULT_EMOJI = "🎲"
DEFAULT_TAGLINE = "Thanks for your Purchase.. and good luck~"
DEFAULT_RAFFLE_PERCENTAGE = 70


class Entity(Base):
    """A club selling raffle tickets under its own branding."""

    __tablename__ = "entities"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    display_name: Mapped[str] = mapped_column(String(200), nullable=False)
    emoji: Mapped[str] = mapped_column(String(32), nullable=False, default=DEFAULT_EMOJI)
    tagline: Mapped[str] = mapped_column(String(500), nullable=False, default=DEFAULT_TAGLINE)
    raffle_percentage: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=DEFAULT_RAFFLE_PERCENTAGE)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    counter: Mapped["TicketCounter"] = relationship(
        back_populates="entity",
        cascade="all, delete-orphan",
        passive_deletes=True,
        uselist=False,
    )


class TicketCounter(Base):
    """Last ticket number handed out for an entity (0 = none yet)."""

    __tablename__ = "ticket_counters"

    entity_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("entities.id", ondelete="CASCADE"),
        primary_key=True,
    )
    last_ticket_number: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    entity: Mapped[Entity] = relationship(back_populates="counter")
