"""Selling session (a shift) model.

A session owns a ticket-numbering epoch: starting one resets the entity's
counter, so ticket numbers restart at 1 for every shift.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Index, Integer, Numeric, String, text
from sqlalchemy.orm import Mapped, mapped_column

from raffledesk.models.base import Base, new_id, utcnow

STATUS_ACTIVE = "active"
STATUS_CLOSED = "closed"


class RaffleSession(Base):
    """One user's shift selling tickets for one entity."""

    __tablename__ = "sessions"
    __table_args__ = (
        # At most one active session per entity.
        Index(
            "uq_sessions_active_entity",
            "entity_id",
            unique=True,
            sqlite_where=text("status = 'active'"),
            postgresql_where=text("status = 'active'"),
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    # No FK: sessions outlive a deleted entity as history.
    entity_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False)
    started_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    ended_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    start_ticket_number: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    end_ticket_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    tickets_sold: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_revenue: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=STATUS_ACTIVE)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    @property
    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE
