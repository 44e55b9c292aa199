"""Raffle (prize drawing) model."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from raffledesk.models.base import Base, new_id, utcnow

DEFAULT_MAX_TICKETS = 1000


class Raffle(Base):
    __tablename__ = "raffles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    entity_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    prize_description: Mapped[str] = mapped_column(String(500), nullable=False)
    ticket_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    max_tickets: Mapped[int] = mapped_column(Integer, nullable=False, default=DEFAULT_MAX_TICKETS)
    sold_tickets: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    draw_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    winning_ticket_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # Purchase id owning the winning ticket.
    winner_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
