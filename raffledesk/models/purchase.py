"""Ticket purchase and the individual tickets it owns."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from raffledesk.models.base import Base, new_id, utcnow


class TicketPurchase(Base):
    """One sale of a contiguous block of ticket numbers to one buyer."""

    __tablename__ = "purchases"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    entity_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    # Null for legacy rows and for sales made outside any session.
    session_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    buyer_name: Mapped[str] = mapped_column(String(200), nullable=False)
    raffler_name: Mapped[str] = mapped_column(String(200), nullable=False)
    ticket_count: Mapped[int] = mapped_column(Integer, nullable=False)
    price_per_ticket: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    start_ticket_number: Mapped[int] = mapped_column(Integer, nullable=False)
    end_ticket_number: Mapped[int] = mapped_column(Integer, nullable=False)
    is_gift: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    gifter_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    is_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow, index=True)

    tickets: Mapped[list["RaffleTicket"]] = relationship(
        back_populates="purchase",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="RaffleTicket.ticket_number",
    )

    @property
    def ticket_range(self) -> str:
        return f"{self.start_ticket_number}-{self.end_ticket_number}"


class RaffleTicket(Base):
    """A single ticket number inside a purchase's range."""

    __tablename__ = "raffle_tickets"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    ticket_number: Mapped[int] = mapped_column(Integer, nullable=False)
    purchase_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("purchases.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    purchase: Mapped[TicketPurchase] = relationship(back_populates="tickets")
