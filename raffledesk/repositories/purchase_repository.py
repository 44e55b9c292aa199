"""Repository layer for the purchase ledger."""

from __future__ import annotations

from collections.abc import Collection, Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Select, case, func, select
from sqlalchemy.orm import Session, selectinload

from raffledesk.models.purchase import RaffleTicket, TicketPurchase


@dataclass(frozen=True)
class LedgerTotals:
    """Aggregates over a set of purchases."""

    purchase_count: int
    tickets_sold: int
    total_revenue: Decimal
    paid_amount: Decimal
    max_end_ticket_number: int | None

    @property
    def unpaid_amount(self) -> Decimal:
        return self.total_revenue - self.paid_amount


_CENTS = Decimal("0.01")


def _money(value: object) -> Decimal:
    # SQLite sums NUMERIC columns as floats.
    return Decimal(str(value or 0)).quantize(_CENTS)


def _newest_first(stmt: Select) -> Select:
    return stmt.options(selectinload(TicketPurchase.tickets)).order_by(
        TicketPurchase.created_at.desc(),
        TicketPurchase.start_ticket_number.desc(),
    )


class PurchaseRepository:
    """Queries and writes for TicketPurchase and its tickets."""

    def get_by_id(self, session: Session, purchase_id: str) -> TicketPurchase | None:
        return session.get(TicketPurchase, purchase_id)

    def list_all(self, session: Session, entity_ids: Collection[str] | None = None) -> Sequence[TicketPurchase]:
        stmt = select(TicketPurchase)
        if entity_ids is not None:
            stmt = stmt.where(TicketPurchase.entity_id.in_(list(entity_ids)))
        return list(session.scalars(_newest_first(stmt)).all())

    def list_for_entity(self, session: Session, entity_id: str) -> Sequence[TicketPurchase]:
        stmt = select(TicketPurchase).where(TicketPurchase.entity_id == entity_id)
        return list(session.scalars(_newest_first(stmt)).all())

    def list_for_session(self, session: Session, session_id: str) -> Sequence[TicketPurchase]:
        stmt = select(TicketPurchase).where(TicketPurchase.session_id == session_id)
        return list(session.scalars(_newest_first(stmt)).all())

    def list_for_entity_and_session(self, session: Session, entity_id: str, session_id: str) -> Sequence[TicketPurchase]:
        stmt = select(TicketPurchase).where(
            TicketPurchase.entity_id == entity_id,
            TicketPurchase.session_id == session_id,
        )
        return list(session.scalars(_newest_first(stmt)).all())

    def list_for_entity_in_range(
        self,
        session: Session,
        entity_id: str,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> Sequence[TicketPurchase]:
        stmt = select(TicketPurchase).where(TicketPurchase.entity_id == entity_id)
        if start_date is not None:
            stmt = stmt.where(TicketPurchase.created_at >= start_date)
        if end_date is not None:
            stmt = stmt.where(TicketPurchase.created_at <= end_date)
        return list(session.scalars(_newest_first(stmt)).all())

    def totals(self, session: Session, *, entity_id: str | None = None, session_id: str | None = None) -> LedgerTotals:
        """Sum ticket counts and prices with the given filters."""

        stmt = select(
            func.count(TicketPurchase.id),
            func.coalesce(func.sum(TicketPurchase.ticket_count), 0),
            func.coalesce(func.sum(TicketPurchase.total_price), 0),
            func.coalesce(
                func.sum(case((TicketPurchase.is_paid.is_(True), TicketPurchase.total_price), else_=0)),
                0,
            ),
            func.max(TicketPurchase.end_ticket_number),
        )
        if entity_id is not None:
            stmt = stmt.where(TicketPurchase.entity_id == entity_id)
        if session_id is not None:
            stmt = stmt.where(TicketPurchase.session_id == session_id)

        count, tickets, revenue, paid, max_end = session.execute(stmt).one()
        return LedgerTotals(
            purchase_count=int(count or 0),
            tickets_sold=int(tickets or 0),
            total_revenue=_money(revenue),
            paid_amount=_money(paid),
            max_end_ticket_number=int(max_end) if max_end is not None else None,
        )

    def create(self, session: Session, purchase: TicketPurchase) -> TicketPurchase:
        session.add(purchase)
        session.flush()
        return purchase

    def delete(self, session: Session, purchase: TicketPurchase) -> None:
        session.delete(purchase)
        session.flush()

    def _ticket_pool(self, entity_id: str, since: datetime | None) -> Select:
        stmt = (
            select(RaffleTicket)
            .join(TicketPurchase, RaffleTicket.purchase_id == TicketPurchase.id)
            .where(TicketPurchase.entity_id == entity_id)
        )
        if since is not None:
            stmt = stmt.where(TicketPurchase.created_at >= since)
        return stmt

    def count_tickets(self, session: Session, entity_id: str, since: datetime | None = None) -> int:
        pool = self._ticket_pool(entity_id, since).subquery()
        return int(session.scalar(select(func.count()).select_from(pool)) or 0)

    def ticket_at(self, session: Session, entity_id: str, index: int, since: datetime | None = None) -> RaffleTicket | None:
        """Ticket at ``index`` of the pool flattened in sale order."""

        stmt = (
            self._ticket_pool(entity_id, since)
            .options(selectinload(RaffleTicket.purchase))
            .order_by(TicketPurchase.created_at.asc(), TicketPurchase.id.asc(), RaffleTicket.ticket_number.asc())
            .offset(index)
            .limit(1)
        )
        return session.scalars(stmt).first()
