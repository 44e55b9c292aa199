"""Ticket sales totals and the seller's announcement text."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal

from sqlalchemy.orm import Session

from raffledesk.access import AccessPolicy
from raffledesk.errors import NotFoundError
from raffledesk.models.entity import Entity
from raffledesk.repositories.entity_repository import EntityRepository
from raffledesk.repositories.purchase_repository import PurchaseRepository
from raffledesk.repositories.session_repository import SessionRepository
from raffledesk.utils.receipts import format_money


@dataclass(frozen=True)
class TicketStats:
    tickets_sold: int
    total_revenue: Decimal
    prize_amount: int
    session_id: str | None = None


def prize_amount(total_revenue: Decimal, raffle_percentage: int) -> int:
    """Whole-dollar prize: ``floor(revenue * pct / 100)``."""

    share = Decimal(str(total_revenue)) * Decimal(int(raffle_percentage)) / Decimal(100)
    return int(share.to_integral_value(rounding=ROUND_FLOOR))


class StatsService:
    """Derive totals from the purchase ledger."""

    def __init__(
        self,
        purchases: PurchaseRepository | None = None,
        sessions: SessionRepository | None = None,
        entities: EntityRepository | None = None,
    ) -> None:
        self._purchases = purchases or PurchaseRepository()
        self._sessions = sessions or SessionRepository()
        self._entities = entities or EntityRepository()

    def _entity(self, session: Session, entity_id: str) -> Entity:
        entity = self._entities.get_by_id(session, entity_id)
        if entity is None:
            raise NotFoundError(message=f"Entity {entity_id} not found")
        return entity

    def stats(
        self,
        session: Session,
        entity_id: str,
        session_id: str | None = None,
        policy: AccessPolicy | None = None,
    ) -> TicketStats:
        """Totals for one session, else the active session, else all history."""

        entity = self._entity(session, entity_id)
        if policy is not None:
            policy.require_entity(entity_id)

        if session_id is not None:
            raffle_session = self._sessions.get_by_id(session, session_id)
            if raffle_session is None or raffle_session.entity_id != entity_id:
                raise NotFoundError(message=f"Session {session_id} not found for entity {entity_id}")
            scope_id: str | None = raffle_session.id
        else:
            active = self._sessions.get_active_for_entity(session, entity_id)
            scope_id = active.id if active is not None else None

        if scope_id is not None:
            totals = self._purchases.totals(session, session_id=scope_id)
        else:
            totals = self._purchases.totals(session, entity_id=entity_id)

        return TicketStats(
            tickets_sold=totals.tickets_sold,
            total_revenue=totals.total_revenue,
            prize_amount=prize_amount(totals.total_revenue, entity.raffle_percentage),
            session_id=scope_id,
        )

    def announcement(
        self,
        session: Session,
        entity_id: str,
        raffler_name: str,
        price_per_ticket: Decimal | int | float,
        policy: AccessPolicy | None = None,
    ) -> str:
        entity = self._entity(session, entity_id)
        if policy is not None:
            policy.require_entity(entity_id)
        current = self.stats(session, entity_id)
        return (
            f"{entity.emoji}Hey everyone, I am {raffler_name}, your RAFFLER for today. "
            f"Tickets are ${format_money(price_per_ticket)} each. "
            f"PM me for Tickets, UNLIMITED Available!! {entity.emoji}\n"
            f"{current.tickets_sold} tickets sold in total. "
            f"♥ WINNING AMOUNT is now ${current.prize_amount} !! "
            "Get your tickets for your lucky chance!~ ♥"
        )
