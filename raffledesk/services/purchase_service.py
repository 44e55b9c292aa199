"""Purchase ledger use-cases."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation

from sqlalchemy.orm import Session

from raffledesk.access import AccessPolicy
from raffledesk.errors import ConflictError, NotFoundError, ValidationError
from raffledesk.models.base import utcnow
from raffledesk.models.purchase import RaffleTicket, TicketPurchase
from raffledesk.repositories.entity_repository import EntityRepository
from raffledesk.repositories.purchase_repository import PurchaseRepository
from raffledesk.repositories.session_repository import SessionRepository
from raffledesk.services.counter_service import TicketCounterService
from raffledesk.services.session_service import SessionService
from raffledesk.utils.receipts import generate_receipt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PurchaseResult:
    purchase: TicketPurchase
    receipt: str


def _positive_price(value: Decimal | int | float | str) -> Decimal:
    try:
        price = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(
            message="Invalid price_per_ticket",
            details={"price_per_ticket": ["Must be a number"]},
        ) from exc
    if not price.is_finite() or price <= 0:
        raise ValidationError(
            message="Invalid price_per_ticket",
            details={"price_per_ticket": ["Must be greater than 0"]},
        )
    return price


def _positive_count(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(
            message="Invalid ticket_count",
            details={"ticket_count": ["Must be a whole number"]},
        )
    if value <= 0:
        raise ValidationError(
            message="Invalid ticket_count",
            details={"ticket_count": ["Must be greater than 0"]},
        )
    return value


class PurchaseService:
    """Record ticket sales and keep session totals in step with them."""

    def __init__(
        self,
        repository: PurchaseRepository | None = None,
        entities: EntityRepository | None = None,
        sessions: SessionRepository | None = None,
        counter: TicketCounterService | None = None,
        session_service: SessionService | None = None,
    ) -> None:
        self._repo = repository or PurchaseRepository()
        self._entities = entities or EntityRepository()
        self._sessions = sessions or SessionRepository()
        self._counter = counter or TicketCounterService()
        self._session_service = session_service or SessionService(
            repository=self._sessions,
            purchases=self._repo,
            entities=self._entities,
            counter=self._counter,
        )

    def create(
        self,
        session: Session,
        policy: AccessPolicy,
        *,
        entity_id: str,
        buyer_name: str,
        ticket_count: int,
        price_per_ticket: Decimal | int | float | str,
        raffler_name: str | None = None,
        is_gift: bool = False,
        gifter_name: str | None = None,
    ) -> PurchaseResult:
        """Sell ``ticket_count`` consecutive tickets to ``buyer_name``."""

        entity = self._entities.get_by_id(session, entity_id)
        if entity is None:
            raise NotFoundError(message=f"Entity {entity_id} not found")
        policy.require_entity(entity_id)

        ticket_count = _positive_count(ticket_count)
        price = _positive_price(price_per_ticket)

        buyer_name = (buyer_name or "").strip()
        if not buyer_name:
            raise ValidationError(message="Invalid buyer_name", details={"buyer_name": ["Must not be empty"]})
        gifter_name = (gifter_name or "").strip() or None
        if is_gift and not gifter_name:
            raise ValidationError(
                message="Invalid gifter_name",
                details={"gifter_name": ["Required when is_gift is set"]},
            )
        raffler_name = (raffler_name or "").strip() or policy.username

        start, end = self._counter.claim(session, entity_id, ticket_count)
        # Resolved after the counter write so a close that committed before it
        # is visible; the row lock holds off a close until this commits.
        active = self._sessions.get_active_for_entity(session, entity_id, for_update=True)

        now = utcnow()
        purchase = TicketPurchase(
            entity_id=entity_id,
            session_id=active.id if active is not None else None,
            buyer_name=buyer_name,
            raffler_name=raffler_name,
            ticket_count=ticket_count,
            price_per_ticket=price,
            total_price=price * ticket_count,
            start_ticket_number=start,
            end_ticket_number=end,
            is_gift=bool(is_gift),
            gifter_name=gifter_name if is_gift else None,
            is_paid=False,
            created_at=now,
        )
        purchase.tickets = [RaffleTicket(ticket_number=n, created_at=now) for n in range(start, end + 1)]
        self._repo.create(session, purchase)

        if active is not None:
            self._session_service.refresh_active_stats(session, active.id)

        logger.info(
            "Purchase recorded id=%s entity_id=%s session_id=%s tickets=%d-%d",
            purchase.id,
            entity_id,
            purchase.session_id,
            start,
            end,
        )
        return PurchaseResult(purchase=purchase, receipt=generate_receipt(entity, purchase))

    def get_purchase(self, session: Session, purchase_id: str, policy: AccessPolicy) -> TicketPurchase:
        purchase = self._repo.get_by_id(session, purchase_id)
        if purchase is None:
            raise NotFoundError(message=f"Purchase {purchase_id} not found")
        policy.require_entity(purchase.entity_id)
        return purchase

    def receipt(self, session: Session, purchase_id: str, policy: AccessPolicy) -> str:
        purchase = self.get_purchase(session, purchase_id, policy)
        entity = self._entities.get_by_id(session, purchase.entity_id)
        if entity is None:
            raise NotFoundError(message=f"Entity {purchase.entity_id} not found")
        return generate_receipt(entity, purchase)

    def update_payment_status(self, session: Session, purchase_id: str, is_paid: bool, policy: AccessPolicy) -> TicketPurchase:
        purchase = self.get_purchase(session, purchase_id, policy)
        purchase.is_paid = bool(is_paid)
        session.flush()
        return purchase

    def update_buyer_name(self, session: Session, purchase_id: str, buyer_name: str, policy: AccessPolicy) -> TicketPurchase:
        buyer_name = (buyer_name or "").strip()
        if not buyer_name:
            raise ValidationError(message="Invalid buyer_name", details={"buyer_name": ["Must not be empty"]})
        purchase = self.get_purchase(session, purchase_id, policy)
        purchase.buyer_name = buyer_name
        session.flush()
        return purchase

    def delete(self, session: Session, purchase_id: str, policy: AccessPolicy) -> None:
        """Remove a purchase and its tickets.

        Ticket numbers are never handed out again. Purchases of a closed
        session are frozen so its final totals stay true.
        """

        purchase = self.get_purchase(session, purchase_id, policy)
        owner = self._sessions.get_by_id(session, purchase.session_id) if purchase.session_id else None
        if owner is not None and not owner.is_active:
            raise ConflictError(
                message="Cannot delete a purchase from a closed session",
                details={"session_id": owner.id},
            )

        self._repo.delete(session, purchase)
        if owner is not None:
            self._session_service.refresh_active_stats(session, owner.id)
        logger.info("Purchase deleted id=%s entity_id=%s", purchase_id, purchase.entity_id)

    def list_all(self, session: Session, policy: AccessPolicy) -> Sequence[TicketPurchase]:
        if policy.is_superuser:
            return self._repo.list_all(session)
        return self._repo.list_all(session, entity_ids=policy.entity_ids)

    def list_for_entity(
        self,
        session: Session,
        entity_id: str,
        policy: AccessPolicy,
        session_only: bool = False,
    ) -> Sequence[TicketPurchase]:
        """All purchases of an entity, or only those of its active session."""

        policy.require_entity(entity_id)
        if session_only:
            active = self._sessions.get_active_for_entity(session, entity_id)
            if active is None:
                return []
            return self._repo.list_for_session(session, active.id)
        return self._repo.list_for_entity(session, entity_id)

    def list_for_session(self, session: Session, session_id: str, policy: AccessPolicy) -> Sequence[TicketPurchase]:
        raffle_session = self._session_service.get_visible_session(session, session_id, policy)
        return self._repo.list_for_session(session, raffle_session.id)

    def list_for_entity_and_session(
        self,
        session: Session,
        entity_id: str,
        session_id: str | None,
        policy: AccessPolicy,
    ) -> Sequence[TicketPurchase]:
        policy.require_entity(entity_id)
        if session_id is None:
            return self._repo.list_for_entity(session, entity_id)
        return self._repo.list_for_entity_and_session(session, entity_id, session_id)

    def list_for_entity_in_range(
        self,
        session: Session,
        entity_id: str,
        policy: AccessPolicy,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> Sequence[TicketPurchase]:
        policy.require_entity(entity_id)
        return self._repo.list_for_entity_in_range(session, entity_id, start_date, end_date)
