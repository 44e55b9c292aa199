"""Selling sessions (shifts).

Lifecycle per entity: no active session -> active -> closed. Starting a
session resets the entity's ticket counter, so numbering restarts at 1.
Session totals are always re-derived from the purchase ledger instead of
being incremented, which makes the stored figures a refreshable cache.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from raffledesk.access import AccessPolicy
from raffledesk.errors import ConflictError, NotFoundError, PermissionDeniedError
from raffledesk.models.base import utcnow
from raffledesk.models.purchase import TicketPurchase
from raffledesk.models.raffle_session import STATUS_ACTIVE, STATUS_CLOSED, RaffleSession
from raffledesk.repositories.entity_repository import EntityRepository
from raffledesk.repositories.purchase_repository import LedgerTotals, PurchaseRepository
from raffledesk.repositories.session_repository import SessionRepository
from raffledesk.services.counter_service import TicketCounterService

logger = logging.getLogger(__name__)

SESSION_STATUSES = (STATUS_ACTIVE, STATUS_CLOSED, "all")


def _apply_totals(raffle_session: RaffleSession, totals: LedgerTotals) -> None:
    """Copy ledger totals onto the session.

    With no purchases a closed session ends at ``start - 1`` while an active
    one has no end yet.
    """

    raffle_session.tickets_sold = totals.tickets_sold
    raffle_session.total_revenue = totals.total_revenue
    if totals.purchase_count:
        raffle_session.end_ticket_number = totals.max_end_ticket_number
    elif raffle_session.is_active:
        raffle_session.end_ticket_number = None
    else:
        raffle_session.end_ticket_number = raffle_session.start_ticket_number - 1
    raffle_session.updated_at = utcnow()


@dataclass(frozen=True)
class SessionSummary:
    raffle_session: RaffleSession
    entity_name: str
    purchases: Sequence[TicketPurchase]
    totals: LedgerTotals


class SessionService:
    """Start, close and query selling sessions."""

    def __init__(
        self,
        repository: SessionRepository | None = None,
        purchases: PurchaseRepository | None = None,
        entities: EntityRepository | None = None,
        counter: TicketCounterService | None = None,
    ) -> None:
        self._repo = repository or SessionRepository()
        self._purchases = purchases or PurchaseRepository()
        self._entities = entities or EntityRepository()
        self._counter = counter or TicketCounterService()

    def get_session(self, session: Session, session_id: str) -> RaffleSession:
        raffle_session = self._repo.get_by_id(session, session_id)
        if raffle_session is None:
            raise NotFoundError(message=f"Session {session_id} not found")
        return raffle_session

    def get_visible_session(self, session: Session, session_id: str, policy: AccessPolicy) -> RaffleSession:
        raffle_session = self.get_session(session, session_id)
        if not (policy.can_access_entity(raffle_session.entity_id) or raffle_session.user_id == policy.user_id):
            raise PermissionDeniedError(message="Access denied to this session")
        return raffle_session

    def get_active(self, session: Session, entity_id: str, policy: AccessPolicy) -> RaffleSession | None:
        policy.require_entity(entity_id)
        return self._repo.get_active_for_entity(session, entity_id)

    def list_active_for_user(self, session: Session, policy: AccessPolicy) -> Sequence[RaffleSession]:
        return self._repo.list_active_for_user(session, policy.user_id)

    def list_for_entity(
        self,
        session: Session,
        entity_id: str,
        policy: AccessPolicy,
        *,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        status: str | None = None,
    ) -> Sequence[RaffleSession]:
        policy.require_entity(entity_id)
        return self._repo.list_for_entity(
            session,
            entity_id,
            start_date=start_date,
            end_date=end_date,
            status=status,
        )

    def start(self, session: Session, entity_id: str, policy: AccessPolicy) -> RaffleSession:
        """Open a shift for ``entity_id`` and restart its ticket numbering."""

        if self._entities.get_by_id(session, entity_id) is None:
            raise NotFoundError(message=f"Entity {entity_id} not found")
        policy.require_entity(entity_id)

        active = self._repo.get_active_for_entity(session, entity_id)
        if active is not None:
            raise ConflictError(
                message="There is already an active session for this entity. Please close it first.",
                details={"active_session_id": active.id},
            )

        now = utcnow()
        raffle_session = RaffleSession(
            entity_id=entity_id,
            user_id=policy.user_id,
            username=policy.username,
            started_at=now,
            ended_at=None,
            start_ticket_number=1,
            end_ticket_number=None,
            tickets_sold=0,
            total_revenue=Decimal("0"),
            status=STATUS_ACTIVE,
            created_at=now,
            updated_at=now,
        )
        try:
            self._repo.create(session, raffle_session)
        except IntegrityError as exc:
            # Lost a race with another start for the same entity.
            raise ConflictError(message="There is already an active session for this entity.") from exc

        self._counter.reset(session, entity_id)
        logger.info(
            "Session started id=%s entity_id=%s user_id=%s",
            raffle_session.id,
            entity_id,
            policy.user_id,
        )
        return raffle_session

    def recompute_stats(self, session: Session, session_id: str) -> RaffleSession:
        """Re-derive running totals from every purchase stamped with this session.

        Works on closed sessions too; their ledger is frozen, so the result
        matches what ``close`` stored.
        """

        raffle_session = self.get_session(session, session_id)
        _apply_totals(raffle_session, self._purchases.totals(session, session_id=session_id))
        session.flush()
        return raffle_session

    def refresh_active_stats(self, session: Session, session_id: str) -> RaffleSession:
        """Recompute after a ledger write; the session must still be active."""

        raffle_session = self._repo.get_by_id(session, session_id, for_update=True)
        if raffle_session is None:
            raise NotFoundError(message=f"Session {session_id} not found")
        if not raffle_session.is_active:
            raise ConflictError(
                message="Session was closed while the ledger was being changed",
                details={"session_id": session_id},
            )
        _apply_totals(raffle_session, self._purchases.totals(session, session_id=session_id))
        session.flush()
        return raffle_session

    def close(self, session: Session, session_id: str, policy: AccessPolicy) -> RaffleSession:
        raffle_session = self.get_session(session, session_id)
        if not policy.can_close_session(raffle_session.user_id):
            raise PermissionDeniedError(message="You can only close your own sessions")

        # The status flip comes first so the totals below see every purchase
        # committed before it.
        if not self._repo.mark_closed(session, session_id, utcnow()):
            raise ConflictError(message="Session is already closed")
        raffle_session = self._repo.get_by_id(session, session_id, for_update=True)

        _apply_totals(raffle_session, self._purchases.totals(session, session_id=session_id))
        session.flush()

        logger.info(
            "Session closed id=%s tickets_sold=%d total_revenue=%s",
            raffle_session.id,
            raffle_session.tickets_sold,
            raffle_session.total_revenue,
        )
        return raffle_session

    def summary(self, session: Session, session_id: str, policy: AccessPolicy) -> SessionSummary:
        raffle_session = self.get_visible_session(session, session_id, policy)
        entity = self._entities.get_by_id(session, raffle_session.entity_id)
        return SessionSummary(
            raffle_session=raffle_session,
            entity_name=entity.display_name if entity is not None else "Unknown",
            purchases=self._purchases.list_for_session(session, session_id),
            totals=self._purchases.totals(session, session_id=session_id),
        )
