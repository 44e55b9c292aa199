"""Repository layer for selling sessions."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import or_, select, update
from sqlalchemy.orm import Session

from raffledesk.models.raffle_session import STATUS_ACTIVE, STATUS_CLOSED, RaffleSession


class SessionRepository:
    """Queries and writes for RaffleSession."""

    def get_by_id(self, session: Session, session_id: str, for_update: bool = False) -> RaffleSession | None:
        """Fetch a session; ``for_update`` re-reads the row and locks it where the database can."""

        if for_update:
            return session.get(RaffleSession, session_id, with_for_update=True, populate_existing=True)
        return session.get(RaffleSession, session_id)

    def get_active_for_entity(self, session: Session, entity_id: str, for_update: bool = False) -> RaffleSession | None:
        stmt = (
            select(RaffleSession)
            .where(RaffleSession.entity_id == entity_id, RaffleSession.status == STATUS_ACTIVE)
            .order_by(RaffleSession.created_at.desc())
            .limit(1)
        )
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return session.scalars(stmt).first()

    def mark_closed(self, session: Session, session_id: str, ended_at: datetime) -> bool:
        """Flip an active session to closed. False if it was not active any more."""

        stmt = (
            update(RaffleSession)
            .where(RaffleSession.id == session_id, RaffleSession.status == STATUS_ACTIVE)
            .values(status=STATUS_CLOSED, ended_at=ended_at, updated_at=ended_at)
            .execution_options(synchronize_session=False)
        )
        return session.execute(stmt).rowcount == 1

    def list_active_for_user(self, session: Session, user_id: str) -> Sequence[RaffleSession]:
        stmt = (
            select(RaffleSession)
            .where(RaffleSession.user_id == user_id, RaffleSession.status == STATUS_ACTIVE)
            .order_by(RaffleSession.created_at.desc())
        )
        return list(session.scalars(stmt).all())

    def list_for_entity(
        self,
        session: Session,
        entity_id: str,
        *,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        status: str | None = None,
    ) -> Sequence[RaffleSession]:
        stmt = select(RaffleSession).where(RaffleSession.entity_id == entity_id)
        if start_date is not None:
            stmt = stmt.where(RaffleSession.started_at >= start_date)
        if end_date is not None:
            # Active sessions have no end yet and always pass the upper bound.
            stmt = stmt.where(or_(RaffleSession.ended_at <= end_date, RaffleSession.ended_at.is_(None)))
        if status and status != "all":
            stmt = stmt.where(RaffleSession.status == status)
        stmt = stmt.order_by(RaffleSession.created_at.desc())
        return list(session.scalars(stmt).all())

    def create(self, session: Session, raffle_session: RaffleSession) -> RaffleSession:
        session.add(raffle_session)
        session.flush()
        return raffle_session
