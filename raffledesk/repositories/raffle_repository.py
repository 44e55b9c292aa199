"""Repository layer for raffles."""

from __future__ import annotations

from collections.abc import Collection, Sequence
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from raffledesk.models.base import utcnow
from raffledesk.models.raffle import Raffle


class RaffleRepository:
    """CRUD operations for Raffle."""

    def list_all(self, session: Session, entity_ids: Collection[str] | None = None) -> Sequence[Raffle]:
        stmt = select(Raffle)
        if entity_ids is not None:
            stmt = stmt.where(Raffle.entity_id.in_(list(entity_ids)))
        return list(session.scalars(stmt.order_by(Raffle.created_at.desc())).all())

    def list_for_entity(self, session: Session, entity_id: str) -> Sequence[Raffle]:
        stmt = select(Raffle).where(Raffle.entity_id == entity_id).order_by(Raffle.created_at.desc())
        return list(session.scalars(stmt).all())

    def get_by_id(self, session: Session, raffle_id: str) -> Raffle | None:
        return session.get(Raffle, raffle_id)

    def create(self, session: Session, **fields: Any) -> Raffle:
        raffle = Raffle(**fields)
        session.add(raffle)
        session.flush()
        return raffle

    def update(self, session: Session, raffle: Raffle, **fields: Any) -> Raffle:
        for key, value in fields.items():
            setattr(raffle, key, value)
        raffle.updated_at = utcnow()
        session.flush()
        return raffle

    def delete(self, session: Session, raffle: Raffle) -> None:
        session.delete(raffle)
        session.flush()
