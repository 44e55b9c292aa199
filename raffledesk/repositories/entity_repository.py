"""Repository layer for entity persistence."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from raffledesk.models.base import utcnow
from raffledesk.models.entity import Entity, TicketCounter


class EntityRepository:
    """CRUD operations for Entity."""

    def list_all(self, session: Session) -> Sequence[Entity]:
        stmt = select(Entity).order_by(Entity.created_at.desc())
        return list(session.scalars(stmt).all())

    def get_by_id(self, session: Session, entity_id: str) -> Entity | None:
        return session.get(Entity, entity_id)

    def get_by_name(self, session: Session, name: str) -> Entity | None:
        stmt = select(Entity).where(Entity.name == name)
        return session.scalars(stmt).first()

    def create(self, session: Session, **fields: Any) -> Entity:
        """Insert an entity together with its zeroed ticket counter."""

        entity = Entity(**fields)
        entity.counter = TicketCounter(last_ticket_number=0)
        session.add(entity)
        session.flush()  # assign PK, insert counter in the same flush
        return entity

    def update(self, session: Session, entity: Entity, **fields: Any) -> Entity:
        for key, value in fields.items():
            setattr(entity, key, value)
        entity.updated_at = utcnow()
        session.flush()
        return entity

    def delete(self, session: Session, entity: Entity) -> None:
        session.delete(entity)
        session.flush()
