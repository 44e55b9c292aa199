"""Repository layer for per-entity ticket counters."""

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from raffledesk.models.entity import TicketCounter


class TicketCounterRepository:
    """Reads and conditional writes of ``ticket_counters``."""

    def get_last(self, session: Session, entity_id: str) -> int | None:
        stmt = select(TicketCounter.last_ticket_number).where(TicketCounter.entity_id == entity_id)
        return session.execute(stmt).scalar_one_or_none()

    def compare_and_set(self, session: Session, entity_id: str, expected: int, new_value: int) -> bool:
        """Set the counter to ``new_value`` only if it still holds ``expected``.

        Returns False when another writer moved the counter first.
        """

        stmt = (
            update(TicketCounter)
            .where(TicketCounter.entity_id == entity_id)
            .where(TicketCounter.last_ticket_number == expected)
            .values(last_ticket_number=new_value)
            .execution_options(synchronize_session=False)
        )
        result = session.execute(stmt)
        return result.rowcount == 1

    def reset(self, session: Session, entity_id: str) -> bool:
        stmt = (
            update(TicketCounter)
            .where(TicketCounter.entity_id == entity_id)
            .values(last_ticket_number=0)
            .execution_options(synchronize_session=False)
        )
        result = session.execute(stmt)
        return result.rowcount == 1
