"""Per-entity ticket numbering."""

from __future__ import annotations

import logging
from collections import defaultdict
from threading import Lock

from sqlalchemy.orm import Session

from raffledesk.access import AccessPolicy
from raffledesk.errors import AppError, NotFoundError, ValidationError
from raffledesk.repositories.counter_repository import TicketCounterRepository

logger = logging.getLogger(__name__)


class _EntityLocks:
    """One lock per entity id, created on first use."""

    def __init__(self) -> None:
        self._guard = Lock()
        self._locks: defaultdict[str, Lock] = defaultdict(Lock)

    def for_entity(self, entity_id: str) -> Lock:
        with self._guard:
            return self._locks[entity_id]


_LOCKS = _EntityLocks()


class TicketCounterService:
    """Hands out contiguous, never-reused ticket number ranges."""

    def __init__(self, repository: TicketCounterRepository | None = None, max_retries: int = 10) -> None:
        self._repo = repository or TicketCounterRepository()
        self._max_retries = max_retries

    def current(self, session: Session, entity_id: str) -> int:
        last = self._repo.get_last(session, entity_id)
        if last is None:
            raise NotFoundError(message=f"No ticket counter for entity {entity_id}")
        return int(last)

    def next_number(self, session: Session, entity_id: str) -> int:
        return self.current(session, entity_id) + 1

    def reset(self, session: Session, entity_id: str, policy: AccessPolicy | None = None) -> None:
        """Set the counter back to 0 so the next ticket is number 1."""

        if policy is not None:
            policy.require_entity(entity_id)
        if not self._repo.reset(session, entity_id):
            raise NotFoundError(message=f"No ticket counter for entity {entity_id}")
        logger.info("Ticket counter reset entity_id=%s", entity_id)

    def claim(self, session: Session, entity_id: str, count: int) -> tuple[int, int]:
        """Atomically reserve the next ``count`` numbers.

        Returns the inclusive ``(start, end)`` range. A concurrent claim that
        lands between our read and our write makes the conditional update
        miss; we then re-read and try again.
        """

        if count <= 0:
            raise ValidationError(
                message="Invalid ticket_count",
                details={"ticket_count": ["Must be greater than 0"]},
            )

        with _LOCKS.for_entity(entity_id):
            for attempt in range(1, self._max_retries + 1):
                last = self.current(session, entity_id)
                if self._repo.compare_and_set(session, entity_id, expected=last, new_value=last + count):
                    return last + 1, last + count
                logger.debug("Ticket counter contention entity_id=%s attempt=%d", entity_id, attempt)

        raise AppError(
            code="counter_contention",
            message=f"Could not claim ticket numbers within retry limit ({self._max_retries})",
            status_code=503,
        )
