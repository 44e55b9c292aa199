"""Raffles and winner drawing."""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from sqlalchemy.orm import Session

from raffledesk.access import AccessPolicy
from raffledesk.errors import NotFoundError, ValidationError
from raffledesk.models.raffle import DEFAULT_MAX_TICKETS, Raffle
from raffledesk.repositories.entity_repository import EntityRepository
from raffledesk.repositories.purchase_repository import PurchaseRepository
from raffledesk.repositories.raffle_repository import RaffleRepository

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = (
    "name",
    "description",
    "prize_description",
    "ticket_price",
    "max_tickets",
    "is_active",
    "draw_date",
)


class DrawScope(str, Enum):
    # Every ticket the entity ever sold.
    ENTITY = "entity"
    # Only tickets sold since the raffle was created.
    RAFFLE = "raffle"

    @classmethod
    def parse(cls, value: "str | DrawScope") -> "DrawScope":
        try:
            return cls(value)
        except ValueError as exc:
            raise ValidationError(
                message="Invalid draw scope",
                details={"scope": [f"Must be one of {'|'.join(s.value for s in cls)}"]},
            ) from exc


@dataclass(frozen=True)
class DrawResult:
    raffle_id: str
    winning_ticket_number: int
    winner_name: str
    prize_name: str
    purchase_id: str


class RaffleService:
    """Raffle CRUD plus a single-shot uniform draw."""

    def __init__(
        self,
        repository: RaffleRepository | None = None,
        purchases: PurchaseRepository | None = None,
        entities: EntityRepository | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._repo = repository or RaffleRepository()
        self._purchases = purchases or PurchaseRepository()
        self._entities = entities or EntityRepository()
        self._rng = rng or random.Random()

    def get_raffle(self, session: Session, raffle_id: str, policy: AccessPolicy) -> Raffle:
        raffle = self._repo.get_by_id(session, raffle_id)
        if raffle is None:
            raise NotFoundError(message=f"Raffle {raffle_id} not found")
        policy.require_entity(raffle.entity_id)
        return raffle

    def list_raffles(self, session: Session, policy: AccessPolicy) -> Sequence[Raffle]:
        if policy.is_superuser:
            return self._repo.list_all(session)
        return self._repo.list_all(session, entity_ids=policy.entity_ids)

    def list_for_entity(self, session: Session, entity_id: str, policy: AccessPolicy) -> Sequence[Raffle]:
        policy.require_entity(entity_id)
        return self._repo.list_for_entity(session, entity_id)

    def create_raffle(
        self,
        session: Session,
        policy: AccessPolicy,
        *,
        entity_id: str,
        name: str,
        prize_description: str,
        ticket_price: Decimal | int | float,
        description: str | None = None,
        max_tickets: int | None = None,
        draw_date: datetime | None = None,
    ) -> Raffle:
        if self._entities.get_by_id(session, entity_id) is None:
            raise NotFoundError(message=f"Entity {entity_id} not found")
        policy.require_entity(entity_id)

        raffle = self._repo.create(
            session,
            entity_id=entity_id,
            name=name,
            description=description or "",
            prize_description=prize_description,
            ticket_price=Decimal(str(ticket_price)),
            max_tickets=max_tickets or DEFAULT_MAX_TICKETS,
            sold_tickets=0,
            is_active=True,
            draw_date=draw_date,
        )
        logger.info("Raffle created id=%s entity_id=%s", raffle.id, entity_id)
        return raffle

    def update_raffle(self, session: Session, raffle_id: str, policy: AccessPolicy, **changes: Any) -> Raffle:
        raffle = self.get_raffle(session, raffle_id, policy)
        fields = {k: v for k, v in changes.items() if k in _UPDATABLE_FIELDS and v is not None}
        if "ticket_price" in fields:
            fields["ticket_price"] = Decimal(str(fields["ticket_price"]))
        return self._repo.update(session, raffle, **fields)

    def delete_raffle(self, session: Session, raffle_id: str, policy: AccessPolicy) -> None:
        raffle = self.get_raffle(session, raffle_id, policy)
        self._repo.delete(session, raffle)

    def draw(
        self,
        session: Session,
        raffle_id: str,
        policy: AccessPolicy,
        scope: str | DrawScope = DrawScope.ENTITY,
    ) -> DrawResult | None:
        """Pick a winning ticket uniformly at random.

        Returns None, leaving the raffle untouched, when the raffle is no
        longer active or the ticket pool is empty.
        """

        mode = DrawScope.parse(scope)
        raffle = self.get_raffle(session, raffle_id, policy)
        if not raffle.is_active:
            return None

        since = raffle.created_at if mode is DrawScope.RAFFLE else None
        pool_size = self._purchases.count_tickets(session, raffle.entity_id, since=since)
        if pool_size == 0:
            return None

        ticket = self._purchases.ticket_at(session, raffle.entity_id, self._rng.randrange(pool_size), since=since)
        if ticket is None:
            return None
        purchase = ticket.purchase

        self._repo.update(
            session,
            raffle,
            is_active=False,
            winning_ticket_number=ticket.ticket_number,
            winner_id=purchase.id,
        )
        logger.info(
            "Raffle drawn id=%s scope=%s pool=%d winning_ticket=%d purchase_id=%s",
            raffle.id,
            mode.value,
            pool_size,
            ticket.ticket_number,
            purchase.id,
        )
        return DrawResult(
            raffle_id=raffle.id,
            winning_ticket_number=ticket.ticket_number,
            winner_name=purchase.buyer_name,
            prize_name=raffle.prize_description,
            purchase_id=purchase.id,
        )
