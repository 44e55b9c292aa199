"""Service layer for the entity (club) registry."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy.orm import Session

from raffledesk.access import AccessPolicy
from raffledesk.errors import ConflictError, NotFoundError, ValidationError
from raffledesk.models.entity import (
    DEFAULT_EMOJI,
    DEFAULT_RAFFLE_PERCENTAGE,
    DEFAULT_TAGLINE,
    Entity,
)
from raffledesk.repositories.entity_repository import EntityRepository

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = ("name", "display_name", "emoji", "tagline", "raffle_percentage")


def _check_percentage(value: Any) -> int:
    try:
        pct = int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(
            message="Invalid raffle_percentage",
            details={"raffle_percentage": ["Must be an integer"]},
        ) from exc
    if pct < 0 or pct > 100:
        raise ValidationError(
            message="Invalid raffle_percentage",
            details={"raffle_percentage": ["Must be within 0..100"]},
        )
    return pct


class EntityService:
    """Entity use-cases."""

    def __init__(self, repository: EntityRepository | None = None) -> None:
        self._repo = repository or EntityRepository()

    def list_entities(self, session: Session, policy: AccessPolicy) -> Sequence[Entity]:
        return [e for e in self._repo.list_all(session) if policy.can_access_entity(e.id)]

    def get_entity(self, session: Session, entity_id: str) -> Entity:
        entity = self._repo.get_by_id(session, entity_id)
        if entity is None:
            raise NotFoundError(message=f"Entity {entity_id} not found")
        return entity

    def get_visible_entity(self, session: Session, entity_id: str, policy: AccessPolicy) -> Entity:
        entity = self.get_entity(session, entity_id)
        policy.require_entity(entity_id)
        return entity

    def create_entity(
        self,
        session: Session,
        policy: AccessPolicy,
        *,
        name: str,
        display_name: str,
        emoji: str | None = None,
        tagline: str | None = None,
        raffle_percentage: int | None = None,
    ) -> Entity:
        policy.require_entity_create()

        name = (name or "").strip()
        display_name = (display_name or "").strip()
        if not name or not display_name:
            raise ValidationError(message="Name and display_name are required")
        if self._repo.get_by_name(session, name) is not None:
            raise ConflictError(message=f"Entity named {name!r} already exists")

        entity = self._repo.create(
            session,
            name=name,
            display_name=display_name,
            emoji=emoji or DEFAULT_EMOJI,
            tagline=tagline or DEFAULT_TAGLINE,
            raffle_percentage=(
                DEFAULT_RAFFLE_PERCENTAGE if raffle_percentage is None else _check_percentage(raffle_percentage)
            ),
        )
        logger.info("Entity created id=%s name=%s", entity.id, entity.name)
        return entity

    def update_entity(self, session: Session, entity_id: str, policy: AccessPolicy, **changes: Any) -> Entity:
        entity = self.get_entity(session, entity_id)
        policy.require_entity_edit(entity_id)

        fields = {k: v for k, v in changes.items() if k in _EDITABLE_FIELDS and v is not None}
        if "raffle_percentage" in fields:
            fields["raffle_percentage"] = _check_percentage(fields["raffle_percentage"])
        if "name" in fields:
            fields["name"] = str(fields["name"]).strip()
            other = self._repo.get_by_name(session, fields["name"])
            if other is not None and other.id != entity.id:
                raise ConflictError(message=f"Entity named {fields['name']!r} already exists")

        return self._repo.update(session, entity, **fields)

    def delete_entity(self, session: Session, entity_id: str, policy: AccessPolicy) -> None:
        """Delete an entity and its counter; sales history stays behind."""

        policy.require_entity_delete()
        entity = self.get_entity(session, entity_id)
        self._repo.delete(session, entity)
        logger.info("Entity deleted id=%s", entity_id)
