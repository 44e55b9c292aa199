"""Entity (club) routes. No business logic here."""

from __future__ import annotations

from flask import Blueprint, request

from raffledesk.access import AccessPolicy
from raffledesk.db import get_session
from raffledesk.schemas.entity import EntityCreateSchema, EntitySchema, EntityUpdateSchema
from raffledesk.services.entity_service import EntityService
from raffledesk.utils.responses import created, ok

entities_bp = Blueprint("entities", __name__)

_entity_schema = EntitySchema()
_entities_schema = EntitySchema(many=True)
_create_schema = EntityCreateSchema()
_update_schema = EntityUpdateSchema()
_service = EntityService()


@entities_bp.get("")
def list_entities():
    """Entities visible to the caller."""

    policy = AccessPolicy.from_headers(request.headers)
    entities = _service.list_entities(get_session(), policy)
    return ok(_entities_schema.dump(entities))


@entities_bp.get("/<entity_id>")
def get_entity(entity_id: str):
    policy = AccessPolicy.from_headers(request.headers)
    entity = _service.get_visible_entity(get_session(), entity_id, policy)
    return ok(_entity_schema.dump(entity))


@entities_bp.post("")
def create_entity():
    policy = AccessPolicy.from_headers(request.headers)
    data = _create_schema.load(request.get_json(silent=True) or {})
    entity = _service.create_entity(get_session(), policy, **data)
    return created(_entity_schema.dump(entity))


@entities_bp.put("/<entity_id>")
def update_entity(entity_id: str):
    policy = AccessPolicy.from_headers(request.headers)
    data = _update_schema.load(request.get_json(silent=True) or {})
    entity = _service.update_entity(get_session(), entity_id, policy, **data)
    return ok(_entity_schema.dump(entity))


@entities_bp.delete("/<entity_id>")
def delete_entity(entity_id: str):
    policy = AccessPolicy.from_headers(request.headers)
    _service.delete_entity(get_session(), entity_id, policy)
    return ok({"id": entity_id, "deleted": True})
