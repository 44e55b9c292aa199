"""Raffle routes."""

from __future__ import annotations

from flask import Blueprint, current_app, request

from raffledesk.access import AccessPolicy
from raffledesk.db import get_session
from raffledesk.errors import AppError
from raffledesk.schemas.raffle import DrawResultSchema, RaffleCreateSchema, RaffleSchema, RaffleUpdateSchema
from raffledesk.services.raffle_service import RaffleService
from raffledesk.utils.responses import created, ok

raffles_bp = Blueprint("raffles", __name__)

_raffle_schema = RaffleSchema()
_raffles_schema = RaffleSchema(many=True)
_create_schema = RaffleCreateSchema()
_update_schema = RaffleUpdateSchema()
_draw_schema = DrawResultSchema()
_service = RaffleService()


@raffles_bp.get("")
def list_raffles():
    policy = AccessPolicy.from_headers(request.headers)
    return ok(_raffles_schema.dump(_service.list_raffles(get_session(), policy)))


@raffles_bp.post("")
def create_raffle():
    policy = AccessPolicy.from_headers(request.headers)
    data = _create_schema.load(request.get_json(silent=True) or {})
    raffle = _service.create_raffle(get_session(), policy, **data)
    return created(_raffle_schema.dump(raffle))


@raffles_bp.get("/entity/<entity_id>")
def list_entity_raffles(entity_id: str):
    policy = AccessPolicy.from_headers(request.headers)
    return ok(_raffles_schema.dump(_service.list_for_entity(get_session(), entity_id, policy)))


@raffles_bp.get("/<raffle_id>")
def get_raffle(raffle_id: str):
    policy = AccessPolicy.from_headers(request.headers)
    return ok(_raffle_schema.dump(_service.get_raffle(get_session(), raffle_id, policy)))


@raffles_bp.put("/<raffle_id>")
def update_raffle(raffle_id: str):
    policy = AccessPolicy.from_headers(request.headers)
    data = _update_schema.load(request.get_json(silent=True) or {})
    raffle = _service.update_raffle(get_session(), raffle_id, policy, **data)
    return ok(_raffle_schema.dump(raffle))


@raffles_bp.delete("/<raffle_id>")
def delete_raffle(raffle_id: str):
    policy = AccessPolicy.from_headers(request.headers)
    _service.delete_raffle(get_session(), raffle_id, policy)
    return ok({"id": raffle_id, "deleted": True})


@raffles_bp.post("/<raffle_id>/draw")
def draw_winner(raffle_id: str):
    """Draw one winning ticket; the raffle is closed afterwards."""

    policy = AccessPolicy.from_headers(request.headers)
    scope = current_app.config.get("RAFFLE_DRAW_SCOPE", "entity")
    result = _service.draw(get_session(), raffle_id, policy, scope=scope)
    if result is None:
        raise AppError(
            code="draw_unavailable",
            message="Raffle is not active or has no tickets to draw from",
            status_code=400,
        )
    return ok(_draw_schema.dump(result))
