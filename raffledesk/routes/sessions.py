"""Selling session routes."""

from __future__ import annotations

from flask import Blueprint, request

from raffledesk.access import AccessPolicy
from raffledesk.db import get_session
from raffledesk.schemas.session import (
    SessionFilterSchema,
    SessionSchema,
    SessionStartSchema,
    SessionSummarySchema,
)
from raffledesk.services.session_service import SessionService
from raffledesk.utils.responses import created, ok

sessions_bp = Blueprint("sessions", __name__)

_session_schema = SessionSchema()
_sessions_schema = SessionSchema(many=True)
_summary_schema = SessionSummarySchema()
_start_schema = SessionStartSchema()
_filter_schema = SessionFilterSchema()
_service = SessionService()


@sessions_bp.get("/active/<entity_id>")
def get_active_session(entity_id: str):
    """The entity's active session, or null."""

    policy = AccessPolicy.from_headers(request.headers)
    active = _service.get_active(get_session(), entity_id, policy)
    return ok(_session_schema.dump(active) if active is not None else None)


@sessions_bp.get("/entity/<entity_id>")
def list_entity_sessions(entity_id: str):
    policy = AccessPolicy.from_headers(request.headers)
    filters = _filter_schema.load(request.args)
    sessions = _service.list_for_entity(get_session(), entity_id, policy, **filters)
    return ok(_sessions_schema.dump(sessions))


@sessions_bp.get("/my/active")
def list_my_active_sessions():
    policy = AccessPolicy.from_headers(request.headers)
    return ok(_sessions_schema.dump(_service.list_active_for_user(get_session(), policy)))


@sessions_bp.get("/<session_id>")
def get_raffle_session(session_id: str):
    policy = AccessPolicy.from_headers(request.headers)
    raffle_session = _service.get_visible_session(get_session(), session_id, policy)
    return ok(_session_schema.dump(raffle_session))


@sessions_bp.get("/<session_id>/summary")
def get_session_summary(session_id: str):
    """Session with its purchases and live ledger totals."""

    policy = AccessPolicy.from_headers(request.headers)
    summary = _service.summary(get_session(), session_id, policy)
    return ok(_summary_schema.dump(summary))


@sessions_bp.post("/start")
def start_session():
    policy = AccessPolicy.from_headers(request.headers)
    data = _start_schema.load(request.get_json(silent=True) or {})
    raffle_session = _service.start(get_session(), data["entity_id"], policy)
    return created(_session_schema.dump(raffle_session))


@sessions_bp.post("/<session_id>/close")
def close_session(session_id: str):
    policy = AccessPolicy.from_headers(request.headers)
    raffle_session = _service.close(get_session(), session_id, policy)
    return ok(_session_schema.dump(raffle_session))


@sessions_bp.post("/<session_id>/recompute")
def recompute_session(session_id: str):
    policy = AccessPolicy.from_headers(request.headers)
    session = get_session()
    _service.get_visible_session(session, session_id, policy)
    raffle_session = _service.recompute_stats(session, session_id)
    return ok(_session_schema.dump(raffle_session))
