"""Ticket sales routes: purchases, counter, stats and announcements."""

from __future__ import annotations

from flask import Blueprint, Response, request

from raffledesk.access import AccessPolicy
from raffledesk.db import get_session
from raffledesk.schemas.purchase import (
    AnnouncementRequestSchema,
    BuyerNameSchema,
    PaymentStatusSchema,
    PurchaseCreateSchema,
    PurchaseFilterSchema,
    PurchaseSchema,
)
from raffledesk.schemas.stats import CounterSchema, TicketStatsSchema
from raffledesk.services.counter_service import TicketCounterService
from raffledesk.services.purchase_service import PurchaseService
from raffledesk.services.stats_service import StatsService
from raffledesk.utils.responses import created, ok

tickets_bp = Blueprint("tickets", __name__)

_purchase_schema = PurchaseSchema()
_purchases_schema = PurchaseSchema(many=True)
_create_schema = PurchaseCreateSchema()
_filter_schema = PurchaseFilterSchema()
_payment_schema = PaymentStatusSchema()
_buyer_schema = BuyerNameSchema()
_announcement_schema = AnnouncementRequestSchema()
_stats_schema = TicketStatsSchema()
_counter_schema = CounterSchema()

_counter = TicketCounterService()
_purchases = PurchaseService(counter=_counter)
_stats = StatsService()


@tickets_bp.get("/purchases")
def list_purchases():
    policy = AccessPolicy.from_headers(request.headers)
    return ok(_purchases_schema.dump(_purchases.list_all(get_session(), policy)))


@tickets_bp.get("/purchases/entity/<entity_id>")
def list_entity_purchases(entity_id: str):
    """Filter by session id, by date range, or to the active session only."""

    policy = AccessPolicy.from_headers(request.headers)
    filters = _filter_schema.load(request.args)
    session = get_session()

    if filters["session_id"]:
        purchases = _purchases.list_for_entity_and_session(session, entity_id, filters["session_id"], policy)
    elif filters["start_date"] is not None or filters["end_date"] is not None:
        purchases = _purchases.list_for_entity_in_range(
            session,
            entity_id,
            policy,
            start_date=filters["start_date"],
            end_date=filters["end_date"],
        )
    else:
        purchases = _purchases.list_for_entity(session, entity_id, policy, session_only=filters["session_only"])
    return ok(_purchases_schema.dump(purchases))


@tickets_bp.get("/purchases/session/<session_id>")
def list_session_purchases(session_id: str):
    policy = AccessPolicy.from_headers(request.headers)
    return ok(_purchases_schema.dump(_purchases.list_for_session(get_session(), session_id, policy)))


@tickets_bp.get("/purchases/<purchase_id>")
def get_purchase(purchase_id: str):
    policy = AccessPolicy.from_headers(request.headers)
    return ok(_purchase_schema.dump(_purchases.get_purchase(get_session(), purchase_id, policy)))


@tickets_bp.delete("/purchases/<purchase_id>")
def delete_purchase(purchase_id: str):
    policy = AccessPolicy.from_headers(request.headers)
    _purchases.delete(get_session(), purchase_id, policy)
    return ok({"id": purchase_id, "deleted": True})


@tickets_bp.get("/purchases/<purchase_id>/receipt")
def get_receipt(purchase_id: str):
    policy = AccessPolicy.from_headers(request.headers)
    return ok({"receipt": _purchases.receipt(get_session(), purchase_id, policy)})


@tickets_bp.get("/purchases/<purchase_id>/receipt/text")
def get_receipt_text(purchase_id: str):
    policy = AccessPolicy.from_headers(request.headers)
    receipt = _purchases.receipt(get_session(), purchase_id, policy)
    return Response(receipt, mimetype="text/plain")


@tickets_bp.patch("/purchases/<purchase_id>/payment")
def update_payment(purchase_id: str):
    policy = AccessPolicy.from_headers(request.headers)
    data = _payment_schema.load(request.get_json(silent=True) or {})
    purchase = _purchases.update_payment_status(get_session(), purchase_id, data["is_paid"], policy)
    return ok(_purchase_schema.dump(purchase))


@tickets_bp.patch("/purchases/<purchase_id>/buyer")
def update_buyer(purchase_id: str):
    policy = AccessPolicy.from_headers(request.headers)
    data = _buyer_schema.load(request.get_json(silent=True) or {})
    purchase = _purchases.update_buyer_name(get_session(), purchase_id, data["buyer_name"], policy)
    return ok(_purchase_schema.dump(purchase))


@tickets_bp.post("/purchase")
def create_purchase():
    """Sell tickets; responds with the purchase and its receipt text."""

    policy = AccessPolicy.from_headers(request.headers)
    data = _create_schema.load(request.get_json(silent=True) or {})
    result = _purchases.create(get_session(), policy, **data)
    return created({"purchase": _purchase_schema.dump(result.purchase), "receipt": result.receipt})


@tickets_bp.get("/counter/<entity_id>")
def get_counter(entity_id: str):
    policy = AccessPolicy.from_headers(request.headers)
    policy.require_entity(entity_id)
    last = _counter.current(get_session(), entity_id)
    return ok(
        _counter_schema.dump(
            {"entity_id": entity_id, "last_ticket_number": last, "next_ticket_number": last + 1}
        )
    )


@tickets_bp.post("/reset-counter/<entity_id>")
def reset_counter(entity_id: str):
    policy = AccessPolicy.from_headers(request.headers)
    _counter.reset(get_session(), entity_id, policy)
    return ok({"entity_id": entity_id, "last_ticket_number": 0, "next_ticket_number": 1})


@tickets_bp.get("/stats/<entity_id>")
def get_stats(entity_id: str):
    policy = AccessPolicy.from_headers(request.headers)
    session_id = request.args.get("session_id") or None
    stats = _stats.stats(get_session(), entity_id, session_id=session_id, policy=policy)
    return ok(_stats_schema.dump(stats))


@tickets_bp.post("/announcement")
def create_announcement():
    policy = AccessPolicy.from_headers(request.headers)
    data = _announcement_schema.load(request.get_json(silent=True) or {})
    text = _stats.announcement(
        get_session(),
        data["entity_id"],
        data["raffler_name"],
        data["price_per_ticket"],
        policy=policy,
    )
    return ok({"announcement": text})
