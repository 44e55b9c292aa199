"""Tests for PurchaseService: recording sales in the ledger."""

from decimal import Decimal

import pytest

from raffledesk.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from raffledesk.models.base import utcnow
from raffledesk.models.purchase import RaffleTicket
from raffledesk.repositories.session_repository import SessionRepository
from raffledesk.services.counter_service import TicketCounterService
from raffledesk.services.purchase_service import PurchaseService
from raffledesk.services.session_service import SessionService


class CloseBeforeClaimCounter(TicketCounterService):
    """Counter whose claim runs right after another seller closed the shift."""

    def __init__(self, session_id, closer):
        super().__init__()
        self._session_id = session_id
        self._closer = closer

    def claim(self, session, entity_id, count):
        SessionService().close(session, self._session_id, self._closer)
        return super().claim(session, entity_id, count)


def buy(db, policy, entity, count=1, price=10, **extra):
    return PurchaseService().create(
        db,
        policy,
        entity_id=entity.id,
        buyer_name=extra.pop("buyer_name", "Bea"),
        ticket_count=count,
        price_per_ticket=price,
        **extra,
    )


class TestCreate:
    def test_records_purchase_and_tickets(self, db, entity, staff):
        result = buy(db, staff, entity, count=5, price=10)
        purchase = result.purchase

        assert purchase.total_price == Decimal("50")
        assert (purchase.start_ticket_number, purchase.end_ticket_number) == (1, 5)
        assert [t.ticket_number for t in purchase.tickets] == [1, 2, 3, 4, 5]
        assert purchase.is_paid is False
        assert purchase.session_id is None
        assert "Ticket Numbers: 1-5" in result.receipt

    def test_consecutive_purchases_continue_numbering(self, db, entity, staff):
        buy(db, staff, entity, count=5)
        second = buy(db, staff, entity, count=2).purchase

        assert second.ticket_range == "6-7"

    def test_stamps_active_session_and_updates_totals(self, db, entity, staff):
        raffle_session = SessionService().start(db, entity.id, staff)

        purchase = buy(db, staff, entity, count=4, price="2.50").purchase

        assert purchase.session_id == raffle_session.id
        assert raffle_session.tickets_sold == 4
        assert raffle_session.total_revenue == Decimal("10.00")
        assert raffle_session.end_ticket_number == 4

    def test_raffler_defaults_to_caller(self, db, entity, staff):
        assert buy(db, staff, entity).purchase.raffler_name == "mira"
        assert buy(db, staff, entity, raffler_name="Kit").purchase.raffler_name == "Kit"

    def test_gift_requires_gifter(self, db, entity, staff):
        with pytest.raises(ValidationError):
            buy(db, staff, entity, is_gift=True)

    def test_gift_shows_on_receipt(self, db, entity, staff):
        result = buy(db, staff, entity, is_gift=True, gifter_name="Ana")

        assert result.purchase.gifter_name == "Ana"
        assert "🎁 GIFT from: Ana" in result.receipt

    @pytest.mark.parametrize("count", [0, -1])
    def test_rejects_bad_ticket_count(self, db, entity, staff, count):
        with pytest.raises(ValidationError):
            buy(db, staff, entity, count=count)

    @pytest.mark.parametrize("count", [2.7, "3", "abc", None, True])
    def test_rejects_non_integer_ticket_count(self, db, entity, staff, count):
        with pytest.raises(ValidationError):
            buy(db, staff, entity, count=count)

        assert buy(db, staff, entity, count=1).purchase.ticket_range == "1-1"

    @pytest.mark.parametrize("price", [0, -5, "abc", "NaN"])
    def test_rejects_bad_price(self, db, entity, staff, price):
        with pytest.raises(ValidationError):
            buy(db, staff, entity, price=price)

    def test_rejects_blank_buyer(self, db, entity, staff):
        with pytest.raises(ValidationError):
            buy(db, staff, entity, buyer_name="   ")

    def test_unknown_entity(self, db, staff):
        with pytest.raises(NotFoundError):
            PurchaseService().create(
                db, staff, entity_id="missing", buyer_name="Bea", ticket_count=1, price_per_ticket=1
            )

    def test_requires_entity_access(self, db, entity, outsider):
        with pytest.raises(PermissionDeniedError):
            buy(db, outsider, entity)

    def test_failed_validation_consumes_no_numbers(self, db, entity, staff):
        with pytest.raises(ValidationError):
            buy(db, staff, entity, is_gift=True)

        assert buy(db, staff, entity).purchase.ticket_range == "1-1"


class TestUpdates:
    def test_mark_paid(self, db, entity, staff):
        purchase = buy(db, staff, entity).purchase

        updated = PurchaseService().update_payment_status(db, purchase.id, True, staff)

        assert updated.is_paid is True

    def test_rename_buyer(self, db, entity, staff):
        purchase = buy(db, staff, entity).purchase

        updated = PurchaseService().update_buyer_name(db, purchase.id, "  Cleo ", staff)

        assert updated.buyer_name == "Cleo"

    def test_rename_rejects_blank(self, db, entity, staff):
        purchase = buy(db, staff, entity).purchase

        with pytest.raises(ValidationError):
            PurchaseService().update_buyer_name(db, purchase.id, "", staff)


class TestDelete:
    def test_numbers_are_not_reused(self, db, entity, staff):
        purchase = buy(db, staff, entity, count=3).purchase
        PurchaseService().delete(db, purchase.id, staff)

        assert buy(db, staff, entity, count=2).purchase.ticket_range == "4-5"
        assert db.query(RaffleTicket).filter_by(purchase_id=purchase.id).count() == 0

    def test_delete_from_active_session_refreshes_totals(self, db, entity, staff):
        raffle_session = SessionService().start(db, entity.id, staff)
        keep = buy(db, staff, entity, count=2).purchase
        drop = buy(db, staff, entity, count=3).purchase

        PurchaseService().delete(db, drop.id, staff)

        assert raffle_session.tickets_sold == keep.ticket_count
        assert raffle_session.total_revenue == Decimal("20.00")

    def test_delete_from_closed_session_conflicts(self, db, entity, staff):
        sessions = SessionService()
        raffle_session = sessions.start(db, entity.id, staff)
        purchase = buy(db, staff, entity).purchase
        sessions.close(db, raffle_session.id, staff)

        with pytest.raises(ConflictError):
            PurchaseService().delete(db, purchase.id, staff)

    def test_unknown_purchase(self, db, staff):
        with pytest.raises(NotFoundError):
            PurchaseService().delete(db, "missing", staff)


class TestListing:
    def test_newest_first(self, db, entity, staff):
        first = buy(db, staff, entity).purchase
        second = buy(db, staff, entity).purchase

        listed = PurchaseService().list_for_entity(db, entity.id, staff)

        assert [p.id for p in listed] == [second.id, first.id]

    def test_session_only(self, db, entity, staff):
        service = PurchaseService()
        buy(db, staff, entity)
        assert service.list_for_entity(db, entity.id, staff, session_only=True) == []

        SessionService().start(db, entity.id, staff)
        in_session = buy(db, staff, entity).purchase

        assert [p.id for p in service.list_for_entity(db, entity.id, staff, session_only=True)] == [in_session.id]

    def test_list_all_is_policy_filtered(self, db, entity, other_entity, staff, admin):
        buy(db, admin, entity)
        buy(db, admin, other_entity)

        assert len(PurchaseService().list_all(db, admin)) == 2
        assert {p.entity_id for p in PurchaseService().list_all(db, staff)} == {entity.id}


class TestSessionClosedConcurrently:
    def test_purchase_is_not_stamped_with_closed_session(self, db, entity, staff):
        raffle_session = SessionService().start(db, entity.id, staff)
        service = PurchaseService(counter=CloseBeforeClaimCounter(raffle_session.id, staff))

        purchase = service.create(
            db, staff, entity_id=entity.id, buyer_name="Bea", ticket_count=2, price_per_ticket=5
        ).purchase

        assert purchase.session_id is None
        assert raffle_session.status == "closed"
        assert raffle_session.tickets_sold == 0
        assert raffle_session.total_revenue == Decimal("0")
        assert raffle_session.end_ticket_number == 0

    def test_delete_refuses_when_session_closes_underneath(self, db, entity, staff):
        raffle_session = SessionService().start(db, entity.id, staff)
        purchase = buy(db, staff, entity, count=2).purchase
        # Closed by another request; this unit of work still holds the active copy.
        SessionRepository().mark_closed(db, raffle_session.id, utcnow())

        with pytest.raises(ConflictError):
            PurchaseService().delete(db, purchase.id, staff)
