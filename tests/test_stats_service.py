"""Tests for StatsService and the prize formula."""

from decimal import Decimal

import pytest

from raffledesk.errors import NotFoundError, PermissionDeniedError
from raffledesk.services.purchase_service import PurchaseService
from raffledesk.services.session_service import SessionService
from raffledesk.services.stats_service import StatsService, prize_amount


def sell(db, policy, entity, count, price):
    PurchaseService().create(
        db, policy, entity_id=entity.id, buyer_name="Bea", ticket_count=count, price_per_ticket=price
    )


class TestPrizeAmount:
    @pytest.mark.parametrize(
        "revenue, pct, expected",
        [
            (Decimal("100"), 70, 70),
            (Decimal("99.99"), 70, 69),
            (Decimal("0"), 70, 0),
            (Decimal("57.50"), 50, 28),
            (Decimal("250"), 0, 0),
            (Decimal("250"), 100, 250),
        ],
    )
    def test_rounds_down_to_whole_dollars(self, revenue, pct, expected):
        assert prize_amount(revenue, pct) == expected


class TestStats:
    def test_all_history_without_session(self, db, entity, staff):
        sell(db, staff, entity, 10, 10)

        stats = StatsService().stats(db, entity.id, policy=staff)

        assert stats.session_id is None
        assert stats.tickets_sold == 10
        assert stats.total_revenue == Decimal("100.00")
        assert stats.prize_amount == 70

    def test_scoped_to_active_session(self, db, entity, staff):
        sell(db, staff, entity, 10, 10)
        raffle_session = SessionService().start(db, entity.id, staff)
        sell(db, staff, entity, 3, 5)

        stats = StatsService().stats(db, entity.id)

        assert stats.session_id == raffle_session.id
        assert stats.tickets_sold == 3
        assert stats.prize_amount == 10

    def test_explicit_closed_session(self, db, entity, staff):
        sessions = SessionService()
        first = sessions.start(db, entity.id, staff)
        sell(db, staff, entity, 2, 10)
        sessions.close(db, first.id, staff)
        sessions.start(db, entity.id, staff)
        sell(db, staff, entity, 7, 10)

        stats = StatsService().stats(db, entity.id, session_id=first.id)

        assert stats.tickets_sold == 2
        assert stats.prize_amount == 14

    def test_session_of_other_entity(self, db, entity, other_entity, admin):
        foreign = SessionService().start(db, other_entity.id, admin)

        with pytest.raises(NotFoundError):
            StatsService().stats(db, entity.id, session_id=foreign.id)

    def test_requires_entity_access(self, db, entity, outsider):
        with pytest.raises(PermissionDeniedError):
            StatsService().stats(db, entity.id, policy=outsider)

    def test_uses_entity_percentage(self, db, other_entity, admin):
        sell(db, admin, other_entity, 9, 11)

        assert StatsService().stats(db, other_entity.id).prize_amount == 49


class TestAnnouncement:
    def test_mentions_price_count_and_prize(self, db, entity, staff):
        sell(db, staff, entity, 10, 10)

        text = StatsService().announcement(db, entity.id, "Mira", Decimal("2.50"), policy=staff)

        assert text.startswith("🎲Hey everyone, I am Mira, your RAFFLER for today.")
        assert "Tickets are $2.50 each." in text
        assert "10 tickets sold in total." in text
        assert "WINNING AMOUNT is now $70 !!" in text

    def test_whole_price_has_no_cents(self, db, entity, staff):
        text = StatsService().announcement(db, entity.id, "Mira", 5)

        assert "Tickets are $5 each." in text
        assert "0 tickets sold in total." in text
