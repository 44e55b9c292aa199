"""Tests for RaffleService, including the winner draw."""

import random
from datetime import timedelta
from decimal import Decimal
from unittest.mock import Mock

import pytest

from raffledesk.errors import NotFoundError, PermissionDeniedError, ValidationError
from raffledesk.models.base import utcnow
from raffledesk.services.purchase_service import PurchaseService
from raffledesk.services.raffle_service import DrawScope, RaffleService


def new_raffle(db, policy, entity, service=None):
    return (service or RaffleService()).create_raffle(
        db,
        policy,
        entity_id=entity.id,
        name="Friday Pot",
        prize_description="Cash pot",
        ticket_price=Decimal("2.00"),
    )


def sell(db, policy, entity, count, buyer):
    return PurchaseService().create(
        db, policy, entity_id=entity.id, buyer_name=buyer, ticket_count=count, price_per_ticket=2
    ).purchase


def fixed_rng(index):
    rng = Mock(spec=random.Random)
    rng.randrange.return_value = index
    return rng


class TestCrud:
    def test_create_defaults(self, db, entity, staff):
        raffle = new_raffle(db, staff, entity)

        assert raffle.is_active is True
        assert raffle.max_tickets == 1000
        assert raffle.sold_tickets == 0
        assert raffle.description == ""
        assert raffle.winning_ticket_number is None

    def test_create_for_unknown_entity(self, db, admin):
        with pytest.raises(NotFoundError):
            RaffleService().create_raffle(
                db, admin, entity_id="missing", name="x", prize_description="y", ticket_price=1
            )

    def test_update_ignores_unknown_fields(self, db, entity, staff):
        service = RaffleService()
        raffle = new_raffle(db, staff, entity, service)

        updated = service.update_raffle(db, raffle.id, staff, name="Saturday Pot", winner_id="hack")

        assert updated.name == "Saturday Pot"
        assert updated.winner_id is None

    def test_list_is_policy_filtered(self, db, entity, other_entity, admin, staff):
        service = RaffleService()
        new_raffle(db, admin, entity, service)
        new_raffle(db, admin, other_entity, service)

        assert len(service.list_raffles(db, admin)) == 2
        assert len(service.list_raffles(db, staff)) == 1
        with pytest.raises(PermissionDeniedError):
            service.list_for_entity(db, other_entity.id, staff)

    def test_delete(self, db, entity, staff):
        service = RaffleService()
        raffle = new_raffle(db, staff, entity, service)

        service.delete_raffle(db, raffle.id, staff)

        with pytest.raises(NotFoundError):
            service.get_raffle(db, raffle.id, staff)


class TestDraw:
    def test_empty_pool_leaves_raffle_open(self, db, entity, staff):
        service = RaffleService()
        raffle = new_raffle(db, staff, entity, service)

        assert service.draw(db, raffle.id, staff) is None
        assert raffle.is_active is True

    def test_picks_ticket_by_sale_order(self, db, entity, staff):
        first = sell(db, staff, entity, 3, "Ana")
        first.created_at = utcnow() - timedelta(minutes=5)
        sell(db, staff, entity, 2, "Ben")
        db.flush()
        rng = fixed_rng(3)
        service = RaffleService(rng=rng)
        raffle = new_raffle(db, staff, entity, service)

        result = service.draw(db, raffle.id, staff)

        assert result.winning_ticket_number == 4
        assert result.winner_name == "Ben"
        assert result.prize_name == "Cash pot"
        rng.randrange.assert_called_once_with(5)
        assert raffle.is_active is False
        assert raffle.winning_ticket_number == 4
        assert raffle.winner_id == result.purchase_id

    def test_closed_raffle_cannot_be_drawn_again(self, db, entity, staff):
        sell(db, staff, entity, 1, "Ana")
        service = RaffleService(rng=random.Random(7))
        raffle = new_raffle(db, staff, entity, service)
        assert service.draw(db, raffle.id, staff) is not None

        assert service.draw(db, raffle.id, staff) is None

    def test_raffle_scope_ignores_older_sales(self, db, entity, staff):
        old = sell(db, staff, entity, 4, "Ana")
        old.created_at = utcnow() - timedelta(days=1)
        db.flush()
        rng = fixed_rng(0)
        service = RaffleService(rng=rng)
        raffle = new_raffle(db, staff, entity, service)
        raffle.created_at = utcnow() - timedelta(hours=1)
        sell(db, staff, entity, 2, "Ben")
        db.flush()

        result = service.draw(db, raffle.id, staff, scope=DrawScope.RAFFLE)

        assert result.winner_name == "Ben"
        rng.randrange.assert_called_once_with(2)

    def test_raffle_scope_with_no_new_sales(self, db, entity, staff):
        old = sell(db, staff, entity, 4, "Ana")
        old.created_at = utcnow() - timedelta(days=1)
        db.flush()
        service = RaffleService()
        raffle = new_raffle(db, staff, entity, service)

        assert service.draw(db, raffle.id, staff, scope="raffle") is None

    def test_unknown_scope(self, db, entity, staff):
        raffle = new_raffle(db, staff, entity)

        with pytest.raises(ValidationError):
            RaffleService().draw(db, raffle.id, staff, scope="everything")

    def test_unknown_raffle(self, db, staff):
        with pytest.raises(NotFoundError):
            RaffleService().draw(db, "missing", staff)

    def test_draw_requires_access(self, db, entity, staff, outsider):
        raffle = new_raffle(db, staff, entity)

        with pytest.raises(PermissionDeniedError):
            RaffleService().draw(db, raffle.id, outsider)
