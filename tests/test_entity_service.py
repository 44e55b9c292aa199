"""Tests for EntityService."""

import pytest

from raffledesk.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from raffledesk.models.entity import DEFAULT_EMOJI, DEFAULT_RAFFLE_PERCENTAGE, DEFAULT_TAGLINE, TicketCounter
from raffledesk.models.purchase import TicketPurchase
from raffledesk.services.entity_service import EntityService
from raffledesk.services.purchase_service import PurchaseService


class TestCreate:
    def test_defaults_and_counter(self, db, entity):
        assert entity.emoji == DEFAULT_EMOJI
        assert entity.tagline == DEFAULT_TAGLINE
        assert entity.raffle_percentage == DEFAULT_RAFFLE_PERCENTAGE
        assert db.get(TicketCounter, entity.id).last_ticket_number == 0

    def test_duplicate_name(self, db, entity, admin):
        with pytest.raises(ConflictError):
            EntityService().create_entity(db, admin, name="ravens", display_name="Again")

    @pytest.mark.parametrize("pct", [-1, 101])
    def test_percentage_bounds(self, db, admin, pct):
        with pytest.raises(ValidationError):
            EntityService().create_entity(db, admin, name="x", display_name="X", raffle_percentage=pct)

    def test_superuser_only(self, db, staff):
        with pytest.raises(PermissionDeniedError):
            EntityService().create_entity(db, staff, name="x", display_name="X")


class TestUpdateAndDelete:
    def test_update(self, db, entity, admin):
        updated = EntityService().update_entity(db, entity.id, admin, tagline="New tagline", raffle_percentage=60)

        assert updated.tagline == "New tagline"
        assert updated.raffle_percentage == 60

    def test_rename_to_taken_name(self, db, entity, other_entity, admin):
        with pytest.raises(ConflictError):
            EntityService().update_entity(db, entity.id, admin, name="owls")

    def test_staff_cannot_update(self, db, entity, staff):
        with pytest.raises(PermissionDeniedError):
            EntityService().update_entity(db, entity.id, staff, tagline="nope")

    def test_delete_keeps_sales_history(self, db, entity, admin):
        purchase = PurchaseService().create(
            db, admin, entity_id=entity.id, buyer_name="Bea", ticket_count=1, price_per_ticket=1
        ).purchase
        entity_id = entity.id

        EntityService().delete_entity(db, entity_id, admin)

        with pytest.raises(NotFoundError):
            EntityService().get_entity(db, entity_id)
        assert db.get(TicketCounter, entity_id) is None
        assert db.get(TicketPurchase, purchase.id) is not None

    def test_list_is_policy_filtered(self, db, entity, other_entity, admin, staff):
        assert len(EntityService().list_entities(db, admin)) == 2
        assert [e.id for e in EntityService().list_entities(db, staff)] == [entity.id]
