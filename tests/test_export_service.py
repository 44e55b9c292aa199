"""Tests for the spreadsheet export."""

import io

import pytest
from openpyxl import load_workbook

from raffledesk.errors import NotFoundError, PermissionDeniedError
from raffledesk.services.export_service import ExportService
from raffledesk.services.purchase_service import PurchaseService
from raffledesk.services.raffle_service import RaffleService


@pytest.fixture
def sales(db, entity, other_entity, admin):
    purchases = PurchaseService()
    purchases.create(db, admin, entity_id=entity.id, buyer_name="Ana", ticket_count=3, price_per_ticket=2)
    purchases.create(db, admin, entity_id=other_entity.id, buyer_name="Ben", ticket_count=1, price_per_ticket=5)
    RaffleService().create_raffle(
        db, admin, entity_id=entity.id, name="Pot", prize_description="Cash", ticket_price=2
    )


def read(payload):
    return load_workbook(io.BytesIO(payload))


class TestExportAll:
    def test_sheets_and_rows(self, db, admin, sales):
        workbook = read(ExportService().export_all(db, admin))

        assert workbook.sheetnames == ["Purchases", "Tickets", "Clubs", "Raffles", "Summary"]
        assert workbook["Purchases"].max_row == 3
        assert workbook["Tickets"].max_row == 5
        assert workbook["Clubs"].max_row == 3
        assert workbook["Raffles"].max_row == 2
        assert workbook["Purchases"]["A1"].value == "Purchase ID"
        assert workbook["Purchases"]["A1"].font.bold

    def test_staff_only_sees_own_entities(self, db, staff, sales):
        workbook = read(ExportService().export_all(db, staff))

        assert workbook["Purchases"].max_row == 2
        assert workbook["Purchases"]["D2"].value == "Ana"
        assert workbook["Clubs"].max_row == 2

    def test_summary_totals(self, db, admin, sales):
        summary = read(ExportService().export_all(db, admin))["Summary"]
        values = {row[0]: row[1] for row in summary.iter_rows(min_row=2, values_only=True)}

        assert values["Total Purchases"] == 2
        assert values["Total Tickets Sold"] == 4
        assert values["Total Revenue"] == "$11.00"


class TestExportEntity:
    def test_sheets(self, db, entity, staff, sales):
        workbook = read(ExportService().export_entity(db, entity.id, staff))

        assert workbook.sheetnames == ["Club Info", "Purchases"]
        assert workbook["Purchases"].max_row == 2
        assert workbook["Club Info"]["B3"].value == "ravens"

    def test_unknown_entity(self, db, admin):
        with pytest.raises(NotFoundError):
            ExportService().export_entity(db, "missing", admin)

    def test_requires_access(self, db, other_entity, staff):
        with pytest.raises(PermissionDeniedError):
            ExportService().export_entity(db, other_entity.id, staff)
