"""Spreadsheet export of the sales ledger."""

from __future__ import annotations

import io
from collections.abc import Iterable, Sequence
from datetime import datetime

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet
from sqlalchemy.orm import Session

from raffledesk.access import AccessPolicy
from raffledesk.errors import NotFoundError
from raffledesk.models.base import utcnow
from raffledesk.models.entity import Entity
from raffledesk.models.purchase import TicketPurchase
from raffledesk.repositories.entity_repository import EntityRepository
from raffledesk.repositories.purchase_repository import PurchaseRepository
from raffledesk.repositories.raffle_repository import RaffleRepository

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

_HEADER_FONT = Font(bold=True, color="FFFFFFFF")
_HEADER_FILL = PatternFill(fill_type="solid", fgColor="FF4F81BD")

# (header, width)
_PURCHASE_COLUMNS = [
    ("Purchase ID", 40),
    ("Club", 25),
    ("Session ID", 40),
    ("Buyer Name", 20),
    ("Raffler Name", 20),
    ("Ticket Count", 15),
    ("Price Per Ticket", 18),
    ("Total Price", 15),
    ("Ticket Range", 15),
    ("Gift From", 20),
    ("Paid", 8),
    ("Purchase Date", 22),
]


def _iso(value: datetime | None) -> str:
    return value.isoformat() if value is not None else ""


def _club_label(entity: Entity | None, fallback: str) -> str:
    return f"{entity.emoji} {entity.display_name}" if entity is not None else fallback


def _add_sheet(workbook: Workbook, title: str, columns: Sequence[tuple[str, int]], styled: bool = True) -> Worksheet:
    sheet = workbook.create_sheet(title=title)
    sheet.append([header for header, _ in columns])
    for idx, (_, width) in enumerate(columns, start=1):
        sheet.column_dimensions[get_column_letter(idx)].width = width
    for cell in sheet[1]:
        cell.font = _HEADER_FONT if styled else Font(bold=True)
        if styled:
            cell.fill = _HEADER_FILL
    return sheet


def _purchase_row(purchase: TicketPurchase, club: str) -> list[object]:
    return [
        purchase.id,
        club,
        purchase.session_id or "",
        purchase.buyer_name,
        purchase.raffler_name,
        purchase.ticket_count,
        float(purchase.price_per_ticket),
        float(purchase.total_price),
        purchase.ticket_range,
        purchase.gifter_name or "",
        "Yes" if purchase.is_paid else "No",
        _iso(purchase.created_at),
    ]


def _to_bytes(workbook: Workbook) -> bytes:
    buf = io.BytesIO()
    workbook.save(buf)
    return buf.getvalue()


def _new_workbook() -> Workbook:
    workbook = Workbook()
    workbook.remove(workbook.active)
    workbook.properties.creator = "RaffleDesk"
    workbook.properties.created = utcnow()
    return workbook


class ExportService:
    """Build ``.xlsx`` workbooks from the ledger."""

    def __init__(
        self,
        purchases: PurchaseRepository | None = None,
        entities: EntityRepository | None = None,
        raffles: RaffleRepository | None = None,
    ) -> None:
        self._purchases = purchases or PurchaseRepository()
        self._entities = entities or EntityRepository()
        self._raffles = raffles or RaffleRepository()

    def export_all(self, session: Session, policy: AccessPolicy) -> bytes:
        """Purchases, Tickets, Clubs, Raffles and Summary sheets.

        Non-superusers only see the entities they are assigned to.
        """

        entity_filter: Iterable[str] | None = None if policy.is_superuser else policy.entity_ids
        entities = [e for e in self._entities.list_all(session) if policy.can_access_entity(e.id)]
        purchases = self._purchases.list_all(session, entity_ids=entity_filter)
        raffles = self._raffles.list_all(session, entity_ids=entity_filter)
        by_id = {e.id: e for e in entities}

        workbook = _new_workbook()

        sheet = _add_sheet(workbook, "Purchases", _PURCHASE_COLUMNS)
        for p in purchases:
            sheet.append(_purchase_row(p, _club_label(by_id.get(p.entity_id), p.entity_id)))

        sheet = _add_sheet(
            workbook,
            "Tickets",
            [("Ticket ID", 40), ("Ticket Number", 15), ("Purchase ID", 40), ("Buyer Name", 20), ("Club", 25), ("Created At", 22)],
        )
        for p in purchases:
            club = _club_label(by_id.get(p.entity_id), p.entity_id)
            for t in p.tickets:
                sheet.append([t.id, t.ticket_number, t.purchase_id, p.buyer_name, club, _iso(t.created_at)])

        sheet = _add_sheet(
            workbook,
            "Clubs",
            [("ID", 40), ("Name", 20), ("Display Name", 25), ("Emoji", 10), ("Tagline", 40), ("Prize %", 10), ("Created At", 22)],
        )
        for e in entities:
            sheet.append([e.id, e.name, e.display_name, e.emoji, e.tagline, e.raffle_percentage, _iso(e.created_at)])

        sheet = _add_sheet(
            workbook,
            "Raffles",
            [
                ("ID", 40),
                ("Club", 25),
                ("Name", 25),
                ("Prize", 30),
                ("Ticket Price", 15),
                ("Max Tickets", 15),
                ("Status", 12),
                ("Winning Ticket", 15),
                ("Created At", 22),
            ],
        )
        for r in raffles:
            sheet.append(
                [
                    r.id,
                    _club_label(by_id.get(r.entity_id), r.entity_id),
                    r.name,
                    r.prize_description,
                    float(r.ticket_price),
                    r.max_tickets,
                    "Active" if r.is_active else "Ended",
                    r.winning_ticket_number if r.winning_ticket_number is not None else "-",
                    _iso(r.created_at),
                ]
            )

        total_revenue = sum((p.total_price for p in purchases), start=0)
        total_tickets = sum(p.ticket_count for p in purchases)
        sheet = _add_sheet(workbook, "Summary", [("Metric", 30), ("Value", 20)])
        sheet.append(["Total Clubs", len(entities)])
        sheet.append(["Total Purchases", len(purchases)])
        sheet.append(["Total Tickets Sold", total_tickets])
        sheet.append(["Total Revenue", f"${total_revenue:.2f}"])
        sheet.append(["Total Raffles", len(raffles)])
        sheet.append(["Active Raffles", sum(1 for r in raffles if r.is_active)])
        sheet.append(["Export Date", _iso(utcnow())])

        return _to_bytes(workbook)

    def export_entity(self, session: Session, entity_id: str, policy: AccessPolicy) -> bytes:
        """Club Info (with a summary block) and Purchases for one entity."""

        entity = self._entities.get_by_id(session, entity_id)
        if entity is None:
            raise NotFoundError(message=f"Entity {entity_id} not found")
        policy.require_entity(entity_id)

        purchases = self._purchases.list_for_entity(session, entity_id)
        workbook = _new_workbook()

        info = _add_sheet(workbook, "Club Info", [("Property", 20), ("Value", 40)], styled=False)
        info.append(["ID", entity.id])
        info.append(["Name", entity.name])
        info.append(["Display Name", entity.display_name])
        info.append(["Emoji", entity.emoji])
        info.append(["Tagline", entity.tagline])
        info.append(["Prize %", entity.raffle_percentage])
        info.append(["Created At", _iso(entity.created_at)])

        sheet = _add_sheet(workbook, "Purchases", _PURCHASE_COLUMNS)
        club = _club_label(entity, entity.id)
        for p in purchases:
            sheet.append(_purchase_row(p, club))

        total_revenue = sum((p.total_price for p in purchases), start=0)
        info.append(["", ""])
        info.append(["--- Summary ---", ""])
        info.append(["Total Purchases", len(purchases)])
        info.append(["Total Tickets", sum(p.ticket_count for p in purchases)])
        info.append(["Total Revenue", f"${total_revenue:.2f}"])

        return _to_bytes(workbook)
