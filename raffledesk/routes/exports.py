"""Spreadsheet download routes."""

from __future__ import annotations

import io

from flask import Blueprint, request, send_file

from raffledesk.access import AccessPolicy
from raffledesk.db import get_session
from raffledesk.models.base import utcnow
from raffledesk.services.export_service import XLSX_MIMETYPE, ExportService

exports_bp = Blueprint("exports", __name__)

_service = ExportService()


def _download(payload: bytes, filename: str):  # type: ignore[no-untyped-def]
    return send_file(
        io.BytesIO(payload),
        mimetype=XLSX_MIMETYPE,
        as_attachment=True,
        download_name=filename,
    )


@exports_bp.get("/all")
def export_all():
    policy = AccessPolicy.from_headers(request.headers)
    payload = _service.export_all(get_session(), policy)
    return _download(payload, f"raffle-export-{utcnow():%Y-%m-%d}.xlsx")


@exports_bp.get("/entity/<entity_id>")
def export_entity(entity_id: str):
    policy = AccessPolicy.from_headers(request.headers)
    payload = _service.export_entity(get_session(), entity_id, policy)
    return _download(payload, f"raffle-export-{entity_id}-{utcnow():%Y-%m-%d}.xlsx")
