"""Health check routes."""

from __future__ import annotations

from flask import Blueprint
from sqlalchemy import text

from raffledesk.db import get_session
from raffledesk.utils.responses import ok

health_bp = Blueprint("health", __name__)


@health_bp.get("/health")
def health_check():
    """Liveness plus a trivial database round trip."""

    get_session().execute(text("SELECT 1"))
    return ok({"status": "ok"})
