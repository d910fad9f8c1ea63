"""Liveness and readiness endpoints."""

from __future__ import annotations

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from tenantapi.api.deps import json_response, timing
from tenantapi.cache import get_response_cache
from tenantapi.core.extensions import db

bp = Blueprint("health", __name__)


@bp.get("/health")
@timing
def healthcheck():
    """Report that the process is up; touches no dependency."""

    version = current_app.config.get("APP_VERSION", "dev")
    return json_response({"status": "ok", "version": version})


@bp.get("/ready")
@timing
def readiness():
    """Check the database and report response-cache statistics."""

    db_status = "ok"
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        current_app.logger.exception("readiness.db_error")
        db.session.rollback()
        db_status = "fail"
    payload = {
        "status": "ok" if db_status == "ok" else "degraded",
        "db": db_status,
        "cache": get_response_cache().stats(),
    }
    return json_response(payload, status=200 if db_status == "ok" else 503)
