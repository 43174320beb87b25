# backend/pos_api/routes/system.py
"""
System info and health endpoints.
"""

import time
from flask import Blueprint, current_app, url_for
from sqlalchemy import text
from ..extensions import db

API_NAME = "POS Catalog & Checkout API"
API_VERSION = "1.0"

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """
    Check database connectivity with a trivial round trip.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error",
        }


@system_bp.get("/")
def api_info():
    return {
        "name": API_NAME,
        "version": API_VERSION,
        "status": "running",
        "endpoints": {
            "health": url_for("system.health"),
            "categories": url_for("categories.list_categories"),
            "products": url_for("products.list_products"),
            "checkout": url_for("transactions.checkout_route"),
            "report_today": url_for("reports.daily_report"),
            "report_range": url_for("reports.range_report"),
        },
    }


@system_bp.get("/health")
def health():
    database = check_database_health()
    healthy = database["status"] == "healthy"
    return {
        "status": "OK" if healthy else "DEGRADED",
        "database": database,
    }, 200 if healthy else 503
