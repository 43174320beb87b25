# Overview: Service-layer operations for sales reporting; aggregate queries over transactions.

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import func

from pos_api.extensions import db
from pos_api.models import Product, Transaction, TransactionDetail
from pos_api.time_utils import day_bounds, parse_calendar_date, utc_today
from pos_api.validation import ValidationError


class ReportError(Exception):
    """Raised when report generation fails."""
    pass


class InvalidRange(ReportError, ValidationError):
    """start_date / end_date missing or unparsable."""


def _parse_range(start: str | None, end: str | None) -> tuple[date, date]:
    if not start or not end or not start.strip() or not end.strip():
        raise InvalidRange("start_date and end_date are required")
    try:
        start_d = parse_calendar_date(start)
        end_d = parse_calendar_date(end)
    except ValueError:
        raise InvalidRange("start_date and end_date must be YYYY-MM-DD dates")
    return start_d, end_d


def _best_selling_product(lower: datetime, upper: datetime) -> dict | None:
    """
    Product with the highest summed quantity in the window.
    Ties go to the lowest product id; the name is the product's current name.
    """
    qty_sold = func.sum(TransactionDetail.quantity).label("qty_sold")
    row = (
        db.session.query(Product.id, Product.name, qty_sold)
        .join(TransactionDetail, TransactionDetail.product_id == Product.id)
        .join(Transaction, TransactionDetail.transaction_id == Transaction.id)
        .filter(Transaction.created_at >= lower, Transaction.created_at < upper)
        .group_by(Product.id, Product.name)
        .order_by(qty_sold.desc(), Product.id.asc())
        .first()
    )
    if row is None:
        return None
    return {"name": row.name, "qty_sold": int(row.qty_sold or 0)}


def _sales_report(start: date, end: date) -> dict:
    lower, upper = day_bounds(start, end)

    total_revenue, total_transactions = (
        db.session.query(
            func.coalesce(func.sum(Transaction.total_amount), 0),
            func.count(Transaction.id),
        )
        .filter(Transaction.created_at >= lower, Transaction.created_at < upper)
        .one()
    )

    return {
        "total_revenue": int(total_revenue or 0),
        "total_transactions": int(total_transactions or 0),
        "best_selling_product": _best_selling_product(lower, upper),
    }


def daily_report(*, today: date | None = None) -> dict:
    """Sales summary for the current UTC calendar day."""
    day = today or utc_today()
    return _sales_report(day, day)


def range_report(start_date: str | None, end_date: str | None) -> dict:
    """
    Sales summary for transactions dated start_date..end_date inclusive.

    Raises InvalidRange before touching the database if either date is
    missing or not a YYYY-MM-DD calendar date. A start after the end is an
    empty window, not an error.
    """
    start, end = _parse_range(start_date, end_date)
    return _sales_report(start, end)
