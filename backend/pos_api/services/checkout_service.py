"""
Checkout Service - converts a cart into a persisted transaction

WHY: Stock deduction and the transaction record must never disagree. The
whole cart is priced, every product is decremented and the transaction plus
its details are inserted inside ONE database transaction; any failure rolls
all of it back.
"""

from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import Product, Transaction, TransactionDetail
from ..validation import validate_checkout_items
from pos_api.time_utils import utcnow
from .concurrency import StorageError, begin_write, lock_for_update, run_with_retry


class CheckoutError(Exception):
    """Raised when a cart cannot be checked out. Nothing is persisted."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class ProductNotFound(CheckoutError):
    def __init__(self, product_id: int):
        super().__init__(
            f"product id {product_id} not found",
            details={"product_id": product_id},
        )
        self.product_id = product_id


class InsufficientStock(CheckoutError):
    def __init__(self, product_id: int, product_name: str, available: int, requested: int):
        super().__init__(
            f"insufficient stock for product '{product_name}' "
            f"(available: {available}, requested: {requested})",
            details={
                "product_id": product_id,
                "available": available,
                "requested": requested,
            },
        )
        self.product_id = product_id
        self.available = available
        self.requested = requested


def _take_stock(product_id: int, quantity: int) -> TransactionDetail:
    """
    Check and decrement one cart entry against live stock.

    The decrement is flushed immediately so a later entry for the same
    product sees the reduced value.
    """
    product = lock_for_update(db.session.query(Product).filter_by(id=product_id)).first()
    if product is None:
        raise ProductNotFound(product_id)

    if product.stock < quantity:
        raise InsufficientStock(product.id, product.name, product.stock, quantity)

    subtotal = product.price * quantity
    product.stock = product.stock - quantity
    db.session.flush()

    return TransactionDetail(
        product_id=product.id,
        product_name=product.name,
        quantity=quantity,
        subtotal=subtotal,
    )


def _checkout_locked(cart: list[tuple[int, int]]) -> Transaction:
    details = [_take_stock(product_id, quantity) for product_id, quantity in cart]

    transaction = Transaction(
        total_amount=sum(d.subtotal for d in details),
        created_at=utcnow(),
    )
    db.session.add(transaction)
    db.session.flush()

    for detail in details:
        detail.transaction_id = transaction.id
        db.session.add(detail)
    db.session.flush()

    return transaction


def checkout(items, *, attempts: int | None = None) -> Transaction:
    """
    Check out a cart of {product_id, quantity} entries.

    Entries are applied in input order and are never merged, so two entries for
    the same product are validated against progressively reduced stock.

    Raises:
        ValidationError: malformed or empty cart (no DB access happens)
        ProductNotFound / InsufficientStock: cart rejected, state unchanged
        StorageError: the database failed, state unchanged
    """
    cart = validate_checkout_items(items)

    if attempts is None:
        attempts = current_app.config.get("CHECKOUT_RETRY_ATTEMPTS", 3)

    def _op():
        try:
            begin_write()
            transaction = _checkout_locked(cart)
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise
        return transaction

    try:
        transaction = run_with_retry(_op, attempts=attempts)
    except CheckoutError as exc:
        current_app.logger.warning("Checkout rejected: %s", exc)
        raise
    except SQLAlchemyError as exc:
        current_app.logger.error("Checkout failed in storage: %s", exc)
        raise StorageError("checkout could not be stored") from exc

    current_app.logger.info(
        "Checkout committed transaction=%s lines=%d total_amount=%d",
        transaction.id,
        len(cart),
        transaction.total_amount,
    )
    return transaction


def get_transaction(transaction_id: int) -> Transaction | None:
    return db.session.get(Transaction, transaction_id)
