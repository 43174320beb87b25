from __future__ import annotations

from ..extensions import db
from pos_api.time_utils import to_utc_z, utcnow


class Transaction(db.Model):
    """
    A completed checkout.

    Written exactly once by checkout_service.checkout(), together with all of
    its details, and never updated afterwards.
    total_amount always equals the sum of details.subtotal.
    """
    __tablename__ = "transactions"
    __table_args__ = (
        db.Index("ix_transactions_created_at", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    total_amount = db.Column(db.BigInteger, nullable=False)

    # Stored as UTC-naive; reports bucket by UTC calendar date
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    details = db.relationship(
        "TransactionDetail",
        back_populates="transaction",
        order_by="TransactionDetail.id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Transaction id={self.id} total_amount={self.total_amount}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "total_amount": self.total_amount,
            "created_at": to_utc_z(self.created_at),
            "details": [d.to_dict() for d in self.details],
        }


class TransactionDetail(db.Model):
    """One product's line in a transaction. Immutable once written."""
    __tablename__ = "transaction_details"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_transaction_details_quantity_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    transaction_id = db.Column(
        db.Integer,
        db.ForeignKey("transactions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    # Snapshot of the product name at sale time
    product_name = db.Column(db.String(255), nullable=False)

    quantity = db.Column(db.Integer, nullable=False)
    subtotal = db.Column(db.BigInteger, nullable=False)

    transaction = db.relationship("Transaction", back_populates="details")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "transaction_id": self.transaction_id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "subtotal": self.subtotal,
        }
