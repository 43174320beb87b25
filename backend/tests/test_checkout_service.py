# Overview: Pytest coverage for checkout atomicity, stock deduction and cart validation.

"""
Checkout Service Tests

Every failing checkout must leave the catalog exactly as it was: no partial
stock deduction, no transaction row, no detail rows.
"""

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from pos_api.models import Product, Transaction, TransactionDetail
from pos_api.services import checkout_service
from pos_api.services.checkout_service import ProductNotFound, InsufficientStock
from pos_api.services.concurrency import StorageError
from pos_api.validation import ValidationError


class TestCheckoutSuccess:

    def test_two_item_cart_totals_and_stock(self, db_session, phone, noodles, stock_of):
        """iPhone x2 + Indomie x5 -> 30,015,000 with matching detail rows."""
        tx = checkout_service.checkout([
            {"product_id": 1, "quantity": 2},
            {"product_id": 3, "quantity": 5},
        ])

        assert tx.total_amount == 30_015_000
        assert [(d.product_id, d.quantity, d.subtotal) for d in tx.details] == [
            (1, 2, 30_000_000),
            (3, 5, 15_000),
        ]
        assert stock_of(1) == 48
        assert stock_of(3) == 15

    def test_details_reference_transaction_and_snapshot_name(self, db_session, phone):
        tx = checkout_service.checkout([{"product_id": phone.id, "quantity": 1}])

        detail = tx.details[0]
        assert detail.transaction_id == tx.id
        assert detail.product_name == "iPhone 15 Pro"
        assert tx.created_at is not None

    def test_product_rename_does_not_touch_history(self, db_session, phone):
        tx = checkout_service.checkout([{"product_id": phone.id, "quantity": 1}])

        phone.name = "iPhone 15 Pro (2024)"
        db_session.commit()

        stored = db_session.get(TransactionDetail, tx.details[0].id)
        assert stored.product_name == "iPhone 15 Pro"

    def test_total_equals_sum_of_subtotals(self, db_session, phone, noodles):
        tx = checkout_service.checkout([
            {"product_id": noodles.id, "quantity": 3},
            {"product_id": phone.id, "quantity": 1},
            {"product_id": noodles.id, "quantity": 4},
        ])
        assert tx.total_amount == sum(d.subtotal for d in tx.details)
        assert len(tx.details) == 3

    def test_duplicate_entries_are_applied_sequentially(self, db_session, noodles, stock_of):
        """Entries are not merged; each one is its own detail line."""
        tx = checkout_service.checkout([
            {"product_id": noodles.id, "quantity": 10},
            {"product_id": noodles.id, "quantity": 10},
        ])
        assert [d.quantity for d in tx.details] == [10, 10]
        assert stock_of(noodles.id) == 0

    def test_to_dict_shape(self, db_session, noodles):
        tx = checkout_service.checkout([{"product_id": noodles.id, "quantity": 2}])
        data = tx.to_dict()

        assert set(data) == {"id", "total_amount", "created_at", "details"}
        assert data["created_at"].endswith("Z")
        assert set(data["details"][0]) == {
            "id", "transaction_id", "product_id", "product_name", "quantity", "subtotal",
        }

    def test_get_transaction(self, db_session, noodles):
        tx = checkout_service.checkout([{"product_id": noodles.id, "quantity": 1}])
        assert checkout_service.get_transaction(tx.id).total_amount == 3_000
        assert checkout_service.get_transaction(tx.id + 1000) is None


class TestCheckoutRollback:

    def test_missing_product_changes_nothing(self, db_session, phone, noodles, stock_of):
        with pytest.raises(ProductNotFound) as exc_info:
            checkout_service.checkout([
                {"product_id": phone.id, "quantity": 2},
                {"product_id": 999, "quantity": 1},
            ])

        assert exc_info.value.product_id == 999
        assert stock_of(phone.id) == 50
        assert db_session.query(Transaction).count() == 0
        assert db_session.query(TransactionDetail).count() == 0

    def test_insufficient_stock_rolls_back_earlier_items(self, db_session, phone, noodles, stock_of):
        with pytest.raises(InsufficientStock) as exc_info:
            checkout_service.checkout([
                {"product_id": phone.id, "quantity": 5},
                {"product_id": noodles.id, "quantity": 21},
            ])

        err = exc_info.value
        assert err.product_id == noodles.id
        assert err.available == 20
        assert err.requested == 21
        assert err.details == {"product_id": noodles.id, "available": 20, "requested": 21}
        assert stock_of(phone.id) == 50
        assert stock_of(noodles.id) == 20
        assert db_session.query(Transaction).count() == 0

    def test_duplicate_entries_exceeding_stock_fail_atomically(self, db_session, noodles, stock_of):
        """First entry alone fits; the second sees the reduced stock and fails."""
        with pytest.raises(InsufficientStock) as exc_info:
            checkout_service.checkout([
                {"product_id": noodles.id, "quantity": 15},
                {"product_id": noodles.id, "quantity": 6},
            ])

        assert exc_info.value.available == 5
        assert exc_info.value.requested == 6
        assert stock_of(noodles.id) == 20
        assert db_session.query(Transaction).count() == 0

    def test_exact_stock_is_allowed(self, db_session, noodles, stock_of):
        checkout_service.checkout([{"product_id": noodles.id, "quantity": 20}])
        assert stock_of(noodles.id) == 0

    def test_failed_checkout_does_not_block_next_one(self, db_session, noodles, stock_of):
        with pytest.raises(InsufficientStock):
            checkout_service.checkout([{"product_id": noodles.id, "quantity": 100}])

        tx = checkout_service.checkout([{"product_id": noodles.id, "quantity": 1}])
        assert tx.total_amount == 3_000
        assert stock_of(noodles.id) == 19


class TestCheckoutStorage:

    @pytest.fixture
    def no_backoff(self, monkeypatch):
        monkeypatch.setattr("pos_api.services.concurrency.time.sleep", lambda _: None)

    def test_insert_failure_after_decrement_rolls_back(self, db_session, monkeypatch, phone, noodles, stock_of):
        """Stock is already flushed when the transaction insert fails."""
        def _fail():
            raise IntegrityError("INSERT INTO transactions", {}, Exception("disk full"))

        monkeypatch.setattr(checkout_service, "utcnow", _fail)

        with pytest.raises(StorageError) as exc_info:
            checkout_service.checkout([
                {"product_id": phone.id, "quantity": 2},
                {"product_id": noodles.id, "quantity": 5},
            ])

        assert isinstance(exc_info.value.__cause__, IntegrityError)
        assert stock_of(phone.id) == 50
        assert stock_of(noodles.id) == 20
        assert db_session.query(Transaction).count() == 0
        assert db_session.query(TransactionDetail).count() == 0

    def test_lock_conflict_is_retried(self, db_session, monkeypatch, no_backoff, noodles, stock_of):
        real_utcnow = checkout_service.utcnow
        calls = []

        def _busy_once():
            calls.append(1)
            if len(calls) == 1:
                raise OperationalError("INSERT INTO transactions", {}, Exception("database is locked"))
            return real_utcnow()

        monkeypatch.setattr(checkout_service, "utcnow", _busy_once)

        tx = checkout_service.checkout([{"product_id": noodles.id, "quantity": 2}])

        assert len(calls) == 2
        assert tx.total_amount == 6_000
        assert stock_of(noodles.id) == 18
        assert db_session.query(Transaction).count() == 1

    def test_retries_exhausted_surface_as_storage_error(self, db_session, monkeypatch, no_backoff, noodles, stock_of):
        def _busy():
            raise OperationalError("INSERT INTO transactions", {}, Exception("database is locked"))

        monkeypatch.setattr(checkout_service, "utcnow", _busy)

        with pytest.raises(StorageError):
            checkout_service.checkout([{"product_id": noodles.id, "quantity": 2}], attempts=2)

        assert stock_of(noodles.id) == 20
        assert db_session.query(Transaction).count() == 0

    def test_amounts_beyond_32_bits(self, db_session, electronics):
        db_session.add(Product(id=10, name="Server Rack", price=999_999_999, stock=10, category_id=electronics.id))
        db_session.commit()

        tx = checkout_service.checkout([{"product_id": 10, "quantity": 5}])

        db_session.expire_all()
        stored = db_session.get(Transaction, tx.id)
        assert stored.total_amount == 4_999_999_995
        assert stored.details[0].subtotal == 4_999_999_995


class TestCartValidation:

    @pytest.mark.parametrize("items", [
        None,
        [],
        "not-a-list",
        [{"product_id": 1}],
        [{"product_id": 0, "quantity": 1}],
        [{"product_id": -4, "quantity": 1}],
        [{"product_id": 1, "quantity": 0}],
        [{"product_id": 1, "quantity": -2}],
        [{"product_id": 1, "quantity": 1.5}],
        [{"product_id": True, "quantity": 1}],
        [{"product_id": "1e3", "quantity": 1}],
        ["1:2"],
    ])
    def test_invalid_carts_rejected(self, db_session, phone, stock_of, items):
        with pytest.raises(ValidationError):
            checkout_service.checkout(items)
        assert stock_of(phone.id) == 50

    def test_validation_happens_before_lookup(self, db_session):
        """A bad quantity is reported even when the product does not exist."""
        with pytest.raises(ValidationError, match="quantity must be greater than 0"):
            checkout_service.checkout([
                {"product_id": 12345, "quantity": 1},
                {"product_id": 12346, "quantity": 0},
            ])

    def test_numeric_strings_are_accepted(self, db_session, noodles):
        tx = checkout_service.checkout([{"product_id": str(noodles.id), "quantity": "2"}])
        assert tx.total_amount == 6_000
