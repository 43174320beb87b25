"""
Pytest fixtures for the POS backend tests.

Provides test database setup, catalog fixtures, and test client.
"""

import pytest
from pos_api import create_app
from pos_api.extensions import db
from pos_api.models import Category, Product, Transaction, TransactionDetail


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'CORS_ALLOWED_ORIGINS': {'http://localhost:5173'},
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def electronics(db_session):
    category = Category(name="Electronics", description="Electronic devices and gadgets")
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture(scope='function')
def food(db_session):
    category = Category(name="Food", description="Packaged food")
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture(scope='function')
def phone(db_session, electronics):
    """Product id 1, as in the checkout examples."""
    product = Product(id=1, name="iPhone 15 Pro", price=15_000_000, stock=50, category_id=electronics.id)
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def noodles(db_session, food):
    """Product id 3, as in the checkout examples."""
    product = Product(id=3, name="Indomie Goreng", price=3_000, stock=20, category_id=food.id)
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def make_transaction(db_session):
    """Insert a historical transaction directly (bypasses checkout)."""
    def _make(created_at, lines):
        details = [
            TransactionDetail(
                product_id=product.id,
                product_name=product.name,
                quantity=qty,
                subtotal=product.price * qty,
            )
            for product, qty in lines
        ]
        tx = Transaction(
            total_amount=sum(d.subtotal for d in details),
            created_at=created_at,
            details=details,
        )
        db_session.add(tx)
        db_session.commit()
        return tx
    return _make


@pytest.fixture(scope='function')
def stock_of(db_session):
    """Live stock value, bypassing the identity map."""
    def _stock(product_id: int) -> int:
        db_session.expire_all()
        return db_session.get(Product, product_id).stock
    return _stock
