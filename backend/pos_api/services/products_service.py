# backend/pos_api/services/products_service.py
"""
Products Service

- list_products supports a case-insensitive partial name filter
- create/update validate that category_id references an existing category
- delete refuses products that already appear in transaction history
"""
from __future__ import annotations

from sqlalchemy.orm import joinedload

from ..extensions import db
from ..models import Product, TransactionDetail
from ..validation import ConflictError, ValidationError
from .categories_service import category_exists

PRODUCT_MUTABLE_FIELDS = {"name", "price", "stock", "category_id"}


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def _require_category(patch: dict) -> None:
    category_id = patch.get("category_id")
    if category_id is not None and not category_exists(category_id):
        raise ValidationError("category not found")


def list_products(name: str | None = None) -> dict:
    """
    Product listing with the joined category name.

    Args:
        name: optional case-insensitive substring filter on product name

    Returns:
        Dict with 'items' and 'count'.
    """
    query = db.session.query(Product).options(joinedload(Product.category))

    if name:
        query = query.filter(Product.name.ilike(f"%{name.strip()}%"))

    products = query.order_by(Product.id.asc()).all()
    return {
        "items": [p.to_dict() for p in products],
        "count": len(products),
    }


def list_products_by_category(category_id: int) -> list[Product]:
    return (
        db.session.query(Product)
        .filter(Product.category_id == category_id)
        .order_by(Product.id.asc())
        .all()
    )


def get_product(product_id: int) -> dict | None:
    p = db.session.get(Product, product_id)
    return p.to_dict() if p else None


def create_product(*, patch: dict) -> dict:
    """
    Create product using a validated patch dict.

    Raises:
        ValidationError: If category_id does not reference an existing category
    """
    _require_category(patch)

    p = Product()
    apply_product_patch(p, patch)

    db.session.add(p)
    db.session.commit()
    return p.to_dict()


def update_product(*, product_id: int, patch: dict) -> dict | None:
    """
    Replace a product's fields.

    Returns:
        Updated product dict, or None if not found

    Raises:
        ValidationError: If category_id does not reference an existing category
    """
    p = db.session.get(Product, product_id)
    if not p:
        return None

    _require_category(patch)

    # Full replace: an omitted category_id detaches the product
    patch = {"category_id": None, **patch}
    apply_product_patch(p, patch)
    db.session.commit()
    return p.to_dict()


def delete_product(*, product_id: int) -> bool:
    """
    Hard-delete a product.

    Returns:
        True if deleted, False if not found

    Raises:
        ConflictError: If the product is referenced by a transaction detail
    """
    p = db.session.get(Product, product_id)
    if not p:
        return False

    sold = (
        db.session.query(TransactionDetail.id)
        .filter(TransactionDetail.product_id == product_id)
        .first()
    )
    if sold is not None:
        raise ConflictError("Product has transaction history and cannot be deleted")

    db.session.delete(p)
    db.session.commit()
    return True
