# backend/pos_api/services/categories_service.py
"""
Categories Service

Categories are independent records. Products reference them weakly:
deleting a category leaves its products in place with category_id = NULL.
"""
from __future__ import annotations

from ..extensions import db
from ..models import Category, Product

CATEGORY_MUTABLE_FIELDS = {"name", "description"}


def apply_category_patch(c: Category, patch: dict) -> None:
    for k, v in patch.items():
        if k not in CATEGORY_MUTABLE_FIELDS:
            continue
        setattr(c, k, v)


def category_exists(category_id: int) -> bool:
    return db.session.query(Category.id).filter_by(id=category_id).first() is not None


def list_categories() -> dict:
    categories = db.session.query(Category).order_by(Category.id.asc()).all()
    return {
        "items": [c.to_dict() for c in categories],
        "count": len(categories),
    }


def get_category(category_id: int) -> dict | None:
    c = db.session.get(Category, category_id)
    return c.to_dict() if c else None


def create_category(*, patch: dict) -> dict:
    c = Category()
    apply_category_patch(c, patch)
    db.session.add(c)
    db.session.commit()
    return c.to_dict()


def update_category(*, category_id: int, patch: dict) -> dict | None:
    """
    Replace a category's name/description.

    Returns:
        Updated category dict, or None if not found
    """
    c = db.session.get(Category, category_id)
    if not c:
        return None

    # Full replace: omitted optional fields are cleared
    patch = {"description": None, **patch}
    apply_category_patch(c, patch)
    db.session.commit()
    return c.to_dict()


def delete_category(*, category_id: int) -> bool:
    """
    Delete a category and detach its products.

    The FK is declared ON DELETE SET NULL; the explicit UPDATE covers SQLite,
    which does not enforce foreign keys by default.

    Returns:
        True if deleted, False if not found
    """
    c = db.session.get(Category, category_id)
    if not c:
        return False

    (
        db.session.query(Product)
        .filter(Product.category_id == category_id)
        .update({Product.category_id: None}, synchronize_session="fetch")
    )
    db.session.delete(c)
    db.session.commit()
    return True
