# Overview: Flask API routes for category operations; parses input and returns JSON responses.

from flask import Blueprint, request

from ..models import Category
from ..services import categories_service, products_service
from ..validation import ModelValidationPolicy, validate_payload, ValidationError

CATEGORY_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description"},
    required_on_create={"name"},
)

categories_bp = Blueprint("categories", __name__, url_prefix="/categories")


@categories_bp.get("")
def list_categories():
    return categories_service.list_categories()


@categories_bp.post("")
def create_category_route():
    payload = request.get_json(silent=True)

    try:
        patch = validate_payload(model=Category, payload=payload, policy=CATEGORY_POLICY, partial=False)
    except ValidationError as e:
        return {"error": str(e)}, 400

    return categories_service.create_category(patch=patch), 201


@categories_bp.get("/<int:category_id>")
def get_category_route(category_id: int):
    category = categories_service.get_category(category_id)
    if category is None:
        return {"error": "Category not found"}, 404
    return category, 200


@categories_bp.get("/<int:category_id>/products")
def list_category_products_route(category_id: int):
    if not categories_service.category_exists(category_id):
        return {"error": "Category not found"}, 404

    products = products_service.list_products_by_category(category_id)
    return {"items": [p.to_dict() for p in products], "count": len(products)}, 200


@categories_bp.put("/<int:category_id>")
def update_category_route(category_id: int):
    payload = request.get_json(silent=True)

    try:
        patch = validate_payload(model=Category, payload=payload, policy=CATEGORY_POLICY, partial=False)
    except ValidationError as e:
        return {"error": str(e)}, 400

    updated = categories_service.update_category(category_id=category_id, patch=patch)
    if updated is None:
        return {"error": "Category not found"}, 404
    return updated, 200


@categories_bp.delete("/<int:category_id>")
def delete_category_route(category_id: int):
    if not categories_service.delete_category(category_id=category_id):
        return {"error": "Category not found"}, 404
    return {"ok": True}, 200
