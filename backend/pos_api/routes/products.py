# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/pos_api/routes/products.py
"""
Product management routes.

PUT is a full replace: name, price and stock are required, and an omitted
category_id clears the category.
"""
from flask import Blueprint, request

from ..models import Product
from ..services import products_service
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_product,
    ValidationError,
    ConflictError,
)

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "price", "stock", "category_id"},
    required_on_create={"name", "price", "stock"},
)

products_bp = Blueprint("products", __name__, url_prefix="/products")


def _validated_patch(payload) -> dict:
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
    enforce_rules_product(patch)
    return patch


@products_bp.get("")
def list_products():
    """
    List all products with their category names.

    Query params:
    - name: str (optional) - case-insensitive partial match on product name
    """
    return products_service.list_products(name=request.args.get("name"))


@products_bp.post("")
def create_product_route():
    payload = request.get_json(silent=True)

    try:
        patch = _validated_patch(payload)
        created = products_service.create_product(patch=patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    return created, 201


@products_bp.get("/<int:product_id>")
def get_product_route(product_id: int):
    product = products_service.get_product(product_id)
    if product is None:
        return {"error": "Product not found"}, 404
    return product, 200


@products_bp.put("/<int:product_id>")
def update_product_route(product_id: int):
    payload = request.get_json(silent=True)

    try:
        patch = _validated_patch(payload)
        updated = products_service.update_product(product_id=product_id, patch=patch)
    except ValidationError as e:
        return {"error": str(e)}, 400

    if updated is None:
        return {"error": "Product not found"}, 404
    return updated, 200


@products_bp.delete("/<int:product_id>")
def delete_product_route(product_id: int):
    try:
        deleted = products_service.delete_product(product_id=product_id)
    except ConflictError as e:
        return {"error": str(e)}, 409

    if not deleted:
        return {"error": "Product not found"}, 404
    return {"ok": True}, 200
