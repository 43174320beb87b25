# Overview: Flask API routes for checkout and transaction lookup.

from flask import Blueprint, request, jsonify, current_app

from ..services import checkout_service
from ..services.checkout_service import ProductNotFound, InsufficientStock, CheckoutError
from ..services.concurrency import StorageError
from ..validation import ValidationError


transactions_bp = Blueprint("transactions", __name__, url_prefix="/api")


@transactions_bp.post("/checkout")
def checkout_route():
    """
    Check out a cart.

    Body: {"items": [{"product_id": 1, "quantity": 2}, ...]}
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid request body"}), 400

    try:
        transaction = checkout_service.checkout(data.get("items"))
        return jsonify(transaction.to_dict()), 201

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ProductNotFound as e:
        return jsonify({"error": str(e), "details": e.details}), 404
    except InsufficientStock as e:
        return jsonify({"error": str(e), "details": e.details}), 409
    except CheckoutError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except StorageError:
        current_app.logger.exception("Checkout storage failure")
        return jsonify({"error": "Internal server error"}), 500
    except Exception:
        current_app.logger.exception("Failed to check out")
        return jsonify({"error": "Internal server error"}), 500


@transactions_bp.get("/transactions/<int:transaction_id>")
def get_transaction_route(transaction_id: int):
    transaction = checkout_service.get_transaction(transaction_id)
    if transaction is None:
        return jsonify({"error": "Transaction not found"}), 404
    return jsonify(transaction.to_dict()), 200
