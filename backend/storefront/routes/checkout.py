# Overview: Flask API route for checkout; parses input and returns JSON responses.

# backend/storefront/routes/checkout.py
"""Checkout route: converts the caller's cart into an order."""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import checkout_service
from ..services.cart_service import InsufficientStockError
from ..services.checkout_service import EmptyCartError
from ..validation import ValidationError
from ..decorators import require_auth


checkout_bp = Blueprint("checkout", __name__, url_prefix="/api/checkout")


@checkout_bp.post("")
@require_auth
def checkout_route():
    """
    Place an order from the cart.

    Request body:
    {
        "shippingAddress": {"line1": "...", "city": "Dubai", "country": "AE"},
        "billingAddress": {...},     // optional, defaults to shippingAddress
        "paymentMethod": "cod",
        "notes": "..."               // optional
    }

    Returns 201 {"order": {...}}; 400 on empty cart, insufficient stock or
    invalid input. Nothing is written unless the whole checkout succeeds.
    """
    data = request.get_json(silent=True) or {}

    try:
        order = checkout_service.checkout(
            g.current_user,
            shipping_address=data.get("shippingAddress"),
            billing_address=data.get("billingAddress"),
            payment_method=data.get("paymentMethod"),
            notes=data.get("notes"),
        )
    except InsufficientStockError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except (ValidationError, EmptyCartError) as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to checkout")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({"order": order.to_dict()}), 201
