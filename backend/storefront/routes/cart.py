# Overview: Flask API routes for cart operations; parses input and returns JSON responses.

# backend/storefront/routes/cart.py
"""
Shopping cart routes.

All routes require a bearer session; the cart is always the caller's own.
Item ids from another user's cart answer 404.
"""
from flask import Blueprint, request, jsonify, current_app, g

from ..services import cart_service
from ..services.cart_service import CartItemNotFoundError, InsufficientStockError
from ..services.inventory_service import ProductNotFoundError
from ..validation import ValidationError, require_fields
from ..decorators import require_auth


cart_bp = Blueprint("cart", __name__, url_prefix="/api/cart")


@cart_bp.get("")
@require_auth
def get_cart_route():
    """Cart items and the pre-tax total."""
    cart_view = cart_service.view(g.current_user.id)
    return jsonify(cart_view.to_dict()), 200


@cart_bp.post("/add")
@require_auth
def add_to_cart_route():
    """
    Add a product to the cart.

    Request body:
    {
        "productId": 3,
        "quantity": 2
    }

    Returns 201 with the cart item. Adding a product that is already in the
    cart increments that item.
    """
    data = request.get_json(silent=True) or {}

    try:
        require_fields(data, "productId", "quantity")
        item, _created = cart_service.add_item(
            g.current_user.id, data["productId"], data["quantity"]
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except InsufficientStockError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except ProductNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to add item to cart")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(item.to_dict()), 201


@cart_bp.put("/update/<int:item_id>")
@require_auth
def update_cart_item_route(item_id: int):
    """Set an item's quantity. Body: {"quantity": 3}"""
    data = request.get_json(silent=True) or {}

    try:
        require_fields(data, "quantity")
        item = cart_service.update_item(g.current_user.id, item_id, data["quantity"])
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except InsufficientStockError as e:
        return jsonify({"error": str(e), "details": e.details}), 400
    except CartItemNotFoundError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify(item.to_dict()), 200


@cart_bp.delete("/remove/<int:item_id>")
@require_auth
def remove_cart_item_route(item_id: int):
    try:
        cart_service.remove_item(g.current_user.id, item_id)
    except CartItemNotFoundError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify({"message": "Item removed from cart"}), 200


@cart_bp.delete("/clear")
@require_auth
def clear_cart_route():
    cart_service.clear(g.current_user.id)
    return jsonify({"message": "Cart cleared"}), 200
