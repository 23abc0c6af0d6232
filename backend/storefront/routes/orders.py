# Overview: Flask API routes for order operations; parses input and returns JSON responses.

# backend/storefront/routes/orders.py
"""
Order routes.

- GET   /api/orders                       admin, optional ?status=
- GET   /api/orders/mine                  caller's own orders
- GET   /api/orders/<id>                  owner or admin
- PUT   /api/orders/<id>/status           admin
- PATCH /api/orders/<id>/payment-status   admin
- PATCH /api/orders/<id>/tracking         admin

Only status, paymentStatus and trackingNumber change after checkout.
"""
from flask import Blueprint, request, jsonify, g

from ..services import order_service
from ..services.order_service import OrderNotFoundError
from ..validation import ValidationError
from ..decorators import require_auth, require_admin


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


@orders_bp.get("")
@require_auth
@require_admin
def list_orders_route():
    try:
        orders = order_service.list_orders(status=request.args.get("status"))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    return jsonify([o.to_dict() for o in orders]), 200


@orders_bp.get("/mine")
@require_auth
def list_my_orders_route():
    orders = order_service.list_orders_for_user(g.current_user.id)
    return jsonify([o.to_dict() for o in orders]), 200


@orders_bp.get("/<int:order_id>")
@require_auth
def get_order_route(order_id: int):
    try:
        order = order_service.get_order_for(g.current_user, order_id)
    except OrderNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify(order.to_dict()), 200


@orders_bp.put("/<int:order_id>/status")
@require_auth
@require_admin
def update_order_status_route(order_id: int):
    """Body: {"status": "shipped"}"""
    data = request.get_json(silent=True) or {}
    try:
        order = order_service.update_status(order_id, data.get("status"))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except OrderNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify(order.to_dict()), 200


@orders_bp.patch("/<int:order_id>/payment-status")
@require_auth
@require_admin
def update_payment_status_route(order_id: int):
    """Body: {"paymentStatus": "paid"}"""
    data = request.get_json(silent=True) or {}
    try:
        order = order_service.update_payment_status(order_id, data.get("paymentStatus"))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except OrderNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify(order.to_dict()), 200


@orders_bp.patch("/<int:order_id>/tracking")
@require_auth
@require_admin
def update_tracking_route(order_id: int):
    """Body: {"trackingNumber": "ARX123456"}"""
    data = request.get_json(silent=True) or {}
    try:
        order = order_service.update_tracking(order_id, data.get("trackingNumber"))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except OrderNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify(order.to_dict()), 200
