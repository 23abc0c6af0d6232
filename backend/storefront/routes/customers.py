# Overview: Flask API routes for customer records (admin only).

# backend/storefront/routes/customers.py
from flask import Blueprint, jsonify

from ..services import customer_service, order_service
from ..services.customer_service import CustomerNotFoundError
from ..decorators import require_auth, require_admin


customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@customers_bp.get("")
@require_auth
@require_admin
def list_customers_route():
    return jsonify([c.to_dict() for c in customer_service.list_customers()]), 200


@customers_bp.get("/<int:customer_id>")
@require_auth
@require_admin
def get_customer_route(customer_id: int):
    """Customer record with its order history (newest first)."""
    try:
        customer = customer_service.get_customer(customer_id)
    except CustomerNotFoundError as e:
        return jsonify({"error": str(e)}), 404

    data = customer.to_dict()
    data["orders"] = [
        o.to_dict(include_items=False)
        for o in order_service.list_orders_for_customer(customer)
    ]
    return jsonify(data), 200
