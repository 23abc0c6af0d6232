# backend/storefront/routes/inventory.py
"""
Inventory ledger routes (admin only).

- GET  /logs?productId=       ledger entries, newest first
- GET  /low-stock?threshold=  active products at or below threshold
- POST /update-stock          set absolute stock; writes one ledger entry
"""
from flask import Blueprint, request, jsonify, current_app

from ..services import inventory_service
from ..services.inventory_service import ProductNotFoundError, DEFAULT_LOW_STOCK_THRESHOLD
from ..validation import ValidationError, require_fields
from ..decorators import require_auth, require_admin


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


def _int_arg(name: str, default=None):
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")


@inventory_bp.get("/logs")
@require_auth
@require_admin
def inventory_logs_route():
    try:
        product_id = _int_arg("productId")
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    logs = inventory_service.get_inventory_logs(product_id=product_id)
    return jsonify([log.to_dict() for log in logs]), 200


@inventory_bp.get("/low-stock")
@require_auth
@require_admin
def low_stock_route():
    try:
        threshold = _int_arg("threshold", DEFAULT_LOW_STOCK_THRESHOLD)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    products = inventory_service.get_low_stock(threshold)
    return jsonify([p.to_dict() for p in products]), 200


@inventory_bp.post("/update-stock")
@require_auth
@require_admin
def update_stock_route():
    """
    Set a product's stock level.

    Request body:
    {
        "productId": 3,
        "newStock": 40,
        "reason": "Supplier delivery"   // optional
    }

    Returns the ledger entry that was written.
    """
    data = request.get_json(silent=True) or {}

    try:
        require_fields(data, "productId", "newStock")
        log = inventory_service.update_stock(
            data["productId"], data["newStock"], data.get("reason")
        )
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ProductNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to update stock")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(log.to_dict()), 200
