# Overview: Flask API route for dashboard statistics.

# backend/storefront/routes/analytics.py
from flask import Blueprint, request, jsonify

from ..services import reporting_service
from ..services.inventory_service import DEFAULT_LOW_STOCK_THRESHOLD
from ..decorators import require_auth, require_admin


analytics_bp = Blueprint("analytics", __name__, url_prefix="/api/analytics")


@analytics_bp.get("/stats")
@require_auth
@require_admin
def store_stats_route():
    """Store-wide counters, recomputed on every call."""
    threshold = request.args.get("lowStockThreshold", DEFAULT_LOW_STOCK_THRESHOLD, type=int)
    return jsonify(reporting_service.get_store_stats(low_stock_threshold=threshold)), 200
