# Overview: Flask API routes for catalog operations; parses input and returns JSON responses.

# backend/storefront/routes/products.py
"""
Catalog routes.

Public: category list, product list/detail, reviews.
Admin: category create, product create/update/delete.

POST /api/products accepts JSON or multipart/form-data. In multipart requests
"specifications" and "images" may be JSON-encoded strings and uploaded files
(field "images", up to MAX_UPLOAD_IMAGES) are recorded as /uploads/ URLs.
"""
import json
import time

from flask import Blueprint, request, jsonify, current_app
from werkzeug.utils import secure_filename

from ..models import Category, Product, Review
from ..services import products_service, review_service
from ..services.inventory_service import ProductNotFoundError
from ..services.products_service import CategoryNotFoundError
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_product,
    enforce_rules_review,
    ValidationError,
)
from ..decorators import require_auth, require_admin

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={
        "name", "description", "price", "categoryId", "stock",
        "images", "specifications", "isActive",
    },
    required_on_create={"name", "description", "price", "categoryId"},
    aliases={
        "price": "price_cents",
        "categoryId": "category_id",
        "isActive": "is_active",
    },
    money_fields={"price_cents"},
)

CATEGORY_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description", "imageUrl"},
    required_on_create={"name"},
    aliases={"imageUrl": "image_url"},
)

REVIEW_POLICY = ModelValidationPolicy(
    writable_fields={"userName", "rating", "comment"},
    required_on_create={"userName", "rating", "comment"},
    aliases={"userName": "user_name"},
)

MAX_UPLOAD_IMAGES = 5

products_bp = Blueprint("products", __name__, url_prefix="/api/products")
categories_bp = Blueprint("categories", __name__, url_prefix="/api/categories")


# =============================================================================
# CATEGORIES
# =============================================================================

@categories_bp.get("")
def list_categories_route():
    return jsonify([c.to_dict() for c in products_service.list_categories()])


@categories_bp.get("/<int:category_id>")
def get_category_route(category_id: int):
    category = products_service.get_category(category_id)
    if not category:
        return jsonify({"error": "Category not found"}), 404
    return jsonify(category.to_dict())


@categories_bp.post("")
@require_auth
@require_admin
def create_category_route():
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=Category, payload=payload, policy=CATEGORY_POLICY, partial=False)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    category = products_service.create_category(patch=patch)
    return jsonify(category.to_dict()), 201


# =============================================================================
# PRODUCTS
# =============================================================================

def _form_payload() -> dict:
    """Flatten a multipart form into the JSON payload shape."""
    payload = {k: v for k, v in request.form.items()}
    for key in ("specifications", "images"):
        if key in payload:
            try:
                payload[key] = json.loads(payload[key])
            except ValueError:
                raise ValidationError(f"{key} must be JSON")

    files = [f for f in request.files.getlist("images") if f and f.filename]
    if len(files) > MAX_UPLOAD_IMAGES:
        raise ValidationError(f"At most {MAX_UPLOAD_IMAGES} images may be uploaded")
    if files:
        stamp = int(time.time() * 1000)
        payload["images"] = [
            f"/uploads/{stamp}-{index}-{secure_filename(f.filename)}"
            for index, f in enumerate(files)
        ]
    return payload


def _query_int(name: str):
    raw = request.args.get(name)
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")


@products_bp.get("")
def list_products_route():
    """
    List active products, newest first.

    Query params:
    - category: int (optional) - category id
    - search: str (optional) - case-insensitive name match
    """
    try:
        category_id = _query_int("category")
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    products = products_service.list_products(
        category_id=category_id,
        search=request.args.get("search"),
    )
    return jsonify([p.to_dict() for p in products])


@products_bp.get("/<int:product_id>")
def get_product_route(product_id: int):
    product = products_service.get_product(product_id)
    if not product:
        return jsonify({"error": "Product not found"}), 404

    data = product.to_dict()
    data["averageRating"] = review_service.average_rating(product.id)
    return jsonify(data)


@products_bp.post("")
@require_auth
@require_admin
def create_product_route():
    """Create a product (JSON or multipart). Barcode is assigned by the server."""
    try:
        if request.mimetype == "multipart/form-data":
            payload = _form_payload()
        else:
            payload = request.get_json(silent=True) or {}
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
        enforce_rules_product(patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        created = products_service.create_product(patch=patch)
    except CategoryNotFoundError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to create product")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(created.to_dict()), 201


@products_bp.put("/<int:product_id>")
@require_auth
@require_admin
def update_product_route(product_id: int):
    """Partial update. A stock change is written through the inventory ledger."""
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
        enforce_rules_product(patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        updated = products_service.update_product(product_id=product_id, patch=patch)
    except ProductNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except CategoryNotFoundError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify(updated.to_dict()), 200


@products_bp.delete("/<int:product_id>")
@require_auth
@require_admin
def delete_product_route(product_id: int):
    """Soft-delete a product."""
    deleted = products_service.delete_product(product_id=product_id)
    if not deleted:
        return jsonify({"error": "Product not found"}), 404
    return jsonify({"message": "Product deleted successfully"}), 200


# =============================================================================
# REVIEWS
# =============================================================================

@products_bp.get("/<int:product_id>/reviews")
def list_reviews_route(product_id: int):
    return jsonify([r.to_dict() for r in review_service.list_reviews(product_id)])


@products_bp.post("/<int:product_id>/reviews")
def create_review_route(product_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Review, payload=payload, policy=REVIEW_POLICY, partial=False)
        enforce_rules_review(patch)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        review = review_service.create_review(product_id=product_id, patch=patch)
    except ProductNotFoundError as e:
        return jsonify({"error": str(e)}), 404

    return jsonify(review.to_dict()), 201
