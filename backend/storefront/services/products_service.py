# backend/storefront/services/products_service.py
"""
Catalog Service

Categories and products. Listings only expose active products; lookups by id
return inactive products too so old orders and carts can still resolve them.

Product.stock is not writable here directly: creation records the initial
stock in the ledger and updates route stock changes through
inventory_service.update_stock().
"""
from __future__ import annotations

import random

from ..extensions import db
from ..models import Category, Product
from ..validation import NotFoundError, ValidationError
from storefront.time_utils import utcnow
from .inventory_service import ProductNotFoundError, record_initial_stock, update_stock

PRODUCT_MUTABLE_FIELDS = {
    "name",
    "description",
    "price_cents",
    "category_id",
    "images",
    "specifications",
    "is_active",
}

DEFAULT_PRODUCT_IMAGE = "https://images.unsplash.com/photo-1558618666-fcd25c85cd64?w=400&h=300"

BARCODE_PATTERNS = (
    "||||| |||| ||||",
    "|||| ||| |||||",
    "||| |||| ||||||",
    "|||| ||| |||| ||",
    "|| |||| ||||| |",
    "||| || ||| ||||",
    "|||| || ||| |||",
    "|| ||| |||| |||",
)


class CategoryNotFoundError(NotFoundError):
    def __init__(self):
        super().__init__("Category not found")


def generate_barcode() -> str:
    """Display-only barcode pattern; not unique and not scannable."""
    return random.choice(BARCODE_PATTERNS)


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


# -----------------------------------------------------------------------------
# Categories
# -----------------------------------------------------------------------------

def list_categories() -> list[Category]:
    return db.session.query(Category).order_by(Category.name.asc(), Category.id.asc()).all()


def get_category(category_id: int) -> Category | None:
    return db.session.query(Category).filter_by(id=category_id).first()


def create_category(*, patch: dict) -> Category:
    category = Category(**patch)
    db.session.add(category)
    db.session.commit()
    return category


def _require_category(category_id) -> Category:
    category = get_category(category_id) if category_id is not None else None
    if category is None:
        raise CategoryNotFoundError()
    return category


# -----------------------------------------------------------------------------
# Products
# -----------------------------------------------------------------------------

def list_products(category_id: int | None = None, search: str | None = None) -> list[Product]:
    """
    Active products, newest first.

    search is a case-insensitive substring match on name and takes precedence
    over category_id.
    """
    query = db.session.query(Product).filter(Product.is_active.is_(True))

    search = search.strip() if isinstance(search, str) else None
    if search:
        query = query.filter(Product.name.ilike(f"%{search}%"))
    elif category_id is not None:
        query = query.filter(Product.category_id == category_id)

    return query.order_by(Product.created_at.desc(), Product.id.desc()).all()


def get_product(product_id: int) -> Product | None:
    return db.session.query(Product).filter_by(id=product_id).first()


def create_product(*, patch: dict) -> Product:
    """
    Create product from a validated patch dict (column keys).

    The barcode is server-assigned. Initial stock, if any, is recorded as an
    "add" ledger entry from 0.

    Raises:
        CategoryNotFoundError: unknown category_id
    """
    _require_category(patch.get("category_id"))

    stock = patch.get("stock") or 0
    if stock < 0:
        raise ValidationError("stock must be >= 0")

    p = Product(
        barcode=generate_barcode(),
        stock=stock,
        images=[],
        specifications={},
        is_active=True,
    )
    apply_product_patch(p, patch)
    if not p.images:
        p.images = [DEFAULT_PRODUCT_IMAGE]

    db.session.add(p)
    db.session.flush()  # ensure p.id exists before ledger append

    record_initial_stock(p, stock)

    db.session.commit()
    return p


def update_product(*, product_id: int, patch: dict) -> Product:
    """
    Update a product.

    A "stock" key is applied through update_stock() so the change is logged;
    all writes land in one commit.

    Raises:
        ProductNotFoundError: unknown product_id
        CategoryNotFoundError: unknown category_id in patch
    """
    p = get_product(product_id)
    if not p:
        raise ProductNotFoundError(product_id)

    if "category_id" in patch:
        _require_category(patch["category_id"])

    apply_product_patch(p, patch)
    p.updated_at = utcnow()

    if "stock" in patch and patch["stock"] is not None:
        update_stock(p.id, patch["stock"], "Product update", commit=False, product=p)

    db.session.commit()
    return p


def delete_product(*, product_id: int) -> bool:
    """
    Soft-delete a product (is_active=false).

    Preserves ids referenced by carts, order snapshots and the ledger.
    Returns False if the product does not exist.
    """
    p = get_product(product_id)
    if not p:
        return False

    if p.is_active:
        p.is_active = False
        p.updated_at = utcnow()

    db.session.commit()
    return True
