# Overview: Service-layer operations for inventory; encapsulates business logic and database work.

# backend/storefront/services/inventory_service.py

from flask import current_app

from ..extensions import db
from ..models import Product, InventoryLog
from ..validation import NotFoundError, ValidationError
from storefront.time_utils import utcnow
from .concurrency import lock_for_update
"""
Inventory Invariants (authoritative)

Stock model:
- Product.stock holds on-hand quantity directly and is never negative.
- update_stock() is the single mutation point. Checkout, admin adjustments
  and product edits all route through it.

Ledger:
- Every update_stock() call appends exactly one InventoryLog row, in the same
  DB transaction as the stock write, even when the value is unchanged.
- action is derived from delta = new_stock - previous_stock:
    delta > 0 -> add, delta < 0 -> remove, delta == 0 -> adjustment
- quantity is |delta|.
- Logs are append-only (no updates/deletes).
"""

ACTION_ADD = "add"
ACTION_REMOVE = "remove"
ACTION_ADJUSTMENT = "adjustment"

DEFAULT_LOW_STOCK_THRESHOLD = 10
RECENT_LOGS_LIMIT = 100
MAX_REASON_LENGTH = 255


class ProductNotFoundError(NotFoundError):
    def __init__(self, product_id):
        super().__init__("Product not found")
        self.product_id = product_id


def classify_stock_change(previous_stock: int, new_stock: int) -> tuple[str, int]:
    """Return (action, absolute quantity) for a stock transition."""
    delta = new_stock - previous_stock
    if delta > 0:
        return ACTION_ADD, delta
    if delta < 0:
        return ACTION_REMOVE, -delta
    return ACTION_ADJUSTMENT, 0


def update_stock(
    product_id: int,
    new_stock: int,
    reason: str | None = None,
    *,
    commit: bool = True,
    product: Product | None = None,
) -> InventoryLog:
    """
    Set a product's stock and append the matching ledger row.

    Args:
        product_id: Product to update
        new_stock: Absolute stock level (must be >= 0)
        reason: Free text; defaults to "Stock <action>"
        commit: False when called inside a larger unit of work (checkout)
        product: Already-loaded (and locked) product row, if the caller has one

    Raises:
        ValidationError: new_stock is negative or not an integer, or reason
            is not a string of at most MAX_REASON_LENGTH characters
        ProductNotFoundError: unknown product_id
    """
    if isinstance(new_stock, bool) or not isinstance(new_stock, int):
        raise ValidationError("newStock must be an integer")
    if new_stock < 0:
        raise ValidationError("newStock must be >= 0")
    if reason is not None:
        if not isinstance(reason, str):
            raise ValidationError("reason must be a string")
        reason = reason.strip()
        if len(reason) > MAX_REASON_LENGTH:
            raise ValidationError(f"reason must be at most {MAX_REASON_LENGTH} characters")

    if product is None:
        product = lock_for_update(db.session.query(Product).filter_by(id=product_id)).first()
    if product is None:
        raise ProductNotFoundError(product_id)

    previous_stock = product.stock
    action, quantity = classify_stock_change(previous_stock, new_stock)

    product.stock = new_stock
    product.updated_at = utcnow()

    log = InventoryLog(
        product_id=product.id,
        action=action,
        quantity=quantity,
        previous_stock=previous_stock,
        new_stock=new_stock,
        reason=reason or f"Stock {action}",
        created_at=utcnow(),
    )
    db.session.add(log)

    if commit:
        db.session.commit()
        current_app.logger.info(
            "Stock updated product_id=%s %s -> %s (%s)",
            product.id, previous_stock, new_stock, log.reason,
        )
    else:
        db.session.flush()

    return log


def record_initial_stock(product: Product, stock: int) -> InventoryLog | None:
    """
    Ledger entry for stock a product is created with (previous stock 0).
    Caller commits.
    """
    if stock <= 0:
        return None
    log = InventoryLog(
        product_id=product.id,
        action=ACTION_ADD,
        quantity=stock,
        previous_stock=0,
        new_stock=stock,
        reason="Initial stock",
        created_at=utcnow(),
    )
    db.session.add(log)
    return log


def get_inventory_logs(product_id: int | None = None) -> list[InventoryLog]:
    """
    Ledger entries, newest first.

    Filtered by product when product_id is given, otherwise the most recent
    RECENT_LOGS_LIMIT entries across all products.
    """
    query = db.session.query(InventoryLog).order_by(
        InventoryLog.created_at.desc(),
        InventoryLog.id.desc(),
    )
    if product_id is not None:
        return query.filter(InventoryLog.product_id == product_id).all()
    return query.limit(RECENT_LOGS_LIMIT).all()


def get_low_stock(threshold: int = DEFAULT_LOW_STOCK_THRESHOLD) -> list[Product]:
    """Active products with stock <= threshold, lowest stock first."""
    return (
        db.session.query(Product)
        .filter(Product.is_active.is_(True), Product.stock <= threshold)
        .order_by(Product.stock.asc(), Product.id.asc())
        .all()
    )


def count_low_stock(threshold: int = DEFAULT_LOW_STOCK_THRESHOLD) -> int:
    return (
        db.session.query(Product)
        .filter(Product.is_active.is_(True), Product.stock <= threshold)
        .count()
    )
