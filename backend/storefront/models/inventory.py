from __future__ import annotations

from ..extensions import db
from storefront.time_utils import to_utc_z


class InventoryLog(db.Model):
    """
    Append-only ledger of stock changes.

    One row per mutation of Product.stock, carrying the before/after snapshot.
    quantity is the absolute delta; the direction is in action:
    - add: new_stock > previous_stock
    - remove: new_stock < previous_stock
    - adjustment: stock rewritten with the same value

    IMMUTABLE: Records are never updated or deleted.
    """
    __tablename__ = "inventory_logs"
    __table_args__ = (
        db.Index("ix_inventory_logs_product_created", "product_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    action = db.Column(db.String(16), nullable=False, index=True)  # add, remove, adjustment
    quantity = db.Column(db.Integer, nullable=False)

    previous_stock = db.Column(db.Integer, nullable=False)
    new_stock = db.Column(db.Integer, nullable=False)

    reason = db.Column(db.String(255), nullable=True)

    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        index=True,
    )

    product = db.relationship("Product", backref=db.backref("inventory_logs", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "productId": self.product_id,
            "action": self.action,
            "quantity": self.quantity,
            "previousStock": self.previous_stock,
            "newStock": self.new_stock,
            "reason": self.reason,
            "createdAt": to_utc_z(self.created_at),
        }
