from __future__ import annotations

from ..extensions import db
from ..money import format_amount
from storefront.time_utils import to_utc_z


class Customer(db.Model):
    """
    Customer record for purchase tracking.

    Created at signup (linked to the User) and looked up by email at checkout.

    Denormalized aggregates (total_orders, total_spent_cents, last_order_at)
    are incremented when an order is placed and are never recomputed on read.
    customer_service.reconcile_customer_aggregates() rebuilds them from
    order history if they drift.
    """
    __tablename__ = "customers"
    __table_args__ = (
        db.UniqueConstraint("email", name="uq_customers_email"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)

    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False, index=True)
    phone = db.Column(db.String(32), nullable=True)
    address = db.Column(db.JSON, nullable=True)

    # Denormalized aggregates (updated when orders are placed)
    total_orders = db.Column(db.Integer, nullable=False, default=0)
    total_spent_cents = db.Column(db.Integer, nullable=False, default=0)
    last_order_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    user = db.relationship("User", backref=db.backref("customer", uselist=False, lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "totalOrders": self.total_orders,
            "totalSpent": format_amount(self.total_spent_cents),
            "lastOrderAt": to_utc_z(self.last_order_at) if self.last_order_at else None,
            "createdAt": to_utc_z(self.created_at),
        }
