"""
Order Service

Orders are created only by checkout_service.checkout(). After creation the
only writable fields are status, payment_status and tracking_number.
"""
from __future__ import annotations

from sqlalchemy import or_

from ..extensions import db
from ..models import Customer, Order, User
from ..models.orders import ORDER_STATUSES, PAYMENT_STATUSES
from ..validation import NotFoundError, ValidationError
from storefront.time_utils import utcnow

MAX_TRACKING_NUMBER_LENGTH = 64


class OrderNotFoundError(NotFoundError):
    def __init__(self):
        super().__init__("Order not found")


def list_orders(status: str | None = None) -> list[Order]:
    query = db.session.query(Order)
    if status:
        if status not in ORDER_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(ORDER_STATUSES)}")
        query = query.filter(Order.status == status)
    return query.order_by(Order.created_at.desc(), Order.id.desc()).all()


def list_orders_for_user(user_id: int) -> list[Order]:
    return (
        db.session.query(Order)
        .filter(Order.user_id == user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )


def list_orders_for_customer(customer: Customer) -> list[Order]:
    """Orders linked to the customer id or placed under its email."""
    return (
        db.session.query(Order)
        .filter(or_(Order.customer_id == customer.id, Order.customer_email == customer.email))
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )


def get_order(order_id: int) -> Order:
    order = db.session.query(Order).filter_by(id=order_id).first()
    if order is None:
        raise OrderNotFoundError()
    return order


def get_order_for(user: User, order_id: int) -> Order:
    """Owner or admin; anyone else gets OrderNotFoundError."""
    order = get_order(order_id)
    if not user.is_admin and order.user_id != user.id:
        raise OrderNotFoundError()
    return order


def update_status(order_id: int, status) -> Order:
    if status not in ORDER_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(ORDER_STATUSES)}")
    order = get_order(order_id)
    order.status = status
    order.updated_at = utcnow()
    db.session.commit()
    return order


def update_payment_status(order_id: int, payment_status) -> Order:
    if payment_status not in PAYMENT_STATUSES:
        raise ValidationError(f"paymentStatus must be one of: {', '.join(PAYMENT_STATUSES)}")
    order = get_order(order_id)
    order.payment_status = payment_status
    order.updated_at = utcnow()
    db.session.commit()
    return order


def update_tracking(order_id: int, tracking_number) -> Order:
    if not isinstance(tracking_number, str) or not tracking_number.strip():
        raise ValidationError("trackingNumber is required")
    tracking_number = tracking_number.strip()
    if len(tracking_number) > MAX_TRACKING_NUMBER_LENGTH:
        raise ValidationError(f"trackingNumber exceeds max length {MAX_TRACKING_NUMBER_LENGTH}")

    order = get_order(order_id)
    order.tracking_number = tracking_number
    order.updated_at = utcnow()
    db.session.commit()
    return order
