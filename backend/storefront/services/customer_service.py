# Overview: Service-layer operations for customers and their purchase aggregates.

"""
Customer Service

total_orders / total_spent_cents / last_order_at are a materialized counter:
record_order() increments them once per placed order and nothing reads them
back from order history at request time.

reconcile_customer_aggregates() is the repair path: it recomputes every
customer's counters from the orders table (matched by email, the same key
checkout uses) and reports what changed.
"""

from __future__ import annotations

from datetime import datetime

from flask import current_app
from sqlalchemy import func

from ..extensions import db
from ..models import Customer, Order
from ..validation import NotFoundError
from storefront.time_utils import utcnow


class CustomerNotFoundError(NotFoundError):
    def __init__(self):
        super().__init__("Customer not found")


def list_customers() -> list[Customer]:
    """Most recent buyers first; customers who never ordered come last."""
    return (
        db.session.query(Customer)
        .order_by(
            Customer.last_order_at.is_(None),
            Customer.last_order_at.desc(),
            Customer.id.desc(),
        )
        .all()
    )


def get_customer(customer_id: int) -> Customer:
    customer = db.session.query(Customer).filter_by(id=customer_id).first()
    if customer is None:
        raise CustomerNotFoundError()
    return customer


def get_customer_by_email(email: str) -> Customer | None:
    return db.session.query(Customer).filter_by(email=email).first()


def record_order(email: str, total_cents: int, *, at: datetime | None = None) -> Customer | None:
    """
    Increment the aggregates of the customer with this email.

    No-op (returns None) when there is no customer record. Caller commits.
    """
    customer = get_customer_by_email(email)
    if customer is None:
        return None

    customer.total_orders = (customer.total_orders or 0) + 1
    customer.total_spent_cents = (customer.total_spent_cents or 0) + total_cents
    customer.last_order_at = at or utcnow()
    return customer


def reconcile_customer_aggregates(*, dry_run: bool = False) -> list[dict]:
    """
    Recompute aggregates from order history and fix drifted rows.

    Returns one entry per drifted customer with the before/after values.
    With dry_run nothing is written.
    """
    rows = (
        db.session.query(
            Order.customer_email,
            func.count(Order.id),
            func.coalesce(func.sum(Order.total_cents), 0),
            func.max(Order.created_at),
        )
        .group_by(Order.customer_email)
        .all()
    )
    actual = {email: (int(count), int(spent), last) for email, count, spent, last in rows}

    corrections = []
    for customer in db.session.query(Customer).order_by(Customer.id.asc()).all():
        count, spent, last = actual.get(customer.email, (0, 0, None))
        if customer.total_orders == count and customer.total_spent_cents == spent:
            continue

        corrections.append({
            "customerId": customer.id,
            "email": customer.email,
            "before": {"totalOrders": customer.total_orders, "totalSpentCents": customer.total_spent_cents},
            "after": {"totalOrders": count, "totalSpentCents": spent},
        })
        if dry_run:
            continue
        customer.total_orders = count
        customer.total_spent_cents = spent
        customer.last_order_at = last

    if dry_run:
        return corrections

    db.session.commit()
    if corrections:
        current_app.logger.info("Reconciled aggregates for %d customer(s)", len(corrections))
    return corrections
