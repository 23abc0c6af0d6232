# Overview: Checkout: converts a cart into an order with all side effects.

"""
Checkout Service

Pricing (fixed business constants, AED):
- tax      = 5% of subtotal, rounded half-up to the cent
- shipping = free when subtotal exceeds 200.00, otherwise 25.00
- total    = subtotal + tax + shipping

Unit of work:
checkout() performs order creation, per-line stock decrement + ledger entry,
cart clearing and the customer aggregate update inside ONE database
transaction. Product rows are locked before their stock is read. If any line
would drive stock below zero, or any step raises, the session is rolled back
and nothing is persisted.
"""

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from ..extensions import db
from ..models import Order, OrderItem, Product, User
from ..money import percent_of
from ..validation import ConflictError, ValidationError, validate_address
from storefront.time_utils import utcnow
from . import cart_service, customer_service, inventory_service
from .cart_service import InsufficientStockError
from .concurrency import lock_for_update, run_with_retry


TAX_RATE_PERCENT = 5
FREE_SHIPPING_THRESHOLD_CENTS = 20000
SHIPPING_FEE_CENTS = 2500

MAX_PAYMENT_METHOD_LENGTH = 32


class EmptyCartError(ConflictError):
    def __init__(self):
        super().__init__("Cart is empty")


@dataclass(frozen=True)
class OrderTotals:
    subtotal_cents: int
    tax_cents: int
    shipping_cents: int
    total_cents: int


def calculate_totals(subtotal_cents: int) -> OrderTotals:
    """Pure pricing function of the cart subtotal."""
    tax_cents = percent_of(subtotal_cents, TAX_RATE_PERCENT)
    shipping_cents = 0 if subtotal_cents > FREE_SHIPPING_THRESHOLD_CENTS else SHIPPING_FEE_CENTS
    return OrderTotals(
        subtotal_cents=subtotal_cents,
        tax_cents=tax_cents,
        shipping_cents=shipping_cents,
        total_cents=subtotal_cents + tax_cents + shipping_cents,
    )


def _validate_payment_method(payment_method) -> str:
    # Stored as given; nothing is charged
    if not isinstance(payment_method, str) or not payment_method.strip():
        raise ValidationError("paymentMethod is required")
    if len(payment_method.strip()) > MAX_PAYMENT_METHOD_LENGTH:
        raise ValidationError(f"paymentMethod exceeds max length {MAX_PAYMENT_METHOD_LENGTH}")
    return payment_method.strip()


def checkout(
    user: User,
    *,
    shipping_address: dict,
    payment_method: str,
    billing_address: dict | None = None,
    notes: str | None = None,
) -> Order:
    """
    Place an order from the user's cart.

    Raises:
        ValidationError: bad address / payment method
        EmptyCartError: cart has no items
        InsufficientStockError: a line exceeds stock at checkout time
    """
    shipping_address = validate_address(shipping_address, "shippingAddress")
    if billing_address is not None:
        billing_address = validate_address(billing_address, "billingAddress")
    payment_method = _validate_payment_method(payment_method)
    if notes is not None and not isinstance(notes, str):
        raise ValidationError("notes must be a string")

    def _op():
        cart = cart_service.get_cart(user.id)
        items = cart_service.cart_items(cart) if cart else []
        if not items:
            raise EmptyCartError()

        totals = calculate_totals(cart_service.subtotal_cents(items))
        customer = customer_service.get_customer_by_email(user.email)
        now = utcnow()

        order = Order(
            user_id=user.id,
            customer_id=customer.id if customer else None,
            customer_name=user.name,
            customer_email=user.email,
            customer_phone=user.phone,
            shipping_address=shipping_address,
            billing_address=billing_address or shipping_address,
            payment_method=payment_method,
            subtotal_cents=totals.subtotal_cents,
            tax_cents=totals.tax_cents,
            shipping_cents=totals.shipping_cents,
            total_cents=totals.total_cents,
            status="pending",
            payment_status="pending",
            notes=notes.strip() if notes and notes.strip() else None,
            created_at=now,
            updated_at=now,
        )
        db.session.add(order)
        db.session.flush()  # order.id is referenced by the ledger reason

        for item in items:
            product = lock_for_update(
                db.session.query(Product).filter_by(id=item.product_id)
            ).first()

            db.session.add(OrderItem(
                order_id=order.id,
                product_id=item.product_id,
                product_name=product.name,
                quantity=item.quantity,
                unit_price_cents=item.price_at_time_cents,
                line_total_cents=item.price_at_time_cents * item.quantity,
            ))

            new_stock = product.stock - item.quantity
            if new_stock < 0:
                raise InsufficientStockError(
                    f"Insufficient stock for {product.name}",
                    details={
                        "productId": product.id,
                        "requestedQuantity": item.quantity,
                        "available": product.stock,
                    },
                )
            inventory_service.update_stock(
                product.id,
                new_stock,
                f"Order #{order.id}",
                commit=False,
                product=product,
            )

        cart_service.clear_items(cart)
        customer_service.record_order(user.email, totals.total_cents, at=now)

        db.session.commit()
        return order

    try:
        order = run_with_retry(_op)
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(
        "Order #%s placed by user_id=%s total_cents=%s", order.id, user.id, order.total_cents
    )
    return order
