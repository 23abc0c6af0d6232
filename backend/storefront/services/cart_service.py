# Overview: Service-layer operations for the shopping cart.

"""
Cart Service

Invariants:
- One cart per user, created on first access (lookup-or-create).
- At most one CartItem per (cart, product); adding a product already in the
  cart increments the existing row.
- price_at_time_cents is pinned at the first add and never refreshed.
- Item mutations are scoped by joining through Cart.user_id; an item id from
  someone else's cart behaves exactly like an unknown id.
- Cart operations never touch Product.stock. Stock is only checked here and
  only decremented at checkout.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ..extensions import db
from ..models import Cart, CartItem, Product
from ..money import format_amount
from ..validation import ConflictError, NotFoundError, validate_quantity
from storefront.time_utils import utcnow
from .inventory_service import ProductNotFoundError


class InsufficientStockError(ConflictError):
    """Requested quantity exceeds what is on hand."""

    def __init__(self, message: str = "Insufficient stock", details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class CartItemNotFoundError(NotFoundError):
    def __init__(self):
        super().__init__("Cart item not found")


@dataclass
class CartView:
    cart: Cart
    items: list[CartItem] = field(default_factory=list)
    total_cents: int = 0

    def to_dict(self) -> dict:
        return {
            "cartId": self.cart.id,
            "items": [_item_view(item) for item in self.items],
            "total": format_amount(self.total_cents),
            "itemCount": sum(item.quantity for item in self.items),
        }


def _item_view(item: CartItem) -> dict:
    data = item.to_dict()
    product = item.product
    data.update({
        "productName": product.name,
        "productImage": (product.images or [None])[0],
        "currentPrice": format_amount(product.price_cents),
        "stock": product.stock,
    })
    return data


def _stock_details(product: Product, requested: int) -> dict:
    return {
        "productId": product.id,
        "requestedQuantity": requested,
        "available": product.stock,
    }


def get_cart(user_id: int) -> Cart | None:
    return (
        db.session.query(Cart)
        .filter(Cart.user_id == user_id)
        .order_by(Cart.id.asc())
        .first()
    )


def get_or_create_cart(user_id: int) -> Cart:
    cart = get_cart(user_id)
    if cart is None:
        cart = Cart(user_id=user_id)
        db.session.add(cart)
        db.session.flush()
    return cart


def _owned_item(user_id: int, item_id: int) -> CartItem:
    item = (
        db.session.query(CartItem)
        .join(Cart, CartItem.cart_id == Cart.id)
        .filter(CartItem.id == item_id, Cart.user_id == user_id)
        .first()
    )
    if item is None:
        raise CartItemNotFoundError()
    return item


def cart_items(cart: Cart) -> list[CartItem]:
    return (
        db.session.query(CartItem)
        .filter(CartItem.cart_id == cart.id)
        .order_by(CartItem.id.asc())
        .all()
    )


def subtotal_cents(items: list[CartItem]) -> int:
    return sum(item.price_at_time_cents * item.quantity for item in items)


def view(user_id: int) -> CartView:
    """Cart contents and Σ(priceAtTime × quantity); no tax or shipping."""
    cart = get_or_create_cart(user_id)
    db.session.commit()
    items = cart_items(cart)
    return CartView(cart=cart, items=items, total_cents=subtotal_cents(items))


def add_item(user_id: int, product_id: int, quantity: int) -> tuple[CartItem, bool]:
    """
    Add a product to the user's cart.

    Returns (item, created). The stock check compares the requested quantity
    with current stock.

    Raises:
        ValidationError: quantity is not a positive integer
        ProductNotFoundError: unknown or inactive product
        InsufficientStockError: quantity exceeds current stock
    """
    quantity = validate_quantity(quantity)

    product = db.session.query(Product).filter_by(id=product_id).first()
    if product is None or not product.is_active:
        raise ProductNotFoundError(product_id)

    if quantity > product.stock:
        raise InsufficientStockError(details=_stock_details(product, quantity))

    cart = get_or_create_cart(user_id)

    existing = (
        db.session.query(CartItem)
        .filter(CartItem.cart_id == cart.id, CartItem.product_id == product.id)
        .first()
    )

    if existing:
        existing.quantity = existing.quantity + quantity
        existing.updated_at = utcnow()
        cart.updated_at = utcnow()
        db.session.commit()
        return existing, False

    item = CartItem(
        cart_id=cart.id,
        product_id=product.id,
        quantity=quantity,
        price_at_time_cents=product.price_cents,
    )
    db.session.add(item)
    cart.updated_at = utcnow()
    db.session.commit()
    return item, True


def update_item(user_id: int, item_id: int, quantity: int) -> CartItem:
    """
    Set the quantity of an item in the user's cart. Price stays pinned.

    Raises:
        ValidationError: quantity is not a positive integer
        CartItemNotFoundError: item missing or not in this user's cart
        InsufficientStockError: quantity exceeds current stock
    """
    quantity = validate_quantity(quantity)
    item = _owned_item(user_id, item_id)

    if quantity > item.product.stock:
        raise InsufficientStockError(details=_stock_details(item.product, quantity))

    item.quantity = quantity
    item.updated_at = utcnow()
    db.session.commit()
    return item


def remove_item(user_id: int, item_id: int) -> None:
    """
    Raises:
        CartItemNotFoundError: item missing or not in this user's cart
    """
    item = _owned_item(user_id, item_id)
    db.session.delete(item)
    db.session.commit()


def clear_items(cart: Cart) -> int:
    """Delete every item in cart. Caller commits."""
    return (
        db.session.query(CartItem)
        .filter(CartItem.cart_id == cart.id)
        .delete(synchronize_session="fetch")
    )


def clear(user_id: int) -> None:
    cart = get_cart(user_id)
    if cart is None:
        return
    clear_items(cart)
    db.session.commit()
