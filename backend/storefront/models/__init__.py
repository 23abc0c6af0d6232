from .catalog import Category, Product, Review
from .inventory import InventoryLog
from .auth import User, Session
from .cart import Cart, CartItem
from .orders import Order, OrderItem
from .customers import Customer

__all__ = [
    'Category', 'Product', 'Review',
    'InventoryLog',
    'User', 'Session',
    'Cart', 'CartItem',
    'Order', 'OrderItem',
    'Customer',
]
