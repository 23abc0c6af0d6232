# Overview: Service-layer operations for reporting; encapsulates business logic and database work.

"""
Dashboard statistics.

Every figure is recomputed from the products and orders tables on each call;
nothing is cached or maintained incrementally.
"""

from __future__ import annotations

from sqlalchemy import func

from storefront.extensions import db
from storefront.models import Order, Product
from storefront.models.orders import ORDER_STATUSES
from storefront.money import CURRENCY, format_amount
from storefront.services.inventory_service import DEFAULT_LOW_STOCK_THRESHOLD, count_low_stock
from storefront.time_utils import start_of_day, start_of_month, utcnow

RECENT_ORDERS_LIMIT = 5


def _revenue_since(since=None) -> int:
    q = db.session.query(func.coalesce(func.sum(Order.total_cents), 0))
    if since is not None:
        q = q.filter(Order.created_at >= since)
    return int(q.scalar() or 0)


def get_store_stats(low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD) -> dict:
    now = utcnow()

    total_products = db.session.query(Product).filter(Product.is_active.is_(True)).count()

    today_orders = (
        db.session.query(Order)
        .filter(Order.created_at >= start_of_day(now))
        .count()
    )

    status_rows = (
        db.session.query(Order.status, func.count(Order.id))
        .group_by(Order.status)
        .all()
    )
    status_counts = {status: 0 for status in ORDER_STATUSES}
    status_counts.update({status: int(count) for status, count in status_rows})

    recent_orders = (
        db.session.query(Order)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(RECENT_ORDERS_LIMIT)
        .all()
    )

    return {
        "currency": CURRENCY,
        "totalProducts": total_products,
        "lowStockProducts": count_low_stock(low_stock_threshold),
        "lowStockThreshold": low_stock_threshold,
        "totalOrders": sum(status_counts.values()),
        "todayOrders": today_orders,
        "totalRevenue": format_amount(_revenue_since()),
        "monthlyRevenue": format_amount(_revenue_since(start_of_month(now))),
        "orderStatusCounts": status_counts,
        "recentOrders": [o.to_dict(include_items=False) for o in recent_orders],
    }
