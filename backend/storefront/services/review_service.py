"""Product reviews: append-only, listed newest first."""
from __future__ import annotations

from ..extensions import db
from ..models import Product, Review
from .inventory_service import ProductNotFoundError


def list_reviews(product_id: int) -> list[Review]:
    return (
        db.session.query(Review)
        .filter(Review.product_id == product_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
        .all()
    )


def create_review(*, product_id: int, patch: dict) -> Review:
    product = db.session.query(Product).filter_by(id=product_id).first()
    if product is None:
        raise ProductNotFoundError(product_id)

    review = Review(product_id=product.id, is_verified=False)
    for k, v in patch.items():
        setattr(review, k, v)

    db.session.add(review)
    db.session.commit()
    return review


def average_rating(product_id: int) -> float | None:
    value = (
        db.session.query(db.func.avg(Review.rating))
        .filter(Review.product_id == product_id)
        .scalar()
    )
    return round(float(value), 2) if value is not None else None
