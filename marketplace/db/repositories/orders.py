"""
Order and payment repository functions.
"""
from __future__ import annotations

import uuid
from datetime import date
from typing import Optional, List, Tuple
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from marketplace.db import models
from marketplace.db.pagination import paginate, apply_date_range
from marketplace.utils.formatting import generate_order_number

ORDER_SORT_FIELDS = ("created_at", "total_amount", "status")


def _with_items(query):
    return query.options(joinedload(models.Order.product), joinedload(models.Order.variant))


def get_wholesaler_order(db: Session, wholesaler_id: uuid.UUID, order_id: uuid.UUID) -> Optional[models.Order]:
    return _with_items(db.query(models.Order)).filter(
        models.Order.id == order_id,
        models.Order.wholesaler_id == wholesaler_id,
    ).first()


def _filtered_orders(
    db: Session,
    status: Optional[str],
    search: Optional[str],
    start_date: Optional[date],
    end_date: Optional[date],
):
    query = _with_items(db.query(models.Order))
    if status:
        query = query.filter(models.Order.status == status)
    if search and search.strip():
        term = f"%{search.strip()}%"
        query = query.join(models.Product, models.Product.id == models.Order.product_id).filter(or_(
            models.Order.order_number.ilike(term),
            models.Product.name.ilike(term),
            models.Product.standardized_name.ilike(term),
        ))
    return apply_date_range(query, models.Order.created_at, start_date, end_date)


def _ordered(query, sort_by: str, sort_order: str):
    column = getattr(models.Order, sort_by if sort_by in ORDER_SORT_FIELDS else "created_at")
    ordering = column.asc() if sort_order == "asc" else column.desc()
    return query.order_by(ordering, models.Order.id)


def list_wholesaler_orders(
    db: Session,
    wholesaler_id: uuid.UUID,
    status: Optional[str] = None,
    search: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    page: int = 1,
    page_size: int = 20,
    sort_by: str = "created_at",
    sort_order: str = "desc",
) -> Tuple[List[models.Order], int]:
    query = _filtered_orders(db, status, search, start_date, end_date)
    query = query.filter(models.Order.wholesaler_id == wholesaler_id)
    return paginate(_ordered(query, sort_by, sort_order), page, page_size)


def list_retailer_orders(
    db: Session,
    retailer_id: uuid.UUID,
    status: Optional[str] = None,
    page: int = 1,
    page_size: int = 20,
) -> Tuple[List[models.Order], int]:
    query = _filtered_orders(db, status, None, None, None).filter(models.Order.retailer_id == retailer_id)
    return paginate(_ordered(query, "created_at", "desc"), page, page_size)


def list_orders(
    db: Session,
    status: Optional[str] = None,
    search: Optional[str] = None,
    page: int = 1,
    page_size: int = 20,
) -> Tuple[List[models.Order], int]:
    query = _filtered_orders(db, status, search, None, None)
    return paginate(_ordered(query, "created_at", "desc"), page, page_size)


def build_order(
    *,
    retailer_id: uuid.UUID,
    wholesaler_id: uuid.UUID,
    product_id: uuid.UUID,
    variant_id: Optional[uuid.UUID],
    quantity: int,
    unit_price: int,
    delivery_method: str,
    delivery_address: Optional[str] = None,
    delivery_request: Optional[str] = None,
) -> models.Order:
    """Return a pending, unread order; the caller adds and commits it."""
    return models.Order(
        order_number=generate_order_number(),
        retailer_id=retailer_id,
        wholesaler_id=wholesaler_id,
        product_id=product_id,
        variant_id=variant_id,
        quantity=quantity,
        unit_price=unit_price,
        total_amount=unit_price * quantity,
        status='pending',
        delivery_method=delivery_method,
        delivery_address=delivery_address,
        delivery_request=delivery_request,
        wholesaler_read_at=None,
    )


def build_payment(order: models.Order, method: Optional[str] = None) -> models.Payment:
    return models.Payment(order=order, amount=order.total_amount, method=method, status='pending')


def cancel_pending_payments(db: Session, order_id: uuid.UUID) -> int:
    """Mark the order's pending payments cancelled (no commit)."""
    return db.query(models.Payment).filter(
        models.Payment.order_id == order_id,
        models.Payment.status == 'pending',
    ).update({models.Payment.status: 'cancelled'}, synchronize_session=False)
