"""
Seller dashboard aggregate queries.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, UTC
from typing import Dict, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from marketplace.db import models


def _start_of_today(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def get_stats(db: Session, wholesaler_id: uuid.UUID, low_stock_threshold: int, now: Optional[datetime] = None) -> Dict[str, int]:
    now = now or datetime.now(UTC)
    orders = db.query(models.Order).filter(models.Order.wholesaler_id == wholesaler_id)

    today_orders = orders.filter(models.Order.created_at >= _start_of_today(now)).count()
    pending_orders = orders.filter(models.Order.status == 'pending').count()
    weekly_sales = (
        db.query(func.coalesce(func.sum(models.Order.total_amount), 0))
        .filter(models.Order.wholesaler_id == wholesaler_id)
        .filter(models.Order.status != 'cancelled')
        .filter(models.Order.created_at >= now - timedelta(days=7))
        .scalar()
    )
    low_stock_count = (
        db.query(models.Product)
        .filter(models.Product.wholesaler_id == wholesaler_id)
        .filter(models.Product.is_active.is_(True))
        .filter(models.Product.stock_quantity <= low_stock_threshold)
        .count()
    )
    unread_orders = orders.filter(models.Order.wholesaler_read_at.is_(None)).count()
    return {
        "today_orders": today_orders,
        "pending_orders": pending_orders,
        "weekly_sales": int(weekly_sales or 0),
        "low_stock_count": low_stock_count,
        "unread_orders": unread_orders,
    }


def get_recent_orders(db: Session, wholesaler_id: uuid.UUID, limit: int = 5) -> List[models.Order]:
    return (
        db.query(models.Order)
        .options(joinedload(models.Order.product), joinedload(models.Order.variant))
        .filter(models.Order.wholesaler_id == wholesaler_id)
        .order_by(models.Order.created_at.desc(), models.Order.id)
        .limit(limit)
        .all()
    )
