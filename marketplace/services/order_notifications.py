"""
Order read tracking for the seller notification bell.

An order counts as unread for its wholesaler until ``wholesaler_read_at`` is
set. Query failures are logged and re-raised as OrderNotificationError with
the message shown to the seller.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, UTC
from typing import List, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from marketplace.db import models

logger = logging.getLogger("marketplace.notifications")

RECENT_NOTIFICATION_LIMIT = 5


class OrderNotificationError(Exception):
    """Raised when an order notification query fails."""


def get_unread_orders_count(db: Session, wholesaler_id: uuid.UUID) -> int:
    try:
        return db.query(models.Order).filter(
            models.Order.wholesaler_id == wholesaler_id,
            models.Order.wholesaler_read_at.is_(None),
        ).count()
    except SQLAlchemyError as e:
        logger.error("[notifications-query] unread count failed wholesaler=%s: %s", wholesaler_id, e)
        raise OrderNotificationError(f"읽지 않은 주문 개수 조회 실패: {e}") from e


def get_recent_order_notifications(
    db: Session, wholesaler_id: uuid.UUID, limit: int = RECENT_NOTIFICATION_LIMIT
) -> List[Tuple[models.Order, bool]]:
    """Newest orders for the wholesaler paired with their read flag."""
    try:
        orders = (
            db.query(models.Order)
            .options(joinedload(models.Order.product), joinedload(models.Order.variant))
            .filter(models.Order.wholesaler_id == wholesaler_id)
            .order_by(models.Order.created_at.desc(), models.Order.id)
            .limit(limit)
            .all()
        )
    except SQLAlchemyError as e:
        logger.error("[notifications-query] recent orders failed wholesaler=%s: %s", wholesaler_id, e)
        raise OrderNotificationError(f"최근 주문 알림 조회 실패: {e}") from e
    return [(order, order.wholesaler_read_at is not None) for order in orders]


def mark_all_orders_as_read(db: Session, wholesaler_id: uuid.UUID) -> int:
    """Stamp every unread order of this wholesaler as read; return how many changed."""
    try:
        updated = db.query(models.Order).filter(
            models.Order.wholesaler_id == wholesaler_id,
            models.Order.wholesaler_read_at.is_(None),
        ).update({models.Order.wholesaler_read_at: datetime.now(UTC)}, synchronize_session=False)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("[notifications-query] mark read failed wholesaler=%s: %s", wholesaler_id, e)
        raise OrderNotificationError(f"주문 읽음 처리 실패: {e}") from e
    logger.info("[notifications-query] marked %d orders read wholesaler=%s", updated, wholesaler_id)
    return updated
